# tests/core/pipeline/test_step_protocol.py
"""
Testes do protocolo de Step do pipeline.

Este módulo valida o contrato canônico de Step, garantindo que
implementações baseadas em duck typing sejam compatíveis com os
pipelines.

Os testes asseguram que:
- Steps não precisam herdar de uma classe base concreta
- A conformidade é verificada via protocolo (`typing.Protocol`)
  com checagem em tempo de execução (`@runtime_checkable`)
- Funções simples podem ser adaptadas com FunctionStep

Decisões arquiteturais:
    - Steps são definidos por contrato estrutural, não por herança
    - O protocolo define apenas `execute(context)`
"""

import pytest

from stepflow.core.pipeline.context import QueryContext
from stepflow.core.pipeline.step import CommandStep, FunctionStep, QueryStep, Step, step_name
from stepflow.core.pipeline.types import StepResult

from tests.fixtures.steps.dummy_user_steps import FetchUserStep


class _NotAStep:
    def run(self, ctx):
        return StepResult.success()


def test_duck_typed_step_satisfies_protocols():
    step = FetchUserStep()
    assert isinstance(step, Step)
    assert isinstance(step, QueryStep)
    assert isinstance(step, CommandStep)


def test_object_without_execute_is_not_a_step():
    assert not isinstance(_NotAStep(), Step)


def test_step_execution_returns_step_result():
    ctx = QueryContext()
    ctx.set_request({"user_id": 1})

    result = FetchUserStep().execute(ctx)

    assert isinstance(result, StepResult)
    assert result.is_success
    assert ctx.get("user") == {"id": 1}


def test_function_step_adapts_callable():
    def mark(ctx):
        ctx.put("marked", True)
        return StepResult.success()

    step = FunctionStep(mark)
    ctx = QueryContext()

    assert isinstance(step, Step)
    assert step.name == "mark"
    assert step.execute(ctx).is_success
    assert ctx.get("marked") is True


def test_function_step_requires_callable():
    with pytest.raises(TypeError):
        FunctionStep("not callable")  # type: ignore[arg-type]


def test_step_name():
    assert step_name(FetchUserStep()) == "fetch_user"
    assert step_name(_NotAStep()) == "_NotAStep"
    assert step_name(FunctionStep(lambda ctx: StepResult.success(), name="inline")) == "inline"
