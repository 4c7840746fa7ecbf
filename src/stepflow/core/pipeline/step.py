# src/stepflow/core/pipeline/step.py
"""
Contrato canônico de Step do stepflow.

Este módulo define o protocolo formal que qualquer Step deve satisfazer
para ser executável dentro de um QueryPipeline ou CommandPipeline.

Um Step é a menor unidade executável do pipeline e representa uma
operação autocontida, responsável apenas por sua própria lógica.

Responsabilidades de um Step:
    - ler do contexto o que Steps anteriores (ou o pipeline) produziram
    - gravar seu próprio resultado sob uma chave acordada por convenção
    - produzir um StepResult imutável

Princípios fundamentais:
    - Steps não conhecem o pipeline
    - Steps não controlam ordem de execução
    - Comunicação entre Steps é mediada pelo contexto
    - Conformidade é garantida por duck typing (@runtime_checkable)

Invariantes:
    - Uma instância de Step pode ser invocada concorrentemente por várias
      invocações; portanto não guarda estado mutável de invocação
    - O retorno de `execute` é sempre um `StepResult`

Limites explícitos:
    - Não contém lógica de orquestração
    - Não faz rollback de efeitos colaterais (responsabilidade da
      fronteira transacional do CommandPipeline)
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, TypeVar, runtime_checkable

from .context import CommandContext, ExecutionContext, QueryContext
from .types import StepResult

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class Step(Protocol[T_co]):
    """
    Contrato canônico de um Step.

    A validação do protocolo ocorre em runtime (`@runtime_checkable`),
    permitindo verificação por duck typing durante testes e na resolução
    da lista de Steps.

    Falhas esperadas (negócio/validação) são sinalizadas com
    `StepResult.failure(...)`. Falhas inesperadas podem simplesmente
    propagar como exceção: o pipeline as converte em SYSTEM.
    """

    def execute(self, context: Any) -> StepResult[T_co]:
        """Executa o Step usando exclusivamente o contexto recebido."""
        ...


@runtime_checkable
class QueryStep(Protocol[T_co]):
    """Step de leitura: recebe um QueryContext (ou CommandContext, que também expõe `request`)."""

    def execute(self, context: QueryContext) -> StepResult[T_co]:
        ...


@runtime_checkable
class CommandStep(Protocol[T_co]):
    """Step de escrita: recebe um CommandContext."""

    def execute(self, context: CommandContext) -> StepResult[T_co]:
        ...


class FunctionStep:
    """
    Adapta uma função `fn(context) -> StepResult` ao protocolo de Step.

    Útil para Steps triviais ou composição inline. A função adaptada deve
    obedecer às mesmas regras de um Step: nenhum estado de invocação fora
    do contexto.
    """

    __slots__ = ("_fn", "name")

    def __init__(self, fn: Callable[[ExecutionContext], StepResult[Any]], name: Optional[str] = None):
        if not callable(fn):
            raise TypeError("FunctionStep requires a callable")
        self._fn = fn
        self.name = name or getattr(fn, "__name__", "function_step")

    def execute(self, context: ExecutionContext) -> StepResult[Any]:
        return self._fn(context)

    def __repr__(self) -> str:
        return f"FunctionStep({self.name!r})"


def step_name(step: object) -> str:
    """Nome legível de um Step para logs e instrumentação."""
    name = getattr(step, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(step).__name__
