# src/stepflow/core/engine/planner.py
"""
Resolução da lista de Steps de uma invocação.

Este módulo materializa, uma única vez e antes de qualquer execução, a
sequência ordenada de Steps de uma invocação de pipeline, validando
estruturalmente cada item.

A lista pode ser:
    - fixa (uma sequência passada na construção do pipeline)
    - dinâmica (um resolver `steps(request, context)` que decide, por
      exemplo, incluir Steps condicionais com base nos campos da requisição)

Princípios fundamentais:
    - A lista é resolvida uma vez por invocação e congelada (tupla)
    - Nenhuma re-resolução ocorre no meio da sequência
    - Itens que não satisfazem o protocolo de Step são erro estrutural

Invariantes:
    - A ordem retornada é exatamente a ordem declarada pelo resolver
    - A mesma instância de Step pode aparecer em várias invocações

Limites explícitos:
    - Não executa Steps
    - Não reordena nem deduplica Steps
    - Não verifica dependências de dados entre Steps (convenção de chaves)
"""

from __future__ import annotations

from typing import Any, Callable, Sequence, Tuple, Union

from stepflow.core.exceptions import InvalidStepError
from stepflow.core.pipeline.context import ExecutionContext
from stepflow.core.pipeline.step import Step

StepResolver = Callable[[Any, ExecutionContext], Sequence[Step]]
StepSource = Union[Sequence[Step], StepResolver]


def _check_step(index: int, candidate: Any) -> Step:
    execute = getattr(candidate, "execute", None)
    if not callable(execute):
        raise InvalidStepError(
            f"Item {index} da lista de Steps não implementa execute(context): "
            f"{type(candidate).__name__}"
        )
    return candidate


def validate_steps(steps: Any) -> Tuple[Step, ...]:
    """
    Valida e congela uma sequência de Steps.

    Raises:
        InvalidStepError: Se a sequência não for iterável (ou for uma string)
            ou se algum item não implementar `execute(context)`.
    """
    if steps is None or isinstance(steps, (str, bytes)):
        raise InvalidStepError(f"Lista de Steps inválida: {type(steps).__name__}")
    try:
        items = tuple(steps)
    except TypeError:
        raise InvalidStepError(f"Lista de Steps inválida: {type(steps).__name__}") from None
    return tuple(_check_step(i, s) for i, s in enumerate(items))


def resolve_steps(source: StepSource, request: Any, context: ExecutionContext) -> Tuple[Step, ...]:
    """
    Resolve a lista de Steps de uma invocação.

    Args:
        source: Sequência fixa de Steps ou resolver `(request, context) -> Sequence[Step]`.
        request: Requisição/command da invocação corrente.
        context: Contexto já semeado da invocação.

    Returns:
        Tuple[Step, ...]: Steps na ordem de execução.
    """
    if callable(source) and not isinstance(source, (list, tuple)):
        return validate_steps(source(request, context))
    return validate_steps(source)


def check_step_source(source: Any) -> StepSource:
    """
    Validação antecipada (na construção do pipeline) da fonte de Steps.

    Resolvers são devolvidos intactos; sequências fixas voltam já
    congeladas, de modo que iteráveis de uso único (geradores) não se
    esgotem antes da primeira invocação.
    """
    if callable(source) and not isinstance(source, (list, tuple)):
        return source
    return validate_steps(source)
