# src/stepflow/core/pipeline/__init__.py
"""
# Pipeline Core (stepflow)

Este pacote define os **contratos canônicos** e as **estruturas fundamentais**
compartilhadas por queries e commands.

## Componentes

- **types**
  - `StepResult`: resultado imutável (sucesso com dado ou falha classificada)
  - `PipelineState`: estados da máquina de estados de uma invocação

- **step**
  - `Step`, `QueryStep`, `CommandStep` (Protocol): contrato mínimo de um Step
  - `FunctionStep`: adaptador de função para Step

- **context**
  - `ExecutionContext`, `QueryContext`, `CommandContext`: store por invocação
  - `ContextKey`: chave tipada

## Princípios Fundamentais

- Steps **não conhecem** o pipeline
- Comunicação entre Steps ocorre **apenas via contexto**
- Um contexto por invocação, nunca compartilhado
"""

from .context import (
    AuditInfo,
    COMMAND_KEY,
    CommandContext,
    ContextKey,
    ExecutionContext,
    QueryContext,
    REQUEST_KEY,
)
from .step import CommandStep, FunctionStep, QueryStep, Step, step_name
from .types import PipelineState, StepResult

__all__ = [
    "AuditInfo",
    "COMMAND_KEY",
    "CommandContext",
    "CommandStep",
    "ContextKey",
    "ExecutionContext",
    "FunctionStep",
    "PipelineState",
    "QueryContext",
    "QueryStep",
    "REQUEST_KEY",
    "Step",
    "StepResult",
    "step_name",
]
