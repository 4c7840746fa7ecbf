# src/stepflow/__init__.py
"""
stepflow: engine de execução de requisições em múltiplos Steps (CQRS).

Uma requisição é processada como uma sequência ordenada de Steps que
compartilham um contexto por invocação. Leituras usam QueryPipeline;
escritas usam CommandPipeline, que adiciona fronteira transacional e
pós-execução após o commit.

Toda falha chega ao chamador como exatamente um ClassifiedError
(VALIDATION, BUSINESS ou SYSTEM); o detalhe interno de falhas
inesperadas vai apenas para o log.
"""

from stepflow.core.engine import CommandPipeline, QueryPipeline
from stepflow.core.errors import ErrorClassification, ErrorPayload
from stepflow.core.events import CollectingEventSink, EventSink
from stepflow.core.exceptions import ClassifiedError, StepflowException
from stepflow.core.pipeline import (
    CommandContext,
    CommandStep,
    ContextKey,
    ExecutionContext,
    FunctionStep,
    PipelineState,
    QueryContext,
    QueryStep,
    Step,
    StepResult,
)
from stepflow.core.transaction import NullTransactionBoundary, TransactionBoundary

__all__ = [
    "ClassifiedError",
    "CollectingEventSink",
    "CommandContext",
    "CommandPipeline",
    "CommandStep",
    "ContextKey",
    "ErrorClassification",
    "ErrorPayload",
    "EventSink",
    "ExecutionContext",
    "FunctionStep",
    "NullTransactionBoundary",
    "PipelineState",
    "QueryContext",
    "QueryPipeline",
    "QueryStep",
    "Step",
    "StepResult",
    "StepflowException",
    "TransactionBoundary",
]
