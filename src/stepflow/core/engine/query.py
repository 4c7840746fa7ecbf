# src/stepflow/core/engine/query.py
"""
QueryPipeline: execução de operações de leitura.

Fluxo:
    CREATED → VALIDATING → RESOLVING_STEPS → EXECUTING_STEPS
    → BUILDING_RESPONSE → DONE   (FAILED em qualquer falha)

Exemplo:
    pipeline = QueryPipeline(
        name="USER_ORDER_SUMMARY",
        validate=validate_request,
        steps=[FetchUserStep(repo), FetchUserOrdersStep(repo), CalculateStatsStep()],
        build_response=build_summary,
    )
    summary = pipeline.execute({"user_id": 1})
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Optional, TypeVar

from stepflow.core.pipeline.context import QueryContext
from stepflow.core.pipeline.types import PipelineState

from .engine import BasePipeline

logger = logging.getLogger(__name__)

In = TypeVar("In")
Out = TypeVar("Out")


class QueryPipeline(BasePipeline, Generic[In, Out]):
    """Pipeline de leitura: sem transação, sem pós-execução."""

    flow = "query"

    def execute(self, request: In, *, trace_id: Optional[str] = None) -> Out:
        """
        Executa a query para `request`.

        Raises:
            ClassifiedError: Falha de validação, falha de Step ou erro
                SYSTEM genérico ("System error during query").
        """
        return self._entry(request, trace_id=trace_id)

    def _run(self, request: Any, *, trace_id: Optional[str] = None) -> Any:
        context = QueryContext(trace_id=trace_id)
        context.set_request(request)
        try:
            response = self._run_phases(context, request)
        except BaseException:
            context.state = PipelineState.FAILED
            raise
        context.state = PipelineState.DONE
        logger.debug(
            "[%s] query completed in %.3fms",
            self.name,
            context.execution_duration_ms(),
        )
        return response
