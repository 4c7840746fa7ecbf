# src/stepflow/core/engine/command.py
"""
CommandPipeline: execução de operações de escrita.

Fluxo:
    CREATED → VALIDATING → RESOLVING_STEPS → EXECUTING_STEPS
    → BUILDING_RESPONSE → COMMITTING → DONE → POST_EXECUTION

Da criação do contexto até a montagem da resposta, tudo roda dentro de
um único escopo transacional (`transaction_scope`). A pós-execução roda
apenas depois do commit, fora da transação.

Garantias:
    - Falha em qualquer fase → exatamente um rollback, nenhum commit,
      pós-execução nunca chamada, eventos nunca publicados
    - Falha no commit → erro SYSTEM, sem segundo encerramento da transação
    - Steps de leitura podem participar de commands: o command também
      fica acessível como `context.request`

Pós-execução:
    - `post_execution(context)`, quando fornecido, substitui o padrão
    - padrão: publicar `context.events` no `event_sink`, se configurado
    - falhas na pós-execução são registradas no log e não desfazem o
      command já confirmado
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Optional, TypeVar

from stepflow.core.events import EventSink, publish_events
from stepflow.core.exceptions import PipelineConfigurationError
from stepflow.core.pipeline.context import CommandContext
from stepflow.core.pipeline.types import PipelineState
from stepflow.core.transaction import (
    NullTransactionBoundary,
    TransactionBoundary,
    transaction_id_of,
    transaction_scope,
)

from .engine import BasePipeline

logger = logging.getLogger(__name__)

In = TypeVar("In")
Out = TypeVar("Out")

ContextInitializer = Callable[[CommandContext, Any], None]
PostExecution = Callable[[CommandContext], None]


class CommandPipeline(BasePipeline, Generic[In, Out]):
    """
    Pipeline de escrita com fronteira transacional.

    Args (além dos de BasePipeline):
        transaction: Provedor `begin/commit/rollback` (padrão: NullTransactionBoundary).
        initialize_context: Hook `(context, command)` chamado logo após a
            criação do contexto (auditoria, permissões, trace id).
        post_execution: Hook `(context)` chamado após commit bem-sucedido.
        event_sink: Destino dos eventos acumulados (pós-execução padrão).
    """

    flow = "command"

    def __init__(
        self,
        *,
        transaction: Optional[TransactionBoundary] = None,
        initialize_context: Optional[ContextInitializer] = None,
        post_execution: Optional[PostExecution] = None,
        event_sink: Optional[EventSink] = None,
        **kwargs: Any,
    ) -> None:
        if transaction is not None and not isinstance(transaction, TransactionBoundary):
            raise PipelineConfigurationError("transaction must implement begin/commit/rollback")
        if initialize_context is not None and not callable(initialize_context):
            raise PipelineConfigurationError("initialize_context must be callable")
        if post_execution is not None and not callable(post_execution):
            raise PipelineConfigurationError("post_execution must be callable")
        if event_sink is not None and not isinstance(event_sink, EventSink):
            raise PipelineConfigurationError("event_sink must implement publish(events)")

        self.transaction = transaction or NullTransactionBoundary()
        self.event_sink = event_sink
        self._initialize_context = initialize_context
        self._post_execution = post_execution
        super().__init__(**kwargs)

    def execute(
        self,
        command: In,
        *,
        actor_id: Optional[str] = None,
        source: Optional[str] = None,
        trace_id: Optional[str] = None,
    ) -> Out:
        """
        Executa o command de forma atômica.

        Raises:
            ClassifiedError: Falha de validação, falha de Step, falha de
                commit ou erro SYSTEM genérico ("System error during command").
        """
        return self._entry(command, actor_id=actor_id, source=source, trace_id=trace_id)

    def _new_context(
        self,
        command: Any,
        handle: Any,
        *,
        actor_id: Optional[str],
        source: Optional[str],
        trace_id: Optional[str],
    ) -> CommandContext:
        context = CommandContext(trace_id=trace_id)
        context.set_command(command)
        context.audit.actor_id = actor_id
        context.audit.source = source
        context.audit.transaction_id = transaction_id_of(handle, self.transaction)
        if self._initialize_context is not None:
            self._initialize_context(context, command)
        return context

    def _run(
        self,
        command: Any,
        *,
        actor_id: Optional[str] = None,
        source: Optional[str] = None,
        trace_id: Optional[str] = None,
    ) -> Any:
        context: Optional[CommandContext] = None
        try:
            with transaction_scope(self.transaction) as handle:
                context = self._new_context(
                    command, handle, actor_id=actor_id, source=source, trace_id=trace_id
                )
                response = self._run_phases(context, command)
                context.state = PipelineState.COMMITTING
        except BaseException:
            if context is not None:
                context.state = PipelineState.FAILED
            raise

        context.state = PipelineState.DONE
        logger.debug(
            "[%s] command committed in %.3fms",
            self.name,
            context.execution_duration_ms(),
        )
        self._after_commit(context)
        return response

    def _after_commit(self, context: CommandContext) -> None:
        context.state = PipelineState.POST_EXECUTION
        try:
            if self._post_execution is not None:
                self._post_execution(context)
            elif self.event_sink is not None:
                publish_events(context, self.event_sink)
            else:
                logger.debug(
                    "[%s] %d events, audit=%s",
                    self.name,
                    len(context.events),
                    context.audit_info(),
                )
        except Exception:
            logger.exception("[%s] post-execution failed after commit", self.name)
