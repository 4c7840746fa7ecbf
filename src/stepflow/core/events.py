# src/stepflow/core/events.py
"""
Contrato do sink de eventos consumido na pós-execução de commands.

Eventos são acumulados no `CommandContext` durante a execução dos Steps
e entregues ao sink apenas depois de um commit bem-sucedido.
"""

from __future__ import annotations

import logging
from typing import Any, List, Protocol, Sequence, runtime_checkable

from stepflow.core.pipeline.context import CommandContext

logger = logging.getLogger(__name__)


@runtime_checkable
class EventSink(Protocol):
    def publish(self, events: Sequence[Any]) -> None:
        ...


class CollectingEventSink:
    """Sink em memória: guarda cada lote publicado, na ordem de publicação."""

    def __init__(self) -> None:
        self.batches: List[List[Any]] = []

    def publish(self, events: Sequence[Any]) -> None:
        self.batches.append(list(events))

    @property
    def events(self) -> List[Any]:
        return [event for batch in self.batches for event in batch]


def publish_events(context: CommandContext, sink: EventSink) -> int:
    """Publica os eventos acumulados no contexto; retorna quantos foram entregues."""
    events = context.events
    if not events:
        return 0
    logger.debug("publishing %d command events", len(events))
    sink.publish(events)
    return len(events)
