# src/stepflow/core/transaction.py
"""
Fronteira transacional consumida pelo CommandPipeline.

O engine não implementa persistência: a atomicidade de um command é
delegada a um colaborador externo que expõe `begin`, `commit` e
`rollback`. Este módulo define esse contrato e o escopo que garante
liberação (commit ou rollback) em todo caminho de saída.

Invariantes:
    - Cada escopo chama `begin` exatamente uma vez
    - Saída normal do bloco → exatamente um `commit`
    - Qualquer exceção no bloco (inclusive BaseException) → exatamente um
      `rollback` e nenhum `commit`
    - Falha no próprio `commit` não dispara um segundo encerramento

Limites explícitos:
    - Não implementa retry
    - Não trata cancelamento ou timeout (responsabilidade do provedor)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class TransactionBoundary(Protocol):
    """Contrato mínimo de um provedor transacional (begin/commit/rollback)."""

    def begin(self) -> Any:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...


class NullTransactionBoundary:
    """
    Provedor transacional sem efeito.

    Para commands cujos Steps não produzem efeitos colaterais persistentes
    (ou cujos colaboradores já são atômicos por conta própria).
    """

    def begin(self) -> None:
        return None

    def commit(self) -> None:
        return None

    def rollback(self) -> None:
        return None


def transaction_id_of(handle: Any, boundary: Any) -> Optional[str]:
    """Extrai um identificador de transação do handle de `begin` ou do provedor."""
    for source in (handle, boundary):
        tx_id = getattr(source, "transaction_id", None)
        if tx_id is not None:
            return str(tx_id)
    if isinstance(handle, str) and handle:
        return handle
    return None


@contextmanager
def transaction_scope(boundary: TransactionBoundary) -> Iterator[Any]:
    """
    Abre um escopo transacional sobre `boundary`.

    Produz o valor retornado por `begin()` (handle opcional do provedor).
    Em caso de exceção dentro do bloco, faz rollback e propaga a exceção
    original; se o próprio rollback falhar, a falha é registrada no log e
    a exceção original continua prevalecendo.
    """
    handle = boundary.begin()
    try:
        yield handle
    except BaseException:
        try:
            boundary.rollback()
        except Exception:
            logger.exception("rollback failed")
        raise
    boundary.commit()
