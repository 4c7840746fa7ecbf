# tests/core/test_transaction.py
"""
Testes do escopo transacional (transaction_scope).

Os testes asseguram que:
- saída normal produz exatamente um commit
- qualquer exceção (inclusive BaseException) produz exatamente um rollback
- falha no rollback não mascara a exceção original
- falha no commit não dispara rollback
"""

import logging

import pytest

from stepflow.core.transaction import (
    NullTransactionBoundary,
    TransactionBoundary,
    transaction_id_of,
    transaction_scope,
)


class BrokenRollback:
    def __init__(self):
        self.calls = []

    def begin(self):
        self.calls.append("begin")

    def commit(self):
        self.calls.append("commit")

    def rollback(self):
        self.calls.append("rollback")
        raise OSError("connection reset")


def test_normal_exit_commits(recording_transaction):
    with transaction_scope(recording_transaction):
        pass
    assert recording_transaction.calls == ["begin", "commit"]


@pytest.mark.parametrize("exc_type", [ValueError, KeyboardInterrupt, SystemExit])
def test_any_exception_rolls_back(recording_transaction, exc_type):
    with pytest.raises(exc_type):
        with transaction_scope(recording_transaction):
            raise exc_type()
    assert recording_transaction.calls == ["begin", "rollback"]


def test_rollback_failure_keeps_original_exception(caplog):
    boundary = BrokenRollback()

    with caplog.at_level(logging.ERROR):
        with pytest.raises(ValueError, match="original"):
            with transaction_scope(boundary):
                raise ValueError("original")

    assert boundary.calls == ["begin", "rollback"]
    assert "rollback failed" in caplog.text


def test_commit_failure_does_not_roll_back(failing_commit_transaction):
    with pytest.raises(ConnectionError):
        with transaction_scope(failing_commit_transaction):
            pass
    assert failing_commit_transaction.calls == ["begin", "commit"]


def test_scope_yields_begin_handle():
    class Handles:
        def begin(self):
            return "tx-42"

        def commit(self):
            pass

        def rollback(self):
            pass

    with transaction_scope(Handles()) as handle:
        assert handle == "tx-42"


def test_transaction_id_resolution(recording_transaction):
    assert transaction_id_of(None, recording_transaction) == "tx-test-001"
    assert transaction_id_of("tx-9", NullTransactionBoundary()) == "tx-9"
    assert transaction_id_of(None, NullTransactionBoundary()) is None


def test_protocol_conformance(recording_transaction):
    assert isinstance(recording_transaction, TransactionBoundary)
    assert isinstance(NullTransactionBoundary(), TransactionBoundary)
    assert not isinstance(object(), TransactionBoundary)
