# tests/conftest.py
"""
Fixtures compartilhados para testes do stepflow.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas (YAML como string)
- uma fronteira transacional que registra cada chamada
- um sink de eventos em memória
- settings com logging habilitado para testes de instrumentação

O objetivo destas fixtures é permitir testes do core (pipeline,
engine, instrumentação e config) sem depender de:
- banco de dados ou mensageria reais
- variáveis de ambiente
- configuração global de logging

Decisões arquiteturais:
    - Fakes usam duck typing em vez de herança
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa pipeline
    - Todas as fixtures são seguras para execução em paralelo

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica de domínio (ela vive em tests/fixtures/steps)
"""

import pytest


# =====================================================
# Config
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    Fixture que fornece um YAML de configuração padrão (defaults) semelhante ao uso real do projeto.

    Representa o conteúdo típico do `defaults.yaml` do engine, servindo
    como base canônica sobre a qual configurações locais são aplicadas
    via deep-merge.

    Invariantes:
        - YAML sintaticamente válido
        - Contém as três seções do engine (logging, performance, diagnostics)

    Returns:
        str: Conteúdo YAML representando configuração padrão (defaults).
    """

    return """\
logging:
  enabled: false
  level: DEBUG
  include_payloads: false
  log_steps: true
performance:
  enabled: true
  log_slow_flows: true
  slow_threshold_ms: 1000.0
  enable_metrics: false
diagnostics:
  include_stack_trace: false
  include_debug_info: false
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """
    Fixture que fornece um YAML de configuração local (override).

    Contém apenas overrides: liga o logging em INFO e reduz o threshold
    de fluxo lento.

    Returns:
        str: Conteúdo YAML representando configuração local de override.
    """

    return """\
logging:
  enabled: true
  level: INFO
performance:
  slow_threshold_ms: 250
"""


# =====================================================
# Pipeline fakes
# =====================================================

class RecordingTransaction:
    """
    Fronteira transacional fake que registra a sequência de chamadas.

    `calls` reflete exatamente a ordem de begin/commit/rollback, e
    `fail_on_commit` simula um commit que falha no provedor.
    """

    def __init__(self, *, fail_on_commit: bool = False, transaction_id: str = "tx-test-001"):
        self.calls = []
        self.fail_on_commit = fail_on_commit
        self.transaction_id = transaction_id

    def begin(self):
        self.calls.append("begin")
        return None

    def commit(self):
        self.calls.append("commit")
        if self.fail_on_commit:
            raise ConnectionError("commit lost connection to db-primary:5432")

    def rollback(self):
        self.calls.append("rollback")

    @property
    def commits(self) -> int:
        return self.calls.count("commit")

    @property
    def rollbacks(self) -> int:
        return self.calls.count("rollback")


@pytest.fixture
def recording_transaction() -> RecordingTransaction:
    """Fronteira transacional que registra begin/commit/rollback."""
    return RecordingTransaction()


@pytest.fixture
def failing_commit_transaction() -> RecordingTransaction:
    """Fronteira transacional cujo commit sempre falha."""
    return RecordingTransaction(fail_on_commit=True)


@pytest.fixture
def event_sink():
    """Sink de eventos em memória (CollectingEventSink)."""
    from stepflow.core.events import CollectingEventSink

    return CollectingEventSink()


@pytest.fixture
def verbose_settings():
    """
    Settings com instrumentação habilitada (logging em DEBUG, Steps incluídos).

    Usado por testes que verificam registros via `caplog`.
    """
    from stepflow.core.config.settings import EngineSettings, LoggingSettings

    return EngineSettings(logging=LoggingSettings(enabled=True, level="DEBUG", log_steps=True))
