# src/stepflow/core/config/__init__.py

"""
Camada de configuração do stepflow.

Este pacote carrega, mescla e valida a configuração do engine
(instrumentação, performance e diagnóstico).

A configuração é:
    - declarativa (YAML ou JSON)
    - determinística (mesma entrada, mesma configuração final)
    - opcional: pipelines funcionam com `DEFAULT_SETTINGS` sem nenhum arquivo

Limites explícitos:
    - Não executa pipeline
    - Não altera o contrato de erros entregue ao chamador
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidSettingsError,
    UnsupportedConfigFormatError,
)
from .loader import DEFAULTS_PATH, load_config, load_settings
from .merge import deep_merge
from .settings import (
    DEFAULT_SETTINGS,
    DiagnosticsSettings,
    EngineSettings,
    LoggingSettings,
    PerformanceSettings,
)

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DEFAULTS_PATH",
    "DEFAULT_SETTINGS",
    "DefaultsNotFoundError",
    "DiagnosticsSettings",
    "EngineSettings",
    "InvalidConfigRootTypeError",
    "InvalidSettingsError",
    "LoggingSettings",
    "PerformanceSettings",
    "UnsupportedConfigFormatError",
    "deep_merge",
    "load_config",
    "load_settings",
]
