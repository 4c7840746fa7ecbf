# src/stepflow/core/config/settings.py
"""
Settings tipados do engine, construídos a partir da configuração resolvida.

A configuração carregada por `load_config` é um dicionário puro; este
módulo a converte em dataclasses imutáveis e valida o domínio dos
valores antes que qualquer pipeline seja montado.

Seções:
    - logging:     instrumentação por middleware (START/END/ERROR, Steps)
    - performance: medição de tempo e alerta de fluxos lentos
    - diagnostics: detalhe extra de falhas inesperadas no log local (a mensagem
                   e o traceback são sempre registrados)

Invariantes:
    - `slow_threshold_ms` nunca é negativo
    - stack traces só são habilitados junto com debug info
    - `logging.level` é um nome de nível válido do módulo `logging`

Limites explícitos:
    - Não afeta o conteúdo do erro entregue ao chamador: detalhes internos
      nunca saem do canal de log
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from .errors import InvalidSettingsError

_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _section(config: Mapping[str, Any], name: str) -> Dict[str, Any]:
    value = config.get(name, {}) or {}
    if not isinstance(value, dict):
        raise InvalidSettingsError(f"Seção '{name}' deve ser dict, recebido: {type(value).__name__}")
    return value


def _flag(section: Mapping[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise InvalidSettingsError(f"'{key}' deve ser booleano, recebido: {value!r}")
    return value


@dataclass(frozen=True)
class LoggingSettings:
    enabled: bool = False
    level: str = "DEBUG"
    include_payloads: bool = False
    log_steps: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.level, str) or self.level.upper() not in _LEVELS:
            raise InvalidSettingsError(f"Nível de log inválido: {self.level!r}")
        object.__setattr__(self, "level", self.level.upper())

    @property
    def level_no(self) -> int:
        return logging.getLevelName(self.level)


@dataclass(frozen=True)
class PerformanceSettings:
    enabled: bool = True
    log_slow_flows: bool = True
    slow_threshold_ms: float = 1000.0
    enable_metrics: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.slow_threshold_ms, bool) or not isinstance(self.slow_threshold_ms, (int, float)):
            raise InvalidSettingsError("Slow flow threshold must be a number")
        if self.slow_threshold_ms < 0:
            raise InvalidSettingsError("Slow flow threshold must be non-negative")


@dataclass(frozen=True)
class DiagnosticsSettings:
    include_stack_trace: bool = False
    include_debug_info: bool = False

    def __post_init__(self) -> None:
        if self.include_stack_trace and not self.include_debug_info:
            raise InvalidSettingsError(
                "Stack traces should only be enabled when debug info is also enabled"
            )


@dataclass(frozen=True)
class EngineSettings:
    """Settings efetivos do engine (imutáveis)."""

    logging: LoggingSettings = field(default_factory=LoggingSettings)
    performance: PerformanceSettings = field(default_factory=PerformanceSettings)
    diagnostics: DiagnosticsSettings = field(default_factory=DiagnosticsSettings)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "EngineSettings":
        """
        Constrói settings a partir de um dicionário de configuração.

        Chaves ausentes assumem os defaults das dataclasses; tipos
        incorretos levantam InvalidSettingsError.
        """
        if not isinstance(config, Mapping):
            raise InvalidSettingsError(
                f"Config root deve ser dict, recebido: {type(config).__name__}"
            )

        log_cfg = _section(config, "logging")
        perf_cfg = _section(config, "performance")
        diag_cfg = _section(config, "diagnostics")

        return cls(
            logging=LoggingSettings(
                enabled=_flag(log_cfg, "enabled", False),
                level=log_cfg.get("level", "DEBUG"),
                include_payloads=_flag(log_cfg, "include_payloads", False),
                log_steps=_flag(log_cfg, "log_steps", True),
            ),
            performance=PerformanceSettings(
                enabled=_flag(perf_cfg, "enabled", True),
                log_slow_flows=_flag(perf_cfg, "log_slow_flows", True),
                slow_threshold_ms=perf_cfg.get("slow_threshold_ms", 1000.0),
                enable_metrics=_flag(perf_cfg, "enable_metrics", False),
            ),
            diagnostics=DiagnosticsSettings(
                include_stack_trace=_flag(diag_cfg, "include_stack_trace", False),
                include_debug_info=_flag(diag_cfg, "include_debug_info", False),
            ),
        )


DEFAULT_SETTINGS = EngineSettings()
