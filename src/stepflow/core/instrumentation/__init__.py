# src/stepflow/core/instrumentation/__init__.py
"""
Instrumentação do stepflow (timing e logging) como middleware explícito.

Middlewares envolvem o ponto de entrada de um pipeline e, opcionalmente,
cada chamada de Step. Nada aqui faz parte do contrato de execução: um
pipeline sem middlewares se comporta exatamente igual, só que em silêncio.
"""

from .middleware import (
    Middleware,
    StepMiddleware,
    TimingCallback,
    compose,
    compose_step,
    logging_middleware,
    middlewares_from_settings,
    step_logging_middleware,
    step_timing_middleware,
    timing_middleware,
)
from .sanitize import MASK_VALUE, is_sensitive_field, sanitize

__all__ = [
    "MASK_VALUE",
    "Middleware",
    "StepMiddleware",
    "TimingCallback",
    "compose",
    "compose_step",
    "is_sensitive_field",
    "logging_middleware",
    "middlewares_from_settings",
    "sanitize",
    "step_logging_middleware",
    "step_timing_middleware",
    "timing_middleware",
]
