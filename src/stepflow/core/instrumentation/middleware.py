# src/stepflow/core/instrumentation/middleware.py
"""
Instrumentação explícita por middleware.

Um middleware de pipeline é uma função `middleware(next) -> wrapped` que
envolve o ponto de entrada `execute` de um pipeline; um middleware de
Step é `middleware(step_name, next) -> wrapped` e envolve cada chamada a
`Step.execute(context)`.

A composição acontece uma única vez, na construção do pipeline
(`compose`); o primeiro middleware da lista é o mais externo.

Middlewares fornecidos:
    - logging_middleware:      registros START / END / ERROR por invocação
    - timing_middleware:       hook de métricas `(code, elapsed_ms, ok)`
    - step_logging_middleware: registros START / COMPLETE / FAILED / ERROR por Step
    - step_timing_middleware:  hook de métricas por Step

Invariantes:
    - Middlewares nunca engolem exceções: registram e propagam
    - Payloads só entram no log depois de `sanitize`
    - Falhas de serialização do log ou do hook de métricas nunca chegam ao chamador

Limites explícitos:
    - Não alteram o resultado nem o erro da invocação
    - Não configuram handlers de logging
"""

from __future__ import annotations

import functools
import json
import logging
import time
import uuid
from typing import Any, Callable, Optional, Sequence

from stepflow.core.config.settings import EngineSettings
from stepflow.core.exceptions import ClassifiedError

from .sanitize import sanitize

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]
Middleware = Callable[[Handler], Handler]
StepHandler = Callable[[Any], Any]
StepMiddleware = Callable[[str, StepHandler], StepHandler]
TimingCallback = Callable[[str, float, bool], None]


def compose(handler: Handler, middlewares: Sequence[Middleware] = ()) -> Handler:
    """Envolve `handler` com `middlewares` (o primeiro da lista fica mais externo)."""
    wrapped = handler
    for middleware in reversed(tuple(middlewares)):
        wrapped = middleware(wrapped)
    return wrapped


def compose_step(name: str, handler: StepHandler, middlewares: Sequence[StepMiddleware] = ()) -> StepHandler:
    wrapped = handler
    for middleware in reversed(tuple(middlewares)):
        wrapped = middleware(name, wrapped)
    return wrapped


def _execution_id() -> str:
    return uuid.uuid4().hex[:8]


def _to_json(entry: dict) -> str:
    try:
        return json.dumps(entry, ensure_ascii=False, default=str)
    except (TypeError, ValueError) as exc:
        logger.debug("log entry is not JSON serializable (%s); using repr", type(exc).__name__)
        return repr(entry)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000.0, 3)


def _notify(callback: TimingCallback, code: str, elapsed_ms: float, ok: bool) -> None:
    try:
        callback(code, elapsed_ms, ok)
    except Exception:
        # Falha no hook de métricas não altera o desfecho da invocação.
        logger.exception("[%s] metrics callback failed", code)


def logging_middleware(
    code: str,
    description: str = "",
    *,
    log: Optional[logging.Logger] = None,
    level: int = logging.INFO,
    include_payloads: bool = False,
    slow_threshold_ms: Optional[float] = None,
) -> Middleware:
    """
    Middleware de log estruturado da invocação de um pipeline.

    Cada invocação recebe um `execution_id` curto; os registros START,
    END e ERROR carregam código do fluxo, fase e tempo decorrido. Com
    `include_payloads`, requisição e resposta entram no registro já
    sanitizadas. Acima de `slow_threshold_ms`, um WARNING adicional
    sinaliza o fluxo lento.
    """
    out = log or logging.getLogger(f"stepflow.flow.{code}")

    def middleware(next_handler: Handler) -> Handler:
        @functools.wraps(next_handler)
        def wrapped(*args: Any, **kwargs: Any) -> Any:
            execution_id = _execution_id()
            request = args[0] if args else None
            entry = {
                "execution_id": execution_id,
                "flow": code,
                "description": description,
                "phase": "START",
            }
            if include_payloads:
                entry["request"] = sanitize(request)
            out.log(level, "[%s] %s - %s", code, description or "started", _to_json(entry))

            start = time.perf_counter()
            try:
                result = next_handler(*args, **kwargs)
            except ClassifiedError as err:
                elapsed = _elapsed_ms(start)
                out.log(
                    level,
                    "[%s] Failed after %sms - %s",
                    code,
                    elapsed,
                    _to_json(
                        {
                            "execution_id": execution_id,
                            "flow": code,
                            "phase": "ERROR",
                            "elapsed_ms": elapsed,
                            "error": err.to_dict(),
                        }
                    ),
                )
                raise
            except Exception as exc:
                elapsed = _elapsed_ms(start)
                out.log(
                    level,
                    "[%s] Failed after %sms - %s",
                    code,
                    elapsed,
                    _to_json(
                        {
                            "execution_id": execution_id,
                            "flow": code,
                            "phase": "ERROR",
                            "elapsed_ms": elapsed,
                            "error": {"exception_class": type(exc).__name__},
                        }
                    ),
                )
                raise

            elapsed = _elapsed_ms(start)
            end_entry = {
                "execution_id": execution_id,
                "flow": code,
                "phase": "END",
                "elapsed_ms": elapsed,
            }
            if include_payloads:
                end_entry["response"] = sanitize(result)
            out.log(level, "[%s] Completed in %sms - %s", code, elapsed, _to_json(end_entry))

            if slow_threshold_ms is not None and elapsed > slow_threshold_ms:
                out.warning("[%s] Slow flow: %sms (threshold %sms)", code, elapsed, slow_threshold_ms)
            return result

        return wrapped

    return middleware


def timing_middleware(code: str, callback: TimingCallback) -> Middleware:
    """Middleware de métricas: chama `callback(code, elapsed_ms, ok)` a cada invocação."""

    def middleware(next_handler: Handler) -> Handler:
        @functools.wraps(next_handler)
        def wrapped(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            ok = False
            try:
                result = next_handler(*args, **kwargs)
                ok = True
                return result
            finally:
                _notify(callback, code, _elapsed_ms(start), ok)

        return wrapped

    return middleware


def step_logging_middleware(
    code: str,
    *,
    log: Optional[logging.Logger] = None,
    level: int = logging.DEBUG,
) -> StepMiddleware:
    """Middleware de log por Step (START / COMPLETE / FAILED / ERROR)."""
    out = log or logging.getLogger(f"stepflow.flow.{code}")

    def middleware(name: str, next_handler: StepHandler) -> StepHandler:
        def wrapped(context: Any) -> Any:
            out.log(level, "[%s] Step %s - START", code, name)
            start = time.perf_counter()
            try:
                result = next_handler(context)
            except Exception as exc:
                out.log(
                    level,
                    "[%s] Step %s - ERROR after %sms (%s)",
                    code,
                    name,
                    _elapsed_ms(start),
                    type(exc).__name__,
                )
                raise
            phase = "FAILED" if getattr(result, "is_failure", False) else "COMPLETE"
            out.log(level, "[%s] Step %s - %s in %sms", code, name, phase, _elapsed_ms(start))
            return result

        return wrapped

    return middleware


def step_timing_middleware(callback: TimingCallback) -> StepMiddleware:
    """Métricas por Step: `callback(step_name, elapsed_ms, ok)`; `ok` exige StepResult de sucesso."""

    def middleware(name: str, next_handler: StepHandler) -> StepHandler:
        def wrapped(context: Any) -> Any:
            start = time.perf_counter()
            ok = False
            try:
                result = next_handler(context)
                ok = bool(getattr(result, "is_success", False))
                return result
            finally:
                _notify(callback, name, _elapsed_ms(start), ok)

        return wrapped

    return middleware


def middlewares_from_settings(
    settings: EngineSettings,
    code: str,
    description: str = "",
    *,
    metrics: Optional[TimingCallback] = None,
) -> tuple:
    """
    Monta `(middlewares, step_middlewares)` a partir dos settings.

    - `logging.enabled` liga o log da invocação (e, com `log_steps`, dos Steps)
    - `performance.log_slow_flows` aplica o threshold de fluxo lento
    - `performance.enable_metrics` + `metrics` ligam os hooks de tempo
    """
    middlewares: list = []
    step_middlewares: list = []
    perf = settings.performance

    if perf.enabled and perf.enable_metrics and metrics is not None:
        middlewares.append(timing_middleware(code, metrics))
        step_middlewares.append(step_timing_middleware(metrics))

    if settings.logging.enabled:
        threshold = perf.slow_threshold_ms if perf.enabled and perf.log_slow_flows else None
        middlewares.append(
            logging_middleware(
                code,
                description,
                level=settings.logging.level_no,
                include_payloads=settings.logging.include_payloads,
                slow_threshold_ms=threshold,
            )
        )
        if settings.logging.log_steps:
            step_middlewares.append(step_logging_middleware(code, level=settings.logging.level_no))

    logger.debug(
        "[%s] middlewares from settings: %d flow, %d step",
        code,
        len(middlewares),
        len(step_middlewares),
    )
    return tuple(middlewares), tuple(step_middlewares)
