# src/stepflow/core/engine/engine.py
"""
Núcleo compartilhado de execução dos pipelines do stepflow.

O pipeline não herda comportamento de um template: ele é montado por
composição a partir de colaboradores explícitos (validação, fonte de
Steps, montagem da resposta, middlewares). Este módulo concentra o que
query e command têm em comum:

    - validação antecipada dos colaboradores na construção
    - composição única da cadeia de middlewares
    - execução sequencial fail-fast dos Steps (StepExecutor)
    - conversão de exceções inesperadas em erro SYSTEM genérico

Conversão de erros (fronteira do pipeline):
    - StepResult de falha      → ClassifiedError com mensagem/código/classificação do resultado
    - ClassifiedError levantado → propagado sem alteração
    - qualquer outra exceção   → ClassifiedError SYSTEM, código SYS_001,
                                 mensagem genérica do fluxo

Invariantes:
    - O chamador recebe exatamente um ClassifiedError por falha
    - O texto de exceções internas nunca chega ao chamador (nem via
      `__cause__` / `__context__`); ele vai apenas para o log
    - Nenhum Step roda depois da primeira falha
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence, Tuple

from stepflow.core.config.settings import DEFAULT_SETTINGS, EngineSettings
from stepflow.core.errors import INVALID_STEP_RESULT, ErrorClassification, unexpected_error
from stepflow.core.exceptions import ClassifiedError, PipelineConfigurationError
from stepflow.core.instrumentation.middleware import (
    Middleware,
    StepMiddleware,
    TimingCallback,
    compose,
    compose_step,
    middlewares_from_settings,
)
from stepflow.core.pipeline.context import ExecutionContext
from stepflow.core.pipeline.step import Step, step_name
from stepflow.core.pipeline.types import PipelineState, StepResult

from .planner import StepSource, check_step_source, resolve_steps

logger = logging.getLogger(__name__)

Validator = Callable[[Any], StepResult[Any]]
ResponseBuilder = Callable[[Any], Any]


def _always_valid(_request: Any) -> StepResult[Any]:
    return StepResult.success()


class StepExecutor:
    """
    Executa uma lista já resolvida de Steps sobre um contexto.

    - Cada chamada passa pela cadeia de middlewares de Step
    - A primeira falha interrompe a sequência
    - Exceções inesperadas são registradas com o nome do Step e viram
      erro SYSTEM genérico
    """

    def __init__(
        self,
        *,
        pipeline_name: str,
        flow: str,
        middlewares: Sequence[StepMiddleware] = (),
        settings: EngineSettings = DEFAULT_SETTINGS,
    ) -> None:
        self.pipeline_name = pipeline_name
        self.flow = flow
        self.middlewares: Tuple[StepMiddleware, ...] = tuple(middlewares)
        self.settings = settings

    def run(self, steps: Sequence[Step], context: ExecutionContext) -> None:
        total = len(steps)
        logger.debug("[%s] executing %d steps", self.pipeline_name, total)
        for index, step in enumerate(steps, start=1):
            name = step_name(step)
            logger.debug("[%s] step %d/%d: %s", self.pipeline_name, index, total, name)
            result = self._call(step, name, context)
            if result.is_failure:
                logger.warning(
                    "[%s] step %s failed: %s (%s)",
                    self.pipeline_name,
                    name,
                    result.error_code,
                    result.classification.value,
                )
                raise result.to_error()

    def _call(self, step: Step, name: str, context: ExecutionContext) -> StepResult[Any]:
        handler = compose_step(name, step.execute, self.middlewares)
        failure: Optional[ClassifiedError] = None
        try:
            result = handler(context)
        except ClassifiedError:
            raise
        except Exception as exc:
            log_unexpected(self.pipeline_name, f"step {name}", exc, self.settings, context)
            failure = ClassifiedError.from_payload(unexpected_error(flow=self.flow))
        if failure is not None:
            raise failure
        return check_result(result, self.pipeline_name, f"step {name}", flow=self.flow)


def log_unexpected(
    pipeline_name: str,
    where: str,
    exc: BaseException,
    settings: EngineSettings,
    context: Optional[ExecutionContext] = None,
) -> None:
    """
    Registra o detalhe interno de uma falha inesperada (nunca entregue ao chamador).

    Mensagem e traceback da exceção vão sempre para o log local. Os
    settings de diagnóstico apenas acrescentam detalhe:
        - include_debug_info:  registro DEBUG com trace_id, fase e chaves do contexto
        - include_stack_trace: pilha do ponto de invocação (`stack_info`)
    """
    diagnostics = settings.diagnostics
    logger.error(
        "[%s] unexpected error in %s: %s: %s",
        pipeline_name,
        where,
        type(exc).__name__,
        exc,
        exc_info=exc,
        stack_info=diagnostics.include_stack_trace,
    )
    if diagnostics.include_debug_info and context is not None:
        logger.debug(
            "[%s] context at failure: trace_id=%s state=%s keys=%s",
            pipeline_name,
            context.trace_id,
            context.state.value,
            sorted(context.keys()),
        )


def check_result(result: Any, pipeline_name: str, where: str, *, flow: str) -> StepResult[Any]:
    """Garante que `result` é um StepResult; caso contrário, erro SYSTEM de configuração."""
    if isinstance(result, StepResult):
        return result
    logger.error(
        "[%s] %s returned %s instead of StepResult",
        pipeline_name,
        where,
        type(result).__name__,
    )
    raise ClassifiedError(
        unexpected_error(flow=flow).message,
        INVALID_STEP_RESULT,
        ErrorClassification.SYSTEM,
    )


class BasePipeline:
    """
    Base de composição de QueryPipeline e CommandPipeline.

    Não é um template: as subclasses só definem como o contexto da
    invocação é criado e quais fases extras envolvem a execução.

    Args:
        steps: Sequência fixa de Steps ou resolver `(request, context) -> Sequence[Step]`.
        build_response: `build_response(context) -> resposta`.
        validate: `validate(request) -> StepResult` (padrão: sempre sucesso).
        name: Código do fluxo usado em logs e métricas (padrão: nome da classe).
        description: Descrição curta do fluxo (logs).
        middlewares: Middlewares extras do ponto de entrada, depois dos derivados de `settings`.
        step_middlewares: Middlewares extras por Step.
        settings: Configuração do engine (padrão: DEFAULT_SETTINGS).
        metrics: Callback de métricas `(code, elapsed_ms, ok)`; exige
            `performance.enable_metrics`.
    """

    flow = "pipeline"

    def __init__(
        self,
        *,
        steps: StepSource,
        build_response: ResponseBuilder,
        validate: Optional[Validator] = None,
        name: Optional[str] = None,
        description: str = "",
        middlewares: Sequence[Middleware] = (),
        step_middlewares: Sequence[StepMiddleware] = (),
        settings: Optional[EngineSettings] = None,
        metrics: Optional[TimingCallback] = None,
    ) -> None:
        frozen_steps = check_step_source(steps)
        if not callable(build_response):
            raise PipelineConfigurationError("build_response must be callable")
        if validate is not None and not callable(validate):
            raise PipelineConfigurationError("validate must be callable")

        self.name = name or type(self).__name__
        self.description = description
        self.settings = settings or DEFAULT_SETTINGS
        self._steps = frozen_steps
        self._validate = validate or _always_valid
        self._build_response = build_response

        auto, auto_steps = middlewares_from_settings(
            self.settings, self.name, description, metrics=metrics
        )
        self._executor = StepExecutor(
            pipeline_name=self.name,
            flow=self.flow,
            middlewares=tuple(auto_steps) + tuple(step_middlewares),
            settings=self.settings,
        )
        self._entry = compose(self._invoke, tuple(auto) + tuple(middlewares))

    # ------------------------------------------------------------------
    # API pública
    # ------------------------------------------------------------------
    def try_execute(self, request: Any, **kwargs: Any) -> StepResult[Any]:
        """Como `execute`, mas devolve a falha classificada em vez de levantá-la."""
        try:
            response = self.execute(request, **kwargs)
        except ClassifiedError as err:
            return StepResult.from_error(err)
        return StepResult.success(response)

    def execute(self, request: Any, **kwargs: Any) -> Any:  # pragma: no cover
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Fronteira
    # ------------------------------------------------------------------
    def _invoke(self, request: Any, **kwargs: Any) -> Any:
        failure: Optional[ClassifiedError] = None
        try:
            return self._run(request, **kwargs)
        except ClassifiedError as err:
            logger.warning(
                "[%s] %s failed: %s (%s) %s",
                self.name,
                self.flow,
                err.error_code,
                err.classification.value,
                err.message,
            )
            raise
        except Exception as exc:
            log_unexpected(self.name, self.flow, exc, self.settings)
            failure = ClassifiedError.from_payload(unexpected_error(flow=self.flow))
        raise failure

    def _run(self, request: Any, **kwargs: Any) -> Any:  # pragma: no cover
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Fases comuns
    # ------------------------------------------------------------------
    def _run_phases(self, context: ExecutionContext, request: Any) -> Any:
        """VALIDATING → RESOLVING_STEPS → EXECUTING_STEPS → BUILDING_RESPONSE."""
        logger.debug("[%s] %s started", self.name, self.flow)

        context.state = PipelineState.VALIDATING
        verdict = check_result(self._validate(request), self.name, "validate", flow=self.flow)
        if verdict.is_failure:
            logger.warning("[%s] validation failed: %s", self.name, verdict.message)
            raise verdict.to_error()

        context.state = PipelineState.RESOLVING_STEPS
        steps = resolve_steps(self._steps, request, context)

        context.state = PipelineState.EXECUTING_STEPS
        self._executor.run(steps, context)

        context.state = PipelineState.BUILDING_RESPONSE
        return self._build_response(context)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
