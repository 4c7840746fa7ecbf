"""
stepflow: Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do stepflow.

Objetivo:
- Entregar ao chamador exatamente um erro classificado (ClassifiedError)
- Permitir que Steps levantem falhas de negócio tipadas quando preferirem
  exceções a StepResult
- Evitar KeyError/TypeError genéricos no uso incorreto do contexto

Regras:
- Não contém lógica de domínio.
- ClassifiedError carrega apenas dados seguros para o chamador.
"""

from __future__ import annotations

from typing import Any, Dict

from .errors import ErrorClassification, ErrorPayload, GENERIC_ERROR


class StepflowException(Exception):
    """Base class para exceções internas do stepflow."""


class ClassifiedError(StepflowException):
    """Erro classificado entregue ao chamador de um pipeline.

    Importante:
    - Mensagem curta e humana, sem stack trace nem texto de exceções internas
    - `classification` é sempre um dos valores de ErrorClassification
    """

    def __init__(
        self,
        message: str,
        error_code: str = GENERIC_ERROR,
        classification: ErrorClassification = ErrorClassification.BUSINESS,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.classification = ErrorClassification(classification)

    @classmethod
    def from_payload(cls, payload: ErrorPayload) -> "ClassifiedError":
        return cls(payload.message, payload.code, payload.classification)

    def to_payload(self) -> ErrorPayload:
        return ErrorPayload(
            code=self.error_code,
            message=self.message,
            classification=self.classification,
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.to_payload().to_dict()

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    def __repr__(self) -> str:
        return (
            f"ClassifiedError(error_code={self.error_code!r}, "
            f"classification={self.classification.name}, message={self.message!r})"
        )


# ---------------------------------------------------------------------------
# Contexto de execução
# ---------------------------------------------------------------------------

class ContextTypeError(StepflowException, TypeError):
    """Valor armazenado (ou a armazenar) não bate com o tipo esperado pela chave."""


class MissingContextKeyError(StepflowException, KeyError):
    """Chave obrigatória ausente no contexto (ver `ExecutionContext.require`)."""

    def __str__(self) -> str:  # pragma: no cover
        return f"Missing context key: {self.args[0]!r}"


# ---------------------------------------------------------------------------
# Engine / Configuração
# ---------------------------------------------------------------------------

class PipelineConfigurationError(StepflowException, ValueError):
    """Colaboradores inválidos ou inconsistentes na construção de um pipeline."""


class InvalidStepError(PipelineConfigurationError):
    """Item resolvido na lista de Steps não satisfaz o protocolo de Step."""


class InvalidStepResultError(StepflowException, TypeError):
    """Step.execute(context) retornou algo que não é StepResult."""
