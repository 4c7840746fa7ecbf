# src/stepflow/core/pipeline/types.py
"""
Tipos canônicos do pipeline do stepflow.

Este módulo define as estruturas e enums fundamentais que padronizam
a comunicação entre Steps, pipelines e chamadores.

Os tipos aqui definidos representam:
    - resultado imutável produzido por um Step (ou pela validação)
    - estados do ciclo de vida de uma invocação de pipeline

Componentes principais:
    - StepResult    → resultado discriminado: sucesso com dado ou falha classificada
    - PipelineState → estados da máquina de estados de query/command

Invariantes:
    - StepResult nunca carrega dado e erro ao mesmo tempo
    - Uma falha sempre possui mensagem não vazia e classificação
    - StepResult é imutável e seguro contra mutação acidental

Limites explícitos:
    - Não executa Steps
    - Não decide políticas de execução
    - Não contém lógica de domínio

Este módulo existe para garantir consistência
e clareza semântica no contrato entre Steps e pipelines.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from stepflow.core.errors import (
    ErrorClassification,
    ErrorPayload,
    GENERIC_ERROR,
    SYSTEM_ERROR,
    VALIDATION_ERROR,
)
from stepflow.core.exceptions import ClassifiedError

T = TypeVar("T")


class PipelineState(str, Enum):
    """
    Estados de uma invocação de pipeline.

    Fluxo de query:
        CREATED → VALIDATING → RESOLVING_STEPS → EXECUTING_STEPS
        → BUILDING_RESPONSE → DONE

    Fluxo de command (adicional):
        ... → BUILDING_RESPONSE → COMMITTING → DONE → POST_EXECUTION

    FAILED é absorvente: uma vez atingido, a invocação termina com
    exatamente um erro classificado.
    """
    CREATED = "created"
    VALIDATING = "validating"
    RESOLVING_STEPS = "resolving_steps"
    EXECUTING_STEPS = "executing_steps"
    BUILDING_RESPONSE = "building_response"
    COMMITTING = "committing"
    DONE = "done"
    POST_EXECUTION = "post_execution"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult(Generic[T]):
    """
    Resultado imutável da execução de um Step.

    Um StepResult é um valor discriminado:
        - sucesso: `ok=True`, `data` opcional, campos de erro vazios
        - falha:   `ok=False`, `data` ausente, mensagem/código/classificação

    Use sempre os construtores de classe (`success`, `failure`,
    `validation_failure`, `system_failure`); a validação em
    `__post_init__` rejeita combinações inválidas com ValueError.

    Compatibilidade:
        `failure(message)` sem classificação explícita produz
        BUSINESS com código `GENERIC_ERROR`.
    """
    ok: bool
    data: Optional[T] = None
    message: Optional[str] = None
    error_code: Optional[str] = None
    classification: Optional[ErrorClassification] = None

    def __post_init__(self) -> None:
        if self.ok:
            if self.message is not None or self.error_code is not None or self.classification is not None:
                raise ValueError("successful StepResult cannot carry error fields")
            return

        if self.data is not None:
            raise ValueError("failed StepResult cannot carry data")
        if not isinstance(self.message, str) or not self.message.strip():
            raise ValueError("failed StepResult requires a non-empty message")
        if not isinstance(self.classification, ErrorClassification):
            raise ValueError("failed StepResult requires an ErrorClassification")
        if not isinstance(self.error_code, str) or not self.error_code.strip():
            raise ValueError("failed StepResult requires a non-empty error code")

    # -----------------------------
    # Construtores
    # -----------------------------
    @classmethod
    def success(cls, data: Optional[T] = None) -> "StepResult[T]":
        return cls(ok=True, data=data)

    @classmethod
    def failure(
        cls,
        message: str,
        error_code: str = GENERIC_ERROR,
        classification: ErrorClassification = ErrorClassification.BUSINESS,
    ) -> "StepResult[Any]":
        return cls(
            ok=False,
            message=message,
            error_code=error_code,
            classification=classification,
        )

    @classmethod
    def validation_failure(cls, message: str) -> "StepResult[Any]":
        return cls.failure(message, VALIDATION_ERROR, ErrorClassification.VALIDATION)

    @classmethod
    def system_failure(cls, message: str) -> "StepResult[Any]":
        return cls.failure(message, SYSTEM_ERROR, ErrorClassification.SYSTEM)

    @classmethod
    def from_error(cls, error: ClassifiedError) -> "StepResult[Any]":
        return cls.failure(error.message, error.error_code, error.classification)

    # -----------------------------
    # Inspeção
    # -----------------------------
    @property
    def is_success(self) -> bool:
        return self.ok

    @property
    def is_failure(self) -> bool:
        return not self.ok

    def to_payload(self) -> ErrorPayload:
        if self.ok:
            raise ValueError("successful StepResult has no error payload")
        return ErrorPayload(
            code=self.error_code,  # type: ignore[arg-type]
            message=self.message,  # type: ignore[arg-type]
            classification=self.classification,  # type: ignore[arg-type]
        )

    def to_error(self) -> ClassifiedError:
        """Converte uma falha no erro classificado entregue ao chamador."""
        return ClassifiedError.from_payload(self.to_payload())

    def __repr__(self) -> str:
        if self.ok:
            return f"StepResult(ok=True, data={self.data!r})"
        return (
            f"StepResult(ok=False, message={self.message!r}, "
            f"error_code={self.error_code!r}, classification={self.classification.name})"
        )
