"""
stepflow: Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do stepflow.
Erros são considerados parte do contrato operacional do engine e devem ser:

- classificados (VALIDATION, BUSINESS ou SYSTEM)
- serializáveis
- seguros para exposição ao chamador

Nenhuma falha chega ao chamador sem classificação explícita.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict


class ErrorClassification(str, Enum):
    """
    Classificação canônica de erros do engine.

    Conjunto fechado: toda falha de validação, de Step ou do próprio
    pipeline deve ser mapeada para exatamente um destes valores.

    Valores:
        - VALIDATION: entrada malformada ou fora de faixa, detectada antes
          de qualquer Step executar
        - BUSINESS: violação de regra de domínio reconhecida por um Step
        - SYSTEM: falha interna inesperada (inclui qualquer exceção não
          convertida explicitamente em StepResult)

    Os valores são strings para facilitar serialização e inspeção.
    """
    VALIDATION = "validation"
    BUSINESS = "business"
    SYSTEM = "system"


# ---------------------------------------------------------------------------
# Catálogo canônico de códigos de erro (v1)
# ---------------------------------------------------------------------------

GENERIC_ERROR = "GENERIC_ERROR"
VALIDATION_ERROR = "VALIDATION_ERROR"
SYSTEM_ERROR = "SYSTEM_ERROR"

# Falha inesperada convertida na fronteira do pipeline
SYS_001 = "SYS_001"

# Step retornou algo que não é StepResult
INVALID_STEP_RESULT = "INVALID_STEP_RESULT"


QUERY_SYSTEM_MESSAGE = "System error during query"
COMMAND_SYSTEM_MESSAGE = "System error during command"


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro entregue ao chamador.

    Campos:
    - code: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e segura (sem detalhes internos)
    - classification: classificação do erro

    Invariantes:
    - `code` e `message` nunca são vazios
    """

    code: str
    message: str
    classification: ErrorClassification

    def __post_init__(self) -> None:
        if not isinstance(self.code, str) or not self.code.strip():
            raise ValueError("Error code cannot be null or blank")
        if not isinstance(self.message, str) or not self.message.strip():
            raise ValueError("Error message cannot be null or blank")

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        data = asdict(self)
        data["classification"] = self.classification.value
        return data


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def validation_error(message: str) -> ErrorPayload:
    return ErrorPayload(
        code=VALIDATION_ERROR,
        message=message,
        classification=ErrorClassification.VALIDATION,
    )


def business_error(message: str, code: str = GENERIC_ERROR) -> ErrorPayload:
    return ErrorPayload(
        code=code,
        message=message,
        classification=ErrorClassification.BUSINESS,
    )


def system_error(message: str, code: str = SYSTEM_ERROR) -> ErrorPayload:
    return ErrorPayload(
        code=code,
        message=message,
        classification=ErrorClassification.SYSTEM,
    )


def unexpected_error(*, flow: str) -> ErrorPayload:
    """
    Erro genérico para falhas inesperadas capturadas na fronteira do pipeline.

    A mensagem é fixa por tipo de fluxo ("query" ou "command") e nunca
    carrega texto da exceção original.
    """
    message = COMMAND_SYSTEM_MESSAGE if flow == "command" else QUERY_SYSTEM_MESSAGE
    return system_error(message, code=SYS_001)
