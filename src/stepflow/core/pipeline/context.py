# src/stepflow/core/pipeline/context.py
"""
Contexto de execução compartilhado de uma invocação de pipeline.

Este módulo define o `ExecutionContext` e suas especializações
(`QueryContext`, `CommandContext`), a estrutura canônica utilizada para
compartilhar estado explícito entre Steps durante uma única invocação
de pipeline no stepflow.

O contexto atua como o único meio permitido de:
    - troca indireta de informações entre Steps
    - acesso à requisição/comando original
    - acúmulo de eventos de domínio (command)
    - registro de informações de auditoria (command)

Princípios fundamentais:
    - Isolamento por invocação (cada chamada possui seu próprio contexto)
    - Ausência de estado global compartilhado
    - Coordenação entre Steps por convenção de nomes de chave
    - Estrutura simples e testável

Invariantes:
    - Exatamente um contexto existe por invocação
    - O contexto nunca é compartilhado entre invocações concorrentes
    - O contexto não é retido após o retorno do pipeline
    - A lista de eventos do command é append-only durante a invocação

Limites explícitos:
    - Não executa Steps
    - Não decide políticas de execução
    - Não persiste dados
    - Não publica eventos

Este módulo existe para garantir isolamento,
clareza e comunicação explícita entre Steps.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Generic, Iterator, List, Optional, Tuple, Type, TypeVar, Union, get_origin, overload

from stepflow.core.exceptions import ContextTypeError, MissingContextKeyError

from .types import PipelineState

T = TypeVar("T")

# Chaves canônicas reservadas para a entrada original da invocação.
REQUEST_KEY = "request"
COMMAND_KEY = "command"


@dataclass(frozen=True)
class ContextKey(Generic[T]):
    """
    Chave tipada do contexto de execução.

    Associa um nome de chave a um tipo esperado, permitindo que escrita
    e leitura verifiquem o tipo em runtime e sinalizem explicitamente
    qualquer divergência (`ContextTypeError`) em vez de corromper o
    fluxo silenciosamente.

    Exemplo:
        USER = ContextKey("user", dict)
        ctx.put(USER, {"id": 1})
        user = ctx.get(USER)
    """
    name: str
    type: Type[T]

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("ContextKey.name must be a non-empty string")
        if not isinstance(self.type, type) or get_origin(self.type) is not None:
            raise ContextTypeError(
                f"ContextKey '{self.name}' needs a plain class as type, got {self.type!r}"
            )

    def check(self, value: Any) -> T:
        if not isinstance(value, self.type):
            raise ContextTypeError(
                f"Context key '{self.name}' expects {self.type.__name__}, "
                f"got {type(value).__name__}"
            )
        return value

    def __str__(self) -> str:
        return self.name


KeyLike = Union[str, ContextKey[Any]]


def _key_name(key: KeyLike) -> str:
    if isinstance(key, ContextKey):
        return key.name
    if not isinstance(key, str):
        raise TypeError(f"context key must be str or ContextKey, got {type(key).__name__}")
    return key


class ExecutionContext:
    """
    Contexto de execução de uma invocação de pipeline.

    Mantém um mapa `str -> valor` de tipo apagado; cada leitura/escrita
    pode carregar o tipo esperado pelo chamador através de `ContextKey`
    ou do argumento `expected_type`.

    Contrato:
        - `get` de chave ausente retorna None (nunca levanta exceção)
        - `require` de chave ausente levanta `MissingContextKeyError`
        - divergência de tipo (quando há tipo esperado) levanta `ContextTypeError`
        - todas as operações são O(1) amortizado

    Metadados da invocação (`state`, `started_at`, `trace_id`) vivem em
    atributos, fora do mapa de dados dos Steps.
    """

    def __init__(self, *, trace_id: Optional[str] = None) -> None:
        self._store: Dict[str, Any] = {}
        self.state: PipelineState = PipelineState.CREATED
        self.trace_id: Optional[str] = trace_id
        self.started_at: float = time.perf_counter()

    # -----------------------------
    # Key/value store
    # -----------------------------
    def put(self, key: KeyLike, value: Any) -> None:
        if isinstance(key, ContextKey):
            key.check(value)
        self._store[_key_name(key)] = value

    @overload
    def get(self, key: ContextKey[T]) -> Optional[T]: ...

    @overload
    def get(self, key: str, expected_type: Optional[Type[T]] = None) -> Optional[Any]: ...

    def get(self, key, expected_type=None):
        name = _key_name(key)
        if name not in self._store:
            return None
        value = self._store[name]
        if isinstance(key, ContextKey):
            return key.check(value)
        if expected_type is not None and not isinstance(value, expected_type):
            raise ContextTypeError(
                f"Context key '{name}' expects {expected_type.__name__}, "
                f"got {type(value).__name__}"
            )
        return value

    def get_or_default(self, key: KeyLike, default: Any) -> Any:
        if not self.has(key):
            return default
        return self.get(key)

    def require(self, key: KeyLike) -> Any:
        name = _key_name(key)
        if name not in self._store:
            raise MissingContextKeyError(name)
        return self.get(key)

    def has(self, key: KeyLike) -> bool:
        return _key_name(key) in self._store

    def remove(self, key: KeyLike) -> Any:
        return self._store.pop(_key_name(key), None)

    def clear(self) -> None:
        self._store.clear()

    def size(self) -> int:
        return len(self._store)

    def is_empty(self) -> bool:
        return not self._store

    def keys(self) -> Tuple[str, ...]:
        return tuple(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, (str, ContextKey)):
            return self.has(key)
        return False

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._store))

    # -----------------------------
    # Metadados da invocação
    # -----------------------------
    def execution_duration_ms(self) -> float:
        return (time.perf_counter() - self.started_at) * 1000.0

    def __repr__(self) -> str:
        return f"{type(self).__name__}(state={self.state.name}, keys={list(self._store)!r})"


class QueryContext(ExecutionContext):
    """Contexto de uma invocação de query; a requisição vive em `"request"`."""

    @property
    def request(self) -> Any:
        return self.get(REQUEST_KEY)

    def set_request(self, request: Any) -> None:
        self.put(REQUEST_KEY, request)


@dataclass
class AuditInfo:
    """
    Sub-namespace de auditoria de um command.

    Campos:
    - actor_id: identificador de quem iniciou o command
    - source: origem da invocação (ex.: "api", "batch")
    - initiated_at: timestamp UTC de criação do contexto
    - transaction_id: identificador da transação, quando o provedor expõe um
    - extra: entradas livres adicionadas por hooks de inicialização ou Steps
    """
    actor_id: Optional[str] = None
    source: Optional[str] = None
    initiated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    transaction_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        data.update(
            {
                "actor_id": self.actor_id,
                "source": self.source,
                "initiated_at": self.initiated_at.isoformat(),
                "transaction_id": self.transaction_id,
            }
        )
        return data


class CommandContext(ExecutionContext):
    """
    Contexto de uma invocação de command.

    Além do store compartilhado, carrega:
        - o command original em `"command"` (também exposto como `request`,
          para que Steps de leitura funcionem dentro de commands)
        - informações de auditoria (`audit`)
        - lista ordenada de eventos acumulados pelos Steps

    Eventos só são publicados após commit bem-sucedido, pelo pipeline.
    """

    def __init__(self, *, trace_id: Optional[str] = None) -> None:
        super().__init__(trace_id=trace_id)
        self.audit = AuditInfo()
        self._events: List[Any] = []

    @property
    def command(self) -> Any:
        return self.get(COMMAND_KEY)

    def set_command(self, command: Any) -> None:
        self.put(COMMAND_KEY, command)

    @property
    def request(self) -> Any:
        return self.command

    # -----------------------------
    # Auditoria
    # -----------------------------
    def add_audit_info(self, **info: Any) -> None:
        for key, value in info.items():
            if key in ("actor_id", "source", "transaction_id"):
                setattr(self.audit, key, value)
            else:
                self.audit.extra[key] = value

    def audit_info(self) -> Dict[str, Any]:
        return self.audit.as_dict()

    # -----------------------------
    # Eventos
    # -----------------------------
    def add_event(self, event: Any) -> None:
        self._events.append(event)

    @property
    def events(self) -> Tuple[Any, ...]:
        return tuple(self._events)

    def has_events(self) -> bool:
        return bool(self._events)
