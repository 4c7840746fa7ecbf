# src/stepflow/core/instrumentation/sanitize.py
"""
Mascaramento de campos sensíveis em payloads de log.

Requisições e respostas só entram no log depois de passar por `sanitize`,
que percorre mapeamentos, dataclasses, sequências e objetos simples e
substitui o valor de qualquer campo cujo nome pareça sensível.
"""

from __future__ import annotations

import dataclasses
import re
from typing import Any, Mapping

MASK_VALUE = "***MASKED***"

SENSITIVE_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r".*password.*",
        r".*token.*",
        r".*secret.*",
        r".*key.*",
        r".*auth.*",
        r".*credential.*",
        r".*ssn.*",
        r".*social.*security.*",
        r".*credit.*card.*",
        r".*cvv.*",
        r".*pin.*",
    )
)

_MAX_DEPTH = 16


def is_sensitive_field(name: Any) -> bool:
    if not isinstance(name, str):
        return False
    return any(p.fullmatch(name) for p in SENSITIVE_PATTERNS)


def _sanitize_mapping(data: Mapping[Any, Any], depth: int) -> dict:
    # Chaves viram texto: a cópia precisa ser serializável em JSON.
    return {
        str(key): MASK_VALUE if is_sensitive_field(key) else _sanitize(value, depth + 1)
        for key, value in data.items()
    }


def _sanitize(obj: Any, depth: int) -> Any:
    if depth > _MAX_DEPTH:
        return f"{type(obj).__name__} (max depth)"
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, Mapping):
        return _sanitize_mapping(obj, depth)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        fields = {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
        return _sanitize_mapping(fields, depth)
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [_sanitize(item, depth + 1) for item in obj]
    attrs = getattr(obj, "__dict__", None)
    if isinstance(attrs, dict):
        public = {k: v for k, v in attrs.items() if not k.startswith("_")}
        return _sanitize_mapping(public, depth)
    return repr(obj)


def sanitize(obj: Any) -> Any:
    """Retorna uma cópia serializável de `obj` com campos sensíveis mascarados."""
    return _sanitize(obj, 0)
