# src/stepflow/core/config/merge.py
"""
Deep-merge de configuração (defaults + overrides locais).

Política de merge (v1):
    - dict → merge recursivo por chave
    - list → sobrescrita total (sem merge elemento a elemento)
    - escalar → sobrescrita direta
    - conflito de tipos → ConfigTypeConflictError

O merge é puramente funcional: nenhum input é mutado.
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def _compatible(base_value: Any, override_value: Any) -> bool:
    # int onde se espera float (ex.: slow_threshold_ms: 500) é aceito
    if isinstance(base_value, float) and isinstance(override_value, int) and not isinstance(override_value, bool):
        return True
    if base_value is None or override_value is None:
        return True
    return type(base_value) is type(override_value)


def _merge_mapping(prefix: str, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        path = f"{prefix}{key}"
        merged[key] = _merge_value(path, base[key], value) if key in base else deepcopy(value)
    return merged


def _merge_value(path: str, base_value: Any, override_value: Any) -> Any:
    if isinstance(base_value, dict) and isinstance(override_value, dict):
        return _merge_mapping(f"{path}.", base_value, override_value)
    if isinstance(override_value, list) or _compatible(base_value, override_value):
        return deepcopy(override_value)
    raise ConfigTypeConflictError(
        f"Conflito de tipo em '{path}': "
        f"{type(base_value).__name__} vs {type(override_value).__name__}"
    )


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Combina `base` com `override`, produzindo um novo dicionário.

    Conflitos são reportados com o caminho completo da chave
    (ex.: `logging.enabled`).

    Raises:
        ConfigTypeConflictError: Se ocorrer conflito de tipo entre base e override.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )
    return _merge_mapping("", base, override)
