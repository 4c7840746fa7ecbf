# tests/core/config/test_merge.py
"""
Testes da política de deep-merge de configuração.

Este módulo valida o comportamento da função `deep_merge`, responsável
por resolver a configuração final do engine a partir do `defaults.yaml`
e de um conjunto de overrides explícitos.

Os testes asseguram que:
- valores escalares são sobrescritos corretamente
- dicionários são mesclados de forma recursiva
- listas são sobrescritas integralmente
- conflitos de tipo são detectados e rejeitados explicitamente
- objetos de entrada não são mutados durante o merge

Invariantes:
    - Chaves não sobrescritas são preservadas
    - Nenhum merge parcial é produzido em caso de erro

Limites explícitos:
    - Não valida carregamento de arquivos YAML
    - Não valida conversão para EngineSettings
"""

import pytest

try:
    from stepflow.core.config.merge import deep_merge
    from stepflow.core.config.errors import ConfigTypeConflictError
except Exception as e:  # noqa: BLE001
    deep_merge = None
    ConfigTypeConflictError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """
    Garante que `deep_merge` e `ConfigTypeConflictError` estejam disponíveis.

    Falha imediatamente, com mensagem explícita, quando os módulos de
    configuração não podem ser importados.
    """
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing config merge modules. Implement:\n"
            "- src/stepflow/core/config/merge.py (deep_merge)\n"
            "- src/stepflow/core/config/errors.py (ConfigTypeConflictError)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_merge_simple_override():
    """
    Verifica o override de valores escalares sem mutar as entradas.

    Invariantes:
        - O valor sobrescrito reflete exatamente o override
        - `base` e `override` não sofrem mutação
    """
    _require_imports()
    base = {"a": 1, "b": 2}
    override = {"b": 99}
    out = deep_merge(base, override)
    assert out == {"a": 1, "b": 99}
    assert base == {"a": 1, "b": 2}
    assert override == {"b": 99}


def test_merge_nested_dict():
    """Dicionários aninhados são mesclados chave a chave."""
    _require_imports()
    base = {"logging": {"enabled": False, "level": "DEBUG"}}
    override = {"logging": {"enabled": True}}
    out = deep_merge(base, override)
    assert out == {"logging": {"enabled": True, "level": "DEBUG"}}


def test_merge_list_override_total():
    _require_imports()
    base = {"tags": ["query", "command"]}
    override = {"tags": ["command"]}
    out = deep_merge(base, override)
    assert out == {"tags": ["command"]}


def test_merge_int_accepted_where_float_expected():
    """
    Verifica que um inteiro pode sobrescrever um float.

    `slow_threshold_ms: 250` em YAML é lido como int; o merge não deve
    tratar isso como conflito de tipo.
    """
    _require_imports()
    out = deep_merge({"performance": {"slow_threshold_ms": 1000.0}}, {"performance": {"slow_threshold_ms": 250}})
    assert out["performance"]["slow_threshold_ms"] == 250


def test_merge_type_conflict_raises():
    """
    Verifica que conflitos estruturais de tipo são rejeitados.

    Decisões arquiteturais:
        - dict vs str não possui resolução implícita
        - bool vs str também é conflito (nenhuma coerção)
    """
    _require_imports()
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"logging": {"enabled": True}}, {"logging": "DEBUG"})
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"logging": {"enabled": True}}, {"logging": {"enabled": "yes"}})


def test_merge_does_not_share_nested_objects():
    _require_imports()
    base = {"logging": {"enabled": False}}
    out = deep_merge(base, {})
    out["logging"]["enabled"] = True
    assert base["logging"]["enabled"] is False


def test_merge_conflict_reports_full_key_path():
    _require_imports()
    with pytest.raises(ConfigTypeConflictError, match=r"logging\.enabled"):
        deep_merge({"logging": {"enabled": True}}, {"logging": {"enabled": "yes"}})
