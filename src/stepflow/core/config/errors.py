# src/stepflow/core/config/errors.py
"""
Exceções canônicas da camada de configuração do stepflow.

As exceções aqui definidas representam **violações estruturais
explícitas** da configuração do engine, e não erros de execução de
pipelines (esses são sempre `ClassifiedError`).

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção de configuração chega ao chamador de um pipeline
      como erro classificado: elas ocorrem na montagem, não na execução
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do stepflow.

    Permite captura genérica de falhas de carregamento, merge e
    validação de settings.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Exceção levantada quando o arquivo de configuração base (defaults)
    não é encontrado no caminho especificado.

    O arquivo de defaults é obrigatório; o loader não tenta inferir
    nem criar defaults automaticamente.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato de arquivo não suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz da configuração não é um dicionário (`dict`)."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"logging": {"enabled": true}}
        - override: {"logging": "DEBUG"}
    """


class InvalidSettingsError(ConfigError):
    """Valor de configuração fora do domínio aceito (ex.: threshold negativo)."""
