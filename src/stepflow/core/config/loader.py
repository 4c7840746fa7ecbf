# src/stepflow/core/config/loader.py
"""
Loader canônico de configuração do stepflow.

A configuração é resolvida a partir de:
    - um arquivo de defaults (obrigatório; por padrão o `defaults.yaml`
      distribuído com o pacote)
    - um arquivo local de overrides (opcional)

Responsabilidades do módulo:
    - Carregar arquivos de configuração em YAML ou JSON
    - Validar requisitos estruturais mínimos (tipo raiz)
    - Resolver a configuração final via deep-merge determinístico
    - Converter a configuração resolvida em `EngineSettings`

Invariantes:
    - O arquivo de defaults é obrigatório
    - O resultado de `load_config` é sempre um dicionário puro (`dict`)
    - Overrides nunca mutam os defaults

Limites explícitos:
    - Não interage com pipelines ou Steps
    - Não configura handlers de logging
"""

from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union
import json
import logging

import yaml  # PyYAML

from .merge import deep_merge
from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .settings import EngineSettings

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DEFAULTS_PATH = Path(__file__).with_name("defaults.yaml")

_PARSERS: Dict[str, Callable[[str], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.loads,
}


def _read_mapping(path: Path) -> Dict[str, Any]:
    """
    Lê um arquivo de configuração como dicionário (arquivo vazio → `{}`).

    Raises:
        UnsupportedConfigFormatError: Extensão sem parser registrado.
        InvalidConfigRootTypeError: Conteúdo raiz que não é um mapeamento.
    """
    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        raise UnsupportedConfigFormatError(
            f"{path.name}: extensão '{path.suffix}' não suportada "
            f"(use uma de {', '.join(sorted(_PARSERS))})"
        )

    text = path.read_text(encoding="utf-8")
    data = parser(text) if text.strip() else None
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"{path.name}: a raiz da configuração precisa ser um mapeamento, não {type(data).__name__}"
        )
    return data


def load_config(
    *,
    defaults_path: PathLike = DEFAULTS_PATH,
    local_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """
    Resolve a configuração efetiva: defaults obrigatórios + overrides locais.

    Um `local_path` inexistente é ignorado (ambiente sem overrides); a
    ausência dos defaults é erro.

    Raises:
        DefaultsNotFoundError: Defaults ausentes.
        ConfigError: Formato, raiz ou conflito de tipos inválidos.
    """
    defaults = Path(defaults_path)
    if not defaults.is_file():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {defaults}")
    config = _read_mapping(defaults)

    if local_path is None:
        return config
    local = Path(local_path)
    if not local.is_file():
        logger.debug("no local config at %s; using defaults only", local)
        return config
    return deep_merge(config, _read_mapping(local))


def load_settings(
    local_path: Optional[PathLike] = None,
    *,
    defaults_path: PathLike = DEFAULTS_PATH,
) -> EngineSettings:
    """Atalho: `load_config` + `EngineSettings.from_config`."""
    return EngineSettings.from_config(
        load_config(defaults_path=defaults_path, local_path=local_path)
    )
