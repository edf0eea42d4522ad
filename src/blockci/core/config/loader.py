# src/blockci/core/config/loader.py
"""
Loader canônico de configuração do blockci.

A configuração efetiva do Engine e do caminho de build é resolvida a partir de:
    - um arquivo de defaults (obrigatório, ex.: `config/defaults.yaml`)
    - um arquivo local de overrides (opcional, ignorado se não existir)

Princípios:
    - Configuração é declarativa e explícita
    - Erros estruturais são falhas fatais
    - A mesma entrada sempre produz a mesma configuração final

Limites explícitos:
    - Não valida semântica de domínio (ver `settings.resolve_settings`)
    - Não persiste configuração ou hash
"""

from pathlib import Path
from typing import Any, Dict, Optional, Tuple
import json

import yaml  # PyYAML

from .merge import deep_merge
from .hashing import compute_config_hash
from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)


def _read_document(path: Path) -> Dict[str, Any]:
    """
    Lê um arquivo YAML/JSON e garante que a raiz seja um dict.

    Arquivos vazios são interpretados como `{}`.
    """
    suffix = path.suffix.lower()

    with path.open("r", encoding="utf-8") as f:
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(f)
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__} ({path})"
        )

    return data


def load_config_with_hash(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
) -> Tuple[Dict[str, Any], str]:
    """
    Resolve a configuração efetiva e devolve também seu hash canônico.

    O hash é usado pelo Engine para marcar o Execution Record com a
    configuração sob a qual a execução ocorreu.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Se a extensão não for YAML/JSON.
        InvalidConfigRootTypeError: Se algum documento não for um dict.
        ConfigTypeConflictError: Se o override mudar o tipo de uma chave.
    """
    defaults_file = Path(defaults_path)
    if not defaults_file.exists():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {defaults_file}")

    effective = _read_document(defaults_file)

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _read_document(local_file))

    return effective, compute_config_hash(effective)


def load_config(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva (defaults + override local).

    Quando presente, o arquivo local sempre tem prioridade sobre os
    defaults; a resolução usa `deep_merge` (dict recursivo, lista
    substituída, conflito de tipo é erro).

    Args:
        defaults_path (str): Caminho para o arquivo de configuração base.
        local_path (Optional[str]): Caminho opcional para overrides locais.

    Returns:
        Dict[str, Any]: Configuração final resolvida.
    """
    effective, _ = load_config_with_hash(
        defaults_path=defaults_path,
        local_path=local_path,
    )
    return effective
