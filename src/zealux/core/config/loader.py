"""
Carregamento da configuração efetiva do Zealux.

Fontes, em ordem de prioridade crescente:
    - arquivo de defaults (obrigatório)
    - arquivo local de overrides (opcional; ignorado quando ausente)

Decisões arquiteturais:
    - A seção `engine` é validada no carregamento, não na primeira run;
      o erro aponta os arquivos que compuseram a configuração
    - O retorno é o dicionário mesclado, não `EngineSettings`: seções
      desconhecidas são preservadas para quem as consome

Limites explícitos:
    - Não carrega definições de processo
"""

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TextIO

import json
import yaml  # PyYAML

from zealux.core.exceptions import EngineConfigurationError

from .engine import resolve_engine_config
from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


_PARSERS: Dict[str, Callable[[TextIO], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


def _read_source(path: Path) -> Dict[str, Any]:
    """
    Lê uma fonte de configuração; arquivo vazio equivale a `{}`.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não tiver parser.
        InvalidConfigRootTypeError: Se a raiz não for um mapeamento.
    """
    if not path.is_file():
        raise DefaultsNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    parse = _PARSERS.get(path.suffix.lower())
    if parse is None:
        raise UnsupportedConfigFormatError(
            f"Formato não suportado: {path.suffix or '<sem extensão>'} "
            f"(aceitos: {', '.join(sorted(_PARSERS))})"
        )

    with path.open("r", encoding="utf-8") as fh:
        data = parse(fh)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"{path}: raiz da configuração deve ser um mapeamento, recebido {type(data).__name__}"
        )
    return data


def _validate_engine_section(config: Dict[str, Any], sources: List[str]) -> None:
    try:
        resolve_engine_config(config)
    except EngineConfigurationError as exc:
        raise EngineConfigurationError(
            message=f"{exc.message} (fontes: {', '.join(sources)})",
            details={**exc.details, "sources": list(sources)},
            hint=exc.hint,
        ) from exc


def load_config(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega, mescla e valida a configuração efetiva do engine.

    Args:
        defaults_path (str): Caminho do arquivo base.
        local_path (Optional[str]): Caminho opcional de overrides locais.

    Returns:
        Dict[str, Any]: Configuração mesclada, aceita por `resolve_engine_config`.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        ConfigTypeConflictError: Se defaults e local divergirem em estrutura.
        EngineConfigurationError: Se a seção `engine` resultante for inválida;
            `details["sources"]` lista os arquivos lidos.
    """
    sources = [str(defaults_path)]
    effective = _read_source(Path(defaults_path))

    if local_path is not None and Path(local_path).is_file():
        sources.append(str(local_path))
        effective = deep_merge(effective, _read_source(Path(local_path)))

    _validate_engine_section(effective, sources)
    return effective
