"""
Resolução das configurações do engine.

Este módulo lê a seção `engine` da configuração efetiva, aplica os
defaults canônicos e valida os valores antes de qualquer execução.

Chaves suportadas (v1):
    - log_level: nível mínimo dos eventos registrados (DEBUG, INFO, WARNING, ERROR)
    - max_concurrency: limite de chamadas `execute` simultâneas (null = sem limite)
    - run_id_prefix: prefixo dos run_ids gerados
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from zealux.core.errors import engine_configuration_error
from zealux.core.exceptions import EngineConfigurationError

from .errors import ConfigTypeConflictError
from .merge import deep_merge


LOG_LEVELS: Dict[str, int] = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}

DEFAULT_CONFIG: Dict[str, Any] = {
    "engine": {
        "log_level": "INFO",
        "max_concurrency": None,
        "run_id_prefix": "run",
    }
}


@dataclass(frozen=True)
class EngineSettings:
    log_level: str = "INFO"
    max_concurrency: Optional[int] = None
    run_id_prefix: str = "run"


def _invalid(key: str, value: Any, expected: str) -> EngineConfigurationError:
    payload = engine_configuration_error(
        message=f"Valor inválido para engine.{key}: {value!r}",
        details={"key": f"engine.{key}", "value": repr(value), "expected": expected},
    )
    return EngineConfigurationError(message=payload.message, details=payload.details, hint=payload.hint)


def _invalid_section(exc: ConfigTypeConflictError) -> EngineConfigurationError:
    payload = engine_configuration_error(
        message=str(exc),
        details={"key": "engine", "expected": "types compatible with the defaults"},
    )
    return EngineConfigurationError(message=payload.message, details=payload.details, hint=payload.hint)


def resolve_engine_config(config: Optional[Mapping[str, Any]] = None) -> EngineSettings:
    """
    Resolve e valida as configurações do engine.

    Args:
        config: Configuração efetiva (ex.: retorno de `load_config`) ou None.

    Returns:
        EngineSettings: Configurações imutáveis com defaults aplicados.

    Raises:
        EngineConfigurationError: Se algum valor for inválido.
    """
    try:
        effective = deep_merge(DEFAULT_CONFIG, dict(config or {}))
    except ConfigTypeConflictError as exc:
        raise _invalid_section(exc) from exc
    engine_cfg = effective.get("engine") or {}
    if not isinstance(engine_cfg, dict):
        raise _invalid("*", engine_cfg, "mapping")

    level = engine_cfg.get("log_level", "INFO")
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise _invalid("log_level", level, "one of " + ", ".join(LOG_LEVELS))

    limit = engine_cfg.get("max_concurrency")
    if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit < 1):
        raise _invalid("max_concurrency", limit, "null or int >= 1")

    prefix = engine_cfg.get("run_id_prefix", "run")
    if not isinstance(prefix, str) or not prefix.strip():
        raise _invalid("run_id_prefix", prefix, "non-empty string")

    return EngineSettings(
        log_level=level.upper(),
        max_concurrency=limit,
        run_id_prefix=prefix,
    )
