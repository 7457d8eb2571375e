"""
Zealux: Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do Zealux.

Objetivo:
- Permitir que o engine levante exceções semânticas tipadas
- Facilitar o mapeamento determinístico para ZealuxErrorPayload
- Evitar ValueError/RuntimeError genéricos nas falhas de orquestração

Regras:
- Apenas definição inválida e falhas internas do engine escapam de uma run.
- Exceções devem carregar apenas dados estruturados (serializáveis).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from .errors import (
    ENGINE_CONFIGURATION_ERROR,
    ENGINE_EXECUTION_ERROR,
    PROCESS_DEFINITION_INVALID,
    START_PHASE_NOT_FOUND,
    TRANSFORM_ERROR,
    ZealuxErrorPayload,
    process_definition_invalid,
)


@dataclass(frozen=True, eq=False)
class ZealuxException(Exception):
    """Base class para exceções internas do Zealux.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    code = ENGINE_EXECUTION_ERROR

    def __str__(self) -> str:
        return self.message

    def to_payload(self) -> ZealuxErrorPayload:
        return ZealuxErrorPayload(
            type=self.code,
            message=self.message,
            details=dict(self.details),
            hint=self.hint,
        )


# ---------------------------------------------------------------------------
# Definição do processo
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class InvalidProcessError(ZealuxException):
    """Definição de processo rejeitada pelo validator; nenhuma fase executou."""

    code = PROCESS_DEFINITION_INVALID

    @classmethod
    def from_defects(cls, defects: Sequence[str]) -> "InvalidProcessError":
        payload = process_definition_invalid(defects=defects)
        return cls(
            message="Invalid process definition:\n" + "\n".join(defects),
            details=payload.details,
            hint=payload.hint,
        )

    @property
    def defects(self) -> list:
        return list(self.details.get("defects", []))


@dataclass(frozen=True, eq=False)
class StartPhaseNotFoundError(ZealuxException):
    """Nó inicial ausente após a validação (verificação defensiva)."""

    code = START_PHASE_NOT_FOUND


# ---------------------------------------------------------------------------
# Falhas locais
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class TransformResultError(ZealuxException):
    """Transform retornou algo diferente de um par `(input, context)`."""

    code = TRANSFORM_ERROR


# ---------------------------------------------------------------------------
# Engine / Configuração
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class EngineConfigurationError(ZealuxException):
    """Configuração inválida ou inconsistente para execução."""

    code = ENGINE_CONFIGURATION_ERROR


@dataclass(frozen=True, eq=False)
class EngineExecutionError(ZealuxException):
    """Violação de invariante interna do engine."""

    code = ENGINE_EXECUTION_ERROR
