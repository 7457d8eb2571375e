"""
Zealux: Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Zealux.
Erros de execução fazem parte do resultado de uma run e devem ser:

- explícitos
- serializáveis
- rastreáveis até o nó (ou término) que os originou

Nenhuma falha local é descartada silenciosamente.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Sequence


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ZealuxErrorPayload:
    """
    Payload canônico de erro do Zealux.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Definição do processo
PROCESS_DEFINITION_INVALID = "PROCESS_DEFINITION_INVALID"
START_PHASE_NOT_FOUND = "START_PHASE_NOT_FOUND"

# Falhas locais durante a run
PHASE_EXECUTION_ERROR = "PHASE_EXECUTION_ERROR"
TRANSFORM_ERROR = "TRANSFORM_ERROR"
TERMINATION_ERROR = "TERMINATION_ERROR"
PROCESS_COMPLETED_WITH_ERRORS = "PROCESS_COMPLETED_WITH_ERRORS"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def process_definition_invalid(
    *,
    defects: Sequence[str],
    hint: str = "Corrija as definições apontadas antes de executar o processo. Nenhuma fase foi executada.",
) -> ZealuxErrorPayload:
    return ZealuxErrorPayload(
        type=PROCESS_DEFINITION_INVALID,
        message="Definição de processo inválida",
        details={"defects": list(defects)},
        hint=hint,
    )


def phase_execution_error(
    *,
    node_id: str,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique a implementação da fase; apenas o ramo deste nó foi interrompido.",
) -> ZealuxErrorPayload:
    return ZealuxErrorPayload(
        type=PHASE_EXECUTION_ERROR,
        message="Falha durante a execução da fase",
        details={
            "node_id": node_id,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def transform_error(
    *,
    source_node_id: Optional[str],
    target_node_id: str,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Ajuste o transform da conexão; as demais arestas do nó de origem seguiram normalmente.",
) -> ZealuxErrorPayload:
    return ZealuxErrorPayload(
        type=TRANSFORM_ERROR,
        message="Falha no transform da conexão",
        details={
            "source_node_id": source_node_id,
            "target_node_id": target_node_id,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def termination_error(
    *,
    termination_id: str,
    node_id: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Ajuste o callback `terminate`; o resultado deste término não foi registrado.",
) -> ZealuxErrorPayload:
    return ZealuxErrorPayload(
        type=TERMINATION_ERROR,
        message="Falha no callback de término",
        details={
            "termination_id": termination_id,
            "node_id": node_id,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def process_completed_with_errors(
    *,
    errors: List[Dict[str, Any]],
    hint: str = "O resultado é parcial. Inspecione `errors` para localizar os ramos interrompidos.",
) -> ZealuxErrorPayload:
    return ZealuxErrorPayload(
        type=PROCESS_COMPLETED_WITH_ERRORS,
        message="Process execution completed with errors",
        details={"count": len(errors), "errors": errors},
        hint=hint,
    )


def engine_execution_error(
    *,
    node_id: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o log de eventos da run para diagnosticar a falha. Nenhum retry é aplicado.",
) -> ZealuxErrorPayload:
    return ZealuxErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message="Falha inesperada durante a orquestração do processo",
        details={
            "node_id": node_id,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def engine_configuration_error(
    *,
    message: str = "Configuração inválida para execução do processo",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Revise a seção `engine` da configuração antes de reexecutar.",
) -> ZealuxErrorPayload:
    return ZealuxErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=message,
        details=details or {},
        hint=hint,
    )
