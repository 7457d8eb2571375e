"""
Estado de execução de uma run.

Este módulo define o `RunState`, a estrutura exclusiva de uma chamada de
execução que concentra:
    - a arena de `NodeSlot`s (um por nó, indexada por node_id)
    - os resultados de términos nomeados
    - os erros locais registrados durante a run
    - o contexto vivo do processo
    - o log estruturado de eventos e os warnings por nó

Estados de um nó (transições monotônicas, nunca regridem):

    NOT_STARTED → IN_FLIGHT → COMPLETED
                            ↘ FAILED

Princípios fundamentais:
    - Isolamento por execução (cada run possui seu próprio estado)
    - Um nó é invocado no máximo uma vez por run
    - Logs sempre incluem `run_id` e `node_id`

Limites explícitos:
    - Não executa fases
    - Não decide políticas de agregação
    - Não é seguro para compartilhamento entre runs concorrentes
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from zealux.core.config.engine import LOG_LEVELS
from zealux.core.errors import (
    ZealuxErrorPayload,
    engine_execution_error,
    phase_execution_error,
    termination_error,
    transform_error,
)
from zealux.core.exceptions import EngineExecutionError, ZealuxException
from zealux.core.traceability.manifest import ZealuxManifest


class NodeStatus(str, Enum):
    """Estados de execução de um nó dentro de uma run."""

    NOT_STARTED = "not_started"
    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"
    FAILED = "failed"


_TRANSITIONS = {
    NodeStatus.NOT_STARTED: {NodeStatus.IN_FLIGHT},
    NodeStatus.IN_FLIGHT: {NodeStatus.COMPLETED, NodeStatus.FAILED},
    NodeStatus.COMPLETED: set(),
    NodeStatus.FAILED: set(),
}


@dataclass
class NodeSlot:
    """Célula da arena: status, handle pendente e desfecho de um nó."""

    node_id: str
    status: NodeStatus = NodeStatus.NOT_STARTED
    task: Optional[asyncio.Task] = field(default=None, repr=False)
    output: Any = None
    error: Optional[BaseException] = None

    def _move(self, target: NodeStatus) -> None:
        if target not in _TRANSITIONS[self.status]:
            raise EngineExecutionError(
                message=f"Transição inválida para o nó '{self.node_id}': {self.status.value} -> {target.value}",
                details={"node_id": self.node_id, "from": self.status.value, "to": target.value},
            )
        self.status = target

    def start(self) -> None:
        self._move(NodeStatus.IN_FLIGHT)

    def complete(self, output: Any) -> None:
        self._move(NodeStatus.COMPLETED)
        self.output = output

    def fail(self, error: BaseException) -> None:
        self._move(NodeStatus.FAILED)
        self.error = error


@dataclass(frozen=True)
class ExecutionError:
    """
    Falha local registrada durante a run.

    `node_id` identifica onde o erro é contabilizado: o próprio nó (falha
    de fase), o nó destino (falha de transform) ou o id do término (falha
    de callback). `source_node_id` guarda o nó de origem quando difere.
    """

    node_id: str
    error: BaseException
    origin: str = "phase"  # phase | transform | termination | orchestration
    source_node_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_id": self.node_id,
            "origin": self.origin,
            "source_node_id": self.source_node_id,
            "exc_type": type(self.error).__name__,
            "message": str(self.error),
        }

    def to_payload(self) -> ZealuxErrorPayload:
        if isinstance(self.error, ZealuxException) and self.origin == "orchestration":
            return self.error.to_payload()

        exc_type = type(self.error).__name__
        exc_message = str(self.error) or None
        if self.origin == "transform":
            return transform_error(
                source_node_id=self.source_node_id,
                target_node_id=self.node_id,
                exc_type=exc_type,
                exc_message=exc_message,
            )
        if self.origin == "termination":
            return termination_error(
                termination_id=self.node_id,
                node_id=self.source_node_id,
                exc_type=exc_type,
                exc_message=exc_message,
            )
        if self.origin == "orchestration":
            return engine_execution_error(node_id=self.node_id, exc_type=exc_type, exc_message=exc_message)
        return phase_execution_error(node_id=self.node_id, exc_type=exc_type, exc_message=exc_message)


@dataclass
class RunState:
    """
    Estado exclusivo de uma chamada de execução.

    Campos canônicos:
    - run_id: identificador único da execução
    - created_at: timestamp UTC de criação
    - config: configuração efetiva
    - context: contexto vivo do processo (substituível por transforms)
    - log_level: nível mínimo dos eventos registrados
    - manifest: Manifest da run, quando houver
    """

    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    context: Any = None
    log_level: str = "INFO"
    manifest: Optional[ZealuxManifest] = None

    slots: Dict[str, NodeSlot] = field(default_factory=dict)
    terminations: Dict[str, Any] = field(default_factory=dict)
    errors: List[ExecutionError] = field(default_factory=list)

    events: List[Dict[str, Any]] = field(default_factory=list)
    warnings: Dict[str, List[str]] = field(default_factory=dict)

    # -----------------------------
    # Arena
    # -----------------------------
    def slot(self, node_id: str) -> NodeSlot:
        if node_id not in self.slots:
            self.slots[node_id] = NodeSlot(node_id=node_id)
        return self.slots[node_id]

    def status_of(self, node_id: str) -> NodeStatus:
        s = self.slots.get(node_id)
        return s.status if s is not None else NodeStatus.NOT_STARTED

    def pending_tasks(self) -> List[asyncio.Task]:
        return [s.task for s in list(self.slots.values()) if s.task is not None and not s.task.done()]

    def completed_outputs(self) -> Dict[str, Any]:
        return {
            node_id: s.output
            for node_id, s in self.slots.items()
            if s.status is NodeStatus.COMPLETED
        }

    # -----------------------------
    # Erros
    # -----------------------------
    def record_error(
        self,
        node_id: str,
        error: BaseException,
        *,
        origin: str = "phase",
        source_node_id: Optional[str] = None,
    ) -> ExecutionError:
        record = ExecutionError(node_id=node_id, error=error, origin=origin, source_node_id=source_node_id)
        self.errors.append(record)
        return record

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, node_id: Optional[str], level: str, message: str, **extra: Any) -> None:
        if LOG_LEVELS.get(level, 0) < LOG_LEVELS.get(self.log_level, 0):
            return
        event = {
            "run_id": self.run_id,
            "node_id": node_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, node_id: str, message: str) -> None:
        if node_id not in self.warnings:
            self.warnings[node_id] = []
        self.warnings[node_id].append(message)
