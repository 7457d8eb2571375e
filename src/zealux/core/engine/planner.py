"""
Planejador de execução de processos.

Este módulo transforma uma definição de processo já validada em um
`ProcessPlan`: uma visão tipada e imutável do grafo, em que o campo
`next` polimórfico de cada nó é resolvido uma única vez para a variante
`Continue(edges)` ou `End(id, terminate)`.

Com isso, o engine nunca reexamina formas em tempo de travessia: a
decisão "lista de conexões vs. término" é tomada aqui.

Decisões arquiteturais:
    - A validação estrutural ocorre antes do planejamento
    - Definições inválidas são falhas fatais (InvalidProcessError)
    - Definições podem ser objetos ou mapeamentos; o plano é sempre tipado
    - Ciclos são permitidos: a memoização do engine garante término

Invariantes:
    - Todo nó do plano possui exatamente uma variante de `next`
    - Toda aresta do plano aponta para um nó existente
    - A ordem de declaração das arestas é preservada

Limites explícitos:
    - Não executa fases
    - Não interage com o estado da run
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Mapping

from zealux.core.exceptions import InvalidProcessError
from zealux.core.process.model import Connection, Continue, End, NextStep
from zealux.core.process.shapes import get_field, is_record

from .validator import inspect_process


@dataclass(frozen=True)
class NodePlan:
    """Nó resolvido: fase, variante de `next` e marcação de fim explícito."""

    id: str
    phase: Any
    next: NextStep
    is_end_phase: bool = False

    @property
    def phase_name(self) -> str:
        name = get_field(self.phase, "name")
        return name if isinstance(name, str) else self.id

    @property
    def is_leaf(self) -> bool:
        return isinstance(self.next, Continue) and self.next.is_leaf


@dataclass(frozen=True)
class ProcessPlan:
    """Visão tipada e imutável de um processo validado."""

    name: str
    start_phase_id: str
    nodes: Mapping[str, NodePlan]
    reachable: FrozenSet[str] = frozenset()

    @property
    def end_node_ids(self) -> List[str]:
        return [node_id for node_id, node in self.nodes.items() if node.is_end_phase]

    @property
    def unreachable(self) -> List[str]:
        return [node_id for node_id in self.nodes if node_id not in self.reachable]


def resolve_next(value: Any) -> NextStep:
    """
    Resolve o campo `next` de um nó para a variante tipada.

    - None ou lista vazia → `Continue(())` (fim implícito)
    - lista/tupla de conexões → `Continue(edges)`
    - registro com `id` → `End(id, terminate)`

    Raises:
        ValueError: Se a forma não corresponder a nenhuma variante.
    """
    if value is None:
        return Continue(())

    if isinstance(value, (list, tuple)):
        edges = []
        for connection in value:
            if isinstance(connection, Connection):
                edges.append(connection)
            else:
                edges.append(
                    Connection(
                        target_phase_node_id=get_field(connection, "target_phase_node_id"),
                        transform=get_field(connection, "transform"),
                    )
                )
        return Continue(tuple(edges))

    if is_record(value) and isinstance(get_field(value, "id"), str):
        return End(id=get_field(value, "id"), terminate=get_field(value, "terminate"))

    raise ValueError(f"Unsupported 'next' value: {type(value).__name__}")


def compile_process(process: Any) -> ProcessPlan:
    """
    Valida e compila uma definição de processo em um `ProcessPlan`.

    Args:
        process: Definição do processo (objeto ou mapeamento).

    Returns:
        ProcessPlan: Plano tipado, com variantes de `next` resolvidas.

    Raises:
        InvalidProcessError: Se o validator reportar qualquer defeito.
    """
    inspection = inspect_process(process)
    if inspection.defects:
        raise InvalidProcessError.from_defects(inspection.defects)

    phases = get_field(process, "phases")
    nodes: Dict[str, NodePlan] = {}
    for node_id, node in phases.items():
        nodes[node_id] = NodePlan(
            id=node_id,
            phase=get_field(node, "phase"),
            next=resolve_next(get_field(node, "next")),
            is_end_phase=get_field(node, "is_end_phase", False) is True,
        )

    name = get_field(process, "name")
    return ProcessPlan(
        name=name if isinstance(name, str) else "",
        start_phase_id=get_field(process, "start_phase_id"),
        nodes=nodes,
        reachable=inspection.reachable,
    )
