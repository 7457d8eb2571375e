"""
Validator estrutural de definições de processo.

Este módulo inspeciona uma definição de processo, sem executar nada, e
reporta todos os defeitos estruturais e referenciais que consegue
detectar.

A entrada é tratada como não confiável: pode ser um `Process`, um objeto
qualquer do host, um mapeamento carregado de YAML/JSON ou até `None`.

Política de validação:
    - Raiz ausente ou que não é um objeto → um único defeito e fim
    - Demais verificações são independentes e **acumulam** defeitos
    - Nós inalcançáveis a partir do nó inicial não são defeitos
    - Apenas referências pendentes (dangling) são reportadas

Invariantes garantidos quando a lista de defeitos é vazia:
    1. `phases` é um mapeamento não vazio sempre que `start_phase_id` existe
    2. `start_phase_id` referencia um nó existente
    3. O `id` de cada nó é igual à sua chave
    4. Todo nó possui uma fase com `execute` chamável
    5. Toda conexão aponta para um nó existente e todo transform é chamável

Limites explícitos:
    - Não executa fases, transforms ou callbacks de término
    - Nunca lança exceção
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, FrozenSet, List, Set

from zealux.core.process.shapes import get_field, is_record


MISSING_PROCESS = "Process definition is missing or not an object."


@dataclass(frozen=True)
class ProcessInspection:
    """Defeitos encontrados e nós alcançáveis a partir do nó inicial."""

    defects: List[str]
    reachable: FrozenSet[str]

    @property
    def ok(self) -> bool:
        return not self.defects


def _check_connections(node_key: str, edges: Any, phases: Any, errors: List[str]) -> None:
    for connection in edges:
        target = get_field(connection, "target_phase_node_id")
        if not is_record(connection) or not isinstance(target, str) or not target:
            errors.append(
                f'PhaseNode "{node_key}" has an invalid connection '
                f"(target_phase_node_id missing or invalid)."
            )
        elif isinstance(phases, Mapping) and target not in phases:
            errors.append(
                f'PhaseNode "{node_key}" has a connection to non-existent '
                f'target_phase_node_id "{target}".'
            )

        transform = get_field(connection, "transform")
        if transform is not None and not callable(transform):
            errors.append(
                f'PhaseNode "{node_key}" has a connection to "{target}" with an '
                f"invalid transform (should be callable)."
            )


def _check_next(node_key: str, next_value: Any, phases: Any, errors: List[str]) -> None:
    # None é fim implícito, não defeito.
    if next_value is None:
        return

    if isinstance(next_value, (list, tuple)):
        _check_connections(node_key, next_value, phases, errors)
        return

    if is_record(next_value):
        termination_id = get_field(next_value, "id")
        terminate = get_field(next_value, "terminate")
        if not isinstance(termination_id, str) or not termination_id or (
            terminate is not None and not callable(terminate)
        ):
            errors.append(
                f'PhaseNode "{node_key}" has an invalid Termination for \'next\'. '
                f"It must have a non-empty 'id' and, if present, a callable 'terminate'."
            )
        return

    errors.append(
        f'PhaseNode "{node_key}" has an invalid \'next\' property type. '
        f"Expected a list of Connections or a Termination."
    )


def _walk_reachable(phases: Mapping, start_phase_id: str) -> FrozenSet[str]:
    """Busca em profundidade, best-effort, ignorando qualquer forma inesperada."""
    visited: Set[str] = set()
    stack: List[str] = [start_phase_id]
    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)
        next_value = get_field(phases.get(current), "next")
        if not isinstance(next_value, (list, tuple)):
            continue
        for connection in next_value:
            target = get_field(connection, "target_phase_node_id")
            if isinstance(target, str) and target in phases and target not in visited:
                stack.append(target)
    return frozenset(visited)


def inspect_process(process: Any) -> ProcessInspection:
    """
    Inspeciona uma definição de processo e coleta todos os defeitos.

    Além da lista de defeitos, calcula o conjunto de nós alcançáveis a
    partir do nó inicial, usado apenas para registro (nunca como defeito).

    Args:
        process: Definição não confiável (objeto, mapeamento ou None).

    Returns:
        ProcessInspection: Defeitos (em ordem de descoberta) e nós alcançáveis.
    """
    if not is_record(process):
        return ProcessInspection(defects=[MISSING_PROCESS], reachable=frozenset())

    errors: List[str] = []
    phases = get_field(process, "phases")
    start_phase_id = get_field(process, "start_phase_id")
    phases_ok = isinstance(phases, Mapping)

    if not phases_ok:
        errors.append("Process 'phases' collection is missing or not a mapping.")

    if not isinstance(start_phase_id, str) or not start_phase_id:
        errors.append("Process 'start_phase_id' is missing or invalid.")
    elif phases_ok and start_phase_id not in phases:
        errors.append(f'Start phase ID "{start_phase_id}" does not exist in the phases collection.')

    node_keys = list(phases.keys()) if phases_ok else []
    if not node_keys and isinstance(start_phase_id, str) and start_phase_id:
        errors.append("Process has a start_phase_id but no phases defined.")

    for key in node_keys:
        node = phases[key]
        if not is_record(node):
            errors.append(f'PhaseNode definition for ID "{key}" is missing or invalid.')
            continue

        node_id = get_field(node, "id")
        if node_id != key:
            errors.append(f'PhaseNode ID "{node_id}" does not match its key "{key}" in the phases collection.')

        phase = get_field(node, "phase")
        if not is_record(phase) or not callable(get_field(phase, "execute")):
            errors.append(f'PhaseNode "{key}" is missing a valid phase instance with an execute method.')

        _check_next(key, get_field(node, "next"), phases, errors)

        is_end_phase = get_field(node, "is_end_phase")
        if is_end_phase is not None and not isinstance(is_end_phase, bool):
            errors.append(f'PhaseNode "{key}" has an invalid \'is_end_phase\' value. Expected a boolean.')

    reachable: FrozenSet[str] = frozenset()
    if phases_ok and isinstance(start_phase_id, str) and start_phase_id in phases:
        reachable = _walk_reachable(phases, start_phase_id)

    return ProcessInspection(defects=errors, reachable=reachable)


def validate_process(process: Any) -> List[str]:
    """
    Valida uma definição de processo sem executá-la.

    Returns:
        List[str]: Defeitos encontrados; lista vazia ⇒ seguro para executar.
    """
    return inspect_process(process).defects
