"""
Agregador de resultados de uma run.

Deriva o conjunto final de resultados a partir do plano e do estado da
run, sob uma de duas políticas mutuamente exclusivas:

    - Fim explícito: se **qualquer** nó declara `is_end_phase`, o resultado
      contém apenas esses nós (os que de fato completaram). Nós folha não
      marcados nunca aparecem, mesmo sem arestas de saída.
    - Folha implícita: se nenhum nó declara `is_end_phase`, o resultado
      contém todo nó que completou e não possui conexões de saída.

Resultados de términos nomeados são mesclados por último, sob o id do
término, qualquer que seja a política aplicada.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from zealux.core.errors import ZealuxErrorPayload, process_completed_with_errors

from .planner import ProcessPlan
from .state import ExecutionError, RunState


def gather(plan: ProcessPlan, state: RunState) -> Dict[str, Any]:
    completed = state.completed_outputs()
    end_ids = plan.end_node_ids
    results: Dict[str, Any] = {}

    if end_ids:
        for node_id in end_ids:
            if node_id in completed:
                results[node_id] = completed[node_id]
                continue
            message = f'End phase "{node_id}" did not complete; it is omitted from the results.'
            state.add_warning(node_id=node_id, message=message)
            state.log(node_id=node_id, level="WARNING", message=message, status=state.status_of(node_id).value)
    else:
        for node_id, output in completed.items():
            if plan.nodes[node_id].is_leaf:
                results[node_id] = output

    results.update(state.terminations)
    return results


def aggregate_errors(errors: List[ExecutionError]) -> Optional[ZealuxErrorPayload]:
    """Consolida os erros locais em um único diagnóstico (None se não houver)."""
    if not errors:
        return None
    return process_completed_with_errors(errors=[e.to_dict() for e in errors])
