"""
Engine do Zealux.

Este pacote contém a implementação responsável por **validar**,
**planejar**, **executar** e **agregar** uma run de processo.

Componentes principais:
    - validator  → inspeção estrutural exaustiva, sem efeitos colaterais
    - planner    → compilação do processo validado em um plano tipado
    - state      → arena de estados por nó, erros e log da run
    - engine     → execução assíncrona com memoização e fan-out
    - aggregator → derivação do conjunto final de resultados

Invariantes:
    - Nenhuma fase executa se a definição tiver defeitos
    - Cada nó é invocado no máximo uma vez por run, mesmo sob ciclos
    - Falhas locais nunca cancelam ramos irmãos

Limites explícitos:
    - Não define fases de domínio
    - Não persiste estado entre runs
    - Não aplica retry, timeout ou prioridade
"""

from .aggregator import aggregate_errors, gather
from .engine import Engine, ProcessResult, execute_process, run_process
from .planner import NodePlan, ProcessPlan, compile_process, resolve_next
from .state import ExecutionError, NodeSlot, NodeStatus, RunState
from .validator import ProcessInspection, inspect_process, validate_process

__all__ = [
    "aggregate_errors",
    "gather",
    "Engine",
    "ProcessResult",
    "execute_process",
    "run_process",
    "NodePlan",
    "ProcessPlan",
    "compile_process",
    "resolve_next",
    "ExecutionError",
    "NodeSlot",
    "NodeStatus",
    "RunState",
    "ProcessInspection",
    "inspect_process",
    "validate_process",
]
