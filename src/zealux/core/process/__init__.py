"""
# Process Core: Zealux

Este pacote define as **declarações** que descrevem um processo no Zealux
e os **predicados estruturais** usados na fronteira externa.

## Componentes

- **model**
  - `Phase` (Protocol), `FunctionPhase`
  - `Connection`, `Termination`, `PhaseNode`, `Process`
  - `Continue` / `End`: variante tipada do campo `next`

- **shapes**
  - `is_phase`, `is_connection`, `is_termination`, `is_phase_node`, `is_process`

## Limites Explícitos

- Não valida referências entre nós (ver `core.engine.validator`)
- Não executa fases
"""

from .model import (
    Connection,
    Context,
    Continue,
    End,
    FunctionPhase,
    NextStep,
    Phase,
    PhaseNode,
    Process,
    Termination,
)
from .shapes import (
    is_connection,
    is_phase,
    is_phase_node,
    is_process,
    is_termination,
)

__all__ = [
    "Connection",
    "Context",
    "Continue",
    "End",
    "FunctionPhase",
    "NextStep",
    "Phase",
    "PhaseNode",
    "Process",
    "Termination",
    "is_connection",
    "is_phase",
    "is_phase_node",
    "is_process",
    "is_termination",
]
