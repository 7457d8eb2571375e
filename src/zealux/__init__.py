"""
Zealux: engine de execução de grafos de fases.

Este pacote raiz define o namespace público do Zealux: um primitivo de
orquestração, embutível em aplicações host, que executa um grafo de fases
nomeadas em ordem de dependência a partir de um nó inicial, propagando o
output de cada fase como input de seus sucessores e coletando resultados
nos pontos de fim.

Arquitetura em alto nível:
    - core.process      → declarações e predicados estruturais
    - core.engine       → validação, planejamento, execução e agregação
    - core.config       → carregamento, merge e hashing de configuração
    - core.traceability → Manifest da run

Limites explícitos:
    - Não define fases concretas de negócio
    - Não define formato de autoria ou carga de processos
    - Não persiste estado entre execuções
"""

from .core.config import load_config
from .core.engine import (
    Engine,
    ExecutionError,
    ProcessResult,
    execute_process,
    run_process,
    validate_process,
)
from .core.exceptions import (
    EngineConfigurationError,
    EngineExecutionError,
    InvalidProcessError,
    StartPhaseNotFoundError,
    TransformResultError,
    ZealuxException,
)
from .core.process import (
    Connection,
    Context,
    FunctionPhase,
    Phase,
    PhaseNode,
    Process,
    Termination,
    is_connection,
    is_phase,
    is_phase_node,
    is_process,
    is_termination,
)
from .version import __version__

__all__ = [
    "__version__",
    "load_config",
    "Engine",
    "ExecutionError",
    "ProcessResult",
    "execute_process",
    "run_process",
    "validate_process",
    "EngineConfigurationError",
    "EngineExecutionError",
    "InvalidProcessError",
    "StartPhaseNotFoundError",
    "TransformResultError",
    "ZealuxException",
    "Connection",
    "Context",
    "FunctionPhase",
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
