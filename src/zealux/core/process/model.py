"""
Modelo de dados canônico de um processo do Zealux.

Este módulo define as estruturas declarativas que descrevem um processo:
um grafo dirigido de fases nomeadas, suas conexões e o contexto mutável
compartilhado durante uma execução.

Componentes principais:
    - Phase       → contrato mínimo de uma fase (name + execute)
    - Connection  → aresta dirigida com transform opcional
    - Termination → marcador nomeado de fim de fluxo
    - PhaseNode   → vértice do grafo (fase + próximo passo)
    - Process     → raiz agregada (fases, contexto, nó inicial)
    - Continue/End → variante tipada do campo `next`, resolvida pelo planner

Princípios fundamentais:
    - Declarações não possuem comportamento próprio
    - Conformidade de fases é estrutural (Protocol), não por herança
    - O campo `next` polimórfico é resolvido uma única vez, no planejamento

Invariantes:
    - `PhaseNode.id` deve ser igual à chave em `Process.phases`
      (garantido pelo validator, não pelo engine)
    - Existe exatamente um Context vivo por execução

Limites explícitos:
    - Não valida estrutura (ver `core.engine.validator`)
    - Não executa fases
    - Não define lógica de negócio

Este módulo existe para dar forma explícita e tipada ao grafo de fases.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Protocol,
    Tuple,
    Union,
    runtime_checkable,
)


Context = Dict[str, Any]

TransformFn = Callable[[Any, Context], Tuple[Any, Context]]
TerminateFn = Callable[[Any, Context], Any]


@runtime_checkable
class Phase(Protocol):
    """
    Contrato canônico de uma fase.

    Uma fase é a menor unidade de computação do processo: recebe um input
    e produz um output. `execute` pode ser uma coroutine function ou uma
    função comum; quando o retorno é awaitable, o engine aguarda o valor.

    Decisões arquiteturais:
        - Conformidade por duck typing (@runtime_checkable)
        - Fases não conhecem o grafo, o engine nem o contexto
        - Fases são referenciadas, somente leitura, por um ou mais PhaseNodes

    Limites explícitos:
        - Não define retry ou timeout
        - Não registra eventos de rastreabilidade
    """

    name: str

    def execute(self, input: Any) -> Union[Any, Awaitable[Any]]:
        """Executa a fase para um input e retorna (ou aguarda) o output."""
        ...


@dataclass(frozen=True)
class FunctionPhase:
    """Adapter que expõe um callable (sync ou async) como Phase."""

    name: str
    fn: Callable[[Any], Any]

    def execute(self, input: Any) -> Any:
        return self.fn(input)


@dataclass(frozen=True)
class Connection:
    """
    Aresta dirigida entre dois PhaseNodes.

    Campos:
        - target_phase_node_id: id do nó destino em `Process.phases`
        - transform: callable opcional `(output, context) -> (input, context)`,
          avaliado uma vez por travessia da aresta
    """

    target_phase_node_id: str
    transform: Optional[TransformFn] = None


@dataclass(frozen=True)
class Termination:
    """
    Marcador nomeado de fim de fluxo, usado no lugar de uma lista de conexões.

    O resultado do nó é registrado sob `id` (distinto do id do nó dono).
    Quando `terminate` existe, seu retorno substitui o output bruto.
    """

    id: str
    terminate: Optional[TerminateFn] = None


Next = Union[List[Connection], Termination, None]


@dataclass
class PhaseNode:
    """Vértice do grafo: uma fase e seu próximo passo (conexões ou término)."""

    id: str
    phase: Phase
    next: Next = field(default_factory=list)
    is_end_phase: bool = False


@dataclass
class Process:
    """
    Raiz agregada de um processo.

    O Process é construído pelo chamador antes da execução e consumido por
    ela; o contexto pode ser substituído por transforms durante a run e a
    última versão é escrita de volta em `context`.
    """

    name: str
    phases: Dict[str, PhaseNode]
    start_phase_id: str
    context: Context = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Variante tipada do campo `next`
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Continue:
    """Continuação do fluxo por zero ou mais arestas (zero = fim implícito)."""

    edges: Tuple[Connection, ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.edges


@dataclass(frozen=True)
class End:
    """Fim nomeado do fluxo, com callback opcional de término."""

    id: str
    terminate: Optional[TerminateFn] = None


NextStep = Union[Continue, End]
