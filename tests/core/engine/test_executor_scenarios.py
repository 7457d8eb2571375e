# tests/core/engine/test_executor_scenarios.py
"""
Cenários de referência do Engine.

Este módulo valida o comportamento observável de `execute_process` nos
cenários canônicos de um grafo de fases:

- cadeia linear com fim explícito
- transform de aresta alterando o input do sucessor
- ramificação com múltiplos fins explícitos
- fallback para folhas implícitas quando nenhum fim é marcado
- ciclo sem reexecução de nós
- fim explícito que nunca executa

Decisões arquiteturais:
    - Fases dummy registram cada input recebido (`calls`)
    - Os testes verificam inputs, número de invocações e o mapa de resultados

Limites explícitos:
    - Não valida concorrência (ver test_executor_concurrency.py)
    - Não valida o Manifest em detalhe
"""

import pytest

try:
    from zealux.core.engine.engine import execute_process
    from zealux.core.exceptions import InvalidProcessError
    from zealux.core.process.model import Connection, PhaseNode, Process
except Exception as e:
    execute_process = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Falha ao importar o engine: {_IMPORT_ERR}")


@pytest.mark.asyncio
async def test_linear_process_returns_end_phase_result(linear_process, phases):
    """
    Verifica a cadeia linear p1 → p2 → p3 com p3 marcado como fim.

    Cada fase deve receber exatamente o output do predecessor, e o
    resultado deve conter apenas o nó de fim.
    """
    _require_imports()

    result = await execute_process(linear_process, {"data": "start"})

    assert phases["p1"].calls == [{"data": "start"}]
    assert phases["p2"].calls == [{"data": "phase1 processed start"}]
    assert phases["p3"].calls == [{"data": "phase2 processed phase1 processed start"}]
    assert result.results == {"p3": {"data": "phase3 processed phase2 processed phase1 processed start"}}
    assert result.ok
    assert result.diagnostic is None


@pytest.mark.asyncio
async def test_invalid_process_raises_before_any_phase(linear_process, phases):
    _require_imports()
    linear_process.start_phase_id = "nonexistent"

    with pytest.raises(InvalidProcessError, match="Invalid process definition:"):
        await execute_process(linear_process, {"data": "start"})

    assert all(phase.calls == [] for phase in phases.values())


@pytest.mark.asyncio
async def test_transform_changes_successor_input(linear_process, phases):
    _require_imports()
    seen = []

    def transform(output, context):
        seen.append(output)
        return {"data": f"transformed {output['data']}"}, context

    linear_process.phases["p1"].next = [Connection("p2", transform=transform)]

    await execute_process(linear_process, {"data": "start"})

    assert seen == [{"data": "phase1 processed start"}]
    assert phases["p2"].calls == [{"data": "transformed phase1 processed start"}]
    assert phases["p3"].calls == [{"data": "phase2 processed transformed phase1 processed start"}]


@pytest.mark.asyncio
async def test_branching_returns_every_explicit_end(linear_process, phases, RecordingPhase):
    """
    p1 → {p2, p4}, ambos marcados como fim; p3 fica inalcançável.

    O resultado contém exatamente os dois fins, e p3 nunca executa.
    """
    _require_imports()
    phases["p4"] = RecordingPhase("phase4")
    linear_process.phases["p1"].next = [Connection("p2"), Connection("p4")]
    linear_process.phases["p2"].next = []
    linear_process.phases["p2"].is_end_phase = True
    linear_process.phases["p3"].is_end_phase = False
    linear_process.phases["p4"] = PhaseNode(id="p4", phase=phases["p4"], next=[], is_end_phase=True)

    result = await execute_process(linear_process, {"data": "branch"})

    assert phases["p2"].calls == [{"data": "phase1 processed branch"}]
    assert phases["p4"].calls == [{"data": "phase1 processed branch"}]
    assert phases["p3"].calls == []
    assert result.results == {
        "p2": {"data": "phase2 processed phase1 processed branch"},
        "p4": {"data": "phase4 processed phase1 processed branch"},
    }


@pytest.mark.asyncio
async def test_implicit_leaves_when_no_end_is_marked(RecordingPhase):
    _require_imports()
    p1 = RecordingPhase("nP1", label="p1 out")
    p2 = RecordingPhase("nP2", label="p2 out")
    p3 = RecordingPhase("nP3", label="p3 out")
    process = Process(
        name="No Explicit End",
        start_phase_id="n_p1",
        phases={
            "n_p1": PhaseNode(id="n_p1", phase=p1, next=[Connection("n_p2"), Connection("n_p3")]),
            "n_p2": PhaseNode(id="n_p2", phase=p2, next=[]),
            "n_p3": PhaseNode(id="n_p3", phase=p3, next=[]),
        },
    )

    result = await execute_process(process, {"data": "implicit"})

    assert p2.calls == [{"data": "p1 out implicit"}]
    assert p3.calls == [{"data": "p1 out implicit"}]
    assert result.results == {
        "n_p2": {"data": "p2 out p1 out implicit"},
        "n_p3": {"data": "p3 out p1 out implicit"},
    }


@pytest.mark.asyncio
async def test_cycle_does_not_reexecute_nodes(linear_process, phases):
    """
    p1 → p2 → {p1, p3}: o retorno a p1 reutiliza o output em cache.

    Cada fase é invocada exatamente uma vez e a run termina.
    """
    _require_imports()
    linear_process.phases["p2"].next = [Connection("p1"), Connection("p3")]

    result = await execute_process(linear_process, {"data": "cycle test"})

    assert phases["p1"].calls == [{"data": "cycle test"}]
    assert phases["p2"].calls == [{"data": "phase1 processed cycle test"}]
    assert phases["p3"].calls == [{"data": "phase2 processed phase1 processed cycle test"}]
    assert result.results == {
        "p3": {"data": "phase3 processed phase2 processed phase1 processed cycle test"},
    }


@pytest.mark.asyncio
async def test_self_loop_terminates(RecordingPhase):
    _require_imports()
    loop = RecordingPhase("loop")
    process = Process(
        name="Self loop",
        start_phase_id="a",
        phases={"a": PhaseNode(id="a", phase=loop, next=[Connection("a")])},
    )

    result = await execute_process(process, {"data": "x"})

    assert len(loop.calls) == 1
    # sem fins marcados e sem folhas: resultado vazio, mas sem erros
    assert result.results == {}
    assert result.ok


@pytest.mark.asyncio
async def test_explicit_end_that_never_runs_is_omitted_with_warning(RecordingPhase):
    _require_imports()
    p1 = RecordingPhase("uP1", label="p1 out")
    p2 = RecordingPhase("uP2", label="p2 out")
    p3 = RecordingPhase("uP3", label="p3 out")
    process = Process(
        name="Unreachable End",
        start_phase_id="u_p1",
        phases={
            "u_p1": PhaseNode(id="u_p1", phase=p1, next=[Connection("u_p2")]),
            "u_p2": PhaseNode(id="u_p2", phase=p2, next=[], is_end_phase=True),
            "u_p3": PhaseNode(id="u_p3", phase=p3, next=[], is_end_phase=True),
        },
    )

    result = await execute_process(process, {"data": "unreachable"})

    assert p3.calls == []
    assert result.results == {"u_p2": {"data": "p2 out p1 out unreachable"}}
    assert result.warnings == {
        "u_p3": ['End phase "u_p3" did not complete; it is omitted from the results.'],
    }
    assert result.ok
