# tests/core/engine/test_aggregator.py
"""
Testes unitários do agregador de resultados.

As duas políticas (fim explícito e folha implícita) são mutuamente
exclusivas; resultados de término são sempre mesclados por último.
"""

from datetime import datetime, timezone

import pytest

try:
    from zealux.core.engine.aggregator import aggregate_errors, gather
    from zealux.core.engine.planner import NodePlan, ProcessPlan
    from zealux.core.engine.state import RunState
    from zealux.core.process.model import Connection, Continue, End
except Exception as e:  # noqa: BLE001
    gather = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Falha ao importar o agregador: {_IMPORT_ERR}")


def _plan(**nodes):
    return ProcessPlan(name="agg", start_phase_id=next(iter(nodes)), nodes=nodes)


def _state(completed):
    state = RunState(run_id="r", created_at=datetime.now(timezone.utc), config={})
    for node_id, output in completed.items():
        slot = state.slot(node_id)
        slot.start()
        slot.complete(output)
    return state


def test_explicit_end_policy_excludes_unmarked_leaves():
    _require_imports()
    plan = _plan(
        a=NodePlan(id="a", phase=None, next=Continue((Connection("b"), Connection("c")))),
        b=NodePlan(id="b", phase=None, next=Continue(()), is_end_phase=True),
        c=NodePlan(id="c", phase=None, next=Continue(())),
    )
    state = _state({"a": 1, "b": 2, "c": 3})

    assert gather(plan, state) == {"b": 2}


def test_implicit_leaf_policy_when_nothing_is_marked():
    _require_imports()
    plan = _plan(
        a=NodePlan(id="a", phase=None, next=Continue((Connection("b"), Connection("c")))),
        b=NodePlan(id="b", phase=None, next=Continue(())),
        c=NodePlan(id="c", phase=None, next=End("t")),
    )
    state = _state({"a": 1, "b": 2, "c": 3})

    assert gather(plan, state) == {"b": 2}


def test_end_node_may_have_outgoing_edges():
    _require_imports()
    plan = _plan(
        a=NodePlan(id="a", phase=None, next=Continue((Connection("b"),)), is_end_phase=True),
        b=NodePlan(id="b", phase=None, next=Continue(())),
    )
    state = _state({"a": "mid", "b": "tail"})

    assert gather(plan, state) == {"a": "mid"}


def test_missing_end_node_is_warned():
    _require_imports()
    plan = _plan(
        a=NodePlan(id="a", phase=None, next=Continue(()), is_end_phase=True),
        b=NodePlan(id="b", phase=None, next=Continue(()), is_end_phase=True),
    )
    state = _state({"a": "ok"})

    assert gather(plan, state) == {"a": "ok"}
    assert state.warnings == {"b": ['End phase "b" did not complete; it is omitted from the results.']}
    assert state.events[-1]["level"] == "WARNING"
    assert state.events[-1]["status"] == "not_started"


def test_terminations_override_on_key_collision():
    _require_imports()
    plan = _plan(a=NodePlan(id="a", phase=None, next=Continue(()), is_end_phase=True))
    state = _state({"a": "node"})
    state.terminations["a"] = "termination"
    state.terminations["z"] = "other"

    assert gather(plan, state) == {"a": "termination", "z": "other"}


def test_aggregate_errors():
    _require_imports()
    assert aggregate_errors([]) is None

    state = _state({})
    state.record_error("x", RuntimeError("boom"))
    payload = aggregate_errors(state.errors)

    assert payload.type == "PROCESS_COMPLETED_WITH_ERRORS"
    assert payload.details["count"] == 1
    assert payload.details["errors"][0]["node_id"] == "x"
    assert payload.to_dict()["hint"]
