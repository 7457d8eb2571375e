# tests/core/traceability/test_manifest.py
"""
Testes do Manifest de execução.

Os testes asseguram que:
- o Manifest inicial não emite eventos implicitamente
- o ciclo de vida de um nó (started → finished | failed) é registrado
- o encerramento da run consolida status e contagem de erros
- o Manifest é serializável e reconstruível a partir de dict
- o Engine preenche o Manifest de uma run real

Invariantes:
    - Timestamps são UTC timezone-aware (naive é assumido UTC)
    - `events` preserva a ordem de chamada
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

try:
    from zealux.core.traceability.manifest import (
        ZealuxManifest,
        add_event,
        create_manifest,
        node_failed,
        node_finished,
        node_started,
        run_finished,
    )
except Exception as e:  # noqa: BLE001
    create_manifest = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing manifest module (src/zealux/core/traceability/manifest.py): {_IMPORT_ERR}")


T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _manifest():
    return create_manifest(
        run_id="run-1",
        process_name="Demo",
        started_at=T0,
        zealux_version="0.1.0",
        config_hash="abc",
    )


def test_create_manifest_has_no_events():
    _require_imports()
    m = _manifest()
    assert m.run == {
        "run_id": "run-1",
        "process": "Demo",
        "started_at": "2026-01-01T12:00:00+00:00",
        "zealux_version": "0.1.0",
    }
    assert m.inputs == {"config_hash": "abc"}
    assert m.nodes == {}
    assert m.events == []


def test_naive_timestamps_are_assumed_utc():
    _require_imports()
    m = create_manifest(
        run_id="r",
        process_name="p",
        started_at=datetime(2026, 1, 1, 12, 0, 0),
        zealux_version="0.1.0",
        config_hash="h",
    )
    assert m.run["started_at"].endswith("+00:00")


def test_node_lifecycle_completed():
    _require_imports()
    m = _manifest()
    node_started(m, node_id="a", phase_name="Load", ts=T0)
    node_finished(m, node_id="a", ts=T0 + timedelta(milliseconds=250))

    node = m.nodes["a"]
    assert node["status"] == "completed"
    assert node["phase"] == "Load"
    assert node["duration_ms"] == 250
    assert [e["event_type"] for e in m.events] == ["node_started", "node_finished"]


def test_node_lifecycle_failed():
    _require_imports()
    m = _manifest()
    error = {"type": "PHASE_EXECUTION_ERROR", "message": "boom", "details": {}, "hint": None}
    node_started(m, node_id="a", phase_name="Load", ts=T0)
    node_failed(m, node_id="a", ts=T0 + timedelta(seconds=1), error=error)

    assert m.nodes["a"]["status"] == "failed"
    assert m.nodes["a"]["error"] == error
    assert m.events[-1]["payload"] == {"error": error}


def test_run_finished_and_round_trip():
    """
    Verifica o encerramento da run e a reconstrução do Manifest a partir
    do dicionário serializado.
    """
    _require_imports()
    m = _manifest()
    add_event(m, event_type="custom", ts=T0, payload={"k": 1})
    run_finished(m, ts=T0, status="completed", result_keys=["a"], error_count=0)

    data = json.loads(m.to_json())
    restored = ZealuxManifest.from_dict(data)

    assert restored.to_dict() == m.to_dict()
    assert restored.run["status"] == "completed"
    assert restored.run["result_keys"] == ["a"]
    assert [e["event_type"] for e in restored.events] == ["custom", "run_finished"]


def test_to_dict_is_an_independent_copy():
    _require_imports()
    m = _manifest()
    snapshot = m.to_dict()
    snapshot["run"]["run_id"] = "changed"
    assert m.run["run_id"] == "run-1"


@pytest.mark.asyncio
async def test_engine_fills_manifest(linear_process):
    _require_imports()
    from zealux.core.config.hashing import compute_config_hash
    from zealux.core.engine.engine import execute_process
    from zealux.version import __version__

    config = {"engine": {"log_level": "WARNING"}}
    result = await execute_process(linear_process, {"data": "m"}, config=config, run_id="run-manifest")

    m = result.manifest
    assert m.run["run_id"] == "run-manifest"
    assert m.run["process"] == "Test Execution Process"
    assert m.run["zealux_version"] == __version__
    assert m.run["status"] == "completed"
    assert m.run["result_keys"] == ["p3"]
    assert m.inputs["config_hash"] == compute_config_hash(config)
    assert {k: v["status"] for k, v in m.nodes.items()} == {
        "p1": "completed",
        "p2": "completed",
        "p3": "completed",
    }
    # log_level WARNING: nenhum evento INFO no log da run
    assert result.events == ()
