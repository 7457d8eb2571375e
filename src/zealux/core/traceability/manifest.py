"""
Manifest de execução do Zealux (v1).

Este módulo define o Manifest: o registro forense, em memória e
serializável em JSON, de uma única run de processo.

O Manifest consolida:
    - run: metadados da execução (run_id, process, started_at, versão)
    - inputs: hash da configuração efetiva
    - nodes: estado incremental de cada nó executado
    - events: Event Log ordenado de eventos explícitos

Decisões arquiteturais:
    - O Manifest não emite eventos implicitamente
    - Nós e eventos são atualizados apenas por chamadas explícitas da API
    - Timestamps são sempre UTC timezone-aware

Invariantes:
    - `nodes` é sempre um dicionário indexado por node_id
    - `events` preserva a ordem de chamada
    - A estrutura completa é serializável

Limites explícitos:
    - Não executa processos
    - Não persiste em disco (responsabilidade do host)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Normaliza um timestamp para timezone-aware em UTC (naive é assumido UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    """Duração em milissegundos, truncada em zero."""
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class ZealuxManifest:
    """
    Manifest v1: registro forense de uma run de processo.

    Campos principais:
        - run: metadados da execução
        - inputs: hashes de entrada
        - nodes: estado de cada nó (status, timestamps, duração, erro)
        - events: Event Log ordenado
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    nodes: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Cópia serializável e independente do estado interno."""
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "nodes": {k: dict(v) for k, v in self.nodes.items()},
            "events": [dict(e) for e in self.events],
        }

    def to_json(self, *, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, sort_keys=True, indent=indent, default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ZealuxManifest":
        """Reconstrói um Manifest; campos ausentes viram coleções vazias."""
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            nodes={k: dict(v) for k, v in (data.get("nodes", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


def create_manifest(
    *,
    run_id: str,
    process_name: str,
    started_at: datetime,
    zealux_version: str,
    config_hash: str,
) -> ZealuxManifest:
    """
    Cria o Manifest inicial de uma run.

    ⚠️ Importante: esta função **não emite eventos implicitamente**.
    O Event Log inicia vazio.
    """
    started_at = _ensure_tzaware_utc(started_at)
    return ZealuxManifest(
        run={
            "run_id": run_id,
            "process": process_name,
            "started_at": _iso(started_at),
            "zealux_version": zealux_version,
        },
        inputs={"config_hash": config_hash},
        nodes={},
        events=[],
    )


def add_event(
    manifest: ZealuxManifest,
    *,
    event_type: str,
    ts: datetime,
    node_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """Adiciona um evento explícito ao Event Log, preservando a ordem de chamada."""
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if node_id is not None:
        ev["node_id"] = node_id
    if payload is not None:
        ev["payload"] = payload
    manifest.events.append(ev)


def node_started(
    manifest: ZealuxManifest,
    *,
    node_id: str,
    phase_name: Optional[str],
    ts: datetime,
) -> None:
    """Marca o nó como `running` e registra `node_started`."""
    manifest.nodes.setdefault(node_id, {})
    manifest.nodes[node_id].update(
        {
            "node_id": node_id,
            "phase": phase_name,
            "status": "running",
            "started_at": _iso(ts),
        }
    )
    add_event(manifest, event_type="node_started", ts=ts, node_id=node_id, payload={"phase": phase_name})


def _started_dt(node: Dict[str, Any], fallback: datetime) -> datetime:
    started_iso = node.get("started_at")
    if not started_iso:
        return fallback
    try:
        return datetime.fromisoformat(started_iso)
    except ValueError:
        return fallback


def node_finished(
    manifest: ZealuxManifest,
    *,
    node_id: str,
    ts: datetime,
) -> None:
    """Marca o nó como `completed`, com timestamps e duração."""
    n = manifest.nodes.setdefault(node_id, {"node_id": node_id})
    n.update(
        {
            "status": "completed",
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(_started_dt(n, ts), ts),
        }
    )
    add_event(
        manifest,
        event_type="node_finished",
        ts=ts,
        node_id=node_id,
        payload={"duration_ms": n["duration_ms"]},
    )


def node_failed(
    manifest: ZealuxManifest,
    *,
    node_id: str,
    ts: datetime,
    error: Dict[str, Any],
) -> None:
    """Marca o nó como `failed` e associa o payload de erro."""
    n = manifest.nodes.setdefault(node_id, {"node_id": node_id})
    n.update(
        {
            "status": "failed",
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(_started_dt(n, ts), ts),
            "error": error,
        }
    )
    add_event(manifest, event_type="node_failed", ts=ts, node_id=node_id, payload={"error": error})


def run_finished(
    manifest: ZealuxManifest,
    *,
    ts: datetime,
    status: str,
    result_keys: List[str],
    error_count: int,
) -> None:
    """Fecha a run: status final, chaves de resultado e contagem de erros."""
    manifest.run.update(
        {
            "finished_at": _iso(ts),
            "status": status,
            "result_keys": list(result_keys),
            "error_count": int(error_count),
        }
    )
    add_event(
        manifest,
        event_type="run_finished",
        ts=ts,
        payload={"status": status, "error_count": int(error_count)},
    )
