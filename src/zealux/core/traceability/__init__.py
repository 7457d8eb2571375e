"""
Traceability do Zealux.

Este pacote concentra o Manifest de execução: o registro ordenado e
serializável do que aconteceu em uma run (nós iniciados, concluídos e
falhos, com timestamps UTC).
"""

from .manifest import (
    ZealuxManifest,
    add_event,
    create_manifest,
    node_failed,
    node_finished,
    node_started,
    run_finished,
)

__all__ = [
    "ZealuxManifest",
    "add_event",
    "create_manifest",
    "node_failed",
    "node_finished",
    "node_started",
    "run_finished",
]
