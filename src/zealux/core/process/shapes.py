"""
Predicados estruturais sobre entradas não tipadas.

Estas funções são usadas apenas na fronteira externa do Zealux, onde
definições de processo chegam como objetos arbitrários (dataclasses,
objetos do host ou mapeamentos carregados de YAML/JSON).

Regras:
    - Nenhum predicado lança exceção, qualquer que seja a entrada
    - `None`, primitivos e sequências retornam False
    - Campos são lidos por atributo ou, em mapeamentos, por chave
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


_NOT_RECORDS = (str, bytes, bytearray, int, float, complex, bool, list, tuple, set, frozenset)


def is_record(obj: Any) -> bool:
    """Retorna True se `obj` pode carregar campos nomeados."""
    return obj is not None and not isinstance(obj, _NOT_RECORDS)


def get_field(obj: Any, name: str, default: Any = None) -> Any:
    """Lê um campo por chave (Mapping) ou atributo, sem propagar falhas."""
    if not is_record(obj):
        return default
    try:
        if isinstance(obj, Mapping):
            return obj.get(name, default)
        return getattr(obj, name, default)
    except Exception:
        return default


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def is_phase(obj: Any) -> bool:
    return (
        is_record(obj)
        and isinstance(get_field(obj, "name"), str)
        and callable(get_field(obj, "execute"))
    )


def is_connection(obj: Any) -> bool:
    if not is_record(obj):
        return False
    transform = get_field(obj, "transform")
    return _non_empty_str(get_field(obj, "target_phase_node_id")) and (
        transform is None or callable(transform)
    )


def is_termination(obj: Any) -> bool:
    if not is_record(obj):
        return False
    terminate = get_field(obj, "terminate")
    return _non_empty_str(get_field(obj, "id")) and (terminate is None or callable(terminate))


def is_phase_node(obj: Any) -> bool:
    return is_record(obj) and isinstance(get_field(obj, "id"), str) and is_phase(get_field(obj, "phase"))


def is_process(obj: Any) -> bool:
    return (
        is_record(obj)
        and isinstance(get_field(obj, "name"), str)
        and isinstance(get_field(obj, "context"), Mapping)
        and isinstance(get_field(obj, "phases"), Mapping)
        and isinstance(get_field(obj, "start_phase_id"), str)
    )
