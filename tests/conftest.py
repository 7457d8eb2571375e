# tests/conftest.py
"""
Fixtures compartilhados para testes do Zealux.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas
- fases dummy que registram cada chamada recebida
- processos de referência (cadeia linear p1 → p2 → p3)

O objetivo destas fixtures é permitir testes do core
(process, engine, config e traceability) sem depender de:
- filesystem
- fases reais de domínio
- ordem de agendamento do event loop

Decisões arquiteturais:
    - Fases dummy usam duck typing em vez de herança
    - Cada fase registra os inputs recebidos em `calls`
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica condicional complexa
"""

import asyncio

import pytest


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de configuração padrão (defaults) semelhante ao uso real.

    Returns:
        str: Conteúdo YAML representando configuração padrão (defaults).
    """
    return """\
engine:
  log_level: INFO
  max_concurrency: null
  run_id_prefix: run
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """
    YAML de configuração local (override) semelhante ao uso real.

    Returns:
        str: Conteúdo YAML representando apenas overrides locais.
    """
    return """\
engine:
  log_level: DEBUG
  max_concurrency: 2
"""


@pytest.fixture
def dummy_config() -> dict:
    """Configuração mínima, já resolvida, para exercitar o engine."""
    return {"engine": {"log_level": "DEBUG", "max_concurrency": None}}


# =====================================================
# Phase fixtures
# =====================================================

@pytest.fixture
def RecordingPhase():
    """
    Fixture factory que fornece uma fase dummy assíncrona.

    A implementação retornada:
    - expõe `name` e `execute(input)` (duck typing)
    - registra cada input recebido em `calls`
    - retorna `{"data": "<label> processed <input.data>"}`
    - pode falhar com uma exceção fixa ou aguardar `delay` segundos

    Returns:
        type: Classe _RecordingPhase que pode ser instanciada pelos testes.
    """

    class _RecordingPhase:
        def __init__(self, name, *, label=None, fail=None, delay=0.0):
            self.name = name
            self.label = label or name
            self.fail = fail
            self.delay = delay
            self.calls = []

        async def execute(self, input):
            self.calls.append(input)
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail is not None:
                raise self.fail
            return {"data": f"{self.label} processed {input.get('data')}"}

    return _RecordingPhase


@pytest.fixture
def phases(RecordingPhase):
    """Três fases de referência: phase1, phase2 e phase3."""
    return {
        "p1": RecordingPhase("phase1"),
        "p2": RecordingPhase("phase2"),
        "p3": RecordingPhase("phase3"),
    }


@pytest.fixture
def linear_process(phases):
    """
    Processo linear p1 → p2 → p3, com p3 marcado como fim explícito.

    Returns:
        Process: Definição válida pronta para execução.
    """
    from zealux.core.process.model import Connection, PhaseNode, Process

    return Process(
        name="Test Execution Process",
        context={},
        start_phase_id="p1",
        phases={
            "p1": PhaseNode(id="p1", phase=phases["p1"], next=[Connection("p2")]),
            "p2": PhaseNode(id="p2", phase=phases["p2"], next=[Connection("p3")]),
            "p3": PhaseNode(id="p3", phase=phases["p3"], next=[], is_end_phase=True),
        },
    )
