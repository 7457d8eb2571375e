"""
Engine de execução de processos do Zealux.

O Engine percorre o grafo de fases a partir do nó inicial, invocando cada
fase, aplicando transforms de arestas e propagando outputs como inputs
dos sucessores, até que todo o fecho transitivo alcançável tenha
terminado.

Modelo de concorrência:
    - asyncio, uma única thread lógica; suspensão em cada `execute`
    - fan-out: cada aresta de saída dispara um ramo concorrente, que o nó
      de origem não aguarda
    - transforms são avaliados de forma síncrona, na ordem declarada,
      logo após a conclusão do nó de origem; cada substituição de contexto
      é atômica e a última escrita prevalece
    - sem cancelamento nem timeout: o chamador pode envolver a chamada

Memoização:
    - um nó COMPLETED devolve o output em cache (ciclos terminam)
    - um nó IN_FLIGHT devolve o mesmo handle pendente
    - um nó FAILED não é reinvocado; o handle devolve a mesma falha

Política de erros:
    - definição inválida → InvalidProcessError, nenhuma fase executa
    - falha de fase → registrada; interrompe apenas o ramo daquele nó
    - falha de transform → registrada sob o nó destino; apenas a aresta cai
    - falha do nó inicial → registrada e logada; a run retorna resultado parcial
    - `CancelledError` levantado por uma fase → falha de fase como as demais
    - violação de invariante interna → escapa da chamada
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple
from uuid import uuid4

from zealux.core.config.engine import EngineSettings, resolve_engine_config
from zealux.core.config.hashing import compute_config_hash
from zealux.core.errors import ZealuxErrorPayload
from zealux.core.exceptions import (
    EngineExecutionError,
    StartPhaseNotFoundError,
    TransformResultError,
    ZealuxException,
)
from zealux.core.process.model import Connection, End
from zealux.core.process.shapes import get_field
from zealux.core.traceability.manifest import (
    ZealuxManifest,
    create_manifest,
    node_failed,
    node_finished,
    node_started,
    run_finished,
)
from zealux.version import __version__

from .aggregator import aggregate_errors, gather
from .planner import NodePlan, ProcessPlan, compile_process
from .state import ExecutionError, NodeStatus, RunState
from .validator import validate_process


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProcessResult:
    """
    Resultado agregado de uma run de processo.

    Campos:
        - results: conjunto final de resultados (ver `aggregator.gather`)
        - phase_results: output de cada nó que completou (node_id → output)
        - context: contexto vivo ao final da run
        - errors: falhas locais registradas durante a run
        - events / warnings: log estruturado da run
        - manifest: registro forense da run
    """

    run_id: str
    results: Dict[str, Any] = field(default_factory=dict)
    phase_results: Dict[str, Any] = field(default_factory=dict)
    context: Any = None
    errors: Tuple[ExecutionError, ...] = ()
    events: Tuple[Dict[str, Any], ...] = ()
    warnings: Dict[str, List[str]] = field(default_factory=dict)
    manifest: Optional[ZealuxManifest] = None

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def diagnostic(self) -> Optional[ZealuxErrorPayload]:
        return aggregate_errors(list(self.errors))


async def _call_phase(phase: Any, input: Any) -> Any:
    result = get_field(phase, "execute")(input)
    if inspect.isawaitable(result):
        result = await result
    return result


def _apply_transform(edge: Connection, output: Any, context: Any) -> Tuple[Any, Any]:
    result = edge.transform(output, context)
    if not isinstance(result, tuple) or len(result) != 2:
        raise TransformResultError(
            message=f'Transform for connection to "{edge.target_phase_node_id}" must return an (input, context) pair',
            details={
                "target_node_id": edge.target_phase_node_id,
                "received": type(result).__name__,
            },
            hint="Retorne uma tupla `(input, context)` no transform.",
        )
    return result


class _Execution:
    """Uma chamada de execução: plano, estado e política de concorrência."""

    def __init__(
        self,
        *,
        process: Any,
        plan: ProcessPlan,
        state: RunState,
        settings: EngineSettings,
    ):
        self.process = process
        self.plan = plan
        self.state = state
        self.semaphore: Optional[asyncio.Semaphore] = (
            asyncio.Semaphore(settings.max_concurrency) if settings.max_concurrency else None
        )

    # ------------------------------------------------------------------
    # Orquestração
    # ------------------------------------------------------------------
    async def run(self, initial_input: Any) -> None:
        start_id = self.plan.start_phase_id
        # `wait` não propaga a falha do nó; a falha já foi registrada pelo próprio nó
        try:
            await asyncio.wait({self.dispatch(start_id, initial_input)})
        except asyncio.CancelledError:
            for task in self.state.pending_tasks():
                task.cancel()
            raise
        start = self.state.slot(start_id)
        if start.status is NodeStatus.FAILED:
            self.state.log(
                node_id=start_id,
                level="ERROR",
                message="Critical error during process execution orchestration",
                exc_type=type(start.error).__name__,
                error=str(start.error),
            )
        await self.settle()

    async def settle(self) -> None:
        """Aguarda até que nenhum ramo despachado permaneça pendente."""
        while True:
            pending = self.state.pending_tasks()
            if not pending:
                break
            await asyncio.gather(*pending, return_exceptions=True)

        recorded = {id(e.error) for e in self.state.errors}
        for slot in list(self.state.slots.values()):
            if slot.task is None or slot.task.cancelled():
                continue
            exc = slot.task.exception()
            if exc is None or id(exc) in recorded:
                continue
            self.state.record_error(slot.node_id, exc, origin="orchestration")
            if isinstance(exc, ZealuxException):
                raise exc
            raise EngineExecutionError(
                message=f"Falha interna do engine no nó '{slot.node_id}'",
                details={"node_id": slot.node_id, "exc_type": type(exc).__name__, "exc_message": str(exc)},
            ) from exc

    def dispatch(self, node_id: str, input: Any) -> "asyncio.Task[Any]":
        """Agenda o nó, ou devolve o handle já existente (memoização)."""
        slot = self.state.slot(node_id)
        if slot.status is not NodeStatus.NOT_STARTED:
            self.state.log(node_id=node_id, level="DEBUG", message="Phase reused", status=slot.status.value)
            return slot.task

        slot.start()
        slot.task = asyncio.get_running_loop().create_task(
            self._run_node(self.plan.nodes[node_id], input),
            name=f"zealux:{self.state.run_id}:{node_id}",
        )
        return slot.task

    # ------------------------------------------------------------------
    # Execução de um nó
    # ------------------------------------------------------------------
    async def _invoke(self, node: NodePlan, input: Any) -> Any:
        if self.semaphore is None:
            return await _call_phase(node.phase, input)
        async with self.semaphore:
            return await _call_phase(node.phase, input)

    async def _run_node(self, node: NodePlan, input: Any) -> Any:
        slot = self.state.slot(node.id)
        manifest = self.state.manifest
        if manifest is not None:
            node_started(manifest, node_id=node.id, phase_name=node.phase_name, ts=_now())
        self.state.log(node_id=node.id, level="INFO", message="Phase started", phase=node.phase_name)

        try:
            output = await self._invoke(node, input)
        except (Exception, asyncio.CancelledError) as exc:
            slot.fail(exc)
            record = self.state.record_error(node.id, exc)
            self.state.log(
                node_id=node.id,
                level="ERROR",
                message=f"Error executing phase {node.id}",
                exc_type=type(exc).__name__,
                error=str(exc),
            )
            if manifest is not None:
                node_failed(manifest, node_id=node.id, ts=_now(), error=record.to_payload().to_dict())
            raise

        slot.complete(output)
        if manifest is not None:
            node_finished(manifest, node_id=node.id, ts=_now())
        self.state.log(node_id=node.id, level="INFO", message="Phase completed", phase=node.phase_name)

        self._advance(node, output)
        return output

    def _advance(self, node: NodePlan, output: Any) -> None:
        step = node.next
        if isinstance(step, End):
            self._terminate(node, step, output)
            return

        if step.is_leaf:
            self.state.log(node_id=node.id, level="DEBUG", message="Implicit end reached")
            return

        for edge in step.edges:
            target = edge.target_phase_node_id
            next_input = output
            if edge.transform is not None:
                try:
                    next_input, next_context = _apply_transform(edge, output, self.state.context)
                except Exception as exc:
                    self.state.record_error(target, exc, origin="transform", source_node_id=node.id)
                    self.state.log(
                        node_id=target,
                        level="ERROR",
                        message=f"Error in transform for connection {node.id} -> {target}",
                        exc_type=type(exc).__name__,
                        error=str(exc),
                    )
                    continue
                if next_context is not self.state.context:
                    self._replace_context(next_context, source_node_id=node.id)
            self.dispatch(target, next_input)

    def _terminate(self, node: NodePlan, step: End, output: Any) -> None:
        result = output
        if step.terminate is not None:
            try:
                result = step.terminate(output, self.state.context)
            except Exception as exc:
                self.state.record_error(step.id, exc, origin="termination", source_node_id=node.id)
                self.state.log(
                    node_id=node.id,
                    level="ERROR",
                    message=f"Error in termination {step.id} of phase {node.id}",
                    exc_type=type(exc).__name__,
                    error=str(exc),
                )
                return
        self.state.terminations[step.id] = result
        self.state.log(node_id=node.id, level="INFO", message="Termination reached", termination_id=step.id)

    def _replace_context(self, context: Any, *, source_node_id: str) -> None:
        self.state.context = context
        if isinstance(self.process, MutableMapping):
            self.process["context"] = context
            return
        try:
            setattr(self.process, "context", context)
        except AttributeError:
            self.state.add_warning(
                node_id=source_node_id,
                message="Context replacement could not be written back to the process definition",
            )


class Engine:
    """Engine canônico do Zealux (validator + planner + executor + aggregator)."""

    def __init__(
        self,
        *,
        process: Any,
        config: Optional[Mapping[str, Any]] = None,
        run_id: Optional[str] = None,
    ):
        self.process = process
        self.config: Dict[str, Any] = dict(config or {})
        self.settings: EngineSettings = resolve_engine_config(self.config)
        self.run_id = run_id

    def validate(self) -> List[str]:
        return validate_process(self.process)

    def _new_run_id(self) -> str:
        return self.run_id or f"{self.settings.run_id_prefix}-{uuid4().hex[:12]}"

    async def run(self, initial_input: Any) -> ProcessResult:
        plan = compile_process(self.process)
        if plan.start_phase_id not in plan.nodes:
            raise StartPhaseNotFoundError(
                message=f'Start phase ID "{plan.start_phase_id}" not found in process phases.',
                details={"start_phase_id": plan.start_phase_id},
            )

        created_at = _now()
        run_id = self._new_run_id()
        manifest = create_manifest(
            run_id=run_id,
            process_name=plan.name,
            started_at=created_at,
            zealux_version=__version__,
            config_hash=compute_config_hash(self.config),
        )
        state = RunState(
            run_id=run_id,
            created_at=created_at,
            config=self.config,
            context=get_field(self.process, "context"),
            log_level=self.settings.log_level,
            manifest=manifest,
        )

        state.log(
            node_id=None,
            level="INFO",
            message="Process started",
            process=plan.name,
            start_phase_id=plan.start_phase_id,
        )
        if plan.unreachable:
            state.log(node_id=None, level="DEBUG", message="Nodes unreachable from start", nodes=plan.unreachable)

        await _Execution(process=self.process, plan=plan, state=state, settings=self.settings).run(initial_input)

        results = gather(plan, state)
        if state.errors:
            state.log(
                node_id=None,
                level="WARNING",
                message="Process execution completed with errors",
                errors=[e.to_dict() for e in state.errors],
            )
        run_finished(
            manifest,
            ts=_now(),
            status="completed_with_errors" if state.errors else "completed",
            result_keys=list(results),
            error_count=len(state.errors),
        )

        return ProcessResult(
            run_id=run_id,
            results=results,
            phase_results=state.completed_outputs(),
            context=state.context,
            errors=tuple(state.errors),
            events=tuple(state.events),
            warnings={k: list(v) for k, v in state.warnings.items()},
            manifest=manifest,
        )


async def execute_process(
    process: Any,
    initial_input: Any,
    *,
    config: Optional[Mapping[str, Any]] = None,
    run_id: Optional[str] = None,
) -> ProcessResult:
    """
    Executa um processo a partir do nó inicial e retorna o resultado agregado.

    Raises:
        InvalidProcessError: Se a definição for inválida (nenhuma fase executa).
        StartPhaseNotFoundError: Se o nó inicial não existir após a validação.
        EngineConfigurationError: Se a configuração do engine for inválida.
    """
    return await Engine(process=process, config=config, run_id=run_id).run(initial_input)


def run_process(
    process: Any,
    initial_input: Any,
    *,
    config: Optional[Mapping[str, Any]] = None,
    run_id: Optional[str] = None,
) -> ProcessResult:
    """Variante síncrona de `execute_process` (cria um event loop próprio)."""
    return asyncio.run(execute_process(process, initial_input, config=config, run_id=run_id))
