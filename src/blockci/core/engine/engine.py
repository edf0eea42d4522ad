# src/blockci/core/engine/engine.py
"""
Pipeline Execution Engine.

Executa um grafo de nós salvo no store, na ordem do planner, um nó por
vez, acumulando o `ExecutionContext` e registrando o estado por nó no
Execution Record.

Fluxo de `PipelineExecutor.run(pipeline_id, user_id, project_id)`:
    1. carrega `pipelines/<pipeline_id>` (grafo em `data` ou na raiz)
    2. valida o grafo (estrito → `ValidationError`; leniente → warnings e
       descarte das arestas para nós inexistentes)
    3. planeja a ordem (`plan_execution`, modo `engine.ordering`)
    4. cria o Execution Record (run `running`, nós `pending`) e persiste
    5. para cada nó: `running` → dispatch → `success`
    6. na primeira exceção: nó `failed` (com ErrorPayload), run `failed`,
       persiste e relança a exceção original; nós restantes ficam `pending`
    7. todos com sucesso → run `success`

Decisões arquiteturais:
    - Execução estritamente sequencial dentro de uma run
    - O executor guarda apenas colaboradores imutáveis; cada run tem seu
      próprio contexto e registro
    - Persistência do registro é best-effort: falha do store vira warning
      no contexto e nunca interrompe a execução
    - Sem timeout, cancelamento ou rollback de nós já executados

Limites explícitos:
    - Não compila definições de blocos (ver `blockci.compiler`)
    - Não faz retry por conta própria (ver `retry_policy`)
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from blockci.core.config.settings import EngineSettings, resolve_settings
from blockci.core.errors import (
    ErrorPayload,
    MISSING_BUILD_ID,
    PIPELINE_NOT_FOUND,
    TRIGGER_FAILED,
    VALIDATION_ERROR,
    BUILD_NOT_FOUND,
    engine_execution_error,
    pipeline_not_found,
)
from blockci.core.exceptions import (
    BlockCIException,
    BuildNotFoundError,
    MissingBuildIdError,
    PipelineNotFoundError,
    TriggerError,
)
from blockci.core.pipeline.context import ExecutionContext
from blockci.core.pipeline.types import ExecutionGraph, RunStatus
from blockci.core.pipeline.validation import ValidationError, ensure_valid_graph, validate_graph
from blockci.core.traceability.record import (
    ExecutionRecord,
    create_record,
    node_failed,
    node_finished,
    node_started,
    run_finished,
    run_started,
)
from blockci.integrations.retry import RetryPolicy
from blockci.integrations.triggers import BuildTrigger, DeployTrigger
from blockci.persistence.store import DocumentStore

from .handlers import NodeServices, dispatch_node
from .planner import prune_graph, plan_execution


PIPELINES_COLLECTION = "pipelines"
EXECUTIONS_COLLECTION = "executions"

ENGINE_NODE_ID = "engine"

_ERROR_CODES = {
    MissingBuildIdError: MISSING_BUILD_ID,
    PipelineNotFoundError: PIPELINE_NOT_FOUND,
    BuildNotFoundError: BUILD_NOT_FOUND,
    TriggerError: TRIGGER_FAILED,
    ValidationError: VALIDATION_ERROR,
}


@dataclass
class RunResult:
    execution_id: str
    status: RunStatus
    record: ExecutionRecord
    context: ExecutionContext


def _graph_from_document(doc: Dict[str, Any]) -> ExecutionGraph:
    data = doc.get("data")
    if isinstance(data, dict) and "nodes" in data:
        return ExecutionGraph.from_dict(data)
    return ExecutionGraph.from_dict(doc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PipelineExecutor:
    """
    Executor de grafos de pipeline.

    Args:
        store: Fonte dos grafos (`pipelines`) e destino dos registros (`executions`).
        build_trigger: Colaborador externo de build.
        deploy_trigger: Colaborador externo de deploy.
        settings: Settings resolvidas (default: `resolve_settings({})`).
        retry_policy: Se definido, chamadas aos triggers passam pelo Retry Helper.
        config_hash: Hash da configuração efetiva, gravado no registro.
        id_factory: Gerador de `execution_id` (default uuid4 hex).
        clock: Relógio UTC injetável.
        sleep: Espera usada entre tentativas de retry.
    """

    def __init__(
        self,
        *,
        store: DocumentStore,
        build_trigger: BuildTrigger,
        deploy_trigger: DeployTrigger,
        settings: Optional[EngineSettings] = None,
        retry_policy: Optional[RetryPolicy] = None,
        config_hash: Optional[str] = None,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        self.store = store
        self.settings = settings or resolve_settings({})
        self.config_hash = config_hash
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._clock = clock or _utcnow
        self._services = NodeServices(
            build_trigger=build_trigger,
            deploy_trigger=deploy_trigger,
            settings=self.settings,
            retry_policy=retry_policy,
            sleep=sleep,
        )

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        *,
        store: DocumentStore,
        build_trigger: BuildTrigger,
        deploy_trigger: DeployTrigger,
        config_hash: Optional[str] = None,
        **kwargs: Any,
    ) -> "PipelineExecutor":
        """Constrói o executor a partir da configuração resolvida (`load_config`)."""
        settings = resolve_settings(config)
        return cls(
            store=store,
            build_trigger=build_trigger,
            deploy_trigger=deploy_trigger,
            settings=settings,
            retry_policy=RetryPolicy.from_settings(settings.retry),
            config_hash=config_hash,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Erros
    # ------------------------------------------------------------------
    def _exception_to_error(self, node_id: str, exc: Exception) -> ErrorPayload:
        """Converte exceções em ErrorPayload, sem stack trace."""
        if isinstance(exc, BlockCIException):
            code = next(
                (c for cls, c in _ERROR_CODES.items() if isinstance(exc, cls)),
                exc.__class__.__name__,
            )
            details = dict(exc.details or {})
            details.setdefault("node_id", node_id)
            return ErrorPayload(
                type=code,
                message=str(exc) or "Erro de execução",
                details=details,
                hint=exc.hint,
            )

        return engine_execution_error(
            node_id=node_id,
            exc_type=exc.__class__.__name__,
            exc_message=str(exc) or None,
        )

    # ------------------------------------------------------------------
    # Persistência (best-effort)
    # ------------------------------------------------------------------
    def _persist(self, record: ExecutionRecord, ctx: ExecutionContext) -> None:
        doc = record.to_dict()
        doc["context"] = ctx.snapshot()
        doc["warnings"] = {k: list(v) for k, v in ctx.warnings.items()}
        doc["log"] = [dict(e) for e in ctx.events]
        try:
            self.store.put(EXECUTIONS_COLLECTION, record.execution_id, doc)
        except Exception as exc:
            ctx.log(
                node_id=ENGINE_NODE_ID,
                level="warning",
                message=f"Failed to persist execution record: {exc}",
                exc_type=exc.__class__.__name__,
            )

    # ------------------------------------------------------------------
    # Execução
    # ------------------------------------------------------------------
    def load_graph(self, pipeline_id: str) -> ExecutionGraph:
        doc = self.store.get(PIPELINES_COLLECTION, pipeline_id)
        if doc is None:
            payload = pipeline_not_found(pipeline_id=pipeline_id)
            raise PipelineNotFoundError(message=payload.message, details=payload.details, hint=payload.hint)
        return _graph_from_document(doc)

    def run(self, pipeline_id: str, user_id: str, project_id: str) -> RunResult:
        """
        Executa o pipeline `pipeline_id` para o usuário/projeto informados.

        Raises:
            PipelineNotFoundError: Pipeline inexistente no store.
            ValidationError: Grafo inválido em modo estrito.
            CycleDetectedError: Ciclo no grafo (ordenação `topological`).
            Exception: A exceção original do nó que falhou (após registro).
        """
        graph = self.load_graph(pipeline_id)

        if self.settings.strict_validation:
            ensure_valid_graph(graph)
            issues = []
        else:
            issues = validate_graph(graph)
            # ids repetidos e arestas quebradas já viraram issues
            graph = prune_graph(graph)

        order = plan_execution(graph, self.settings.ordering)

        execution_id = self._id_factory()
        ctx = ExecutionContext(
            execution_id=execution_id,
            pipeline_id=pipeline_id,
            user_id=user_id,
            project_id=project_id,
        )
        for issue in issues:
            ctx.add_warning(
                node_id=issue.get("node_id") or ENGINE_NODE_ID,
                message=issue["message"],
            )
        scheduled = {n.id for n in order}
        for node in graph.nodes:
            if node.id not in scheduled:
                ctx.add_warning(
                    node_id=node.id,
                    message=f"Node {node.id} is not reachable from any entry node and will not run",
                )

        record = create_record(
            execution_id=execution_id,
            pipeline_id=pipeline_id,
            user_id=user_id,
            project_id=project_id,
            nodes=order,
            started_at=self._clock(),
            config_hash=self.config_hash,
        )
        run_started(record, ts=self._clock())
        self._persist(record, ctx)

        for node in order:
            node_started(record, node_id=node.id, ts=self._clock())
            self._persist(record, ctx)

            try:
                dispatch_node(node, ctx, self._services)
            except Exception as exc:
                error = self._exception_to_error(node.id, exc)
                node_failed(record, node_id=node.id, ts=self._clock(), error=error.to_dict())
                ctx.log(
                    node_id=node.id,
                    level="error",
                    message=error.message,
                    error_type=error.type,
                )
                run_finished(record, status=RunStatus.FAILED, ts=self._clock())
                self._persist(record, ctx)
                raise

            node_finished(record, node_id=node.id, ts=self._clock(), outputs=ctx.snapshot())
            self._persist(record, ctx)

        run_finished(record, status=RunStatus.SUCCESS, ts=self._clock())
        self._persist(record, ctx)

        return RunResult(
            execution_id=execution_id,
            status=RunStatus.SUCCESS,
            record=record,
            context=ctx,
        )
