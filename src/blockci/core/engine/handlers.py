# src/blockci/core/engine/handlers.py
"""
Dispatcher de nós do Engine.

Cada tipo de nó mapeia para um handler `(node, ctx, services) -> None` que
lê e grava o `ExecutionContext`:

    - start / pipeline_start / end → no-op
    - build_webpack / build_vite / build_custom → dispara build;
      grava `build_id` e `artifact_location`
    - deploy → exige `build_id`; dispara deploy; grava `deployment_id`
    - test_jest / test_mocha / test_vitest → placeholder (warning)
    - desconhecido → warning, contexto inalterado

Exceções levantadas por handlers interrompem a execução (fail-fast no
Engine). Quando `services.retry_policy` está definido, as chamadas aos
triggers passam pelo Retry Helper e cada tentativa vira evento no log do
contexto.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

from blockci.compiler.templates import BUILD_NODE_TYPES, compile_build_node
from blockci.core.config.settings import EngineSettings
from blockci.core.errors import missing_build_id, trigger_failed
from blockci.core.exceptions import MissingBuildIdError, TriggerError
from blockci.core.pipeline.context import ExecutionContext
from blockci.core.pipeline.types import Node, NodeType
from blockci.integrations.builds import artifact_location, build_project_name, require_build_id
from blockci.integrations.retry import RetryPolicy, with_retry
from blockci.integrations.triggers import BuildTrigger, DeployTrigger, DeploymentConfig


T = TypeVar("T")


@dataclass(frozen=True)
class NodeServices:
    """Colaboradores imutáveis compartilhados por todas as runs de um executor."""
    build_trigger: BuildTrigger
    deploy_trigger: DeployTrigger
    settings: EngineSettings
    retry_policy: Optional[RetryPolicy] = None
    sleep: Callable[[float], Any] = time.sleep


NodeHandler = Callable[[Node, ExecutionContext, NodeServices], None]


def _call_external(
    operation: Callable[[], T],
    node: Node,
    ctx: ExecutionContext,
    services: NodeServices,
) -> T:
    if services.retry_policy is None:
        return operation()

    def on_event(level: str, message: str, **extra: Any) -> None:
        ctx.log(node_id=node.id, level=level, message=message, **extra)

    return with_retry(
        operation,
        services.retry_policy,
        sleep=services.sleep,
        on_event=on_event,
    )


def handle_noop(node: Node, ctx: ExecutionContext, services: NodeServices) -> None:
    ctx.log(node_id=node.id, level="debug", message=f"{node.type} node: nothing to execute")


def handle_build(node: Node, ctx: ExecutionContext, services: NodeServices) -> None:
    spec = compile_build_node(node, services.settings.build)
    project_name = build_project_name(
        services.settings.build.project_prefix, ctx.project_id, ctx.user_id
    )
    env = {str(k): str(v) for k, v in (node.data.get("environment_variables") or {}).items()}

    ctx.log(node_id=node.id, level="info", message="Executing build node", node_type=node.type)
    result = _call_external(
        lambda: services.build_trigger.start(project_name, spec.to_yaml(), env),
        node,
        ctx,
        services,
    )
    build_id = require_build_id(result, project_name)

    ctx.build_id = build_id
    ctx.artifact_location = artifact_location(project_name, build_id)
    ctx.log(
        node_id=node.id,
        level="info",
        message="Build started",
        build_id=build_id,
        project_name=project_name,
    )


def handle_deploy(node: Node, ctx: ExecutionContext, services: NodeServices) -> None:
    if not ctx.build_id:
        payload = missing_build_id(node_id=node.id)
        raise MissingBuildIdError(message=payload.message, details=payload.details, hint=payload.hint)

    build_id = ctx.build_id
    config = DeploymentConfig.from_node_data(node.data)

    ctx.log(node_id=node.id, level="info", message="Executing deploy node", build_id=build_id)
    result = _call_external(
        lambda: services.deploy_trigger.deploy(build_id, config),
        node,
        ctx,
        services,
    )
    deployment_id = getattr(result, "deployment_id", None)
    if not deployment_id:
        payload = trigger_failed(
            capability="deploy",
            reason="no deployment id returned",
            details={"build_id": build_id},
        )
        raise TriggerError(message=payload.message, details=payload.details, hint=payload.hint)

    ctx.deployment_id = deployment_id
    ctx.log(node_id=node.id, level="info", message="Deployment created", deployment_id=deployment_id)


def handle_test(node: Node, ctx: ExecutionContext, services: NodeServices) -> None:
    ctx.add_warning(node_id=node.id, message=f"Test node not yet implemented: {node.type}")


def handle_unknown(node: Node, ctx: ExecutionContext, services: NodeServices) -> None:
    ctx.add_warning(node_id=node.id, message=f"Unknown node type: {node.type}")


HANDLERS: Dict[str, NodeHandler] = {
    NodeType.START.value: handle_noop,
    NodeType.PIPELINE_START.value: handle_noop,
    NodeType.END.value: handle_noop,
    NodeType.DEPLOY.value: handle_deploy,
    NodeType.TEST_JEST.value: handle_test,
    NodeType.TEST_MOCHA.value: handle_test,
    NodeType.TEST_VITEST.value: handle_test,
}
HANDLERS.update({t: handle_build for t in BUILD_NODE_TYPES})


def dispatch_node(node: Node, ctx: ExecutionContext, services: NodeServices) -> None:
    HANDLERS.get(node.type, handle_unknown)(node, ctx, services)
