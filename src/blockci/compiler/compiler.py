# src/blockci/compiler/compiler.py
"""
Pipeline Compiler: definição de blocos → build specification.

O Compiler é determinístico, síncrono e total para entrada estruturalmente
válida: referências `on_success`/`on_failed` não resolvidas e tipos
desconhecidos contribuem zero comandos, silenciosamente. Para tornar essas
lacunas visíveis use `blockci.core.pipeline.validation`.

Mapeamento fixo grupo → fase:
    - CUSTOM → pre_build  (on-failure = definition.on_failure)
    - BUILD  → build      (on-failure = definition.on_failure)
    - TEST   → post_build (on-failure = CONTINUE)
    - RUN    → post_build, após TEST (on-failure = CONTINUE)

A ordenação dentro de cada grupo é a ordem de declaração; não há
ordenação topológica por `on_success`/`on_failed`.

Blocos referenciados em `on_success`/`on_failed` são expandidos em um
único nível: os comandos próprios do bloco alvo, nunca os fallbacks dele.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Union

from blockci.core.pipeline.registry import index_blocks
from blockci.core.pipeline.types import Block, BlockGroup, FailurePolicy, PipelineDefinition

from .buildspec import BuildSpecification
from .commands import resolve_block_commands


INDENT = "  "

_LABELS = {
    BlockGroup.CUSTOM.value: "Block",
    BlockGroup.BUILD.value: "Block",
    BlockGroup.TEST.value: "Test Block",
    BlockGroup.RUN.value: "Run Block",
}


def _referenced_commands(ref: str, index: Mapping[str, Block]) -> List[str]:
    target = index.get(ref)
    if target is None:
        return []
    return resolve_block_commands(target)


def _block_lines(block: Block, label: str, index: Mapping[str, Block]) -> List[str]:
    own = resolve_block_commands(block)

    if block.on_failed and not block.is_package_manager:
        lines = [f"# {label}: {block.id} (with fallback)", "if"]
        lines.extend(INDENT + cmd for cmd in own)
        lines.append("then")
        lines.append(f'{INDENT}echo "{label} {block.id} succeeded"')
        if block.on_success:
            lines.extend(INDENT + cmd for cmd in _referenced_commands(block.on_success, index))
        lines.append("else")
        lines.append(f'{INDENT}echo "{label} {block.id} failed, running fallback"')
        lines.extend(INDENT + cmd for cmd in _referenced_commands(block.on_failed, index))
        lines.append("fi")
        return lines

    lines = [f"# {label}: {block.id}"]
    if block.is_package_manager:
        lines.append("# Package manager - fail fast on error")
    lines.extend(own)
    return lines


def _group_lines(definition: PipelineDefinition, group: str, index: Mapping[str, Block]) -> List[str]:
    label = _LABELS[group]
    lines: List[str] = []
    for block in definition.blocks:
        if block.group_type == group:
            lines.extend(_block_lines(block, label, index))
    return lines


def _split_runtime(runtime: str):
    name, _, version = runtime.partition(":")
    return name, version or "latest"


def compile_pipeline(definition: Union[PipelineDefinition, Dict[str, Any]]) -> BuildSpecification:
    """
    Compila uma definição de blocos em `BuildSpecification`.

    Args:
        definition: `PipelineDefinition` ou o dict equivalente.

    Returns:
        BuildSpecification: documento pronto para `to_yaml()`.
    """
    if isinstance(definition, dict):
        definition = PipelineDefinition.from_dict(definition)

    spec = BuildSpecification(version=definition.version or "0.2")

    if definition.runtime:
        name, version = _split_runtime(definition.runtime)
        spec.phase("install").runtime_versions[name] = version

    index = index_blocks(definition.blocks)
    policy = definition.on_failure or FailurePolicy.ABORT.value

    pre_build = _group_lines(definition, BlockGroup.CUSTOM.value, index)
    if pre_build:
        phase = spec.phase("pre_build")
        phase.commands.extend(pre_build)
        phase.on_failure = policy

    build = _group_lines(definition, BlockGroup.BUILD.value, index)
    if build:
        phase = spec.phase("build")
        phase.commands.extend(build)
        phase.on_failure = policy

    post_build = _group_lines(definition, BlockGroup.TEST.value, index)
    post_build.extend(_group_lines(definition, BlockGroup.RUN.value, index))
    if post_build:
        phase = spec.phase("post_build")
        phase.commands.extend(post_build)
        phase.on_failure = FailurePolicy.CONTINUE.value

    spec.artifact_files = list(definition.artifacts)
    spec.env_variables = dict(definition.environment_variables)
    spec.env_secrets = dict(definition.secrets)
    spec.cache_paths = list(definition.cache_paths)
    spec.reports = {name: dict(report) for name, report in definition.reports.items()}

    return spec


def render_buildspec(definition: Union[PipelineDefinition, Dict[str, Any]]) -> str:
    """Compila e serializa em texto YAML (buildspec.yml)."""
    return compile_pipeline(definition).to_yaml()
