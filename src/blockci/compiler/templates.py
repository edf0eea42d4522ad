# src/blockci/compiler/templates.py
"""
Síntese de build specification para nós de build do grafo de execução.

Um nó de build (`build_webpack`, `build_vite`, `build_custom`) não carrega
blocos; este módulo traduz o nó em uma `PipelineDefinition` mínima e a
entrega ao mesmo Compiler usado pelo caminho de blocos, de modo que existe
um único gerador de buildspec no sistema.

Definição sintetizada:
    - runtime `nodejs:<node_version | build.runtime_version>`
    - bloco `<node.id>-install` (node_package_manager, grupo CUSTOM)
    - bloco `<node.id>-build` (custom_build_command, grupo BUILD) com os
      comandos da variante
    - artifacts `**/*`

Campos lidos de `node.data`:
    node_version, package_manager, commands (build_custom),
    config_file e mode (build_webpack), mode (build_vite)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from blockci.core.config.settings import BuildSettings
from blockci.core.pipeline.types import (
    Block,
    BlockGroup,
    BlockType,
    Node,
    NodeType,
    PipelineDefinition,
)

from .buildspec import BuildSpecification
from .compiler import compile_pipeline


BUILD_NODE_TYPES = frozenset(
    {NodeType.BUILD_WEBPACK.value, NodeType.BUILD_VITE.value, NodeType.BUILD_CUSTOM.value}
)

DEFAULT_ARTIFACTS = ("**/*",)


def _webpack_commands(data: Dict[str, Any]) -> List[str]:
    command = "npx webpack"
    if data.get("config_file"):
        command += f" --config {data['config_file']}"
    command += f" --mode {data.get('mode') or 'production'}"
    return ['echo "Building with Webpack..."', command]


def _vite_commands(data: Dict[str, Any]) -> List[str]:
    command = "npx vite build"
    if data.get("mode"):
        command += f" --mode {data['mode']}"
    return ['echo "Building with Vite..."', command]


def _custom_commands(data: Dict[str, Any]) -> List[str]:
    commands = data.get("commands")
    if commands:
        if isinstance(commands, str):
            return [commands]
        return [str(c) for c in commands]
    return ['echo "Running custom build..."', "npm run build"]


def variant_build_commands(node: Node) -> List[str]:
    if node.type == NodeType.BUILD_WEBPACK:
        return _webpack_commands(node.data)
    if node.type == NodeType.BUILD_VITE:
        return _vite_commands(node.data)
    if node.type == NodeType.BUILD_CUSTOM:
        return _custom_commands(node.data)
    return ['echo "Running default build..."', "npm run build"]


def build_node_definition(node: Node, settings: Optional[BuildSettings] = None) -> PipelineDefinition:
    """Traduz um nó de build em `PipelineDefinition` compilável."""
    settings = settings or BuildSettings()
    data = node.data

    runtime_version = str(data.get("node_version") or settings.runtime_version)
    package_manager = str(data.get("package_manager") or settings.package_manager)

    install = Block(
        id=f"{node.id}-install",
        block_type=BlockType.NODE_PACKAGE_MANAGER.value,
        group_type=BlockGroup.CUSTOM.value,
        package_manager=package_manager,
    )
    build = Block(
        id=f"{node.id}-build",
        block_type=BlockType.CUSTOM_BUILD_COMMAND.value,
        group_type=BlockGroup.BUILD.value,
        custom_command=tuple(variant_build_commands(node)),
    )

    return PipelineDefinition(
        runtime=f"nodejs:{runtime_version}",
        blocks=(install, build),
        artifacts=DEFAULT_ARTIFACTS,
    )


def compile_build_node(node: Node, settings: Optional[BuildSettings] = None) -> BuildSpecification:
    return compile_pipeline(build_node_definition(node, settings))
