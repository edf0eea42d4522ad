# src/blockci/compiler/__init__.py
"""
Pipeline Compiler do blockci.

- **commands**: `resolve_block_commands` (linhas próprias de um bloco)
- **compiler**: `compile_pipeline` / `render_buildspec`
- **buildspec**: `BuildSpecification` e serialização YAML
- **templates**: definição sintetizada para nós de build do grafo

O Compiler é puro: não faz I/O, não dispara builds e não persiste nada.
"""

from .buildspec import BuildSpecification, Phase
from .commands import resolve_block_commands
from .compiler import compile_pipeline, render_buildspec
from .templates import BUILD_NODE_TYPES, build_node_definition, compile_build_node

__all__ = [
    "BuildSpecification",
    "Phase",
    "resolve_block_commands",
    "compile_pipeline",
    "render_buildspec",
    "BUILD_NODE_TYPES",
    "build_node_definition",
    "compile_build_node",
]
