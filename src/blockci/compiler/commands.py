# src/blockci/compiler/commands.py
"""
Block Command Resolver.

Traduz um único bloco nas linhas de comando literais que ele contribui
para o buildspec. Função pura: nunca levanta exceção, nunca faz I/O.

Regras por tipo:
    - os_package_manager:
        lista vazia     → ["<mgr> update -y"]
        lista não vazia → ["<mgr> update -y"] (apenas apt/apt-get)
                          + ["<mgr> install -y <pacotes>"]
    - node_package_manager:
        lista vazia     → ["<mgr> install"]
        lista não vazia → ["<mgr> install <pacotes>"]
    - custom_build/test/run_command → `custom_command` na ordem declarada
    - node_test_command             → `test_command` na ordem declarada
    - tipo desconhecido             → []
"""

from __future__ import annotations

from typing import List

from blockci.core.pipeline.types import Block, BlockType


_APT_MANAGERS = ("apt", "apt-get")

_CUSTOM_COMMAND_TYPES = (
    BlockType.CUSTOM_BUILD_COMMAND,
    BlockType.CUSTOM_TEST_COMMAND,
    BlockType.CUSTOM_RUN_COMMAND,
)


def _os_package_commands(manager: str, packages: List[str]) -> List[str]:
    if not packages:
        return [f"{manager} update -y"]

    commands: List[str] = []
    if manager in _APT_MANAGERS:
        commands.append(f"{manager} update -y")
    commands.append(f"{manager} install -y {' '.join(packages)}")
    return commands


def _node_package_commands(manager: str, packages: List[str]) -> List[str]:
    if not packages:
        return [f"{manager} install"]
    return [f"{manager} install {' '.join(packages)}"]


def resolve_block_commands(block: Block) -> List[str]:
    """
    Retorna as linhas de comando próprias de `block`.

    Blocos de gerenciador de pacote sem `package_manager` declarado
    contribuem zero comandos (não há comando sensato a emitir).
    """
    block_type = block.block_type
    packages = list(block.package_list)

    if block_type == BlockType.OS_PACKAGE_MANAGER:
        if not block.package_manager:
            return []
        return _os_package_commands(block.package_manager, packages)

    if block_type == BlockType.NODE_PACKAGE_MANAGER:
        if not block.package_manager:
            return []
        return _node_package_commands(block.package_manager, packages)

    if block_type in _CUSTOM_COMMAND_TYPES:
        return list(block.custom_command)

    if block_type == BlockType.NODE_TEST_COMMAND:
        return list(block.test_command)

    return []
