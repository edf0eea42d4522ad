# src/blockci/core/pipeline/registry.py
"""
Registro de blocos por identificador.

Duas formas de indexar os blocos de uma definição:

    - `BlockRegistry`: registro estrito; ids vazios ou duplicados são
      erro estrutural imediato (usado pela validação)
    - `index_blocks`: índice leniente usado pelo Compiler para resolver
      `on_success`/`on_failed`; em caso de duplicidade vence o primeiro
      bloco declarado

Invariantes:
    - A ordem de declaração é preservada
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .types import Block


class DuplicateBlockIdError(ValueError):
    """Dois blocos da mesma definição compartilham o mesmo `id`."""


@dataclass
class BlockRegistry:
    _blocks: Dict[str, Block] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def add(self, block: Block) -> None:
        block_id = getattr(block, "id", None)
        if not isinstance(block_id, str) or not block_id.strip():
            raise ValueError("block.id must be a non-empty string")
        if block_id in self._blocks:
            raise DuplicateBlockIdError(f"Duplicate block id: {block_id}")
        self._blocks[block_id] = block
        self._order.append(block_id)

    def get(self, block_id: str) -> Block:
        return self._blocks[block_id]

    def __contains__(self, block_id: object) -> bool:
        return block_id in self._blocks

    def list(self) -> List[Block]:
        return [self._blocks[bid] for bid in self._order]


def index_blocks(blocks: Iterable[Block]) -> Dict[str, Block]:
    index: Dict[str, Block] = {}
    for block in blocks:
        index.setdefault(block.id, block)
    return index
