# src/blockci/persistence/store.py
"""
Contrato de persistência de documentos e duas implementações.

Coleções usadas pelo blockci:
    - pipelines:  grafo de execução salvo pelo editor (lido pelo Engine)
    - executions: Execution Records (escritos pelo Engine)
    - builds:     registros de build com snapshot do buildspec

Documentos são dicts simples, serializáveis em JSON, indexados por id.

Implementações:
    - InMemoryDocumentStore: dict em memória (testes, uso embutido)
    - JsonDirectoryStore: um arquivo `<root>/<collection>/<key>.json` por
      documento, no mesmo formato JSON determinístico dos Execution Records

Invariantes:
    - `get` devolve uma cópia; mutá-la não altera o store
    - `get` de chave ausente devolve None
"""

from __future__ import annotations

import copy
import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable


@runtime_checkable
class DocumentStore(Protocol):
    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        ...

    def put(self, collection: str, key: str, document: Dict[str, Any]) -> None:
        ...

    def list(self, collection: str) -> List[Dict[str, Any]]:
        ...


class InMemoryDocumentStore:
    def __init__(self, initial: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None) -> None:
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = copy.deepcopy(initial or {})

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        doc = self._data.get(collection, {}).get(key)
        return copy.deepcopy(doc) if doc is not None else None

    def put(self, collection: str, key: str, document: Dict[str, Any]) -> None:
        self._data.setdefault(collection, {})[key] = copy.deepcopy(document)

    def list(self, collection: str) -> List[Dict[str, Any]]:
        return [copy.deepcopy(d) for d in self._data.get(collection, {}).values()]


_SAFE_NAME = re.compile(r"^[A-Za-z0-9._-]+$")


class JsonDirectoryStore:
    """Store baseado em diretório; nomes de coleção/chave não podem conter separadores."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def _path(self, collection: str, key: str) -> Path:
        for name in (collection, key):
            if not _SAFE_NAME.match(name) or name in {".", ".."}:
                raise ValueError(f"Invalid document store name: {name!r}")
        return self.root / collection / f"{key}.json"

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        path = self._path(collection, key)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def put(self, collection: str, key: str, document: Dict[str, Any]) -> None:
        path = self._path(collection, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(document, ensure_ascii=False, indent=2, sort_keys=True),
            encoding="utf-8",
        )

    def list(self, collection: str) -> List[Dict[str, Any]]:
        folder = self.root / collection
        if not folder.is_dir():
            return []
        return [
            json.loads(p.read_text(encoding="utf-8"))
            for p in sorted(folder.glob("*.json"))
        ]
