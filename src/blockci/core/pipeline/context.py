# src/blockci/core/pipeline/context.py
"""
Contexto de execução de uma run do Engine.

O `ExecutionContext` é o acumulador mutável que atravessa os nós de uma
execução: o nó de build grava `build_id` e `artifact_location`, o nó de
deploy lê `build_id` e grava `deployment_id`.

Invariantes:
    - Cada run possui seu próprio contexto (nenhum estado global)
    - Logs sempre incluem `execution_id` e `node_id`
    - Warnings são agrupados por `node_id`

Limites explícitos:
    - Não executa nós
    - Não persiste dados (o Execution Record é persistido pelo Engine)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass
class ExecutionContext:
    """
    Estado acumulado de uma execução do grafo.

    `extras` é um espaço aberto para handlers que precisem repassar
    informação adiante sem alterar este contrato.
    """
    execution_id: str
    pipeline_id: str
    user_id: str
    project_id: str
    build_id: Optional[str] = None
    artifact_location: Optional[str] = None
    deployment_id: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    def log(self, *, node_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "execution_id": self.execution_id,
            "node_id": node_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, node_id: str, message: str) -> None:
        self.warnings.setdefault(node_id, []).append(message)
        self.log(node_id=node_id, level="warning", message=message)

    def snapshot(self) -> Dict[str, Any]:
        """Visão serializável do estado acumulado (sem eventos)."""
        return {
            "build_id": self.build_id,
            "artifact_location": self.artifact_location,
            "deployment_id": self.deployment_id,
            "extras": dict(self.extras),
        }
