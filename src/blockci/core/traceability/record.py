# src/blockci/core/traceability/record.py
"""
Execution Record: registro de observabilidade de uma execução do Engine.

Um registro por run, contendo:
    - execution: identidade e estado global da run
      (execution_id, pipeline_id, user_id, project_id, status,
      started_at, finished_at, config_hash)
    - nodes: estado por nó, indexado por node_id
      (status pending|running|success|failed, timestamps, duração, erro)
    - events: Event Log ordenado (run_started, node_started,
      node_finished, node_failed, run_finished)

Decisões arquiteturais:
    - UTC é o timezone canônico de todos os timestamps
    - Nenhum evento é emitido implicitamente; toda mutação passa pelas
      funções deste módulo
    - O registro é serializável e reconstruível (`to_dict`/`from_dict`)

Limites explícitos:
    - Não executa nós nem decide fail-fast
    - Não é fonte de verdade para retomar execuções (apenas observabilidade)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from blockci.core.pipeline.types import Node, NodeStatus, RunStatus


def _utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    return max(0, int((_utc(end) - _utc(start)).total_seconds() * 1000))


@dataclass
class ExecutionRecord:
    execution: Dict[str, Any]
    nodes: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def execution_id(self) -> str:
        return self.execution["execution_id"]

    @property
    def status(self) -> str:
        return self.execution["status"]

    def node_status(self, node_id: str) -> str:
        return self.nodes[node_id]["status"]

    def statuses(self) -> List[str]:
        """Status dos nós na ordem em que foram registrados."""
        return [n["status"] for n in self.nodes.values()]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "execution": dict(self.execution),
            "nodes": {k: dict(v) for k, v in self.nodes.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExecutionRecord":
        return cls(
            execution=dict(data.get("execution", {})),
            nodes={k: dict(v) for k, v in (data.get("nodes", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


def create_record(
    *,
    execution_id: str,
    pipeline_id: str,
    user_id: str,
    project_id: str,
    nodes: Iterable[Node],
    started_at: datetime,
    config_hash: Optional[str] = None,
) -> ExecutionRecord:
    """
    Cria o registro inicial: run `running` e todos os nós `pending`.

    Os nós são registrados na ordem recebida (a ordem planejada), então
    `statuses()` reflete a ordem de execução.

    Importante: não emite `run_started`; o Engine chama `run_started`
    explicitamente.
    """
    return ExecutionRecord(
        execution={
            "execution_id": execution_id,
            "pipeline_id": pipeline_id,
            "user_id": user_id,
            "project_id": project_id,
            "status": RunStatus.RUNNING.value,
            "started_at": _iso(started_at),
            "finished_at": None,
            "config_hash": config_hash,
        },
        nodes={
            node.id: {"node_id": node.id, "type": node.type, "status": NodeStatus.PENDING.value}
            for node in nodes
        },
        events=[],
    )


def add_event(
    record: ExecutionRecord,
    *,
    event_type: str,
    ts: datetime,
    node_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if node_id is not None:
        ev["node_id"] = node_id
    if payload is not None:
        ev["payload"] = payload
    record.events.append(ev)


def run_started(record: ExecutionRecord, *, ts: datetime) -> None:
    add_event(
        record,
        event_type="run_started",
        ts=ts,
        payload={"nodes": list(record.nodes)},
    )


def node_started(record: ExecutionRecord, *, node_id: str, ts: datetime) -> None:
    n = record.nodes.setdefault(node_id, {"node_id": node_id})
    n.update({"status": NodeStatus.RUNNING.value, "started_at": _iso(ts)})
    add_event(record, event_type="node_started", ts=ts, node_id=node_id, payload={"type": n.get("type")})


def _duration(node: Dict[str, Any], ts: datetime) -> int:
    started_iso = node.get("started_at")
    if not started_iso:
        return 0
    return _ms_between(datetime.fromisoformat(started_iso), ts)


def node_finished(
    record: ExecutionRecord,
    *,
    node_id: str,
    ts: datetime,
    outputs: Optional[Dict[str, Any]] = None,
) -> None:
    """Marca o nó como `success`; `outputs` guarda o que o nó gravou no contexto."""
    n = record.nodes.setdefault(node_id, {"node_id": node_id})
    n.update(
        {
            "status": NodeStatus.SUCCESS.value,
            "finished_at": _iso(ts),
            "duration_ms": _duration(n, ts),
            "outputs": dict(outputs or {}),
        }
    )
    add_event(
        record,
        event_type="node_finished",
        ts=ts,
        node_id=node_id,
        payload={"status": n["status"], "duration_ms": n["duration_ms"]},
    )


def node_failed(
    record: ExecutionRecord,
    *,
    node_id: str,
    ts: datetime,
    error: Dict[str, Any],
) -> None:
    n = record.nodes.setdefault(node_id, {"node_id": node_id})
    n.update(
        {
            "status": NodeStatus.FAILED.value,
            "finished_at": _iso(ts),
            "duration_ms": _duration(n, ts),
            "error": dict(error),
        }
    )
    add_event(
        record,
        event_type="node_failed",
        ts=ts,
        node_id=node_id,
        payload={"error_type": error.get("type"), "message": error.get("message")},
    )


def run_finished(record: ExecutionRecord, *, status: RunStatus, ts: datetime) -> None:
    record.execution["status"] = status.value
    record.execution["finished_at"] = _iso(ts)
    add_event(record, event_type="run_finished", ts=ts, payload={"status": status.value})
