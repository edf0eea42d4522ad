# src/blockci/integrations/builds.py
"""
Caminho de build baseado em blocos e registros de build.

`start_pipeline_build` é o caminho pré-disparo: valida (opcionalmente em
modo estrito), compila a definição de blocos, renderiza o YAML, deriva o
nome do projeto de build, dispara o Build Trigger e grava um registro de
build com snapshot do buildspec na coleção `builds`.

Decisões arquiteturais:
    - Falha ao gravar o registro não falha o build já disparado; vira warning
    - Falha do Build Trigger propaga (nenhum registro é gravado)
    - O buildspec nunca é fonte de verdade; o snapshot serve para auditoria

Também concentra a nomenclatura compartilhada com o Engine:
    - project name:       "<prefix>-<sanitize(project_id)>-<user_id>"
    - artifact location:  "<project name>-artifacts/<build_id>"
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from blockci.compiler import compile_pipeline
from blockci.core.config.hashing import compute_config_hash
from blockci.core.errors import build_not_found, trigger_failed
from blockci.core.exceptions import BuildNotFoundError, TriggerError
from blockci.core.pipeline.types import PipelineDefinition
from blockci.core.pipeline.validation import ensure_valid_definition, validate_definition
from blockci.persistence.store import DocumentStore

from .triggers import BuildStartResult, BuildTrigger


BUILDS_COLLECTION = "builds"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9-]")

BUILD_STATUS_MAP = {
    "SUCCEEDED": "succeeded",
    "FAILED": "failed",
    "FAULT": "fault",
    "TIMED_OUT": "timed_out",
    "IN_PROGRESS": "in_progress",
    "STOPPED": "stopped",
}

TERMINAL_STATUSES = frozenset({"succeeded", "failed", "fault", "stopped", "timed_out"})

LogArchiver = Callable[[Dict[str, Any]], None]


# ---------------------------------------------------------------------------
# Nomenclatura
# ---------------------------------------------------------------------------

def sanitize_project_id(project_id: str) -> str:
    return _UNSAFE_CHARS.sub("-", project_id)


def build_project_name(prefix: str, project_id: str, user_id: str) -> str:
    return f"{prefix}-{sanitize_project_id(project_id)}-{user_id}"


def artifact_location(project_name: str, build_id: str) -> str:
    return f"{project_name}-artifacts/{build_id}"


def require_build_id(result: BuildStartResult, project_name: str) -> str:
    """Garante que o Build Trigger devolveu um identificador de build."""
    build_id = getattr(result, "build_id", None)
    if not build_id:
        payload = trigger_failed(
            capability="build",
            reason="no build id returned",
            details={"project_name": project_name},
        )
        raise TriggerError(message=payload.message, details=payload.details, hint=payload.hint)
    return build_id


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

def map_build_status(service_status: Optional[str]) -> str:
    """Converte o status do serviço de build (ex.: SUCCEEDED) no status local."""
    return BUILD_STATUS_MAP.get((service_status or "").upper(), "pending")


def is_terminal_status(status: str) -> bool:
    return status.lower() in TERMINAL_STATUSES


def build_duration_seconds(start: datetime, end: datetime) -> int:
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    if end.tzinfo is None:
        end = end.replace(tzinfo=timezone.utc)
    return max(0, int((end - start).total_seconds()))


# ---------------------------------------------------------------------------
# Caminho pré-disparo
# ---------------------------------------------------------------------------

@dataclass
class PipelineBuildOutcome:
    build_id: str
    status: str
    project_name: str
    buildspec: str
    record: Optional[Dict[str, Any]] = None
    warnings: List[str] = field(default_factory=list)


def start_pipeline_build(
    *,
    user_id: str,
    project_id: str,
    definition: Union[PipelineDefinition, Dict[str, Any]],
    build_trigger: BuildTrigger,
    store: Optional[DocumentStore] = None,
    env: Optional[Dict[str, str]] = None,
    strict: bool = False,
    pipeline_id: Optional[str] = None,
    project_prefix: str = "blockci",
    now: Optional[Callable[[], datetime]] = None,
) -> PipelineBuildOutcome:
    """
    Compila uma definição de blocos e dispara o build correspondente.

    Args:
        user_id: Dono do projeto de build.
        project_id: Projeto (compõe o nome do projeto de build).
        definition: `PipelineDefinition` ou dict equivalente.
        build_trigger: Colaborador externo de build.
        store: Se presente, recebe o registro em `builds/<build_id>`.
        env: Overrides de variáveis de ambiente passados ao trigger.
        strict: Valida antes de compilar e falha com `ValidationError`.
        pipeline_id: Referência opcional gravada no registro.
        project_prefix: Prefixo do nome do projeto de build.
        now: Relógio injetável (UTC).

    Raises:
        ValidationError: Em modo estrito, se a definição tiver problemas.
        TriggerError: Se o trigger não devolver `build_id`.
    """
    now = now or (lambda: datetime.now(timezone.utc))

    if isinstance(definition, dict):
        definition = PipelineDefinition.from_dict(definition)

    warnings: List[str] = []
    if strict:
        ensure_valid_definition(definition)
    else:
        warnings.extend(issue["message"] for issue in validate_definition(definition))

    spec = compile_pipeline(definition)
    buildspec = spec.to_yaml()
    project_name = build_project_name(project_prefix, project_id, user_id)

    result = build_trigger.start(project_name, buildspec, dict(env or {}))
    build_id = require_build_id(result, project_name)

    start_time = result.start_time or now()
    snapshot = spec.to_dict()
    record: Dict[str, Any] = {
        "build_id": build_id,
        "user_id": user_id,
        "project_id": project_id,
        "pipeline_id": pipeline_id,
        "project_name": project_name,
        "status": map_build_status(result.status) if result.status else "in_progress",
        "buildspec": snapshot,
        "buildspec_hash": compute_config_hash(snapshot),
        "environment_variables": dict(env or {}) or None,
        "start_time": start_time.isoformat(),
        "end_time": None,
        "duration_seconds": None,
        "logs_url": None,
        "error_message": None,
    }

    stored: Optional[Dict[str, Any]] = None
    if store is not None:
        try:
            store.put(BUILDS_COLLECTION, build_id, record)
            stored = record
        except Exception as exc:
            warnings.append(f"Failed to store build record for {build_id}: {exc}")

    return PipelineBuildOutcome(
        build_id=build_id,
        status=record["status"],
        project_name=project_name,
        buildspec=buildspec,
        record=stored,
        warnings=warnings,
    )


def record_build_status(
    store: DocumentStore,
    build_id: str,
    service_status: str,
    *,
    end_time: Optional[datetime] = None,
    logs_url: Optional[str] = None,
    error_message: Optional[str] = None,
    archiver: Optional[LogArchiver] = None,
) -> Dict[str, Any]:
    """
    Atualiza o registro de build com o status reportado pelo serviço.

    Ao atingir um status terminal o Log Archiver (se houver) é notificado
    com o registro atualizado. Falha do archiver não desfaz a atualização;
    fica registrada em `archive_error`.

    Raises:
        BuildNotFoundError: Se não houver registro para `build_id`.
    """
    record = store.get(BUILDS_COLLECTION, build_id)
    if record is None:
        payload = build_not_found(build_id=build_id)
        raise BuildNotFoundError(message=payload.message, details=payload.details, hint=payload.hint)

    status = map_build_status(service_status)
    record["status"] = status

    if end_time is not None:
        record["end_time"] = end_time.isoformat()
        if record.get("start_time"):
            record["duration_seconds"] = build_duration_seconds(
                datetime.fromisoformat(record["start_time"]), end_time
            )
    if logs_url:
        record["logs_url"] = logs_url
    if error_message:
        record["error_message"] = error_message

    if is_terminal_status(status) and archiver is not None:
        try:
            archiver(dict(record))
        except Exception as exc:
            record["archive_error"] = str(exc)

    store.put(BUILDS_COLLECTION, build_id, record)
    return record
