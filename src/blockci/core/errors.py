"""
blockci — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do blockci.
Erros fazem parte do contrato operacional do sistema e devem ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

O Engine converte exceções em `ErrorPayload` e as registra no nó que
falhou dentro do Execution Record, sem expor stack trace cru.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do blockci.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Validação / Estrutura
VALIDATION_ERROR = "VALIDATION_ERROR"

# Pré-requisitos de execução
MISSING_BUILD_ID = "MISSING_BUILD_ID"
PIPELINE_NOT_FOUND = "PIPELINE_NOT_FOUND"
BUILD_NOT_FOUND = "BUILD_NOT_FOUND"

# Colaboradores externos
TRIGGER_FAILED = "TRIGGER_FAILED"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def validation_error(
    *,
    issues: List[Dict[str, Any]],
    subject: str,
    hint: str = "Corrija as referências e tipos apontados antes de compilar ou executar o pipeline.",
) -> ErrorPayload:
    return ErrorPayload(
        type=VALIDATION_ERROR,
        message=f"{subject} inválido: {len(issues)} problema(s) encontrado(s)",
        details={"subject": subject, "issues": issues},
        hint=hint,
    )


def missing_build_id(
    *,
    node_id: Optional[str] = None,
    hint: str = "Conecte um nó de build antes do nó de deploy no grafo do pipeline.",
) -> ErrorPayload:
    return ErrorPayload(
        type=MISSING_BUILD_ID,
        message="No build ID found in context for deployment",
        details={"node_id": node_id},
        hint=hint,
    )


def pipeline_not_found(
    *,
    pipeline_id: str,
    hint: str = "Verifique se o pipeline foi salvo antes de solicitar a execução.",
) -> ErrorPayload:
    return ErrorPayload(
        type=PIPELINE_NOT_FOUND,
        message=f"Pipeline not found: {pipeline_id}",
        details={"pipeline_id": pipeline_id},
        hint=hint,
    )


def build_not_found(
    *,
    build_id: str,
    hint: str = "O registro de build é criado no disparo; confira o build_id informado.",
) -> ErrorPayload:
    return ErrorPayload(
        type=BUILD_NOT_FOUND,
        message=f"Build not found: {build_id}",
        details={"build_id": build_id},
        hint=hint,
    )


def trigger_failed(
    *,
    capability: str,
    reason: str,
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Consulte o estado do serviço externo; o Engine não aplica fallback automático.",
) -> ErrorPayload:
    d = {"capability": capability, "reason": reason}
    d.update(details or {})
    return ErrorPayload(
        type=TRIGGER_FAILED,
        message=f"{capability} failed: {reason}",
        details=d,
        hint=hint,
    )


def engine_execution_error(
    *,
    node_id: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o Event Log da execução para diagnosticar a falha. Nenhum fallback é aplicado automaticamente.",
) -> ErrorPayload:
    return ErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message=exc_message or "Falha inesperada durante a execução do pipeline",
        details={
            "node_id": node_id,
            "exc_type": exc_type,
        },
        hint=hint,
    )
