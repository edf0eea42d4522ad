"""
blockci — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do blockci.

Objetivo:
- Permitir que handlers de nó e o pipeline de build levantem exceções semânticas
- Facilitar o mapeamento determinístico para ErrorPayload
- Evitar ValueError/RuntimeError genéricos em guardrails críticos

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Erros estruturais de grafo (ciclo, referência desconhecida) vivem no planner
  e herdam de ValueError, como erros de planejamento.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class BlockCIException(Exception):
    """Base class para exceções internas do blockci.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Pré-requisitos de execução
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MissingBuildIdError(BlockCIException):
    """Nó de deploy executado sem `build_id` no contexto."""


@dataclass(frozen=True)
class PipelineNotFoundError(BlockCIException):
    """Pipeline solicitado não existe no store."""


# ---------------------------------------------------------------------------
# Colaboradores externos
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TriggerError(BlockCIException):
    """Gatilho externo (build/deploy) respondeu sem o identificador esperado."""


@dataclass(frozen=True)
class BuildNotFoundError(BlockCIException):
    """Registro de build inexistente no store."""
