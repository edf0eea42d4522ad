# src/blockci/compiler/buildspec.py
"""
Documento de build specification (saída do Compiler).

Formato alvo (buildspec.yml):

    version: "0.2"
    phases:
      install:    {runtime-versions: {...}, commands: [...]}
      pre_build:  {commands: [...], on-failure: ABORT|CONTINUE}
      build:      {...}
      post_build: {...}
      finally:    {...}
    artifacts: {files: [...]}
    env: {variables: {...}, secrets-manager: {...}}
    cache: {paths: [...]}
    reports: {<nome>: {files, file-format, base-directory, discard-paths}}

Invariantes:
    - Fases e seções vazias nunca são emitidas
    - A ordem de chaves do documento é estável (ver `PHASE_ORDER`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml  # PyYAML


PHASE_ORDER = ("install", "pre_build", "build", "post_build", "finally")

REPORT_KEYS = ("files", "file-format", "base-directory", "discard-paths")


@dataclass
class Phase:
    commands: List[str] = field(default_factory=list)
    on_failure: Optional[str] = None
    runtime_versions: Dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.commands and not self.runtime_versions

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.runtime_versions:
            out["runtime-versions"] = dict(self.runtime_versions)
        if self.commands:
            out["commands"] = list(self.commands)
            if self.on_failure:
                out["on-failure"] = self.on_failure
        return out


@dataclass
class BuildSpecification:
    """
    Estrutura de build specification produzida por `compile_pipeline`.

    Efêmera: recalculada a cada disparo de build. Apenas um snapshot
    (`to_dict`) é armazenado junto ao registro de build.
    """
    version: str = "0.2"
    phases: Dict[str, Phase] = field(default_factory=dict)
    artifact_files: List[str] = field(default_factory=list)
    env_variables: Dict[str, str] = field(default_factory=dict)
    env_secrets: Dict[str, str] = field(default_factory=dict)
    cache_paths: List[str] = field(default_factory=list)
    reports: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def phase(self, name: str) -> Phase:
        """Retorna a fase `name`, criando-a vazia se necessário."""
        if name not in PHASE_ORDER:
            raise KeyError(f"Unknown build phase: {name}")
        if name not in self.phases:
            self.phases[name] = Phase()
        return self.phases[name]

    def to_dict(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {"version": self.version}

        phases = {
            name: self.phases[name].to_dict()
            for name in PHASE_ORDER
            if name in self.phases and not self.phases[name].is_empty()
        }
        if phases:
            doc["phases"] = phases

        if self.artifact_files:
            doc["artifacts"] = {"files": list(self.artifact_files)}

        env: Dict[str, Any] = {}
        if self.env_variables:
            env["variables"] = dict(self.env_variables)
        if self.env_secrets:
            env["secrets-manager"] = dict(self.env_secrets)
        if env:
            doc["env"] = env

        if self.cache_paths:
            doc["cache"] = {"paths": list(self.cache_paths)}

        if self.reports:
            doc["reports"] = {
                name: {k: report[k] for k in REPORT_KEYS if k in report}
                for name, report in self.reports.items()
            }

        return doc

    def to_yaml(self) -> str:
        return yaml.safe_dump(
            self.to_dict(),
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
            width=float("inf"),
        )
