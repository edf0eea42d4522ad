# src/blockci/integrations/triggers.py
"""
Contratos dos colaboradores externos de build e deploy.

O blockci não fala com nenhum serviço de nuvem diretamente. O Engine e o
caminho de build recebem implementações destes protocolos:

    - BuildTrigger.start(project_name, buildspec, env_overrides)
        -> BuildStartResult(build_id, status, start_time)
    - DeployTrigger.deploy(build_id, config)
        -> DeploymentResult(deployment_id, status)

`RetryingBuildTrigger` / `RetryingDeployTrigger` envolvem qualquer
implementação com o Retry Helper; esse é o único ponto de retry do sistema.

Este módulo também define `DeploymentConfig`, a configuração de deploy
derivada dos dados de um nó `deploy`, com os defaults:
    deployment_name "Pipeline Deployment", environment "development",
    target_type "ec2", instance tag Environment=<environment>,
    estratégia all-at-once, rollback habilitado em falha de deploy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Tuple, runtime_checkable

from .retry import EventCallback, RetryPolicy, with_retry


# ---------------------------------------------------------------------------
# Resultados
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BuildStartResult:
    build_id: str
    status: str = "IN_PROGRESS"
    start_time: Optional[datetime] = None


@dataclass(frozen=True)
class DeploymentResult:
    deployment_id: str
    status: str = "Created"


# ---------------------------------------------------------------------------
# Configuração de deploy
# ---------------------------------------------------------------------------

DEFAULT_STRATEGY_CONFIG = "CodeDeployDefault.AllAtOnce"

STRATEGY_CONFIG_NAMES = {
    "all-at-once": "CodeDeployDefault.AllAtOnce",
    "half-at-a-time": "CodeDeployDefault.HalfAtATime",
    "one-at-a-time": "CodeDeployDefault.OneAtATime",
    "blue-green": "CodeDeployDefault.AllAtOnceBlueGreen",
}


def strategy_config_name(strategy: Optional[str]) -> str:
    """Nome da configuração de deploy para a estratégia (default AllAtOnce)."""
    return STRATEGY_CONFIG_NAMES.get(strategy or "", DEFAULT_STRATEGY_CONFIG)


def _instance_tags(raw: Any) -> Tuple[Tuple[str, str], ...]:
    """Pares (key, value) válidos de `instance_tags`; entradas sem chave são ignoradas."""
    if not isinstance(raw, (list, tuple)):
        return ()
    tags: List[Tuple[str, str]] = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            continue
        key = entry.get("key", entry.get("Key"))
        if not key:
            continue
        value = entry.get("value", entry.get("Value"))
        tags.append((str(key), "" if value is None else str(value)))
    return tuple(tags)


@dataclass(frozen=True)
class DeploymentConfig:
    deployment_name: str = "Pipeline Deployment"
    environment: str = "development"
    target_type: str = "ec2"
    instance_tags: Tuple[Tuple[str, str], ...] = ()
    strategy: str = "all-at-once"
    health_check_url: Optional[str] = None
    wait_time_minutes: Optional[int] = None
    rollback_enabled: bool = True
    rollback_on_deployment_failure: bool = True
    rollback_on_alarm: bool = False

    @classmethod
    def from_node_data(cls, data: Mapping[str, Any]) -> "DeploymentConfig":
        """
        Constrói a configuração a partir de `node.data`.

        Chaves lidas: deployment_name, environment, target_type,
        instance_tags ([{key, value}]), deployment_strategy
        ({type, health_check_url, wait_time_minutes}, ou só o `type` como
        string) e rollback_config
        ({enabled, on_deployment_failure, on_alarm_threshold}).
        """
        environment = str(data.get("environment") or "development")

        tags = _instance_tags(data.get("instance_tags")) or (("Environment", environment),)

        strategy = data.get("deployment_strategy") or {}
        if isinstance(strategy, str):
            strategy = {"type": strategy}
        elif not isinstance(strategy, Mapping):
            strategy = {}
        rollback = data.get("rollback_config")
        if not isinstance(rollback, Mapping):
            rollback = {}

        return cls(
            deployment_name=str(data.get("deployment_name") or "Pipeline Deployment"),
            environment=environment,
            target_type=str(data.get("target_type") or "ec2"),
            instance_tags=tags,
            strategy=str(strategy.get("type") or "all-at-once"),
            health_check_url=strategy.get("health_check_url"),
            wait_time_minutes=strategy.get("wait_time_minutes"),
            rollback_enabled=bool(rollback.get("enabled", True)),
            rollback_on_deployment_failure=bool(rollback.get("on_deployment_failure", True)),
            rollback_on_alarm=bool(rollback.get("on_alarm_threshold", False)),
        )

    @property
    def deployment_group_name(self) -> str:
        return f"{self.environment}-group"

    @property
    def deployment_config_name(self) -> str:
        return strategy_config_name(self.strategy)

    def rollback_events(self) -> List[str]:
        events: List[str] = []
        if not self.rollback_enabled:
            return events
        if self.rollback_on_deployment_failure:
            events.append("DEPLOYMENT_FAILURE")
        if self.rollback_on_alarm:
            events.append("DEPLOYMENT_STOP_ON_ALARM")
        return events

    def ec2_tag_filters(self) -> List[Dict[str, str]]:
        return [{"Type": "KEY_AND_VALUE", "Key": k, "Value": v} for k, v in self.instance_tags]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deployment_name": self.deployment_name,
            "environment": self.environment,
            "target_type": self.target_type,
            "instance_tags": [{"key": k, "value": v} for k, v in self.instance_tags],
            "deployment_strategy": {
                "type": self.strategy,
                "config_name": self.deployment_config_name,
                "health_check_url": self.health_check_url,
                "wait_time_minutes": self.wait_time_minutes,
            },
            "rollback_config": {
                "enabled": self.rollback_enabled,
                "events": self.rollback_events(),
            },
        }


# ---------------------------------------------------------------------------
# Protocolos
# ---------------------------------------------------------------------------

@runtime_checkable
class BuildTrigger(Protocol):
    def start(
        self,
        project_name: str,
        buildspec: str,
        env_overrides: Optional[Dict[str, str]] = None,
    ) -> BuildStartResult:
        ...


@runtime_checkable
class DeployTrigger(Protocol):
    def deploy(self, build_id: str, config: DeploymentConfig) -> DeploymentResult:
        ...


# ---------------------------------------------------------------------------
# Wrappers com retry
# ---------------------------------------------------------------------------

@dataclass
class RetryingBuildTrigger:
    inner: BuildTrigger
    policy: RetryPolicy = field(default_factory=RetryPolicy)
    sleep: Optional[Callable[[float], Any]] = None
    on_event: Optional[EventCallback] = None

    def start(
        self,
        project_name: str,
        buildspec: str,
        env_overrides: Optional[Dict[str, str]] = None,
    ) -> BuildStartResult:
        kwargs: Dict[str, Any] = {"on_event": self.on_event}
        if self.sleep is not None:
            kwargs["sleep"] = self.sleep
        return with_retry(
            lambda: self.inner.start(project_name, buildspec, env_overrides),
            self.policy,
            **kwargs,
        )


@dataclass
class RetryingDeployTrigger:
    inner: DeployTrigger
    policy: RetryPolicy = field(default_factory=RetryPolicy)
    sleep: Optional[Callable[[float], Any]] = None
    on_event: Optional[EventCallback] = None

    def deploy(self, build_id: str, config: DeploymentConfig) -> DeploymentResult:
        kwargs: Dict[str, Any] = {"on_event": self.on_event}
        if self.sleep is not None:
            kwargs["sleep"] = self.sleep
        return with_retry(lambda: self.inner.deploy(build_id, config), self.policy, **kwargs)
