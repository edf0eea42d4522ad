"""
Integrações do blockci com colaboradores externos.

- **retry**: Retry Helper (backoff exponencial + jitter, erros transitórios)
- **triggers**: contratos BuildTrigger/DeployTrigger, DeploymentConfig e
  wrappers com retry
- **builds**: caminho pré-disparo baseado em blocos e registros de build
"""

from .builds import (
    PipelineBuildOutcome,
    artifact_location,
    build_duration_seconds,
    build_project_name,
    is_terminal_status,
    map_build_status,
    record_build_status,
    sanitize_project_id,
    start_pipeline_build,
)
from .retry import RetryPolicy, compute_delay_ms, is_retryable_error, with_retry
from .triggers import (
    BuildStartResult,
    BuildTrigger,
    DeployTrigger,
    DeploymentConfig,
    DeploymentResult,
    RetryingBuildTrigger,
    RetryingDeployTrigger,
    strategy_config_name,
)

__all__ = [
    "PipelineBuildOutcome",
    "artifact_location",
    "build_duration_seconds",
    "build_project_name",
    "is_terminal_status",
    "map_build_status",
    "record_build_status",
    "sanitize_project_id",
    "start_pipeline_build",
    "RetryPolicy",
    "compute_delay_ms",
    "is_retryable_error",
    "with_retry",
    "BuildStartResult",
    "BuildTrigger",
    "DeployTrigger",
    "DeploymentConfig",
    "DeploymentResult",
    "RetryingBuildTrigger",
    "RetryingDeployTrigger",
    "strategy_config_name",
]
