# src/blockci/integrations/retry.py
"""
Retry Helper para chamadas a serviços externos (build/deploy).

Política:
    - até `max_attempts` tentativas (default 3)
    - atraso = base_delay_ms * 2^(tentativa-1) (ou base fixa, sem backoff
      exponencial) + jitter aleatório de até 10% do atraso, limitado a
      `max_delay_ms`
    - apenas erros classificados como transitórios são repetidos; os demais
      propagam na primeira ocorrência
    - esgotadas as tentativas, o último erro propaga

Classificação de erro transitório (`is_retryable_error`):
    - status HTTP >= 500
    - código de erro contendo ThrottlingException, TooManyRequestsException,
      ServiceUnavailableException, InternalServerError ou RequestTimeout
    - mensagem contendo Rate exceeded, Too Many Requests, Service Unavailable,
      Internal Server Error, Timeout ou Connection
    - `TimeoutError` / `ConnectionError` do próprio Python

O código e o status são lidos do atributo `code`/`status_code` da exceção,
do nome da classe, ou do dicionário `response` no formato do botocore
(`response["Error"]["Code"]`, `response["ResponseMetadata"]["HTTPStatusCode"]`).

Sem estado compartilhado: `sleep` e `rand` são injetáveis, e o progresso é
reportado por `on_event(level, message, **extra)`.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from blockci.core.config.settings import RetrySettings


T = TypeVar("T")

RETRYABLE_CODES = (
    "ThrottlingException",
    "TooManyRequestsException",
    "ServiceUnavailableException",
    "InternalServerError",
    "RequestTimeout",
)

RETRYABLE_MESSAGES = (
    "Rate exceeded",
    "Too Many Requests",
    "Service Unavailable",
    "Internal Server Error",
    "Timeout",
    "Connection",
)

EventCallback = Callable[..., None]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 30000
    exponential_backoff: bool = True

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.max_attempts,
            base_delay_ms=settings.base_delay_ms,
            max_delay_ms=settings.max_delay_ms,
            exponential_backoff=settings.exponential_backoff,
        )


def _error_code(exc: BaseException) -> str:
    response = getattr(exc, "response", None)
    if isinstance(response, dict):
        code = (response.get("Error") or {}).get("Code")
        if code:
            return str(code)
    code = getattr(exc, "code", None)
    if isinstance(code, str) and code:
        return code
    return type(exc).__name__


def _status_code(exc: BaseException) -> Optional[int]:
    for attr in ("status_code", "statusCode"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    response = getattr(exc, "response", None)
    if isinstance(response, dict):
        value = (response.get("ResponseMetadata") or {}).get("HTTPStatusCode")
        if isinstance(value, int):
            return value
    return None


def is_retryable_error(exc: BaseException) -> bool:
    if isinstance(exc, (TimeoutError, ConnectionError)):
        return True

    code = _error_code(exc)
    if any(c in code for c in RETRYABLE_CODES):
        return True

    message = str(exc)
    if any(m in message for m in RETRYABLE_MESSAGES):
        return True

    status = _status_code(exc)
    return status is not None and status >= 500


def compute_delay_ms(
    attempt: int,
    policy: RetryPolicy,
    rand: Callable[[], float] = random.random,
) -> float:
    """Atraso (ms) após a tentativa `attempt` (1-based) ter falhado."""
    delay = float(policy.base_delay_ms)
    if policy.exponential_backoff:
        delay = policy.base_delay_ms * (2 ** (attempt - 1))
    delay += rand() * 0.1 * delay
    return min(delay, float(policy.max_delay_ms))


def with_retry(
    operation: Callable[[], T],
    policy: Optional[RetryPolicy] = None,
    *,
    sleep: Callable[[float], Any] = time.sleep,
    rand: Callable[[], float] = random.random,
    on_event: Optional[EventCallback] = None,
) -> T:
    """
    Executa `operation` com retry limitado e backoff exponencial.

    Args:
        operation: Chamada sem argumentos ao serviço externo.
        policy: Política de retry (default `RetryPolicy()`).
        sleep: Função de espera em segundos (injetável em testes).
        rand: Fonte de aleatoriedade do jitter, em [0, 1).
        on_event: Callback `(level, message, **extra)` para log estruturado.

    Returns:
        O retorno de `operation`.

    Raises:
        A exceção da última tentativa, ou a primeira não transitória.
    """
    policy = policy or RetryPolicy()
    max_attempts = max(1, policy.max_attempts)

    attempt = 1
    while True:
        try:
            return operation()
        except Exception as exc:
            if attempt >= max_attempts:
                if on_event is not None:
                    on_event(
                        "error",
                        f"Operation failed after {max_attempts} attempts: {exc}",
                        attempt=attempt,
                        error_type=type(exc).__name__,
                    )
                raise
            if not is_retryable_error(exc):
                if on_event is not None:
                    on_event(
                        "error",
                        f"Non-retryable error encountered: {exc}",
                        attempt=attempt,
                        error_type=type(exc).__name__,
                    )
                raise

            delay_ms = compute_delay_ms(attempt, policy, rand)
            if on_event is not None:
                on_event(
                    "warning",
                    f"Attempt {attempt} failed, retrying in {delay_ms:.0f}ms. Error: {exc}",
                    attempt=attempt,
                    delay_ms=delay_ms,
                    error_type=type(exc).__name__,
                )
            sleep(delay_ms / 1000.0)
            attempt += 1
