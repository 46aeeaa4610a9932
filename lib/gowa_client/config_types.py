from __future__ import annotations

from dataclasses import dataclass, field

import httpx

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_TIMEOUT_S = 30.0

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff for network-level failures.

    POST is retried by default, which matches how the gateway endpoints were
    used historically. A send whose response is lost may then be delivered
    twice; use ``RetryPolicy.idempotent_only()`` when that matters.
    """

    max_retries: int = 3
    wait_min_s: float = 0.2
    wait_max_s: float = 2.0
    retry_methods: frozenset[str] = SAFE_METHODS | {"POST"}

    @classmethod
    def idempotent_only(cls, **kwargs) -> "RetryPolicy":
        return cls(retry_methods=SAFE_METHODS, **kwargs)

    @classmethod
    def disabled(cls) -> "RetryPolicy":
        return cls(max_retries=0)

    def allows(self, method: str) -> bool:
        return self.max_retries > 0 and method.upper() in self.retry_methods

    def backoff(self, attempt: int) -> float:
        return min(self.wait_min_s * (2 ** attempt), self.wait_max_s)


@dataclass(frozen=True)
class ClientConfig:
    base_url: str = DEFAULT_BASE_URL
    username: str = ""
    password: str = ""
    timeout_s: float = DEFAULT_TIMEOUT_S
    transport: httpx.BaseTransport | None = None
    retry: RetryPolicy = field(default_factory=RetryPolicy)
