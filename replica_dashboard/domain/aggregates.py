from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    TypeAdapter,
    field_validator,
)

from .models import Integer, Number


class AdminResource(str, Enum):
    """Aggregate resources polled from the balancer's admin API."""

    RATE_LIMIT = "rate_limit"
    CIRCUIT_BREAKER = "circuit_breaker"
    LOAD_BALANCER = "load_balancer"


class RateLimitStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: StrictBool
    type: str
    global_limit: Number
    per_ip_limit: Number
    active_ips: Integer
    global_tokens: Number | None = None


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        # The balancer reports any state it cannot name as UNKNOWN
        if isinstance(value, str):
            return cls.UNKNOWN
        return None


class CircuitBreakerStatus(BaseModel):
    # The balancer also reports total_calls, success_count, half_open_calls
    model_config = ConfigDict(frozen=True, extra="allow")

    state: CircuitState
    failure_count: Integer
    error_rate: Number
    last_failure_time: datetime | None = Field(
        None, validation_alias=AliasChoices("last_failure_time", "last_fail_time")
    )
    next_attempt: datetime | None = None

    @field_validator("state", mode="before")
    @classmethod
    def _normalise_state(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class LoadBalancerSummary(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    algorithm: str | None = None
    total_requests: Integer | None = None
    active_backends: Integer | None = Field(
        None, validation_alias=AliasChoices("active_backends", "alive_backends")
    )
    avg_response_time: Number | None = None
    requests_per_minute: Number | None = None


CircuitBreakerMap = dict[str, CircuitBreakerStatus]

circuit_breaker_map_adapter: TypeAdapter[CircuitBreakerMap] = TypeAdapter(
    CircuitBreakerMap
)
