import math
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictBool


def _require_number(value: Any) -> Any:
    # bool is an int subclass; numeric strings are rejected on purpose
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a JSON number")
    if not math.isfinite(value):
        raise ValueError("must be finite")
    return value


def _require_integer(value: Any) -> Any:
    value = _require_number(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("must be an integer")
        return int(value)
    return value


Number = Annotated[float, BeforeValidator(_require_number)]
Integer = Annotated[int, BeforeValidator(_require_integer)]


class ReplicaRecord(BaseModel):
    """Current state of one backend replica as reported by the balancer."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Integer
    url: str = Field(..., min_length=1)
    ema_latency_ms: Number = Field(..., alias="ema_ms", ge=0)
    error_rate: Number = Field(..., ge=0, le=1)
    alive: StrictBool
    last_checked: datetime | None = None


class MetricSample(BaseModel):
    """One point of a replica's rolling history.

    ``seq`` is the append order within the store and is what ordering relies
    on; ``timestamp`` is wall-clock and only meant for display.
    """

    model_config = ConfigDict(frozen=True)

    seq: int
    timestamp: datetime
    latency: float
    error_rate: float
    alive: bool
