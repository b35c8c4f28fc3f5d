"""Display classification and unit scaling for replica telemetry.

Every function here looks only at the value passed in, so the same input
always renders the same way regardless of registry or history state.
"""

from typing import Literal

LatencyBucket = Literal["good", "warn", "bad"]
HealthBucket = Literal["online", "offline"]
BreakerBucket = Literal["good", "warn", "bad", "unknown"]

LATENCY_GOOD_BELOW_MS = 50.0
LATENCY_WARN_BELOW_MS = 200.0

_BREAKER_BUCKETS: dict[str, BreakerBucket] = {
    "closed": "good",
    "half_open": "warn",
    "open": "bad",
}


def latency_bucket(ms: float) -> LatencyBucket:
    if ms < LATENCY_GOOD_BELOW_MS:
        return "good"
    if ms < LATENCY_WARN_BELOW_MS:
        return "warn"
    return "bad"


def health_bucket(alive: bool) -> HealthBucket:
    return "online" if alive else "offline"


def format_latency(ms: float) -> str:
    """Scale a millisecond latency to µs, ms or s."""
    if ms < 1:
        # Halves round up
        return f"{int(ms * 1000 + 0.5)}µs"
    if ms < 1000:
        return f"{ms:.1f}ms"
    return f"{ms / 1000:.2f}s"


def format_error_rate(rate: float) -> str:
    return f"{rate * 100:.2f}%"


def breaker_state_bucket(state: str) -> BreakerBucket:
    return _BREAKER_BUCKETS.get(str(state).lower(), "unknown")


def format_breaker_error_rate(rate: float) -> str:
    return f"{rate * 100:.1f}%"


def format_count(value: int | float) -> str:
    return f"{value:,}"


def format_response_time(ms: float) -> str:
    return f"{ms:.2f} ms"


def format_algorithm(name: str) -> str:
    return name.replace("_", " ").title()


def backend_label(url: str) -> str:
    """Shorten local backend URLs (``http://localhost:9001`` -> ``:9001``)."""
    return url.replace("http://localhost:", ":")
