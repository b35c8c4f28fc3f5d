from pydantic import field_validator

from shared.config import BaseServiceConfig
from shared.constants import Endpoints


class Settings(BaseServiceConfig):
    # Streaming
    stream_path: str = Endpoints.METRICS_WS
    stream_heartbeat_s: float | None = None
    stream_connect_retries: int = 1
    stream_reconnect_enabled: bool = False
    stream_reconnect_base_delay_s: float = 1.0
    stream_reconnect_max_delay_s: float = 30.0
    stream_reconnect_max_attempts: int = 0  # 0 = unlimited

    # Admin API polling
    admin_rate_limit_path: str = Endpoints.RATE_LIMIT
    admin_circuit_breaker_path: str = Endpoints.CIRCUIT_BREAKER
    admin_load_balancer_path: str = Endpoints.LOAD_BALANCER
    poll_interval_ms: int = 5000
    poll_request_timeout_s: float = 4.0

    # History
    history_max_samples: int = 60
    history_sample_snapshots: bool = False

    # Dashboard HTTP surface
    dashboard_host: str = "0.0.0.0"
    dashboard_port: int = 8050

    otel_service_name: str = "replica_dashboard"

    @field_validator(
        "poll_interval_ms",
        "history_max_samples",
        "stream_connect_retries",
        "poll_request_timeout_s",
        "stream_reconnect_base_delay_s",
        "stream_reconnect_max_delay_s",
    )
    @classmethod
    def _positive(cls, value):
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @property
    def stream_url(self) -> str:
        return f"{self.balancer_ws_url}{self.stream_path}"

    @property
    def admin_paths(self) -> dict[str, str]:
        return {
            "rate_limit": self.admin_rate_limit_path,
            "circuit_breaker": self.admin_circuit_breaker_path,
            "load_balancer": self.admin_load_balancer_path,
        }


settings = Settings()
