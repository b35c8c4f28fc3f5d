"""Shared configuration base classes.

Provides the common settings every entry point needs: logging and the
location of the load balancer's operational port.
"""

from pydantic_settings import BaseSettings


class BaseLoggingConfig(BaseSettings):
    """Common logging configuration."""

    app_log_level: str = "INFO"
    app_log_redaction_patterns: list[str] = [
        "password",
        "token",
        "secret",
        "authorization",
        "cookie",
    ]
    app_environment: str = "production"


class BaseBalancerConfig(BaseSettings):
    """Where the balancer's metrics websocket and admin API listen."""

    balancer_host: str = "localhost"
    balancer_metrics_port: int = 9000
    balancer_use_tls: bool = False

    @property
    def balancer_http_url(self) -> str:
        scheme = "https" if self.balancer_use_tls else "http"
        return f"{scheme}://{self.balancer_host}:{self.balancer_metrics_port}"

    @property
    def balancer_ws_url(self) -> str:
        scheme = "wss" if self.balancer_use_tls else "ws"
        return f"{scheme}://{self.balancer_host}:{self.balancer_metrics_port}"


class BaseServiceConfig(BaseLoggingConfig, BaseBalancerConfig):
    """Base configuration combining logging and balancer settings.

    The otel_service_name should be overridden by each entry point.
    """

    otel_service_name: str = "unknown"  # Should be overridden by service


__all__ = ["BaseLoggingConfig", "BaseBalancerConfig", "BaseServiceConfig"]
