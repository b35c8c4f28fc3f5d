class Endpoints:
    """Centralised balancer endpoint paths"""

    # Streaming
    METRICS_WS = "/metrics/ws"

    # Admin API
    RATE_LIMIT = "/api/rate-limit"
    CIRCUIT_BREAKER = "/api/circuit-breaker"
    LOAD_BALANCER = "/api/config"

    @classmethod
    def admin_resources(cls) -> dict[str, str]:
        """Get the polled admin resources keyed by resource name"""
        return {
            "rate_limit": cls.RATE_LIMIT,
            "circuit_breaker": cls.CIRCUIT_BREAKER,
            "load_balancer": cls.LOAD_BALANCER,
        }
