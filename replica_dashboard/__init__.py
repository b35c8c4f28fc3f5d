"""Live replica telemetry dashboard client for the load balancer."""

__version__ = "0.1.0"
