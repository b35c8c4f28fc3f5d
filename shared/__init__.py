"""Shared utilities and components for the dashboard service."""

from .config import BaseBalancerConfig, BaseLoggingConfig, BaseServiceConfig
from .constants import Endpoints, Environment

__all__ = [
    "Environment",
    "Endpoints",
    "BaseServiceConfig",
    "BaseLoggingConfig",
    "BaseBalancerConfig",
]
