from .endpoints import Endpoints
from .environments import Environment

__all__ = ["Endpoints", "Environment"]
