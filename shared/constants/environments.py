from enum import Enum


class Environment(str, Enum):
    """Deployment environment, read from ``APP_ENVIRONMENT``."""

    PRODUCTION = "production"
    STAGING = "staging"
    TESTING = "testing"
    DEVELOPMENT = "development"

    @classmethod
    def parse(cls, env: str) -> "Environment":
        """Unknown or empty values are treated as production."""
        try:
            return cls(env.strip().lower())
        except ValueError:
            return cls.PRODUCTION

    @classmethod
    def is_development(cls, env: str) -> bool:
        return cls.parse(env) is cls.DEVELOPMENT
