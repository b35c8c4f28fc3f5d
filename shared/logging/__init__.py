from .json import (
    CustomJsonFormatter,
    PlainFormatter,
    SensitiveDataFilter,
    configure_logging,
)

__all__ = [
    "CustomJsonFormatter",
    "PlainFormatter",
    "SensitiveDataFilter",
    "configure_logging",
]
