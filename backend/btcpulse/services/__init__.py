"""
BTC Pulse Services

Service layer containing all business logic.
"""

from btcpulse.services.base import (
    BaseService,
    ServiceError,
    SourceUnavailable,
    MalformedResponse,
    InsufficientData,
)

__all__ = [
    "BaseService",
    "ServiceError",
    "SourceUnavailable",
    "MalformedResponse",
    "InsufficientData",
]
