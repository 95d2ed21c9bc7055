"""Pydantic schemas for usage events and dispatch outcomes."""

from usagehook.schemas.dispatch_result import DispatchResult
from usagehook.schemas.usage_event import (
    Identity,
    TokenCounts,
    UsageEvent,
)

__all__ = [
    "DispatchResult",
    "Identity",
    "TokenCounts",
    "UsageEvent",
]
