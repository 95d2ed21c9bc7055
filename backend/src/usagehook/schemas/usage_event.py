"""Pydantic schemas for usage events sent to the usage hook."""
from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """Synthetic actor attached to a usage event."""

    model_config = ConfigDict(frozen=True)

    handle: str = Field(..., description="Opaque handle label")
    user_id: str = Field(..., description="Numeric user id as a string")


class TokenCounts(BaseModel):
    """Simulated token consumption for one interaction."""

    model_config = ConfigDict(frozen=True)

    input: int = Field(..., ge=0, description="Input tokens")
    output: int = Field(..., ge=0, description="Output tokens")
    cache_creation: int = Field(..., ge=0, description="Cache creation tokens")
    cache_read: int = Field(..., ge=0, description="Cache read tokens")


class UsageEvent(BaseModel):
    """
    Usage event payload as it goes over the wire.

    Field names match what the receiving service expects. With the
    message/request hash strategy ``interaction_id`` and ``interaction_hash``
    carry the same digest.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "twitter_handle": "@t_heavy",
                "twitter_user_id": "5432109876",
                "timestamp": "2025-08-05T12:00:00.000Z",
                "tokens": {"input": 12000, "output": 7000, "cache_creation": 900, "cache_read": 2500},
                "model": "claude-opus-4-1-20250805",
                "interaction_id": "3f7c...",
                "interaction_hash": "3f7c...",
            }
        },
    )

    twitter_handle: str
    twitter_user_id: str
    timestamp: str = Field(..., description="ISO-8601 UTC instant with millisecond precision")
    tokens: TokenCounts
    model: str
    interaction_id: str
    interaction_hash: str = Field(..., min_length=64, max_length=64)

    @property
    def identity(self) -> Identity:
        return Identity(handle=self.twitter_handle, user_id=self.twitter_user_id)

    def to_wire(self) -> bytes:
        """Serialize to the compact JSON body posted to the hook."""
        return self.model_dump_json().encode("utf-8")
