"""Outcome of a single usage hook request."""
from typing import Any

from pydantic import BaseModel, ConfigDict

from usagehook.errors import DispatchError


class DispatchResult(BaseModel):
    """Terminal state of one request: succeeded with a body, or failed with an error."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    body: Any = None
    status_code: int | None = None
    error: DispatchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, body: Any, status_code: int) -> "DispatchResult":
        return cls(body=body, status_code=status_code)

    @classmethod
    def failure(cls, error: DispatchError, status_code: int | None = None) -> "DispatchResult":
        return cls(error=error, status_code=status_code)

    def raise_for_error(self) -> Any:
        """Return the body, or raise the failure."""
        if self.error is not None:
            raise self.error
        return self.body
