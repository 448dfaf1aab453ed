from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class AdapterError(str, Enum):
    not_found = "not-found"
    schema_error = "schema-error"
    validation_error = "validation-error"
    unknown = "unknown"


@dataclass
class AdapterResult(Generic[T]):
    """Outcome of an adapter call that has expected failure modes.

    Callers branch on ``ok`` instead of catching exceptions; ``err`` names the
    kind of failure and ``message`` carries detail safe to pass to a client.
    """

    ok: bool
    data: Optional[T] = None
    err: Optional[AdapterError] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, data: T) -> AdapterResult[T]:
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, err: AdapterError, message: Optional[str] = None) -> AdapterResult[T]:
        return cls(ok=False, err=err, message=message)
