from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a mutating broker call.

    Callers branch on ``success`` (or truthiness) instead of catching
    exceptions; ``error`` holds the failure when there is one.
    """

    success: bool
    value: Any = None
    error: Exception | None = None

    @classmethod
    def ok(cls, value: Any = True) -> OperationResult:
        return cls(success=True, value=value)

    @classmethod
    def failure(cls, error: Exception) -> OperationResult:
        return cls(success=False, error=error)

    def __bool__(self) -> bool:
        return self.success

    @property
    def error_message(self) -> str | None:
        return str(self.error) if self.error is not None else None
