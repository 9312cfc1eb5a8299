"""Success/error result values returned across network and import boundaries."""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    success: bool
    data: T | None = None
    error: str | None = None

    @classmethod
    def ok(cls, data: T) -> "Result[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "Result[T]":
        return cls(success=False, error=error)


@dataclass
class UploadReport:
    """Aggregate outcome of a batch upload.

    Items that succeeded stay uploaded even when ``success`` is False.
    """

    succeeded: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    @property
    def success(self) -> bool:
        return self.failed == 0

    @property
    def error(self) -> str | None:
        if self.success:
            return None
        return (
            f"Uploaded {self.succeeded} workouts, {self.failed} failed. "
            f"Errors: {'; '.join(self.errors)}"
        )
