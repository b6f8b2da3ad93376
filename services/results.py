"""
Result objects returned across the service boundary instead of exceptions.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus


@dataclass(frozen=True)
class ServiceResult:
    succeeded: bool
    message: str = ""
    status: int = HTTPStatus.OK

    @classmethod
    def success(cls, status: int = HTTPStatus.OK, message: str = "") -> "ServiceResult":
        return cls(True, message, int(status))

    @classmethod
    def fail(cls, message: str, status: int = HTTPStatus.BAD_REQUEST) -> "ServiceResult":
        return cls(False, message, int(status))

    def to_dict(self) -> dict:
        return {"succeeded": self.succeeded, "message": self.message, "status": self.status}


@dataclass(frozen=True)
class IdentityResult:
    """Outcome of a user-management operation, with error descriptions on failure."""
    succeeded: bool
    errors: tuple = field(default_factory=tuple)

    @classmethod
    def success(cls) -> "IdentityResult":
        return cls(True)

    @classmethod
    def failed(cls, *errors: str) -> "IdentityResult":
        return cls(False, tuple(errors))

    @property
    def first_error(self) -> str:
        return self.errors[0] if self.errors else "unknown error"
