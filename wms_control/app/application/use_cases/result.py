from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class UseCaseResult:
    success: bool
    message: str = ""
    code: str | None = None
    field_errors: dict[str, str] = field(default_factory=dict)
    record: Any = None

    @classmethod
    def invalid(cls, field_errors: dict[str, str]) -> "UseCaseResult":
        return cls(success=False, code="VALIDATION_ERROR", message="Review the highlighted fields.", field_errors=field_errors)

    @classmethod
    def denied(cls, page: str) -> "UseCaseResult":
        return cls(success=False, code="PERMISSION_DENIED", message=f"Missing edit permission for {page}.")
