"""ServiceResult and ServiceError — the contract every command returns.

INVARIANT: All service-layer methods return ServiceResult. A failed result
carries one :class:`ErrorKind` code per failure category so the CLI (or
any other adapter) can map it without inspecting messages.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from taskboard.domain.errors import ErrorKind, TaskboardError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: ErrorKind
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"assign_task"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (counts, paging).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def from_error(cls, op: str, exc: TaskboardError) -> ServiceResult:
        """Build the failed result for a typed domain failure."""
        return cls(
            ok=False,
            op=op,
            error=ServiceError(code=exc.kind, message=exc.message, detail=exc.detail),
        )

    @property
    def code(self) -> ErrorKind | None:
        """Failure code, or None on success."""
        return self.error.code if self.error else None
