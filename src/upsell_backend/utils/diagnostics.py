"""Errors raised at the Shopify boundary and mapped to generic HTTP failures by the routes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True, eq=False)
class DiagnosticError(RuntimeError):
    """Upstream failure with a stable ``code`` the logs can be grepped for.

    ``upstream_status`` is the HTTP status Shopify answered with, when there was a response at all
    (429 for throttling, 401 for a bad token and so on).
    """

    code: str
    message: str
    detail: str | None = None
    upstream_status: int | None = None

    def __str__(self) -> str:
        text = f"{self.code}: {self.message}"
        if self.detail:
            text = f"{text} ({self.detail})"
        return text

    def to_extra(self) -> dict[str, Any]:
        data: dict[str, Any] = {"code": self.code, "reason": self.message}
        if self.detail:
            data["detail"] = self.detail
        if self.upstream_status is not None:
            data["upstream_status"] = self.upstream_status
        return data


__all__ = ["DiagnosticError"]
