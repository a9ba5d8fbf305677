from __future__ import annotations

DETAIL_LIMIT = 200


def truncate_detail(body: str | None, limit: int = DETAIL_LIMIT) -> str | None:
    if body is None:
        return None
    return body[:limit]


class ExternalServiceError(RuntimeError):
    """A connector call failed; carries the originating platform and a truncated upstream body."""

    def __init__(
        self,
        service: str,
        *,
        status: int | None = None,
        message: str | None = None,
        detail: str | None = None,
    ):
        super().__init__(message or f"External service {service} encountered an error")
        self.service = service
        self.status = status
        self.detail = truncate_detail(detail)

    def __str__(self) -> str:
        base = f"{self.service}: {self.args[0]}"
        if self.status is not None:
            base = f"{base} (HTTP {self.status})"
        if self.detail:
            base = f"{base}: {self.detail}"
        return base
