"""Custom exception classes for the application.

Delivery failures (timeouts, refused connections, non-2xx responses) are not
exceptions: channel adapters record them as attempts. Only problems that
must abort the triggering call are raised:

- ``InputError`` aborts a dispatch before any attempt is made.
- ``StorageError`` aborts a drain pass.
- ``InvalidJobTransition`` guards the job status graph.
"""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base application exception.

    Follows RFC 7807 Problem Details for HTTP APIs.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message.
        type: Error type identifier (used in RFC 7807 problem details).
        title: Short, human-readable summary of the problem type.
        instance: URI reference that identifies the specific occurrence of the problem.
        extra: Additional context-specific information about the error.

    Example:
        raise AppException(
            status_code=503,
            detail="Job store unavailable",
            type="storage-error",
            extra={"operation": "drain"},
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application exception.

        Args:
            status_code: HTTP status code.
            detail: Human-readable error message.
            type: Error type identifier.
            title: Short summary of the problem type.
            instance: URI reference identifying this specific occurrence.
            extra: Additional context about the error.
        """
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or self._default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        """Get default title for HTTP status code."""
        titles = {
            400: "Bad Request",
            404: "Not Found",
            409: "Conflict",
            422: "Unprocessable Entity",
            500: "Internal Server Error",
            502: "Bad Gateway",
            503: "Service Unavailable",
        }
        return titles.get(status_code, "Error")


class InputError(AppException):
    """Required dispatch input is missing or malformed.

    Raised before any delivery attempt, e.g. when a channel needs
    credentials the integration does not carry or a destination list is empty.

    Example:
        raise InputError(
            detail="WhatsApp API token and instance ID are required",
            extra={"integration_id": "wa-staff"},
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "input-error",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=400,
            detail=detail,
            type=type,
            title="Bad Request",
            instance=instance,
            extra=extra,
        )


class InvalidJobTransition(AppException):
    """A job status change outside pending→processing→sent|failed was requested."""

    def __init__(
        self,
        current: str,
        target: str,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.current = current
        self.target = target
        super().__init__(
            status_code=409,
            detail=f"Invalid job status transition: {current} -> {target}",
            type="invalid-job-transition",
            title="Conflict",
            extra={"current": current, "target": target, **(extra or {})},
        )


class StorageError(AppException):
    """The durable job store could not be read or updated.

    Not retried; the drain pass that hit it is aborted and the error is
    surfaced to whoever triggered the drain.
    """

    def __init__(
        self,
        detail: str,
        type: str = "storage-error",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=503,
            detail=detail,
            type=type,
            title="Service Unavailable",
            instance=instance,
            extra=extra,
        )


__all__ = [
    "AppException",
    "InputError",
    "InvalidJobTransition",
    "StorageError",
]
