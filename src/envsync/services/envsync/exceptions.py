"""Reconciliation engine exceptions."""

from __future__ import annotations

from pathlib import Path


class EnvSyncError(Exception):
    """Base exception for reconciliation errors.

    Attributes:
        message: Human-readable error message.
        environment: Environment the error relates to (if applicable).
    """

    def __init__(self, message: str, environment: str | None = None) -> None:
        """Initialize EnvSyncError.

        Args:
            message: Human-readable error message.
            environment: Environment the error relates to.
        """
        super().__init__(message)
        self.message = message
        self.environment = environment

    def __str__(self) -> str:
        """Return string representation of the error."""
        parts = [self.message]
        if self.environment:
            parts.append(f"[environment: {self.environment}]")
        return " ".join(parts)


class OperationCancelledError(EnvSyncError):
    """Raised when the operator interrupts a prompt.

    Unlike a declined confirmation, cancellation aborts the whole run.
    """

    def __init__(self, message: str = "Operation cancelled by user") -> None:
        super().__init__(message=message)


class LocalStoreError(EnvSyncError):
    """Raised when a local env file cannot be read or written."""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        environment: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize LocalStoreError.

        Args:
            message: Human-readable error message.
            path: File that could not be accessed.
            environment: Environment the file belongs to.
            original_error: The underlying OSError or UnicodeDecodeError.
        """
        super().__init__(message=message, environment=environment)
        self.path = path
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        text = super().__str__()
        if self.path:
            text += f" [path: {self.path}]"
        return text
