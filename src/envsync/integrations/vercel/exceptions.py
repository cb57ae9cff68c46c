"""Vercel integration custom exceptions."""

from __future__ import annotations

from typing import Any


class VercelError(Exception):
    """Base exception for Vercel environment variable operations.

    Attributes:
        message: Human-readable error message.
        environment: Vercel environment the call targeted (if applicable).
        key: Variable name involved (if applicable).
    """

    def __init__(
        self,
        message: str,
        environment: str | None = None,
        key: str | None = None,
    ) -> None:
        """Initialize VercelError.

        Args:
            message: Human-readable error message.
            environment: Vercel environment the call targeted.
            key: Variable name involved.
        """
        super().__init__(message)
        self.message = message
        self.environment = environment
        self.key = key

    def __str__(self) -> str:
        """Return string representation of the error."""
        parts = [self.message]
        if self.key and self.environment:
            parts.append(f"[{self.key} in {self.environment}]")
        elif self.environment:
            parts.append(f"[{self.environment}]")
        return " ".join(parts)


class VercelBinaryNotFoundError(VercelError):
    """Raised when the vercel CLI cannot be located."""

    def __init__(self, command: str = "vercel") -> None:
        super().__init__(
            message=(
                f"{command} not found in PATH. Install it with: npm i -g vercel"
            ),
        )
        self.command = command


class VercelCommandError(VercelError):
    """Raised when a vercel CLI command exits non-zero or times out."""

    def __init__(
        self,
        message: str,
        stderr: str | None = None,
        environment: str | None = None,
        key: str | None = None,
    ) -> None:
        super().__init__(message=message, environment=environment, key=key)
        self.stderr = stderr


class VercelEnvExistsError(VercelError):
    """Raised when adding a variable that already exists in the environment."""

    def __init__(self, key: str, environment: str) -> None:
        super().__init__(
            message=f"Environment variable {key} already exists",
            environment=environment,
            key=key,
        )


class VercelAPIError(VercelError):
    """Raised when the Vercel REST API returns an error response.

    Attributes:
        status_code: HTTP status code.
        response_body: Parsed response body (if available).
        endpoint: The API endpoint that was called.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: dict[str, Any] | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(message=message)
        self.status_code = status_code
        self.response_body = response_body
        self.endpoint = endpoint

    def __str__(self) -> str:
        """Return string representation of the error."""
        parts = [self.message]
        if self.status_code:
            parts.append(f"(status: {self.status_code})")
        if self.endpoint:
            parts.append(f"[endpoint: {self.endpoint}]")
        return " ".join(parts)


class VercelAuthError(VercelAPIError):
    """Raised on 401/403 responses from the Vercel REST API."""


class VercelConnectionError(VercelAPIError):
    """Raised when the Vercel REST API cannot be reached."""

    def __init__(
        self,
        message: str = "Failed to connect to the Vercel API",
        endpoint: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message=message, endpoint=endpoint)
        self.original_error = original_error
