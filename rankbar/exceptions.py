"""Custom exception hierarchy for rankbar.

Exception Hierarchy:
    RankbarError (base)
    ├── ApiError - Remote analysis/generation API calls
    │   ├── ApiConnectionError (retryable)
    │   ├── ApiTimeoutError (retryable)
    │   └── ApiResponseError - non-success status or malformed payload
    ├── InvalidInputError - Input that cannot start an operation
    └── ConfigurationError - Settings/configuration issues

Nothing in the palette retries automatically; ``retryable`` only tells the
user that resubmitting may help.

Usage:
    from rankbar.exceptions import ApiResponseError

    if response.status_code >= 400:
        raise ApiResponseError("Analysis failed", status_code=response.status_code)
"""

from typing import Any, Optional


class RankbarError(Exception):
    """Base exception for all rankbar errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about the error (e.g., URLs, status codes)
        retryable: Whether this error might succeed on retry
    """

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        **context: Any,
    ) -> None:
        self.message = message
        self.context = context
        self.retryable = retryable
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


# =============================================================================
# API Errors
# =============================================================================


class ApiError(RankbarError):
    """Base exception for remote API calls."""

    pass


class ApiConnectionError(ApiError):
    """Failed to reach the API."""

    def __init__(
        self,
        message: str = "API connection failed",
        *,
        endpoint: Optional[str] = None,
        **context: Any,
    ) -> None:
        if endpoint:
            context["endpoint"] = endpoint
        super().__init__(message, retryable=True, **context)


class ApiTimeoutError(ApiError):
    """The API did not answer within the configured timeout."""

    def __init__(
        self,
        message: str = "API request timed out",
        *,
        timeout_seconds: Optional[float] = None,
        **context: Any,
    ) -> None:
        if timeout_seconds is not None:
            context["timeout_seconds"] = timeout_seconds
        super().__init__(message, retryable=True, **context)


class ApiResponseError(ApiError):
    """The API answered with a non-success status or an unusable payload."""

    def __init__(
        self,
        message: str = "Unexpected API response",
        *,
        status_code: Optional[int] = None,
        **context: Any,
    ) -> None:
        self.status_code = status_code
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(message, **context)


# =============================================================================
# Input Errors
# =============================================================================


class InvalidInputError(RankbarError):
    """Palette input that cannot be turned into an operation."""

    def __init__(
        self,
        message: str = "Invalid input",
        *,
        text: Optional[str] = None,
        **context: Any,
    ) -> None:
        if text is not None:
            context["text"] = text[:100] + "..." if len(text) > 100 else text
        super().__init__(message, **context)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(RankbarError):
    """Configuration or settings error."""

    def __init__(
        self,
        message: str = "Configuration error",
        *,
        setting: Optional[str] = None,
        **context: Any,
    ) -> None:
        if setting:
            context["setting"] = setting
        super().__init__(message, **context)
