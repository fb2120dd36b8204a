"""Error handling module for the statlink application.

This module provides:
- Custom exception classes for each failure kind of a stats run
  (snapshot load, authentication, clearance, fetch, snapshot write)
- User-friendly error message generation with suggested actions
- Centralized error handling service
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
import structlog

log = structlog.stdlib.get_logger()


class ErrorCategory(Enum):
    """Categories of errors for classification and handling."""
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    CLEARANCE = "clearance"
    FETCH = "fetch"
    SNAPSHOT_LOAD = "snapshot_load"
    SNAPSHOT_WRITE = "snapshot_write"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    UNEXPECTED = "unexpected"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ErrorContext:
    """Context information for an error."""
    operation: str
    component: str
    details: dict[str, Any]


@dataclass(frozen=True)
class UserFriendlyError:
    """User-friendly error representation with suggested actions."""
    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    suggested_actions: list[str]
    technical_details: str | None = None
    recoverable: bool = True


def _describe(error: Exception | None) -> str | None:
    if error is None:
        return None
    return f"{type(error).__name__}: {str(error)}"


class AppError(Exception):
    """Base exception class for application errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNEXPECTED,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        suggested_actions: list[str] | None = None,
        technical_details: str | None = None,
        recoverable: bool = True,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.suggested_actions = suggested_actions or []
        self.technical_details = technical_details
        self.recoverable = recoverable
        self.context = context

    def to_user_friendly(self) -> UserFriendlyError:
        """Convert to user-friendly error representation."""
        return UserFriendlyError(
            message=self.message,
            category=self.category,
            severity=self.severity,
            suggested_actions=self.suggested_actions,
            technical_details=self.technical_details,
            recoverable=self.recoverable,
        )


class NetworkError(AppError):
    """Exception for network-related errors."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        suggested_actions = [
            "Check your internet connection",
            "Try again in a few moments",
        ]

        if status_code:
            if status_code in (401, 403):
                suggested_actions = [
                    "The token may have expired, refresh it and try again",
                    "Check that the account has access to the service",
                ]
            elif status_code == 404:
                suggested_actions = [
                    "The requested resource may no longer exist",
                    "Check the identifiers passed on the command line",
                ]
            elif status_code >= 500:
                suggested_actions = [
                    "The server is experiencing issues",
                    "Try again later",
                ]

        technical_details = _describe(original_error)
        if url:
            technical_details = f"URL: {url}" + (f"\n{technical_details}" if technical_details else "")
        if status_code:
            technical_details = f"Status: {status_code}" + (f"\n{technical_details}" if technical_details else "")

        super().__init__(
            message=message,
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.ERROR,
            suggested_actions=suggested_actions,
            technical_details=technical_details,
            recoverable=True,
        )
        self.original_error = original_error
        self.url = url
        self.status_code = status_code


class AuthenticationError(AppError):
    """Exception for a failed stage of the authentication chain."""

    def __init__(
        self,
        message: str,
        stage: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        technical_details = None
        if stage:
            technical_details = f"Stage: {stage}"
        if original_error:
            technical_details = (technical_details or "") + f"\nError: {_describe(original_error)}"

        super().__init__(
            message=message,
            category=ErrorCategory.AUTHENTICATION,
            severity=ErrorSeverity.ERROR,
            suggested_actions=[
                "Refresh the OAuth token with the 'refresh' command",
                "Verify the client id, secret and redirect URL",
                "Request a new authorization code with 'geturl'",
            ],
            technical_details=technical_details,
            recoverable=False,
        )
        self.stage = stage
        self.original_error = original_error


class ClearanceUnavailableError(AppError):
    """Exception for a clearance request that produced no flight id."""

    def __init__(
        self,
        message: str,
        build_id: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        technical_details = None
        if build_id:
            technical_details = f"Build: {build_id}"
        if original_error:
            technical_details = (technical_details or "") + f"\nError: {_describe(original_error)}"

        super().__init__(
            message=message,
            category=ErrorCategory.CLEARANCE,
            severity=ErrorSeverity.WARNING,
            suggested_actions=["Check the build id; stats are requested without clearance"],
            technical_details=technical_details,
            recoverable=True,
        )
        self.build_id = build_id
        self.original_error = original_error


class FetchError(AppError):
    """Exception for a statistics fetch that returned no data."""

    def __init__(
        self,
        message: str,
        project_id: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        technical_details = None
        if project_id:
            technical_details = f"Project: {project_id}"
        if original_error:
            technical_details = (technical_details or "") + f"\nError: {_describe(original_error)}"

        super().__init__(
            message=message,
            category=ErrorCategory.FETCH,
            severity=ErrorSeverity.ERROR,
            suggested_actions=[
                "Check the project id",
                "Try again later",
            ],
            technical_details=technical_details,
            recoverable=True,
        )
        self.project_id = project_id
        self.original_error = original_error


class LoadCorruptionError(AppError):
    """Exception for an unreadable or malformed snapshot directory."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        technical_details = None
        if path:
            technical_details = f"Path: {path}"
        if original_error:
            technical_details = (technical_details or "") + f"\nError: {_describe(original_error)}"

        super().__init__(
            message=message,
            category=ErrorCategory.SNAPSHOT_LOAD,
            severity=ErrorSeverity.WARNING,
            suggested_actions=[
                "The snapshot will be overwritten with a fresh one",
                "Restore the output folder from version control to keep history",
            ],
            technical_details=technical_details,
            recoverable=True,
        )
        self.path = path
        self.original_error = original_error


class SnapshotWriteError(AppError):
    """Exception for a failure while persisting the snapshot."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        suggested_actions = [
            "Check the output folder path and permissions",
            "Ensure sufficient disk space",
        ]
        if isinstance(original_error, PermissionError):
            suggested_actions = [
                "Check file/directory permissions",
                "Choose a different output folder",
            ]

        technical_details = None
        if path:
            technical_details = f"Path: {path}"
        if original_error:
            technical_details = (technical_details or "") + f"\nError: {_describe(original_error)}"

        super().__init__(
            message=message,
            category=ErrorCategory.SNAPSHOT_WRITE,
            severity=ErrorSeverity.ERROR,
            suggested_actions=suggested_actions,
            technical_details=technical_details,
            recoverable=False,
        )
        self.path = path
        self.original_error = original_error


class ValidationError(AppError):
    """Exception for validation-related errors."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        technical_details = None
        if field:
            technical_details = f"Field: {field}"
        if value is not None:
            value_str = str(value)[:100]  # Truncate long values
            technical_details = (technical_details or "") + f"\nValue: {value_str}"

        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.WARNING,
            suggested_actions=["Review the input requirements"],
            technical_details=technical_details,
            recoverable=True,
        )
        self.field = field
        self.value = value


class ConfigurationError(AppError):
    """Exception for configuration-related errors."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        expected: str | None = None,
    ) -> None:
        suggested_actions = [
            "Check the configuration settings",
            "Pass the value on the command line instead",
        ]
        if expected:
            suggested_actions.append(f"Expected: {expected}")

        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.ERROR,
            suggested_actions=suggested_actions,
            technical_details=f"Setting: {setting}" if setting else None,
            recoverable=True,
        )
        self.setting = setting
        self.expected = expected


class ErrorHandlingService:
    """Centralized error handling service.

    This service provides:
    - Error classification and user-friendly message generation
    - Error logging with technical details
    """

    def __init__(self) -> None:
        """Initialize the error handling service."""
        log.debug("Error handling service initialized")

    def handle_error(
        self,
        error: Exception,
        operation: str,
        component: str,
        context: dict[str, Any] | None = None,
    ) -> UserFriendlyError:
        """Handle an error and return a user-friendly representation.

        Args:
            error: The exception that occurred
            operation: The operation being performed
            component: The component where the error occurred
            context: Additional context information

        Returns:
            User-friendly error representation
        """
        app_error = self._convert_to_app_error(error, operation, component, context)

        self._log_error(app_error, operation, component, context)

        return app_error.to_user_friendly()

    def _convert_to_app_error(
        self,
        error: Exception,
        operation: str,
        component: str,
        context: dict[str, Any] | None,
    ) -> AppError:
        """Convert a standard exception to an AppError."""
        if isinstance(error, AppError):
            return error

        # Network errors
        if isinstance(error, httpx.ConnectError):
            return NetworkError(
                message="Unable to connect to the server. Please check your internet connection.",
                original_error=error,
                url=context.get("url") if context else None,
            )
        elif isinstance(error, httpx.TimeoutException):
            return NetworkError(
                message="The request timed out. The server may be slow or unavailable.",
                original_error=error,
                url=context.get("url") if context else None,
            )
        elif isinstance(error, httpx.HTTPStatusError):
            status_code = error.response.status_code
            return NetworkError(
                message=self._get_http_error_message(status_code),
                original_error=error,
                url=str(error.request.url),
                status_code=status_code,
            )
        elif isinstance(error, httpx.RequestError):
            return NetworkError(
                message="A network error occurred. Please check your connection.",
                original_error=error,
                url=context.get("url") if context else None,
            )

        # File system errors
        elif isinstance(error, OSError):
            return SnapshotWriteError(
                message=f"A file system error occurred: {str(error)}",
                path=context.get("path") if context else None,
                original_error=error,
            )

        # JSONDecodeError is a ValueError, check it first
        elif isinstance(error, json.JSONDecodeError):
            return ValidationError(
                message="Invalid JSON format. The data could not be parsed.",
                field="json_content",
            )
        elif isinstance(error, ValueError):
            return ValidationError(
                message=str(error),
                field=context.get("field") if context else None,
                value=context.get("value") if context else None,
            )

        return AppError(
            message="An unexpected error occurred. Please try again.",
            category=ErrorCategory.UNEXPECTED,
            severity=ErrorSeverity.ERROR,
            technical_details=_describe(error),
            recoverable=True,
            context=ErrorContext(
                operation=operation,
                component=component,
                details=context or {},
            ),
        )

    @staticmethod
    def _get_http_error_message(status_code: int) -> str:
        """Get a user-friendly message for HTTP status codes."""
        messages = {
            400: "The request was invalid. Please check your input.",
            401: "Authentication required. The token may have expired.",
            403: "Access denied. The account doesn't have permission to access this resource.",
            404: "The requested resource was not found.",
            429: "Too many requests. Please wait before trying again.",
            500: "The server encountered an error. Please try again later.",
            502: "The server is temporarily unavailable. Please try again later.",
            503: "The service is temporarily unavailable. Please try again later.",
            504: "The server took too long to respond. Please try again.",
        }
        return messages.get(status_code, f"HTTP error {status_code} occurred.")

    def _log_error(
        self,
        error: AppError,
        operation: str,
        component: str,
        context: dict[str, Any] | None,
    ) -> None:
        """Log error with full technical details."""
        log_method = log.warning if error.severity == ErrorSeverity.WARNING else log.error

        log_method(
            "Error occurred",
            error_message=error.message,
            category=error.category.value,
            severity=error.severity.value,
            operation=operation,
            component=component,
            technical_details=error.technical_details,
            recoverable=error.recoverable,
            context=context,
        )

    def create_user_message(
        self,
        error: UserFriendlyError,
        include_suggestions: bool = True,
    ) -> str:
        """Create a formatted user message from an error.

        Args:
            error: The user-friendly error
            include_suggestions: Whether to include suggested actions

        Returns:
            Formatted message string
        """
        parts = [error.message]

        if include_suggestions and error.suggested_actions:
            parts.append("\nSuggested actions:")
            for action in error.suggested_actions[:3]:  # Limit to 3 suggestions
                parts.append(f"  • {action}")

        return "\n".join(parts)


# Global error handling service instance
_error_service: ErrorHandlingService | None = None


def get_error_service() -> ErrorHandlingService:
    """Get the global error handling service instance."""
    global _error_service
    if _error_service is None:
        _error_service = ErrorHandlingService()
    return _error_service


def handle_error(
    error: Exception,
    operation: str,
    component: str,
    context: dict[str, Any] | None = None,
) -> UserFriendlyError:
    """Convenience function to handle errors using the global service."""
    return get_error_service().handle_error(error, operation, component, context)
