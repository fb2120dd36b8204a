"""Service layer for business logic and external integrations."""

from .auth import HaloAuthenticationService, XboxAuthenticationService
from .config import ConfigurationService, ValidationResult
from .errors import (
    AppError,
    AuthenticationError,
    ClearanceUnavailableError,
    ConfigurationError,
    ErrorCategory,
    ErrorHandlingService,
    ErrorSeverity,
    FetchError,
    LoadCorruptionError,
    NetworkError,
    SnapshotWriteError,
    UserFriendlyError,
    ValidationError,
    get_error_service,
    handle_error,
)
from .filesystem import FileSystemService
from .halo_client import HaloInfiniteClient
from .http_client import HttpClientService
from .snapshot_merge import SnapshotMerger
from .snapshot_store import SnapshotStore
from .stats_acquisition import StatsAcquisitionService

__all__ = [
    "AppError",
    "AuthenticationError",
    "ClearanceUnavailableError",
    "ConfigurationError",
    "ConfigurationService",
    "ErrorCategory",
    "ErrorHandlingService",
    "ErrorSeverity",
    "FetchError",
    "FileSystemService",
    "HaloAuthenticationService",
    "HaloInfiniteClient",
    "HttpClientService",
    "LoadCorruptionError",
    "NetworkError",
    "SnapshotMerger",
    "SnapshotStore",
    "SnapshotWriteError",
    "StatsAcquisitionService",
    "UserFriendlyError",
    "ValidationError",
    "ValidationResult",
    "get_error_service",
    "handle_error",
]
