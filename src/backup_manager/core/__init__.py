"""
Backup Manager Core Module.

Provides foundational types and the exception hierarchy.
"""

__all__ = [
    "BackupArtifact",
    "CleanupResult",
    "DatabaseCredentials",
    "RetentionKind",
    "artifact_name",
    # Exceptions
    "BackupManagerError",
    "BackupError",
    "CleanupError",
    "ConfigurationError",
    "DatabaseConnectionError",
    "StorageError",
    "format_exception",
]

from backup_manager.core.exceptions import (
    BackupError,
    BackupManagerError,
    CleanupError,
    ConfigurationError,
    DatabaseConnectionError,
    StorageError,
    format_exception,
)
from backup_manager.core.models import (
    BackupArtifact,
    CleanupResult,
    DatabaseCredentials,
    RetentionKind,
    artifact_name,
)
