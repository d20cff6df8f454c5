"""
Backup Manager Exception Hierarchy.

Every failure the backup manager reports to its callers is one of the
classes below. Each carries a message plus a flat ``details`` mapping
(database, path, env var, dump exit status) that the CLI prints next
to the message.
"""

from typing import Any


def _has_value(value: Any) -> bool:
    return value is not None and value != "" and value != []


class BackupManagerError(Exception):
    """
    Base exception for backup, retention and configuration failures.

    Keyword context passed by subclasses is folded into ``details``;
    unset values (None, empty string, empty list) are left out so the
    rendered message only names what is known.
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        **context: Any,
    ):
        """
        Initialize a BackupManagerError.

        Args:
            message: Human-readable error message
            details: Optional structured data for debugging
            **context: Named attributes of the failure, e.g. ``path`` or ``database``
        """
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})
        self.details.update((k, v) for k, v in context.items() if _has_value(v))

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"

    def to_dict(self) -> dict[str, Any]:
        """Structured form for machine-readable output."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(BackupManagerError):
    """
    Errors in configuration loading or validation.

    Raised when:
    - A retention kind is given without its parameter (or vice versa)
    - A retention kind or parameter is not valid
    - An environment variable holds an unusable value
    """

    def __init__(
        self,
        message: str,
        *,
        env_var: str | None = None,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a ConfigurationError.

        Args:
            message: Human-readable error message
            env_var: Environment variable name if applicable
            config_key: Configuration key if applicable
            details: Optional structured data for debugging
        """
        super().__init__(message, details=details, env_var=env_var, config_key=config_key)
        self.env_var = env_var
        self.config_key = config_key


class StorageError(BackupManagerError):
    """Raised when the storage directory cannot be created or written to."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details=details, path=path)
        self.path = path


class DatabaseConnectionError(BackupManagerError):
    """
    Raised when the database credential check fails.

    Carries the driver's message so the caller can see why the
    connection was refused. No dump is attempted after this error.
    """

    def __init__(
        self,
        message: str,
        *,
        host: str | None = None,
        database: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a DatabaseConnectionError.

        Args:
            message: Driver error message
            host: Database host that was contacted
            database: Database name that was requested
            details: Optional structured data for debugging
        """
        super().__init__(message, details=details, host=host, database=database)
        self.host = host
        self.database = database


class BackupError(BackupManagerError):
    """
    Errors while producing a dump.

    Raised when:
    - The dump tool exits with a non-zero status
    - The dump tool cannot be started
    - The finished dump cannot be moved into place
    """

    def __init__(
        self,
        message: str,
        *,
        database: str | None = None,
        exit_code: int | None = None,
        stderr: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a BackupError.

        Args:
            message: Human-readable error message
            database: Database being dumped
            exit_code: Exit status of the dump tool
            stderr: Captured error output of the dump tool
            details: Optional structured data for debugging
        """
        super().__init__(
            message,
            details=details,
            database=database,
            exit_code=exit_code,
            stderr=stderr.strip()[:200] if stderr else None,
        )
        self.database = database
        self.exit_code = exit_code
        self.stderr = stderr


class CleanupError(BackupManagerError):
    """Raised when a retention pass could not delete one or more artifacts."""

    def __init__(
        self,
        message: str = "Retention cleanup left undeletable artifacts",
        *,
        path: str | None = None,
        errors: list[str] | None = None,
    ):
        super().__init__(message, path=path, errors=errors)
        self.path = path
        self.errors = errors or []


def format_exception(error: Exception) -> str:
    """
    Format an exception for user-friendly display.

    Args:
        error: The exception to format

    Returns:
        Formatted error message string
    """
    if isinstance(error, BackupManagerError):
        return str(error)
    return f"{error.__class__.__name__}: {error}"
