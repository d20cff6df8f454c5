"""
Backup orchestrator.

Owns a storage directory and an optional retention policy. Each backup
checks the credentials, dumps the database into the directory and then
lets the policy prune old artifacts.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Sequence

from pydantic import ValidationError

from backup_manager.core.exceptions import BackupError, ConfigurationError, StorageError
from backup_manager.core.models import (
    BackupArtifact,
    CleanupResult,
    DatabaseCredentials,
    RetentionKind,
    artifact_name,
)
from backup_manager.retention import PolicyFactory, RetentionPolicy, scan_artifacts

from .connection import CredentialChecker, PyMySQLCredentialChecker
from .dump import DumpRunner, MysqldumpRunner

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".partial"


def ensure_storage_directory(path: Path) -> Path:
    """
    Create ``path`` recursively if needed and check that it is writable.

    Raises:
        StorageError: If the directory cannot be created or written to
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(
            f"Failed to create backup directory: {e}",
            path=str(path),
        ) from e

    if not os.access(path, os.W_OK | os.X_OK):
        raise StorageError("Backup directory is not writable", path=str(path))
    return path


def check_database_name(database: str) -> str:
    """
    Reject database names that would place the artifact outside the
    storage directory.

    Raises:
        ConfigurationError: If the name contains a path separator or a NUL byte
    """
    separators = {"/", "\\", "\0"}
    if os.altsep:
        separators.add(os.altsep)
    if any(sep in database for sep in separators) or Path(database).name != database:
        raise ConfigurationError(
            f"Invalid database name for a backup file: {database!r}",
            config_key="database",
        )
    return database


class BackupOrchestrator:
    """
    Creates database dumps and enforces retention.

    Runs synchronously on the calling thread. Two orchestrators sharing
    a storage directory are not coordinated.
    """

    def __init__(
        self,
        storage_path: Path | str,
        policy_kind: RetentionKind | str | None = None,
        policy_parameter: Any = None,
        *,
        host: str = "localhost",
        port: int = 3306,
        dump_runner: DumpRunner | None = None,
        credential_checker: CredentialChecker | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the orchestrator.

        Args:
            storage_path: Directory that holds the dumps; created if missing
            policy_kind: Retention rule, or None to disable retention
            policy_parameter: Threshold for the retention rule
            host: Database host
            port: Database port
            dump_runner: Dump implementation (default: mysqldump)
            credential_checker: Connection check (default: PyMySQL)
            clock: Source of the timestamp used in artifact names

        Raises:
            ConfigurationError: If the policy kind/parameter pair is invalid
            StorageError: If the storage directory cannot be prepared
        """
        self._policy = PolicyFactory.create(policy_kind, policy_parameter)
        self._storage_path = ensure_storage_directory(Path(storage_path))
        self._host = host
        self._port = port
        self._dump_runner = dump_runner or MysqldumpRunner()
        self._credential_checker = credential_checker or PyMySQLCredentialChecker()
        self._clock = clock

    @property
    def storage_path(self) -> Path:
        return self._storage_path

    @property
    def policy(self) -> RetentionPolicy | None:
        return self._policy

    def run_backup(
        self,
        username: str,
        password: str,
        database: str,
        options: Sequence[str] | None = None,
    ) -> Path:
        """
        Dump ``database`` into the storage directory.

        Args:
            username: Database user
            password: Database password
            database: Database to dump
            options: Extra flags passed verbatim to the dump tool

        Returns:
            Path of the new artifact

        Raises:
            ConfigurationError: If the username or database name is empty, or
                the database name is not a plain file name component
            DatabaseConnectionError: If the credentials are rejected
            BackupError: If the dump tool fails
        """
        try:
            credentials = DatabaseCredentials(
                username=username,
                password=password,
                database=database,
                host=self._host,
                port=self._port,
            )
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid database credentials",
                details={"errors": [err["msg"] for err in e.errors()]},
            ) from e
        check_database_name(credentials.database)
        self._credential_checker.check(credentials)

        target = self._storage_path / artifact_name(database, self._clock())
        if target.exists():
            raise BackupError(
                f"Backup artifact already exists: {target.name}",
                database=database,
            )
        partial = target.with_name(target.name + PARTIAL_SUFFIX)

        logger.info("Starting backup of %s to %s", database, target)
        try:
            result = self._dump_runner.run(credentials, partial, list(options or []))
        except BaseException:
            partial.unlink(missing_ok=True)
            raise

        if not result.success:
            partial.unlink(missing_ok=True)
            raise BackupError(
                f"Dump of {database} failed",
                database=database,
                exit_code=result.returncode,
                stderr=result.stderr,
            )

        try:
            partial.replace(target)
        except OSError as e:
            partial.unlink(missing_ok=True)
            raise BackupError(
                f"Failed to finalize backup file: {e}",
                database=database,
            ) from e

        logger.info("Backup of %s written to %s", database, target.name)

        if self._policy is not None:
            cleanup = self._policy.cleanup(self._storage_path)
            if cleanup.errors:
                logger.warning(
                    "Retention cleanup finished with %d errors", len(cleanup.errors)
                )

        return target

    def cleanup(self) -> CleanupResult | None:
        """Run the retention policy now; returns None when retention is disabled."""
        if self._policy is None:
            return None
        return self._policy.cleanup(self._storage_path)

    def list_artifacts(self) -> list[BackupArtifact]:
        """Return the artifacts in the storage directory, newest first."""
        return scan_artifacts(self._storage_path)
