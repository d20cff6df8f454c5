"""
Core models for backup artifacts and retention results.

Defines the schemas shared by the retention policies, the dump
runner and the orchestrator.
"""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr

from backup_manager.core.exceptions import CleanupError

ARTIFACT_PATTERN = "*.sql"
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
NAME_SEPARATOR = "__"


class RetentionKind(str, Enum):
    """Closed set of retention rules."""

    COUNT_LIMIT = "count_limit"
    AGE_LIMIT = "age_limit"
    SIZE_LIMIT = "size_limit"

    @classmethod
    def _missing_(cls, value):
        # Legacy strategy names
        aliases = {
            "max_files_based": cls.COUNT_LIMIT,
            "max_days_based": cls.AGE_LIMIT,
            "max_size_based": cls.SIZE_LIMIT,
        }
        if isinstance(value, str):
            lowered = value.strip().lower().replace("-", "_")
            if lowered in aliases:
                return aliases[lowered]
            for member in cls:
                if member.value == lowered or member.name.lower() == lowered:
                    return member
        return None


class BackupArtifact(BaseModel):
    """A single dump file in the storage directory."""

    path: Path = Field(description="Location of the dump file")
    modified_at: float = Field(description="Last-modified time as epoch seconds")
    size_bytes: int = Field(ge=0, description="Size in bytes")

    @classmethod
    def from_path(cls, path: Path) -> "BackupArtifact":
        """Build an artifact record from a file on disk."""
        stat = path.stat()
        return cls(path=path, modified_at=stat.st_mtime, size_bytes=stat.st_size)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def database(self) -> str | None:
        """Database name encoded in the file name, if it follows the convention."""
        stem = self.path.stem
        if NAME_SEPARATOR not in stem:
            return None
        return stem.rsplit(NAME_SEPARATOR, 1)[0]

    @property
    def modified_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.modified_at, tz=timezone.utc)

    def age_seconds(self, now: float) -> float:
        return now - self.modified_at


class CleanupResult(BaseModel):
    """Result of a retention pass."""

    policy: RetentionKind = Field(description="Rule that was applied")
    scanned_count: int = Field(default=0, description="Artifacts found in the directory")
    deleted: list[Path] = Field(default_factory=list, description="Artifacts removed")
    freed_bytes: int = Field(default=0, description="Bytes of storage freed")
    errors: list[str] = Field(default_factory=list, description="Deletions that failed")

    @property
    def deleted_count(self) -> int:
        return len(self.deleted)

    @property
    def retained_count(self) -> int:
        return self.scanned_count - self.deleted_count

    @property
    def success(self) -> bool:
        return not self.errors

    def raise_for_errors(self, storage_path: Path | None = None) -> None:
        """Raise CleanupError if any deletion failed."""
        if self.errors:
            raise CleanupError(
                path=str(storage_path) if storage_path else None,
                errors=list(self.errors),
            )


class DatabaseCredentials(BaseModel):
    """Connection parameters for the database being dumped."""

    username: str = Field(min_length=1, description="Database user")
    password: SecretStr = Field(default=SecretStr(""), description="Database password")
    database: str = Field(min_length=1, description="Database to dump")
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=3306, ge=1, le=65535, description="Database port")


def artifact_name(database: str, when: datetime) -> str:
    """Return the file name for a dump of ``database`` taken at ``when``."""
    return f"{database}{NAME_SEPARATOR}{when.strftime(TIMESTAMP_FORMAT)}.sql"
