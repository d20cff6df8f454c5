"""
Settings loaded from ``BM_``-prefixed environment variables.

Command-line flags take precedence over these values.
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr

from backup_manager.core.exceptions import ConfigurationError
from backup_manager.core.models import RetentionKind

ENV_PREFIX = "BM_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(f"{ENV_PREFIX}{name}")
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _env_int(name: str, default: int | None = None) -> int | None:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"Expected an integer, got {raw!r}",
            env_var=f"{ENV_PREFIX}{name}",
        ) from None


class BackupSettings(BaseModel):
    """Runtime configuration for backups and retention."""

    storage_path: Path = Field(default=Path("var/backups"), description="Backup directory")
    retention_kind: RetentionKind | None = Field(default=None, description="Retention rule")
    retention_value: int | None = Field(default=None, description="Retention threshold")
    db_host: str = Field(default="localhost", description="Database host")
    db_port: int = Field(default=3306, description="Database port")
    db_user: str | None = Field(default=None, description="Database user")
    db_password: SecretStr | None = Field(default=None, description="Database password")
    mysqldump_path: str = Field(default="mysqldump", description="Dump executable")
    log_level: str = Field(default="WARNING", description="Logging level")

    @classmethod
    def from_env(cls) -> "BackupSettings":
        """
        Build settings from the environment.

        Raises:
            ConfigurationError: If a variable holds an unusable value
        """
        kind_raw = _env("RETENTION_KIND")
        kind = None
        if kind_raw is not None:
            try:
                kind = RetentionKind(kind_raw)
            except ValueError:
                raise ConfigurationError(
                    f"Unknown retention policy type '{kind_raw}'",
                    env_var=f"{ENV_PREFIX}RETENTION_KIND",
                ) from None

        log_level = (_env("LOG_LEVEL", "WARNING") or "WARNING").upper()
        if log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level '{log_level}'",
                env_var=f"{ENV_PREFIX}LOG_LEVEL",
            )

        # Passwords are taken verbatim, whitespace included
        password = os.getenv(f"{ENV_PREFIX}DB_PASSWORD")
        return cls(
            storage_path=Path(_env("STORAGE_PATH", "var/backups")),
            retention_kind=kind,
            retention_value=_env_int("RETENTION_VALUE"),
            db_host=_env("DB_HOST", "localhost"),
            db_port=_env_int("DB_PORT", 3306),
            db_user=_env("DB_USER"),
            db_password=SecretStr(password) if password is not None else None,
            mysqldump_path=_env("MYSQLDUMP_PATH", "mysqldump"),
            log_level=log_level,
        )
