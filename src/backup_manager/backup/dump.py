"""
Dump runners.

A dump runner exports one database into a file. The default runner
shells out to ``mysqldump`` with an argument list (no shell) and hands
the password over through a private option file, so it never appears
on the command line.
"""

import logging
import os
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from backup_manager.core.exceptions import BackupError
from backup_manager.core.models import DatabaseCredentials

logger = logging.getLogger(__name__)


@dataclass
class DumpResult:
    """Outcome of a dump tool invocation."""

    returncode: int
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


class DumpRunner(Protocol):
    """Writes a dump of ``credentials.database`` to ``destination``."""

    def run(
        self,
        credentials: DatabaseCredentials,
        destination: Path,
        options: Sequence[str] = (),
    ) -> DumpResult: ...


def _quote_option_value(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def write_option_file(credentials: DatabaseCredentials, directory: Path | None = None) -> Path:
    """
    Write a ``[client]`` option file readable only by the current user.

    The caller owns the returned file and must delete it.
    """
    fd, name = tempfile.mkstemp(prefix="backup-manager-", suffix=".cnf", dir=directory)
    try:
        os.chmod(name, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write("[client]\n")
            fh.write(f"password={_quote_option_value(credentials.password.get_secret_value())}\n")
    except OSError:
        Path(name).unlink(missing_ok=True)
        raise
    return Path(name)


class MysqldumpRunner:
    """Runs the ``mysqldump`` executable found on the search path."""

    def __init__(self, executable: str = "mysqldump"):
        self.executable = executable

    def build_command(
        self,
        credentials: DatabaseCredentials,
        option_file: Path,
        options: Sequence[str] = (),
    ) -> list[str]:
        """Build the argument list; ``--defaults-extra-file`` must come first."""
        return [
            self.executable,
            f"--defaults-extra-file={option_file}",
            f"--user={credentials.username}",
            f"--host={credentials.host}",
            f"--port={credentials.port}",
            *options,
            "--databases",
            credentials.database,
        ]

    def run(
        self,
        credentials: DatabaseCredentials,
        destination: Path,
        options: Sequence[str] = (),
    ) -> DumpResult:
        """
        Dump the database into ``destination``.

        Blocks until the tool exits; no timeout is applied.

        Raises:
            BackupError: If the executable cannot be started
        """
        option_file = write_option_file(credentials)
        try:
            cmd = self.build_command(credentials, option_file, options)
            logger.debug("Running %s for %s", self.executable, credentials.database)
            with open(destination, "wb") as out:
                try:
                    completed = subprocess.run(
                        cmd,
                        stdout=out,
                        stderr=subprocess.PIPE,
                        check=False,
                        shell=False,
                    )
                except FileNotFoundError as e:
                    raise BackupError(
                        f"Dump tool not found: {self.executable}",
                        database=credentials.database,
                    ) from e
        finally:
            option_file.unlink(missing_ok=True)

        stderr = completed.stderr.decode("utf-8", errors="replace") if completed.stderr else ""
        return DumpResult(returncode=completed.returncode, stderr=stderr)
