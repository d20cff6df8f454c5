"""Pytest configuration and fixtures."""

import os
import tempfile
import time
from pathlib import Path
from typing import Callable, Generator, Sequence

import pytest

from backup_manager.backup.dump import DumpResult
from backup_manager.core.exceptions import DatabaseConnectionError
from backup_manager.core.models import DatabaseCredentials

# Keep the developer's environment out of the settings tests
for _name in list(os.environ):
    if _name.startswith("BM_"):
        del os.environ[_name]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def storage_dir(temp_dir: Path) -> Path:
    """Provide an empty backup storage directory."""
    path = temp_dir / "backups"
    path.mkdir()
    return path


@pytest.fixture
def make_artifact(storage_dir: Path) -> Callable[..., Path]:
    """
    Return a helper that writes a dump file with a given age and size.

    ``age`` is in seconds before ``now`` (default: the current time).
    """

    def _make(
        name: str,
        *,
        age: float = 0,
        size: int = 16,
        now: float | None = None,
        directory: Path | None = None,
    ) -> Path:
        path = (directory or storage_dir) / name
        path.write_bytes(b"A" * size)
        mtime = (now if now is not None else time.time()) - age
        os.utime(path, (mtime, mtime))
        return path

    return _make


class FakeDumpRunner:
    """Dump runner that writes canned content instead of calling mysqldump."""

    def __init__(self, returncode: int = 0, content: bytes = b"-- dump\n", stderr: str = ""):
        self.returncode = returncode
        self.content = content
        self.stderr = stderr
        self.calls: list[tuple[DatabaseCredentials, Path, list[str]]] = []

    def run(
        self,
        credentials: DatabaseCredentials,
        destination: Path,
        options: Sequence[str] = (),
    ) -> DumpResult:
        self.calls.append((credentials, destination, list(options)))
        destination.write_bytes(self.content)
        return DumpResult(returncode=self.returncode, stderr=self.stderr)


class FakeCredentialChecker:
    """Credential checker that accepts one fixed password."""

    def __init__(self, valid_password: str = "secret"):
        self.valid_password = valid_password
        self.checked: list[DatabaseCredentials] = []

    def check(self, credentials: DatabaseCredentials) -> None:
        self.checked.append(credentials)
        if credentials.password.get_secret_value() != self.valid_password:
            raise DatabaseConnectionError(
                f"Access denied for user '{credentials.username}'@'{credentials.host}'",
                host=credentials.host,
                database=credentials.database,
            )


@pytest.fixture
def fake_runner() -> FakeDumpRunner:
    """Provide a dump runner that always succeeds."""
    return FakeDumpRunner()


@pytest.fixture
def fake_checker() -> FakeCredentialChecker:
    """Provide a credential checker accepting the password 'secret'."""
    return FakeCredentialChecker()
