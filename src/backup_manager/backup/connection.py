"""Database credential checks run before any dump is attempted."""

import logging
from typing import Protocol

import pymysql

from backup_manager.core.exceptions import DatabaseConnectionError
from backup_manager.core.models import DatabaseCredentials

logger = logging.getLogger(__name__)


class CredentialChecker(Protocol):
    """Verifies that credentials can open a live connection."""

    def check(self, credentials: DatabaseCredentials) -> None: ...


class PyMySQLCredentialChecker:
    """Opens and immediately closes a PyMySQL connection."""

    def __init__(self, connect_timeout: int = 10):
        self.connect_timeout = connect_timeout

    def check(self, credentials: DatabaseCredentials) -> None:
        """
        Open a connection with the given credentials.

        Raises:
            DatabaseConnectionError: With the driver's message if the
                connection cannot be established
        """
        logger.debug(
            "Checking credentials for %s@%s:%d/%s",
            credentials.username,
            credentials.host,
            credentials.port,
            credentials.database,
        )
        try:
            conn = pymysql.connect(
                host=credentials.host,
                port=credentials.port,
                user=credentials.username,
                password=credentials.password.get_secret_value(),
                database=credentials.database,
                connect_timeout=self.connect_timeout,
            )
        except pymysql.MySQLError as e:
            raise DatabaseConnectionError(
                str(e),
                host=credentials.host,
                database=credentials.database,
            ) from e

        conn.close()
