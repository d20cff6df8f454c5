"""
Database backup creation.

Provides the orchestrator plus the pluggable collaborators it uses:
a credential checker and a dump runner.
"""

from .connection import CredentialChecker, PyMySQLCredentialChecker
from .dump import DumpResult, DumpRunner, MysqldumpRunner, write_option_file
from .orchestrator import BackupOrchestrator, check_database_name, ensure_storage_directory

__all__ = [
    "BackupOrchestrator",
    "CredentialChecker",
    "DumpResult",
    "DumpRunner",
    "MysqldumpRunner",
    "PyMySQLCredentialChecker",
    "check_database_name",
    "ensure_storage_directory",
    "write_option_file",
]
