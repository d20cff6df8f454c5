"""
Backup Manager - MySQL dumps with bounded retention.

Creates timestamped database dumps and keeps a bounded set of them
according to a count, age or size retention policy.
"""

__version__ = "0.1.0"

from backup_manager.backup import BackupOrchestrator
from backup_manager.core.models import RetentionKind
from backup_manager.retention import PolicyFactory

__all__ = ["BackupOrchestrator", "PolicyFactory", "RetentionKind", "__version__"]
