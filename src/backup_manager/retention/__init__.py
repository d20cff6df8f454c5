"""
Retention policies for backup artifacts.

Three interchangeable rules decide which dumps to delete:

- CountLimitPolicy: keep the N newest artifacts
- AgeLimitPolicy: delete artifacts older than N days
- SizeLimitPolicy: keep the total size under N megabytes

Example:
    >>> from backup_manager.retention import PolicyFactory
    >>> policy = PolicyFactory.create("count_limit", 5)
    >>> result = policy.cleanup(Path("var/backups"))
"""

from .factory import PolicyFactory, create_policy
from .policies import (
    AgeLimitPolicy,
    CountLimitPolicy,
    RetentionPolicy,
    SizeLimitPolicy,
)
from .scanner import delete_artifact, scan_artifacts

__all__ = [
    "AgeLimitPolicy",
    "CountLimitPolicy",
    "PolicyFactory",
    "RetentionPolicy",
    "SizeLimitPolicy",
    "create_policy",
    "delete_artifact",
    "scan_artifacts",
]
