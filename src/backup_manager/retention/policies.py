"""
Retention policies.

Each policy scans a storage directory for backup artifacts and deletes
the ones that violate its rule. Policies are immutable and hold a single
threshold fixed at construction.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, ClassVar, Protocol, runtime_checkable

from backup_manager.core.models import (
    ARTIFACT_PATTERN,
    BackupArtifact,
    CleanupResult,
    RetentionKind,
)

from .scanner import delete_artifact, scan_artifacts

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400
BYTES_PER_MB = 1024 * 1024


@runtime_checkable
class RetentionPolicy(Protocol):
    """
    Capability shared by every retention rule.

    ``cleanup`` must be idempotent and must treat an empty or missing
    directory as a no-op.
    """

    kind: ClassVar[RetentionKind]

    @property
    def threshold(self) -> int: ...

    def cleanup(self, storage_path: Path) -> CleanupResult: ...


def _start(kind: RetentionKind, artifacts: list[BackupArtifact]) -> CleanupResult:
    return CleanupResult(policy=kind, scanned_count=len(artifacts))


@dataclass(frozen=True)
class CountLimitPolicy:
    """Keep only the ``max_count`` most recently modified artifacts."""

    kind: ClassVar[RetentionKind] = RetentionKind.COUNT_LIMIT

    max_count: int
    pattern: str = ARTIFACT_PATTERN

    @property
    def threshold(self) -> int:
        return self.max_count

    def cleanup(self, storage_path: Path) -> CleanupResult:
        artifacts = scan_artifacts(storage_path, self.pattern)
        result = _start(self.kind, artifacts)

        if len(artifacts) <= self.max_count:
            return result

        for artifact in artifacts[self.max_count:]:
            delete_artifact(artifact, result)

        logger.info(
            "Count limit %d: removed %d of %d artifacts",
            self.max_count,
            result.deleted_count,
            result.scanned_count,
        )
        return result


@dataclass(frozen=True)
class AgeLimitPolicy:
    """
    Delete artifacts older than ``max_days`` days.

    An artifact whose age equals the limit exactly is kept.
    """

    kind: ClassVar[RetentionKind] = RetentionKind.AGE_LIMIT

    max_days: int
    pattern: str = ARTIFACT_PATTERN
    clock: Callable[[], float] = field(default=time.time, compare=False, repr=False)

    @property
    def threshold(self) -> int:
        return self.max_days

    @property
    def max_age_seconds(self) -> int:
        return self.max_days * SECONDS_PER_DAY

    def cleanup(self, storage_path: Path) -> CleanupResult:
        artifacts = scan_artifacts(storage_path, self.pattern)
        result = _start(self.kind, artifacts)

        now = self.clock()
        for artifact in artifacts:
            if artifact.age_seconds(now) > self.max_age_seconds:
                delete_artifact(artifact, result)

        if result.deleted:
            logger.info(
                "Age limit %d days: removed %d artifacts",
                self.max_days,
                result.deleted_count,
            )
        return result


@dataclass(frozen=True)
class SizeLimitPolicy:
    """
    Keep the cumulative size of artifacts within ``max_size_mb`` megabytes.

    Artifacts are walked newest first; each one is kept while it still
    fits in the budget and deleted otherwise. When no artifact fits at
    all, the newest is kept so the directory never ends up empty.
    """

    kind: ClassVar[RetentionKind] = RetentionKind.SIZE_LIMIT

    max_size_mb: int
    pattern: str = ARTIFACT_PATTERN

    @property
    def threshold(self) -> int:
        return self.max_size_mb

    @property
    def max_size_bytes(self) -> int:
        return self.max_size_mb * BYTES_PER_MB

    def cleanup(self, storage_path: Path) -> CleanupResult:
        artifacts = scan_artifacts(storage_path, self.pattern)
        result = _start(self.kind, artifacts)

        if sum(a.size_bytes for a in artifacts) <= self.max_size_bytes:
            return result

        kept: set[Path] = set()
        total = 0
        for artifact in artifacts:
            if total + artifact.size_bytes <= self.max_size_bytes:
                kept.add(artifact.path)
                total += artifact.size_bytes
        if not kept:
            kept.add(artifacts[0].path)
            total = artifacts[0].size_bytes

        for artifact in artifacts:
            if artifact.path in kept:
                continue
            if not delete_artifact(artifact, result):
                total += artifact.size_bytes

        if total > self.max_size_bytes:
            logger.warning(
                "Size limit %d MB still exceeded after cleanup (%d bytes retained)",
                self.max_size_mb,
                total,
            )
        elif result.deleted:
            logger.info(
                "Size limit %d MB: removed %d artifacts, freed %d bytes",
                self.max_size_mb,
                result.deleted_count,
                result.freed_bytes,
            )
        return result
