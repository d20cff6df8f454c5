"""Directory scanning and deletion helpers shared by the retention policies."""

import logging
from pathlib import Path

from backup_manager.core.models import ARTIFACT_PATTERN, BackupArtifact, CleanupResult

logger = logging.getLogger(__name__)


def scan_artifacts(storage_path: Path, pattern: str = ARTIFACT_PATTERN) -> list[BackupArtifact]:
    """
    List backup artifacts in a storage directory, newest first.

    Files are ordered by name before the modification-time sort, so
    artifacts sharing an mtime keep a deterministic order.

    Args:
        storage_path: Directory holding the dumps
        pattern: Glob pattern selecting artifact files

    Returns:
        Artifacts sorted by modification time, most recent first
    """
    storage_path = Path(storage_path)
    if not storage_path.is_dir():
        return []

    artifacts = []
    for path in sorted(storage_path.glob(pattern)):
        if not path.is_file():
            continue
        try:
            artifacts.append(BackupArtifact.from_path(path))
        except FileNotFoundError:
            # Removed between glob and stat
            continue

    artifacts.sort(key=lambda a: a.modified_at, reverse=True)
    logger.debug("Found %d artifacts in %s", len(artifacts), storage_path)
    return artifacts


def delete_artifact(artifact: BackupArtifact, result: CleanupResult) -> bool:
    """
    Delete one artifact and record the outcome on ``result``.

    Failures are logged and recorded, never raised, so a pass can carry
    on with the remaining files.
    """
    try:
        artifact.path.unlink()
    except FileNotFoundError:
        # Already gone; the retention goal is met
        logger.debug("Artifact %s vanished before deletion", artifact.path)
        return True
    except OSError as e:
        logger.warning("Failed to delete %s: %s", artifact.path, e)
        result.errors.append(f"Failed to delete {artifact.path}: {e}")
        return False

    logger.info("Deleted %s (%d bytes)", artifact.path.name, artifact.size_bytes)
    result.deleted.append(artifact.path)
    result.freed_bytes += artifact.size_bytes
    return True
