"""Pre-edit backups with restoration."""
import secrets
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .manifest import Manifest
from ..utils.logger import get_logger

logger = get_logger(__name__)


class BackupStore:
    """Copy files aside before they are rewritten, and put them back on demand."""

    def __init__(self, backup_dir: str | Path = ".deadwood_backup"):
        """Initialize backup store.

        Args:
            backup_dir: Directory holding the copies and the manifest
        """
        self.backup_dir = Path(backup_dir)
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        self.manifest = Manifest(self.backup_dir)

    def backup(self, file_path: str | Path, reason: str = "prune") -> str:
        """Copy ``file_path`` into the store and record it in the manifest.

        The original is left in place.

        Args:
            file_path: File about to be modified
            reason: Recorded with the backup

        Returns:
            Backup ID for restoration

        Raises:
            FileNotFoundError: If file doesn't exist
            OSError: If the copy fails
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        backup_id = self._generate_backup_id()
        target_dir = self.backup_dir / backup_id
        target_dir.mkdir(parents=True, exist_ok=True)

        backup_path = target_dir / file_path.name
        shutil.copy2(str(file_path), str(backup_path))

        self.manifest.add_backup(
            backup_id=backup_id,
            original_path=str(file_path.resolve()),
            backup_path=str(backup_path),
            reason=reason,
            file_hash=self.manifest.calculate_file_hash(backup_path),
        )
        logger.debug("Backed up %s as %s", file_path, backup_id)

        return backup_id

    def restore(self, backup_id: str):
        """Copy a backup over its original location.

        Raises:
            ValueError: If backup ID not found
            OSError: If the backup copy is missing or restoration fails
        """
        record = self.manifest.get_backup(backup_id)

        if not record:
            raise ValueError(f"Backup ID not found: {backup_id}")

        # Already restored: nothing to do
        if record.get("restored", False):
            return

        backup_path = Path(record["backup_path"])
        original_path = Path(record["original_path"])

        if not backup_path.exists():
            raise OSError(f"Backup copy not found: {backup_path}")

        original_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(str(backup_path), str(original_path))

        self.manifest.mark_restored(backup_id)
        logger.info("Restored %s from backup %s", original_path, backup_id)

    def restore_all(self, backup_ids: List[Optional[str]]):
        """Restore several backups, attempting every one before failing.

        Raises:
            OSError: If any restoration fails
        """
        errors = []

        for backup_id in backup_ids:
            if backup_id is None:
                continue

            try:
                self.restore(backup_id)
            except (ValueError, OSError) as e:
                errors.append(f"{backup_id}: {e}")

        if errors:
            raise OSError("Failed to restore some files:\n" + "\n".join(errors))

    def _generate_backup_id(self) -> str:
        """Backup ID in format: YYYYMMDD_HHMMSS_randomhex"""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"{timestamp}_{secrets.token_hex(3)}"
