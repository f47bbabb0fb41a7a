"""Backup manifest: the JSON index of every file copied before an edit."""
import hashlib
import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

MANIFEST_VERSION = "1.0"


class Manifest:
    """Read and update ``<backup_dir>/manifest.json``.

    Every write goes through a temp file and an atomic rename, so an
    interrupted run never leaves a half-written manifest.
    """

    def __init__(self, backup_dir: str | Path):
        self.backup_dir = Path(backup_dir)
        self.manifest_path = self.backup_dir / "manifest.json"
        self._ensure_manifest_exists()

    def _ensure_manifest_exists(self):
        self.backup_dir.mkdir(parents=True, exist_ok=True)

        if not self.manifest_path.exists():
            self._write_manifest({"version": MANIFEST_VERSION, "backups": []})

    def _read_manifest(self) -> Dict:
        try:
            with open(self.manifest_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError):
            return {"version": MANIFEST_VERSION, "backups": []}

    def _write_manifest(self, data: Dict):
        temp_path = self.manifest_path.with_suffix('.tmp')
        with open(temp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        temp_path.replace(self.manifest_path)

    def add_backup(self, backup_id: str, original_path: str, backup_path: str,
                   reason: str, file_hash: str):
        """Append a backup record.

        Args:
            backup_id: Unique backup identifier
            original_path: Absolute path of the file that will be edited
            backup_path: Where the pristine copy was stored
            reason: Why the file is being edited (e.g. 'prune')
            file_hash: SHA256 of the pristine copy
        """
        manifest = self._read_manifest()

        manifest.setdefault("backups", []).append({
            "id": backup_id,
            "original_path": str(original_path),
            "backup_path": str(backup_path),
            "backed_up_at": datetime.now().isoformat(),
            "reason": reason,
            "file_hash": file_hash,
            "restored": False,
        })
        self._write_manifest(manifest)

    def get_backup(self, backup_id: str) -> Optional[Dict]:
        for record in self.get_all_backups():
            if record["id"] == backup_id:
                return record
        return None

    def mark_restored(self, backup_id: str):
        manifest = self._read_manifest()

        for record in manifest.get("backups", []):
            if record["id"] == backup_id:
                record["restored"] = True
                break

        self._write_manifest(manifest)

    def get_all_backups(self) -> List[Dict]:
        return self._read_manifest().get("backups", [])

    @staticmethod
    def calculate_file_hash(file_path: str | Path) -> str:
        """SHA256 of a file as a hex string."""
        sha256_hash = hashlib.sha256()

        with open(file_path, "rb") as f:
            for byte_block in iter(lambda: f.read(4096), b""):
                sha256_hash.update(byte_block)

        return sha256_hash.hexdigest()
