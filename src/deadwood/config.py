"""Configuration management for deadwood.

Loads environment variables and provides centralized config access.
"""
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .analyzer.heuristics import Heuristics

# Version - keep in sync with pyproject.toml
__version__ = "1.0.0"

TRUTHY = {"1", "true", "yes", "on"}


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, project_root: str | Path | None = None):
        """Initialize config by loading the project's .env file.

        Values already present in the environment win over the .env file.

        Args:
            project_root: Directory holding the .env file (default: cwd)
        """
        self.project_root = Path(project_root or ".").resolve()
        env_path = self.project_root / ".env"
        if env_path.is_file():
            load_dotenv(env_path, override=False)

    @staticmethod
    def _split_list(raw: Optional[str]) -> List[str]:
        if not raw:
            return []
        return [part.strip() for part in raw.split(",") if part.strip()]

    @property
    def extra_entry_points(self) -> List[str]:
        """Additional entry-point file stems.

        Returns:
            Names from DEADWOOD_ENTRY_POINTS (comma separated)
        """
        return self._split_list(os.getenv("DEADWOOD_ENTRY_POINTS"))

    @property
    def extra_builtins(self) -> List[str]:
        """Additional names that are never reported.

        Returns:
            Names from DEADWOOD_BUILTINS (comma separated)
        """
        return self._split_list(os.getenv("DEADWOOD_BUILTINS"))

    @property
    def report_name(self) -> str:
        """Get report file name.

        Returns:
            File name written inside the project root
        """
        return os.getenv("DEADWOOD_REPORT_NAME", "unused-code-report.json")

    @property
    def backup_path(self) -> Path:
        """Get backup directory, relative paths resolved against the project root.

        Returns:
            Path to the .deadwood_backup directory
        """
        path = Path(os.getenv("DEADWOOD_BACKUP_PATH", ".deadwood_backup"))
        return path if path.is_absolute() else self.project_root / path

    @property
    def debug(self) -> bool:
        return os.getenv("DEADWOOD_DEBUG", "").strip().lower() in TRUTHY

    def heuristics(self) -> Heuristics:
        """Default allowlists extended with the configured names."""
        return Heuristics().extended(
            builtins=self.extra_builtins,
            entry_point_names=self.extra_entry_points,
        )


# Singleton instance
_config = None


def get_config(project_root: str | Path | None = None) -> Config:
    """Get or create the Config for ``project_root``.

    Returns:
        Config instance, rebuilt when a different project root is requested
    """
    global _config
    root = Path(project_root or ".").resolve()
    if _config is None or _config.project_root != root:
        _config = Config(root)
    return _config
