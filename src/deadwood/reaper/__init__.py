"""Removal of unused declarations, with backups."""
from .backup import BackupStore
from .pruner import DeadCodePruner, EditPlan, FileEdit, PruneOptions

__all__ = ["BackupStore", "DeadCodePruner", "EditPlan", "FileEdit", "PruneOptions"]
