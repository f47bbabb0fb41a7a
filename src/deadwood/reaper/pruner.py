"""Turn an unused-declaration list into file edits, and apply them."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .backup import BackupStore
from .js_remover import JSSymbolRemover
from ..analyzer.session import UnusedItem
from ..utils.logger import get_logger

logger = get_logger(__name__)

TYPE_KINDS = frozenset({'type', 'interface', 'enum'})


@dataclass(frozen=True)
class PruneOptions:
    """Removal policy. None of these change what the analysis reports."""
    preserve_exports: bool = False
    preserve_types: bool = False
    dry_run: bool = False
    backup: bool = True


@dataclass
class FileEdit:
    path: Path
    original: str = field(repr=False)
    updated: str = field(repr=False)
    items: List[UnusedItem] = field(default_factory=list)
    removals: int = 0

    @property
    def changed(self) -> bool:
        return self.original != self.updated


@dataclass
class EditPlan:
    """Files to rewrite, plus the items the policy (or the remover) left alone."""
    edits: List[FileEdit] = field(default_factory=list)
    skipped: List[Tuple[UnusedItem, str]] = field(default_factory=list)

    @property
    def removal_count(self) -> int:
        return sum(edit.removals for edit in self.edits)


class DeadCodePruner:
    """Remove reported declarations from their files.

    Example:
        pruner = DeadCodePruner(PruneOptions(preserve_exports=True))
        plan = pruner.plan(detector.analyze())
        pruner.apply(plan)
    """

    def __init__(self, options: Optional[PruneOptions] = None,
                 backup_dir: str | Path = ".deadwood_backup"):
        self.options = options or PruneOptions()
        self.backup_dir = Path(backup_dir)
        self.remover = JSSymbolRemover()

    def plan(self, items: List[UnusedItem]) -> EditPlan:
        """Compute new file contents without touching the disk."""
        plan = EditPlan()
        by_file: Dict[Path, List[UnusedItem]] = {}

        for item in items:
            if self.options.preserve_exports and item.exported:
                plan.skipped.append((item, "exported"))
                continue
            if self.options.preserve_types and item.kind in TYPE_KINDS:
                plan.skipped.append((item, "type declaration"))
                continue
            by_file.setdefault(Path(item.file), []).append(item)

        contents: Dict[Path, str] = {}
        for path in list(by_file):
            try:
                contents[path] = path.read_text(encoding='utf-8')
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Cannot read %s, skipping its removals: %s", path, e)
                plan.skipped.extend((item, "unreadable file") for item in by_file.pop(path))

        targets = {
            path: [(item.name, item.line) for item in file_items]
            for path, file_items in by_file.items()
        }
        results = self.remover.remove_symbols_batch(targets, contents)

        for path in sorted(by_file):
            updated, removals = results.get(path, (contents[path], 0))
            if removals == 0:
                plan.skipped.extend((item, "declaration not found") for item in by_file[path])
                continue
            plan.edits.append(FileEdit(
                path=path,
                original=contents[path],
                updated=updated,
                items=by_file[path],
                removals=removals,
            ))

        return plan

    def apply(self, plan: EditPlan) -> List[Path]:
        """Write every edit in ``plan``.

        Returns:
            Paths that were (or, in dry-run mode, would be) rewritten

        Raises:
            OSError: If a write fails; files already written are restored first
        """
        edits = [edit for edit in plan.edits if edit.changed]

        if self.options.dry_run:
            for edit in edits:
                logger.info("[dry run] Would remove %d declaration(s) from %s", edit.removals, edit.path)
            return [edit.path for edit in edits]

        store = BackupStore(self.backup_dir) if self.options.backup else None
        backup_ids: List[str] = []
        written: List[Path] = []

        try:
            for edit in edits:
                if store is not None:
                    backup_ids.append(store.backup(edit.path))
                edit.path.write_text(edit.updated, encoding='utf-8')
                written.append(edit.path)
                logger.info("Removed %d declaration(s) from %s", edit.removals, edit.path)
        except OSError:
            logger.error("Write failed, restoring %d backed-up file(s)", len(backup_ids))
            if store is not None:
                store.restore_all(backup_ids)
            raise

        return written
