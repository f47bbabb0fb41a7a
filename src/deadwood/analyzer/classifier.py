"""Phase 5: reachability classification.

The only phase that reads all four tables. A declaration is live when any
of these hold, checked in order:

    1. its name is on the builtin allowlist
    2. its name is used somewhere, or it is imported from its file by a
       relative specifier
    3. it is exported from a likely entry point

Everything else is dead and reported with a reason.
"""
import os
import re
from pathlib import Path
from typing import List, Optional

from .heuristics import Heuristics
from .session import AnalysisSession, Declaration, UnusedItem
from ..utils.logger import get_logger

logger = get_logger(__name__)

REASON_NOT_USED = "not used anywhere and not exported"
REASON_NEVER_IMPORTED = "exported but never imported by any file"
REASON_ENTRY_POINT_INCOMPLETE = "exported from entry point but analysis incomplete"
REASON_UNKNOWN = "unknown"

_SOURCE_SUFFIX_RE = re.compile(r'\.(ts|tsx|js|jsx)$')


def get_unused_reason(internally_used: bool, imported: bool, exported: bool,
                      entry_point: bool) -> str:
    """Pick the reason string for a dead declaration."""
    if not internally_used and not imported and not exported:
        return REASON_NOT_USED
    if not internally_used and not imported and exported and not entry_point:
        return REASON_NEVER_IMPORTED
    # Not produced by ReachabilityClassifier: exported entry-point names are live
    if not internally_used and not imported and exported and entry_point:
        return REASON_ENTRY_POINT_INCOMPLETE
    return REASON_UNKNOWN


class ReachabilityClassifier:
    """Decide, for every collected declaration, whether it is dead.

    Args:
        session: Session whose four tables are fully built
        heuristics: Builtin and entry-point allowlists
        debug: Log the individual signals for every declaration
    """

    def __init__(self, session: AnalysisSession, heuristics: Optional[Heuristics] = None,
                 debug: bool = False):
        self.session = session
        self.heuristics = heuristics or Heuristics()
        self.debug = debug

    def classify(self) -> List[UnusedItem]:
        """Classify every declaration in table order.

        A declaration whose classification raises is logged and left out.
        """
        unused = []

        for name, declaration in self.session.declarations.items():
            try:
                item = self.classify_declaration(declaration)
            except Exception as e:
                logger.warning(
                    "Error classifying %s in %s: %s", name, declaration.defining_file, e
                )
                continue
            if item is not None:
                unused.append(item)

        return unused

    def classify_declaration(self, declaration: Declaration) -> Optional[UnusedItem]:
        """Return an UnusedItem if ``declaration`` is dead, else None."""
        name = declaration.name
        file_path = declaration.defining_file

        internally_used = name in self.session.usages
        imported = self.is_imported_elsewhere(name, file_path)
        exported = name in self.session.exports
        builtin = self.heuristics.is_builtin(name)
        entry_point = self.heuristics.is_likely_entry_point(file_path)

        if self.debug:
            logger.debug(
                "Analyzing %s (%s, %s): used=%s imported=%s exported=%s builtin=%s entry=%s",
                name, declaration.kind, file_path.name,
                internally_used, imported, exported, builtin, entry_point,
            )

        if builtin:
            return None
        if internally_used or imported:
            return None
        if exported and entry_point:
            return None

        return UnusedItem(
            name=name,
            kind=declaration.kind,
            file=str(file_path),
            line=declaration.line,
            exported=exported,
            reason=get_unused_reason(internally_used, imported, exported, entry_point),
        )

    def is_imported_elsewhere(self, name: str, declaring_file: str | Path) -> bool:
        """True if the import recorded under ``name`` resolves to ``declaring_file``.

        Only relative specifiers are resolved. The comparison is textual: the
        resolved specifier must equal the declaring path minus its extension,
        so './utils/index' matches utils/index.ts but './utils' does not.
        """
        record = self.session.imports.get(name)
        if record is None:
            return False

        specifier = record.source_module
        if not (specifier.startswith('./') or specifier.startswith('../')):
            return False

        resolved = os.path.normpath(os.path.join(os.path.dirname(str(record.importing_file)), specifier))
        declared = _SOURCE_SUFFIX_RE.sub('', os.path.normpath(str(declaring_file)))
        return resolved == declared
