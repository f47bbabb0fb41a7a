"""Analysis state: the four bookkeeping tables and the output record.

All tables are keyed by name alone, project-wide. Two files declaring (or
importing, or exporting) the same spelling collide and the file processed
last wins.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from tree_sitter import Node


@dataclass
class Declaration:
    """A named binding found by the symbol collector."""
    name: str
    kind: str  # variable, constant, function, type, interface, class or enum
    defining_file: Path
    line: int
    node: Optional[Node] = field(default=None, repr=False, compare=False)


@dataclass
class ImportRecord:
    """A name brought into a file by an import statement."""
    local_name: str
    source_module: str  # specifier exactly as written, e.g. './utils' or 'react'
    importing_file: Path
    binding_kind: str  # 'named' or 'default'


@dataclass
class ExportRecord:
    """A name marked for external visibility."""
    exported_name: str
    exporting_file: Path
    export_kind: str  # a declaration kind, 'named' or 'default'


@dataclass(frozen=True)
class UnusedItem:
    """A declaration the classifier judged dead."""
    name: str
    kind: str
    file: str
    line: int
    exported: bool
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'kind': self.kind,
            'file': self.file,
            'line': self.line,
            'exported': self.exported,
            'reason': self.reason,
        }


class AnalysisSession:
    """Owns the tables for a single analysis run.

    Built fresh for each run and handed to every phase; nothing here is
    shared between runs.
    """

    def __init__(self):
        self.declarations: Dict[str, Declaration] = {}
        self.imports: Dict[str, ImportRecord] = {}
        self.exports: Dict[str, ExportRecord] = {}
        self.usages: Set[str] = set()

    def add_declaration(self, declaration: Declaration) -> None:
        # dict assignment keeps an existing key's position, so iteration
        # order is first-seen order even when a later file wins
        self.declarations[declaration.name] = declaration

    def add_import(self, record: ImportRecord) -> None:
        self.imports[record.local_name] = record

    def add_export(self, record: ExportRecord) -> None:
        self.exports[record.exported_name] = record

    def add_usage(self, name: str) -> None:
        self.usages.add(name)

    def stats(self) -> Dict[str, int]:
        """Table sizes, as shown in the summary and the report."""
        return {
            'declarations': len(self.declarations),
            'imports': len(self.imports),
            'exports': len(self.exports),
            'usages': len(self.usages),
        }

    def to_details(self) -> Dict[str, List]:
        """Raw tables in JSON-friendly form for the opt-in diagnostic dump."""
        return {
            'allDeclarations': [
                [name, {'file': str(d.defining_file), 'kind': d.kind, 'line': d.line}]
                for name, d in self.declarations.items()
            ],
            'allImports': [
                [name, {'from': r.source_module, 'file': str(r.importing_file), 'type': r.binding_kind}]
                for name, r in self.imports.items()
            ],
            'allExports': [
                [name, {'file': str(r.exporting_file), 'type': r.export_kind}]
                for name, r in self.exports.items()
            ],
            'allUsages': sorted(self.usages),
        }
