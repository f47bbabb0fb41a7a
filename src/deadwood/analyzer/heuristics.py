"""Allowlists consulted by the reachability classifier.

Names in ``builtins`` are never reported, whatever file declares them.
Files whose stem is in ``entry_point_names`` keep their exports alive, since
something outside the project (a bundler, a runtime) is assumed to load them.
"""
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import FrozenSet, Iterable

DEFAULT_BUILTINS = frozenset({
    # Language globals
    'Array', 'Boolean', 'Date', 'Error', 'Function', 'Number', 'Object',
    'RegExp', 'String', 'Symbol', 'Promise', 'Map', 'Set', 'WeakMap', 'WeakSet',
    # React
    'React', 'ReactNode', 'ReactElement', 'Component', 'FC', 'FunctionComponent',
    # Runtime globals (browser / Node)
    'console', 'window', 'document', 'process', 'global',
    'setTimeout', 'setInterval', 'clearTimeout', 'clearInterval',
    'require', 'exports', 'module', '__dirname', '__filename',
})

DEFAULT_ENTRY_POINT_NAMES = frozenset({'index', 'main', 'app', 'entry', 'bootstrap'})


@dataclass(frozen=True)
class Heuristics:
    builtins: FrozenSet[str] = field(default=DEFAULT_BUILTINS)
    entry_point_names: FrozenSet[str] = field(default=DEFAULT_ENTRY_POINT_NAMES)

    def is_builtin(self, name: str) -> bool:
        return name in self.builtins

    def is_likely_entry_point(self, file_path: str | Path) -> bool:
        """Guess whether ``file_path`` is loaded from outside the project.

        Matches on the lower-cased file stem, plus the ``src/index`` layout.
        """
        path = Path(file_path)
        # strip only the final extension: 'index.test.ts' -> 'index.test'
        stem = path.stem.lower()
        if stem in self.entry_point_names:
            return True
        return path.parent.name == 'src' and stem == 'index'

    def extended(self, builtins: Iterable[str] = (),
                 entry_point_names: Iterable[str] = ()) -> "Heuristics":
        """Return a copy with extra names added to either allowlist."""
        return replace(
            self,
            builtins=self.builtins | frozenset(builtins),
            entry_point_names=self.entry_point_names | frozenset(n.lower() for n in entry_point_names),
        )
