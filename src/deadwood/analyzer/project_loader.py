"""Source set loading: tsconfig.json discovery, file resolution and parsing.

Everything that touches the disk for an analysis happens here, once, before
any table is built. Config problems are fatal (ProjectConfigError); a single
unreadable source file is only a warning.
"""
import bisect
import fnmatch
import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from tree_sitter import Node, Tree

from .parser import LanguageParser
from ..utils.logger import get_logger

logger = get_logger(__name__)

TSCONFIG_NAME = 'tsconfig.json'

TS_EXTENSIONS = ('.ts', '.tsx')
JS_EXTENSIONS = ('.js', '.jsx')

DEFAULT_INCLUDE = ['**/*']
DEFAULT_EXCLUDE = ['node_modules', 'bower_components', 'jspm_packages']

# A JSON string, a // comment, or a /* */ comment. Strings are matched first
# so that "@/*" or "http://x" inside values survive comment stripping.
_JSONC_COMMENT_RE = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
_JSONC_TRAILING_COMMA_RE = re.compile(r'("(?:\\.|[^"\\])*")|,(?=\s*[}\]])')


class ProjectConfigError(Exception):
    """The project configuration is missing or unusable. Aborts the run."""


@dataclass
class SourceFile:
    """A parsed source file handed to the analysis phases."""
    path: Path
    tree: Tree = field(repr=False)
    source: bytes = field(repr=False)

    _line_starts: Optional[List[int]] = field(default=None, init=False, repr=False, compare=False)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def position(self, offset: int) -> Tuple[int, int]:
        """1-based (line, column) of a byte offset into ``source``.

        The column counts characters, so a multi-byte character is one column.
        """
        if self._line_starts is None:
            self._line_starts = [0] + [m.end() for m in re.finditer(b'\n', self.source)]
        index = bisect.bisect_right(self._line_starts, offset) - 1
        line_start = self._line_starts[index]
        column = len(self.source[line_start:offset].decode('utf-8', errors='replace'))
        return index + 1, column + 1

    def line_of(self, node: Node) -> int:
        """1-based line on which ``node`` starts."""
        return self.position(node.start_byte)[0]


@dataclass
class TsConfig:
    """The parts of a (possibly extended) tsconfig.json the loader uses.

    Each pattern list carries the directory it is relative to, which is the
    directory of whichever config file in the ``extends`` chain declared it.
    """
    path: Path
    compiler_options: Dict = field(default_factory=dict)
    files: Optional[Tuple[Path, List[str]]] = None
    include: Optional[Tuple[Path, List[str]]] = None
    exclude: Optional[Tuple[Path, List[str]]] = None

    @property
    def allow_js(self) -> bool:
        return bool(self.compiler_options.get('allowJs', False))


@dataclass
class LoadedProject:
    """Result of loading: the config used and the parsed files, sorted by path."""
    root: Path
    config_path: Path
    files: List[SourceFile]


def find_tsconfig(start: str | Path) -> Path:
    """Find the nearest tsconfig.json, walking from ``start`` up to the filesystem root.

    Raises:
        ProjectConfigError: If no tsconfig.json exists on the way up
    """
    start = Path(start).resolve()
    current = start if start.is_dir() else start.parent

    while True:
        candidate = current / TSCONFIG_NAME
        if candidate.is_file():
            return candidate
        if current.parent == current:
            break
        current = current.parent

    raise ProjectConfigError(f"{TSCONFIG_NAME} not found in {start} or any parent directory")


def parse_jsonc(text: str) -> object:
    """Parse JSON that may contain comments and trailing commas, as tsconfig allows."""
    def keep_strings(match):
        return match.group(1) or ''

    text = _JSONC_COMMENT_RE.sub(keep_strings, text)
    text = _JSONC_TRAILING_COMMA_RE.sub(keep_strings, text)
    return json.loads(text)


def load_tsconfig(config_path: str | Path, _seen: Optional[set] = None) -> TsConfig:
    """Read a tsconfig.json and fold in its relative ``extends`` chain.

    Args:
        config_path: Path to the tsconfig file

    Returns:
        TsConfig with compiler options merged base-first

    Raises:
        ProjectConfigError: On a missing/unreadable file, invalid JSON, a
            non-object document, or a cycle in ``extends``
    """
    config_path = Path(config_path).resolve()
    seen = _seen if _seen is not None else set()
    if config_path in seen:
        raise ProjectConfigError(f"Circular 'extends' chain through {config_path}")
    seen.add(config_path)

    try:
        raw = config_path.read_text(encoding='utf-8-sig')
    except OSError as e:
        raise ProjectConfigError(f"Error reading {config_path}: {e}") from e

    try:
        data = parse_jsonc(raw)
    except json.JSONDecodeError as e:
        raise ProjectConfigError(f"Error reading {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ProjectConfigError(f"Error reading {config_path}: expected a JSON object")

    config = TsConfig(path=config_path)

    extends = data.get('extends')
    if isinstance(extends, str):
        base = _load_base_config(config_path, extends, seen)
        if base is not None:
            config.compiler_options.update(base.compiler_options)
            config.files, config.include, config.exclude = base.files, base.include, base.exclude

    compiler_options = data.get('compilerOptions') or {}
    if isinstance(compiler_options, dict):
        config.compiler_options.update(compiler_options)

    config_dir = config_path.parent
    for key in ('files', 'include', 'exclude'):
        value = data.get(key)
        if isinstance(value, list):
            setattr(config, key, (config_dir, [str(v) for v in value]))

    return config


def _load_base_config(config_path: Path, extends: str, seen: set) -> Optional[TsConfig]:
    if not extends.startswith('.'):
        # Package configs (e.g. "@tsconfig/node20") live in node_modules
        logger.warning("Skipping non-relative 'extends' %r in %s", extends, config_path)
        return None

    base_path = (config_path.parent / extends)
    if base_path.suffix != '.json':
        base_path = base_path.with_name(base_path.name + '.json')
    if not base_path.is_file():
        raise ProjectConfigError(f"Base config {extends!r} referenced by {config_path} not found")
    return load_tsconfig(base_path, seen)


def resolve_source_files(config: TsConfig) -> List[Path]:
    """Expand files/include/exclude into the sorted list of analyzable sources."""
    config_dir = config.path.parent
    extensions = TS_EXTENSIONS + (JS_EXTENSIONS if config.allow_js else ())

    if config.include is not None:
        include = config.include
    elif config.files is not None:
        include = (config_dir, [])
    else:
        include = (config_dir, DEFAULT_INCLUDE)

    exclude_base, exclude_patterns = config.exclude or (config_dir, list(DEFAULT_EXCLUDE))
    exclude_patterns = list(exclude_patterns)
    out_dir = config.compiler_options.get('outDir')
    if isinstance(out_dir, str) and out_dir:
        exclude_patterns.append(out_dir)

    candidates = set()

    if config.files is not None:
        files_base, names = config.files
        for name in names:
            path = (files_base / name).resolve()
            if path.is_file():
                candidates.add(path)
            else:
                logger.warning("File %s listed in %s does not exist", name, config.path)

    include_base, include_patterns = include
    for pattern in include_patterns:
        for path in _expand_include(include_base, pattern):
            if not _is_excluded(path, exclude_base, exclude_patterns):
                candidates.add(path)

    return sorted(
        path for path in candidates
        if path.suffix.lower() in extensions
        and not path.name.endswith('.d.ts')
        and 'node_modules' not in path.parts
    )


def _expand_include(base: Path, pattern: str):
    target = base / pattern
    if not any(ch in pattern for ch in '*?['):
        if target.is_file():
            yield target.resolve()
            return
        # A directory name means every file below it
        if not target.is_dir():
            return
        base, matches = target, target.rglob('*')
    else:
        matches = base.glob(pattern)

    for path in matches:
        # Wildcards never match dot-directories or dot-files (.git, backups)
        parts = path.relative_to(base).parts
        if any(part.startswith('.') and part not in ('.', '..') for part in parts):
            continue
        if path.is_file():
            yield path.resolve()


def _is_excluded(path: Path, base: Path, patterns: List[str]) -> bool:
    try:
        relative = path.relative_to(base.resolve()).as_posix()
    except ValueError:
        return False

    for pattern in patterns:
        pattern = pattern.strip('/').removeprefix('./')
        if not any(ch in pattern for ch in '*?['):
            if relative == pattern or relative.startswith(pattern + '/'):
                return True
            continue
        if fnmatch.fnmatchcase(relative, pattern):
            return True
        # "**/" also matches zero directories
        if pattern.startswith('**/') and fnmatch.fnmatchcase(relative, pattern[3:]):
            return True
    return False


def parse_source_files(paths: List[Path]) -> List[SourceFile]:
    """Read and parse each file once. Unreadable files are skipped with a warning."""
    parsed = []

    for path in paths:
        parser = LanguageParser.from_file_extension(path)
        if parser is None:
            continue

        try:
            source = path.read_bytes()
        except OSError as e:
            logger.warning("Skipping unreadable file %s: %s", path, e)
            continue

        tree = parser.parse_source(source)
        if tree.root_node.has_error:
            logger.warning("Syntax errors in %s; results for this file may be partial", path)
        parsed.append(SourceFile(path=path, tree=tree, source=source))

    return parsed


def load_project(project_path: str | Path, tsconfig_path: str | Path | None = None) -> LoadedProject:
    """Resolve the config, the source set, and parse every file.

    Args:
        project_path: Project root (a directory)
        tsconfig_path: Explicit tsconfig.json; discovered from the root when omitted

    Raises:
        ProjectConfigError: If the configuration cannot be located or read
    """
    project_path = Path(project_path).resolve()

    if tsconfig_path is None:
        config_path = find_tsconfig(project_path)
    else:
        config_path = Path(tsconfig_path).resolve()
        if not config_path.is_file():
            raise ProjectConfigError(f"tsconfig file not found: {config_path}")

    logger.info("Using TypeScript config: %s", config_path)
    config = load_tsconfig(config_path)

    paths = resolve_source_files(config)
    logger.info("Found %d files in TypeScript project", len(paths))

    files = parse_source_files(paths)
    logger.info("Analyzing %d source files", len(files))

    return LoadedProject(root=project_path, config_path=config_path, files=files)
