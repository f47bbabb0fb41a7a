"""Shared fixtures: in-memory sources and on-disk tsconfig projects."""
import json
from pathlib import Path

import pytest

from deadwood.analyzer.detector import UnusedCodeDetector
from deadwood.analyzer.parser import LanguageParser
from deadwood.analyzer.project_loader import LoadedProject, SourceFile
from deadwood.analyzer.session import AnalysisSession


PROJECT_ROOT = Path('/project')


@pytest.fixture
def source():
    """Build a SourceFile from a code string without touching the disk."""
    def _make(code: str, name: str = 'src/module.ts') -> SourceFile:
        path = PROJECT_ROOT / name
        data = code.encode('utf-8')
        tree = LanguageParser.from_file_extension(path).parse_source(data)
        return SourceFile(path=path, tree=tree, source=data)
    return _make


@pytest.fixture
def session():
    return AnalysisSession()


@pytest.fixture
def detect(source):
    """Run the full detector over ``{relative name: code}``.

    Returns (detector, unused items).
    """
    def _detect(files: dict, heuristics=None, debug=False):
        sources = [source(code, name) for name, code in sorted(files.items())]
        project = LoadedProject(root=PROJECT_ROOT, config_path=PROJECT_ROOT / 'tsconfig.json', files=sources)
        detector = UnusedCodeDetector(project, heuristics=heuristics, debug=debug)
        return detector, detector.analyze()
    return _detect


@pytest.fixture
def ts_project(tmp_path):
    """Write a project with a tsconfig.json into tmp_path and return its root."""
    def _write(files: dict, tsconfig=None) -> Path:
        config = {"compilerOptions": {"strict": True}} if tsconfig is None else tsconfig
        if isinstance(config, str):
            (tmp_path / 'tsconfig.json').write_text(config, encoding='utf-8')
        else:
            (tmp_path / 'tsconfig.json').write_text(json.dumps(config), encoding='utf-8')
        for name, code in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(code, encoding='utf-8')
        return tmp_path
    return _write
