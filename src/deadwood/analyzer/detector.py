"""Unused declaration detection across a TypeScript/JavaScript project."""
from pathlib import Path
from typing import List, Optional

from .classifier import ReachabilityClassifier
from .export_tracker import ExportTracker
from .heuristics import Heuristics
from .import_tracker import ImportTracker
from .project_loader import LoadedProject, load_project
from .session import AnalysisSession, UnusedItem
from .symbol_collector import SymbolCollector
from .usage_recorder import UsageRecorder
from ..utils.logger import get_logger

logger = get_logger(__name__)


class UnusedCodeDetector:
    """Run the collection phases over a loaded project, then classify.

    Every call to ``analyze`` starts from a fresh AnalysisSession, so running
    it twice on the same project gives the same result.
    """

    def __init__(self, project: LoadedProject, heuristics: Optional[Heuristics] = None,
                 debug: bool = False):
        """Initialize detector.

        Args:
            project: Parsed source set from ``load_project``
            heuristics: Builtin / entry-point allowlists (defaults when None)
            debug: Emit per-declaration classification traces
        """
        self.project = project
        self.heuristics = heuristics or Heuristics()
        self.debug = debug
        self.session = AnalysisSession()
        self.failed_nodes = 0

    @classmethod
    def from_path(cls, project_path: str | Path, tsconfig_path: str | Path | None = None,
                  heuristics: Optional[Heuristics] = None, debug: bool = False) -> "UnusedCodeDetector":
        """Load the project at ``project_path`` and build a detector for it.

        Raises:
            ProjectConfigError: If the tsconfig cannot be found or read
        """
        return cls(load_project(project_path, tsconfig_path), heuristics=heuristics, debug=debug)

    def analyze(self) -> List[UnusedItem]:
        """Find unused declarations.

        Returns:
            Dead declarations in declaration-table order; an empty list if
            the analysis itself fails
        """
        self.session = AnalysisSession()
        self.failed_nodes = 0

        try:
            return self._run_phases()
        except Exception:
            logger.exception("Error during analysis")
            return []

    def _run_phases(self) -> List[UnusedItem]:
        files = self.project.files
        session = self.session

        logger.info("Phase 1: Collecting declarations...")
        self._run(SymbolCollector(session), files)
        logger.info("Found %d declarations", len(session.declarations))

        logger.info("Phase 2: Tracking imports...")
        self._run(ImportTracker(session), files)
        logger.info("Found %d imports", len(session.imports))

        logger.info("Phase 3: Finding usages...")
        self._run(UsageRecorder(session), files)
        logger.info("Found %d internal usages", len(session.usages))

        logger.info("Phase 4: Tracking exports...")
        self._run(ExportTracker(session), files)
        logger.info("Found %d exports", len(session.exports))

        logger.info("Phase 5: Analyzing usage patterns...")
        classifier = ReachabilityClassifier(session, self.heuristics, debug=self.debug)
        unused = classifier.classify()

        if self.failed_nodes:
            logger.warning("%d syntax nodes could not be processed and were skipped", self.failed_nodes)

        return unused

    def _run(self, visitor, files) -> None:
        for source_file in files:
            self.failed_nodes += visitor.visit_file(source_file)
