"""Project loading and the five analysis phases."""
from .detector import UnusedCodeDetector
from .heuristics import Heuristics
from .project_loader import ProjectConfigError, load_project
from .session import AnalysisSession, UnusedItem

__all__ = [
    "AnalysisSession",
    "Heuristics",
    "ProjectConfigError",
    "UnusedCodeDetector",
    "UnusedItem",
    "load_project",
]
