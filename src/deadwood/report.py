"""JSON report for an analysis run."""
import json
import platform
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

from .analyzer.session import AnalysisSession, UnusedItem
from .config import __version__


def group_by_kind(items: List[UnusedItem]) -> Dict[str, List[UnusedItem]]:
    """Group items by declaration kind, kinds in first-seen order."""
    grouped: Dict[str, List[UnusedItem]] = {}
    for item in items:
        grouped.setdefault(item.kind, []).append(item)
    return grouped


def build_report(project_path: str | Path, items: List[UnusedItem],
                 session: AnalysisSession, include_details: bool = False) -> Dict:
    """Assemble the report dictionary.

    Args:
        project_path: Analyzed project root
        items: Classifier output
        session: Session the items came from (for table sizes)
        include_details: Also dump the four raw tables
    """
    stats = session.stats()

    report = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "toolVersion": __version__,
        "pythonVersion": platform.python_version(),
        "projectPath": str(project_path),
        "totalUnused": len(items),
        "totalDeclarations": stats["declarations"],
        "totalImports": stats["imports"],
        "totalExports": stats["exports"],
        "totalUsages": stats["usages"],
        "byType": {
            kind: [item.to_dict() for item in group]
            for kind, group in group_by_kind(items).items()
        },
        "items": [item.to_dict() for item in items],
    }

    if include_details:
        report.update(session.to_details())

    return report


def write_report(report: Dict, output_path: str | Path) -> Path:
    """Write ``report`` as JSON, atomically.

    Returns:
        Path written
    """
    output_path = Path(output_path)
    temp_path = output_path.with_suffix(output_path.suffix + ".tmp")

    with open(temp_path, 'w', encoding='utf-8') as f:
        json.dump(report, f, indent=2, ensure_ascii=False)

    temp_path.replace(output_path)
    return output_path

