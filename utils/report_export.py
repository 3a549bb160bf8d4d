"""
Report Export - JSON and CSV Output of an Analysis
==================================================

- summary JSON: the AnalysisSummary verbatim (camelCase keys)
- graph JSON: nodes/links in the renderer's shape
- pairs CSV: EntityA,EntityB,Type,Reason,Score with the entities and reason
  always double-quoted and embedded quotes doubled
"""

import csv
import io
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

import orjson
import structlog

from agents.connection_analyzer.models import (
    AnalysisResult,
    AnalysisSummary,
    ConnectionGraph,
    PairEvidence,
)

logger = structlog.get_logger(__name__)

CSV_HEADERS = ["EntityA", "EntityB", "Type", "Reason", "Score"]
DEFAULT_BASENAME = "nexus_analysis"


def summary_to_dict(summary: AnalysisSummary) -> Dict[str, Any]:
    return summary.to_dict()


def summary_to_json(summary: AnalysisSummary) -> str:
    return orjson.dumps(summary_to_dict(summary), option=orjson.OPT_INDENT_2).decode()


def graph_to_dict(graph: ConnectionGraph) -> Dict[str, Any]:
    return graph.to_dict()


def graph_to_json(graph: ConnectionGraph) -> str:
    return orjson.dumps(graph_to_dict(graph), option=orjson.OPT_INDENT_2).decode()


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _format_score(score: float) -> str:
    return str(int(score)) if float(score).is_integer() else str(score)


def pairs_to_csv(pairs: Iterable[PairEvidence]) -> str:
    rows = [",".join(CSV_HEADERS)]
    for pair in pairs:
        rows.append(",".join([
            _quote(pair.entity_a),
            _quote(pair.entity_b),
            pair.category.value,
            _quote(pair.reason),
            _format_score(pair.score),
        ]))
    return "\n".join(rows)


def parse_pairs_csv(text: str) -> List[Tuple[str, str, str, str, float]]:
    """Read rows written by pairs_to_csv back as tuples."""
    reader = csv.reader(io.StringIO(text))
    header = next(reader, None)
    if header != CSV_HEADERS:
        raise ValueError(f"Unexpected CSV header: {header}")

    return [
        (row[0], row[1], row[2], row[3], float(row[4]))
        for row in reader
        if row
    ]


def write_report(
    result: AnalysisResult,
    directory: Path,
    basename: str = DEFAULT_BASENAME,
) -> Dict[str, Path]:
    """Write summary JSON, pairs CSV and graph JSON into directory."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    paths = {
        "json": directory / f"{basename}.json",
        "csv": directory / f"{basename}.csv",
        "graph": directory / f"{basename}_graph.json",
    }
    paths["json"].write_text(summary_to_json(result.summary), encoding="utf-8")
    paths["csv"].write_text(pairs_to_csv(result.summary.pairs), encoding="utf-8")
    paths["graph"].write_text(graph_to_json(result.graph), encoding="utf-8")

    logger.info("report_written", directory=str(directory), files=[p.name for p in paths.values()])
    return paths
