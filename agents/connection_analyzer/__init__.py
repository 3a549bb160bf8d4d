"""
Connection Analyzer Package
===========================

Heuristic relationship inference between monitored Solana wallets.

Components:
- InteractionIndexer: Classifies recipients/programs and logs interactions
- NodeLinkRegistry: Deduplicated graph with upgrade-only merge rules
- TimeProximityDetector / HubDetector: Cross-wallet heuristics
- PairEvidenceRecorder: Strongest evidence per wallet pair
- GraphPruner: Drops single-touch noise from the graph
- ConfidenceScorer: 0-100 aggregate score
- ConnectionAnalysisEngine: Runs the whole pipeline
"""

from .models import (
    NodeCategory,
    LinkCategory,
    TransactionRecord,
    GraphNode,
    GraphLink,
    InteractionEntry,
    PairEvidence,
    ConnectionGraph,
    AnalysisSummary,
    AnalysisResult,
)
from .registry import NodeLinkRegistry, canonical_pair_key, short_label
from .pair_recorder import PairEvidenceRecorder
from .interaction_indexer import InteractionIndexer, InteractionLog, IndexResult
from .detectors import TimeProximityDetector, HubDetector, HubFinding
from .graph_pruner import GraphPruner
from .confidence_scorer import ConfidenceScorer, CATEGORY_WEIGHTS
from .engine import ConnectionAnalysisEngine, analyze_connections

__all__ = [
    # Models
    "NodeCategory",
    "LinkCategory",
    "TransactionRecord",
    "GraphNode",
    "GraphLink",
    "InteractionEntry",
    "PairEvidence",
    "ConnectionGraph",
    "AnalysisSummary",
    "AnalysisResult",
    # Registry
    "NodeLinkRegistry",
    "canonical_pair_key",
    "short_label",
    # Evidence
    "PairEvidenceRecorder",
    # Indexing
    "InteractionIndexer",
    "InteractionLog",
    "IndexResult",
    # Detectors
    "TimeProximityDetector",
    "HubDetector",
    "HubFinding",
    # Pruning / scoring
    "GraphPruner",
    "ConfidenceScorer",
    "CATEGORY_WEIGHTS",
    # Engine
    "ConnectionAnalysisEngine",
    "analyze_connections",
]

__version__ = "1.0.0"
