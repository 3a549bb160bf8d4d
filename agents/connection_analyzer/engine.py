"""
Connection Analysis Engine
==========================

Single-pass, synchronous pipeline over fully fetched wallet history:

    inputs -> InteractionIndexer -> TimeProximityDetector -> HubDetector
           -> GraphPruner -> ConnectionGraph
           -> PairEvidenceRecorder + ConfidenceScorer -> AnalysisSummary

All state lives in the registry and recorder created for one call; two
calls never share anything.
"""

import time
from typing import Any, Mapping, Optional, Sequence

import structlog

from config.analysis_config import AnalysisConfig

from .confidence_scorer import ConfidenceScorer
from .detectors import HubDetector, TimeProximityDetector
from .graph_pruner import GraphPruner
from .interaction_indexer import InteractionIndexer
from .models import AnalysisResult, AnalysisSummary
from .pair_recorder import PairEvidenceRecorder
from .registry import NodeLinkRegistry

logger = structlog.get_logger(__name__)


class ConnectionAnalysisEngine:
    """
    Infers relationships between monitored wallets.

    Usage:
        engine = ConnectionAnalysisEngine(AnalysisConfig(time_window_seconds=60))
        result = engine.analyze({"walletA": records_a, "walletB": records_b})
        result.graph.links, result.summary.confidence_score
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        scorer: Optional[ConfidenceScorer] = None,
    ):
        self.config = (config or AnalysisConfig()).validate()
        self.scorer = scorer or ConfidenceScorer()

    def analyze(self, inputs: Mapping[str, Sequence[Any]]) -> AnalysisResult:
        """
        Analyze transaction history keyed by monitored wallet.

        Args:
            inputs: Monitored wallet -> list of TransactionRecord (or
                provider mappings). Key order defines first-encounter order.

        Returns:
            AnalysisResult with the pruned graph and the ranked summary
        """
        start_time = time.time()
        monitored = list(inputs.keys())

        registry = NodeLinkRegistry()
        recorder = PairEvidenceRecorder()

        for entity in monitored:
            registry.add_input_node(entity)

        indexer = InteractionIndexer(monitored, registry, recorder, self.config)
        index = indexer.index(inputs)
        log = index.interaction_log

        TimeProximityDetector(self.config.time_window_seconds).detect(log, registry, recorder)
        hubs = HubDetector().detect(log, registry, recorder)

        graph = GraphPruner(monitored).prune(registry, log)

        pairs = recorder.ranked()
        summary = AnalysisSummary(
            pairs=pairs,
            total_transactions_scanned=index.total_transactions_scanned,
            unique_counterparty_count=index.unique_counterparty_count,
            confidence_score=self.scorer.score(pairs),
        )

        elapsed_ms = (time.time() - start_time) * 1000

        logger.info(
            "connection_analysis_complete",
            monitored=len(monitored),
            transactions=summary.total_transactions_scanned,
            counterparties=summary.unique_counterparty_count,
            hubs=len(hubs),
            pairs=len(pairs),
            nodes=len(graph.nodes),
            links=len(graph.links),
            confidence=summary.confidence_score,
            elapsed_ms=round(elapsed_ms, 2),
        )

        return AnalysisResult(
            graph=graph,
            summary=summary,
            monitored_entities=monitored,
            analysis_time_ms=elapsed_ms,
        )


def analyze_connections(
    inputs: Mapping[str, Sequence[Any]],
    config: Optional[AnalysisConfig] = None,
) -> AnalysisResult:
    """Run one analysis with a throwaway engine."""
    return ConnectionAnalysisEngine(config).analyze(inputs)
