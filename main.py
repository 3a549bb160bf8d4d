#!/usr/bin/env python3
"""NEXUS Main Entry Point

Investigates whether a handful of Solana wallets are related:

- Validates the monitored wallet list
- Fetches recent history per wallet (SolanaHistoryClient)
- Runs the connection analysis engine
- Optionally asks the insight generator for a narrative
- Writes JSON/CSV reports

Usage:
    python main.py WALLET_A WALLET_B [WALLET_C ...] --time-window 120 --output-dir reports
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from agents.connection_analyzer import AnalysisResult, ConnectionAnalysisEngine
from agents.insight_generator import InsightGenerator
from config.analysis_config import AnalysisConfig, ProviderSettings
from config.logging_config import configure_logging
from utils.report_export import write_report
from utils.solana_history_client import SolanaHistoryClient
from utils.validation import validate_addresses

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID_INPUT = 2

ANALYSIS_FAILED_MESSAGE = "Analysis failed: no address data could be obtained."


class NexusScanner:
    """Fetch -> analyze -> explain -> export for one set of wallets."""

    def __init__(
        self,
        config: AnalysisConfig,
        history_client: SolanaHistoryClient,
        insight_generator: Optional[InsightGenerator] = None,
    ):
        self.config = config
        self.history_client = history_client
        self.insight_generator = insight_generator
        self.engine = ConnectionAnalysisEngine(config)

    async def run(self, addresses: List[str]) -> Optional[AnalysisResult]:
        """Returns None when no wallet produced any transaction data."""
        logger.info(
            "nexus_scan_starting",
            wallets=len(addresses),
            max_transactions=self.config.max_transactions,
            time_window_seconds=self.config.time_window_seconds,
            include_programs=self.config.include_programs,
        )

        history = await self.history_client.fetch_many(addresses, self.config.max_transactions)

        if not any(history.values()):
            logger.error("analysis_failed", reason="no_history", wallets=len(addresses))
            return None

        return self.engine.analyze(history)

    async def explain(self, result: AnalysisResult) -> Optional[str]:
        if self.insight_generator is None:
            return None
        return await self.insight_generator.generate(result.summary, result.monitored_entities)


def format_report(result: AnalysisResult, insight: Optional[str] = None) -> str:
    summary = result.summary
    lines = [
        f"Transactions scanned:   {summary.total_transactions_scanned}",
        f"Unique counterparties:  {summary.unique_counterparty_count}",
        f"Confidence score:       {summary.confidence_score}/100",
        f"Graph:                  {len(result.graph.nodes)} nodes, {len(result.graph.links)} links",
        "",
        "Connections:",
    ]
    if not summary.pairs:
        lines.append("  (none found)")
    for pair in summary.pairs:
        lines.append(
            f"  [{pair.score:>3}] {pair.category.value:<20} "
            f"{pair.entity_a[:8]}.. <-> {pair.entity_b[:8]}..  {pair.reason}"
        )

    clusters = result.graph.clusters()
    if clusters:
        lines.append("")
        lines.append("Clusters:")
        for cluster in clusters:
            lines.append(f"  {len(cluster)} nodes: " + ", ".join(n[:8] for n in cluster))

    if insight:
        lines.extend(["", "Insight:", insight])

    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Infer relationships between Solana wallets from their recent history",
    )
    parser.add_argument("addresses", nargs="+", help="Wallet addresses to investigate (2-5)")
    parser.add_argument("--max-transactions", type=int, help="Transactions fetched per wallet")
    parser.add_argument("--time-window", type=int, help="Time-proximity window in seconds")
    parser.add_argument("--no-programs", action="store_true", help="Skip shared program analysis")
    parser.add_argument("--rpc", action="append", help="RPC endpoint (repeatable)")
    parser.add_argument("-o", "--output-dir", type=Path, help="Write JSON/CSV reports here")
    parser.add_argument("--insight", action="store_true", help="Generate an AI narrative")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--console-logs", action="store_true", help="Human-readable logs")
    return parser


def config_from_args(args: argparse.Namespace) -> AnalysisConfig:
    config = AnalysisConfig.from_env()
    if args.max_transactions is not None:
        config.max_transactions = args.max_transactions
    if args.time_window is not None:
        config.time_window_seconds = args.time_window
    if args.no_programs:
        config.include_programs = False
    return config.validate()


async def async_main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, json_output=not args.console_logs)

    try:
        addresses = validate_addresses(args.addresses)
        config = config_from_args(args)
        settings = ProviderSettings.from_env(args.rpc)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return EXIT_INVALID_INPUT

    insight_generator = InsightGenerator() if args.insight else None

    async with SolanaHistoryClient(settings) as client:
        scanner = NexusScanner(config, client, insight_generator)
        result = await scanner.run(addresses)

    if result is None:
        print(ANALYSIS_FAILED_MESSAGE, file=sys.stderr)
        return EXIT_FAILED

    insight = await scanner.explain(result)
    print(format_report(result, insight))

    if args.output_dir:
        write_report(result, args.output_dir)

    return EXIT_OK


def main():
    sys.exit(asyncio.run(async_main()))


if __name__ == "__main__":
    main()
