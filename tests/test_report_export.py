"""Tests for JSON/CSV report export."""

import json

import pytest

from agents.connection_analyzer import (
    AnalysisSummary,
    LinkCategory,
    PairEvidence,
    TransactionRecord,
    analyze_connections,
)
from utils.report_export import (
    CSV_HEADERS,
    graph_to_dict,
    pairs_to_csv,
    parse_pairs_csv,
    summary_to_dict,
    summary_to_json,
    write_report,
)


@pytest.fixture
def pairs():
    return [
        PairEvidence("A", "B", "Direct transfer in tx abcdefgh...", 50, LinkCategory.DIRECT),
        PairEvidence("A", "C", 'Hub "Binance", seen twice', 20, LinkCategory.MIDDLEMAN),
        PairEvidence("B", "C", "Shared counterparty: X...", 10, LinkCategory.SHARED_COUNTERPARTY),
    ]


@pytest.fixture
def result():
    return analyze_connections({
        "A": [TransactionRecord(signature="sig12345678", sender="A", recipients=("B", "X"))],
        "B": [TransactionRecord(signature="sig99999999", sender="B", recipients=("X",))],
    })


class TestCsvExport:
    """Tests for pairs CSV output."""

    def test_header_and_quoting(self, pairs):
        lines = pairs_to_csv(pairs).split("\n")

        assert lines[0] == ",".join(CSV_HEADERS)
        assert lines[1] == '"A","B",DIRECT,"Direct transfer in tx abcdefgh...",50'
        assert lines[2] == '"A","C",MIDDLEMAN,"Hub ""Binance"", seen twice",20'

    def test_round_trip(self, pairs):
        parsed = parse_pairs_csv(pairs_to_csv(pairs))

        assert [(a, b, t, s) for a, b, t, _, s in parsed] == [
            (p.entity_a, p.entity_b, p.category.value, p.score) for p in pairs
        ]
        assert parsed[1][3] == 'Hub "Binance", seen twice'

    def test_entities_with_separators_round_trip(self):
        pairs = [PairEvidence('x,"1"', "y,2", "odd ids", 10, LinkCategory.SHARED_COUNTERPARTY)]

        parsed = parse_pairs_csv(pairs_to_csv(pairs))

        assert parsed == [('x,"1"', "y,2", "SHARED_COUNTERPARTY", "odd ids", 10.0)]

    def test_empty_pairs(self):
        assert pairs_to_csv([]) == ",".join(CSV_HEADERS)
        assert parse_pairs_csv(pairs_to_csv([])) == []

    def test_rejects_foreign_header(self):
        with pytest.raises(ValueError):
            parse_pairs_csv("a,b,c\n1,2,3")


class TestJsonExport:
    """Tests for summary and graph JSON output."""

    def test_summary_json(self, pairs):
        summary = AnalysisSummary(
            pairs=pairs,
            total_transactions_scanned=12,
            unique_counterparty_count=4,
            confidence_score=80,
        )

        data = json.loads(summary_to_json(summary))

        assert data == summary_to_dict(summary)
        assert data["totalTransactionsScanned"] == 12
        assert data["uniqueCounterparties"] == 4
        assert data["confidenceScore"] == 80
        assert data["connectedPairs"][0] == {
            "addressA": "A",
            "addressB": "B",
            "reason": "Direct transfer in tx abcdefgh...",
            "score": 50,
            "type": "DIRECT",
        }

    def test_graph_dict_shape(self, result):
        data = graph_to_dict(result.graph)

        node = next(n for n in data["nodes"] if n["id"] == "A")
        assert node == {"id": "A", "group": "input", "label": "A...A", "val": 25.0}
        link = next(l for l in data["links"] if l["id"] == "A-B")
        assert link["type"] == "DIRECT"
        assert link["value"] == 5.0
        assert link["details"] == "Direct Transfer"

    def test_write_report(self, result, tmp_path):
        paths = write_report(result, tmp_path / "out")

        assert sorted(p.name for p in paths.values()) == [
            "nexus_analysis.csv",
            "nexus_analysis.json",
            "nexus_analysis_graph.json",
        ]
        summary = json.loads(paths["json"].read_text())
        assert summary["confidenceScore"] == result.summary.confidence_score
        assert paths["csv"].read_text().startswith("EntityA,EntityB,Type,Reason,Score")
