"""Tests for InsightGenerator."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from agents.connection_analyzer import AnalysisSummary, LinkCategory, PairEvidence
from agents.insight_generator import (
    INSIGHT_NO_CONNECTIONS,
    INSIGHT_UNAVAILABLE_ERROR,
    INSIGHT_UNAVAILABLE_NO_KEY,
    InsightGenerator,
    build_prompt,
)


@pytest.fixture
def summary():
    return AnalysisSummary(
        pairs=[PairEvidence("A", "B", "Direct transfer in tx abc...", 50, LinkCategory.DIRECT)],
        total_transactions_scanned=20,
        unique_counterparty_count=7,
        confidence_score=40,
    )


def mock_client(text="Likely the same operator."):
    client = MagicMock()
    client.messages.create = AsyncMock(
        return_value=SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])
    )
    return client


class TestInsightGenerator:
    """Tests for the best-effort narrative generator."""

    def test_prompt_contains_summary(self, summary):
        prompt = build_prompt(summary, ["A", "B"])

        assert "Target Wallets Investigated: A, B" in prompt
        assert "Total Transactions Scanned: 20" in prompt
        assert "Unique Counterparties: 7" in prompt
        assert '"type": "DIRECT"' in prompt

    @pytest.mark.asyncio
    async def test_missing_key(self, summary, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

        assert await InsightGenerator().generate(summary, ["A", "B"]) == INSIGHT_UNAVAILABLE_NO_KEY

    @pytest.mark.asyncio
    async def test_no_pairs(self):
        generator = InsightGenerator(client=mock_client())

        assert await generator.generate(AnalysisSummary(), ["A", "B"]) == INSIGHT_NO_CONNECTIONS

    @pytest.mark.asyncio
    async def test_generate(self, summary):
        client = mock_client()
        generator = InsightGenerator(client=client, model="test-model")

        text = await generator.generate(summary, ["A", "B"])

        assert text == "Likely the same operator."
        kwargs = client.messages.create.await_args.kwargs
        assert kwargs["model"] == "test-model"
        assert "Target Wallets Investigated: A, B" in kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_api_failure_is_swallowed(self, summary):
        client = MagicMock()
        client.messages.create = AsyncMock(side_effect=RuntimeError("quota exceeded"))

        text = await InsightGenerator(client=client).generate(summary, ["A", "B"])

        assert text == INSIGHT_UNAVAILABLE_ERROR
