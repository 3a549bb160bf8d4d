"""
Insight Generator - Narrative Assessment of an Analysis Summary
===============================================================

One LLM call per analysis turns the ranked pair evidence into a short
forensic narrative. Best effort only: every failure becomes one of the
fixed sentinel strings below and nothing is raised to the caller.
"""

import json
import os
from typing import Any, List, Optional

import structlog

from agents.connection_analyzer.models import AnalysisSummary

logger = structlog.get_logger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"
MAX_TOKENS = 600
TIMEOUT_SECONDS = 30.0

INSIGHT_UNAVAILABLE_NO_KEY = "AI Insights unavailable: Missing API Key."
INSIGHT_UNAVAILABLE_ERROR = (
    "Error generating AI insights. Please check your API usage or network connection."
)
INSIGHT_NO_CONNECTIONS = "No strong connections found to analyze."

PROMPT_TEMPLATE = """\
You are a blockchain forensics expert. Analyze the following summary of \
connections between specific Solana wallet addresses.

Target Wallets Investigated: {wallets}

Data Found:
- Total Transactions Scanned: {total_transactions}
- Unique Counterparties: {unique_counterparties}
- Key Connections Identified: {pairs}

Task:
1. Assess the likelihood that these wallets belong to the same entity or are coordinating.
2. Provide a "Confidence Score" from 0 to 100.
3. Explain your reasoning briefly, highlighting specific suspicious connections \
(shared counterparties, direct transfers).
4. Keep it concise (under 150 words).

Format the output as simple text with markdown.
"""


def build_prompt(summary: AnalysisSummary, monitored_entities: List[str]) -> str:
    return PROMPT_TEMPLATE.format(
        wallets=", ".join(monitored_entities),
        total_transactions=summary.total_transactions_scanned,
        unique_counterparties=summary.unique_counterparty_count,
        pairs=json.dumps([p.to_dict() for p in summary.pairs]),
    )


class InsightGenerator:
    """Anthropic-backed narrative generator."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[Any] = None,
    ):
        """
        Args:
            api_key: Anthropic key, defaults to ANTHROPIC_API_KEY
            model: Model id, defaults to NEXUS_INSIGHT_MODEL
            client: Pre-built AsyncAnthropic-compatible client
        """
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        self.model = model or os.getenv("NEXUS_INSIGHT_MODEL", DEFAULT_MODEL)
        self._client = client

    @property
    def available(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def _get_client(self):
        if self._client is None:
            import anthropic

            self._client = anthropic.AsyncAnthropic(
                api_key=self.api_key,
                timeout=TIMEOUT_SECONDS,
            )
        return self._client

    async def generate(
        self,
        summary: AnalysisSummary,
        monitored_entities: List[str],
    ) -> str:
        if not self.available:
            return INSIGHT_UNAVAILABLE_NO_KEY
        if not summary.pairs:
            return INSIGHT_NO_CONNECTIONS

        prompt = build_prompt(summary, monitored_entities)

        try:
            response = await self._get_client().messages.create(
                model=self.model,
                max_tokens=MAX_TOKENS,
                messages=[{"role": "user", "content": prompt}],
            )
            text = "".join(
                getattr(block, "text", "") for block in response.content
            ).strip()
            return text or INSIGHT_UNAVAILABLE_ERROR

        except Exception as e:
            logger.error("insight_generation_failed", model=self.model, error=str(e))
            return INSIGHT_UNAVAILABLE_ERROR
