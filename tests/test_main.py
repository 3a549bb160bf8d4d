"""Tests for the NEXUS CLI orchestration layer."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from agents.connection_analyzer import TransactionRecord
from config.analysis_config import AnalysisConfig
from main import (
    ANALYSIS_FAILED_MESSAGE,
    EXIT_FAILED,
    EXIT_INVALID_INPUT,
    NexusScanner,
    async_main,
    build_parser,
    config_from_args,
    format_report,
)

WALLET_A = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
WALLET_B = "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"


def history_client(history):
    client = MagicMock()
    client.fetch_many = AsyncMock(return_value=history)
    return client


class TestNexusScanner:
    """Tests for NexusScanner."""

    @pytest.mark.asyncio
    async def test_run_analyzes_history(self):
        history = {
            WALLET_A: [TransactionRecord(signature="sig00000001", sender=WALLET_A, recipients=(WALLET_B,))],
            WALLET_B: [],
        }
        client = history_client(history)
        scanner = NexusScanner(AnalysisConfig(max_transactions=25), client)

        result = await scanner.run([WALLET_A, WALLET_B])

        client.fetch_many.assert_awaited_once_with([WALLET_A, WALLET_B], 25)
        assert result.summary.confidence_score == 40
        assert result.monitored_entities == [WALLET_A, WALLET_B]

    @pytest.mark.asyncio
    async def test_run_without_any_history(self):
        scanner = NexusScanner(AnalysisConfig(), history_client({WALLET_A: [], WALLET_B: []}))

        assert await scanner.run([WALLET_A, WALLET_B]) is None

    @pytest.mark.asyncio
    async def test_explain_uses_generator(self):
        history = {
            WALLET_A: [TransactionRecord(signature="sig00000001", sender=WALLET_A, recipients=(WALLET_B,))],
            WALLET_B: [],
        }
        generator = MagicMock()
        generator.generate = AsyncMock(return_value="narrative")
        scanner = NexusScanner(AnalysisConfig(), history_client(history), generator)

        result = await scanner.run([WALLET_A, WALLET_B])

        assert await scanner.explain(result) == "narrative"
        generator.generate.assert_awaited_once_with(result.summary, [WALLET_A, WALLET_B])


class TestCli:
    """Tests for argument handling and report formatting."""

    def test_flags_override_config(self, monkeypatch):
        monkeypatch.delenv("NEXUS_TIME_WINDOW_SECONDS", raising=False)
        args = build_parser().parse_args([
            WALLET_A, WALLET_B, "--time-window", "60", "--max-transactions", "10", "--no-programs",
        ])

        config = config_from_args(args)

        assert config.time_window_seconds == 60
        assert config.max_transactions == 10
        assert config.include_programs is False

    @pytest.mark.asyncio
    async def test_invalid_address_exit_code(self, capsys):
        code = await async_main([WALLET_A, "bogus"])

        assert code == EXIT_INVALID_INPUT
        assert "Invalid Solana address: bogus" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_bad_provider_setting_exit_code(self, capsys, monkeypatch):
        monkeypatch.setenv("RPC_BATCH_SIZE", "lots")

        code = await async_main([WALLET_A, WALLET_B])

        assert code == EXIT_INVALID_INPUT
        assert "lots" in capsys.readouterr().err

    def test_format_report(self):
        from agents.connection_analyzer import analyze_connections

        result = analyze_connections({
            "walletAAAAAAA": [TransactionRecord(signature="s", sender="walletAAAAAAA", recipients=("walletBBBBBBB",))],
            "walletBBBBBBB": [],
        })

        report = format_report(result, insight="narrative")

        assert "Confidence score:       40/100" in report
        assert "DIRECT" in report
        assert "Clusters:" in report
        assert report.endswith("narrative")

    @pytest.mark.asyncio
    async def test_no_history_exit_code(self, capsys, monkeypatch):
        import main

        client = history_client({WALLET_A: [], WALLET_B: []})
        client.__aenter__ = AsyncMock(return_value=client)
        client.__aexit__ = AsyncMock(return_value=None)
        monkeypatch.setattr(main, "SolanaHistoryClient", MagicMock(return_value=client))

        code = await async_main([WALLET_A, WALLET_B])

        assert code == EXIT_FAILED
        assert ANALYSIS_FAILED_MESSAGE in capsys.readouterr().err
