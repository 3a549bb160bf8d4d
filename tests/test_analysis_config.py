"""Tests for analysis and provider configuration."""

import pytest

from config.analysis_config import (
    DEFAULT_TIME_WINDOW_SECONDS,
    IGNORED_PROGRAMS,
    RPC_ENDPOINTS,
    AnalysisConfig,
    ProviderSettings,
)

ENV_VARS = (
    "NEXUS_MAX_TRANSACTIONS",
    "NEXUS_TIME_WINDOW_SECONDS",
    "NEXUS_INCLUDE_PROGRAMS",
    "RPC_ENDPOINTS",
    "RPC_BATCH_SIZE",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestAnalysisConfig:
    """Tests for AnalysisConfig."""

    def test_defaults(self, clean_env):
        config = AnalysisConfig.from_env()

        assert config.time_window_seconds == DEFAULT_TIME_WINDOW_SECONDS
        assert config.include_programs is True
        assert config.ignored_programs == IGNORED_PROGRAMS

    def test_env_overrides(self, clean_env):
        clean_env.setenv("NEXUS_TIME_WINDOW_SECONDS", "90")
        clean_env.setenv("NEXUS_INCLUDE_PROGRAMS", "false")

        config = AnalysisConfig.from_env()

        assert config.time_window_seconds == 90
        assert config.include_programs is False

    def test_zero_window_is_allowed(self):
        assert AnalysisConfig(time_window_seconds=0).validate().time_window_seconds == 0

    def test_negative_window_rejected(self):
        with pytest.raises(ValueError, match="time_window_seconds"):
            AnalysisConfig(time_window_seconds=-1).validate()

    def test_zero_max_transactions_rejected(self):
        with pytest.raises(ValueError, match="max_transactions"):
            AnalysisConfig(max_transactions=0).validate()


class TestProviderSettings:
    """Tests for ProviderSettings."""

    def test_default_endpoints(self, clean_env):
        assert ProviderSettings.from_env().endpoints == RPC_ENDPOINTS

    def test_endpoints_from_env(self, clean_env):
        clean_env.setenv("RPC_ENDPOINTS", "https://a.test, ,https://b.test")
        clean_env.setenv("RPC_BATCH_SIZE", "3")

        settings = ProviderSettings.from_env()

        assert settings.endpoints == ["https://a.test", "https://b.test"]
        assert settings.batch_size == 3

    def test_explicit_endpoints_win(self, clean_env):
        clean_env.setenv("RPC_ENDPOINTS", "https://a.test")

        assert ProviderSettings.from_env(["https://c.test"]).endpoints == ["https://c.test"]
