"""
Analysis Configuration for NEXUS
================================

Runtime settings for the connection analysis engine and the Solana
history provider. Values come from keyword arguments or the environment
(a local .env file is honoured through python-dotenv).
"""

import os
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

from dotenv import load_dotenv

# Public RPC endpoints, tried in order
RPC_ENDPOINTS = [
    "https://solana-rpc.publicnode.com",
    "https://rpc.ankr.com/solana",
    "https://solana-mainnet.rpc.extrnode.com",
    "https://api.mainnet-beta.solana.com",
]

# Known system programs excluded from shared-program analysis
SYSTEM_PROGRAM = "11111111111111111111111111111111"
TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
COMPUTE_BUDGET_PROGRAM = "ComputeBudget111111111111111111111111111111"
MEMO_PROGRAM = "MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcQb"

IGNORED_PROGRAMS: FrozenSet[str] = frozenset({
    SYSTEM_PROGRAM,
    TOKEN_PROGRAM,
    COMPUTE_BUDGET_PROGRAM,
    MEMO_PROGRAM,
})

DEFAULT_MAX_TRANSACTIONS = 50
DEFAULT_TIME_WINDOW_SECONDS = 300
MAX_FETCH_LIMIT = 200

MIN_MONITORED_ENTITIES = 2
MAX_MONITORED_ENTITIES = 5


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class AnalysisConfig:
    """Settings for one analysis run."""
    max_transactions: int = DEFAULT_MAX_TRANSACTIONS  # enforced by the provider
    time_window_seconds: int = DEFAULT_TIME_WINDOW_SECONDS
    include_programs: bool = True
    ignored_programs: FrozenSet[str] = field(default_factory=lambda: IGNORED_PROGRAMS)

    def validate(self) -> "AnalysisConfig":
        """Raise ValueError on impossible settings."""
        if self.time_window_seconds < 0:
            raise ValueError(
                f"time_window_seconds must be >= 0, got {self.time_window_seconds}"
            )
        if self.max_transactions < 1:
            raise ValueError(
                f"max_transactions must be >= 1, got {self.max_transactions}"
            )
        return self

    @classmethod
    def from_env(cls) -> "AnalysisConfig":
        """Build config from NEXUS_* environment variables."""
        load_dotenv()
        return cls(
            max_transactions=int(os.getenv("NEXUS_MAX_TRANSACTIONS", DEFAULT_MAX_TRANSACTIONS)),
            time_window_seconds=int(
                os.getenv("NEXUS_TIME_WINDOW_SECONDS", DEFAULT_TIME_WINDOW_SECONDS)
            ),
            include_programs=_env_bool("NEXUS_INCLUDE_PROGRAMS", True),
        ).validate()


@dataclass
class ProviderSettings:
    """Settings for the Solana history provider."""
    endpoints: List[str] = field(default_factory=lambda: list(RPC_ENDPOINTS))
    timeout_seconds: float = 30.0
    batch_size: int = 5
    batch_delay_seconds: float = 0.5
    retry_delay_seconds: float = 0.3
    max_fetch_limit: int = MAX_FETCH_LIMIT

    @classmethod
    def from_env(cls, endpoints: Optional[List[str]] = None) -> "ProviderSettings":
        load_dotenv()

        if endpoints is None:
            raw = os.getenv("RPC_ENDPOINTS", ",".join(RPC_ENDPOINTS))
            endpoints = [e.strip() for e in raw.split(",") if e.strip()]

        return cls(
            endpoints=endpoints,
            timeout_seconds=float(os.getenv("RPC_TIMEOUT_SECONDS", 30.0)),
            batch_size=int(os.getenv("RPC_BATCH_SIZE", 5)),
            batch_delay_seconds=float(os.getenv("RPC_BATCH_DELAY_SECONDS", 0.5)),
            retry_delay_seconds=float(os.getenv("RPC_ENDPOINT_RETRY_DELAY_SECONDS", 0.3)),
            max_fetch_limit=int(os.getenv("MAX_FETCH_LIMIT", MAX_FETCH_LIMIT)),
        )
