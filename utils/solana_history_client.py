"""
Solana History Client - Wallet Transaction Fetching With Endpoint Fallback
=========================================================================

Fetches the most recent transactions of a wallet over JSON-RPC:

1. getSignaturesForAddress (one call)
2. getTransaction (jsonParsed), sent as JSON-RPC batches of `batch_size`
   with a pause between batches to stay under public rate limits

Endpoints are tried in order; a failing endpoint is logged and the next
one is used. A failed batch is skipped, the rest continue. The client
never raises to its caller: total failure yields an empty list.
"""

import asyncio
import itertools
from typing import Any, Dict, List, Optional, Sequence

import httpx
import structlog

from agents.connection_analyzer.models import TransactionRecord
from config.analysis_config import DEFAULT_MAX_TRANSACTIONS, ProviderSettings

from .transaction_parser import TransactionParser

logger = structlog.get_logger(__name__)


class RPCError(Exception):
    """Error object returned by a JSON-RPC endpoint."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def is_invalid_address(self) -> bool:
        text = self.message.lower()
        return "invalid param" in text or "invalid public key" in text


class SolanaHistoryClient:
    """
    Wallet history provider for the connection analyzer.

    Example:
        async with SolanaHistoryClient() as client:
            history = await client.fetch_many([wallet_a, wallet_b], limit=50)
    """

    def __init__(
        self,
        settings: Optional[ProviderSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        parser: Optional[TransactionParser] = None,
    ):
        """
        Args:
            settings: Endpoint list, timeouts, batching
            transport: Custom httpx transport (tests use MockTransport)
            parser: Transaction parser
        """
        self.settings = settings or ProviderSettings.from_env()
        self.parser = parser or TransactionParser()
        self.client = httpx.AsyncClient(
            http2=True,
            transport=transport,
            timeout=httpx.Timeout(self.settings.timeout_seconds),
            headers={"Content-Type": "application/json"},
        )
        self._ids = itertools.count(1)

        self.stats = {
            "requests": 0,
            "endpoint_failures": 0,
            "batch_failures": 0,
            "transactions_parsed": 0,
        }

        logger.info(
            "solana_history_client_initialized",
            endpoints=len(self.settings.endpoints),
            batch_size=self.settings.batch_size,
        )

    async def __aenter__(self) -> "SolanaHistoryClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        await self.client.aclose()

    async def fetch_transaction_history(
        self,
        address: str,
        limit: int = DEFAULT_MAX_TRANSACTIONS,
    ) -> List[TransactionRecord]:
        """
        Fetch and parse up to `limit` recent transactions of `address`.

        The limit is capped at `max_fetch_limit`. Returns [] when every
        endpoint fails.
        """
        effective_limit = max(0, min(limit, self.settings.max_fetch_limit))
        last_error: Optional[Exception] = None

        for endpoint in self.settings.endpoints:
            try:
                records = await self._fetch_from_endpoint(endpoint, address, effective_limit)
                logger.info(
                    "history_fetched",
                    address=address[:8] + "...",
                    endpoint=endpoint,
                    records=len(records),
                )
                return records

            except RPCError as e:
                self.stats["endpoint_failures"] += 1
                last_error = e
                logger.warning("rpc_error", endpoint=endpoint, code=e.code, error=e.message)
                if e.is_invalid_address:
                    break

            except (httpx.HTTPError, ValueError, TypeError, KeyError, AttributeError) as e:
                self.stats["endpoint_failures"] += 1
                last_error = e
                logger.warning("rpc_endpoint_failed", endpoint=endpoint, error=str(e))

            await asyncio.sleep(self.settings.retry_delay_seconds)

        logger.error(
            "history_fetch_failed",
            address=address[:8] + "...",
            error=str(last_error) if last_error else "no endpoints configured",
        )
        return []

    async def fetch_many(
        self,
        addresses: Sequence[str],
        limit: int = DEFAULT_MAX_TRANSACTIONS,
    ) -> Dict[str, List[TransactionRecord]]:
        """Fetch each wallet sequentially, preserving input order."""
        history = {}
        for address in addresses:
            history[address] = await self.fetch_transaction_history(address, limit)
        return history

    async def _fetch_from_endpoint(
        self,
        endpoint: str,
        address: str,
        limit: int,
    ) -> List[TransactionRecord]:
        signatures = await self._call(
            endpoint,
            "getSignaturesForAddress",
            [address, {"limit": limit}],
        )
        if signatures is None:
            signatures = []
        if not isinstance(signatures, list):
            raise TypeError(f"getSignaturesForAddress returned {type(signatures).__name__}")
        sig_strings = [
            s["signature"] for s in signatures
            if isinstance(s, dict) and s.get("signature")
        ]

        records: List[TransactionRecord] = []
        batch_size = max(1, self.settings.batch_size)

        for i in range(0, len(sig_strings), batch_size):
            batch = sig_strings[i:i + batch_size]

            try:
                transactions = await self._batch_call(
                    endpoint,
                    "getTransaction",
                    [
                        [sig, {
                            "encoding": "jsonParsed",
                            "maxSupportedTransactionVersion": 0,
                            "commitment": "confirmed",
                        }]
                        for sig in batch
                    ],
                )
                for tx in transactions:
                    if not tx:
                        continue
                    record = self.parser.parse(tx, address)
                    if record is not None:
                        records.append(record)
                        self.stats["transactions_parsed"] += 1

            except (httpx.HTTPError, RPCError, ValueError, TypeError, KeyError, AttributeError) as e:
                self.stats["batch_failures"] += 1
                logger.warning(
                    "transaction_batch_failed",
                    address=address[:8] + "...",
                    batch_start=i,
                    error=str(e),
                )

            await asyncio.sleep(self.settings.batch_delay_seconds)

        return records

    async def _call(self, endpoint: str, method: str, params: List[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        self.stats["requests"] += 1
        response = await self.client.post(endpoint, json=payload)
        response.raise_for_status()
        return self._unwrap(response.json())

    async def _batch_call(
        self,
        endpoint: str,
        method: str,
        param_sets: List[List[Any]],
    ) -> List[Any]:
        payload = [
            {
                "jsonrpc": "2.0",
                "id": next(self._ids),
                "method": method,
                "params": params,
            }
            for params in param_sets
        ]
        self.stats["requests"] += 1
        response = await self.client.post(endpoint, json=payload)
        response.raise_for_status()

        body = response.json()
        if isinstance(body, dict):
            # Some endpoints reject batches with a single error object
            return [self._unwrap(body)]

        order = {item["id"]: idx for idx, item in enumerate(payload)}
        results: List[Any] = [None] * len(payload)
        for item in body:
            if not isinstance(item, dict):
                continue
            idx = order.get(item.get("id"))
            if idx is None or "error" in item:
                continue
            results[idx] = item.get("result")
        return results

    @staticmethod
    def _unwrap(body: Dict[str, Any]) -> Any:
        if "error" in body:
            error = body["error"] or {}
            raise RPCError(error.get("message", "unknown RPC error"), error.get("code"))
        return body.get("result")

    def get_stats(self) -> Dict[str, int]:
        return dict(self.stats)
