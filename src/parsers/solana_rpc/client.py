"""Solana JSON-RPC client: getTransaction, getAccountInfo, getEpochInfo."""

import asyncio
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.parsers.mint_parser import MintInfo, parse_mint_account
from src.parsers.rate_limiter import RateLimiter
from src.parsers.solana_rpc.exceptions import (
    SolanaRpcError,
    SolanaRpcHttpError,
    SolanaRpcResponseError,
)
from src.parsers.solana_rpc.models import EpochInfo, TransactionMeta

MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 3.0]


class SolanaRpcClient:
    """Async HTTP client for a Solana RPC node.

    Lookups raise SolanaRpcError on transport, HTTP or RPC-level failures and
    return None when the node has no data. Only HTTP 429 is retried.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        max_rps: float = 10.0,
        timeout: float = 15.0,
        commitment: str = "confirmed",
    ) -> None:
        self._rpc_url = rpc_url
        self._commitment = commitment
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(timeout=timeout)
        self._request_id = 0

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    async def close(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, params: list[Any]) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        for attempt in range(MAX_RETRIES + 1):
            await self._rate_limiter.acquire()
            try:
                resp = await self._client.post(self._rpc_url, json=payload)
            except httpx.HTTPError as e:
                raise SolanaRpcError(f"{method} transport error: {e}") from e

            if resp.status_code == 429 and attempt < MAX_RETRIES:
                delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                logger.debug(f"[RPC] 429 on {method}, retrying in {delay:.0f}s")
                await asyncio.sleep(delay)
                continue
            if resp.status_code != 200:
                raise SolanaRpcHttpError(resp.status_code, method)

            try:
                data = resp.json()
            except ValueError as e:
                raise SolanaRpcError(f"{method} returned invalid JSON") from e

            if "error" in data:
                raise SolanaRpcResponseError(method, data["error"])
            return data.get("result")

        raise SolanaRpcHttpError(429, method)

    async def get_epoch_info(self) -> EpochInfo:
        """Connectivity check: current epoch and absolute slot."""
        result = await self._call("getEpochInfo", [{"commitment": self._commitment}])
        try:
            return EpochInfo.model_validate(result)
        except ValidationError as e:
            raise SolanaRpcError(f"Malformed getEpochInfo result: {e}") from e

    async def get_transaction_meta(self, signature: str) -> TransactionMeta | None:
        """Fetch transaction meta. None if the node does not know the transaction."""
        result = await self._call(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "jsonParsed",
                    "commitment": self._commitment,
                    "maxSupportedTransactionVersion": 0,
                },
            ],
        )
        if not result:
            return None

        meta = result.get("meta")
        if not meta:
            return None

        try:
            return TransactionMeta.model_validate(
                {
                    "postTokenBalances": meta.get("postTokenBalances") or [],
                    "err": meta.get("err"),
                }
            )
        except ValidationError as e:
            raise SolanaRpcError(f"Malformed transaction meta for {signature[:12]}: {e}") from e

    async def get_parsed_mint_info(self, mint: str) -> MintInfo | None:
        """Fetch parsed mint account. None if missing, invalid or not a token mint."""
        try:
            Pubkey.from_string(mint)
        except ValueError:
            logger.debug(f"[RPC] Not a valid address: {mint[:16]}")
            return None

        result = await self._call(
            "getAccountInfo",
            [mint, {"encoding": "jsonParsed", "commitment": self._commitment}],
        )
        if not result:
            return None
        return parse_mint_account(result.get("value"))
