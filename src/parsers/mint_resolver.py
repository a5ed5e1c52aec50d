"""Signature → mint resolution on top of a single getTransaction lookup.

Failure is steady state here (the RPC index lags the log stream, nodes
throttle), so resolve() never raises: every failure mode collapses to None
and the caller logs a degraded record. Exactly one lookup per call, no
retries.
"""

from collections.abc import Awaitable, Callable

from loguru import logger

from src.parsers.solana_rpc.models import TransactionMeta

TransactionLookup = Callable[[str], Awaitable[TransactionMeta | None]]


class MintResolver:
    """Resolve a launch transaction signature to its token mint."""

    def __init__(self, lookup: TransactionLookup) -> None:
        self._lookup = lookup
        self._errors = 0
        self._misses = 0

    @property
    def errors(self) -> int:
        """Lookups that raised."""
        return self._errors

    @property
    def misses(self) -> int:
        """Lookups that succeeded but carried no token balances."""
        return self._misses

    async def resolve(self, signature: str) -> str | None:
        try:
            meta = await self._lookup(signature)
        except Exception as e:
            self._errors += 1
            logger.debug(
                f"[RESOLVE] Lookup failed for {signature[:8]}...: {str(e)[:160]}"
            )
            return None

        mint = meta.first_mint if meta is not None else None
        if mint is None:
            self._misses += 1
        return mint
