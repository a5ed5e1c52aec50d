"""On-chain mint account parser: jsonParsed getAccountInfo payloads.

The RPC node does the binary decoding for us when the account is requested
with ``encoding=jsonParsed``; this module only validates the shape and
keeps the fields the risk scorer needs.

Expected account value:
    {"data": {"program": "spl-token",
              "parsed": {"type": "mint",
                         "info": {"decimals": 6, "supply": "1000",
                                  "mintAuthority": null,
                                  "freezeAuthority": null,
                                  "isInitialized": true}}}, ...}
"""

from dataclasses import dataclass
from typing import Any

from loguru import logger

TOKEN_PROGRAMS = frozenset({"spl-token", "spl-token-2022"})


@dataclass(frozen=True)
class MintInfo:
    """Parsed mint account information."""

    decimals: int = 0
    supply: str = "0"  # u64 as decimal string, as returned by RPC
    mint_authority_set: bool = False  # False = renounced
    freeze_authority_set: bool = False
    is_initialized: bool = False

    @property
    def supply_int(self) -> int:
        try:
            return int(self.supply)
        except ValueError:
            return 0


def parse_mint_account(account: dict[str, Any] | None) -> MintInfo | None:
    """Build MintInfo from a jsonParsed account value.

    Returns None when the account is missing or is not a token mint
    (wrong program, not parsed, or parsed as a token account).
    """
    if not account:
        return None

    data = account.get("data")
    if not isinstance(data, dict):
        # base64 fallback means the node could not parse it as a known program
        return None
    if data.get("program") not in TOKEN_PROGRAMS:
        return None

    parsed = data.get("parsed") or {}
    if parsed.get("type") != "mint":
        return None

    info = parsed.get("info") or {}
    try:
        decimals = int(info.get("decimals") or 0)
    except (TypeError, ValueError):
        logger.debug(f"[MINT] Bad decimals value: {info.get('decimals')!r}")
        decimals = 0

    return MintInfo(
        decimals=decimals,
        supply=str(info.get("supply") or "0"),
        mint_authority_set=bool(info.get("mintAuthority")),
        freeze_authority_set=bool(info.get("freezeAuthority")),
        is_initialized=bool(info.get("isInitialized")),
    )
