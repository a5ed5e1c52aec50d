"""Heuristic mint risk scoring.

Score starts at a neutral 50 and each rule adds or subtracts a fixed delta,
optionally tagging the mint and recording a human-readable reason. Higher
score = riskier. Rules are independent and evaluated in a fixed order, so a
new heuristic is a new function appended to a rule list, never a reordering.

Short-circuits:
  1. wrapped SOL → fixed low score, NATIVE_ASSET only
  2. no chain data source → identifier rules + NO_CHAIN_DATA
  3. chain lookup found nothing → identifier rules + MINT_UNKNOWN
A missing mint is not scored at all and gets level UNKNOWN.

score_mint() is pure; assess_mint_risk() does the RPC lookup around it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from loguru import logger

from src.parsers.mint_parser import MintInfo

if TYPE_CHECKING:
    from src.parsers.solana_rpc.client import SolanaRpcClient

NATIVE_MINT = "So11111111111111111111111111111111111111112"
PLATFORM_MINT_SUFFIX = "pump"
STANDARD_DECIMALS = 9

BASELINE_SCORE = 50
NATIVE_SCORE = 10
PLATFORM_STYLE_DELTA = 10
MINT_UNKNOWN_DELTA = 20
UNINITIALIZED_DELTA = 25
RENOUNCED_DELTA = -15
MINT_AUTHORITY_DELTA = 15
FREEZE_AUTHORITY_DELTA = 10
WEIRD_DECIMALS_DELTA = 10
ZERO_SUPPLY_DELTA = 20

LOW_BELOW = 40  # score < 40 → LOW
HIGH_ABOVE = 70  # score > 70 → HIGH


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    UNKNOWN = "UNKNOWN"  # scoring not attempted


@dataclass(frozen=True)
class RiskAssessment:
    mint: str
    score: int
    level: RiskLevel
    tags: tuple[str, ...]
    reasons: tuple[str, ...]

    @property
    def tags_csv(self) -> str:
        return ",".join(self.tags)


@dataclass(frozen=True)
class RuleHit:
    delta: int
    tag: str | None
    reason: str


IdentifierRule = Callable[[str], list[RuleHit]]
ChainRule = Callable[[MintInfo], list[RuleHit]]


def level_for_score(score: int) -> RiskLevel:
    if score < LOW_BELOW:
        return RiskLevel.LOW
    if score > HIGH_ABOVE:
        return RiskLevel.HIGH
    return RiskLevel.MEDIUM


# ── Identifier-shape rules ───────────────────────────────────────────


def _rule_platform_suffix(mint: str) -> list[RuleHit]:
    if mint.endswith(PLATFORM_MINT_SUFFIX):
        return [RuleHit(
            PLATFORM_STYLE_DELTA,
            "PLATFORM_STYLE",
            f"Mint address ends with '{PLATFORM_MINT_SUFFIX}' (pump.fun style mint).",
        )]
    return []


IDENTIFIER_RULES: tuple[IdentifierRule, ...] = (_rule_platform_suffix,)


# ── Chain rules ──────────────────────────────────────────────────────


def _rule_uninitialized(info: MintInfo) -> list[RuleHit]:
    if not info.is_initialized:
        return [RuleHit(
            UNINITIALIZED_DELTA, "UNINITIALIZED_MINT", "Mint account is not initialized."
        )]
    return []


def _rule_authorities(info: MintInfo) -> list[RuleHit]:
    if not info.mint_authority_set and not info.freeze_authority_set:
        return [RuleHit(
            RENOUNCED_DELTA,
            "RENOUNCED",
            "No mint authority or freeze authority (looks renounced).",
        )]
    hits = []
    if info.mint_authority_set:
        hits.append(RuleHit(
            MINT_AUTHORITY_DELTA,
            "MINT_AUTHORITY_SET",
            "Mint authority is still set (can mint more tokens).",
        ))
    if info.freeze_authority_set:
        hits.append(RuleHit(
            FREEZE_AUTHORITY_DELTA,
            "FREEZE_AUTHORITY_SET",
            "Freeze authority is set (tokens can potentially be frozen).",
        ))
    return hits


def _rule_decimals(info: MintInfo) -> list[RuleHit]:
    if info.decimals == STANDARD_DECIMALS:
        return [RuleHit(
            0, "DECIMALS_9", "Standard 9 decimal token (common on Solana)."
        )]
    if info.decimals > STANDARD_DECIMALS:
        return [RuleHit(
            WEIRD_DECIMALS_DELTA,
            "WEIRD_DECIMALS",
            f"Unusual decimals ({info.decimals}), non-standard configuration.",
        )]
    return []


def _rule_zero_supply(info: MintInfo) -> list[RuleHit]:
    if info.supply_int == 0:
        return [RuleHit(
            ZERO_SUPPLY_DELTA,
            "ZERO_SUPPLY",
            "Total supply is zero; may not be fully launched.",
        )]
    return []


CHAIN_RULES: tuple[ChainRule, ...] = (
    _rule_uninitialized,
    _rule_authorities,
    _rule_decimals,
    _rule_zero_supply,
)


# ── Scoring ──────────────────────────────────────────────────────────


def _build(mint: str, score: int, hits: list[RuleHit]) -> RiskAssessment:
    clamped = max(0, min(100, score))
    tags = tuple(dict.fromkeys(h.tag for h in hits if h.tag))
    return RiskAssessment(
        mint=mint,
        score=clamped,
        level=level_for_score(clamped),
        tags=tags,
        reasons=tuple(h.reason for h in hits),
    )


def unscored(mint: str | None) -> RiskAssessment:
    """Assessment for a launch whose mint is unknown. No rules run."""
    return RiskAssessment(
        mint=mint or "",
        score=BASELINE_SCORE,
        level=RiskLevel.UNKNOWN,
        tags=("NOT_SCORED",),
        reasons=("No mint address; scoring not attempted.",),
    )


def score_mint(
    mint: str | None,
    mint_info: MintInfo | None = None,
    *,
    chain_checked: bool = True,
) -> RiskAssessment:
    """Score a mint. Deterministic: same inputs, same assessment.

    Args:
        mint: Mint address. Empty/None yields an UNKNOWN assessment.
        mint_info: Parsed mint account, None if the lookup found nothing.
        chain_checked: False when no chain data source was available at all;
            mint_info is then ignored.
    """
    if not mint:
        return unscored(mint)

    if mint == NATIVE_MINT:
        return _build(mint, NATIVE_SCORE, [RuleHit(
            0, "NATIVE_ASSET", "This is the wrapped SOL mint, not a memecoin."
        )])

    hits: list[RuleHit] = []
    for id_rule in IDENTIFIER_RULES:
        hits.extend(id_rule(mint))

    if not chain_checked:
        hits.append(RuleHit(
            0, "NO_CHAIN_DATA", "No RPC endpoint; on-chain metadata not checked."
        ))
    elif mint_info is None:
        hits.append(RuleHit(
            MINT_UNKNOWN_DELTA,
            "MINT_UNKNOWN",
            "Mint account not found or not an SPL Token mint.",
        ))
    else:
        for chain_rule in CHAIN_RULES:
            hits.extend(chain_rule(mint_info))

    return _build(mint, BASELINE_SCORE + sum(h.delta for h in hits), hits)


async def assess_mint_risk(
    mint: str | None, rpc: SolanaRpcClient | None
) -> RiskAssessment:
    """Fetch mint info (if an RPC client is given) and score the mint.

    Lookup failures are treated as "not found" (MINT_UNKNOWN).
    """
    if not mint:
        return unscored(mint)
    if rpc is None:
        return score_mint(mint, chain_checked=False)
    if mint == NATIVE_MINT:
        return score_mint(mint)

    info: MintInfo | None = None
    try:
        info = await rpc.get_parsed_mint_info(mint)
    except Exception as e:
        logger.debug(f"[RISK] Mint info lookup failed for {mint[:12]}: {e}")
    return score_mint(mint, info)
