"""Tests for heuristic mint risk scoring."""

import random
from unittest.mock import AsyncMock

import pytest

from src.parsers.mint_parser import MintInfo
from src.parsers.risk_scorer import (
    BASELINE_SCORE,
    MINT_UNKNOWN_DELTA,
    NATIVE_MINT,
    NATIVE_SCORE,
    PLATFORM_STYLE_DELTA,
    RENOUNCED_DELTA,
    ZERO_SUPPLY_DELTA,
    RiskLevel,
    assess_mint_risk,
    level_for_score,
    score_mint,
)
from src.parsers.solana_rpc.exceptions import SolanaRpcHttpError

PUMP_MINT = "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVpump"
PLAIN_MINT = "7GCihgDB8fe6KNjn2MYtkzZcRjQy3t9GHdC8uHYmW2hr"


def _info(**overrides) -> MintInfo:
    base = dict(
        decimals=6,
        supply="1000000000000000",
        mint_authority_set=False,
        freeze_authority_set=False,
        is_initialized=True,
    )
    base.update(overrides)
    return MintInfo(**base)


class TestShortCircuits:
    @pytest.mark.parametrize("info", [None, _info(), _info(supply="0", is_initialized=False)])
    def test_native_asset(self, info) -> None:
        result = score_mint(NATIVE_MINT, info)
        assert result.score == NATIVE_SCORE
        assert result.tags == ("NATIVE_ASSET",)
        assert result.level is RiskLevel.LOW
        assert len(result.reasons) == 1

    def test_platform_suffix_without_chain_data(self) -> None:
        result = score_mint(PUMP_MINT, chain_checked=False)
        assert result.score == BASELINE_SCORE + PLATFORM_STYLE_DELTA
        assert set(result.tags) == {"PLATFORM_STYLE", "NO_CHAIN_DATA"}
        assert result.level is RiskLevel.MEDIUM

    def test_no_chain_data_ignores_mint_info(self) -> None:
        """Chain rules never run without a chain source."""
        result = score_mint(PLAIN_MINT, _info(supply="0"), chain_checked=False)
        assert result.tags == ("NO_CHAIN_DATA",)
        assert result.score == BASELINE_SCORE

    def test_unknown_mint(self) -> None:
        result = score_mint(PLAIN_MINT, None)
        assert result.score == BASELINE_SCORE + MINT_UNKNOWN_DELTA
        assert "MINT_UNKNOWN" in result.tags
        assert result.tags == ("MINT_UNKNOWN",)
        assert result.level is RiskLevel.MEDIUM

    def test_unknown_pump_mint_is_high(self) -> None:
        result = score_mint(PUMP_MINT, None)
        assert result.score == 80
        assert result.level is RiskLevel.HIGH
        assert result.tags == ("PLATFORM_STYLE", "MINT_UNKNOWN")


class TestChainRules:
    def test_renounced_and_zero_supply_compose(self) -> None:
        result = score_mint(PLAIN_MINT, _info(supply="0"))
        assert result.score == BASELINE_SCORE + RENOUNCED_DELTA + ZERO_SUPPLY_DELTA
        assert "RENOUNCED" in result.tags
        assert "ZERO_SUPPLY" in result.tags

    def test_clean_renounced_mint_is_low(self) -> None:
        result = score_mint(PLAIN_MINT, _info())
        assert result.score == 35
        assert result.level is RiskLevel.LOW
        assert result.tags == ("RENOUNCED",)

    def test_authorities_penalized_independently(self) -> None:
        mint_only = score_mint(PLAIN_MINT, _info(mint_authority_set=True))
        freeze_only = score_mint(PLAIN_MINT, _info(freeze_authority_set=True))
        both = score_mint(
            PLAIN_MINT, _info(mint_authority_set=True, freeze_authority_set=True)
        )
        assert mint_only.score == 65 and mint_only.tags == ("MINT_AUTHORITY_SET",)
        assert freeze_only.score == 60 and freeze_only.tags == ("FREEZE_AUTHORITY_SET",)
        assert both.score == 75
        assert both.tags == ("MINT_AUTHORITY_SET", "FREEZE_AUTHORITY_SET")
        assert both.level is RiskLevel.HIGH

    def test_decimals(self) -> None:
        standard = score_mint(PLAIN_MINT, _info(decimals=9))
        weird = score_mint(PLAIN_MINT, _info(decimals=12))
        assert "DECIMALS_9" in standard.tags
        assert standard.score == 35
        assert "WEIRD_DECIMALS" in weird.tags
        assert weird.score == 45

    def test_worst_case_clamped_to_100(self) -> None:
        result = score_mint(PUMP_MINT, _info(
            is_initialized=False,
            mint_authority_set=True,
            freeze_authority_set=True,
            decimals=18,
            supply="0",
        ))
        # 50 + 10 + 25 + 15 + 10 + 10 + 20 = 140
        assert result.score == 100
        assert result.level is RiskLevel.HIGH

    def test_reasons_follow_evaluation_order(self) -> None:
        result = score_mint(PUMP_MINT, _info(
            is_initialized=False, mint_authority_set=True, decimals=9, supply="0",
        ))
        assert result.tags == (
            "PLATFORM_STYLE",
            "UNINITIALIZED_MINT",
            "MINT_AUTHORITY_SET",
            "DECIMALS_9",
            "ZERO_SUPPLY",
        )
        assert len(result.reasons) == len(result.tags)
        assert "pump" in result.reasons[0]


class TestUnknownLevel:
    @pytest.mark.parametrize("mint", [None, ""])
    def test_missing_mint_not_scored(self, mint) -> None:
        result = score_mint(mint, _info())
        assert result.level is RiskLevel.UNKNOWN
        assert result.tags == ("NOT_SCORED",)
        assert result.score == BASELINE_SCORE

    def test_scored_mints_never_unknown(self) -> None:
        assert score_mint(PLAIN_MINT, None).level is not RiskLevel.UNKNOWN
        assert score_mint(PLAIN_MINT, chain_checked=False).level is not RiskLevel.UNKNOWN


class TestProperties:
    def test_deterministic_and_idempotent(self) -> None:
        info = _info(mint_authority_set=True, decimals=12)
        assert score_mint(PUMP_MINT, info) == score_mint(PUMP_MINT, info)
        assert repr(score_mint(PUMP_MINT, info)) == repr(score_mint(PUMP_MINT, info))

    def test_randomized_bounds_and_level_mapping(self) -> None:
        rng = random.Random(1337)
        mints = [PUMP_MINT, PLAIN_MINT, NATIVE_MINT, "AnotherMint1111pump", "Xyz"]
        for _ in range(1000):
            mint = rng.choice(mints)
            chain_checked = rng.random() > 0.2
            info = None
            if rng.random() > 0.2:
                info = MintInfo(
                    decimals=rng.randint(0, 18),
                    supply=str(rng.choice([0, 1, 10**15])),
                    mint_authority_set=rng.random() > 0.5,
                    freeze_authority_set=rng.random() > 0.5,
                    is_initialized=rng.random() > 0.3,
                )
            result = score_mint(mint, info, chain_checked=chain_checked)

            assert 0 <= result.score <= 100
            assert result.level is level_for_score(result.score)
            assert len(result.tags) == len(set(result.tags))

    @pytest.mark.parametrize(
        ("score", "level"),
        [(0, RiskLevel.LOW), (39, RiskLevel.LOW), (40, RiskLevel.MEDIUM),
         (70, RiskLevel.MEDIUM), (71, RiskLevel.HIGH), (100, RiskLevel.HIGH)],
    )
    def test_level_boundaries(self, score: int, level: RiskLevel) -> None:
        assert level_for_score(score) is level


class TestAssessMintRisk:
    @pytest.mark.asyncio
    async def test_without_rpc(self) -> None:
        result = await assess_mint_risk(PUMP_MINT, None)
        assert "NO_CHAIN_DATA" in result.tags

    @pytest.mark.asyncio
    async def test_with_rpc(self) -> None:
        rpc = AsyncMock()
        rpc.get_parsed_mint_info = AsyncMock(return_value=_info(supply="0"))
        result = await assess_mint_risk(PLAIN_MINT, rpc)
        assert result.score == 55
        rpc.get_parsed_mint_info.assert_awaited_once_with(PLAIN_MINT)

    @pytest.mark.asyncio
    async def test_lookup_failure_is_unknown_mint(self) -> None:
        rpc = AsyncMock()
        rpc.get_parsed_mint_info = AsyncMock(
            side_effect=SolanaRpcHttpError(500, "getAccountInfo")
        )
        result = await assess_mint_risk(PLAIN_MINT, rpc)
        assert result.tags == ("MINT_UNKNOWN",)

    @pytest.mark.asyncio
    async def test_native_skips_lookup(self) -> None:
        rpc = AsyncMock()
        result = await assess_mint_risk(NATIVE_MINT, rpc)
        assert result.tags == ("NATIVE_ASSET",)
        rpc.get_parsed_mint_info.assert_not_awaited()
