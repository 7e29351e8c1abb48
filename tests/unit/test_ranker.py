"""Unit tests for margin computation, filtering, ranking and formatting."""
from __future__ import annotations

from decimal import Decimal

import pytest

from auction_ranker.config import FilterConfig
from auction_ranker.errors import MarginUndefined
from auction_ranker.models import AssetAmount, ValuationResult
from auction_ranker.services.ranker import (
    FilterPolicy,
    compute_margin,
    format_amount,
    format_percentage,
    format_result,
    rank,
)


def _result(
    starting_bid: str = "100",
    reward: str = "120",
    vault_id: str = "vault1",
    batch_index: int = 0,
) -> ValuationResult:
    diff, margin = compute_margin(Decimal(starting_bid), Decimal(reward))
    return ValuationResult(
        vault_id=vault_id,
        batch_index=batch_index,
        loan=AssetAmount.parse("95@DUSD"),
        starting_bid=Decimal(starting_bid),
        reward=Decimal(reward),
        diff=diff,
        margin=margin,
        max_price=Decimal(reward) * Decimal("0.99"),
        liquidation_height=1500000,
        url=f"https://defiscan.live/vaults/{vault_id}/auctions/{batch_index}",
    )


class TestComputeMargin:
    def test_positive_margin(self) -> None:
        diff, margin = compute_margin(Decimal(100), Decimal(120))
        assert diff == Decimal(20)
        assert margin == Decimal(20)

    def test_zero_reward_is_minus_hundred(self) -> None:
        diff, margin = compute_margin(Decimal(100), Decimal(0))
        assert diff == Decimal(-100)
        assert margin == Decimal(-100)

    @pytest.mark.parametrize("starting_bid", ["0", "-1"])
    def test_non_positive_bid_raises(self, starting_bid: str) -> None:
        with pytest.raises(MarginUndefined):
            compute_margin(Decimal(starting_bid), Decimal(120))


class TestFilterPolicy:
    def test_margin_below_threshold_excluded(self) -> None:
        assert not FilterPolicy(min_margin=Decimal(25)).accepts(_result())

    def test_margin_at_threshold_included(self) -> None:
        assert FilterPolicy(min_margin=Decimal(20)).accepts(_result())

    def test_default_is_break_even(self) -> None:
        policy = FilterPolicy()
        assert policy.accepts(_result(reward="100"))
        assert not policy.accepts(_result(reward="99.99"))

    def test_zero_collateral_filtered(self) -> None:
        assert not FilterPolicy().accepts(_result(reward="0"))

    def test_min_diff_floor(self) -> None:
        policy = FilterPolicy(min_diff=Decimal(1))
        assert not policy.accepts(_result(starting_bid="100", reward="101"))
        assert policy.accepts(_result(starting_bid="100", reward="101.5"))

    def test_max_starting_bid_cap(self) -> None:
        policy = FilterPolicy(max_starting_bid=Decimal(8000))
        assert not policy.accepts(_result(starting_bid="8000", reward="9000"))
        assert policy.accepts(_result(starting_bid="7999", reward="9000"))

    def test_from_config(self) -> None:
        policy = FilterPolicy.from_config(
            FilterConfig(min_margin=Decimal(5), min_diff=Decimal(1), max_starting_bid=None)
        )
        assert policy == FilterPolicy(Decimal(5), Decimal(1), None)

    def test_with_min_margin_overrides_threshold_only(self) -> None:
        policy = FilterPolicy(min_margin=Decimal(5), min_diff=Decimal(1))
        assert policy.with_min_margin(None) is policy
        overridden = policy.with_min_margin(Decimal(30))
        assert overridden.min_margin == Decimal(30)
        assert overridden.min_diff == Decimal(1)


class TestRank:
    def test_descending_by_margin(self) -> None:
        results = [
            _result(reward="105", vault_id="a"),
            _result(reward="120", vault_id="b"),
            _result(reward="112", vault_id="c"),
        ]
        ranked = rank(results)
        assert [r.margin for r in ranked] == [Decimal(20), Decimal(12), Decimal(5)]
        assert [r.vault_id for r in ranked] == ["b", "c", "a"]

    def test_ties_keep_input_order(self) -> None:
        results = [_result(vault_id="first"), _result(vault_id="second")]
        assert [r.vault_id for r in rank(results)] == ["first", "second"]


class TestFormatting:
    def test_format_amount(self) -> None:
        assert format_amount(Decimal("123.45"), "DUSD") == "123.45000000 DUSD"
        assert format_amount(Decimal("123.45"), "DUSD", 7) == "123.4500000 DUSD"

    def test_format_amount_rounds_half_up(self) -> None:
        assert format_amount(Decimal("1.005"), "DFI", 2) == "1.01 DFI"

    def test_format_negative_amount(self) -> None:
        assert format_amount(Decimal("-20"), "DUSD", 2) == "-20.00 DUSD"

    def test_format_percentage(self) -> None:
        assert format_percentage(Decimal("23.762376")) == "23.76%"
        assert format_percentage(Decimal(-100)) == "-100.00%"

    def test_format_result(self) -> None:
        record = format_result(_result(), "DUSD")
        assert record == {
            "url": "https://defiscan.live/vaults/vault1/auctions/0",
            "vaultId": "vault1",
            "batchIndex": 0,
            "bidToken": "DUSD",
            "minBid": "95.00000000 DUSD",
            "startingBid": "100.00000000 DUSD",
            "reward": "120.00000000 DUSD",
            "diff": "20.00000000 DUSD",
            "margin": "20.00%",
            "maxPrice": "118.80000000 DUSD",
            "maxBlockNumber": 1500000,
        }
