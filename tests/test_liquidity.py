"""Liquidity manager: add, remove, provision records."""

import pytest

from predamm.errors import InvalidInputError
from predamm.models import Pool
from predamm.pricing.invariant import liquidity, probability
from predamm.pricing.liquidity import (
    add_liquidity,
    close_provision,
    provision_from_add,
    remove_liquidity,
)


def test_add_at_even_odds():
    result = add_liquidity(Pool(YES=100, NO=100), 50)
    assert result.new_pool == Pool(YES=150, NO=150)
    assert result.liquidity_delta == pytest.approx(50)
    assert result.bet_amount == 0
    assert result.bet_outcome == "YES"


def test_add_keeps_probability_and_reports_skew():
    pool = Pool(YES=100 / 3, NO=100)  # p = 0.75
    result = add_liquidity(pool, 30)
    assert result.new_pool.YES == pytest.approx(100 / 3 + 10)
    assert result.new_pool.NO == pytest.approx(130)
    assert probability(result.new_pool) == pytest.approx(0.75)
    assert result.bet_amount == pytest.approx(20)
    assert result.bet_outcome == "YES"
    assert result.liquidity_delta == pytest.approx(liquidity(Pool(YES=10, NO=30)))


def test_add_below_even_odds_skews_no():
    result = add_liquidity(Pool(YES=100, NO=25), 20)  # p = 0.2
    assert result.new_pool.YES == pytest.approx(120)
    assert result.new_pool.NO == pytest.approx(30)
    assert result.bet_amount == pytest.approx(15)
    assert result.bet_outcome == "NO"


def test_add_rejects_negative_amount():
    with pytest.raises(InvalidInputError):
        add_liquidity(Pool(YES=100, NO=100), -5)


def test_remove_proportional_slice():
    result = remove_liquidity(Pool(YES=150, NO=150), 50)
    assert result.payout_yes == pytest.approx(50)
    assert result.payout_no == pytest.approx(50)
    assert result.payout == pytest.approx(50)
    assert result.new_pool.YES == pytest.approx(100)
    assert result.new_pool.NO == pytest.approx(100)


def test_remove_pays_smaller_side_and_bets_opposite_to_add():
    pool = Pool(YES=100 / 3, NO=100)  # p = 0.75
    result = remove_liquidity(pool, liquidity(pool) / 2)
    assert result.payout_yes == pytest.approx(50 / 3)
    assert result.payout_no == pytest.approx(50)
    assert result.payout == pytest.approx(50 / 3)
    assert result.bet_amount == pytest.approx(100 / 3)
    assert result.bet_outcome == "NO"
    assert probability(result.new_pool) == pytest.approx(0.75)


@pytest.mark.parametrize("pool", [Pool(YES=100, NO=100), Pool(YES=40, NO=90), Pool(YES=500, NO=7)])
def test_add_then_remove_returns_the_contribution(pool):
    added = add_liquidity(pool, 25)
    removed = remove_liquidity(added.new_pool, added.liquidity_delta)
    assert max(removed.payout_yes, removed.payout_no) == pytest.approx(25)
    assert removed.new_pool.YES == pytest.approx(pool.YES)
    assert removed.new_pool.NO == pytest.approx(pool.NO)


def test_add_then_remove_at_even_odds_pays_back_amount():
    added = add_liquidity(Pool(YES=100, NO=100), 50)
    removed = remove_liquidity(added.new_pool, added.liquidity_delta)
    assert removed.payout == pytest.approx(50)


def test_remove_everything_empties_pool():
    result = remove_liquidity(Pool(YES=40, NO=90), 60)
    assert result.new_pool == Pool(YES=0, NO=0)
    assert not result.new_pool.is_open
    assert result.closes_pool


def test_partial_remove_keeps_pool_open():
    pool = Pool(YES=40, NO=90)
    result = remove_liquidity(pool, liquidity(pool) * 0.999)
    assert result.new_pool.is_open
    assert not result.closes_pool


def test_remove_more_than_pool_liquidity_fails():
    with pytest.raises(InvalidInputError):
        remove_liquidity(Pool(YES=100, NO=100), 100.5)


def test_provision_lifecycle():
    added = add_liquidity(Pool(YES=100, NO=100), 50)
    lp = provision_from_add("lp1", "c1", "u1", 50, added, created_time=1000)
    assert lp.liquidity == pytest.approx(50)
    assert lp.pool_after == added.new_pool
    partial = close_provision(lp, 20)
    assert partial.remaining_liquidity == pytest.approx(30)
    assert not partial.is_closed
    closed = close_provision(partial, 30)
    assert closed.is_closed
    with pytest.raises(InvalidInputError):
        close_provision(partial, 31)
