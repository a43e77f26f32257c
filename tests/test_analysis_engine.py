"""Tests for the consumption analysis engine."""

from datetime import date, datetime, timedelta

import pytest

from prodexp.analysis import (
    AnalysisThresholds,
    ProductFacts,
    ProductStatus,
    analyze,
    months_between,
)

TODAY = date(2025, 3, 10)


def _days(n: int) -> date:
    return TODAY + timedelta(days=n)


def test_scenario_a_behind_pace():
    """Slow consumption with a close expiration date."""
    facts = ProductFacts(
        quantity_bought=10,
        quantity_consumed=4,
        unit="pcs",
        purchase_date=_days(-10),
        expiration_date=_days(5),
    )
    a = analyze(facts, TODAY)

    assert a.remaining_quantity == 6
    assert a.percent_consumed == 40
    assert a.percent_remaining == 60
    assert a.days_since_purchase == 10
    assert a.days_until_expiration == 5
    assert a.current_avg_daily_consumption == pytest.approx(0.4)
    assert a.recommended_daily_to_finish == pytest.approx(1.2)
    assert a.estimated_days_to_finish_from_now == 15
    assert a.estimated_finish_date == _days(15)
    assert a.status_suggestion == ProductStatus.AVAILABLE
    assert a.is_expired is False
    assert len(a.warnings) == 1
    assert "below the recommended pace" in a.warnings[0]


def test_scenario_b_expired_and_finished():
    """A fully consumed product past its expiration date."""
    facts = ProductFacts(
        quantity_bought=5,
        quantity_consumed=5,
        purchase_date=_days(-10),
        expiration_date=_days(-2),
    )
    a = analyze(facts, TODAY)

    assert a.status_suggestion == ProductStatus.EXPIRED_AND_FINISHED
    assert a.is_expired is True
    assert a.recommended_daily_to_finish is None
    assert a.estimated_finish_date is None
    assert a.estimated_days_to_finish_from_now is None
    assert a.remaining_quantity == 0
    assert a.warnings == ()


def test_scenario_c_no_consumption_yet():
    """Undefined pace is never compared with the recommendation."""
    facts = ProductFacts(
        quantity_bought=8,
        quantity_consumed=0,
        purchase_date=TODAY,
        expiration_date=_days(30),
    )
    a = analyze(facts, TODAY)

    assert a.current_avg_daily_consumption is None
    assert a.recommended_daily_to_finish == pytest.approx(8 / 30, abs=1e-6)
    assert a.estimated_finish_date is None
    assert a.warnings == ()


def test_zero_elapsed_time_has_no_pace():
    """Consumption on the purchase day does not produce a rate."""
    facts = ProductFacts(
        quantity_bought=10,
        quantity_consumed=3,
        purchase_date=TODAY,
        expiration_date=_days(10),
    )
    a = analyze(facts, TODAY)

    assert a.days_since_purchase == 0
    assert a.current_avg_daily_consumption is None
    assert a.estimated_days_to_finish_from_now is None


def test_fully_consumed_on_purchase_day():
    """The expiration day itself is not expired yet."""
    facts = ProductFacts(
        quantity_bought=10,
        quantity_consumed=10,
        purchase_date=TODAY,
        expiration_date=TODAY,
    )
    a = analyze(facts, TODAY)
    assert a.status_suggestion == ProductStatus.FINISHED
    assert a.recommended_daily_to_finish is None
    assert a.estimated_finish_date is None

    later = analyze(facts, _days(1))
    assert later.status_suggestion == ProductStatus.EXPIRED_AND_FINISHED
    assert later.recommended_daily_to_finish is None
    assert later.estimated_finish_date is None


def test_zero_bought_never_divides():
    """A placeholder product with nothing bought."""
    facts = ProductFacts(
        quantity_bought=0,
        quantity_consumed=0,
        purchase_date=_days(-3),
        expiration_date=_days(10),
    )
    a = analyze(facts, TODAY)

    assert a.percent_consumed == 0
    assert a.percent_remaining == 100
    assert a.status_suggestion == ProductStatus.AVAILABLE
    assert a.remaining_quantity == 0


def test_zero_bought_with_consumption_is_not_finished():
    facts = ProductFacts(quantity_bought=0, quantity_consumed=5, purchase_date=_days(-3))
    a = analyze(facts, TODAY)

    assert a.percent_consumed == 0
    assert a.status_suggestion != ProductStatus.FINISHED
    assert any("exceeds purchased quantity" in w for w in a.warnings)


def test_consumed_over_bought_is_clamped_and_reported():
    facts = ProductFacts(
        quantity_bought=100,
        quantity_consumed=150,
        purchase_date=_days(-5),
        expiration_date=_days(20),
    )
    a = analyze(facts, TODAY)

    assert a.remaining_quantity == 0
    assert a.percent_consumed == 100
    assert a.percent_remaining == 0
    assert a.status_suggestion == ProductStatus.FINISHED
    assert any("exceeds purchased quantity" in w for w in a.warnings)


def test_negative_and_nan_quantities_are_normalized():
    """Malformed numbers are treated as 0 and reported, never raised."""
    facts = ProductFacts(
        quantity_bought=float("nan"),
        quantity_consumed=-3,
        purchase_date=_days(-5),
        expiration_date=_days(20),
    )
    a = analyze(facts, TODAY)

    assert a.remaining_quantity == 0
    assert a.percent_consumed == 0
    assert a.current_avg_daily_consumption is None
    assert any("Purchased quantity is not a finite number" in w for w in a.warnings)
    assert any("Consumed quantity cannot be negative" in w for w in a.warnings)


def test_no_expiration_date():
    facts = ProductFacts(quantity_bought=4, quantity_consumed=1, purchase_date=_days(-2))
    a = analyze(facts, TODAY)

    assert a.days_until_expiration is None
    assert a.months_until_expiration is None
    assert a.is_expired is False
    assert a.recommended_daily_to_finish is None
    assert a.current_avg_daily_consumption == pytest.approx(0.5)
    assert a.estimated_days_to_finish_from_now == 6
    assert a.status_suggestion == ProductStatus.AVAILABLE


def test_missing_purchase_date():
    facts = ProductFacts(quantity_bought=4, quantity_consumed=1, expiration_date=_days(4))
    a = analyze(facts, TODAY)

    assert a.days_since_purchase == 0
    assert a.current_avg_daily_consumption is None
    assert a.recommended_daily_to_finish == pytest.approx(0.75)


def test_on_track_projection_and_monthly_recommendation():
    facts = ProductFacts(
        quantity_bought=10,
        quantity_consumed=1,
        purchase_date=_days(-10),
        expiration_date=_days(90),
    )
    a = analyze(facts, TODAY)

    assert a.current_avg_daily_consumption == pytest.approx(0.1)
    assert a.recommended_daily_to_finish == pytest.approx(0.1)
    assert a.estimated_days_to_finish_from_now == 90
    assert a.estimated_finish_date == _days(90)
    assert a.months_until_expiration == 2
    assert a.years_until_expiration == 0
    assert a.recommended_monthly_to_finish == pytest.approx(4.5)
    assert a.warnings == ()


def test_fast_pace_is_flagged():
    facts = ProductFacts(
        quantity_bought=10,
        quantity_consumed=6,
        purchase_date=_days(-2),
        expiration_date=_days(8),
    )
    a = analyze(facts, TODAY)

    assert a.current_avg_daily_consumption == pytest.approx(3.0)
    assert a.recommended_daily_to_finish == pytest.approx(0.5)
    assert len(a.warnings) == 1
    assert "unusually fast" in a.warnings[0]


def test_fast_pace_ratio_is_configurable():
    facts = ProductFacts(
        quantity_bought=10,
        quantity_consumed=6,
        purchase_date=_days(-2),
        expiration_date=_days(8),
    )
    a = analyze(facts, TODAY, AnalysisThresholds(fast_pace_ratio=10.0))
    assert a.warnings == ()


def test_urgent_and_slow_warnings_in_order():
    facts = ProductFacts(
        quantity_bought=10,
        quantity_consumed=2,
        purchase_date=_days(-4),
        expiration_date=_days(2),
    )
    a = analyze(facts, TODAY)

    assert len(a.warnings) == 2
    assert a.warnings[0].startswith("URGENT")
    assert "below the recommended pace" in a.warnings[1]


def test_expired_with_leftovers():
    facts = ProductFacts(
        quantity_bought=10,
        quantity_consumed=2,
        unit="g",
        purchase_date=_days(-10),
        expiration_date=_days(-1),
    )
    a = analyze(facts, TODAY)

    assert a.status_suggestion == ProductStatus.EXPIRED
    assert a.days_until_expiration == -1
    assert a.recommended_daily_to_finish is None
    assert a.estimated_finish_date is None
    assert a.current_avg_daily_consumption == pytest.approx(0.2)
    assert a.warnings == (
        "This product has expired with 8 g remaining. Consider discarding it.",
    )


def test_datetime_now_uses_calendar_day():
    facts = ProductFacts(
        quantity_bought=10,
        quantity_consumed=4,
        purchase_date=_days(-10),
        expiration_date=TODAY,
    )
    morning = analyze(facts, datetime(2025, 3, 10, 0, 1))
    night = analyze(facts, datetime(2025, 3, 10, 23, 59))

    assert morning == night == analyze(facts, TODAY)
    assert night.is_expired is False


def test_idempotent():
    facts = ProductFacts(
        quantity_bought=3,
        quantity_consumed=1.25,
        purchase_date=_days(-7),
        expiration_date=_days(11),
    )
    first = analyze(facts, TODAY)
    second = analyze(facts, TODAY)

    assert first == second
    assert first.to_dict() == second.to_dict()


def test_monotonic_over_time():
    """days_since_purchase never decreases and expiry never reverts."""
    facts = ProductFacts(
        quantity_bought=20,
        quantity_consumed=5,
        purchase_date=_days(-3),
        expiration_date=_days(15),
    )
    previous = analyze(facts, TODAY)
    for offset in range(1, 40):
        current = analyze(facts, _days(offset))
        assert current.days_since_purchase >= previous.days_since_purchase
        if previous.is_expired:
            assert current.is_expired
        previous = current
    assert previous.is_expired


def test_persisted_status_is_ignored():
    base = ProductFacts(quantity_bought=2, quantity_consumed=2, purchase_date=_days(-1))
    stale = ProductFacts(
        quantity_bought=2,
        quantity_consumed=2,
        purchase_date=_days(-1),
        persisted_status=ProductStatus.AVAILABLE,
    )
    assert analyze(stale, TODAY) == analyze(base, TODAY)
    assert analyze(stale, TODAY).status_suggestion == ProductStatus.FINISHED


def test_to_dict_is_json_compatible():
    facts = ProductFacts(
        quantity_bought=10,
        quantity_consumed=4,
        purchase_date=_days(-10),
        expiration_date=_days(5),
    )
    d = analyze(facts, TODAY).to_dict()

    assert d["statusSuggestion"] == "AVAILABLE"
    assert d["estimatedFinishDate"] == "2025-03-25"
    assert isinstance(d["warnings"], list)


def test_months_between():
    assert months_between(date(2025, 1, 15), date(2025, 3, 15)) == 2
    assert months_between(date(2025, 1, 31), date(2025, 2, 28)) == 0
    assert months_between(date(2025, 3, 15), date(2025, 1, 20)) == -1
    assert months_between(date(2025, 3, 10), date(2026, 3, 10)) == 12


def test_tiny_pace_is_not_rounded_away():
    facts = ProductFacts(
        quantity_bought=1.0,
        quantity_consumed=0.000004,
        purchase_date=_days(-10),
        expiration_date=_days(30),
    )
    a = analyze(facts, TODAY)

    assert a.current_avg_daily_consumption == pytest.approx(4e-7)
    assert a.current_avg_daily_consumption > 0
    assert a.estimated_days_to_finish_from_now is not None
    assert a.estimated_days_to_finish_from_now > 30
    assert "below the recommended pace" in a.warnings[0]
    assert "(0/day)" not in a.warnings[0]


def test_projection_beyond_calendar_keeps_day_count():
    facts = ProductFacts(
        quantity_bought=1.0,
        quantity_consumed=1e-12,
        purchase_date=_days(-10),
        expiration_date=_days(30),
    )
    a = analyze(facts, TODAY)

    assert a.estimated_days_to_finish_from_now > 10**12
    assert a.estimated_finish_date is None
