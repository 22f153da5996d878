"""Tests for the interest rate curves."""

import logging

import pytest

from lendrate.data.constants import PERIODS_PER_YEAR
from lendrate.protocol.errors import (
    ArithmeticFault,
    InvalidCurveParameters,
    RateModelError,
    Unauthorized,
)
from lendrate.protocol.events import EventLog, NewFlatInterestParams, NewInterestParams, as_tuple
from lendrate.protocol.fixed_point import SCALE, UINT256_MAX
from lendrate.protocol.interest_rate import (
    FlatCurveParams,
    FlatRateCurve,
    KinkedCurveParams,
    KinkedRateCurve,
    annualize,
    flat_params_from_annual,
    kinked_params_from_annual,
    utilization_rate,
)

OWNER = "0x00000000000000000000000000000000000000aa"
STRANGER = "0x00000000000000000000000000000000000000bb"

PERCENT = SCALE // 100

FLAT_PARAMS = FlatCurveParams(base_rate_per_period=0, multiplier_per_period=10 * PERCENT)

KINKED_PARAMS = KinkedCurveParams(
    base_rate_per_period=0,
    multiplier_per_period=10 * PERCENT,
    jump_multiplier_per_period=50 * PERCENT,
    kink=80 * PERCENT,
)


@pytest.fixture
def flat() -> FlatRateCurve:
    return FlatRateCurve(FLAT_PARAMS)


@pytest.fixture
def kinked() -> KinkedRateCurve:
    return KinkedRateCurve(KINKED_PARAMS, owner=OWNER)


class TestUtilization:
    def test_zero_borrows_is_zero(self) -> None:
        for cash, reserves in [(0, 0), (1_000, 0), (1_000, 500), (0, 10**30)]:
            assert utilization_rate(cash, 0, reserves) == 0

    def test_twenty_percent(self) -> None:
        assert utilization_rate(800, 200, 0) == 2 * 10**17

    def test_reserves_reduce_supply(self) -> None:
        # 200 / (800 + 200 - 500) = 40%
        assert utilization_rate(800, 200, 500) == 40 * PERCENT

    def test_fully_borrowed(self) -> None:
        assert utilization_rate(0, 1_000, 0) == SCALE

    def test_within_unit_interval(self) -> None:
        for cash in [0, 1, 7, 1_000, 10**24]:
            for borrows in [1, 3, 999, 10**21]:
                for reserves in {0, cash // 2, cash}:
                    u = utilization_rate(cash, borrows, reserves)
                    assert 0 <= u <= SCALE

    def test_reserves_above_pool_fault(self) -> None:
        with pytest.raises(ArithmeticFault):
            utilization_rate(10, 10, 30)

    def test_degenerate_pool_divides_by_zero(self) -> None:
        # all of cash + borrows is reserves
        with pytest.raises(ArithmeticFault):
            utilization_rate(0, 10, 10)

    def test_curve_exposes_utilization(self, flat: FlatRateCurve) -> None:
        assert flat.utilization_rate(800, 200, 0) == 2 * 10**17


class TestFlatRateCurve:
    def test_example_pool(self, flat: FlatRateCurve) -> None:
        # 20% utilization * 10% slope
        assert flat.get_borrow_rate(800, 200, 0) == 2 * 10**16

    def test_base_rate_at_zero_utilization(self) -> None:
        curve = FlatRateCurve(FlatCurveParams(base_rate_per_period=123, multiplier_per_period=SCALE))
        assert curve.get_borrow_rate(1_000, 0, 0) == 123

    def test_monotonic(self, flat: FlatRateCurve) -> None:
        prev = -1
        for u in range(0, SCALE + 1, SCALE // 100):
            rate = flat.borrow_rate_at(u)
            assert rate >= prev
            prev = rate

    def test_from_annual_truncates(self) -> None:
        base_year = 2 * 10**16
        mult_year = 10**17
        curve = FlatRateCurve.from_annual(base_year, mult_year)
        assert curve.params.base_rate_per_period == base_year // PERIODS_PER_YEAR
        assert curve.params.base_rate_per_period * PERIODS_PER_YEAR <= base_year
        assert (curve.params.base_rate_per_period + 1) * PERIODS_PER_YEAR > base_year
        assert curve.params.multiplier_per_period == mult_year // PERIODS_PER_YEAR

    def test_construction_emits_params(self) -> None:
        events = EventLog()
        FlatRateCurve(FLAT_PARAMS, events=events)
        assert events.of_type(NewFlatInterestParams) == [NewFlatInterestParams(0, 10 * PERCENT)]

    def test_is_interest_rate_model(self, flat: FlatRateCurve) -> None:
        assert flat.is_interest_rate_model is True

    def test_overflowing_params_rejected(self) -> None:
        events = EventLog()
        with pytest.raises(InvalidCurveParameters) as exc_info:
            FlatRateCurve(FlatCurveParams(0, UINT256_MAX), events=events)
        assert isinstance(exc_info.value.__cause__, ArithmeticFault)
        assert len(events) == 0


class TestKinkedRateCurve:
    def test_below_kink_matches_flat(self, kinked: KinkedRateCurve, flat: FlatRateCurve) -> None:
        for u in [0, 10 * PERCENT, 50 * PERCENT, 80 * PERCENT]:
            assert kinked.borrow_rate_at(u) == flat.borrow_rate_at(u)

    def test_above_kink_example(self, kinked: KinkedRateCurve) -> None:
        # normal = 8%, excess 10% * 50% = 5%
        assert kinked.borrow_rate_at(90 * PERCENT) == 13 * 10**16

    def test_above_kink_from_pool(self, kinked: KinkedRateCurve) -> None:
        assert kinked.get_borrow_rate(100, 900, 0) == 13 * 10**16

    def test_continuous_at_kink(self, kinked: KinkedRateCurve) -> None:
        kink = KINKED_PARAMS.kink
        assert kinked.borrow_rate_at(kink) == kinked.normal_rate()
        assert kinked.normal_rate() == 8 * 10**16

    def test_continuity_with_odd_params(self) -> None:
        params = kinked_params_from_annual(
            base_rate_per_year=17 * 10**15,
            multiplier_per_year=123_456_789_123_456_789,
            jump_multiplier_per_year=3 * SCALE,
            kink=777_777_777_777_777_777,
        )
        curve = KinkedRateCurve(params, owner=OWNER)
        at_kink = curve.borrow_rate_at(params.kink)
        assert at_kink == curve.normal_rate()
        # one unit past the kink adds at most one unit of rate
        assert curve.borrow_rate_at(params.kink + 1) - at_kink <= 1

    def test_monotonic(self, kinked: KinkedRateCurve) -> None:
        prev = -1
        for u in range(0, SCALE + 1, SCALE // 200):
            rate = kinked.borrow_rate_at(u)
            assert rate >= prev
            prev = rate

    def test_all_zero_params(self) -> None:
        curve = KinkedRateCurve.from_annual(0, 0, 0, SCALE, owner=OWNER)
        for u in range(0, SCALE + 1, SCALE // 20):
            assert curve.borrow_rate_at(u) == 0

    def test_multiplier_is_divided_by_kink(self) -> None:
        kink = 80 * PERCENT
        # 8% per period reached at the kink => slope of 10% per period
        params = kinked_params_from_annual(0, 8 * 10**16 * PERIODS_PER_YEAR, 0, kink)
        assert params.multiplier_per_period == 10**17
        assert params.kink == kink

    def test_jump_multiplier_per_period(self) -> None:
        params = kinked_params_from_annual(0, 0, 5 * SCALE, SCALE)
        assert params.jump_multiplier_per_period == 5 * SCALE // PERIODS_PER_YEAR

    @pytest.mark.parametrize("kink", [0, SCALE + 1])
    def test_invalid_kink_rejected(self, kink: int) -> None:
        with pytest.raises(InvalidCurveParameters):
            kinked_params_from_annual(0, 10**17, 10**18, kink)

    def test_invalid_kink_in_params_rejected(self) -> None:
        params = KinkedCurveParams(0, 10**17, 10**18, 0)
        with pytest.raises(InvalidCurveParameters):
            KinkedRateCurve(params, owner=OWNER)

    @pytest.mark.parametrize("kink", [True, 0.8])
    def test_non_int_kink_in_params_rejected(self, kink: object) -> None:
        params = KinkedCurveParams(0, 10**17, 10**18, kink)
        with pytest.raises(InvalidCurveParameters):
            KinkedRateCurve(params, owner=OWNER)

    def test_construction_emits_params(self) -> None:
        events = EventLog()
        KinkedRateCurve(KINKED_PARAMS, owner=OWNER, events=events)
        assert events.of_type(NewInterestParams) == [
            NewInterestParams(0, 10 * PERCENT, 50 * PERCENT, 80 * PERCENT)
        ]


class TestUpdateCurveParameters:
    def test_owner_update_applies(self, kinked: KinkedRateCurve) -> None:
        event = kinked.update_curve_parameters(
            OWNER,
            base_rate_per_year=0,
            multiplier_per_year=8 * 10**16 * PERIODS_PER_YEAR,
            jump_multiplier_per_year=0,
            kink=80 * PERCENT,
        )
        assert event == NewInterestParams(0, 10**17, 0, 80 * PERCENT)
        assert kinked.params == KinkedCurveParams(0, 10**17, 0, 80 * PERCENT)
        # flat above the kink now
        assert kinked.borrow_rate_at(SCALE) == kinked.normal_rate()

    def test_update_is_notified_in_field_order(self, kinked: KinkedRateCurve) -> None:
        event = kinked.update_curve_parameters(OWNER, 2 * PERIODS_PER_YEAR, 0, 7 * PERIODS_PER_YEAR, SCALE)
        assert kinked.events.last == event
        assert as_tuple(event) == (2, 0, 7, SCALE)

    def test_non_owner_rejected(self, kinked: KinkedRateCurve) -> None:
        before = kinked.params
        n_events = len(kinked.events)
        with pytest.raises(Unauthorized) as exc_info:
            kinked.update_curve_parameters(STRANGER, 10**18, 10**18, 10**18, SCALE)
        assert exc_info.value.caller == STRANGER
        assert exc_info.value.owner == OWNER
        assert kinked.params is before
        assert len(kinked.events) == n_events

    def test_unauthorized_is_rate_model_error(self, kinked: KinkedRateCurve) -> None:
        with pytest.raises(RateModelError):
            kinked.update_curve_parameters(STRANGER, 0, 0, 0, SCALE)

    def test_invalid_kink_leaves_params(self, kinked: KinkedRateCurve) -> None:
        before = kinked.params
        with pytest.raises(InvalidCurveParameters):
            kinked.update_curve_parameters(OWNER, 0, 10**17, 10**18, 0)
        assert kinked.params is before

    def test_overflowing_update_leaves_curve_intact(self, kinked: KinkedRateCurve) -> None:
        before = kinked.params
        n_events = len(kinked.events)
        with pytest.raises(InvalidCurveParameters) as exc_info:
            kinked.update_curve_parameters(OWNER, 0, 0, 10**75, 80 * PERCENT)
        assert isinstance(exc_info.value.__cause__, ArithmeticFault)
        assert kinked.params is before
        assert len(kinked.events) == n_events
        # 8% at the kink + 10% * 50%
        assert kinked.borrow_rate_at(90 * PERCENT) == 13 * 10**16

    def test_unauthorized_logged(
        self, kinked: KinkedRateCurve, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.WARNING, logger="lendrate.protocol.interest_rate")
        with pytest.raises(Unauthorized):
            kinked.update_curve_parameters(STRANGER, 0, 0, 0, SCALE)
        assert "Rejected curve update" in caplog.text


class TestSupplyRate:
    def test_formula(self, flat: FlatRateCurve) -> None:
        # U = 50%, borrow = 5%, pool keeps 90% => 4.5%, times U => 2.25%
        assert flat.get_supply_rate(500, 500, 0, 10 * PERCENT) == 225 * SCALE // 10_000

    def test_full_reserve_factor_pays_nothing(
        self, flat: FlatRateCurve, kinked: KinkedRateCurve
    ) -> None:
        for curve in (flat, kinked):
            for cash, borrows in [(800, 200), (100, 900), (0, 1)]:
                assert curve.get_supply_rate(cash, borrows, 0, SCALE) == 0

    def test_zero_utilization_pays_nothing(self, kinked: KinkedRateCurve) -> None:
        assert kinked.get_supply_rate(1_000, 0, 0, 0) == 0

    def test_decreasing_in_reserve_factor(self, kinked: KinkedRateCurve) -> None:
        rates = [kinked.get_supply_rate(100, 900, 0, rf * PERCENT) for rf in range(0, 101, 10)]
        assert rates == sorted(rates, reverse=True)

    def test_below_borrow_rate(self, kinked: KinkedRateCurve) -> None:
        for u in [10 * PERCENT, 50 * PERCENT, 80 * PERCENT, 99 * PERCENT]:
            assert kinked.supply_rate_at(u, 15 * PERCENT) < kinked.borrow_rate_at(u)

    def test_reserve_factor_above_one_faults(self, flat: FlatRateCurve) -> None:
        with pytest.raises(ArithmeticFault):
            flat.get_supply_rate(800, 200, 0, SCALE + 1)


class TestRateCeiling:
    def test_max_borrow_rate(self, kinked: KinkedRateCurve) -> None:
        # 8% + 20% * 50%
        assert kinked.max_borrow_rate() == 18 * 10**16

    def test_steep_curve_is_flagged(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.WARNING, logger="lendrate.protocol.interest_rate")
        curve = FlatRateCurve(FlatCurveParams(0, 2 * SCALE))
        assert curve.max_borrow_rate() == 2 * SCALE
        assert "above 100%" in caplog.text

    def test_normal_curve_not_flagged(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.WARNING, logger="lendrate.protocol.interest_rate")
        KinkedRateCurve(KINKED_PARAMS, owner=OWNER)
        assert "above 100%" not in caplog.text


class TestRateCurve:
    def test_curve_shape(self, kinked: KinkedRateCurve) -> None:
        df = kinked.rate_curve(n_points=101)
        assert len(df) == 101
        assert list(df.columns) == ["utilization", "borrow_rate", "supply_rate"]
        assert df["utilization"].iloc[0] == pytest.approx(0.0)
        assert df["utilization"].iloc[-1] == pytest.approx(1.0)

    def test_curve_is_annualized(self, kinked: KinkedRateCurve) -> None:
        df = kinked.rate_curve(n_points=11)
        assert df["borrow_rate"].iloc[-1] == pytest.approx(annualize(kinked.max_borrow_rate()))
        assert df["borrow_rate"].is_monotonic_increasing

    def test_reserve_factor_applied(self, flat: FlatRateCurve) -> None:
        df = flat.rate_curve(n_points=5, reserve_factor=SCALE)
        assert (df["supply_rate"] == 0.0).all()

    def test_too_few_points(self, flat: FlatRateCurve) -> None:
        with pytest.raises(ValueError):
            flat.rate_curve(n_points=1)


class TestAnnualConversions:
    def test_flat_params_from_annual(self) -> None:
        params = flat_params_from_annual(PERIODS_PER_YEAR * 3, PERIODS_PER_YEAR * 5 + 1)
        assert params == FlatCurveParams(3, 5)

    def test_annualize(self) -> None:
        assert annualize(SCALE // PERIODS_PER_YEAR) == pytest.approx(1.0, rel=1e-9)
