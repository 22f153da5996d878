"""Utilization-based interest rate curves.

Two curves are provided:

* ``FlatRateCurve``: ``rate = utilization * multiplier + base``.
* ``KinkedRateCurve``: the same line up to ``kink``, then a steeper
  ``jump_multiplier`` slope above it.  Its parameters can be replaced by
  the owner.

Every quantity is a 1e18-scaled int and every operation goes through the
checked helpers in ``fixed_point``.  Rates are per period; see
``PERIODS_PER_YEAR``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
import pandas as pd

from lendrate.data.constants import PERIODS_PER_YEAR
from lendrate.protocol.errors import ArithmeticFault, InvalidCurveParameters, Unauthorized
from lendrate.protocol.events import EventLog, NewFlatInterestParams, NewInterestParams
from lendrate.protocol.fixed_point import (
    SCALE,
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    div_scaled,
    mul_scaled,
)

logger = logging.getLogger(__name__)


def utilization_rate(cash: int, borrows: int, reserves: int) -> int:
    """Fraction of the pool that is borrowed, ``borrows / (cash + borrows - reserves)``.

    Returns 0 when nothing is borrowed.  Reserves exceeding
    ``cash + borrows`` raise ``ArithmeticFault``.
    """
    if borrows == 0:
        return 0
    return div_scaled(borrows, checked_sub(checked_add(cash, borrows), reserves))


def annualize(rate_per_period: int) -> float:
    """Per-period scaled rate as an annual decimal (0.05 == 5%)."""
    return rate_per_period * PERIODS_PER_YEAR / SCALE


def _linear_rate(utilization: int, multiplier: int, base: int) -> int:
    return checked_add(mul_scaled(utilization, multiplier), base)


def _check_kink(kink: int) -> None:
    if isinstance(kink, bool) or not isinstance(kink, int) or not 0 < kink <= SCALE:
        raise InvalidCurveParameters(f"kink must be in (0, {SCALE}], got {kink!r}")


@dataclass(frozen=True)
class FlatCurveParams:
    """Per-period parameters of a single-segment curve."""

    base_rate_per_period: int
    multiplier_per_period: int


@dataclass(frozen=True)
class KinkedCurveParams:
    """Per-period parameters of a two-segment curve."""

    base_rate_per_period: int
    multiplier_per_period: int
    jump_multiplier_per_period: int
    kink: int


def flat_params_from_annual(base_rate_per_year: int, multiplier_per_year: int) -> FlatCurveParams:
    """Convert annual inputs to per-period parameters. Remainders are truncated."""
    return FlatCurveParams(
        base_rate_per_period=checked_div(base_rate_per_year, PERIODS_PER_YEAR),
        multiplier_per_period=checked_div(multiplier_per_year, PERIODS_PER_YEAR),
    )


def kinked_params_from_annual(
    base_rate_per_year: int,
    multiplier_per_year: int,
    jump_multiplier_per_year: int,
    kink: int,
) -> KinkedCurveParams:
    """Convert annual inputs to per-period parameters.

    ``multiplier_per_year`` is the rate added by the time utilization
    reaches ``kink``, so the per-period slope is divided by ``kink``.

    Raises:
        InvalidCurveParameters: ``kink`` is not in ``(0, SCALE]``.
    """
    _check_kink(kink)
    return KinkedCurveParams(
        base_rate_per_period=checked_div(base_rate_per_year, PERIODS_PER_YEAR),
        multiplier_per_period=checked_div(
            checked_mul(multiplier_per_year, SCALE),
            checked_mul(PERIODS_PER_YEAR, kink),
        ),
        jump_multiplier_per_period=checked_div(jump_multiplier_per_year, PERIODS_PER_YEAR),
        kink=kink,
    )


def _flat_borrow_rate(params: FlatCurveParams, utilization: int) -> int:
    return _linear_rate(utilization, params.multiplier_per_period, params.base_rate_per_period)


def _kinked_normal_rate(params: KinkedCurveParams) -> int:
    return _linear_rate(params.kink, params.multiplier_per_period, params.base_rate_per_period)


def _kinked_borrow_rate(params: KinkedCurveParams, utilization: int) -> int:
    if utilization <= params.kink:
        return _linear_rate(utilization, params.multiplier_per_period, params.base_rate_per_period)
    excess_utilization = checked_sub(utilization, params.kink)
    return _linear_rate(
        excess_utilization, params.jump_multiplier_per_period, _kinked_normal_rate(params)
    )


def _checked_max_rate(
    label: str,
    borrow_rate: Callable[[Any, int], int],
    params: FlatCurveParams | KinkedCurveParams,
) -> int:
    """Borrow rate of candidate ``params`` at full utilization.

    Raises:
        InvalidCurveParameters: the rate overflows somewhere on the curve.
    """
    try:
        max_rate = borrow_rate(params, SCALE)
    except ArithmeticFault as exc:
        raise InvalidCurveParameters(
            f"{label} rate overflows at full utilization: {params}"
        ) from exc
    if max_rate > SCALE:
        logger.warning(
            "%s borrow rate at full utilization is %d per period (above 100%%)",
            label,
            max_rate,
        )
    return max_rate


class RateCurve(ABC):
    """Common query surface for interest rate curves."""

    is_interest_rate_model = True

    @abstractmethod
    def borrow_rate_at(self, utilization: int) -> int:
        """Per-period borrow rate at a scaled utilization."""

    def supply_rate_at(self, utilization: int, reserve_factor: int) -> int:
        """Per-period supply rate at a scaled utilization.

        The borrow rate is first cut by the reserve factor, then by
        utilization, since only lent-out deposits earn interest.
        """
        one_minus_reserve_factor = checked_sub(SCALE, reserve_factor)
        rate_to_pool = mul_scaled(self.borrow_rate_at(utilization), one_minus_reserve_factor)
        return mul_scaled(utilization, rate_to_pool)

    def utilization_rate(self, cash: int, borrows: int, reserves: int) -> int:
        return utilization_rate(cash, borrows, reserves)

    def get_borrow_rate(self, cash: int, borrows: int, reserves: int) -> int:
        """Per-period borrow rate for the given pool balances."""
        return self.borrow_rate_at(utilization_rate(cash, borrows, reserves))

    def get_supply_rate(
        self, cash: int, borrows: int, reserves: int, reserve_factor: int
    ) -> int:
        """Per-period supply rate for the given pool balances."""
        return self.supply_rate_at(utilization_rate(cash, borrows, reserves), reserve_factor)

    def max_borrow_rate(self) -> int:
        """Borrow rate at 100% utilization."""
        return self.borrow_rate_at(SCALE)

    def rate_curve(self, n_points: int = 200, reserve_factor: int = 0) -> pd.DataFrame:
        """Sample the curve over [0, 100%] utilization for plotting.

        Returns:
            DataFrame with columns: utilization, borrow_rate, supply_rate
            (annual decimals).
        """
        if n_points < 2:
            raise ValueError("n_points must be at least 2")
        mantissas = [SCALE * i // (n_points - 1) for i in range(n_points)]
        borrow_rates = [annualize(self.borrow_rate_at(u)) for u in mantissas]
        supply_rates = [annualize(self.supply_rate_at(u, reserve_factor)) for u in mantissas]

        return pd.DataFrame(
            {
                "utilization": np.array(mantissas, dtype=float) / SCALE,
                "borrow_rate": borrow_rates,
                "supply_rate": supply_rates,
            }
        )


class FlatRateCurve(RateCurve):
    """Single-segment curve: ``utilization * multiplier + base``."""

    def __init__(self, params: FlatCurveParams, events: EventLog | None = None) -> None:
        _checked_max_rate(type(self).__name__, _flat_borrow_rate, params)
        self.params = params
        self.events = events if events is not None else EventLog()
        self.events.emit(
            NewFlatInterestParams(params.base_rate_per_period, params.multiplier_per_period)
        )

    @classmethod
    def from_annual(
        cls,
        base_rate_per_year: int,
        multiplier_per_year: int,
        events: EventLog | None = None,
    ) -> FlatRateCurve:
        return cls(flat_params_from_annual(base_rate_per_year, multiplier_per_year), events)

    def borrow_rate_at(self, utilization: int) -> int:
        return _flat_borrow_rate(self.params, utilization)


class KinkedRateCurve(RateCurve):
    """Two-segment curve with an owner-updatable breakpoint."""

    def __init__(
        self,
        params: KinkedCurveParams,
        owner: str,
        events: EventLog | None = None,
    ) -> None:
        _check_kink(params.kink)
        self.owner = owner
        self.events = events if events is not None else EventLog()
        self._apply(params)

    @classmethod
    def from_annual(
        cls,
        base_rate_per_year: int,
        multiplier_per_year: int,
        jump_multiplier_per_year: int,
        kink: int,
        owner: str,
        events: EventLog | None = None,
    ) -> KinkedRateCurve:
        params = kinked_params_from_annual(
            base_rate_per_year, multiplier_per_year, jump_multiplier_per_year, kink
        )
        return cls(params, owner, events)

    def normal_rate(self) -> int:
        """Borrow rate exactly at the kink; the intercept of the upper segment."""
        return _kinked_normal_rate(self.params)

    def borrow_rate_at(self, utilization: int) -> int:
        return _kinked_borrow_rate(self.params, utilization)

    def update_curve_parameters(
        self,
        caller: str,
        base_rate_per_year: int,
        multiplier_per_year: int,
        jump_multiplier_per_year: int,
        kink: int,
    ) -> NewInterestParams:
        """Replace the curve parameters from annual inputs.

        Only ``owner`` may call this.  Parameters and events are left
        untouched when the caller is rejected or the inputs are invalid.

        Raises:
            Unauthorized: ``caller`` is not the owner.
            InvalidCurveParameters: ``kink`` is not in ``(0, SCALE]``, or
                the new curve overflows below full utilization.
        """
        if caller != self.owner:
            logger.warning("Rejected curve update from %s; owner is %s", caller, self.owner)
            raise Unauthorized(caller, self.owner)
        params = kinked_params_from_annual(
            base_rate_per_year, multiplier_per_year, jump_multiplier_per_year, kink
        )
        return self._apply(params)

    def _apply(self, params: KinkedCurveParams) -> NewInterestParams:
        _checked_max_rate(type(self).__name__, _kinked_borrow_rate, params)
        self.params = params
        event = NewInterestParams(
            params.base_rate_per_period,
            params.multiplier_per_period,
            params.jump_multiplier_per_period,
            params.kink,
        )
        logger.info(
            "Interest params set: base=%d multiplier=%d jump=%d kink=%d",
            event.base_rate_per_period,
            event.multiplier_per_period,
            event.jump_multiplier_per_period,
            event.kink,
        )
        self.events.emit(event)
        return event
