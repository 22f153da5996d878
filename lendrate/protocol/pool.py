"""Pool balances and what-if rate analysis."""

from __future__ import annotations

from dataclasses import dataclass, replace

from lendrate.data.constants import RESERVE_FACTOR_MAX_MANTISSA
from lendrate.protocol.errors import (
    BorrowCashNotAvailable,
    RedeemTransferOutNotPossible,
    ReduceReservesCashNotAvailable,
    ReduceReservesCashValidation,
    SetReserveFactorBoundsCheck,
)
from lendrate.protocol.fixed_point import checked_add, checked_sub
from lendrate.protocol.interest_rate import RateCurve, utilization_rate


@dataclass(frozen=True)
class PoolState:
    """Snapshot of a market's balances.

    ``cash``, ``borrows`` and ``reserves`` are in native units;
    ``reserve_factor`` is 1e18-scaled.
    """

    cash: int
    borrows: int
    reserves: int
    reserve_factor: int = 0

    @property
    def utilization(self) -> int:
        return utilization_rate(self.cash, self.borrows, self.reserves)

    def with_reserve_factor(self, reserve_factor: int) -> PoolState:
        if reserve_factor > RESERVE_FACTOR_MAX_MANTISSA:
            raise SetReserveFactorBoundsCheck(
                f"reserve factor {reserve_factor} above {RESERVE_FACTOR_MAX_MANTISSA}"
            )
        return replace(self, reserve_factor=reserve_factor)


class PoolModel:
    """Pool state combined with a rate curve."""

    def __init__(self, state: PoolState, rate_model: RateCurve) -> None:
        self.state = state
        self.rate_model = rate_model

    @property
    def utilization(self) -> int:
        return self.state.utilization

    @property
    def borrow_rate(self) -> int:
        return self._borrow_rate(self.state)

    @property
    def supply_rate(self) -> int:
        return self._supply_rate(self.state)

    def _borrow_rate(self, state: PoolState) -> int:
        return self.rate_model.get_borrow_rate(state.cash, state.borrows, state.reserves)

    def _supply_rate(self, state: PoolState) -> int:
        return self.rate_model.get_supply_rate(
            state.cash, state.borrows, state.reserves, state.reserve_factor
        )

    def _impact(self, after: PoolState) -> dict[str, int]:
        return {
            "utilization_before": self.utilization,
            "utilization_after": after.utilization,
            "borrow_rate_before": self.borrow_rate,
            "borrow_rate_after": self._borrow_rate(after),
            "supply_rate_before": self.supply_rate,
            "supply_rate_after": self._supply_rate(after),
        }

    def simulate_borrow(self, amount: int) -> dict[str, int]:
        """Rates after ``amount`` of cash is lent out.

        Does NOT mutate state.

        Raises:
            BorrowCashNotAvailable: the pool holds less cash than ``amount``.
        """
        s = self.state
        if amount > s.cash:
            raise BorrowCashNotAvailable()
        after = replace(
            s, cash=checked_sub(s.cash, amount), borrows=checked_add(s.borrows, amount)
        )
        return self._impact(after)

    def simulate_repay(self, amount: int) -> dict[str, int]:
        """Rates after ``amount`` of debt is repaid, capped at total borrows.

        Does NOT mutate state.
        """
        s = self.state
        repaid = min(amount, s.borrows)
        after = replace(
            s, cash=checked_add(s.cash, repaid), borrows=checked_sub(s.borrows, repaid)
        )
        return self._impact(after)

    def simulate_redeem(self, amount: int) -> dict[str, int]:
        """Rates after depositors withdraw ``amount`` of cash.

        Does NOT mutate state.

        Raises:
            RedeemTransferOutNotPossible: the pool holds less cash than ``amount``.
        """
        s = self.state
        if amount > s.cash:
            raise RedeemTransferOutNotPossible()
        return self._impact(replace(s, cash=checked_sub(s.cash, amount)))

    def simulate_reduce_reserves(self, amount: int) -> dict[str, int]:
        """Rates after ``amount`` of reserves is withdrawn by the admin.

        Does NOT mutate state.
        """
        s = self.state
        if amount > s.cash:
            raise ReduceReservesCashNotAvailable()
        if amount > s.reserves:
            raise ReduceReservesCashValidation()
        after = replace(
            s,
            cash=checked_sub(s.cash, amount),
            reserves=checked_sub(s.reserves, amount),
        )
        return self._impact(after)
