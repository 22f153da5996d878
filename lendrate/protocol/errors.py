"""Failure vocabulary shared by every market-facing operation.

Two styles of failure live here:

* Soft controller rejections.  ``ErrorReporter.fail`` records a
  ``Failure(error, info, detail)`` and hands the coarse code back to the
  caller without unwinding anything.
* Hard market errors.  ``MarketError`` subclasses abort the in-flight
  operation; several carry the controller code that caused them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lendrate.protocol.events import EventLog

logger = logging.getLogger(__name__)

NO_ERROR = 0


# ---------------------------------------------------------------------------
# Controller result codes
# ---------------------------------------------------------------------------

class ControllerErrorCode(IntEnum):
    """Coarse outcome of a non-reverting call into the risk controller."""

    NO_ERROR = 0
    UNAUTHORIZED = 1
    CONTROLLER_MISMATCH = 2
    INSUFFICIENT_SHORTFALL = 3
    INSUFFICIENT_LIQUIDITY = 4
    INVALID_CLOSE_FACTOR = 5
    INVALID_COLLATERAL_FACTOR = 6
    INVALID_LIQUIDATION_INCENTIVE = 7
    MARKET_NOT_ENTERED = 8
    MARKET_NOT_LISTED = 9
    MARKET_ALREADY_LISTED = 10
    MATH_ERROR = 11
    NONZERO_BORROW_BALANCE = 12
    PRICE_ERROR = 13
    REJECTION = 14
    SNAPSHOT_ERROR = 15
    TOO_MANY_ASSETS = 16
    TOO_MUCH_REPAY = 17


class FailureInfo(IntEnum):
    """Where a controller rejection happened."""

    ACCEPT_ADMIN_PENDING_ADMIN_CHECK = 0
    ACCEPT_PENDING_IMPLEMENTATION_ADDRESS_CHECK = 1
    EXIT_MARKET_BALANCE_OWED = 2
    EXIT_MARKET_REJECTION = 3
    SET_CLOSE_FACTOR_OWNER_CHECK = 4
    SET_CLOSE_FACTOR_VALIDATION = 5
    SET_COLLATERAL_FACTOR_OWNER_CHECK = 6
    SET_COLLATERAL_FACTOR_NO_EXISTS = 7
    SET_COLLATERAL_FACTOR_VALIDATION = 8
    SET_COLLATERAL_FACTOR_WITHOUT_PRICE = 9
    SET_IMPLEMENTATION_OWNER_CHECK = 10
    SET_LIQUIDATION_INCENTIVE_OWNER_CHECK = 11
    SET_LIQUIDATION_INCENTIVE_VALIDATION = 12
    SET_MAX_ASSETS_OWNER_CHECK = 13
    SET_PENDING_ADMIN_OWNER_CHECK = 14
    SET_PENDING_IMPLEMENTATION_OWNER_CHECK = 15
    SET_PRICE_ORACLE_OWNER_CHECK = 16
    SUPPORT_MARKET_EXISTS = 17
    SUPPORT_MARKET_OWNER_CHECK = 18
    SET_PAUSE_GUARDIAN_OWNER_CHECK = 19


@dataclass(frozen=True)
class Failure:
    """Record of a soft rejection.

    ``detail`` is an opaque sub-code from a collaborator whose own error
    space is not interpretable here; zero when there is none.
    """

    error: ControllerErrorCode
    info: FailureInfo
    detail: int = 0


class ErrorReporter:
    """Records controller rejections without aborting the caller."""

    def __init__(self, events: EventLog | None = None) -> None:
        self.events = events
        self.failures: list[Failure] = []

    def fail(self, error: ControllerErrorCode, info: FailureInfo) -> ControllerErrorCode:
        """Record ``(error, info, 0)`` and return ``error``."""
        return self.fail_opaque(error, info, 0)

    def fail_opaque(
        self, error: ControllerErrorCode, info: FailureInfo, opaque_error: int
    ) -> ControllerErrorCode:
        """Record ``(error, info, opaque_error)`` and return ``error``."""
        failure = Failure(
            error=ControllerErrorCode(error),
            info=FailureInfo(info),
            detail=int(opaque_error),
        )
        self.failures.append(failure)
        logger.warning(
            "Controller rejection: %s at %s (detail=%d)",
            failure.error.name,
            failure.info.name,
            failure.detail,
        )
        if self.events is not None:
            self.events.emit(failure)
        return failure.error


def report_controller_rejection(
    error_code: ControllerErrorCode,
    failure_info: FailureInfo,
    detail_code: int = 0,
    events: EventLog | None = None,
) -> ControllerErrorCode:
    """Record a soft rejection on ``events`` and return the coarse code."""
    return ErrorReporter(events).fail_opaque(error_code, failure_info, detail_code)


# ---------------------------------------------------------------------------
# Market errors
# ---------------------------------------------------------------------------

class MarketError(Exception):
    """Base class for failures that abort a market operation."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or type(self).__name__)


class ControllerRejection(MarketError):
    """A market error wrapping a non-zero controller code."""

    __match_args__ = ("error_code",)

    def __init__(self, error_code: int) -> None:
        self.error_code = int(error_code)
        try:
            label = ControllerErrorCode(self.error_code).name
        except ValueError:
            label = "opaque"
        super().__init__(f"{type(self).__name__}(error_code={self.error_code}, {label})")

    def __reduce__(self):
        return (type(self), (self.error_code,))


# Transfer
class TransferControllerRejection(ControllerRejection):
    pass


class TransferNotAllowed(MarketError):
    """Source and destination are the same account."""


class TransferNotEnough(MarketError):
    pass


class TransferTooMuch(MarketError):
    pass


# Mint
class MintControllerRejection(ControllerRejection):
    pass


class MintFreshnessCheck(MarketError):
    """Interest has not been accrued in the current period."""


# Redeem
class RedeemControllerRejection(ControllerRejection):
    pass


class RedeemFreshnessCheck(MarketError):
    pass


class RedeemTransferOutNotPossible(MarketError):
    """The pool does not hold enough cash to pay out the redemption."""


# Borrow
class BorrowControllerRejection(ControllerRejection):
    pass


class BorrowFreshnessCheck(MarketError):
    pass


class BorrowCashNotAvailable(MarketError):
    """The pool does not hold enough cash to fund the borrow."""


# Repay
class RepayBorrowControllerRejection(ControllerRejection):
    pass


class RepayBorrowFreshnessCheck(MarketError):
    pass


# Liquidation
class LiquidateControllerRejection(ControllerRejection):
    pass


class LiquidateFreshnessCheck(MarketError):
    pass


class LiquidateCollateralFreshnessCheck(MarketError):
    pass


class LiquidateAccrueBorrowInterestFailed(ControllerRejection):
    pass


class LiquidateAccrueCollateralInterestFailed(ControllerRejection):
    pass


class LiquidateLiquidatorIsBorrower(MarketError):
    pass


class LiquidateCloseAmountIsZero(MarketError):
    pass


class LiquidateCloseAmountIsUintMax(MarketError):
    pass


class LiquidateRepayBorrowFreshFailed(ControllerRejection):
    pass


class LiquidateSeizeControllerRejection(ControllerRejection):
    pass


class LiquidateSeizeLiquidatorIsBorrower(MarketError):
    pass


# Admin
class AcceptAdminPendingAdminCheck(MarketError):
    pass


class SetControllerOwnerCheck(MarketError):
    pass


class SetPendingAdminOwnerCheck(MarketError):
    pass


# Reserves
class SetReserveFactorAdminCheck(MarketError):
    pass


class SetReserveFactorFreshCheck(MarketError):
    pass


class SetReserveFactorBoundsCheck(MarketError):
    """Requested reserve factor is above the allowed maximum."""


class AddReservesFactorFreshCheck(MarketError):
    """Reserves were added to a stale market.

    ``actual_add_amount`` is the amount that had been transferred in when
    the check failed.
    """

    __match_args__ = ("actual_add_amount",)

    def __init__(self, actual_add_amount: int) -> None:
        self.actual_add_amount = int(actual_add_amount)
        super().__init__(f"AddReservesFactorFreshCheck(actual_add_amount={self.actual_add_amount})")

    def __reduce__(self):
        return (type(self), (self.actual_add_amount,))


class ReduceReservesAdminCheck(MarketError):
    pass


class ReduceReservesFreshCheck(MarketError):
    pass


class ReduceReservesCashNotAvailable(MarketError):
    pass


class ReduceReservesCashValidation(MarketError):
    """Requested reduction is larger than the reserves held."""


# Rate model
class SetInterestRateModelOwnerCheck(MarketError):
    pass


class SetInterestRateModelFreshCheck(MarketError):
    pass


def raise_for_rejection(error_code: int, error_cls: type[ControllerRejection]) -> None:
    """Turn a soft controller code into a hard abort.

    Does nothing for ``NO_ERROR``; otherwise raises ``error_cls`` carrying
    the code unchanged.
    """
    if int(error_code) != NO_ERROR:
        raise error_cls(error_code)


# ---------------------------------------------------------------------------
# Rate model and arithmetic errors (outside the market taxonomy)
# ---------------------------------------------------------------------------

class ArithmeticFault(ArithmeticError):
    """Checked fixed-point arithmetic overflowed, underflowed or divided by zero."""


class RateModelError(Exception):
    """Base error for rate curve configuration."""


class Unauthorized(RateModelError):
    """A curve update was attempted by someone other than the owner."""

    def __init__(self, caller: str, owner: str) -> None:
        self.caller = caller
        self.owner = owner
        super().__init__(f"only the owner may call this function (caller={caller})")

    def __reduce__(self):
        return (type(self), (self.caller, self.owner))


class InvalidCurveParameters(RateModelError, ValueError):
    """Curve parameters fall outside their valid domain."""
