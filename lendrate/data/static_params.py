"""Static curve presets and representative pool snapshots."""

from dataclasses import dataclass

from lendrate.data.constants import PRESET_ETH, PRESET_STABLECOIN, PRESET_WHITEPAPER
from lendrate.protocol.fixed_point import SCALE
from lendrate.protocol.pool import PoolState

FLAT = "flat"
KINKED = "kinked"


@dataclass(frozen=True)
class CurvePreset:
    """Annualized, 1e18-scaled inputs for building a curve."""

    kind: str  # FLAT or KINKED
    base_rate_per_year: int
    multiplier_per_year: int
    jump_multiplier_per_year: int = 0
    kink: int = SCALE
    reserve_factor: int = 0


# --- Hardcoded parameters modelled on common money-market listings ---

_PRESETS: dict[str, CurvePreset] = {
    PRESET_WHITEPAPER: CurvePreset(
        kind=FLAT,
        base_rate_per_year=20_000_000_000_000_000,  # 2%
        multiplier_per_year=100_000_000_000_000_000,  # 10%
        reserve_factor=100_000_000_000_000_000,  # 10%
    ),
    PRESET_STABLECOIN: CurvePreset(
        kind=KINKED,
        base_rate_per_year=0,
        multiplier_per_year=40_000_000_000_000_000,  # 4% at the kink
        jump_multiplier_per_year=1_090_000_000_000_000_000,  # 109%
        kink=800_000_000_000_000_000,  # 80%
        reserve_factor=75_000_000_000_000_000,  # 7.5%
    ),
    PRESET_ETH: CurvePreset(
        kind=KINKED,
        base_rate_per_year=20_000_000_000_000_000,  # 2%
        multiplier_per_year=100_000_000_000_000_000,  # 10% at the kink
        jump_multiplier_per_year=2_000_000_000_000_000_000,  # 200%
        kink=800_000_000_000_000_000,  # 80%
        reserve_factor=200_000_000_000_000_000,  # 20%
    ),
}

# Representative pool balances (whole token units)
_POOL_STATES: dict[str, PoolState] = {
    PRESET_WHITEPAPER: PoolState(
        cash=800_000,
        borrows=200_000,
        reserves=0,
        reserve_factor=_PRESETS[PRESET_WHITEPAPER].reserve_factor,
    ),
    PRESET_STABLECOIN: PoolState(
        cash=310_000_000,
        borrows=920_000_000,
        reserves=12_500_000,
        reserve_factor=_PRESETS[PRESET_STABLECOIN].reserve_factor,
    ),
    PRESET_ETH: PoolState(
        cash=420_000,
        borrows=180_000,
        reserves=3_000,
        reserve_factor=_PRESETS[PRESET_ETH].reserve_factor,
    ),
}


def list_presets() -> list[str]:
    return sorted(_PRESETS)


def get_preset(name: str) -> CurvePreset:
    if name not in _PRESETS:
        raise KeyError(f"Unknown curve preset: {name}")
    return _PRESETS[name]


def get_pool_state(name: str) -> PoolState:
    if name not in _POOL_STATES:
        raise KeyError(f"No pool snapshot for preset: {name}")
    return _POOL_STATES[name]
