"""Protocol constants and configuration keys."""

# Settlement periods (blocks) per year used to convert annualized inputs
PERIODS_PER_YEAR = 2_102_400

# Upper bound for a market's reserve factor (1e18 == 100%)
RESERVE_FACTOR_MAX_MANTISSA = 10**18

# Owner used when none is configured
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Curve presets
PRESET_WHITEPAPER = "whitepaper"
PRESET_STABLECOIN = "stablecoin"
PRESET_ETH = "eth"
DEFAULT_PRESET = PRESET_STABLECOIN

# Environment variables read by the curve factory
ENV_CURVE_PRESET = "LENDRATE_CURVE_PRESET"
ENV_CURVE_OWNER = "LENDRATE_CURVE_OWNER"
