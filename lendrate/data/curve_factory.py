"""Factory for building the configured rate curve."""

from __future__ import annotations

import logging
import os

from lendrate.data.constants import DEFAULT_PRESET, ENV_CURVE_OWNER, ENV_CURVE_PRESET, ZERO_ADDRESS
from lendrate.data.static_params import FLAT, get_preset
from lendrate.protocol.events import EventLog
from lendrate.protocol.interest_rate import FlatRateCurve, KinkedRateCurve, RateCurve

logger = logging.getLogger(__name__)


def create_curve(
    preset: str | None = None,
    owner: str | None = None,
    events: EventLog | None = None,
) -> RateCurve:
    """Create a rate curve from a named preset.

    Parameters
    ----------
    preset : str | None
        Preset name.  Falls back to the ``LENDRATE_CURVE_PRESET``
        environment variable, then to ``DEFAULT_PRESET``.
    owner : str | None
        Identity allowed to update a kinked curve.  Falls back to
        ``LENDRATE_CURVE_OWNER``, then to the zero address.
    events : EventLog | None
        Channel receiving the curve's notifications.

    Returns
    -------
    RateCurve
        ``FlatRateCurve`` or ``KinkedRateCurve`` depending on the preset.
    """
    name = preset or os.environ.get(ENV_CURVE_PRESET) or DEFAULT_PRESET
    try:
        params = get_preset(name)
    except KeyError:
        logger.warning("Unknown curve preset %r; using %r", name, DEFAULT_PRESET)
        params = get_preset(DEFAULT_PRESET)

    if params.kind == FLAT:
        return FlatRateCurve.from_annual(
            params.base_rate_per_year,
            params.multiplier_per_year,
            events=events,
        )

    resolved_owner = owner or os.environ.get(ENV_CURVE_OWNER) or ZERO_ADDRESS
    return KinkedRateCurve.from_annual(
        params.base_rate_per_year,
        params.multiplier_per_year,
        params.jump_multiplier_per_year,
        params.kink,
        owner=resolved_owner,
        events=events,
    )
