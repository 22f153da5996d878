"""Sidebar parameter controls."""

from dataclasses import dataclass

import streamlit as st

from lendrate.data.constants import DEFAULT_PRESET
from lendrate.data.static_params import get_preset, list_presets


@dataclass
class SidebarParams:
    """User-controlled parameters from the sidebar."""

    preset: str
    reserve_factor: float
    utilization_override: float | None


def render_sidebar() -> SidebarParams:
    """Render sidebar controls and return selected parameters."""
    st.sidebar.header("Market")

    presets = list_presets()
    preset = st.sidebar.selectbox(
        "Curve Preset",
        presets,
        index=presets.index(DEFAULT_PRESET),
    )

    default_rf = get_preset(preset).reserve_factor / 1e16
    reserve_factor = st.sidebar.slider(
        "Reserve Factor (%)",
        min_value=0.0,
        max_value=100.0,
        value=default_rf,
        step=0.5,
    ) / 100.0

    st.sidebar.header("What-If Analysis")

    use_util_override = st.sidebar.checkbox("Override Utilization", value=False)
    util_override: float | None = None
    if use_util_override:
        util_override = (
            st.sidebar.slider(
                "Utilization (%)",
                min_value=0,
                max_value=100,
                value=78,
            )
            / 100.0
        )

    return SidebarParams(
        preset=preset,
        reserve_factor=reserve_factor,
        utilization_override=util_override,
    )
