"""Lending Rate Dashboard - Main Streamlit entry point."""

import streamlit as st

from lendrate.dashboard.components.sidebar import render_sidebar
from lendrate.dashboard.tabs.rates import render_rates
from lendrate.data.curve_factory import create_curve
from lendrate.data.static_params import get_pool_state
from lendrate.protocol.fixed_point import SCALE


def main() -> None:
    st.set_page_config(
        page_title="Lending Rate Dashboard",
        page_icon="📈",
        layout="wide",
    )

    st.title("Lending Rate Dashboard")
    st.caption("Utilization-based borrow and supply rates")

    params = render_sidebar()
    curve = create_curve(preset=params.preset)
    state = get_pool_state(params.preset).with_reserve_factor(
        int(round(params.reserve_factor * 1000)) * SCALE // 1000
    )

    render_rates(curve, state, params.utilization_override)


if __name__ == "__main__":
    main()
