"""Interest Rates tab: rate curve, sensitivity table and borrow impact."""

import pandas as pd
import streamlit as st

from lendrate.dashboard.components.charts import rate_curve_chart
from lendrate.protocol.errors import MarketError
from lendrate.protocol.fixed_point import SCALE, to_float
from lendrate.protocol.interest_rate import RateCurve, annualize
from lendrate.protocol.pool import PoolModel, PoolState


def render_rates(
    curve: RateCurve,
    state: PoolState,
    utilization_override: float | None = None,
) -> None:
    """Render the interest rates tab."""
    st.header("Interest Rate Curve")

    reserve_factor = state.reserve_factor
    if utilization_override is not None:
        utilization = int(utilization_override * SCALE)
    else:
        utilization = state.utilization

    fig = rate_curve_chart(curve, reserve_factor=reserve_factor, current_utilization=utilization)
    st.plotly_chart(fig, use_container_width=True)

    c1, c2, c3 = st.columns(3)
    with c1:
        st.metric("Utilization", f"{to_float(utilization)*100:.1f}%")
    with c2:
        st.metric("Borrow APR", f"{annualize(curve.borrow_rate_at(utilization))*100:.2f}%")
    with c3:
        supply = curve.supply_rate_at(utilization, reserve_factor)
        st.metric("Supply APR", f"{annualize(supply)*100:.2f}%")

    # Rate sensitivity table
    st.divider()
    st.subheader("Rate Sensitivity")

    rows = []
    for pct in [20, 40, 60, 80, 90, 95, 98, 100]:
        u = SCALE * pct // 100
        rows.append(
            {
                "Utilization": f"{pct}%",
                "Borrow per period": str(curve.borrow_rate_at(u)),
                "Borrow APR": f"{annualize(curve.borrow_rate_at(u))*100:.2f}%",
                "Supply APR": f"{annualize(curve.supply_rate_at(u, reserve_factor))*100:.2f}%",
            }
        )
    st.table(pd.DataFrame(rows))

    # Borrow impact simulation
    st.divider()
    st.subheader("Borrow Impact Simulation")

    pool_model = PoolModel(state, curve)
    borrow_amount = st.slider(
        "Additional Borrow",
        min_value=0,
        max_value=max(state.cash, 1),
        value=state.cash // 10,
    )

    if borrow_amount > 0:
        try:
            impact = pool_model.simulate_borrow(borrow_amount)
        except MarketError as exc:
            st.error(f"Borrow rejected: {exc}")
            return
        u_before = to_float(impact["utilization_before"])
        u_after = to_float(impact["utilization_after"])
        r_before = annualize(impact["borrow_rate_before"])
        r_after = annualize(impact["borrow_rate_after"])
        c1, c2 = st.columns(2)
        with c1:
            st.metric("Utilization", f"{u_after*100:.1f}%", f"{(u_after-u_before)*100:+.1f}%")
        with c2:
            st.metric("Borrow APR", f"{r_after*100:.2f}%", f"{(r_after-r_before)*100:+.2f}%")
