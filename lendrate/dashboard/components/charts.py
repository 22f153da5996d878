"""Plotly figures for the rate dashboard."""

import plotly.graph_objects as go

from lendrate.protocol.fixed_point import to_float
from lendrate.protocol.interest_rate import KinkedRateCurve, RateCurve, annualize

BORROW_COLOR = "#dc2626"
SUPPLY_COLOR = "#2563eb"
KINK_COLOR = "#d97706"


def _pct(mantissa: int) -> float:
    return to_float(mantissa) * 100


def rate_curve_chart(
    curve: RateCurve,
    reserve_factor: int = 0,
    current_utilization: int | None = None,
    n_points: int = 200,
    title: str = "Borrow and Supply APR",
) -> go.Figure:
    """Borrow and supply APR of ``curve`` across utilization.

    A kinked curve gets its jump segment shaded and the rate at the kink
    marked.  ``current_utilization`` is a scaled mantissa; when given, the
    pool's position on the borrow curve is marked too.
    """
    df = curve.rate_curve(n_points=n_points, reserve_factor=reserve_factor)
    x = df["utilization"] * 100

    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=x,
            y=df["borrow_rate"] * 100,
            mode="lines",
            name="Borrow",
            line=dict(color=BORROW_COLOR, width=3),
            hovertemplate="%{x:.1f}% utilized: borrow %{y:.2f}% APR<extra></extra>",
        )
    )
    fig.add_trace(
        go.Scatter(
            x=x,
            y=df["supply_rate"] * 100,
            mode="lines",
            name="Supply",
            line=dict(color=SUPPLY_COLOR, width=2, dash="dash"),
            hovertemplate="%{x:.1f}% utilized: supply %{y:.2f}% APR<extra></extra>",
        )
    )

    if isinstance(curve, KinkedRateCurve):
        kink_pct = _pct(curve.params.kink)
        fig.add_vrect(
            x0=kink_pct,
            x1=100,
            fillcolor=KINK_COLOR,
            opacity=0.12,
            line_width=0,
            layer="below",
        )
        fig.add_trace(
            go.Scatter(
                x=[kink_pct],
                y=[annualize(curve.normal_rate()) * 100],
                mode="markers",
                name="Kink intercept",
                marker=dict(color=KINK_COLOR, size=10, symbol="diamond"),
                hovertemplate="Kink at %{x:.0f}%: %{y:.2f}% APR<extra></extra>",
            )
        )

    if current_utilization is not None:
        fig.add_trace(
            go.Scatter(
                x=[_pct(current_utilization)],
                y=[annualize(curve.borrow_rate_at(current_utilization)) * 100],
                mode="markers",
                name="Current",
                marker=dict(color="#111827", size=12, symbol="circle-open", line=dict(width=2)),
                hovertemplate="Now %{x:.1f}% utilized: %{y:.2f}% APR<extra></extra>",
            )
        )

    fig.update_layout(
        title=title,
        template="plotly_white",
        xaxis=dict(title="Utilization (%)", range=[0, 100]),
        yaxis=dict(title="APR (%)", rangemode="tozero"),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, x=0),
        height=420,
    )
    return fig
