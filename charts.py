"""
Plotly chart builders for the bucket projection.
Creates interactive charts for bucket balances, income vs spending,
withdrawals and the current bucket allocation.
"""
import plotly.graph_objects as go
import numpy as np
from typing import List, Optional

from models import BucketBalances, YearlyProjection, BUCKET_LABELS, CASH, INCOME, GROWTH
from projection import (
    SOURCE_CASH, SOURCE_CASH_THEN_INCOME, SOURCE_ALL_BUCKETS, find_depletion_age,
)

BUCKET_COLORS = {
    CASH: '#4c9f70',
    INCOME: '#e0a03a',
    GROWTH: '#3a6ea5',
}

SOURCE_COLORS = {
    SOURCE_CASH: BUCKET_COLORS[CASH],
    SOURCE_CASH_THEN_INCOME: BUCKET_COLORS[INCOME],
    SOURCE_ALL_BUCKETS: 'darkred',
}


def create_bucket_balance_chart(projections: List[YearlyProjection],
                                title: str = "Portfolio Balance Projection") -> go.Figure:
    """
    Create stacked area chart of end-of-year balances by bucket.

    Args:
        projections: Output of run_projection
        title: Chart title

    Returns:
        Plotly figure
    """
    ages = np.array([p.age for p in projections])
    series = {
        GROWTH: np.array([p.end_balance_growth for p in projections]),
        INCOME: np.array([p.end_balance_income for p in projections]),
        CASH: np.array([p.end_balance_cash for p in projections]),
    }

    fig = go.Figure()

    for bucket, values in series.items():
        fig.add_trace(go.Scatter(
            x=ages,
            y=values / 1000,  # Convert to thousands
            mode='lines',
            stackgroup='one',
            name=BUCKET_LABELS[bucket],
            line=dict(width=0.5, color=BUCKET_COLORS[bucket]),
            hovertemplate=f"<b>{BUCKET_LABELS[bucket]}</b><br>" +
                         "<b>Age:</b> %{x}<br>" +
                         "<b>Balance:</b> $%{y:,.0f}K<br>" +
                         "<extra></extra>"
        ))

    depletion_age = find_depletion_age(projections)
    if depletion_age is not None:
        fig.add_vline(
            x=depletion_age,
            line_dash="dash",
            line_color="darkred",
            annotation_text=f"Growth depleted: age {depletion_age}",
        )

    fig.update_layout(
        title=title,
        xaxis_title="Age",
        yaxis_title="Balance ($000s)",
        template="plotly_white",
        hovermode="x unified"
    )

    return fig


def create_income_vs_spending_chart(projections: List[YearlyProjection],
                                    title: str = "Income vs Spending") -> go.Figure:
    """
    Create bar chart of spending need with a guaranteed income line.

    Args:
        projections: Output of run_projection
        title: Chart title

    Returns:
        Plotly figure
    """
    ages = [p.age for p in projections]
    spending = np.array([p.spending_need for p in projections]) / 1000
    income = np.array([p.income for p in projections]) / 1000

    fig = go.Figure()

    fig.add_trace(go.Bar(
        x=ages,
        y=spending,
        name='Spending Need',
        marker_color='lightcoral',
        opacity=0.6,
        hovertemplate="<b>Age:</b> %{x}<br><b>Spending:</b> $%{y:,.0f}K<extra></extra>"
    ))

    fig.add_trace(go.Scatter(
        x=ages,
        y=income,
        mode='lines',
        name='Guaranteed Income',
        line=dict(color='darkblue', width=2),
        hovertemplate="<b>Age:</b> %{x}<br><b>Income:</b> $%{y:,.0f}K<extra></extra>"
    ))

    fig.update_layout(
        title=title,
        xaxis_title="Age",
        yaxis_title="Annual Amount ($000s)",
        template="plotly_white",
        hovermode="x unified"
    )

    return fig


def create_withdrawal_chart(projections: List[YearlyProjection],
                            title: str = "Withdrawals Required") -> go.Figure:
    """
    Create bar chart of portfolio withdrawals, one trace per funding source.

    Args:
        projections: Output of run_projection
        title: Chart title

    Returns:
        Plotly figure
    """
    fig = go.Figure()

    for source, color in SOURCE_COLORS.items():
        rows = [p for p in projections if p.withdrawal_source == source]
        if not rows:
            continue
        fig.add_trace(go.Bar(
            x=[p.age for p in rows],
            y=[p.withdrawal_needed / 1000 for p in rows],
            name=source,
            marker_color=color,
            hovertemplate=f"<b>{source}</b><br>" +
                         "<b>Age:</b> %{x}<br>" +
                         "<b>Withdrawal:</b> $%{y:,.1f}K<br>" +
                         "<extra></extra>"
        ))

    fig.update_layout(
        title=title,
        xaxis_title="Age",
        yaxis_title="Withdrawal ($000s)",
        template="plotly_white",
        barmode="stack",
        hovermode="x unified"
    )

    return fig


def create_bucket_allocation_chart(balances: BucketBalances,
                                   unassigned_value: float = 0.0,
                                   title: Optional[str] = None) -> go.Figure:
    """
    Create donut chart of the current bucket split.

    Args:
        balances: Current bucket balances
        unassigned_value: Value of holdings not yet in a bucket
        title: Chart title (defaults to the total value)

    Returns:
        Plotly figure
    """
    labels = [BUCKET_LABELS[CASH], BUCKET_LABELS[INCOME], BUCKET_LABELS[GROWTH]]
    values = [balances.cash, balances.income, balances.growth]
    colors = [BUCKET_COLORS[CASH], BUCKET_COLORS[INCOME], BUCKET_COLORS[GROWTH]]

    if unassigned_value > 0:
        labels.append("Unassigned")
        values.append(unassigned_value)
        colors.append('lightgray')

    total = sum(values)
    if title is None:
        title = f"Bucket Allocation (${total/1_000_000:.2f}M)"

    fig = go.Figure(go.Pie(
        labels=labels,
        values=values,
        hole=0.5,
        marker=dict(colors=colors),
        sort=False,
        hovertemplate="<b>%{label}</b><br>$%{value:,.0f}<br>%{percent}<extra></extra>"
    ))

    fig.update_layout(
        title=title,
        template="plotly_white"
    )

    return fig
