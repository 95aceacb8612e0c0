"""Plotly visualisation helpers for the overview page.

Each function accepts domain objects or the DataFrames produced by
:mod:`construcost_dashboard.filters` and returns a
``plotly.graph_objects.Figure`` that Streamlit renders via
``st.plotly_chart``.  Empty inputs yield an empty figure with a
"no data" title rather than raising.
"""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .models import BudgetStatus, DashboardStats

STATUS_COLORS = {
    BudgetStatus.APPROVED.value: '#10B981',
    BudgetStatus.PENDING.value: '#F59E0B',
    BudgetStatus.NOT_APPROVED.value: '#EF4444',
}


def _empty_figure(title: str = "Sem dados para exibir") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def create_status_pie_chart(stats: DashboardStats, title: str | None = None) -> go.Figure:
    """Donut chart of budget counts per status.

    Parameters
    ----------
    stats : DashboardStats
        Aggregates computed by the repository.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Pie chart with the fixed status palette.
    """
    df = pd.DataFrame(
        {
            'Status': [
                BudgetStatus.APPROVED.value,
                BudgetStatus.PENDING.value,
                BudgetStatus.NOT_APPROVED.value,
            ],
            'Quantidade': [stats.approved_count, stats.pending_count, stats.rejected_count],
        }
    )
    if df['Quantidade'].sum() == 0:
        return _empty_figure()
    fig = px.pie(
        df,
        names='Status',
        values='Quantidade',
        color='Status',
        color_discrete_map=STATUS_COLORS,
        hole=0.5,
    )
    fig.update_layout(title=title or "Status dos Orçamentos")
    return fig


def create_monthly_value_chart(monthly: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Stacked bars of net value per month, coloured by status."""
    if monthly.empty:
        return _empty_figure()
    fig = px.bar(
        monthly,
        x='Mês',
        y='Líquido',
        color='Status',
        color_discrete_map=STATUS_COLORS,
        barmode='stack',
    )
    fig.update_layout(
        title=title or "Valor líquido por mês",
        xaxis_title="Mês",
        yaxis_title="R$",
    )
    return fig
