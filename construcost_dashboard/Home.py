"""Main entry point for the Streamlit multi-page app: the overview page.

Pages in the pages/ directory automatically appear in the sidebar.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent.resolve()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import streamlit as st

from construcost_dashboard.filters import monthly_values
from construcost_dashboard.formatting import format_brl
from construcost_dashboard.shared_sidebar import render_shared_sidebar, rerun
from construcost_dashboard.sheet_sync import sync_master_sheet
from construcost_dashboard.visualization import create_monthly_value_chart, create_status_pie_chart


def main() -> None:
    """Render the overview page."""
    st.set_page_config(page_title="ConstruCost · Visão Geral", page_icon="🏗️", layout="wide")
    services = render_shared_sidebar()

    header, action = st.columns([3, 1])
    header.header("📊 Visão Geral")
    header.caption("Resumo dos orçamentos registrados")
    if action.button("🔄 Sincronizar Planilha", width='stretch'):
        with st.spinner("Lendo Planilha Mestra no Drive..."):
            result = sync_master_sheet(services.budgets)
        st.session_state['sync_message'] = result.message
        rerun()

    message = st.session_state.pop('sync_message', None)
    if message:
        st.success(message)

    stats = services.budgets.compute_stats()
    cols = st.columns(4)
    cols[0].metric("Total de Orçamentos", stats.total_estimates)
    cols[1].metric(
        "Valor Aprovado", format_brl(stats.total_value_approved),
        f"{stats.approved_count} aprovados", delta_color="off",
    )
    cols[2].metric(
        "Valor Pendente", format_brl(stats.total_value_pending),
        f"{stats.pending_count} pendentes", delta_color="off",
    )
    cols[3].metric(
        "Faturamento Pendente", stats.invoice_pending_count,
        help="Orçamentos aprovados sem nota fiscal enviada",
    )

    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(create_status_pie_chart(stats), width='stretch')
    with col2:
        st.plotly_chart(
            create_monthly_value_chart(monthly_values(services.budgets.list())),
            width='stretch',
        )

    if stats.rejected_count:
        st.caption(f"{stats.rejected_count} orçamento(s) não aprovado(s).")


if __name__ == "__main__":
    main()
