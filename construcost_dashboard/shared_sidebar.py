"""Shared sidebar components for the multi-page dashboard."""

from __future__ import annotations

import streamlit as st

from .app_state import Services, get_services


def rerun() -> None:
    """Restart the script run so state changes show immediately."""
    st.rerun()


def render_shared_sidebar() -> Services:
    """Render the sidebar shown on every page and return the session services."""
    services = get_services(st.session_state)
    settings = services.settings.load()

    st.sidebar.title("🏗️ ConstruCost")
    st.sidebar.caption("Gestão e Controle de Orçamentos")

    st.sidebar.subheader("☁️ Google Drive")
    if settings.drive_connected:
        st.sidebar.success(f"Conectado: {settings.drive_folder_name}")
        if settings.simulation_mode:
            st.sidebar.info("Modo de simulação ativo (sem chave de API).")
    else:
        st.sidebar.warning("Drive não conectado. Conecte em Configurações.")
    return services
