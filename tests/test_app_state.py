from __future__ import annotations

import types

from construcost_dashboard import app_state, config, shared_sidebar
from construcost_dashboard.app_state import (
    FORM_KEY,
    FORM_REVISION_KEY,
    SERVICES_KEY,
    build_services,
    close_form,
    current_form,
    get_services,
    open_form,
)
from construcost_dashboard.form_session import SessionState


def test_get_services_builds_once_per_session(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(config, 'DATA_DIR', tmp_path)
    monkeypatch.setattr(config, 'STORE_DIR', tmp_path / 'store')
    monkeypatch.setattr(app_state, 'STORE_DIR', tmp_path / 'store')
    session_state = {}
    services = get_services(session_state)
    assert session_state[SERVICES_KEY] is services
    assert get_services(session_state) is services
    assert services.store.root == tmp_path / 'store'
    assert (tmp_path / 'store').is_dir()


def test_open_and_close_form(tmp_path) -> None:
    services = build_services(tmp_path)
    session_state = {}
    form = open_form(session_state, services)
    assert current_form(session_state) is form
    assert form.state is SessionState.NEW

    edit = open_form(session_state, services, services.budgets.get('3'))
    assert session_state[FORM_KEY] is edit
    assert edit.draft.client_name == 'Indústrias Reunidas'

    close_form(session_state)
    close_form(session_state)
    assert current_form(session_state) is None


def test_opening_a_form_bumps_widget_revision(tmp_path) -> None:
    services = build_services(tmp_path)
    session_state = {}
    open_form(session_state, services, services.budgets.get('1'))
    first = session_state[FORM_REVISION_KEY]
    edit = open_form(session_state, services, services.budgets.get('2'))
    assert session_state[FORM_REVISION_KEY] == first + 1
    assert edit.draft.client_name == 'Comercial Global S.A.'
    open_form(session_state, services)
    assert session_state[FORM_REVISION_KEY] == first + 2


def test_services_share_one_store(tmp_path) -> None:
    services = build_services(tmp_path)
    services.budgets.delete('1')
    assert [b.id for b in build_services(tmp_path).budgets.list()] == ['2', '3', '4']


def test_rerun_delegates_to_streamlit(monkeypatch) -> None:
    called = {}
    st_mock = types.SimpleNamespace(rerun=lambda: called.setdefault('method', 'rerun'))
    monkeypatch.setattr(shared_sidebar, 'st', st_mock)
    shared_sidebar.rerun()
    assert called['method'] == 'rerun'

