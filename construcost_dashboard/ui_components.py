"""UI components for the budgets page.

Rendering functions for the list, the delete confirmation and the
create/edit form.  They read and mutate a :class:`BudgetFormSession` and the
repository handed in by the page; no storage is touched directly.
"""

from __future__ import annotations

from datetime import date
from typing import Any, List, MutableMapping, Optional, Sequence

import streamlit as st

from .app_state import FORM_REVISION_KEY, Services, bump_form_revision, close_form
from .exceptions import ExtractionError, SubmissionBlocked
from .filters import ALL_STATUSES, budgets_to_frame, filter_budgets
from .form_session import RECOMMENDED_MARKER, BudgetFormSession
from .formatting import format_brl
from .models import Budget, BudgetStatus
from .shared_sidebar import rerun

STATUS_ICONS = {
    BudgetStatus.APPROVED: "✅",
    BudgetStatus.NOT_APPROVED: "❌",
    BudgetStatus.PENDING: "🕒",
}

_UPLOADER_KEY = 'budget_uploader_rev'
_FLASH_KEY = 'budget_flash'
_CONFIRM_DELETE_KEY = 'confirm_delete_id'
_SELECTED_KEY = 'budget_selected_id'


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _bump(state: MutableMapping, key: str) -> None:
    state[key] = state.get(key, 0) + 1


def flash(state: MutableMapping, message: str, kind: str = 'success') -> None:
    """Queue a message to show after the next rerun."""
    state[_FLASH_KEY] = (kind, message)


def render_flash(state: MutableMapping) -> None:
    queued = state.pop(_FLASH_KEY, None)
    if queued:
        kind, message = queued
        getattr(st, kind, st.info)(message)


def status_label(status: BudgetStatus) -> str:
    return f"{STATUS_ICONS.get(status, '')} {status.value}".strip()


# ============================================================================
# List
# ============================================================================

def render_budget_filters() -> tuple:
    col1, col2 = st.columns([3, 1])
    search = col1.text_input("🔍 Buscar clientes, pedido...", key='budget_search')
    options = [ALL_STATUSES] + [s.value for s in BudgetStatus]
    status = col2.selectbox(
        "Status",
        options=options,
        format_func=lambda v: "Todos os Status" if v == ALL_STATUSES else v,
        key='budget_status_filter',
    )
    return search, status


def render_budget_table(budgets: Sequence[Budget]) -> None:
    if not budgets:
        st.info("Nenhum orçamento encontrado com esses critérios.")
        return
    frame = budgets_to_frame(budgets).drop(columns=['id'])
    frame['Status'] = [status_label(b.status) for b in budgets]
    st.dataframe(
        frame.style.format({
            'Valor': lambda v: format_brl(v),
            'Desconto': lambda v: format_brl(v),
            'Líquido': lambda v: format_brl(v),
        }),
        width='stretch',
        hide_index=True,
    )
    st.caption('Sincronizado com Google Sheets "Gestão e Controle de Orçamentos"')


def render_budget_actions(state: MutableMapping, services: Services, budgets: Sequence[Budget]) -> Optional[Budget]:
    """Select a budget and offer edit/delete.  Returns the budget to edit, if any."""
    if not budgets:
        return None
    by_id = {b.id: b for b in budgets}
    selected_id = st.selectbox(
        "Selecionar orçamento",
        options=list(by_id),
        format_func=lambda i: f"{by_id[i].date} · {by_id[i].client_name} · {by_id[i].service_description}",
        key=_SELECTED_KEY,
    )
    col1, col2 = st.columns(2)
    to_edit = None
    if col1.button("✏️ Editar", width='stretch'):
        to_edit = by_id[selected_id]
    if col2.button("🗑️ Excluir", width='stretch'):
        state[_CONFIRM_DELETE_KEY] = selected_id

    pending_delete = state.get(_CONFIRM_DELETE_KEY)
    if pending_delete:
        target = by_id.get(pending_delete)
        label = target.client_name if target else pending_delete
        st.warning(f"⚠️ Tem certeza que deseja excluir o orçamento de {label}?")
        c1, c2 = st.columns(2)
        if c1.button("✅ Confirmar", key='confirm_delete_btn'):
            services.budgets.delete(pending_delete)
            state.pop(_CONFIRM_DELETE_KEY, None)
            state.pop(_SELECTED_KEY, None)
            flash(state, "Orçamento excluído.")
            rerun()
        if c2.button("❌ Cancelar", key='cancel_delete_btn'):
            state.pop(_CONFIRM_DELETE_KEY, None)
            rerun()
    return to_edit


def render_budget_list(state: MutableMapping, services: Services) -> Optional[Budget]:
    search, status = render_budget_filters()
    budgets = filter_budgets(services.budgets.list(), search, status)
    render_budget_table(budgets)
    return render_budget_actions(state, services, budgets)


# ============================================================================
# Form
# ============================================================================

def _render_attachments(state: MutableMapping, form: BudgetFormSession, services: Services) -> None:
    st.markdown("**1. Anexe Arquivos (PDF, Planilha, Imagem)**")
    uploads = st.file_uploader(
        "Arraste os arquivos aqui",
        accept_multiple_files=True,
        key=f"budget_uploads_{state.get(_UPLOADER_KEY, 0)}",
        help="A IA lerá os dados conforme sua Planilha Mestra",
    )
    if uploads and st.button("📎 Anexar arquivos"):
        form.attach_files(uploads)
        _bump(state, _UPLOADER_KEY)
        bump_form_revision(state)
        rerun()

    files = form.draft.files
    if not files:
        return
    col1, col2 = st.columns([3, 1])
    col1.caption(f"{len(files)} arquivo(s) selecionado(s)")
    if col2.button("✨ Preencher Automaticamente"):
        with st.spinner("Lendo arquivos..."):
            try:
                message = form.autofill(services.extraction)
            except ExtractionError:
                st.error("Não foi possível extrair dados dos arquivos. Tente novamente.")
            else:
                flash(state, message)
                bump_form_revision(state)
                rerun()

    for attachment in list(files):
        c1, c2 = st.columns([6, 1])
        c1.write(f"📄 {attachment.name}")
        if c2.button("✖", key=f"remove_{attachment.id}"):
            form.remove_file(attachment.id)
            rerun()


def _render_fields(state: MutableMapping, form: BudgetFormSession) -> dict:
    rev = state.get(FORM_REVISION_KEY, 0)
    draft = form.draft
    values: dict = {}

    linked = form.linked_document()
    col1, col2 = st.columns(2)
    values['date'] = col1.date_input(
        "Data (Data do Orçamento)", value=_parse_date(draft.date) or date.today(), key=f"f_date_{rev}"
    )
    values['client_name'] = col2.text_input(
        "Nome Cliente", value=draft.client_name, placeholder="Preenchimento automático", key=f"f_client_{rev}"
    )
    values['service_description'] = st.text_input(
        "Descrição Serviços (Nome do Arquivo/PR)",
        value=draft.service_description,
        placeholder="Ex: PR0930 rev.01... ou Adequação Elétrica",
        key=f"f_desc_{rev}",
        help=f"Vinculado: {linked.name}" if linked else None,
    )
    if linked:
        st.caption(f"📎 Vinculado: {linked.name}")

    col1, col2 = st.columns(2)
    values['budget_amount'] = col1.number_input(
        "Valor Orçamento (R$)", min_value=0.0, value=float(draft.budget_amount),
        step=100.0, format="%.2f", key=f"f_amount_{rev}",
    )
    values['discount'] = col2.number_input(
        "Desconto (R$) (Auto: 0 se não encontrado)", min_value=0.0, value=float(draft.discount),
        step=100.0, format="%.2f", key=f"f_discount_{rev}",
    )

    statuses = [s.value for s in BudgetStatus]
    col1, col2 = st.columns(2)
    values['status'] = col1.selectbox(
        "Status do Orçamento", options=statuses, index=statuses.index(draft.status.value), key=f"f_status_{rev}"
    )
    values['requester'] = col2.text_input(
        "Solicitante (Engenheiro/Resp)", value=draft.requester, placeholder="Solicitante interno", key=f"f_req_{rev}"
    )

    col1, col2, col3 = st.columns(3)
    values['send_to_client'] = col1.checkbox("Enviado ao cliente", value=draft.send_to_client, key=f"f_send_{rev}")
    values['order_confirmation'] = col2.checkbox(
        "Pedido confirmado", value=draft.order_confirmation, key=f"f_conf_{rev}"
    )
    values['invoice_sent'] = col3.checkbox("Nota fiscal enviada", value=draft.invoice_sent, key=f"f_inv_{rev}")

    if values['status'] == BudgetStatus.APPROVED.value or values['order_confirmation']:
        col1, col2, col3 = st.columns(3)
        values['order_number'] = col1.text_input(
            "Pedido (Número PO)", value=draft.order_number or '', placeholder="ex: 4500694477", key=f"f_po_{rev}"
        )
        order_date = col2.date_input(
            "Data Pedido", value=_parse_date(draft.order_date), key=f"f_po_date_{rev}"
        )
        values['order_date'] = order_date.isoformat() if order_date else None
        values['invoice_number'] = col3.text_input(
            "Nota / Fatura", value=draft.invoice_number or '', placeholder="NF-XXXX", key=f"f_nf_{rev}"
        )

    values['date'] = values['date'].isoformat() if values['date'] else draft.date
    return values


def _render_warnings(warnings: List[str]) -> bool:
    """Show validation warnings; return the override choice for blocking ones."""
    advisory = [w for w in warnings if RECOMMENDED_MARKER in w]
    blocking = [w for w in warnings if RECOMMENDED_MARKER not in w]
    for warning in advisory:
        st.info(warning)
    for warning in blocking:
        st.warning(f"⚠️ {warning}")
    if blocking:
        return st.checkbox("Existem avisos pendentes. Salvar mesmo assim?", key='budget_override')
    return False


def render_budget_form(state: MutableMapping, form: BudgetFormSession, services: Services) -> None:
    title = "Novo Orçamento Inteligente" if form.is_new else "Editar Orçamento"
    with st.container(border=True):
        st.subheader(title)
        _render_attachments(state, form, services)
        st.divider()
        st.markdown("**2. Revisar Dados Extraídos (Conforme Planilha)**")
        render_flash(state)

        values = _render_fields(state, form)
        form.update(**values)
        override = _render_warnings(form.validate())

        col1, col2 = st.columns(2)
        if col1.button("Cancelar", width='stretch'):
            close_form(state)
            rerun()
        if col2.button("💾 Salvar Orçamento", type='primary', width='stretch'):
            _submit(state, form, override)


def _submit(state: MutableMapping, form: BudgetFormSession, override: bool) -> Any:
    with st.status("Salvando...", expanded=True) as status:
        def progress(label: str) -> None:
            status.update(label=label)
            status.write(label)

        try:
            committed = form.submit(confirm_override=override, on_progress=progress)
        except SubmissionBlocked as exc:
            status.update(label="Corrija os avisos antes de salvar.", state='error')
            for warning in exc.warnings:
                st.error(warning)
            return None
        status.update(label="Orçamento salvo!", state='complete')

    close_form(state)
    flash(state, f"Orçamento de {committed.client_name} salvo ({format_brl(committed.net_amount)} líquido).")
    rerun()
    return committed
