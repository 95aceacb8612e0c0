"""Tests for the budget create/edit session."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from construcost_dashboard.exceptions import ExtractionError, SessionClosedError, SubmissionBlocked
from construcost_dashboard.extraction import ExtractedBudget
from construcost_dashboard.form_session import (
    SYNC_STEPS,
    WARNING_AMOUNT,
    WARNING_CLIENT,
    WARNING_DESCRIPTION,
    WARNING_ORDER_DATE,
    BudgetFormSession,
    SessionState,
)
from construcost_dashboard.models import AttachedFile, BudgetStatus

from conftest import make_upload

TODAY = date(2024, 3, 15)
PDF_BYTES = b'%PDF-1.4 fake'


def _session(repository, budget=None, sleeps=None) -> BudgetFormSession:
    recorded = sleeps if sleeps is not None else []
    return BudgetFormSession(repository, budget, today=lambda: TODAY, sleep=recorded.append)


def _fill_valid(session: BudgetFormSession) -> None:
    session.update(client_name='NDI', service_description='PR0966 - Adequação', budget_amount='9842.83')


class FakeExtractionClient:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def extract_from_attachments(self, files):
        self.calls.append([f.name for f in files])
        if self.error is not None:
            raise self.error
        return self.result


# -- initialisation ----------------------------------------------------------

def test_new_session_defaults(empty_repository) -> None:
    session = _session(empty_repository)
    draft = session.draft
    assert session.state is SessionState.NEW
    assert session.is_new
    assert draft.id == ''
    assert draft.date == '2024-03-15'
    assert draft.status is BudgetStatus.PENDING
    assert draft.discount == Decimal('0')
    assert not (draft.order_confirmation or draft.invoice_sent or draft.send_to_client)
    assert draft.files == []


def test_edit_session_works_on_a_copy(repository) -> None:
    original = repository.get('1')
    session = _session(repository, original)
    session.update(client_name='Outro')
    assert session.state is SessionState.DRAFTING
    assert not session.is_new
    assert original.client_name == 'Construtora Exemplo Ltda'
    assert repository.get('1').client_name == 'Construtora Exemplo Ltda'


def test_update_rejects_unknown_fields(empty_repository) -> None:
    session = _session(empty_repository)
    with pytest.raises(ValueError):
        session.update(id='hack')


def test_update_coerces_values(empty_repository) -> None:
    session = _session(empty_repository)
    session.update(budget_amount=1500.5, status='Aprovado', order_number='  ', invoice_sent=1)
    assert session.draft.budget_amount == Decimal('1500.50')
    assert session.draft.status is BudgetStatus.APPROVED
    assert session.draft.order_number is None
    assert session.draft.invoice_sent is True


# -- attachments -------------------------------------------------------------

def test_attach_files_sets_description_from_latest_revision(empty_repository) -> None:
    session = _session(empty_repository)
    session.attach_files([
        make_upload('Orcamento.pdf', PDF_BYTES, 'application/pdf'),
        make_upload('Orcamento_Rev02.pdf', PDF_BYTES, 'application/pdf'),
        make_upload('Orcamento_v1.pdf', PDF_BYTES, 'application/pdf'),
    ])
    assert [f.name for f in session.draft.files] == ['Orcamento.pdf', 'Orcamento_Rev02.pdf', 'Orcamento_v1.pdf']
    assert session.draft.service_description == 'Orcamento_Rev02'
    assert session.state is SessionState.DRAFTING


def test_attach_without_revisions_uses_last_pdf(empty_repository) -> None:
    session = _session(empty_repository)
    session.attach_files([make_upload('A.pdf', PDF_BYTES), make_upload('B.pdf', PDF_BYTES)])
    assert session.draft.service_description == 'B'


def test_attach_never_overwrites_existing_description(empty_repository) -> None:
    session = _session(empty_repository)
    session.update(service_description='Adequação Elétrica')
    session.attach_files([make_upload('Proposta_rev5.pdf', PDF_BYTES)])
    assert session.draft.service_description == 'Adequação Elétrica'


def test_attach_across_batches_considers_all_files(empty_repository) -> None:
    session = _session(empty_repository)
    session.attach_files([make_upload('foto.png', b'\x89PNG\r\n\x1a\nxx', 'image/png')])
    assert session.draft.service_description == ''
    session.attach_files([make_upload('Escopo_rev3.pdf', PDF_BYTES)])
    assert session.draft.service_description == 'Escopo_rev3'
    assert [f.type for f in session.draft.files] == ['image', 'pdf']


def test_remove_file_and_linked_document(empty_repository) -> None:
    session = _session(empty_repository)
    added = session.attach_files([make_upload('PR0930 rev.01.pdf', PDF_BYTES), make_upload('x.pdf', PDF_BYTES)])
    assert session.linked_document().name == 'PR0930 rev.01.pdf'
    session.remove_file(added[0].id)
    assert [f.name for f in session.draft.files] == ['x.pdf']
    assert session.linked_document() is None


# -- extracted data ----------------------------------------------------------

def test_order_number_forces_approval(empty_repository) -> None:
    session = _session(empty_repository)
    message = session.apply_extracted_data(ExtractedBudget(order_number='4500694477', date='2022-07-05'))
    draft = session.draft
    assert draft.status is BudgetStatus.APPROVED
    assert draft.order_confirmation is True
    assert draft.order_date == '2022-07-05'
    assert draft.order_number == '4500694477'
    assert '4500694477' in message


def test_order_date_defaults_to_today_and_is_not_overwritten(repository) -> None:
    session = _session(repository)
    session.apply_extracted_data(ExtractedBudget(order_number='PO-1'))
    assert session.draft.order_date == '2024-03-15'

    existing = _session(repository, repository.get('1'))
    existing.apply_extracted_data(ExtractedBudget(order_number='PO-2', date='2022-01-01'))
    assert existing.draft.order_date == '2023-10-05'


def test_suggestions_only_fill_empty_fields(empty_repository) -> None:
    session = _session(empty_repository)
    session.update(client_name='Cliente Digitado')
    session.apply_extracted_data(ExtractedBudget(
        client_name='Cliente IA',
        service_description='PR0969 - CC ITU',
        budget_amount=Decimal('17794.03'),
        requester='Eng. Carlos',
        date='2022-07-10',
    ))
    draft = session.draft
    assert draft.client_name == 'Cliente Digitado'
    assert draft.service_description == 'PR0969 - CC ITU'
    assert draft.budget_amount == Decimal('17794.03')
    assert draft.requester == 'Eng. Carlos'
    # the draft already has today's date
    assert draft.date == '2024-03-15'
    assert draft.status is BudgetStatus.PENDING


def test_discount_suggestion_is_authoritative(empty_repository) -> None:
    session = _session(empty_repository)
    session.update(discount='350')
    session.apply_extracted_data(ExtractedBudget())
    assert session.draft.discount == Decimal('0')
    session.apply_extracted_data(ExtractedBudget(discount=Decimal('120.50')))
    assert session.draft.discount == Decimal('120.50')


def test_autofill_applies_client_result(empty_repository) -> None:
    session = _session(empty_repository)
    session.attach_files([make_upload('Pedido.pdf', PDF_BYTES)])
    client = FakeExtractionClient(result=ExtractedBudget(client_name='GI DE', order_number='50887'))
    message = session.autofill(client)
    assert client.calls == [['Pedido.pdf']]
    assert session.draft.client_name == 'GI DE'
    assert 'APROVADO' in message


def test_autofill_failure_leaves_draft_untouched(empty_repository) -> None:
    session = _session(empty_repository)
    session.attach_files([make_upload('Pedido.pdf', PDF_BYTES)])
    before = session.draft.to_dict()
    client = FakeExtractionClient(error=ExtractionError('boom'))
    with pytest.raises(ExtractionError):
        session.autofill(client)
    assert session.draft.to_dict() == before
    assert session.state is SessionState.DRAFTING


def test_autofill_requires_files(empty_repository) -> None:
    session = _session(empty_repository)
    client = FakeExtractionClient(result=ExtractedBudget())
    with pytest.raises(ExtractionError):
        session.autofill(client)
    assert client.calls == []


# -- validation & submission -------------------------------------------------

def test_validate_reports_all_missing_fields_in_order(empty_repository) -> None:
    session = _session(empty_repository)
    session.update(status=BudgetStatus.APPROVED)
    assert session.validate() == [WARNING_CLIENT, WARNING_DESCRIPTION, WARNING_AMOUNT, WARNING_ORDER_DATE]
    assert session.blocking_warnings() == [WARNING_CLIENT, WARNING_DESCRIPTION, WARNING_AMOUNT]


def test_submit_blocked_without_override(empty_repository) -> None:
    session = _session(empty_repository)
    with pytest.raises(SubmissionBlocked) as excinfo:
        session.submit()
    assert WARNING_CLIENT in excinfo.value.warnings
    assert session.state is SessionState.DRAFTING
    assert empty_repository.list() == []


def test_submit_with_override_persists(empty_repository) -> None:
    session = _session(empty_repository)
    committed = session.submit(confirm_override=True)
    assert committed.id
    assert session.state is SessionState.COMMITTED
    assert len(empty_repository.list()) == 1


def test_submit_runs_sync_phases_then_upserts(empty_repository) -> None:
    sleeps = []
    labels = []
    session = _session(empty_repository, sleeps=sleeps)
    _fill_valid(session)
    committed = session.submit(on_progress=labels.append)
    assert labels == [label for label, _ in SYNC_STEPS]
    assert len(sleeps) == len(SYNC_STEPS)
    assert empty_repository.get(committed.id).client_name == 'NDI'
    assert session.draft.id == committed.id


def test_advisory_warning_does_not_block(empty_repository) -> None:
    session = _session(empty_repository)
    _fill_valid(session)
    session.update(status='Aprovado')
    assert session.validate() == [WARNING_ORDER_DATE]
    session.submit()
    assert session.state is SessionState.COMMITTED


def test_editing_existing_budget_keeps_position(repository) -> None:
    session = _session(repository, repository.get('2'))
    session.update(client_name='Comercial Global Renomeada')
    session.submit()
    budgets = repository.list()
    assert [b.id for b in budgets] == ['1', '2', '3', '4']
    assert budgets[1].client_name == 'Comercial Global Renomeada'


def test_committed_session_rejects_mutation(empty_repository) -> None:
    session = _session(empty_repository)
    _fill_valid(session)
    session.submit()
    with pytest.raises(SessionClosedError):
        session.update(client_name='x')
    with pytest.raises(SessionClosedError):
        session.submit()


def test_failure_during_sync_persists_nothing(empty_repository) -> None:
    def failing_sleep(_seconds):
        raise RuntimeError('network down')

    session = BudgetFormSession(empty_repository, today=lambda: TODAY, sleep=failing_sleep)
    _fill_valid(session)
    with pytest.raises(RuntimeError):
        session.submit()
    assert empty_repository.list() == []
    assert session.state is SessionState.DRAFTING


def test_existing_files_are_kept_on_edit(repository) -> None:
    session = _session(repository, repository.get('1'))
    session.attach_files([make_upload('Planta_Baixa_v2.pdf', PDF_BYTES)])
    assert [f.name for f in session.draft.files] == ['Planta_Baixa_v1.pdf', 'Planta_Baixa_v2.pdf']
    # description already set, so the newer revision does not replace it
    assert session.draft.service_description.startswith('PR0930')
    assert isinstance(session.draft.files[0], AttachedFile)


def test_negative_money_is_normalised(empty_repository) -> None:
    session = _session(empty_repository)
    session.apply_extracted_data(ExtractedBudget(discount=Decimal('-500'), budget_amount=Decimal('-20')))
    assert session.draft.discount == Decimal('500.00')
    assert session.draft.budget_amount == Decimal('0.00')
    session.update(budget_amount='-1', discount=-35.5)
    assert session.draft.budget_amount == Decimal('0.00')
    assert session.draft.discount == Decimal('35.50')
