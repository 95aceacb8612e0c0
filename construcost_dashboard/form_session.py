"""In-memory edit session for a single budget.

A session owns a deep copy of the budget being edited (the *draft*).  Uploads,
user edits and AI suggestions are merged into the draft; ``submit`` validates
it, plays the simulated Sheets/Drive sync and hands the result to the
repository.

States::

    NEW -> DRAFTING -> SUBMITTING -> COMMITTED
                 ^          |
                 +----------+  (blocked submission or failure)
"""

from __future__ import annotations

import copy
import logging
import time
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .attachments import attach_upload
from .config import scaled_delay
from .exceptions import ExtractionError, SessionClosedError, SubmissionBlocked
from .extraction import DocumentExtractionClient, ExtractedBudget
from .models import AttachedFile, Budget, BudgetStatus, to_amount, to_discount
from .repository import BudgetRepository
from .revisions import select_reference_document, strip_extension

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    NEW = 'new'
    DRAFTING = 'drafting'
    SUBMITTING = 'submitting'
    COMMITTED = 'committed'


# How each extracted field is merged into the draft
OVERWRITE_IF_EMPTY = 'overwrite-if-empty'
ALWAYS_OVERWRITE = 'always-overwrite'
NEVER = 'never'

EXTRACTION_FIELD_POLICY: Dict[str, str] = {
    'client_name': OVERWRITE_IF_EMPTY,
    'service_description': OVERWRITE_IF_EMPTY,
    'budget_amount': OVERWRITE_IF_EMPTY,
    'date': OVERWRITE_IF_EMPTY,
    'requester': OVERWRITE_IF_EMPTY,
    'order_number': OVERWRITE_IF_EMPTY,
    'discount': ALWAYS_OVERWRITE,
}

SYNC_STEPS: Tuple[Tuple[str, float], ...] = (
    ('Conectando ao Google Sheets...', 0.6),
    ('Atualizando linha na Planilha Mestra...', 0.8),
    ('Salvando arquivos no Drive...', 0.4),
)

# Warnings containing this word are advisory and never block a submission
RECOMMENDED_MARKER = 'Recomendado'

WARNING_CLIENT = 'Nome do Cliente é obrigatório.'
WARNING_DESCRIPTION = 'Descrição do Serviço é obrigatória.'
WARNING_AMOUNT = 'Valor do orçamento deve ser maior que 0.'
WARNING_ORDER_DATE = 'Recomendado: orçamentos aprovados devem ter uma Data do Pedido.'

_MONEY_FIELDS = {'budget_amount', 'discount'}
_BOOL_FIELDS = {'order_confirmation', 'invoice_sent', 'send_to_client'}
_OPTIONAL_FIELDS = {'order_date', 'order_number', 'invoice_number'}
_TEXT_FIELDS = {'date', 'client_name', 'service_description', 'requester'}
EDITABLE_FIELDS = _MONEY_FIELDS | _BOOL_FIELDS | _OPTIONAL_FIELDS | _TEXT_FIELDS | {'status'}


def new_draft(today: date) -> Budget:
    return Budget(date=today.isoformat(), status=BudgetStatus.PENDING)


def _coerce_field(name: str, value: Any) -> Any:
    if name == 'budget_amount':
        return to_amount(value)
    if name == 'discount':
        return to_discount(value)
    if name in _BOOL_FIELDS:
        return bool(value)
    if name == 'status':
        return BudgetStatus.parse(value)
    if name in _OPTIONAL_FIELDS:
        text = str(value).strip() if value is not None else ''
        return text or None
    return '' if value is None else str(value)


class BudgetFormSession:
    """Draft lifecycle for creating or editing one budget."""

    def __init__(
        self,
        repository: BudgetRepository,
        budget: Optional[Budget] = None,
        today: Callable[[], date] = date.today,
        sleep: Callable[[float], None] = time.sleep,
        sync_steps: Sequence[Tuple[str, float]] = SYNC_STEPS,
    ) -> None:
        self.repository = repository
        self._today = today
        self._sleep = sleep
        self.sync_steps = tuple(sync_steps)
        self.is_new = budget is None or not budget.id
        if budget is None:
            self.draft = new_draft(today())
            self.state = SessionState.NEW
        else:
            self.draft = copy.deepcopy(budget)
            self.state = SessionState.DRAFTING

    # Internal ----------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self.state is SessionState.COMMITTED:
            raise SessionClosedError("Budget session already committed")

    def _touch(self) -> None:
        self._ensure_open()
        self.state = SessionState.DRAFTING

    # Editing -----------------------------------------------------------------

    def update(self, **fields: Any) -> None:
        """Apply user edits by field name."""
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown budget field(s): {', '.join(sorted(unknown))}")
        self._touch()
        for name, value in fields.items():
            setattr(self.draft, name, _coerce_field(name, value))

    def attach_files(self, raw_files: Iterable[Any]) -> List[AttachedFile]:
        """Read uploads completely, append them, then refresh the doc reference."""
        self._ensure_open()
        new_files = [attach_upload(upload) for upload in raw_files]
        if not new_files:
            return []
        self._touch()
        self.draft.files.extend(new_files)
        logger.debug("Attached %d file(s) to draft", len(new_files))
        self._apply_reference_document()
        return new_files

    def _apply_reference_document(self) -> None:
        latest = select_reference_document(self.draft.files)
        if latest is not None and not self.draft.service_description:
            self.draft.service_description = strip_extension(latest.name)

    def remove_file(self, file_id: str) -> None:
        self._touch()
        self.draft.files = [f for f in self.draft.files if f.id != file_id]

    def linked_document(self) -> Optional[AttachedFile]:
        """Attachment the current description refers to, if any."""
        description = self.draft.service_description
        if not description:
            return None
        for attachment in self.draft.files:
            if description in attachment.name or strip_extension(attachment.name) in description:
                return attachment
        return None

    # AI suggestions ----------------------------------------------------------

    def apply_extracted_data(self, extracted: ExtractedBudget) -> str:
        """Merge AI suggestions into the draft following the field policy table."""
        self._touch()
        for name, policy in EXTRACTION_FIELD_POLICY.items():
            suggestion = getattr(extracted, name)
            if policy == ALWAYS_OVERWRITE:
                setattr(self.draft, name, _coerce_field(name, suggestion))
            elif policy == OVERWRITE_IF_EMPTY:
                if suggestion and not getattr(self.draft, name):
                    setattr(self.draft, name, _coerce_field(name, suggestion))

        if extracted.order_number:
            self.draft.status = BudgetStatus.APPROVED
            self.draft.order_confirmation = True
            if not self.draft.order_date:
                self.draft.order_date = extracted.date or self._today().isoformat()
            return f"Pedido identificado ({extracted.order_number})! Orçamento APROVADO."
        return 'Dados extraídos dos arquivos com sucesso!'

    def autofill(self, client: DocumentExtractionClient) -> str:
        """Run extraction over the attached files and merge the result.

        On failure the draft is left untouched and ``ExtractionError``
        propagates to the caller.
        """
        self._touch()
        if not self.draft.files:
            raise ExtractionError('Por favor, anexe os arquivos primeiro.')
        extracted = client.extract_from_attachments(self.draft.files)
        return self.apply_extracted_data(extracted)

    # Validation & submission -------------------------------------------------

    def validate(self) -> List[str]:
        warnings: List[str] = []
        if not self.draft.client_name:
            warnings.append(WARNING_CLIENT)
        if not self.draft.service_description:
            warnings.append(WARNING_DESCRIPTION)
        if self.draft.budget_amount <= 0:
            warnings.append(WARNING_AMOUNT)
        if self.draft.status is BudgetStatus.APPROVED and not self.draft.order_date:
            warnings.append(WARNING_ORDER_DATE)
        return warnings

    def blocking_warnings(self) -> List[str]:
        return [w for w in self.validate() if RECOMMENDED_MARKER not in w]

    def submit(
        self,
        confirm_override: bool = False,
        on_progress: Optional[Callable[[str], None]] = None,
    ) -> Budget:
        """Validate, play the sync phases and persist the draft.

        Raises:
            SubmissionBlocked: blocking warnings exist and no override was given
            SessionClosedError: the session was already committed
        """
        self._ensure_open()
        blocking = self.blocking_warnings()
        if blocking and not confirm_override:
            self.state = SessionState.DRAFTING
            raise SubmissionBlocked(blocking)

        self.state = SessionState.SUBMITTING
        try:
            for label, seconds in self.sync_steps:
                if on_progress is not None:
                    on_progress(label)
                self._sleep(scaled_delay(seconds))
            committed = self.repository.upsert(copy.deepcopy(self.draft))
        except Exception:
            self.state = SessionState.DRAFTING
            logger.exception("Budget submission failed")
            raise

        self.draft.id = committed.id
        self.is_new = False
        self.state = SessionState.COMMITTED
        logger.info("Committed budget %s", committed.id)
        return committed
