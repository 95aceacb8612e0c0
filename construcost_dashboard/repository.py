"""Budget and settings repositories over the key-value store.

Both repositories are constructed explicitly at startup (see
:mod:`construcost_dashboard.app_state`) and handed to whoever needs them.
Every operation is a full read-modify-write of the stored document.
"""

from __future__ import annotations

import copy
import logging
import secrets
import string
from typing import Any, Dict, List, Optional, Sequence

from .config import BUDGETS_KEY, SETTINGS_KEY
from .models import ZERO, AppSettings, Budget, BudgetStatus, DashboardStats
from .persistent_store import JsonKeyValueStore

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase
ID_LENGTH = 9

SEED_BUDGETS: List[Dict[str, Any]] = [
    {
        'id': '1',
        'date': '2023-10-01',
        'clientName': 'Construtora Exemplo Ltda',
        'serviceDescription': 'PR0930 rev.01 2022 - Expansão do Galpão',
        'budgetAmount': 150000,
        'discount': 5000,
        'orderConfirmation': True,
        'invoiceSent': True,
        'status': BudgetStatus.APPROVED.value,
        'orderDate': '2023-10-05',
        'orderNumber': 'PO-9981',
        'invoiceNumber': 'NF-2023-001',
        'sendToClient': True,
        'requester': 'João Silva',
        'files': [{'id': 'f1', 'name': 'Planta_Baixa_v1.pdf', 'url': '#', 'type': 'pdf'}],
    },
    {
        'id': '2',
        'date': '2023-10-15',
        'clientName': 'Comercial Global S.A.',
        'serviceDescription': 'PR0931 - Reforma do Escritório',
        'budgetAmount': 45000,
        'discount': 0,
        'orderConfirmation': False,
        'invoiceSent': False,
        'status': BudgetStatus.PENDING.value,
        'sendToClient': False,
        'requester': 'Maria Santos',
        'files': [],
    },
    {
        'id': '3',
        'date': '2023-10-20',
        'clientName': 'Indústrias Reunidas',
        'serviceDescription': 'PR0932 - Piso Fabril',
        'budgetAmount': 82000,
        'discount': 2000,
        'orderConfirmation': False,
        'invoiceSent': False,
        'status': BudgetStatus.NOT_APPROVED.value,
        'sendToClient': True,
        'requester': 'João Silva',
        'files': [],
    },
    {
        'id': '4',
        'date': '2023-11-01',
        'clientName': 'Tecnologia Inovadora',
        'serviceDescription': 'PR0933 - Refrigeração Sala de Servidores',
        'budgetAmount': 25000,
        'discount': 0,
        'orderConfirmation': True,
        'invoiceSent': False,
        'status': BudgetStatus.APPROVED.value,
        'orderDate': '2023-11-03',
        'orderNumber': 'PED-4420',
        'sendToClient': True,
        'requester': 'Pedro Souza',
        'files': [
            {'id': 'f2', 'name': 'Foto_Local.jpg', 'url': 'https://picsum.photos/200/300', 'type': 'image'}
        ],
    },
]


def generate_id(length: int = ID_LENGTH) -> str:
    """Random lowercase base-36 token."""
    return ''.join(secrets.choice(_ID_ALPHABET) for _ in range(length))


class BudgetRepository:
    """CRUD over the stored budget collection plus derived statistics."""

    def __init__(self, store: JsonKeyValueStore, key: str = BUDGETS_KEY,
                 seed: Optional[Sequence[Dict[str, Any]]] = None) -> None:
        self.store = store
        self.key = key
        self.seed = list(SEED_BUDGETS if seed is None else seed)

    def _load_raw(self) -> List[Dict[str, Any]]:
        data = self.store.load(self.key, self.seed)
        if not isinstance(data, list):
            logger.warning("Budget record %r is not a list; using seed data", self.key)
            return copy.deepcopy(self.seed)
        return [row for row in data if isinstance(row, dict)]

    def _write(self, budgets: Sequence[Budget]) -> None:
        self.store.store(self.key, [b.to_dict() for b in budgets])

    def list(self) -> List[Budget]:
        """All budgets in storage order."""
        return [Budget.from_dict(row) for row in self._load_raw()]

    def get(self, budget_id: str) -> Optional[Budget]:
        for budget in self.list():
            if budget.id == budget_id:
                return budget
        return None

    def upsert(self, budget: Budget) -> Budget:
        """Replace the record with the same id in place, or append a new one.

        A budget whose id is unknown (including the empty id of a new draft)
        receives a freshly generated id.  The caller's object is updated and
        returned.
        """
        budgets = self.list()
        for index, existing in enumerate(budgets):
            if budget.id and existing.id == budget.id:
                budgets[index] = copy.deepcopy(budget)
                self._write(budgets)
                logger.info("Updated budget %s", budget.id)
                return budget

        taken = {b.id for b in budgets}
        new_id = generate_id()
        while new_id in taken:
            new_id = generate_id()
        budget.id = new_id
        budgets.append(copy.deepcopy(budget))
        self._write(budgets)
        logger.info("Created budget %s for %r", budget.id, budget.client_name)
        return budget

    def delete(self, budget_id: str) -> None:
        """Remove the matching budget; a missing id is silently ignored."""
        budgets = self.list()
        remaining = [b for b in budgets if b.id != budget_id]
        self._write(remaining)
        if len(remaining) != len(budgets):
            logger.info("Deleted budget %s", budget_id)

    def replace_all(self, budgets: Sequence[Budget]) -> None:
        self._write(list(budgets))
        logger.info("Replaced budget collection with %d records", len(budgets))

    def compute_stats(self) -> DashboardStats:
        """Recompute dashboard figures from the current collection."""
        budgets = self.list()
        approved = [b for b in budgets if b.status is BudgetStatus.APPROVED]
        pending = [b for b in budgets if b.status is BudgetStatus.PENDING]
        rejected = [b for b in budgets if b.status is BudgetStatus.NOT_APPROVED]
        return DashboardStats(
            total_estimates=len(budgets),
            approved_count=len(approved),
            rejected_count=len(rejected),
            pending_count=len(pending),
            total_value_approved=sum((b.net_amount for b in approved), ZERO),
            total_value_pending=sum((b.net_amount for b in pending), ZERO),
            invoice_pending_count=sum(1 for b in approved if not b.invoice_sent),
        )


class SettingsRepository:
    """Load/save the singleton :class:`AppSettings` record."""

    def __init__(self, store: JsonKeyValueStore, key: str = SETTINGS_KEY) -> None:
        self.store = store
        self.key = key

    def load(self) -> AppSettings:
        data = self.store.load(self.key, None)
        if not isinstance(data, dict):
            return AppSettings()
        return AppSettings.from_dict(data)

    def save(self, settings: AppSettings) -> None:
        self.store.store(self.key, settings.to_dict())
        logger.info("Saved application settings (drive connected: %s)", settings.drive_connected)
