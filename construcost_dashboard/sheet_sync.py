"""Simulated Google Sheets / Drive integration.

No real API is called.  ``sync_master_sheet`` merges a fixed snapshot of the
"Gestão e Controle de Orçamentos" master sheet into the budget collection,
and the Drive helpers only flip the connection flags after a short delay that
mimics the OAuth round trip.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .config import scaled_delay
from .models import ZERO, AppSettings, Budget, BudgetStatus, to_money
from .repository import BudgetRepository

logger = logging.getLogger(__name__)

SYNC_DELAY_SECONDS = 2.0
CONNECT_DELAY_SECONDS = 2.0
IMPORTED_REQUESTER = 'Importado via Sheets'
CONNECTED_FOLDER_NAME = 'Gestão de Orçamentos / 2024 (Conectado)'


@dataclass(frozen=True)
class SheetRow:
    code: str
    description: str
    client: str
    value: str
    status: BudgetStatus
    po: Optional[str]
    date: str

    def to_budget(self) -> Budget:
        approved = self.status is BudgetStatus.APPROVED
        return Budget(
            date=self.date,
            client_name=self.client,
            service_description=self.description,
            budget_amount=to_money(self.value),
            discount=ZERO,
            order_confirmation=approved,
            invoice_sent=False,
            status=self.status,
            send_to_client=True,
            requester=IMPORTED_REQUESTER,
            order_number=self.po,
        )


MASTER_SHEET_ROWS: Sequence[SheetRow] = (
    SheetRow('PR0961', 'PR0961 rev.00 06.2022 - Gi De Diária Eletricista.xlsx', 'GI DE',
             '7321.87', BudgetStatus.APPROVED, '50887', '2022-06-01'),
    SheetRow('PR0966', 'PR0966 rev.00 07.2022 - CC COTIA - Adequação Elétrica', 'NDI',
             '9842.83', BudgetStatus.APPROVED, '4500694477', '2022-07-05'),
    SheetRow('PR0969', 'PR0969 rev.00 07.2022 - CC ITU - Adequação Elétrica', 'NDI',
             '17794.03', BudgetStatus.APPROVED, '8000016305', '2022-07-10'),
    SheetRow('PR0970', 'PR0970 rev.00 07.2022 - CC RIBEIRÃO PIRES - Adequação Elétrica', 'NDI',
             '22810.03', BudgetStatus.APPROVED, '8000015984', '2022-07-12'),
    SheetRow('PR0930', 'PR0930 rev.01 01.2022.doc', 'CLIENTE DIVERSOS',
             '0', BudgetStatus.NOT_APPROVED, None, '2022-01-15'),
)


@dataclass
class SyncResult:
    added: int = 0
    already_present: int = 0

    @property
    def message(self) -> str:
        if self.added:
            return (
                "Sincronização concluída com sucesso! "
                f"{self.added} novos orçamentos baixados da Planilha Mestra; "
                f"{self.already_present} já estavam atualizados."
            )
        return "Sincronização concluída. A Planilha Mestra não possui novos registros desde a última atualização."


def sync_master_sheet(
    repository: BudgetRepository,
    rows: Sequence[SheetRow] = MASTER_SHEET_ROWS,
    sleep: Callable[[float], None] = time.sleep,
) -> SyncResult:
    """Add sheet rows whose code is not yet in any budget description."""
    sleep(scaled_delay(SYNC_DELAY_SECONDS))
    existing = repository.list()
    result = SyncResult()
    for row in rows:
        if any(row.code in b.service_description for b in existing):
            result.already_present += 1
            continue
        repository.upsert(row.to_budget())
        result.added += 1
    logger.info("Master sheet sync: %d added, %d already present", result.added, result.already_present)
    return result


def connect_drive(settings: AppSettings, sleep: Callable[[float], None] = time.sleep) -> AppSettings:
    """Mark Drive as connected after a simulated authorization delay."""
    sleep(scaled_delay(CONNECT_DELAY_SECONDS))
    settings.drive_connected = True
    settings.drive_folder_name = CONNECTED_FOLDER_NAME
    if settings.simulation_mode:
        logger.info("Drive connected in simulation mode (no API key configured)")
    return settings


def disconnect_drive(settings: AppSettings) -> AppSettings:
    settings.drive_connected = False
    settings.drive_folder_name = ''
    return settings
