"""Domain records for budgets, attachments and application settings.

Records are plain dataclasses.  ``to_dict``/``from_dict`` translate to and
from the camelCase JSON documents kept in the store, so a backup file written
by the dashboard can be read back without any mapping layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Optional

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
    """Coerce a JSON number/string into a cent-quantized ``Decimal``.

    ``None``, empty strings and unparseable values become zero.
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, bool):
        return ZERO
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        return ZERO
    if not amount.is_finite():
        return ZERO
    return amount.quantize(CENT)


def to_amount(value: Any) -> Decimal:
    """Money that cannot be negative; negative inputs clamp to zero."""
    return max(to_money(value), ZERO)


def to_discount(value: Any) -> Decimal:
    """Discounts are stored as positive deductions whatever sign they arrive with."""
    return abs(to_money(value))


def money_to_json(value: Decimal) -> float | int:
    """Render money as a JSON number (integers stay integral).

    Floats carry 15 significant digits exactly, so amounts up to
    R$ 9.999.999.999.999,99 survive a write/read cycle unchanged.
    """
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text else None


class BudgetStatus(str, Enum):
    PENDING = "Pendente"
    APPROVED = "Aprovado"
    NOT_APPROVED = "Não Aprovado"

    @classmethod
    def parse(cls, value: Any) -> "BudgetStatus":
        """Accept either the stored label or the member name."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if value in (member.value, member.name):
                return member
        return cls.PENDING


FILE_TYPES = ("image", "pdf", "spreadsheet", "other")


@dataclass
class AttachedFile:
    id: str
    name: str
    url: str
    type: str = "other"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "url": self.url, "type": self.type}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AttachedFile":
        file_type = data.get("type") or "other"
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            url=str(data.get("url") or ""),
            type=file_type if file_type in FILE_TYPES else "other",
        )

    @property
    def is_pdf(self) -> bool:
        return self.type == "pdf" or self.name.lower().endswith(".pdf")


@dataclass
class Budget:
    """A client quote tracked through its approval lifecycle."""

    id: str = ""
    date: str = ""
    client_name: str = ""
    service_description: str = ""
    budget_amount: Decimal = ZERO
    discount: Decimal = ZERO
    order_confirmation: bool = False
    invoice_sent: bool = False
    status: BudgetStatus = BudgetStatus.PENDING
    order_date: Optional[str] = None
    order_number: Optional[str] = None
    invoice_number: Optional[str] = None
    send_to_client: bool = False
    requester: str = ""
    files: List[AttachedFile] = field(default_factory=list)

    @property
    def net_amount(self) -> Decimal:
        return self.budget_amount - self.discount

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "date": self.date,
            "clientName": self.client_name,
            "serviceDescription": self.service_description,
            "budgetAmount": money_to_json(self.budget_amount),
            "discount": money_to_json(self.discount),
            "orderConfirmation": self.order_confirmation,
            "invoiceSent": self.invoice_sent,
            "status": self.status.value,
            "sendToClient": self.send_to_client,
            "requester": self.requester,
            "files": [f.to_dict() for f in self.files],
        }
        # Optional order fields are omitted rather than written as null
        for key, value in (
            ("orderDate", self.order_date),
            ("orderNumber", self.order_number),
            ("invoiceNumber", self.invoice_number),
        ):
            if value:
                payload[key] = value
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Budget":
        files = data.get("files") or []
        if not isinstance(files, list):
            files = []
        return cls(
            id=str(data.get("id") or ""),
            date=str(data.get("date") or ""),
            client_name=str(data.get("clientName") or ""),
            service_description=str(data.get("serviceDescription") or ""),
            budget_amount=to_amount(data.get("budgetAmount")),
            discount=to_discount(data.get("discount")),
            order_confirmation=bool(data.get("orderConfirmation", False)),
            invoice_sent=bool(data.get("invoiceSent", False)),
            status=BudgetStatus.parse(data.get("status")),
            order_date=_optional_str(data.get("orderDate")),
            order_number=_optional_str(data.get("orderNumber")),
            invoice_number=_optional_str(data.get("invoiceNumber")),
            send_to_client=bool(data.get("sendToClient", False)),
            requester=str(data.get("requester") or ""),
            files=[AttachedFile.from_dict(f) for f in files if isinstance(f, dict)],
        )


@dataclass
class AppSettings:
    drive_connected: bool = False
    drive_folder_name: str = ""
    auto_sync: bool = False
    email_notifications: bool = True
    google_client_id: str = ""
    google_api_key: str = ""
    google_sheet_id: str = ""

    @property
    def simulation_mode(self) -> bool:
        """Connected without real credentials; sheet data is simulated."""
        return self.drive_connected and not self.google_api_key

    def to_dict(self) -> Dict[str, Any]:
        return {
            "driveConnected": self.drive_connected,
            "driveFolderName": self.drive_folder_name,
            "autoSync": self.auto_sync,
            "emailNotifications": self.email_notifications,
            "googleClientId": self.google_client_id,
            "googleApiKey": self.google_api_key,
            "googleSheetId": self.google_sheet_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppSettings":
        return cls(
            drive_connected=bool(data.get("driveConnected", False)),
            drive_folder_name=str(data.get("driveFolderName") or ""),
            auto_sync=bool(data.get("autoSync", False)),
            email_notifications=bool(data.get("emailNotifications", True)),
            google_client_id=str(data.get("googleClientId") or ""),
            google_api_key=str(data.get("googleApiKey") or ""),
            google_sheet_id=str(data.get("googleSheetId") or ""),
        )


@dataclass
class DashboardStats:
    total_estimates: int = 0
    approved_count: int = 0
    rejected_count: int = 0
    pending_count: int = 0
    total_value_approved: Decimal = ZERO
    total_value_pending: Decimal = ZERO
    invoice_pending_count: int = 0
