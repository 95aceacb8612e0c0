"""JSON backup export and restore for the budget collection."""

from __future__ import annotations

import json
from datetime import date
from typing import List, Optional, Sequence

from .models import Budget


def backup_filename(today: Optional[date] = None) -> str:
    day = today or date.today()
    return f"backup_orcamentos_{day.isoformat()}.json"


def export_backup(budgets: Sequence[Budget]) -> str:
    """Serialize the full collection as a pretty-printed JSON array."""
    return json.dumps([b.to_dict() for b in budgets], indent=2, ensure_ascii=False)


def import_backup(text: str | bytes) -> List[Budget]:
    """Parse a backup document produced by :func:`export_backup`.

    Raises:
        ValueError: if the document is not valid JSON or not a list of records
    """
    if isinstance(text, bytes):
        text = text.decode('utf-8')
    data = json.loads(text)
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise ValueError("Backup must be a JSON list of budget records")
    return [Budget.from_dict(row) for row in data]
