"""List filtering and tabular views over budgets."""

from __future__ import annotations

from typing import List, Sequence, Union

import pandas as pd

from .models import Budget, BudgetStatus

ALL_STATUSES = 'all'


def filter_budgets(
    budgets: Sequence[Budget],
    search: str = '',
    status: Union[str, BudgetStatus] = ALL_STATUSES,
) -> List[Budget]:
    """Case-insensitive search over client, description, requester and order number."""
    term = (search or '').strip().lower()
    wanted = None if status in (ALL_STATUSES, None, '') else BudgetStatus.parse(status)

    def matches(budget: Budget) -> bool:
        haystacks = [budget.client_name, budget.service_description, budget.requester, budget.order_number or '']
        if term and not any(term in h.lower() for h in haystacks):
            return False
        return wanted is None or budget.status is wanted

    return [b for b in budgets if matches(b)]


def budgets_to_frame(budgets: Sequence[Budget]) -> pd.DataFrame:
    """One row per budget with the columns shown in the list view."""
    columns = ['id', 'Data', 'Cliente', 'Descrição', 'Valor', 'Desconto', 'Líquido',
               'Status', 'Pedido', 'Nota Fiscal', 'Doc Ref']
    rows = [
        {
            'id': b.id,
            'Data': b.date,
            'Cliente': b.client_name,
            'Descrição': b.service_description,
            'Valor': float(b.budget_amount),
            'Desconto': float(b.discount),
            'Líquido': float(b.net_amount),
            'Status': b.status.value,
            'Pedido': b.order_number or '',
            'Nota Fiscal': b.invoice_number or '',
            'Doc Ref': b.files[0].name if b.files else '',
        }
        for b in budgets
    ]
    return pd.DataFrame(rows, columns=columns)


def monthly_values(budgets: Sequence[Budget]) -> pd.DataFrame:
    """Net value per month and status, months in chronological order."""
    frame = budgets_to_frame(budgets)
    if frame.empty:
        return pd.DataFrame(columns=['Mês', 'Status', 'Líquido'])
    frame['Data'] = pd.to_datetime(frame['Data'], errors='coerce')
    frame = frame.dropna(subset=['Data'])
    if frame.empty:
        return pd.DataFrame(columns=['Mês', 'Status', 'Líquido'])
    frame['Mês'] = frame['Data'].dt.to_period('M').astype(str)
    grouped = frame.groupby(['Mês', 'Status'], as_index=False)['Líquido'].sum()
    return grouped.sort_values(['Mês', 'Status']).reset_index(drop=True)
