from __future__ import annotations

from decimal import Decimal

import plotly.graph_objects as go
import pytest

from construcost_dashboard.filters import budgets_to_frame, filter_budgets, monthly_values
from construcost_dashboard.formatting import escape_currency_for_markdown, format_brl
from construcost_dashboard.models import BudgetStatus, DashboardStats
from construcost_dashboard.visualization import create_monthly_value_chart, create_status_pie_chart


def test_filter_by_search_term_is_case_insensitive(repository) -> None:
    budgets = repository.list()
    assert [b.id for b in filter_budgets(budgets, 'comercial')] == ['2']
    assert [b.id for b in filter_budgets(budgets, 'joão')] == ['1', '3']
    assert [b.id for b in filter_budgets(budgets, 'ped-4420')] == ['4']


def test_filter_by_status(repository) -> None:
    budgets = repository.list()
    assert [b.id for b in filter_budgets(budgets, status=BudgetStatus.APPROVED)] == ['1', '4']
    assert [b.id for b in filter_budgets(budgets, status='Não Aprovado')] == ['3']
    assert len(filter_budgets(budgets, status='all')) == 4


def test_filter_combines_search_and_status(repository) -> None:
    budgets = repository.list()
    assert filter_budgets(budgets, 'joão', BudgetStatus.APPROVED)[0].id == '1'
    assert filter_budgets(budgets, 'inexistente') == []


def test_budgets_to_frame_columns(repository) -> None:
    frame = budgets_to_frame(repository.list())
    assert list(frame.columns) == [
        'id', 'Data', 'Cliente', 'Descrição', 'Valor', 'Desconto', 'Líquido',
        'Status', 'Pedido', 'Nota Fiscal', 'Doc Ref',
    ]
    first = frame.iloc[0]
    assert first['Líquido'] == pytest.approx(145000.0)
    assert first['Doc Ref'] == 'Planta_Baixa_v1.pdf'
    assert frame.iloc[1]['Pedido'] == ''


def test_monthly_values_groups_by_month_and_status(repository) -> None:
    monthly = monthly_values(repository.list())
    rows = {(r['Mês'], r['Status']): r['Líquido'] for _, r in monthly.iterrows()}
    assert rows[('2023-10', 'Aprovado')] == pytest.approx(145000.0)
    assert rows[('2023-10', 'Pendente')] == pytest.approx(45000.0)
    assert rows[('2023-11', 'Aprovado')] == pytest.approx(25000.0)
    assert list(monthly['Mês']) == sorted(monthly['Mês'])


def test_monthly_values_empty() -> None:
    assert monthly_values([]).empty


@pytest.mark.parametrize(
    ('amount', 'expected'),
    [
        (Decimal('1234.56'), 'R$ 1.234,56'),
        (0, 'R$ 0,00'),
        (1500000, 'R$ 1.500.000,00'),
        (Decimal('-50.5'), 'R$ -50,50'),
    ],
)
def test_format_brl(amount, expected: str) -> None:
    assert format_brl(amount) == expected


def test_format_brl_without_sign_and_markdown_escape() -> None:
    assert format_brl(1234.5, include_sign=False) == '1.234,50'
    assert escape_currency_for_markdown(10) == 'R\\$ 10,00'


def test_status_pie_chart(repository) -> None:
    fig = create_status_pie_chart(repository.compute_stats())
    assert isinstance(fig, go.Figure)
    assert sorted(fig.data[0].values) == [1, 1, 2]


def test_charts_handle_empty_input() -> None:
    empty_pie = create_status_pie_chart(DashboardStats())
    assert len(empty_pie.data) == 0
    empty_bar = create_monthly_value_chart(monthly_values([]))
    assert len(empty_bar.data) == 0


def test_monthly_chart_has_trace_per_status(repository) -> None:
    fig = create_monthly_value_chart(monthly_values(repository.list()))
    assert {trace.name for trace in fig.data} == {'Aprovado', 'Pendente', 'Não Aprovado'}
