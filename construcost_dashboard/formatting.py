"""Formatting utilities for Brazilian currency and text display."""

from __future__ import annotations

from decimal import Decimal
from typing import Union

Number = Union[Decimal, float, int]


def format_brl(amount: Number, include_sign: bool = True) -> str:
    """Format an amount the pt-BR way.

    Example:
        >>> format_brl(Decimal("1234.56"))
        'R$ 1.234,56'
        >>> format_brl(1234.5, include_sign=False)
        '1.234,50'
    """
    formatted = f"{Decimal(str(amount)):,.2f}"
    # swap the US separators for pt-BR ones
    formatted = formatted.replace(',', '_').replace('.', ',').replace('_', '.')
    return f"R$ {formatted}" if include_sign else formatted


def escape_currency_for_markdown(amount: Number) -> str:
    """Format an amount and escape ``$`` so markdown doesn't start LaTeX math.

    Example:
        >>> escape_currency_for_markdown(1234.56)
        'R\\\\$ 1.234,56'
    """
    return format_brl(amount).replace("$", "\\$")
