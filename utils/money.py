# utils/money.py
"""Fixed-point helpers for currency amounts (two decimal places)."""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Union[Decimal, int, str]) -> Decimal:
     """Quantize to cents. Floats are rejected so binary rounding never leaks in."""
     if isinstance(value, float):
          raise TypeError("Monetary amounts must not be floats")
     return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Decimal]) -> Decimal:
     return to_money(sum(values, ZERO))


def format_money(value: Decimal) -> str:
     return f"{to_money(value):.2f}"
