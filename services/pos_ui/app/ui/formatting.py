from decimal import ROUND_HALF_UP, Decimal

import pandas as pd

from config import CURRENCY_LABEL

STATUS_LABELS = {
    "owes": "Owes",
    "overpaid": "Overpaid",
    "settled": "No debt",
}


def money(amount, with_currency=True):
    """Whole currency units with digit grouping, e.g. ``1 250 000 UZS``."""
    value = Decimal(amount or 0).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    text = f"{value:,}".replace(",", " ")
    return f"{text} {CURRENCY_LABEL}" if with_currency else text


def timestamp(value):
    # pandas turns a missing date into NaT
    if value is None or pd.isna(value):
        return ""
    return value.strftime("%d %b %Y %H:%M")
