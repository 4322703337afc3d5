"""Customer and supplier balance reconciliation.

A party's position is folded from its transaction history: debits (sales to a
customer, goods accepted from a supplier) raise the outstanding amount and
credits (payments) lower it. The backend may also report an authoritative
debt figure that includes adjustments outside the fetched history; a non-zero
reported figure wins over the local sum.

All money is summed as integer minor units so the result does not depend on
the order of the input.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Iterable, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

MINOR_UNITS = 100
_QUANT = Decimal("0.01")


class InvalidAmountError(ValueError):
    pass


def parse_amount(value) -> Decimal:
    """Coerce an API amount (text, int, float or Decimal) to a money Decimal.

    Rejects booleans, non-numeric text, NaN/infinity and negative values.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(f"invalid amount: {value!r}")
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(str(value).strip().replace(",", ""))
    except InvalidOperation:
        raise InvalidAmountError(f"invalid amount: {value!r}") from None
    if not amount.is_finite():
        raise InvalidAmountError(f"invalid amount: {value!r}")
    if amount < 0:
        raise InvalidAmountError(f"amount must be >= 0, got {amount}")
    return amount.quantize(_QUANT, rounding=ROUND_HALF_UP)


def parse_signed_amount(value) -> Optional[Decimal]:
    # reported debt may be negative (overpayment) or missing
    # kept exact: a sub-cent figure is still a non-zero report
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidAmountError(f"invalid amount: {value!r}")
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(str(value).strip().replace(",", ""))
    except InvalidOperation:
        raise InvalidAmountError(f"invalid amount: {value!r}") from None
    if not amount.is_finite():
        raise InvalidAmountError(f"invalid amount: {value!r}")
    return amount


def to_minor_units(value: Decimal) -> int:
    return int((Decimal(value) * MINOR_UNITS).to_integral_value(rounding=ROUND_HALF_UP))


def from_minor_units(units: int) -> Decimal:
    return (Decimal(units) / MINOR_UNITS).quantize(_QUANT)


Money = Annotated[Decimal, BeforeValidator(parse_amount)]
SignedMoney = Annotated[Optional[Decimal], BeforeValidator(parse_signed_amount)]


class TxnKind(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class LedgerTxn(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    party_id: str
    kind: TxnKind
    amount: Money
    timestamp: datetime
    description: Optional[str] = None


class Party(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    contact_info: str = ""
    reported_debt: SignedMoney = Field(default=None)


@dataclass(frozen=True)
class BalanceResult:
    total_debits: Decimal
    total_credits: Decimal
    balance: Decimal

    @property
    def status(self) -> str:
        return debt_status(self.balance)


def debt_status(balance: Decimal) -> str:
    if balance > 0:
        return "owes"
    if balance < 0:
        return "overpaid"
    return "settled"


def compute_balance(
    party: Party,
    transactions: Iterable[LedgerTxn],
    *,
    zero_is_authoritative: bool = False,
) -> BalanceResult:
    """Fold ``transactions`` into totals for ``party``.

    Transactions of other parties are skipped. ``balance`` is the reported
    debt when the backend supplied a non-zero one, otherwise debits minus
    credits. A reported debt of exactly zero is treated as "not loaded yet"
    unless ``zero_is_authoritative`` is set. The check uses the reported
    figure as sent; it is rounded to minor units only once it has won.
    """
    debits = 0
    credits = 0
    for txn in transactions:
        if txn.party_id != party.id:
            continue
        if txn.kind is TxnKind.DEBIT:
            debits += to_minor_units(txn.amount)
        else:
            credits += to_minor_units(txn.amount)

    balance = debits - credits
    reported = party.reported_debt
    if reported is not None and (reported != 0 or zero_is_authoritative):
        balance = to_minor_units(reported)

    return BalanceResult(
        total_debits=from_minor_units(debits),
        total_credits=from_minor_units(credits),
        balance=from_minor_units(balance),
    )
