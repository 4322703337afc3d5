from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, List, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from ledger import LedgerTxn, Money, Party, SignedMoney, TxnKind

_CENTS = Decimal("0.01")


def _to_id(v):
    if v is None:
        return v
    return str(v).strip()


def _to_lower_str(v):
    if v is None:
        return v
    return str(v).strip().lower()


ApiId = Annotated[str, BeforeValidator(_to_id)]
OptionalApiId = Annotated[Optional[str], BeforeValidator(_to_id)]

UserRole = Literal["salesperson", "admin", "manager"]
PaymentMethod = Annotated[
    Literal["cash", "card", "mixed", "credit"], BeforeValidator(_to_lower_str)
]

# Backend role codes: S(aler), A(dmin), M(anager)
_ROLE_CODES = {"s": "salesperson", "a": "admin", "m": "manager"}
ROLE_CODES_BY_ROLE = {role: code.upper() for code, role in _ROLE_CODES.items()}


class ApiModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class User(ApiModel):
    id: ApiId
    username: str = ""
    name: str = ""
    role: UserRole = "salesperson"

    @model_validator(mode="before")
    @classmethod
    def _display_name(cls, data):
        # full_name may be null or missing; fall back to the login name
        if isinstance(data, dict):
            data = dict(data)
            data["username"] = data.get("username") or ""
            data["name"] = data.get("full_name") or data.get("name") or data["username"]
        return data

    @field_validator("role", mode="before")
    @classmethod
    def _map_role(cls, v):
        code = str(v or "").strip().lower()
        if code in _ROLE_CODES.values():
            return code
        return _ROLE_CODES.get(code, "salesperson")


class Category(ApiModel):
    id: ApiId
    name: str


class Product(ApiModel):
    id: ApiId
    name: str
    category: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("category_name", "category")
    )
    color: Optional[str] = None
    width: Optional[Decimal] = None
    height: Optional[Decimal] = None
    thickness: Optional[Decimal] = None
    quality: Optional[str] = None
    purchase_price: Optional[Money] = Field(
        default=None, validation_alias=AliasChoices("purchase_price", "arrival_price")
    )
    unit_price: Money = Field(validation_alias=AliasChoices("unit_price", "price"))
    stock_quantity: int = Field(
        default=0, validation_alias=AliasChoices("stock_quantity", "count", "quantity")
    )
    enabled: bool = True
    image_url: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def _category_label(cls, v):
        if isinstance(v, dict):
            return v.get("name")
        return None if v is None else str(v)

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity < 10


class Customer(ApiModel):
    id: ApiId
    name: str
    phone: str = ""
    address: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    debt: SignedMoney = None

    def to_party(self) -> Party:
        return Party(
            id=self.id, name=self.name, contact_info=self.phone, reported_debt=self.debt
        )


class Supplier(ApiModel):
    id: ApiId
    name: str
    phone: str = ""
    company: Optional[str] = None
    debt: SignedMoney = None

    def to_party(self) -> Party:
        contact = " / ".join(p for p in (self.phone, self.company or "") if p)
        return Party(
            id=self.id, name=self.name, contact_info=contact, reported_debt=self.debt
        )


class CustomerTransaction(ApiModel):
    id: ApiId
    customer_id: ApiId = Field(validation_alias=AliasChoices("customer_id", "customer"))
    customer_name: str = ""
    type: Annotated[Literal["purchase", "payment"], BeforeValidator(_to_lower_str)]
    amount: Money
    sale_id: OptionalApiId = None
    receipt_number: Optional[str] = None
    description: Optional[str] = None
    processed_by: Optional[str] = None
    created_at: datetime

    def to_ledger_txn(self) -> LedgerTxn:
        return LedgerTxn(
            id=self.id,
            party_id=self.customer_id,
            kind=TxnKind.DEBIT if self.type == "purchase" else TxnKind.CREDIT,
            amount=self.amount,
            timestamp=self.created_at,
            description=self.description,
        )


class SupplierTransaction(ApiModel):
    id: ApiId
    supplier_id: ApiId = Field(validation_alias=AliasChoices("supplier_id", "supplier"))
    type: Annotated[Literal["acceptance", "payment"], BeforeValidator(_to_lower_str)]
    amount: Money
    description: Optional[str] = None
    created_at: datetime

    def to_ledger_txn(self) -> LedgerTxn:
        return LedgerTxn(
            id=self.id,
            party_id=self.supplier_id,
            kind=TxnKind.DEBIT if self.type == "acceptance" else TxnKind.CREDIT,
            amount=self.amount,
            timestamp=self.created_at,
            description=self.description,
        )


class CuttingService(ApiModel):
    number_of_boards: int = Field(ge=1)
    price_per_cut: Money

    @computed_field
    @property
    def total(self) -> Decimal:
        return (self.price_per_cut * self.number_of_boards).quantize(_CENTS)


class EdgeBandingService(ApiModel):
    thickness: Decimal
    width: int = Field(ge=0)  # mm
    height: int = Field(ge=0)  # mm
    price_per_meter: Money

    @computed_field
    @property
    def linear_meters(self) -> Decimal:
        return Decimal(2 * (self.width + self.height)) / 1000

    @computed_field
    @property
    def total(self) -> Decimal:
        return (self.linear_meters * self.price_per_meter).quantize(
            _CENTS, rounding=ROUND_HALF_UP
        )


class CartItem(ApiModel):
    id: ApiId
    product: Product
    quantity: int = Field(ge=1)
    custom_width: Optional[int] = None
    custom_height: Optional[int] = None
    cutting_service: Optional[CuttingService] = None
    edge_banding_service: Optional[EdgeBandingService] = None

    @property
    def total(self) -> Decimal:
        total = self.product.unit_price * self.quantity
        if self.cutting_service:
            total += self.cutting_service.total
        if self.edge_banding_service:
            total += self.edge_banding_service.total
        return total.quantize(_CENTS)


class Sale(ApiModel):
    id: OptionalApiId = None
    receipt_number: Optional[str] = None
    salesperson_id: OptionalApiId = None
    salesperson_name: Optional[str] = None
    items: List[CartItem] = []
    subtotal: Money
    discount: Money = Decimal("0")
    total: Money
    payment_method: PaymentMethod = "cash"
    customer_id: OptionalApiId = None
    customer_name: Optional[str] = None
    amount_paid: Optional[Money] = None
    amount_due: Optional[Money] = None
    created_at: Optional[datetime] = None


class DebtStats(ApiModel):
    total_debt: SignedMoney = None
    debtor_customers: int = 0
    nasiya_sales: int = 0


class SupplierStats(ApiModel):
    total_suppliers: int = Field(
        default=0, validation_alias=AliasChoices("total_suppliers", "total_customers")
    )
    total_debt: SignedMoney = None


class IncomeStats(ApiModel):
    total_cutting_income: Money = Decimal("0")
    today_cutting_income: Money = Decimal("0")
    total_banding_income: Money = Decimal("0")
    today_banding_income: Money = Decimal("0")
    total_income: Money = Decimal("0")
    today_income: Money = Decimal("0")
