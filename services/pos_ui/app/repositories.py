"""Per-entity caches over the REST client and the coordinator that composes them.

Each repository owns one kind of record and exposes ``fetch``, ``get_cached``
and ``invalidate``. ``AppStore`` wires them together, runs mutations through
the API and drops the caches a mutation makes stale.
"""

from __future__ import annotations

from typing import Callable, Dict, Generic, List, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from api import ApiError
from ledger import BalanceResult, compute_balance
from logging_setup import get_logger
from schemas import (
    ROLE_CODES_BY_ROLE,
    Category,
    Customer,
    CustomerTransaction,
    DebtStats,
    IncomeStats,
    Product,
    Sale,
    Supplier,
    SupplierStats,
    SupplierTransaction,
    User,
)

T = TypeVar("T")

_logger = get_logger("pos_ui.repositories")


def _unwrap(payload):
    # list endpoints may be paginated: {"results": [...]} / {"data": [...]}
    if isinstance(payload, dict):
        for key in ("results", "data"):
            if key in payload:
                return payload[key]
    return payload


class Repository(Generic[T]):
    """Cached result of one loader call.

    A fetch with the same non-None params as the cached one is served from memory;
    new params or ``force=True`` go to the network.
    """

    def __init__(self, name: str, loader: Callable[..., object], type_: object):
        self.name = name
        self._loader = loader
        self._adapter = TypeAdapter(type_)
        self._value: Optional[T] = None
        self._params: Optional[dict] = None

    def fetch(self, force: bool = False, **params) -> T:
        params = {k: v for k, v in params.items() if v is not None}
        if not force and self._value is not None and self._params == params:
            _logger.debug("cache:hit %s", self.name)
            return self._value
        _logger.debug("cache:miss %s params=%s", self.name, params)
        value = self._adapter.validate_python(_unwrap(self._loader(**params)))
        self._value = value
        self._params = params
        return value

    def get_cached(self) -> Optional[T]:
        return self._value

    def invalidate(self) -> None:
        if self._value is not None:
            _logger.debug("cache:invalidate %s", self.name)
        self._value = None
        self._params = None


class KeyedRepository(Generic[T]):
    """Cache keyed by an identifier, e.g. one transaction history per party."""

    def __init__(self, name: str, loader: Callable[[str], object], type_: object):
        self.name = name
        self._loader = loader
        self._adapter = TypeAdapter(type_)
        self._values: Dict[str, T] = {}

    def fetch(self, key: str, force: bool = False) -> T:
        key = str(key)
        if not force and key in self._values:
            _logger.debug("cache:hit %s[%s]", self.name, key)
            return self._values[key]
        _logger.debug("cache:miss %s[%s]", self.name, key)
        value = self._adapter.validate_python(_unwrap(self._loader(key)))
        self._values[key] = value
        return value

    def get_cached(self, key: str) -> Optional[T]:
        return self._values.get(str(key))

    def invalidate(self, key: Optional[str] = None) -> None:
        if key is None:
            self._values.clear()
        else:
            self._values.pop(str(key), None)
        _logger.debug("cache:invalidate %s[%s]", self.name, key if key is not None else "*")


class AppStore:
    def __init__(self, api):
        self.api = api

        self.products = Repository("products", api.list_products, List[Product])
        self.categories = Repository("categories", api.list_categories, List[Category])
        self.customers = Repository("customers", api.list_customers, List[Customer])
        self.suppliers = Repository("suppliers", api.list_suppliers, List[Supplier])
        self.users = Repository("users", api.list_users, List[User])
        self.sales = Repository("sales", api.list_sales, List[Sale])
        self.debt_stats = Repository("debt_stats", api.debt_stats, DebtStats)
        self.supplier_stats = Repository("supplier_stats", api.supplier_stats, SupplierStats)
        self.income_stats = Repository("income_stats", api.income_stats, IncomeStats)

        self.customer_transactions = KeyedRepository(
            "customer_transactions",
            api.list_customer_transactions,
            List[CustomerTransaction],
        )
        self.supplier_transactions = KeyedRepository(
            "supplier_transactions",
            api.list_supplier_transactions,
            List[SupplierTransaction],
        )

    # -------------------------
    # Lookups
    # -------------------------

    def find_customer(self, customer_id) -> Optional[Customer]:
        # the cached list may be a search result; fall back to the full list
        found = _find(self.customers.get_cached() or [], customer_id)
        if found is None:
            found = _find(self.customers.fetch(), customer_id)
        return found

    def find_supplier(self, supplier_id) -> Optional[Supplier]:
        found = _find(self.suppliers.get_cached() or [], supplier_id)
        if found is None:
            found = _find(self.suppliers.fetch(), supplier_id)
        return found

    def customer_history(self, customer_id) -> List[CustomerTransaction]:
        """Newest first; an unreachable backend or a malformed feed yields an empty history."""
        try:
            txns = self.customer_transactions.fetch(customer_id)
        except (ApiError, ValidationError) as e:
            _logger.warning("ledger:customer_history_failed id=%s: %s", customer_id, e)
            return []
        return sorted(txns, key=lambda t: t.created_at, reverse=True)

    def supplier_history(self, supplier_id) -> List[SupplierTransaction]:
        try:
            txns = self.supplier_transactions.fetch(supplier_id)
        except (ApiError, ValidationError) as e:
            _logger.warning("ledger:supplier_history_failed id=%s: %s", supplier_id, e)
            return []
        return sorted(txns, key=lambda t: t.created_at, reverse=True)

    # -------------------------
    # Balances
    # -------------------------

    def customer_balance(self, customer_id) -> BalanceResult:
        customer = self.find_customer(customer_id)
        if customer is None:
            raise KeyError(f"unknown customer {customer_id}")
        history = self.customer_history(customer.id)
        return compute_balance(customer.to_party(), [t.to_ledger_txn() for t in history])

    def supplier_balance(self, supplier_id) -> BalanceResult:
        supplier = self.find_supplier(supplier_id)
        if supplier is None:
            raise KeyError(f"unknown supplier {supplier_id}")
        history = self.supplier_history(supplier.id)
        return compute_balance(supplier.to_party(), [t.to_ledger_txn() for t in history])

    # -------------------------
    # Mutations
    # -------------------------

    def record_sale(self, sale: Sale) -> Sale:
        created = Sale.model_validate(
            self.api.create_sale(sale.model_dump(mode="json", exclude_none=True))
        )
        self.sales.invalidate()
        self.products.invalidate()
        self.income_stats.invalidate()
        if sale.customer_id:
            self._invalidate_customer(sale.customer_id)
        _logger.info(
            "sale:recorded receipt=%s total=%s method=%s",
            created.receipt_number, created.total, created.payment_method,
        )
        return created

    def record_customer_payment(self, customer_id, amount, description=None):
        result = self.api.add_customer_payment(customer_id, amount, description)
        self._invalidate_customer(customer_id)
        _logger.info("ledger:customer_payment id=%s amount=%s", customer_id, amount)
        return result

    def record_supplier_payment(self, supplier_id, amount, description=None):
        result = self.api.add_supplier_payment(supplier_id, amount, description)
        self._invalidate_supplier(supplier_id)
        _logger.info("ledger:supplier_payment id=%s amount=%s", supplier_id, amount)
        return result

    def record_acceptance(self, supplier_id, product_id, quantity, purchase_price, notes=None):
        result = self.api.add_supplier_acceptance(
            supplier_id,
            {
                "product": product_id,
                "quantity": quantity,
                "purchase_price": str(purchase_price),
                "notes": notes or "",
            },
        )
        self._invalidate_supplier(supplier_id)
        self.products.invalidate()
        _logger.info(
            "ledger:acceptance supplier=%s product=%s qty=%s", supplier_id, product_id, quantity
        )
        return result

    def save_customer(self, data, customer_id=None) -> Customer:
        if customer_id is None:
            raw = self.api.create_customer(data)
        else:
            raw = self.api.update_customer(customer_id, data)
        self.customers.invalidate()
        self.debt_stats.invalidate()
        return Customer.model_validate(raw)

    def delete_customer(self, customer_id) -> None:
        self.api.delete_customer(customer_id)
        self._invalidate_customer(customer_id)

    def save_supplier(self, data, supplier_id=None) -> Supplier:
        if supplier_id is None:
            raw = self.api.create_supplier(data)
        else:
            raw = self.api.update_supplier(supplier_id, data)
        self.suppliers.invalidate()
        self.supplier_stats.invalidate()
        return Supplier.model_validate(raw)

    def delete_supplier(self, supplier_id) -> None:
        self.api.delete_supplier(supplier_id)
        self._invalidate_supplier(supplier_id)

    def save_product(self, data, product_id=None) -> Product:
        if product_id is None:
            raw = self.api.create_product(data)
        else:
            raw = self.api.update_product(product_id, data)
        self.products.invalidate()
        return Product.model_validate(raw)

    def delete_product(self, product_id) -> None:
        self.api.delete_product(product_id)
        self.products.invalidate()

    def save_category(self, name, category_id=None) -> Category:
        if category_id is None:
            raw = self.api.create_category(name)
        else:
            raw = self.api.update_category(category_id, name)
        self.categories.invalidate()
        # products carry the category label
        self.products.invalidate()
        return Category.model_validate(raw)

    def delete_category(self, category_id) -> None:
        self.api.delete_category(category_id)
        self.categories.invalidate()
        self.products.invalidate()

    def save_user(self, data, user_id=None) -> User:
        """Create or update a user; ``data["role"]`` may be a role name or backend code."""
        data = dict(data)
        if "role" in data:
            data["role"] = ROLE_CODES_BY_ROLE.get(data["role"], data["role"])
        if user_id is not None and not data.get("password"):
            # keep the current password
            data.pop("password", None)
        if user_id is None:
            raw = self.api.create_user(data)
        else:
            raw = self.api.update_user(user_id, data)
        self.users.invalidate()
        _logger.info("users:saved username=%s role=%s", data.get("username"), data.get("role"))
        return User.model_validate(raw)

    def delete_user(self, user_id) -> None:
        self.api.delete_user(user_id)
        self.users.invalidate()

    def invalidate_all(self) -> None:
        for repo in (
            self.products, self.categories, self.customers, self.suppliers, self.users,
            self.sales, self.debt_stats, self.supplier_stats, self.income_stats,
            self.customer_transactions, self.supplier_transactions,
        ):
            repo.invalidate()

    def _invalidate_customer(self, customer_id) -> None:
        self.customers.invalidate()
        self.customer_transactions.invalidate(customer_id)
        self.debt_stats.invalidate()

    def _invalidate_supplier(self, supplier_id) -> None:
        self.suppliers.invalidate()
        self.supplier_transactions.invalidate(supplier_id)
        self.supplier_stats.invalidate()


def _find(items, item_id):
    item_id = str(item_id)
    return next((i for i in items if i.id == item_id), None)
