from decimal import Decimal

import pytest

from api import ApiError
from repositories import AppStore, KeyedRepository, Repository
from schemas import Customer, Sale


class _FakeApi:
    def __init__(self):
        self.calls = []
        self.customers = [
            {"id": 1, "name": "Ivan", "phone": "+998901234567"},
            {"id": 2, "name": "Maria", "phone": "+998907654321", "debt": "500"},
        ]
        self.history = {
            "1": [
                {"id": 1, "customer": 1, "type": "purchase", "amount": "850000",
                 "created_at": "2025-03-01T10:00:00"},
                {"id": 2, "customer": 1, "type": "payment", "amount": "400000",
                 "created_at": "2025-03-02T10:00:00"},
            ],
            "2": [
                {"id": 3, "customer": 2, "type": "purchase", "amount": "100",
                 "created_at": "2025-03-01T10:00:00"},
            ],
        }
        self.suppliers = [{"id": 9, "name": "Kronospan", "phone": "1"}]
        self.fail_history = False

    def list_customers(self, search=None):
        self.calls.append(("list_customers", search))
        if search:
            return [c for c in self.customers if search.lower() in c["name"].lower()]
        return {"results": self.customers}

    def list_customer_transactions(self, customer_id):
        self.calls.append(("list_customer_transactions", customer_id))
        if self.fail_history:
            raise ApiError(500, "boom")
        return self.history.get(customer_id, [])

    def list_suppliers(self, search=None):
        self.calls.append(("list_suppliers", search))
        return self.suppliers

    def list_supplier_transactions(self, supplier_id):
        self.calls.append(("list_supplier_transactions", supplier_id))
        return [
            {"id": 1, "supplier": 9, "type": "acceptance", "amount": "3500000",
             "created_at": "2025-03-01T10:00:00"},
            {"id": 2, "supplier": 9, "type": "payment", "amount": "1000000",
             "created_at": "2025-03-03T10:00:00"},
        ]

    def add_customer_payment(self, customer_id, amount, description=None):
        self.calls.append(("add_customer_payment", customer_id, amount))
        self.history[str(customer_id)].append(
            {"id": 99, "customer": customer_id, "type": "payment", "amount": str(amount),
             "created_at": "2025-03-05T10:00:00"}
        )
        return {"id": 99}

    def add_supplier_acceptance(self, supplier_id, data):
        self.calls.append(("add_supplier_acceptance", supplier_id, data))
        return {"id": 5}

    def create_sale(self, data):
        self.calls.append(("create_sale", data))
        return {**data, "id": 77, "receipt_number": "R-077"}

    def __getattr__(self, name):
        # loaders the tests do not exercise
        if name.startswith(("list_", "debt_", "supplier_", "income_")):
            return lambda *a, **k: []
        raise AttributeError(name)


@pytest.fixture
def api():
    return _FakeApi()


@pytest.fixture
def store(api):
    return AppStore(api)


def _count(api, name):
    return sum(1 for c in api.calls if c[0] == name)


def test_repository_serves_repeat_fetches_from_cache(api, store):
    first = store.customers.fetch()
    second = store.customers.fetch()
    assert first is second
    assert _count(api, "list_customers") == 1
    assert all(isinstance(c, Customer) for c in first)


def test_repository_refetches_on_new_params_force_or_invalidate(api, store):
    store.customers.fetch()
    assert [c.name for c in store.customers.fetch(search="mar")] == ["Maria"]
    store.customers.fetch(search="mar", force=True)
    store.customers.invalidate()
    assert store.customers.get_cached() is None
    store.customers.fetch(search="mar")
    assert _count(api, "list_customers") == 4


def test_keyed_repository_invalidates_one_key():
    calls = []
    repo = KeyedRepository("hist", lambda key: calls.append(key) or [key], list)
    repo.fetch("a")
    repo.fetch("b")
    repo.invalidate("a")
    assert repo.get_cached("a") is None
    assert repo.get_cached("b") == ["b"]
    repo.fetch("a")
    repo.fetch("b")
    assert calls == ["a", "b", "a"]
    repo.invalidate()
    assert repo.get_cached("b") is None


def test_repository_loader_errors_propagate():
    def boom():
        raise ApiError(503, "down")

    repo = Repository("stats", boom, dict)
    with pytest.raises(ApiError):
        repo.fetch()
    assert repo.get_cached() is None


def test_customer_balance_folds_history(store):
    res = store.customer_balance(1)
    assert res.total_debits == Decimal("850000")
    assert res.total_credits == Decimal("400000")
    assert res.balance == Decimal("450000")


def test_customer_balance_prefers_reported_debt(store):
    res = store.customer_balance("2")
    assert res.total_debits == Decimal("100")
    assert res.balance == Decimal("500")


def test_history_failure_folds_empty_list(api, store):
    api.fail_history = True
    res = store.customer_balance(1)
    assert res.total_debits == 0
    assert res.balance == 0
    assert store.customer_history(1) == []


def test_malformed_history_row_folds_empty_list(api, store):
    api.history["2"].append(
        {"id": 4, "customer": 2, "type": "refund", "amount": "-10",
         "created_at": "2025-03-04T10:00:00"}
    )
    res = store.customer_balance(2)
    assert res.total_debits == 0
    assert res.balance == Decimal("500")
    assert store.customer_history(2) == []


def test_history_is_newest_first(store):
    assert [t.id for t in store.customer_history(1)] == ["2", "1"]


def test_unknown_customer_raises_key_error(store):
    with pytest.raises(KeyError):
        store.customer_balance(404)


def test_find_customer_falls_back_from_search_results(api, store):
    store.customers.fetch(search="mar")
    assert store.find_customer(1).name == "Ivan"


def test_payment_invalidates_party_caches(api, store):
    assert store.customer_balance(1).balance == Decimal("450000")
    store.record_customer_payment(1, Decimal("50000"))
    assert store.customer_transactions.get_cached("1") is None
    assert store.customer_balance(1).balance == Decimal("400000")
    assert _count(api, "list_customer_transactions") == 2


def test_supplier_balance(store):
    res = store.supplier_balance(9)
    assert res.total_debits == Decimal("3500000")
    assert res.total_credits == Decimal("1000000")
    assert res.balance == Decimal("2500000")


def test_acceptance_invalidates_supplier_and_products(api, store):
    store.supplier_balance(9)
    store.products.fetch()
    store.record_acceptance(9, "3", 10, Decimal("62000"), "first batch")

    assert store.supplier_transactions.get_cached("9") is None
    assert store.products.get_cached() is None
    _, supplier_id, data = [c for c in api.calls if c[0] == "add_supplier_acceptance"][0]
    assert supplier_id == 9
    assert data == {"product": "3", "quantity": 10, "purchase_price": "62000", "notes": "first batch"}


def test_record_sale_posts_json_and_invalidates(api, store):
    store.customer_balance(1)
    draft = Sale(subtotal=100, total=100, payment_method="credit",
                 customer_id="1", amount_paid=0, amount_due=100)

    created = store.record_sale(draft)

    assert created.receipt_number == "R-077"
    posted = [c for c in api.calls if c[0] == "create_sale"][0][1]
    assert posted["total"] == "100.00"
    assert "receipt_number" not in posted
    assert store.customer_transactions.get_cached("1") is None


class _CatalogApi(_FakeApi):
    def create_user(self, data):
        self.calls.append(("create_user", data))
        return {"id": 11, "username": data["username"], "full_name": data["full_name"],
                "role": data["role"]}

    def update_user(self, user_id, data):
        self.calls.append(("update_user", user_id, data))
        return {"id": user_id, "username": data["username"], "role": data["role"]}

    def delete_user(self, user_id):
        self.calls.append(("delete_user", user_id))
        return {}

    def create_category(self, name):
        self.calls.append(("create_category", name))
        return {"id": 4, "name": name}

    def delete_category(self, category_id):
        self.calls.append(("delete_category", category_id))
        return {}

    def update_product(self, product_id, data):
        self.calls.append(("update_product", product_id, data))
        return {"id": product_id, **data}

    def delete_supplier(self, supplier_id):
        self.calls.append(("delete_supplier", supplier_id))
        return {}


@pytest.fixture
def catalog_api():
    return _CatalogApi()


def test_save_user_sends_backend_role_code(catalog_api):
    store = AppStore(catalog_api)
    store.users.fetch()

    user = store.save_user(
        {"username": "nodir", "full_name": "Nodir B", "password": "pw", "role": "manager"}
    )

    assert catalog_api.calls[-1] == (
        "create_user",
        {"username": "nodir", "full_name": "Nodir B", "password": "pw", "role": "M"},
    )
    assert (user.id, user.name, user.role) == ("11", "Nodir B", "manager")
    assert store.users.get_cached() is None


def test_update_user_with_blank_password_keeps_it(catalog_api):
    store = AppStore(catalog_api)

    user = store.save_user({"username": "nodir", "password": "", "role": "admin"}, user_id=11)

    _, user_id, data = catalog_api.calls[-1]
    assert user_id == 11
    assert data == {"username": "nodir", "role": "A"}
    assert user.name == "nodir"


def test_delete_user_drops_cache(catalog_api):
    store = AppStore(catalog_api)
    store.users.fetch()
    store.delete_user(11)
    assert ("delete_user", 11) in catalog_api.calls
    assert store.users.get_cached() is None


def test_category_changes_invalidate_products(catalog_api):
    store = AppStore(catalog_api)
    store.products.fetch()
    store.categories.fetch()

    assert store.save_category("DVP").name == "DVP"
    assert store.products.get_cached() is None
    assert store.categories.get_cached() is None

    store.products.fetch()
    store.delete_category(4)
    assert ("delete_category", 4) in catalog_api.calls
    assert store.products.get_cached() is None


def test_save_product_updates_and_invalidates(catalog_api):
    store = AppStore(catalog_api)
    store.products.fetch()

    product = store.save_product({"name": "MDF White", "price": "90000", "count": 3}, product_id=8)

    assert (product.id, product.unit_price, product.stock_quantity) == ("8", Decimal("90000"), 3)
    assert store.products.get_cached() is None


def test_delete_supplier_invalidates_its_caches(catalog_api):
    store = AppStore(catalog_api)
    store.supplier_balance(9)
    assert store.supplier_transactions.get_cached("9") is not None

    store.delete_supplier(9)

    assert store.supplier_transactions.get_cached("9") is None
    assert store.suppliers.get_cached() is None
