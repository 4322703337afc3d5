import requests

from config import API_BASE_URL, REQUEST_TIMEOUT
from logging_setup import get_logger

_logger = get_logger("pos_ui.api")


class ApiError(Exception):
    def __init__(self, status_code, detail):
        self.status_code = status_code
        self.detail = detail
        if status_code is None:
            super().__init__(f"API Error: {detail}")
        else:
            super().__init__(f"API Error ({status_code}): {detail}")


class ApiClient:
    """Thin JSON client for the shop backend.

    Every method returns decoded JSON (lists/dicts); callers validate it into
    ``schemas`` models. Failures of any kind surface as ``ApiError``.
    """

    def __init__(self, token_store, base_url=API_BASE_URL, timeout=REQUEST_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.tokens = token_store
        self.session = session or requests.Session()

    def request(self, method, endpoint, *, params=None, json=None):
        url = f"{self.base_url}{endpoint}"
        headers = {"Content-Type": "application/json"}

        token = self.tokens.access_token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        else:
            _logger.debug("api:no_token %s %s", method, endpoint)

        try:
            resp = self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            _logger.warning("api:transport_error %s %s: %s", method, endpoint, e)
            raise ApiError(None, str(e)) from e

        _logger.debug("api:%s %s -> %s", method, endpoint, resp.status_code)

        if not resp.ok:
            _logger.error("api:error %s %s status=%s body=%s", method, endpoint, resp.status_code, resp.text)
            raise ApiError(resp.status_code, resp.text)

        if resp.status_code == 204 or not resp.content:
            return {}

        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(resp.status_code, f"invalid JSON: {e}") from e

    def get(self, endpoint, params=None):
        return self.request("GET", endpoint, params=_clean(params))

    def post(self, endpoint, data=None):
        return self.request("POST", endpoint, json=data)

    def put(self, endpoint, data=None):
        return self.request("PUT", endpoint, json=data)

    def delete(self, endpoint):
        return self.request("DELETE", endpoint)

    # -------------------------
    # Auth
    # -------------------------

    def login(self, username, password):
        resp = self.post("/user/login/", {"username": username, "password": password})
        data = resp.get("data") if isinstance(resp.get("data"), dict) else {}
        access = data.get("access") or resp.get("access")
        if not access:
            raise ApiError(None, "No access token found in response")
        return {"access": access, "refresh": data.get("refresh") or resp.get("refresh")}

    def current_user(self):
        return self.get("/user/me/")

    def logout(self, refresh_token):
        return self.post("/user/logout/", {"refresh": refresh_token})

    # -------------------------
    # Users
    # -------------------------

    def list_users(self):
        return self.get("/user/users/")

    def create_user(self, data):
        return self.post("/user/users/", data)

    def update_user(self, user_id, data):
        return self.put(f"/user/users/{user_id}/", data)

    def delete_user(self, user_id):
        return self.delete(f"/user/users/{user_id}/")

    # -------------------------
    # Customers
    # -------------------------

    def list_customers(self, search=None):
        return self.get("/customer/customer/", {"search": search})

    def create_customer(self, data):
        return self.post("/customer/customer/", data)

    def update_customer(self, customer_id, data):
        return self.put(f"/customer/customer/{customer_id}/", data)

    def delete_customer(self, customer_id):
        return self.delete(f"/customer/customer/{customer_id}/")

    def list_customer_transactions(self, customer_id):
        return self.get(f"/customer/customer/{customer_id}/transactions/")

    def add_customer_payment(self, customer_id, amount, description=None):
        return self.post(
            f"/customer/customer/{customer_id}/payment/",
            {"amount": str(amount), "description": description or ""},
        )

    def debt_stats(self):
        return self.get("/customer/debt-stats/")

    # -------------------------
    # Suppliers
    # -------------------------

    def list_suppliers(self, search=None):
        return self.get("/supplier/supplier/", {"search": search})

    def create_supplier(self, data):
        return self.post("/supplier/supplier/", data)

    def update_supplier(self, supplier_id, data):
        return self.put(f"/supplier/supplier/{supplier_id}/", data)

    def delete_supplier(self, supplier_id):
        return self.delete(f"/supplier/supplier/{supplier_id}/")

    def list_supplier_transactions(self, supplier_id):
        return self.get(f"/supplier/supplier/{supplier_id}/transactions/")

    def add_supplier_payment(self, supplier_id, amount, description=None):
        return self.post(
            f"/supplier/supplier/{supplier_id}/payment/",
            {"amount": str(amount), "description": description or ""},
        )

    def add_supplier_acceptance(self, supplier_id, data):
        return self.post(f"/supplier/supplier/{supplier_id}/acceptance/", data)

    def supplier_stats(self):
        return self.get("/supplier/stats/")

    # -------------------------
    # Catalog
    # -------------------------

    def list_categories(self, search=None):
        return self.get("/category/category/", {"search": search})

    def create_category(self, name):
        return self.post("/category/category/", {"name": name})

    def update_category(self, category_id, name):
        return self.put(f"/category/category/{category_id}/", {"name": name})

    def delete_category(self, category_id):
        return self.delete(f"/category/category/{category_id}/")

    def list_products(self, category=None, quality=None, search=None):
        return self.get(
            "/product/products/",
            {"category": category, "quality": quality, "search": search},
        )

    def create_product(self, data):
        return self.post("/product/products/", data)

    def update_product(self, product_id, data):
        return self.put(f"/product/products/{product_id}/", data)

    def delete_product(self, product_id):
        return self.delete(f"/product/products/{product_id}/")

    # -------------------------
    # Orders / basket
    # -------------------------

    def create_sale(self, data):
        return self.post("/order/orders/", data)

    def list_sales(self):
        return self.get("/order/orders/")

    def income_stats(self):
        return self.get("/order/income/cutting-banding/")

    def get_basket(self):
        return self.get("/order/basket/")

    def replace_basket(self, items):
        return self.put("/order/basket/", {"items": items})

    def clear_basket(self):
        return self.delete("/order/basket/")


def _clean(params):
    if not params:
        return None
    cleaned = {k: v for k, v in params.items() if v not in (None, "")}
    return cleaned or None
