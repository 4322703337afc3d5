import streamlit as st

import auth
from api import ApiClient
from cart import BasketSync
from db import make_engine
from logging_setup import configure_logging
from repositories import AppStore
from storage import KeyValueStore, TokenStore

from ui.cart import cart_page
from ui.customers import customers_page
from ui.inventory import inventory_page
from ui.login import login_page
from ui.products import products_page
from ui.sales import sales_page
from ui.suppliers import suppliers_page
from ui.users import users_page

configure_logging()

st.set_page_config(
    page_title="Plywood POS",
    layout="wide",
)


@st.cache_resource
def _engine():
    return make_engine()


kv = KeyValueStore(_engine())

if "api" not in st.session_state:
    st.session_state.api = ApiClient(TokenStore(kv))
    st.session_state.store = AppStore(st.session_state.api)

api = st.session_state.api
store = st.session_state.store
basket = BasketSync(kv, api)

if "cart" not in st.session_state:
    st.session_state.cart = basket.load()
cart = st.session_state.cart

user = auth.current_user(kv)
if user is None:
    if login_page(api, kv) is not None:
        store.invalidate_all()
        st.rerun()
    st.stop()

# ---------------- Navigation ----------------
pages = ["Products", "Cart", "Customers", "Sales"]
if user.role in ("admin", "manager"):
    pages += ["Inventory", "Suppliers"]
if user.role == "admin":
    pages.append("Users")

st.sidebar.title("Navigation")
st.sidebar.caption(f"{user.name} · {user.role}")
page = st.sidebar.radio(
    "Page",
    pages,
    label_visibility="collapsed",
)

if st.sidebar.button(f"🛒 Cart ({len(cart)})"):
    page = "Cart"

if st.sidebar.button("Sign out"):
    auth.logout(api, kv)
    store.invalidate_all()
    st.rerun()

if page == "Products":
    products_page(store, cart, on_cart_change=lambda: basket.save(cart))

elif page == "Cart":
    cart_page(store, cart, basket, user)

elif page == "Customers":
    customers_page(store)

elif page == "Sales":
    sales_page(store)

elif page == "Suppliers":
    suppliers_page(store)

elif page == "Inventory":
    inventory_page(store)

elif page == "Users":
    users_page(store, user)
