import streamlit as st

from api import ApiError
from ledger import parse_amount
from ui.balance import balance_card
from ui.formatting import money
from ui.transaction import transactions_table


def suppliers_page(store):
    st.header("🏭 Suppliers")

    try:
        stats = store.supplier_stats.fetch()
        c1, c2 = st.columns(2)
        c1.metric("Suppliers", stats.total_suppliers)
        c2.metric("Total debt", money(stats.total_debt))
    except ApiError as e:
        st.warning(f"Supplier statistics unavailable: {e}")

    search = st.text_input("Search suppliers")
    try:
        suppliers = store.suppliers.fetch(search=search or None)
    except ApiError as e:
        st.error(f"Could not load suppliers: {e}")
        return

    with st.expander("➕ New supplier"):
        _supplier_form(store)

    if not suppliers:
        st.info("No suppliers")
        return

    by_id = {s.id: s for s in suppliers}
    supplier_id = st.selectbox("Supplier", list(by_id), format_func=lambda i: by_id[i].name)
    supplier = by_id[supplier_id]

    st.subheader(supplier.name)
    st.caption(" · ".join(p for p in (supplier.phone, supplier.company) if p))

    balance_card(
        store.supplier_balance(supplier.id),
        debit_label="Goods accepted",
        credit_label="Paid",
    )

    tab_pay, tab_accept, tab_history = st.tabs(["Payment", "Goods acceptance", "History"])

    with tab_pay:
        with st.form("supplier_payment"):
            amount = st.text_input("Payment amount")
            description = st.text_input("Description (optional)")
            if st.form_submit_button("Pay supplier"):
                try:
                    value = parse_amount(amount)
                    if value <= 0:
                        raise ValueError("amount must be greater than zero")
                    store.record_supplier_payment(supplier.id, value, description)
                except ValueError as e:
                    st.error(f"Enter a valid amount: {e}")
                except ApiError as e:
                    st.error(f"Payment was not saved: {e}")
                else:
                    st.toast("Payment recorded")
                    st.rerun()

    with tab_accept:
        _acceptance_form(store, supplier)

    with tab_history:
        transactions_table(store.supplier_history(supplier.id))

    if st.button("Delete supplier"):
        try:
            store.delete_supplier(supplier.id)
        except ApiError as e:
            st.error(f"Could not delete supplier: {e}")
        else:
            st.toast("Supplier deleted")
            st.rerun()


def _acceptance_form(store, supplier):
    try:
        products = store.products.fetch()
    except ApiError as e:
        st.error(f"Could not load products: {e}")
        return
    if not products:
        st.info("No products to receive")
        return

    by_id = {p.id: p for p in products}
    with st.form("acceptance"):
        product_id = st.selectbox("Product", list(by_id), format_func=lambda i: by_id[i].name)
        quantity = st.number_input("Quantity", min_value=1, value=1, step=1)
        price = st.text_input("Purchase price per unit")
        notes = st.text_input("Notes")
        submitted = st.form_submit_button("Accept goods")

    if submitted:
        try:
            unit_price = parse_amount(price)
            store.record_acceptance(supplier.id, product_id, int(quantity), unit_price, notes)
        except ValueError as e:
            st.error(f"Enter a valid price: {e}")
        except ApiError as e:
            st.error(f"Acceptance was not saved: {e}")
        else:
            st.toast(f"Accepted {int(quantity)} × {by_id[product_id].name}")
            st.rerun()


def _supplier_form(store):
    with st.form("new_supplier"):
        name = st.text_input("Name")
        phone = st.text_input("Phone")
        company = st.text_input("Company")
        submitted = st.form_submit_button("Save")

    if submitted:
        if not name or not phone:
            st.error("Name and phone are required")
            return
        try:
            store.save_supplier({"name": name, "phone": phone, "company": company})
        except ApiError as e:
            st.error(f"Supplier was not saved: {e}")
        else:
            st.toast("Supplier added")
            st.rerun()
