import streamlit as st

from api import ApiError
from ledger import parse_amount
from ui.balance import balance_card
from ui.formatting import money
from ui.transaction import transactions_table


def customers_page(store):
    st.header("👥 Customer ledger")

    _debt_stats(store)

    search = st.text_input("Search customers")
    try:
        customers = store.customers.fetch(search=search or None)
    except ApiError as e:
        st.error(f"Could not load customers: {e}")
        return

    with st.expander("➕ New customer"):
        _customer_form(store)

    if not customers:
        st.info("No customers")
        return

    by_id = {c.id: c for c in customers}
    customer_id = st.selectbox(
        "Customer", list(by_id), format_func=lambda i: f"{by_id[i].name} ({by_id[i].phone})"
    )
    customer = by_id[customer_id]

    st.subheader(customer.name)
    st.caption(" · ".join(p for p in (customer.phone, customer.address, customer.email) if p))

    balance_card(store.customer_balance(customer.id))

    with st.form("customer_payment"):
        amount = st.text_input("Payment amount")
        description = st.text_input("Description (optional)")
        submitted = st.form_submit_button("Add payment")

    if submitted:
        try:
            value = parse_amount(amount)
            if value <= 0:
                raise ValueError("amount must be greater than zero")
            store.record_customer_payment(customer.id, value, description)
        except ValueError as e:
            st.error(f"Enter a valid amount: {e}")
        except ApiError as e:
            st.error(f"Payment was not saved: {e}")
        else:
            st.toast("Payment added")
            st.rerun()

    st.subheader("History")
    transactions_table(store.customer_history(customer.id))

    if st.button("Delete customer"):
        try:
            store.delete_customer(customer.id)
        except ApiError as e:
            st.error(f"Could not delete customer: {e}")
        else:
            st.toast("Customer deleted")
            st.rerun()


def _debt_stats(store):
    try:
        stats = store.debt_stats.fetch()
    except ApiError as e:
        st.warning(f"Debt statistics unavailable: {e}")
        return
    c1, c2, c3 = st.columns(3)
    c1.metric("Total debt", money(stats.total_debt))
    c2.metric("Debtor customers", stats.debtor_customers)
    c3.metric("Credit sales", stats.nasiya_sales)


def _customer_form(store):
    with st.form("new_customer"):
        name = st.text_input("Name")
        phone = st.text_input("Phone")
        address = st.text_input("Address")
        submitted = st.form_submit_button("Save")

    if submitted:
        if not name or not phone:
            st.error("Name and phone are required")
            return
        try:
            store.save_customer({"name": name, "phone": phone, "address": address})
        except ApiError as e:
            st.error(f"Customer was not saved: {e}")
        else:
            st.toast("Customer added")
            st.rerun()
