import streamlit as st

from api import ApiError
from cart import DEFAULT_PRICE_PER_CUT, EDGE_BANDING_PRICES, CartError
from ui.formatting import money

PAYMENT_METHODS = ["cash", "card", "mixed", "credit"]


def cart_page(store, cart, basket, user):
    st.header("🛒 Cart")

    if st.button("Sync with basket"):
        merged = basket.sync(cart)
        cart.items = merged.items
        st.toast("Basket synced")

    if not len(cart):
        st.info("The cart is empty")
        return

    for item in list(cart):
        with st.container(border=True):
            c1, c2, c3 = st.columns([3, 1, 1])
            c1.markdown(f"**{item.product.name}** · {money(item.product.unit_price)}")
            qty = c2.number_input(
                "Qty", min_value=0, value=item.quantity, step=1, key=f"qty_{item.id}"
            )
            c3.metric("Total", money(item.total))
            if qty != item.quantity:
                cart.update_quantity(item.id, int(qty))
                basket.save(cart)
                st.rerun()

            if item.cutting_service:
                st.caption(
                    f"✂️ Cutting ({item.cutting_service.number_of_boards}×): "
                    f"{money(item.cutting_service.total)}"
                )
            if item.edge_banding_service:
                st.caption(
                    f"📏 Edge banding ({item.edge_banding_service.linear_meters:.2f} m): "
                    f"{money(item.edge_banding_service.total)}"
                )

            with st.expander("Services"):
                _services_form(cart, basket, item)

    _checkout(store, cart, basket, user)


def _services_form(cart, basket, item):
    with st.form(f"cutting_{item.id}"):
        boards = st.number_input("Number of boards", min_value=1, value=1, step=1)
        price = st.number_input("Price per cut", min_value=0, value=int(DEFAULT_PRICE_PER_CUT), step=1000)
        if st.form_submit_button("Apply cutting"):
            try:
                cart.set_cutting(item.id, int(boards), price)
            except CartError as e:
                st.error(str(e))
            else:
                basket.save(cart)
                st.rerun()

    with st.form(f"banding_{item.id}"):
        thickness = st.selectbox(
            "Thickness (cm)", list(EDGE_BANDING_PRICES), format_func=lambda t: f"{t} cm"
        )
        width = st.number_input("Width (mm)", min_value=0, value=0, step=10)
        height = st.number_input("Height (mm)", min_value=0, value=0, step=10)
        if st.form_submit_button("Apply edge banding"):
            try:
                cart.set_edge_banding(item.id, thickness, int(width), int(height))
            except CartError as e:
                st.error(str(e))
            else:
                basket.save(cart)
                st.rerun()


def _checkout(store, cart, basket, user):
    st.divider()
    subtotal = cart.subtotal()
    st.metric("Subtotal", money(subtotal))

    discount = st.number_input("Discount", min_value=0, max_value=int(subtotal), value=0, step=1000)
    method = st.selectbox("Payment method", PAYMENT_METHODS)

    customer = None
    amount_paid = None
    try:
        customers = store.customers.fetch()
    except ApiError as e:
        st.error(f"Could not load customers: {e}")
        customers = []

    by_id = {c.id: c for c in customers}
    customer_id = st.selectbox(
        "Customer",
        [None] + list(by_id),
        format_func=lambda c: "Walk-in customer" if c is None else by_id[c].name,
    )
    customer = by_id.get(customer_id)

    try:
        total = cart.total(discount)
    except CartError as e:
        st.error(str(e))
        return
    st.metric("Total", money(total))

    if method == "credit":
        amount_paid = st.number_input("Amount paid", min_value=0, max_value=int(total), value=0, step=1000)
        st.caption(f"Remaining debt: {money(total - amount_paid)}")

    if st.button("Complete sale", type="primary"):
        try:
            draft = cart.checkout(
                payment_method=method,
                discount=discount,
                amount_paid=amount_paid,
                salesperson=user,
                customer=customer,
            )
            sale = store.record_sale(draft)
        except CartError as e:
            st.error(str(e))
            return
        except ApiError as e:
            st.error(f"Sale was not saved: {e}")
            return
        basket.clear(cart)
        st.success(f"Sale completed. Receipt {sale.receipt_number or '-'}")
