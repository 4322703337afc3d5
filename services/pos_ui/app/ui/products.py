import pandas as pd
import streamlit as st

from api import ApiError
from ui.formatting import money


def products_page(store, cart, on_cart_change):
    st.header("🪵 Products")

    try:
        categories = store.categories.fetch()
    except ApiError as e:
        st.error(f"Could not load categories: {e}")
        categories = []

    col1, col2, col3 = st.columns(3)
    with col1:
        search = st.text_input("Search")
    with col2:
        names = {c.id: c.name for c in categories}
        category = st.selectbox(
            "Category",
            [None] + list(names),
            format_func=lambda c: "All" if c is None else names[c],
        )
    with col3:
        quality = st.text_input("Quality")

    try:
        products = store.products.fetch(search=search or None, category=category, quality=quality or None)
    except ApiError as e:
        st.error(f"Could not load products: {e}")
        return

    products = [p for p in products if p.enabled]
    if not products:
        st.info("No products found")
        return

    df = pd.DataFrame([
        {
            "name": p.name,
            "category": p.category,
            "size": f"{p.width or '-'}×{p.height or '-'}×{p.thickness or '-'}",
            "quality": p.quality,
            "price": money(p.unit_price),
            "stock": p.stock_quantity,
        }
        for p in products
    ])
    st.dataframe(df, use_container_width=True, hide_index=True)

    low = [p.name for p in products if p.is_low_stock]
    if low:
        st.warning("Low stock: " + ", ".join(low))

    st.subheader("Add to cart")
    with st.form("add_to_cart"):
        by_id = {p.id: p for p in products}
        product_id = st.selectbox("Product", list(by_id), format_func=lambda i: by_id[i].name)
        quantity = st.number_input("Quantity", min_value=1, value=1, step=1)
        submitted = st.form_submit_button("Add")

    if submitted:
        product = by_id[product_id]
        if quantity > product.stock_quantity:
            st.error(f"Only {product.stock_quantity} in stock")
            return
        cart.add(product, int(quantity))
        on_cart_change()
        st.toast(f"{product.name} added to cart")
