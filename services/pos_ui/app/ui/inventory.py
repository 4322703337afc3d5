import pandas as pd
import streamlit as st

from api import ApiError
from ledger import parse_amount
from ui.formatting import money

QUALITIES = ["Premium", "Standard", "Economy"]


def inventory_page(store):
    st.header("📦 Inventory")

    try:
        products = store.products.fetch()
        categories = store.categories.fetch()
    except ApiError as e:
        st.error(f"Could not load inventory: {e}")
        return

    low = [p for p in products if p.is_low_stock]
    if low:
        st.warning("Low stock: " + ", ".join(f"{p.name} ({p.stock_quantity})" for p in low))

    if products:
        st.dataframe(
            pd.DataFrame([
                {
                    "name": p.name,
                    "category": p.category,
                    "quality": p.quality,
                    "purchase price": money(p.purchase_price) if p.purchase_price is not None else "",
                    "price": money(p.unit_price),
                    "stock": p.stock_quantity,
                    "enabled": p.enabled,
                }
                for p in products
            ]),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info("No products yet")

    tab_new, tab_edit, tab_categories = st.tabs(["New product", "Edit product", "Categories"])

    with tab_new:
        st.caption("Stock and purchase price are set when goods are accepted from a supplier.")
        _product_form(store, categories, key="new_product")

    with tab_edit:
        if products:
            by_id = {p.id: p for p in products}
            product_id = st.selectbox("Product", list(by_id), format_func=lambda i: by_id[i].name)
            product = by_id[product_id]
            _product_form(store, categories, key=f"edit_product_{product.id}", product=product)
            if st.button("Delete product"):
                try:
                    store.delete_product(product.id)
                except ApiError as e:
                    st.error(f"Could not delete product: {e}")
                else:
                    st.toast("Product deleted")
                    st.rerun()

    with tab_categories:
        _categories(store, categories)


def _product_form(store, categories, key, product=None):
    names = {c.id: c.name for c in categories}
    category_ids = list(names)
    current = next((i for i, n in names.items() if product and n == product.category), None)
    if current in category_ids:
        index = category_ids.index(current)
    else:
        index = 0 if category_ids else None

    with st.form(key):
        name = st.text_input("Name", value=product.name if product else "")
        category_id = st.selectbox(
            "Category",
            category_ids,
            index=index,
            format_func=names.get,
        )
        c1, c2, c3 = st.columns(3)
        width = c1.number_input("Width (mm)", min_value=0, value=int(product.width or 0) if product else 2700)
        height = c2.number_input("Height (mm)", min_value=0, value=int(product.height or 0) if product else 1000)
        thickness = c3.number_input(
            "Thickness (mm)", min_value=0, value=int(product.thickness or 0) if product else 16
        )
        color = st.color_picker("Color", value=(product.color if product and product.color else "#000000"))
        quality = st.selectbox(
            "Quality",
            QUALITIES,
            index=QUALITIES.index(product.quality) if product and product.quality in QUALITIES else 1,
        )
        price = st.text_input("Sale price", value=str(product.unit_price) if product else "0")
        enabled = st.checkbox("Available for sale", value=product.enabled if product else True)
        submitted = st.form_submit_button("Save product")

    if submitted:
        if not name or category_id is None:
            st.error("Name and category are required")
            return
        try:
            data = {
                "name": name,
                "category": category_id,
                "color": color,
                "width": int(width),
                "height": int(height),
                "thickness": int(thickness),
                "quality": quality,
                "price": str(parse_amount(price)),
                "enabled": enabled,
            }
            store.save_product(data, product_id=product.id if product else None)
        except ValueError as e:
            st.error(f"Enter a valid price: {e}")
        except ApiError as e:
            st.error(f"Product was not saved: {e}")
        else:
            st.toast("Product saved")
            st.rerun()


def _categories(store, categories):
    with st.form("new_category"):
        name = st.text_input("New category")
        if st.form_submit_button("Add category") and name:
            try:
                store.save_category(name)
            except ApiError as e:
                st.error(f"Category was not saved: {e}")
            else:
                st.toast("Category added")
                st.rerun()

    for category in categories:
        c1, c2, c3 = st.columns([3, 1, 1])
        new_name = c1.text_input(
            "Name", value=category.name, key=f"category_{category.id}", label_visibility="collapsed"
        )
        if c2.button("Rename", key=f"rename_{category.id}") and new_name != category.name:
            try:
                store.save_category(new_name, category_id=category.id)
            except ApiError as e:
                st.error(f"Category was not saved: {e}")
            else:
                st.rerun()
        if c3.button("Delete", key=f"delete_category_{category.id}"):
            try:
                store.delete_category(category.id)
            except ApiError as e:
                st.error(f"Could not delete category: {e}")
            else:
                st.rerun()
