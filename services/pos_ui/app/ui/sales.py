import streamlit as st

from api import ApiError
from reports import (
    revenue_by_category,
    revenue_by_day,
    sales_frame,
    service_revenue,
    top_products,
)
from ui.formatting import money, timestamp


def sales_page(store):
    st.header("📊 Sales")

    try:
        sales = store.sales.fetch()
    except ApiError as e:
        st.error(f"Could not load sales: {e}")
        return

    if not sales:
        st.info("No sales yet")
        return

    services = service_revenue(sales)
    c1, c2, c3 = st.columns(3)
    c1.metric("Sales", len(sales))
    c2.metric("Cutting", money(services["cutting"]))
    c3.metric("Edge banding", money(services["edge_banding"]))

    try:
        income = store.income_stats.fetch()
        st.caption(
            f"Today: {money(income.today_income)} · "
            f"All time: {money(income.total_income)}"
        )
    except ApiError as e:
        st.caption(f"Income statistics unavailable: {e}")

    st.subheader("Last 7 days")
    st.bar_chart(revenue_by_day(sales), x="date", y="revenue")

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Top products")
        st.dataframe(top_products(sales), use_container_width=True, hide_index=True)
    with col2:
        st.subheader("By category")
        st.dataframe(revenue_by_category(sales), use_container_width=True, hide_index=True)

    st.subheader("Receipts")
    df = sales_frame(sales)
    for col in ("subtotal", "discount", "total", "due"):
        df[col] = df[col].astype(float)
    df["date"] = df["date"].map(timestamp)
    st.dataframe(df, use_container_width=True, hide_index=True)
