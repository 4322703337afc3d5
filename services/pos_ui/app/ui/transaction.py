import streamlit as st

from reports import ledger_frame
from ui.formatting import timestamp

TYPE_LABELS = {
    "purchase": "Purchase",
    "acceptance": "Goods acceptance",
    "payment": "Payment",
}


def transactions_table(transactions):
    if not transactions:
        st.info("No transactions")
        return

    df = ledger_frame(transactions)
    df["type"] = df["type"].map(TYPE_LABELS).fillna(df["type"])
    df["amount"] = df["amount"].astype(float)
    df["date"] = df["date"].map(timestamp)

    st.dataframe(df, use_container_width=True, hide_index=True)
