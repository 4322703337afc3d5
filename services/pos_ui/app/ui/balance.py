import streamlit as st

from ui.formatting import STATUS_LABELS, money


def balance_card(result, debit_label="Total purchases", credit_label="Total payments"):
    col1, col2, col3 = st.columns(3)
    col1.metric(debit_label, money(result.total_debits))
    col2.metric(credit_label, money(result.total_credits))
    col3.metric("Balance", money(abs(result.balance)))

    label = STATUS_LABELS[result.status]
    if result.status == "owes":
        st.error(f"🔴 {label}: {money(result.balance)}")
    elif result.status == "overpaid":
        st.info(f"🔵 {label}: {money(abs(result.balance))}")
    else:
        st.success(f"✅ {label}")
