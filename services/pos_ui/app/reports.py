from datetime import date, timedelta
from decimal import Decimal

import pandas as pd

LEDGER_COLUMNS = ["date", "type", "amount", "description", "id"]


def _sales_items_frame(sales):
    rows = []
    for sale in sales:
        for item in sale.items:
            rows.append({
                "product_id": item.product.id,
                "product": item.product.name or "Unknown",
                "category": item.product.category or "Uncategorized",
                "quantity": item.quantity,
                "revenue": float(item.product.unit_price * item.quantity),
            })
    return pd.DataFrame(
        rows,
        columns=["product_id", "product", "category", "quantity", "revenue"],
    )


def revenue_by_day(sales, days=7, today=None):
    """Sale totals for the last ``days`` days, oldest first, zero-filled."""
    today = today or date.today()
    window = [today - timedelta(days=days - 1 - i) for i in range(days)]

    totals = {d: Decimal("0") for d in window}
    for sale in sales:
        if sale.created_at is None:
            continue
        d = sale.created_at.date()
        if d in totals:
            totals[d] += sale.total

    return pd.DataFrame(
        [{"date": d.strftime("%d.%m"), "revenue": float(totals[d])} for d in window],
        columns=["date", "revenue"],
    )


def top_products(sales, limit=5):
    df = _sales_items_frame(sales)
    if df.empty:
        return pd.DataFrame(columns=["product", "quantity", "revenue"])
    grouped = (
        df.groupby("product_id", sort=False)
        .agg(product=("product", "first"), quantity=("quantity", "sum"), revenue=("revenue", "sum"))
        .sort_values("revenue", ascending=False, kind="stable")
        .head(limit)
        .reset_index(drop=True)
    )
    return grouped


def revenue_by_category(sales):
    df = _sales_items_frame(sales)
    if df.empty:
        return pd.DataFrame(columns=["category", "revenue"])
    return df.groupby("category", sort=True)["revenue"].sum().reset_index()


def service_revenue(sales):
    cutting = Decimal("0")
    edge_banding = Decimal("0")
    for sale in sales:
        for item in sale.items:
            if item.cutting_service:
                cutting += item.cutting_service.total
            if item.edge_banding_service:
                edge_banding += item.edge_banding_service.total
    return {"cutting": cutting, "edge_banding": edge_banding}


def ledger_frame(transactions):
    """Customer or supplier history as a table, newest first."""
    rows = [
        {
            "date": t.created_at,
            "type": t.type,
            "amount": t.amount,
            "description": t.description or "",
            "id": t.id,
        }
        for t in transactions
    ]
    df = pd.DataFrame(rows, columns=LEDGER_COLUMNS)
    if not df.empty:
        df = df.sort_values("date", ascending=False, kind="stable").reset_index(drop=True)
    return df


def sales_frame(sales):
    return pd.DataFrame(
        [
            {
                "receipt": s.receipt_number,
                "date": s.created_at,
                "customer": s.customer_name or "",
                "method": s.payment_method,
                "subtotal": s.subtotal,
                "discount": s.discount,
                "total": s.total,
                "due": s.amount_due,
            }
            for s in sales
        ],
        columns=["receipt", "date", "customer", "method", "subtotal", "discount", "total", "due"],
    )
