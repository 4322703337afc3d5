from datetime import date, datetime
from decimal import Decimal

from reports import (
    ledger_frame,
    revenue_by_category,
    revenue_by_day,
    sales_frame,
    service_revenue,
    top_products,
)
from schemas import CustomerTransaction, Sale


def _line(pid, name, category, price, qty, services=None):
    line = {
        "id": f"{pid}-{qty}",
        "product": {"id": pid, "name": name, "category": category, "unit_price": price},
        "quantity": qty,
    }
    line.update(services or {})
    return line


def _sales():
    return [
        Sale.model_validate({
            "receipt_number": "R-001",
            "items": [
                _line("1", "LDSP Black", "LDSP", "85000", 2,
                      {"cutting_service": {"number_of_boards": 2, "price_per_cut": "20000"}}),
                _line("3", "MDF Grey", "MDF", "75000", 1),
            ],
            "subtotal": "285000",
            "total": "285000",
            "created_at": "2025-03-07T12:00:00",
        }),
        Sale.model_validate({
            "receipt_number": "R-002",
            "items": [
                _line("3", "MDF Grey", "MDF", "75000", 3,
                      {"edge_banding_service": {"thickness": "1", "width": 1000,
                                                "height": 500, "price_per_meter": "3200"}}),
            ],
            "subtotal": "234600",
            "discount": "4600",
            "total": "230000",
            "payment_method": "credit",
            "customer_name": "Ivan",
            "amount_paid": "30000",
            "amount_due": "200000",
            "created_at": "2025-03-05T09:30:00",
        }),
    ]


def test_revenue_by_day_zero_fills_the_window():
    df = revenue_by_day(_sales(), days=7, today=date(2025, 3, 7))
    assert list(df["date"]) == ["01.03", "02.03", "03.03", "04.03", "05.03", "06.03", "07.03"]
    assert list(df["revenue"]) == [0.0, 0.0, 0.0, 0.0, 230000.0, 0.0, 285000.0]


def test_top_products_ranked_by_revenue():
    df = top_products(_sales())
    assert list(df["product"]) == ["MDF Grey", "LDSP Black"]
    assert list(df["quantity"]) == [4, 2]
    assert list(df["revenue"]) == [300000.0, 170000.0]


def test_top_products_empty():
    assert top_products([]).empty


def test_revenue_by_category():
    df = revenue_by_category(_sales())
    assert dict(zip(df["category"], df["revenue"])) == {"LDSP": 170000.0, "MDF": 300000.0}


def test_service_revenue_is_split_by_service():
    assert service_revenue(_sales()) == {
        "cutting": Decimal("40000"),
        "edge_banding": Decimal("9600"),
    }


def test_sales_frame_columns():
    df = sales_frame(_sales())
    assert list(df["receipt"]) == ["R-001", "R-002"]
    assert df.loc[1, "due"] == Decimal("200000")


def test_ledger_frame_is_newest_first():
    txns = [
        CustomerTransaction.model_validate({
            "id": i, "customer": 1, "type": kind, "amount": amount,
            "created_at": datetime(2025, 3, day, 10, 0),
        })
        for i, (kind, amount, day) in enumerate(
            [("purchase", "850000", 1), ("payment", "400000", 4), ("purchase", "10", 2)], start=1
        )
    ]
    df = ledger_frame(txns)
    assert list(df["id"]) == ["2", "3", "1"]
    assert list(df.columns) == ["date", "type", "amount", "description", "id"]
    assert ledger_frame([]).empty
