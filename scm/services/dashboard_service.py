from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from scm.models import Inventory, Order, OrderStatus, Product, ProductReturn, PurchaseOrder, Warehouse
from scm.services.employee_service import list_job_titles
from scm.services.product_service import count_products
from scm.services.supplier_service import count_suppliers

UNKNOWN = 'Unknown'
EMPLOYEE_DASHBOARD_STATUSES = (OrderStatus.PENDING.value, OrderStatus.SHIFTED.value, OrderStatus.DELIVERED.value)


def count_by(values: Iterable[str | None], *, default: str = UNKNOWN, seed: Iterable[str] = ()) -> dict[str, int]:
    """Group raw column values in memory; blanks fall under ``default``.

    Seeded labels come first with a zero count. Other labels keep the order in
    which they were first seen.
    """
    counts: Counter[str] = Counter({label: 0 for label in seed})
    for value in values:
        label = str(value).strip() if value is not None else ''
        counts[label or default] += 1
    return dict(counts)


def with_shares(rows: list[dict], *, value_key: str) -> list[dict]:
    total = sum(row[value_key] for row in rows)
    return [
        {**row, 'percent': round(row[value_key] * 100 / total) if total else 0}
        for row in rows
    ]


def employees_by_job_title(db: Session) -> list[dict]:
    counts = count_by(list_job_titles(db))
    return [{'job_title': job_title, 'count': count} for job_title, count in counts.items()]


def orders_vs_returns(db: Session) -> list[dict]:
    order_count = db.execute(select(func.count()).select_from(Order)).scalar_one()
    return_count = db.execute(select(func.count()).select_from(ProductReturn)).scalar_one()
    return [
        {'type': 'Orders', 'value': order_count},
        {'type': 'Returns', 'value': return_count},
    ]


def purchase_orders_by_status(db: Session) -> list[dict]:
    counts = count_by(db.execute(select(PurchaseOrder.status)).scalars().all())
    return [{'status': status, 'value': value} for status, value in counts.items()]


def orders_by_status(db: Session) -> list[dict]:
    counts = count_by(db.execute(select(Order.status)).scalars().all(), seed=EMPLOYEE_DASHBOARD_STATUSES)
    return [{'status': status, 'value': value} for status, value in counts.items()]


def stock_by_warehouse(db: Session) -> list[dict]:
    rows = db.execute(
        select(Warehouse.warehouse_name, Inventory.quantity_on_hand)
        .select_from(Inventory)
        .join(Warehouse, Warehouse.warehouse_id == Inventory.warehouse_id)
    ).all()
    totals: dict[str, int] = {}
    for row in rows:
        name = row.warehouse_name or UNKNOWN
        totals[name] = totals.get(name, 0) + int(row.quantity_on_hand or 0)
    return [{'name': name, 'value': value} for name, value in totals.items()]


def customer_stats(db: Session) -> dict:
    variety_count = db.execute(
        select(func.count(func.distinct(Product.category))).where(Product.category.is_not(None))
    ).scalar_one()
    return {
        'product_count': count_products(db),
        'variety_count': variety_count,
        'supplier_count': count_suppliers(db),
    }


def manager_dashboard(db: Session) -> dict:
    return {
        'employees_by_job_title': with_shares(employees_by_job_title(db), value_key='count'),
        'orders_vs_returns': with_shares(orders_vs_returns(db), value_key='value'),
        'purchase_orders_by_status': with_shares(purchase_orders_by_status(db), value_key='value'),
    }


def employee_dashboard(db: Session) -> dict:
    return {
        'orders_by_status': with_shares(orders_by_status(db), value_key='value'),
        'stock_by_warehouse': with_shares(stock_by_warehouse(db), value_key='value'),
    }
