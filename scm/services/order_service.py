from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scm.models import Order, OrderDetail, OrderStatus, PaymentMethod, Product
from scm.services.store_errors import backend_message, flush_or_raise

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
PAYMENT_METHODS = [method.value for method in PaymentMethod]
ORDER_STATUSES = [status.value for status in OrderStatus]


@dataclass(frozen=True)
class OrderInput:
    product_id: str
    quantity: int
    unit_price: Decimal
    payment_method: str

    @property
    def total_price(self) -> Decimal:
        return line_total(self.quantity, self.unit_price)


def line_total(quantity: int, unit_price: Decimal) -> Decimal:
    return (Decimal(quantity) * Decimal(unit_price)).quantize(CENT, rounding=ROUND_HALF_UP)


def build_order_input(
    *,
    product_id: str,
    quantity: int | None,
    unit_price: Decimal | None,
    payment_method: str,
) -> OrderInput:
    product_id = (product_id or '').strip()
    if not product_id:
        raise ValueError('Product ID is required')
    if quantity is None or quantity <= 0:
        raise ValueError('Quantity must be greater than zero')
    if unit_price is None or unit_price <= 0:
        raise ValueError('Unit price must be greater than zero')
    if payment_method not in PAYMENT_METHODS:
        raise ValueError(f'Payment method must be one of {", ".join(PAYMENT_METHODS)}')
    return OrderInput(
        product_id=product_id,
        quantity=quantity,
        unit_price=unit_price,
        payment_method=payment_method,
    )


def place_order(
    db: Session,
    *,
    customer_id: str,
    product_id: str,
    quantity: int | None,
    unit_price: Decimal | None,
    payment_method: str,
) -> Order:
    """Create an order and its single detail line in one transaction.

    The parent row is flushed first so the detail can reference the generated
    order_id. If either insert fails the whole transaction is rolled back, so a
    failed detail never leaves a parent order behind. The caller commits.
    Nothing de-duplicates resubmissions.
    """
    order_input = build_order_input(
        product_id=product_id,
        quantity=quantity,
        unit_price=unit_price,
        payment_method=payment_method,
    )

    order = Order(
        customer_id=customer_id,
        payment_method=order_input.payment_method,
        status=OrderStatus.PENDING.value,
        order_date=datetime.now(tz=timezone.utc),
    )
    try:
        db.add(order)
        db.flush()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error('Order insert failed for customer %s: %s', customer_id, exc)
        raise ValueError(f'Error placing order: {backend_message(exc)}') from exc

    order_id = order.order_id
    try:
        db.add(
            OrderDetail(
                order_id=order_id,
                product_id=order_input.product_id,
                quantity=order_input.quantity,
                unit_price=order_input.unit_price,
            )
        )
        db.flush()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error('Order detail insert failed for order %s, order discarded: %s', order_id, exc)
        raise ValueError(f'Error placing order: {backend_message(exc)}') from exc
    return order


def list_customer_orders(db: Session, *, customer_id: str) -> list[dict]:
    rows = db.execute(
        select(
            Order.order_id,
            Order.customer_id,
            Order.order_date,
            Order.status,
            OrderDetail.quantity,
            OrderDetail.unit_price,
            Product.product_name,
        )
        .join(OrderDetail, OrderDetail.order_id == Order.order_id)
        .outerjoin(Product, Product.product_id == OrderDetail.product_id)
        .where(Order.customer_id == customer_id)
        .order_by(Order.order_date.desc(), Order.order_id.desc())
    ).all()
    return [
        {
            'order_id': row.order_id,
            'customer_id': row.customer_id,
            'product_name': row.product_name,
            'quantity': row.quantity,
            'unit_price': row.unit_price,
            'total_price': line_total(row.quantity, row.unit_price),
            'order_date': row.order_date,
            'status': row.status,
        }
        for row in rows
    ]


def list_orders(db: Session) -> list[Order]:
    return db.execute(select(Order).order_by(Order.order_id.asc())).scalars().all()


def update_order(
    db: Session,
    *,
    order_id: int,
    required_date: date | None,
    shifted_date: date | None,
    status: str,
) -> Order:
    if status not in ORDER_STATUSES:
        raise ValueError(f'Status must be one of {", ".join(ORDER_STATUSES)}')
    order = db.execute(select(Order).where(Order.order_id == order_id)).scalar_one_or_none()
    if not order:
        raise ValueError('Order not found')

    order.required_date = required_date
    order.shifted_date = shifted_date
    order.status = status
    flush_or_raise(db, failure='Failed to update order')
    return order


def status_badge(status: str | None) -> str:
    if status == OrderStatus.DELIVERED.value:
        return 'ok'
    if status == OrderStatus.SHIFTED.value:
        return 'info'
    if status == OrderStatus.PENDING.value:
        return 'warn'
    return 'bad'

