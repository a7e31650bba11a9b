from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from sqlalchemy import and_, delete, select
from sqlalchemy.orm import Session

from scm.config import settings
from scm.models import Inventory, Product, Warehouse
from scm.services.store_errors import execute_or_raise, flush_or_raise


@dataclass(frozen=True)
class InventoryInput:
    warehouse_id: int
    product_id: str
    quantity_on_hand: int
    last_stock_update: date | None


def stock_level(quantity_on_hand: int) -> str:
    if quantity_on_hand > settings.healthy_stock_threshold:
        return 'healthy'
    if quantity_on_hand > settings.low_stock_threshold:
        return 'low'
    return 'critical'


def build_inventory_input(
    *,
    warehouse_id: int | None,
    product_id: str,
    quantity_on_hand: int | None,
    last_stock_update: date | None,
) -> InventoryInput:
    if warehouse_id is None:
        raise ValueError('Warehouse ID is required')
    product_id = product_id.strip()
    if not product_id:
        raise ValueError('Product ID is required')
    if quantity_on_hand is None or quantity_on_hand < 0:
        raise ValueError('Quantity on hand must be zero or more')
    return InventoryInput(
        warehouse_id=warehouse_id,
        product_id=product_id,
        quantity_on_hand=quantity_on_hand,
        last_stock_update=last_stock_update,
    )


def list_inventory(db: Session) -> list[dict]:
    rows = db.execute(
        select(
            Inventory.warehouse_id,
            Inventory.product_id,
            Inventory.quantity_on_hand,
            Inventory.last_stock_update,
            Warehouse.warehouse_name,
            Product.product_name,
        )
        .outerjoin(Warehouse, Warehouse.warehouse_id == Inventory.warehouse_id)
        .outerjoin(Product, Product.product_id == Inventory.product_id)
        .order_by(Inventory.warehouse_id.asc(), Inventory.product_id.asc())
    ).all()
    return [
        {
            'warehouse_id': row.warehouse_id,
            'warehouse_name': row.warehouse_name,
            'product_id': row.product_id,
            'product_name': row.product_name,
            'quantity_on_hand': row.quantity_on_hand,
            'last_stock_update': row.last_stock_update,
            'stock_level': stock_level(row.quantity_on_hand),
        }
        for row in rows
    ]


def _key_clause(warehouse_id: int, product_id: str):
    return and_(Inventory.warehouse_id == warehouse_id, Inventory.product_id == product_id)


def create_inventory(db: Session, *, item: InventoryInput) -> Inventory:
    existing = db.execute(select(Inventory).where(_key_clause(item.warehouse_id, item.product_id))).scalar_one_or_none()
    if existing:
        raise ValueError(f'Inventory for product {item.product_id} in warehouse {item.warehouse_id} already exists')

    row = Inventory(
        warehouse_id=item.warehouse_id,
        product_id=item.product_id,
        quantity_on_hand=item.quantity_on_hand,
        last_stock_update=item.last_stock_update or date.today(),
    )
    db.add(row)
    flush_or_raise(db, failure='Failed to save')
    return row


def update_inventory(db: Session, *, item: InventoryInput) -> Inventory:
    row = db.execute(select(Inventory).where(_key_clause(item.warehouse_id, item.product_id))).scalar_one_or_none()
    if not row:
        raise ValueError('Inventory row not found')

    row.quantity_on_hand = item.quantity_on_hand
    row.last_stock_update = item.last_stock_update or date.today()
    flush_or_raise(db, failure='Failed to save')
    return row


def delete_inventory(db: Session, *, warehouse_id: int, product_id: str) -> None:
    result = execute_or_raise(
        db,
        delete(Inventory).where(_key_clause(warehouse_id, product_id)),
        failure='Failed to delete',
    )
    if result.rowcount == 0:
        raise ValueError('Inventory row not found')
