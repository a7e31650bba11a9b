from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from scm.models import Warehouse
from scm.services.store_errors import execute_or_raise, flush_or_raise


@dataclass(frozen=True)
class WarehouseInput:
    warehouse_name: str
    address: str
    capacity: int | None
    manager_id: int | None


def _validate(data: WarehouseInput) -> None:
    if not data.warehouse_name.strip():
        raise ValueError('Warehouse name is required')
    if data.capacity is not None and data.capacity < 0:
        raise ValueError('Capacity cannot be negative')


def list_warehouses(db: Session) -> list[Warehouse]:
    return db.execute(select(Warehouse).order_by(Warehouse.warehouse_id.asc())).scalars().all()


def create_warehouse(db: Session, *, data: WarehouseInput) -> Warehouse:
    _validate(data)
    warehouse = Warehouse(
        warehouse_name=data.warehouse_name.strip(),
        address=data.address.strip() or None,
        capacity=data.capacity,
        manager_id=data.manager_id,
    )
    db.add(warehouse)
    flush_or_raise(db, failure='Error adding warehouse')
    return warehouse


def update_warehouse(db: Session, *, warehouse_id: int, data: WarehouseInput) -> Warehouse:
    _validate(data)
    warehouse = db.execute(select(Warehouse).where(Warehouse.warehouse_id == warehouse_id)).scalar_one_or_none()
    if not warehouse:
        raise ValueError('Warehouse not found')

    warehouse.warehouse_name = data.warehouse_name.strip()
    warehouse.address = data.address.strip() or None
    warehouse.capacity = data.capacity
    warehouse.manager_id = data.manager_id
    flush_or_raise(db, failure='Error updating warehouse')
    return warehouse


def delete_warehouse(db: Session, *, warehouse_id: int) -> None:
    result = execute_or_raise(
        db,
        delete(Warehouse).where(Warehouse.warehouse_id == warehouse_id),
        failure='Error deleting warehouse',
    )
    if result.rowcount == 0:
        raise ValueError('Warehouse not found')
