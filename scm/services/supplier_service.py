from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from scm.models import Supplier
from scm.services.store_errors import execute_or_raise, flush_or_raise


@dataclass(frozen=True)
class SupplierInput:
    supplier_name: str
    phone: str
    email: str
    address: str
    payment_term: str


def list_suppliers(db: Session) -> list[Supplier]:
    return db.execute(select(Supplier).order_by(Supplier.supplier_id.asc())).scalars().all()


def count_suppliers(db: Session) -> int:
    return db.execute(select(func.count()).select_from(Supplier)).scalar_one()


def _apply(supplier: Supplier, data: SupplierInput) -> None:
    if not data.supplier_name.strip():
        raise ValueError('Supplier name is required')
    supplier.supplier_name = data.supplier_name.strip()
    supplier.phone = data.phone.strip() or None
    supplier.email = data.email.strip() or None
    supplier.address = data.address.strip() or None
    supplier.payment_term = data.payment_term.strip() or None


def create_supplier(db: Session, *, data: SupplierInput) -> Supplier:
    supplier = Supplier()
    _apply(supplier, data)
    db.add(supplier)
    flush_or_raise(db, failure='Failed to add supplier')
    return supplier


def update_supplier(db: Session, *, supplier_id: int, data: SupplierInput) -> Supplier:
    supplier = db.execute(select(Supplier).where(Supplier.supplier_id == supplier_id)).scalar_one_or_none()
    if not supplier:
        raise ValueError('Supplier not found')
    _apply(supplier, data)
    flush_or_raise(db, failure='Failed to update supplier')
    return supplier


def delete_supplier(db: Session, *, supplier_id: int) -> None:
    result = execute_or_raise(
        db,
        delete(Supplier).where(Supplier.supplier_id == supplier_id),
        failure='Failed to delete supplier',
    )
    if result.rowcount == 0:
        raise ValueError('Supplier not found')
