from __future__ import annotations

from decimal import Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from scm.models import Product
from scm.services.store_errors import execute_or_raise, flush_or_raise


def list_products(db: Session) -> list[Product]:
    return db.execute(select(Product).order_by(Product.product_name.asc(), Product.product_id.asc())).scalars().all()


def count_products(db: Session) -> int:
    return db.execute(select(func.count()).select_from(Product)).scalar_one()


def _validate(product_name: str, unit_price: Decimal | None) -> None:
    if not product_name.strip():
        raise ValueError('Product name is required')
    if unit_price is None or unit_price < 0:
        raise ValueError('Unit price must be zero or more')


def create_product(
    db: Session,
    *,
    product_id: str,
    product_name: str,
    description: str,
    category: str,
    unit_price: Decimal | None,
) -> Product:
    product_id = product_id.strip()
    if not product_id:
        raise ValueError('Product ID is required')
    _validate(product_name, unit_price)
    if db.execute(select(Product.product_id).where(Product.product_id == product_id)).scalar_one_or_none():
        raise ValueError(f'Product {product_id} already exists')

    product = Product(
        product_id=product_id,
        product_name=product_name.strip(),
        description=description.strip() or None,
        category=category.strip() or None,
        unit_price=unit_price,
    )
    db.add(product)
    flush_or_raise(db, failure='Failed to add product')
    return product


def update_product(
    db: Session,
    *,
    product_id: str,
    product_name: str,
    description: str,
    category: str,
    unit_price: Decimal | None,
) -> Product:
    _validate(product_name, unit_price)
    product = db.execute(select(Product).where(Product.product_id == product_id)).scalar_one_or_none()
    if not product:
        raise ValueError('Product not found')

    product.product_name = product_name.strip()
    product.description = description.strip() or None
    product.category = category.strip() or None
    product.unit_price = unit_price
    flush_or_raise(db, failure='Failed to update product')
    return product


def delete_product(db: Session, *, product_id: str) -> None:
    result = execute_or_raise(
        db,
        delete(Product).where(Product.product_id == product_id),
        failure='Failed to delete product',
    )
    if result.rowcount == 0:
        raise ValueError('Product not found')
