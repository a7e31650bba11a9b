from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
GeneratedId = BigInteger().with_variant(Integer, 'sqlite')


def _new_uuid() -> str:
    return str(uuid4())


class Base(DeclarativeBase):
    pass


class OrderStatus(str, Enum):
    PENDING = 'Pending'
    SHIFTED = 'Shifted'
    DELIVERED = 'Delivered'
    CANCELLED = 'Cancelled'


class PaymentMethod(str, Enum):
    CASH = 'Cash'
    CARD = 'Card'
    ONLINE = 'Online'


class Customer(Base):
    __tablename__ = 'customers'

    customer_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str | None] = mapped_column(Text)
    address: Mapped[str | None] = mapped_column(Text)
    payment_terms: Mapped[str | None] = mapped_column(Text)


class Employee(Base):
    __tablename__ = 'employees'

    employee_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_uuid)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str | None] = mapped_column(Text)
    job_title: Mapped[str | None] = mapped_column(Text)
    salary: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    join_date: Mapped[date | None] = mapped_column(Date)


class Product(Base):
    __tablename__ = 'products'

    product_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    product_name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str | None] = mapped_column(Text)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)


class Warehouse(Base):
    __tablename__ = 'warehouses'

    warehouse_id: Mapped[int] = mapped_column(GeneratedId, primary_key=True)
    warehouse_name: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    capacity: Mapped[int | None] = mapped_column(Integer)
    manager_id: Mapped[int | None] = mapped_column(BigInteger)


class Inventory(Base):
    __tablename__ = 'inventory'
    __table_args__ = (
        CheckConstraint('quantity_on_hand >= 0', name='inventory_non_negative_ck'),
    )

    warehouse_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey('warehouses.warehouse_id', ondelete='CASCADE'), primary_key=True
    )
    product_id: Mapped[str] = mapped_column(
        String(64), ForeignKey('products.product_id', ondelete='CASCADE'), primary_key=True
    )
    quantity_on_hand: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default='0')
    last_stock_update: Mapped[date | None] = mapped_column(Date)

    warehouse: Mapped[Warehouse] = relationship()


class Supplier(Base):
    __tablename__ = 'suppliers'

    supplier_id: Mapped[int] = mapped_column(GeneratedId, primary_key=True)
    supplier_name: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str | None] = mapped_column(Text)
    email: Mapped[str | None] = mapped_column(Text)
    address: Mapped[str | None] = mapped_column(Text)
    payment_term: Mapped[str | None] = mapped_column(Text)


class Order(Base):
    __tablename__ = 'orders'

    order_id: Mapped[int] = mapped_column(GeneratedId, primary_key=True)
    customer_id: Mapped[str] = mapped_column(String(64), ForeignKey('customers.customer_id'), nullable=False)
    payment_method: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=OrderStatus.PENDING.value)
    order_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    required_date: Mapped[date | None] = mapped_column(Date)
    shifted_date: Mapped[date | None] = mapped_column(Date)
    # Carried over from the hosted schema; nothing here sets it and returns are counted from `returns`.
    is_return: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default='false')

    details: Mapped[list[OrderDetail]] = relationship(back_populates='order', cascade='all, delete-orphan')


class OrderDetail(Base):
    __tablename__ = 'order_details'
    __table_args__ = (
        CheckConstraint('quantity > 0', name='order_details_positive_qty_ck'),
    )

    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey('orders.order_id', ondelete='CASCADE'), primary_key=True
    )
    product_id: Mapped[str] = mapped_column(String(64), ForeignKey('products.product_id'), primary_key=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    order: Mapped[Order] = relationship(back_populates='details')
    product: Mapped[Product] = relationship()


class ProductReturn(Base):
    __tablename__ = 'returns'

    return_id: Mapped[int] = mapped_column(GeneratedId, primary_key=True)
    order_id: Mapped[int] = mapped_column(BigInteger, ForeignKey('orders.order_id', ondelete='CASCADE'), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text)
    return_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PurchaseOrder(Base):
    __tablename__ = 'purchase_orders'

    po_id: Mapped[int] = mapped_column(GeneratedId, primary_key=True)
    supplier_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey('suppliers.supplier_id'))
    status: Mapped[str | None] = mapped_column(Text)
    order_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class AuthUser(Base):
    __tablename__ = 'auth_users'

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_uuid)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class WebSession(Base):
    __tablename__ = 'web_sessions'

    id: Mapped[int] = mapped_column(GeneratedId, primary_key=True)
    session_token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    provider_access_token: Mapped[str | None] = mapped_column(Text)
    ip: Mapped[str | None] = mapped_column(String(64))
    user_agent: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    last_seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class AuthEvent(Base):
    __tablename__ = 'auth_events'

    id: Mapped[int] = mapped_column(GeneratedId, primary_key=True)
    attempted_email: Mapped[str] = mapped_column(Text, nullable=False)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    failure_reason: Mapped[str | None] = mapped_column(String(32))
    user_id: Mapped[str | None] = mapped_column(String(64))
    ip: Mapped[str | None] = mapped_column(String(64))
    user_agent: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class AuditLog(Base):
    __tablename__ = 'audit_log'

    id: Mapped[int] = mapped_column(GeneratedId, primary_key=True)
    actor_user_id: Mapped[str | None] = mapped_column(String(64))
    action: Mapped[str] = mapped_column(Text, nullable=False)
    ip: Mapped[str | None] = mapped_column(String(64))
    meta: Mapped[dict] = mapped_column('metadata', JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
