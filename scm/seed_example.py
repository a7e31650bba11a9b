from datetime import date
from decimal import Decimal

from sqlalchemy import select

from scm.db import SessionLocal, engine
from scm.models import (
    AuthUser,
    Base,
    Customer,
    Employee,
    Inventory,
    Product,
    PurchaseOrder,
    Supplier,
    Warehouse,
)
from scm.services.local_identity_provider import password_hash


def _auth_user(db, email: str, password: str) -> AuthUser:
    user = db.execute(select(AuthUser).where(AuthUser.email == email)).scalar_one_or_none()
    if not user:
        user = AuthUser(email=email, password_hash=password_hash.hash(password))
        db.add(user)
        db.flush()
    return user


def seed() -> None:
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        customer_user = _auth_user(db, 'customer@example.com', 'customerpass')
        if not db.get(Customer, customer_user.id):
            db.add(
                Customer(
                    customer_id=customer_user.id,
                    customer_name='Demo Customer',
                    email=customer_user.email,
                    address='1 Market Street',
                    payment_terms='Net 30',
                )
            )

        for email, password, name, job_title in (
            ('employee@example.com', 'employeepass', 'Demo Employee', 'Warehouse Worker'),
            ('manager@example.com', 'managerpass', 'Demo Manager', 'Manager'),
        ):
            user = _auth_user(db, email, password)
            if not db.get(Employee, user.id):
                db.add(
                    Employee(
                        employee_id=user.id,
                        name=name,
                        email=email,
                        job_title=job_title,
                        join_date=date.today(),
                    )
                )

        products = db.execute(select(Product)).scalars().all()
        if not products:
            for product_id, name, category, price in (
                ('P-100', 'Pallet Wrap', 'Packaging', '12.50'),
                ('P-200', 'Shipping Carton', 'Packaging', '1.75'),
                ('P-300', 'Hand Truck', 'Equipment', '89.00'),
            ):
                db.add(Product(product_id=product_id, product_name=name, category=category, unit_price=Decimal(price)))
            db.flush()

        warehouse = db.execute(select(Warehouse).where(Warehouse.warehouse_name == 'Central')).scalar_one_or_none()
        if not warehouse:
            warehouse = Warehouse(warehouse_name='Central', address='42 Dock Road', capacity=5000)
            db.add(warehouse)
            db.flush()
            db.add(Inventory(warehouse_id=warehouse.warehouse_id, product_id='P-100', quantity_on_hand=120, last_stock_update=date.today()))
            db.add(Inventory(warehouse_id=warehouse.warehouse_id, product_id='P-300', quantity_on_hand=4, last_stock_update=date.today()))

        supplier = db.execute(select(Supplier).where(Supplier.supplier_name == 'Acme Supply')).scalar_one_or_none()
        if not supplier:
            supplier = Supplier(supplier_name='Acme Supply', email='orders@acme.example', payment_term='Net 15')
            db.add(supplier)
            db.flush()
            db.add(PurchaseOrder(supplier_id=supplier.supplier_id, status='Pending'))

        db.commit()


if __name__ == '__main__':
    seed()
