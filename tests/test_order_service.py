from __future__ import annotations

import unittest
from decimal import Decimal
from unittest.mock import MagicMock

from sqlalchemy import create_engine, event, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from scm.models import Base, Customer, Order, OrderDetail, Product
from scm.services.order_service import (
    build_order_input,
    line_total,
    list_customer_orders,
    place_order,
    status_badge,
    update_order,
)


def _enable_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


class OrderMathTests(unittest.TestCase):
    def test_line_total_is_quantity_times_price(self) -> None:
        self.assertEqual(line_total(3, Decimal('10.50')), Decimal('31.50'))

    def test_order_input_total(self) -> None:
        order_input = build_order_input(product_id=' P-1 ', quantity=3, unit_price=Decimal('10.50'), payment_method='Card')
        self.assertEqual(order_input.product_id, 'P-1')
        self.assertEqual(order_input.total_price, Decimal('31.50'))

    def test_line_total_rounds_half_up_to_cents(self) -> None:
        self.assertEqual(line_total(1, Decimal('0.125')), Decimal('0.13'))


class PlaceOrderValidationTests(unittest.TestCase):
    def test_empty_product_id_rejected_before_any_store_call(self) -> None:
        db = MagicMock()

        with self.assertRaisesRegex(ValueError, 'Product ID is required'):
            place_order(
                db,
                customer_id='cust-1',
                product_id='   ',
                quantity=1,
                unit_price=Decimal('5.00'),
                payment_method='Cash',
            )

        db.add.assert_not_called()
        db.flush.assert_not_called()

    def test_non_positive_quantity_rejected(self) -> None:
        db = MagicMock()

        with self.assertRaisesRegex(ValueError, 'Quantity'):
            place_order(
                db,
                customer_id='cust-1',
                product_id='P-1',
                quantity=0,
                unit_price=Decimal('5.00'),
                payment_method='Cash',
            )

        db.add.assert_not_called()

    def test_unknown_payment_method_rejected(self) -> None:
        with self.assertRaisesRegex(ValueError, 'Payment method'):
            build_order_input(product_id='P-1', quantity=1, unit_price=Decimal('1'), payment_method='Barter')

    def test_update_order_rejects_unknown_status(self) -> None:
        db = MagicMock()

        with self.assertRaisesRegex(ValueError, 'Status must be one of'):
            update_order(db, order_id=1, required_date=None, shifted_date=None, status='Shipped')

        db.execute.assert_not_called()

    def test_status_badge(self) -> None:
        self.assertEqual(status_badge('Delivered'), 'ok')
        self.assertEqual(status_badge('Pending'), 'warn')
        self.assertEqual(status_badge('Cancelled'), 'bad')


class PlaceOrderStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine(
            'sqlite://',
            poolclass=StaticPool,
            connect_args={'check_same_thread': False},
        )
        event.listen(self.engine, 'connect', _enable_foreign_keys)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

        with self.Session() as db:
            db.add(Customer(customer_id='cust-1', customer_name='Ada', email='ada@example.com'))
            db.add(Customer(customer_id='cust-2', customer_name='Bob', email='bob@example.com'))
            db.add(Product(product_id='P-1', product_name='Widget', unit_price=Decimal('10.50')))
            db.commit()

    def tearDown(self) -> None:
        self.engine.dispose()

    def test_read_back_contains_new_order(self) -> None:
        with self.Session() as db:
            order = place_order(
                db,
                customer_id='cust-1',
                product_id='P-1',
                quantity=3,
                unit_price=Decimal('10.50'),
                payment_method='Card',
            )
            db.commit()
            order_id = order.order_id

        with self.Session() as db:
            rows = list_customer_orders(db, customer_id='cust-1')
            other_rows = list_customer_orders(db, customer_id='cust-2')

        self.assertEqual([row['order_id'] for row in rows], [order_id])
        self.assertEqual(rows[0]['product_name'], 'Widget')
        self.assertEqual(rows[0]['quantity'], 3)
        self.assertEqual(rows[0]['total_price'], Decimal('31.50'))
        self.assertEqual(rows[0]['status'], 'Pending')
        self.assertEqual(other_rows, [])

    def test_placed_order_is_not_flagged_as_return(self) -> None:
        with self.Session() as db:
            order = place_order(
                db,
                customer_id='cust-1',
                product_id='P-1',
                quantity=1,
                unit_price=Decimal('10.50'),
                payment_method='Cash',
            )
            db.commit()
            order_id = order.order_id

        with self.Session() as db:
            self.assertIs(db.get(Order, order_id).is_return, False)

    def test_detail_failure_leaves_no_orphan_order(self) -> None:
        with self.Session() as db:
            with self.assertRaisesRegex(ValueError, 'Error placing order'):
                place_order(
                    db,
                    customer_id='cust-1',
                    product_id='NO-SUCH-PRODUCT',
                    quantity=1,
                    unit_price=Decimal('2.00'),
                    payment_method='Cash',
                )
            db.commit()

        with self.Session() as db:
            self.assertEqual(db.execute(select(func.count()).select_from(Order)).scalar_one(), 0)
            self.assertEqual(db.execute(select(func.count()).select_from(OrderDetail)).scalar_one(), 0)

    def test_each_submission_creates_a_new_order(self) -> None:
        with self.Session() as db:
            for _ in range(2):
                place_order(
                    db,
                    customer_id='cust-1',
                    product_id='P-1',
                    quantity=1,
                    unit_price=Decimal('10.50'),
                    payment_method='Online',
                )
            db.commit()

        with self.Session() as db:
            self.assertEqual(len(list_customer_orders(db, customer_id='cust-1')), 2)

    def test_update_order_sets_status_and_dates(self) -> None:
        with self.Session() as db:
            order = place_order(
                db,
                customer_id='cust-1',
                product_id='P-1',
                quantity=1,
                unit_price=Decimal('10.50'),
                payment_method='Cash',
            )
            db.commit()
            order_id = order.order_id

        with self.Session() as db:
            updated = update_order(db, order_id=order_id, required_date=None, shifted_date=None, status='Shifted')
            db.commit()
            self.assertEqual(updated.status, 'Shifted')

        with self.Session() as db:
            with self.assertRaisesRegex(ValueError, 'Order not found'):
                update_order(db, order_id=order_id + 100, required_date=None, shifted_date=None, status='Delivered')


if __name__ == '__main__':
    unittest.main()
