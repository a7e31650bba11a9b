from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from scm.auth import Principal, Role, require_role
from scm.db import get_db
from scm.dependencies import flash_message, redirect_with_flash
from scm.security.csrf import verify_csrf
from scm.services.audit_service import audit_action
from scm.services.dashboard_service import employee_dashboard
from scm.services.form_utils import form_text, parse_date, parse_decimal, parse_int
from scm.services.inventory_service import (
    build_inventory_input,
    create_inventory,
    delete_inventory,
    list_inventory,
    update_inventory,
)
from scm.services.order_service import ORDER_STATUSES, list_orders, status_badge, update_order
from scm.services.product_service import create_product, delete_product, list_products, update_product

router = APIRouter(prefix='/employee', tags=['employee'])
employee_access = require_role(Role.EMPLOYEE, Role.MANAGER)


@router.get('/homepage')
def homepage(
    request: Request,
    principal: Principal = Depends(employee_access),
    db: Session = Depends(get_db),
):
    return request.app.state.templates.TemplateResponse(
        'employee_homepage.html',
        {
            'request': request,
            'principal': principal,
            'dashboard': employee_dashboard(db),
        },
    )


@router.get('/orders')
def orders_page(
    request: Request,
    principal: Principal = Depends(employee_access),
    db: Session = Depends(get_db),
):
    orders = list_orders(db)
    edit_raw = request.query_params.get('edit', '').strip()
    editing = next((order for order in orders if str(order.order_id) == edit_raw), None)
    return request.app.state.templates.TemplateResponse(
        'employee_orders.html',
        {
            'request': request,
            'principal': principal,
            'orders': orders,
            'editing': editing,
            'statuses': ORDER_STATUSES,
            'status_badge': status_badge,
            **flash_message(request),
        },
    )


@router.post('/orders/{order_id}/update')
async def orders_update(
    order_id: int,
    request: Request,
    principal: Principal = Depends(employee_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    form = await request.form()
    try:
        order = update_order(
            db,
            order_id=order_id,
            required_date=parse_date(form_text(form, 'required_date'), field='required date'),
            shifted_date=parse_date(form_text(form, 'shifted_date'), field='shifted date'),
            status=form_text(form, 'status'),
        )
    except ValueError as exc:
        return redirect_with_flash('/employee/orders', error=str(exc))

    audit_action(db, request, principal, 'ORDER_UPDATED', order_id=order_id, status=order.status)
    return redirect_with_flash('/employee/orders', message='Order updated successfully')


@router.get('/products')
def products_page(
    request: Request,
    principal: Principal = Depends(employee_access),
    db: Session = Depends(get_db),
):
    products = list_products(db)
    edit_raw = request.query_params.get('edit', '').strip()
    editing = next((product for product in products if product.product_id == edit_raw), None)
    return request.app.state.templates.TemplateResponse(
        'employee_products.html',
        {
            'request': request,
            'principal': principal,
            'products': products,
            'editing': editing,
            **flash_message(request),
        },
    )


@router.post('/products')
async def products_create(
    request: Request,
    principal: Principal = Depends(employee_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    form = await request.form()
    product_id = form_text(form, 'product_id')
    try:
        create_product(
            db,
            product_id=product_id,
            product_name=form_text(form, 'product_name'),
            description=form_text(form, 'description'),
            category=form_text(form, 'category'),
            unit_price=parse_decimal(form_text(form, 'unit_price'), field='unit price'),
        )
    except ValueError as exc:
        return redirect_with_flash('/employee/products', error=str(exc))

    audit_action(db, request, principal, 'PRODUCT_CREATED', product_id=product_id)
    return redirect_with_flash('/employee/products', message='Product added successfully')


@router.post('/products/{product_id}/update')
async def products_update(
    product_id: str,
    request: Request,
    principal: Principal = Depends(employee_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    form = await request.form()
    try:
        update_product(
            db,
            product_id=product_id,
            product_name=form_text(form, 'product_name'),
            description=form_text(form, 'description'),
            category=form_text(form, 'category'),
            unit_price=parse_decimal(form_text(form, 'unit_price'), field='unit price'),
        )
    except ValueError as exc:
        return redirect_with_flash('/employee/products', error=str(exc))

    audit_action(db, request, principal, 'PRODUCT_UPDATED', product_id=product_id)
    return redirect_with_flash('/employee/products', message='Product updated successfully')


@router.post('/products/{product_id}/delete')
async def products_delete(
    product_id: str,
    request: Request,
    principal: Principal = Depends(employee_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    try:
        delete_product(db, product_id=product_id)
    except ValueError as exc:
        return redirect_with_flash('/employee/products', error=str(exc))

    audit_action(db, request, principal, 'PRODUCT_DELETED', product_id=product_id)
    return redirect_with_flash('/employee/products', message='Product deleted successfully')


@router.get('/inventory')
def inventory_page(
    request: Request,
    principal: Principal = Depends(employee_access),
    db: Session = Depends(get_db),
):
    rows = list_inventory(db)
    edit_warehouse = request.query_params.get('warehouse_id', '').strip()
    edit_product = request.query_params.get('product_id', '').strip()
    editing = next(
        (
            row
            for row in rows
            if str(row['warehouse_id']) == edit_warehouse and row['product_id'] == edit_product
        ),
        None,
    )
    return request.app.state.templates.TemplateResponse(
        'employee_inventory.html',
        {
            'request': request,
            'principal': principal,
            'rows': rows,
            'editing': editing,
            **flash_message(request),
        },
    )


async def _inventory_from_form(request: Request):
    form = await request.form()
    return build_inventory_input(
        warehouse_id=parse_int(form_text(form, 'warehouse_id'), field='warehouse ID'),
        product_id=form_text(form, 'product_id'),
        quantity_on_hand=parse_int(form_text(form, 'quantity_on_hand'), field='quantity'),
        last_stock_update=parse_date(form_text(form, 'last_stock_update'), field='last stock update'),
    )


@router.post('/inventory')
async def inventory_create(
    request: Request,
    principal: Principal = Depends(employee_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    try:
        item = await _inventory_from_form(request)
        create_inventory(db, item=item)
    except ValueError as exc:
        return redirect_with_flash('/employee/inventory', error=str(exc))

    audit_action(
        db,
        request,
        principal,
        'INVENTORY_CREATED',
        warehouse_id=item.warehouse_id,
        product_id=item.product_id,
        quantity=item.quantity_on_hand,
    )
    return redirect_with_flash('/employee/inventory', message='Inventory added successfully')


@router.post('/inventory/update')
async def inventory_update(
    request: Request,
    principal: Principal = Depends(employee_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    try:
        item = await _inventory_from_form(request)
        update_inventory(db, item=item)
    except ValueError as exc:
        return redirect_with_flash('/employee/inventory', error=str(exc))

    audit_action(
        db,
        request,
        principal,
        'INVENTORY_UPDATED',
        warehouse_id=item.warehouse_id,
        product_id=item.product_id,
        quantity=item.quantity_on_hand,
    )
    return redirect_with_flash('/employee/inventory', message='Inventory updated successfully')


@router.post('/inventory/delete')
async def inventory_delete(
    request: Request,
    principal: Principal = Depends(employee_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    form = await request.form()
    product_id = form_text(form, 'product_id')
    try:
        warehouse_id = parse_int(form_text(form, 'warehouse_id'), field='warehouse ID')
        if warehouse_id is None or not product_id:
            raise ValueError('Warehouse ID and product ID are required')
        delete_inventory(db, warehouse_id=warehouse_id, product_id=product_id)
    except ValueError as exc:
        return redirect_with_flash('/employee/inventory', error=str(exc))

    audit_action(db, request, principal, 'INVENTORY_DELETED', warehouse_id=warehouse_id, product_id=product_id)
    return redirect_with_flash('/employee/inventory', message='Inventory deleted successfully')
