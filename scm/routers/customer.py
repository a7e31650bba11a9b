from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from scm.auth import Principal, Role, require_role
from scm.db import get_db
from scm.dependencies import flash_message, redirect_with_flash
from scm.security.csrf import verify_csrf
from scm.services.audit_service import audit_action
from scm.services.dashboard_service import customer_stats
from scm.services.form_utils import form_text, parse_decimal, parse_int
from scm.services.order_service import PAYMENT_METHODS, line_total, list_customer_orders, place_order
from scm.services.product_service import list_products

router = APIRouter(prefix='/customer', tags=['customer'])
customer_access = require_role(Role.CUSTOMER)


@router.get('/homepage')
def homepage(
    request: Request,
    principal: Principal = Depends(customer_access),
    db: Session = Depends(get_db),
):
    return request.app.state.templates.TemplateResponse(
        'customer_homepage.html',
        {
            'request': request,
            'principal': principal,
            'stats': customer_stats(db),
            **flash_message(request),
        },
    )


@router.get('/place-order')
def place_order_page(
    request: Request,
    principal: Principal = Depends(customer_access),
):
    return request.app.state.templates.TemplateResponse(
        'customer_place_order.html',
        {
            'request': request,
            'principal': principal,
            'payment_methods': PAYMENT_METHODS,
            'form': {'quantity': '1', 'unit_price': '', 'payment_method': PAYMENT_METHODS[0]},
            'error': None,
        },
    )


@router.post('/place-order')
async def place_order_submit(
    request: Request,
    principal: Principal = Depends(customer_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    form = await request.form()
    product_id = form_text(form, 'product_id')
    payment_method = form_text(form, 'payment_method')

    try:
        quantity = parse_int(form_text(form, 'quantity'), field='quantity')
        unit_price = parse_decimal(form_text(form, 'unit_price'), field='unit price')
        order = place_order(
            db,
            customer_id=principal.user_id,
            product_id=product_id,
            quantity=quantity,
            unit_price=unit_price,
            payment_method=payment_method,
        )
    except ValueError as exc:
        return request.app.state.templates.TemplateResponse(
            'customer_place_order.html',
            {
                'request': request,
                'principal': principal,
                'payment_methods': PAYMENT_METHODS,
                'form': {
                    'product_id': product_id,
                    'quantity': form_text(form, 'quantity'),
                    'unit_price': form_text(form, 'unit_price'),
                    'payment_method': payment_method,
                },
                'error': str(exc),
            },
            status_code=400,
        )

    audit_action(
        db,
        request,
        principal,
        'ORDER_PLACED',
        order_id=order.order_id,
        product_id=product_id,
        quantity=quantity,
        total_price=str(line_total(quantity, unit_price)),
    )
    return redirect_with_flash('/customer/homepage', message=f'Order #{order.order_id} placed successfully')


@router.get('/view-orders')
def view_orders(
    request: Request,
    principal: Principal = Depends(customer_access),
    db: Session = Depends(get_db),
):
    return request.app.state.templates.TemplateResponse(
        'customer_view_orders.html',
        {
            'request': request,
            'principal': principal,
            'orders': list_customer_orders(db, customer_id=principal.user_id),
        },
    )


@router.get('/view-product')
def view_products(
    request: Request,
    principal: Principal = Depends(customer_access),
    db: Session = Depends(get_db),
):
    return request.app.state.templates.TemplateResponse(
        'customer_view_product.html',
        {
            'request': request,
            'principal': principal,
            'products': list_products(db),
        },
    )
