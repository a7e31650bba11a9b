from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from scm.auth import Principal, Role, require_role
from scm.db import get_db
from scm.dependencies import flash_message, redirect_with_flash
from scm.security.csrf import verify_csrf
from scm.services.audit_service import audit_action
from scm.services.dashboard_service import manager_dashboard
from scm.services.employee_service import create_employee, delete_employee, list_employees, update_employee
from scm.services.form_utils import form_text, parse_decimal, parse_int
from scm.services.supplier_service import (
    SupplierInput,
    create_supplier,
    delete_supplier,
    list_suppliers,
    update_supplier,
)
from scm.services.warehouse_service import (
    WarehouseInput,
    create_warehouse,
    delete_warehouse,
    list_warehouses,
    update_warehouse,
)

router = APIRouter(prefix='/manager', tags=['manager'])
manager_access = require_role(Role.MANAGER)


@router.get('')
def manager_root(_: Principal = Depends(manager_access)):
    return redirect_with_flash('/manager/homepage')


@router.get('/homepage')
def homepage(
    request: Request,
    principal: Principal = Depends(manager_access),
    db: Session = Depends(get_db),
):
    return request.app.state.templates.TemplateResponse(
        'manager_homepage.html',
        {
            'request': request,
            'principal': principal,
            'dashboard': manager_dashboard(db),
        },
    )


@router.get('/employees')
def employees_page(
    request: Request,
    principal: Principal = Depends(manager_access),
    db: Session = Depends(get_db),
):
    employees = list_employees(db)
    edit_raw = request.query_params.get('edit', '').strip()
    return request.app.state.templates.TemplateResponse(
        'manager_employees.html',
        {
            'request': request,
            'principal': principal,
            'employees': employees,
            'editing': next((emp for emp in employees if emp.employee_id == edit_raw), None),
            **flash_message(request),
        },
    )


@router.post('/employees')
async def employees_create(
    request: Request,
    principal: Principal = Depends(manager_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    form = await request.form()
    try:
        employee = create_employee(
            db,
            name=form_text(form, 'name'),
            email=form_text(form, 'email'),
            phone=form_text(form, 'phone'),
            job_title=form_text(form, 'job_title'),
            salary=parse_decimal(form_text(form, 'salary'), field='salary'),
        )
    except ValueError as exc:
        return redirect_with_flash('/manager/employees', error=str(exc))

    audit_action(db, request, principal, 'EMPLOYEE_CREATED', employee_id=employee.employee_id)
    return redirect_with_flash('/manager/employees', message='Employee added successfully!')


@router.post('/employees/{employee_id}/update')
async def employees_update(
    employee_id: str,
    request: Request,
    principal: Principal = Depends(manager_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    form = await request.form()
    try:
        employee = update_employee(
            db,
            employee_id=employee_id,
            phone=form_text(form, 'phone'),
            job_title=form_text(form, 'job_title'),
            salary=parse_decimal(form_text(form, 'salary'), field='salary'),
        )
    except ValueError as exc:
        return redirect_with_flash('/manager/employees', error=str(exc))

    audit_action(db, request, principal, 'EMPLOYEE_UPDATED', employee_id=employee_id, job_title=employee.job_title)
    return redirect_with_flash('/manager/employees', message='Employee information updated successfully!')


@router.post('/employees/{employee_id}/delete')
async def employees_delete(
    employee_id: str,
    request: Request,
    principal: Principal = Depends(manager_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    try:
        delete_employee(db, employee_id=employee_id)
    except ValueError as exc:
        return redirect_with_flash('/manager/employees', error=str(exc))

    audit_action(db, request, principal, 'EMPLOYEE_DELETED', employee_id=employee_id)
    return redirect_with_flash('/manager/employees', message='Employee deleted successfully!')


@router.get('/warehouses')
def warehouses_page(
    request: Request,
    principal: Principal = Depends(manager_access),
    db: Session = Depends(get_db),
):
    warehouses = list_warehouses(db)
    edit_raw = request.query_params.get('edit', '').strip()
    return request.app.state.templates.TemplateResponse(
        'manager_warehouses.html',
        {
            'request': request,
            'principal': principal,
            'warehouses': warehouses,
            'editing': next((wh for wh in warehouses if str(wh.warehouse_id) == edit_raw), None),
            **flash_message(request),
        },
    )


def _warehouse_from_form(form) -> WarehouseInput:
    return WarehouseInput(
        warehouse_name=form_text(form, 'warehouse_name'),
        address=form_text(form, 'address'),
        capacity=parse_int(form_text(form, 'capacity'), field='capacity'),
        manager_id=parse_int(form_text(form, 'manager_id'), field='manager ID'),
    )


@router.post('/warehouses')
async def warehouses_create(
    request: Request,
    principal: Principal = Depends(manager_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    form = await request.form()
    try:
        warehouse = create_warehouse(db, data=_warehouse_from_form(form))
    except ValueError as exc:
        return redirect_with_flash('/manager/warehouses', error=str(exc))

    audit_action(db, request, principal, 'WAREHOUSE_CREATED', warehouse_id=warehouse.warehouse_id)
    return redirect_with_flash('/manager/warehouses', message='New warehouse added successfully!')


@router.post('/warehouses/{warehouse_id}/update')
async def warehouses_update(
    warehouse_id: int,
    request: Request,
    principal: Principal = Depends(manager_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    form = await request.form()
    try:
        update_warehouse(db, warehouse_id=warehouse_id, data=_warehouse_from_form(form))
    except ValueError as exc:
        return redirect_with_flash('/manager/warehouses', error=str(exc))

    audit_action(db, request, principal, 'WAREHOUSE_UPDATED', warehouse_id=warehouse_id)
    return redirect_with_flash('/manager/warehouses', message='Warehouse information updated successfully!')


@router.post('/warehouses/{warehouse_id}/delete')
async def warehouses_delete(
    warehouse_id: int,
    request: Request,
    principal: Principal = Depends(manager_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    try:
        delete_warehouse(db, warehouse_id=warehouse_id)
    except ValueError as exc:
        return redirect_with_flash('/manager/warehouses', error=str(exc))

    audit_action(db, request, principal, 'WAREHOUSE_DELETED', warehouse_id=warehouse_id)
    return redirect_with_flash('/manager/warehouses', message='Warehouse deleted successfully!')


@router.get('/suppliers')
def suppliers_page(
    request: Request,
    principal: Principal = Depends(manager_access),
    db: Session = Depends(get_db),
):
    suppliers = list_suppliers(db)
    edit_raw = request.query_params.get('edit', '').strip()
    return request.app.state.templates.TemplateResponse(
        'manager_suppliers.html',
        {
            'request': request,
            'principal': principal,
            'suppliers': suppliers,
            'editing': next((s for s in suppliers if str(s.supplier_id) == edit_raw), None),
            **flash_message(request),
        },
    )


def _supplier_from_form(form) -> SupplierInput:
    return SupplierInput(
        supplier_name=form_text(form, 'supplier_name'),
        phone=form_text(form, 'phone'),
        email=form_text(form, 'email'),
        address=form_text(form, 'address'),
        payment_term=form_text(form, 'payment_term'),
    )


@router.post('/suppliers')
async def suppliers_create(
    request: Request,
    principal: Principal = Depends(manager_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    form = await request.form()
    try:
        supplier = create_supplier(db, data=_supplier_from_form(form))
    except ValueError as exc:
        return redirect_with_flash('/manager/suppliers', error=str(exc))

    audit_action(db, request, principal, 'SUPPLIER_CREATED', supplier_id=supplier.supplier_id)
    return redirect_with_flash('/manager/suppliers', message='Supplier added successfully')


@router.post('/suppliers/{supplier_id}/update')
async def suppliers_update(
    supplier_id: int,
    request: Request,
    principal: Principal = Depends(manager_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    form = await request.form()
    try:
        update_supplier(db, supplier_id=supplier_id, data=_supplier_from_form(form))
    except ValueError as exc:
        return redirect_with_flash('/manager/suppliers', error=str(exc))

    audit_action(db, request, principal, 'SUPPLIER_UPDATED', supplier_id=supplier_id)
    return redirect_with_flash('/manager/suppliers', message='Supplier updated successfully')


@router.post('/suppliers/{supplier_id}/delete')
async def suppliers_delete(
    supplier_id: int,
    request: Request,
    principal: Principal = Depends(manager_access),
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    try:
        delete_supplier(db, supplier_id=supplier_id)
    except ValueError as exc:
        return redirect_with_flash('/manager/suppliers', error=str(exc))

    audit_action(db, request, principal, 'SUPPLIER_DELETED', supplier_id=supplier_id)
    return redirect_with_flash('/manager/suppliers', message='Supplier deleted successfully')
