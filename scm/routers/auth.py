from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from scm.auth import home_path_for
from scm.config import settings
from scm.db import get_db
from scm.dependencies import flash_message, get_client_ip, get_templates, redirect_with_flash
from scm.security.csrf import verify_csrf
from scm.security.sessions import create_web_session, revoke_web_session
from scm.services.account_service import (
    CustomerProfileInput,
    EmployeeProfileInput,
    SignInError,
    sign_in,
    sign_out,
    sign_up_customer,
    sign_up_employee,
)
from scm.services.audit_service import log_audit, log_auth_event
from scm.services.form_utils import form_text, parse_date, parse_decimal
from scm.services.provider_factory import get_identity_provider

router = APIRouter(tags=['auth'])


def _render_login(request: Request, *, error: str | None, email: str = '', status_code: int = 200):
    return request.app.state.templates.TemplateResponse(
        'login.html',
        {
            'request': request,
            'error': error,
            'email': email,
            'message': flash_message(request)['message'],
        },
        status_code=status_code,
    )


@router.get('/login')
def login_page(request: Request):
    return _render_login(request, error=flash_message(request)['error'])


@router.post('/login')
async def login_submit(
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    form = await request.form()
    email = form_text(form, 'email')
    password = str(form.get('password', ''))
    ip = get_client_ip(request)
    user_agent = request.headers.get('user-agent')

    try:
        identity, role = sign_in(db, provider=get_identity_provider(), email=email, password=password)
    except SignInError as exc:
        log_auth_event(
            db,
            attempted_email=email,
            success=False,
            failure_reason=exc.reason,
            user_id=exc.user_id,
            ip=ip,
            user_agent=user_agent,
        )
        db.commit()
        return _render_login(request, error=str(exc), email=email, status_code=401)

    token = create_web_session(
        db,
        user_id=identity.user_id,
        email=identity.email,
        role=role,
        provider_access_token=identity.access_token,
        ip=ip,
        user_agent=user_agent,
    )
    log_auth_event(
        db,
        attempted_email=email,
        success=True,
        user_id=identity.user_id,
        ip=ip,
        user_agent=user_agent,
    )
    log_audit(
        db,
        actor_user_id=identity.user_id,
        action='AUTH_LOGIN',
        ip=ip,
        metadata={'email': identity.email, 'role': role.value},
    )
    db.commit()

    response = RedirectResponse(home_path_for(role), status_code=303)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
        max_age=settings.session_ttl_minutes * 60,
    )
    return response


@router.post('/logout')
def logout(request: Request, db: Session = Depends(get_db), _: None = Depends(verify_csrf)):
    principal = getattr(request.state, 'principal', None)
    token = request.cookies.get(settings.session_cookie_name)
    web_session = revoke_web_session(db, token) if token else None

    log_audit(
        db,
        actor_user_id=principal.user_id if principal else None,
        action='AUTH_LOGOUT',
        ip=get_client_ip(request),
        metadata={},
    )
    db.commit()

    if web_session is not None:
        sign_out(provider=get_identity_provider(), access_token=web_session.provider_access_token)

    response = RedirectResponse('/login', status_code=303)
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get('/customer/register')
def customer_register_page(request: Request, templates: Jinja2Templates = Depends(get_templates)):
    return templates.TemplateResponse('customer_register.html', {'request': request, 'error': None, 'form': {}})


@router.post('/customer/register')
async def customer_register_submit(
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    form = await request.form()
    email = form_text(form, 'email')
    profile = CustomerProfileInput(
        customer_name=form_text(form, 'customer_name'),
        phone=form_text(form, 'phone'),
        address=form_text(form, 'address'),
        payment_terms=form_text(form, 'payment_terms'),
    )
    try:
        customer = sign_up_customer(
            db,
            provider=get_identity_provider(),
            email=email,
            password=str(form.get('password', '')),
            profile=profile,
        )
    except ValueError as exc:
        return request.app.state.templates.TemplateResponse(
            'customer_register.html',
            {'request': request, 'error': str(exc), 'form': {key: form_text(form, key) for key in form.keys() if key != 'password'}},
            status_code=400,
        )

    log_audit(
        db,
        actor_user_id=customer.customer_id,
        action='CUSTOMER_REGISTERED',
        ip=get_client_ip(request),
        metadata={'email': customer.email},
    )
    db.commit()
    return redirect_with_flash('/login', message='Account created successfully! Please sign in.')


@router.get('/employee/register')
def employee_register_page(request: Request, templates: Jinja2Templates = Depends(get_templates)):
    return templates.TemplateResponse('employee_register.html', {'request': request, 'error': None, 'form': {}})


@router.post('/employee/register')
async def employee_register_submit(
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(verify_csrf),
):
    form = await request.form()
    email = form_text(form, 'email')
    try:
        profile = EmployeeProfileInput(
            name=form_text(form, 'name'),
            phone=form_text(form, 'phone'),
            job_title=form_text(form, 'job_title'),
            salary=parse_decimal(form_text(form, 'salary'), field='salary'),
            join_date=parse_date(form_text(form, 'join_date'), field='join date'),
        )
        employee = sign_up_employee(
            db,
            provider=get_identity_provider(),
            email=email,
            password=str(form.get('password', '')),
            profile=profile,
        )
    except ValueError as exc:
        return request.app.state.templates.TemplateResponse(
            'employee_register.html',
            {'request': request, 'error': str(exc), 'form': {key: form_text(form, key) for key in form.keys() if key != 'password'}},
            status_code=400,
        )

    log_audit(
        db,
        actor_user_id=employee.employee_id,
        action='EMPLOYEE_REGISTERED',
        ip=get_client_ip(request),
        metadata={'email': employee.email, 'job_title': employee.job_title},
    )
    db.commit()
    return redirect_with_flash('/login', message='Account created successfully! Please sign in.')
