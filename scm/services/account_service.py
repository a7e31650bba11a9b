from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scm.auth import Role
from scm.config import settings
from scm.models import Customer, Employee
from scm.services.identity_provider import AuthIdentity, IdentityProvider, IdentityProviderError
from scm.services.store_errors import backend_message

logger = logging.getLogger(__name__)


class SignInError(ValueError):
    def __init__(self, message: str, *, reason: str, user_id: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.user_id = user_id


@dataclass(frozen=True)
class CustomerProfileInput:
    customer_name: str
    phone: str
    address: str
    payment_terms: str


@dataclass(frozen=True)
class EmployeeProfileInput:
    name: str
    phone: str
    job_title: str
    salary: Decimal | None
    join_date: date | None


def _require_credentials(email: str, password: str) -> None:
    if not email.strip():
        raise ValueError('Email is required')
    if not password:
        raise ValueError('Password is required')


def sign_up_customer(
    db: Session,
    *,
    provider: IdentityProvider,
    email: str,
    password: str,
    profile: CustomerProfileInput,
) -> Customer:
    _require_credentials(email, password)
    if not profile.customer_name.strip():
        raise ValueError('Customer name is required')

    identity = provider.sign_up(email=email.strip(), password=password)
    customer = Customer(
        customer_id=identity.user_id,
        customer_name=profile.customer_name.strip(),
        email=identity.email,
        phone=profile.phone.strip() or None,
        address=profile.address.strip() or None,
        payment_terms=profile.payment_terms.strip() or None,
    )
    try:
        db.add(customer)
        db.flush()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error('Customer profile insert failed for %s: %s', identity.user_id, exc)
        raise ValueError(f'Failed to insert into Customers table: {backend_message(exc)}') from exc
    return customer


def sign_up_employee(
    db: Session,
    *,
    provider: IdentityProvider,
    email: str,
    password: str,
    profile: EmployeeProfileInput,
) -> Employee:
    _require_credentials(email, password)
    if not profile.name.strip():
        raise ValueError('Employee name is required')

    identity = provider.sign_up(email=email.strip(), password=password)
    employee = Employee(
        employee_id=identity.user_id,
        name=profile.name.strip(),
        email=identity.email,
        phone=profile.phone.strip() or None,
        job_title=profile.job_title.strip() or None,
        salary=profile.salary,
        join_date=profile.join_date or date.today(),
    )
    try:
        db.add(employee)
        db.flush()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error('Employee profile insert failed for %s: %s', identity.user_id, exc)
        raise ValueError(f'Failed to insert into Employees table: {backend_message(exc)}') from exc
    return employee


def resolve_role(db: Session, *, user_id: str) -> Role | None:
    customer_id = db.execute(select(Customer.customer_id).where(Customer.customer_id == user_id)).scalar_one_or_none()
    if customer_id:
        return Role.CUSTOMER

    job_title = db.execute(select(Employee.job_title).where(Employee.employee_id == user_id)).first()
    if job_title is None:
        return None
    if (job_title[0] or '').strip().lower() in settings.manager_job_title_set:
        return Role.MANAGER
    return Role.EMPLOYEE


def sign_in(db: Session, *, provider: IdentityProvider, email: str, password: str) -> tuple[AuthIdentity, Role]:
    if not email.strip() or not password:
        raise SignInError('Email and password are required', reason='MISSING_CREDENTIALS')
    try:
        identity = provider.sign_in_with_password(email=email.strip(), password=password)
    except IdentityProviderError as exc:
        logger.warning('Sign-in rejected for %s: %s', email, exc)
        raise SignInError(f'Login failed: {exc}', reason='BAD_CREDENTIALS') from exc

    role = resolve_role(db, user_id=identity.user_id)
    if role is None:
        sign_out(provider=provider, access_token=identity.access_token)
        raise SignInError('Login failed: no customer or employee profile', reason='NO_PROFILE', user_id=identity.user_id)
    return identity, role


def sign_out(*, provider: IdentityProvider, access_token: str | None) -> None:
    try:
        provider.sign_out(access_token=access_token)
    except IdentityProviderError as exc:
        # Nothing local depends on the provider session any more.
        logger.warning('Provider sign-out failed: %s', exc)
