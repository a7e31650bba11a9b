from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from scm.models import Employee
from scm.services.store_errors import execute_or_raise, flush_or_raise


def list_employees(db: Session) -> list[Employee]:
    return db.execute(select(Employee).order_by(Employee.name.asc())).scalars().all()


def list_job_titles(db: Session) -> list[str | None]:
    return list(db.execute(select(Employee.job_title)).scalars().all())


def create_employee(
    db: Session,
    *,
    name: str,
    email: str,
    phone: str,
    job_title: str,
    salary: Decimal | None,
) -> Employee:
    """Manager-created employees get a generated id and no sign-in identity."""
    if not name.strip():
        raise ValueError('Name is required')
    if not email.strip():
        raise ValueError('Email is required')
    if salary is not None and salary < 0:
        raise ValueError('Salary cannot be negative')

    employee = Employee(
        name=name.strip(),
        email=email.strip(),
        phone=phone.strip() or None,
        job_title=job_title.strip() or None,
        salary=salary,
        join_date=date.today(),
    )
    db.add(employee)
    flush_or_raise(db, failure='Failed to add employee')
    return employee


def update_employee(
    db: Session,
    *,
    employee_id: str,
    phone: str,
    job_title: str,
    salary: Decimal | None,
) -> Employee:
    if salary is not None and salary < 0:
        raise ValueError('Salary cannot be negative')
    employee = db.execute(select(Employee).where(Employee.employee_id == employee_id)).scalar_one_or_none()
    if not employee:
        raise ValueError('Employee not found')

    employee.phone = phone.strip() or None
    employee.job_title = job_title.strip() or None
    employee.salary = salary
    flush_or_raise(db, failure='Failed to update employee')
    return employee


def delete_employee(db: Session, *, employee_id: str) -> None:
    result = execute_or_raise(
        db,
        delete(Employee).where(Employee.employee_id == employee_id),
        failure='Failed to delete employee',
    )
    if result.rowcount == 0:
        raise ValueError('Employee not found')
