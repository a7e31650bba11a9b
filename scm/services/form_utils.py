from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation

# Integer-part digits accepted from forms; bigger input is refused before any arithmetic.
MAX_INTEGER_DIGITS = 18


def form_text(form, key: str) -> str:
    return str(form.get(key, '') or '').strip()


def parse_decimal(raw: str, *, field: str) -> Decimal | None:
    raw = (raw or '').strip()
    if raw == '':
        return None
    try:
        value = Decimal(raw)
    except InvalidOperation as exc:
        raise ValueError(f'Invalid number for {field}') from exc
    if not value.is_finite():
        raise ValueError(f'Invalid number for {field}')
    if value and value.adjusted() >= MAX_INTEGER_DIGITS:
        raise ValueError(f'{field} is too large')
    return value


def parse_int(raw: str, *, field: str) -> int | None:
    value = parse_decimal(raw, field=field)
    if value is None:
        return None
    if value != value.to_integral_value():
        raise ValueError(f'{field} must be a whole number')
    return int(value)


def parse_date(raw: str, *, field: str) -> date | None:
    raw = (raw or '').strip()
    if raw == '':
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise ValueError(f'Invalid date for {field}') from exc
