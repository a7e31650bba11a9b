from __future__ import annotations

import logging

from fastapi import Request
from sqlalchemy.orm import Session

from scm.auth import Principal
from scm.dependencies import get_client_ip
from scm.models import AuditLog, AuthEvent

logger = logging.getLogger(__name__)


def log_auth_event(
    db: Session,
    *,
    attempted_email: str,
    success: bool,
    ip: str | None,
    user_agent: str | None,
    user_id: str | None = None,
    failure_reason: str | None = None,
) -> None:
    if not success:
        logger.warning('Sign-in failed for %s from %s: %s', attempted_email, ip or '-', failure_reason)
    db.add(
        AuthEvent(
            attempted_email=attempted_email,
            user_id=user_id,
            success=success,
            failure_reason=failure_reason,
            ip=ip,
            user_agent=user_agent,
        )
    )


def log_audit(
    db: Session,
    *,
    actor_user_id: str | None,
    action: str,
    ip: str | None,
    metadata: dict | None = None,
) -> None:
    entry = AuditLog(actor_user_id=actor_user_id, action=action, ip=ip, meta=dict(metadata or {}))
    db.add(entry)
    logger.info('%s by %s %s', action, actor_user_id or 'anonymous', entry.meta)


def audit_action(
    db: Session,
    request: Request,
    principal: Principal,
    action: str,
    **metadata,
) -> None:
    """Record a signed-in user's change and commit it with the pending writes."""
    log_audit(
        db,
        actor_user_id=principal.user_id,
        action=action,
        ip=get_client_ip(request),
        metadata=metadata,
    )
    db.commit()
