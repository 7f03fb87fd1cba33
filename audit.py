# audit trail - every change to products, sales, users or settings lands here
# entries are only ever added; the log keeps the most recent ones and drops the rest

import logging
from datetime import datetime

from flask import current_app
from sqlalchemy import delete, or_, select

from models import db, AuditLog, AUDIT_ACTIONS, AUDIT_ENTITIES

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 500


def record(user, action, entity, details):
    """Add an audit entry to the current transaction.

    Nothing is written here, the caller saves it with store.commit() together
    with the change being logged. That commit also trims the log.
    """
    if action not in AUDIT_ACTIONS:
        raise ValueError(f'unknown audit action {action!r}')
    if entity not in AUDIT_ENTITIES:
        raise ValueError(f'unknown audit entity {entity!r}')

    entry = AuditLog(
        timestamp=datetime.utcnow(),
        user_id=user.id,
        user_name=user.full_name,
        action=action,
        entity=entity,
        details=details,
    )
    db.session.add(entry)
    logger.info('audit %s %s by %s: %s', action, entity, user.username, details)
    return entry


def trim(limit=None):
    if limit is None:
        limit = current_app.config.get('AUDIT_LOG_LIMIT', DEFAULT_LIMIT)
    stale = db.session.scalars(
        select(AuditLog.id)
        .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        .offset(limit)
    ).all()
    if stale:
        db.session.execute(delete(AuditLog).where(AuditLog.id.in_(stale)))
    return len(stale)


def list_logs(search=None, action=None):
    # newest first, optional text search over user name and details
    query = select(AuditLog).order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
    if search:
        pattern = f'%{search.lower()}%'
        query = query.where(or_(
            db.func.lower(AuditLog.user_name).like(pattern),
            db.func.lower(AuditLog.details).like(pattern),
        ))
    if action and action != 'All':
        query = query.where(AuditLog.action == action)
    return db.session.scalars(query).all()
