# the record store - one place where changes are written to the database
# also owns the app config singleton and the full data reset

import logging

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

import audit
from errors import PermissionDenied, StoreUnavailable
from models import db, AppConfig, AuditLog, Product, Sale, User, DEFAULT_ADMIN

logger = logging.getLogger(__name__)

CONFIG_KEYS = ('enable_product_images', 'enable_gemini_insights')


def commit():
    # a failed write is rolled back whole, so nothing half-saved is left behind
    # sqlite raises a bare OverflowError for integers it cannot store
    try:
        db.session.flush()
        audit.trim()
        db.session.commit()
    except (SQLAlchemyError, OverflowError):
        db.session.rollback()
        logger.exception('database write failed')
        raise StoreUnavailable()


def ensure_default_admin():
    if db.session.get(User, DEFAULT_ADMIN['id']) or User.query.filter_by(username=DEFAULT_ADMIN['username']).first():
        return False
    admin = User(
        id=DEFAULT_ADMIN['id'],
        username=DEFAULT_ADMIN['username'],
        role=DEFAULT_ADMIN['role'],
        full_name=DEFAULT_ADMIN['full_name'],
        can_add_inventory=DEFAULT_ADMIN['can_add_inventory'],
    )
    admin.pages = DEFAULT_ADMIN['pages']
    admin.set_password(DEFAULT_ADMIN['password'])
    db.session.add(admin)
    commit()
    logger.info('default administrator account created')
    return True


def get_app_config():
    config = db.session.get(AppConfig, 1)
    if config is None:
        config = AppConfig(id=1, enable_product_images=True, enable_gemini_insights=True)
        db.session.add(config)
        commit()
    return config


def toggle_config(key, user):
    if not user.is_admin:
        raise PermissionDenied('Only administrators can change system settings.')
    if key not in CONFIG_KEYS:
        raise ValueError(f'unknown setting {key!r}')
    config = get_app_config()
    value = not getattr(config, key)
    setattr(config, key, value)
    audit.record(user, 'SYSTEM', 'CONFIG', f"Toggled {key} to {'Enabled' if value else 'Disabled'}")
    commit()
    return config


def clear_business_data(user, confirm_password):
    """Wipe inventory, sales and audit logs. Staff accounts and config stay."""
    if not user.is_admin:
        raise PermissionDenied('Only administrators can reset business data.')
    if not user.check_password(confirm_password):
        raise PermissionDenied('Incorrect confirmation password.')

    db.session.execute(delete(Product))
    db.session.execute(delete(Sale))
    db.session.execute(delete(AuditLog))
    audit.record(user, 'DELETE', 'SYSTEM', 'Performed a full business data reset (Inventory, Sales, and Logs).')
    commit()
    logger.warning('business data reset by %s', user.username)
