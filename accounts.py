# staff accounts - login check, employee management and own profile

import logging

from sqlalchemy import select

import audit
import store
from access import PAGE_IDS
from errors import AuthFailure, PermissionDenied, ReservedAccount, ValidationError
from models import db, User, ROLES, ROLE_STAFF, DEFAULT_ADMIN, new_id

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = '123456'


def authenticate(username, password):
    user = User.query.filter_by(username=(username or '').strip()).first()
    if user is None or not user.check_password(password):
        logger.info('failed login for %r', username)
        raise AuthFailure()
    return user


def list_users():
    return db.session.scalars(select(User).order_by(User.full_name)).all()


def save_user(data, acting_user):
    """Create an employee account, or update it when ``id`` is given."""
    if not acting_user.is_admin:
        raise PermissionDenied('Only administrators can manage employees.')

    username = (data.get('username') or '').strip()
    full_name = (data.get('full_name') or '').strip()
    if not username or not full_name:
        raise ValidationError('Username and full name are required.')
    role = data.get('role') or ROLE_STAFF
    if role not in ROLES:
        raise ValidationError(f'Unknown role: {role}')
    pages = [p for p in data.get('pages', []) if p in PAGE_IDS]

    user = db.session.get(User, data['id']) if data.get('id') else None
    is_new = user is None
    clash = User.query.filter_by(username=username).first()
    if clash is not None and clash is not user:
        raise ValidationError(f"The username '{username}' is already taken.")
    if not is_new and user.username == DEFAULT_ADMIN['username'] and username != user.username:
        raise ReservedAccount('The master administrator username cannot be changed.')

    if is_new:
        user = User(id=new_id())
        user.set_password(data.get('password') or DEFAULT_PASSWORD)
        db.session.add(user)
    elif data.get('password'):
        user.set_password(data['password'])
    user.username = username
    user.full_name = full_name
    user.role = role
    user.can_add_inventory = bool(data.get('can_add_inventory'))
    user.pages = pages

    verb = 'Created' if is_new else 'Updated'
    audit.record(acting_user, 'CREATE' if is_new else 'UPDATE', 'USER',
                 f'{verb} user account: {user.full_name} (@{user.username})')
    store.commit()
    return user


def delete_user(user_id, acting_user):
    user = db.session.get(User, user_id)
    if user is None:
        return None
    # the master account stays, whoever asks
    if user.username == DEFAULT_ADMIN['username']:
        raise ReservedAccount()
    if not acting_user.is_admin:
        raise PermissionDenied('Only administrators can delete employees.')
    if user.id == acting_user.id:
        raise ValidationError('You cannot delete your own account.')
    label = f'{user.full_name} (@{user.username})'
    db.session.delete(user)
    audit.record(acting_user, 'DELETE', 'USER', f'Deleted user account: {label}')
    store.commit()
    return label


def update_profile(user, full_name, password=None):
    full_name = (full_name or '').strip()
    if not full_name:
        raise ValidationError('Full name is required.')
    user.full_name = full_name
    if password:
        user.set_password(password)
    audit.record(user, 'UPDATE', 'USER', 'Updated personal profile details.')
    store.commit()
    return user
