import pytest

import accounts
from conftest import make_user
from errors import AuthFailure, PermissionDenied, ReservedAccount, ValidationError
from models import db, AuditLog, User


def test_authenticate_default_admin(ctx):
    assert accounts.authenticate('Admin', '123456').id == 'admin-1'


def test_authentication_failures_look_the_same(ctx):
    with pytest.raises(AuthFailure) as unknown:
        accounts.authenticate('nobody', '123456')
    with pytest.raises(AuthFailure) as wrong:
        accounts.authenticate('Admin', 'nope')
    assert str(unknown.value) == str(wrong.value) == 'Invalid username or password. Access denied.'


def test_passwords_are_hashed(ctx):
    user = make_user('hal', password='hunter2')
    assert user.password_hash != 'hunter2'
    assert user.check_password('hunter2')
    assert not user.check_password(None)


def test_create_and_update_user(admin):
    user = accounts.save_user({'username': 'ivy', 'full_name': 'Ivy Lens', 'role': 'STAFF',
                               'pages': ['dashboard', 'sales', 'bogus'], 'can_add_inventory': True}, admin)
    assert user.pages == ['dashboard', 'sales']
    assert user.can_add_inventory
    assert user.check_password(accounts.DEFAULT_PASSWORD)

    accounts.save_user({'id': user.id, 'username': 'ivy', 'full_name': 'Ivy Frames', 'role': 'ADMIN',
                        'pages': ['dashboard'], 'password': ''}, admin)
    saved = db.session.get(User, user.id)
    assert saved.full_name == 'Ivy Frames'
    assert saved.role == 'ADMIN'
    assert saved.check_password(accounts.DEFAULT_PASSWORD)

    details = [log.details for log in AuditLog.query.order_by(AuditLog.id)]
    assert details == ['Created user account: Ivy Lens (@ivy)', 'Updated user account: Ivy Frames (@ivy)']


def test_duplicate_username_rejected(admin):
    make_user('jay')
    with pytest.raises(ValidationError):
        accounts.save_user({'username': 'jay', 'full_name': 'Other Jay'}, admin)


def test_staff_cannot_manage_users(staff):
    with pytest.raises(PermissionDenied):
        accounts.save_user({'username': 'kim', 'full_name': 'Kim'}, staff)


def test_reserved_admin_cannot_be_deleted(admin, staff):
    with pytest.raises(ReservedAccount):
        accounts.delete_user('admin-1', admin)
    with pytest.raises(ReservedAccount):
        accounts.delete_user('admin-1', staff)
    assert db.session.get(User, 'admin-1') is not None


def test_reserved_admin_cannot_be_renamed(admin):
    with pytest.raises(ReservedAccount):
        accounts.save_user({'id': 'admin-1', 'username': 'Boss', 'full_name': 'Boss', 'role': 'ADMIN'}, admin)


def test_delete_user(admin, staff):
    assert accounts.delete_user(staff.id, admin) == 'Alice Staff (@alice)'
    assert db.session.get(User, staff.id) is None
    assert AuditLog.query.one().action == 'DELETE'
    assert accounts.delete_user('missing', admin) is None


def test_staff_cannot_delete_users(staff):
    other = make_user('lou')
    with pytest.raises(PermissionDenied):
        accounts.delete_user(other.id, staff)


def test_update_profile(staff):
    accounts.update_profile(staff, 'Alice Cooper', 'newpass')
    assert staff.full_name == 'Alice Cooper'
    assert accounts.authenticate('alice', 'newpass').id == staff.id
    assert AuditLog.query.one().details == 'Updated personal profile details.'

    with pytest.raises(ValidationError):
        accounts.update_profile(staff, '  ')
