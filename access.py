# access policy - which pages and controls a user gets
# everything here is a plain function of the user record

from functools import wraps

from flask import flash, redirect, url_for
from flask_login import current_user, login_required

from models import ROLE_ADMIN

# (page id, label, admin only)
PAGES = [
    ('dashboard', 'Dashboard', False),
    ('inventory', 'Inventory', False),
    ('sales', 'Sales & Billing', False),
    ('reports', 'Reports', False),
    ('users', 'Employees', True),
    ('audit-logs', 'Audit Logs', True),
    ('settings', 'Settings', False),
]
PAGE_IDS = [page_id for page_id, _, _ in PAGES]
ADMIN_ONLY = {page_id for page_id, _, admin_only in PAGES if admin_only}
DEFAULT_PAGE = 'dashboard'


def can_view(user, page):
    if page not in PAGE_IDS or page not in user.pages:
        return False
    if page in ADMIN_ONLY and user.role != ROLE_ADMIN:
        return False
    return True


def visible_pages(user):
    return [(page_id, label) for page_id, label, _ in PAGES if can_view(user, page_id)]


def resolve_page(user, page):
    # anything not allowed falls back to the dashboard
    return page if can_view(user, page) else DEFAULT_PAGE


def can_edit_inventory(user):
    return bool(user.can_add_inventory)


def can_delete(user):
    return user.role == ROLE_ADMIN


def page_required(page):
    """Route guard: logged in and allowed to see `page`, else back to the dashboard."""
    def decorator(view):
        @wraps(view)
        @login_required
        def wrapped(*args, **kwargs):
            if resolve_page(current_user, page) != page:
                flash('You do not have access to that page.', 'danger')
                return redirect(url_for('views.index'))
            return view(*args, **kwargs)
        return wrapped
    return decorator
