# this file defines the database structure for the eyewear shop console
# it uses 5 tables: staff accounts, products, sales, audit logs and app config

import uuid
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

db = SQLAlchemy()

ROLE_ADMIN = 'ADMIN'
ROLE_STAFF = 'STAFF'
ROLES = (ROLE_ADMIN, ROLE_STAFF)

PRODUCT_TYPES = ('Frame', 'Lens', 'Sunglasses', 'Contact Lens', 'Accessory')

AUDIT_ACTIONS = ('CREATE', 'UPDATE', 'DELETE', 'SYSTEM')
AUDIT_ENTITIES = ('PRODUCT', 'SALE', 'USER', 'CONFIG', 'SYSTEM')

# reserved master account, created on first start
DEFAULT_ADMIN = {
    'id': 'admin-1',
    'username': 'Admin',
    'password': '123456',
    'role': ROLE_ADMIN,
    'full_name': 'Master Administrator',
    'can_add_inventory': True,
    'pages': ['dashboard', 'inventory', 'sales', 'reports', 'users', 'settings', 'audit-logs'],
}


def new_id():
    return uuid.uuid4().hex[:12]


# table 1: users - staff accounts with role and page permissions
class User(UserMixin, db.Model):
    id = db.Column(db.String(40), primary_key=True, default=new_id)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(200), nullable=False)  # stored as a salted hash
    role = db.Column(db.String(10), nullable=False, default=ROLE_STAFF)
    full_name = db.Column(db.String(120), nullable=False)
    can_add_inventory = db.Column(db.Boolean, default=False)
    accessible_pages = db.Column(db.String(300), default='dashboard,inventory,sales')

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password or '')

    @property
    def pages(self):
        return [p for p in (self.accessible_pages or '').split(',') if p]

    @pages.setter
    def pages(self, values):
        self.accessible_pages = ','.join(dict.fromkeys(values))

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    def __repr__(self):
        return f'<User {self.username}>'


# table 2: products - frames, lenses and accessories with stock levels
class Product(db.Model):
    id = db.Column(db.String(40), primary_key=True, default=new_id)
    brand = db.Column(db.String(100), nullable=False, default='')
    model = db.Column(db.String(100), nullable=False, default='')
    type = db.Column(db.String(20), nullable=False, default='Frame')
    material = db.Column(db.String(100), default='')
    color = db.Column(db.String(60), default='')
    cost_price = db.Column(db.Float, nullable=False, default=0)     # buying price from suppliers
    selling_price = db.Column(db.Float, nullable=False, default=0)  # price for customers
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    min_stock_level = db.Column(db.Integer, nullable=False, default=5)
    description = db.Column(db.Text, default='')
    image_url = db.Column(db.Text)
    last_updated = db.Column(db.DateTime, default=datetime.utcnow)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)  # listing order, newest first

    __table_args__ = (
        db.CheckConstraint('stock_quantity >= 0', name='ck_product_stock_non_negative'),
    )

    @property
    def name(self):
        return f'{self.brand} {self.model}'

    @property
    def is_low_stock(self):
        return self.stock_quantity <= self.min_stock_level

    def __repr__(self):
        return f'<Product {self.name}>'


# table 3: sales - one row per finalized bill, with copies of product and seller details
class Sale(db.Model):
    id = db.Column(db.String(20), primary_key=True)
    product_id = db.Column(db.String(40), nullable=False)  # no foreign key, product may be removed later
    product_name = db.Column(db.String(200), nullable=False)
    product_type = db.Column(db.String(20), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    total_amount = db.Column(db.Float, nullable=False)  # qty * selling_price at time of sale
    customer_name = db.Column(db.String(120), default='')
    customer_contact = db.Column(db.String(120), default='')
    date = db.Column(db.DateTime, default=datetime.utcnow)
    salesperson_id = db.Column(db.String(40), nullable=False)
    salesperson_name = db.Column(db.String(120), nullable=False)

    def __repr__(self):
        return f'<Sale {self.id}>'


# table 4: audit logs - who changed what, newest kept, oldest dropped
class AuditLog(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    user_id = db.Column(db.String(40), nullable=False)
    user_name = db.Column(db.String(120), nullable=False)
    action = db.Column(db.String(10), nullable=False)
    entity = db.Column(db.String(10), nullable=False)
    details = db.Column(db.Text, default='')


# table 5: app config - single row of feature toggles
class AppConfig(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    enable_product_images = db.Column(db.Boolean, nullable=False, default=True)
    enable_gemini_insights = db.Column(db.Boolean, nullable=False, default=True)
