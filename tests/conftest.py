import pytest

from app import create_app
from config import TestConfig
from models import db, Product, User


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(username, role='STAFF', pages=('dashboard', 'inventory', 'sales'),
              can_add_inventory=False, password='secret'):
    user = User(username=username, role=role, full_name=f'{username.title()} Staff',
                can_add_inventory=can_add_inventory)
    user.pages = pages
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def make_product(id='p1', selling_price=100, stock_quantity=3, **fields):
    product = Product(id=id, brand=fields.pop('brand', 'Ray-Ban'), model=fields.pop('model', 'Aviator'),
                      type=fields.pop('type', 'Sunglasses'), selling_price=selling_price,
                      stock_quantity=stock_quantity, **fields)
    db.session.add(product)
    db.session.commit()
    return product


@pytest.fixture
def admin(ctx):
    return db.session.get(User, 'admin-1')


@pytest.fixture
def staff(ctx):
    return make_user('alice')


def login(client, username='Admin', password='123456'):
    return client.post('/login', data={'username': username, 'password': password})
