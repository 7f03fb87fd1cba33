# inventory ledger - products and their live stock levels

import logging
import math
from datetime import datetime, timedelta

from sqlalchemy import func, select

import audit
import store
from errors import ValidationError
from models import db, Product, Sale, PRODUCT_TYPES, new_id

logger = logging.getLogger(__name__)

MAX_INTEGER = 2 ** 63 - 1  # largest value an sqlite INTEGER column holds

PRODUCT_FIELDS = ('brand', 'model', 'type', 'material', 'color', 'cost_price', 'selling_price',
                  'stock_quantity', 'min_stock_level', 'description', 'image_url')


def list_products(search=None):
    products = db.session.scalars(
        select(Product).order_by(Product.created_at.desc(), Product.id)
    ).all()
    if search:
        term = search.lower()
        products = [p for p in products if term in (p.brand + p.model).lower()]
    return products


def get_product(product_id):
    return db.session.get(Product, product_id) if product_id else None


def _number(data, key, cast, default):
    value = data.get(key)
    if value in (None, ''):
        return default
    label = key.replace('_', ' ').capitalize()
    try:
        number = cast(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{label} must be a number.')
    # nan and inf parse as floats but cannot be stored
    if cast is float and not math.isfinite(number):
        raise ValidationError(f'{label} must be a number.')
    if number < 0:
        raise ValidationError(f'{label} cannot be negative.')
    if cast is int and number > MAX_INTEGER:
        raise ValidationError(f'{label} is too large.')
    return number


def clean_product(data, allow_images=True):
    """Check a submitted product form and return the fields to store."""
    product_type = data.get('type') or 'Frame'
    if product_type not in PRODUCT_TYPES:
        raise ValidationError(f'Unknown product type: {product_type}')
    fields = {
        'brand': (data.get('brand') or '').strip(),
        'model': (data.get('model') or '').strip(),
        'type': product_type,
        'material': (data.get('material') or '').strip(),
        'color': (data.get('color') or '').strip(),
        'cost_price': _number(data, 'cost_price', float, 0.0),
        'selling_price': _number(data, 'selling_price', float, 0.0),
        'stock_quantity': _number(data, 'stock_quantity', int, 0),
        'min_stock_level': _number(data, 'min_stock_level', int, 5),
        'description': (data.get('description') or '').strip(),
    }
    if allow_images:
        fields['image_url'] = data.get('image_url') or None
    return fields


def upsert_product(data, user):
    """Add a new product or replace an existing one.

    A missing ``id`` means a new product. Always stamps ``last_updated`` and
    writes one audit entry.
    """
    config = store.get_app_config()
    fields = clean_product(data, allow_images=config.enable_product_images)
    product = get_product(data.get('id'))
    is_new = product is None
    if is_new:
        product = Product(id=data.get('id') or new_id(), created_at=datetime.utcnow())
        db.session.add(product)
    for key, value in fields.items():
        setattr(product, key, value)
    product.last_updated = datetime.utcnow()

    verb = 'Added' if is_new else 'Updated'
    audit.record(user, 'CREATE' if is_new else 'UPDATE', 'PRODUCT',
                 f'{verb} product: {product.brand} {product.model} (Stock: {product.stock_quantity})')
    store.commit()
    logger.info('%s product %s', verb.lower(), product.id)
    return product


def remove_product(product_id, user):
    # caller checks the role, this only removes and logs
    product = get_product(product_id)
    if product is None:
        return None
    name = product.name
    db.session.delete(product)
    audit.record(user, 'DELETE', 'PRODUCT', f'Deleted product: {name}')
    store.commit()
    return name


def add_products(products, user):
    """Insert a batch of new products in one write with a single audit entry."""
    now = datetime.utcnow()
    # first row of the batch ends up on top of the list
    for offset, product in enumerate(products):
        product.created_at = now - timedelta(microseconds=offset)
        product.last_updated = now
        db.session.add(product)
    audit.record(user, 'CREATE', 'PRODUCT', f'Bulk imported {len(products)} products via CSV.')
    store.commit()
    return len(products)


def low_stock_count():
    return db.session.scalar(
        select(func.count(Product.id)).where(Product.stock_quantity <= Product.min_stock_level)
    ) or 0


def dashboard_stats():
    products = list_products()
    revenue = db.session.scalar(select(func.sum(Sale.total_amount))) or 0
    return {
        'total_value': sum(p.selling_price * p.stock_quantity for p in products),
        'low_stock': low_stock_count(),
        'revenue': revenue,
        'product_count': len(products),
        'chart': [{'name': p.brand, 'stock': p.stock_quantity} for p in products[:5]],
    }
