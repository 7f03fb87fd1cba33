# sales and billing - turning stock into a finalized bill
# the stock decrement, the sale row and the audit entry are saved together or not at all

import logging
import time
from datetime import date, datetime, time as dtime

from flask import current_app
from sqlalchemy import select, update

import audit
import store
from errors import InsufficientStock, InvalidProduct
from models import db, Product, Sale

logger = logging.getLogger(__name__)


def make_sale_id():
    # short bill number from the clock, bumped until free
    token = int(time.time() * 1000) % 1000000
    while True:
        sale_id = f'ET-{token:06d}'
        if db.session.get(Sale, sale_id) is None:
            return sale_id
        token = (token + 1) % 1000000


def format_amount(value):
    return int(value) if float(value).is_integer() else round(value, 2)


def _as_quantity(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def create_sale(product_id, quantity, customer_name, customer_contact, user):
    """Sell ``quantity`` units of a product to a customer.

    Raises InvalidProduct for an unknown product and InsufficientStock when
    the quantity is not between 1 and the units on hand. Not idempotent: two
    calls make two sales.
    """
    product = db.session.get(Product, product_id) if product_id else None
    if product is None:
        raise InvalidProduct()

    qty = _as_quantity(quantity)
    if qty is None or qty < 1 or qty > product.stock_quantity:
        raise InsufficientStock(product.stock_quantity)

    # price is frozen on the bill, later price edits never touch it
    sale = Sale(
        id=make_sale_id(),
        product_id=product.id,
        product_name=product.name,
        product_type=product.type,
        quantity=qty,
        total_amount=product.selling_price * qty,
        customer_name=customer_name or '',
        customer_contact=customer_contact or '',
        date=datetime.utcnow(),
        salesperson_id=user.id,
        salesperson_name=user.full_name,
    )

    # conditional decrement, another till may have sold the same units meanwhile
    result = db.session.execute(
        update(Product)
        .where(Product.id == product.id, Product.stock_quantity >= qty)
        .values(stock_quantity=Product.stock_quantity - qty)
    )
    if result.rowcount != 1:
        db.session.rollback()
        fresh = db.session.get(Product, product_id)
        if fresh is None:
            raise InvalidProduct()
        logger.warning('stock for %s changed during sale, %s left', product_id, fresh.stock_quantity)
        raise InsufficientStock(fresh.stock_quantity)

    db.session.add(sale)
    currency = current_app.config.get('CURRENCY', '')
    audit.record(user, 'CREATE', 'SALE',
                 f'Finalized sale {sale.id} for {sale.customer_name}: {sale.product_name} '
                 f'(Qty: {sale.quantity}, Total: {currency}{format_amount(sale.total_amount)})')
    store.commit()
    logger.info('sale %s: %s x%s by %s', sale.id, sale.product_name, qty, user.username)
    return sale


def _as_date(value):
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def filter_sales(date_from=None, date_to=None, search=None, product_type=None, salesperson=None):
    """Sales newest first, narrowed by the report and billing filters.

    ``date_to`` includes the whole day. ``search`` matches customer name,
    product name, customer contact or bill id.
    """
    query = select(Sale).order_by(Sale.date.desc(), Sale.id.desc())
    start = _as_date(date_from)
    end = _as_date(date_to)
    if start:
        query = query.where(Sale.date >= datetime.combine(start, dtime.min))
    if end:
        query = query.where(Sale.date <= datetime.combine(end, dtime.max))
    if product_type and product_type != 'All':
        query = query.where(Sale.product_type == product_type)
    if salesperson and salesperson != 'All':
        query = query.where(Sale.salesperson_id == salesperson)
    sales = db.session.scalars(query).all()

    if search:
        term = search.lower()
        sales = [s for s in sales if term in s.customer_name.lower()
                 or term in s.product_name.lower()
                 or term in s.customer_contact.lower()
                 or term in s.id.lower()]
    return sales


def summarize_sales(sales):
    revenue = sum(s.total_amount for s in sales)
    count = len(sales)
    return {
        'revenue': revenue,
        'transactions': count,
        'average': revenue / count if count else 0,
    }


def recent_sales(limit=10):
    return db.session.scalars(
        select(Sale).order_by(Sale.date.desc(), Sale.id.desc()).limit(limit)
    ).all()
