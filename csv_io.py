# csv import and export for stock lists and sales reports
# fields are written with proper quoting so commas in names survive a round trip

import csv
import io
import logging
import math

from models import Product, PRODUCT_TYPES

logger = logging.getLogger(__name__)

PRODUCT_HEADERS = ['Brand', 'Model', 'Type', 'Material', 'Color', 'CostPrice', 'SellingPrice',
                   'Stock', 'MinStock', 'LastUpdated']
IMPORT_COLUMNS = 9  # description is optional
MAX_INTEGER = 2 ** 63 - 1

# (field id, header label)
SALE_FIELDS = [
    ('date', 'Transaction Date'),
    ('time', 'Transaction Time'),
    ('id', 'Bill ID'),
    ('customerName', 'Customer Name'),
    ('customerContact', 'Customer Contact'),
    ('productName', 'Product Name'),
    ('productType', 'Product Type'),
    ('quantity', 'Quantity'),
    ('totalAmount', 'Total Amount'),
    ('salespersonName', 'Sales Executive'),
]
DEFAULT_SALE_FIELDS = ['date', 'customerName', 'productName', 'quantity', 'totalAmount']


def _plain(number):
    return int(number) if float(number).is_integer() else number


def export_products(products):
    out = io.StringIO()
    writer = csv.writer(out, lineterminator='\n')
    writer.writerow(PRODUCT_HEADERS)
    for p in products:
        writer.writerow([
            p.brand, p.model, p.type, p.material, p.color,
            _plain(p.cost_price), _plain(p.selling_price), p.stock_quantity, p.min_stock_level,
            p.last_updated.strftime('%Y-%m-%d') if p.last_updated else '',
        ])
    return out.getvalue()


def _to_number(text, cast, default):
    # inf and nan parse but are not usable as prices or counts
    try:
        number = float(text)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return min(int(number), MAX_INTEGER) if cast is int else number


def parse_products(text):
    """Read product rows from csv text, header first.

    Columns are taken by position: brand, model, type, material, color, cost
    price, selling price, stock, min stock and an optional description. Blank
    and short rows are skipped.
    """
    products = []
    reader = csv.reader(io.StringIO(text))
    header = next(reader, None) or []
    # our own export puts the update date where a description would go
    has_description = len(header) < 10 or header[9].strip().lower() != 'lastupdated'
    for line_no, cols in enumerate(reader, start=2):
        cols = [c.strip() for c in cols]
        if not any(cols):
            continue
        if len(cols) < IMPORT_COLUMNS:
            logger.info('skipping short csv row %d', line_no)
            continue
        product_type = cols[2] or 'Frame'
        if product_type not in PRODUCT_TYPES:
            logger.info('skipping csv row %d with unknown type %r', line_no, product_type)
            continue
        products.append(Product(
            brand=cols[0],
            model=cols[1],
            type=product_type,
            material=cols[3],
            color=cols[4],
            cost_price=max(_to_number(cols[5], float, 0.0), 0.0),
            selling_price=max(_to_number(cols[6], float, 0.0), 0.0),
            stock_quantity=max(_to_number(cols[7], int, 0), 0),
            min_stock_level=max(_to_number(cols[8], int, 5), 0),
            description=cols[9] if has_description and len(cols) > 9 else '',
        ))
    return products


def _sale_values(sale):
    return {
        'date': sale.date.strftime('%Y-%m-%d'),
        'time': sale.date.strftime('%H:%M:%S'),
        'id': sale.id,
        'customerName': sale.customer_name,
        'customerContact': sale.customer_contact,
        'productName': sale.product_name,
        'productType': sale.product_type,
        'quantity': sale.quantity,
        'totalAmount': _plain(sale.total_amount),
        'salespersonName': sale.salesperson_name,
    }


def export_sales(sales, fields=None):
    # keep the column order of SALE_FIELDS whatever order the fields were picked in
    chosen = [(key, label) for key, label in SALE_FIELDS if key in (fields or DEFAULT_SALE_FIELDS)]
    out = io.StringIO()
    writer = csv.writer(out, lineterminator='\n')
    writer.writerow([label for _, label in chosen])
    for sale in sales:
        values = _sale_values(sale)
        writer.writerow([values[key] for key, _ in chosen])
    return out.getvalue()
