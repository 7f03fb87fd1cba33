from io import BytesIO

from conftest import login, make_product, make_user
from models import db, AuditLog, Product, Sale


def test_login_required(client):
    response = client.get('/inventory')
    assert response.status_code == 302
    assert '/login' in response.headers['Location']


def test_bad_login_shows_generic_message(client):
    response = login(client, 'Admin', 'wrong')
    assert response.status_code == 200
    assert b'Invalid username or password. Access denied.' in response.data


def test_admin_dashboard(client):
    response = login(client)
    assert response.status_code == 302
    page = client.get('/')
    assert page.status_code == 200
    assert b'Low stock items' in page.data
    assert b'AI Insights are currently unavailable' in page.data


def test_sale_through_the_form(app, client):
    with app.app_context():
        make_product('p1', selling_price=100, stock_quantity=3)
    login(client)

    response = client.post('/sales/new', data={'product_id': 'p1', 'quantity': '2',
                                               'customer_name': 'Alice', 'customer_contact': '555-0100'})
    assert response.status_code == 302
    receipt = client.get(response.headers['Location'])
    assert b'Transaction completed successfully!' in receipt.data
    assert b'Ray-Ban Aviator' in receipt.data

    with app.app_context():
        assert db.session.get(Product, 'p1').stock_quantity == 1
        assert Sale.query.one().total_amount == 200


def test_oversell_is_reported(app, client):
    with app.app_context():
        make_product('p1', stock_quantity=1)
    login(client)

    response = client.post('/sales/new', data={'product_id': 'p1', 'quantity': '2'}, follow_redirects=True)
    assert b'Insufficient stock! Only 1 remaining.' in response.data
    with app.app_context():
        assert db.session.get(Product, 'p1').stock_quantity == 1


def test_staff_falls_back_to_dashboard(app, client):
    with app.app_context():
        make_user('bob', pages=['dashboard', 'inventory'])
    login(client, 'bob', 'secret')

    for path in ('/users', '/audit-logs', '/sales'):
        response = client.get(path)
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/')

    page = client.get('/').data
    assert b'href="/users"' not in page
    assert b'href="/audit-logs"' not in page
    assert b'href="/inventory"' in page


def test_staff_without_inventory_rights_cannot_add(app, client):
    with app.app_context():
        make_user('bob', pages=['dashboard', 'inventory'])
    login(client, 'bob', 'secret')

    response = client.post('/inventory/new', data={'brand': 'X', 'model': 'Y', 'type': 'Frame'})
    assert response.status_code == 302
    with app.app_context():
        assert Product.query.count() == 0


def test_staff_cannot_delete_products(app, client):
    with app.app_context():
        make_product('p1')
        make_user('bob', pages=['dashboard', 'inventory'], can_add_inventory=True)
    login(client, 'bob', 'secret')

    client.post('/inventory/p1/delete')
    with app.app_context():
        assert db.session.get(Product, 'p1') is not None


def test_add_product_form(client, app):
    login(client)
    response = client.post('/inventory/new', data={
        'brand': 'Oakley', 'model': 'Holbrook', 'type': 'Sunglasses', 'cost_price': '40',
        'selling_price': '90', 'stock_quantity': '6', 'min_stock_level': '2'}, follow_redirects=True)
    assert b'Changes saved for Oakley Holbrook' in response.data
    with app.app_context():
        assert Product.query.one().stock_quantity == 6


def test_add_product_form_rejects_nan_price(client, app):
    login(client)
    response = client.post('/inventory/new', data={
        'brand': 'Oakley', 'model': 'Holbrook', 'type': 'Sunglasses', 'selling_price': 'nan'})
    assert response.status_code == 200
    assert b'Selling price must be a number.' in response.data
    with app.app_context():
        assert Product.query.count() == 0


def test_csv_export_and_import(app, client):
    with app.app_context():
        make_product('p1', brand='Ray-Ban', model='Aviator, Gold')
    login(client)

    export = client.get('/inventory/export')
    assert export.mimetype == 'text/csv'
    assert 'attachment' in export.headers['Content-Disposition']
    assert b'"Aviator, Gold"' in export.data

    response = client.post('/inventory/import', data={'file': (BytesIO(export.data), 'stock.csv')},
                           content_type='multipart/form-data', follow_redirects=True)
    assert b'1 products imported successfully!' in response.data
    with app.app_context():
        assert Product.query.filter_by(model='Aviator, Gold').count() == 2
        assert AuditLog.query.filter_by(details='Bulk imported 1 products via CSV.').count() == 1


def test_report_export(app, client):
    with app.app_context():
        make_product('p1', selling_price=100, stock_quantity=3)
    login(client)
    client.post('/sales/new', data={'product_id': 'p1', 'quantity': '1', 'customer_name': 'Zoe'})

    response = client.get('/reports/export?field=customerName&field=totalAmount')
    assert response.data.decode().splitlines() == ['Customer Name,Total Amount', 'Zoe,100']


def test_admin_account_delete_rejected_over_http(client, app):
    login(client)
    response = client.post('/users/admin-1/delete', follow_redirects=True)
    assert b'cannot be deleted' in response.data


def test_settings_toggle_and_audit_page(client):
    login(client)
    response = client.post('/settings/toggle/enable_gemini_insights', follow_redirects=True)
    assert b'System configuration updated.' in response.data
    logs = client.get('/audit-logs')
    assert b'Toggled enable_gemini_insights to Disabled' in logs.data
    assert b'AI Insights' not in client.get('/').data
