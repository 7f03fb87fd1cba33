# app.py - web routes for the eyewear shop console
# start a local server with: python app.py

import logging
from datetime import datetime

from flask import Blueprint, Flask, Response, abort, flash, redirect, render_template, request, url_for
from flask_login import LoginManager, current_user, login_required, login_user, logout_user

import access
import accounts
import audit
import csv_io
import insights
import inventory
import sales
import store
from config import Config
from errors import POSError, PermissionDenied
from models import db, User, Sale, PRODUCT_TYPES, ROLES, AUDIT_ACTIONS

views = Blueprint('views', __name__)

login_manager = LoginManager()
login_manager.login_view = 'views.login'


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, user_id)


def create_app(config=Config):
    app = Flask(__name__)
    app.config.from_object(config)
    logging.basicConfig(level=app.config['LOG_LEVEL'],
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    db.init_app(app)
    login_manager.init_app(app)
    app.register_blueprint(views)

    @app.context_processor
    def inject_access():
        if not current_user.is_authenticated:
            return {'currency': app.config['CURRENCY']}
        return {
            'currency': app.config['CURRENCY'],
            'menu': access.visible_pages(current_user),
            'can_edit_inventory': access.can_edit_inventory(current_user),
            'can_delete': access.can_delete(current_user),
        }

    # setup database and default data
    with app.app_context():
        db.create_all()
        store.ensure_default_admin()
        store.get_app_config()

    app.logger.info('VisionTrack ready on %s', app.config['SQLALCHEMY_DATABASE_URI'])
    return app


def csv_download(text, prefix):
    filename = f'{prefix}_{datetime.utcnow():%Y-%m-%d}.csv'
    return Response(text, mimetype='text/csv',
                    headers={'Content-Disposition': f'attachment; filename={filename}'})


# login and logout
@views.route('/login', methods=['GET', 'POST'])
def login():
    if current_user.is_authenticated:
        return redirect(url_for('views.index'))
    if request.method == 'POST':
        try:
            user = accounts.authenticate(request.form.get('username'), request.form.get('password'))
        except POSError as err:
            flash(err.message, 'danger')
        else:
            login_user(user)
            return redirect(url_for('views.index'))
    return render_template('login.html')


@views.route('/logout')
@login_required
def logout():
    logout_user()
    return redirect(url_for('views.login'))


# main dashboard - stock value, low stock, revenue and optional ai summary
@views.route('/')
@login_required
def index():
    config = store.get_app_config()
    stats = inventory.dashboard_stats()
    summary = None
    if config.enable_gemini_insights:
        summary = insights.summarize(inventory.list_products(), list(reversed(sales.recent_sales(10))))
    return render_template('index.html', stats=stats, insights=summary, config=config)


# view current stock levels
@views.route('/inventory')
@access.page_required('inventory')
def inventory_list():
    search = request.args.get('q', '')
    items = inventory.list_products(search)
    return render_template('inventory.html', items=items, search=search, config=store.get_app_config())


# add new product or edit an existing one
@views.route('/inventory/new', methods=['GET', 'POST'])
@views.route('/inventory/<product_id>/edit', methods=['GET', 'POST'])
@access.page_required('inventory')
def product_form(product_id=None):
    if not access.can_edit_inventory(current_user):
        flash('You are not allowed to change inventory.', 'danger')
        return redirect(url_for('views.inventory_list'))
    product = inventory.get_product(product_id)
    if product_id and product is None:
        abort(404)
    if request.method == 'POST':
        data = request.form.to_dict()
        data['id'] = product_id
        try:
            saved = inventory.upsert_product(data, current_user)
        except POSError as err:
            flash(err.message, 'danger')
        else:
            flash(f'Changes saved for {saved.name}', 'success')
            return redirect(url_for('views.inventory_list'))
    return render_template('product_form.html', item=product, types=PRODUCT_TYPES,
                           config=store.get_app_config())


# remove product from system (admins only)
@views.route('/inventory/<product_id>/delete', methods=['POST'])
@access.page_required('inventory')
def delete_product(product_id):
    if not access.can_delete(current_user):
        flash('Only administrators can delete products.', 'danger')
        return redirect(url_for('views.inventory_list'))
    try:
        name = inventory.remove_product(product_id, current_user)
    except POSError as err:
        flash(err.message, 'danger')
    else:
        if name is None:
            abort(404)
        flash(f'{name} deleted from the list.', 'warning')
    return redirect(url_for('views.inventory_list'))


@views.route('/inventory/export')
@access.page_required('inventory')
def export_inventory():
    return csv_download(csv_io.export_products(inventory.list_products()), 'eyetrends_inventory')


@views.route('/inventory/import', methods=['POST'])
@access.page_required('inventory')
def import_inventory():
    if not access.can_edit_inventory(current_user):
        flash('You are not allowed to change inventory.', 'danger')
        return redirect(url_for('views.inventory_list'))
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        flash('Choose a csv file to import.', 'danger')
        return redirect(url_for('views.inventory_list'))
    try:
        text = upload.read().decode('utf-8-sig')
        count = inventory.add_products(csv_io.parse_products(text), current_user)
    except UnicodeDecodeError:
        flash('The file is not valid UTF-8 text.', 'danger')
    except POSError as err:
        flash(err.message, 'danger')
    else:
        flash(f'{count} products imported successfully!', 'success')
    return redirect(url_for('views.inventory_list'))


# sales and billing
@views.route('/sales')
@access.page_required('sales')
def sales_list():
    filters = {
        'date_from': request.args.get('from', ''),
        'date_to': request.args.get('to', ''),
        'search': request.args.get('q', ''),
    }
    try:
        found = sales.filter_sales(**filters)
    except ValueError:
        flash('Dates must look like YYYY-MM-DD.', 'danger')
        found = sales.filter_sales(search=filters['search'])
    return render_template('sales.html', sales=found, summary=sales.summarize_sales(found),
                           filters=filters, products=inventory.list_products())


@views.route('/sales/new', methods=['POST'])
@access.page_required('sales')
def sell_product():
    try:
        sale = sales.create_sale(
            request.form.get('product_id'),
            request.form.get('quantity', 0),
            request.form.get('customer_name', ''),
            request.form.get('customer_contact', ''),
            current_user,
        )
    except POSError as err:
        flash(err.message, 'danger')
        return redirect(url_for('views.sales_list'))
    flash('Transaction completed successfully!', 'success')
    return redirect(url_for('views.receipt', sale_id=sale.id))


@views.route('/sales/<sale_id>')
@access.page_required('sales')
def receipt(sale_id):
    sale = db.session.get(Sale, sale_id)
    if sale is None:
        abort(404)
    return render_template('receipt.html', sale=sale)


# reports - filtered sales with csv export
def report_filters():
    return {
        'date_from': request.args.get('from', ''),
        'date_to': request.args.get('to', ''),
        'product_type': request.args.get('type', 'All'),
        'salesperson': request.args.get('salesperson', 'All'),
    }


@views.route('/reports')
@access.page_required('reports')
def reports():
    filters = report_filters()
    try:
        found = sales.filter_sales(**filters)
    except ValueError:
        flash('Dates must look like YYYY-MM-DD.', 'danger')
        found = sales.filter_sales()
    return render_template('reports.html', sales=found, summary=sales.summarize_sales(found),
                           filters=filters, types=PRODUCT_TYPES, users=accounts.list_users(),
                           fields=csv_io.SALE_FIELDS, default_fields=csv_io.DEFAULT_SALE_FIELDS)


@views.route('/reports/export')
@access.page_required('reports')
def export_report():
    try:
        found = sales.filter_sales(**report_filters())
    except ValueError:
        flash('Dates must look like YYYY-MM-DD.', 'danger')
        return redirect(url_for('views.reports'))
    fields = request.args.getlist('field') or csv_io.DEFAULT_SALE_FIELDS
    return csv_download(csv_io.export_sales(found, fields), 'eyetrends_report')


# employees (admins only)
@views.route('/users')
@access.page_required('users')
def users():
    return render_template('users.html', users=accounts.list_users())


@views.route('/users/new', methods=['GET', 'POST'])
@views.route('/users/<user_id>/edit', methods=['GET', 'POST'])
@access.page_required('users')
def user_form(user_id=None):
    user = db.session.get(User, user_id) if user_id else None
    if user_id and user is None:
        abort(404)
    if request.method == 'POST':
        data = {
            'id': user_id,
            'username': request.form.get('username'),
            'password': request.form.get('password'),
            'full_name': request.form.get('full_name'),
            'role': request.form.get('role'),
            'can_add_inventory': request.form.get('can_add_inventory') == 'on',
            'pages': request.form.getlist('pages'),
        }
        try:
            saved = accounts.save_user(data, current_user)
        except POSError as err:
            flash(err.message, 'danger')
        else:
            flash(f'Account saved for {saved.full_name}', 'success')
            return redirect(url_for('views.users'))
    return render_template('user_form.html', user=user, roles=ROLES, pages=access.PAGES)


@views.route('/users/<user_id>/delete', methods=['POST'])
@access.page_required('users')
def delete_user(user_id):
    try:
        label = accounts.delete_user(user_id, current_user)
    except POSError as err:
        flash(err.message, 'danger')
    else:
        if label is None:
            abort(404)
        flash(f'Deleted user account: {label}', 'warning')
    return redirect(url_for('views.users'))


# audit trail (admins only)
@views.route('/audit-logs')
@access.page_required('audit-logs')
def audit_logs():
    search = request.args.get('q', '')
    action = request.args.get('action', 'All')
    return render_template('audit_logs.html', logs=audit.list_logs(search, action),
                           search=search, action=action, actions=AUDIT_ACTIONS)


# own profile, feature toggles and data reset
@views.route('/settings')
@access.page_required('settings')
def settings():
    return render_template('settings.html', config=store.get_app_config())


@views.route('/settings/profile', methods=['POST'])
@access.page_required('settings')
def update_profile():
    try:
        accounts.update_profile(current_user, request.form.get('full_name'), request.form.get('password'))
    except POSError as err:
        flash(err.message, 'danger')
    else:
        flash('Profile updated successfully!', 'success')
    return redirect(url_for('views.settings'))


@views.route('/settings/toggle/<key>', methods=['POST'])
@access.page_required('settings')
def toggle_setting(key):
    if key not in store.CONFIG_KEYS:
        abort(404)
    try:
        store.toggle_config(key, current_user)
    except POSError as err:
        flash(err.message, 'danger')
    else:
        flash('System configuration updated.', 'success')
    return redirect(url_for('views.settings'))


@views.route('/settings/reset', methods=['POST'])
@access.page_required('settings')
def reset_data():
    try:
        store.clear_business_data(current_user, request.form.get('confirm_password'))
    except PermissionDenied as err:
        flash(err.message, 'danger')
    except POSError:
        flash('Action failed. Check connection.', 'danger')
    else:
        flash('All business data has been cleared.', 'success')
    return redirect(url_for('views.settings'))


if __name__ == '__main__':
    create_app().run(debug=True, port=5001)
