# stockroom/inventory/routes.py

from flask import Blueprint, current_app, jsonify, render_template, request, session

from stockroom.query_state import SortField

bp = Blueprint('inventory', __name__)

SESSION_KEY = 'inventory_sid'


def _current():
    """Return the caller's InventorySession, loading it on first use."""
    registry = current_app.extensions['inventory']
    key, inv, created = registry.get(session.get(SESSION_KEY))
    session[SESSION_KEY] = key
    if created:
        inv.load()
    return inv


def _payload():
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form


@bp.route('/', methods=['GET'])
def inventory_page():
    inv = _current()
    return render_template(
        'inventory/index.html',
        view=inv.view,
        query=inv.state,
        categories=inv.categories,
        sort_fields=[f.value for f in SortField],
    )


@bp.route('/view', methods=['GET'])
def inventory_view():
    return jsonify(_current().to_dict())


@bp.route('/refresh', methods=['POST'])
def refresh():
    inv = _current()
    inv.refresh()
    return jsonify(inv.to_dict())


@bp.route('/search', methods=['POST'])
def search():
    inv = _current()
    inv.search(_payload().get('q', ''))
    return jsonify(inv.to_dict())


@bp.route('/category', methods=['POST'])
def filter_category():
    inv = _current()
    inv.filter_by_category(_payload().get('category') or None)
    return jsonify(inv.to_dict())


@bp.route('/sort', methods=['POST'])
def change_sort():
    field = _payload().get('field', '')
    try:
        sort_field = SortField(field)
    except ValueError:
        return jsonify(error=f'Unknown sort field: {field}'), 400
    inv = _current()
    inv.change_sort(sort_field)
    return jsonify(inv.to_dict())


@bp.route('/order', methods=['POST'])
def toggle_order():
    inv = _current()
    inv.toggle_order()
    return jsonify(inv.to_dict())


@bp.route('/page', methods=['POST'])
def go_to_page():
    try:
        page = int(_payload().get('page'))
    except (TypeError, ValueError):
        return jsonify(error='Invalid page'), 400
    inv = _current()
    inv.go_to_page(page)
    return jsonify(inv.to_dict())


@bp.route('/products', methods=['POST'])
def create_product():
    inv = _current()
    inv.submit_form(_payload())
    return jsonify(inv.to_dict())


@bp.route('/products/<product_id>', methods=['POST'])
def update_product(product_id):
    inv = _current()
    inv.submit_form(_payload(), editing_id=product_id)
    return jsonify(inv.to_dict())


@bp.route('/products/<product_id>/delete', methods=['POST'])
def delete_product(product_id):
    inv = _current()
    inv.delete_product(product_id)
    return jsonify(inv.to_dict())
