from flask import Flask, request, session, Response
from functools import wraps
from werkzeug.exceptions import HTTPException
from werkzeug.security import check_password_hash, generate_password_hash
import os

# Registro de requests, rutas lentas y eventos de pedidos
from app_pedidos.activity_logger import init_profiling

# ═══════════════════════════════════════════════════════════════════════════
# CONTENEDOR DE DEPENDENCIAS - Servicios y Repositorios
# ═══════════════════════════════════════════════════════════════════════════
# Las rutas solo traducen HTTP <-> servicios. La lógica de negocio vive en
# services/ y el acceso a datos en repositories/.
# ═══════════════════════════════════════════════════════════════════════════
from app_pedidos.app_container import default_data_dir, get_container
from app_pedidos.models.errors import PedidosError, ValidationError
from app_pedidos.models.entities import OrderType
from app_pedidos.services.checkout_service import CheckoutRequest
from app_pedidos.services.order_service import DEFAULT_PERIOD, order_view

app = Flask(__name__)

init_profiling(app)

DATA_DIR = default_data_dir()

# ═══════════════════════════════════════════════════════════════════════════════
# MODO PRODUCCIÓN
# ═══════════════════════════════════════════════════════════════════════════════
PRODUCTION_MODE = os.environ.get('PEDIDOS_PRODUCTION', '0') == '1'

# ═══════════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN DE SESIONES
# ═══════════════════════════════════════════════════════════════════════════════
# SECRET_KEY: En producción DEBE definirse via variable de entorno
# Comando: export PEDIDOS_SECRET_KEY="clave_secreta_larga_y_aleatoria"
_DEFAULT_SECRET = "app_pedidos_dev_secret_key_change_in_production"
_SECRET_KEY = os.environ.get("PEDIDOS_SECRET_KEY")

if PRODUCTION_MODE and not _SECRET_KEY:
    print("[ADVERTENCIA] PEDIDOS_PRODUCTION activo sin PEDIDOS_SECRET_KEY definida")
    print("[ADVERTENCIA] Define la variable de entorno para mayor seguridad")

app.secret_key = _SECRET_KEY or _DEFAULT_SECRET

app.config.update(
    SESSION_COOKIE_HTTPONLY=True,
    SESSION_COOKIE_SECURE=PRODUCTION_MODE,
    SESSION_COOKIE_SAMESITE='Lax',
    PERMANENT_SESSION_LIFETIME=86400,  # 24 horas
)
app.config['MAX_CONTENT_LENGTH'] = 1 * 1024 * 1024  # 1 MB

# ═══════════════════════════════════════════════════════════════════════════════
# CREDENCIALES DEL PANEL
# ═══════════════════════════════════════════════════════════════════════════════
# PEDIDOS_ADMIN_PASSWORD_HASH debe ser un hash de Werkzeug:
#   python -c "from werkzeug.security import generate_password_hash as g; print(g('clave'))"
ADMIN_USER = os.environ.get('PEDIDOS_ADMIN_USER', 'admin')
_ADMIN_PASSWORD_HASH = os.environ.get('PEDIDOS_ADMIN_PASSWORD_HASH')

if not _ADMIN_PASSWORD_HASH:
    if PRODUCTION_MODE:
        print("[ADVERTENCIA] PEDIDOS_ADMIN_PASSWORD_HASH no definida: usando contraseña de desarrollo")
    _ADMIN_PASSWORD_HASH = generate_password_hash('1234')


def container():
    return get_container(DATA_DIR)


def current_user():
    return session.get('admin_user')


def login_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if 'admin_user' not in session:
            return {'ok': False, 'error': 'Faça login para acessar o painel.'}, 401
        return f(*args, **kwargs)
    return wrapper


def json_body():
    """Cuerpo JSON de la request (dict vacío si no hay)."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# ═══════════════════════════════════════════════════════════════════════════════
# MANEJO DE ERRORES
# ═══════════════════════════════════════════════════════════════════════════════

@app.errorhandler(PedidosError)
def handle_pedidos_error(error):
    return error.to_dict(), error.http_status


@app.errorhandler(HTTPException)
def handle_http_error(error):
    return {'ok': False, 'error': error.description}, error.code


# ═══════════════════════════════════════════════════════════════════════════════
# TIENDA - Cardápio
# ═══════════════════════════════════════════════════════════════════════════════

@app.route("/api/catalog", methods=["GET"])
def api_catalog():
    catalog = container().catalog_service.get_catalog(
        category_id=request.args.get('category'),
        search=request.args.get('q', ''),
    )
    extras = container().catalog_service.list_active_extras()
    return {'ok': True, **catalog, 'extras': [e.to_dict() for e in extras]}


@app.route("/api/delivery-areas", methods=["GET"])
def api_delivery_areas():
    areas = container().catalog_service.list_active_delivery_areas()
    return {'ok': True, 'delivery_areas': [a.to_dict() for a in areas]}


@app.route("/api/payment-methods", methods=["GET"])
def api_payment_methods():
    methods = container().catalog_service.list_active_payment_methods()
    return {'ok': True, 'payment_methods': [m.to_dict() for m in methods]}


@app.route("/api/settings", methods=["GET"])
def api_settings():
    settings = container().settings_service.get_settings()
    return {'ok': True, 'settings': settings.to_dict()}


# ═══════════════════════════════════════════════════════════════════════════════
# TIENDA - Carrito
# ═══════════════════════════════════════════════════════════════════════════════
# Siempre responde JSON. Los errores de validación vuelven con 400.

def _cart_response(result):
    return result, (200 if result.get('ok') else 400)


@app.route("/api/cart", methods=["GET"])
def api_cart():
    totals = container().cart_service.get_totals(
        request.args.get('delivery_type', 'pickup'),
        request.args.get('delivery_area_id'),
    )
    return {'ok': True, 'cart': totals}


@app.route("/api/cart/add", methods=["POST"])
def api_cart_add():
    data = json_body()
    result = container().cart_service.add_item(
        data.get('product_id'),
        data.get('quantity', 1),
        data.get('notes'),
        data.get('extras') or [],
    )
    return _cart_response(result)


@app.route("/api/cart/quantity", methods=["POST"])
def api_cart_quantity():
    data = json_body()
    return _cart_response(
        container().cart_service.update_quantity(data.get('line_id', ''), data.get('quantity')))


@app.route("/api/cart/remove", methods=["POST"])
def api_cart_remove():
    data = json_body()
    return _cart_response(container().cart_service.remove_item(data.get('line_id', '')))


@app.route("/api/cart/clear", methods=["POST"])
def api_cart_clear():
    return container().cart_service.clear_cart()


@app.route("/api/checkout", methods=["POST"])
def api_checkout():
    """
    Finaliza el pedido con el carrito de la sesión.
    El modo estabelecimento (mostrador) requiere sesión del panel.
    """
    checkout_request = CheckoutRequest.from_dict(json_body())
    if checkout_request.mode == OrderType.ESTABELECIMENTO.value and not current_user():
        return {'ok': False, 'error': 'Faça login para acessar o painel.'}, 401

    cart_service = container().cart_service
    cart = cart_service.load_cart()
    result = container().checkout_service.checkout(cart, checkout_request, current_user())
    cart_service.clear_cart()
    return result.to_dict(), 201


# ═══════════════════════════════════════════════════════════════════════════════
# PANEL - Sesión
# ═══════════════════════════════════════════════════════════════════════════════

@app.route("/admin/login", methods=["POST"])
def admin_login():
    data = json_body() or request.form
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''
    if username != ADMIN_USER or not check_password_hash(_ADMIN_PASSWORD_HASH, password):
        return {'ok': False, 'error': 'Usuário ou senha inválidos.'}, 401
    # El carrito de la sesión se conserva (pedidos de mostrador)
    session['admin_user'] = username
    session.permanent = True
    container().audit_service.log_login(username)
    return {'ok': True, 'user': username}


@app.route("/admin/logout", methods=["POST"])
@login_required
def admin_logout():
    user = current_user()
    session.pop('admin_user', None)
    container().audit_service.log_logout(user)
    return {'ok': True}


# ═══════════════════════════════════════════════════════════════════════════════
# PANEL - Pedidos
# ═══════════════════════════════════════════════════════════════════════════════

@app.route("/admin/orders", methods=["GET"])
@login_required
def admin_orders():
    board = container().order_service.board(
        period=request.args.get('period', DEFAULT_PERIOD),
        status=request.args.get('status'),
        order_type=request.args.get('order_type'),
        search=request.args.get('q', ''),
    )
    return {'ok': True, **board}


@app.route("/admin/orders/<order_id>", methods=["GET"])
@login_required
def admin_order_detail(order_id):
    order = container().order_service.get_order(order_id)
    return {'ok': True, 'order': order_view(order, include_items=True)}


@app.route("/admin/orders/<order_id>/ticket", methods=["GET"])
@login_required
def admin_order_ticket(order_id):
    order = container().order_service.get_order(order_id)
    ticket = container().ticket_service.render_ticket(
        order, settings=container().settings_service.get_settings())
    return Response(ticket, mimetype='text/plain; charset=utf-8')


@app.route("/admin/orders/<order_id>/<action>", methods=["POST"])
@login_required
def admin_order_action(order_id, action):
    """advance / revert / cancel. Una transición no permitida responde 409 sin cambios."""
    if action not in ('advance', 'revert', 'cancel'):
        return {'ok': False, 'error': 'Ação inválida.'}, 404
    result = container().order_service.change_status(order_id, action, current_user())
    return result, (200 if result.get('ok') else 409)


@app.route("/admin/orders/<order_id>", methods=["DELETE"])
@login_required
def admin_order_delete(order_id):
    return container().order_service.delete_order(order_id, current_user())


@app.route("/admin/dashboard", methods=["GET"])
@login_required
def admin_dashboard():
    dashboard = container().dashboard_service.get_dashboard()
    return {'ok': True, 'pending_orders': container().order_service.pending_count(), **dashboard}


# ═══════════════════════════════════════════════════════════════════════════════
# PANEL - Catálogo
# ═══════════════════════════════════════════════════════════════════════════════

@app.route("/admin/products", methods=["GET"])
@login_required
def admin_products():
    products = container().catalog_service.list_products(request.args.get('category'))
    return {'ok': True, 'products': [p.to_dict() for p in products]}


@app.route("/admin/products", methods=["POST"])
@login_required
def admin_product_create():
    product = container().catalog_service.create_product(json_body(), current_user())
    return {'ok': True, 'product': product.to_dict()}, 201


@app.route("/admin/products/<product_id>", methods=["GET"])
@login_required
def admin_product_detail(product_id):
    return {'ok': True, 'product': container().catalog_service.get_product(product_id).to_dict()}


@app.route("/admin/products/<product_id>", methods=["PUT"])
@login_required
def admin_product_update(product_id):
    product = container().catalog_service.update_product(product_id, json_body(), current_user())
    return {'ok': True, 'product': product.to_dict()}


@app.route("/admin/products/<product_id>/toggle", methods=["POST"])
@login_required
def admin_product_toggle(product_id):
    product = container().catalog_service.toggle_product(product_id, current_user())
    return {'ok': True, 'product': product.to_dict()}


@app.route("/admin/products/<product_id>", methods=["DELETE"])
@login_required
def admin_product_delete(product_id):
    container().catalog_service.delete_product(product_id, current_user())
    return {'ok': True}


@app.route("/admin/categories", methods=["GET"])
@login_required
def admin_categories():
    categories = container().catalog_service.list_categories(include_inactive=True)
    return {'ok': True, 'categories': [c.to_dict() for c in categories]}


@app.route("/admin/categories", methods=["POST"])
@login_required
def admin_category_create():
    category = container().catalog_service.create_category(json_body(), current_user())
    return {'ok': True, 'category': category.to_dict()}, 201


@app.route("/admin/categories/<category_id>", methods=["PUT"])
@login_required
def admin_category_update(category_id):
    category = container().catalog_service.update_category(category_id, json_body(), current_user())
    return {'ok': True, 'category': category.to_dict()}


@app.route("/admin/categories/<category_id>", methods=["DELETE"])
@login_required
def admin_category_delete(category_id):
    category = container().catalog_service.delete_category(category_id, current_user())
    return {'ok': True, 'category': category.to_dict()}


@app.route("/admin/extras", methods=["GET"])
@login_required
def admin_extras():
    return {'ok': True, 'extras': [e.to_dict() for e in container().catalog_service.list_extras()]}


@app.route("/admin/extras", methods=["POST"])
@login_required
def admin_extra_create():
    extra = container().catalog_service.create_extra(json_body(), current_user())
    return {'ok': True, 'extra': extra.to_dict()}, 201


@app.route("/admin/extras/<extra_id>", methods=["PUT"])
@login_required
def admin_extra_update(extra_id):
    extra = container().catalog_service.update_extra(extra_id, json_body(), current_user())
    return {'ok': True, 'extra': extra.to_dict()}


@app.route("/admin/extras/<extra_id>", methods=["DELETE"])
@login_required
def admin_extra_delete(extra_id):
    container().catalog_service.delete_extra(extra_id, current_user())
    return {'ok': True}


@app.route("/admin/delivery-areas", methods=["GET"])
@login_required
def admin_delivery_areas():
    areas = container().catalog_service.list_delivery_areas()
    return {'ok': True, 'delivery_areas': [a.to_dict() for a in areas]}


@app.route("/admin/delivery-areas", methods=["POST"])
@login_required
def admin_delivery_area_create():
    area = container().catalog_service.create_delivery_area(json_body(), current_user())
    return {'ok': True, 'delivery_area': area.to_dict()}, 201


@app.route("/admin/delivery-areas/<area_id>", methods=["PUT"])
@login_required
def admin_delivery_area_update(area_id):
    area = container().catalog_service.update_delivery_area(area_id, json_body(), current_user())
    return {'ok': True, 'delivery_area': area.to_dict()}


@app.route("/admin/delivery-areas/<area_id>/toggle", methods=["POST"])
@login_required
def admin_delivery_area_toggle(area_id):
    area = container().catalog_service.toggle_delivery_area(area_id, current_user())
    return {'ok': True, 'delivery_area': area.to_dict()}


@app.route("/admin/delivery-areas/<area_id>", methods=["DELETE"])
@login_required
def admin_delivery_area_delete(area_id):
    container().catalog_service.delete_delivery_area(area_id, current_user())
    return {'ok': True}


@app.route("/admin/payment-methods", methods=["GET"])
@login_required
def admin_payment_methods():
    methods = container().catalog_service.list_payment_methods()
    return {'ok': True, 'payment_methods': [m.to_dict() for m in methods]}


@app.route("/admin/payment-methods", methods=["POST"])
@login_required
def admin_payment_method_create():
    method = container().catalog_service.create_payment_method(json_body(), current_user())
    return {'ok': True, 'payment_method': method.to_dict()}, 201


@app.route("/admin/payment-methods/<method_id>", methods=["PUT"])
@login_required
def admin_payment_method_update(method_id):
    method = container().catalog_service.update_payment_method(method_id, json_body(), current_user())
    return {'ok': True, 'payment_method': method.to_dict()}


@app.route("/admin/payment-methods/<method_id>/toggle", methods=["POST"])
@login_required
def admin_payment_method_toggle(method_id):
    method = container().catalog_service.toggle_payment_method(method_id, current_user())
    return {'ok': True, 'payment_method': method.to_dict()}


@app.route("/admin/payment-methods/<method_id>", methods=["DELETE"])
@login_required
def admin_payment_method_delete(method_id):
    container().catalog_service.delete_payment_method(method_id, current_user())
    return {'ok': True}


# ═══════════════════════════════════════════════════════════════════════════════
# PANEL - Configuración y actividad
# ═══════════════════════════════════════════════════════════════════════════════

@app.route("/admin/settings", methods=["GET"])
@login_required
def admin_settings():
    return {'ok': True, 'settings': container().settings_service.get_settings().to_dict()}


@app.route("/admin/settings", methods=["PUT"])
@login_required
def admin_settings_update():
    data = json_body()
    if not data:
        raise ValidationError('Dados não recebidos.')
    settings = container().settings_service.update_settings(data, current_user())
    return {'ok': True, 'settings': settings.to_dict()}


@app.route("/admin/activity", methods=["GET"])
@login_required
def admin_activity():
    logs = container().audit_service.search_logs(
        query=request.args.get('q', ''),
        log_type=request.args.get('type'),
        user=request.args.get('user'),
    )
    return {'ok': True, 'logs': logs}


if __name__ == "__main__":
    # En producción usar WSGI (gunicorn wsgi:app)
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
    HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
    PORT = int(os.environ.get('FLASK_PORT', 5000))

    if not DEBUG:
        print(f"\n{'='*50}")
        print(f"  Servidor iniciado en http://{HOST}:{PORT}")
        print(f"  Datos: {DATA_DIR}")
        print(f"{'='*50}\n")

    app.run(debug=DEBUG, host=HOST, port=PORT)
