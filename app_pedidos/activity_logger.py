# ==============================================================================
# REGISTRO DE ACTIVIDAD Y RENDIMIENTO
# ==============================================================================
# Logs legibles en /logs/:
#   requests.log       -> cada request (acción, usuario, tiempo)
#   slow_requests.log  -> requests y funciones que superan los umbrales
#   orders.log         -> eventos de pedidos (creado, estado, eliminado)
#
# ACTIVAR/DESACTIVAR: variable de entorno ENABLE_PROFILING (por defecto 1)
# ==============================================================================

import os
import threading
import time
from collections import defaultdict
from datetime import datetime
from functools import wraps
from typing import Any, Dict, Optional

# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════

ENABLE_PROFILING = os.environ.get('ENABLE_PROFILING', '1') not in ('0', 'false', 'False')

# Umbrales de tiempo (en milisegundos)
THRESHOLD_WARNING = 300
THRESHOLD_CRITICAL = 700

LOGS_DIR = os.environ.get('PEDIDOS_LOGS_DIR') or os.path.join(os.path.dirname(__file__), 'logs')

REQUESTS_LOG = os.path.join(LOGS_DIR, 'requests.log')
SLOW_REQUESTS_LOG = os.path.join(LOGS_DIR, 'slow_requests.log')
ORDERS_LOG = os.path.join(LOGS_DIR, 'orders.log')

# Nombres legibles de las rutas
ROUTE_NAMES = {
    # Tienda
    'GET /api/catalog': 'Ver cardápio',
    'GET /api/delivery-areas': 'Ver bairros de entrega',
    'GET /api/payment-methods': 'Ver formas de pagamento',
    'GET /api/settings': 'Ver dados da empresa',
    'GET /api/cart': 'Ver carrinho',
    'POST /api/cart/add': 'Adicionar ao carrinho',
    'POST /api/cart/quantity': 'Alterar quantidade',
    'POST /api/cart/remove': 'Remover do carrinho',
    'POST /api/cart/clear': 'Esvaziar carrinho',
    'POST /api/checkout': 'Finalizar pedido',

    # Panel
    'POST /admin/login': 'Entrar no painel',
    'POST /admin/logout': 'Sair do painel',
    'GET /admin/orders': 'Ver pedidos',
    'GET /admin/orders/<order_id>': 'Ver pedido',
    'POST /admin/orders/<order_id>/<action>': 'Alterar status do pedido',
    'DELETE /admin/orders/<order_id>': 'Excluir pedido',
    'GET /admin/dashboard': 'Ver dashboard',
    'GET /admin/settings': 'Ver configurações',
    'PUT /admin/settings': 'Salvar configurações',
    'GET /admin/activity': 'Ver atividade',
}

_write_lock = threading.Lock()


def set_logs_dir(path: str) -> None:
    """Cambia el directorio de logs (tests, despliegues con volumen propio)."""
    global LOGS_DIR, REQUESTS_LOG, SLOW_REQUESTS_LOG, ORDERS_LOG
    LOGS_DIR = path
    REQUESTS_LOG = os.path.join(path, 'requests.log')
    SLOW_REQUESTS_LOG = os.path.join(path, 'slow_requests.log')
    ORDERS_LOG = os.path.join(path, 'orders.log')


# ═══════════════════════════════════════════════════════════════════════════
# ESTADÍSTICAS DE FUNCIONES (en memoria)
# ═══════════════════════════════════════════════════════════════════════════

# {nombre_funcion: {calls, total_time, max_time}}
_function_stats = defaultdict(lambda: {'calls': 0, 'total_time': 0.0, 'max_time': 0.0})
_stats_lock = threading.Lock()


# ═══════════════════════════════════════════════════════════════════════════
# ESCRITURA
# ═══════════════════════════════════════════════════════════════════════════

def _get_timestamp() -> str:
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')


def _write_log(filepath: str, content: str) -> None:
    """Agrega contenido a un log. Un disco lleno no debe tumbar la request."""
    try:
        with _write_lock:
            os.makedirs(os.path.dirname(filepath), exist_ok=True)
            with open(filepath, 'a', encoding='utf-8') as f:
                f.write(content)
    except OSError:
        pass


def _get_route_name(method: str, path: str, rule: Optional[str] = None) -> str:
    """Nombre legible de la ruta (ROUTE_NAMES) o la ruta cruda."""
    key = f"{method} {path}"
    if key in ROUTE_NAMES:
        return ROUTE_NAMES[key]
    if rule:
        rule_key = f"{method} {rule}"
        if rule_key in ROUTE_NAMES:
            return ROUTE_NAMES[rule_key]
    return key


# ═══════════════════════════════════════════════════════════════════════════
# 1️⃣ REQUESTS
# ═══════════════════════════════════════════════════════════════════════════

def log_request(method: str, path: str, rule: Optional[str], status_code: int,
                time_ms: float, user: Optional[str] = None) -> None:
    """Registra una request en requests.log."""
    if not ENABLE_PROFILING:
        return

    log_entry = f"""
════════════════════════════════════════
[REQUEST] {_get_timestamp()}
────────────────────────────────────────
Ação: {_get_route_name(method, path, rule)}
Usuário: {user or 'cliente'}
Rota: {method} {path}
Status: {status_code}
Tempo: {time_ms:.0f} ms
"""
    _write_log(REQUESTS_LOG, log_entry)


def log_slow_request(method: str, path: str, rule: Optional[str], time_ms: float,
                     user: Optional[str] = None, level: str = 'WARNING') -> None:
    """
    Registra una request lenta en slow_requests.log.

    Args:
        level: 'WARNING' (>= THRESHOLD_WARNING) o 'CRITICAL' (>= THRESHOLD_CRITICAL)
    """
    if not ENABLE_PROFILING:
        return

    emoji = '⚠️' if level == 'WARNING' else '🔴'
    threshold = THRESHOLD_WARNING if level == 'WARNING' else THRESHOLD_CRITICAL

    log_entry = f"""
{emoji} [{level}] {_get_timestamp()}
────────────────────────────────────────
Rota lenta: {_get_route_name(method, path, rule)}
Usuário: {user or 'cliente'}
Detalhe: {method} {path}
Tempo: {time_ms:.0f} ms (limite: {threshold} ms)
────────────────────────────────────────
"""
    _write_log(SLOW_REQUESTS_LOG, log_entry)


# ═══════════════════════════════════════════════════════════════════════════
# 2️⃣ EVENTOS DE PEDIDOS
# ═══════════════════════════════════════════════════════════════════════════

def log_order_event(event: str, order: Dict[str, Any], user: Optional[str] = None,
                    details: Optional[str] = None) -> None:
    """
    Registra un evento de pedido en orders.log.

    Args:
        event: order.created, order.status_changed, order.deleted
        order: Pedido (dict) afectado
        user: Usuario del panel, si corresponde
        details: Texto adicional (ej. "pending -> preparing")
    """
    if not ENABLE_PROFILING:
        return

    order_id = str(order.get('id', ''))
    log_entry = f"""
[{event}] {_get_timestamp()}
Pedido: #{order_id[-6:]} ({order_id})
Cliente: {order.get('customer_name', '')}
Tipo: {order.get('order_type', '')} / {order.get('delivery_type', '')}
Status: {order.get('status', '')}
Total: {order.get('total', '')}
Usuário: {user or 'cliente'}
"""
    if details:
        log_entry += f"Detalhe: {details}\n"
    _write_log(ORDERS_LOG, log_entry)


# ═══════════════════════════════════════════════════════════════════════════
# 3️⃣ HOOKS PARA FLASK (before/after request)
# ═══════════════════════════════════════════════════════════════════════════

def init_profiling(app) -> None:
    """
    Registra hooks before_request y after_request en la app Flask.

    Uso:
        from app_pedidos.activity_logger import init_profiling
        init_profiling(app)
    """
    if not ENABLE_PROFILING:
        return

    @app.before_request
    def _start_timer():
        from flask import g
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        from flask import g, request, session

        if not hasattr(g, 'start_time'):
            return response

        elapsed = (time.perf_counter() - g.start_time) * 1000

        method = request.method
        path = request.path
        rule = str(request.url_rule) if request.url_rule else path
        user = session.get('admin_user')

        if path.startswith('/static'):
            return response

        log_request(method, path, rule, response.status_code, elapsed, user)

        if elapsed >= THRESHOLD_CRITICAL:
            log_slow_request(method, path, rule, elapsed, user, 'CRITICAL')
        elif elapsed >= THRESHOLD_WARNING:
            log_slow_request(method, path, rule, elapsed, user, 'WARNING')

        return response


# ═══════════════════════════════════════════════════════════════════════════
# 4️⃣ DECORADOR PARA FUNCIONES CLAVE
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Decorador para medir funciones críticas.

    Uso:
        @profile_function
        def mi_funcion():
            ...

        @profile_function(name="Finalizar pedido")
        def checkout():
            ...
    """
    def decorator(fn):
        func_name = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not ENABLE_PROFILING:
                return fn(*args, **kwargs)
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000

                with _stats_lock:
                    stats = _function_stats[func_name]
                    stats['calls'] += 1
                    stats['total_time'] += elapsed_ms
                    if elapsed_ms > stats['max_time']:
                        stats['max_time'] = elapsed_ms

                if elapsed_ms >= THRESHOLD_WARNING:
                    _log_slow_function_call(func_name, elapsed_ms)

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator


def _log_slow_function_call(func_name: str, time_ms: float) -> None:
    severity = 'CRÍTICO' if time_ms >= THRESHOLD_CRITICAL else 'LENTO'
    emoji = '🔴' if time_ms >= THRESHOLD_CRITICAL else '⚠️'

    log_entry = f"""
{emoji} [{severity}] {_get_timestamp()}
Função: {func_name}
Tempo: {time_ms:.0f} ms
────────────────────────────────────────
"""
    _write_log(SLOW_REQUESTS_LOG, log_entry)


# ═══════════════════════════════════════════════════════════════════════════
# 5️⃣ ESTADÍSTICAS
# ═══════════════════════════════════════════════════════════════════════════

def get_function_stats() -> Dict[str, Dict[str, float]]:
    """
    Returns:
        {nombre: {calls, avg_time, max_time}}
    """
    with _stats_lock:
        result = {}
        for func_name, stats in _function_stats.items():
            calls = stats['calls']
            avg = stats['total_time'] / calls if calls > 0 else 0
            result[func_name] = {
                'calls': calls,
                'avg_time': round(avg, 2),
                'max_time': round(stats['max_time'], 2),
            }
        return result


def reset_stats() -> None:
    with _stats_lock:
        _function_stats.clear()


__all__ = [
    'ENABLE_PROFILING',
    'init_profiling',
    'profile_function',
    'log_order_event',
    'get_function_stats',
    'reset_stats',
    'set_logs_dir',
]
