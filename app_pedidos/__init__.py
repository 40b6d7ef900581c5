# ==============================================================================
# APP PEDIDOS - Cardápio online y gestión de pedidos
# ==============================================================================
# Punto de entrada WSGI: app_pedidos.main:app (ver wsgi.py)
# ==============================================================================

__version__ = '0.1.0'
