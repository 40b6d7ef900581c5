# ==============================================================================
# WSGI Entry Point - Para Gunicorn en Render/Producción
# ==============================================================================
# USO:
#   gunicorn wsgi:app --bind 0.0.0.0:$PORT
#
# ESTRUCTURA DEL PROYECTO:
#   repo_root/           <- Directorio de trabajo (en sys.path automáticamente)
#   ├── wsgi.py          <- Este archivo
#   ├── pyproject.toml
#   └── app_pedidos/     <- Paquete Python
#       ├── main.py
#       ├── models/
#       ├── services/
#       └── repositories/
#
# Variables de entorno relevantes:
#   PEDIDOS_SECRET_KEY, PEDIDOS_DATA_DIR, PEDIDOS_ADMIN_USER,
#   PEDIDOS_ADMIN_PASSWORD_HASH, PEDIDOS_WHATSAPP, ENABLE_PROFILING
# ==============================================================================

from app_pedidos.main import app

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
