# ==============================================================================
# ERRORES DEL DOMINIO
# ==============================================================================
# Taxonomía de errores que los servicios propagan hacia las rutas.
# Las rutas los convierten en {'ok': False, 'error': ...} (ver main.py).
# ==============================================================================

from typing import Optional


class PedidosError(Exception):
    """Excepción base de la aplicación."""

    # Código HTTP con el que la ruta responde este error
    http_status = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self):
        """Convierte a diccionario para respuestas JSON."""
        d = {'ok': False, 'error': self.message}
        if self.field:
            d['field'] = self.field
        return d


class ValidationError(PedidosError):
    """Entrada del usuario que no cumple una precondición (no hay escritura)."""
    pass


class NotFoundError(PedidosError):
    """Registro inexistente en el almacenamiento."""
    http_status = 404


class PersistenceError(PedidosError):
    """El almacenamiento rechazó o falló una lectura/escritura."""
    http_status = 503


class IllegalTransitionError(PedidosError):
    """
    Transición de estado fuera del conjunto permitido.
    Los servicios la tratan como no-op (no se muestra error al usuario).
    """
    http_status = 409

    def __init__(self, status: str, action: str):
        super().__init__(f"Transição '{action}' não permitida a partir de '{status}'")
        self.status = status
        self.action = action


class UnknownStateError(PedidosError):
    """Estado persistido fuera del enum conocido (incluye alias legacy)."""

    def __init__(self, raw_status: str):
        super().__init__(f"Status desconhecido: {raw_status}")
        self.raw_status = raw_status
