# ==============================================================================
# ESTADOS DEL PEDIDO - Máquina de estados
# ==============================================================================
# Ciclo de vida:  pending -> preparing -> ready -> delivered
#                 pending | preparing -> cancelled (terminal)
#
# Estados legacy (solo lectura, nunca producidos por una transición):
#   accepted          -> siguiente ready,     anterior pending
#   out_for_delivery  -> siguiente delivered, anterior preparing
#
# Un estado desconocido se muestra con su valor crudo y no tiene acciones.
# ==============================================================================

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import IllegalTransitionError, UnknownStateError


class OrderStatus(str, Enum):
    """Estados conocidos de un pedido."""
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    # Legacy
    ACCEPTED = "accepted"
    OUT_FOR_DELIVERY = "out_for_delivery"


# Acciones del tablero
ADVANCE = 'advance'
REVERT = 'revert'
CANCEL = 'cancel'
ACTIONS = (ADVANCE, REVERT, CANCEL)

LEGACY_STATUSES = frozenset({OrderStatus.ACCEPTED, OrderStatus.OUT_FOR_DELIVERY})

# Columnas del tablero kanban, en orden
BOARD_STATUSES = [
    OrderStatus.PENDING,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
]


@dataclass(frozen=True)
class StatusInfo:
    """
    Configuración de presentación y transiciones de un estado.

    Attributes:
        value: Valor crudo del estado
        label: Etiqueta visible
        next: Estado al avanzar (None si no se puede)
        previous: Estado al retroceder (None si no se puede)
        next_label: Texto del botón de avance
        can_cancel: Si se permite cancelar desde este estado
        known: False para el estado de respaldo (valor desconocido)
    """
    value: str
    label: str
    next: Optional[str] = None
    previous: Optional[str] = None
    next_label: Optional[str] = None
    can_cancel: bool = False
    known: bool = True

    @property
    def can_advance(self) -> bool:
        return self.next is not None

    @property
    def can_revert(self) -> bool:
        return self.previous is not None

    @property
    def is_terminal(self) -> bool:
        return self.next is None

    @property
    def actions(self) -> List[str]:
        """Acciones disponibles, en orden fijo (advance, revert, cancel)."""
        allowed = []
        if self.can_advance:
            allowed.append(ADVANCE)
        if self.can_revert:
            allowed.append(REVERT)
        if self.can_cancel:
            allowed.append(CANCEL)
        return allowed

    def to_dict(self) -> Dict[str, Any]:
        return {
            'value': self.value,
            'label': self.label,
            'next': self.next,
            'previous': self.previous,
            'next_label': self.next_label,
            'actions': self.actions,
            'known': self.known,
            'terminal': self.is_terminal,
        }


def _info(status: OrderStatus, label: str, next_status: Optional[OrderStatus] = None,
          previous: Optional[OrderStatus] = None, next_label: Optional[str] = None,
          can_cancel: bool = False) -> StatusInfo:
    return StatusInfo(
        value=status.value,
        label=label,
        next=next_status.value if next_status else None,
        previous=previous.value if previous else None,
        next_label=next_label,
        can_cancel=can_cancel,
    )


STATUS_TABLE: Dict[OrderStatus, StatusInfo] = {
    OrderStatus.PENDING: _info(
        OrderStatus.PENDING, 'Pendente',
        next_status=OrderStatus.PREPARING,
        next_label='Iniciar Preparo', can_cancel=True),
    OrderStatus.PREPARING: _info(
        OrderStatus.PREPARING, 'Preparando',
        next_status=OrderStatus.READY, previous=OrderStatus.PENDING,
        next_label='Marcar Pronto', can_cancel=True),
    OrderStatus.READY: _info(
        OrderStatus.READY, 'Pronto',
        next_status=OrderStatus.DELIVERED, previous=OrderStatus.PREPARING,
        next_label='Marcar Entregue'),
    OrderStatus.DELIVERED: _info(
        OrderStatus.DELIVERED, 'Entregue',
        previous=OrderStatus.READY),
    OrderStatus.CANCELLED: _info(
        OrderStatus.CANCELLED, 'Cancelado'),
    # accepted ocupa el mismo punto del ciclo que preparing
    OrderStatus.ACCEPTED: _info(
        OrderStatus.ACCEPTED, 'Aceito',
        next_status=OrderStatus.READY, previous=OrderStatus.PENDING,
        next_label='Marcar Pronto', can_cancel=True),
    OrderStatus.OUT_FOR_DELIVERY: _info(
        OrderStatus.OUT_FOR_DELIVERY, 'Saiu para entrega',
        next_status=OrderStatus.DELIVERED, previous=OrderStatus.PREPARING,
        next_label='Marcar Entregue'),
}


# ==============================================================================
# CONSULTAS
# ==============================================================================

def parse(raw: Any, strict: bool = False) -> Optional[OrderStatus]:
    """
    Convierte un valor crudo en OrderStatus.

    Args:
        raw: Valor leído del almacenamiento
        strict: Si True, un valor desconocido lanza UnknownStateError

    Returns:
        OrderStatus o None (valor desconocido, modo no estricto)

    Raises:
        UnknownStateError: Solo en modo estricto
    """
    try:
        return OrderStatus(raw)
    except ValueError:
        if strict:
            raise UnknownStateError(str(raw))
        return None


def status_info(raw: Any) -> StatusInfo:
    """
    Configuración del estado. Nunca falla: un valor desconocido devuelve
    un estado de solo lectura con el valor crudo como etiqueta.
    """
    status = parse(raw)
    if status is None:
        text = '' if raw is None else str(raw)
        return StatusInfo(value=text, label=text, known=False)
    return STATUS_TABLE[status]


def status_label(raw: Any) -> str:
    return status_info(raw).label


def allowed_actions(raw: Any) -> List[str]:
    return status_info(raw).actions


def is_legacy(raw: Any) -> bool:
    return parse(raw) in LEGACY_STATUSES


# ==============================================================================
# TRANSICIONES
# ==============================================================================

def advance(raw: Any) -> str:
    """
    Estado siguiente.

    Raises:
        IllegalTransitionError: Si el estado no tiene siguiente
    """
    info = status_info(raw)
    if info.next is None:
        raise IllegalTransitionError(info.value, ADVANCE)
    return info.next


def revert(raw: Any) -> str:
    """
    Estado anterior.

    Raises:
        IllegalTransitionError: Si el estado no tiene anterior
    """
    info = status_info(raw)
    if info.previous is None:
        raise IllegalTransitionError(info.value, REVERT)
    return info.previous


def cancel(raw: Any) -> str:
    """
    Cancela el pedido (solo desde pending / preparing / accepted).

    Raises:
        IllegalTransitionError: Si el estado no admite cancelación
    """
    info = status_info(raw)
    if not info.can_cancel:
        raise IllegalTransitionError(info.value, CANCEL)
    return OrderStatus.CANCELLED.value


_TRANSITIONS = {
    ADVANCE: advance,
    REVERT: revert,
    CANCEL: cancel,
}


def apply_action(raw: Any, action: str) -> str:
    """
    Aplica una acción del tablero y devuelve el nuevo estado.

    Raises:
        IllegalTransitionError: Acción desconocida o no permitida
    """
    transition = _TRANSITIONS.get(action)
    if transition is None:
        raise IllegalTransitionError(status_info(raw).value, str(action))
    return transition(raw)
