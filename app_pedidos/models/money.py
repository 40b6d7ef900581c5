# ==============================================================================
# DINERO - Aritmética decimal
# ==============================================================================
# Todo monto se maneja como Decimal. El redondeo a 2 decimales se aplica
# solo al mostrar o persistir, nunca en cálculos intermedios.
# ==============================================================================

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

ZERO = Decimal('0')
CENTS = Decimal('0.01')


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """
    Convierte un valor de entrada (str, int, float, Decimal) a Decimal.

    Acepta coma como separador decimal ("5,50"), como los formularios
    del panel. Los float se convierten vía str para no arrastrar el
    error binario.

    Args:
        value: Valor a convertir
        default: Valor si la entrada está vacía o no es numérica

    Returns:
        Decimal equivalente
    """
    if value is None or value == '':
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    text = str(value).strip().replace('R$', '').strip()
    if ',' in text:
        text = text.replace('.', '').replace(',', '.')
    try:
        result = Decimal(text)
    except (InvalidOperation, ValueError):
        return default
    if not result.is_finite():
        return default
    return result


def to_money(value: Any) -> Decimal:
    """Redondea a 2 decimales (ROUND_HALF_UP)."""
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def money_to_json(value: Any) -> float:
    """Monto redondeado como float, para JSON / almacenamiento."""
    return float(to_money(value))


def format_brl(value: Any) -> str:
    """
    Formatea un monto en reales.

    Ejemplo: Decimal('1234.5') -> 'R$ 1.234,50'
    """
    amount = to_money(value)
    sign = '-' if amount < 0 else ''
    integer, _, cents = f"{abs(amount):.2f}".partition('.')
    groups = []
    while len(integer) > 3:
        groups.insert(0, integer[-3:])
        integer = integer[:-3]
    groups.insert(0, integer)
    return f"{sign}R$ {'.'.join(groups)},{cents}"
