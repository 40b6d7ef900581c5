# ==============================================================================
# SERVICIO DE AUDITORÍA
# ==============================================================================
# Registro humanizado de las acciones del panel (pedidos, catálogo,
# configuración, sesión).
# ==============================================================================

from typing import Any, Dict, List, Optional

from app_pedidos.models.money import format_brl
from app_pedidos.repositories.interfaces import IAuditRepository


class AuditService:
    """
    Servicio para registro y consulta de actividad.

    Tipos de evento: PEDIDO, CATALOGO, CONFIGURACAO, SISTEMA.
    """

    TYPE_PEDIDO = 'PEDIDO'
    TYPE_CATALOGO = 'CATALOGO'
    TYPE_CONFIGURACAO = 'CONFIGURACAO'
    TYPE_SISTEMA = 'SISTEMA'

    def __init__(self, audit_repo: IAuditRepository):
        """
        Args:
            audit_repo: Repositorio de actividad
        """
        self.audit_repo = audit_repo

    # =========================================================================
    # REGISTRO DE EVENTOS
    # =========================================================================

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str = '',
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        self.audit_repo.log(log_type, user, message, related_id, details)

    def log_order_created(self, order: Dict[str, Any], user: Optional[str] = None) -> None:
        """Pedido nuevo (tienda o mostrador)."""
        code = str(order.get('id', ''))[-6:]
        origin = 'balcão' if order.get('order_type') == 'estabelecimento' else 'online'
        message = (
            f"Pedido #{code} criado ({origin}) - {order.get('customer_name', '')} - "
            f"Total: {format_brl(order.get('total'))}"
        )
        self.log(
            self.TYPE_PEDIDO,
            user or 'cliente',
            message,
            str(order.get('id', '')),
            {'total': order.get('total'), 'order_type': order.get('order_type')}
        )

    def log_order_status_change(
        self,
        user: str,
        order_id: str,
        old_label: str,
        new_label: str
    ) -> None:
        message = f"Pedido #{order_id[-6:]}: {old_label} → {new_label} por {user}"
        self.log(self.TYPE_PEDIDO, user, message, order_id,
                 {'from': old_label, 'to': new_label})

    def log_order_deleted(self, user: str, order: Dict[str, Any]) -> None:
        order_id = str(order.get('id', ''))
        message = (
            f"Pedido #{order_id[-6:]} excluído por {user} "
            f"({order.get('customer_name', '')}, {format_brl(order.get('total'))})"
        )
        self.log(self.TYPE_PEDIDO, user, message, order_id)

    def log_catalog_change(
        self,
        user: str,
        entity: str,
        action: str,
        name: str,
        record_id: str = ''
    ) -> None:
        """
        Cambio en el catálogo.

        Args:
            entity: Etiqueta de la entidad ("Produto", "Categoria", ...)
            action: "criado", "atualizado", "excluído", "ativado", "desativado"
            name: Nombre del registro
        """
        message = f"{entity} '{name}' {action} por {user}"
        self.log(self.TYPE_CATALOGO, user, message, record_id,
                 {'entity': entity, 'action': action})

    def log_settings_updated(self, user: str, changed: List[str]) -> None:
        fields = ', '.join(changed) if changed else 'nenhum campo'
        self.log(self.TYPE_CONFIGURACAO, user,
                 f"Configurações da empresa atualizadas por {user} ({fields})",
                 details={'changed': changed})

    def log_login(self, user: str) -> None:
        self.log(self.TYPE_SISTEMA, user, f"{user} entrou no painel")

    def log_logout(self, user: str) -> None:
        self.log(self.TYPE_SISTEMA, user, f"{user} saiu do painel")

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def search_logs(
        self,
        query: str = '',
        log_type: Optional[str] = None,
        user: Optional[str] = None,
        limit: int = 200
    ) -> List[Dict[str, Any]]:
        return self.audit_repo.search_logs(query, log_type, user)[:limit]
