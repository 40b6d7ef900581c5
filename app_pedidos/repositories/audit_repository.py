# ==============================================================================
# REPOSITORIO DE ACTIVIDAD
# ==============================================================================
# Encapsula el acceso a activity.json.
# La actividad se almacena como lista, más reciente primero.
# ==============================================================================

import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from .base import ListRepository


class AuditRepository(ListRepository):
    """
    Repositorio del registro de actividad del panel.

    Formato de activity.json:
    [
        {
            "type": "PEDIDO",
            "user": "admin",
            "message": "Pedido #a1b2c3 avançou para Preparando",
            "timestamp": "2024-01-01 10:00:00",
            "related_id": "9b1c...",
            "details": {...}
        }
    ]
    """

    # Límite de registros para evitar archivos muy grandes
    MAX_LOGS = 5000

    def __init__(self, base_path: str):
        """
        Args:
            base_path: Directorio de datos
        """
        super().__init__(os.path.join(base_path, 'activity.json'))

    def load(self) -> List[Dict[str, Any]]:
        """Registros ordenados por timestamp descendente."""
        return sorted(self.get_all(), key=lambda x: x.get('timestamp', ''), reverse=True)

    def save(self, logs: List[Dict[str, Any]]) -> None:
        self.save_all(logs[:self.MAX_LOGS])

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str = '',
        details: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Registra un evento.

        Args:
            log_type: Tipo de evento (PEDIDO, PRODUTO, CATEGORIA, ...)
            user: Usuario que realizó la acción
            message: Mensaje humanizado
            related_id: Id del registro afectado
            details: Detalles adicionales

        Returns:
            Entrada registrada
        """
        entry = {
            'type': log_type,
            'user': user or 'sistema',
            'message': message,
            'timestamp': datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            'related_id': related_id or '',
            'details': details or {},
        }
        with self._file_lock:
            logs = self.get_all()
            logs.insert(0, entry)
            self.save(logs)
        return entry

    def search_logs(
        self,
        query: str = '',
        log_type: Optional[str] = None,
        user: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Filtra la actividad por tipo, usuario y texto libre.
        """
        logs = self.load()

        if log_type:
            logs = [log for log in logs if log.get('type') == log_type]

        if user:
            logs = [log for log in logs if log.get('user') == user]

        if query:
            query_lower = query.lower()
            logs = [
                log for log in logs
                if any(
                    query_lower in str(log.get(key, '')).lower()
                    for key in ('type', 'user', 'message', 'related_id')
                )
            ]

        return logs

    def get_recent_logs(self, limit: int = 100) -> List[Dict[str, Any]]:
        return self.load()[:limit]
