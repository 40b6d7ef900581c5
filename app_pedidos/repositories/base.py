# ==============================================================================
# REPOSITORIO BASE - Acceso común a archivos JSON
# ==============================================================================
# Cada "tabla" del almacenamiento es un archivo JSON en el directorio de
# datos. Las escrituras son atómicas (archivo temporal + os.replace) y todas
# pasan por un lock compartido por el proceso.
# ==============================================================================

import json
import os
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from app_pedidos.models.errors import PersistenceError


class BaseRepository(ABC):
    """
    Clase base abstracta para los repositorios JSON.

    Una falla de escritura se propaga como PersistenceError; los servicios
    deciden si hacen rollback o muestran el mensaje al usuario.
    """

    # Lock global para evitar escrituras concurrentes a archivos
    _file_lock = threading.RLock()

    def __init__(self, file_path: str):
        """
        Args:
            file_path: Ruta absoluta al archivo JSON de datos
        """
        self.file_path = file_path
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._ensure_file_exists()

    def _ensure_file_exists(self) -> None:
        """Crea el archivo con los datos iniciales si no existe."""
        if not os.path.exists(self.file_path):
            self._write_raw(self._empty_data())

    @abstractmethod
    def _empty_data(self) -> Any:
        """Estructura inicial del archivo (dict, list, ...)."""
        pass

    def _read_raw(self) -> Any:
        """
        Lee los datos crudos del archivo JSON.
        Un archivo ausente se lee como vacío.

        Raises:
            PersistenceError: Si el archivo no se puede leer o está corrupto
        """
        with self._file_lock:
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except FileNotFoundError:
                return self._empty_data()
            except (OSError, ValueError) as e:
                raise PersistenceError(
                    f"Erro ao ler {os.path.basename(self.file_path)}: {e}"
                ) from e

    def _write_raw(self, data: Any) -> None:
        """
        Escribe datos al archivo JSON.

        Raises:
            PersistenceError: Si no se pudo escribir o serializar
        """
        with self._file_lock:
            temp_path = self.file_path + '.tmp'
            try:
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(temp_path, self.file_path)
            except (OSError, TypeError, ValueError) as e:
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                raise PersistenceError(
                    f"Erro ao gravar {os.path.basename(self.file_path)}: {e}"
                ) from e


class DictRepository(BaseRepository):
    """
    Repositorio con datos como diccionario {id: registro}.

    Ejemplo: products.json -> {"p1": {...}, "p2": {...}}
    """

    def _empty_data(self) -> Dict:
        return {}

    def get_all(self) -> Dict[str, Any]:
        data = self._read_raw()
        if not isinstance(data, dict):
            raise PersistenceError(f"Formato inválido em {os.path.basename(self.file_path)}")
        return data

    def get_by_id(self, record_id: Any) -> Optional[Dict[str, Any]]:
        if record_id is None:
            return None
        return self.get_all().get(str(record_id))

    def save_all(self, data: Dict[str, Any]) -> None:
        self._write_raw(data)

    def update(self, record_id: Any, record_data: Dict[str, Any]) -> None:
        """Inserta o reemplaza un registro."""
        with self._file_lock:
            data = self.get_all()
            data[str(record_id)] = record_data
            self._write_raw(data)

    def delete(self, record_id: Any) -> Optional[Dict[str, Any]]:
        """
        Elimina un registro.

        Returns:
            Registro eliminado o None si no existía
        """
        with self._file_lock:
            data = self.get_all()
            removed = data.pop(str(record_id), None)
            if removed is not None:
                self._write_raw(data)
            return removed


class ListRepository(BaseRepository):
    """
    Repositorio con datos como lista de registros.

    Ejemplo: orders.json -> [{...}, {...}]
    """

    def _empty_data(self) -> List:
        return []

    def get_all(self) -> List[Dict[str, Any]]:
        data = self._read_raw()
        if not isinstance(data, list):
            raise PersistenceError(f"Formato inválido em {os.path.basename(self.file_path)}")
        return data

    def save_all(self, data: List[Dict[str, Any]]) -> None:
        self._write_raw(data)

    def append(self, record: Dict[str, Any]) -> None:
        self.extend([record])

    def extend(self, records: List[Dict[str, Any]]) -> None:
        """Agrega varios registros en una sola escritura."""
        if not records:
            return
        with self._file_lock:
            data = self.get_all()
            data.extend(records)
            self._write_raw(data)

    def find_by(self, field: str, value: Any) -> Optional[Dict[str, Any]]:
        """Primer registro cuyo campo coincide, o None."""
        for record in self.get_all():
            if record.get(field) == value:
                return record
        return None

    def find_all_by(self, field: str, value: Any) -> List[Dict[str, Any]]:
        return [r for r in self.get_all() if r.get(field) == value]

    def update_where(self, field: str, value: Any, updates: Dict[str, Any]) -> bool:
        """
        Actualiza los registros cuyo campo coincide.

        Returns:
            True si se actualizó al menos un registro
        """
        with self._file_lock:
            data = self.get_all()
            updated = False
            for record in data:
                if record.get(field) == value:
                    record.update(updates)
                    updated = True
            if updated:
                self._write_raw(data)
            return updated

    def remove_where(self, predicate: Callable[[Dict[str, Any]], bool]) -> int:
        """
        Elimina los registros que cumplen el predicado.

        Returns:
            Cantidad de registros eliminados
        """
        with self._file_lock:
            data = self.get_all()
            kept = [r for r in data if not predicate(r)]
            removed = len(data) - len(kept)
            if removed:
                self._write_raw(kept)
            return removed
