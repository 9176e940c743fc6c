"""
Storage Service - Persistenza di CCNL, dipendenti e assenze

Espone tre capacità (AgreementStore, EmployeeStore, AbsenceStore) con due
implementazioni:
- DatabaseStorage: modelli Flask-SQLAlchemy (persistente)
- MemoryStorage: dizionari di processo (test e bootstrap)

Il backend si sceglie con STORAGE_BACKEND in configurazione. Non esiste alcun
fallback automatico da un backend all'altro.
"""

import logging
from typing import Any, Dict, List, Optional

from flask import current_app

from constants import DEFAULT_CCNLS

logger = logging.getLogger(__name__)

MEMORY_STORAGE_EXTENSION = 'comporto_memory_storage'

CCNL_FIELDS = ('name', 'code', 'comporto_days', 'is_active')
EMPLOYEE_FIELDS = ('external_code', 'first_name', 'last_name', 'email', 'hire_date',
                   'ccnl_id', 'owner_id', 'is_active')
ABSENCE_FIELDS = ('employee_id', 'start_date', 'end_date', 'absence_type',
                  'description', 'days_counted')


class StorageError(Exception):
    """Errore base dello storage"""


class NotFoundError(StorageError):
    """Record inesistente o non appartenente all'account"""


class DuplicateCodeError(StorageError):
    """Codice univoco (matricola o codice CCNL) già presente"""

    def __init__(self, field, value):
        self.field = field
        self.value = value
        super().__init__(f'Il valore "{value}" è già in uso')


def pick_fields(data: Dict[str, Any], allowed) -> Dict[str, Any]:
    """Mantiene solo le chiavi ammesse per il tipo di record"""
    return {key: value for key, value in data.items() if key in allowed}


# =============================================================================
# CAPABILITY INTERFACES
# =============================================================================

class AgreementStore:
    """Registro dei CCNL"""

    def list_ccnls(self, active_only: bool = True) -> List[Any]:
        raise NotImplementedError

    def get_ccnl(self, ccnl_id: int) -> Optional[Any]:
        raise NotImplementedError

    def create_ccnl(self, data: Dict[str, Any]) -> Any:
        raise NotImplementedError

    def update_ccnl(self, ccnl_id: int, data: Dict[str, Any]) -> Any:
        raise NotImplementedError

    def count_ccnls(self) -> int:
        raise NotImplementedError


class EmployeeStore:
    """Registro dei dipendenti, sempre filtrato per account proprietario"""

    def list_employees(self, owner_id: int) -> List[Any]:
        """Dipendenti attivi dell'account con CCNL e assenze (più recenti prima)"""
        raise NotImplementedError

    def get_employee(self, employee_id: int, owner_id: int) -> Optional[Any]:
        raise NotImplementedError

    def create_employee(self, data: Dict[str, Any]) -> Any:
        raise NotImplementedError

    def update_employee(self, employee_id: int, data: Dict[str, Any], owner_id: int) -> Any:
        raise NotImplementedError

    def delete_employee(self, employee_id: int, owner_id: int) -> bool:
        """Soft delete: imposta is_active a False. Restituisce False se non trovato"""
        raise NotImplementedError


class AbsenceStore:
    """Registro delle assenze"""

    def list_absences(self, employee_id: int) -> List[Any]:
        raise NotImplementedError

    def get_absence(self, absence_id: int, owner_id: int) -> Optional[Any]:
        """Assenza solo se il dipendente è attivo e appartiene all'account"""
        raise NotImplementedError

    def create_absence(self, data: Dict[str, Any]) -> Any:
        raise NotImplementedError

    def update_absence(self, absence_id: int, data: Dict[str, Any]) -> Any:
        raise NotImplementedError

    def delete_absence(self, absence_id: int) -> None:
        raise NotImplementedError


class Storage(AgreementStore, EmployeeStore, AbsenceStore):
    """Storage completo usato dai blueprint"""


# =============================================================================
# FACTORY & BOOTSTRAP
# =============================================================================

def get_storage() -> Storage:
    """Restituisce lo storage configurato per l'applicazione corrente"""
    backend = current_app.config.get('STORAGE_BACKEND', 'database')

    if backend == 'database':
        from services.database_storage import DatabaseStorage
        return DatabaseStorage()

    if backend == 'memory':
        storage = current_app.extensions.get(MEMORY_STORAGE_EXTENSION)
        if storage is None:
            from services.memory_storage import MemoryStorage
            storage = MemoryStorage()
            current_app.extensions[MEMORY_STORAGE_EXTENSION] = storage
            logger.warning("Storage in memoria attivo: i dati non sopravvivono al riavvio")
        return storage

    raise ValueError(f"STORAGE_BACKEND non supportato: {backend}")


def seed_default_ccnls(storage: Storage) -> int:
    """
    Crea i CCNL predefiniti se il registro è vuoto.

    Idempotente: se esiste almeno un CCNL non crea nulla.

    Returns:
        Numero di CCNL creati
    """
    if storage.count_ccnls() > 0:
        return 0

    for ccnl_data in DEFAULT_CCNLS:
        storage.create_ccnl(dict(ccnl_data))

    logger.info(f"Creati {len(DEFAULT_CCNLS)} CCNL predefiniti")
    return len(DEFAULT_CCNLS)
