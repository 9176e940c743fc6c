"""
Database Storage - implementazione Flask-SQLAlchemy dello storage comporto
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from app import db
from models import CCNL, Employee, Absence, italian_now
from services.storage import (
    Storage, StorageError, NotFoundError, DuplicateCodeError, pick_fields,
    CCNL_FIELDS, EMPLOYEE_FIELDS, ABSENCE_FIELDS,
)

logger = logging.getLogger(__name__)


class DatabaseStorage(Storage):
    """Storage persistente su database relazionale"""

    # =========================================================================
    # CCNL
    # =========================================================================

    def list_ccnls(self, active_only: bool = True) -> List[CCNL]:
        query = CCNL.query
        if active_only:
            query = query.filter(CCNL.is_active.is_(True))
        return query.order_by(CCNL.name.asc()).all()

    def get_ccnl(self, ccnl_id: int) -> Optional[CCNL]:
        return db.session.get(CCNL, ccnl_id)

    def count_ccnls(self) -> int:
        return CCNL.query.count()

    def create_ccnl(self, data: Dict[str, Any]) -> CCNL:
        ccnl = CCNL(**pick_fields(data, CCNL_FIELDS))
        db.session.add(ccnl)
        self._commit('code', ccnl.code)
        return ccnl

    def update_ccnl(self, ccnl_id: int, data: Dict[str, Any]) -> CCNL:
        ccnl = self.get_ccnl(ccnl_id)
        if ccnl is None:
            raise NotFoundError(f'CCNL {ccnl_id} non trovato')
        for key, value in pick_fields(data, CCNL_FIELDS).items():
            setattr(ccnl, key, value)
        ccnl.updated_at = italian_now()
        self._commit('code', ccnl.code)
        return ccnl

    # =========================================================================
    # EMPLOYEES
    # =========================================================================

    def _employee_query(self, owner_id: int):
        return Employee.query.options(
            selectinload(Employee.ccnl),
            selectinload(Employee.absences),
        ).filter(
            Employee.owner_id == owner_id,
            Employee.is_active.is_(True),
        )

    def list_employees(self, owner_id: int) -> List[Employee]:
        return self._employee_query(owner_id).order_by(
            Employee.last_name.asc(), Employee.first_name.asc()
        ).all()

    def get_employee(self, employee_id: int, owner_id: int) -> Optional[Employee]:
        return self._employee_query(owner_id).filter(Employee.id == employee_id).first()

    def create_employee(self, data: Dict[str, Any]) -> Employee:
        employee = Employee(**pick_fields(data, EMPLOYEE_FIELDS))
        db.session.add(employee)
        self._commit('external_code', employee.external_code)
        return employee

    def update_employee(self, employee_id: int, data: Dict[str, Any], owner_id: int) -> Employee:
        employee = Employee.query.filter_by(id=employee_id, owner_id=owner_id, is_active=True).first()
        if employee is None:
            raise NotFoundError(f'Dipendente {employee_id} non trovato')

        # Il proprietario non si cambia tramite aggiornamento
        updates = pick_fields(data, EMPLOYEE_FIELDS)
        updates.pop('owner_id', None)
        for key, value in updates.items():
            setattr(employee, key, value)
        employee.updated_at = italian_now()
        self._commit('external_code', employee.external_code)
        return employee

    def delete_employee(self, employee_id: int, owner_id: int) -> bool:
        employee = Employee.query.filter_by(id=employee_id, owner_id=owner_id, is_active=True).first()
        if employee is None:
            return False
        employee.is_active = False
        employee.updated_at = italian_now()
        self._commit()
        return True

    # =========================================================================
    # ABSENCES
    # =========================================================================

    def list_absences(self, employee_id: int) -> List[Absence]:
        return Absence.query.filter_by(employee_id=employee_id).order_by(
            Absence.start_date.desc()
        ).all()

    def get_absence(self, absence_id: int, owner_id: int) -> Optional[Absence]:
        return Absence.query.join(Employee).filter(
            Absence.id == absence_id,
            Employee.owner_id == owner_id,
            Employee.is_active.is_(True),
        ).first()

    def create_absence(self, data: Dict[str, Any]) -> Absence:
        absence = Absence(**pick_fields(data, ABSENCE_FIELDS))
        db.session.add(absence)
        self._commit()
        return absence

    def update_absence(self, absence_id: int, data: Dict[str, Any]) -> Absence:
        absence = db.session.get(Absence, absence_id)
        if absence is None:
            raise NotFoundError(f'Assenza {absence_id} non trovata')

        updates = pick_fields(data, ABSENCE_FIELDS)
        updates.pop('employee_id', None)
        for key, value in updates.items():
            setattr(absence, key, value)
        absence.updated_at = italian_now()
        self._commit()
        return absence

    def delete_absence(self, absence_id: int) -> None:
        absence = db.session.get(Absence, absence_id)
        if absence is None:
            raise NotFoundError(f'Assenza {absence_id} non trovata')
        db.session.delete(absence)
        self._commit()

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _commit(self, unique_field: Optional[str] = None, value: Any = None) -> None:
        """
        Commit con rollback su qualsiasi errore del database.

        Le violazioni di unicità diventano DuplicateCodeError, ogni altro
        errore StorageError: la sessione resta utilizzabile per le operazioni
        successive (es. righe seguenti di un import).
        """
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            if unique_field is None:
                logger.warning(f"Vincolo di integrità violato: {e.orig}")
                raise StorageError("Dati non coerenti con l'archivio") from e
            logger.warning(f"Violazione di unicità su {unique_field}={value}: {e.orig}")
            raise DuplicateCodeError(unique_field, value) from e
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Errore del database durante il salvataggio: {e}")
            raise StorageError("Errore di salvataggio sul database") from e
        except Exception:
            db.session.rollback()
            raise
