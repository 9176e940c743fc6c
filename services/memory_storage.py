"""
Memory Storage - storage di processo per test e bootstrap.

I dati vivono solo finché vive il processo. Va selezionato esplicitamente
con STORAGE_BACKEND=memory.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from models import italian_now
from services.storage import (
    Storage, NotFoundError, DuplicateCodeError, pick_fields,
    CCNL_FIELDS, EMPLOYEE_FIELDS, ABSENCE_FIELDS,
)


@dataclass
class CCNLRecord:
    id: int
    name: str
    code: str
    comporto_days: int
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class AbsenceRecord:
    id: int
    employee_id: int
    start_date: date
    end_date: date
    absence_type: str
    days_counted: int
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class EmployeeRecord:
    id: int
    external_code: str
    first_name: str
    last_name: str
    hire_date: date
    ccnl_id: int
    owner_id: int
    email: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Relazioni valorizzate in lettura
    ccnl: Optional[CCNLRecord] = None
    absences: List[AbsenceRecord] = field(default_factory=list)

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}"


class MemoryStorage(Storage):
    """Storage volatile basato su dizionari"""

    def __init__(self):
        self.ccnls: Dict[int, CCNLRecord] = {}
        self.employees: Dict[int, EmployeeRecord] = {}
        self.absences: Dict[int, AbsenceRecord] = {}
        self._next_ccnl_id = 1
        self._next_employee_id = 1
        self._next_absence_id = 1

    # =========================================================================
    # CCNL
    # =========================================================================

    def list_ccnls(self, active_only: bool = True) -> List[CCNLRecord]:
        ccnls = [c for c in self.ccnls.values() if c.is_active or not active_only]
        return [replace(c) for c in sorted(ccnls, key=lambda c: c.name)]

    def get_ccnl(self, ccnl_id: int) -> Optional[CCNLRecord]:
        ccnl = self.ccnls.get(ccnl_id)
        return replace(ccnl) if ccnl else None

    def count_ccnls(self) -> int:
        return len(self.ccnls)

    def create_ccnl(self, data: Dict[str, Any]) -> CCNLRecord:
        values = pick_fields(data, CCNL_FIELDS)
        self._check_unique_ccnl_code(values.get('code'))
        now = italian_now()
        ccnl = CCNLRecord(id=self._next_ccnl_id, created_at=now, updated_at=now, **values)
        self.ccnls[ccnl.id] = ccnl
        self._next_ccnl_id += 1
        return replace(ccnl)

    def update_ccnl(self, ccnl_id: int, data: Dict[str, Any]) -> CCNLRecord:
        existing = self.ccnls.get(ccnl_id)
        if existing is None:
            raise NotFoundError(f'CCNL {ccnl_id} non trovato')
        values = pick_fields(data, CCNL_FIELDS)
        if 'code' in values:
            self._check_unique_ccnl_code(values['code'], exclude_id=ccnl_id)
        updated = replace(existing, updated_at=italian_now(), **values)
        self.ccnls[ccnl_id] = updated
        return replace(updated)

    def _check_unique_ccnl_code(self, code, exclude_id=None):
        for ccnl in self.ccnls.values():
            if ccnl.code == code and ccnl.id != exclude_id:
                raise DuplicateCodeError('code', code)

    # =========================================================================
    # EMPLOYEES
    # =========================================================================

    def _with_relations(self, employee: EmployeeRecord) -> EmployeeRecord:
        return replace(
            employee,
            ccnl=self.get_ccnl(employee.ccnl_id),
            absences=self.list_absences(employee.id),
        )

    def list_employees(self, owner_id: int) -> List[EmployeeRecord]:
        employees = [e for e in self.employees.values() if e.owner_id == owner_id and e.is_active]
        employees.sort(key=lambda e: (e.last_name, e.first_name))
        return [self._with_relations(e) for e in employees]

    def get_employee(self, employee_id: int, owner_id: int) -> Optional[EmployeeRecord]:
        employee = self.employees.get(employee_id)
        if employee is None or employee.owner_id != owner_id or not employee.is_active:
            return None
        return self._with_relations(employee)

    def create_employee(self, data: Dict[str, Any]) -> EmployeeRecord:
        values = pick_fields(data, EMPLOYEE_FIELDS)
        self._check_unique_external_code(values.get('external_code'))
        if values.get('ccnl_id') not in self.ccnls:
            raise NotFoundError(f"CCNL {values.get('ccnl_id')} non trovato")
        now = italian_now()
        employee = EmployeeRecord(id=self._next_employee_id, created_at=now, updated_at=now, **values)
        self.employees[employee.id] = employee
        self._next_employee_id += 1
        return self._with_relations(employee)

    def update_employee(self, employee_id: int, data: Dict[str, Any], owner_id: int) -> EmployeeRecord:
        existing = self.employees.get(employee_id)
        if existing is None or existing.owner_id != owner_id or not existing.is_active:
            raise NotFoundError(f'Dipendente {employee_id} non trovato')

        values = pick_fields(data, EMPLOYEE_FIELDS)
        values.pop('owner_id', None)
        if 'external_code' in values:
            self._check_unique_external_code(values['external_code'], exclude_id=employee_id)
        updated = replace(existing, updated_at=italian_now(), **values)
        self.employees[employee_id] = updated
        return self._with_relations(updated)

    def delete_employee(self, employee_id: int, owner_id: int) -> bool:
        existing = self.employees.get(employee_id)
        if existing is None or existing.owner_id != owner_id or not existing.is_active:
            return False
        self.employees[employee_id] = replace(existing, is_active=False, updated_at=italian_now())
        return True

    def _check_unique_external_code(self, code, exclude_id=None):
        for employee in self.employees.values():
            if employee.external_code == code and employee.id != exclude_id:
                raise DuplicateCodeError('external_code', code)

    # =========================================================================
    # ABSENCES
    # =========================================================================

    def list_absences(self, employee_id: int) -> List[AbsenceRecord]:
        absences = [a for a in self.absences.values() if a.employee_id == employee_id]
        absences.sort(key=lambda a: a.start_date, reverse=True)
        return [replace(a) for a in absences]

    def get_absence(self, absence_id: int, owner_id: int) -> Optional[AbsenceRecord]:
        absence = self.absences.get(absence_id)
        if absence is None:
            return None
        employee = self.employees.get(absence.employee_id)
        if employee is None or employee.owner_id != owner_id or not employee.is_active:
            return None
        return replace(absence)

    def create_absence(self, data: Dict[str, Any]) -> AbsenceRecord:
        values = pick_fields(data, ABSENCE_FIELDS)
        if values.get('employee_id') not in self.employees:
            raise NotFoundError(f"Dipendente {values.get('employee_id')} non trovato")
        now = italian_now()
        absence = AbsenceRecord(id=self._next_absence_id, created_at=now, updated_at=now, **values)
        self.absences[absence.id] = absence
        self._next_absence_id += 1
        return replace(absence)

    def update_absence(self, absence_id: int, data: Dict[str, Any]) -> AbsenceRecord:
        existing = self.absences.get(absence_id)
        if existing is None:
            raise NotFoundError(f'Assenza {absence_id} non trovata')
        values = pick_fields(data, ABSENCE_FIELDS)
        values.pop('employee_id', None)
        updated = replace(existing, updated_at=italian_now(), **values)
        self.absences[absence_id] = updated
        return replace(updated)

    def delete_absence(self, absence_id: int) -> None:
        if self.absences.pop(absence_id, None) is None:
            raise NotFoundError(f'Assenza {absence_id} non trovata')
