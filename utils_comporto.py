"""
Utility functions for comporto (sick-leave protection period) calculations.

The remaining comporto of an employee is the CCNL day budget minus every
absence day ever counted for that employee: there is no rolling window and
no decay. Functions here are pure and work on any object exposing the
attributes used by the models (``days_counted``, ``comporto_days``, ...).
"""

from datetime import date, timedelta
from typing import Any, Dict, Iterable, Optional

from constants import ComportoStatus, COMPORTO_STATUS_INFO


def used_days(absences: Optional[Iterable[Any]]) -> int:
    """Somma dei giorni conteggiati di tutte le assenze (0 se non ce ne sono)."""
    if not absences:
        return 0
    return sum(absence.days_counted for absence in absences)


def remaining_days(comporto_days: int, absences: Optional[Iterable[Any]]) -> int:
    """
    Calculate the remaining comporto days.

    Args:
        comporto_days: Total absence days allowed by the CCNL
        absences: Absence records (order is irrelevant)

    Returns:
        comporto_days minus the counted days; negative once the budget is exceeded
    """
    return comporto_days - used_days(absences)


def employee_remaining_days(employee) -> int:
    """Giorni di comporto rimanenti per un dipendente con CCNL e assenze caricati"""
    return remaining_days(employee.ccnl.comporto_days, employee.absences)


def classify_status(remaining: int) -> str:
    """
    Classify remaining days into one of the four comporto bands.

    Bands are evaluated in priority order:
        remaining < 0        -> EXPIRED
        0 <= remaining <= 10 -> CRITICAL
        10 < remaining <= 30 -> WARNING
        remaining > 30       -> COMPLIANT
    """
    if remaining < 0:
        return ComportoStatus.EXPIRED
    if remaining <= ComportoStatus.CRITICAL_MAX_DAYS:
        return ComportoStatus.CRITICAL
    if remaining <= ComportoStatus.WARNING_MAX_DAYS:
        return ComportoStatus.WARNING
    return ComportoStatus.COMPLIANT


def get_status_info(remaining: int) -> Dict[str, str]:
    """Restituisce stato, etichetta e classi CSS per i giorni rimanenti"""
    status = classify_status(remaining)
    info = dict(COMPORTO_STATUS_INFO[status])
    info['status'] = status
    return info


def calendar_days_between(start: date, end: date) -> int:
    """Giorni di calendario tra due date, estremi inclusi, indipendentemente dall'ordine"""
    return abs((end - start).days) + 1


def working_days_between(start: date, end: date) -> int:
    """
    Count working days in [start, end], both inclusive, skipping Saturday and Sunday.

    Returns 0 when end precedes start.
    """
    if end < start:
        return 0

    work_days = 0
    current_date = start
    while current_date <= end:
        if current_date.weekday() < 5:
            work_days += 1
        current_date += timedelta(days=1)
    return work_days
