"""
Reporting Service - statistiche aggregate ed export tabellare del comporto.

Attenzione: le statistiche e l'export usano classificazioni proprie, distinte
dalle quattro fasce di utils_comporto.classify_status:
- statistiche: scaduto / in scadenza (solo critico) / in regola (attenzione + ok)
- export: Scaduto / Attenzione (0-10) / Conforme (tutto il resto)
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from constants import ComportoStatus, ExportStatusLabel, EXPORT_HEADERS
from utils_comporto import used_days, employee_remaining_days, classify_status


def employee_stats(employees: Iterable[Any]) -> Dict[str, int]:
    """
    Aggregate comporto counters over the given employees.

    Soft-deleted employees are skipped. Warning-band employees count as
    compliant, only critical ones as expiring soon.

    Returns:
        Dictionary with total, expiring_soon, expired and compliant counts
    """
    total = 0
    expiring_soon = 0
    expired = 0
    compliant = 0

    for employee in employees:
        if not employee.is_active:
            continue
        total += 1

        status = classify_status(employee_remaining_days(employee))
        if status == ComportoStatus.EXPIRED:
            expired += 1
        elif status == ComportoStatus.CRITICAL:
            expiring_soon += 1
        else:
            compliant += 1

    return {
        'total': total,
        'expiring_soon': expiring_soon,
        'expired': expired,
        'compliant': compliant,
    }


def export_status_label(remaining: int) -> str:
    """Etichetta di stato a tre valori usata nei documenti esportati"""
    if remaining < 0:
        return ExportStatusLabel.EXPIRED
    if remaining <= ExportStatusLabel.ATTENTION_MAX_DAYS:
        return ExportStatusLabel.ATTENTION
    return ExportStatusLabel.COMPLIANT


def build_export_row(employee: Any, placeholder: str = '-', date_format: str = '%d/%m/%Y') -> List[Any]:
    """Riga di export per un singolo dipendente, nell'ordine di EXPORT_HEADERS"""
    used = used_days(employee.absences)
    remaining = employee_remaining_days(employee)
    return [
        employee.external_code,
        employee.get_full_name(),
        employee.email or placeholder,
        employee.ccnl.name,
        employee.ccnl.comporto_days,
        used,
        remaining,
        export_status_label(remaining),
        employee.hire_date.strftime(date_format) if employee.hire_date else placeholder,
    ]


def build_export_table(employees: Iterable[Any],
                       title: str = 'Report Comporto Dipendenti',
                       placeholder: str = '-',
                       date_format: str = '%d/%m/%Y',
                       today: Optional[date] = None) -> Dict[str, Any]:
    """
    Build the flat table consumed by the document renderers.

    Args:
        employees: Employees with CCNL and absences loaded; inactive ones are skipped
        title: Document title
        placeholder: Text used for missing email or hire date
        date_format: Format for hire date and report date
        today: Report date (defaults to today)

    Returns:
        Dictionary with headers, rows, stats, title and date
    """
    active = [employee for employee in employees if employee.is_active]
    if today is None:
        today = date.today()

    return {
        'headers': list(EXPORT_HEADERS),
        'rows': [build_export_row(employee, placeholder, date_format) for employee in active],
        'stats': employee_stats(active),
        'title': title,
        'date': today.strftime(date_format),
    }
