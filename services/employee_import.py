"""
Employee Import Service - importazione dipendenti da foglio Excel/CSV.

Ogni riga viene validata in modo indipendente: una riga errata aggiunge un
messaggio alla lista errori ma non interrompe l'importazione delle altre.
I messaggi riportano il numero di riga come appare nel foglio (indice + 1
per la numerazione da uno + righe di intestazione).
"""

import logging
import os
import time
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd
from email_validator import validate_email, EmailNotValidError

from constants import (
    IMPORT_COLUMN_ALIASES, IMPORT_HEADER_ROWS, IMPORT_DATE_FORMATS, EMPLOYEE_FIELD_MAX_LENGTHS,
)
from services.storage import StorageError

logger = logging.getLogger(__name__)


class RowError(ValueError):
    """Errore di validazione di una singola riga"""


@dataclass
class ImportResult:
    created: List[Any] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def imported(self) -> int:
        return len(self.created)

    @property
    def failed(self) -> int:
        return len(self.errors)


# =============================================================================
# SPREADSHEET DECODING
# =============================================================================

def read_spreadsheet_rows(stream, filename: str) -> List[Dict[str, Any]]:
    """
    Decodifica un file .xlsx o .csv in una lista di dizionari per colonna.

    Le celle vuote diventano None; testi come "NA" o "NULL" restano invariati.
    """
    ext = os.path.splitext(filename or '')[1].lower()
    if ext == '.csv':
        df = pd.read_csv(stream, sep=None, engine='python', dtype=str,
                         keep_default_na=False, na_values=[''])
    elif ext == '.xlsx':
        df = pd.read_excel(stream, engine='openpyxl', keep_default_na=False, na_values=[''])
    else:
        raise ValueError(f'Formato file non supportato: {ext or filename}')

    logger.info(f"Colonne trovate nel foglio: {list(df.columns)}")
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient='records')


# =============================================================================
# ROW MAPPING
# =============================================================================

def resolve_columns(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map one spreadsheet row onto canonical field names.

    For each field the aliases are tried in order (Italian name first, then the
    English fallback); header names are compared trimmed and case-insensitive.
    """
    normalized = {str(key).strip().lower(): value for key, value in row.items() if key is not None}
    resolved = {}
    for field_name, aliases in IMPORT_COLUMN_ALIASES:
        value = None
        for alias in aliases:
            candidate = normalized.get(alias.lower())
            if _clean_text(candidate):
                value = candidate
                break
        resolved[field_name] = value
    return resolved


def _clean_text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        # Matricole numeriche lette da Excel come float (es. 123.0)
        value = int(value)
    return str(value).strip()


def parse_import_date(value: Any) -> Optional[date]:
    """Converte il valore di una cella in data; None se vuoto"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = _clean_text(value)
    if not text:
        return None
    for fmt in IMPORT_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise RowError(f'data non valida "{text}"')


def _check_length(field_name: str, label: str, value: Optional[str]) -> None:
    max_length = EMPLOYEE_FIELD_MAX_LENGTHS[field_name]
    if value and len(value) > max_length:
        raise RowError(f'{label} oltre {max_length} caratteri')


def generate_external_code(index: int) -> str:
    """Matricola sintetica per righe senza matricola, univoca nel lotto"""
    return f"EMP{int(time.time() * 1000)}{index}"


def build_employee_data(row: Dict[str, Any], index: int, ccnls: Sequence[Any], owner_id: int) -> Dict[str, Any]:
    """
    Costruisce i dati del dipendente a partire da una riga del foglio.

    Raises:
        RowError: se un campo obbligatorio manca o non è valido
    """
    values = resolve_columns(row)

    first_name = _clean_text(values['first_name'])
    last_name = _clean_text(values['last_name'])
    if not first_name:
        raise RowError('nome mancante')
    if not last_name:
        raise RowError('cognome mancante')
    _check_length('first_name', 'nome', first_name)
    _check_length('last_name', 'cognome', last_name)

    hire_date = parse_import_date(values['hire_date'])
    if hire_date is None:
        raise RowError('data di assunzione mancante')

    email = _clean_text(values['email']) or None
    _check_length('email', 'email', email)
    if email:
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            raise RowError(f'email non valida "{email}"')

    external_code = _clean_text(values['external_code']) or generate_external_code(index)
    _check_length('external_code', 'matricola', external_code)

    if not ccnls:
        raise RowError('nessun CCNL disponibile')
    ccnl_id = ccnls[0].id
    ccnl_name = _clean_text(values['ccnl']).lower()
    if ccnl_name:
        for ccnl in ccnls:
            if ccnl.name.strip().lower() == ccnl_name:
                ccnl_id = ccnl.id
                break

    return {
        'external_code': external_code,
        'first_name': first_name,
        'last_name': last_name,
        'email': email,
        'hire_date': hire_date,
        'ccnl_id': ccnl_id,
        'owner_id': owner_id,
        'is_active': True,
    }


def import_employee_rows(rows: Iterable[Dict[str, Any]], ccnls: Sequence[Any], owner_id: int, storage) -> ImportResult:
    """
    Import employees row by row.

    Args:
        rows: Column-name keyed rows, in sheet order
        ccnls: Existing CCNLs; the first one is the default assignment
        owner_id: Account owning the created employees
        storage: EmployeeStore used to persist each row

    Returns:
        ImportResult with the created employees and one message per failed row
    """
    result = ImportResult()

    for index, row in enumerate(rows):
        row_number = index + 1 + IMPORT_HEADER_ROWS
        try:
            data = build_employee_data(row, index, ccnls, owner_id)
            result.created.append(storage.create_employee(data))
        except (RowError, StorageError) as e:
            result.errors.append(f'Riga {row_number}: {e}')
        except Exception:
            logger.exception(f"Errore imprevisto importando la riga {row_number}")
            result.errors.append(f'Riga {row_number}: errore imprevisto')

    logger.info(f"Import dipendenti: {result.imported} creati, {result.failed} errori")
    return result
