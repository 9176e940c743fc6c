# =============================================================================
# API BLUEPRINT - Endpoints JSON per CCNL, dipendenti, assenze e statistiche
# =============================================================================
#
# ROUTES INCLUSE:
# 1. /api/init (GET, POST) - Inizializza i CCNL predefiniti
# 2. /api/ccnls (GET, POST), /api/ccnls/<id> (PUT) - Gestione CCNL
# 3. /api/employees (GET, POST) - Lista e creazione dipendenti
# 4. /api/employees/<id> (GET, PUT, DELETE) - Dettaglio, modifica, eliminazione logica
# 5. /api/employees/<id>/absences (GET, POST) - Assenze del dipendente
# 6. /api/absences/<id> (PUT, DELETE) - Modifica ed eliminazione assenze
# 7. /api/absences/days-between (GET) - Giorni di calendario e lavorativi
# 8. /api/stats (GET) - Statistiche comporto
# 9. /api/employees/export (GET) - Tabella di export
# 10. /api/employees/import (POST) - Import da Excel/CSV
#
# Total routes: 10 API endpoint groups
# =============================================================================

import logging
from datetime import datetime
from io import BytesIO

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required
from werkzeug.datastructures import MultiDict

from app import db
from forms import CCNLForm, EmployeeForm, AbsenceForm, EmployeeImportForm
from services.storage import get_storage, seed_default_ccnls, DuplicateCodeError, NotFoundError
from services.reporting import employee_stats, build_export_table
from services.employee_import import read_spreadsheet_rows, import_employee_rows
from utils_comporto import (
    used_days, employee_remaining_days, get_status_info,
    calendar_days_between, working_days_between,
)
from utils_tenant import require_owner, set_owner_on_create
from constants import AbsenceTypes

logger = logging.getLogger(__name__)

# Create blueprint
api_bp = Blueprint('api', __name__, url_prefix='/api')

# =============================================================================
# HELPERS
# =============================================================================

def _payload():
    """Corpo JSON della richiesta (dizionario vuoto se assente o non valido)"""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}

def _formdata(values):
    """Converte un dizionario JSON in MultiDict di stringhe per WTForms"""
    formdata = MultiDict()
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        formdata.add(key, str(value))
    return formdata

def _date_str(value):
    return value.isoformat() if value else None

def _validation_error(errors):
    return jsonify({'message': 'Dati non validi', 'errors': errors}), 400

def _ccnl_to_dict(ccnl):
    return {
        'id': ccnl.id,
        'name': ccnl.name,
        'code': ccnl.code,
        'comporto_days': ccnl.comporto_days,
        'is_active': ccnl.is_active,
    }

def _absence_to_dict(absence):
    return {
        'id': absence.id,
        'employee_id': absence.employee_id,
        'start_date': _date_str(absence.start_date),
        'end_date': _date_str(absence.end_date),
        'absence_type': absence.absence_type,
        'absence_type_label': dict(AbsenceTypes.choices()).get(absence.absence_type, absence.absence_type),
        'description': absence.description,
        'days_counted': absence.days_counted,
    }

def _employee_to_dict(employee, include_absences=True):
    remaining = employee_remaining_days(employee)
    data = {
        'id': employee.id,
        'external_code': employee.external_code,
        'first_name': employee.first_name,
        'last_name': employee.last_name,
        'full_name': employee.get_full_name(),
        'email': employee.email,
        'hire_date': _date_str(employee.hire_date),
        'ccnl_id': employee.ccnl_id,
        'ccnl': _ccnl_to_dict(employee.ccnl),
        'is_active': employee.is_active,
        'used_days': used_days(employee.absences),
        'remaining_days': remaining,
        'status': get_status_info(remaining),
    }
    if include_absences:
        data['absences'] = [_absence_to_dict(a) for a in employee.absences]
    return data

def _ccnl_form_values(ccnl):
    return {
        'name': ccnl.name,
        'code': ccnl.code,
        'comporto_days': ccnl.comporto_days,
        'is_active': ccnl.is_active,
    }

def _employee_form_values(employee):
    return {
        'external_code': employee.external_code,
        'first_name': employee.first_name,
        'last_name': employee.last_name,
        'email': employee.email,
        'hire_date': _date_str(employee.hire_date),
        'ccnl_id': employee.ccnl_id,
        'is_active': employee.is_active,
    }

def _absence_form_values(absence):
    return {
        'start_date': _date_str(absence.start_date),
        'end_date': _date_str(absence.end_date),
        'absence_type': absence.absence_type,
        'description': absence.description,
        'days_counted': absence.days_counted,
    }

def _ccnl_data(form):
    return {
        'name': form.name.data.strip(),
        'code': form.code.data.strip(),
        'comporto_days': form.comporto_days.data,
        'is_active': form.is_active.data,
    }

def _employee_data(form):
    return {
        'external_code': form.external_code.data.strip(),
        'first_name': form.first_name.data.strip(),
        'last_name': form.last_name.data.strip(),
        'email': (form.email.data or '').strip() or None,
        'hire_date': form.hire_date.data,
        'ccnl_id': form.ccnl_id.data,
        'is_active': form.is_active.data,
    }

def _absence_data(form):
    return {
        'start_date': form.start_date.data,
        'end_date': form.end_date.data,
        'absence_type': form.absence_type.data.strip(),
        'description': (form.description.data or '').strip() or None,
        'days_counted': form.days_counted.data,
    }

def _employee_not_found():
    return jsonify({'message': 'Dipendente non trovato'}), 404

# =============================================================================
# BOOTSTRAP
# =============================================================================

@api_bp.route('/init', methods=['GET', 'POST'])
def init():
    """Inizializza i CCNL predefiniti se il registro è vuoto"""
    try:
        created = seed_default_ccnls(get_storage())
        return jsonify({'success': True, 'created': created})
    except Exception:
        db.session.rollback()
        logger.exception("Errore durante l'inizializzazione dei CCNL")
        return jsonify({'message': "Errore durante l'inizializzazione"}), 500

# =============================================================================
# CCNL ROUTES
# =============================================================================

@api_bp.route('/ccnls')
@login_required
def ccnls():
    """Lista CCNL attivi ordinati per nome"""
    try:
        return jsonify([_ccnl_to_dict(c) for c in get_storage().list_ccnls()])
    except Exception:
        logger.exception("Errore nel recupero dei CCNL")
        return jsonify({'message': 'Errore nel recupero dei CCNL'}), 500

@api_bp.route('/ccnls', methods=['POST'])
@login_required
def create_ccnl():
    """Crea un nuovo CCNL"""
    form = CCNLForm(formdata=_formdata({'is_active': True, **_payload()}))
    if not form.validate():
        return _validation_error(form.errors)

    try:
        ccnl = get_storage().create_ccnl(_ccnl_data(form))
        logger.info(f"CCNL creato: {ccnl.code}")
        return jsonify(_ccnl_to_dict(ccnl)), 201
    except DuplicateCodeError as e:
        return _validation_error({e.field: [str(e)]})
    except Exception:
        db.session.rollback()
        logger.exception("Errore nella creazione del CCNL")
        return jsonify({'message': 'Errore nella creazione del CCNL'}), 500

@api_bp.route('/ccnls/<int:ccnl_id>', methods=['PUT'])
@login_required
def update_ccnl(ccnl_id):
    """Modifica un CCNL esistente (aggiornamento parziale)"""
    storage = get_storage()
    ccnl = storage.get_ccnl(ccnl_id)
    if ccnl is None:
        return jsonify({'message': 'CCNL non trovato'}), 404

    form = CCNLForm(formdata=_formdata({**_ccnl_form_values(ccnl), **_payload()}))
    if not form.validate():
        return _validation_error(form.errors)

    try:
        ccnl = storage.update_ccnl(ccnl_id, _ccnl_data(form))
        return jsonify(_ccnl_to_dict(ccnl))
    except DuplicateCodeError as e:
        return _validation_error({e.field: [str(e)]})
    except Exception:
        db.session.rollback()
        logger.exception(f"Errore nell'aggiornamento del CCNL {ccnl_id}")
        return jsonify({'message': "Errore nell'aggiornamento del CCNL"}), 500

# =============================================================================
# EMPLOYEE ROUTES
# =============================================================================

@api_bp.route('/employees')
@login_required
@require_owner
def employees(owner_id):
    """Dipendenti attivi dell'account con giorni rimanenti e stato"""
    try:
        return jsonify([_employee_to_dict(e) for e in get_storage().list_employees(owner_id)])
    except Exception:
        logger.exception("Errore nel recupero dei dipendenti")
        return jsonify({'message': 'Errore nel recupero dei dipendenti'}), 500

@api_bp.route('/employees/<int:employee_id>')
@login_required
@require_owner
def employee_detail(employee_id, owner_id):
    """Dettaglio dipendente con storico assenze"""
    employee = get_storage().get_employee(employee_id, owner_id)
    if employee is None:
        return _employee_not_found()
    return jsonify(_employee_to_dict(employee))

@api_bp.route('/employees', methods=['POST'])
@login_required
@require_owner
def create_employee(owner_id):
    """Crea un nuovo dipendente per l'account corrente"""
    form = EmployeeForm(formdata=_formdata({'is_active': True, **_payload()}))
    if not form.validate():
        return _validation_error(form.errors)

    storage = get_storage()
    if storage.get_ccnl(form.ccnl_id.data) is None:
        return jsonify({'message': 'CCNL non trovato'}), 404

    data = set_owner_on_create(_employee_data(form))
    try:
        employee = storage.create_employee(data)
        logger.info(f"Dipendente creato: {employee.external_code} (account {owner_id})")
        return jsonify(_employee_to_dict(employee)), 201
    except DuplicateCodeError as e:
        return _validation_error({e.field: [str(e)]})
    except Exception:
        db.session.rollback()
        logger.exception("Errore nella creazione del dipendente")
        return jsonify({'message': 'Errore nella creazione del dipendente'}), 500

@api_bp.route('/employees/<int:employee_id>', methods=['PUT'])
@login_required
@require_owner
def update_employee(employee_id, owner_id):
    """Modifica un dipendente (aggiornamento parziale)"""
    storage = get_storage()
    employee = storage.get_employee(employee_id, owner_id)
    if employee is None:
        return _employee_not_found()

    form = EmployeeForm(formdata=_formdata({**_employee_form_values(employee), **_payload()}))
    if not form.validate():
        return _validation_error(form.errors)

    if form.ccnl_id.data != employee.ccnl_id and storage.get_ccnl(form.ccnl_id.data) is None:
        return jsonify({'message': 'CCNL non trovato'}), 404

    try:
        storage.update_employee(employee_id, _employee_data(form), owner_id)
        employee = storage.get_employee(employee_id, owner_id)
        if employee is None:
            # Disattivato tramite is_active=false
            return '', 204
        return jsonify(_employee_to_dict(employee))
    except NotFoundError:
        return _employee_not_found()
    except DuplicateCodeError as e:
        return _validation_error({e.field: [str(e)]})
    except Exception:
        db.session.rollback()
        logger.exception(f"Errore nell'aggiornamento del dipendente {employee_id}")
        return jsonify({'message': "Errore nell'aggiornamento del dipendente"}), 500

@api_bp.route('/employees/<int:employee_id>', methods=['DELETE'])
@login_required
@require_owner
def delete_employee(employee_id, owner_id):
    """Eliminazione logica: il dipendente resta in archivio come non attivo"""
    try:
        if not get_storage().delete_employee(employee_id, owner_id):
            return _employee_not_found()
        logger.info(f"Dipendente {employee_id} disattivato (account {owner_id})")
        return '', 204
    except Exception:
        db.session.rollback()
        logger.exception(f"Errore nell'eliminazione del dipendente {employee_id}")
        return jsonify({'message': "Errore nell'eliminazione del dipendente"}), 500

# =============================================================================
# ABSENCE ROUTES
# =============================================================================

@api_bp.route('/employees/<int:employee_id>/absences')
@login_required
@require_owner
def employee_absences(employee_id, owner_id):
    """Assenze del dipendente, dalla più recente"""
    storage = get_storage()
    if storage.get_employee(employee_id, owner_id) is None:
        return _employee_not_found()
    return jsonify([_absence_to_dict(a) for a in storage.list_absences(employee_id)])

@api_bp.route('/employees/<int:employee_id>/absences', methods=['POST'])
@login_required
@require_owner
def create_absence(employee_id, owner_id):
    """Registra una nuova assenza per il dipendente"""
    storage = get_storage()
    if storage.get_employee(employee_id, owner_id) is None:
        return _employee_not_found()

    form = AbsenceForm(formdata=_formdata(_payload()))
    if not form.validate():
        return _validation_error(form.errors)

    data = _absence_data(form)
    data['employee_id'] = employee_id
    try:
        absence = storage.create_absence(data)
        return jsonify(_absence_to_dict(absence)), 201
    except Exception:
        db.session.rollback()
        logger.exception(f"Errore nella creazione dell'assenza per il dipendente {employee_id}")
        return jsonify({'message': "Errore nella creazione dell'assenza"}), 500

@api_bp.route('/absences/<int:absence_id>', methods=['PUT'])
@login_required
@require_owner
def update_absence(absence_id, owner_id):
    """Modifica un'assenza (aggiornamento parziale)"""
    storage = get_storage()
    absence = storage.get_absence(absence_id, owner_id)
    if absence is None:
        return jsonify({'message': 'Assenza non trovata'}), 404

    form = AbsenceForm(formdata=_formdata({**_absence_form_values(absence), **_payload()}))
    if not form.validate():
        return _validation_error(form.errors)

    try:
        absence = storage.update_absence(absence_id, _absence_data(form))
        return jsonify(_absence_to_dict(absence))
    except Exception:
        db.session.rollback()
        logger.exception(f"Errore nell'aggiornamento dell'assenza {absence_id}")
        return jsonify({'message': "Errore nell'aggiornamento dell'assenza"}), 500

@api_bp.route('/absences/<int:absence_id>', methods=['DELETE'])
@login_required
@require_owner
def delete_absence(absence_id, owner_id):
    """Elimina definitivamente un'assenza"""
    storage = get_storage()
    if storage.get_absence(absence_id, owner_id) is None:
        return jsonify({'message': 'Assenza non trovata'}), 404

    try:
        storage.delete_absence(absence_id)
        return '', 204
    except Exception:
        db.session.rollback()
        logger.exception(f"Errore nell'eliminazione dell'assenza {absence_id}")
        return jsonify({'message': "Errore nell'eliminazione dell'assenza"}), 500

@api_bp.route('/absences/days-between')
@login_required
def days_between():
    """Giorni di calendario e lavorativi tra due date (formato AAAA-MM-GG)"""
    try:
        start_date = datetime.strptime(request.args.get('start_date', ''), '%Y-%m-%d').date()
        end_date = datetime.strptime(request.args.get('end_date', ''), '%Y-%m-%d').date()
    except ValueError:
        return _validation_error({'start_date': ['Formato data non valido (AAAA-MM-GG)'],
                                  'end_date': ['Formato data non valido (AAAA-MM-GG)']})

    return jsonify({
        'calendar_days': calendar_days_between(start_date, end_date),
        'working_days': working_days_between(start_date, end_date),
    })

# =============================================================================
# STATISTICS, EXPORT & IMPORT
# =============================================================================

@api_bp.route('/stats')
@login_required
@require_owner
def stats(owner_id):
    """Statistiche comporto dell'account"""
    try:
        return jsonify(employee_stats(get_storage().list_employees(owner_id)))
    except Exception:
        logger.exception("Errore nel recupero delle statistiche")
        return jsonify({'message': 'Errore nel recupero delle statistiche'}), 500

def build_owner_export_table(owner_id):
    """Tabella di export dei dipendenti attivi dell'account"""
    return build_export_table(
        get_storage().list_employees(owner_id),
        title=current_app.config['EXPORT_TITLE'],
        placeholder=current_app.config['EXPORT_PLACEHOLDER'],
        date_format=current_app.config['DEFAULT_DATE_FORMAT'],
    )

@api_bp.route('/employees/export')
@login_required
@require_owner
def export_employees(owner_id):
    """Tabella di export (intestazioni, righe, statistiche, titolo, data)"""
    try:
        return jsonify(build_owner_export_table(owner_id))
    except Exception:
        logger.exception("Errore nella preparazione dell'export")
        return jsonify({'message': "Errore nella preparazione dell'export"}), 500

@api_bp.route('/employees/import', methods=['POST'])
@login_required
@require_owner
def import_employees(owner_id):
    """Importa dipendenti da un foglio Excel/CSV caricato nel campo 'file'"""
    form = EmployeeImportForm()
    if not form.validate():
        return _validation_error(form.errors)

    upload = form.file.data
    try:
        rows = read_spreadsheet_rows(BytesIO(upload.read()), upload.filename)
    except Exception as e:
        logger.warning(f"File di import non leggibile ({upload.filename}): {e}")
        return _validation_error({'file': ['Impossibile leggere il file caricato']})

    storage = get_storage()
    ccnls = storage.list_ccnls()
    if not ccnls:
        return _validation_error({'file': ['Nessun CCNL configurato: inizializzare i CCNL prima dell\'import']})

    try:
        result = import_employee_rows(rows, ccnls, owner_id, storage)
    except Exception:
        db.session.rollback()
        logger.exception("Errore durante l'import dei dipendenti")
        return jsonify({'message': "Errore durante l'import dei dipendenti"}), 500

    return jsonify({
        'success': result.failed == 0,
        'imported': result.imported,
        'failed': result.failed,
        'errors': result.errors,
        'employees': [e.id for e in result.created],
    })
