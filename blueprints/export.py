# =============================================================================
# EXPORT BLUEPRINT - Esportazione report comporto
# =============================================================================
#
# ROUTES INCLUSE:
# 1. /export/employees/excel (GET) - Report comporto Excel
# 2. /export/employees/pdf (GET) - Report comporto PDF
# 3. /export/employees/csv (GET) - Report comporto CSV
#
# Total routes: 3 export routes
# =============================================================================

import logging

from flask import Blueprint, jsonify, make_response
from flask_login import login_required

from models import italian_now
from blueprints.api import build_owner_export_table
from services.document_export import render_excel, render_pdf, render_csv
from utils_tenant import require_owner

logger = logging.getLogger(__name__)

# Create blueprint
export_bp = Blueprint('export', __name__, url_prefix='/export')

# Renderer, content type ed estensione per formato
EXPORT_FORMATS = {
    'excel': (render_excel, 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet', 'xlsx'),
    'pdf': (render_pdf, 'application/pdf', 'pdf'),
    'csv': (render_csv, 'text/csv; charset=utf-8', 'csv'),
}

def _document_response(owner_id, export_format):
    renderer, content_type, extension = EXPORT_FORMATS[export_format]
    try:
        content = renderer(build_owner_export_table(owner_id))
    except Exception:
        logger.exception(f"Errore nella generazione dell'export {export_format}")
        return jsonify({'message': "Errore nella generazione dell'export"}), 500

    filename = f"comporto_dipendenti_{italian_now().strftime('%Y%m%d')}.{extension}"
    response = make_response(content)
    response.headers['Content-Type'] = content_type
    response.headers['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response

# =============================================================================
# EMPLOYEES EXPORT ROUTES
# =============================================================================

@export_bp.route('/employees/excel')
@login_required
@require_owner
def employees_excel(owner_id):
    """Export report comporto in formato Excel"""
    return _document_response(owner_id, 'excel')

@export_bp.route('/employees/pdf')
@login_required
@require_owner
def employees_pdf(owner_id):
    """Export report comporto in formato PDF"""
    return _document_response(owner_id, 'pdf')

@export_bp.route('/employees/csv')
@login_required
@require_owner
def employees_csv(owner_id):
    """Export report comporto in formato CSV"""
    return _document_response(owner_id, 'csv')
