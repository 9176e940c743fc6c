"""
Central constants file for the Comporto tracker
Defines all system-wide constants to avoid hardcoded values
"""

# =============================================================================
# COMPORTO STATUS (classificazione a quattro fasce)
# =============================================================================
class ComportoStatus:
    """Stato del comporto calcolato sui giorni rimanenti"""
    EXPIRED = 'expired'
    CRITICAL = 'critical'
    WARNING = 'warning'
    COMPLIANT = 'compliant'

    # Soglie inclusive (giorni rimanenti)
    CRITICAL_MAX_DAYS = 10
    WARNING_MAX_DAYS = 30


# Etichette e classi Bootstrap per la vista a quattro fasce
COMPORTO_STATUS_INFO = {
    ComportoStatus.EXPIRED: {'label': 'Scaduto', 'variant': 'destructive', 'text_color': 'text-danger'},
    ComportoStatus.CRITICAL: {'label': 'Critico', 'variant': 'destructive', 'text_color': 'text-danger'},
    ComportoStatus.WARNING: {'label': 'Attenzione', 'variant': 'secondary', 'text_color': 'text-warning'},
    ComportoStatus.COMPLIANT: {'label': 'OK', 'variant': 'outline', 'text_color': 'text-success'},
}


# =============================================================================
# EXPORT STATUS LABELS (classificazione a tre etichette dell'export)
# =============================================================================
class ExportStatusLabel:
    """Etichette di stato usate nei documenti esportati"""
    EXPIRED = 'Scaduto'
    ATTENTION = 'Attenzione'
    COMPLIANT = 'Conforme'

    # Fino a questo valore incluso l'export segnala "Attenzione"
    ATTENTION_MAX_DAYS = 10


# =============================================================================
# ABSENCE TYPES
# =============================================================================
class AbsenceTypes:
    """Tipologie di assenza che concorrono al comporto"""
    MALATTIA = 'malattia'
    INFORTUNIO = 'infortunio'
    RICOVERO = 'ricovero'
    ALTRO = 'altro'

    @classmethod
    def choices(cls):
        """Return (value, label) tuples for forms"""
        return [
            (cls.MALATTIA, 'Malattia'),
            (cls.INFORTUNIO, 'Infortunio'),
            (cls.RICOVERO, 'Ricovero ospedaliero'),
            (cls.ALTRO, 'Altro'),
        ]


# =============================================================================
# DEFAULT CCNL
# =============================================================================
DEFAULT_CCNLS = [
    {'name': 'Cooperative Sociali', 'code': 'COOP_SOCIALI', 'comporto_days': 180, 'is_active': True},
    {'name': 'Commercio', 'code': 'COMMERCIO', 'comporto_days': 180, 'is_active': True},
    {'name': 'Metalmeccanica', 'code': 'METALMECCANICA', 'comporto_days': 180, 'is_active': True},
]


# =============================================================================
# SPREADSHEET IMPORT
# =============================================================================
# Ordine dei campi e alias delle colonne: nome italiano, poi fallback inglese
IMPORT_COLUMN_ALIASES = (
    ('external_code', ('Matricola', 'EmployeeId')),
    ('first_name', ('Nome', 'FirstName')),
    ('last_name', ('Cognome', 'LastName')),
    ('email', ('Email', 'E-mail')),
    ('hire_date', ('Data Assunzione', 'HireDate')),
    ('ccnl', ('CCNL', 'Ccnl')),
)

# Lunghezze massime dei campi dipendente (colonne del database)
EMPLOYEE_FIELD_MAX_LENGTHS = {
    'external_code': 50,
    'first_name': 100,
    'last_name': 100,
    'email': 120,
}

# Righe di intestazione che precedono i dati nel foglio
IMPORT_HEADER_ROWS = 1

IMPORT_DATE_FORMATS = ('%Y-%m-%d', '%d/%m/%Y', '%d-%m-%Y', '%Y-%m-%d %H:%M:%S')


# =============================================================================
# EXPORT
# =============================================================================
EXPORT_HEADERS = [
    'Matricola', 'Nome Completo', 'Email', 'CCNL', 'Giorni Comporto',
    'Giorni Utilizzati', 'Giorni Rimanenti', 'Stato', 'Data Assunzione'
]
