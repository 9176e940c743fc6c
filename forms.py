# =============================================================================
# FORMS.PY - COMPORTO TRACKER
# WTForms collection used to validate JSON and multipart payloads.
#
# SECTIONS:
# 1. Authentication (1 form)
# 2. CCNL Management (1 form)
# 3. Employee Management (2 forms)
# 4. Absence Management (1 form)
# =============================================================================

import os

from flask import current_app
from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileRequired
from wtforms import StringField, PasswordField, DateField, TextAreaField, BooleanField, IntegerField, ValidationError
from wtforms.validators import DataRequired, Email, Length, NumberRange, Optional, InputRequired

from constants import EMPLOYEE_FIELD_MAX_LENGTHS


# =============================================================================
# BASE FORM
# =============================================================================

class ApiForm(FlaskForm):
    """Form per payload JSON: il token CSRF non viaggia nel corpo della richiesta"""
    class Meta:
        csrf = False


# =============================================================================
# AUTHENTICATION FORMS
# =============================================================================

class LoginForm(ApiForm):
    username = StringField('Username', validators=[DataRequired(), Length(min=3, max=80)])
    password = PasswordField('Password', validators=[DataRequired()])
    remember_me = BooleanField('Ricordami')


# =============================================================================
# CCNL FORMS
# =============================================================================

class CCNLForm(ApiForm):
    """Form per creare o modificare un CCNL"""
    name = StringField('Nome CCNL', validators=[DataRequired(), Length(max=200)])
    code = StringField('Codice', validators=[DataRequired(), Length(max=50)])
    comporto_days = IntegerField('Giorni di Comporto', validators=[
        InputRequired(), NumberRange(min=1, message='I giorni di comporto devono essere maggiori di zero')
    ])
    is_active = BooleanField('Attivo', default=True)


# =============================================================================
# EMPLOYEE FORMS
# =============================================================================

class EmployeeForm(ApiForm):
    """Form per creare o modificare un dipendente"""
    external_code = StringField('Matricola', validators=[DataRequired(), Length(max=EMPLOYEE_FIELD_MAX_LENGTHS['external_code'])])
    first_name = StringField('Nome', validators=[DataRequired(), Length(max=EMPLOYEE_FIELD_MAX_LENGTHS['first_name'])])
    last_name = StringField('Cognome', validators=[DataRequired(), Length(max=EMPLOYEE_FIELD_MAX_LENGTHS['last_name'])])
    email = StringField('Email', validators=[Optional(), Email(), Length(max=EMPLOYEE_FIELD_MAX_LENGTHS['email'])])
    hire_date = DateField('Data Assunzione', validators=[DataRequired()])
    ccnl_id = IntegerField('CCNL', validators=[InputRequired()])
    is_active = BooleanField('Attivo', default=True)


class EmployeeImportForm(ApiForm):
    """Form per caricare il foglio dei dipendenti da importare"""
    file = FileField('File Excel/CSV', validators=[FileRequired('Nessun file caricato')])

    def validate_file(self, file):
        allowed = current_app.config['IMPORT_ALLOWED_EXTENSIONS']
        ext = os.path.splitext(file.data.filename or '')[1].lower().lstrip('.')
        if ext not in allowed:
            raise ValidationError(f"Formato non permesso: usare {', '.join('.' + e for e in allowed)}")


# =============================================================================
# ABSENCE FORMS
# =============================================================================

class AbsenceForm(ApiForm):
    """Form per registrare un'assenza che concorre al comporto"""
    start_date = DateField('Data Inizio', validators=[DataRequired()])
    end_date = DateField('Data Fine', validators=[DataRequired()])
    absence_type = StringField('Tipo Assenza', validators=[DataRequired(), Length(max=50)])
    description = TextAreaField('Descrizione', validators=[Optional(), Length(max=500)])
    days_counted = IntegerField('Giorni Conteggiati', validators=[
        InputRequired(), NumberRange(min=0, message='I giorni conteggiati non possono essere negativi')
    ])

    def validate_end_date(self, end_date):
        if end_date.data and self.start_date.data and end_date.data < self.start_date.data:
            raise ValidationError('La data di fine deve essere successiva alla data di inizio.')
