# =============================================================================
# COMPORTO - DATABASE MODELS
# =============================================================================
#
# MODEL ORGANIZATION:
# 1. Global Utilities
# 2. User Management Models (User)
# 3. Comporto Models (CCNL, Employee, Absence)
#
# Total Models: 4
# =============================================================================

# Core imports
from datetime import datetime
from zoneinfo import ZoneInfo
from flask_login import UserMixin
from sqlalchemy.orm import validates
from app import db


# =============================================================================
# GLOBAL UTILITIES
# =============================================================================

def italian_now():
    """Funzione helper per timestamp italiano"""
    return datetime.now(ZoneInfo('Europe/Rome'))


# =============================================================================
# USER MANAGEMENT MODELS
# =============================================================================

class User(UserMixin, db.Model):
    """Account del consulente: proprietario dei dipendenti registrati"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    active = db.Column(db.Boolean, default=True)  # Renamed to avoid UserMixin conflict
    created_at = db.Column(db.DateTime, default=italian_now)
    updated_at = db.Column(db.DateTime, default=italian_now, onupdate=italian_now)

    employees = db.relationship('Employee', back_populates='owner', lazy='dynamic')

    @property
    def is_active(self):
        return bool(self.active)

    def get_full_name(self):
        return f"{self.first_name or ''} {self.last_name or ''}".strip() or self.username

    def __repr__(self):
        return f'<User {self.username}>'


# =============================================================================
# COMPORTO MODELS
# =============================================================================

class CCNL(db.Model):
    """Contratto Collettivo Nazionale di Lavoro con il relativo periodo di comporto"""
    __tablename__ = 'agreements'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)  # es. "Commercio", "Metalmeccanica"
    code = db.Column(db.String(50), unique=True, nullable=False)  # es. "COMMERCIO"
    comporto_days = db.Column('total_allowed_days', db.Integer, nullable=False)  # giorni di comporto previsti
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=italian_now)
    updated_at = db.Column(db.DateTime, default=italian_now, onupdate=italian_now)

    employees = db.relationship('Employee', back_populates='ccnl', lazy='dynamic')

    @validates('comporto_days')
    def validate_comporto_days(self, key, value):
        if value is None or int(value) <= 0:
            raise ValueError('I giorni di comporto devono essere maggiori di zero')
        return int(value)

    def __repr__(self):
        return f'<CCNL {self.code}>'


class Employee(db.Model):
    """Dipendente registrato da un consulente, soggetto al comporto del proprio CCNL"""
    __tablename__ = 'employees'
    __table_args__ = (
        db.Index('idx_employee_owner_active', 'owner_id', 'is_active'),
    )

    id = db.Column(db.Integer, primary_key=True)
    external_code = db.Column(db.String(50), unique=True, nullable=False)  # matricola
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), nullable=True)
    hire_date = db.Column(db.Date, nullable=False)
    ccnl_id = db.Column('agreement_id', db.Integer, db.ForeignKey('agreements.id'), nullable=False)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)  # False = eliminato (soft delete)

    created_at = db.Column(db.DateTime, default=italian_now)
    updated_at = db.Column(db.DateTime, default=italian_now, onupdate=italian_now)

    ccnl = db.relationship('CCNL', back_populates='employees')
    owner = db.relationship('User', back_populates='employees')
    absences = db.relationship('Absence', back_populates='employee',
                               order_by='Absence.start_date.desc()')

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f'<Employee {self.external_code} {self.last_name}>'


class Absence(db.Model):
    """Assenza registrata per un dipendente; days_counted concorre al comporto"""
    __tablename__ = 'absences'
    __table_args__ = (
        db.Index('idx_absence_employee', 'employee_id'),
    )

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employees.id'), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    absence_type = db.Column(db.String(50), nullable=False)  # malattia, infortunio, etc.
    description = db.Column(db.Text, nullable=True)
    days_counted = db.Column(db.Integer, nullable=False)  # giorni che contano per il comporto

    created_at = db.Column(db.DateTime, default=italian_now)
    updated_at = db.Column(db.DateTime, default=italian_now, onupdate=italian_now)

    employee = db.relationship('Employee', back_populates='absences')

    @validates('days_counted')
    def validate_days_counted(self, key, value):
        if value is None or int(value) < 0:
            raise ValueError('I giorni conteggiati non possono essere negativi')
        return int(value)

    def __repr__(self):
        return f'<Absence emp_id={self.employee_id} {self.start_date}>'
