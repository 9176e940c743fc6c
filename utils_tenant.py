"""
Account Scoping Utility Functions
Helper functions for isolating employees and absences per owning account
"""

from flask_login import current_user
from flask import abort, jsonify
from functools import wraps

def get_owner_id():
    """
    Ottiene l'id dell'account corrente, usato come owner_id dei dipendenti.
    Restituisce None fuori da una richiesta autenticata.
    """
    if not current_user or not current_user.is_authenticated:
        return None
    return current_user.id

def set_owner_on_create(data):
    """
    Imposta owner_id sui dati di un nuovo dipendente prima della creazione.
    Un owner_id presente nel payload viene sempre sovrascritto.
    Args:
        data: dizionario dei campi del dipendente
    """
    owner_id = get_owner_id()
    if owner_id is None:
        abort(401)
    data['owner_id'] = owner_id
    return data

def require_owner(f):
    """
    Decoratore per le API che operano sui dati dell'account.
    Passa owner_id alla view come keyword argument.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        owner_id = get_owner_id()
        if owner_id is None:
            return jsonify({'message': 'Non autorizzato'}), 401
        return f(*args, owner_id=owner_id, **kwargs)
    return decorated_function
