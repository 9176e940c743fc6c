# =============================================================================
# AUTHENTICATION ROUTES BLUEPRINT
# Login, logout e utente corrente (sessione Flask-Login, risposte JSON)
# =============================================================================

import logging

from flask import Blueprint, jsonify, request
from flask_login import login_user, logout_user, current_user, login_required
from werkzeug.datastructures import MultiDict
from werkzeug.security import check_password_hash

from models import User
from forms import LoginForm

logger = logging.getLogger(__name__)

# Create blueprint
auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')

def _user_to_dict(user):
    return {
        'id': user.id,
        'username': user.username,
        'email': user.email,
        'first_name': user.first_name,
        'last_name': user.last_name,
        'full_name': user.get_full_name(),
    }

@auth_bp.route('/login', methods=['POST'])
def login():
    """Login con username e password"""
    payload = request.get_json(silent=True) or {}
    formdata = MultiDict()
    for key in ('username', 'password'):
        if payload.get(key) is not None:
            formdata.add(key, str(payload[key]))
    if payload.get('remember_me'):
        formdata.add('remember_me', 'y')

    form = LoginForm(formdata=formdata)
    if not form.validate():
        return jsonify({'message': 'Dati non validi', 'errors': form.errors}), 400

    user = User.query.filter_by(username=form.username.data).first()
    if user and user.active and user.password_hash and check_password_hash(user.password_hash, form.password.data):
        login_user(user, remember=form.remember_me.data)
        logger.info(f"Login effettuato: {user.username}")
        return jsonify(_user_to_dict(user))

    logger.warning(f"Tentativo di login fallito per username '{form.username.data}'")
    return jsonify({'message': 'Username o password non validi'}), 401

@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """User logout"""
    logger.info(f"Logout: {current_user.username}")
    logout_user()
    return jsonify({'message': 'Logout effettuato con successo'})

@auth_bp.route('/user')
@login_required
def user():
    """Utente della sessione corrente"""
    return jsonify(_user_to_dict(current_user))
