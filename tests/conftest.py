import os

# Configurazione di test prima dell'import dell'applicazione
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['FLASK_ENV'] = 'testing'
os.environ.setdefault('SESSION_SECRET', 'test-secret')

import pytest
from werkzeug.security import generate_password_hash

from main import app as flask_app
from app import db
from models import User
from services.storage import MEMORY_STORAGE_EXTENSION

PASSWORD = 'password123'


@pytest.fixture
def app():
    flask_app.config['STORAGE_BACKEND'] = 'database'
    flask_app.extensions.pop(MEMORY_STORAGE_EXTENSION, None)
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
    # Nessun app context attivo durante il test: ogni richiesta apre il proprio
    yield flask_app
    flask_app.extensions.pop(MEMORY_STORAGE_EXTENSION, None)


def create_user(app, username, email=None):
    with app.app_context():
        return _add_user(username, email)


def _add_user(username, email):
    user = User(
        username=username,
        email=email or f'{username}@example.com',
        password_hash=generate_password_hash(PASSWORD),
        first_name=username.capitalize(),
        last_name='Consulente',
        active=True,
    )
    db.session.add(user)
    db.session.commit()
    return user.id


def login(client, username):
    response = client.post('/api/auth/login', json={'username': username, 'password': PASSWORD})
    assert response.status_code == 200
    return response


@pytest.fixture
def client(app):
    create_user(app, 'mario')
    test_client = app.test_client()
    login(test_client, 'mario')
    test_client.post('/api/init')
    return test_client


@pytest.fixture
def other_client(app, client):
    create_user(app, 'luigi')
    test_client = app.test_client()
    login(test_client, 'luigi')
    return test_client


@pytest.fixture
def ccnl_id(client):
    ccnls = client.get('/api/ccnls').get_json()
    return next(c['id'] for c in ccnls if c['code'] == 'COMMERCIO')


def make_employee(client, ccnl_id, **overrides):
    payload = {
        'external_code': 'M001',
        'first_name': 'Anna',
        'last_name': 'Bianchi',
        'email': 'anna.bianchi@example.com',
        'hire_date': '2020-03-01',
        'ccnl_id': ccnl_id,
    }
    payload.update(overrides)
    response = client.post('/api/employees', json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def make_absence(client, employee_id, days, start='2024-01-08', end='2024-01-12', **overrides):
    payload = {
        'start_date': start,
        'end_date': end,
        'absence_type': 'malattia',
        'days_counted': days,
    }
    payload.update(overrides)
    response = client.post(f'/api/employees/{employee_id}/absences', json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()
