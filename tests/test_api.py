from io import BytesIO

from app import db
from models import Absence
from conftest import make_employee, make_absence


# =============================================================================
# AUTH & BOOTSTRAP
# =============================================================================

def test_requires_login(app):
    response = app.test_client().get('/api/employees')
    assert response.status_code == 401
    assert response.get_json() == {'message': 'Non autorizzato'}


def test_wrong_password(app, client):
    response = app.test_client().post('/api/auth/login', json={'username': 'mario', 'password': 'sbagliata'})
    assert response.status_code == 401


def test_current_user_and_logout(client):
    assert client.get('/api/auth/user').get_json()['username'] == 'mario'
    assert client.post('/api/auth/logout').status_code == 200
    assert client.get('/api/auth/user').status_code == 401


def test_init_seeds_defaults_once(client):
    assert client.post('/api/init').get_json()['created'] == 0
    codes = sorted(c['code'] for c in client.get('/api/ccnls').get_json())
    assert codes == ['COMMERCIO', 'COOP_SOCIALI', 'METALMECCANICA']


# =============================================================================
# CCNL
# =============================================================================

def test_create_and_update_ccnl(client):
    response = client.post('/api/ccnls', json={'name': 'Turismo', 'code': 'TURISMO', 'comporto_days': 120})
    assert response.status_code == 201
    ccnl = response.get_json()
    assert ccnl['is_active'] is True

    response = client.put(f"/api/ccnls/{ccnl['id']}", json={'comporto_days': 150})
    assert response.status_code == 200
    assert response.get_json()['comporto_days'] == 150
    assert response.get_json()['name'] == 'Turismo'


def test_ccnl_validation_and_duplicates(client):
    response = client.post('/api/ccnls', json={'name': 'Zero', 'code': 'ZERO', 'comporto_days': 0})
    assert response.status_code == 400
    assert 'comporto_days' in response.get_json()['errors']

    response = client.post('/api/ccnls', json={'name': 'Doppio', 'code': 'COMMERCIO', 'comporto_days': 90})
    assert response.status_code == 400
    assert 'code' in response.get_json()['errors']

    assert client.put('/api/ccnls/9999', json={'comporto_days': 10}).status_code == 404


# =============================================================================
# EMPLOYEES
# =============================================================================

def test_create_employee_returns_remaining_days(client, ccnl_id):
    employee = make_employee(client, ccnl_id)
    assert employee['full_name'] == 'Anna Bianchi'
    assert employee['remaining_days'] == 180
    assert employee['status']['status'] == 'compliant'
    assert employee['absences'] == []


def test_create_employee_validation_errors(client, ccnl_id):
    response = client.post('/api/employees', json={'external_code': 'X1', 'hire_date': 'ieri', 'ccnl_id': ccnl_id})
    assert response.status_code == 400
    body = response.get_json()
    assert body['message'] == 'Dati non validi'
    assert {'first_name', 'last_name', 'hire_date'} <= set(body['errors'])


def test_create_employee_unknown_ccnl(client):
    response = client.post('/api/employees', json={
        'external_code': 'X1', 'first_name': 'A', 'last_name': 'B',
        'hire_date': '2020-01-01', 'ccnl_id': 9999,
    })
    assert response.status_code == 404


def test_duplicate_matricola(client, ccnl_id):
    make_employee(client, ccnl_id)
    response = client.post('/api/employees', json={
        'external_code': 'M001', 'first_name': 'B', 'last_name': 'C',
        'hire_date': '2020-01-01', 'ccnl_id': ccnl_id,
    })
    assert response.status_code == 400
    assert 'external_code' in response.get_json()['errors']


def test_list_is_sorted_by_name(client, ccnl_id):
    make_employee(client, ccnl_id, external_code='M1', first_name='Zeno', last_name='Rossi')
    make_employee(client, ccnl_id, external_code='M2', first_name='Alba', last_name='Rossi')
    make_employee(client, ccnl_id, external_code='M3', first_name='Ugo', last_name='Bassi')

    codes = [e['external_code'] for e in client.get('/api/employees').get_json()]
    assert codes == ['M3', 'M2', 'M1']


def test_partial_update(client, ccnl_id):
    employee = make_employee(client, ccnl_id)
    response = client.put(f"/api/employees/{employee['id']}", json={'email': 'nuova@example.com'})
    assert response.status_code == 200
    body = response.get_json()
    assert body['email'] == 'nuova@example.com'
    assert body['first_name'] == 'Anna'
    assert body['hire_date'] == '2020-03-01'


def test_soft_delete(app, client, ccnl_id):
    employee = make_employee(client, ccnl_id)
    make_absence(client, employee['id'], 5)

    response = client.delete(f"/api/employees/{employee['id']}")
    assert response.status_code == 204
    assert client.get('/api/employees').get_json() == []
    assert client.get(f"/api/employees/{employee['id']}").status_code == 404
    assert client.delete(f"/api/employees/{employee['id']}").status_code == 404
    assert client.get('/api/stats').get_json()['total'] == 0
    # Le assenze restano registrate
    with app.app_context():
        assert db.session.query(Absence).count() == 1


def test_owner_isolation(client, other_client, ccnl_id):
    employee = make_employee(client, ccnl_id)
    absence = make_absence(client, employee['id'], 3)

    assert other_client.get('/api/employees').get_json() == []
    assert other_client.get(f"/api/employees/{employee['id']}").status_code == 404
    assert other_client.put(f"/api/employees/{employee['id']}", json={'first_name': 'X'}).status_code == 404
    assert other_client.delete(f"/api/employees/{employee['id']}").status_code == 404
    assert other_client.get(f"/api/employees/{employee['id']}/absences").status_code == 404
    assert other_client.post(f"/api/employees/{employee['id']}/absences", json={
        'start_date': '2024-01-01', 'end_date': '2024-01-01', 'absence_type': 'malattia', 'days_counted': 1,
    }).status_code == 404
    assert other_client.put(f"/api/absences/{absence['id']}", json={'days_counted': 0}).status_code == 404
    assert other_client.delete(f"/api/absences/{absence['id']}").status_code == 404

    assert client.get(f"/api/employees/{employee['id']}").get_json()['used_days'] == 3


# =============================================================================
# ABSENCES
# =============================================================================

def test_absences_reduce_remaining_days(client, ccnl_id):
    employee = make_employee(client, ccnl_id)
    make_absence(client, employee['id'], 100, start='2024-01-01', end='2024-04-09')
    make_absence(client, employee['id'], 0, start='2024-05-01', end='2024-05-01')
    make_absence(client, employee['id'], 75, start='2024-06-01', end='2024-08-14')

    detail = client.get(f"/api/employees/{employee['id']}").get_json()
    assert detail['used_days'] == 175
    assert detail['remaining_days'] == 5
    assert detail['status']['status'] == 'critical'
    assert [a['start_date'] for a in detail['absences']] == ['2024-06-01', '2024-05-01', '2024-01-01']


def test_absence_validation(client, ccnl_id):
    employee = make_employee(client, ccnl_id)
    url = f"/api/employees/{employee['id']}/absences"

    response = client.post(url, json={
        'start_date': '2024-01-10', 'end_date': '2024-01-01', 'absence_type': 'malattia', 'days_counted': 3,
    })
    assert response.status_code == 400
    assert 'end_date' in response.get_json()['errors']

    response = client.post(url, json={
        'start_date': '2024-01-01', 'end_date': '2024-01-02', 'absence_type': 'malattia', 'days_counted': -1,
    })
    assert response.status_code == 400
    assert 'days_counted' in response.get_json()['errors']

    assert client.post('/api/employees/9999/absences', json={}).status_code == 404


def test_update_and_delete_absence(client, ccnl_id):
    employee = make_employee(client, ccnl_id)
    absence = make_absence(client, employee['id'], 5)

    response = client.put(f"/api/absences/{absence['id']}", json={'days_counted': 2, 'description': 'Certificato'})
    assert response.status_code == 200
    assert response.get_json()['days_counted'] == 2
    assert response.get_json()['start_date'] == '2024-01-08'
    assert response.get_json()['absence_type_label'] == 'Malattia'

    assert client.get(f"/api/employees/{employee['id']}").get_json()['remaining_days'] == 178

    assert client.delete(f"/api/absences/{absence['id']}").status_code == 204
    assert client.get(f"/api/employees/{employee['id']}/absences").get_json() == []
    assert client.delete(f"/api/absences/{absence['id']}").status_code == 404


def test_days_between(client):
    response = client.get('/api/absences/days-between?start_date=2024-01-01&end_date=2024-01-07')
    assert response.get_json() == {'calendar_days': 7, 'working_days': 5}

    response = client.get('/api/absences/days-between?start_date=2024-01-01')
    assert response.status_code == 400


# =============================================================================
# STATS, EXPORT & IMPORT
# =============================================================================

def _populate(client, ccnl_id):
    for code, last_name, days in [('A1', 'Alfa', 190), ('B1', 'Beta', 175), ('C1', 'Gamma', 160), ('D1', 'Delta', 0)]:
        employee = make_employee(client, ccnl_id, external_code=code, last_name=last_name, email=None)
        if days:
            make_absence(client, employee['id'], days)


def test_stats(client, ccnl_id):
    _populate(client, ccnl_id)
    assert client.get('/api/stats').get_json() == {
        'total': 4, 'expiring_soon': 1, 'expired': 1, 'compliant': 2,
    }


def test_export_table(client, ccnl_id):
    _populate(client, ccnl_id)
    table = client.get('/api/employees/export').get_json()

    assert table['title'] == 'Report Comporto Dipendenti'
    assert [row[0] for row in table['rows']] == ['A1', 'B1', 'D1', 'C1']
    labels = {row[0]: row[7] for row in table['rows']}
    assert labels == {'A1': 'Scaduto', 'B1': 'Attenzione', 'C1': 'Conforme', 'D1': 'Conforme'}
    assert table['rows'][0][2] == '-'
    assert table['rows'][0][8] == '01/03/2020'


def test_import_csv(client, ccnl_id):
    content = (
        'Matricola;Nome;Cognome;Email;Data Assunzione;CCNL\n'
        'I1;Anna;Rossi;anna@example.com;15/01/2020;Metalmeccanica\n'
        'I2;Bruno;Verdi;;2021-02-01;\n'
        'I3;;Neri;;2021-02-01;\n'
    ).encode('utf-8')
    response = client.post('/api/employees/import',
                           data={'file': (BytesIO(content), 'dipendenti.csv')},
                           content_type='multipart/form-data')
    assert response.status_code == 200
    body = response.get_json()
    assert body['imported'] == 2
    assert body['failed'] == 1
    assert body['errors'] == ['Riga 4: nome mancante']

    employees = {e['external_code']: e for e in client.get('/api/employees').get_json()}
    assert employees['I1']['ccnl']['code'] == 'METALMECCANICA'
    # CCNL di default: il primo in ordine di nome
    assert employees['I2']['ccnl']['code'] == 'COMMERCIO'


def test_import_rejects_missing_or_wrong_file(client):
    response = client.post('/api/employees/import', data={}, content_type='multipart/form-data')
    assert response.status_code == 400
    assert 'file' in response.get_json()['errors']

    response = client.post('/api/employees/import',
                           data={'file': (BytesIO(b'ciao'), 'dipendenti.txt')},
                           content_type='multipart/form-data')
    assert response.status_code == 400


# =============================================================================
# MEMORY BACKEND
# =============================================================================

def test_memory_backend_serves_the_same_api(app, client):
    app.config['STORAGE_BACKEND'] = 'memory'
    assert client.post('/api/init').get_json()['created'] == 3

    ccnl_id = next(c['id'] for c in client.get('/api/ccnls').get_json() if c['code'] == 'COMMERCIO')
    employee = make_employee(client, ccnl_id)
    make_absence(client, employee['id'], 12)

    detail = client.get(f"/api/employees/{employee['id']}").get_json()
    assert detail['remaining_days'] == 168

    assert client.delete(f"/api/employees/{employee['id']}").status_code == 204
    assert client.get('/api/employees').get_json() == []


def test_import_extensions_follow_configuration(app, client, monkeypatch):
    monkeypatch.setitem(app.config, 'IMPORT_ALLOWED_EXTENSIONS', ['xlsx'])
    content = 'Matricola;Nome;Cognome;Data Assunzione\nI1;Anna;Rossi;15/01/2020\n'.encode('utf-8')
    response = client.post('/api/employees/import',
                           data={'file': (BytesIO(content), 'dipendenti.csv')},
                           content_type='multipart/form-data')
    assert response.status_code == 400
    assert response.get_json()['errors']['file'] == ['Formato non permesso: usare .xlsx']


def test_employee_length_limits_match_import(client, ccnl_id):
    response = client.post('/api/employees', json={
        'external_code': 'M' * 51, 'first_name': 'A', 'last_name': 'B',
        'hire_date': '2020-01-01', 'ccnl_id': ccnl_id,
    })
    assert response.status_code == 400
    assert 'external_code' in response.get_json()['errors']
