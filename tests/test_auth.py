"""Registration, login and the token gates."""
import datetime

import jwt

from ruralcare_app_pkg.models import User, Patient


def register(client, **overrides):
    body = {'name': 'Asha', 'email': 'asha@example.com', 'password': 'pw12345'}
    body.update(overrides)
    return client.post('/api/auth/register', json=body)


def test_register_creates_patient_account_and_record(app, client):
    resp = register(client)
    assert resp.status_code == 201
    data = resp.get_json()
    assert data['token']
    assert data['user']['role'] == 'patient'

    with app.app_context():
        user = User.query.filter_by(email='asha@example.com').one()
        assert user.password_hash != 'pw12345'
        patient = Patient.query.filter_by(user_id=user.id).one()
        assert patient.name == 'Asha'
        assert patient.risk_level == 'low'
        assert patient.age is None
        # no baseline until staff record one
        assert patient.vitals_baseline is None


def test_register_rejects_missing_fields(client):
    resp = register(client, password='')
    assert resp.status_code == 400
    assert resp.get_json()['error'] == "name, email, and password are required"


def test_register_refuses_non_patient_role(client):
    resp = register(client, role='admin')
    assert resp.status_code == 403
    assert resp.get_json()['error'] == "Only patients can self-register"


def test_register_duplicate_email(client):
    assert register(client).status_code == 201
    resp = register(client, name='Other')
    assert resp.status_code == 409
    assert resp.get_json()['error'] == "Email already registered"


def test_register_requires_json(client):
    resp = client.post('/api/auth/register', data='name=x', content_type='application/x-www-form-urlencoded')
    assert resp.status_code == 415
    assert resp.get_json()['error'] == "Request body must be JSON."


def test_login_success_and_identical_failures(client):
    register(client)
    ok = client.post('/api/auth/login', json={'email': 'asha@example.com', 'password': 'pw12345'})
    assert ok.status_code == 200
    assert ok.get_json()['user']['email'] == 'asha@example.com'

    wrong_password = client.post('/api/auth/login', json={'email': 'asha@example.com', 'password': 'nope'})
    unknown_email = client.post('/api/auth/login', json={'email': 'ghost@example.com', 'password': 'nope'})
    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.get_json() == unknown_email.get_json() == {"error": "Invalid email or password"}


def test_login_requires_both_fields(client):
    resp = client.post('/api/auth/login', json={'email': 'asha@example.com'})
    assert resp.status_code == 400


def test_token_claims(app, client):
    token = register(client).get_json()['token']
    payload = jwt.decode(token, app.config['JWT_SECRET_KEY'], algorithms=['HS256'])
    assert payload['role'] == 'patient'
    assert payload['sub'] == str(payload['id'])
    assert payload['exp'] - payload['iat'] == 7 * 24 * 3600


def test_missing_and_invalid_tokens(client):
    resp = client.get('/api/appointments')
    assert resp.status_code == 401
    assert resp.get_json()['error'] == "No token provided"

    resp = client.get('/api/appointments', headers={'Authorization': 'Bearer not-a-jwt'})
    assert resp.status_code == 401
    assert resp.get_json()['error'] == "Invalid or expired token"


def test_expired_token_is_rejected(app, client, factory):
    user_id, _ = factory.user('admin')
    now = datetime.datetime.now(datetime.timezone.utc)
    expired = jwt.encode({
        'sub': str(user_id), 'id': user_id, 'name': 'x', 'email': 'x@example.com', 'role': 'admin',
        'iat': now - datetime.timedelta(days=8), 'exp': now - datetime.timedelta(days=1),
    }, app.config['JWT_SECRET_KEY'], algorithm='HS256')
    resp = client.get('/api/admin/users', headers={'Authorization': f'Bearer {expired}'})
    assert resp.status_code == 401
    assert resp.get_json()['error'] == "Invalid or expired token"


def test_token_signed_with_other_key_is_rejected(client, factory):
    user_id, _ = factory.user('admin')
    forged = jwt.encode({'sub': str(user_id), 'id': user_id, 'name': 'x', 'email': 'x@example.com',
                         'role': 'admin'}, 'some-other-key', algorithm='HS256')
    resp = client.get('/api/admin/users', headers={'Authorization': f'Bearer {forged}'})
    assert resp.status_code == 401


def test_role_gate_message(client, factory):
    _, headers = factory.user('patient')
    resp = client.get('/api/prescriptions', headers=headers)
    assert resp.status_code == 403
    assert resp.get_json()['error'] == "Access denied. Required role: pharmacy or admin"


def test_health(client):
    resp = client.get('/health')
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "message": "Rural Health API running"}
