"""Patient records, doctors and consultation notes."""
from ruralcare_app_pkg import db
from ruralcare_app_pkg.models import Patient, PatientVitals, Appointment, ConsultationNote

NEW_PATIENT = {
    'name': 'Lakshmi', 'age': 52, 'gender': 'Female', 'village': 'Nandpur',
    'symptoms': 'Dizziness', 'vitals': 'BP 150/95', 'risk_level': 'high',
}


def test_create_patient_attaches_risk_baseline(app, client):
    resp = client.post('/api/patients', json=NEW_PATIENT)
    assert resp.status_code == 201
    patient_id = resp.get_json()['id']

    with app.app_context():
        baseline = PatientVitals.query.filter_by(patient_id=patient_id).one()
        assert (baseline.heart_rate, baseline.spo2, baseline.glucose) == (128, 91, 195)


def test_create_patient_validation(client):
    missing = dict(NEW_PATIENT, symptoms='')
    assert client.post('/api/patients', json=missing).status_code == 400
    bad_risk = dict(NEW_PATIENT, risk_level='extreme')
    assert client.post('/api/patients', json=bad_risk).status_code == 400


def test_list_and_get(client):
    first = client.post('/api/patients', json=NEW_PATIENT).get_json()['id']
    second = client.post('/api/patients', json=dict(NEW_PATIENT, name='Gopal')).get_json()['id']

    listed = client.get('/api/patients').get_json()
    assert [p['id'] for p in listed] == [second, first]
    assert client.get(f'/api/patients/{first}').get_json()['name'] == 'Lakshmi'
    resp = client.get('/api/patients/9999')
    assert resp.status_code == 404
    assert resp.get_json()['error'] == "Patient not found"


def test_update_is_full_replace_and_adds_missing_baseline(app, client, factory):
    patient_id = factory.patient(baseline=False)

    resp = client.put(f'/api/patients/{patient_id}', json={'name': 'Renamed', 'risk_level': 'medium'})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['name'] == 'Renamed'
    assert data['village'] is None
    with app.app_context():
        assert db.session.get(Patient, patient_id).vitals_baseline.heart_rate == 108

    assert client.put(f'/api/patients/{patient_id}', json={'risk_level': 'low'}).status_code == 400
    assert client.put(f'/api/patients/{patient_id}', json={'name': 'X', 'risk_level': 'bad'}).status_code == 400
    assert client.put('/api/patients/9999', json={'name': 'X', 'risk_level': 'low'}).status_code == 404


def test_delete_patient_frees_slots_and_cascades(app, client, factory):
    _, admin = factory.user('admin')
    patient_id = factory.patient()
    doctor_id = factory.doctor()
    slot_id = factory.slot(doctor_id)
    client.post('/api/appointments', json={'doctor_id': doctor_id, 'availability_id': slot_id,
                                           'patient_id': patient_id}, headers=admin)
    client.post('/api/consultations', json={'patient_id': patient_id, 'raw_note': 'Follow up'})
    assert factory.is_booked(slot_id) is True

    resp = client.delete(f'/api/patients/{patient_id}')
    assert resp.status_code == 200

    assert factory.is_booked(slot_id) is False
    with app.app_context():
        assert Appointment.query.count() == 0
        assert ConsultationNote.query.count() == 0
        assert PatientVitals.query.count() == 0
    assert client.delete(f'/api/patients/{patient_id}').status_code == 404


def test_doctors(client):
    assert client.post('/api/doctors', json={'name': 'Dr. Zed'}).status_code == 400
    client.post('/api/doctors', json={'name': 'Dr. Zed', 'specialization': 'ENT'})
    client.post('/api/doctors', json={'name': 'Dr. Amar', 'specialization': 'ENT'})
    names = [d['name'] for d in client.get('/api/doctors').get_json()]
    assert names == ['Dr. Amar', 'Dr. Zed']


def test_consultation_notes(client, factory):
    patient_id = factory.patient(name='Noted')
    other_id = factory.patient(name='Other')

    assert client.post('/api/consultations', json={'patient_id': patient_id}).status_code == 400
    resp = client.post('/api/consultations', json={'patient_id': 9999, 'raw_note': 'x'})
    assert resp.status_code == 404

    first = client.post('/api/consultations', json={'patient_id': patient_id, 'raw_note': 'first',
                                                    'structured_summary': 'Viral fever',
                                                    'follow_up_days': 5}).get_json()
    assert first['patient_name'] == 'Noted'
    assert first['follow_up_days'] == 5
    second = client.post('/api/consultations', json={'patient_id': other_id, 'raw_note': 'second'}).get_json()

    assert [n['id'] for n in client.get('/api/consultations').get_json()] == [second['id'], first['id']]
    own = client.get(f'/api/consultations/patient/{patient_id}').get_json()
    assert [n['id'] for n in own] == [first['id']]

    assert client.delete(f"/api/consultations/{first['id']}").status_code == 200
    resp = client.delete(f"/api/consultations/{first['id']}")
    assert resp.status_code == 404
    assert resp.get_json()['error'] == "Note not found"
