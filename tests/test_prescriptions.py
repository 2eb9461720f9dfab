"""Prescribing, dispensing and the medicine inventory."""
from ruralcare_app_pkg import db
from ruralcare_app_pkg.models import Medicine, Prescription


def prescribe(client, headers, **body):
    return client.post('/api/prescriptions', json=body, headers=headers)


def stock_of(app, medicine_id):
    with app.app_context():
        return db.session.get(Medicine, medicine_id).stock_quantity


def test_doctor_prescribes_with_linked_doctor_row(app, client, factory):
    user_id, headers = factory.user('doctor', with_doctor=True)
    patient_id = factory.patient()
    medicine_id = factory.medicine()

    resp = prescribe(client, headers, patient_id=patient_id, medicine_id=medicine_id)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body['status'] == 'pending'

    with app.app_context():
        rx = db.session.get(Prescription, body['id'])
        assert rx.doctor_id == factory.doctor_id_for_user(user_id)


def test_prescribe_validation(client, factory):
    _, unlinked = factory.user('doctor')
    _, pharmacy = factory.user('pharmacy')
    patient_id = factory.patient()
    medicine_id = factory.medicine()

    resp = prescribe(client, pharmacy, patient_id=patient_id, medicine_id=medicine_id)
    assert resp.status_code == 403

    resp = prescribe(client, unlinked, patient_id=patient_id)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == "patient_id and medicine_id required"

    resp = prescribe(client, unlinked, patient_id=patient_id, medicine_id=medicine_id)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == "doctor_id required"

    doctor_id = factory.doctor()
    assert prescribe(client, unlinked, patient_id=9999, medicine_id=medicine_id,
                     doctor_id=doctor_id).status_code == 404
    assert prescribe(client, unlinked, patient_id=patient_id, medicine_id='med_nope',
                     doctor_id=doctor_id).status_code == 404
    assert prescribe(client, unlinked, patient_id=patient_id, medicine_id=medicine_id,
                     doctor_id=9999).status_code == 404
    assert prescribe(client, unlinked, patient_id=patient_id, medicine_id=medicine_id,
                     doctor_id=doctor_id).status_code == 201


def test_dispense_until_out_of_stock(app, client, factory):
    _, doctor = factory.user('doctor', with_doctor=True)
    _, pharmacy = factory.user('pharmacy')
    patient_id = factory.patient()
    medicine_id = factory.medicine('med_one', stock=1)

    first = prescribe(client, doctor, patient_id=patient_id, medicine_id=medicine_id).get_json()['id']
    second = prescribe(client, doctor, patient_id=patient_id, medicine_id=medicine_id).get_json()['id']

    resp = client.patch(f'/api/prescriptions/{first}/dispense', headers=pharmacy)
    assert resp.status_code == 200
    assert stock_of(app, medicine_id) == 0

    resp = client.patch(f'/api/prescriptions/{first}/dispense', headers=pharmacy)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == "Already dispensed"

    resp = client.patch(f'/api/prescriptions/{second}/dispense', headers=pharmacy)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == "Out of stock"

    with app.app_context():
        assert db.session.get(Prescription, first).status == 'dispensed'
        assert db.session.get(Prescription, first).dispensed_at is not None
        # the failed dispense left nothing half-done
        assert db.session.get(Prescription, second).status == 'pending'
        assert db.session.get(Prescription, second).dispensed_at is None
    assert stock_of(app, medicine_id) == 0


def test_dispense_gates(client, factory):
    _, doctor = factory.user('doctor', with_doctor=True)
    _, patient = factory.user('patient', with_patient=True)
    _, admin = factory.user('admin')
    rx = prescribe(client, doctor, patient_id=factory.patient(), medicine_id=factory.medicine()).get_json()['id']

    assert client.patch(f'/api/prescriptions/{rx}/dispense', headers=patient).status_code == 403
    assert client.patch(f'/api/prescriptions/{rx}/dispense', headers=doctor).status_code == 403
    resp = client.patch('/api/prescriptions/9999/dispense', headers=admin)
    assert resp.status_code == 404
    assert resp.get_json()['error'] == "Prescription not found"
    assert client.patch(f'/api/prescriptions/{rx}/dispense', headers=admin).status_code == 200


def test_pharmacy_list_puts_pending_first(client, factory):
    _, doctor = factory.user('doctor', name='Dr. Rx', with_doctor=True)
    _, pharmacy = factory.user('pharmacy')
    patient_id = factory.patient(name='Kamla')
    medicine_id = factory.medicine(stock=5)

    done = prescribe(client, doctor, patient_id=patient_id, medicine_id=medicine_id).get_json()['id']
    client.patch(f'/api/prescriptions/{done}/dispense', headers=pharmacy)
    waiting = prescribe(client, doctor, patient_id=patient_id, medicine_id=medicine_id).get_json()['id']

    listed = client.get('/api/prescriptions', headers=pharmacy).get_json()
    assert [(p['id'], p['status']) for p in listed] == [(waiting, 'pending'), (done, 'dispensed')]
    assert listed[0]['medicine_name'] == 'Testamol'
    assert listed[0]['medicine_strength'] == '500mg'
    assert listed[0]['patient_name'] == 'Kamla'
    assert listed[0]['patient_village'] == 'Rajpur'
    assert listed[0]['doctor_name'] == 'Dr. Rx'


def test_patient_prescription_list_is_scoped(client, factory):
    user_id, patient = factory.user('patient')
    _, doctor = factory.user('doctor', with_doctor=True)
    own_record = factory.patient(user_id=user_id)
    other_record = factory.patient(name='Someone Else')
    medicine_id = factory.medicine()
    prescribe(client, doctor, patient_id=own_record, medicine_id=medicine_id)

    own = client.get(f'/api/prescriptions/patient/{own_record}', headers=patient)
    assert own.status_code == 200
    assert len(own.get_json()) == 1

    assert client.get(f'/api/prescriptions/patient/{other_record}', headers=patient).status_code == 403
    assert client.get(f'/api/prescriptions/patient/{other_record}', headers=doctor).status_code == 200


def test_medicines_listed_by_name(client, factory):
    _, headers = factory.user('pharmacy')
    factory.medicine('med_b', stock=3)
    with client.application.app_context():
        db.session.add(Medicine(id='med_a', name='Amoxicillin', category='Antibiotic',
                                strength='250mg', price=10.0, stock_quantity=7))
        db.session.commit()

    listed = client.get('/api/medicines', headers=headers).get_json()
    assert [m['name'] for m in listed] == ['Amoxicillin', 'Testamol']
    assert client.get('/api/medicines').status_code == 401
