# ruralcare_app_pkg/patients/services.py
from flask import current_app
from werkzeug.exceptions import BadRequest, NotFound

from .. import db
from ..models import Patient, Appointment, RISK_LEVELS
from ..utils import parse_int
from ..availability.services import release_slot
from ..vitals.services import ensure_vitals_baseline

CLINICAL_FIELDS = ['name', 'age', 'gender', 'village', 'symptoms', 'vitals', 'risk_level']
INVALID_RISK = "risk_level must be one of: low, medium, high"


def get_patient_or_404(patient_id):
    patient = db.session.get(Patient, patient_id)
    if patient is None:
        raise NotFound("Patient not found")
    return patient


def _age(value):
    if value in (None, ''):
        return None
    age = parse_int(value)
    if age is None or age < 0:
        raise BadRequest("age must be a non-negative integer")
    return age


def create_patient(data):
    """Staff intake. Every clinical field is required; a vitals baseline is attached for the risk level."""
    if any(not data.get(field) for field in CLINICAL_FIELDS):
        raise BadRequest("All fields are required")
    if data['risk_level'] not in RISK_LEVELS:
        raise BadRequest(INVALID_RISK)

    patient = Patient(
        name=data['name'],
        age=_age(data['age']),
        gender=data['gender'],
        village=data['village'],
        symptoms=data['symptoms'],
        vitals=data['vitals'],
        risk_level=data['risk_level'],
    )
    ensure_vitals_baseline(patient)
    db.session.add(patient)
    db.session.commit()
    current_app.logger.info(f"Patient {patient.id} created (risk {patient.risk_level})")
    return patient


def replace_patient(patient_id, data):
    """Full replace of the editable fields; absent optional fields become null."""
    patient = get_patient_or_404(patient_id)
    if not data.get('name'):
        raise BadRequest("name is required")
    if data.get('risk_level') not in RISK_LEVELS:
        raise BadRequest(INVALID_RISK)

    patient.name = data['name']
    patient.age = _age(data.get('age'))
    patient.gender = data.get('gender')
    patient.village = data.get('village')
    patient.symptoms = data.get('symptoms')
    patient.vitals = data.get('vitals')
    patient.risk_level = data['risk_level']
    # An existing baseline is kept even if the risk level changed
    ensure_vitals_baseline(patient)
    db.session.commit()
    current_app.logger.info(f"Patient {patient.id} updated")
    return patient


def delete_patient(patient_id):
    """
    Deletes a patient with its appointments, notes, baseline and prescriptions.
    Slots held by the cascaded appointments are freed in the same transaction.
    """
    patient = get_patient_or_404(patient_id)
    try:
        held = (Appointment.query
                .with_entities(Appointment.availability_id)
                .filter(Appointment.patient_id == patient.id, Appointment.availability_id.isnot(None))
                .all())
        freed = [row.availability_id for row in held]
        for slot_id in freed:
            release_slot(slot_id)
        db.session.delete(patient)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(f"Patient {patient_id} deleted; freed slots {freed}")
    return freed
