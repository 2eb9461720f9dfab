# ruralcare_app_pkg/patients/routes.py
from flask import Blueprint, request, jsonify
from ..models import Patient
from ..utils import ensure_json
from ..sockets import notify_change
from .services import get_patient_or_404, create_patient, replace_patient, delete_patient

patients_bp = Blueprint('patients_bp', __name__)
patients_bp.before_request(ensure_json)


@patients_bp.route('/patients', methods=['GET'])
def get_patients():
    patients = Patient.query.order_by(Patient.created_at.desc(), Patient.id.desc()).all()
    return jsonify([p.to_dict() for p in patients]), 200


@patients_bp.route('/patients/<int:patient_id>', methods=['GET'])
def get_patient(patient_id):
    return jsonify(get_patient_or_404(patient_id).to_dict()), 200


@patients_bp.route('/patients', methods=['POST'])
def add_patient():
    patient = create_patient(request.get_json(silent=True) or {})
    return jsonify(patient.to_dict()), 201


@patients_bp.route('/patients/<int:patient_id>', methods=['PUT'])
def update_patient(patient_id):
    patient = replace_patient(patient_id, request.get_json(silent=True) or {})
    return jsonify(patient.to_dict()), 200


@patients_bp.route('/patients/<int:patient_id>', methods=['DELETE'])
def remove_patient(patient_id):
    freed = delete_patient(patient_id)
    if freed:
        notify_change('appointments_changed', {"id": None, "action": "deleted", "patient_id": patient_id})
        for slot_id in freed:
            notify_change('availability_changed', {"id": slot_id, "action": "released"})
    return jsonify({"message": "Patient deleted"}), 200
