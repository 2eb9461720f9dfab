# ruralcare_app_pkg/prescriptions/routes.py
from flask import Blueprint, request, jsonify, g
from ..utils import login_required, role_required
from ..sockets import notify_change
from .services import create_prescription, dispense_prescription, list_prescriptions, list_for_patient

# No ensure_json hook here: PATCH .../dispense carries no body.
prescriptions_bp = Blueprint('prescriptions_bp', __name__)


@prescriptions_bp.route('/prescriptions', methods=['GET'])
@login_required
@role_required('pharmacy', 'admin')
def get_prescriptions():
    return jsonify([p.to_dict(include_patient=True) for p in list_prescriptions()]), 200


@prescriptions_bp.route('/prescriptions/patient/<int:patient_id>', methods=['GET'])
@login_required
def get_patient_prescriptions(patient_id):
    prescriptions = list_for_patient(g.current_user, patient_id)
    return jsonify([p.to_dict() for p in prescriptions]), 200


@prescriptions_bp.route('/prescriptions', methods=['POST'])
@login_required
@role_required('doctor')
def prescribe():
    if not request.is_json:
        return jsonify({"error": "Request body must be JSON."}), 415
    prescription = create_prescription(g.current_user, request.get_json(silent=True) or {})
    notify_change('prescriptions_changed', {"id": prescription.id, "action": "created"},
                  roles=['pharmacy', 'admin'])
    return jsonify({"id": prescription.id, "status": "pending"}), 201


@prescriptions_bp.route('/prescriptions/<int:prescription_id>/dispense', methods=['PATCH'])
@login_required
@role_required('pharmacy', 'admin')
def dispense(prescription_id):
    dispense_prescription(prescription_id)
    notify_change('prescriptions_changed', {"id": prescription_id, "action": "dispensed"})
    return jsonify({"message": "Dispensed successfully"}), 200
