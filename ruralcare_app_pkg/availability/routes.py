# ruralcare_app_pkg/availability/routes.py
from flask import Blueprint, request, jsonify, g
from ..utils import login_required, ensure_json, is_admin_or_doctor, parse_int
from ..sockets import notify_change
from .services import list_slots, create_slot, delete_slot

availability_bp = Blueprint('availability_bp', __name__)
availability_bp.before_request(ensure_json)


@availability_bp.route('/availability', methods=['GET'])
@login_required
def get_availability():
    doctor_id_filter = request.args.get('doctor_id')
    date_filter = request.args.get('date')

    doctor_id = None
    if doctor_id_filter:
        doctor_id = parse_int(doctor_id_filter)
        if doctor_id is None:
            return jsonify({"error": "Invalid doctor_id format."}), 400

    slots = list_slots(g.current_user, doctor_id=doctor_id, date=date_filter)
    return jsonify([s.to_dict(include_doctor=True) for s in slots]), 200


@availability_bp.route('/availability', methods=['POST'])
@login_required
def create_availability():
    if not is_admin_or_doctor(g.current_user):
        return jsonify({"error": "Only doctors can create availability slots"}), 403

    data = request.get_json(silent=True) or {}
    doctor_id = data.get('doctor_id')
    if doctor_id is not None and parse_int(doctor_id) is None:
        return jsonify({"error": "Invalid doctor_id format."}), 400

    slot = create_slot(parse_int(doctor_id), data.get('date'), data.get('start_time'), data.get('end_time'))
    notify_change('availability_changed', {"id": slot.id, "action": "created"})
    return jsonify(slot.to_dict()), 201


@availability_bp.route('/availability/<int:slot_id>', methods=['DELETE'])
@login_required
def remove_availability(slot_id):
    if not is_admin_or_doctor(g.current_user):
        return jsonify({"error": "Only doctors/admins can remove slots"}), 403

    delete_slot(slot_id)
    notify_change('availability_changed', {"id": slot_id, "action": "deleted"})
    return jsonify({"message": "Slot deleted"}), 200
