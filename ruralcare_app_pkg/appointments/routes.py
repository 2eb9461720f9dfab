# ruralcare_app_pkg/appointments/routes.py
from flask import Blueprint, request, jsonify, g
from ..utils import login_required, ensure_json
from ..sockets import notify_change
from .services import (list_appointments, get_appointment, create_appointment,
                       reschedule_appointment, cancel_appointment)

appointments_bp = Blueprint('appointments_bp', __name__)
appointments_bp.before_request(ensure_json)


@appointments_bp.route('/appointments', methods=['GET'])
@login_required
def get_appointments():
    appointments = list_appointments(g.current_user)
    return jsonify([a.to_dict(include_related=True) for a in appointments]), 200


@appointments_bp.route('/appointments/<int:appointment_id>', methods=['GET'])
@login_required
def get_appointment_detail(appointment_id):
    appointment = get_appointment(g.current_user, appointment_id)
    return jsonify(appointment.to_dict(include_related=True)), 200


@appointments_bp.route('/appointments', methods=['POST'])
@login_required
def book_appointment():
    data = request.get_json(silent=True) or {}
    appointment = create_appointment(g.current_user, data)

    notify_change('appointments_changed', {"id": appointment.id, "action": "created"})
    if appointment.availability_id is not None:
        notify_change('availability_changed', {"id": appointment.availability_id, "action": "booked"})
    return jsonify(appointment.to_dict()), 201


@appointments_bp.route('/appointments/<int:appointment_id>', methods=['PUT'])
@login_required
def update_appointment(appointment_id):
    data = request.get_json(silent=True) or {}
    appointment, slot_changed = reschedule_appointment(g.current_user, appointment_id, data)

    notify_change('appointments_changed', {"id": appointment.id, "action": "updated"})
    if slot_changed:
        notify_change('availability_changed', {"id": appointment.availability_id, "action": "rebooked"})
    return jsonify(appointment.to_dict()), 200


@appointments_bp.route('/appointments/<int:appointment_id>', methods=['DELETE'])
@login_required
def delete_appointment(appointment_id):
    freed_slot_id = cancel_appointment(g.current_user, appointment_id)

    notify_change('appointments_changed', {"id": appointment_id, "action": "deleted"})
    if freed_slot_id is not None:
        notify_change('availability_changed', {"id": freed_slot_id, "action": "released"})
    return jsonify({"message": "Appointment deleted"}), 200
