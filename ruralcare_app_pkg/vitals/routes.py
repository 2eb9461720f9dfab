# ruralcare_app_pkg/vitals/routes.py
from flask import Blueprint, jsonify, g
from ..utils import login_required, is_patient
from .services import all_readings, reading_for_user, generate_alerts

vitals_bp = Blueprint('vitals_bp', __name__)

# Readings are jittered per request and never stored; clients poll these endpoints.

@vitals_bp.route('/vitals', methods=['GET'])
@login_required
def get_all_vitals():
    if is_patient(g.current_user):
        return jsonify({"error": "Use /api/vitals/mine for patient vitals"}), 403
    return jsonify(all_readings()), 200


@vitals_bp.route('/vitals/alerts', methods=['GET'])
@login_required
def get_vitals_alerts():
    if is_patient(g.current_user):
        return jsonify({"error": "Use /api/vitals/mine for patient vitals"}), 403
    return jsonify(generate_alerts(all_readings())), 200


@vitals_bp.route('/vitals/mine', methods=['GET'])
@login_required
def get_my_vitals():
    reading, error_message = reading_for_user(g.current_user.id)
    if error_message:
        return jsonify({"error": error_message}), 404
    return jsonify(reading), 200
