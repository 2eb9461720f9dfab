# ruralcare_app_pkg/doctors/routes.py
from flask import Blueprint, request, jsonify, current_app
from .. import db
from ..models import Doctor
from ..utils import ensure_json

doctors_bp = Blueprint('doctors_bp', __name__)
doctors_bp.before_request(ensure_json)


@doctors_bp.route('/doctors', methods=['GET'])
def get_doctors():
    doctors = Doctor.query.order_by(Doctor.name.asc(), Doctor.id.asc()).all()
    return jsonify([d.to_dict() for d in doctors]), 200


@doctors_bp.route('/doctors', methods=['POST'])
def add_doctor():
    data = request.get_json(silent=True) or {}
    name = data.get('name')
    specialization = data.get('specialization')
    if not name or not specialization:
        return jsonify({"error": "name and specialization are required"}), 400

    # No login account; admin provisioning links one
    doctor = Doctor(name=name, specialization=specialization)
    db.session.add(doctor)
    db.session.commit()
    current_app.logger.info(f"Doctor {doctor.id} added without a login account")
    return jsonify(doctor.to_dict()), 201
