# ruralcare_app_pkg/admin/routes.py
from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import IntegrityError
from .. import db
from ..models import User, Doctor
from ..utils import login_required, role_required, ensure_json

admin_bp = Blueprint('admin_bp', __name__)
admin_bp.before_request(ensure_json)


@admin_bp.route('/create-doctor', methods=['POST'])
@login_required
@role_required('admin')
def create_doctor():
    data = request.get_json(silent=True) or {}
    name = data.get('name')
    email = data.get('email')
    password = data.get('password')
    specialization = data.get('specialization')

    if not all([name, email, password, specialization]):
        return jsonify({"error": "name, email, password, and specialization are required"}), 400

    if User.query.filter_by(email=email).first():
        return jsonify({"error": "Email already registered"}), 409

    # The login account and the schedulable doctor row are created together and linked by user_id.
    try:
        user = User(name=name, email=email, role='doctor')
        user.set_password(password)
        db.session.add(user)
        db.session.flush()
        doctor = Doctor(name=name, specialization=specialization, user_id=user.id)
        db.session.add(doctor)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning(f"IntegrityError creating doctor account for {email}")
        return jsonify({"error": "Email already registered"}), 409

    current_app.logger.info(f"Doctor account created: user_id {user.id}, doctor_id {doctor.id}")
    return jsonify({
        "message": "Doctor account created",
        "user": user.to_dict(),
        "doctor": doctor.to_dict(),
    }), 201


@admin_bp.route('/users', methods=['GET'])
@login_required
@role_required('admin')
def list_users():
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return jsonify([u.to_dict(include_created=True) for u in users]), 200
