# ruralcare_app_pkg/auth/routes.py
from flask import Blueprint, request, jsonify
from ..utils import ensure_json
from .services import register_patient, authenticate_credentials

auth_bp = Blueprint('auth_bp', __name__)
auth_bp.before_request(ensure_json)


@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    token, user = register_patient(
        data.get('name'),
        data.get('email'),
        data.get('password'),
        role=data.get('role'),
    )
    return jsonify({"token": token, "user": user.to_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    token, user = authenticate_credentials(data.get('email'), data.get('password'))
    return jsonify({"token": token, "user": user.to_dict()}), 200
