# ruralcare_app_pkg/medications/routes.py
from flask import Blueprint, jsonify
from ..models import Medicine
from ..utils import login_required

medications_bp = Blueprint('medications_bp', __name__)


@medications_bp.route('/medicines', methods=['GET'])
@login_required
def get_medicines():
    medicines = Medicine.query.order_by(Medicine.name.asc()).all()
    return jsonify([m.to_dict() for m in medicines]), 200
