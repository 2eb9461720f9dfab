# ruralcare_app_pkg/consultations/routes.py
from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.orm import joinedload
from .. import db
from ..models import ConsultationNote, Patient
from ..utils import ensure_json, parse_int

consultations_bp = Blueprint('consultations_bp', __name__)
consultations_bp.before_request(ensure_json)


def _notes_query():
    return (ConsultationNote.query
            .options(joinedload(ConsultationNote.patient))
            .order_by(ConsultationNote.created_at.desc(), ConsultationNote.id.desc()))


@consultations_bp.route('/consultations', methods=['GET'])
def get_consultations():
    return jsonify([n.to_dict() for n in _notes_query().all()]), 200


@consultations_bp.route('/consultations/patient/<int:patient_id>', methods=['GET'])
def get_patient_consultations(patient_id):
    notes = _notes_query().filter(ConsultationNote.patient_id == patient_id).all()
    return jsonify([n.to_dict() for n in notes]), 200


@consultations_bp.route('/consultations', methods=['POST'])
def add_consultation():
    data = request.get_json(silent=True) or {}
    patient_id = parse_int(data.get('patient_id'))
    raw_note = data.get('raw_note')
    if not patient_id or not raw_note:
        return jsonify({"error": "patient_id and raw_note are required"}), 400

    if db.session.get(Patient, patient_id) is None:
        return jsonify({"error": "Patient not found"}), 404

    note = ConsultationNote(
        patient_id=patient_id,
        raw_note=raw_note,
        structured_summary=data.get('structured_summary') or None,
        follow_up_days=parse_int(data.get('follow_up_days')) or None,
    )
    db.session.add(note)
    db.session.commit()
    current_app.logger.info(f"Consultation note {note.id} added for patient {patient_id}")
    return jsonify(note.to_dict()), 201


@consultations_bp.route('/consultations/<int:note_id>', methods=['DELETE'])
def delete_consultation(note_id):
    note = db.session.get(ConsultationNote, note_id)
    if note is None:
        return jsonify({"error": "Note not found"}), 404

    db.session.delete(note)
    db.session.commit()
    current_app.logger.info(f"Consultation note {note_id} deleted")
    return jsonify({"message": "Note deleted"}), 200
