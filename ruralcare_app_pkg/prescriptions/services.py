# ruralcare_app_pkg/prescriptions/services.py
from flask import current_app
from sqlalchemy import update
from sqlalchemy.orm import joinedload
from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from .. import db
from ..models import Prescription, Patient, Medicine, Doctor, utcnow
from ..utils import is_patient, parse_int
from ..availability.services import doctor_for_user


def create_prescription(identity, data):
    """Records a pending prescription. doctor_id defaults to the caller's own doctor row."""
    patient_id = parse_int(data.get('patient_id'))
    medicine_id = data.get('medicine_id')
    if not patient_id or not medicine_id:
        raise BadRequest("patient_id and medicine_id required")

    doctor_id = parse_int(data.get('doctor_id'))
    if doctor_id is None:
        own = doctor_for_user(identity.id)
        doctor_id = own.id if own else None
    if doctor_id is None:
        raise BadRequest("doctor_id required")

    if db.session.get(Patient, patient_id) is None:
        raise NotFound("Patient not found")
    if db.session.get(Medicine, medicine_id) is None:
        raise NotFound("Medicine not found")
    if db.session.get(Doctor, doctor_id) is None:
        raise NotFound("Doctor not found")

    prescription = Prescription(patient_id=patient_id, doctor_id=doctor_id,
                                medicine_id=medicine_id, status='pending')
    db.session.add(prescription)
    db.session.commit()
    current_app.logger.info(f"Prescription {prescription.id} ({medicine_id}) written for patient {patient_id} "
                            f"by doctor {doctor_id}")
    return prescription


def dispense_prescription(prescription_id):
    """
    Flips a pending prescription to dispensed and takes one unit off the
    medicine's stock. Both guarded updates land in one commit or neither does.
    """
    prescription = db.session.get(Prescription, prescription_id)
    if prescription is None:
        raise NotFound("Prescription not found")
    if prescription.status == 'dispensed':
        raise BadRequest("Already dispensed")

    prescriptions = Prescription.__table__
    medicines = Medicine.__table__
    try:
        flipped = db.session.execute(
            update(prescriptions)
            .where(prescriptions.c.id == prescription_id, prescriptions.c.status == 'pending')
            .values(status='dispensed', dispensed_at=utcnow())
        )
        if flipped.rowcount != 1:
            raise BadRequest("Already dispensed")

        decremented = db.session.execute(
            update(medicines)
            .where(medicines.c.id == prescription.medicine_id, medicines.c.stock_quantity > 0)
            .values(stock_quantity=medicines.c.stock_quantity - 1)
        )
        if decremented.rowcount != 1:
            raise BadRequest("Out of stock")

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(f"Prescription {prescription_id} dispensed ({prescription.medicine_id})")
    return prescription


def list_prescriptions():
    # 'pending' sorts after 'dispensed', so DESC puts pending rows first
    return (Prescription.query
            .options(joinedload(Prescription.medicine), joinedload(Prescription.doctor),
                     joinedload(Prescription.patient))
            .order_by(Prescription.status.desc(), Prescription.created_at.desc())
            .all())


def list_for_patient(identity, patient_id):
    if is_patient(identity):
        own = Patient.query.filter_by(user_id=identity.id).first()
        if own is None or own.id != patient_id:
            raise Forbidden("Access denied")

    return (Prescription.query
            .options(joinedload(Prescription.medicine), joinedload(Prescription.doctor))
            .filter(Prescription.patient_id == patient_id)
            .order_by(Prescription.created_at.desc(), Prescription.id.desc())
            .all())
