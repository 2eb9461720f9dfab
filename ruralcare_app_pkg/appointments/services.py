# ruralcare_app_pkg/appointments/services.py
# Booking service. Every appointment write and its slot flag change share one transaction.

from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from werkzeug.exceptions import BadRequest, Conflict, Forbidden, NotFound

from .. import db
from ..models import Appointment, AvailabilitySlot, Doctor, Patient, APPOINTMENT_STATUSES
from ..utils import is_patient, is_admin_or_doctor, parse_int
from ..availability.services import claim_slot, release_slot

INVALID_STATUS = "status must be 'scheduled' or 'completed'"


def _optional_id(data, key):
    """Reads an optional integer id from a JSON body; raises 400 for a non-integer value."""
    value = data.get(key)
    if value is None:
        return None
    parsed = parse_int(value)
    if parsed is None:
        raise BadRequest(f"Invalid {key} format.")
    return parsed


def _require_patient(patient_id):
    if patient_id is not None and db.session.get(Patient, patient_id) is None:
        raise NotFound("Patient not found")
    return patient_id


def _get_or_404(appointment_id):
    appointment = db.session.get(Appointment, appointment_id)
    if appointment is None:
        raise NotFound("Appointment not found")
    return appointment


def list_appointments(identity):
    query = Appointment.query.options(
        joinedload(Appointment.doctor),
        joinedload(Appointment.patient),
        joinedload(Appointment.user),
    )
    if is_patient(identity):
        query = query.filter(Appointment.user_id == identity.id)
    return query.order_by(Appointment.date.desc(), Appointment.id.desc()).all()


def get_appointment(identity, appointment_id):
    appointment = _get_or_404(appointment_id)
    if is_patient(identity) and appointment.user_id != identity.id:
        raise Forbidden("Access denied")
    return appointment


def create_appointment(identity, data):
    """
    Books an appointment for the calling account. When `availability_id` is
    given the slot is claimed in the same transaction as the insert.
    """
    if data.get('doctor_id') is None:
        raise BadRequest("doctor_id and date are required")
    doctor_id = _optional_id(data, 'doctor_id')
    availability_id = _optional_id(data, 'availability_id')
    # Only staff may book on behalf of a clinical record
    patient_id = _optional_id(data, 'patient_id') if is_admin_or_doctor(identity) else None

    status = data.get('status') or 'scheduled'
    if status not in APPOINTMENT_STATUSES:
        raise BadRequest(INVALID_STATUS)

    if db.session.get(Doctor, doctor_id) is None:
        raise NotFound("Doctor not found")
    _require_patient(patient_id)

    slot = None
    if availability_id is not None:
        slot = db.session.get(AvailabilitySlot, availability_id)
        if slot is None:
            raise NotFound("Availability slot not found")

    date = data.get('date')
    if not date and slot is not None:
        date = f"{slot.date}T{slot.start_time}"
    if not date:
        raise BadRequest("doctor_id and date are required")

    appointment = Appointment(
        patient_id=patient_id,
        user_id=identity.id,
        doctor_id=doctor_id,
        availability_id=availability_id,
        date=date,
        status=status,
    )
    try:
        if availability_id is not None and not claim_slot(availability_id):
            raise Conflict("That slot is already booked")
        db.session.add(appointment)
        db.session.commit()
    except IntegrityError:
        # Another booking reached appointments.availability_id first
        db.session.rollback()
        raise Conflict("That slot is already booked")
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(f"Appointment {appointment.id} booked by user {identity.id} "
                            f"with doctor {doctor_id} (slot {availability_id})")
    return appointment


def reschedule_appointment(identity, appointment_id, data):
    """
    Updates an appointment. Patients may move only their own appointments and
    only change date and slot; admins and doctors may also reassign patient,
    doctor and status. Returns (appointment, slot_changed).
    """
    appointment = _get_or_404(appointment_id)

    status = data.get('status')
    if status is not None and status not in APPOINTMENT_STATUSES:
        raise BadRequest(INVALID_STATUS)

    if is_patient(identity):
        if appointment.user_id != identity.id:
            raise Forbidden("You can only reschedule your own appointments")
        if not data.get('date'):
            raise BadRequest("date is required for rescheduling")

    slot_changed = False
    new_slot_id = appointment.availability_id
    if 'availability_id' in data:
        new_slot_id = _optional_id(data, 'availability_id')
        slot_changed = new_slot_id != appointment.availability_id

    updates = {}
    if data.get('date'):
        updates['date'] = data['date']
    if is_admin_or_doctor(identity):
        if data.get('patient_id') is not None:
            updates['patient_id'] = _require_patient(_optional_id(data, 'patient_id'))
        if data.get('doctor_id') is not None:
            doctor_id = _optional_id(data, 'doctor_id')
            if db.session.get(Doctor, doctor_id) is None:
                raise NotFound("Doctor not found")
            updates['doctor_id'] = doctor_id
        if status is not None:
            updates['status'] = status

    old_slot_id = appointment.availability_id
    try:
        if slot_changed:
            release_slot(old_slot_id)
            if new_slot_id is not None:
                if db.session.get(AvailabilitySlot, new_slot_id) is None:
                    raise NotFound("New slot not found")
                if not claim_slot(new_slot_id):
                    raise Conflict("New slot is already booked")
            updates['availability_id'] = new_slot_id

        for field, value in updates.items():
            setattr(appointment, field, value)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("New slot is already booked")
    except Exception:
        # Also restores the old slot's booked flag
        db.session.rollback()
        raise

    current_app.logger.info(f"Appointment {appointment.id} updated by user {identity.id}: "
                            f"{', '.join(sorted(updates)) or 'no changes'}")
    return appointment, slot_changed


def cancel_appointment(identity, appointment_id):
    """Frees the appointment's slot and deletes it. Returns the freed slot id, if any."""
    appointment = _get_or_404(appointment_id)
    if is_patient(identity) and appointment.user_id != identity.id:
        raise Forbidden("You can only cancel your own appointments")

    slot_id = appointment.availability_id
    try:
        release_slot(slot_id)
        db.session.delete(appointment)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(f"Appointment {appointment_id} cancelled by user {identity.id}")
    return slot_id
