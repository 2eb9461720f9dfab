# ruralcare_app_pkg/availability/services.py
from datetime import datetime

from flask import current_app
from sqlalchemy import false, update
from sqlalchemy.orm.util import identity_key
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import BadRequest, Conflict, NotFound

from .. import db
from ..models import AvailabilitySlot, Doctor


def _valid(value, fmt):
    if not isinstance(value, str):
        return False
    try:
        datetime.strptime(value, fmt)
        return True
    except ValueError:
        return False


def doctor_for_user(user_id):
    """The Doctor row linked to a doctor's login account, or None."""
    return Doctor.query.filter_by(user_id=user_id).first()


def list_slots(identity, doctor_id=None, date=None):
    """
    Doctors see every slot of their own doctor row, booked or free.
    Every other role sees only free slots.
    """
    query = AvailabilitySlot.query.join(Doctor, AvailabilitySlot.doctor_id == Doctor.id)
    if identity.role == 'doctor':
        query = query.filter(Doctor.user_id == identity.id)
    else:
        query = query.filter(AvailabilitySlot.is_booked == false())

    if doctor_id is not None:
        query = query.filter(AvailabilitySlot.doctor_id == doctor_id)
    if date:
        query = query.filter(AvailabilitySlot.date == date)

    return query.order_by(AvailabilitySlot.date.asc(), AvailabilitySlot.start_time.asc()).all()


def create_slot(doctor_id, date, start_time, end_time):
    if not all([doctor_id, date, start_time, end_time]):
        raise BadRequest("doctor_id, date, start_time, end_time are required")
    if not _valid(date, '%Y-%m-%d'):
        raise BadRequest("date must be in YYYY-MM-DD format")
    if not (_valid(start_time, '%H:%M') and _valid(end_time, '%H:%M')):
        raise BadRequest("start_time and end_time must be in HH:MM format")
    if end_time <= start_time:
        raise BadRequest("end_time must be after start_time")

    if db.session.get(Doctor, doctor_id) is None:
        raise NotFound("Doctor not found")

    # Only an exact (doctor, date, start_time) collision is rejected; overlaps are not checked.
    clash = AvailabilitySlot.query.filter_by(doctor_id=doctor_id, date=date, start_time=start_time).first()
    if clash:
        raise Conflict("A slot already exists at that time")

    slot = AvailabilitySlot(doctor_id=doctor_id, date=date, start_time=start_time,
                            end_time=end_time, is_booked=False)
    try:
        db.session.add(slot)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("A slot already exists at that time")

    current_app.logger.info(f"Availability slot {slot.id} created for doctor {doctor_id} on {date} {start_time}")
    return slot


def delete_slot(slot_id):
    slot = db.session.get(AvailabilitySlot, slot_id)
    if slot is None:
        raise NotFound("Slot not found")
    # Booked slots are released only by cancelling or rescheduling their appointment.
    if slot.is_booked:
        raise Conflict("Cannot delete a booked slot")

    db.session.delete(slot)
    db.session.commit()
    current_app.logger.info(f"Availability slot {slot_id} deleted")


# --- Slot flag primitives. These never commit; the caller owns the transaction. ---

def _expire_cached_flag(slot_id):
    # The UPDATEs below bypass the ORM, so refresh any copy already loaded in this session.
    slot = db.session.identity_map.get(identity_key(AvailabilitySlot, slot_id))
    if slot is not None:
        db.session.expire(slot, ['is_booked'])


def claim_slot(slot_id):
    """
    Marks a free slot as booked in a single guarded UPDATE.
    Returns False when the slot was already booked (or vanished) by the time the row was written.
    """
    slots = AvailabilitySlot.__table__
    result = db.session.execute(
        update(slots)
        .where(slots.c.id == slot_id, slots.c.is_booked == false())
        .values(is_booked=True)
    )
    _expire_cached_flag(slot_id)
    return result.rowcount == 1


def release_slot(slot_id):
    """Marks a slot as free. No-op for a null id."""
    if slot_id is None:
        return
    slots = AvailabilitySlot.__table__
    db.session.execute(update(slots).where(slots.c.id == slot_id).values(is_booked=False))
    _expire_cached_flag(slot_id)
