from . import db # Imports the db instance from __init__.py
from werkzeug.security import generate_password_hash, check_password_hash
import datetime

ROLES = ('admin', 'doctor', 'patient', 'pharmacy')
STAFF_ROLES = ('admin', 'doctor')
RISK_LEVELS = ('low', 'medium', 'high')
APPOINTMENT_STATUSES = ('scheduled', 'completed')
PRESCRIPTION_STATUSES = ('pending', 'dispensed')


def utcnow():
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value else None


# --- Credential store ---

class User(db.Model):
    __tablename__ = 'users'
    __table_args__ = (
        db.CheckConstraint("role IN ('admin', 'doctor', 'patient', 'pharmacy')", name='ck_users_role'),
    )
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def to_dict(self, include_created=False):
        data = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
        }
        if include_created:
            data["created_at"] = _iso(self.created_at)
        return data

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'


# --- Clinical records store ---

class Doctor(db.Model):
    __tablename__ = 'doctors'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    specialization = db.Column(db.String(120), nullable=False)
    # Login account of the doctor; null for doctors seeded or added without one
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, unique=True, index=True)

    user = db.relationship('User', backref=db.backref('doctor_profile', uselist=False))

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "specialization": self.specialization,
            "user_id": self.user_id,
        }

    def __repr__(self):
        return f'<Doctor {self.name}>'


class Patient(db.Model):
    __tablename__ = 'patients'
    __table_args__ = (
        db.CheckConstraint("risk_level IN ('low', 'medium', 'high')", name='ck_patients_risk_level'),
    )
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=True, index=True)
    name = db.Column(db.String(120), nullable=False)
    age = db.Column(db.Integer, nullable=True)
    gender = db.Column(db.String(20), nullable=True)
    village = db.Column(db.String(120), nullable=True)
    symptoms = db.Column(db.Text, nullable=True)
    vitals = db.Column(db.Text, nullable=True) # free-text vitals as noted at intake
    risk_level = db.Column(db.String(10), nullable=False, default='low')
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship('User', backref=db.backref('patient_profile', uselist=False))
    vitals_baseline = db.relationship('PatientVitals', backref='patient', uselist=False,
                                      cascade='all, delete-orphan')
    appointments = db.relationship('Appointment', backref='patient', lazy='dynamic',
                                   cascade='all, delete-orphan')
    notes = db.relationship('ConsultationNote', backref='patient', lazy='dynamic',
                            cascade='all, delete-orphan')
    prescriptions = db.relationship('Prescription', backref='patient', lazy='dynamic',
                                    cascade='all, delete-orphan')

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "age": self.age,
            "gender": self.gender,
            "village": self.village,
            "symptoms": self.symptoms,
            "vitals": self.vitals,
            "risk_level": self.risk_level,
            "created_at": _iso(self.created_at),
        }

    def __repr__(self):
        return f'<Patient {self.id} - {self.name}>'


class PatientVitals(db.Model):
    """Baseline vitals for one patient. Live readings jitter around these values."""
    __tablename__ = 'patient_vitals'
    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey('patients.id', ondelete='CASCADE'), nullable=False, unique=True)
    heart_rate = db.Column(db.Integer, nullable=False, default=75)
    spo2 = db.Column(db.Integer, nullable=False, default=97)
    glucose = db.Column(db.Integer, nullable=False, default=100)

    def to_dict(self):
        return {
            "patient_id": self.patient_id,
            "heart_rate": self.heart_rate,
            "spo2": self.spo2,
            "glucose": self.glucose,
        }


class ConsultationNote(db.Model):
    __tablename__ = 'consultation_notes'
    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey('patients.id', ondelete='CASCADE'), nullable=False, index=True)
    raw_note = db.Column(db.Text, nullable=False)
    structured_summary = db.Column(db.Text, nullable=True)
    follow_up_days = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self, include_patient=True):
        data = {
            "id": self.id,
            "patient_id": self.patient_id,
            "raw_note": self.raw_note,
            "structured_summary": self.structured_summary,
            "follow_up_days": self.follow_up_days,
            "created_at": _iso(self.created_at),
        }
        if include_patient:
            data["patient_name"] = self.patient.name if self.patient else None
        return data


# --- Availability ledger ---

class AvailabilitySlot(db.Model):
    __tablename__ = 'doctor_availability'
    __table_args__ = (
        db.UniqueConstraint('doctor_id', 'date', 'start_time', name='uq_doctor_availability_start'),
    )
    id = db.Column(db.Integer, primary_key=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey('doctors.id', ondelete='CASCADE'), nullable=False, index=True)
    date = db.Column(db.String(10), nullable=False) # YYYY-MM-DD
    start_time = db.Column(db.String(5), nullable=False) # HH:MM
    end_time = db.Column(db.String(5), nullable=False)
    is_booked = db.Column(db.Boolean, nullable=False, default=False)

    doctor = db.relationship('Doctor', backref=db.backref('slots', lazy='dynamic'))

    def to_dict(self, include_doctor=False):
        data = {
            "id": self.id,
            "doctor_id": self.doctor_id,
            "date": self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "is_booked": bool(self.is_booked),
        }
        if include_doctor and self.doctor:
            data["doctor_name"] = self.doctor.name
            data["specialization"] = self.doctor.specialization
        return data

    def __repr__(self):
        return f'<AvailabilitySlot {self.id} doctor={self.doctor_id} {self.date} {self.start_time}>'


class Appointment(db.Model):
    __tablename__ = 'appointments'
    __table_args__ = (
        db.CheckConstraint("status IN ('scheduled', 'completed')", name='ck_appointments_status'),
    )
    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey('patients.id', ondelete='CASCADE'), nullable=True, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=True, index=True) # booking account
    doctor_id = db.Column(db.Integer, db.ForeignKey('doctors.id', ondelete='CASCADE'), nullable=False, index=True)
    # Unique: a slot can back at most one appointment
    availability_id = db.Column(db.Integer, db.ForeignKey('doctor_availability.id', ondelete='SET NULL'),
                                nullable=True, unique=True)
    date = db.Column(db.String(32), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='scheduled')

    user = db.relationship('User', backref=db.backref('appointments', lazy='dynamic'))
    doctor = db.relationship('Doctor', backref=db.backref('appointments', lazy='dynamic'))
    slot = db.relationship('AvailabilitySlot', backref=db.backref('appointment', uselist=False))

    @property
    def patient_name(self):
        if self.patient is not None:
            return self.patient.name
        if self.user is not None:
            return self.user.name
        return None

    def to_dict(self, include_related=False):
        data = {
            "id": self.id,
            "patient_id": self.patient_id,
            "user_id": self.user_id,
            "doctor_id": self.doctor_id,
            "availability_id": self.availability_id,
            "date": self.date,
            "status": self.status,
        }
        if include_related:
            data["doctor_name"] = self.doctor.name if self.doctor else None
            data["patient_name"] = self.patient_name
        return data

    def __repr__(self):
        return f'<Appointment {self.id} doctor={self.doctor_id} slot={self.availability_id}>'


# --- Pharmacy ---

class Medicine(db.Model):
    __tablename__ = 'medicines'
    __table_args__ = (
        db.CheckConstraint('stock_quantity >= 0', name='ck_medicines_stock_non_negative'),
    )
    id = db.Column(db.String(50), primary_key=True) # e.g. 'med_para'
    name = db.Column(db.String(120), nullable=False)
    category = db.Column(db.String(80), nullable=False)
    strength = db.Column(db.String(40), nullable=False)
    price = db.Column(db.Float, nullable=False)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "strength": self.strength,
            "price": self.price,
            "stock_quantity": self.stock_quantity,
        }


class Prescription(db.Model):
    __tablename__ = 'prescriptions'
    __table_args__ = (
        db.CheckConstraint("status IN ('pending', 'dispensed')", name='ck_prescriptions_status'),
    )
    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey('patients.id', ondelete='CASCADE'), nullable=False, index=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey('doctors.id', ondelete='CASCADE'), nullable=False)
    medicine_id = db.Column(db.String(50), db.ForeignKey('medicines.id'), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='pending')
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    dispensed_at = db.Column(db.DateTime, nullable=True)

    doctor = db.relationship('Doctor')
    medicine = db.relationship('Medicine')

    def to_dict(self, include_patient=False):
        data = {
            "id": self.id,
            "patient_id": self.patient_id,
            "doctor_id": self.doctor_id,
            "medicine_id": self.medicine_id,
            "status": self.status,
            "created_at": _iso(self.created_at),
            "dispensed_at": _iso(self.dispensed_at),
            "medicine_name": self.medicine.name if self.medicine else None,
            "medicine_strength": self.medicine.strength if self.medicine else None,
            "doctor_name": self.doctor.name if self.doctor else None,
        }
        if include_patient:
            data["patient_name"] = self.patient.name if self.patient else None
            data["patient_village"] = self.patient.village if self.patient else None
        return data
