"""
Shared fixtures for the API tests.

Every test gets its own SQLite file, migrated by the real Alembic revisions
on start-up, and helpers to create accounts, doctors, slots and medicines.
"""
import pytest

from ruralcare_app_pkg import create_app, db
from ruralcare_app_pkg.models import User, Doctor, Patient, AvailabilitySlot, Medicine
from ruralcare_app_pkg.utils import create_access_token
from ruralcare_app_pkg.vitals.services import ensure_vitals_baseline


@pytest.fixture
def app(tmp_path):
    app = create_app('testing', {
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'test.db'}",
        'AUTO_MIGRATE': True,
        'SEED_DEFAULTS': False,
        'JWT_SECRET_KEY': 'test-jwt-secret',
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


class Factory:
    """Creates rows directly in the store and hands back plain ids/tokens."""

    def __init__(self, app):
        self.app = app
        self._seq = 0

    def _next(self):
        self._seq += 1
        return self._seq

    def user(self, role='patient', name=None, with_patient=False, with_doctor=False, risk_level='low'):
        """Returns (user_id, auth headers). Optionally links a Patient or Doctor row."""
        n = self._next()
        with self.app.app_context():
            user = User(name=name or f"{role.title()} {n}", email=f"{role}{n}@example.com", role=role)
            user.set_password('secret123')
            db.session.add(user)
            db.session.flush()
            if with_patient:
                db.session.add(Patient(user_id=user.id, name=user.name, risk_level=risk_level))
            if with_doctor:
                db.session.add(Doctor(name=user.name, specialization='General Medicine', user_id=user.id))
            db.session.commit()
            token = create_access_token(user)
            return user.id, {'Authorization': f'Bearer {token}'}

    def doctor(self, name=None, user_id=None):
        with self.app.app_context():
            doctor = Doctor(name=name or f"Dr. Test {self._next()}", specialization='Pediatrics', user_id=user_id)
            db.session.add(doctor)
            db.session.commit()
            return doctor.id

    def doctor_id_for_user(self, user_id):
        with self.app.app_context():
            return Doctor.query.filter_by(user_id=user_id).first().id

    def patient(self, name='Test Patient', risk_level='low', user_id=None, baseline=True):
        with self.app.app_context():
            patient = Patient(name=name, age=40, gender='Female', village='Rajpur',
                              symptoms='Cough', vitals='BP 120/80', risk_level=risk_level, user_id=user_id)
            if baseline:
                ensure_vitals_baseline(patient)
            db.session.add(patient)
            db.session.commit()
            return patient.id

    def slot(self, doctor_id, date='2030-01-15', start_time='09:00', end_time='09:30'):
        with self.app.app_context():
            slot = AvailabilitySlot(doctor_id=doctor_id, date=date, start_time=start_time,
                                    end_time=end_time, is_booked=False)
            db.session.add(slot)
            db.session.commit()
            return slot.id

    def medicine(self, medicine_id='med_test', stock=10):
        with self.app.app_context():
            db.session.add(Medicine(id=medicine_id, name='Testamol', category='Analgesic',
                                    strength='500mg', price=4.5, stock_quantity=stock))
            db.session.commit()
            return medicine_id

    def is_booked(self, slot_id):
        with self.app.app_context():
            return db.session.get(AvailabilitySlot, slot_id).is_booked


@pytest.fixture
def factory(app):
    return Factory(app)
