# ruralcare_app_pkg/store.py
# Store lifecycle: open -> migrate -> seed if empty -> ready.

import sqlite3

import click
from flask import current_app
from flask_migrate import upgrade
from sqlalchemy import event
from sqlalchemy.engine import Engine

from . import db, MIGRATIONS_DIR
from .models import User, Doctor, Patient, Medicine
from .vitals.services import ensure_vitals_baseline


@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ships with foreign key enforcement off; turn it on per connection."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


DEFAULT_DOCTORS = [
    ('Dr. Priya Sharma', 'General Medicine'),
    ('Dr. Ravi Kumar', 'Pediatrics'),
    ('Dr. Anita Patel', 'Obstetrics & Gynecology'),
    ('Dr. Suresh Rao', 'Emergency Medicine'),
]

DEFAULT_PATIENTS = [
    ('Ramesh Kumar', 45, 'Male', 'Khandwa', 'Chest pain, shortness of breath', 'BP: 160/100, HR: 92, Temp: 98.6F', 'high'),
    ('Sunita Devi', 32, 'Female', 'Bharatpur', 'Fever, cough for 3 days', 'BP: 110/70, HR: 80, Temp: 101.2F', 'medium'),
    ('Arjun Singh', 8, 'Male', 'Rajpur', 'Stomach ache, vomiting', 'BP: 100/65, HR: 88, Temp: 100.4F', 'medium'),
    ('Meena Bai', 60, 'Female', 'Khandwa', 'Joint pain, swelling in knees', 'BP: 130/85, HR: 74, Temp: 98.4F', 'low'),
    ('Vijay Yadav', 28, 'Male', 'Nandpur', 'Minor cut on hand', 'BP: 118/76, HR: 70, Temp: 98.6F', 'low'),
]

DEFAULT_MEDICINES = [
    ('med_amox', 'Amoxicillin', 'Antibiotic', '500mg', 12.50, 100),
    ('med_para', 'Paracetamol', 'Analgesic', '500mg', 5.00, 500),
    ('med_ibu', 'Ibuprofen', 'NSAID', '400mg', 8.50, 200),
    ('med_met', 'Metformin', 'Antidiabetic', '500mg', 15.00, 150),
    ('med_azith', 'Azithromycin', 'Antibiotic', '250mg', 25.00, 50),
    ('med_amlod', 'Amlodipine', 'Antihypertensive', '5mg', 18.00, 120),
    ('med_cet', 'Cetirizine', 'Antihistamine', '10mg', 6.50, 300),
    ('med_pant', 'Pantoprazole', 'Antacid', '40mg', 14.00, 80),
]

DEFAULT_ACCOUNTS = [
    # (name, email, password, role)
    ('Super Admin', 'admin@ruralcare.com', 'Admin@1234', 'admin'),
    ('Village Pharmacy', 'pharmacy@ruralcare.com', 'Pharmacy@1234', 'pharmacy'),
]


def seed_defaults():
    """Seeds each group of reference data only when its table (or role) is empty. Idempotent."""
    logger = current_app.logger
    try:
        if Doctor.query.count() == 0:
            db.session.add_all([Doctor(name=n, specialization=s) for n, s in DEFAULT_DOCTORS])
            logger.info("Seeded default doctors.")

        if Patient.query.count() == 0:
            for name, age, gender, village, symptoms, vitals, risk in DEFAULT_PATIENTS:
                patient = Patient(name=name, age=age, gender=gender, village=village,
                                  symptoms=symptoms, vitals=vitals, risk_level=risk)
                ensure_vitals_baseline(patient)
                db.session.add(patient)
            logger.info("Seeded sample patients with vitals baselines.")

        for name, email, password, role in DEFAULT_ACCOUNTS:
            if User.query.filter_by(role=role).count() == 0:
                account = User(name=name, email=email, role=role)
                account.set_password(password)
                db.session.add(account)
                logger.info(f"Seeded default {role} account: {email}")

        if Medicine.query.count() == 0:
            db.session.add_all([
                Medicine(id=mid, name=name, category=category, strength=strength, price=price, stock_quantity=stock)
                for mid, name, category, strength, price, stock in DEFAULT_MEDICINES
            ])
            logger.info("Seeded default medicines.")

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def init_store(app):
    """Applies pending migrations and seeds empty tables, as configured."""
    with app.app_context():
        if app.config.get('AUTO_MIGRATE'):
            upgrade(directory=MIGRATIONS_DIR)
            app.logger.info("Database schema is up to date.")
        if app.config.get('SEED_DEFAULTS'):
            seed_defaults()


def register_store_commands(app):
    @app.cli.command('seed')
    def seed_command():
        """Seed default doctors, patients, accounts and medicines into empty tables."""
        seed_defaults()
        click.echo("Seed data ensured.")
