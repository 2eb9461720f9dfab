"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-05-20 09:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("role IN ('admin', 'doctor', 'patient', 'pharmacy')", name='ck_users_role'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'doctors',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('specialization', sa.String(length=120), nullable=False),
    )

    op.create_table(
        'patients',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('village', sa.String(length=120), nullable=True),
        sa.Column('symptoms', sa.Text(), nullable=True),
        sa.Column('vitals', sa.Text(), nullable=True),
        sa.Column('risk_level', sa.String(length=10), nullable=False, server_default='low'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("risk_level IN ('low', 'medium', 'high')", name='ck_patients_risk_level'),
    )
    op.create_index('ix_patients_user_id', 'patients', ['user_id'])

    op.create_table(
        'patient_vitals',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('patient_id', sa.Integer(), sa.ForeignKey('patients.id', ondelete='CASCADE'), nullable=False),
        sa.Column('heart_rate', sa.Integer(), nullable=False, server_default='75'),
        sa.Column('spo2', sa.Integer(), nullable=False, server_default='97'),
        sa.Column('glucose', sa.Integer(), nullable=False, server_default='100'),
        sa.UniqueConstraint('patient_id', name='uq_patient_vitals_patient_id'),
    )

    op.create_table(
        'consultation_notes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('patient_id', sa.Integer(), sa.ForeignKey('patients.id', ondelete='CASCADE'), nullable=False),
        sa.Column('raw_note', sa.Text(), nullable=False),
        sa.Column('structured_summary', sa.Text(), nullable=True),
        sa.Column('follow_up_days', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_consultation_notes_patient_id', 'consultation_notes', ['patient_id'])

    op.create_table(
        'doctor_availability',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('doctor_id', sa.Integer(), sa.ForeignKey('doctors.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.String(length=10), nullable=False),
        sa.Column('start_time', sa.String(length=5), nullable=False),
        sa.Column('end_time', sa.String(length=5), nullable=False),
        sa.Column('is_booked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint('doctor_id', 'date', 'start_time', name='uq_doctor_availability_start'),
    )
    op.create_index('ix_doctor_availability_doctor_id', 'doctor_availability', ['doctor_id'])

    op.create_table(
        'appointments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('patient_id', sa.Integer(), sa.ForeignKey('patients.id', ondelete='CASCADE'), nullable=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=True),
        sa.Column('doctor_id', sa.Integer(), sa.ForeignKey('doctors.id', ondelete='CASCADE'), nullable=False),
        sa.Column('availability_id', sa.Integer(),
                  sa.ForeignKey('doctor_availability.id', ondelete='SET NULL'), nullable=True),
        sa.Column('date', sa.String(length=32), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='scheduled'),
        sa.CheckConstraint("status IN ('scheduled', 'completed')", name='ck_appointments_status'),
        sa.UniqueConstraint('availability_id', name='uq_appointments_availability_id'),
    )
    op.create_index('ix_appointments_patient_id', 'appointments', ['patient_id'])
    op.create_index('ix_appointments_user_id', 'appointments', ['user_id'])
    op.create_index('ix_appointments_doctor_id', 'appointments', ['doctor_id'])

    op.create_table(
        'medicines',
        sa.Column('id', sa.String(length=50), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('category', sa.String(length=80), nullable=False),
        sa.Column('strength', sa.String(length=40), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('stock_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.CheckConstraint('stock_quantity >= 0', name='ck_medicines_stock_non_negative'),
    )

    op.create_table(
        'prescriptions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('patient_id', sa.Integer(), sa.ForeignKey('patients.id', ondelete='CASCADE'), nullable=False),
        sa.Column('doctor_id', sa.Integer(), sa.ForeignKey('doctors.id', ondelete='CASCADE'), nullable=False),
        sa.Column('medicine_id', sa.String(length=50), sa.ForeignKey('medicines.id'), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('dispensed_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("status IN ('pending', 'dispensed')", name='ck_prescriptions_status'),
    )
    op.create_index('ix_prescriptions_patient_id', 'prescriptions', ['patient_id'])


def downgrade():
    op.drop_index('ix_prescriptions_patient_id', table_name='prescriptions')
    op.drop_table('prescriptions')
    op.drop_table('medicines')
    op.drop_index('ix_appointments_doctor_id', table_name='appointments')
    op.drop_index('ix_appointments_user_id', table_name='appointments')
    op.drop_index('ix_appointments_patient_id', table_name='appointments')
    op.drop_table('appointments')
    op.drop_index('ix_doctor_availability_doctor_id', table_name='doctor_availability')
    op.drop_table('doctor_availability')
    op.drop_index('ix_consultation_notes_patient_id', table_name='consultation_notes')
    op.drop_table('consultation_notes')
    op.drop_table('patient_vitals')
    op.drop_index('ix_patients_user_id', table_name='patients')
    op.drop_table('patients')
    op.drop_table('doctors')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
