"""link doctors to their login accounts

Adds doctors.user_id in place (no table rebuild) with a unique index, and
backfills it once for doctors whose name matches exactly one doctor-role
user while no other doctor row shares that name.

Revision ID: 0002_doctor_user_link
Revises: 0001_initial_schema
Create Date: 2025-06-02 10:30:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0002_doctor_user_link'
down_revision = '0001_initial_schema'
branch_labels = None
depends_on = None


def upgrade():
    op.add_column('doctors', sa.Column('user_id', sa.Integer(), nullable=True))
    op.create_index('ix_doctors_user_id', 'doctors', ['user_id'], unique=True)

    bind = op.get_bind()
    # SQLite cannot add a constraint to an existing table without a rebuild
    if bind.dialect.name != 'sqlite':
        op.create_foreign_key('fk_doctors_user_id_users', 'doctors', 'users',
                              ['user_id'], ['id'], ondelete='SET NULL')

    bind.execute(sa.text("""
        UPDATE doctors
           SET user_id = (SELECT u.id FROM users u
                           WHERE u.role = 'doctor' AND u.name = doctors.name)
         WHERE user_id IS NULL
           AND (SELECT COUNT(*) FROM users u
                 WHERE u.role = 'doctor' AND u.name = doctors.name) = 1
           AND (SELECT COUNT(*) FROM doctors d2 WHERE d2.name = doctors.name) = 1
    """))


def downgrade():
    bind = op.get_bind()
    if bind.dialect.name != 'sqlite':
        op.drop_constraint('fk_doctors_user_id_users', 'doctors', type_='foreignkey')
    op.drop_index('ix_doctors_user_id', table_name='doctors')
    with op.batch_alter_table('doctors') as batch_op:
        batch_op.drop_column('user_id')
