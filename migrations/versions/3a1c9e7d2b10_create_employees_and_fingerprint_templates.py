"""create employees and fingerprint templates

Revision ID: 3a1c9e7d2b10
Revises:
Create Date: 2026-10-19 09:12:44.118203
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '3a1c9e7d2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

template_format = sa.Enum('ISO_19794_2', 'ISO_19794_4', 'ANSI_378', 'PROPRIETARY', name='templateformat')
template_status = sa.Enum('ACTIVE', 'REVOKED', 'EXPIRED', name='templatestatus')

ACTIVE_ONLY = sa.text("status = 'ACTIVE'")
ACTIVE_FINGER_SLOT = sa.text("status = 'ACTIVE' AND finger_index IS NOT NULL")


def upgrade() -> None:
    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('job_role', sa.String(length=100)),
        sa.Column('department', sa.String(length=100)),
        sa.Column('fingerprint_template', sa.Text()),
        sa.Column('is_active', sa.Boolean()),
        sa.Column('created_by', sa.String(length=100)),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_employees_id', 'employees', ['id'])
    op.create_index('ix_employees_employee_id', 'employees', ['employee_id'], unique=True)

    op.create_table(
        'fingerprint_templates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_ref', sa.Integer(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('employee_id', sa.String(length=50), nullable=False),
        sa.Column('finger_index', sa.Integer()),
        sa.Column('finger_name', sa.String(length=20), nullable=False),
        sa.Column('format', template_format, nullable=False),
        sa.Column('encrypted_payload', sa.LargeBinary(), nullable=False),
        sa.Column('content_hash', sa.String(length=64), nullable=False),
        sa.Column('quality', sa.Integer()),
        sa.Column('device_vendor', sa.String(length=100)),
        sa.Column('device_model', sa.String(length=100)),
        sa.Column('device_serial', sa.String(length=100)),
        sa.Column('device_service_version', sa.String(length=50)),
        sa.Column('status', template_status, nullable=False),
        sa.Column('enrolled_by', sa.String(length=100), nullable=False),
        sa.Column('enrolled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('revoked_by', sa.String(length=100)),
        sa.Column('revoked_at', sa.DateTime(timezone=True)),
        sa.Column('revoke_reason', sa.String(length=500)),
        sa.Column('expired_at', sa.DateTime(timezone=True)),
        sa.Column('last_verified_at', sa.DateTime(timezone=True)),
        sa.Column('verification_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_fingerprint_templates_id', 'fingerprint_templates', ['id'])
    op.create_index('ix_fingerprint_templates_employee_ref', 'fingerprint_templates', ['employee_ref'])
    op.create_index('ix_fingerprint_templates_employee_id', 'fingerprint_templates', ['employee_id'])
    op.create_index('ix_fingerprint_templates_content_hash', 'fingerprint_templates', ['content_hash'])
    op.create_index('ix_fingerprint_templates_status', 'fingerprint_templates', ['status'])
    op.create_index('ix_fingerprint_templates_enrolled_at', 'fingerprint_templates', ['enrolled_at'])
    op.create_index('ix_fingerprint_employee_status', 'fingerprint_templates', ['employee_id', 'status'])

    # Storage-level guarantees for deduplication; application pre-checks are not race safe
    op.create_index(
        'uq_fingerprint_active_hash', 'fingerprint_templates', ['content_hash'], unique=True,
        postgresql_where=ACTIVE_ONLY, sqlite_where=ACTIVE_ONLY
    )
    op.create_index(
        'uq_fingerprint_active_finger', 'fingerprint_templates', ['employee_ref', 'finger_index'], unique=True,
        postgresql_where=ACTIVE_FINGER_SLOT, sqlite_where=ACTIVE_FINGER_SLOT
    )
    print("✓ [3a1c9e7d2b10] Created employees and fingerprint_templates")


def downgrade() -> None:
    op.drop_table('fingerprint_templates')
    op.drop_table('employees')
    template_status.drop(op.get_bind(), checkfirst=True)
    template_format.drop(op.get_bind(), checkfirst=True)
