"""add employee contact fields

Revision ID: 7d4e2f8a9c31
Revises: 3a1c9e7d2b10
Create Date: 2026-10-19 14:03:27.501922
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '7d4e2f8a9c31'
down_revision: Union[str, None] = '3a1c9e7d2b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('employees', sa.Column('phone', sa.String(length=20), nullable=True))
    op.add_column('employees', sa.Column('email', sa.String(length=255), nullable=True))
    op.create_index('ix_employees_department', 'employees', ['department'])
    print("✓ [7d4e2f8a9c31] Added phone, email and department index to employees")


def downgrade() -> None:
    op.drop_index('ix_employees_department', table_name='employees')
    op.drop_column('employees', 'email')
    op.drop_column('employees', 'phone')
