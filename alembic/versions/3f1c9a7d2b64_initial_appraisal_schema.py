"""initial appraisal schema

Revision ID: 3f1c9a7d2b64
Revises: 
Create Date: 2026-10-16 23:40:12.118402

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b64'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('additional_roles', sa.JSON(), nullable=False),
        sa.Column('job_category', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'appraiser_assignments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('appraisee_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('appraiser_id', sa.String(36), nullable=False),
        sa.Column('role', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_appraiser_assignments_id', 'appraiser_assignments', ['id'])
    op.create_index('ix_appraiser_assignments_appraisee_id', 'appraiser_assignments', ['appraisee_id'])
    op.create_index('ix_appraiser_assignments_appraiser_id', 'appraiser_assignments', ['appraiser_id'])

    op.create_table(
        'appraisals',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('appraiser_id', sa.String(36), nullable=False),
        sa.Column('appraisee_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='DRAFT'),
        sa.Column('appraisal_data', sa.JSON(), nullable=False),
        sa.Column('overall_score', sa.Float(), nullable=False, server_default='0'),
        sa.Column('deletion_requested', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deletion_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_appraisals_appraiser_id', 'appraisals', ['appraiser_id'])
    op.create_index('ix_appraisals_appraisee_id', 'appraisals', ['appraisee_id'])


def downgrade() -> None:
    op.drop_table('appraisals')
    op.drop_table('appraiser_assignments')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
