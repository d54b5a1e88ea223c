"""analytics schema

Revision ID: 3f1c9a7d2e41
Revises: 
Create Date: 2026-10-19 10:12:44.208113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2e41'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True, index=True),
        sa.Column('email', sa.String(), nullable=False, unique=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('job_title', sa.String(), nullable=True),
        sa.Column('seniority', sa.String(), nullable=True),
        sa.Column('business_unit', sa.String(), nullable=True),
        sa.Column('career_track', sa.String(), nullable=True),
        sa.Column('manager_id', sa.String(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('mentor_id', sa.String(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('roles', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'criteria',
        sa.Column('id', sa.String(), primary_key=True, index=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('pillar', sa.String(), nullable=False),
        sa.Column('is_required', sa.Boolean(), nullable=True),
    )

    # Self assessments are authored by the evaluated collaborator
    op.create_table(
        'self_assessments',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('author_id', sa.String(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('cycle', sa.String(), nullable=False, index=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('author_id', 'cycle', name='uq_self_author_cycle'),
    )
    op.create_table(
        'self_assessment_answers',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('self_assessment_id', sa.Integer(), sa.ForeignKey('self_assessments.id'), nullable=False),
        sa.Column('criterion_id', sa.String(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('justification', sa.Text(), nullable=True),
    )
    op.create_table(
        'manager_assessments',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('author_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('evaluated_user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('cycle', sa.String(), nullable=False, index=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('author_id', 'evaluated_user_id', 'cycle', name='uq_manager_author_evaluated_cycle'),
    )
    op.create_table(
        'manager_assessment_answers',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('manager_assessment_id', sa.Integer(), sa.ForeignKey('manager_assessments.id'), nullable=False),
        sa.Column('criterion_id', sa.String(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('justification', sa.Text(), nullable=True),
    )
    op.create_table(
        'committee_assessments',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('author_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('evaluated_user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('cycle', sa.String(), nullable=False, index=True),
        sa.Column('final_score', sa.Float(), nullable=False),
        sa.Column('justification', sa.Text(), nullable=True),
        sa.Column('observations', sa.Text(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('evaluated_user_id', 'cycle', name='uq_committee_evaluated_cycle'),
    )
    op.create_table(
        'assessments_360',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('author_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('evaluated_user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('cycle', sa.String(), nullable=False, index=True),
        sa.Column('overall_score', sa.Float(), nullable=True),
        sa.Column('strengths', sa.Text(), nullable=True),
        sa.Column('improvements', sa.Text(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table('assessments_360')
    op.drop_table('committee_assessments')
    op.drop_table('manager_assessment_answers')
    op.drop_table('manager_assessments')
    op.drop_table('self_assessment_answers')
    op.drop_table('self_assessments')
    op.drop_table('criteria')
    op.drop_table('users')
