"""Initial prospecting schema

Revision ID: 001_initial_prospecting_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001_initial_prospecting_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    """
    Create the prospecting tables.

    Creates:
    1. company and contact, both owned by a user_id
    2. contact_feedback, an append-only rating log
    3. search_approach, the global search strategies
    """
    op.create_table(
        'company',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('website', sa.String(500), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('industry', sa.String(100), nullable=True),
        sa.Column('services', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('size', sa.Integer(), nullable=True),
        sa.Column('default_contact_email', sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_company_user_id', 'company', ['user_id'])
    op.create_index('ix_company_user_name', 'company', ['user_id', 'name'])

    op.create_table(
        'contact',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            'company_id',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('company.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('role', sa.String(255), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('alternative_emails', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('probability', sa.Integer(), nullable=True),
        sa.Column('name_confidence_score', sa.Integer(), nullable=True),
        sa.Column('user_feedback_score', sa.Integer(), nullable=True),
        sa.Column('feedback_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('completed_searches', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('linkedin_url', sa.String(500), nullable=True),
        sa.Column('phone_number', sa.String(50), nullable=True),
        sa.Column('department', sa.String(100), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('verification_source', sa.String(100), nullable=True),
        sa.Column('last_validated', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_enriched', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_contact_user_id', 'contact', ['user_id'])
    op.create_index('ix_contact_user_company', 'contact', ['user_id', 'company_id'])
    op.create_index('ix_contact_email', 'contact', ['email'])

    op.create_table(
        'contact_feedback',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            'contact_id',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('contact.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('feedback_type', sa.String(20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint(
            "feedback_type IN ('excellent', 'ok', 'terrible')",
            name='ck_contact_feedback_type',
        ),
    )
    op.create_index('ix_contact_feedback_contact_id', 'contact_feedback', ['contact_id'])

    op.create_table(
        'search_approach',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('prompt', sa.Text(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('config', postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('technical_prompt', sa.Text(), nullable=True),
        sa.Column('response_structure', sa.Text(), nullable=True),
        sa.Column('module_type', sa.String(50), nullable=False, server_default='company_overview'),
        sa.Column('validation_rules', postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table('search_approach')
    op.drop_index('ix_contact_feedback_contact_id', table_name='contact_feedback')
    op.drop_table('contact_feedback')
    op.drop_index('ix_contact_email', table_name='contact')
    op.drop_index('ix_contact_user_company', table_name='contact')
    op.drop_index('ix_contact_user_id', table_name='contact')
    op.drop_table('contact')
    op.drop_index('ix_company_user_name', table_name='company')
    op.drop_index('ix_company_user_id', table_name='company')
    op.drop_table('company')
