"""Initial schema: cases, phones, kiosk phones, users, kiosk managers

Revision ID: 001_initial
Revises:
Create Date: 2026-10-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'cases',
        sa.Column('uid', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('nric', sa.String(length=9), nullable=True),
        sa.Column('subject', sa.String(length=80), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('language', sa.String(length=80), nullable=False),
        sa.Column('status', sa.Enum('open', 'processing', 'closed', 'completed', name='casestatus'), nullable=False),
        sa.Column('category', sa.Enum('normal', 'welfare', 'minister', name='casecategory'), nullable=False),
        sa.Column('assignee', sa.String(length=36), nullable=True),
        sa.Column('location', sa.String(length=200), nullable=False),
        sa.Column('queue_no', sa.Integer(), nullable=False),
        sa.Column('ref_id', sa.String(length=100), nullable=False),
        sa.Column('whatsapp_call', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('uid'),
    )
    op.create_index(op.f('ix_cases_uid'), 'cases', ['uid'], unique=False)
    op.create_index(op.f('ix_cases_user_id'), 'cases', ['user_id'], unique=False)
    op.create_index(op.f('ix_cases_status'), 'cases', ['status'], unique=False)
    op.create_index(op.f('ix_cases_category'), 'cases', ['category'], unique=False)
    op.create_index(op.f('ix_cases_location'), 'cases', ['location'], unique=False)
    op.create_index(op.f('ix_cases_created_at'), 'cases', ['created_at'], unique=False)

    for table in ('phones', 'kiosk_phones'):
        op.create_table(
            table,
            sa.Column('id', sa.String(length=32), nullable=False),
            sa.Column('country_code', sa.String(length=2), nullable=False),
            sa.Column('number', sa.String(length=8), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('number'),
            sa.UniqueConstraint('country_code', 'number', name=f'uq_{table}_country_number'),
        )

    op.create_table(
        'users',
        sa.Column('uid', sa.String(length=36), nullable=False),
        sa.Column('nric', sa.String(length=9), nullable=True),
        sa.Column('name', sa.String(length=80), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('dob', sa.Date(), nullable=True),
        sa.Column('race', sa.String(length=20), nullable=False),
        sa.Column('gender', sa.String(length=10), nullable=False),
        sa.Column('marital_status', sa.String(length=20), nullable=False),
        sa.Column('occupation', sa.String(length=80), nullable=False),
        sa.Column('no_of_children', sa.Integer(), nullable=True),
        sa.Column('phone_id', sa.String(length=32), nullable=False),
        sa.Column('postal_code', sa.String(length=6), nullable=True),
        sa.Column('block_hse_no', sa.String(length=10), nullable=False),
        sa.Column('floor_no', sa.String(length=5), nullable=True),
        sa.Column('unit_no', sa.String(length=5), nullable=True),
        sa.Column('address', sa.String(length=200), nullable=False),
        sa.Column('flat_type', sa.String(length=40), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('uid'),
        sa.UniqueConstraint('email'),
    )
    op.create_index(op.f('ix_users_uid'), 'users', ['uid'], unique=False)
    op.create_index(op.f('ix_users_phone_id'), 'users', ['phone_id'], unique=True)

    op.create_table(
        'kiosk_managers',
        sa.Column('uid', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('first_name', sa.String(length=80), nullable=False),
        sa.Column('last_name', sa.String(length=80), nullable=False),
        sa.Column('kiosk_phone_id', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('uid'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('kiosk_phone_id'),
    )
    op.create_index(op.f('ix_kiosk_managers_uid'), 'kiosk_managers', ['uid'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_kiosk_managers_uid'), table_name='kiosk_managers')
    op.drop_table('kiosk_managers')
    op.drop_index(op.f('ix_users_phone_id'), table_name='users')
    op.drop_index(op.f('ix_users_uid'), table_name='users')
    op.drop_table('users')
    op.drop_table('kiosk_phones')
    op.drop_table('phones')
    for column in ('created_at', 'location', 'category', 'status', 'user_id', 'uid'):
        op.drop_index(op.f(f'ix_cases_{column}'), table_name='cases')
    op.drop_table('cases')

    # PostgreSQL only; SQLite ignores
    sa.Enum(name='casecategory').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='casestatus').drop(op.get_bind(), checkfirst=True)
