"""
Create visits, conversessions, questions and applications tables

Revision ID: 20261019
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
revision = '20261019'  # initial_schema
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade():
    op.create_table(
        'visits',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('ip_address', sa.String(64), nullable=False),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('origin', sa.String(512), nullable=True),
        sa.Column('country', sa.String(100), nullable=False, server_default='Unknown'),
        sa.Column('city', sa.String(100), nullable=False, server_default='Unknown'),
        sa.Column('region', sa.String(100), nullable=False, server_default='Unknown'),
        sa.Column('isp', sa.String(255), nullable=False, server_default='Unknown'),
        sa.Column('visit_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('first_seen', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('last_seen', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    # Unique index is the conflict target for the visit upsert
    op.create_index('ix_visits_ip_address', 'visits', ['ip_address'], unique=True)

    op.create_table(
        'conversessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('session_id', sa.String(128), nullable=False),
        sa.Column('prompt', sa.Text(), nullable=False),
        sa.Column('response', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_conversessions_session_id', 'conversessions', ['session_id'])
    op.create_index('idx_conversessions_session_id_timestamp', 'conversessions', ['session_id', 'timestamp'])

    op.create_table(
        'questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('correct_answer', sa.String(512), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='NOT_ATTEMPTED'),
        sa.Column('selected_answers', sa.String(512), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'applications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hr_name', sa.String(255), nullable=False),
        sa.Column('organization', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=False),
        sa.Column('role', sa.String(255), nullable=False),
        sa.Column('salary', sa.String(100), nullable=False, server_default=''),
        sa.Column('seen', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('respond', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('seen_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('respond_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade():
    op.drop_table('applications')
    op.drop_table('questions')
    op.drop_index('idx_conversessions_session_id_timestamp', 'conversessions')
    op.drop_index('ix_conversessions_session_id', 'conversessions')
    op.drop_table('conversessions')
    op.drop_index('ix_visits_ip_address', 'visits')
    op.drop_table('visits')
