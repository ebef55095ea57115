"""create user, statement and guess tables

Revision ID: 3b7c1d2e9f10
Revises:
Create Date: 2026-10-18 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b7c1d2e9f10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('username', sa.String(length=128), nullable=False),
        sa.Column('total_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'statement',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('is_lie', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('statement') as batch_op:
        batch_op.create_index(batch_op.f('ix_statement_user_id'), ['user_id'], unique=False)

    op.create_table(
        'guess',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('statement_id', sa.String(length=32), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        sa.Column('points_earned', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['statement_id'], ['statement.id']),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('guess') as batch_op:
        batch_op.create_index(batch_op.f('ix_guess_user_id'), ['user_id'], unique=False)


def downgrade():
    with op.batch_alter_table('guess') as batch_op:
        batch_op.drop_index(batch_op.f('ix_guess_user_id'))
    op.drop_table('guess')
    with op.batch_alter_table('statement') as batch_op:
        batch_op.drop_index(batch_op.f('ix_statement_user_id'))
    op.drop_table('statement')
    op.drop_table('user')
