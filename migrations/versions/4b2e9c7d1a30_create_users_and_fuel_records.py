"""Create users and fuel_records tables

Revision ID: 4b2e9c7d1a30
Revises:
Create Date: 2026-10-18 10:12:41.503217

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4b2e9c7d1a30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Tables may already exist from db.create_all() on first start
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    tables = inspector.get_table_names()

    if 'users' not in tables:
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('email', sa.String(length=120), nullable=False),
            sa.Column('password_hash', sa.String(length=255), nullable=False),
            sa.Column('name', sa.String(length=100), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('last_login', sa.DateTime(), nullable=True),
            sa.Column('failed_login_attempts', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('locked_until', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    if 'fuel_records' not in tables:
        op.create_table('fuel_records',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('date', sa.Date(), nullable=False),
            sa.Column('amount', sa.Float(), nullable=False),
            sa.Column('cost', sa.Integer(), nullable=False),
            sa.Column('mileage', sa.Float(), nullable=False),
            sa.Column('station', sa.String(length=50), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        with op.batch_alter_table('fuel_records', schema=None) as batch_op:
            batch_op.create_index(batch_op.f('ix_fuel_records_user_id'), ['user_id'], unique=False)
            batch_op.create_index(batch_op.f('ix_fuel_records_date'), ['date'], unique=False)


def downgrade():
    with op.batch_alter_table('fuel_records', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_fuel_records_date'))
        batch_op.drop_index(batch_op.f('ix_fuel_records_user_id'))
    op.drop_table('fuel_records')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
