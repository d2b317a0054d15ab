"""create finance tables

Revision ID: 5c1e0a7d2b94
Revises:
Create Date: 2025-10-02 18:41:07.120533

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel

# revision identifiers, used by Alembic.
revision: str = '5c1e0a7d2b94'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema: user, transaction, budget, recurring_transaction, receipt."""
    op.create_table(
        'user',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('hashed_password', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_user_email', 'user', ['email'], unique=True)

    op.create_table(
        'transaction',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('category', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('cost', sa.Float(), nullable=False),
        sa.Column('added_on', sa.DateTime(), nullable=False),
        sa.Column('is_income', sa.Boolean(), nullable=False),
        sa.Column('note', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), server_default=sa.false(), nullable=False),
    )
    op.create_index('ix_transaction_user_id', 'transaction', ['user_id'])
    op.create_index('ix_transaction_category', 'transaction', ['category'])
    op.create_index('ix_transaction_added_on', 'transaction', ['added_on'])
    op.create_index('ix_transaction_is_deleted', 'transaction', ['is_deleted'])

    op.create_table(
        'budget',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('category', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
    )
    op.create_index('ix_budget_user_id', 'budget', ['user_id'])

    op.create_table(
        'recurring_transaction',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('category', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('is_income', sa.Boolean(), nullable=False),
        sa.Column('frequency', sa.Enum('daily', 'weekly', 'monthly', 'annually', name='frequency'), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('next_due_date', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_recurring_transaction_user_id', 'recurring_transaction', ['user_id'])
    op.create_index('ix_recurring_transaction_next_due_date', 'recurring_transaction', ['next_due_date'])

    op.create_table(
        'receipt',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('file_url', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('merchant', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('category', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_receipt_user_id', 'receipt', ['user_id'])


def downgrade() -> None:
    """Downgrade schema: drop all finance tables."""
    op.drop_table('receipt')
    op.drop_table('recurring_transaction')
    sa.Enum(name='frequency').drop(op.get_bind(), checkfirst=True)
    op.drop_table('budget')
    op.drop_table('transaction')
    op.drop_table('user')
