"""Product stock: current and minimum stock, expiry date

Revision ID: 7c1d9e5f2a64
Revises: 3b8e2c41d7a0
Create Date: 2026-10-26 14:03:17.224901

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '7c1d9e5f2a64'
down_revision = '3b8e2c41d7a0'
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table('product', schema=None) as batch_op:
        batch_op.add_column(sa.Column('current_stock', sa.Numeric(precision=12, scale=4),
                                      nullable=False, server_default='0'))
        batch_op.add_column(sa.Column('minimum_stock', sa.Numeric(precision=12, scale=4),
                                      nullable=False, server_default='0'))
        batch_op.add_column(sa.Column('expiry_date', sa.Date(), nullable=True))


def downgrade():
    with op.batch_alter_table('product', schema=None) as batch_op:
        batch_op.drop_column('expiry_date')
        batch_op.drop_column('minimum_stock')
        batch_op.drop_column('current_stock')
