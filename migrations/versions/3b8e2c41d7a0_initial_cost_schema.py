"""Initial cost schema: catalog, recipes, purchases, settings

Revision ID: 3b8e2c41d7a0
Revises:
Create Date: 2026-10-19 09:12:44.508113

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b8e2c41d7a0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'category',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('color', sa.String(length=7), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_category_name', 'category', ['name'], unique=True)

    op.create_table(
        'supplier',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('contact', sa.String(length=100), nullable=True),
        sa.Column('email', sa.String(length=100), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('address', sa.String(length=200), nullable=True),
        sa.Column('cnpj', sa.String(length=18), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_supplier_name', 'supplier', ['name'])

    op.create_table(
        'product',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('internal_code', sa.String(length=50), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('supplier_id', sa.Integer(), nullable=True),
        sa.Column('unit', sa.String(length=10), nullable=False),
        sa.Column('unit_price', sa.Numeric(precision=12, scale=4), nullable=False),
        sa.Column('average_cost', sa.Numeric(precision=12, scale=4), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['category_id'], ['category.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['supplier_id'], ['supplier.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_product_name', 'product', ['name'])
    op.create_index('ix_product_category_id', 'product', ['category_id'])
    op.create_index('ix_product_supplier_id', 'product', ['supplier_id'])
    op.create_index('ix_product_active', 'product', ['active'])

    op.create_table(
        'recipe',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=50), nullable=True),
        sa.Column('prep_time', sa.Integer(), nullable=True),
        sa.Column('portions', sa.Integer(), nullable=False),
        sa.Column('desired_margin', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('suggested_sale_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('total_cost', sa.Numeric(precision=12, scale=4), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_recipe_name', 'recipe', ['name'])
    op.create_index('ix_recipe_category', 'recipe', ['category'])
    op.create_index('ix_recipe_active', 'recipe', ['active'])

    op.create_table(
        'recipe_ingredient',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipe_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=12, scale=4), nullable=False),
        sa.Column('unit', sa.String(length=10), nullable=False),
        sa.Column('note', sa.String(length=500), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipe.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['product.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_recipe_ingredient_recipe_id', 'recipe_ingredient', ['recipe_id'])
    op.create_index('ix_recipe_ingredient_product_id', 'recipe_ingredient', ['product_id'])

    op.create_table(
        'purchase',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('supplier_id', sa.Integer(), nullable=True),
        sa.Column('purchase_date', sa.Date(), nullable=False),
        sa.Column('invoice_number', sa.String(length=50), nullable=True),
        sa.Column('total_value', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('discount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('taxes', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['supplier_id'], ['supplier.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_purchase_supplier_id', 'purchase', ['supplier_id'])
    op.create_index('ix_purchase_purchase_date', 'purchase', ['purchase_date'])

    op.create_table(
        'purchase_item',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('purchase_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=12, scale=4), nullable=False),
        sa.Column('unit_price', sa.Numeric(precision=12, scale=4), nullable=False),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=4), nullable=False),
        sa.ForeignKeyConstraint(['purchase_id'], ['purchase.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['product.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_purchase_item_purchase_id', 'purchase_item', ['purchase_id'])
    op.create_index('ix_purchase_item_product_id', 'purchase_item', ['product_id'])

    op.create_table(
        'settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=50), nullable=False),
        sa.Column('value', sa.String(length=200), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('key'),
    )


def downgrade():
    op.drop_table('settings')
    op.drop_index('ix_purchase_item_product_id', table_name='purchase_item')
    op.drop_index('ix_purchase_item_purchase_id', table_name='purchase_item')
    op.drop_table('purchase_item')
    op.drop_index('ix_purchase_purchase_date', table_name='purchase')
    op.drop_index('ix_purchase_supplier_id', table_name='purchase')
    op.drop_table('purchase')
    op.drop_index('ix_recipe_ingredient_product_id', table_name='recipe_ingredient')
    op.drop_index('ix_recipe_ingredient_recipe_id', table_name='recipe_ingredient')
    op.drop_table('recipe_ingredient')
    op.drop_index('ix_recipe_active', table_name='recipe')
    op.drop_index('ix_recipe_category', table_name='recipe')
    op.drop_index('ix_recipe_name', table_name='recipe')
    op.drop_table('recipe')
    op.drop_index('ix_product_active', table_name='product')
    op.drop_index('ix_product_supplier_id', table_name='product')
    op.drop_index('ix_product_category_id', table_name='product')
    op.drop_index('ix_product_name', table_name='product')
    op.drop_table('product')
    op.drop_index('ix_supplier_name', table_name='supplier')
    op.drop_table('supplier')
    op.drop_index('ix_category_name', table_name='category')
    op.drop_table('category')
