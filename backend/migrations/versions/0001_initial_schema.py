"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the complete Zlagoda schema:
- employees / session_tokens: staff, credentials and bearer sessions
- categories / products: catalog
- store_products: inventory records (UPC, price, quantity, promo link)
- customer_cards: loyalty cards
- checks / sales: receipts and their lines
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ============================================================================
    # employees: staff records; email/password_hash NULL until a login is issued
    # ============================================================================
    op.create_table(
        'employees',
        sa.Column('id_employee', sa.String(length=10), nullable=False),
        sa.Column('surname', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('patronymic', sa.String(length=50), nullable=True),
        sa.Column('role', sa.String(length=10), nullable=False),
        sa.Column('salary', sa.Numeric(13, 4), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=False),
        sa.Column('date_of_start', sa.Date(), nullable=False),
        sa.Column('phone_number', sa.String(length=13), nullable=False),
        sa.Column('city', sa.String(length=50), nullable=False),
        sa.Column('street', sa.String(length=50), nullable=False),
        sa.Column('zip_code', sa.String(length=9), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id_employee'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_employees_surname', 'employees', ['surname'])
    op.create_index('ix_employees_role', 'employees', ['role'])

    op.create_table(
        'session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.String(length=10), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_used_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id_employee'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_session_tokens_employee_id', 'session_tokens', ['employee_id'])
    op.create_index('ix_session_tokens_token_hash', 'session_tokens', ['token_hash'], unique=True)

    # ============================================================================
    # categories / products: catalog
    # ============================================================================
    op.create_table(
        'categories',
        sa.Column('category_number', sa.Integer(), nullable=False),
        sa.Column('category_name', sa.String(length=50), nullable=False),
        sa.PrimaryKeyConstraint('category_number'),
        sa.UniqueConstraint('category_name'),
        sqlite_autoincrement=True,
    )

    op.create_table(
        'products',
        sa.Column('id_product', sa.Integer(), nullable=False),
        sa.Column('category_number', sa.Integer(), nullable=False),
        sa.Column('product_name', sa.String(length=50), nullable=False),
        sa.Column('producer', sa.String(length=50), nullable=False),
        sa.Column('characteristics', sa.String(length=100), nullable=True),
        sa.ForeignKeyConstraint(['category_number'], ['categories.category_number']),
        sa.PrimaryKeyConstraint('id_product'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_products_name', 'products', ['product_name'])
    op.create_index('ix_products_category_number', 'products', ['category_number'])

    # ============================================================================
    # store_products: inventory records. quantity can never go negative.
    # ============================================================================
    op.create_table(
        'store_products',
        sa.Column('upc', sa.String(length=12), nullable=False),
        sa.Column('upc_prom', sa.String(length=12), nullable=True),
        sa.Column('id_product', sa.Integer(), nullable=False),
        sa.Column('selling_price', sa.Numeric(13, 4), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('promotional_product', sa.Boolean(), nullable=False),
        sa.CheckConstraint('quantity >= 0', name='ck_store_products_quantity_non_negative'),
        sa.CheckConstraint('selling_price >= 0', name='ck_store_products_price_non_negative'),
        sa.ForeignKeyConstraint(['upc_prom'], ['store_products.upc']),
        sa.ForeignKeyConstraint(['id_product'], ['products.id_product']),
        sa.PrimaryKeyConstraint('upc'),
    )
    op.create_index('ix_store_products_promotional', 'store_products', ['promotional_product'])
    op.create_index('ix_store_products_id_product', 'store_products', ['id_product'])

    # ============================================================================
    # customer_cards: loyalty programme
    # ============================================================================
    op.create_table(
        'customer_cards',
        sa.Column('card_number', sa.String(length=13), nullable=False),
        sa.Column('cust_surname', sa.String(length=50), nullable=False),
        sa.Column('cust_name', sa.String(length=50), nullable=False),
        sa.Column('cust_patronymic', sa.String(length=50), nullable=True),
        sa.Column('phone_number', sa.String(length=13), nullable=False),
        sa.Column('city', sa.String(length=50), nullable=True),
        sa.Column('street', sa.String(length=50), nullable=True),
        sa.Column('zip_code', sa.String(length=9), nullable=True),
        sa.Column('percent', sa.Integer(), nullable=False),
        sa.CheckConstraint('percent >= 0 AND percent <= 100', name='ck_customer_cards_percent_range'),
        sa.PrimaryKeyConstraint('card_number'),
    )
    op.create_index('ix_customer_cards_surname', 'customer_cards', ['cust_surname'])

    # ============================================================================
    # checks / sales: receipts, written only by the checkout transaction
    # ============================================================================
    op.create_table(
        'checks',
        sa.Column('check_number', sa.String(length=10), nullable=False),
        sa.Column('id_employee', sa.String(length=10), nullable=False),
        sa.Column('card_number', sa.String(length=13), nullable=True),
        sa.Column('print_date', sa.DateTime(), nullable=False),
        sa.Column('sum_total', sa.Numeric(13, 4), nullable=False),
        sa.Column('vat', sa.Numeric(13, 4), nullable=False),
        sa.CheckConstraint('sum_total >= 0', name='ck_checks_sum_total_non_negative'),
        sa.CheckConstraint('vat >= 0', name='ck_checks_vat_non_negative'),
        sa.ForeignKeyConstraint(['id_employee'], ['employees.id_employee']),
        sa.ForeignKeyConstraint(['card_number'], ['customer_cards.card_number']),
        sa.PrimaryKeyConstraint('check_number'),
    )
    op.create_index('ix_checks_employee_print_date', 'checks', ['id_employee', 'print_date'])
    op.create_index('ix_checks_card_number', 'checks', ['card_number'])
    op.create_index('ix_checks_print_date', 'checks', ['print_date'])

    op.create_table(
        'sales',
        sa.Column('upc', sa.String(length=12), nullable=False),
        sa.Column('check_number', sa.String(length=10), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('selling_price', sa.Numeric(13, 4), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_sales_quantity_positive'),
        sa.CheckConstraint('selling_price >= 0', name='ck_sales_price_non_negative'),
        sa.ForeignKeyConstraint(['upc'], ['store_products.upc']),
        sa.ForeignKeyConstraint(['check_number'], ['checks.check_number'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('upc', 'check_number'),
    )


def downgrade():
    op.drop_table('sales')
    op.drop_index('ix_checks_print_date', table_name='checks')
    op.drop_index('ix_checks_card_number', table_name='checks')
    op.drop_index('ix_checks_employee_print_date', table_name='checks')
    op.drop_table('checks')
    op.drop_index('ix_customer_cards_surname', table_name='customer_cards')
    op.drop_table('customer_cards')
    op.drop_index('ix_store_products_id_product', table_name='store_products')
    op.drop_index('ix_store_products_promotional', table_name='store_products')
    op.drop_table('store_products')
    op.drop_index('ix_products_category_number', table_name='products')
    op.drop_index('ix_products_name', table_name='products')
    op.drop_table('products')
    op.drop_table('categories')
    op.drop_index('ix_session_tokens_token_hash', table_name='session_tokens')
    op.drop_index('ix_session_tokens_employee_id', table_name='session_tokens')
    op.drop_table('session_tokens')
    op.drop_index('ix_employees_role', table_name='employees')
    op.drop_index('ix_employees_surname', table_name='employees')
    op.drop_table('employees')
