"""Create school finance tables

Revision ID: 20261019_000001
Revises: None
Create Date: 2026-10-19

This migration creates schools, users, academic years, classes,
students, fee structures, invoices (with line items) and payments.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

USER_ROLE = ('SUPER_ADMIN', 'SCHOOL_ADMIN', 'TEACHER', 'STUDENT', 'PARENT')
FEE_FREQUENCY = ('MONTHLY', 'QUARTERLY', 'YEARLY', 'ONE_TIME')
INVOICE_STATUS = ('PENDING', 'PARTIAL', 'PAID', 'OVERDUE', 'CANCELLED')
PAYMENT_METHOD = ('CASH', 'BANK_TRANSFER', 'CARD', 'CHEQUE', 'ONLINE')

# Money columns hold integer cents on SQLite (see models.types.Money)
MONEY = sa.Numeric(precision=12, scale=2).with_variant(sa.BigInteger(), 'sqlite')


def upgrade() -> None:
    """Create the finance tables."""
    op.create_table(
        'schools',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )
    op.create_index('ix_schools_deleted_at', 'schools', ['deleted_at'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('role', sa.Enum(*USER_ROLE, name='user_role', create_constraint=True), nullable=False),
        sa.Column('school_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['school_id'], ['schools.id'], name='fk_users_school_id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_school_id', 'users', ['school_id'])
    op.create_index('ix_users_deleted_at', 'users', ['deleted_at'])

    op.create_table(
        'academic_years',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('school_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('is_current', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['school_id'], ['schools.id'], name='fk_academic_years_school_id'),
    )
    op.create_index('ix_academic_years_school_id', 'academic_years', ['school_id'])
    op.create_index('ix_academic_years_deleted_at', 'academic_years', ['deleted_at'])

    op.create_table(
        'school_classes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('school_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['school_id'], ['schools.id'], name='fk_school_classes_school_id'),
    )
    op.create_index('ix_school_classes_school_id', 'school_classes', ['school_id'])
    op.create_index('ix_school_classes_deleted_at', 'school_classes', ['deleted_at'])

    op.create_table(
        'students',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('school_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('admission_number', sa.String(length=50), nullable=False),
        sa.Column('current_class_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
        sa.ForeignKeyConstraint(['school_id'], ['schools.id'], name='fk_students_school_id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_students_user_id'),
        sa.ForeignKeyConstraint(['current_class_id'], ['school_classes.id'], name='fk_students_current_class_id'),
    )
    op.create_index('ix_students_school_id', 'students', ['school_id'])
    op.create_index('ix_students_current_class_id', 'students', ['current_class_id'])
    op.create_index('ix_students_deleted_at', 'students', ['deleted_at'])

    op.create_table(
        'fee_structures',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('school_id', sa.Integer(), nullable=False),
        sa.Column('academic_year_id', sa.Integer(), nullable=False),
        sa.Column('class_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column(
            'frequency',
            sa.Enum(*FEE_FREQUENCY, name='fee_frequency', create_constraint=True),
            nullable=False,
        ),
        sa.Column('due_day', sa.Integer(), nullable=True),
        sa.Column('is_optional', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['school_id'], ['schools.id'], name='fk_fee_structures_school_id'),
        sa.ForeignKeyConstraint(
            ['academic_year_id'],
            ['academic_years.id'],
            name='fk_fee_structures_academic_year_id',
        ),
        sa.ForeignKeyConstraint(['class_id'], ['school_classes.id'], name='fk_fee_structures_class_id'),
    )
    op.create_index('ix_fee_structures_school_id', 'fee_structures', ['school_id'])
    op.create_index('ix_fee_structures_academic_year_id', 'fee_structures', ['academic_year_id'])
    op.create_index('ix_fee_structures_class_id', 'fee_structures', ['class_id'])
    op.create_index('ix_fee_structures_deleted_at', 'fee_structures', ['deleted_at'])

    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('invoice_number', sa.String(length=40), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('issue_date', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('subtotal', MONEY, nullable=False),
        sa.Column('discount', MONEY, nullable=False),
        sa.Column('tax', MONEY, nullable=False),
        sa.Column('total_amount', MONEY, nullable=False),
        sa.Column('paid_amount', MONEY, nullable=False),
        sa.Column('balance_amount', MONEY, nullable=False),
        sa.Column(
            'status',
            sa.Enum(*INVOICE_STATUS, name='invoice_status', create_constraint=True),
            nullable=False,
        ),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('balance_amount >= 0', name='ck_invoices_balance_non_negative'),
        sa.CheckConstraint('paid_amount >= 0', name='ck_invoices_paid_non_negative'),
        sa.ForeignKeyConstraint(
            ['student_id'],
            ['students.id'],
            name='fk_invoices_student_id',
            ondelete='RESTRICT'
        ),
    )

    # Create indexes for common queries
    op.create_index('ix_invoices_invoice_number', 'invoices', ['invoice_number'], unique=True)
    op.create_index('ix_invoices_student_id', 'invoices', ['student_id'])
    op.create_index('ix_invoices_due_date', 'invoices', ['due_date'])
    op.create_index('ix_invoices_status', 'invoices', ['status'])
    op.create_index('ix_invoices_deleted_at', 'invoices', ['deleted_at'])

    op.create_table(
        'invoice_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('fee_structure_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', MONEY, nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['invoice_id'],
            ['invoices.id'],
            name='fk_invoice_items_invoice_id',
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['fee_structure_id'],
            ['fee_structures.id'],
            name='fk_invoice_items_fee_structure_id',
        ),
    )
    op.create_index('ix_invoice_items_invoice_id', 'invoice_items', ['invoice_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('payment_number', sa.String(length=40), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column(
            'payment_method',
            sa.Enum(*PAYMENT_METHOD, name='payment_method', create_constraint=True),
            nullable=False,
        ),
        sa.Column('reference_number', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('payment_date', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('received_by_id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount > 0', name='ck_payments_amount_positive'),
        sa.ForeignKeyConstraint(
            ['invoice_id'],
            ['invoices.id'],
            name='fk_payments_invoice_id',
            ondelete='RESTRICT'
        ),
        sa.ForeignKeyConstraint(['received_by_id'], ['users.id'], name='fk_payments_received_by_id'),
    )
    op.create_index('ix_payments_payment_number', 'payments', ['payment_number'], unique=True)
    op.create_index('ix_payments_invoice_id', 'payments', ['invoice_id'])
    op.create_index('ix_payments_payment_date', 'payments', ['payment_date'])


def downgrade() -> None:
    """Drop the finance tables."""
    op.drop_table('payments')
    op.drop_table('invoice_items')
    op.drop_table('invoices')
    op.drop_table('fee_structures')
    op.drop_table('students')
    op.drop_table('school_classes')
    op.drop_table('academic_years')
    op.drop_table('users')
    op.drop_table('schools')

    # Drop the enum types (PostgreSQL)
    if op.get_bind().dialect.name == 'postgresql':
        for enum_name in ('payment_method', 'invoice_status', 'fee_frequency', 'user_role'):
            op.execute(f"DROP TYPE IF EXISTS {enum_name}")
