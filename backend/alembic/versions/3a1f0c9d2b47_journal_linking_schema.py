"""journal linking schema

Revision ID: 3a1f0c9d2b47
Revises:
Create Date: 2026-10-19 10:12:41.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3a1f0c9d2b47'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def _soft_delete():
    return [
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_by', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    """Create the journal tree, master data and link tables."""
    op.create_table(
        'tax_codes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(length=20), nullable=False, unique=True),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('rate', sa.Numeric(6, 4), nullable=False),
    )
    op.create_index('ix_tax_codes_id', 'tax_codes', ['id'])

    op.create_table(
        'journals',
        sa.Column('id', sa.String(length=50), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('parent_id', sa.String(length=50), sa.ForeignKey('journals.id'), nullable=True),
        sa.Column('is_terminal', sa.Boolean(), nullable=False),
        sa.Column('additional_details', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_journals_id', 'journals', ['id'])
    op.create_index('ix_journals_parent_id', 'journals', ['parent_id'])

    op.create_table(
        'partners',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('partner_type', sa.Enum('LEGAL_ENTITY', 'NATURAL_PERSON', name='partnertype'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tax_id', sa.String(length=100), nullable=True),
        sa.Column('registration_number', sa.String(length=100), nullable=True),
        *_timestamps(),
        *_soft_delete(),
    )
    op.create_index('ix_partners_id', 'partners', ['id'])
    op.create_index('ix_partners_name', 'partners', ['name'])

    op.create_table(
        'goods',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('label', sa.String(length=255), nullable=False),
        sa.Column('reference_code', sa.String(length=100), nullable=True),
        sa.Column('barcode', sa.String(length=100), nullable=True),
        sa.Column('type_code', sa.String(length=50), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('tax_code_id', sa.Integer(), sa.ForeignKey('tax_codes.id'), nullable=True),
        *_timestamps(),
        *_soft_delete(),
    )
    op.create_index('ix_goods_id', 'goods', ['id'])
    op.create_index('ix_goods_label', 'goods', ['label'])

    op.create_table(
        'journal_partner_links',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('journal_id', sa.String(length=50), sa.ForeignKey('journals.id', ondelete='CASCADE'), nullable=False),
        sa.Column('partner_id', sa.Integer(), sa.ForeignKey('partners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('partnership_type', sa.String(length=50), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('journal_id', 'partner_id', 'partnership_type', name='_journal_partner_type_uc'),
    )
    op.create_index('ix_journal_partner_links_id', 'journal_partner_links', ['id'])
    op.create_index('ix_journal_partner_links_journal_id', 'journal_partner_links', ['journal_id'])
    op.create_index('ix_journal_partner_links_partner_id', 'journal_partner_links', ['partner_id'])

    op.create_table(
        'journal_good_links',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('journal_id', sa.String(length=50), sa.ForeignKey('journals.id', ondelete='CASCADE'), nullable=False),
        sa.Column('good_id', sa.Integer(), sa.ForeignKey('goods.id', ondelete='CASCADE'), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('journal_id', 'good_id', name='_journal_good_uc'),
    )
    op.create_index('ix_journal_good_links_id', 'journal_good_links', ['id'])
    op.create_index('ix_journal_good_links_journal_id', 'journal_good_links', ['journal_id'])
    op.create_index('ix_journal_good_links_good_id', 'journal_good_links', ['good_id'])

    op.create_table(
        'journal_partner_good_links',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('journal_partner_link_id', sa.Integer(),
                  sa.ForeignKey('journal_partner_links.id', ondelete='CASCADE'), nullable=False),
        sa.Column('good_id', sa.Integer(), sa.ForeignKey('goods.id', ondelete='CASCADE'), nullable=False),
        sa.Column('descriptive_text', sa.Text(), nullable=True),
        sa.Column('contextual_tax_code_id', sa.Integer(), sa.ForeignKey('tax_codes.id'), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('journal_partner_link_id', 'good_id', name='_journal_partner_link_good_uc'),
    )
    op.create_index('ix_journal_partner_good_links_id', 'journal_partner_good_links', ['id'])
    op.create_index('ix_journal_partner_good_links_journal_partner_link_id', 'journal_partner_good_links',
                    ['journal_partner_link_id'])
    op.create_index('ix_journal_partner_good_links_good_id', 'journal_partner_good_links', ['good_id'])

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('table_name', sa.String(), nullable=False),
        sa.Column('record_id', sa.String(), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('changed_by', sa.String(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
    )
    op.create_index('ix_audit_log_id', 'audit_log', ['id'])


def downgrade() -> None:
    """Drop everything created by upgrade, links first."""
    op.drop_table('audit_log')
    op.drop_table('journal_partner_good_links')
    op.drop_table('journal_good_links')
    op.drop_table('journal_partner_links')
    op.drop_table('goods')
    op.drop_table('partners')
    op.drop_table('journals')
    op.drop_table('tax_codes')
    sa.Enum(name='partnertype').drop(op.get_bind(), checkfirst=True)
