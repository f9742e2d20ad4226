"""auto, bezeichnung and zubehoer tables with seed data

Revision ID: 0001
Revises:
Create Date: 2024-01-01
"""
from datetime import date, datetime, timezone
from decimal import Decimal

from alembic import op
import sqlalchemy as sa

revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'auto',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('fahrgestellnummer', sa.String(), nullable=False),
        sa.Column('art', sa.Enum('LIMOUSINE', 'SUV', name='autoart', native_enum=False), nullable=True),
        sa.Column('preis', sa.Numeric(10, 2), nullable=False),
        sa.Column('lieferbar', sa.Boolean(), nullable=True),
        sa.Column('datum', sa.Date(), nullable=True),
        sa.Column('erzeugt', sa.DateTime(timezone=True), nullable=False),
        sa.Column('aktualisiert', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_auto_id'), 'auto', ['id'], unique=False)
    op.create_index(op.f('ix_auto_fahrgestellnummer'), 'auto', ['fahrgestellnummer'], unique=True)

    op.create_table(
        'bezeichnung',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('bezeichnung', sa.String(length=40), nullable=False),
        sa.Column('zusatz', sa.String(length=40), nullable=True),
        sa.Column('auto_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['auto_id'], ['auto.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('auto_id'),
    )
    op.create_index(op.f('ix_bezeichnung_id'), 'bezeichnung', ['id'], unique=False)

    op.create_table(
        'zubehoer',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=32), nullable=False),
        sa.Column('beschreibung', sa.String(length=32), nullable=True),
        sa.Column('auto_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['auto_id'], ['auto.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_zubehoer_id'), 'zubehoer', ['id'], unique=False)
    op.create_index(op.f('ix_zubehoer_auto_id'), 'zubehoer', ['auto_id'], unique=False)

    # Seed data
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    auto_table = sa.table(
        'auto',
        sa.column('id', sa.Integer),
        sa.column('version', sa.Integer),
        sa.column('fahrgestellnummer', sa.String),
        sa.column('art', sa.String),
        sa.column('preis', sa.Numeric),
        sa.column('lieferbar', sa.Boolean),
        sa.column('datum', sa.Date),
        sa.column('erzeugt', sa.DateTime),
        sa.column('aktualisiert', sa.DateTime),
    )
    bezeichnung_table = sa.table(
        'bezeichnung',
        sa.column('id', sa.Integer),
        sa.column('bezeichnung', sa.String),
        sa.column('zusatz', sa.String),
        sa.column('auto_id', sa.Integer),
    )
    zubehoer_table = sa.table(
        'zubehoer',
        sa.column('id', sa.Integer),
        sa.column('name', sa.String),
        sa.column('beschreibung', sa.String),
        sa.column('auto_id', sa.Integer),
    )

    op.bulk_insert(auto_table, [
        {'id': 1, 'version': 0, 'fahrgestellnummer': 'WAUZZZ4FX9N000100', 'art': 'LIMOUSINE',
         'preis': Decimal('42000.00'), 'lieferbar': True, 'datum': date(2022, 2, 1),
         'erzeugt': now, 'aktualisiert': now},
        {'id': 20, 'version': 0, 'fahrgestellnummer': 'WBA3A5C51CF256789', 'art': 'SUV',
         'preis': Decimal('35000.00'), 'lieferbar': True, 'datum': date(2022, 2, 2),
         'erzeugt': now, 'aktualisiert': now},
        {'id': 30, 'version': 0, 'fahrgestellnummer': 'WDD2050421F123456', 'art': 'LIMOUSINE',
         'preis': Decimal('51000.00'), 'lieferbar': False, 'datum': date(2022, 2, 3),
         'erzeugt': now, 'aktualisiert': now},
        {'id': 40, 'version': 0, 'fahrgestellnummer': 'VF3LBHZTZHS123456', 'art': 'SUV',
         'preis': Decimal('27500.00'), 'lieferbar': False, 'datum': date(2022, 2, 4),
         'erzeugt': now, 'aktualisiert': now},
    ])

    op.bulk_insert(bezeichnung_table, [
        {'id': 1, 'bezeichnung': 'Alpha', 'zusatz': 'Limousine der Oberklasse', 'auto_id': 1},
        {'id': 20, 'bezeichnung': 'Beta', 'zusatz': 'Kompakter SUV', 'auto_id': 20},
        {'id': 30, 'bezeichnung': 'Gamma', 'zusatz': None, 'auto_id': 30},
        {'id': 40, 'bezeichnung': 'Delta', 'zusatz': 'Stadt-SUV', 'auto_id': 40},
    ])

    op.bulk_insert(zubehoer_table, [
        {'id': 1, 'name': 'Automatik', 'beschreibung': 'Achtgang-Automatik', 'auto_id': 1},
        {'id': 20, 'name': 'Anhaengerkupplung', 'beschreibung': 'abnehmbar', 'auto_id': 20},
        {'id': 21, 'name': 'Dachreling', 'beschreibung': None, 'auto_id': 20},
    ])

    # seed rows carry explicit ids, so serial sequences must continue after them
    if op.get_context().dialect.name == 'postgresql':
        for table in ('auto', 'bezeichnung', 'zubehoer'):
            op.execute(
                f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), (SELECT MAX(id) FROM {table}))"
            )


def downgrade():
    op.drop_index(op.f('ix_zubehoer_auto_id'), table_name='zubehoer')
    op.drop_index(op.f('ix_zubehoer_id'), table_name='zubehoer')
    op.drop_table('zubehoer')
    op.drop_index(op.f('ix_bezeichnung_id'), table_name='bezeichnung')
    op.drop_table('bezeichnung')
    op.drop_index(op.f('ix_auto_fahrgestellnummer'), table_name='auto')
    op.drop_index(op.f('ix_auto_id'), table_name='auto')
    op.drop_table('auto')
