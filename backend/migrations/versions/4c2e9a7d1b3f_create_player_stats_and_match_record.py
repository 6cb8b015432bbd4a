"""create player_stats and match_record

Revision ID: 4c2e9a7d1b3f
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2e9a7d1b3f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    # AUTO_CREATE_TABLES may already have created these on a dev database
    if 'player_stats' not in existing_tables:
        op.create_table(
            'player_stats',
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('games_played', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('wins', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('losses', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('draws', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint('username'),
        )

    if 'match_record' not in existing_tables:
        op.create_table(
            'match_record',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('match_id', sa.String(length=64), nullable=True),
            sa.Column('player_x', sa.String(length=64), nullable=False),
            sa.Column('player_o', sa.String(length=64), nullable=False),
            sa.Column('winner', sa.String(length=64), nullable=False),
            sa.Column('board_state', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(['player_x'], ['player_stats.username']),
            sa.ForeignKeyConstraint(['player_o'], ['player_stats.username']),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_match_record_match_id', 'match_record', ['match_id'])
        op.create_index('ix_match_record_player_x', 'match_record', ['player_x'])
        op.create_index('ix_match_record_player_o', 'match_record', ['player_o'])


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'match_record' in existing_tables:
        op.drop_index('ix_match_record_player_o', table_name='match_record')
        op.drop_index('ix_match_record_player_x', table_name='match_record')
        op.drop_index('ix_match_record_match_id', table_name='match_record')
        op.drop_table('match_record')
    if 'player_stats' in existing_tables:
        op.drop_table('player_stats')
