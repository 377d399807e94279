"""create user, game and game_move tables

Revision ID: 3c7d9e1f2a4b
Revises:
Create Date: 2026-10-18 18:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c7d9e1f2a4b'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('email', sa.String(length=120), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('wins', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('losses', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('draws', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('rating', sa.Integer(), nullable=False, server_default='1200'),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)
        op.create_index('ix_user_email', 'user', ['email'], unique=True)

    if 'game' not in existing_tables:
        op.create_table(
            'game',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('player1_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('player2_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
            sa.Column('status', sa.String(length=16), nullable=False, server_default='waiting'),
            sa.Column('result', sa.String(length=16), nullable=True),
            sa.Column('moves', sa.Text(), nullable=False, server_default=''),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_game_player1_id', 'game', ['player1_id'])
        op.create_index('ix_game_player2_id', 'game', ['player2_id'])

    if 'game_move' not in existing_tables:
        op.create_table(
            'game_move',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id'), nullable=False),
            sa.Column('move_number', sa.Integer(), nullable=False),
            sa.Column('player_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('move', sa.String(length=64), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_game_move_game_id', 'game_move', ['game_id'])


def downgrade():
    op.drop_index('ix_game_move_game_id', table_name='game_move')
    op.drop_table('game_move')
    op.drop_index('ix_game_player2_id', table_name='game')
    op.drop_index('ix_game_player1_id', table_name='game')
    op.drop_table('game')
    op.drop_index('ix_user_email', table_name='user')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
