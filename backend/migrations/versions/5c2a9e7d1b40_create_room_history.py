"""create room_history for finished bingo rooms

Revision ID: 5c2a9e7d1b40
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2a9e7d1b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'room_history' in insp.get_table_names():
        return
    op.create_table(
        'room_history',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('room_id', sa.String(length=6), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('closed_at', sa.DateTime(), nullable=False),
        sa.Column('winner', sa.String(length=128), nullable=False),
        sa.Column('winner_row_number', sa.Integer(), nullable=False),
        sa.Column('winner_numbers', sa.Text(), nullable=False),
        sa.Column('winner_bingo_card', sa.Text(), nullable=True),
        sa.Column('total_players', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_numbers_drawn', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('payload_bytes', sa.Integer(), nullable=False, server_default='0'),
    )
    with op.batch_alter_table('room_history') as batch_op:
        batch_op.create_index('ix_room_history_room_id', ['room_id'])
        batch_op.create_index('ix_room_history_closed_at', ['closed_at'])


def downgrade():
    with op.batch_alter_table('room_history') as batch_op:
        batch_op.drop_index('ix_room_history_closed_at')
        batch_op.drop_index('ix_room_history_room_id')
    op.drop_table('room_history')
