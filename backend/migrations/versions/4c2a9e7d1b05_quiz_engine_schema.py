"""quiz engine schema: users, games, questions, sessions, players, answer ledger

Revision ID: 4c2a9e7d1b05
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2a9e7d1b05'
down_revision = None
branch_labels = None
depends_on = None

question_type = sa.Enum('single', 'multiple', 'judgement', name='question_type')


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_user_username', 'user', ['username'], unique=True)

    # game.active -> quiz_session.id is added after quiz_session exists
    op.create_table(
        'game',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('active', sa.String(length=16), nullable=True),
        sa.ForeignKeyConstraint(['owner_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_game_owner_id', 'game', ['owner_id'])

    op.create_table(
        'question',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('question_type', question_type, nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('media', sa.String(length=512), nullable=True),
        sa.ForeignKeyConstraint(['game_id'], ['game.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_question_game_id', 'question', ['game_id'])

    op.create_table(
        'answer_option',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('text', sa.String(length=256), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['question_id'], ['question.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_answer_option_question_id', 'answer_option', ['question_id'])

    op.create_table(
        'quiz_session',
        sa.Column('id', sa.String(length=16), nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('state', sa.String(length=16), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('question_started_at', sa.Float(), nullable=True),
        sa.Column('question_starts', sa.Text(), nullable=True),
        sa.Column('created_at', sa.Float(), nullable=False),
        sa.Column('last_activity_at', sa.Float(), nullable=False),
        sa.Column('ended_at', sa.Float(), nullable=True),
        sa.ForeignKeyConstraint(['game_id'], ['game.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_quiz_session_game_id', 'quiz_session', ['game_id'])

    with op.batch_alter_table('game') as batch_op:
        batch_op.create_foreign_key('fk_game_active_session', 'quiz_session', ['active'], ['id'])

    op.create_table(
        'player',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(length=16), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('joined_at', sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['quiz_session.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_id', 'name', name='uq_player_session_name'),
    )
    op.create_index('ix_player_session_id', 'player', ['session_id'])

    op.create_table(
        'submitted_answer',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(length=16), nullable=False),
        sa.Column('player_id', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('selected_indices', sa.Text(), nullable=False),
        sa.Column('submitted_at', sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['quiz_session.id']),
        sa.ForeignKeyConstraint(['player_id'], ['player.id']),
        sa.ForeignKeyConstraint(['question_id'], ['question.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_id', 'player_id', 'question_id', name='uq_submitted_answer_key'),
    )
    op.create_index('ix_submitted_answer_session_id', 'submitted_answer', ['session_id'])
    op.create_index('ix_submitted_answer_player_id', 'submitted_answer', ['player_id'])
    op.create_index('ix_submitted_answer_question_id', 'submitted_answer', ['question_id'])


def downgrade():
    op.drop_table('submitted_answer')
    op.drop_table('player')
    with op.batch_alter_table('game') as batch_op:
        batch_op.drop_constraint('fk_game_active_session', type_='foreignkey')
    op.drop_table('quiz_session')
    op.drop_table('answer_option')
    op.drop_table('question')
    op.drop_table('game')
    op.drop_table('user')
    question_type.drop(op.get_bind(), checkfirst=True)
