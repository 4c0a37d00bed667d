"""create users, classes and chat tables

Revision ID: 0001_create_chat_tables
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '0001_create_chat_tables'
down_revision = None
branch_labels = None
depends_on = None


def _base_columns():
    return [
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table('users',
        *_base_columns(),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('security_question', sa.String(length=500), nullable=False),
        sa.Column('hashed_security_answer', sa.String(length=255), nullable=False),
        sa.Column('profile_image', sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'])
    op.create_index(op.f('ix_users_created_at'), 'users', ['created_at'])
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_role'), 'users', ['role'])

    op.create_table('classes',
        *_base_columns(),
        sa.Column('teacher_id', sa.String(length=100), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('meeting_link', sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_classes_id'), 'classes', ['id'])
    op.create_index(op.f('ix_classes_created_at'), 'classes', ['created_at'])
    op.create_index(op.f('ix_classes_teacher_id'), 'classes', ['teacher_id'])

    # Create chats table
    op.create_table('chats',
        *_base_columns(),
        sa.Column('name', sa.String(length=200), nullable=True),
        sa.Column('is_group', sa.Boolean(), nullable=False),
        sa.Column('created_by', sa.String(length=100), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_chats_id'), 'chats', ['id'])
    op.create_index(op.f('ix_chats_created_at'), 'chats', ['created_at'])
    op.create_index(op.f('ix_chats_is_group'), 'chats', ['is_group'])

    op.create_table('chat_members',
        *_base_columns(),
        sa.Column('chat_id', sa.String(length=100), nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(['chat_id'], ['chats.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_chat_members_id'), 'chat_members', ['id'])
    op.create_index(op.f('ix_chat_members_created_at'), 'chat_members', ['created_at'])
    op.create_index(op.f('ix_chat_members_chat_id'), 'chat_members', ['chat_id'])
    op.create_index(op.f('ix_chat_members_user_id'), 'chat_members', ['user_id'])
    op.create_index('idx_chat_member_unique', 'chat_members', ['chat_id', 'user_id'], unique=True)

    # Create chat_messages table
    op.create_table('chat_messages',
        *_base_columns(),
        sa.Column('room_id', sa.String(length=100), nullable=False),
        sa.Column('sender_id', sa.String(length=100), nullable=False),
        sa.Column('sender_name', sa.String(length=200), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('message_type', sa.String(length=10), nullable=False),
        sa.Column('file_url', sa.String(length=500), nullable=True),
        sa.Column('file_name', sa.String(length=255), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False),
        sa.Column('is_forwarded', sa.Boolean(), nullable=False),
        sa.Column('sequence', sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_chat_messages_id'), 'chat_messages', ['id'])
    op.create_index(op.f('ix_chat_messages_created_at'), 'chat_messages', ['created_at'])
    op.create_index(op.f('ix_chat_messages_room_id'), 'chat_messages', ['room_id'])
    op.create_index(op.f('ix_chat_messages_sender_id'), 'chat_messages', ['sender_id'])
    op.create_index('idx_chat_message_room_time', 'chat_messages', ['room_id', 'created_at', 'sequence'])

    op.create_table('message_receipts',
        *_base_columns(),
        sa.Column('message_id', sa.String(length=100), nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(['message_id'], ['chat_messages.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_message_receipts_id'), 'message_receipts', ['id'])
    op.create_index(op.f('ix_message_receipts_created_at'), 'message_receipts', ['created_at'])
    op.create_index(op.f('ix_message_receipts_message_id'), 'message_receipts', ['message_id'])
    op.create_index(op.f('ix_message_receipts_user_id'), 'message_receipts', ['user_id'])
    op.create_index('idx_message_receipt_unique', 'message_receipts', ['message_id', 'user_id'], unique=True)


def downgrade() -> None:
    op.drop_table('message_receipts')
    op.drop_table('chat_messages')
    op.drop_table('chat_members')
    op.drop_table('chats')
    op.drop_table('classes')
    op.drop_table('users')
