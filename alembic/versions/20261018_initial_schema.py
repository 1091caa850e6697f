"""Initial knowledge base schema

Revision ID: 3c1e9a7b5d20
Revises:
Create Date: 2026-10-18 09:00:00.000000

Creates the six knowledge base tables. Every foreign key cascades on
delete, so removing a user or a document removes everything that hangs
off it without application code.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c1e9a7b5d20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, documents, shares, versions, mentions and notifications."""
    op.create_table(
        'Users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("role IN ('USER', 'ADMIN')", name='ck_users_role'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_Users_email'), 'Users', ['email'], unique=True)
    op.create_index(op.f('ix_Users_role'), 'Users', ['role'], unique=False)

    op.create_table(
        'Documents',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('author_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['author_id'], ['Users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_Documents_title'), 'Documents', ['title'], unique=False)
    op.create_index(op.f('ix_Documents_is_public'), 'Documents', ['is_public'], unique=False)
    op.create_index(op.f('ix_Documents_author_id'), 'Documents', ['author_id'], unique=False)
    op.create_index(op.f('ix_Documents_created_at'), 'Documents', ['created_at'], unique=False)
    # Visibility-filtered listings ordered by last update
    op.create_index(
        'ix_documents_public_updated',
        'Documents',
        ['is_public', 'updated_at'],
        unique=False,
    )

    op.create_table(
        'DocumentShares',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('document_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('permission', sa.String(length=10), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "permission IN ('VIEW', 'EDIT')",
            name='ck_document_shares_permission',
        ),
        sa.ForeignKeyConstraint(['document_id'], ['Documents.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['Users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('document_id', 'user_id', name='uq_document_shares_doc_user'),
    )
    op.create_index(op.f('ix_DocumentShares_document_id'), 'DocumentShares', ['document_id'], unique=False)
    op.create_index(op.f('ix_DocumentShares_user_id'), 'DocumentShares', ['user_id'], unique=False)

    op.create_table(
        'DocumentVersions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('document_id', sa.Uuid(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('author_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('version >= 1', name='ck_document_versions_positive'),
        sa.ForeignKeyConstraint(['author_id'], ['Users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['document_id'], ['Documents.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('document_id', 'version', name='uq_document_versions_doc_version'),
    )
    op.create_index(op.f('ix_DocumentVersions_document_id'), 'DocumentVersions', ['document_id'], unique=False)
    op.create_index(op.f('ix_DocumentVersions_author_id'), 'DocumentVersions', ['author_id'], unique=False)

    op.create_table(
        'Mentions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('document_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('mentioned_by', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['document_id'], ['Documents.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['mentioned_by'], ['Users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['Users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_Mentions_document_id'), 'Mentions', ['document_id'], unique=False)
    op.create_index(op.f('ix_Mentions_user_id'), 'Mentions', ['user_id'], unique=False)
    op.create_index(op.f('ix_Mentions_mentioned_by'), 'Mentions', ['mentioned_by'], unique=False)

    op.create_table(
        'Notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "type IN ('MENTION', 'SHARE', 'UPDATE')",
            name='ck_notifications_type',
        ),
        sa.ForeignKeyConstraint(['user_id'], ['Users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_Notifications_user_id'), 'Notifications', ['user_id'], unique=False)
    op.create_index(op.f('ix_Notifications_is_read'), 'Notifications', ['is_read'], unique=False)
    op.create_index(op.f('ix_Notifications_created_at'), 'Notifications', ['created_at'], unique=False)
    # WHERE user_id = X AND is_read = Y ORDER BY created_at DESC
    op.create_index(
        'ix_notifications_user_read_created',
        'Notifications',
        ['user_id', 'is_read', 'created_at'],
        unique=False,
    )


def downgrade() -> None:
    """Drop all knowledge base tables, children first."""
    op.drop_table('Notifications')
    op.drop_table('Mentions')
    op.drop_table('DocumentVersions')
    op.drop_table('DocumentShares')
    op.drop_table('Documents')
    op.drop_table('Users')
