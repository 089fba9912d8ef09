"""create_gallery_tables

Revision ID: 3b8d2c7a91f4
Revises:
Create Date: 2026-10-19 09:12:41.507213

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b8d2c7a91f4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'media',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('provider_name', sa.String(length=255), nullable=False),
        sa.Column('provider_reference', sa.String(length=255), nullable=False),
        sa.Column('content_type', sa.String(length=255), nullable=True),
        sa.Column('width', sa.Integer(), nullable=True),
        sa.Column('height', sa.Integer(), nullable=True),
        sa.Column('size', sa.Integer(), nullable=True),
        sa.Column('context', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_media_id'), 'media', ['id'], unique=False)

    op.create_table(
        'galleries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('context', sa.String(length=64), nullable=False, server_default='default'),
        sa.Column('default_format', sa.String(length=255), nullable=False, server_default='reference'),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_galleries_id'), 'galleries', ['id'], unique=False)
    op.create_index(op.f('ix_galleries_enabled'), 'galleries', ['enabled'], unique=False)

    op.create_table(
        'gallery_has_medias',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('gallery_id', sa.Integer(), nullable=False),
        sa.Column('media_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('caption', sa.String(length=255), nullable=True),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['gallery_id'], ['galleries.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_gallery_has_medias_id'), 'gallery_has_medias', ['id'], unique=False)
    op.create_index(op.f('ix_gallery_has_medias_media_id'), 'gallery_has_medias', ['media_id'], unique=False)
    op.create_index(
        'ix_gallery_has_medias_gallery_position',
        'gallery_has_medias',
        ['gallery_id', 'position'],
        unique=False
    )


def downgrade() -> None:
    op.drop_index('ix_gallery_has_medias_gallery_position', table_name='gallery_has_medias')
    op.drop_index(op.f('ix_gallery_has_medias_media_id'), table_name='gallery_has_medias')
    op.drop_index(op.f('ix_gallery_has_medias_id'), table_name='gallery_has_medias')
    op.drop_table('gallery_has_medias')

    op.drop_index(op.f('ix_galleries_enabled'), table_name='galleries')
    op.drop_index(op.f('ix_galleries_id'), table_name='galleries')
    op.drop_table('galleries')

    op.drop_index(op.f('ix_media_id'), table_name='media')
    op.drop_table('media')
