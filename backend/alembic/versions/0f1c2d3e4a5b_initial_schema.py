"""initial_schema

Revision ID: 0f1c2d3e4a5b
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0f1c2d3e4a5b'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

REGION = sa.Enum('NORTH', 'CENTRAL', 'SOUTH', name='region')
PROFILE_STATUS = sa.Enum('DRAFT', 'PUBLISHED', 'ARCHIVED', name='profilestatus')


def upgrade() -> None:
    """Create profiles, profile_tags, profile_photos and tags tables."""
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('slug', sa.String(255), nullable=False, unique=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('age', sa.Integer(), nullable=False),
        sa.Column('height', sa.Integer(), nullable=True),
        sa.Column('weight', sa.Integer(), nullable=True),
        sa.Column('region', REGION, nullable=False),
        sa.Column('province', sa.String(100), nullable=False),
        sa.Column('district', sa.String(100), nullable=True),
        sa.Column('occupation', sa.String(100), nullable=False),
        sa.Column('occupation_slug', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', PROFILE_STATUS, nullable=False),
        sa.Column('is_featured', sa.Boolean(), nullable=False, default=False),
        sa.Column('featured_score', sa.Integer(), nullable=False, default=0),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_profiles_region_province', 'profiles', ['region', 'province'])
    op.create_index('ix_profiles_occupation_slug', 'profiles', ['occupation_slug'])
    op.create_index('ix_profiles_status_published_at', 'profiles', ['status', 'published_at'])
    op.create_index('ix_profiles_created_at', 'profiles', ['created_at'])
    op.create_index('ix_profiles_featured', 'profiles', ['is_featured', 'featured_score'])

    op.create_table(
        'profile_tags',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'profile_id',
            sa.String(36),
            sa.ForeignKey('profiles.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('position', sa.Integer(), nullable=False, default=0),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False),
    )
    op.create_index('ix_profile_tags_slug', 'profile_tags', ['slug'])
    op.create_index('ix_profile_tags_profile_id', 'profile_tags', ['profile_id'])

    op.create_table(
        'profile_photos',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'profile_id',
            sa.String(36),
            sa.ForeignKey('profiles.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('position', sa.Integer(), nullable=False, default=0),
        sa.Column('url', sa.String(512), nullable=False),
        sa.Column('base_filename', sa.String(255), nullable=False),
        sa.Column('alt', sa.String(255), nullable=False),
        sa.Column('caption', sa.String(500), nullable=True),
        sa.Column('width', sa.Integer(), nullable=False),
        sa.Column('height', sa.Integer(), nullable=False),
        sa.Column('format', sa.String(16), nullable=False),
        sa.Column('bytes', sa.Integer(), nullable=False),
        sa.Column('dominant_color', sa.String(32), nullable=True),
        sa.Column('is_lcp', sa.Boolean(), nullable=False, default=False),
        sa.Column('blur_data_url', sa.Text(), nullable=True),
        sa.Column('sizes', sa.JSON(), nullable=True),
    )
    op.create_index('ix_profile_photos_profile_id', 'profile_photos', ['profile_id'])
    op.create_index('ix_profile_photos_base_filename', 'profile_photos', ['base_filename'])

    op.create_table(
        'tags',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False, unique=True),
        sa.Column('slug', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.String(200), nullable=True),
        sa.Column('count', sa.Integer(), nullable=False, default=0),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=True),
        sa.Column('color', sa.String(16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_tags_active_count', 'tags', ['is_active', 'count'])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index('ix_tags_active_count', table_name='tags')
    op.drop_table('tags')

    op.drop_index('ix_profile_photos_base_filename', table_name='profile_photos')
    op.drop_index('ix_profile_photos_profile_id', table_name='profile_photos')
    op.drop_table('profile_photos')

    op.drop_index('ix_profile_tags_profile_id', table_name='profile_tags')
    op.drop_index('ix_profile_tags_slug', table_name='profile_tags')
    op.drop_table('profile_tags')

    op.drop_index('ix_profiles_featured', table_name='profiles')
    op.drop_index('ix_profiles_created_at', table_name='profiles')
    op.drop_index('ix_profiles_status_published_at', table_name='profiles')
    op.drop_index('ix_profiles_occupation_slug', table_name='profiles')
    op.drop_index('ix_profiles_region_province', table_name='profiles')
    op.drop_table('profiles')
