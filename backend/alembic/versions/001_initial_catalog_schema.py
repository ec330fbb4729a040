"""Initial catalog schema: artists, albums, songs, song sources

Revision ID: 001_initial_catalog_schema
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = '001_initial_catalog_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Same text as encore.services.search.FULLTEXT_DOCUMENT_SQL
FULLTEXT_DOCUMENT_SQL = (
    "coalesce(title, '') || ' ' || coalesce(artist_name, '') || ' ' || coalesce(album_title, '')"
)


def upgrade() -> None:
    op.create_table(
        'artists',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('name_norm', sa.String(255), nullable=False),
        sa.Column('source', sa.String(20)),
        sa.Column('source_id', sa.String(255)),
        sa.Column('image_url', sa.String(1000)),
        sa.Column('genres', sa.JSON()),
        sa.Column('popularity', sa.Integer()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_artists_id', 'artists', ['id'])
    op.create_index('ix_artists_name_norm', 'artists', ['name_norm'], unique=True)

    op.create_table(
        'albums',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('artist_id', sa.Integer(), sa.ForeignKey('artists.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('title_norm', sa.String(255), nullable=False),
        sa.Column('release_year', sa.Integer()),
        sa.Column('source', sa.String(20)),
        sa.Column('source_id', sa.String(255)),
        sa.Column('image_url', sa.String(1000)),
        sa.Column('genres', sa.JSON()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_albums_id', 'albums', ['id'])
    op.create_index('ix_albums_artist_id', 'albums', ['artist_id'])
    # NULL release years share one bucket
    op.create_index(
        'uq_album_artist_title_year',
        'albums',
        ['artist_id', 'title_norm', sa.text('coalesce(release_year, 0)')],
        unique=True,
    )

    op.create_table(
        'songs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('title_norm', sa.String(500), nullable=False),
        sa.Column('artist_id', sa.Integer(), sa.ForeignKey('artists.id', ondelete='CASCADE'), nullable=False),
        sa.Column('artist_name', sa.String(255), nullable=False),
        sa.Column('album_id', sa.Integer(), sa.ForeignKey('albums.id', ondelete='SET NULL')),
        sa.Column('album_title', sa.String(255)),
        sa.Column('duration_sec', sa.Integer()),
        sa.Column('genres', sa.JSON()),
        sa.Column('popularity', sa.Integer()),
        sa.Column('album_art', sa.String(1000)),
        sa.Column('signature', sa.String(40), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_songs_id', 'songs', ['id'])
    op.create_index('ix_songs_signature', 'songs', ['signature'], unique=True)
    op.create_index('ix_songs_title_norm', 'songs', ['title_norm'])
    op.create_index('ix_songs_artist_id', 'songs', ['artist_id'])
    op.create_index('ix_songs_artist_name', 'songs', ['artist_name'])
    op.create_index('ix_songs_album_id', 'songs', ['album_id'])
    op.create_index('ix_songs_artist_title', 'songs', ['artist_id', 'title_norm'])

    op.create_table(
        'song_sources',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('song_id', sa.Integer(), sa.ForeignKey('songs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('source', sa.String(20), nullable=False),
        sa.Column('source_id', sa.String(255), nullable=False),
        sa.Column('added_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('song_id', 'source', 'source_id', name='uq_song_source'),
    )
    op.create_index('ix_song_sources_lookup', 'song_sources', ['source', 'source_id'])

    # Full-text search over the denormalized song fields (PostgreSQL only).
    # Index expressions must be IMMUTABLE, so the document is built with ||.
    if op.get_bind().dialect.name == 'postgresql':
        op.execute(
            "CREATE INDEX ix_songs_fulltext ON songs USING gin ("
            f"to_tsvector('simple', {FULLTEXT_DOCUMENT_SQL}))"
        )


def downgrade() -> None:
    if op.get_bind().dialect.name == 'postgresql':
        op.execute("DROP INDEX IF EXISTS ix_songs_fulltext")
    op.drop_table('song_sources')
    op.drop_table('songs')
    op.drop_table('albums')
    op.drop_table('artists')
