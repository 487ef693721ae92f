"""create_articles

Revision ID: a1c4e7b2d9f0
Revises:
Create Date: 2026-10-12 10:00:00.000000

Knowledge base articles table with search indexes and updated_at trigger.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = 'a1c4e7b2d9f0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'articles',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('keywords', postgresql.ARRAY(sa.String()), server_default=sa.text("'{}'"), nullable=False),
        sa.Column('category', sa.Text(), server_default='General', nullable=False),
        sa.Column('author', sa.Text(), server_default='Admin', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_articles')),
    )
    op.create_index('ix_articles_keywords', 'articles', ['keywords'], postgresql_using='gin')
    op.create_index('ix_articles_category', 'articles', ['category'])
    op.create_index('ix_articles_created_at', 'articles', ['created_at'])

    # Full-text indexes: title only (default fallback) and title + content.
    # Built for SEARCH_TS_CONFIG=english; other configs need their own indexes.
    op.execute(
        "CREATE INDEX ix_articles_title_fts ON articles "
        "USING gin (to_tsvector('english'::regconfig, title))"
    )
    op.execute(
        "CREATE INDEX ix_articles_search_fts ON articles "
        "USING gin (to_tsvector('english'::regconfig, title || ' ' || content))"
    )

    op.execute(
        """
        CREATE OR REPLACE FUNCTION articles_touch_updated_at()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = now();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
        """
    )
    op.execute(
        "CREATE TRIGGER articles_touch_updated_at BEFORE UPDATE ON articles "
        "FOR EACH ROW EXECUTE FUNCTION articles_touch_updated_at()"
    )


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS articles_touch_updated_at ON articles")
    op.execute("DROP FUNCTION IF EXISTS articles_touch_updated_at()")
    op.drop_index('ix_articles_search_fts', table_name='articles')
    op.drop_index('ix_articles_title_fts', table_name='articles')
    op.drop_index('ix_articles_created_at', table_name='articles')
    op.drop_index('ix_articles_category', table_name='articles')
    op.drop_index('ix_articles_keywords', table_name='articles')
    op.drop_table('articles')
