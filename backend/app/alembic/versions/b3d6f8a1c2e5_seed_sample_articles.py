"""seed_sample_articles

Revision ID: b3d6f8a1c2e5
Revises: a1c4e7b2d9f0
Create Date: 2026-10-12 10:30:00.000000

Starter knowledge base content (same set as DEMO_MODE).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from services.sample_articles import SAMPLE_ARTICLES


revision: str = 'b3d6f8a1c2e5'
down_revision: Union[str, None] = 'a1c4e7b2d9f0'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


articles = sa.table(
    'articles',
    sa.column('title', sa.Text()),
    sa.column('content', sa.Text()),
    sa.column('keywords', postgresql.ARRAY(sa.String())),
    sa.column('category', sa.Text()),
    sa.column('author', sa.Text()),
)


def upgrade() -> None:
    op.bulk_insert(articles, SAMPLE_ARTICLES)


def downgrade() -> None:
    titles = [a['title'] for a in SAMPLE_ARTICLES]
    op.execute(articles.delete().where(articles.c.title.in_(titles)))
