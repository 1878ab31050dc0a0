"""Seed default list categories

Revision ID: 003_seed_categories
Revises: 002_insert_languages
Create Date: 2025-01-01 00:00:02.000000

"""
from datetime import datetime

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '003_seed_categories'
down_revision = '002_insert_languages'
branch_labels = None
depends_on = None

CATEGORIES = [
    ('General Vocabulary', 'Common words for everyday use'),
    ('Business & Work', 'Professional and workplace vocabulary'),
    ('Travel & Tourism', 'Words related to travel and tourism'),
    ('Food & Cooking', 'Culinary vocabulary and cooking terms'),
    ('Science & Technology', 'Technical and scientific terminology'),
    ('Arts & Culture', 'Words related to arts, culture, and entertainment'),
    ('Sports & Health', 'Sports, fitness, and health-related vocabulary'),
    ('Academic', 'Educational and academic vocabulary'),
]


def upgrade() -> None:
    categories_table = sa.table(
        'categories',
        sa.column('name', sa.String),
        sa.column('description', sa.String),
        sa.column('created_at', sa.DateTime)
    )
    now = datetime.utcnow()
    op.bulk_insert(
        categories_table,
        [{'name': name, 'description': description, 'created_at': now} for name, description in CATEGORIES]
    )


def downgrade() -> None:
    categories_table = sa.table('categories', sa.column('name', sa.String))
    op.execute(
        categories_table.delete().where(categories_table.c.name.in_([name for name, _ in CATEGORIES]))
    )
