"""Insert supported languages

Revision ID: 002_insert_languages
Revises: 001_initial_schema
Create Date: 2025-01-01 00:00:01.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '002_insert_languages'
down_revision = '001_initial_schema'
branch_labels = None
depends_on = None

LANGUAGES = [
    {'code': 'en', 'name': 'English'},
    {'code': 'ru', 'name': 'Russian'},
    {'code': 'da', 'name': 'Danish'},
    {'code': 'es', 'name': 'Spanish'},
    {'code': 'fr', 'name': 'French'},
    {'code': 'de', 'name': 'German'},
    {'code': 'it', 'name': 'Italian'},
    {'code': 'pt', 'name': 'Portuguese'},
    {'code': 'zh', 'name': 'Chinese'},
    {'code': 'ja', 'name': 'Japanese'},
    {'code': 'ko', 'name': 'Korean'},
    {'code': 'ar', 'name': 'Arabic'},
]


def upgrade() -> None:
    languages_table = sa.table(
        'languages',
        sa.column('code', sa.String),
        sa.column('name', sa.String)
    )
    op.bulk_insert(languages_table, LANGUAGES)


def downgrade() -> None:
    codes = ", ".join(f"'{language['code']}'" for language in LANGUAGES)
    op.execute(f"DELETE FROM languages WHERE code IN ({codes})")
