"""
Script to seed languages and default list categories.

Meant for databases created by init_db() rather than by the Alembic
migrations. Existing rows are left alone.
"""
import sys
import logging
from pathlib import Path

# Add the api directory to Python path so we can import from app
script_dir = Path(__file__).parent
api_dir = script_dir.parent
sys.path.insert(0, str(api_dir))

from sqlmodel import Session, select
from app.core.database import engine, init_db
from app.models import Language
from app.services.list_service import seed_default_categories

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

LANGUAGES = {
    'en': 'English',
    'ru': 'Russian',
    'da': 'Danish',
    'es': 'Spanish',
    'fr': 'French',
    'de': 'German',
    'it': 'Italian',
    'pt': 'Portuguese',
    'zh': 'Chinese',
    'ja': 'Japanese',
    'ko': 'Korean',
    'ar': 'Arabic',
}


def seed_languages(session: Session) -> int:
    existing = set(session.exec(select(Language.code)).all())
    created = 0
    for code, name in LANGUAGES.items():
        if code not in existing:
            session.add(Language(code=code, name=name))
            created += 1
    session.commit()
    return created


def main():
    init_db()
    with Session(engine) as session:
        languages_created = seed_languages(session)
        logger.info(f"Created {languages_created} languages")
        categories_created = seed_default_categories(session)
        logger.info(f"Created {categories_created} categories")


if __name__ == "__main__":
    logger.info("Starting reference data seeding...")
    try:
        main()
        logger.info("Successfully completed!")
    except Exception as e:
        logger.error("Error during seeding: %s", e, exc_info=True)
        sys.exit(1)
