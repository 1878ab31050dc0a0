"""
Language endpoints: the languages words, definitions and users can use.
"""
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlmodel import Session, select

from app.core.database import get_session
from app.core.exceptions import NotFoundError
from app.models import Language, Word
from app.schemas.language import LanguageResponse, LanguagesResponse

router = APIRouter(prefix="/languages", tags=["languages"])


def _word_counts(session: Session) -> dict:
    rows = session.exec(
        select(Word.language_code, func.count(Word.id)).group_by(Word.language_code)
    ).all()
    return dict(rows)


@router.get("", response_model=LanguagesResponse)
async def get_languages(session: Session = Depends(get_session)):
    languages = session.exec(select(Language).order_by(Language.code)).all()
    counts = _word_counts(session)
    return LanguagesResponse(
        languages=[
            LanguageResponse(code=lang.code, name=lang.name, word_count=counts.get(lang.code, 0))
            for lang in languages
        ],
        total_count=len(languages),
    )


@router.get("/{code}", response_model=LanguageResponse)
async def get_language(code: str, session: Session = Depends(get_session)):
    """One language by its two-letter code, case-insensitive."""
    language = session.get(Language, code.lower())
    if not language:
        raise NotFoundError(f"Language {code} not found")
    return LanguageResponse(
        code=language.code,
        name=language.name,
        word_count=_word_counts(session).get(language.code, 0),
    )
