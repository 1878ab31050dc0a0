import os
import tempfile

# Settings refuse to load without a database URL
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ASSETS_PATH", tempfile.mkdtemp(prefix="wordcraft-assets-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from app import models  # noqa: F401
from app.core.database import get_session
from app.main import app
from app.models import (
    Category,
    Definition,
    Language,
    PartOfSpeech,
    User,
    UserDictionary,
    UserRole,
    Word,
    WordDefinition,
    WordDetails,
)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        for code, name in (("en", "English"), ("da", "Danish"), ("ru", "Russian")):
            session.add(Language(code=code, name=name))
        session.commit()
        yield session


@pytest.fixture
def client(session):
    def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make_user(role=UserRole.USER, email=None, password="secret123"):
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            password=User.hash_password(password),
            base_language_code="ru",
            target_language_code="en",
            role=role,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(role=UserRole.ADMIN)


@pytest.fixture
def make_definition(session):
    """Build a word, its entry and a primary definition."""
    def _make_definition(word_text="apple", definition_text=None, part_of_speech=PartOfSpeech.NOUN, language_code="en"):
        word = session.exec(
            select(Word).where(Word.word == word_text, Word.language_code == language_code)
        ).first()
        if word is None:
            word = Word(word=word_text, language_code=language_code, phonetic_general=f"/{word_text}/")
            session.add(word)
            session.flush()
        details = session.exec(
            select(WordDetails).where(WordDetails.word_id == word.id, WordDetails.part_of_speech == part_of_speech)
        ).first()
        if details is None:
            details = WordDetails(word_id=word.id, part_of_speech=part_of_speech)
            session.add(details)
            session.flush()
        definition = Definition(
            definition=definition_text or f"a definition of {word_text}",
            language_code=language_code,
        )
        session.add(definition)
        session.flush()
        session.add(WordDefinition(word_details_id=details.id, definition_id=definition.id, is_primary=True))
        session.commit()
        session.refresh(definition)
        return definition

    return _make_definition


@pytest.fixture
def make_entry(session, make_definition):
    """Put a new definition into a user's dictionary."""
    def _make_entry(user, word_text="apple", **fields):
        definition = make_definition(word_text)
        entry = UserDictionary(
            user_id=user.id,
            definition_id=definition.id,
            base_language_code=user.base_language_code,
            target_language_code=user.target_language_code,
            **fields,
        )
        session.add(entry)
        session.commit()
        session.refresh(entry)
        return entry

    return _make_entry


@pytest.fixture
def category(session):
    category = Category(name="General Vocabulary", description="Common words for everyday use")
    session.add(category)
    session.commit()
    session.refresh(category)
    return category
