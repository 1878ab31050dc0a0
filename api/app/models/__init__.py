"""
Models package - imports all models so they register with SQLModel metadata.
"""
# Import enums first
from app.models.enums import (
    UserRole,
    DifficultyLevel,
    LearningStatus,
    SessionType,
    LanguageCode,
    PartOfSpeech,
    RelationshipType,
    SourceType,
    Gender,
)

# Import all models
from app.models.language import Language
from app.models.user import User
from app.models.image import Image
from app.models.word import Word
from app.models.word_details import WordDetails
from app.models.definition import Definition, WordDefinition
from app.models.definition_example import DefinitionExample
from app.models.audio import Audio, WordDetailsAudio, DefinitionAudio, ExampleAudio
from app.models.translation import Translation, DefinitionTranslation, ExampleTranslation
from app.models.relationship import (
    WordToWordRelationship,
    WordDetailsRelationship,
    DefinitionRelationship,
)
from app.models.user_dictionary import UserDictionary
from app.models.category import Category
from app.models.word_list import WordList, ListWord
from app.models.user_list import UserList, UserListWord
from app.models.learning_session import UserLearningSession, UserSessionItem
from app.models.learning_mistake import LearningMistake

__all__ = [
    'UserRole',
    'DifficultyLevel',
    'LearningStatus',
    'SessionType',
    'LanguageCode',
    'PartOfSpeech',
    'RelationshipType',
    'SourceType',
    'Gender',
    'Language',
    'User',
    'Image',
    'Word',
    'WordDetails',
    'Definition',
    'WordDefinition',
    'DefinitionExample',
    'Audio',
    'WordDetailsAudio',
    'DefinitionAudio',
    'ExampleAudio',
    'Translation',
    'DefinitionTranslation',
    'ExampleTranslation',
    'WordToWordRelationship',
    'WordDetailsRelationship',
    'DefinitionRelationship',
    'UserDictionary',
    'Category',
    'WordList',
    'ListWord',
    'UserList',
    'UserListWord',
    'UserLearningSession',
    'UserSessionItem',
    'LearningMistake',
]
