"""
Model enums.
"""
from enum import Enum


class UserRole(str, Enum):
    """Role of a user account."""
    ADMIN = "admin"
    USER = "user"
    MODERATOR = "moderator"
    LEARNER = "learner"
    GUEST = "guest"


class DifficultyLevel(str, Enum):
    """Difficulty of a list or a user's custom entry."""
    BEGINNER = "beginner"
    ELEMENTARY = "elementary"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    PROFICIENT = "proficient"


class LearningStatus(str, Enum):
    """Learning state of a word in a user's dictionary."""
    NOT_STARTED = "notStarted"
    IN_PROGRESS = "inProgress"
    LEARNED = "learned"
    NEEDS_REVIEW = "needsReview"
    DIFFICULT = "difficult"


class SessionType(str, Enum):
    """Kind of learning session."""
    REVIEW = "review"
    NEW_LEARNING = "newLearning"
    PRACTICE = "practice"
    TEST = "test"
    SPACED = "spaced"


class LanguageCode(str, Enum):
    """Supported language codes."""
    EN = "en"
    RU = "ru"
    DA = "da"
    ES = "es"
    FR = "fr"
    DE = "de"
    IT = "it"
    PT = "pt"
    ZH = "zh"
    JA = "ja"
    KO = "ko"
    AR = "ar"


class PartOfSpeech(str, Enum):
    """Grammatical category of a word entry."""
    NOUN = "noun"
    VERB = "verb"
    PHRASAL_VERB = "phrasal_verb"
    ADJECTIVE = "adjective"
    ADVERB = "adverb"
    PRONOUN = "pronoun"
    PREPOSITION = "preposition"
    CONJUNCTION = "conjunction"
    INTERJECTION = "interjection"
    NUMERAL = "numeral"
    ARTICLE = "article"
    EXCLAMATION = "exclamation"
    ABBREVIATION = "abbreviation"
    SUFFIX = "suffix"
    PHRASE = "phrase"
    SENTENCE = "sentence"
    UNDEFINED = "undefined"


class RelationshipType(str, Enum):
    """Type of link between two words, word entries or definitions."""
    SYNONYM = "synonym"
    ANTONYM = "antonym"
    RELATED = "related"
    STEM = "stem"
    COMPOSITION = "composition"
    PHRASAL_VERB = "phrasal_verb"
    PHRASE = "phrase"
    ALTERNATIVE_SPELLING = "alternative_spelling"
    ABBREVIATION = "abbreviation"
    DERIVED_FORM = "derived_form"
    DIALECT_VARIANT = "dialect_variant"
    TRANSLATION = "translation"
    # English inflections
    PLURAL_EN = "plural_en"
    PAST_TENSE_EN = "past_tense_en"
    PAST_PARTICIPLE_EN = "past_participle_en"
    PRESENT_PARTICIPLE_EN = "present_participle_en"
    THIRD_PERSON_EN = "third_person_en"
    VARIANT_FORM_PHRASAL_VERB_EN = "variant_form_phrasal_verb_en"
    # Danish inflections
    DEFINITE_FORM_DA = "definite_form_da"
    PLURAL_DA = "plural_da"
    PLURAL_DEFINITE_DA = "plural_definite_da"
    PRESENT_TENSE_DA = "present_tense_da"
    PAST_TENSE_DA = "past_tense_da"
    PAST_PARTICIPLE_DA = "past_participle_da"
    IMPERATIVE_DA = "imperative_da"
    ADJECTIVE_NEUTER_DA = "adjective_neuter_da"
    ADJECTIVE_PLURAL_DA = "adjective_plural_da"
    COMPARATIVE_DA = "comparative_da"
    SUPERLATIVE_DA = "superlative_da"
    ADVERB_COMPARATIVE_DA = "adverb_comparative_da"
    ADVERB_SUPERLATIVE_DA = "adverb_superlative_da"
    PRONOUN_ACCUSATIVE_DA = "pronoun_accusative_da"
    PRONOUN_GENITIVE_DA = "pronoun_genitive_da"


class SourceType(str, Enum):
    """Where a piece of dictionary content came from."""
    AI_GENERATED = "ai-generated"
    MERRIAM_LEARNERS = "merriam_learners"
    MERRIAM_INTERMEDIATE = "merriam_intermediate"
    HELSINKI_NLP = "helsinki_nlp"
    DANISH_DICTIONARY = "danish_dictionary"
    USER = "user"
    ADMIN = "admin"


class Gender(str, Enum):
    """Grammatical gender."""
    MASCULINE = "masculine"
    FEMININE = "feminine"
    COMMON = "common"
    NEUTER = "neuter"
