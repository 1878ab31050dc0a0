"""Initial schema: dictionary, user collections, lists and learning sessions

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-01-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(*names):
    return [sa.Column(name, sa.DateTime(), nullable=False) for name in names]


def _link_table(name, left, left_ref, right, right_ref, *extra):
    op.create_table(
        name,
        sa.Column(left, sa.Integer(), nullable=False),
        sa.Column(right, sa.Integer(), nullable=False),
        *extra,
        sa.ForeignKeyConstraint([left], [left_ref]),
        sa.ForeignKeyConstraint([right], [right_ref]),
        sa.PrimaryKeyConstraint(left, right)
    )


def _is_primary():
    return sa.Column('is_primary', sa.Boolean(), nullable=False)


def _relationship_table(name, prefix, ref):
    # Enum columns hold the member name, as SQLModel writes them
    op.create_table(
        name,
        sa.Column(f'from_{prefix}_id', sa.Integer(), nullable=False),
        sa.Column(f'to_{prefix}_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('order_index', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint([f'from_{prefix}_id'], [ref]),
        sa.ForeignKeyConstraint([f'to_{prefix}_id'], [ref]),
        sa.PrimaryKeyConstraint(f'from_{prefix}_id', f'to_{prefix}_id', 'type')
    )


def upgrade() -> None:
    op.create_table(
        'languages',
        sa.Column('code', sa.String(length=2), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.PrimaryKeyConstraint('code')
    )

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password', sa.String(), nullable=False),
        sa.Column('base_language_code', sa.String(length=2), nullable=False),
        sa.Column('target_language_code', sa.String(length=2), nullable=False),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('profile_picture_url', sa.String(), nullable=True),
        sa.Column('settings', sa.JSON(), nullable=True),
        sa.Column('study_preferences', sa.JSON(), nullable=True),
        *_timestamps('created_at', 'updated_at'),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['base_language_code'], ['languages.code']),
        sa.ForeignKeyConstraint(['target_language_code'], ['languages.code']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'images',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        *_timestamps('created_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('url')
    )

    # Dictionary
    op.create_table(
        'words',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('word', sa.String(), nullable=False),
        sa.Column('language_code', sa.String(length=2), nullable=False),
        sa.Column('phonetic_general', sa.String(), nullable=True),
        sa.Column('frequency_general', sa.Integer(), nullable=True),
        sa.Column('is_highlighted', sa.Boolean(), nullable=False),
        sa.Column('etymology', sa.String(), nullable=True),
        sa.Column('source_entity_id', sa.String(), nullable=True),
        *_timestamps('created_at', 'updated_at'),
        sa.ForeignKeyConstraint(['language_code'], ['languages.code']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('word', 'language_code', name='uq_words_word_language')
    )
    op.create_index(op.f('ix_words_word'), 'words', ['word'], unique=False)
    op.create_index(op.f('ix_words_language_code'), 'words', ['language_code'], unique=False)

    op.create_table(
        'word_details',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('word_id', sa.Integer(), nullable=False),
        sa.Column('part_of_speech', sa.String(), nullable=False),
        sa.Column('variant', sa.String(), nullable=False),
        sa.Column('gender', sa.String(), nullable=True),
        sa.Column('phonetic', sa.String(), nullable=True),
        sa.Column('forms', sa.JSON(), nullable=True),
        sa.Column('frequency', sa.Integer(), nullable=True),
        sa.Column('is_plural', sa.Boolean(), nullable=False),
        sa.Column('source', sa.String(), nullable=True),
        *_timestamps('created_at'),
        sa.ForeignKeyConstraint(['word_id'], ['words.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('word_id', 'part_of_speech', 'variant', name='uq_word_details_word_pos_variant')
    )
    op.create_index(op.f('ix_word_details_word_id'), 'word_details', ['word_id'], unique=False)

    op.create_table(
        'definitions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('definition', sa.String(), nullable=False),
        sa.Column('language_code', sa.String(length=2), nullable=False),
        sa.Column('source', sa.String(), nullable=False),
        sa.Column('image_id', sa.Integer(), nullable=True),
        sa.Column('subject_status_labels', sa.String(), nullable=True),
        sa.Column('general_labels', sa.String(), nullable=True),
        sa.Column('grammatical_note', sa.String(), nullable=True),
        sa.Column('usage_note', sa.String(), nullable=True),
        sa.Column('is_in_short_def', sa.Boolean(), nullable=False),
        *_timestamps('created_at', 'updated_at'),
        sa.ForeignKeyConstraint(['language_code'], ['languages.code']),
        sa.ForeignKeyConstraint(['image_id'], ['images.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('definition', 'language_code', 'source', name='uq_definitions_text_language_source')
    )
    op.create_index(op.f('ix_definitions_language_code'), 'definitions', ['language_code'], unique=False)

    _link_table(
        'word_definitions',
        'word_details_id', 'word_details.id',
        'definition_id', 'definitions.id',
        sa.Column('is_primary', sa.Boolean(), nullable=False),
    )

    op.create_table(
        'definition_examples',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('definition_id', sa.Integer(), nullable=False),
        sa.Column('example', sa.String(), nullable=False),
        sa.Column('language_code', sa.String(length=2), nullable=False),
        sa.Column('grammatical_note', sa.String(), nullable=True),
        sa.Column('source_of_example', sa.String(), nullable=True),
        sa.ForeignKeyConstraint(['definition_id'], ['definitions.id']),
        sa.ForeignKeyConstraint(['language_code'], ['languages.code']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('definition_id', 'example', name='uq_definition_examples_definition_example')
    )
    op.create_index(op.f('ix_definition_examples_definition_id'), 'definition_examples', ['definition_id'], unique=False)

    # Audio and translations
    op.create_table(
        'audio',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('language_code', sa.String(length=2), nullable=False),
        sa.Column('source', sa.String(), nullable=True),
        sa.Column('is_tts', sa.Boolean(), nullable=False),
        *_timestamps('created_at'),
        sa.ForeignKeyConstraint(['language_code'], ['languages.code']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('url', 'language_code', name='uq_audio_url_language')
    )
    _link_table('word_details_audio', 'word_details_id', 'word_details.id', 'audio_id', 'audio.id', _is_primary())
    _link_table('definition_audio', 'definition_id', 'definitions.id', 'audio_id', 'audio.id', _is_primary())
    _link_table('example_audio', 'example_id', 'definition_examples.id', 'audio_id', 'audio.id', _is_primary())

    op.create_table(
        'translations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('language_code', sa.String(length=2), nullable=False),
        sa.Column('content', sa.String(), nullable=False),
        sa.Column('source', sa.String(), nullable=False),
        *_timestamps('created_at'),
        sa.ForeignKeyConstraint(['language_code'], ['languages.code']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_translations_language_code'), 'translations', ['language_code'], unique=False)
    _link_table('definition_translations', 'definition_id', 'definitions.id', 'translation_id', 'translations.id')
    _link_table('example_translations', 'example_id', 'definition_examples.id', 'translation_id', 'translations.id')

    _relationship_table('word_to_word_relationships', 'word', 'words.id')
    _relationship_table('word_details_relationships', 'word_details', 'word_details.id')
    _relationship_table('definition_relationships', 'definition', 'definitions.id')

    # User collections
    op.create_table(
        'user_dictionary',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('definition_id', sa.Integer(), nullable=False),
        sa.Column('base_language_code', sa.String(length=2), nullable=False),
        sa.Column('target_language_code', sa.String(length=2), nullable=False),
        sa.Column('custom_definition_base', sa.String(), nullable=True),
        sa.Column('custom_definition_target', sa.String(), nullable=True),
        sa.Column('custom_phonetic', sa.String(), nullable=True),
        sa.Column('custom_notes', sa.String(), nullable=True),
        sa.Column('custom_tags', sa.JSON(), nullable=True),
        sa.Column('custom_difficulty_level', sa.String(), nullable=True),
        sa.Column('is_favorite', sa.Boolean(), nullable=False),
        sa.Column('is_modified', sa.Boolean(), nullable=False),
        sa.Column('learning_status', sa.String(), nullable=False),
        sa.Column('progress', sa.Float(), nullable=False),
        sa.Column('mastery_score', sa.Float(), nullable=False),
        sa.Column('review_count', sa.Integer(), nullable=False),
        sa.Column('amount_of_mistakes', sa.Integer(), nullable=False),
        sa.Column('correct_streak', sa.Integer(), nullable=False),
        sa.Column('last_reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('time_word_was_started_to_learn', sa.DateTime(), nullable=True),
        sa.Column('time_word_was_learned', sa.DateTime(), nullable=True),
        sa.Column('next_review_due', sa.DateTime(), nullable=True),
        sa.Column('srs_level', sa.Integer(), nullable=False),
        sa.Column('srs_interval', sa.Integer(), nullable=False),
        sa.Column('last_srs_success', sa.Boolean(), nullable=True),
        sa.Column('next_srs_review', sa.DateTime(), nullable=True),
        *_timestamps('created_at', 'updated_at'),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['definition_id'], ['definitions.id']),
        sa.ForeignKeyConstraint(['base_language_code'], ['languages.code']),
        sa.ForeignKeyConstraint(['target_language_code'], ['languages.code']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'definition_id', name='uq_user_dictionary_user_definition')
    )
    op.create_index(op.f('ix_user_dictionary_user_id'), 'user_dictionary', ['user_id'], unique=False)
    op.create_index(op.f('ix_user_dictionary_definition_id'), 'user_dictionary', ['definition_id'], unique=False)
    op.create_index(op.f('ix_user_dictionary_learning_status'), 'user_dictionary', ['learning_status'], unique=False)

    # Lists
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        *_timestamps('created_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    op.create_table(
        'lists',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('base_language_code', sa.String(length=2), nullable=True),
        sa.Column('target_language_code', sa.String(length=2), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('cover_image_url', sa.String(), nullable=True),
        sa.Column('difficulty_level', sa.String(), nullable=True),
        sa.Column('word_count', sa.Integer(), nullable=False),
        sa.Column('learned_word_count', sa.Integer(), nullable=False),
        *_timestamps('created_at', 'updated_at'),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id']),
        sa.ForeignKeyConstraint(['base_language_code'], ['languages.code']),
        sa.ForeignKeyConstraint(['target_language_code'], ['languages.code']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', 'category_id', name='uq_lists_name_category')
    )
    op.create_index(op.f('ix_lists_category_id'), 'lists', ['category_id'], unique=False)

    _link_table(
        'list_words',
        'list_id', 'lists.id',
        'definition_id', 'definitions.id',
        sa.Column('order_index', sa.Integer(), nullable=False),
    )

    op.create_table(
        'user_lists',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('list_id', sa.Integer(), nullable=True),
        sa.Column('base_language_code', sa.String(length=2), nullable=False),
        sa.Column('target_language_code', sa.String(length=2), nullable=False),
        sa.Column('is_modified', sa.Boolean(), nullable=False),
        sa.Column('custom_name_of_list', sa.String(), nullable=True),
        sa.Column('custom_description_of_list', sa.String(), nullable=True),
        sa.Column('custom_cover_image_url', sa.String(), nullable=True),
        sa.Column('custom_difficulty', sa.String(), nullable=True),
        sa.Column('progress', sa.Float(), nullable=False),
        *_timestamps('created_at', 'updated_at'),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['list_id'], ['lists.id']),
        sa.ForeignKeyConstraint(['base_language_code'], ['languages.code']),
        sa.ForeignKeyConstraint(['target_language_code'], ['languages.code']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'list_id', name='uq_user_lists_user_list')
    )
    op.create_index(op.f('ix_user_lists_user_id'), 'user_lists', ['user_id'], unique=False)

    _link_table(
        'user_list_words',
        'user_list_id', 'user_lists.id',
        'user_dictionary_id', 'user_dictionary.id',
        sa.Column('order_index', sa.Integer(), nullable=False),
    )

    # Learning sessions
    op.create_table(
        'user_learning_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('user_list_id', sa.Integer(), nullable=True),
        sa.Column('list_id', sa.Integer(), nullable=True),
        sa.Column('session_type', sa.String(), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('words_studied', sa.Integer(), nullable=False),
        sa.Column('words_learned', sa.Integer(), nullable=False),
        sa.Column('correct_answers', sa.Integer(), nullable=False),
        sa.Column('incorrect_answers', sa.Integer(), nullable=False),
        sa.Column('score', sa.Float(), nullable=True),
        sa.Column('completion_percentage', sa.Float(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['user_list_id'], ['user_lists.id']),
        sa.ForeignKeyConstraint(['list_id'], ['lists.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_user_learning_sessions_user_id'), 'user_learning_sessions', ['user_id'], unique=False)

    op.create_table(
        'user_session_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.Integer(), nullable=False),
        sa.Column('user_dictionary_id', sa.Integer(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        sa.Column('response_time', sa.Integer(), nullable=True),
        sa.Column('attempts_count', sa.Integer(), nullable=False),
        *_timestamps('created_at'),
        sa.ForeignKeyConstraint(['session_id'], ['user_learning_sessions.id']),
        sa.ForeignKeyConstraint(['user_dictionary_id'], ['user_dictionary.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_id', 'user_dictionary_id', name='uq_user_session_items_session_entry')
    )
    op.create_index(op.f('ix_user_session_items_session_id'), 'user_session_items', ['session_id'], unique=False)

    op.create_table(
        'learning_mistakes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('word_id', sa.Integer(), nullable=True),
        sa.Column('word_details_id', sa.Integer(), nullable=True),
        sa.Column('definition_id', sa.Integer(), nullable=True),
        sa.Column('user_dictionary_id', sa.Integer(), nullable=True),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('incorrect_value', sa.String(), nullable=True),
        sa.Column('context', sa.String(), nullable=True),
        sa.Column('mistake_data', sa.JSON(), nullable=True),
        *_timestamps('created_at'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['word_id'], ['words.id']),
        sa.ForeignKeyConstraint(['word_details_id'], ['word_details.id']),
        sa.ForeignKeyConstraint(['definition_id'], ['definitions.id']),
        sa.ForeignKeyConstraint(['user_dictionary_id'], ['user_dictionary.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_learning_mistakes_user_id'), 'learning_mistakes', ['user_id'], unique=False)


def downgrade() -> None:
    for table in (
        'learning_mistakes',
        'user_session_items',
        'user_learning_sessions',
        'user_list_words',
        'user_lists',
        'list_words',
        'lists',
        'categories',
        'user_dictionary',
        'definition_relationships',
        'word_details_relationships',
        'word_to_word_relationships',
        'example_translations',
        'definition_translations',
        'translations',
        'example_audio',
        'definition_audio',
        'word_details_audio',
        'audio',
        'definition_examples',
        'word_definitions',
        'definitions',
        'word_details',
        'words',
        'images',
        'users',
        'languages',
    ):
        op.drop_table(table)
