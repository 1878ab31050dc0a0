"""
Admin dictionary endpoints: curation of words, definitions, examples and
relationships, plus dictionary ingestion.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session
from typing import Any, Dict, List, Optional

from app.api.v1.dependencies import get_admin_user
from app.core.database import get_session
from app.models import PartOfSpeech, RelationshipType, SourceType
from app.schemas.dictionary import (
    AddManualFormsRequest,
    CreateDefinitionRequest,
    CreateRelationshipRequest,
    DefinitionResponse,
    DictionaryWordsResponse,
    ExampleRequest,
    ExampleResponse,
    IngestWordRequest,
    UpdateDefinitionRequest,
    UpdateWordDetailsRequest,
    UpdateWordRequest,
    WordDetailsResponse,
    WordResponse,
)
from app.schemas.ingestion import IngestionResult
from app.services import (
    danish_dictionary_service,
    dictionary_service,
    merriam_webster_service,
    translation_service,
)

router = APIRouter(
    prefix="/admin/dictionary",
    tags=["admin-dictionary"],
    dependencies=[Depends(get_admin_user)],
)


def _definition_response(definition) -> DefinitionResponse:
    return DefinitionResponse.model_validate(definition, from_attributes=True)


def _example_response(example) -> ExampleResponse:
    return ExampleResponse.model_validate(example, from_attributes=True)


@router.get("/words", response_model=DictionaryWordsResponse)
async def get_dictionary_words(
    language_code: str = Query(..., max_length=2),
    part_of_speech: Optional[PartOfSpeech] = None,
    source: Optional[SourceType] = None,
    has_image: Optional[bool] = None,
    has_audio: Optional[bool] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    session: Session = Depends(get_session)
):
    """Admin table of word entries and their definitions."""
    return dictionary_service.fetch_dictionary_words(
        session,
        language_code,
        part_of_speech=part_of_speech,
        source=source,
        has_image=has_image,
        has_audio=has_audio,
        search=search,
        page=page,
        page_size=page_size,
    )


@router.put("/words/{word_id}", response_model=WordResponse)
async def update_word(
    word_id: int,
    request: UpdateWordRequest,
    session: Session = Depends(get_session)
):
    word = dictionary_service.update_word(session, word_id, request.model_dump(exclude_unset=True))
    return WordResponse.model_validate(word)


@router.delete("/words/{word_id}")
async def delete_word(
    word_id: int,
    session: Session = Depends(get_session)
) -> Dict[str, int]:
    """Delete a word with its entries; definitions used elsewhere are kept."""
    return dictionary_service.delete_word(session, word_id)


@router.put("/word-details/{word_details_id}", response_model=WordDetailsResponse)
async def update_word_details(
    word_details_id: int,
    request: UpdateWordDetailsRequest,
    session: Session = Depends(get_session)
):
    details = dictionary_service.update_word_details(
        session, word_details_id, request.model_dump(exclude_unset=True)
    )
    return WordDetailsResponse.model_validate(details, from_attributes=True)


@router.post("/word-details/{word_details_id}/forms", response_model=List[WordDetailsResponse])
async def add_manual_forms(
    word_details_id: int,
    request: AddManualFormsRequest,
    session: Session = Depends(get_session)
):
    """Attach inflected forms typed in by an admin."""
    created = dictionary_service.add_manual_forms(
        session, word_details_id, [form.model_dump() for form in request.forms]
    )
    return [WordDetailsResponse.model_validate(d, from_attributes=True) for d in created]


@router.post("/definitions", response_model=DefinitionResponse, status_code=status.HTTP_201_CREATED)
async def create_definition(
    request: CreateDefinitionRequest,
    session: Session = Depends(get_session)
):
    definition = dictionary_service.create_definition(
        session, request.word_details_id, request.model_dump(exclude={'word_details_id'})
    )
    return _definition_response(definition)


@router.put("/definitions/{definition_id}", response_model=DefinitionResponse)
async def update_definition(
    definition_id: int,
    request: UpdateDefinitionRequest,
    session: Session = Depends(get_session)
):
    definition = dictionary_service.update_definition(
        session, definition_id, request.model_dump(exclude_unset=True)
    )
    return _definition_response(definition)


@router.delete("/definitions/{definition_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_definition(
    definition_id: int,
    session: Session = Depends(get_session)
):
    dictionary_service.delete_definition(session, definition_id)
    return None


@router.post("/definitions/{definition_id}/examples", response_model=ExampleResponse, status_code=status.HTTP_201_CREATED)
async def add_example(
    definition_id: int,
    request: ExampleRequest,
    session: Session = Depends(get_session)
):
    example = dictionary_service.add_example(session, definition_id, request.model_dump())
    return _example_response(example)


@router.put("/examples/{example_id}", response_model=ExampleResponse)
async def update_example(
    example_id: int,
    request: ExampleRequest,
    session: Session = Depends(get_session)
):
    example = dictionary_service.update_example(session, example_id, request.model_dump(exclude_unset=True))
    return _example_response(example)


@router.delete("/examples/{example_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_example(
    example_id: int,
    session: Session = Depends(get_session)
):
    dictionary_service.delete_example(session, example_id)
    return None


@router.post("/definitions/{definition_id}/translate")
async def translate_definition(
    definition_id: int,
    target_language: str = Query(..., max_length=2),
    session: Session = Depends(get_session)
) -> Dict[str, int]:
    """Machine-translate a definition and its examples."""
    return translation_service.translate_definition(session, definition_id, target_language)


@router.post("/relationships", status_code=status.HTTP_201_CREATED)
async def create_relationship(
    request: CreateRelationshipRequest,
    session: Session = Depends(get_session)
) -> Dict[str, Any]:
    dictionary_service.create_relationship(
        session,
        request.level,
        request.from_id,
        request.to_id,
        request.type,
        description=request.description,
        order_index=request.order_index,
    )
    return {'level': request.level, 'from_id': request.from_id, 'to_id': request.to_id, 'type': request.type}


@router.delete("/relationships", status_code=status.HTTP_204_NO_CONTENT)
async def delete_relationship(
    level: str,
    from_id: int,
    to_id: int,
    type: RelationshipType,
    session: Session = Depends(get_session)
):
    dictionary_service.delete_relationship(session, level, from_id, to_id, type)
    return None


@router.post("/ingest/merriam-webster", response_model=IngestionResult)
async def ingest_merriam_webster(
    request: IngestWordRequest,
    session: Session = Depends(get_session)
):
    """Fetch a word from Merriam-Webster and save every entry returned."""
    return merriam_webster_service.ingest_word(session, request.word, request.dictionary_type)


@router.post("/ingest/danish", response_model=IngestionResult)
async def ingest_danish(
    objects: List[Dict[str, Any]],
    session: Session = Depends(get_session)
):
    """Save words from Danish dictionary JSON objects."""
    return danish_dictionary_service.ingest_danish_objects(session, objects)
