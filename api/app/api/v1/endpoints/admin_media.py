"""
Admin media endpoints: definition images, pronunciation audio, batch jobs
and cleanup of unused files.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, File, Query, UploadFile, status
from sqlmodel import Session
from typing import Any, Dict, Optional

from app.api.v1.dependencies import get_admin_user
from app.core.database import get_session
from app.core.exceptions import NotFoundError
from app.schemas.media import (
    AttachPexelsPhotoRequest,
    AudioResponse,
    BatchAcceptedResponse,
    BatchAudioRequest,
    BatchImagesRequest,
    GenerateAudioRequest,
    ImageResponse,
)
from app.services import (
    audio_service,
    batch_service,
    cleanup_service,
    dictionary_service,
    image_service,
    pexels_service,
)

router = APIRouter(
    prefix="/admin/media",
    tags=["admin-media"],
    dependencies=[Depends(get_admin_user)],
)


# ============================================================================
# Images
# ============================================================================

@router.get("/pexels/search")
async def search_pexels(
    query: str = Query(..., min_length=1),
    orientation: str = "portrait",
    page: int = Query(1, ge=1),
    per_page: int = Query(15, ge=1, le=80),
) -> Dict[str, Any]:
    """Search Pexels so an admin can pick a photo by hand."""
    return pexels_service.search_photos(query, orientation=orientation, page=page, per_page=per_page)


@router.post("/definitions/{definition_id}/image", response_model=ImageResponse)
async def get_or_create_definition_image(
    definition_id: int,
    word: Optional[str] = None,
    session: Session = Depends(get_session)
):
    image = image_service.get_or_create_definition_image(session, word, definition_id)
    if image is None:
        raise NotFoundError(f"No image found for definition {definition_id}")
    return ImageResponse.model_validate(image)


@router.post("/definitions/{definition_id}/image/pexels", response_model=ImageResponse)
async def attach_pexels_photo(
    definition_id: int,
    request: AttachPexelsPhotoRequest,
    session: Session = Depends(get_session)
):
    """Attach a photo chosen from the Pexels search results."""
    dictionary_service.get_definition_or_404(session, definition_id)
    image = image_service.create_from_pexels(session, request.photo, definition_id)
    if image is None:
        raise NotFoundError("Photo has no usable image url")
    return ImageResponse.model_validate(image)


@router.post("/definitions/{definition_id}/image/upload", response_model=ImageResponse)
async def upload_definition_image(
    definition_id: int,
    file: UploadFile = File(...),
    session: Session = Depends(get_session)
):
    """Upload a photo; it is cropped to a square JPEG before saving."""
    file_content = await file.read()
    image = image_service.upload_definition_image(session, definition_id, file_content)
    return ImageResponse.model_validate(image)


@router.delete("/definitions/{definition_id}/image", status_code=status.HTTP_204_NO_CONTENT)
async def remove_definition_image(
    definition_id: int,
    session: Session = Depends(get_session)
):
    if not image_service.remove_definition_image(session, definition_id):
        raise NotFoundError(f"Definition {definition_id} has no image")
    return None


# ============================================================================
# Audio
# ============================================================================

@router.post("/word-details/{word_details_id}/audio", response_model=AudioResponse)
async def generate_word_audio(
    word_details_id: int,
    request: GenerateAudioRequest,
    session: Session = Depends(get_session)
):
    audio = audio_service.generate_audio_for_word_details(session, word_details_id, quality=request.quality)
    return AudioResponse.model_validate(audio)


@router.post("/examples/{example_id}/audio", response_model=AudioResponse)
async def generate_example_audio(
    example_id: int,
    request: GenerateAudioRequest,
    session: Session = Depends(get_session)
):
    audio = audio_service.generate_audio_for_example(session, example_id, quality=request.quality)
    return AudioResponse.model_validate(audio)


@router.get("/tts/usage")
async def get_tts_usage() -> Dict[str, Any]:
    """Characters and estimated cost of speech generated since the last reset."""
    return audio_service.get_usage_stats()


@router.post("/tts/usage/reset")
async def reset_tts_usage() -> Dict[str, Any]:
    return audio_service.reset_usage_stats()


# ============================================================================
# Batch jobs
# ============================================================================

@router.post("/batch/images", response_model=BatchAcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def batch_generate_images(
    request: BatchImagesRequest,
    background_tasks: BackgroundTasks,
):
    """Find images for many definitions in the background, a chunk at a time."""
    background_tasks.add_task(batch_service.run_image_batch, request.definition_ids)
    return BatchAcceptedResponse(
        message="Image generation started",
        count=len(request.definition_ids),
    )


@router.post("/batch/audio", response_model=BatchAcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def batch_generate_audio(
    request: BatchAudioRequest,
    background_tasks: BackgroundTasks,
):
    background_tasks.add_task(batch_service.run_audio_batch, request.word_details_ids, request.quality)
    return BatchAcceptedResponse(
        message="Audio generation started",
        count=len(request.word_details_ids),
    )


# ============================================================================
# Cleanup
# ============================================================================

@router.post("/cleanup")
async def run_cleanup(
    session: Session = Depends(get_session)
) -> Dict[str, int]:
    """Delete audio no word entry, definition or example links to."""
    return cleanup_service.run_all_cleanup_tasks(session)
