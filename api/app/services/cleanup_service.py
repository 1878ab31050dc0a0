"""
Cleanup of media rows that nothing refers to any more.
"""
import logging
from typing import Dict, List

from sqlmodel import Session, select

from app.models import Audio, DefinitionAudio, ExampleAudio, WordDetailsAudio
from app.utils.assets_utils import delete_asset_file

logger = logging.getLogger(__name__)


def get_orphaned_audio_ids(session: Session) -> List[int]:
    """Audio not linked to any word entry, definition or example."""
    referenced = (
        select(WordDetailsAudio.audio_id)
        .union(select(DefinitionAudio.audio_id))
        .union(select(ExampleAudio.audio_id))
    )
    return list(session.exec(
        select(Audio.id).where(Audio.id.not_in(referenced)).order_by(Audio.id)  # type: ignore
    ).all())


def delete_orphaned_audio(session: Session) -> Dict[str, int]:
    """
    Delete orphaned audio rows and their generated files.

    Returns:
        Counts of deleted rows and files
    """
    orphan_ids = get_orphaned_audio_ids(session)
    if not orphan_ids:
        return {'audio_deleted': 0, 'files_deleted': 0}

    files_deleted = 0
    for audio in session.exec(select(Audio).where(Audio.id.in_(orphan_ids))).all():  # type: ignore
        if audio.is_tts and delete_asset_file(audio.url):
            files_deleted += 1
        session.delete(audio)
    session.commit()

    logger.info(f"Deleted {len(orphan_ids)} orphaned audio records and {files_deleted} files")
    return {'audio_deleted': len(orphan_ids), 'files_deleted': files_deleted}


def run_all_cleanup_tasks(session: Session) -> Dict[str, int]:
    results = {}
    results.update(delete_orphaned_audio(session))
    return results
