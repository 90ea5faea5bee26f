from typing import List, Optional

from sqlalchemy.orm import Session

from models import Song
from schemas.melody import PitchEvent
from schemas.song import MelodyRecord, SongResponse


def song_melody(song: Song) -> Optional[List[PitchEvent]]:
    """Validate the stored melody JSON. Raises pydantic.ValidationError."""
    if song.melody is None:
        return None
    return [PitchEvent(**n) for n in song.melody]


def song_to_response(song: Song) -> SongResponse:
    return SongResponse(
        id=song.id,
        status=song.status,
        original_filename=song.original_filename,
        title=song.title,
        file_path=song.file_path,
        key=song.key,
        melody=song_melody(song),
        created_at=song.created_at.isoformat() if song.created_at else None,
        error=song.error,
    )


def song_to_record(song: Song) -> MelodyRecord:
    return MelodyRecord(
        id=song.id,
        display_name=song.display_name,
        key=song.key,
        notes=song_melody(song),
    )


def load_catalog(db: Session) -> List[MelodyRecord]:
    """Snapshot every stored song as a matcher catalog entry."""
    songs = db.query(Song).order_by(Song.created_at).all()
    return [song_to_record(s) for s in songs]
