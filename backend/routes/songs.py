import os
import uuid
import logging
from typing import Optional

import redis
from rq import Queue
from fastapi import APIRouter, UploadFile, File, Form, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models import Song
from schemas.song import SongListItem
from services.catalog import song_melody, song_to_response
from services.solfege import transcribe
from services.storage import UploadTooLargeError, remove_midi, save_midi
from services.theory import InvalidKeyName, parse_key_signature
from workers.tasks import process_song

router = APIRouter()
logger = logging.getLogger(__name__)

MIDI_CONTENT_TYPES = frozenset({
    "audio/midi", "audio/mid", "audio/x-midi", "application/x-midi",
})


def get_song_or_404(song_id: str, db: Session) -> Song:
    song = db.query(Song).filter(Song.id == song_id).first()
    if not song:
        raise HTTPException(status_code=404, detail=f"Song with ID '{song_id}' not found")
    return song


def _song_to_dict(song: Song) -> dict:
    try:
        return song_to_response(song).model_dump()
    except ValidationError as exc:
        logger.error("Song %s: invalid melody schema: %s", song.id, exc)
        raise HTTPException(status_code=500, detail="Invalid melody schema in stored song")


def _normalize_key(key: Optional[str]) -> Optional[str]:
    if key is None or not key.strip():
        return None
    key = key.strip()
    try:
        parse_key_signature(key)
    except InvalidKeyName as exc:
        raise HTTPException(status_code=400, detail=f"Invalid key signature {key!r}: {exc}")
    return key


@router.post("/songs", status_code=201)
def upload_song(
    midi_file: UploadFile = File(...),
    key: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    db: Session = Depends(get_db),
) -> dict:
    filename = midi_file.filename or ""
    if not filename.lower().endswith(".mid") or midi_file.content_type not in MIDI_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Invalid file type. Please upload a .mid file.")

    song_key = _normalize_key(key)

    song_id = str(uuid.uuid4())
    try:
        midi_path = save_midi(song_id, midi_file)
    except UploadTooLargeError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    song = Song(
        id=song_id,
        status="CREATED",
        original_filename=os.path.basename(filename),
        title=title.strip() if title and title.strip() else None,
        file_path=midi_path,
        key=song_key,
    )
    db.add(song)
    db.commit()

    if settings.ingest_async:
        conn = redis.from_url(settings.redis_url)
        q = Queue(settings.ingest_queue, connection=conn)
        q.enqueue(process_song, song_id)
        logger.info("Created and enqueued song %s (key=%s)", song_id, song_key)
    else:
        process_song(song_id)
        db.refresh(song)
        if song.status != "READY":
            error = song.error or "Could not extract a melody from the MIDI file"
            db.delete(song)
            db.commit()
            remove_midi(midi_path)
            raise HTTPException(status_code=400, detail=error)
        logger.info("Created song %s (key=%s, %d notes)", song_id, song_key, len(song.melody))

    db.refresh(song)
    return _song_to_dict(song)


@router.get("/songs")
def list_songs(db: Session = Depends(get_db)) -> list:
    songs = db.query(Song).order_by(Song.created_at).all()
    return [SongListItem(id=s.id, name=s.display_name).model_dump() for s in songs]


@router.get("/songs/{song_id}")
def get_song(song_id: str, db: Session = Depends(get_db)) -> dict:
    return _song_to_dict(get_song_or_404(song_id, db))


@router.get("/songs/{song_id}/solfege")
def get_solfege(song_id: str, db: Session = Depends(get_db)) -> list:
    song = get_song_or_404(song_id, db)

    if not song.key or not song.key.strip():
        raise HTTPException(
            status_code=400,
            detail="Song does not have a key specified, cannot generate solfege.",
        )

    try:
        melody = song_melody(song)
    except ValidationError as exc:
        logger.error("Song %s: invalid melody schema: %s", song_id, exc)
        raise HTTPException(status_code=500, detail="Invalid melody schema in stored song")
    if not melody:
        raise HTTPException(status_code=400, detail="Song does not have melody data.")

    try:
        events = transcribe(melody, song.key)
    except InvalidKeyName as exc:
        raise HTTPException(
            status_code=400,
            detail=f"Error processing key signature {song.key!r}: {exc}",
        )
    return [e.model_dump() for e in events]
