import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from routes.songs import get_song_or_404
from schemas.match import MatchRequest, RangeMatchRequest
from schemas.melody import SolfegeEvent
from services.catalog import load_catalog, song_melody
from services.matcher import ON_INVALID_KEY_RAISE, ON_INVALID_KEY_SKIP, find_matches
from services.solfege import transcribe
from services.theory import InvalidKeyName

router = APIRouter()
logger = logging.getLogger(__name__)


def _run_matches(query: list[SolfegeEvent], source_song_id: str, db: Session) -> list:
    try:
        catalog = load_catalog(db)
    except ValidationError as exc:
        logger.error("Invalid melody schema in catalog: %s", exc)
        raise HTTPException(status_code=500, detail="Invalid melody schema in stored songs")

    policy = ON_INVALID_KEY_SKIP if settings.match_skip_invalid_keys else ON_INVALID_KEY_RAISE
    try:
        matches = find_matches(query, catalog, source_song_id, on_invalid_key=policy)
    except InvalidKeyName as exc:
        logger.error("Match scan aborted by a catalog key: %s", exc)
        raise HTTPException(status_code=500, detail=f"Invalid key signature in catalog: {exc}")
    return [m.model_dump() for m in matches]


@router.post("/matches")
def find_similar(req: MatchRequest, db: Session = Depends(get_db)) -> list:
    if not req.source_song_id.strip():
        raise HTTPException(status_code=400, detail="Invalid or missing source_song_id.")
    if not req.selected_segment:
        raise HTTPException(status_code=400, detail="selected_segment must be a non-empty array.")

    return _run_matches(req.selected_segment, req.source_song_id, db)


@router.post("/songs/{song_id}/matches")
def find_similar_to_range(
    song_id: str,
    req: RangeMatchRequest,
    db: Session = Depends(get_db),
) -> list:
    song = get_song_or_404(song_id, db)
    if not song.key or not song.key.strip():
        raise HTTPException(status_code=400, detail="Song does not have a key specified.")

    try:
        melody = song_melody(song) or []
    except ValidationError as exc:
        logger.error("Song %s: invalid melody schema: %s", song_id, exc)
        raise HTTPException(status_code=500, detail="Invalid melody schema in stored song")

    if req.start_index < 0 or req.end_index > len(melody):
        raise HTTPException(
            status_code=400,
            detail=f"Range must lie within 0..{len(melody)}",
        )
    if req.end_index <= req.start_index:
        raise HTTPException(status_code=400, detail="end_index must be greater than start_index")

    try:
        solfege = transcribe(melody, song.key)
    except InvalidKeyName as exc:
        raise HTTPException(
            status_code=400,
            detail=f"Error processing key signature {song.key!r}: {exc}",
        )

    return _run_matches(solfege[req.start_index:req.end_index], song.id, db)
