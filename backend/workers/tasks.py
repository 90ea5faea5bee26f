import logging

from sqlalchemy.orm.attributes import flag_modified

from database import SessionLocal
from models import Song
from services.midi import extract_melody

logger = logging.getLogger(__name__)


def process_song(song_id: str) -> None:
    """Extract the melody of an uploaded song and mark it READY or FAILED."""
    db = SessionLocal()
    song = None
    try:
        song = db.query(Song).filter(Song.id == song_id).first()
        if not song:
            logger.error("Song %s not found", song_id)
            return

        song.status = "PARSING"
        db.commit()
        logger.info("Song %s: PARSING", song_id)

        melody = extract_melody(song.file_path)

        song.melody = [n.model_dump() for n in melody]
        flag_modified(song, "melody")
        song.status = "READY"
        song.error = None
        db.commit()
        logger.info("Song %s: READY (%d notes)", song_id, len(melody))

    except Exception as exc:
        logger.exception("Song %s failed: %s", song_id, exc)
        try:
            if song is not None:
                song.status = "FAILED"
                song.error = str(exc)
                db.commit()
        except Exception:
            logger.exception("Song %s: could not record failure", song_id)
    finally:
        db.close()
