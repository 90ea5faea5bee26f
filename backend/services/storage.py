import logging
import os

from fastapi import UploadFile

from config import settings

logger = logging.getLogger(__name__)

MIDI_DIR_NAME = "midi_files"


class UploadTooLargeError(ValueError):
    pass


def midi_dir() -> str:
    return os.path.join(settings.data_dir, MIDI_DIR_NAME)


def save_midi(song_id: str, file: UploadFile) -> str:
    """Write an uploaded MIDI file to the data directory and return its path."""
    max_bytes = settings.max_upload_mb * 1024 * 1024
    data = file.file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise UploadTooLargeError(f"MIDI file exceeds {settings.max_upload_mb} MB")

    os.makedirs(midi_dir(), exist_ok=True)
    midi_path = os.path.join(midi_dir(), f"{song_id}.mid")
    with open(midi_path, "wb") as f:
        f.write(data)
    logger.info("Saved MIDI for song %s -> %s (%d bytes)", song_id, midi_path, len(data))
    return midi_path


def remove_midi(midi_path: str) -> None:
    if os.path.exists(midi_path):
        os.remove(midi_path)
        logger.info("Removed MIDI file %s", midi_path)
