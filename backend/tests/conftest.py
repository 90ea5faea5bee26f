import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="solfege-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["DATA_DIR"] = _TMP_DIR
os.environ["INGEST_ASYNC"] = "false"

import pretty_midi  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app import app  # noqa: E402
from database import Base, SessionLocal, engine  # noqa: E402
from models import Song  # noqa: E402
from schemas.melody import PitchEvent  # noqa: E402

Base.metadata.create_all(bind=engine)


def make_notes(pitches, step=0.5):
    return [
        PitchEvent(pitch=p, start_time=i * step, duration=step)
        for i, p in enumerate(pitches)
    ]


def midi_bytes(pitches, step=0.5, drums=None) -> bytes:
    """Render a one-instrument MIDI file (plus optional drum track) to bytes."""
    pm = pretty_midi.PrettyMIDI()
    if drums:
        drum = pretty_midi.Instrument(program=0, is_drum=True, name="drums")
        for i, p in enumerate(drums):
            drum.notes.append(pretty_midi.Note(velocity=90, pitch=p, start=i * step, end=(i + 1) * step))
        pm.instruments.append(drum)
    inst = pretty_midi.Instrument(program=0, name="melody")
    for i, p in enumerate(pitches):
        inst.notes.append(pretty_midi.Note(velocity=90, pitch=p, start=i * step, end=(i + 1) * step))
    pm.instruments.append(inst)
    fd, path = tempfile.mkstemp(suffix=".mid", dir=_TMP_DIR)
    os.close(fd)
    try:
        pm.write(path)
        with open(path, "rb") as f:
            return f.read()
    finally:
        os.remove(path)


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture(autouse=True)
def clean_songs():
    yield
    db = SessionLocal()
    try:
        db.query(Song).delete()
        db.commit()
    finally:
        db.close()


@pytest.fixture
def upload(client):
    def _upload(pitches, key=None, title=None, filename="melody.mid"):
        data = {}
        if key is not None:
            data["key"] = key
        if title is not None:
            data["title"] = title
        return client.post(
            "/songs",
            files={"midi_file": (filename, midi_bytes(pitches), "audio/midi")},
            data=data,
        )

    return _upload
