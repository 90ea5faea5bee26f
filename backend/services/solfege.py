import logging
from typing import List, Optional, Sequence

from schemas.melody import PitchEvent, SolfegeEvent
from services.theory import (
    NO_KEY_SYLLABLE,
    interval_above_tonic,
    midi_octave,
    parse_key_signature,
    syllables_for,
)

logger = logging.getLogger(__name__)


def transcribe(notes: Sequence[PitchEvent], key: Optional[str]) -> List[SolfegeEvent]:
    """Map each note to a movable-do syllable relative to ``key``.

    The output has one event per input note, in the same order, with
    pitch and timing copied through. A blank key is not an error: every
    syllable becomes "N/A" so callers can still display octave and timing.
    Raises InvalidKeyName when the key's note name is not recognized.
    """
    if key is None or not key.strip():
        logger.warning("Key signature is missing; solfege syllables set to %s", NO_KEY_SYLLABLE)
        return [_to_event(n, NO_KEY_SYLLABLE) for n in notes]

    signature = parse_key_signature(key)
    syllables = syllables_for(signature)

    return [
        _to_event(n, syllables[interval_above_tonic(n.pitch, signature.tonic_pitch_class)])
        for n in notes
    ]


def _to_event(note: PitchEvent, syllable: str) -> SolfegeEvent:
    return SolfegeEvent(
        syllable=syllable,
        octave=midi_octave(note.pitch),
        start_time=note.start_time,
        duration=note.duration,
        pitch=note.pitch,
    )
