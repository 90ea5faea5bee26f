import logging
from typing import List

import pretty_midi

from schemas.melody import PitchEvent

logger = logging.getLogger(__name__)


class MidiParseError(ValueError):
    """The uploaded file is not a readable MIDI file or holds no melody."""


def extract_melody(midi_path: str) -> List[PitchEvent]:
    """Load the melody of a MIDI file as pitch events in playing order.

    The first non-drum instrument that has notes is taken as the melody;
    the rest of the file is ignored.
    """
    try:
        pm = pretty_midi.PrettyMIDI(midi_path)
    except Exception as exc:
        raise MidiParseError(f"Could not parse MIDI file: {exc}") from exc

    for inst in pm.instruments:
        if inst.is_drum or not inst.notes:
            continue
        notes = sorted(inst.notes, key=lambda n: (n.start, n.pitch))
        melody = [
            PitchEvent(
                pitch=int(n.pitch),
                start_time=max(0.0, float(n.start)),
                duration=float(n.end - n.start),
            )
            for n in notes
            if n.end > n.start
        ]
        if melody:
            logger.info(
                "Extracted %d notes from instrument %r in %s",
                len(melody), inst.name, midi_path,
            )
            return melody

    raise MidiParseError("No notes found in the MIDI file")
