import re

from schemas.melody import KeySignature

# Pitch-class map: lower-cased note name -> semitone offset from C
PITCH_CLASS = {
    "c": 0, "b#": 0,
    "c#": 1, "db": 1,
    "d": 2,
    "d#": 3, "eb": 3,
    "e": 4, "fb": 4,
    "f": 5, "e#": 5,
    "f#": 6, "gb": 6,
    "g": 7,
    "g#": 8, "ab": 8,
    "a": 9,
    "a#": 10, "bb": 10,
    "b": 11, "cb": 11,
}

# Chromatic movable-do syllables, indexed by semitones above the tonic
MAJOR_SYLLABLES = (
    "Do", "Di", "Re", "Ri", "Mi", "Fa",
    "Fi", "So", "Si", "La", "Li", "Ti",
)
# Minor tonic is La: the major table rotated by 9 semitones
MINOR_SYLLABLES = (
    "La", "Li", "Ti", "Do", "Di", "Re",
    "Ri", "Mi", "Fa", "Fi", "So", "Si",
)
NO_KEY_SYLLABLE = "N/A"

DEFAULT_TONIC_OCTAVE = 4

_MAJ_RE = re.compile(r"maj", re.IGNORECASE)
_MIN_SUFFIX_RE = re.compile(r"(min|m)$", re.IGNORECASE)
_OCTAVE_RE = re.compile(r"([0-9])$")
_DIGITS_RE = re.compile(r"[0-9]")


class InvalidKeyName(ValueError):
    """The note-name part of a key signature is not a known pitch name."""

    def __init__(self, note_name: str, key: str | None = None):
        self.note_name = note_name
        self.key = key
        msg = f"Invalid note name: {note_name!r}"
        if key is not None and key != note_name:
            msg += f" (in key signature {key!r})"
        super().__init__(msg)


def note_name_to_pitch_class(note_name: str) -> int:
    """Return the pitch class (0-11) of a note name like 'C', 'f#', 'Db4'.

    Case and octave digits are ignored. Raises InvalidKeyName if the name
    is not recognized.
    """
    normalized = _DIGITS_RE.sub("", note_name.lower())
    if normalized not in PITCH_CLASS:
        raise InvalidKeyName(note_name)
    return PITCH_CLASS[normalized]


def parse_key_signature(key: str) -> KeySignature:
    """Parse a key string such as 'Cmaj', 'f#min', 'Bb', 'a' or 'Eb5m'.

    An explicit 'maj' marks major; 'min' or a trailing 'm' marks minor.
    Without a marker the case of the note letter decides: upper-case is
    major, lower-case is minor. A single trailing digit is the tonic
    octave (default 4).
    """
    text = key.strip()
    lowered = text.lower()
    is_major_explicit = "maj" in lowered
    is_minor_explicit = "min" in lowered or lowered.endswith("m")

    note_part = text
    if is_major_explicit:
        note_part = _MAJ_RE.sub("", note_part, count=1)
    if is_minor_explicit:
        note_part = _MIN_SUFFIX_RE.sub("", note_part)

    octave = DEFAULT_TONIC_OCTAVE
    m = _OCTAVE_RE.search(note_part)
    if m:
        octave = int(m.group(1))
        note_part = note_part[: m.start()]

    try:
        tonic = note_name_to_pitch_class(note_part)
    except InvalidKeyName:
        raise InvalidKeyName(note_part, key) from None

    if is_major_explicit:
        is_major = True
    elif is_minor_explicit:
        is_major = False
    else:
        is_major = note_part[0].isupper()

    return KeySignature(tonic_pitch_class=tonic, is_major=is_major, tonic_octave=octave)


def syllables_for(signature: KeySignature) -> tuple[str, ...]:
    return MAJOR_SYLLABLES if signature.is_major else MINOR_SYLLABLES


def midi_octave(pitch: int) -> int:
    """Octave number where MIDI 60 is C4."""
    return pitch // 12 - 1


def interval_above_tonic(pitch: int, tonic_pitch_class: int) -> int:
    return (pitch - tonic_pitch_class) % 12
