import math

from pydantic import BaseModel, field_validator


class PitchEvent(BaseModel):
    pitch: int
    start_time: float
    duration: float

    @field_validator("pitch")
    @classmethod
    def pitch_in_midi_range(cls, v: int) -> int:
        if not 0 <= v <= 127:
            raise ValueError("pitch must be a MIDI note number (0-127)")
        return v

    @field_validator("start_time")
    @classmethod
    def start_time_non_negative(cls, v: float) -> float:
        if not math.isfinite(v) or v < 0:
            raise ValueError("start_time must be a finite number >= 0")
        return v

    @field_validator("duration")
    @classmethod
    def duration_positive(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0:
            raise ValueError("duration must be greater than 0")
        return v


class KeySignature(BaseModel):
    tonic_pitch_class: int
    is_major: bool
    tonic_octave: int = 4


class SolfegeEvent(BaseModel):
    syllable: str
    octave: int
    start_time: float
    duration: float
    pitch: int
