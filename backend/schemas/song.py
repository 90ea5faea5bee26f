from typing import List, Optional

from pydantic import BaseModel

from schemas.melody import PitchEvent


class MelodyRecord(BaseModel):
    """A catalog entry as seen by the matcher."""

    id: str
    display_name: str
    key: Optional[str] = None
    notes: Optional[List[PitchEvent]] = None


class SongResponse(BaseModel):
    id: str
    status: str
    original_filename: str
    title: Optional[str] = None
    file_path: str
    key: Optional[str] = None
    melody: Optional[List[PitchEvent]] = None
    created_at: Optional[str] = None
    error: Optional[str] = None


class SongListItem(BaseModel):
    id: str
    name: str
