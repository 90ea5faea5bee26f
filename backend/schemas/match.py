from typing import List

from pydantic import BaseModel

from schemas.melody import SolfegeEvent


class MatchRequest(BaseModel):
    source_song_id: str
    selected_segment: List[SolfegeEvent]


class RangeMatchRequest(BaseModel):
    start_index: int
    end_index: int


class MatchResult(BaseModel):
    song_id: str
    song_name: str
    start_index_in_target: int
    matched_segment: List[SolfegeEvent]
