import logging
from typing import Iterable, List, Sequence

from schemas.match import MatchResult
from schemas.melody import SolfegeEvent
from schemas.song import MelodyRecord
from services.solfege import transcribe
from services.theory import InvalidKeyName

logger = logging.getLogger(__name__)

ON_INVALID_KEY_RAISE = "raise"
ON_INVALID_KEY_SKIP = "skip"


def syllables_of(events: Sequence[SolfegeEvent]) -> List[str]:
    return [e.syllable for e in events]


def find_matches(
    query: Sequence[SolfegeEvent],
    catalog: Iterable[MelodyRecord],
    exclude_id: str,
    on_invalid_key: str = ON_INVALID_KEY_RAISE,
) -> List[MatchResult]:
    """Find every exact occurrence of the query's syllables in the catalog.

    Each eligible catalog melody is transcribed in its own key, so a match
    is transposition-invariant across songs. Overlapping occurrences are
    all reported, grouped by catalog order then by offset. The matched
    segment carries the target's own events.

    ``on_invalid_key`` decides what a present but malformed catalog key
    does: "raise" lets InvalidKeyName abort the scan, "skip" logs and
    moves on to the next entry.
    """
    if on_invalid_key not in (ON_INVALID_KEY_RAISE, ON_INVALID_KEY_SKIP):
        raise ValueError(f"Unknown on_invalid_key policy: {on_invalid_key!r}")

    query_syllables = syllables_of(query)
    if not query_syllables:
        return []

    width = len(query_syllables)
    results: List[MatchResult] = []

    for record in catalog:
        if record.id == exclude_id:
            continue
        if not record.key or not record.key.strip() or not record.notes:
            continue

        try:
            target = transcribe(record.notes, record.key)
        except InvalidKeyName as exc:
            if on_invalid_key == ON_INVALID_KEY_RAISE:
                raise
            logger.warning("Skipping song %s in match scan: %s", record.id, exc)
            continue

        if len(target) < width:
            continue

        target_syllables = syllables_of(target)
        for i in range(len(target_syllables) - width + 1):
            if target_syllables[i:i + width] == query_syllables:
                results.append(MatchResult(
                    song_id=record.id,
                    song_name=record.display_name,
                    start_index_in_target=i,
                    matched_segment=target[i:i + width],
                ))

    logger.info(
        "Match scan for %d syllable(s) excluding %s: %d match(es)",
        width, exclude_id, len(results),
    )
    return results
