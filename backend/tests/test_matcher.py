"""Tests for exact syllable-subsequence matching over a catalog."""

import pytest

from conftest import make_notes
from schemas.song import MelodyRecord
from services.matcher import find_matches, syllables_of
from services.solfege import transcribe
from services.theory import InvalidKeyName

C_MAJOR_DO_RE_MI_FA = [60, 62, 64, 65]


def _record(song_id, pitches, key="Cmaj", name=None):
    return MelodyRecord(
        id=song_id,
        display_name=name or f"Song {song_id}",
        key=key,
        notes=make_notes(pitches) if pitches is not None else None,
    )


def _query(pitches, key="Cmaj"):
    return transcribe(make_notes(pitches), key)


class TestFindMatches:
    def test_single_occurrence(self) -> None:
        catalog = [_record("target", C_MAJOR_DO_RE_MI_FA)]

        results = find_matches(_query([62, 64]), catalog, "source")

        assert len(results) == 1
        match = results[0]
        assert match.song_id == "target"
        assert match.song_name == "Song target"
        assert match.start_index_in_target == 1
        assert [e.syllable for e in match.matched_segment] == ["Re", "Mi"]

    def test_matched_segment_carries_target_events(self) -> None:
        # Same syllables in G major: the target's own pitches come back
        catalog = [_record("g", [67, 69, 71, 72], key="Gmaj")]

        results = find_matches(_query([62, 64]), catalog, "source")

        assert len(results) == 1
        segment = results[0].matched_segment
        assert [e.pitch for e in segment] == [69, 71]
        assert [e.start_time for e in segment] == [0.5, 1.0]

    def test_overlapping_occurrences(self) -> None:
        catalog = [_record("t", [60, 60, 60])]

        results = find_matches(_query([72, 48]), catalog, "source")

        assert [r.start_index_in_target for r in results] == [0, 1]

    def test_self_is_excluded(self) -> None:
        catalog = [_record("source", C_MAJOR_DO_RE_MI_FA), _record("other", C_MAJOR_DO_RE_MI_FA)]

        results = find_matches(_query([60, 62]), catalog, "source")

        assert [r.song_id for r in results] == ["other"]

    def test_no_match_is_empty(self) -> None:
        catalog = [_record("t", C_MAJOR_DO_RE_MI_FA)]
        assert find_matches(_query([61, 63]), catalog, "source") == []

    def test_target_shorter_than_query_is_skipped(self) -> None:
        catalog = [_record("short", [60, 62])]
        assert find_matches(_query([60, 62, 64]), catalog, "source") == []

    def test_empty_query(self) -> None:
        catalog = [_record("t", C_MAJOR_DO_RE_MI_FA)]
        assert find_matches([], catalog, "source") == []

    @pytest.mark.parametrize("key", [None, "", "  "])
    def test_entries_without_key_are_skipped(self, key) -> None:
        catalog = [_record("t", C_MAJOR_DO_RE_MI_FA, key=key)]
        assert find_matches(_query([60]), catalog, "source") == []

    @pytest.mark.parametrize("pitches", [None, []])
    def test_entries_without_notes_are_skipped(self, pitches) -> None:
        catalog = [_record("t", pitches)]
        assert find_matches(_query([60]), catalog, "source") == []

    def test_order_follows_catalog_then_offset(self) -> None:
        catalog = [
            _record("b", [60, 62, 60, 62]),
            _record("a", [62, 60, 62]),
        ]

        results = find_matches(_query([60, 62]), catalog, "source")

        assert [(r.song_id, r.start_index_in_target) for r in results] == [
            ("b", 0), ("b", 2), ("a", 1),
        ]

    def test_matches_across_modes_by_syllable(self) -> None:
        # A minor tonic is La; C major's La is A as well
        catalog = [_record("minor", [57, 59, 60], key="Amin")]

        results = find_matches(_query([69, 71, 72]), catalog, "source")

        assert len(results) == 1
        assert [e.syllable for e in results[0].matched_segment] == ["La", "Ti", "Do"]

    def test_syllable_comparison_is_case_sensitive(self) -> None:
        query = _query([60])
        query[0] = query[0].model_copy(update={"syllable": "do"})
        catalog = [_record("t", C_MAJOR_DO_RE_MI_FA)]

        assert find_matches(query, catalog, "source") == []


class TestInvalidCatalogKeys:
    def _catalog(self):
        return [
            _record("bad", C_MAJOR_DO_RE_MI_FA, key="Xmaj"),
            _record("good", C_MAJOR_DO_RE_MI_FA),
        ]

    def test_raise_policy_aborts_scan(self) -> None:
        with pytest.raises(InvalidKeyName):
            find_matches(_query([60, 62]), self._catalog(), "source")

    def test_skip_policy_skips_entry(self) -> None:
        results = find_matches(_query([60, 62]), self._catalog(), "source", on_invalid_key="skip")
        assert [r.song_id for r in results] == ["good"]

    def test_unknown_policy(self) -> None:
        with pytest.raises(ValueError):
            find_matches(_query([60]), self._catalog(), "source", on_invalid_key="ignore")


class TestSyllablesOf:
    def test_projects_syllables_in_order(self) -> None:
        assert syllables_of(_query([64, 60, 62])) == ["Mi", "Do", "Re"]

    def test_empty(self) -> None:
        assert syllables_of([]) == []
