"""Tests for fuzzy item search."""

from __future__ import annotations

from opclient.fuzzy import best_alignment, field_value, score_text, search
from opclient.models import FuzzyOptions


class TestFieldValue:
    def test_dotted_path(self):
        assert field_value({"overview": {"title": "GitHub"}}, "overview.title") == "GitHub"

    def test_missing_path(self):
        assert field_value({"overview": {}}, "overview.url") == ""
        assert field_value({"overview": "flat"}, "overview.url") == ""


class TestScoring:
    def test_exact_prefix_scores_zero(self):
        assert score_text("git", "github", FuzzyOptions()) == 0.0

    def test_one_typo_within_long_pattern(self):
        # 1 error over 8 chars = 0.125 <= 0.15
        score = score_text("passwerd", "password", FuzzyOptions())
        assert score is not None and 0.1 < score <= 0.15

    def test_far_from_location_is_penalized(self):
        text = "x" * 50 + "github"
        assert score_text("github", text, FuzzyOptions()) is None
        assert score_text("github", text, FuzzyOptions(distance=1000)) is not None

    def test_zero_distance_requires_exact_location(self):
        opts = FuzzyOptions(distance=0)
        assert score_text("hub", "github", opts) is None
        assert score_text("git", "github", opts) == 0.0

    def test_alignment_tracks_start(self):
        errors, start = min(best_alignment("hub", "github"))
        assert (errors, start) == (0, 3)


class TestSearch:
    def test_filters_by_threshold(self, raw_items):
        result = search(raw_items, "github")
        assert [r["uuid"] for r in result] == ["i1"]

    def test_case_insensitive(self, raw_items):
        assert [r["uuid"] for r in search(raw_items, "GMAIL")] == ["i2"]

    def test_matches_secondary_keys(self, raw_items):
        assert [r["uuid"] for r in search(raw_items, "octocat")] == ["i1"]

    def test_sorted_by_score(self):
        records = [
            {"uuid": "a", "overview": {"title": "the bank"}},
            {"uuid": "b", "overview": {"title": "bank"}},
        ]
        assert [r["uuid"] for r in search(records, "bank", FuzzyOptions(threshold=0.5))] == ["b", "a"]

    def test_unsorted_keeps_input_order(self):
        records = [
            {"uuid": "a", "overview": {"title": "the bank"}},
            {"uuid": "b", "overview": {"title": "bank"}},
        ]
        opts = FuzzyOptions(threshold=0.5, should_sort=False)
        assert [r["uuid"] for r in search(records, "bank", opts)] == ["a", "b"]

    def test_ranks_by_best_key(self):
        records = [
            {"uuid": "b", "overview": {"title": "xbank"}},
            {"uuid": "a", "overview": {"title": "bank", "url": "the bank"}},
        ]
        assert [r["uuid"] for r in search(records, "bank", FuzzyOptions(threshold=0.5))] == ["a", "b"]

    def test_custom_keys(self, raw_items):
        opts = FuzzyOptions(keys=("overview.url",))
        assert search(raw_items, "octocat", opts) == []

    def test_long_pattern_truncated(self):
        records = [{"uuid": "a", "overview": {"title": "abcdef"}}]
        assert search(records, "abcdefghij", FuzzyOptions(max_pattern_length=3)) == records

    def test_empty_query_returns_everything(self, raw_items):
        assert search(raw_items, "") == raw_items
