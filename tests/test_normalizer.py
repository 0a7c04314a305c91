"""Tests for collection normalization into an AccountSnapshot."""

import pandas as pd

from accounthealth_mcp.data_providers.normalizer import (
    normalize_collection,
    normalize_snapshot,
)
from accounthealth_mcp.models.campaign import Campaign
from accounthealth_mcp.models.search_term import SearchTerm
from accounthealth_mcp.models.snapshot import DataSource, FetchError, SourceState


class TestNormalizeCollection:
    def test_mappings_become_models(self):
        records, skipped = normalize_collection(
            DataSource.CAMPAIGNS, [{"id": "1", "cost": "12.50"}]
        )
        assert skipped == 0
        assert isinstance(records[0], Campaign)
        assert records[0].cost == 12.5

    def test_unusable_records_are_counted(self):
        records, skipped = normalize_collection(
            "campaigns", [{"id": "1"}, "not a record", 42, None]
        )
        assert len(records) == 1
        assert skipped == 3

    def test_typed_models_pass_through(self):
        term = SearchTerm(search_term="red shoes")
        records, _ = normalize_collection(DataSource.SEARCH_TERMS, [term])
        assert records[0] is term

    def test_dataframe_input(self):
        frame = pd.DataFrame(
            [
                {"searchTerm": "red shoes", "cost": 2.0, "conversions": 1.0},
                {"searchTerm": "blue shoes", "cost": 3.0},
            ]
        )
        records, skipped = normalize_collection(DataSource.SEARCH_TERMS, frame)
        assert skipped == 0
        assert [r.search_term for r in records] == ["red shoes", "blue shoes"]
        # Missing cells arrive as NaN and default to 0
        assert records[1].conversions == 0.0

    def test_non_list_input_is_skipped(self):
        records, skipped = normalize_collection(DataSource.ADS, {"id": "1"})
        assert records == []
        assert skipped == 1

    def test_none_is_empty(self):
        assert normalize_collection(DataSource.ADS, None) == ([], 0)


class TestNormalizeSnapshot:
    def test_missing_sources_are_empty(self):
        snapshot = normalize_snapshot(campaigns=[{"id": "1"}])
        assert snapshot.source_state(DataSource.CAMPAIGNS) == SourceState.AVAILABLE
        assert snapshot.source_state(DataSource.KEYWORDS) == SourceState.EMPTY
        assert snapshot.unavailable == {}

    def test_fetch_error_marks_source_unavailable(self):
        snapshot = normalize_snapshot(
            keywords=FetchError(source="keywords", message="quota exhausted")
        )
        assert snapshot.source_state("keywords") == SourceState.UNAVAILABLE
        assert snapshot.unavailable == {"keywords": "quota exhausted"}
        assert snapshot.keywords == []

    def test_exception_instance_marks_source_unavailable(self):
        snapshot = normalize_snapshot(ads=TimeoutError("deadline exceeded"))
        assert snapshot.unavailable["ads"] == "deadline exceeded"

    def test_skipped_counts_recorded(self):
        snapshot = normalize_snapshot(search_terms=[{"searchTerm": "a"}, "junk"])
        assert snapshot.skipped == {"search_terms": 1}
        assert snapshot.record_counts()["search_terms"] == 1

    def test_describe_missing_distinguishes_empty_from_unavailable(self):
        snapshot = normalize_snapshot(
            ads=FetchError(source="ads", message="timeout")
        )
        assert snapshot.describe_missing("ads") == (
            "ads source unavailable (fetch failed: timeout)"
        )
        assert snapshot.describe_missing("keywords") == "no keyword records returned"

    def test_active_keywords_follow_active_ad_groups(self):
        snapshot = normalize_snapshot(
            campaigns=[{"id": "c1", "status": "ENABLED"}],
            ad_groups=[
                {"id": "g1", "campaignId": "c1", "status": "ENABLED"},
                {"id": "g2", "campaignId": "c1", "status": "PAUSED"},
            ],
            keywords=[
                {"id": "k1", "adGroupId": "g1", "status": "ENABLED"},
                {"id": "k2", "adGroupId": "g2", "status": "ENABLED"},
            ],
        )
        assert [k.id for k in snapshot.active_keywords()] == ["k1"]

    def test_empty_snapshot(self):
        snapshot = normalize_snapshot()
        assert snapshot.is_empty
        assert sum(snapshot.record_counts().values()) == 0
