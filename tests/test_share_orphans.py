"""Tests for the share orphan maintenance script."""

import pytest

from cfahub.database.supabase_client import SupabaseClient
from cfahub.scripts import check_share_orphans


@pytest.fixture
def seeded(fake_db):
    fake_db.seed(
        "documents",
        {"id": "d1", "visibility": "groups"},
        {"id": "d2", "visibility": "private"},
    )
    fake_db.seed(
        "document_shares",
        {"document_id": "d1", "group_id": "G1"},
        {"document_id": "d2", "group_id": "G1"},
        {"document_id": "d2", "group_id": "G2"},
        {"document_id": "gone", "group_id": "G3"},
    )
    return fake_db


class TestFindOrphans:
    def test_rows_of_unshared_or_missing_items(self, seeded):
        orphans = check_share_orphans.find_orphans(seeded, "documents")
        assert orphans == {"d2": ["G1", "G2"], "gone": ["G3"]}

    def test_no_share_rows(self, fake_db):
        assert check_share_orphans.find_orphans(fake_db, "quizzes") == {}

    def test_delete(self, seeded):
        orphans = check_share_orphans.find_orphans(seeded, "documents")
        assert check_share_orphans.delete_orphans(seeded, "documents", orphans) == 3
        assert seeded.rows("document_shares") == [{"document_id": "d1", "group_id": "G1"}]


class TestMain:
    def test_report_only_does_not_delete(self, seeded, monkeypatch):
        monkeypatch.setattr(SupabaseClient, "get_service_client", classmethod(lambda cls: seeded))
        assert check_share_orphans.main([]) == 3
        assert seeded.mutations() == []

    def test_fix(self, seeded, monkeypatch):
        monkeypatch.setattr(SupabaseClient, "get_service_client", classmethod(lambda cls: seeded))
        check_share_orphans.main(["--fix"])
        assert len(seeded.rows("document_shares")) == 1
