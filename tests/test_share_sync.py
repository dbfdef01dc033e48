"""Settings save and share-row sync through ContentService against the in-memory double."""

import pytest
from fastapi import HTTPException

from cfahub.content.visibility import Visibility
from cfahub.modules.content.schemas import ContentSettingsUpdate
from cfahub.modules.content.service import ContentService

OWNER = "u-owner"
OWNER_GROUPS = ["G1", "G2", "G3"]


@pytest.fixture
def service(fake_db):
    fake_db.seed("flashcard_sets", {
        "id": "A", "title": "Legacy set", "owner_id": OWNER,
        "visibility": "group", "folder_id": None, "group_id": "G1",
        "created_at": "2024-01-01T00:00:00+00:00",
    })
    return ContentService(fake_db, "flashcards")


def save(service, visibility, group_ids, title="Legacy set", user=OWNER):
    data = ContentSettingsUpdate(title=title, visibility=visibility, group_ids=group_ids)
    return service.update_settings("A", data, user, OWNER_GROUPS, "en")


def share_groups(fake_db):
    return sorted(r["group_id"] for r in fake_db.rows("flashcard_set_shares") if r["set_id"] == "A")


class TestValidationBeforeWrites:
    def test_shared_with_no_groups_issues_zero_backend_calls(self, service, fake_db):
        with pytest.raises(HTTPException) as exc:
            save(service, Visibility.SHARED, [])
        assert exc.value.status_code == 400
        assert exc.value.detail == "Select at least one group."
        assert fake_db.calls == []

    def test_blank_title_issues_zero_backend_calls(self, service, fake_db):
        with pytest.raises(HTTPException) as exc:
            save(service, Visibility.PRIVATE, None, title="   ")
        assert exc.value.status_code == 400
        assert fake_db.calls == []

    def test_non_owner_is_refused_without_writes(self, service, fake_db):
        with pytest.raises(HTTPException) as exc:
            save(service, Visibility.PUBLIC, None, user="u-member")
        assert exc.value.status_code == 403
        assert fake_db.mutations() == []


class TestLegacyMigration:
    def test_switch_to_two_groups(self, service, fake_db):
        result = save(service, Visibility.SHARED, ["G1", "G2"])

        base = fake_db.rows("flashcard_sets")[0]
        assert base["group_id"] is None
        assert base["visibility"] == "groups"
        inserts = fake_db.mutations("flashcard_set_shares")
        assert len(inserts) == 1
        assert inserts[0][0] == "insert"
        assert share_groups(fake_db) == ["G1", "G2"]
        assert result.added == 2 and result.removed == 0

    def test_omitted_groups_carry_the_legacy_group_over(self, service, fake_db):
        save(service, Visibility.SHARED, None)
        assert share_groups(fake_db) == ["G1"]
        assert fake_db.rows("flashcard_sets")[0]["group_id"] is None


class TestIdempotency:
    def test_second_identical_save_changes_no_share_rows(self, service, fake_db):
        save(service, Visibility.SHARED, ["G1", "G2"])
        fake_db.reset_calls()
        result = save(service, Visibility.SHARED, ["G2", "G1"])
        assert fake_db.mutations("flashcard_set_shares") == []
        assert result.added == 0 and result.removed == 0

    def test_only_the_difference_is_written(self, service, fake_db):
        save(service, Visibility.SHARED, ["G1", "G2"])
        fake_db.reset_calls()
        save(service, Visibility.SHARED, ["G2", "G3"])
        ops = [c[0] for c in fake_db.mutations("flashcard_set_shares")]
        assert ops == ["delete", "insert"]
        assert share_groups(fake_db) == ["G2", "G3"]

    def test_retry_after_failed_insert_converges(self, service, fake_db):
        save(service, Visibility.SHARED, ["G1"])
        fake_db.fail_on.add(("insert", "flashcard_set_shares"))
        with pytest.raises(HTTPException) as exc:
            save(service, Visibility.SHARED, ["G2"])
        assert exc.value.status_code == 502
        assert share_groups(fake_db) == []

        fake_db.fail_on.clear()
        save(service, Visibility.SHARED, ["G2"])
        assert share_groups(fake_db) == ["G2"]


class TestLeavingSharedTier:
    @pytest.mark.parametrize("visibility,stored", [(Visibility.PRIVATE, "private"), (Visibility.PUBLIC, "public")])
    def test_all_grants_removed(self, service, fake_db, visibility, stored):
        save(service, Visibility.SHARED, ["G1", "G2"])
        save(service, visibility, ["G1"])
        assert share_groups(fake_db) == []
        assert fake_db.rows("flashcard_sets")[0]["visibility"] == stored

    def test_sharing_with_a_foreign_group_is_refused(self, service, fake_db):
        with pytest.raises(HTTPException) as exc:
            save(service, Visibility.SHARED, ["G9"])
        assert exc.value.status_code == 403
        assert fake_db.mutations("flashcard_set_shares") == []
