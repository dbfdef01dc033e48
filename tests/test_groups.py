"""API tests for groups, folders, tags and the current-user endpoint."""

import pytest

from conftest import MEMBER, OWNER, STRANGER

API = "/api/v1"


class TestGroups:
    def test_list_my_groups_sorted_with_active_flag(self, client, memberships):
        memberships.seed("profiles", {"id": OWNER, "active_group_id": "G1"})
        body = client.get(f"{API}/groups").json()
        assert [g["name"] for g in body] == ["Ethics", "Level I"]
        assert [g["is_active"] for g in body] == [False, True]

    def test_create_goes_through_rpc(self, client, fake_db):
        fake_db.rpc_handlers["create_group"] = lambda params: {"id": "G9", "name": params["group_name"], "invite_code": "zzz"}
        response = client.post(f"{API}/groups", json={"name": "  Study crew "})
        assert response.status_code == 201
        assert response.json()["name"] == "Study crew"
        assert ("rpc", "rpc:create_group", [], {"group_name": "Study crew"}) in fake_db.calls

    def test_blank_group_name_is_422(self, client):
        assert client.post(f"{API}/groups", json={"name": "  "}).status_code == 422

    def test_join_with_bad_code(self, client, fake_db):
        def reject(params):
            raise Exception("invalid invite code")
        fake_db.rpc_handlers["join_group"] = reject
        assert client.post(f"{API}/groups/join", json={"invite_code": "nope"}).status_code == 404

    def test_set_active_group_requires_membership(self, client, memberships):
        assert client.put(f"{API}/groups/active", json={"group_id": "G3"}).status_code == 403
        response = client.put(f"{API}/groups/active", json={"group_id": "G2"})
        assert response.status_code == 200
        assert memberships.rows("profiles") == [
            {"id": OWNER, "active_group_id": "G2", "created_at": memberships.rows("profiles")[0]["created_at"]}
        ]

    def test_leave_clears_active_group(self, client, memberships):
        memberships.seed("profiles", {"id": OWNER, "active_group_id": "G1"})
        assert client.delete(f"{API}/groups/G1/membership").status_code == 204
        assert memberships.rows("profiles")[0]["active_group_id"] is None
        assert {"user_id": OWNER, "group_id": "G1"} not in memberships.rows("group_memberships")

    def test_members_of_my_groups(self, client, memberships, current_user):
        memberships.seed(
            "profiles",
            {"id": MEMBER, "username": "bob", "full_name": "Bob"},
            {"id": OWNER, "username": "alice", "full_name": "Alice"},
            {"id": STRANGER, "username": "carol", "full_name": "Carol"},
        )
        body = client.get(f"{API}/groups/members").json()
        assert [p["username"] for p in body] == ["alice", "bob"]

        current_user["id"] = STRANGER
        assert [p["id"] for p in client.get(f"{API}/groups/members").json()] == [STRANGER]

    def test_no_groups_no_members(self, client, fake_db):
        assert client.get(f"{API}/groups/members").json() == []
        assert all(c[1] != "profiles" for c in fake_db.calls)


class TestCurrentUser:
    def test_me(self, client, memberships):
        memberships.seed("profiles", {"id": OWNER, "active_group_id": "G2"})
        body = client.get(f"{API}/auth/me").json()
        assert body["id"] == OWNER
        assert body["group_ids"] == ["G1", "G2"]
        assert body["active_group_id"] == "G2"


@pytest.fixture
def folders(fake_db):
    fake_db.seed(
        "library_folders",
        {"id": "F1", "name": "Level I", "parent_id": None, "kind": "quizzes", "owner_id": OWNER},
        {"id": "F2", "name": "Ethics", "parent_id": "F1", "kind": "quizzes", "owner_id": OWNER},
        {"id": "F3", "name": "Docs", "parent_id": None, "kind": "documents", "owner_id": OWNER},
    )
    return fake_db


class TestFolders:
    def test_list_kind_with_paths(self, client, folders):
        body = client.get(f"{API}/folders", params={"kind": "quizzes"}).json()
        assert [(f["name"], f["path"]) for f in body] == [("Ethics", "Level I / Ethics"), ("Level I", "Level I")]

    def test_resolve_paths_endpoint(self, client, folders):
        body = client.get(f"{API}/folders/paths", params=[("ids", "F2"), ("ids", "gone"), ("locale", "en")]).json()
        assert body == {"F2": "Level I / Ethics", "gone": "No folder"}

    def test_create_under_parent_of_other_kind_is_rejected(self, client, folders):
        response = client.post(f"{API}/folders", json={"name": "X", "kind": "quizzes", "parent_id": "F3"})
        assert response.status_code == 400

    def test_create_trims_name(self, client, folders):
        response = client.post(f"{API}/folders", json={"name": " Quant ", "kind": "quizzes", "parent_id": "F1"})
        assert response.status_code == 201
        assert response.json()["name"] == "Quant"

    def test_move_into_descendant_is_rejected(self, client, folders):
        response = client.put(f"{API}/folders/F1", json={"parent_id": "F2", "move": True})
        assert response.status_code == 400

    def test_move_to_root(self, client, folders):
        response = client.put(f"{API}/folders/F2", json={"parent_id": None, "move": True})
        assert response.status_code == 200
        assert response.json()["parent_id"] is None

    def test_rename_only(self, client, folders):
        response = client.put(f"{API}/folders/F2", json={"name": "Ethics & Standards"})
        assert response.json()["parent_id"] == "F1"
        assert response.json()["name"] == "Ethics & Standards"

    def test_missing_folder(self, client, folders):
        assert client.put(f"{API}/folders/nope", json={"name": "x"}).status_code == 404


class TestTags:
    def test_create_and_list(self, client, fake_db):
        response = client.post(f"{API}/tags", json={"name": " Ethics ", "color": "#FF0000"})
        assert response.status_code == 201
        assert response.json()["color"] == "#ff0000"
        client.post(f"{API}/tags", json={"name": "Alpha"})
        body = client.get(f"{API}/tags").json()
        assert [(t["name"], t["color"]) for t in body] == [("Alpha", "#6b7280"), ("Ethics", "#ff0000")]

    @pytest.mark.parametrize("payload", [{"name": ""}, {"name": "x", "color": "red"}, {"name": "x", "color": "#12345"}])
    def test_invalid_tag(self, client, payload):
        assert client.post(f"{API}/tags", json=payload).status_code == 422

    def test_delete(self, client, fake_db):
        tag_id = client.post(f"{API}/tags", json={"name": "Tmp"}).json()["id"]
        assert client.delete(f"{API}/tags/{tag_id}").status_code == 204
        assert fake_db.rows("tags") == []


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_security_headers(self, client):
        assert client.get("/health").headers["X-Frame-Options"] == "DENY"
