from conftest import login_as
from swimtrack.models import Announcement


def test_latest_is_empty_by_default(client):
    assert client.get("/api/announcements/latest").get_json() == {"content": ""}


def test_admin_upserts_single_announcement(client, admin):
    login_as(client, admin)

    first = client.post("/api/admin/announcements", json={"content": "  Pool closed Monday "})
    assert first.status_code == 200
    assert first.get_json()["content"] == "Pool closed Monday"

    client.post("/api/admin/announcements", json={"content": "Pool open again"})

    assert client.get("/api/announcements/latest").get_json()["content"] == "Pool open again"
    assert Announcement.query.count() == 1


def test_coaches_cannot_post_announcements(coach_client):
    response = coach_client.post("/api/admin/announcements", json={"content": "hi"})
    assert response.status_code == 403


def test_content_must_be_string(client, admin):
    login_as(client, admin)
    assert client.post("/api/admin/announcements", json={"content": 5}).status_code == 400
