import io
import os

from sqlalchemy.exc import OperationalError

from swimtrack.extensions import db


def _upload(client, **form):
    data = {"file": (io.BytesIO(b"%PDF-1.4 training plan"), "plan.pdf")}
    data.update(form)
    return client.post("/api/documents", data=data, content_type="multipart/form-data")


def test_upload_list_download_delete(app, coach_client):
    response = _upload(coach_client, title="Weekly plan")
    assert response.status_code == 201
    doc = response.get_json()
    assert doc["title"] == "Weekly plan"
    assert doc["filename"] == "plan.pdf"
    assert doc["size_bytes"] == len(b"%PDF-1.4 training plan")

    stored = os.listdir(app.config["UPLOAD_DIR"])
    assert len(stored) == 1
    assert stored[0].endswith("_plan.pdf")

    listed = coach_client.get("/api/documents").get_json()
    assert [d["id"] for d in listed] == [doc["id"]]

    download = coach_client.get(f"/api/documents/{doc['id']}/download")
    assert download.status_code == 200
    assert download.data == b"%PDF-1.4 training plan"
    assert "plan.pdf" in download.headers["Content-Disposition"]
    download.close()

    assert coach_client.delete(f"/api/documents/{doc['id']}").status_code == 200
    assert os.listdir(app.config["UPLOAD_DIR"]) == []
    assert coach_client.get(f"/api/documents/{doc['id']}/download").status_code == 404


def test_upload_requires_file(coach_client):
    response = coach_client.post("/api/documents", data={"title": "x"}, content_type="multipart/form-data")
    assert response.status_code == 400


def test_upload_requires_coach(client):
    assert _upload(client).status_code == 401


def test_title_defaults_to_filename(coach_client):
    assert _upload(coach_client).get_json()["title"] == "plan.pdf"


def test_categories(coach_client):
    response = coach_client.post("/api/categories", json={"name": "Training"})
    assert response.status_code == 201
    cat_id = response.get_json()["id"]

    assert coach_client.post("/api/categories", json={"name": "Training"}).status_code == 400
    assert coach_client.post("/api/categories", json={}).status_code == 400

    _upload(coach_client, category_id=str(cat_id))
    _upload(coach_client)

    in_category = coach_client.get(f"/api/documents?category_id={cat_id}").get_json()
    assert len(in_category) == 1
    assert in_category[0]["category_name"] == "Training"

    assert _upload(coach_client, category_id="999").status_code == 404
    assert [c["name"] for c in coach_client.get("/api/categories").get_json()] == ["Training"]


def test_failed_save_removes_uploaded_file(app, coach_client, monkeypatch):
    def failing_commit():
        raise OperationalError("INSERT", {}, Exception("connection lost"))

    monkeypatch.setattr(db.session, "commit", failing_commit)

    response = _upload(coach_client)
    assert response.status_code == 500
    assert os.listdir(app.config["UPLOAD_DIR"]) == []


def test_category_name_must_be_string(coach_client):
    assert coach_client.post("/api/categories", json={"name": 3}).status_code == 400
