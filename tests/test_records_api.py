import csv
import io
from datetime import date

import pytest

from conftest import login_as, make_record, make_user
from swimtrack.extensions import db
from swimtrack.models import Competition, SwimRecord


def _payload(student, **overrides):
    payload = {
        "student_id": student.id,
        "style": "自由形",
        "distance": 50,
        "time": "00:31.20",
        "date": "2024-05-03",
        "pool_length": 25,
    }
    payload.update(overrides)
    return payload


def test_list_records_newest_first(client):
    taro = make_user("taro")
    make_record(taro, "00:45.00", day=date(2024, 2, 10))
    make_record(taro, "00:44.00", day=date(2024, 4, 10))

    rows = client.get("/api/records").get_json()
    assert [r["date"] for r in rows] == ["2024-04-10", "2024-02-10"]
    assert rows[0]["athlete_name"] == "taro"
    assert rows[0]["gender"] == "male"


def test_list_records_filtered_by_student(client):
    taro = make_user("taro")
    hanako = make_user("hanako", gender="female")
    make_record(taro, "00:45.00")
    make_record(hanako, "00:47.00")

    rows = client.get(f"/api/records?student_id={hanako.id}").get_json()
    assert [r["athlete_name"] for r in rows] == ["hanako"]


def test_create_record_as_coach(coach_client):
    taro = make_user("taro")

    response = coach_client.post("/api/records", json=_payload(taro))
    assert response.status_code == 201
    body = response.get_json()
    assert body["time"] == "00:31.20"
    assert body["date"] == "2024-05-03"

    rows = coach_client.get("/api/records").get_json()
    assert len(rows) == 1


def test_create_record_accepts_camel_case(coach_client):
    taro = make_user("taro")
    payload = {
        "studentId": taro.id,
        "style": "平泳ぎ",
        "distance": 30,
        "time": "00:25.00",
        "date": "2024-05-03",
        "poolLength": 15,
    }
    response = coach_client.post("/api/records", json=payload)
    assert response.status_code == 201
    assert response.get_json()["pool_length"] == 15


def test_create_record_requires_login(client):
    taro = make_user("taro")
    assert client.post("/api/records", json=_payload(taro)).status_code == 401


def test_students_cannot_create_records(client):
    taro = make_user("taro")
    login_as(client, taro)
    assert client.post("/api/records", json=_payload(taro)).status_code == 403


@pytest.mark.parametrize(
    "overrides",
    [
        {"time": "31.20"},
        {"time": "00:31"},
        {"style": "doggy paddle"},
        {"pool_length": 33},
        {"distance": 60},
        {"distance": 50, "pool_length": 15},
        {"date": "not-a-date"},
        {"date": ""},
        {"student_id": None},
        {"time": "00:00.00"},
        {"style": 5},
        {"time": ["00:31.20"]},
        {"competition_name": 12},
        {"is_competition": "false"},
        {"is_competition": 0},
    ],
)
def test_create_record_validation(coach_client, overrides):
    taro = make_user("taro")
    response = coach_client.post("/api/records", json=_payload(taro, **overrides))
    assert response.status_code == 400
    assert response.get_json()["message"]


def test_create_record_unknown_athlete(coach_client):
    response = coach_client.post(
        "/api/records",
        json={"student_id": 999, "style": "自由形", "distance": 50, "time": "00:31.20", "date": "2024-05-03"},
    )
    assert response.status_code == 404


def test_create_record_with_competition_copies_name(coach_client):
    taro = make_user("taro")
    comp = Competition(name="Spring Meet", location="Tokyo", date=date(2024, 5, 3))
    db.session.add(comp)
    db.session.commit()

    body = coach_client.post("/api/records", json=_payload(taro, competition_id=comp.id)).get_json()
    assert body["is_competition"] is True
    assert body["competition_name"] == "Spring Meet"
    assert body["competition_location"] == "Tokyo"


def test_update_record_keeps_owner(coach_client):
    taro = make_user("taro")
    record = make_record(taro, "00:45.00")

    response = coach_client.put(
        f"/api/records/{record.id}",
        json={"style": "個人メドレー", "distance": 60, "time": "00:44.10", "date": "2024-04-10", "pool_length": 15},
    )
    assert response.status_code == 200
    body = response.get_json()
    assert body["time"] == "00:44.10"
    assert body["student_id"] == taro.id


def test_update_missing_record(coach_client):
    taro = make_user("taro")
    response = coach_client.put("/api/records/999", json=_payload(taro))
    assert response.status_code == 404
    assert response.get_json()["message"] == "Record not found"


def test_delete_record(coach_client):
    taro = make_user("taro")
    record_id = make_record(taro, "00:45.00").id
    coach_client.get("/api/records")

    response = coach_client.delete(f"/api/records/{record_id}")
    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["data"]["time"] == "00:45.00"

    assert coach_client.get("/api/records").get_json() == []
    assert db.session.get(SwimRecord, record_id) is None


def test_competition_records_only(client):
    taro = make_user("taro")
    make_record(taro, "00:45.00", is_competition=True, competition_name="Cup")
    make_record(taro, "00:46.00")

    rows = client.get("/api/records/competitions").get_json()
    assert len(rows) == 1
    assert rows[0]["competition_name"] == "Cup"


def test_download_csv(client):
    taro = make_user("taro")
    make_record(taro, "01:23.45", style="自由形", distance=100, pool_length=25, competition_name="Meet, Tokyo")

    response = client.get("/api/records/download")
    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    assert "attachment" in response.headers["Content-Disposition"]

    rows = list(csv.reader(io.StringIO(response.get_data(as_text=True))))
    assert rows[0] == ["swimmer_name", "pool_length", "date", "style", "distance", "total_time", "competition_name"]
    assert rows[1] == ["taro", "25", "2024-04-10", "自由形", "100", "01:23.45", "Meet, Tokyo"]


def test_best_times(client):
    taro = make_user("taro")
    make_record(taro, "00:31.00", style="自由形", distance=50, pool_length=25)
    make_record(taro, "00:30.50", style="自由形", distance=50, pool_length=25)
    make_record(taro, "00:25.00", style="自由形", distance=30, pool_length=15)

    body = client.get("/api/records/best-times?pool_length=25").get_json()
    assert list(body.keys()) == ["自由形"]
    assert body["自由形"]["50"]["time"] == "00:30.50"

    assert client.get("/api/records/best-times?pool_length=12").status_code == 400


def test_all_time_defaults_to_25m(client):
    taro = make_user("taro")
    make_record(taro, "00:31.00", style="自由形", distance=50, pool_length=25)
    make_record(taro, "00:37.00", style="背泳ぎ", distance=50, pool_length=25)
    make_record(taro, "00:44.00")

    body = client.get("/api/records/all-time").get_json()
    assert list(body.keys()) == ["50"]
    assert set(body["50"].keys()) == {"自由形", "背泳ぎ"}


def test_history(client):
    taro = make_user("taro")
    make_record(taro, "00:45.00", day=date(2024, 2, 10))
    make_record(taro, "00:44.00", day=date(2024, 4, 10))
    make_record(taro, "00:31.00", style="自由形", distance=50, pool_length=25)

    groups = client.get(f"/api/records/history/{taro.id}?sort=time_asc").get_json()
    im = next(g for g in groups if g["style"] == "個人メドレー")
    assert [r["time"] for r in im["records"]] == ["00:44.00", "00:45.00"]
    assert im["personal_best"] == "00:44.00"

    filtered = client.get(f"/api/records/history/{taro.id}", query_string={"style": "自由形"}).get_json()
    assert [g["style"] for g in filtered] == ["自由形"]


def test_history_rejects_bad_params(client):
    taro = make_user("taro")
    assert client.get(f"/api/records/history/{taro.id}?sort=fastest").status_code == 400
    assert client.get(f"/api/records/history/{taro.id}?range=forever").status_code == 400


def test_recent_activities(client):
    taro = make_user("taro")
    for day in range(1, 8):
        make_record(taro, "00:45.00", day=date(2024, 4, day))

    rows = client.get("/api/recent-activities").get_json()
    assert len(rows) == 5
    assert rows[0]["date"] == "2024-04-07"


def test_is_competition_takes_json_booleans(coach_client):
    taro = make_user("taro")

    training = coach_client.post("/api/records", json=_payload(taro, is_competition=False)).get_json()
    meet = coach_client.post("/api/records", json=_payload(taro, is_competition=True)).get_json()

    assert training["is_competition"] is False
    assert meet["is_competition"] is True
    assert [r["id"] for r in coach_client.get("/api/records/competitions").get_json()] == [meet["id"]]


def test_rows_carry_all_time_start_date(client):
    taro = make_user("taro", all_time_start_date=date(2023, 4, 1))
    make_record(taro, "00:45.00")

    row = client.get("/api/records").get_json()[0]
    assert row["athlete_all_time_start_date"] == "2023-04-01"
