import pathlib
import sys
from datetime import date

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))
from swimtrack import create_app
from swimtrack.config import Config
from swimtrack.extensions import db
from swimtrack.models import SwimRecord, User


class _TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SECRET_KEY = "test-secret"
    DB_RETRY_BASE_DELAY = 0.0
    GROWTH_RANKING_LIMIT = None


@pytest.fixture()
def app(tmp_path):
    class TestConfig(_TestConfig):
        UPLOAD_DIR = str(tmp_path / "uploads")

    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    with app.test_client() as c:
        yield c


def make_user(username, role="student", gender="male", password="secret123", **kwargs):
    user = User(username=username, role=role, gender=gender, **kwargs)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def make_record(student, time, style="個人メドレー", distance=60, pool_length=15, day=None, **kwargs):
    record = SwimRecord(
        student_id=student.id,
        style=style,
        distance=distance,
        time=time,
        pool_length=pool_length,
        date=day or date(2024, 4, 10),
        **kwargs,
    )
    db.session.add(record)
    db.session.commit()
    return record


def login_as(client, user):
    with client.session_transaction() as sess:
        sess["user_id"] = user.id
        sess["role"] = user.role


@pytest.fixture()
def coach(app):
    return make_user("coach", role="coach")


@pytest.fixture()
def admin(app):
    return make_user("admin", role="admin")


@pytest.fixture()
def coach_client(client, coach):
    login_as(client, coach)
    return client
