from datetime import datetime, timedelta

import pytest
from flask_jwt_extended import create_access_token

from library_app import create_app
from library_app.config import TestConfig
from library_app.extensions import db
from library_app.models.book import Book
from library_app.models.user import User

T0 = datetime(2024, 5, 10, 12, 0, 0)


class FrozenClock:
    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


class RecordingNotifier:
    def __init__(self):
        self.sent = []
        self.borrow_ids = []
        self.fail_for = set()

    def notify_due(self, user_email, book_title, due_date, borrow_id):
        if user_email in self.fail_for:
            raise RuntimeError("smtp unavailable")
        self.sent.append((user_email, book_title, due_date))
        self.borrow_ids.append(borrow_id)


@pytest.fixture
def app(tmp_path):
    # file db so worker threads share the same data
    class _Config(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'library.db'}"

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def clock(app):
    c = FrozenClock(T0)
    app.extensions["clock"] = c
    return c


@pytest.fixture
def notifier(app):
    n = RecordingNotifier()
    app.extensions["notifier"] = n
    return n


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(username=None, role="user"):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash="x",
            role=role,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def make_book(app):
    counter = {"n": 0}

    def _make(total=2, available=None, title=None):
        counter["n"] += 1
        book = Book(
            title=title or f"Book {counter['n']}",
            author="Some Author",
            isbn=f"978000000{counter['n']:04d}",
            total_copies=total,
            available_copies=total if available is None else available,
        )
        db.session.add(book)
        db.session.commit()
        return book

    return _make


@pytest.fixture
def auth_header(app):
    def _header(user):
        token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
        return {"Authorization": f"Bearer {token}"}

    return _header
