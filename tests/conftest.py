"""Pytest fixtures: an in-memory database per test plus small record factories."""

import os
from datetime import timedelta

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PASSWORD_SCHEMES"] = "pbkdf2_sha256"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import models  # noqa: E402
from database import get_db, init_db  # noqa: E402


class Factory:
    """Builds committed rows with sensible defaults."""

    def __init__(self, db):
        self.db = db
        self._seq = 0

    def _next(self):
        self._seq += 1
        return self._seq

    def days_ago(self, days, hours=0):
        return models.utcnow() - timedelta(days=days, hours=hours)

    def user(self, name=None):
        n = self._next()
        user = models.User(name=name or f"User {n}", email=f"user{n}@example.com", hashed_password="x")
        self.db.add(user)
        self.db.commit()
        return user

    def product(self, author=None, **overrides):
        n = self._next()
        fields = {
            "title": f"Product {n}",
            "description": "Built in Malaysia",
            "url": f"https://product{n}.example.com",
            "tags": [],
            "project_type": "startup",
            "location": None,
            "is_made_in_my": True,
        }
        fields.update(overrides)
        product = models.Product(author=author or self.user(), **fields)
        self.db.add(product)
        self.db.commit()
        return product

    def vote(self, product, user=None, created_at=None):
        vote = models.Vote(product=product, user=user or self.user())
        if created_at is not None:
            vote.created_at = created_at
        self.db.add(vote)
        self.db.commit()
        return vote

    def votes(self, product, count, created_at=None):
        return [self.vote(product, created_at=created_at) for _ in range(count)]

    def comment(self, product, author=None, content="Great work!", created_at=None):
        comment = models.Comment(product=product, author=author or self.user(), content=content)
        if created_at is not None:
            comment.created_at = created_at
        self.db.add(comment)
        self.db.commit()
        return comment


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make(db):
    return Factory(db)


@pytest.fixture
def client(session_factory):
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
