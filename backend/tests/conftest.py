"""
Pytest configuration and shared test helpers for backend tests.
"""
import copy
import os

# Skip MongoDB startup when running under pytest.
os.environ.setdefault("PYTEST_RUNNING", "1")

import pytest
from unittest.mock import MagicMock, patch

# Shared TestClient fixture so tests can use in-process requests without a running server.
from fastapi.testclient import TestClient
from server import app
from auth import create_access_token
from database import database
from models import CustomClaims, User


@pytest.fixture
def client():
    """Return a TestClient for the main FastAPI app (server:app)."""
    return TestClient(app)


# ============================================================================
# In-memory Mongo stand-in (only the calls the services make)
# ============================================================================

def _get_path(doc, path):
    current = doc
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def _set_path(doc, path, value):
    parts = path.split(".")
    current = doc
    for part in parts[:-1]:
        current = current.setdefault(part, {})
    current[parts[-1]] = value


def _matches(doc, query):
    for key, expected in (query or {}).items():
        actual = _get_path(doc, key)
        if isinstance(expected, dict) and "$gte" in expected:
            if actual is None or actual < expected["$gte"]:
                return False
        elif actual != expected:
            return False
    return True


def _project(doc, projection):
    doc = copy.deepcopy(doc)
    doc.pop("_id", None)
    if not projection:
        return doc
    included = [k for k, v in projection.items() if v and k != "_id"]
    if included:
        return {k: doc[k] for k in included if k in doc}
    for key, value in projection.items():
        if not value:
            doc.pop(key, None)
    return doc


class _InMemoryCursor:

    def __init__(self, docs):
        self._docs = docs

    def sort(self, key, direction=1):
        self._docs.sort(key=lambda d: d.get(key), reverse=direction < 0)
        return self

    def limit(self, n):
        self._docs = self._docs[:n]
        return self

    async def to_list(self, length=None):
        return list(self._docs[:length] if length else self._docs)

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self._docs:
            yield doc


class InMemoryCollection:

    def __init__(self):
        self.docs = []

    async def find_one(self, query, projection=None, **kw):
        for doc in self.docs:
            if _matches(doc, query):
                return _project(doc, projection)
        return None

    def find(self, query=None, projection=None, **kw):
        return _InMemoryCursor([_project(d, projection) for d in self.docs if _matches(d, query)])

    async def insert_one(self, doc, **kw):
        self.docs.append(copy.deepcopy(doc))
        return MagicMock(inserted_id=len(self.docs))

    async def update_one(self, query, update, upsert=False, **kw):
        for doc in self.docs:
            if _matches(doc, query):
                for path, value in update.get("$set", {}).items():
                    _set_path(doc, path, value)
                return MagicMock(matched_count=1, modified_count=1)
        return MagicMock(matched_count=0, modified_count=0)

    async def delete_one(self, query, **kw):
        for i, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[i]
                return MagicMock(deleted_count=1)
        return MagicMock(deleted_count=0)

    async def delete_many(self, query, **kw):
        kept = [d for d in self.docs if not _matches(d, query)]
        deleted = len(self.docs) - len(kept)
        self.docs = kept
        return MagicMock(deleted_count=deleted)

    async def count_documents(self, query, **kw):
        return sum(1 for d in self.docs if _matches(d, query))


class InMemoryDb:
    """Collections are created on first access (db.users, db.generated_documents, ...)."""

    def __init__(self):
        self._collections = {}

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return self._collections.setdefault(name, InMemoryCollection())


@pytest.fixture
def memory_db():
    """Patch the global database so every service reads and writes in memory."""
    db = InMemoryDb()
    with patch.object(database, "get_db", return_value=db):
        yield db


def add_user(db, email="driver@example.com", premium=False, admin=False, **fields):
    """Insert a user record and return (user, auth headers)."""
    user = User(
        email=email,
        password_hash="not-a-real-hash",
        claims=CustomClaims(premium=premium, admin=admin),
        **fields,
    )
    db.users.docs.append(user.model_dump())
    token = create_access_token(user.user_id, email=user.email)
    return user, {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(memory_db):
    """`make_user(premium=True)` -> (user, headers) stored in `memory_db`."""
    def _make(**kwargs):
        return add_user(memory_db, **kwargs)
    return _make
