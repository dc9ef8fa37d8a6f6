"""
Session Store Tests.

This module tests session state and its persistence:
- Token presence marks the session as authenticated
- The session file round trip (hydration)
- A corrupt file leaves the session logged out
"""

from __future__ import annotations

import json

import pytest

from cozy_mcp.state import SessionStore
from tests.conftest import UserFactory

pytestmark = [pytest.mark.auth, pytest.mark.unit]


class TestSessionState:
    """Tests for in-memory session state."""

    def test_new_session_is_anonymous(self):
        session = SessionStore()

        assert not session.is_authenticated
        assert session.get_token() is None
        assert session.cookies() == {}
        assert session.authorization_header() == {}

    def test_set_auth(self):
        session = SessionStore()

        session.set_auth("tok", UserFactory.create())

        assert session.is_authenticated
        assert session.cookies() == {"authToken": "tok"}
        assert session.authorization_header() == {"Authorization": "Bearer tok"}

    def test_clear_auth(self):
        session = SessionStore()
        session.set_auth("tok", UserFactory.create())

        session.clear_auth()

        assert not session.is_authenticated
        assert session.user is None


class TestPersistence:
    """Tests for the session file."""

    def test_hydrates_from_file(self, tmp_path):
        path = tmp_path / "session.json"
        SessionStore(path).set_auth("tok", UserFactory.create(id=7, email="a@b.co"))

        restored = SessionStore(path)

        assert restored.is_authenticated
        assert restored.get_token() == "tok"
        assert restored.user.id == 7
        assert restored.user.email == "a@b.co"

    def test_token_alone_is_authenticated(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text(json.dumps({"token": "tok", "user": None}))

        restored = SessionStore(path)

        assert restored.is_authenticated
        assert restored.user is None

    def test_clear_removes_file(self, tmp_path):
        path = tmp_path / "session.json"
        session = SessionStore(path)
        session.set_auth("tok", UserFactory.create())

        session.clear_auth()

        assert not path.exists()

    @pytest.mark.parametrize("content", ["not json", "[]", json.dumps({"token": "t", "user": {"id": "x"}})])
    def test_corrupt_file_is_ignored(self, tmp_path, content):
        path = tmp_path / "session.json"
        path.write_text(content)

        session = SessionStore(path)

        assert not session.is_authenticated
        assert session.user is None

    def test_missing_file_is_fine(self, tmp_path):
        session = SessionStore(tmp_path / "nope.json")

        assert not session.is_authenticated

    def test_without_path_nothing_is_written(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        session = SessionStore()

        session.set_auth("tok", UserFactory.create())
        session.clear_auth()

        assert session.path is None
        assert list(tmp_path.iterdir()) == []
