"""Tests for session loading."""

import json
import time

import pytest

from site_backup_ng.session import SessionError, load_session


class TestLoadSession:
    """Tests for load_session."""

    def test_valid_session(self, session_file):
        """Test loading a valid session file."""
        session = load_session(session_file)
        assert session.user_id == "user-1"
        assert session.token == "secret-token"
        assert session.expired is False

    def test_legacy_keys(self, tmp_path):
        """Test loading a session written with legacy keys."""
        path = tmp_path / "session.json"
        path.write_text(json.dumps({"user_uuid": "u9", "token": "t"}))
        session = load_session(path)
        assert session.user_id == "u9"
        assert session.token == "t"

    def test_missing_file(self, tmp_path):
        """Test error when no session file exists."""
        with pytest.raises(SessionError, match="not logged in"):
            load_session(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        """Test error when the session file is not JSON."""
        path = tmp_path / "session.json"
        path.write_text("{")
        with pytest.raises(SessionError, match="not valid JSON"):
            load_session(path)

    def test_missing_token(self, tmp_path):
        """Test error when the token is missing."""
        path = tmp_path / "session.json"
        path.write_text(json.dumps({"user_id": "u1"}))
        with pytest.raises(SessionError, match="user id or token"):
            load_session(path)

    def test_not_an_object(self, tmp_path):
        """Test error when the session is not an object."""
        path = tmp_path / "session.json"
        path.write_text("[]")
        with pytest.raises(SessionError, match="malformed"):
            load_session(path)

    def test_expired(self, tmp_path):
        """Test error when the session has expired."""
        path = tmp_path / "session.json"
        path.write_text(
            json.dumps({"user_id": "u1", "session": "t", "expires_at": time.time() - 60})
        )
        with pytest.raises(SessionError, match="expired"):
            load_session(path)

    def test_not_yet_expired(self, tmp_path):
        """Test a session with a future expiry is accepted."""
        path = tmp_path / "session.json"
        path.write_text(
            json.dumps({"user_id": "u1", "session": "t", "expires_at": time.time() + 3600})
        )
        assert load_session(path).expired is False
