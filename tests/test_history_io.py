"""
Tests for loading session history exports.
"""

import json

import pytest

from src.history_io import load_history_file


def test_load_history_object(sample_history_path):
    """Test an export with user id, counts and sessions."""
    history = load_history_file(sample_history_path)

    assert history.user_id == "climber_demo"
    assert history.counts.total_climbs == 34
    assert len(history.sessions) == 11
    # Records stay raw until the engine validates them
    assert isinstance(history.sessions[0], dict)


def test_load_bare_list(tmp_path):
    """Test an export that is just a list of sessions."""
    path = tmp_path / "sessions.json"
    path.write_text(json.dumps([{"start_time": 1, "climbs": []}]))

    history = load_history_file(path)

    assert history.user_id is None
    assert history.counts is None
    assert len(history.sessions) == 1


def test_missing_file(tmp_path):
    """Test that a missing export raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_history_file(tmp_path / "nope.json")


def test_invalid_json(tmp_path):
    """Test that malformed JSON raises ValueError."""
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ValueError, match="Invalid JSON"):
        load_history_file(path)


def test_invalid_shape(tmp_path):
    """Test that an export with invalid counts raises ValueError."""
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"sessions": [], "counts": {"total_climbs": -5}}))
    with pytest.raises(ValueError, match="Invalid session history"):
        load_history_file(path)
