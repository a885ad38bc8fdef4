"""
Session history files.

Reads exported session logs for the CLI and demo scripts. A history file is
either a bare JSON list of session records or an object:

    {"user_id": "...", "counts": {"total_sessions": 12, "total_climbs": 180},
     "sessions": [...]}

Records stay raw here; they are validated by the aggregator.
"""

import json
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from src.schemas import UserAggregateCounts


class SessionHistoryFile(BaseModel):
    """Contents of a session history export."""

    user_id: Optional[str] = None
    counts: Optional[UserAggregateCounts] = None
    sessions: List[Any] = Field(default_factory=list)


def load_history_file(path: Path) -> SessionHistoryFile:
    """
    Load a session history export.

    Args:
        path: Path to the JSON file

    Returns:
        SessionHistoryFile with raw session records

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a valid history export
    """
    if not path.exists():
        raise FileNotFoundError(f"Session history file not found: {path}")

    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}")

    if isinstance(data, list):
        data = {"sessions": data}

    try:
        return SessionHistoryFile(**data)
    except Exception as e:
        raise ValueError(f"Invalid session history file: {e}")
