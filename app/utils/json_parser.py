# app/utils/json_parser.py
"""
Helpers for decoding the shared remote JSON document.
The remote store has no schema enforcement, so every read is defensive.
"""

import json
from typing import Any, Optional


def safe_parse_json(raw_body: bytes) -> Optional[Any]:
    """Parse JSON bytes safely. Returns None on error or empty body."""
    if not raw_body or not raw_body.strip():
        return None
    try:
        return json.loads(raw_body.decode("utf-8", errors="replace"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


def is_json_object(raw_body: bytes) -> bool:
    """Cheap check that a body looks like a JSON object before decoding it."""
    return raw_body.lstrip().startswith(b"{")
