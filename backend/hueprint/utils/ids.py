"""
Hueprint Request IDs
Each extraction gets an ID so its log lines can be correlated.
"""
import re
import uuid
from datetime import datetime, timezone

_REQUEST_ID_RE = re.compile(r"^(?P<prefix>[a-z]+)-(?P<stamp>\d{14})-(?P<suffix>[0-9a-f]{8})$")


def generate_request_id(prefix: str = "pal") -> str:
    """
    Build an ID of the form ``<prefix>-<YYYYmmddHHMMSS UTC>-<8 hex chars>``.
    """
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"{prefix}-{stamp}-{uuid.uuid4().hex[:8]}"


def extract_timestamp_from_request_id(request_id: str) -> str:
    """Timestamp segment of a request ID, or "" when the ID is not ours."""
    match = _REQUEST_ID_RE.match(request_id)
    return match.group("stamp") if match else ""
