"""
Query option normalization.

Defaults follow the host framework's query contract:
rows 10, start 0, a 24 hour window ending now, newest first.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

DEFAULT_ROWS = 10
DEFAULT_WINDOW = timedelta(hours=24)
ORDERS = ("asc", "desc")


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        # Epoch milliseconds.
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise ValueError(f"Cannot interpret {value!r} as a point in time.")


def _iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def normalize_query(options: dict[str, Any] | None = None, *, now: datetime | None = None) -> dict[str, Any]:
    """
    Fill in rows/start/from/until/order/fields for a query.

    Inputs:
    - options: caller options; "limit" is accepted as an alias for "rows".
    - now: reference time (defaults to the current UTC time).

    Outputs:
    - New dict; datetimes are ISO-8601 UTC strings.
    """

    options = dict(options or {})

    rows = options.get("rows") or options.get("limit") or DEFAULT_ROWS
    start = options.get("start") or 0

    until = _as_datetime(options["until"]) if options.get("until") else (now or datetime.now(timezone.utc))
    since = _as_datetime(options["from"]) if options.get("from") else until - DEFAULT_WINDOW

    order = options.get("order") or "desc"
    if order not in ORDERS:
        order = "desc"

    fields = options.get("fields")
    if fields is not None:
        fields = list(fields)

    normalized = {
        key: value
        for key, value in options.items()
        if key not in {"rows", "limit", "start", "until", "from", "order", "fields"}
    }
    normalized.update(
        {
            "rows": int(rows),
            "start": int(start),
            "from": _iso(since),
            "until": _iso(until),
            "order": order,
            "fields": fields,
        }
    )
    return normalized
