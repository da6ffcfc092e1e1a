"""Identifier and timestamp helpers."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional


def generate_id() -> str:
	"""Return a new random (UUID4) identifier."""
	return str(uuid.uuid4())


def now_iso() -> str:
	"""Current UTC time as an ISO-8601 string."""
	return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def today_iso(offset_days: int = 0) -> str:
	"""Today's UTC date (plus an optional offset) as YYYY-MM-DD."""
	day = datetime.now(timezone.utc).date() + timedelta(days=offset_days)
	return day.isoformat()


def next_timestamp(previous: Optional[str] = None) -> str:
	"""
	Return a timestamp strictly later than ``previous``.

	Falls back to ``previous + 1µs`` when the clock has not moved (or moved
	backwards). Unparsable previous values are ignored.
	"""
	now = datetime.now(timezone.utc)
	if previous:
		try:
			prev = datetime.fromisoformat(previous)
		except ValueError:
			return now.isoformat(timespec="microseconds")
		if prev.tzinfo is None:
			prev = prev.replace(tzinfo=timezone.utc)
		if now <= prev:
			now = prev + timedelta(microseconds=1)
	return now.isoformat(timespec="microseconds")

