from __future__ import annotations

from datetime import datetime, timezone

from flask import current_app


def utcnow() -> datetime:
    """Naive UTC timestamp; every datetime column in the schema is naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SystemClock:
    def now(self) -> datetime:
        return utcnow()


def get_clock():
    return current_app.extensions["clock"]


def get_notifier():
    return current_app.extensions["notifier"]
