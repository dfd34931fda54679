from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def file_timestamp(moment: datetime | None = None) -> str:
    when = (moment or utc_now()).astimezone(timezone.utc)
    return when.strftime("%Y-%m-%dT%H:%M:%SZ")
