"""Creation/expiry timestamps for security token requests."""

from __future__ import annotations

__all__ = ["TimestampPair", "format_timestamp", "generate_timestamps"]

import datetime
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .constants import TIMESTAMP_FORMAT, TOKEN_LIFETIME

if TYPE_CHECKING:
    from collections.abc import Callable

    Clock = Callable[[], datetime.datetime]


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def format_timestamp(moment: datetime.datetime) -> str:
    """Format a datetime as ``yyyy-MM-ddTHH:mm:ss.SSSZ`` in UTC.

    Naive datetimes are taken to be UTC already.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(datetime.timezone.utc)
    millis = moment.microsecond // 1000
    return f"{moment.strftime(TIMESTAMP_FORMAT)}.{millis:03d}Z"


@dataclass(frozen=True)
class TimestampPair:
    """Validity window of a single request."""

    created_at: datetime.datetime
    expires_at: datetime.datetime

    @property
    def created(self) -> str:
        return format_timestamp(self.created_at)

    @property
    def expires(self) -> str:
        return format_timestamp(self.expires_at)


def generate_timestamps(clock: Clock | None = None) -> TimestampPair:
    """
    Generate a fresh created/expires pair.

    ``created`` is the current time truncated to milliseconds (the wire
    precision) and ``expires`` is exactly ``TOKEN_LIFETIME`` later.

    Args:
        clock: Returns the current time; defaults to the UTC system clock.
    """
    now = (clock or _utc_now)()
    now = now.replace(microsecond=now.microsecond - now.microsecond % 1000)
    return TimestampPair(created_at=now, expires_at=now + TOKEN_LIFETIME)
