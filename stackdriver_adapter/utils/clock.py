from __future__ import annotations

import datetime
from typing import Protocol

from google.protobuf import timestamp_pb2


class Clock(Protocol):
    def now(self) -> datetime.datetime:
        ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime.datetime:
        return datetime.datetime.now(datetime.timezone.utc)


class FixedClock:
    """
    A clock that always returns the same instant.
    Used by tests and by the CLI `--at` option to make query windows reproducible.
    """

    def __init__(self, instant: datetime.datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=datetime.timezone.utc)
        self.instant = instant

    def now(self) -> datetime.datetime:
        return self.instant


def format_rfc3339(value: datetime.datetime) -> str:
    """
    Formats a datetime the way protobuf renders timestamps in JSON, e.g. `2024-01-02T03:04:05Z`.

    Naive datetimes are treated as UTC. Sub-second precision is dropped.
    """

    timestamp = timestamp_pb2.Timestamp()
    timestamp.FromDatetime(value.replace(microsecond=0))
    return timestamp.ToJsonString()
