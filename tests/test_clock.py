from datetime import datetime, timedelta, timezone

from stackdriver_adapter.utils.clock import FixedClock, format_rfc3339


def test_format_rfc3339():
    assert format_rfc3339(datetime(2024, 1, 2, 3, 4, 5, 999999, tzinfo=timezone.utc)) == "2024-01-02T03:04:05Z"
    assert format_rfc3339(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05Z"
    # Rendered in UTC
    assert format_rfc3339(datetime(2024, 1, 2, 5, 4, 5, tzinfo=timezone(timedelta(hours=2)))) == "2024-01-02T03:04:05Z"


def test_fixed_clock_treats_naive_time_as_utc():
    assert FixedClock(datetime(2024, 1, 2, 3, 4, 5)).now() == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
