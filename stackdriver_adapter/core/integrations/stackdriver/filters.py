"""
Helpers producing clauses of the Cloud Monitoring filter language.

The language has no grouping: clauses are only ever joined with `AND`,
and a disjunction over literal values is expressed with `one_of(...)`.
See https://cloud.google.com/monitoring/api/v3/filters
"""

from __future__ import annotations

from typing import Sequence

# Maximum number of arguments of one_of() allowed in Stackdriver filters
ONE_OF_MAX = 100


def quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def join_filters(*filters: str) -> str:
    return " AND ".join(filters)


def equals(label: str, value: str) -> str:
    return f"{label} = {quote(value)}"


def not_equals(label: str, value: str) -> str:
    return f"{label} != {quote(value)}"


def starts_with(label: str, prefix: str) -> str:
    return f"{label} = starts_with({quote(prefix)})"


def one_of(label: str, values: Sequence[str]) -> str:
    if len(values) > ONE_OF_MAX:
        raise ValueError(f"one_of() accepts at most {ONE_OF_MAX} values, got {len(values)}")
    return f"{label} = one_of({','.join(quote(value) for value in values)})"


def equals_any(label: str, values: Sequence[str]) -> str:
    """Equality for a single value, one_of() for several."""

    if len(values) == 1:
        return equals(label, values[0])
    return one_of(label, values)
