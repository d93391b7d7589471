from __future__ import annotations

from typing import ClassVar


class TranslatorError(Exception):
    """
    Base class for all errors raised while translating between the custom metrics API and Stackdriver.

    `status_code` and `reason` mirror the Kubernetes API status the error should be reported with.
    """

    status_code: ClassVar[int] = 500
    reason: ClassVar[str] = "InternalError"


class InvalidSelector(TranslatorError):
    """
    An exception raised when no objects matched the provided selector.
    """

    status_code = 400
    reason = "BadRequest"

    def __init__(self, message: str = "No objects matched provided selector") -> None:
        super().__init__(message)


class BatchTooLarge(TranslatorError):
    """
    An exception raised when more objects were requested than a single one_of() filter can hold.
    Callers are expected to split the objects into batches beforehand.
    """

    def __init__(self, kind: str, count: int, limit: int) -> None:
        super().__init__(f"Request for {count} {kind} exceeds the allowed limit of {limit} {kind} per query")
        self.count = count
        self.limit = limit


class UnsupportedOperation(TranslatorError):
    """
    An exception raised when the configured resource model can't express the requested query.
    """

    status_code = 501
    reason = "NotImplemented"


class MetricNotFound(TranslatorError):
    """
    An exception raised when Stackdriver returned no time series for a metric.
    """

    status_code = 404
    reason = "NotFound"

    def __init__(self, resource: str, metric_name: str) -> None:
        super().__init__(f"The metric {metric_name!r} for {resource} was not found")
        self.resource = resource
        self.metric_name = metric_name


class BackendContractViolation(TranslatorError):
    """
    An exception raised when a Stackdriver response doesn't match the query that produced it.
    """


class MalformedSample(TranslatorError):
    """
    An exception raised when a point carries neither an integer nor a floating value.
    """

    status_code = 400
    reason = "BadRequest"


class InvariantViolation(TranslatorError):
    """
    An exception raised when an internal precondition doesn't hold, e.g. a filter was requested for no names.
    """
