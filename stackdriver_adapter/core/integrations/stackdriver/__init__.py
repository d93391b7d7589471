from .exceptions import (
    BackendContractViolation,
    BatchTooLarge,
    InvalidSelector,
    InvariantViolation,
    MalformedSample,
    MetricNotFound,
    TranslatorError,
    UnsupportedOperation,
)

__all__ = [
    "TranslatorError",
    "InvalidSelector",
    "BatchTooLarge",
    "UnsupportedOperation",
    "MetricNotFound",
    "BackendContractViolation",
    "MalformedSample",
    "InvariantViolation",
]
