"""
Outcome classification.

Maps an endpoint response to pass or fail for a case's expected outcome.
Classification never raises: every problem becomes a failure reason.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from vc_di_suite.client import EndpointError, EndpointResponse


class Expected(Enum):
    """Expected outcome of a test case."""

    MUST_SUCCEED = "MustSucceed"
    MUST_FAIL_BAD_REQUEST = "MustFailBadRequest"


class FailureKind(Enum):
    """Why a cell failed."""

    TRANSPORT_ERROR = "TransportError"
    SETUP_ERROR = "SetupError"
    CLASSIFICATION_MISMATCH = "ClassificationMismatch"
    MALFORMED_RESPONSE = "MalformedResponse"


@dataclass(frozen=True)
class Classification:
    """Result of classifying one response."""

    passed: bool
    reason: str
    failure: FailureKind | None = None

    @classmethod
    def ok(cls, reason: str = "ok") -> Classification:
        return cls(passed=True, reason=reason)

    @classmethod
    def fail(cls, failure: FailureKind, reason: str) -> Classification:
        return cls(passed=False, reason=reason, failure=failure)


BadRequestCheck = Callable[[EndpointError], bool]


def client_error_bad_request(error: EndpointError) -> bool:
    """Accept any 4xx status as a bad request."""
    return error.status is not None and 400 <= error.status < 500


def strict_bad_request(error: EndpointError) -> bool:
    """Accept only HTTP 400."""
    return error.status == 400


def classify(
    expected: Expected,
    response: EndpointResponse,
    is_bad_request: BadRequestCheck = client_error_bad_request,
) -> Classification:
    """Judge a response against the expected outcome.

    Args:
        expected: What the case requires.
        response: The captured endpoint response.
        is_bad_request: Recognizer for a bad-request error.

    Returns:
        Classification with a report-friendly reason.
    """
    result, error = response.result, response.error

    if result is not None and error is not None:
        return Classification.fail(
            FailureKind.MALFORMED_RESPONSE,
            "Malformed response: both result and error are populated",
        )
    if result is None and error is None:
        return Classification.fail(
            FailureKind.MALFORMED_RESPONSE,
            "Malformed response: neither result nor error is populated",
        )

    if error is not None and error.transport:
        return Classification.fail(
            FailureKind.TRANSPORT_ERROR,
            f"Transport error: {error.message}",
        )

    if expected == Expected.MUST_SUCCEED:
        if error is not None:
            return Classification.fail(
                FailureKind.CLASSIFICATION_MISMATCH,
                f"Expected status 200, got error status {error.status}: {error.message}",
            )
        if result.status != 200:
            return Classification.fail(
                FailureKind.CLASSIFICATION_MISMATCH,
                f"Expected status 200, got {result.status}",
            )
        return Classification.ok("Verified with status 200")

    if result is not None:
        return Classification.fail(
            FailureKind.CLASSIFICATION_MISMATCH,
            f"Expected a bad request error, got unexpected success (status {result.status})",
        )
    try:
        recognized = is_bad_request(error)
    except Exception as e:
        return Classification.fail(
            FailureKind.MALFORMED_RESPONSE,
            f"Could not interpret error response: {e}",
        )
    if not recognized:
        return Classification.fail(
            FailureKind.CLASSIFICATION_MISMATCH,
            f"Expected a bad request error, got status {error.status}",
        )
    return Classification.ok(f"Rejected with status {error.status}")
