"""Exception classes for the conformance suite."""

from __future__ import annotations


class SuiteError(Exception):
    """Base class for errors raised by the suite."""

    error_code: str | None = None

    def __init__(self, *args: object, error_code: str | None = None) -> None:
        super().__init__(*args)
        if error_code:
            self.error_code = error_code


class CatalogError(SuiteError):
    """Raised when an implementation manifest cannot be loaded."""

    error_code = "catalog"


class TransportError(SuiteError):
    """Raised when an implementation endpoint cannot be reached."""

    error_code = "transport"


class SetupError(SuiteError):
    """Raised when the baseline credential for a group cannot be acquired."""

    error_code = "setup"


class FixtureError(SuiteError):
    """Raised when a fixture document cannot be loaded."""

    error_code = "fixture"
