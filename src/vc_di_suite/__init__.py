"""
VC DI Suite - VC-API Data Integrity verifier conformance suite.

Supports:
- Implementation manifests filtered by capability tag
- Baseline credential issuance through a reference issuer
- Missing-field and wrong-type negative cases
- Interop matrix reports (console and JSON)
"""

from vc_di_suite.cases import TestCase, verifier_cases
from vc_di_suite.classifier import Classification, Expected, FailureKind, classify
from vc_di_suite.client import EndpointClient, EndpointError, EndpointResponse, HttpResult
from vc_di_suite.errors import CatalogError, FixtureError, SetupError, SuiteError, TransportError
from vc_di_suite.fixtures import (
    ABSENT,
    DeleteField,
    ReplaceField,
    load_fixture,
    remove_field,
    replace_field,
)
from vc_di_suite.registry import Endpoint, Implementation, ImplementationCatalog, Role
from vc_di_suite.report import InteropMatrix, build_matrix
from vc_di_suite.runner import CaseRunner, ResultCell, RunContext, SetupPolicy

__version__ = "0.1.0"

__all__ = [
    "ABSENT",
    "CaseRunner",
    "CatalogError",
    "Classification",
    "DeleteField",
    "Endpoint",
    "EndpointClient",
    "EndpointError",
    "EndpointResponse",
    "Expected",
    "FailureKind",
    "FixtureError",
    "HttpResult",
    "Implementation",
    "ImplementationCatalog",
    "InteropMatrix",
    "ReplaceField",
    "ResultCell",
    "Role",
    "RunContext",
    "SetupError",
    "SetupPolicy",
    "SuiteError",
    "TestCase",
    "TransportError",
    "build_matrix",
    "classify",
    "load_fixture",
    "remove_field",
    "replace_field",
    "verifier_cases",
]
