"""
Case runner.

Each matching verifier forms a group. A group first acquires a signed
baseline credential from the reference issuer, then runs every case against
the group's verifier endpoint. Groups run concurrently; cases within a group
run in declared order. Results go into an explicit RunContext.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Mapping, Sequence

from vc_di_suite.cases import TestCase
from vc_di_suite.classifier import (
    BadRequestCheck,
    Classification,
    FailureKind,
    classify,
    client_error_bad_request,
)
from vc_di_suite.client import EndpointClient
from vc_di_suite.errors import SetupError, TransportError
from vc_di_suite.fixtures import create_request_body
from vc_di_suite.registry import Endpoint, Implementation, Role


logger = logging.getLogger(__name__)

ED25519_2020_CONTEXT = "https://w3id.org/security/suites/ed25519-2020/v1"


class CellStatus(Enum):
    """Recorded state of a result cell."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class SetupPolicy(Enum):
    """How cells are recorded when a group's baseline cannot be acquired."""

    MARK_ERRORED = "error"
    SKIP_GROUP = "skip"


@dataclass(frozen=True)
class SubResult:
    """Outcome of one mutation within a case."""

    label: str
    passed: bool
    reason: str
    status_code: int | None = None
    data: Any = None


@dataclass(frozen=True)
class ResultCell:
    """Outcome of one case against one implementation."""

    implementation: str
    case_id: str
    title: str
    status: CellStatus
    reason: str
    failure: FailureKind | None = None
    sub_results: tuple[SubResult, ...] = ()
    duration_ms: float | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.implementation, self.case_id)

    @property
    def passed(self) -> bool:
        return self.status == CellStatus.PASSED


class RunContext:
    """Ordered, thread-safe store of result cells.

    Each (implementation, case) key can be written once.
    """

    def __init__(self) -> None:
        self._cells: dict[tuple[str, str], ResultCell] = {}
        self._lock = threading.Lock()

    def record(self, cell: ResultCell) -> None:
        """Store a cell.

        Raises:
            ValueError: If a cell for the same key was already recorded.
        """
        with self._lock:
            if cell.key in self._cells:
                raise ValueError(f"Result already recorded for {cell.key}")
            self._cells[cell.key] = cell

    def get(self, implementation: str, case_id: str) -> ResultCell | None:
        with self._lock:
            return self._cells.get((implementation, case_id))

    def cells(self) -> list[ResultCell]:
        """Snapshot of recorded cells in insertion order."""
        with self._lock:
            return list(self._cells.values())

    def __iter__(self) -> Iterator[ResultCell]:
        return iter(self.cells())

    def __len__(self) -> int:
        with self._lock:
            return len(self._cells)


@dataclass(frozen=True)
class BaselineResult:
    """Either a signed baseline credential or the error that prevented it."""

    fixture: dict[str, Any] | None = None
    error: SetupError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.fixture is not None


@dataclass
class ReferenceIssuer:
    """Issuer used to sign the baseline credential."""

    name: str = "Danube Tech"
    tag: str = "Ed25519Signature2020"
    extra_contexts: tuple[str, ...] = (ED25519_2020_CONTEXT,)

    def resolve(self, issuers: Mapping[str, Implementation]) -> Endpoint:
        """Find the issuer endpoint among the matching issuers.

        Raises:
            SetupError: If the implementation or a tagged issuer is missing.
        """
        implementation = issuers.get(self.name)
        if implementation is None:
            raise SetupError(f"Reference issuer {self.name!r} not among the matching issuers")
        endpoint = implementation.find(Role.ISSUER, self.tag)
        if endpoint is None:
            raise SetupError(f"{self.name!r} has no issuer tagged {self.tag!r}")
        return endpoint


def acquire_baseline(
    client: EndpointClient,
    issuer: Endpoint,
    credential: dict[str, Any],
    extra_contexts: Sequence[str] = (ED25519_2020_CONTEXT,),
) -> BaselineResult:
    """Issue the baseline credential through the reference issuer.

    The unsigned credential gets a fresh ``urn:uuid`` id and the issuer's id
    before issuance. ``extra_contexts`` are appended to the issued
    credential's ``@context``.
    """
    body = create_issue_body(issuer, credential)
    try:
        result = client.issue(issuer, body).raise_for_error()
    except TransportError as e:
        return BaselineResult(error=SetupError(f"Issuance via {issuer.name} failed: {e}"))

    issued = result.data
    if isinstance(issued, dict) and isinstance(issued.get("verifiableCredential"), dict):
        issued = issued["verifiableCredential"]
    if not isinstance(issued, dict):
        return BaselineResult(
            error=SetupError(f"Issuer {issuer.name} did not return a credential object")
        )
    if not isinstance(issued.get("proof"), dict):
        return BaselineResult(
            error=SetupError(f"Credential issued by {issuer.name} has no proof object")
        )

    contexts = issued.get("@context")
    if isinstance(contexts, list):
        for context in extra_contexts:
            if context not in contexts:
                contexts.append(context)

    return BaselineResult(fixture=issued)


def create_issue_body(issuer: Endpoint, credential: dict[str, Any]) -> dict[str, Any]:
    """Build a VC-API issue request for ``credential``."""
    unsigned = copy.deepcopy(credential)
    unsigned["id"] = f"urn:uuid:{uuid.uuid4()}"
    if issuer.id:
        unsigned["issuer"] = issuer.id
    return {"credential": unsigned, "options": copy.deepcopy(issuer.options)}


class CaseRunner:
    """Drives test cases against verifier endpoints."""

    def __init__(
        self,
        client: EndpointClient,
        cases: Sequence[TestCase],
        credential: dict[str, Any],
        reference_issuer: ReferenceIssuer | None = None,
        verifier_tags: Sequence[str] = ("VC-API",),
        setup_policy: SetupPolicy = SetupPolicy.MARK_ERRORED,
        is_bad_request: BadRequestCheck = client_error_bad_request,
        max_workers: int = 4,
    ) -> None:
        """Initialize the runner.

        Args:
            client: HTTP client for endpoint calls.
            cases: Cases in report order.
            credential: Unsigned baseline credential.
            reference_issuer: Issuer that signs the baseline.
            verifier_tags: Tags selecting the verifier endpoint to test.
            setup_policy: How to record cells when setup fails.
            is_bad_request: Recognizer for bad-request errors.
            max_workers: Number of groups run concurrently.
        """
        case_ids = [case.case_id for case in cases]
        if len(set(case_ids)) != len(case_ids):
            raise ValueError("Case ids must be unique")
        self.client = client
        self.cases = tuple(cases)
        self.credential = credential
        self.reference_issuer = reference_issuer or ReferenceIssuer()
        self.verifier_tags = tuple(verifier_tags)
        self.setup_policy = setup_policy
        self.is_bad_request = is_bad_request
        self.max_workers = max(1, max_workers)

    def run(
        self,
        issuers: Mapping[str, Implementation],
        verifiers: dict[str, Implementation],
        context: RunContext | None = None,
    ) -> RunContext:
        """Run every case against every verifier group.

        Args:
            issuers: Implementations with a matching issuer, searched for the
                reference issuer.
            verifiers: Matching verifier implementations, in column order.
            context: Store to record into. A new one is created if omitted.

        Returns:
            The RunContext holding one cell per (implementation, case).
        """
        context = context if context is not None else RunContext()
        try:
            issuer: Endpoint | None = self.reference_issuer.resolve(issuers)
            issuer_error: SetupError | None = None
        except SetupError as e:
            logger.error("%s", e)
            issuer, issuer_error = None, e

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self.run_group, implementation, issuer, issuer_error, context)
                for implementation in verifiers.values()
            ]
            for future in futures:
                future.result()

        return context

    def run_group(
        self,
        implementation: Implementation,
        issuer: Endpoint | None,
        issuer_error: SetupError | None,
        context: RunContext,
    ) -> None:
        """Acquire the baseline for one implementation and run its cases.

        An unexpected error fails every case of the group not yet recorded.
        """
        try:
            self._run_group(implementation, issuer, issuer_error, context)
        except Exception as e:
            logger.exception("Unexpected error testing %s", implementation.name)
            for case in self.cases:
                if context.get(implementation.name, case.case_id) is None:
                    context.record(ResultCell(
                        implementation=implementation.name,
                        case_id=case.case_id,
                        title=case.title,
                        status=CellStatus.FAILED,
                        reason=f"Unexpected error: {e.__class__.__name__}: {e}",
                        failure=FailureKind.TRANSPORT_ERROR,
                    ))

    def _run_group(
        self,
        implementation: Implementation,
        issuer: Endpoint | None,
        issuer_error: SetupError | None,
        context: RunContext,
    ) -> None:
        logger.info("Testing verifier %s", implementation.name)
        if issuer is None:
            baseline = BaselineResult(error=issuer_error or SetupError("No reference issuer"))
        else:
            baseline = acquire_baseline(
                self.client,
                issuer,
                self.credential,
                extra_contexts=self.reference_issuer.extra_contexts,
            )

        endpoint = self._verifier_endpoint(implementation)
        for case in self.cases:
            if not baseline.ok:
                cell = self.setup_failure_cell(implementation, case, baseline.error)
            elif endpoint is None:
                cell = ResultCell(
                    implementation=implementation.name,
                    case_id=case.case_id,
                    title=case.title,
                    status=CellStatus.FAILED,
                    reason=f"No verifier tagged {', '.join(self.verifier_tags)}",
                    failure=FailureKind.SETUP_ERROR,
                )
            else:
                cell = self.run_case(implementation, endpoint, case, baseline.fixture)
            context.record(cell)

        if not baseline.ok:
            logger.warning(
                "Setup failed for %s: %s", implementation.name, baseline.error
            )

    def run_case(
        self,
        implementation: Implementation,
        endpoint: Endpoint,
        case: TestCase,
        baseline: dict[str, Any],
    ) -> ResultCell:
        """Run every mutation of a case and fold them into one cell."""
        started = time.monotonic()
        sub_results: list[SubResult] = []
        first_failure: Classification | None = None

        for mutation in case.mutations:
            try:
                vc = mutation.apply(baseline)
            except KeyError as e:
                # baseline from the issuer lacks a field this case mutates
                classification = Classification.fail(
                    FailureKind.SETUP_ERROR, f"Baseline credential cannot be mutated: {e}"
                )
                status_code = None
                body = None
            else:
                response = self.client.verify(endpoint, create_request_body(vc))
                classification = classify(case.expected, response, self.is_bad_request)
                status_code = (
                    response.result.status if response.result is not None
                    else response.error.status if response.error is not None
                    else None
                )
                body = response.data
            sub_results.append(SubResult(
                label=mutation.label,
                passed=classification.passed,
                reason=classification.reason,
                status_code=status_code,
                data=body,
            ))
            if not classification.passed and first_failure is None:
                first_failure = classification
                logger.debug(
                    "%s / %s [%s]: %s",
                    implementation.name, case.case_id, mutation.label, classification.reason,
                )

        duration_ms = (time.monotonic() - started) * 1000
        if first_failure is None:
            return ResultCell(
                implementation=implementation.name,
                case_id=case.case_id,
                title=case.title,
                status=CellStatus.PASSED,
                reason=sub_results[-1].reason if len(sub_results) == 1 else "All sub-cases passed",
                sub_results=tuple(sub_results),
                duration_ms=duration_ms,
            )

        failed = [sub for sub in sub_results if not sub.passed]
        reason = first_failure.reason
        if len(sub_results) > 1:
            reason = f"{len(failed)}/{len(sub_results)} sub-cases failed; first: {failed[0].label}: {reason}"
        return ResultCell(
            implementation=implementation.name,
            case_id=case.case_id,
            title=case.title,
            status=CellStatus.FAILED,
            reason=reason,
            failure=first_failure.failure,
            sub_results=tuple(sub_results),
            duration_ms=duration_ms,
        )

    def setup_failure_cell(
        self,
        implementation: Implementation,
        case: TestCase,
        error: SetupError | None,
    ) -> ResultCell:
        status = (
            CellStatus.SKIPPED if self.setup_policy == SetupPolicy.SKIP_GROUP
            else CellStatus.FAILED
        )
        return ResultCell(
            implementation=implementation.name,
            case_id=case.case_id,
            title=case.title,
            status=status,
            reason=f"Setup failed: {error}",
            failure=FailureKind.SETUP_ERROR,
        )

    def _verifier_endpoint(self, implementation: Implementation) -> Endpoint | None:
        for endpoint in implementation.verifiers:
            if endpoint.has_any_tag(self.verifier_tags):
                return endpoint
        return None
