"""Catalog of Data Integrity verifier test cases."""

from __future__ import annotations

from dataclasses import dataclass

from vc_di_suite.classifier import Expected
from vc_di_suite.fixtures import (
    DeleteField,
    FixtureMutation,
    ReplaceField,
    Unchanged,
    disallowed_values,
)


REQUIRED_FIELDS = ("@context", "type", "issuer", "credentialSubject", "proof")
REQUIRED_PROOF_FIELDS = ("type", "created", "verificationMethod", "proofValue", "proofPurpose")


@dataclass(frozen=True)
class TestCase:
    """A named assertion over one or more fixture mutations.

    A case with several mutations passes only if every sub-case passes.
    """

    __test__ = False

    case_id: str
    title: str
    expected: Expected
    mutations: tuple[FixtureMutation, ...]

    def __post_init__(self) -> None:
        if not self.mutations:
            raise ValueError(f"Test case {self.case_id!r} has no mutations")


def _type_case(case_id: str, title: str, path: str, exclude: tuple[str, ...]) -> TestCase:
    return TestCase(
        case_id=case_id,
        title=title,
        expected=Expected.MUST_FAIL_BAD_REQUEST,
        mutations=tuple(
            ReplaceField(path, value, label)
            for label, value in disallowed_values(exclude=exclude)
        ),
    )


def _item_type_case(case_id: str, title: str, path: str) -> TestCase:
    return TestCase(
        case_id=case_id,
        title=title,
        expected=Expected.MUST_FAIL_BAD_REQUEST,
        mutations=tuple(
            ReplaceField(path, [value], f"[{label}]")
            for label, value in disallowed_values(exclude=("string",))
        ),
    )


def verifier_cases() -> list[TestCase]:
    """Verifier cases in report order."""
    cases = [
        TestCase(
            case_id="valid",
            title="MUST verify a valid VC.",
            expected=Expected.MUST_SUCCEED,
            mutations=(Unchanged(),),
        )
    ]

    for name in REQUIRED_FIELDS:
        cases.append(TestCase(
            case_id=f"missing:{name}",
            title=f'MUST not verify if "{name}" property is missing.',
            expected=Expected.MUST_FAIL_BAD_REQUEST,
            mutations=(DeleteField(name),),
        ))

    for name in REQUIRED_PROOF_FIELDS:
        path = f"proof.{name}"
        cases.append(TestCase(
            case_id=f"missing:{path}",
            title=f'MUST not verify if "{path}" property is missing.',
            expected=Expected.MUST_FAIL_BAD_REQUEST,
            mutations=(DeleteField(path),),
        ))

    cases.extend([
        _type_case(
            "type:@context", 'MUST not verify if "@context" is not an array.',
            "@context", exclude=("array",),
        ),
        _item_type_case(
            "items:@context", 'MUST not verify if "@context" items are not strings.',
            "@context",
        ),
        _type_case(
            "type:type", 'MUST not verify if "type" is not an array.',
            "type", exclude=("array",),
        ),
        _item_type_case(
            "items:type", 'MUST not verify if "type" items are not strings.',
            "type",
        ),
        _type_case(
            "type:issuer", 'MUST not verify if "issuer" is not an object or a string.',
            "issuer", exclude=("string", "object"),
        ),
        _type_case(
            "type:credentialSubject", 'MUST not verify if "credentialSubject" is not an object.',
            "credentialSubject", exclude=("object",),
        ),
        _type_case(
            "type:proof", 'MUST not verify if "proof" is not an object.',
            "proof", exclude=("object",),
        ),
    ])
    return cases
