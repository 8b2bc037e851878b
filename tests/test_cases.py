"""Tests for the verifier case catalog."""

import pytest

from vc_di_suite import DeleteField, Expected, ReplaceField, TestCase, verifier_cases
from vc_di_suite.cases import REQUIRED_FIELDS, REQUIRED_PROOF_FIELDS
from vc_di_suite.fixtures import Unchanged, type_label


def _case(case_id):
    return next(case for case in verifier_cases() if case.case_id == case_id)


def _replacement_types(case_id):
    return {type_label(mutation.value) for mutation in _case(case_id).mutations}


class TestCatalog:
    """Tests for case order and coverage."""

    def test_order(self):
        """Test cases are declared valid first, then missing, then type checks."""
        ids = [case.case_id for case in verifier_cases()]
        assert ids[0] == "valid"
        assert ids[1:6] == [f"missing:{name}" for name in REQUIRED_FIELDS]
        assert ids[6:11] == [f"missing:proof.{name}" for name in REQUIRED_PROOF_FIELDS]
        assert ids[11:] == [
            "type:@context",
            "items:@context",
            "type:type",
            "items:type",
            "type:issuer",
            "type:credentialSubject",
            "type:proof",
        ]

    def test_ids_and_titles_unique(self):
        cases = verifier_cases()
        assert len({case.case_id for case in cases}) == len(cases)
        assert len({case.title for case in cases}) == len(cases)

    def test_only_valid_case_must_succeed(self):
        expected = [case.expected for case in verifier_cases()]
        assert expected[0] == Expected.MUST_SUCCEED
        assert all(e == Expected.MUST_FAIL_BAD_REQUEST for e in expected[1:])

    def test_missing_field_cases_delete_one_field(self):
        for case in verifier_cases()[1:11]:
            assert len(case.mutations) == 1
            assert isinstance(case.mutations[0], DeleteField)

    def test_titles(self):
        assert _case("valid").title == "MUST verify a valid VC."
        assert _case("missing:proof.proofPurpose").title == (
            'MUST not verify if "proof.proofPurpose" property is missing.'
        )


class TestTypeExclusions:
    """Each field skips only its own legitimate types."""

    def test_context_not_array(self):
        assert _replacement_types("type:@context") == {
            "string", "object", "null", "undefined", "number", "boolean",
        }

    def test_type_not_array(self):
        assert "array" not in _replacement_types("type:type")
        assert len(_case("type:type").mutations) == 6

    def test_issuer(self):
        assert _replacement_types("type:issuer") == {
            "null", "undefined", "number", "boolean", "array",
        }

    def test_credential_subject_and_proof(self):
        for case_id in ("type:credentialSubject", "type:proof"):
            assert _replacement_types(case_id) == {
                "string", "null", "undefined", "number", "boolean", "array",
            }

    def test_items_wrap_values_in_list(self):
        case = _case("items:@context")
        assert all(isinstance(m, ReplaceField) for m in case.mutations)
        assert all(isinstance(m.value, list) and len(m.value) == 1 for m in case.mutations)
        labels = [m.label for m in case.mutations]
        assert "@context as [string]" not in labels
        assert "@context as [undefined]" in labels


class TestCaseDefinition:
    """Tests for case construction."""

    def test_requires_mutations(self):
        with pytest.raises(ValueError, match="no mutations"):
            TestCase("empty", "Empty", Expected.MUST_SUCCEED, ())

    def test_single_mutation(self):
        case = TestCase("valid", "Valid", Expected.MUST_SUCCEED, (Unchanged(),))
        assert len(case.mutations) == 1
