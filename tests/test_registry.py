"""Tests for the implementation registry."""

import json

import pytest

from vc_di_suite import CatalogError, Implementation, ImplementationCatalog, Role


class TestFilterByTag:
    """Tests for tag-based partitioning."""

    def test_partition_is_ordered_and_disjoint(self, catalog):
        result = catalog.filter_by_tag(Role.VERIFIER, ["VC-API"])
        assert list(result.match) == ["Danube Tech", "Acme Verifier"]
        assert list(result.non_match) == ["Issuer Only", "Other Protocol"]
        assert not set(result.match) & set(result.non_match)
        assert len(result.match) + len(result.non_match) == len(catalog)

    def test_issuer_role(self, catalog):
        result = catalog.filter_by_tag(Role.ISSUER, ["VC-API"])
        assert list(result.match) == ["Danube Tech", "Issuer Only"]

    def test_any_tag_matches(self, catalog):
        result = catalog.filter_by_tag(Role.VERIFIER, ["OIDC4VP", "unknown"])
        assert list(result.match) == ["Other Protocol"]

    def test_deterministic_and_non_mutating(self, catalog):
        names = [impl.name for impl in catalog]
        first = catalog.filter_by_tag(Role.VERIFIER, ["VC-API"])
        second = catalog.filter_by_tag(Role.VERIFIER, ["VC-API"])
        assert first == second
        assert [impl.name for impl in catalog] == names


class TestImplementation:
    """Tests for manifest parsing."""

    def test_find_by_tag(self, catalog):
        danube = catalog.get("Danube Tech")
        issuer = danube.find(Role.ISSUER, "Ed25519Signature2020")
        assert issuer is not None
        assert issuer.id.startswith("did:key:")
        assert issuer.options == {"type": "Ed25519Signature2020"}
        assert danube.find(Role.ISSUER, "missing") is None

    def test_missing_name(self):
        with pytest.raises(CatalogError):
            Implementation.from_dict({"verifiers": []})

    def test_missing_endpoint(self):
        with pytest.raises(CatalogError):
            Implementation.from_dict({"name": "X", "verifiers": [{"tags": ["VC-API"]}]})

    def test_tags_must_be_list(self):
        with pytest.raises(CatalogError):
            Implementation.from_dict({
                "name": "X",
                "verifiers": [{"endpoint": "https://x.example", "tags": "VC-API"}],
            })

    @pytest.mark.parametrize("key", ["issuers", "verifiers"])
    @pytest.mark.parametrize("value", [None, {}, "https://x.example", 3])
    def test_endpoint_lists_must_be_lists(self, key, value):
        with pytest.raises(CatalogError, match=f"'{key}' must be a list"):
            Implementation.from_dict({"name": "X", key: value})

    def test_endpoint_lists_default_to_empty(self):
        implementation = Implementation.from_dict({"name": "X"})
        assert implementation.issuers == ()
        assert implementation.verifiers == ()

    def test_duplicate_names(self):
        with pytest.raises(CatalogError):
            ImplementationCatalog.from_manifests([{"name": "X"}, {"name": "X"}])


class TestFromDirectory:
    """Tests for loading manifests from disk."""

    def test_loads_in_file_name_order(self, implementations_dir):
        catalog = ImplementationCatalog.from_directory(implementations_dir)
        assert [impl.name for impl in catalog] == [
            "Danube Tech", "Acme Verifier", "Issuer Only", "Other Protocol",
        ]
        assert "Acme Verifier" in catalog

    def test_ignores_other_files(self, implementations_dir):
        (implementations_dir / "README.md").write_text("notes")
        assert len(ImplementationCatalog.from_directory(implementations_dir)) == 4

    def test_missing_directory(self, tmp_path):
        with pytest.raises(CatalogError):
            ImplementationCatalog.from_directory(tmp_path / "nope")

    def test_invalid_json(self, tmp_path):
        (tmp_path / "broken.json").write_text("{not json")
        with pytest.raises(CatalogError):
            ImplementationCatalog.from_directory(tmp_path)

    def test_manifest_round_trip(self, tmp_path):
        data = {"name": "Solo", "verifiers": [{"endpoint": "https://solo.example/verify", "tags": ["VC-API"]}]}
        (tmp_path / "solo.json").write_text(json.dumps(data))
        catalog = ImplementationCatalog.from_directory(tmp_path)
        verifier = catalog.get("Solo").verifiers[0]
        assert verifier.url == "https://solo.example/verify"
        assert verifier.role == Role.VERIFIER
        assert verifier.tags == frozenset({"VC-API"})
