"""Shared fixtures: implementation manifests and mock VC-API endpoints."""

import copy
import json

import pytest
from httpx import Response

from vc_di_suite import ImplementationCatalog, load_fixture


ISSUER_URL = "https://danubetech.example/credentials/issue"
ISSUER_DID = "did:key:z6MkhaXgBZDvotDkL5257faiztiGiC2QtKLGpbnnEGta2doK"

SIGNED_PROOF = {
    "type": "Ed25519Signature2020",
    "created": "2022-06-01T00:00:00Z",
    "verificationMethod": f"{ISSUER_DID}#z6MkhaXgBZDvotDkL5257faiztiGiC2QtKLGpbnnEGta2doK",
    "proofPurpose": "assertionMethod",
    "proofValue": "z58DAdFfa9SkqZMVPxAQpic7ndSayn1PzZs6ZjWp1CktyGesjuTSwRdoWhAfGFCF5bppETSTojQCrfFPP2oumHKtz",
}


def verifier_url(name: str) -> str:
    return f"https://{name.lower().replace(' ', '-')}.example/credentials/verify"


def manifest(name: str, verifier_tags=("VC-API",), issuer_tags=None) -> dict:
    data = {"name": name, "issuers": [], "verifiers": []}
    if verifier_tags is not None:
        data["verifiers"].append({"endpoint": verifier_url(name), "tags": list(verifier_tags)})
    if issuer_tags is not None:
        data["issuers"].append({
            "id": ISSUER_DID,
            "endpoint": ISSUER_URL,
            "tags": list(issuer_tags),
            "options": {"type": "Ed25519Signature2020"},
        })
    return data


def is_conformant(vc) -> bool:
    """Structural checks a conformant verifier applies before proof checks."""
    if not isinstance(vc, dict):
        return False
    context = vc.get("@context")
    if not isinstance(context, list) or not context:
        return False
    if not all(isinstance(item, str) for item in context):
        return False
    types = vc.get("type")
    if not isinstance(types, list) or not all(isinstance(item, str) for item in types):
        return False
    if not isinstance(vc.get("issuer"), (str, dict)):
        return False
    if not isinstance(vc.get("credentialSubject"), dict):
        return False
    proof = vc.get("proof")
    if not isinstance(proof, dict):
        return False
    return all(
        key in proof
        for key in ("type", "created", "verificationMethod", "proofValue", "proofPurpose")
    )


def conformant_verifier(request):
    """Mock verifier: 200 for well-formed credentials, 400 otherwise."""
    body = json.loads(request.content)
    if is_conformant(body.get("verifiableCredential")):
        return Response(200, json={"checks": ["proof"], "warnings": [], "errors": []})
    return Response(400, json={"error": "invalid credential"})


def lenient_verifier(request):
    """Mock verifier that accepts everything."""
    return Response(200, json={"checks": ["proof"], "warnings": [], "errors": []})


def mock_issuer(request):
    """Mock issuer: signs whatever credential it receives."""
    body = json.loads(request.content)
    credential = copy.deepcopy(body["credential"])
    credential["proof"] = dict(SIGNED_PROOF)
    return Response(201, json=credential)


@pytest.fixture
def credential():
    """The bundled unsigned baseline credential."""
    return load_fixture()


@pytest.fixture
def signed_credential(credential):
    """A baseline credential carrying a proof."""
    signed = copy.deepcopy(credential)
    signed["proof"] = dict(SIGNED_PROOF)
    return signed


@pytest.fixture
def manifests():
    return [
        manifest("Danube Tech", issuer_tags=("VC-API", "Ed25519Signature2020")),
        manifest("Acme Verifier"),
        manifest("Issuer Only", verifier_tags=None, issuer_tags=("VC-API",)),
        manifest("Other Protocol", verifier_tags=("OIDC4VP",)),
    ]


@pytest.fixture
def catalog(manifests):
    return ImplementationCatalog.from_manifests(manifests)


@pytest.fixture
def implementations_dir(tmp_path, manifests):
    """Manifests written to disk, one file per implementation."""
    directory = tmp_path / "implementations"
    directory.mkdir()
    for index, data in enumerate(manifests):
        (directory / f"{index:02d}-{data['name'].replace(' ', '')}.json").write_text(
            json.dumps(data)
        )
    return directory
