from __future__ import annotations

import json

import pytest

from ledger_shell.requests import (
    MAX_SCHEMA_ATTRIBUTES,
    append_endorser,
    append_taa_acceptance,
    build_attrib_request,
    build_auth_rule_request,
    build_get_acceptance_mechanisms_request,
    build_get_auth_rule_request,
    build_nym_request,
    build_request_to_sign,
    build_schema_request,
    canonical_json,
    normalize_role,
    normalize_txn_type,
    role_title,
    taa_digest,
)

DID = "V4SGRU86Z58d6TV7PBUe6f"


def test_canonical_json_is_sorted_and_compact() -> None:
    assert canonical_json({"b": 1, "a": {"d": [1, 2], "c": "é"}}) == '{"a":{"c":"é","d":[1,2]},"b":1}'
    with pytest.raises(ValueError):
        canonical_json({"x": float("nan")})


def test_request_to_sign_excludes_signatures() -> None:
    request = build_nym_request(submitter_did=DID, target_did="Th7MpTaRZVRYnPiabds81Y")
    unsigned = build_request_to_sign(request)
    signed = dict(request, signature="abc", signatures={DID: "def"})
    assert build_request_to_sign(signed) == unsigned
    assert json.loads(unsigned) == request


def test_request_envelope() -> None:
    request = build_nym_request(submitter_did=DID, target_did="Th7MpTaRZVRYnPiabds81Y", protocol_version=1)
    assert request["identifier"] == DID
    assert request["protocolVersion"] == 1
    assert isinstance(request["reqId"], int) and request["reqId"] > 0
    assert "identifier" not in build_nym_request(submitter_did=None, target_did=DID)


@pytest.mark.parametrize(
    ("role", "code"),
    [
        ("TRUSTEE", "0"),
        ("steward", "2"),
        ("TRUST_ANCHOR", "101"),
        ("ENDORSER", "101"),
        ("NETWORK_MONITOR", "201"),
        ("101", "101"),
        ("", None),
        (None, None),
    ],
)
def test_role_normalization(role, code) -> None:
    assert normalize_role(role) == code


def test_unknown_role_rejected() -> None:
    with pytest.raises(ValueError, match="role must be one of"):
        normalize_role("ADMIN")


def test_role_titles() -> None:
    assert role_title("0") == "TRUSTEE"
    assert role_title(None) == "-"
    assert role_title("999") == "999"


def test_nym_clear_role_keeps_explicit_null() -> None:
    operation = build_nym_request(submitter_did=DID, target_did=DID, clear_role=True)["operation"]
    assert "role" in operation and operation["role"] is None
    assert "role" not in build_nym_request(submitter_did=DID, target_did=DID)["operation"]


def test_attrib_requires_exactly_one_value() -> None:
    with pytest.raises(ValueError, match="exactly one"):
        build_attrib_request(submitter_did=DID, target_did=DID)
    with pytest.raises(ValueError, match="exactly one"):
        build_attrib_request(submitter_did=DID, target_did=DID, hash="h", enc="e")
    operation = build_attrib_request(submitter_did=DID, target_did=DID, raw={"b": 1, "a": 2})["operation"]
    assert operation["raw"] == '{"a":2,"b":1}'


def test_schema_attribute_limits() -> None:
    with pytest.raises(ValueError, match="at least one"):
        build_schema_request(submitter_did=DID, name="gvt", version="1.0", attr_names=[])
    names = [f"a{i}" for i in range(MAX_SCHEMA_ATTRIBUTES + 1)]
    with pytest.raises(ValueError, match="at most"):
        build_schema_request(submitter_did=DID, name="gvt", version="1.0", attr_names=names)
    request = build_schema_request(
        submitter_did=DID, name="gvt", version="1.0", attr_names=names[:MAX_SCHEMA_ATTRIBUTES]
    )
    assert len(request["operation"]["data"]["attr_names"]) == MAX_SCHEMA_ATTRIBUTES


def test_txn_type_aliases() -> None:
    assert normalize_txn_type("nym") == "1"
    assert normalize_txn_type("101") == "101"
    with pytest.raises(ValueError, match="unsupported ledger transaction alias"):
        normalize_txn_type("BOGUS")


def test_auth_rule_edit_needs_old_value() -> None:
    kwargs = {
        "submitter_did": DID,
        "txn_type": "NYM",
        "field": "role",
        "new_value": "101",
        "constraint": {"constraint_id": "ROLE", "role": "0", "sig_count": 1},
    }
    with pytest.raises(ValueError, match="old_value is mandatory"):
        build_auth_rule_request(action="EDIT", old_value=None, **kwargs)
    with pytest.raises(ValueError, match="ADD, EDIT"):
        build_auth_rule_request(action="REMOVE", old_value=None, **kwargs)

    add = build_auth_rule_request(action="add", old_value="ignored", **kwargs)["operation"]
    assert add["auth_action"] == "ADD"
    assert "old_value" not in add
    edit = build_auth_rule_request(action="EDIT", old_value="0", **kwargs)["operation"]
    assert edit["old_value"] == "0"


def test_get_auth_rule_filters_are_optional() -> None:
    assert build_get_auth_rule_request(submitter_did=None)["operation"] == {"type": "121"}
    operation = build_get_auth_rule_request(submitter_did=None, txn_type="NYM", action="add")["operation"]
    assert operation == {"type": "121", "auth_type": "1", "auth_action": "ADD"}


def test_acceptance_mechanisms_timestamp_or_version() -> None:
    with pytest.raises(ValueError, match="cannot be specified together"):
        build_get_acceptance_mechanisms_request(submitter_did=None, timestamp=1, version="1")


def test_taa_acceptance_rounds_to_day() -> None:
    request = build_nym_request(submitter_did=DID, target_did=DID)
    accepted = append_taa_acceptance(
        request, text="Be nice", version="1.0", mechanism="for_session", time_of_acceptance=1700000123
    )
    assert "taaAcceptance" not in request
    assert accepted["taaAcceptance"] == {
        "taaDigest": taa_digest("Be nice", "1.0"),
        "mechanism": "for_session",
        "time": 1699920000,
    }
    assert taa_digest("Be nice", "1.0") != taa_digest("Be nice", "1.1")
    assert len(taa_digest("Be nice", "1.0")) == 64


def test_append_endorser_copies_request() -> None:
    request = build_nym_request(submitter_did=DID, target_did=DID)
    endorsed = append_endorser(request, "Th7MpTaRZVRYnPiabds81Y")
    assert endorsed["endorser"] == "Th7MpTaRZVRYnPiabds81Y"
    assert "endorser" not in request
