"""Ledger request builders.

Builders only shape the request document; they do not sign or submit it.
"""

from __future__ import annotations

import hashlib
import json
import time
from datetime import datetime, timezone

DEFAULT_PROTOCOL_VERSION = 2
MAX_SCHEMA_ATTRIBUTES = 125

NODE = "0"
NYM = "1"
TXN_AUTHOR_AGREEMENT = "4"
TXN_AUTHOR_AGREEMENT_AML = "5"
GET_TXN_AUTHOR_AGREEMENT = "6"
GET_TXN_AUTHOR_AGREEMENT_AML = "7"
DISABLE_ALL_TXN_AUTHR_AGRTS = "8"
LEDGERS_FREEZE = "9"
GET_FROZEN_LEDGERS = "10"
ATTRIB = "100"
SCHEMA = "101"
CRED_DEF = "102"
GET_ATTR = "104"
GET_NYM = "105"
GET_SCHEMA = "107"
GET_CRED_DEF = "108"
POOL_UPGRADE = "109"
POOL_CONFIG = "111"
REVOC_REG_DEF = "113"
REVOC_REG_ENTRY = "114"
POOL_RESTART = "118"
GET_VALIDATOR_INFO = "119"
AUTH_RULE = "120"
GET_AUTH_RULE = "121"
AUTH_RULES = "122"

TXN_TYPE_ALIASES = {
    "NODE": NODE,
    "NYM": NYM,
    "TXN_AUTHOR_AGREEMENT": TXN_AUTHOR_AGREEMENT,
    "TXN_AUTHOR_AGREEMENT_AML": TXN_AUTHOR_AGREEMENT_AML,
    "DISABLE_ALL_TXN_AUTHR_AGRTS": DISABLE_ALL_TXN_AUTHR_AGRTS,
    "LEDGERS_FREEZE": LEDGERS_FREEZE,
    "ATTRIB": ATTRIB,
    "SCHEMA": SCHEMA,
    "CRED_DEF": CRED_DEF,
    "POOL_UPGRADE": POOL_UPGRADE,
    "POOL_CONFIG": POOL_CONFIG,
    "REVOC_REG_DEF": REVOC_REG_DEF,
    "REVOC_REG_ENTRY": REVOC_REG_ENTRY,
    "POOL_RESTART": POOL_RESTART,
    "VALIDATOR_INFO": GET_VALIDATOR_INFO,
    "AUTH_RULE": AUTH_RULE,
    "AUTH_RULES": AUTH_RULES,
}

ROLES = {
    "TRUSTEE": "0",
    "STEWARD": "2",
    "TRUST_ANCHOR": "101",
    "ENDORSER": "101",
    "NETWORK_MONITOR": "201",
}

_ROLE_TITLES = {
    "0": "TRUSTEE",
    "2": "STEWARD",
    "101": "ENDORSER",
    "201": "NETWORK_MONITOR",
}

AUTH_ACTIONS = ("ADD", "EDIT")
SIGNATURE_FIELDS = ("signature", "signatures")


def canonical_json(payload: object) -> str:
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def build_request_to_sign(request: dict) -> bytes:
    """Build canonical bytes for request signing (signature fields excluded)."""
    unsigned = {key: value for key, value in request.items() if key not in SIGNATURE_FIELDS}
    return canonical_json(unsigned).encode("utf-8")


def _req_id() -> int:
    return time.time_ns() // 1000


def _request(
    submitter_did: str | None,
    operation: dict,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    request: dict = {
        "reqId": _req_id(),
        "operation": operation,
        "protocolVersion": protocol_version,
    }
    if submitter_did is not None:
        request["identifier"] = submitter_did
    return request


def _drop_none(data: dict) -> dict:
    return {key: value for key, value in data.items() if value is not None}


def normalize_role(role: str | None) -> str | None:
    """Map a role title to its ledger code; empty string clears the role."""
    if role is None or role == "":
        return None
    upper = role.strip().upper()
    if upper in ROLES:
        return ROLES[upper]
    if role.strip() in _ROLE_TITLES:
        return role.strip()
    raise ValueError(
        "role must be one of: STEWARD, TRUSTEE, TRUST_ANCHOR, ENDORSER, NETWORK_MONITOR "
        "or associated number"
    )


def role_title(role: object) -> object:
    if role is None:
        return "-"
    return _ROLE_TITLES.get(str(role), role)


def normalize_txn_type(txn_type: str) -> str:
    value = txn_type.strip()
    if value.upper() in TXN_TYPE_ALIASES:
        return TXN_TYPE_ALIASES[value.upper()]
    if value.isdigit():
        return value
    raise ValueError(f"unsupported ledger transaction alias: {txn_type}")


def build_nym_request(
    *,
    submitter_did: str | None,
    target_did: str,
    verkey: str | None = None,
    alias: str | None = None,
    role: str | None = None,
    clear_role: bool = False,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    operation: dict = _drop_none(
        {
            "type": NYM,
            "dest": target_did,
            "verkey": verkey,
            "alias": alias,
            "role": normalize_role(role),
        }
    )
    if clear_role:
        operation["role"] = None
    return _request(submitter_did, operation, protocol_version)


def build_get_nym_request(
    *,
    submitter_did: str | None,
    target_did: str,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    return _request(submitter_did, {"type": GET_NYM, "dest": target_did}, protocol_version)


def build_attrib_request(
    *,
    submitter_did: str | None,
    target_did: str,
    hash: str | None = None,
    raw: object | None = None,
    enc: str | None = None,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    provided = [value for value in (hash, raw, enc) if value is not None]
    if len(provided) != 1:
        raise ValueError("exactly one of hash, raw, enc must be provided")
    operation = _drop_none(
        {
            "type": ATTRIB,
            "dest": target_did,
            "hash": hash,
            "raw": canonical_json(raw) if raw is not None else None,
            "enc": enc,
        }
    )
    return _request(submitter_did, operation, protocol_version)


def build_get_attrib_request(
    *,
    submitter_did: str | None,
    target_did: str,
    raw: str | None = None,
    hash: str | None = None,
    enc: str | None = None,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    provided = [value for value in (raw, hash, enc) if value is not None]
    if len(provided) != 1:
        raise ValueError("exactly one of raw, hash, enc must be provided")
    operation = _drop_none(
        {"type": GET_ATTR, "dest": target_did, "raw": raw, "hash": hash, "enc": enc}
    )
    return _request(submitter_did, operation, protocol_version)


def schema_id(did: str, name: str, version: str) -> str:
    return f"{did}:2:{name}:{version}"


def build_schema_request(
    *,
    submitter_did: str | None,
    name: str,
    version: str,
    attr_names: list[str],
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    if not attr_names:
        raise ValueError("schema must contain at least one attribute")
    if len(attr_names) > MAX_SCHEMA_ATTRIBUTES:
        raise ValueError(f"schema can contain at most {MAX_SCHEMA_ATTRIBUTES} attributes")
    operation = {
        "type": SCHEMA,
        "data": {"name": name, "version": version, "attr_names": list(attr_names)},
    }
    return _request(submitter_did, operation, protocol_version)


def build_get_schema_request(
    *,
    submitter_did: str | None,
    dest: str,
    name: str,
    version: str,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    operation = {"type": GET_SCHEMA, "dest": dest, "data": {"name": name, "version": version}}
    return _request(submitter_did, operation, protocol_version)


def build_cred_def_request(
    *,
    submitter_did: str | None,
    schema_ref: int,
    signature_type: str,
    tag: str,
    primary: dict,
    revocation: dict | None = None,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    operation = {
        "type": CRED_DEF,
        "ref": schema_ref,
        "signature_type": signature_type,
        "tag": tag,
        "data": _drop_none({"primary": primary, "revocation": revocation}),
    }
    return _request(submitter_did, operation, protocol_version)


def build_get_cred_def_request(
    *,
    submitter_did: str | None,
    schema_ref: int,
    signature_type: str,
    tag: str,
    origin: str,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    operation = {
        "type": GET_CRED_DEF,
        "ref": schema_ref,
        "signature_type": signature_type,
        "origin": origin,
        "tag": tag,
    }
    return _request(submitter_did, operation, protocol_version)


def build_node_request(
    *,
    submitter_did: str | None,
    target: str,
    alias: str,
    node_ip: str | None = None,
    node_port: int | None = None,
    client_ip: str | None = None,
    client_port: int | None = None,
    blskey: str | None = None,
    blskey_pop: str | None = None,
    services: list[str] | None = None,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    if blskey is not None and blskey_pop is None:
        raise ValueError("blskey_pop is mandatory when blskey is specified")
    data = _drop_none(
        {
            "alias": alias,
            "node_ip": node_ip,
            "node_port": node_port,
            "client_ip": client_ip,
            "client_port": client_port,
            "blskey": blskey,
            "blskey_pop": blskey_pop,
            "services": services,
        }
    )
    return _request(submitter_did, {"type": NODE, "dest": target, "data": data}, protocol_version)


def build_get_validator_info_request(
    *,
    submitter_did: str | None,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    return _request(submitter_did, {"type": GET_VALIDATOR_INFO}, protocol_version)


def build_pool_config_request(
    *,
    submitter_did: str | None,
    writes: bool,
    force: bool = False,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    operation = {"type": POOL_CONFIG, "writes": writes, "force": force}
    return _request(submitter_did, operation, protocol_version)


def build_pool_restart_request(
    *,
    submitter_did: str | None,
    action: str,
    datetime_value: str | None = None,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    if action not in ("start", "cancel"):
        raise ValueError("action must be either start or cancel")
    operation = _drop_none({"type": POOL_RESTART, "action": action, "datetime": datetime_value})
    return _request(submitter_did, operation, protocol_version)


def build_pool_upgrade_request(
    *,
    submitter_did: str | None,
    name: str,
    version: str,
    action: str,
    sha256: str,
    timeout: int | None = None,
    schedule: dict | None = None,
    justification: str | None = None,
    reinstall: bool = False,
    force: bool = False,
    package: str | None = None,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    if action not in ("start", "cancel"):
        raise ValueError("action must be either start or cancel")
    if action == "start" and schedule is None:
        raise ValueError("schedule is mandatory for action=start")
    operation = _drop_none(
        {
            "type": POOL_UPGRADE,
            "name": name,
            "version": version,
            "action": action,
            "sha256": sha256,
            "timeout": timeout,
            "schedule": schedule,
            "justification": justification,
            "reinstall": reinstall,
            "force": force,
            "package": package,
        }
    )
    return _request(submitter_did, operation, protocol_version)


def build_auth_rule_request(
    *,
    submitter_did: str | None,
    txn_type: str,
    action: str,
    field: str,
    old_value: str | None,
    new_value: str | None,
    constraint: dict,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    action = action.upper()
    if action not in AUTH_ACTIONS:
        raise ValueError("action must be one of: ADD, EDIT")
    if action == "EDIT" and old_value is None:
        raise ValueError("old_value is mandatory for EDIT action")
    operation = _drop_none(
        {
            "type": AUTH_RULE,
            "auth_type": normalize_txn_type(txn_type),
            "auth_action": action,
            "field": field,
            "old_value": old_value if action == "EDIT" else None,
            "new_value": new_value,
            "constraint": constraint,
        }
    )
    return _request(submitter_did, operation, protocol_version)


def build_auth_rules_request(
    *,
    submitter_did: str | None,
    rules: list,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    if not isinstance(rules, list) or not rules:
        raise ValueError("rules must be a non-empty JSON array")
    return _request(submitter_did, {"type": AUTH_RULES, "rules": rules}, protocol_version)


def build_get_auth_rule_request(
    *,
    submitter_did: str | None,
    txn_type: str | None = None,
    action: str | None = None,
    field: str | None = None,
    old_value: str | None = None,
    new_value: str | None = None,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    operation = _drop_none(
        {
            "type": GET_AUTH_RULE,
            "auth_type": normalize_txn_type(txn_type) if txn_type else None,
            "auth_action": action.upper() if action else None,
            "field": field,
            "old_value": old_value,
            "new_value": new_value,
        }
    )
    return _request(submitter_did, operation, protocol_version)


def build_txn_author_agreement_request(
    *,
    submitter_did: str | None,
    text: str | None,
    version: str,
    ratification_ts: int | None = None,
    retirement_ts: int | None = None,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    operation = _drop_none(
        {
            "type": TXN_AUTHOR_AGREEMENT,
            "text": text,
            "version": version,
            "ratification_ts": ratification_ts,
            "retirement_ts": retirement_ts,
        }
    )
    return _request(submitter_did, operation, protocol_version)


def build_disable_all_txn_author_agreements_request(
    *,
    submitter_did: str | None,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    return _request(submitter_did, {"type": DISABLE_ALL_TXN_AUTHR_AGRTS}, protocol_version)


def build_acceptance_mechanisms_request(
    *,
    submitter_did: str | None,
    aml: dict,
    version: str,
    aml_context: str | None = None,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    operation = _drop_none(
        {
            "type": TXN_AUTHOR_AGREEMENT_AML,
            "aml": aml,
            "version": version,
            "amlContext": aml_context,
        }
    )
    return _request(submitter_did, operation, protocol_version)


def build_get_acceptance_mechanisms_request(
    *,
    submitter_did: str | None,
    timestamp: int | None = None,
    version: str | None = None,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    if timestamp is not None and version is not None:
        raise ValueError("timestamp and version cannot be specified together")
    operation = _drop_none(
        {"type": GET_TXN_AUTHOR_AGREEMENT_AML, "timestamp": timestamp, "version": version}
    )
    return _request(submitter_did, operation, protocol_version)


def build_get_txn_author_agreement_request(
    *,
    submitter_did: str | None,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    return _request(submitter_did, {"type": GET_TXN_AUTHOR_AGREEMENT}, protocol_version)


def build_ledgers_freeze_request(
    *,
    submitter_did: str | None,
    ledgers_ids: list[int],
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    operation = {"type": LEDGERS_FREEZE, "ledgers_ids": list(ledgers_ids)}
    return _request(submitter_did, operation, protocol_version)


def build_get_frozen_ledgers_request(
    *,
    submitter_did: str | None,
    protocol_version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict:
    return _request(submitter_did, {"type": GET_FROZEN_LEDGERS}, protocol_version)


def taa_digest(text: str, version: str) -> str:
    return hashlib.sha256(f"{version}{text}".encode("utf-8")).hexdigest()


def append_taa_acceptance(
    request: dict,
    *,
    text: str,
    version: str,
    mechanism: str,
    time_of_acceptance: int,
) -> dict:
    """Attach an accepted agreement; acceptance time is rounded down to the day."""
    day = datetime.fromtimestamp(time_of_acceptance, tz=timezone.utc).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    updated = dict(request)
    updated["taaAcceptance"] = {
        "taaDigest": taa_digest(text, version),
        "mechanism": mechanism,
        "time": int(day.timestamp()),
    }
    return updated


def append_endorser(request: dict, endorser_did: str) -> dict:
    updated = dict(request)
    updated["endorser"] = endorser_did
    return updated
