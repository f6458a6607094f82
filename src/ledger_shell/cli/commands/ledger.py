"""Ledger group: build, sign, send and store ledger transactions."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ledger_shell import requests as builders
from ledger_shell.cli.commands.support import (
    ENDORSER_PARAM,
    READ_PARAMS,
    WRITE_PARAMS,
    check_reply,
    created_reply,
    send_read,
    send_write,
    sent_reply,
    submit,
)
from ledger_shell.cli.errors import ExecutionError
from ledger_shell.cli.output import JsonBlock, Message, Table
from ledger_shell.cli.registry import CommandRegistry, CommandSpec, ParamSpec, Requirement, Shape
from ledger_shell.requests import canonical_json
from ledger_shell.transactions import normalize_transaction, parse_response, parse_transaction

GROUP = "ledger"
CONTEXT_KEYWORD = "context"

_WRITER = frozenset({Requirement.WALLET, Requirement.DID})
_ACTION = frozenset({Requirement.WALLET, Requirement.DID, Requirement.POOL})

_NODES_PARAM = ParamSpec("nodes", "The list of node names to send the request", shape=Shape.LIST)
_TIMEOUT_PARAM = ParamSpec("timeout", "Time to wait respond from nodes", shape=Shape.INT)
_TXN_PARAM = ParamSpec(
    "txn", "Transaction to use. Skip to use a transaction stored into the session"
)


def _write(ctx, sdk, params, request: dict, title: str) -> list:
    result = send_write(ctx, sdk, params, request)
    if result is None:
        return created_reply(ctx)
    return sent_reply(title, result)


def _read(ctx, sdk, params, request: dict, title: str, missing: str) -> list:
    result = send_read(ctx, sdk, params, request)
    if result is None:
        return created_reply(ctx)
    return sent_reply(title, result, missing=missing)


def _transaction_to_use(ctx, params) -> dict:
    text = params.get("txn") or ctx.ensure_transaction()
    try:
        return parse_transaction(text)
    except ValueError as exc:
        raise ExecutionError(f"Invalid formatted transaction provided: {exc}") from exc


def _node_replies(replies: dict[str, Any]) -> list:
    rows = []
    for node, reply in sorted(replies.items()):
        try:
            parsed = parse_response(reply)
        except ValueError as exc:
            rows.append({"node": node, "reply": f"invalid data: {exc}"})
            continue
        if parsed.op == "REPLY":
            rows.append({"node": node, "reply": canonical_json(parsed.result)})
        else:
            rows.append({"node": node, "reply": f"{parsed.op}: {parsed.reason}"})
    return [Table(columns=(("node", "Node"), ("reply", "Reply")), rows=rows, empty="No replies")]


def _sign_and_submit_action(ctx, sdk, params, request: dict, title: str) -> list:
    wallet = ctx.ensure_wallet()
    pool = ctx.ensure_pool()
    request = sdk.sign_request(wallet.handle, ctx.ensure_did(), request)
    nodes = params.get("nodes")
    timeout = params.get("timeout")
    if nodes is None and timeout is None:
        result = check_reply(sdk.submit_request(pool.handle, request))
        return [Message(title), JsonBlock(result)]
    replies = sdk.submit_action(pool.handle, request, nodes=nodes, timeout=timeout)
    return [Message(title), *_node_replies(replies)]


# identities and attributes


def _nym(ctx, sdk, params):
    role = params.get("role")
    request = builders.build_nym_request(
        submitter_did=ctx.did,
        target_did=params["did"],
        verkey=params.get("verkey"),
        role=role,
        clear_role=role == "",
        protocol_version=ctx.protocol_version,
    )
    return _write(ctx, sdk, params, request, "Nym request has been sent to Ledger.")


def _get_nym(ctx, sdk, params):
    request = builders.build_get_nym_request(
        submitter_did=ctx.did, target_did=params["did"], protocol_version=ctx.protocol_version
    )
    return _read(ctx, sdk, params, request, "Following NYM has been received.", "NYM not found")


def _attrib(ctx, sdk, params):
    request = builders.build_attrib_request(
        submitter_did=ctx.did,
        target_did=params["did"],
        hash=params.get("hash"),
        raw=params.get("raw"),
        enc=params.get("enc"),
        protocol_version=ctx.protocol_version,
    )
    return _write(ctx, sdk, params, request, "Attrib request has been sent to Ledger.")


def _get_attrib(ctx, sdk, params):
    request = builders.build_get_attrib_request(
        submitter_did=ctx.did,
        target_did=params["did"],
        raw=params.get("raw"),
        hash=params.get("hash"),
        enc=params.get("enc"),
        protocol_version=ctx.protocol_version,
    )
    return _read(
        ctx, sdk, params, request, "Following ATTRIB has been received.", "Attribute not found"
    )


# schemas and credential definitions


def _schema(ctx, sdk, params):
    request = builders.build_schema_request(
        submitter_did=ctx.did,
        name=params["name"],
        version=params["version"],
        attr_names=[name for name in params["attr_names"] if name],
        protocol_version=ctx.protocol_version,
    )
    return _write(ctx, sdk, params, request, "Schema request has been sent to Ledger.")


def _get_schema(ctx, sdk, params):
    request = builders.build_get_schema_request(
        submitter_did=ctx.did,
        dest=params["did"],
        name=params["name"],
        version=params["version"],
        protocol_version=ctx.protocol_version,
    )
    return _read(
        ctx, sdk, params, request, "Following Schema has been received.", "Schema not found"
    )


def _cred_def(ctx, sdk, params):
    request = builders.build_cred_def_request(
        submitter_did=ctx.did,
        schema_ref=params["schema_id"],
        signature_type=params["signature_type"],
        tag=params["tag"],
        primary=params["primary"],
        revocation=params.get("revocation"),
        protocol_version=ctx.protocol_version,
    )
    return _write(ctx, sdk, params, request, "Credential Definition request has been sent to Ledger.")


def _get_cred_def(ctx, sdk, params):
    request = builders.build_get_cred_def_request(
        submitter_did=ctx.did,
        schema_ref=params["schema_id"],
        signature_type=params["signature_type"],
        tag=params["tag"],
        origin=params["origin"],
        protocol_version=ctx.protocol_version,
    )
    return _read(
        ctx,
        sdk,
        params,
        request,
        "Following Credential Definition has been received.",
        "Credential Definition not found",
    )


# pool administration


def _node(ctx, sdk, params):
    request = builders.build_node_request(
        submitter_did=ctx.did,
        target=params["target"],
        alias=params["alias"],
        node_ip=params.get("node_ip"),
        node_port=params.get("node_port"),
        client_ip=params.get("client_ip"),
        client_port=params.get("client_port"),
        blskey=params.get("blskey"),
        blskey_pop=params.get("blskey_pop"),
        services=params.get("services"),
        protocol_version=ctx.protocol_version,
    )
    return _write(ctx, sdk, params, request, "Node request has been sent to Ledger.")


def _get_validator_info(ctx, sdk, params):
    request = builders.build_get_validator_info_request(
        submitter_did=ctx.did, protocol_version=ctx.protocol_version
    )
    return _sign_and_submit_action(ctx, sdk, params, request, "Validator info has been received.")


def _pool_config(ctx, sdk, params):
    request = builders.build_pool_config_request(
        submitter_did=ctx.did,
        writes=params["writes"],
        force=params["force"],
        protocol_version=ctx.protocol_version,
    )
    return _write(ctx, sdk, params, request, "Pool config request has been sent to Ledger.")


def _pool_restart(ctx, sdk, params):
    request = builders.build_pool_restart_request(
        submitter_did=ctx.did,
        action=params["action"],
        datetime_value=params.get("datetime"),
        protocol_version=ctx.protocol_version,
    )
    return _sign_and_submit_action(
        ctx, sdk, params, request, "Restart pool request has been sent to Ledger."
    )


def _pool_upgrade(ctx, sdk, params):
    request = builders.build_pool_upgrade_request(
        submitter_did=ctx.did,
        name=params["name"],
        version=params["version"],
        action=params["action"],
        sha256=params["sha256"],
        timeout=params.get("timeout"),
        schedule=params.get("schedule"),
        justification=params.get("justification"),
        reinstall=params["reinstall"],
        force=params["force"],
        package=params.get("package"),
        protocol_version=ctx.protocol_version,
    )
    return _write(ctx, sdk, params, request, "Pool Upgrade request has been sent to Ledger.")


def _ledgers_freeze(ctx, sdk, params):
    try:
        ledgers_ids = [int(value) for value in params["ledgers_ids"] if value]
    except ValueError as exc:
        raise ExecutionError("ledgers_ids must be a comma-separated list of integers") from exc
    request = builders.build_ledgers_freeze_request(
        submitter_did=ctx.did, ledgers_ids=ledgers_ids, protocol_version=ctx.protocol_version
    )
    return _write(ctx, sdk, params, request, "Ledgers freeze request has been sent to Ledger.")


def _get_frozen_ledgers(ctx, sdk, params):
    request = builders.build_get_frozen_ledgers_request(
        submitter_did=ctx.did, protocol_version=ctx.protocol_version
    )
    return _read(
        ctx,
        sdk,
        params,
        request,
        "Following frozen ledgers have been received.",
        "There are no frozen ledgers",
    )


# auth rules


def _auth_rule(ctx, sdk, params):
    request = builders.build_auth_rule_request(
        submitter_did=ctx.did,
        txn_type=params["txn_type"],
        action=params["action"],
        field=params["field"],
        old_value=params.get("old_value"),
        new_value=params.get("new_value"),
        constraint=params["constraint"],
        protocol_version=ctx.protocol_version,
    )
    return _write(ctx, sdk, params, request, "Auth Rule request has been sent to Ledger.")


def _auth_rules(ctx, sdk, params):
    request = builders.build_auth_rules_request(
        submitter_did=ctx.did, rules=params["rules"], protocol_version=ctx.protocol_version
    )
    return _write(ctx, sdk, params, request, "Auth Rules request has been sent to Ledger.")


def _get_auth_rule(ctx, sdk, params):
    request = builders.build_get_auth_rule_request(
        submitter_did=ctx.did,
        txn_type=params.get("txn_type"),
        action=params.get("action"),
        field=params.get("field"),
        old_value=params.get("old_value"),
        new_value=params.get("new_value"),
        protocol_version=ctx.protocol_version,
    )
    return _read(
        ctx, sdk, params, request, "Following Auth Rules have been received.", "Auth Rule not found"
    )


# transaction author agreements


def _text_or_file(params, text_name: str, *, as_json: bool = False) -> Any:
    text = params.get(text_name)
    file = params.get("file")
    if text is not None and file is not None:
        raise ExecutionError(f"Either \"{text_name}\" or \"file\" can be used, not both")
    if file is None:
        return text
    content = Path(file).expanduser().read_text(encoding="utf-8")
    if not as_json:
        return content
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise ExecutionError(f"File {file} does not contain valid JSON: {exc.msg}") from exc


def _txn_author_agreement(ctx, sdk, params):
    request = builders.build_txn_author_agreement_request(
        submitter_did=ctx.did,
        text=_text_or_file(params, "text"),
        version=params["version"],
        ratification_ts=params.get("ratification-timestamp"),
        retirement_ts=params.get("retirement-timestamp"),
        protocol_version=ctx.protocol_version,
    )
    return _write(
        ctx, sdk, params, request, "Transaction Author Agreement has been sent to Ledger."
    )


def _disable_all_txn_author_agreements(ctx, sdk, params):
    request = builders.build_disable_all_txn_author_agreements_request(
        submitter_did=ctx.did, protocol_version=ctx.protocol_version
    )
    return _write(
        ctx, sdk, params, request, "All Transaction Author Agreements have been disabled."
    )


def _txn_acceptance_mechanisms(ctx, sdk, params):
    aml = _text_or_file(params, "aml", as_json=True)
    if not isinstance(aml, dict):
        raise ExecutionError("Acceptance mechanisms must be a JSON object: pass aml= or file=")
    request = builders.build_acceptance_mechanisms_request(
        submitter_did=ctx.did,
        aml=aml,
        version=params["version"],
        aml_context=params.get("context"),
        protocol_version=ctx.protocol_version,
    )
    return _write(
        ctx, sdk, params, request, "Acceptance Mechanisms have been set on the Ledger."
    )


def _get_acceptance_mechanisms(ctx, sdk, params):
    request = builders.build_get_acceptance_mechanisms_request(
        submitter_did=ctx.did,
        timestamp=params.get("timestamp"),
        version=params.get("version"),
        protocol_version=ctx.protocol_version,
    )
    return _read(
        ctx,
        sdk,
        params,
        request,
        "Following Acceptance Mechanisms have been received.",
        "There are no acceptance mechanisms",
    )


# stored transactions


def _custom(ctx, sdk, params):
    pool = ctx.ensure_pool()
    text = params["txn"]
    if text == CONTEXT_KEYWORD:
        text = ctx.ensure_transaction()
    try:
        request = parse_transaction(text)
    except ValueError as exc:
        raise ExecutionError(f"Invalid formatted transaction provided: {exc}") from exc

    known = {"txn", "sign"}
    extra = {name: value for name, value in params.items() if name not in known}
    if extra:
        operation = dict(request["operation"])
        for name, raw in extra.items():
            try:
                operation[name] = json.loads(raw)
            except json.JSONDecodeError:
                operation[name] = raw
        request["operation"] = operation

    if params["sign"]:
        wallet = ctx.ensure_wallet()
        request = sdk.sign_request(wallet.handle, ctx.ensure_did(), request)
    response = sdk.submit_request(pool.handle, request)
    check_reply(response)
    return [Message("Response:"), JsonBlock(response)]


def _sign_multi(ctx, sdk, params):
    wallet = ctx.ensure_wallet()
    request = _transaction_to_use(ctx, params)
    signed = sdk.multi_sign_request(wallet.handle, ctx.ensure_did(), request)
    ctx.transaction = canonical_json(signed)
    return [Message("Transaction has been signed:"), ctx.transaction]


def _endorse(ctx, sdk, params):
    wallet = ctx.ensure_wallet()
    request = _transaction_to_use(ctx, params)
    signed = sdk.multi_sign_request(wallet.handle, ctx.ensure_did(), request)
    result = submit(ctx, sdk, signed)
    return sent_reply("Transaction has been sent to Ledger.", result)


def _save_transaction(ctx, sdk, params):
    transaction = normalize_transaction(ctx.ensure_transaction())
    path = Path(params["file"]).expanduser()
    path.write_text(transaction, encoding="utf-8")
    return Message(f"The transaction has been saved to \"{path}\".")


def _load_transaction(ctx, sdk, params):
    path = Path(params["file"]).expanduser()
    text = path.read_text(encoding="utf-8")
    try:
        ctx.transaction = normalize_transaction(text)
    except ValueError as exc:
        raise ExecutionError(f"File contains invalid transaction: {exc}") from exc
    return [Message("Transaction has been loaded:"), ctx.transaction]


def _spec(name: str, help: str, handler, params=(), *, requires=frozenset(), **kwargs) -> CommandSpec:
    return CommandSpec(GROUP, name, help, params=tuple(params), handler=handler, requires=requires, **kwargs)


def register(registry: CommandRegistry) -> None:
    registry.add_group(GROUP, "Ledger transactions commands")
    write = WRITE_PARAMS
    write_no_endorser = tuple(param for param in WRITE_PARAMS if param is not ENDORSER_PARAM)
    specs = [
        _spec(
            "nym",
            "Send NYM transaction to the Ledger",
            _nym,
            (
                ParamSpec("did", "DID of new identity", required=True),
                ParamSpec("verkey", "Verification key of new identity"),
                ParamSpec(
                    "role",
                    "Role of identity. One of: STEWARD, TRUSTEE, TRUST_ANCHOR, ENDORSER, "
                    "NETWORK_MONITOR or associated number, or empty to reset the role",
                ),
                *write,
            ),
            requires=_WRITER,
            examples=(
                "ledger nym did=VsKV7grR1BUE29mG2Fm2kX",
                "ledger nym did=VsKV7grR1BUE29mG2Fm2kX verkey=GjZWsBLgZCR18aL468JAT7w9CZRiBnpxUPPgyQxh4voa",
                "ledger nym did=VsKV7grR1BUE29mG2Fm2kX role=TRUSTEE",
                "ledger nym did=VsKV7grR1BUE29mG2Fm2kX role=",
                "ledger nym did=VsKV7grR1BUE29mG2Fm2kX send=false",
                "ledger nym did=VsKV7grR1BUE29mG2Fm2kX endorser=V4SGRU86Z58d6TV7PBUe6f",
            ),
        ),
        _spec(
            "get-nym",
            "Get NYM from Ledger",
            _get_nym,
            (ParamSpec("did", "DID of identity presented in Ledger", required=True), *READ_PARAMS),
            examples=("ledger get-nym did=VsKV7grR1BUE29mG2Fm2kX",),
        ),
        _spec(
            "attrib",
            "Send Attribute transaction to the Ledger for exists NYM",
            _attrib,
            (
                ParamSpec("did", "DID of identity presented in Ledger", required=True),
                ParamSpec("hash", "Hash of attribute data"),
                ParamSpec("raw", "JSON representation of attribute data", shape=Shape.JSON),
                ParamSpec("enc", "Encrypted attribute data"),
                *write,
            ),
            requires=_WRITER,
            examples=(
                'ledger attrib did=VsKV7grR1BUE29mG2Fm2kX raw={"endpoint":{"ha":"127.0.0.1:5555"}}',
                "ledger attrib did=VsKV7grR1BUE29mG2Fm2kX hash=83d907821df1c87db829e96569a11f6fc2e7880acba5e43d07ab786959e13bd3",
                "ledger attrib did=VsKV7grR1BUE29mG2Fm2kX enc=aa3f41f619aa7e5e6b6d0de555e05331787f9bf9aa672b94b57ab65b9b66c3ea960b18a98e3834b1fc6cebf49f463b81fd6e3181",
            ),
        ),
        _spec(
            "get-attrib",
            "Get ATTRIB from Ledger",
            _get_attrib,
            (
                ParamSpec("did", "DID of identity presented in Ledger", required=True),
                ParamSpec("raw", "Name of attribute"),
                ParamSpec("hash", "Hash of attribute data"),
                ParamSpec("enc", "Encrypted value of attribute data"),
                *READ_PARAMS,
            ),
            examples=("ledger get-attrib did=VsKV7grR1BUE29mG2Fm2kX raw=endpoint",),
        ),
        _spec(
            "schema",
            "Send Schema transaction to the Ledger",
            _schema,
            (
                ParamSpec("name", "Schema name", required=True),
                ParamSpec("version", "Schema version", required=True),
                ParamSpec(
                    "attr_names",
                    "Schema attributes split by comma (at most 125 attributes)",
                    required=True,
                    shape=Shape.LIST,
                ),
                *write,
            ),
            requires=_WRITER,
            examples=("ledger schema name=gvt version=1.0 attr_names=name,age",),
        ),
        _spec(
            "get-schema",
            "Get Schema from Ledger",
            _get_schema,
            (
                ParamSpec("did", "DID of identity presented in Ledger", required=True),
                ParamSpec("name", "Schema name", required=True),
                ParamSpec("version", "Schema version", required=True),
                *READ_PARAMS,
            ),
            examples=("ledger get-schema did=VsKV7grR1BUE29mG2Fm2kX name=gvt version=1.0",),
        ),
        _spec(
            "cred-def",
            "Send Cred Def transaction to the Ledger",
            _cred_def,
            (
                ParamSpec("schema_id", "Sequence number of schema", required=True, shape=Shape.INT),
                ParamSpec("signature_type", "Signature type (only CL supported now)", required=True),
                ParamSpec(
                    "tag",
                    "Allows to distinct between credential definitions for the same issuer and schema",
                    default="",
                ),
                ParamSpec("primary", "Primary key in json format", required=True, shape=Shape.JSON),
                ParamSpec("revocation", "Revocation key in json format", shape=Shape.JSON),
                *write,
            ),
            requires=_WRITER,
            examples=(
                'ledger cred-def schema_id=1 signature_type=CL tag=1 primary={"n":"1","s":"2","rms":"3","r":{"age":"4","name":"5"},"rctxt":"6","z":"7"}',
            ),
        ),
        _spec(
            "get-cred-def",
            "Get Cred Definition from Ledger",
            _get_cred_def,
            (
                ParamSpec("schema_id", "Sequence number of schema", required=True, shape=Shape.INT),
                ParamSpec("signature_type", "Signature type (only CL supported now)", required=True),
                ParamSpec(
                    "tag",
                    "Allows to distinct between credential definitions for the same issuer and schema",
                    default="",
                ),
                ParamSpec("origin", "Credential definition owner DID", required=True),
                *READ_PARAMS,
            ),
            examples=(
                "ledger get-cred-def schema_id=1 signature_type=CL tag=1 origin=VsKV7grR1BUE29mG2Fm2kX",
            ),
        ),
        _spec(
            "node",
            "Send Node transaction to the Ledger",
            _node,
            (
                ParamSpec("target", "Node identifier", required=True),
                ParamSpec("alias", "Node alias (can't be changed in case of update)", required=True),
                ParamSpec("node_ip", "Node Ip. Mandatory for adding node case"),
                ParamSpec("node_port", "Node port. Mandatory for adding node case", shape=Shape.INT),
                ParamSpec("client_ip", "Client Ip. Mandatory for adding node case"),
                ParamSpec(
                    "client_port", "Client port. Mandatory for adding node case", shape=Shape.INT
                ),
                ParamSpec("blskey", "Node BLS key"),
                ParamSpec(
                    "blskey_pop",
                    "Node BLS key proof of possession. Mandatory if blskey specified",
                ),
                ParamSpec(
                    "services",
                    "Node type. One of: VALIDATOR, OBSERVER or empty in case of blacklisting node",
                    shape=Shape.LIST,
                ),
                *write_no_endorser,
            ),
            requires=_WRITER,
            examples=(
                "ledger node target=A5iWQVT3k8Zo9nXj4otmeqaUziPQPCiDqcydXkAJBk1Y node_ip=127.0.0.1 "
                "node_port=9710 client_ip=127.0.0.1 client_port=9711 alias=Node5 services=VALIDATOR",
            ),
        ),
        _spec(
            "get-validator-info",
            "Get validator info from all nodes",
            _get_validator_info,
            (_NODES_PARAM, _TIMEOUT_PARAM),
            requires=_ACTION,
            examples=(
                "ledger get-validator-info",
                "ledger get-validator-info nodes=Node1,Node2",
                "ledger get-validator-info nodes=Node1,Node2 timeout=150",
            ),
        ),
        _spec(
            "pool-config",
            "Send write configuration to pool",
            _pool_config,
            (
                ParamSpec("writes", "Accept write transactions", required=True, shape=Shape.BOOL),
                ParamSpec(
                    "force",
                    "Forced configuration applying without reaching pool consensus",
                    default="false",
                    shape=Shape.BOOL,
                ),
                *write_no_endorser,
            ),
            requires=_WRITER,
            examples=("ledger pool-config writes=true", "ledger pool-config writes=false force=true"),
        ),
        _spec(
            "pool-restart",
            "Send instructions to nodes to restart themselves",
            _pool_restart,
            (
                ParamSpec("action", "Restart type. Either start or cancel", required=True),
                ParamSpec("datetime", "Node restart datetime (only for action=start)"),
                _NODES_PARAM,
                _TIMEOUT_PARAM,
            ),
            requires=_ACTION,
            examples=(
                "ledger pool-restart action=start datetime=2020-01-25T12:49:05.258870+00:00",
                "ledger pool-restart action=start datetime=2020-01-25T12:49:05.258870+00:00 nodes=Node1,Node2 timeout=100",
                "ledger pool-restart action=cancel",
            ),
        ),
        _spec(
            "pool-upgrade",
            "Send instructions to nodes to update themselves",
            _pool_upgrade,
            (
                ParamSpec("name", "Human-readable name for the upgrade", required=True),
                ParamSpec("version", "The version of the node package to upgrade to", required=True),
                ParamSpec("action", "Upgrade type. Either start or cancel", required=True),
                ParamSpec("sha256", "Sha256 hash of the package", required=True),
                ParamSpec("timeout", "Limits upgrade time on each Node", shape=Shape.INT),
                ParamSpec(
                    "schedule",
                    "Node upgrade schedule: JSON object of node identifiers to upgrade dates",
                    shape=Shape.JSON,
                ),
                ParamSpec("justification", "Justification string for this particular Upgrade"),
                ParamSpec(
                    "reinstall",
                    "Whether it's allowed to re-install the same version",
                    default="false",
                    shape=Shape.BOOL,
                ),
                ParamSpec(
                    "force",
                    "Whether we should apply transaction without waiting for consensus",
                    default="false",
                    shape=Shape.BOOL,
                ),
                ParamSpec("package", "Package to be upgraded"),
                *write_no_endorser,
            ),
            requires=_WRITER,
            examples=(
                "ledger pool-upgrade name=upgrade-1 version=2.0 action=start "
                "sha256=f284bdc3c1c9e24a494e285cb387c69510f28de51c15bb93179d9c7f28705398 "
                'schedule={"Gw6pDLhcBcoQesN72qfotTgFa7cbuqZpkX3Xo6pLhPhv":"2020-01-25T12:49:05.258870+00:00"}',
                "ledger pool-upgrade name=upgrade-1 version=2.0 action=cancel "
                "sha256=ac3eb2cc3ac9e24a494e285cb387c69510f28de51c15bb93179d9c7f28705398",
            ),
        ),
        _spec(
            "custom",
            "Send custom transaction to the Ledger",
            _custom,
            (
                ParamSpec(
                    "txn",
                    "Transaction json (use \"context\" to send the transaction stored into the session)",
                    main=True,
                    required=True,
                ),
                ParamSpec("sign", "Is signature required", default="false", shape=Shape.BOOL),
            ),
            details="Extra name=value parameters are merged into the transaction operation.",
            variadic=True,
            requires=frozenset({Requirement.POOL}),
            examples=(
                'ledger custom {"reqId":1,"identifier":"V4SGRU86Z58d6TV7PBUe6f","operation":{"type":"105","dest":"V4SGRU86Z58d6TV7PBUe6f"},"protocolVersion":2}',
                'ledger custom {"reqId":2,"identifier":"V4SGRU86Z58d6TV7PBUe6f","operation":{"type":"1","dest":"VsKV7grR1BUE29mG2Fm2kX"},"protocolVersion":2} sign=true',
                "ledger custom context",
            ),
        ),
        _spec(
            "auth-rule",
            "Send AUTH_RULE request to change authentication rules for a ledger transaction",
            _auth_rule,
            (
                ParamSpec("txn_type", "Ledger transaction alias or associated value", required=True),
                ParamSpec("action", "Type of an action. One of: ADD, EDIT", required=True),
                ParamSpec("field", "Transaction field", required=True),
                ParamSpec("old_value", "Old value of field (mandatory for EDIT action)"),
                ParamSpec("new_value", "New value that can be used to fill the field"),
                ParamSpec(
                    "constraint",
                    "Set of constraints required for execution of an action",
                    required=True,
                    shape=Shape.JSON,
                ),
                *write_no_endorser,
            ),
            requires=_WRITER,
            examples=(
                'ledger auth-rule txn_type=NYM action=ADD field=role new_value=101 constraint={"sig_count":1,"role":"0","constraint_id":"ROLE","need_to_be_owner":false}',
            ),
        ),
        _spec(
            "auth-rules",
            "Send AUTH_RULES request to change authentication rules for multiple ledger transactions",
            _auth_rules,
            (
                ParamSpec(
                    "rules",
                    "A list of auth rules: [{\"auth_type\", \"auth_action\", \"field\", "
                    "\"old_value\", \"new_value\", \"constraint\"},{...}]",
                    main=True,
                    required=True,
                    shape=Shape.JSON,
                ),
                *write_no_endorser,
            ),
            requires=_WRITER,
            examples=(
                'ledger auth-rules [{"auth_type":"1","auth_action":"ADD","field":"role","new_value":"101","constraint":{"sig_count":1,"role":"0","constraint_id":"ROLE","need_to_be_owner":false}}]',
            ),
        ),
        _spec(
            "get-auth-rule",
            "Send GET_AUTH_RULE request to get authentication rules for ledger transactions",
            _get_auth_rule,
            (
                ParamSpec("txn_type", "Ledger transaction alias or associated value"),
                ParamSpec("action", "Type of action for. One of: ADD, EDIT"),
                ParamSpec("field", "Transaction field"),
                ParamSpec("old_value", "Old value of field (mandatory for EDIT action)"),
                ParamSpec("new_value", "New value that can be used to fill the field"),
                *READ_PARAMS,
            ),
            details="Skip all parameters to get all authentication rules.",
            examples=(
                "ledger get-auth-rule txn_type=NYM action=ADD field=role new_value=101",
                "ledger get-auth-rule",
            ),
        ),
        _spec(
            "sign-multi",
            "Add multi signature by current DID to transaction",
            _sign_multi,
            (_TXN_PARAM,),
            requires=_WRITER,
            examples=(
                'ledger sign-multi txn={"reqId":123456789,"identifier":"V4SGRU86Z58d6TV7PBUe6f","operation":{"type":"100"}}',
                "ledger sign-multi",
            ),
        ),
        _spec(
            "endorse",
            "Endorse transaction to the ledger preserving an original author",
            _endorse,
            (_TXN_PARAM,),
            requires=_WRITER,
            examples=(
                'ledger endorse txn={"reqId":123456789,"identifier":"V4SGRU86Z58d6TV7PBUe6f","operation":{"type":"100"}}',
                "ledger endorse",
            ),
        ),
        _spec(
            "save-transaction",
            "Save transaction from the session into a file",
            _save_transaction,
            (ParamSpec("file", "The path to file", main=True, required=True),),
            examples=("ledger save-transaction file=/home/transaction.json",),
        ),
        _spec(
            "load-transaction",
            "Read transaction from a file and store it into the session",
            _load_transaction,
            (
                ParamSpec(
                    "file",
                    "The path to file containing a transaction to load",
                    main=True,
                    required=True,
                ),
            ),
            examples=("ledger load-transaction file=/home/transaction.json",),
        ),
        _spec(
            "txn-author-agreement",
            "Send Transaction Author Agreement to the ledger",
            _txn_author_agreement,
            (
                ParamSpec("text", "The content of a new agreement"),
                ParamSpec(
                    "file",
                    "The path to file containing a content of agreement (an alternative to text)",
                ),
                ParamSpec("version", "The version of a new agreement", required=True),
                ParamSpec(
                    "ratification-timestamp",
                    "The date (timestamp) of TAA ratification by network government",
                    shape=Shape.INT,
                ),
                ParamSpec(
                    "retirement-timestamp",
                    "The date (timestamp) of TAA retirement",
                    shape=Shape.INT,
                ),
                *write_no_endorser,
            ),
            requires=_WRITER,
            examples=(
                "ledger txn-author-agreement text=\"Indy transaction agreement\" version=1 ratification-timestamp=123456789",
                "ledger txn-author-agreement file=/home/agreement_content.txt version=1",
                "ledger txn-author-agreement version=1 retirement-timestamp=123456789",
            ),
        ),
        _spec(
            "disable-all-txn-author-agreements",
            "Disable All Transaction Author Agreements on the ledger",
            _disable_all_txn_author_agreements,
            write_no_endorser,
            requires=_WRITER,
            examples=("ledger disable-all-txn-author-agreements",),
        ),
        _spec(
            "txn-acceptance-mechanisms",
            "Send TAA Acceptance Mechanisms to the ledger",
            _txn_acceptance_mechanisms,
            (
                ParamSpec("aml", "The set of new acceptance mechanisms", shape=Shape.JSON),
                ParamSpec(
                    "file",
                    "The path to file containing a set of acceptance mechanisms (an alternative to aml)",
                ),
                ParamSpec(
                    "version",
                    "The version of a new set of acceptance mechanisms",
                    required=True,
                ),
                ParamSpec(
                    "context",
                    "Common context information about acceptance mechanisms (may be a URL)",
                ),
                *write_no_endorser,
            ),
            requires=_WRITER,
            examples=(
                'ledger txn-acceptance-mechanisms aml={"Click Agreement":"some description"} version=1',
                "ledger txn-acceptance-mechanisms file=/home/mechanisms.json version=1 context=some-context",
            ),
        ),
        _spec(
            "get-acceptance-mechanisms",
            "Get a list of acceptance mechanisms set on the ledger",
            _get_acceptance_mechanisms,
            (
                ParamSpec(
                    "timestamp",
                    "The time (as timestamp) to get active acceptance mechanisms",
                    shape=Shape.INT,
                ),
                ParamSpec("version", "The version of acceptance mechanisms"),
                *READ_PARAMS,
            ),
            examples=(
                "ledger get-acceptance-mechanisms",
                "ledger get-acceptance-mechanisms timestamp=1576674598",
                "ledger get-acceptance-mechanisms version=1.0",
            ),
        ),
        _spec(
            "ledgers-freeze",
            "Freeze ledgers",
            _ledgers_freeze,
            (
                ParamSpec(
                    "ledgers_ids",
                    "List of ledgers IDs for freezing",
                    required=True,
                    shape=Shape.LIST,
                ),
                *write_no_endorser,
            ),
            requires=_WRITER,
            examples=("ledger ledgers-freeze ledgers_ids=1,2,3",),
        ),
        _spec(
            "get-frozen-ledgers",
            "Get a list of frozen ledgers",
            _get_frozen_ledgers,
            READ_PARAMS,
            examples=("ledger get-frozen-ledgers",),
        ),
    ]
    for spec in specs:
        registry.register(spec)
