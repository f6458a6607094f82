from __future__ import annotations

import json

from conftest import reply
from ledger_shell.cli.errors import (
    ExecutionError,
    NoOpenWallet,
    NoPoolConnection,
    NoStoredTransaction,
    UnknownParameter,
)
from ledger_shell.requests import canonical_json

TARGET = "Th7MpTaRZVRYnPiabds81Y"


def test_nym_is_signed_and_sent(ready_shell) -> None:
    ready_shell.sdk.responses.append(
        reply(
            {
                "txn": {"data": {"dest": TARGET}, "metadata": {"from": ready_shell.context.did, "reqId": 5}},
                "txnMetadata": {"seqNo": 12, "txnTime": 1700000000},
            }
        )
    )
    result = ready_shell.run(f"ledger nym did={TARGET} role=TRUSTEE")
    assert result.ok
    request = ready_shell.sdk.submitted[-1]
    assert request["operation"] == {"type": "1", "dest": TARGET, "role": "0"}
    assert request["identifier"] == ready_shell.context.did
    assert request["signature"] == f"sig-{ready_shell.context.did}"
    out = ready_shell.out()
    assert "Nym request has been sent to Ledger." in out
    assert "1700000000" in out


def test_nym_empty_role_clears_role(ready_shell) -> None:
    ready_shell.run(f"ledger nym did={TARGET} role=")
    assert ready_shell.sdk.submitted[-1]["operation"]["role"] is None


def test_send_false_stores_transaction_without_submitting(ready_shell) -> None:
    before = len(ready_shell.sdk.submitted)
    ready_shell.run(f"ledger nym did={TARGET} send=false")
    assert len(ready_shell.sdk.submitted) == before
    stored = json.loads(ready_shell.context.transaction)
    assert stored["operation"]["dest"] == TARGET
    assert "Transaction has been created:" in ready_shell.out()


def test_endorser_implies_send_false(ready_shell) -> None:
    before = len(ready_shell.sdk.submitted)
    ready_shell.run(f"ledger nym did={TARGET} endorser=V4SGRU86Z58d6TV7PBUe6f")
    assert len(ready_shell.sdk.submitted) == before
    assert json.loads(ready_shell.context.transaction)["endorser"] == "V4SGRU86Z58d6TV7PBUe6f"


def test_write_without_wallet_fails_before_building(shell) -> None:
    result = shell.run("ledger schema name=gvt version=1.0 attr_names=name,age")
    assert isinstance(result.error, NoOpenWallet)


def test_read_without_pool_fails(shell) -> None:
    result = shell.run(f"ledger get-nym did={TARGET}")
    assert isinstance(result.error, NoPoolConnection)


def test_read_with_send_false_needs_no_pool(shell) -> None:
    result = shell.run(f"ledger get-nym did={TARGET} send=false")
    assert result.ok
    assert json.loads(shell.context.transaction)["operation"] == {"type": "105", "dest": TARGET}


def test_get_nym_missing_data_prints_notice(ready_shell) -> None:
    ready_shell.sdk.responses.append(reply({"seqNo": None, "data": None}))
    ready_shell.run(f"ledger get-nym did={TARGET}")
    assert "NYM not found" in ready_shell.out()


def test_attrib_requires_exactly_one_value(ready_shell) -> None:
    result = ready_shell.run(f"ledger attrib did={TARGET}")
    assert isinstance(result.error, ExecutionError)
    ready_shell.run(f'ledger attrib did={TARGET} raw={{"endpoint":{{"ha":"127.0.0.1:5555"}}}}')
    raw = ready_shell.sdk.submitted[-1]["operation"]["raw"]
    assert json.loads(raw) == {"endpoint": {"ha": "127.0.0.1:5555"}}


def test_schema_and_cred_def_requests(ready_shell) -> None:
    ready_shell.run("ledger schema name=gvt version=1.0 attr_names=name,age")
    schema = ready_shell.sdk.submitted[-1]["operation"]
    assert schema["data"] == {"name": "gvt", "version": "1.0", "attr_names": ["name", "age"]}

    ready_shell.run('ledger cred-def schema_id=1 signature_type=CL tag=1 primary={"n":"1"}')
    cred_def = ready_shell.sdk.submitted[-1]["operation"]
    assert cred_def["type"] == "102"
    assert cred_def["ref"] == 1
    assert cred_def["data"]["primary"] == {"n": "1"}


def test_get_validator_info_per_node(ready_shell) -> None:
    ready_shell.sdk.action_replies = {
        "Node1": json.dumps({"op": "REPLY", "result": {"data": {"alias": "Node1"}}}),
        "Node2": "timeout",
    }
    result = ready_shell.run("ledger get-validator-info nodes=Node1,Node2 timeout=10")
    assert result.ok
    request, nodes, timeout = ready_shell.sdk.actions[-1]
    assert nodes == ["Node1", "Node2"]
    assert timeout == 10
    assert request["signature"]
    out = ready_shell.out()
    assert "Node1" in out and "Node2" in out
    assert "invalid data" in out


def test_pool_restart_requires_pool(shell) -> None:
    shell.sdk.create_wallet("w1", "k1")
    shell.run("wallet open w1 key=k1", "did new seed=000000000000000000000000Trustee1")
    shell.run("did use V4SGRU86Z58d6TV7PBUe6f")
    result = shell.run("ledger pool-restart action=start datetime=2030-01-01T00:00:00+00:00")
    assert isinstance(result.error, NoPoolConnection)


def test_pool_upgrade_start_needs_schedule(ready_shell) -> None:
    result = ready_shell.run(
        "ledger pool-upgrade name=up version=2.0 action=start sha256=abc"
    )
    assert isinstance(result.error, ExecutionError)
    assert "schedule" in ready_shell.err()


def test_auth_rule_builds_constraint(ready_shell) -> None:
    ready_shell.run(
        'ledger auth-rule txn_type=NYM action=ADD field=role new_value=101 '
        'constraint={"sig_count":1,"role":"0","constraint_id":"ROLE","need_to_be_owner":false}'
    )
    operation = ready_shell.sdk.submitted[-1]["operation"]
    assert operation["auth_type"] == "1"
    assert operation["auth_action"] == "ADD"
    assert operation["constraint"]["role"] == "0"


def test_get_auth_rule_accepts_no_filters(ready_shell) -> None:
    assert ready_shell.run("ledger get-auth-rule").ok
    assert ready_shell.sdk.submitted[-1]["operation"] == {"type": "121"}


def test_custom_sends_raw_transaction_and_merges_extra_values(ready_shell) -> None:
    txn = '{"reqId":1,"identifier":"V4SGRU86Z58d6TV7PBUe6f","operation":{"type":"105","dest":"V4"},"protocolVersion":2}'
    ready_shell.run(f"ledger custom {txn} dest={TARGET} extra=[1,2]")
    request = ready_shell.sdk.submitted[-1]
    assert request["operation"] == {"type": "105", "dest": TARGET, "extra": [1, 2]}
    assert "signature" not in request
    assert "Response:" in ready_shell.out()


def test_custom_context_uses_stored_transaction(ready_shell) -> None:
    ready_shell.run("ledger custom context")
    assert "There is no transaction stored into context" in ready_shell.err()

    ready_shell.run(f"ledger nym did={TARGET} send=false", "ledger custom context sign=true")
    request = ready_shell.sdk.submitted[-1]
    assert request["operation"]["dest"] == TARGET
    assert request["signature"]


def test_unknown_parameter_rejected_for_non_variadic_command(ready_shell) -> None:
    result = ready_shell.run(f"ledger get-nym did={TARGET} colour=blue")
    assert isinstance(result.error, UnknownParameter)


def test_sign_multi_and_endorse_use_context_transaction(ready_shell) -> None:
    result = ready_shell.run("ledger sign-multi")
    assert isinstance(result.error, NoStoredTransaction)

    ready_shell.run(f"ledger nym did={TARGET} endorser={ready_shell.context.did}")
    ready_shell.run("ledger sign-multi")
    signed = json.loads(ready_shell.context.transaction)
    assert ready_shell.context.did in signed["signatures"]

    ready_shell.sdk.responses.append(reply({"seqNo": 3}))
    assert ready_shell.run("ledger endorse").ok
    assert ready_shell.sdk.submitted[-1]["endorser"] == ready_shell.context.did


def test_save_then_load_transaction_round_trip(ready_shell, tmp_path) -> None:
    path = tmp_path / "txn.json"
    assert isinstance(ready_shell.run(f"ledger save-transaction file={path}").error, NoStoredTransaction)

    ready_shell.run(f"ledger nym did={TARGET} send=false")
    original = ready_shell.context.transaction
    ready_shell.run(f"ledger save-transaction file={path}")
    assert path.read_text(encoding="utf-8") == canonical_json(json.loads(original))

    ready_shell.context.transaction = None
    ready_shell.run(f"ledger load-transaction file={path}")
    assert json.loads(ready_shell.context.transaction) == json.loads(original)


def test_load_transaction_rejects_invalid_file(ready_shell, tmp_path) -> None:
    path = tmp_path / "bad.json"
    path.write_text('{"operation": {}}', encoding="utf-8")
    result = ready_shell.run(f"ledger load-transaction {path}")
    assert isinstance(result.error, ExecutionError)
    assert ready_shell.context.transaction is None

    missing = tmp_path / "missing.json"
    ready_shell.run(f"ledger load-transaction {missing}")
    assert "io error" in ready_shell.err()


def test_txn_author_agreement_from_file(ready_shell, tmp_path) -> None:
    path = tmp_path / "taa.txt"
    path.write_text("Agreement text", encoding="utf-8")
    ready_shell.run(f"ledger txn-author-agreement file={path} version=1 ratification-timestamp=100")
    operation = ready_shell.sdk.submitted[-1]["operation"]
    assert operation["text"] == "Agreement text"
    assert operation["ratification_ts"] == 100

    result = ready_shell.run(f"ledger txn-author-agreement text=x file={path} version=2")
    assert isinstance(result.error, ExecutionError)


def test_acceptance_mechanisms_and_freeze(ready_shell) -> None:
    ready_shell.run('ledger txn-acceptance-mechanisms aml={"Click":"desc"} version=1 context=ctx')
    operation = ready_shell.sdk.submitted[-1]["operation"]
    assert operation["aml"] == {"Click": "desc"}
    assert operation["amlContext"] == "ctx"

    ready_shell.run("ledger ledgers-freeze ledgers_ids=1,2")
    assert ready_shell.sdk.submitted[-1]["operation"]["ledgers_ids"] == [1, 2]
    assert ready_shell.run("ledger ledgers-freeze ledgers_ids=a").ok is False


def test_stored_transaction_is_printed_on_one_line(ready_shell) -> None:
    attrs = ",".join(f"attribute_{n}" for n in range(30))
    ready_shell.run(f"ledger schema name=gvt version=1.0 attr_names={attrs} send=false")
    lines = ready_shell.out().splitlines()
    printed = lines[lines.index("Transaction has been created:") + 1]
    assert len(printed) > 200
    assert json.loads(printed) == json.loads(ready_shell.context.transaction)
