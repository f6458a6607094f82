"""Request post-processing and submission shared by pool and ledger commands."""

from __future__ import annotations

import logging
import time
from typing import Any

from ledger_shell.cli.context import AuthorAgreement
from ledger_shell.cli.output import JsonBlock, Message, Notice, Table
from ledger_shell.cli.registry import ParamSpec, Shape
from ledger_shell.errors import TransactionRejectedError
from ledger_shell.requests import (
    append_endorser,
    append_taa_acceptance,
    build_get_txn_author_agreement_request,
    canonical_json,
)
from ledger_shell.transactions import REPLY, parse_response

SIGN_PARAM = ParamSpec("sign", "Sign the request", default="true", shape=Shape.BOOL)
SEND_PARAM = ParamSpec(
    "send",
    "Send the request to the Ledger; false stores the built request in the session",
    default="true",
    shape=Shape.BOOL,
)
ENDORSER_PARAM = ParamSpec(
    "endorser",
    "DID of the Endorser that will submit the transaction; implies send=false",
)

WRITE_PARAMS = (SIGN_PARAM, SEND_PARAM, ENDORSER_PARAM)
READ_PARAMS = (SEND_PARAM,)

logger = logging.getLogger(__name__)


def check_reply(response: Any) -> dict:
    """Return the `result` of a REPLY; REQNACK and REJECT raise."""
    parsed = parse_response(response)
    if parsed.op != REPLY:
        raise TransactionRejectedError(parsed.reason or "no reason given", op=parsed.op)
    if parsed.result is None:
        raise ValueError("Invalid data has been received")
    return parsed.result


def submit(ctx, sdk, request: dict) -> dict:
    pool = ctx.ensure_pool()
    logger.debug("submitting request %s to pool %s", request.get("reqId"), pool.name)
    return check_reply(sdk.submit_request(pool.handle, request))


def fetch_author_agreement(ctx, sdk) -> AuthorAgreement | None:
    request = build_get_txn_author_agreement_request(
        submitter_did=None, protocol_version=ctx.protocol_version
    )
    result = submit(ctx, sdk, request)
    data = result.get("data") or {}
    text = data.get("text")
    version = data.get("version")
    if not text or not isinstance(version, str):
        return None
    return AuthorAgreement(text=text, version=version, digest=data.get("digest"))


def accept_author_agreement(ctx, agreement: AuthorAgreement) -> AuthorAgreement:
    accepted = AuthorAgreement(
        text=agreement.text,
        version=agreement.version,
        digest=agreement.digest,
        accepted_at=int(time.time()),
    )
    ctx.agreement = accepted
    return accepted


def with_author_agreement(ctx, request: dict) -> dict:
    agreement = ctx.agreement
    if agreement is None or not agreement.accepted:
        return request
    return append_taa_acceptance(
        request,
        text=agreement.text,
        version=agreement.version,
        mechanism=ctx.taa_mechanism,
        time_of_acceptance=agreement.accepted_at,
    )


def send_write(ctx, sdk, params: dict, request: dict) -> dict | None:
    """Sign and send a write request; `None` means it was stored instead of sent."""
    wallet = ctx.ensure_wallet()
    did = ctx.ensure_did()
    send = params.get("send", True)
    request = with_author_agreement(ctx, request)
    endorser = params.get("endorser")
    if endorser:
        send = False
        request = append_endorser(request, endorser)
    if params.get("sign", True):
        request = sdk.sign_request(wallet.handle, did, request)
    if not send:
        ctx.transaction = canonical_json(request)
        return None
    return submit(ctx, sdk, request)


def send_read(ctx, sdk, params: dict, request: dict) -> dict | None:
    if not params.get("send", True):
        ctx.transaction = canonical_json(request)
        return None
    return submit(ctx, sdk, request)


def created_reply(ctx) -> list:
    return [Message("Transaction has been created:"), ctx.transaction]


def reply_metadata(result: dict) -> tuple[dict, Any]:
    """Split a REPLY result into (metadata row, data) for both ledger reply layouts."""
    txn = result.get("txn") if isinstance(result.get("txn"), dict) else {}
    txn_meta = result.get("txnMetadata") if isinstance(result.get("txnMetadata"), dict) else {}
    meta = txn.get("metadata") if isinstance(txn.get("metadata"), dict) else {}
    row = {
        "identifier": meta.get("from", result.get("identifier")),
        "seqNo": txn_meta.get("seqNo", result.get("seqNo")),
        "reqId": meta.get("reqId", result.get("reqId")),
        "txnTime": txn_meta.get("txnTime", result.get("txnTime")),
    }
    data = txn.get("data") if txn else result.get("data")
    return row, data


def sent_reply(title: str, result: dict, *, missing: str | None = None) -> list:
    row, data = reply_metadata(result)
    replies: list = [
        Message(title),
        Table(
            columns=(
                ("identifier", "Identifier"),
                ("seqNo", "Sequence Number"),
                ("reqId", "Request ID"),
                ("txnTime", "Transaction time"),
            ),
            rows=[row],
        ),
    ]
    if data is None and missing is not None:
        replies.append(Notice(missing))
    elif isinstance(data, str):
        replies.extend(["Data:", data])
    else:
        replies.append(JsonBlock(data, title="Data:"))
    return replies
