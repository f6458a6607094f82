"""Ledger transaction and response schemas."""

from __future__ import annotations

import json
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ledger_shell.requests import canonical_json

REPLY = "REPLY"
REQNACK = "REQNACK"
REJECT = "REJECT"


class StoredTransaction(BaseModel):
    model_config = ConfigDict(extra="allow")

    reqId: int = Field(..., ge=0)
    identifier: str
    operation: Dict[str, Any]
    protocolVersion: Optional[int] = None


class LedgerResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    op: Literal["REPLY", "REQNACK", "REJECT"]
    result: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None
    reqId: Optional[int] = None
    identifier: Optional[str] = None


def parse_transaction(text: str) -> dict:
    """Validate a serialized transaction and return it as a dict."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"transaction is not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise ValueError("transaction must be a JSON object")
    try:
        StoredTransaction.model_validate(payload)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in exc.errors())
        raise ValueError(f"invalid transaction fields: {fields}") from exc
    return payload


def normalize_transaction(text: str) -> str:
    return canonical_json(parse_transaction(text))


def parse_response(payload: object) -> LedgerResponse:
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid data has been received: {exc.msg}") from exc
    try:
        return LedgerResponse.model_validate(payload)
    except ValidationError as exc:
        raise ValueError("invalid data has been received") from exc
