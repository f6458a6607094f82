"""Helpers for deriving, abbreviating and qualifying ledger DIDs.

DID format:
- unqualified: base58 of the first 16 bytes of the ed25519 verkey
- qualified:   did:<method>:<unqualified>
Verkeys are base58 encoded; an abbreviated verkey is `~` followed by the
base58 encoding of the verkey bytes that are not already part of the DID.
"""

from __future__ import annotations

import base64
import re

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
SEED_BYTES = 32

_QUALIFIED_RE = re.compile(r"^did:([a-z0-9:]+?):([A-Za-z0-9._\-]+)$")


def b58_encode(data: bytes) -> str:
    num = int.from_bytes(data, "big")
    result = ""
    while num > 0:
        num, rem = divmod(num, 58)
        result = B58_ALPHABET[rem] + result
    for byte in data:
        if byte == 0:
            result = "1" + result
        else:
            break
    return result


def b58_decode(value: str) -> bytes:
    num = 0
    for char in value:
        index = B58_ALPHABET.find(char)
        if index < 0:
            raise ValueError(f"invalid base58 character: {char!r}")
        num = num * 58 + index
    body = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    pad = len(value) - len(value.lstrip("1"))
    return b"\x00" * pad + body


def derive_did(verkey_bytes: bytes) -> str:
    return b58_encode(verkey_bytes[:16])


def unqualify_did(did: str) -> str:
    match = _QUALIFIED_RE.match(did)
    if match:
        return match.group(2)
    return did


def did_method(did: str) -> str | None:
    match = _QUALIFIED_RE.match(did)
    return match.group(1) if match else None


def qualify_did(did: str, method: str) -> str:
    method = method.strip()
    if method.startswith("did:"):
        method = method[len("did:"):]
    if not method:
        raise ValueError("DID method must not be empty")
    return f"did:{method}:{unqualify_did(did)}"


def is_valid_did(did: str) -> bool:
    short = unqualify_did(did)
    try:
        decoded = b58_decode(short)
    except ValueError:
        return False
    return len(decoded) in (16, 32)


def abbreviate_verkey(did: str, verkey: str) -> str:
    did_bytes = b58_decode(unqualify_did(did))
    verkey_bytes = b58_decode(verkey)
    if len(did_bytes) == 16 and verkey_bytes[:16] == did_bytes:
        return "~" + b58_encode(verkey_bytes[16:])
    return verkey


def full_verkey(did: str, verkey: str) -> str:
    if not verkey.startswith("~"):
        return verkey
    return b58_encode(b58_decode(unqualify_did(did)) + b58_decode(verkey[1:]))


def seed_to_bytes(seed: str) -> bytes:
    """Accept a 32 character seed, a base64 seed or a 64 character hex seed."""
    raw = seed.encode("utf-8")
    if len(raw) == SEED_BYTES:
        return raw
    if seed.endswith("="):
        try:
            decoded = base64.b64decode(seed, validate=True)
        except Exception as exc:
            raise ValueError("invalid seed provided") from exc
        if len(decoded) == SEED_BYTES:
            return decoded
        raise ValueError("invalid seed provided")
    if len(seed) == SEED_BYTES * 2:
        try:
            return bytes.fromhex(seed)
        except ValueError as exc:
            raise ValueError("invalid seed provided") from exc
    raise ValueError("invalid seed provided")


def keypair_from_seed(seed: str | None) -> Ed25519PrivateKey:
    if seed is None:
        return Ed25519PrivateKey.generate()
    return Ed25519PrivateKey.from_private_bytes(seed_to_bytes(seed))
