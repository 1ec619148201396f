"""
Share Token Codec

A share token is the whole splitter state - roster, expenses and a
generation timestamp - as camelCase JSON, UTF-8 encoded, then base64'd.
This is byte-compatible with tokens produced by the browser client.

CRITICAL: decode() either returns a fully validated SharePayload or raises
DecodeError. It never returns partial data, so callers can swap state in
only after decoding has completely succeeded.
"""

import base64
import binascii
from datetime import datetime
from typing import Optional, Sequence

from pydantic import ValidationError

from splitter.models.ledger import Expense, Participant, SharePayload, utc_now


class DecodeError(Exception):
    """Share token is malformed or does not describe a valid state."""

    def __init__(self, message: str, reason: str):
        self.reason = reason
        super().__init__(message)


def encode(
    roster: Sequence[Participant],
    expenses: Sequence[Expense],
    timestamp: Optional[datetime] = None,
) -> str:
    """Serialize roster and expenses into a base64 share token."""
    payload = SharePayload(
        friends=list(roster),
        expenses=list(expenses),
        timestamp=timestamp or utc_now(),
    )
    raw = payload.model_dump_json(by_alias=True).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def decode(token: str) -> SharePayload:
    """
    Parse a share token back into typed models.

    Accepts tokens whose padding was trimmed and whose '+' characters
    were turned into spaces by query-string decoding.

    Raises:
        DecodeError: On bad base64, bad UTF-8, bad JSON or a payload
                     that does not match the expected shape
    """
    cleaned = (token or "").strip().replace(" ", "+")
    if not cleaned:
        raise DecodeError("Share token is empty", reason="empty")

    cleaned += "=" * (-len(cleaned) % 4)

    try:
        raw = base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Share token is not valid base64: {e}", reason="base64")

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Share token is not valid UTF-8: {e}", reason="encoding")

    try:
        return SharePayload.model_validate_json(text)
    except ValidationError as e:
        reason = "json" if any(err["type"] == "json_invalid" for err in e.errors()) else "schema"
        raise DecodeError(
            f"Share token does not contain a valid splitter state: "
            f"{e.error_count()} problems",
            reason=reason,
        )
