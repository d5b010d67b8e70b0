"""Decoding of Binance bookTicker WebSocket messages."""

from __future__ import annotations

import json
from typing import Any

from .errors import DecodeError
from .models import PriceEntry, QuoteSide, QuoteUpdate, SubscriptionAck
from .symbols import normalize_symbol

# bookTicker fields: s=symbol, b/B=best bid price/qty, a/A=best ask price/qty
_QUOTE_FIELDS = ("s", "b", "B", "a", "A")


def decode_message(raw: str | bytes | dict[str, Any]) -> QuoteUpdate | SubscriptionAck:
    """Decode one inbound message.

    Returns a SubscriptionAck for ``{"result": null, "id": n}`` and a
    QuoteUpdate for a bookTicker payload. Raises DecodeError for anything else.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            message = json.loads(raw)
        except (ValueError, RecursionError) as e:
            # Deeply nested input raises RecursionError, not JSONDecodeError
            raise DecodeError(f"Invalid JSON: {e}") from e
    else:
        message = raw

    if not isinstance(message, dict):
        raise DecodeError(f"Expected a JSON object, got {type(message).__name__}")

    if "result" in message and message["result"] is None and "id" in message:
        request_id = message["id"]
        if isinstance(request_id, bool) or not isinstance(request_id, int):
            raise DecodeError(f"Invalid request id in acknowledgment: {request_id!r}")
        return SubscriptionAck(request_id=request_id)

    missing = [f for f in _QUOTE_FIELDS if not isinstance(message.get(f), str) or not message[f]]
    if missing:
        raise DecodeError(f"Unrecognized message, missing or invalid fields {missing}")

    return QuoteUpdate(
        symbol=normalize_symbol(message["s"]),
        entry=PriceEntry(
            ask=QuoteSide(message["a"], message["A"]),
            bid=QuoteSide(message["b"], message["B"]),
        ),
        update_id=_parse_update_id(message.get("u")),
    )


def _parse_update_id(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None
