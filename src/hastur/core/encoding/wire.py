"""JSON datagram encoder for Hastur messages."""

import json
from typing import NoReturn

from hastur.core.exceptions import EncodingError
from hastur.core.models import Message


def _reject(value: object) -> NoReturn:
    raise TypeError(f"unsupported type: {type(value).__name__}")


def encode_message(message: Message) -> bytes:
    """Encode a message as a compact UTF-8 JSON object.

    Args:
        message: The message mapping.

    Returns:
        Datagram payload.

    Raises:
        EncodingError: If the message holds a value JSON cannot represent,
            such as an arbitrary object, a set, a NaN/Infinity float, or
            nesting deeper than the interpreter recursion limit.
    """
    try:
        return json.dumps(
            message,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
            default=_reject,
        ).encode("utf-8")
    except ValueError as e:
        if "Out of range float" in str(e):
            raise EncodingError(f"unsupported value: {e}") from e
        raise EncodingError(str(e)) from e
    except TypeError as e:
        raise EncodingError(str(e)) from e
    except RecursionError as e:
        raise EncodingError("unsupported value: message nested too deeply") from e


def decode_message(payload: bytes) -> Message:
    """Decode a datagram payload back into a message mapping."""
    message: Message = json.loads(payload.decode("utf-8"))
    return message
