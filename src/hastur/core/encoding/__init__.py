"""Wire encoding for Hastur messages."""

from hastur.core.encoding.wire import decode_message, encode_message

__all__ = ["decode_message", "encode_message"]
