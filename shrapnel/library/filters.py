"""
Acceptance filters for the built-in codecs.

Filters judge decoded bytes only. A rejected candidate is dropped; it is
never retried with another codec.
"""

from __future__ import annotations

import re

from ..codec import Filter


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

# Shortest decoded payload worth treating as a real region. Most random
# alphanumeric runs decode to one to three bytes of noise.
MIN_DECODED_LENGTH = 4

HTTP_METHODS = (
    b"GET", b"HEAD", b"POST", b"PUT", b"DELETE",
    b"CONNECT", b"OPTIONS", b"TRACE", b"PATCH",
)

# Request line or status line, terminated by CRLF, at the start of a message
HTTP_START_LINE = re.compile(
    rb"^(?:(?:" + b"|".join(HTTP_METHODS) + rb") /\S* HTTP/\d\.\d"
    rb"|HTTP/\d\.\d [1-5]\d{2}(?: [^\r\n]*)?)\r\n"
)


# =============================================================================
# FILTERS
# =============================================================================

def is_ascii(data: bytes) -> bool:
    """True when every byte is 7-bit ASCII (the empty buffer included)."""
    return data.isascii()


def min_length(length: int) -> Filter:
    """Build a filter requiring at least ``length`` decoded bytes."""
    def accept(data: bytes) -> bool:
        return len(data) >= length

    accept.__name__ = f"min_length_{length}"
    return accept


def is_http(data: bytes) -> bool:
    """True when the buffer starts with an HTTP request or status line."""
    return HTTP_START_LINE.match(data) is not None
