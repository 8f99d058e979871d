"""
Built-in Codec Library for shrapnel.

Codecs, in default order:
    base64       - standard alphabet runs, strict decoding
    hex          - runs of two or more hex digits
    html         - runs of decimal numeric character references (&#65;)
    url_path     - path segments of an HTTP request line
    url_encoding - runs of %XX escapes
    http_header  - header values of an HTTP message (not reversible)
    json         - values of a top-level JSON object (not reversible)
    gzip         - whole buffer, when it carries the gzip magic bytes
    zlib         - whole buffer, when it carries the default zlib header
    brotli       - whole buffer (brotli has no magic bytes; decoding decides)

Identity bytes feed the structural fingerprint. Only codecs whose
structure carries names report any: JSON keys, HTTP header names, and the
request method and version for URL paths. Values never enter identity, so
two payloads differing only in a JSON value share a fingerprint.
"""

from __future__ import annotations

import base64
import binascii
import gzip
import html
import json
import re
import zlib
from typing import Iterable, Sequence
from urllib.parse import quote, unquote_to_bytes

import brotli

from ..codec import (
    Codec,
    Extraction,
    NO_EXTRACTION,
    all_of,
    make_codec,
    regex_extractor,
)
from ..fingerprint import chain
from .filters import HTTP_METHODS, MIN_DECODED_LENGTH, is_ascii, is_http, min_length


# Shared by every codec whose decoded output should be printable text
ascii_text = all_of(is_ascii, min_length(MIN_DECODED_LENGTH))


# =============================================================================
# BASE64 / HEX
# =============================================================================

def b64decode_strict(data: bytes) -> bytes:
    return base64.b64decode(data, validate=True)


base64_codec = make_codec(
    name="base64",
    extract=regex_extractor(rb"[A-Za-z0-9/+]+={0,2}"),
    decode=b64decode_strict,
    encode=base64.b64encode,
    accept=ascii_text,
)

hex_codec = make_codec(
    name="hex",
    extract=regex_extractor(rb"[a-fA-F0-9]{2,}"),
    decode=binascii.unhexlify,
    encode=binascii.hexlify,
    accept=ascii_text,
)


# =============================================================================
# HTML NUMERIC ENTITIES
# =============================================================================

def html_entity_encode(text: str) -> str:
    """Encode every character as a decimal character reference."""
    return "".join(f"&#{ord(ch)};" for ch in text)


html_codec = make_codec(
    name="html",
    extract=regex_extractor(rb"(?:&#\d{2,};)+"),
    decode=html.unescape,
    encode=html_entity_encode,
    accept=ascii_text,
    text=True,
)


# =============================================================================
# URL PATH / PERCENT-ENCODING
# =============================================================================

# Characters a path segment keeps unescaped besides letters, digits and
# "_.-~" (matches the sub-delims allowed in a segment)
PATH_SEGMENT_SAFE = "$&+,:;=@"

REQUEST_LINE = re.compile(
    rb"^(" + b"|".join(HTTP_METHODS) + rb") (/\S*) HTTP/(\d\.\d)"
)


def extract_url_path(data: bytes) -> Extraction:
    """
    Extract the non-empty path segments of an HTTP request line.

    Identity is the request method followed by the protocol version.
    """
    match = REQUEST_LINE.match(data)
    if match is None:
        return NO_EXTRACTION

    method, path, version = match.groups()
    segments = tuple(segment for segment in path.split(b"/") if segment)
    return Extraction(candidates=segments, identity=chain(method, version))


def path_segment_encode(data: bytes) -> bytes:
    return quote(data, safe=PATH_SEGMENT_SAFE).encode("ascii")


def percent_encode_all(data: bytes) -> bytes:
    """Escape every byte as %XX with uppercase hex digits."""
    return b"".join(b"%%%02X" % byte for byte in data)


url_path_codec = make_codec(
    name="url_path",
    extract=extract_url_path,
    decode=unquote_to_bytes,
    encode=path_segment_encode,
    accept=ascii_text,
)

url_encoding_codec = make_codec(
    name="url_encoding",
    extract=regex_extractor(rb"(?:%[A-Fa-f0-9]{2})+"),
    decode=unquote_to_bytes,
    encode=percent_encode_all,
    accept=ascii_text,
)


# =============================================================================
# HTTP HEADERS
# =============================================================================

HEADER_BODY_SEPARATOR = b"\r\n\r\n"
LINE_SEPARATOR = b"\r\n"


def extract_http_headers(data: bytes) -> Extraction:
    """
    Extract header values from an HTTP request or response.

    The message must contain exactly one blank line separating headers from
    body. The start line is skipped. Each value keeps its leading space so
    it matches the raw text byte for byte. Identity is the chain of header
    names in order of appearance.
    """
    if not is_http(data):
        return NO_EXTRACTION

    parts = data.split(HEADER_BODY_SEPARATOR)
    if len(parts) != 2:
        return NO_EXTRACTION

    names: list[bytes] = []
    values: list[bytes] = []
    for line in parts[0].split(LINE_SEPARATOR)[1:]:
        name, separator, value = line.partition(b":")
        if not separator:
            continue
        names.append(name)
        values.append(value)

    return Extraction(candidates=tuple(values), identity=chain(*names))


http_header_codec = make_codec(
    name="http_header",
    extract=extract_http_headers,
    decode=None,
    accept=is_ascii,
)


# =============================================================================
# JSON
# =============================================================================

JSON_WHITESPACE = re.compile(r"[ \t\n\r]*")

_json_decoder = json.JSONDecoder()


def _skip_whitespace(text: str, index: int) -> int:
    return JSON_WHITESPACE.match(text, index).end()


def _json_object_members(text: str) -> list[tuple[str, str]]:
    """
    Scan a top-level JSON object into (key, raw value text) pairs.

    Members are returned in document order, duplicates included. Each value
    is the exact source text, so it occurs verbatim in the document.

    Raises:
        ValueError: If text is not a single well-formed JSON object
    """
    index = _skip_whitespace(text, 0)
    if text[index:index + 1] != "{":
        raise ValueError("not a JSON object")
    index = _skip_whitespace(text, index + 1)

    members: list[tuple[str, str]] = []
    if text[index:index + 1] == "}":
        index += 1
    else:
        while True:
            key, index = _json_decoder.raw_decode(text, index)
            if not isinstance(key, str):
                raise ValueError("object key must be a string")
            index = _skip_whitespace(text, index)
            if text[index:index + 1] != ":":
                raise ValueError("expected ':' after object key")

            start = _skip_whitespace(text, index + 1)
            _, index = _json_decoder.raw_decode(text, start)
            members.append((key, text[start:index]))

            index = _skip_whitespace(text, index)
            delimiter = text[index:index + 1]
            index = _skip_whitespace(text, index + 1)
            if delimiter == "}":
                break
            if delimiter != ",":
                raise ValueError("expected ',' or '}' in object")

    if _skip_whitespace(text, index) != len(text):
        raise ValueError("trailing data after JSON object")
    return members


def extract_json_values(data: bytes) -> Extraction:
    """
    Extract the values of a top-level JSON object.

    Each candidate is the value's own span of the document (whitespace and
    escapes untouched), in document order. Identity is the chain of key
    names, so the key set and its order shape the fingerprint while the
    values do not.
    """
    try:
        members = _json_object_members(data.decode("utf-8"))
    except (ValueError, RecursionError):
        return NO_EXTRACTION

    if not members:
        return NO_EXTRACTION

    values = tuple(value.encode("utf-8") for _, value in members)
    identity = chain(*(key.encode("utf-8", "surrogatepass") for key, _ in members))
    return Extraction(candidates=values, identity=identity)


json_codec = make_codec(
    name="json",
    extract=extract_json_values,
    decode=None,
    accept=is_ascii,
)


# =============================================================================
# COMPRESSION
# =============================================================================

GZIP_MAGIC = b"\x1f\x8b"
ZLIB_MAGIC = b"\x78\x9c"

DECOMPRESS_ERRORS = (OSError, EOFError, zlib.error)


def prefix_extractor(magic: bytes):
    """Build an extractor yielding the whole buffer when it starts with magic."""
    def extract(data: bytes) -> Extraction:
        if data.startswith(magic):
            return Extraction(candidates=(data,))
        return NO_EXTRACTION

    return extract


def gzip_compress(data: bytes) -> bytes:
    # mtime=0 keeps the output byte-identical across runs
    return gzip.compress(data, mtime=0)


gzip_codec = make_codec(
    name="gzip",
    extract=prefix_extractor(GZIP_MAGIC),
    decode=gzip.decompress,
    encode=gzip_compress,
    accept=ascii_text,
    errors=DECOMPRESS_ERRORS,
)

zlib_codec = make_codec(
    name="zlib",
    extract=prefix_extractor(ZLIB_MAGIC),
    decode=zlib.decompress,
    encode=zlib.compress,
    accept=ascii_text,
    errors=DECOMPRESS_ERRORS,
)


def whole_buffer(data: bytes) -> Extraction:
    """Offer the whole buffer as the only candidate (nothing for b"")."""
    if not data:
        return NO_EXTRACTION
    return Extraction(candidates=(data,))


brotli_codec = make_codec(
    name="brotli",
    extract=whole_buffer,
    decode=brotli.decompress,
    encode=brotli.compress,
    accept=ascii_text,
    errors=(brotli.error,),
)


# =============================================================================
# REGISTRY
# =============================================================================

ALL_CODECS: tuple[Codec, ...] = (
    base64_codec,
    hex_codec,
    html_codec,
    url_path_codec,
    url_encoding_codec,
    http_header_codec,
    json_codec,
    gzip_codec,
    zlib_codec,
    brotli_codec,
)

CODECS_BY_NAME: dict[str, Codec] = {codec.name: codec for codec in ALL_CODECS}


class UnknownCodecError(KeyError):
    """Raised when a codec name is not in the registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"unknown codec '{name}', expected one of: {', '.join(CODECS_BY_NAME)}"
        )

    def __str__(self) -> str:
        return self.args[0]


def select_codecs(names: Iterable[str]) -> tuple[Codec, ...]:
    """
    Resolve codec names, keeping the order they were given in.

    Raises:
        UnknownCodecError: If a name is not registered
    """
    selected: list[Codec] = []
    for name in names:
        name = name.strip()
        if not name:
            continue
        if name not in CODECS_BY_NAME:
            raise UnknownCodecError(name)
        selected.append(CODECS_BY_NAME[name])
    return tuple(selected)


def codec_names(codecs: Sequence[Codec]) -> list[str]:
    return [codec.name for codec in codecs]
