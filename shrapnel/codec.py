"""
Codec Contract for shrapnel.

A Codec bundles everything the engine needs to find, decode, accept and
re-encode one kind of nested region:

    extract - bytes -> Extraction (candidate slices + identity bytes)
    decode  - bytes -> bytes, returns b"" on failure
    encode  - bytes -> bytes, or None when the region is not reversible
    accept  - bytes -> bool, judged on decoded bytes only

The engine never inspects a callable's shape at decode time. Codecs built
with ``make_codec`` have their transforms adapted once, here, from whatever
shape the underlying function has (str or bytes, raising or not).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Optional, Union


Transform = Callable[[bytes], bytes]
Filter = Callable[[bytes], bool]

# Encoding used when a transform declares it works on text
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "surrogateescape"


# =============================================================================
# EXTRACTION
# =============================================================================

@dataclass(frozen=True)
class Extraction:
    """
    Output of a codec's extractor.

    candidates: slices of the input that may hold an encoded region, in
        extraction order. Overlapping slices are allowed.
    identity: bytes that belong in the structural fingerprint (a JSON key
        set, HTTP header names). Empty when the codec reports none.
    """
    candidates: tuple[bytes, ...] = field(default_factory=tuple)
    identity: bytes = b""


Extractor = Callable[[bytes], Extraction]

NO_EXTRACTION = Extraction()


# =============================================================================
# CODEC
# =============================================================================

def accept_all(decoded: bytes) -> bool:
    """Filter that accepts every decoded candidate."""
    return True


@dataclass(frozen=True)
class Codec:
    """
    An immutable codec descriptor.

    Codecs are identified by their position in the sequence handed to
    ``decompose``; ``name`` is for display and CLI selection only.
    """
    name: str
    extract: Extractor
    decode: Transform
    encode: Optional[Transform] = None
    accept: Filter = accept_all


# =============================================================================
# TRANSFORM ADAPTATION
# =============================================================================

def _identity(data: bytes) -> bytes:
    return data


def adapt_transform(
    func: Optional[Callable],
    *,
    accepts_text: bool = False,
    returns_text: bool = False,
    errors: tuple[type[BaseException], ...] = (ValueError,),
) -> Transform:
    """
    Adapt a callable into a bytes -> bytes Transform.

    The shape is declared by the caller rather than detected per call:

        accepts_text - func takes str; input bytes are decoded first
        returns_text - func returns str; output is encoded back to bytes
        errors       - exception types that signal a failed transform;
                       any of them yields b"" instead of propagating

    Text conversion uses UTF-8 with surrogateescape, so arbitrary bytes
    survive a str round trip unchanged.

    ``func=None`` returns the identity transform.
    """
    if func is None:
        return _identity

    def transform(data: bytes) -> bytes:
        argument: Union[bytes, str] = data
        if accepts_text:
            argument = data.decode(TEXT_ENCODING, TEXT_ERRORS)
        try:
            result = func(argument)
        except errors:
            return b""
        if returns_text:
            return result.encode(TEXT_ENCODING, TEXT_ERRORS)
        return bytes(result)

    transform.__name__ = getattr(func, "__name__", "transform")
    transform.__qualname__ = transform.__name__
    return transform


def make_codec(
    name: str,
    extract: Extractor,
    decode: Optional[Callable],
    encode: Optional[Callable] = None,
    accept: Filter = accept_all,
    *,
    text: bool = False,
    errors: tuple[type[BaseException], ...] = (ValueError,),
) -> Codec:
    """
    Build a Codec, adapting decode and encode once.

    ``text=True`` declares that both functions take and return str.
    A missing decode is the identity; a missing encode stays None, which
    marks the region as not reversible.
    """
    return Codec(
        name=name,
        extract=extract,
        decode=adapt_transform(
            decode, accepts_text=text, returns_text=text, errors=errors,
        ),
        encode=(
            adapt_transform(encode, accepts_text=text, returns_text=text, errors=errors)
            if encode is not None else None
        ),
        accept=accept,
    )


# =============================================================================
# EXTRACTOR AND FILTER HELPERS
# =============================================================================

def regex_extractor(pattern: Union[str, bytes], flags: int = 0) -> Extractor:
    """
    Build an extractor yielding every non-overlapping match of a pattern.

    The pattern is compiled once. Identity is always empty.
    """
    if isinstance(pattern, str):
        pattern = pattern.encode("ascii")
    compiled = re.compile(pattern, flags)

    def extract(data: bytes) -> Extraction:
        return Extraction(
            candidates=tuple(match.group(0) for match in compiled.finditer(data)),
        )

    return extract


def all_of(*filters: Filter) -> Filter:
    """Chain filters; a candidate must pass every one, checked in order."""
    def accept(decoded: bytes) -> bool:
        for check in filters:
            if not check(decoded):
                return False
        return True

    return accept
