"""
Decomposition and Recomposition Engine for shrapnel.

Decomposition (extract -> decode -> accept -> recurse):
    Each codec in the sequence is run once against a fragment's contents.
    Accepted candidates become children, and every child is decomposed with
    the same full codec sequence. Nesting across codecs (base64 inside a
    JSON value inside an HTTP body) comes from that recursion only; a codec
    is never re-run on the same contents.

Recomposition (re-encode -> splice, bottom-up):
    Children are recomposed first. Each reversible child is then re-encoded
    and substituted for its raw slice in the parent.

    The splice is a global substring replacement. Every occurrence of the
    raw slice is rewritten, including occurrences unrelated to the child,
    and a later sibling with the same raw slice can match text an earlier
    sibling already rewrote.

Termination depends on the codecs. A codec that accepts its own input as
decoded output recurses forever; pass ``max_depth`` to bound it.
"""

from __future__ import annotations

from typing import Optional, Sequence

from .codec import Codec
from .fingerprint import EMPTY_FINGERPRINT, fold
from .fragment import Fragment
from .logger import logger


# =============================================================================
# DECOMPOSITION
# =============================================================================

def decompose(
    fragment: Fragment,
    codecs: Sequence[Codec],
    max_depth: Optional[int] = None,
) -> None:
    """
    Decompose a fragment in place.

    Replaces ``fragment.children`` and ``fragment.fingerprint``. Calling it
    twice on the same contents yields the same tree.

    Args:
        fragment: Fragment whose contents are decomposed
        codecs: Ordered codec sequence; the same sequence reproduces the
            same fingerprints
        max_depth: Optional ceiling on tree depth. Fragments at this depth
            are left as leaves. None means unbounded.

    Raises:
        ValueError: If max_depth is negative
    """
    if max_depth is not None and max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")

    codecs = tuple(codecs)
    _decompose(fragment, codecs, max_depth, 0)


def _decompose(
    fragment: Fragment,
    codecs: tuple[Codec, ...],
    max_depth: Optional[int],
    depth: int,
) -> None:
    fragment.children = []
    fragment.fingerprint = EMPTY_FINGERPRINT

    if max_depth is not None and depth >= max_depth:
        logger.warning(
            "max_depth reached, fragment left undecomposed",
            extra={"depth": depth, "size": len(fragment.contents)},
        )
        return

    for index, codec in enumerate(codecs):
        extraction = codec.extract(fragment.contents)

        accepted: list[Fragment] = []
        for candidate in extraction.candidates:
            decoded = codec.decode(candidate)
            if not codec.accept(decoded):
                continue
            accepted.append(
                Fragment(
                    contents=decoded,
                    raw_slice=bytes(candidate),
                    reverse=codec.encode,
                    codec_name=codec.name,
                )
            )

        if not accepted:
            continue

        logger.debug(
            "codec accepted candidates",
            extra={
                "codec": codec.name,
                "accepted": len(accepted),
                "candidates": len(extraction.candidates),
                "depth": depth,
            },
        )

        for child in accepted:
            _decompose(child, codecs, max_depth, depth + 1)

        fragment.children.extend(accepted)
        fragment.fingerprint = fold(
            fragment.fingerprint,
            bytes([index % 256]),
            extraction.identity,
            *(child.fingerprint for child in accepted),
        )


# =============================================================================
# RECOMPOSITION
# =============================================================================

def recompose(fragment: Fragment) -> None:
    """
    Recompose a fragment in place, bottom-up.

    Never fails. Children without a reverse transform are left unspliced,
    and so is a child with an empty raw slice.
    """
    for child in fragment.children:
        recompose(child)

        if not child.reversible:
            if child.reverse is not None:
                logger.debug("empty raw slice, splice skipped", extra={"codec": child.codec_name})
            continue

        encoded = child.reverse(child.contents)

        if child.raw_slice not in fragment.contents:
            logger.debug(
                "raw slice no longer present, splice is a no-op",
                extra={"codec": child.codec_name},
            )
            continue

        fragment.contents = fragment.contents.replace(child.raw_slice, encoded)
