"""
Pipeline Orchestrator for the shrapnel CLI.

Ties the engine stages together for whole-buffer operations:

    explode - decompose a buffer into a fragment tree
    rewrite - edit every node, recompose, and re-decompose the result
    compare - decompose two buffers and localize their differences

No I/O happens here beyond ``read_input``; the command layer decides
what to print.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from ..codec import Codec
from ..engine import decompose, recompose
from ..fingerprint import format_fingerprint
from ..fragment import Fragment
from ..library.codecs import ALL_CODECS
from ..logger import logger
from ..walker import Difference, WalkError, find_differences


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

# Depth ceiling applied by the CLI. The engine itself is unbounded.
DEFAULT_MAX_DEPTH = 32

STDIN_PATH = "-"


# =============================================================================
# RESULTS
# =============================================================================

@dataclass
class ExplosionResult:
    """A decomposed buffer and the codecs that decomposed it."""
    root: Fragment
    codecs: tuple[Codec, ...]

    @property
    def fingerprint(self) -> bytes:
        return self.root.fingerprint

    @property
    def fingerprint_hex(self) -> str:
        return format_fingerprint(self.root.fingerprint)

    @property
    def node_count(self) -> int:
        return self.root.node_count()

    @property
    def depth(self) -> int:
        return self.root.depth()


@dataclass
class RewriteResult:
    """
    Result of editing a buffer through its fragment tree.

    output is the recomposed buffer; reexploded is its fresh decomposition,
    so callers can check whether the edit kept the structure.
    """
    original_fingerprint: bytes
    output: bytes
    reexploded: ExplosionResult

    @property
    def structure_preserved(self) -> bool:
        return self.original_fingerprint == self.reexploded.fingerprint


@dataclass
class ComparisonResult:
    """Result of comparing two buffers node by node."""
    left: ExplosionResult
    right: ExplosionResult
    differences: list[Difference] = field(default_factory=list)
    error: Optional[WalkError] = None

    @property
    def matched(self) -> bool:
        return self.error is None


# =============================================================================
# PIPELINE EXECUTION
# =============================================================================

def read_input(path: str) -> bytes:
    """Read a whole file, or stdin when path is "-"."""
    if path == STDIN_PATH:
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


def explode(
    data: bytes,
    codecs: Sequence[Codec] = ALL_CODECS,
    max_depth: Optional[int] = DEFAULT_MAX_DEPTH,
) -> ExplosionResult:
    """Decompose a buffer with the given codecs."""
    root = Fragment(contents=data)
    codecs = tuple(codecs)
    decompose(root, codecs, max_depth=max_depth)

    logger.info(
        "buffer decomposed",
        extra={
            "size": len(data),
            "nodes": root.node_count(),
            "fingerprint": format_fingerprint(root.fingerprint),
        },
    )
    return ExplosionResult(root=root, codecs=codecs)


def rewrite(
    data: bytes,
    old: bytes,
    new: bytes,
    codecs: Sequence[Codec] = ALL_CODECS,
    max_depth: Optional[int] = DEFAULT_MAX_DEPTH,
) -> RewriteResult:
    """
    Replace ``old`` with ``new`` in every node, then recompose.

    Every node is edited, so a value nested under several encodings is
    changed at each level it appears in before being spliced back.
    """
    exploded = explode(data, codecs, max_depth)
    original_fingerprint = exploded.fingerprint

    exploded.root.apply(lambda contents: contents.replace(old, new))
    recompose(exploded.root)
    output = exploded.root.contents

    reexploded = explode(output, codecs, max_depth)
    if reexploded.fingerprint != original_fingerprint:
        logger.warning(
            "rewrite changed the structural fingerprint",
            extra={
                "before": format_fingerprint(original_fingerprint),
                "after": reexploded.fingerprint_hex,
            },
        )

    return RewriteResult(
        original_fingerprint=original_fingerprint,
        output=output,
        reexploded=reexploded,
    )


def compare(
    left: bytes,
    right: bytes,
    codecs: Sequence[Codec] = ALL_CODECS,
    max_depth: Optional[int] = DEFAULT_MAX_DEPTH,
) -> ComparisonResult:
    """Decompose two buffers and walk them in lock-step."""
    left_result = explode(left, codecs, max_depth)
    right_result = explode(right, codecs, max_depth)

    differences, error = find_differences([left_result.root, right_result.root])
    return ComparisonResult(
        left=left_result,
        right=right_result,
        differences=differences,
        error=error,
    )
