"""
Synchronized Walker for shrapnel.

Walks two or more fingerprint-equal fragment trees in lock-step and applies
a reducer to the contents of every set of corresponding nodes.

Each level is checked before anything is reduced:
    NO_INPUT             - no trees were given
    STRUCTURAL_MISMATCH  - fingerprints differ
    CHILD_COUNT_MISMATCH - child counts differ (possible only for trees
                           built by hand, since equal fingerprints imply
                           equal shape)

A mismatch at the level being walked is returned as the error. A mismatch
in a child level only drops that child's results; sibling branches that
still match are walked as usual.

"Synchronized" means structural lock-step. Everything runs on the calling
thread.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Generic, Iterator, Optional, Sequence, TypeVar

from .fingerprint import format_fingerprint
from .fragment import Fragment
from .logger import logger


T = TypeVar("T")

Reducer = Callable[[list[bytes]], T]


# =============================================================================
# ERRORS
# =============================================================================

class MismatchRule(Enum):
    """Why a level of a synchronized walk could not be reduced."""
    NO_INPUT = "no_input"
    STRUCTURAL_MISMATCH = "structural_mismatch"
    CHILD_COUNT_MISMATCH = "child_count_mismatch"


class WalkError(Exception):
    """
    Raised inside the walker when a level does not line up.

    ``walk`` catches it at its boundary and returns it in WalkResult.error,
    so callers receive a value, never the exception.
    """

    def __init__(self, rule: MismatchRule, reason: str, depth: int = 0):
        self.rule = rule
        self.reason = reason
        self.depth = depth
        super().__init__(f"[{rule.value}] {reason}")


@dataclass
class WalkResult(Generic[T]):
    """
    Outcome of a synchronized walk.

    results holds one reduction per walked node, depth-first pre-order.
    On error, results is empty. Unpacks as ``results, error``.
    """
    results: list[T] = field(default_factory=list)
    error: Optional[WalkError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __iter__(self) -> Iterator:
        yield self.results
        yield self.error


# =============================================================================
# WALKING
# =============================================================================

def walk(reduce: Reducer, trees: Sequence[Fragment]) -> WalkResult:
    """
    Walk trees in lock-step, reducing corresponding nodes.

    Args:
        reduce: Called with the list of contents at one position, one
            entry per tree, in the same order as ``trees``
        trees: Decomposed fragment trees

    Returns:
        WalkResult with every reduction, or an error for the root level
    """
    trees = list(trees)
    try:
        results = _walk_level(reduce, trees, 0)
    except WalkError as e:
        return WalkResult(results=[], error=e)
    return WalkResult(results=results)


def _check_level(trees: list[Fragment], depth: int) -> None:
    """
    Verify that trees line up at this level.

    Raises:
        WalkError: On empty input, fingerprint mismatch or child-count
            mismatch
    """
    if not trees:
        raise WalkError(MismatchRule.NO_INPUT, "no input", depth)

    expected = trees[0].fingerprint
    for position, tree in enumerate(trees[1:], start=1):
        if tree.fingerprint != expected:
            raise WalkError(
                MismatchRule.STRUCTURAL_MISMATCH,
                f"structural mismatch: tree {position} has fingerprint "
                f"{format_fingerprint(tree.fingerprint)}, expected "
                f"{format_fingerprint(expected)}",
                depth,
            )

    expected_count = len(trees[0].children)
    for position, tree in enumerate(trees[1:], start=1):
        if len(tree.children) != expected_count:
            raise WalkError(
                MismatchRule.CHILD_COUNT_MISMATCH,
                f"child-count mismatch: tree {position} has "
                f"{len(tree.children)} children, expected {expected_count}",
                depth,
            )


def _walk_level(reduce: Reducer, trees: list[Fragment], depth: int) -> list:
    _check_level(trees, depth)

    results = [reduce([tree.contents for tree in trees])]

    for index in range(len(trees[0].children)):
        level = [tree.children[index] for tree in trees]
        try:
            results.extend(_walk_level(reduce, level, depth + 1))
        except WalkError as e:
            logger.debug(
                "walk level skipped",
                extra={"rule": e.rule.value, "depth": e.depth, "child": index},
            )

    return results


# =============================================================================
# DIFFERENCES
# =============================================================================

@dataclass(frozen=True)
class Difference:
    """
    A walked position whose contents are not identical across trees.

    position is the index of the node in the walk's pre-order output.
    """
    position: int
    contents: tuple[bytes, ...]


def find_differences(
    trees: Sequence[Fragment],
) -> tuple[list[Difference], Optional[WalkError]]:
    """
    Localize differences between structurally equal trees.

    Returns every walked position whose contents differ, together with the
    root-level walk error (if any).
    """
    result = walk(tuple, trees)
    if result.error is not None:
        return [], result.error

    differences = [
        Difference(position=position, contents=contents)
        for position, contents in enumerate(result.results)
        if len(set(contents)) > 1
    ]
    return differences, None
