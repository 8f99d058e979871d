"""
Fragment Tree for shrapnel.

A Fragment is one node of a decomposition tree. The root holds the original
input; every other node holds the decoded payload of a region found inside
its parent, plus what the parent needs to splice it back:

    raw_slice - the exact bytes the region occupied in the parent
    reverse   - the producing codec's encoder (None when irreversible)

Ownership is strictly tree-shaped. A Fragment owns its children and its
byte buffers; there are no back references.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from .codec import Transform
from .fingerprint import EMPTY_FINGERPRINT


@dataclass(eq=False)
class Fragment:
    """
    A node of the decomposition tree.

    Children are kept in discovery order: codec sequence order first, then
    extraction order within a codec. The fingerprint is only written by
    ``decompose``; edits to ``contents`` do not update it.
    """
    contents: bytes
    children: list[Fragment] = field(default_factory=list)
    raw_slice: bytes = b""
    reverse: Optional[Transform] = None
    fingerprint: bytes = EMPTY_FINGERPRINT

    # Name of the codec that produced this node (None for a root)
    codec_name: Optional[str] = None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def reversible(self) -> bool:
        """True when recompose can re-encode this node into its parent."""
        return self.reverse is not None and bool(self.raw_slice)

    def iter_nodes(self) -> Iterator[Fragment]:
        """Yield this node and all descendants, pre-order."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def iter_with_depth(self, depth: int = 0) -> Iterator[tuple[int, Fragment]]:
        """Yield (depth, node) pairs, pre-order."""
        yield depth, self
        for child in self.children:
            yield from child.iter_with_depth(depth + 1)

    def node_count(self) -> int:
        return sum(1 for _ in self.iter_nodes())

    def depth(self) -> int:
        """Number of levels below this node (0 for a leaf)."""
        if not self.children:
            return 0
        return 1 + max(child.depth() for child in self.children)

    def apply(self, visitor: Callable[[bytes], bytes]) -> None:
        """
        Replace every node's contents with visitor(contents).

        The root is visited first, then each child subtree in order. Run
        ``recompose`` afterwards to fold the edits back into the root.
        """
        self.contents = visitor(self.contents)
        for child in self.children:
            child.apply(visitor)
