"""
Flattening Projector for shrapnel.

Renders a fragment tree as one linear byte sequence for display and
diffing. Recomposition never uses it.

Rules:
    leaf            -> contents
    one child       -> contents + separator + flatten(child)
    several children -> [a, b, ...] over the distinct flattened children,
                        first occurrence first. One distinct child falls
                        back to the one-child rule. When every child
                        flattens empty, the result is contents.
"""

from __future__ import annotations

from .fragment import Fragment


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

FLATTEN_SEPARATOR = b" => "
FLATTEN_OPEN = b"["
FLATTEN_CLOSE = b"]"
FLATTEN_DELIMITER = b", "


def flatten(fragment: Fragment, separator: bytes = FLATTEN_SEPARATOR) -> bytes:
    """Flatten a fragment tree into a single byte sequence."""
    if not fragment.children:
        return fragment.contents

    if len(fragment.children) == 1:
        return fragment.contents + separator + flatten(fragment.children[0], separator)

    flattened = [flatten(child, separator) for child in fragment.children]
    if not any(flattened):
        return fragment.contents

    distinct: list[bytes] = []
    for item in flattened:
        if item not in distinct:
            distinct.append(item)

    if len(distinct) == 1:
        return fragment.contents + separator + distinct[0]

    return FLATTEN_OPEN + FLATTEN_DELIMITER.join(distinct) + FLATTEN_CLOSE
