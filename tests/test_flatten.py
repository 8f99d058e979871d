"""
Tests for the flattening projector.

These tests verify the projection rules:
1. Leaves flatten to their contents
2. A single child is chained after its parent
3. Several children become a deduplicated bracketed list
"""

from shrapnel.engine import decompose
from shrapnel.flatten import FLATTEN_SEPARATOR, flatten
from shrapnel.fragment import Fragment
from shrapnel.library.codecs import base64_codec, json_codec


def node(contents: bytes, *children: Fragment) -> Fragment:
    return Fragment(contents=contents, children=list(children))


class TestFlatten:
    """Test flatten()."""

    def test_leaf_is_its_contents(self):
        assert flatten(node(b"plain")) == b"plain"

    def test_single_child_is_chained(self):
        assert flatten(node(b"outer", node(b"inner"))) == b"outer => inner"

    def test_chain_recurses(self):
        tree = node(b"a", node(b"b", node(b"c")))
        assert flatten(tree) == b"a => b => c"

    def test_duplicate_children_are_collapsed(self):
        """Children 'a', 'a', 'b' project to two entries, not three."""
        tree = node(b"parent", node(b"a"), node(b"a"), node(b"b"))
        assert flatten(tree) == b"[a, b]"

    def test_first_occurrence_order_is_kept(self):
        tree = node(b"parent", node(b"b"), node(b"a"), node(b"b"))
        assert flatten(tree) == b"[b, a]"

    def test_dedup_to_one_uses_single_child_rule(self):
        tree = node(b"parent", node(b"same"), node(b"same"))
        assert flatten(tree) == b"parent => same"

    def test_all_empty_children_fall_back_to_contents(self):
        tree = node(b"parent", node(b""), node(b""))
        assert flatten(tree) == b"parent"

    def test_empty_children_are_kept_in_lists(self):
        """An empty child beside a non-empty one is still listed."""
        tree = node(b"parent", node(b""), node(b"a"), node(b"b"))
        assert flatten(tree) == b"[, a, b]"

    def test_empty_and_one_distinct_child_make_a_list(self):
        tree = node(b"p", node(b""), node(b"a"))
        assert flatten(tree) == b"[, a]"

    def test_repeated_empty_children_collapse(self):
        tree = node(b"p", node(b""), node(b"a"), node(b""))
        assert flatten(tree) == b"[, a]"

    def test_dedup_compares_flattened_subtrees(self):
        """Children with equal contents but different subtrees stay distinct."""
        tree = node(b"parent", node(b"x", node(b"1")), node(b"x", node(b"2")))
        assert flatten(tree) == b"[x => 1, x => 2]"

    def test_custom_separator(self):
        assert flatten(node(b"a", node(b"b")), separator=b" | ") == b"a | b"

    def test_decomposed_tree(self):
        root = Fragment(contents=b"data: SGVsbG8=, done")
        decompose(root, [base64_codec])
        assert flatten(root) == b"data: SGVsbG8=, done" + FLATTEN_SEPARATOR + b"Hello"

    def test_flatten_does_not_mutate(self):
        root = Fragment(contents=b'{"user":"alice"}')
        decompose(root, [json_codec])
        before = (root.contents, [child.contents for child in root.children])
        flatten(root)
        assert (root.contents, [child.contents for child in root.children]) == before
