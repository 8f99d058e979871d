"""
Tests for the structural fingerprint accumulator.

These tests verify that:
1. fold hashes the existing digest and the parts as one concatenation
2. Folding is order-sensitive
3. chain builds identity bytes one fold at a time
"""

import hashlib

from shrapnel.fingerprint import (
    EMPTY_FINGERPRINT,
    FINGERPRINT_SIZE,
    chain,
    fold,
    format_fingerprint,
)


# =============================================================================
# FOLD TESTS
# =============================================================================

class TestFold:
    """Test the fold operation."""

    def test_fold_is_md5_of_concatenation(self):
        """fold(existing, *parts) hashes existing + parts in order."""
        expected = hashlib.md5(b"prev" + b"a" + b"bc").digest()
        assert fold(b"prev", b"a", b"bc") == expected

    def test_fold_has_fixed_width(self):
        """Every fold result is FINGERPRINT_SIZE bytes."""
        assert len(fold(b"")) == FINGERPRINT_SIZE
        assert len(fold(b"x" * 1000, b"y" * 1000)) == FINGERPRINT_SIZE
        assert FINGERPRINT_SIZE == 16

    def test_fold_is_deterministic(self):
        """Same inputs, same digest."""
        assert fold(b"", b"\x00", b"key") == fold(b"", b"\x00", b"key")

    def test_part_boundaries_do_not_matter(self):
        """Parts are concatenated, so splitting them differently is equal."""
        assert fold(b"", b"ab", b"c") == fold(b"", b"a", b"bc")

    def test_successive_folds_are_order_sensitive(self):
        """Folding a then b differs from folding b then a."""
        a_then_b = fold(fold(EMPTY_FINGERPRINT, b"a"), b"b")
        b_then_a = fold(fold(EMPTY_FINGERPRINT, b"b"), b"a")
        assert a_then_b != b_then_a

    def test_previous_digest_changes_result(self):
        """The existing digest is part of the hashed input."""
        assert fold(b"one", b"part") != fold(b"two", b"part")


# =============================================================================
# CHAIN TESTS
# =============================================================================

class TestChain:
    """Test identity chaining."""

    def test_chain_of_nothing_is_empty(self):
        """No parts yields the empty fingerprint."""
        assert chain() == EMPTY_FINGERPRINT

    def test_chain_folds_each_part(self):
        """chain(a, b) == fold(fold(b"", a), b)."""
        assert chain(b"user", b"role") == fold(fold(b"", b"user"), b"role")

    def test_chain_is_not_a_single_fold(self):
        """Chaining differs from folding the concatenation once."""
        assert chain(b"user", b"role") != fold(b"", b"user", b"role")

    def test_chain_order_matters(self):
        """Key order changes the identity."""
        assert chain(b"a", b"b") != chain(b"b", b"a")


# =============================================================================
# FORMATTING TESTS
# =============================================================================

class TestFormatFingerprint:
    """Test fingerprint rendering."""

    def test_empty_renders_as_dash(self):
        assert format_fingerprint(EMPTY_FINGERPRINT) == "-"

    def test_digest_renders_as_hex(self):
        digest = fold(b"", b"x")
        assert format_fingerprint(digest) == digest.hex()
        assert len(format_fingerprint(digest)) == 32
