"""
Unit tests for query hashing.
"""

import pytest

from rule_reconciliation.reconciliation.query_hasher import hash_query


class TestHashQuery:
    """Test suite for query fingerprints."""

    def test_wrapping_parens_are_ignored(self):
        assert hash_query("(a=1,b=2)") == hash_query("a=1, b=2")

    def test_whitespace_is_ignored(self):
        assert hash_query("a > 1") == hash_query(" a>1 ")
        assert hash_query("sum(rate(x[5m]))\n  > 0") == hash_query("sum(rate(x[5m])) > 0")

    def test_label_matcher_order_is_ignored(self):
        assert hash_query('up{job="a",env="b"}') == hash_query('up{env="b",job="a"}')

    @pytest.mark.parametrize("left,right", [
        ("(up == 1)", "up==1"),
        ("up == 1", "( up == 1 )"),
    ])
    def test_comparison_is_symmetric(self, left, right):
        assert hash_query(left) == hash_query(right)
        assert hash_query(right) == hash_query(left)

    def test_only_one_layer_of_parens_is_stripped(self):
        assert hash_query("((up))") == "()pu"

    def test_single_paren_is_kept(self):
        assert hash_query("(") == "("

    def test_empty_query(self):
        assert hash_query("") == ""

    def test_different_queries_differ(self):
        assert hash_query("up == 1") != hash_query("up == 0")
