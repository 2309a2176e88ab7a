"""
Tests for key-name search over JSON trees.
"""

from __future__ import annotations

import copy

from tubescope.services.extraction.tree import (
    collect,
    collect_any,
    collect_dicts,
    find_first,
)

TREE = {
    "videoRenderer": {
        "videoId": "depth1",
        "endScreen": {"videoRenderer": {"videoId": "depth3a"}},
    },
    "shelf": {
        "content": {"videoRenderer": {"videoId": "depth3b"}},
    },
}


class TestCollect:
    """Tests for collect and collect_dicts."""

    def test_matches_at_any_depth_in_document_order(self) -> None:
        """Test a match nested inside another match is found after its parent."""
        found = collect(TREE, "videoRenderer")
        assert [node["videoId"] for node in found] == ["depth1", "depth3a", "depth3b"]

    def test_nested_matches_follow_their_parent(self) -> None:
        """Test descent continues below a match."""
        assert collect({"k": {"k": "inner"}}, "k") == [{"k": "inner"}, "inner"]

    def test_input_is_not_mutated(self) -> None:
        """Test the walk leaves the tree untouched."""
        before = copy.deepcopy(TREE)
        collect(TREE, "videoRenderer")
        collect_any(TREE, ("videoRenderer", "videoId"))
        assert TREE == before

    def test_returns_a_new_list(self) -> None:
        """Test results are independent of the tree."""
        found = collect(TREE, "videoRenderer")
        found.clear()
        assert len(collect(TREE, "videoRenderer")) == 3

    def test_scalars_and_missing_keys(self) -> None:
        """Test scalar roots and absent keys yield nothing."""
        assert collect("text", "k") == []
        assert collect(None, "k") == []
        assert collect(TREE, "channelRenderer") == []

    def test_collect_dicts_skips_non_objects(self) -> None:
        """Test only object values are kept."""
        tree = {"token": "abc", "inner": {"token": {"value": 1}}}
        assert collect_dicts(tree, "token") == [{"value": 1}]

    def test_deep_nesting(self) -> None:
        """Test there is no depth bound."""
        node: dict = {"target": "bottom"}
        for _ in range(100):
            node = {"wrap": [node]}
        assert collect(node, "target") == ["bottom"]


class TestFindFirst:
    """Tests for find_first."""

    def test_first_in_document_order(self) -> None:
        """Test the shallow match is found first when it comes first."""
        assert find_first(TREE, "videoId") == "depth1"

    def test_missing_returns_none(self) -> None:
        """Test an absent key returns None."""
        assert find_first(TREE, "nothing") is None


class TestCollectAny:
    """Tests for collect_any."""

    def test_single_order_across_keys(self) -> None:
        """Test matches for different keys interleave in document order."""
        tree = {
            "items": [
                {"gridVideoRenderer": {"videoId": "a"}},
                {"videoRenderer": {"videoId": "b"}},
                {"gridVideoRenderer": {"videoId": "c"}},
            ]
        }
        found = collect_any(tree, ("videoRenderer", "gridVideoRenderer"))
        assert [node["videoId"] for node in found] == ["a", "b", "c"]

    def test_key_order_within_one_object(self) -> None:
        """Test keys on the same object are reported in the order given."""
        tree = {"compactVideoRenderer": {"videoId": "x"}, "videoRenderer": {"videoId": "y"}}
        found = collect_any(tree, ("videoRenderer", "compactVideoRenderer"))
        assert [node["videoId"] for node in found] == ["y", "x"]
