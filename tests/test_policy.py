"""Tests for edits/policy.py and edits/summary.py."""

from __future__ import annotations

import pytest

from edits.apply_patches import apply_edit_patch
from edits.contract import validate_edit_patch
from edits.policy import filter_ops, locked_targets, parse_target, slide_id_map
from edits.summary import describe_result


def _ops(*ops):
    return validate_edit_patch({"ops": list(ops)}).ops


class TestFilterOps:

    def test_no_restrictions_keeps_everything(self):
        ops = _ops(
            {"op": "move", "slideIndex": 1, "objectId": "a", "x": 1},
            {"op": "move", "slideId": "s2", "objectId": "b", "x": 1},
        )
        result = filter_ops(ops)
        assert result.ops == ops
        assert result.skipped_policy == 0

    def test_slide_index_restriction(self):
        ops = _ops(
            {"op": "move", "slideIndex": 1, "objectId": "a", "x": 1},
            {"op": "move", "slideIndex": 2, "objectId": "a", "x": 1},
            {"op": "move", "slideId": "s1", "objectId": "a", "x": 1},
        )
        result = filter_ops(ops, slide_index=1)
        assert [op.slide_index for op in result.ops] == [1]
        assert result.skipped_policy == 2

    def test_allowed_targets(self):
        ops = _ops(
            {"op": "set_text", "slideIndex": 1, "objectId": "title", "text": "a"},
            {"op": "set_text", "slideIndex": 1, "objectId": "body", "text": "b"},
            {"op": "set_text", "slideIndex": 2, "objectId": "title", "text": "c"},
        )
        result = filter_ops(ops, allowed_targets={"1:title", "2:title"})
        assert [op.text for op in result.ops] == ["a", "c"]
        assert result.skipped_policy == 1

    def test_empty_allowed_targets_means_unrestricted(self):
        ops = _ops({"op": "move", "slideIndex": 3, "objectId": "a"})
        assert filter_ops(ops, allowed_targets=[]).skipped_policy == 0


class TestLockedTargets:

    def test_index_and_id_keyed_locks(self, deck_doc):
        locks = {"slide_2": {"title": True}, "1.body": True}
        found = locked_targets(
            locks,
            ["1:title", "1:body", "2:title", "bad-key", "x:title"],
            slide_ids=slide_id_map(deck_doc),
        )
        assert found == ["1:body", "2:title"]

    def test_slide_id_map(self, deck_doc):
        assert slide_id_map(deck_doc) == {1: "slide_1", 2: "slide_2", 3: "slide_3"}
        assert slide_id_map({"slides": None}) == {}

    @pytest.mark.parametrize("key,expected", [
        ("1:title", (1, "title")),
        ("12:a:b", (12, "a:b")),
        ("0:title", None),
        ("title", None),
        ("1:", None),
        ("one:title", None),
    ])
    def test_parse_target(self, key, expected):
        assert parse_target(key) == expected


class TestDescribeResult:

    def test_text_and_move(self, deck_doc):
        result = apply_edit_patch(deck_doc, ["1:body"], {
            "ops": [
                {"op": "set_style", "slideIndex": 1, "objectId": "title", "style": {"a": 1}},
                {"op": "move", "slideIndex": 2, "objectId": "title", "x": 1},
                {"op": "set_text", "slideIndex": 1, "objectId": "body", "text": "t"},
            ],
        })
        assert describe_result(result) == [
            "Updated text/style",
            "Moved elements",
            "Locks respected: 1",
        ]

    def test_nothing_applied(self, deck_doc):
        result = apply_edit_patch(deck_doc, None, {
            "ops": [{"op": "move", "slideIndex": 7, "objectId": "title", "x": 1}],
        })
        assert describe_result(result, skipped_policy=2) == [
            "No changes applied",
            "Targets not found: 1",
            "Skipped by policy: 2",
        ]

    def test_blocked_targets_override(self, deck_doc):
        result = apply_edit_patch(deck_doc, None, {
            "ops": [{"op": "move", "slideIndex": 1, "objectId": "title", "x": 1}],
        })
        assert describe_result(result, blocked_targets=3)[-1] == "Locks respected: 3"
