"""
Tests for structural diff, pointer handling and guarded patch application.
"""

import pytest

from theme_amender.json_patch import (
    PatchError,
    apply_patch,
    compare,
    is_allowed,
    join_pointer,
    normalise_patch,
    split_pointer,
    validate_patch,
)


class TestPointer:
    def test_escaping(self):
        assert join_pointer(["a/b", "c~d"]) == "/a~1b/c~0d"
        assert split_pointer("/a~1b/c~0d") == ["a/b", "c~d"]

    def test_root(self):
        assert split_pointer("") == []

    def test_relative_pointer_is_rejected(self):
        with pytest.raises(PatchError):
            split_pointer("colors/brand")


class TestCompare:
    def test_replace_add_remove(self):
        before = {"spacing": {"sm": "8px", "md": "16px"}, "old": 1}
        after = {"spacing": {"sm": "6px", "md": "16px", "lg": "24px"}}
        assert compare(before, after) == [
            {"op": "replace", "path": "/spacing/sm", "value": "6px"},
            {"op": "add", "path": "/spacing/lg", "value": "24px"},
            {"op": "remove", "path": "/old"},
        ]

    def test_identical_documents(self):
        doc = {"a": {"b": [1, 2, 3]}}
        assert compare(doc, {"a": {"b": [1, 2, 3]}}) == []

    def test_type_change_is_a_replace(self):
        assert compare({"a": 1}, {"a": "1"}) == [{"op": "replace", "path": "/a", "value": "1"}]
        assert compare({"a": 1}, {"a": True}) == [{"op": "replace", "path": "/a", "value": True}]

    def test_lists(self):
        before = {"l": [1, 2, 3, 4]}
        after = {"l": [1, 9]}
        diff = compare(before, after)
        assert diff == [
            {"op": "replace", "path": "/l/1", "value": 9},
            {"op": "remove", "path": "/l/3"},
            {"op": "remove", "path": "/l/2"},
        ]
        assert apply_patch(before, diff) == after

    def test_round_trip_with_awkward_keys(self):
        before = {"a/b": {"x~y": 1}}
        after = {"a/b": {"x~y": 2, "new": [1]}}
        assert apply_patch(before, compare(before, after)) == after


class TestApply:
    def test_input_is_untouched(self):
        doc = {"colors": {"brand": {"500": "#000000"}}}
        out = apply_patch(doc, [{"op": "replace", "path": "/colors/brand/500", "value": "#ffffff"}])
        assert out["colors"]["brand"]["500"] == "#ffffff"
        assert doc["colors"]["brand"]["500"] == "#000000"

    def test_failure_is_all_or_nothing(self):
        doc = {"a": 1}
        patch = [
            {"op": "replace", "path": "/a", "value": 2},
            {"op": "remove", "path": "/missing"},
        ]
        with pytest.raises(PatchError):
            apply_patch(doc, patch)
        assert doc == {"a": 1}

    def test_missing_parent(self):
        with pytest.raises(PatchError, match="Path not found"):
            apply_patch({}, [{"op": "add", "path": "/a/b", "value": 1}])

    def test_list_append_and_bounds(self):
        assert apply_patch({"l": [1]}, [{"op": "add", "path": "/l/-", "value": 2}]) == {"l": [1, 2]}
        with pytest.raises(PatchError):
            apply_patch({"l": [1]}, [{"op": "replace", "path": "/l/5", "value": 2}])
        with pytest.raises(PatchError):
            apply_patch({"l": [1]}, [{"op": "replace", "path": "/l/01", "value": 2}])

    def test_root_replace(self):
        assert apply_patch({"a": 1}, [{"op": "replace", "path": "", "value": {"b": 2}}]) == {"b": 2}


class TestUntrustedPatches:
    ALLOWED = ["/colors/brand", "/colors/accent"]

    def test_normalise_shapes(self):
        op = {"op": "remove", "path": "/a"}
        assert normalise_patch([op]) == [op]
        assert normalise_patch({"patch": [op]}) == [op]
        assert normalise_patch({"operations": [op]}) == [op]
        assert normalise_patch(op) == [op]
        with pytest.raises(PatchError):
            normalise_patch("not a patch")
        with pytest.raises(PatchError):
            normalise_patch({"colors": {}})

    def test_is_allowed_needs_a_segment_boundary(self):
        assert is_allowed("/colors/brand", self.ALLOWED)
        assert is_allowed("/colors/brand/500", self.ALLOWED)
        assert not is_allowed("/colors/brandNew", self.ALLOWED)
        assert not is_allowed("/colors", self.ALLOWED)

    def test_valid_patch_is_cleaned(self):
        raw = [{"op": "replace", "path": "/colors/brand/500", "value": "#112233", "comment": "x"}]
        assert validate_patch(raw, self.ALLOWED) == [
            {"op": "replace", "path": "/colors/brand/500", "value": "#112233"}
        ]

    @pytest.mark.parametrize(
        "bad",
        [
            {"op": "replace", "path": "/spacing/md", "value": "20px"},
            {"op": "move", "path": "/colors/brand/500", "from": "/colors/accent/500"},
            {"op": "replace", "path": "colors/brand/500", "value": "#000000"},
            {"op": "add", "path": "/colors/brand/950"},
            "replace everything",
        ],
    )
    def test_one_bad_operation_rejects_the_patch(self, bad):
        good = {"op": "replace", "path": "/colors/brand/500", "value": "#112233"}
        with pytest.raises(PatchError):
            validate_patch([good, bad], self.ALLOWED)

    def test_remove_needs_no_value(self):
        assert validate_patch([{"op": "remove", "path": "/colors/accent/50"}], self.ALLOWED) == [
            {"op": "remove", "path": "/colors/accent/50"}
        ]

    def test_explicit_null_value_is_accepted(self):
        ops = validate_patch([{"op": "add", "path": "/colors/brand/note", "value": None}], self.ALLOWED)
        assert ops == [{"op": "add", "path": "/colors/brand/note", "value": None}]
