# tests/test_ordering.py — Position arithmetic
from ordering import (
    apply_shifts, changed, clamp_index, compact, densify, insert_shifts,
    is_dense, move_shifts, remove_shifts,
)


def _apply_move(positions, item, index):
    return apply_shifts(positions, move_shifts(positions, item, index))


class TestClampIndex:
    def test_none_appends(self):
        assert clamp_index(None, 3) == 3

    def test_past_end_appends(self):
        assert clamp_index(10, 3) == 3

    def test_negative_is_front(self):
        assert clamp_index(-2, 3) == 0

    def test_in_range_kept(self):
        assert clamp_index(1, 3) == 1


class TestInsert:
    def test_insert_before_shifts_tail(self):
        index, shifts = insert_shifts({"a": 0, "b": 1, "c": 2}, 1)
        assert index == 1
        assert shifts == {"b": 2, "c": 3}

    def test_default_is_append_with_no_shifts(self):
        index, shifts = insert_shifts({"a": 0, "b": 1})
        assert index == 2
        assert shifts == {}

    def test_insert_into_empty(self):
        assert insert_shifts({}, 5) == (0, {})

    def test_result_is_dense(self):
        current = {"a": 0, "b": 1, "c": 2}
        index, shifts = insert_shifts(current, 0)
        assert is_dense({**apply_shifts(current, shifts), "new": index})


class TestRemove:
    def test_closes_gap(self):
        # "b" at 1 was removed
        assert remove_shifts({"a": 0, "c": 2, "d": 3}, 1) == {"c": 1, "d": 2}

    def test_remove_last_changes_nothing(self):
        assert remove_shifts({"a": 0, "b": 1}, 2) == {}


class TestMove:
    def test_move_down(self):
        current = {"a": 0, "b": 1, "c": 2, "d": 3}
        assert _apply_move(current, "a", 2) == {"b": 0, "c": 1, "a": 2, "d": 3}

    def test_move_up(self):
        current = {"a": 0, "b": 1, "c": 2, "d": 3}
        assert _apply_move(current, "d", 1) == {"a": 0, "d": 1, "b": 2, "c": 3}

    def test_only_elements_between_shift(self):
        shifts = move_shifts({"a": 0, "b": 1, "c": 2, "d": 3, "e": 4}, "b", 3)
        assert shifts == {"c": 1, "d": 2, "b": 3}

    def test_same_index_is_empty(self):
        assert move_shifts({"a": 0, "b": 1}, "b", 1) == {}

    def test_past_end_clamps_to_last(self):
        current = {"a": 0, "b": 1, "c": 2}
        assert _apply_move(current, "a", 99) == {"b": 0, "c": 1, "a": 2}

    def test_every_move_keeps_density(self):
        current = {item: pos for pos, item in enumerate("abcde")}
        for item in current:
            for index in range(len(current)):
                assert is_dense(_apply_move(current, item, index))


class TestCompact:
    def test_gaps_are_closed(self):
        assert densify({"a": 0, "b": 3, "c": 7}) == {"a": 0, "b": 1, "c": 2}

    def test_duplicates_broken_by_id(self):
        assert densify({2: 1, 1: 1, 3: 0}) == {3: 0, 1: 1, 2: 2}

    def test_dense_input_needs_no_changes(self):
        assert compact({"a": 0, "b": 1}) == {}

    def test_changed_lists_only_differences(self):
        assert changed({"a": 0, "b": 2}, {"a": 0, "b": 1}) == {"b": 1}

    def test_is_dense(self):
        assert is_dense({})
        assert is_dense({"a": 1, "b": 0})
        assert not is_dense({"a": 0, "b": 2})
        assert not is_dense({"a": 0, "b": 0})
