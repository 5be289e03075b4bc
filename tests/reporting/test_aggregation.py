"""Tests for the group_reduce primitive and item flattening."""

from billing_modules.reporting.aggregation import add_distinct, group_reduce, iter_items

from tests.factories import make_bill, make_item


def _count(records, key):
    return group_reduce(
        records,
        key=key,
        initial=lambda _, __: 0,
        update=lambda acc, _: acc + 1,
    )


class TestGroupReduce:
    """Ordered key -> accumulator folding."""

    def test_empty_input_gives_empty_mapping(self):
        assert _count([], key=lambda r: r) == {}

    def test_keys_in_first_seen_order(self):
        result = _count(["b", "a", "b", "c", "a"], key=lambda r: r)
        assert list(result) == ["b", "a", "c"]
        assert result == {"b": 2, "a": 2, "c": 1}

    def test_none_key_skips_record(self):
        result = _count([1, None, 2, None], key=lambda r: r)
        assert result == {1: 1, 2: 1}

    def test_initial_sees_first_record(self):
        result = group_reduce(
            [("k", "first"), ("k", "second")],
            key=lambda r: r[0],
            initial=lambda key, record: (key, record[1], 0),
            update=lambda acc, _: (acc[0], acc[1], acc[2] + 1),
        )
        assert result == {"k": ("k", "first", 2)}

    def test_input_is_read_once(self):
        result = _count(iter(range(6)), key=lambda r: r % 2)
        assert result == {0: 3, 1: 3}


class TestAddDistinct:
    def test_appends_new(self):
        assert add_distinct(("a",), "b") == ("a", "b")

    def test_ignores_duplicate(self):
        ids = ("a", "b")
        assert add_distinct(ids, "a") is ids


class TestIterItems:
    def test_flattens_in_bill_then_item_order(self):
        first = make_bill("B-001", items=(make_item("A", "B"), make_item("B", "C")))
        second = make_bill("B-002", items=(make_item("C", "D"),))
        pairs = list(iter_items([first, second]))
        assert [(b.bill_number, i.origin) for b, i in pairs] == [
            ("B-001", "A"),
            ("B-001", "B"),
            ("B-002", "C"),
        ]

    def test_bill_without_items(self):
        assert list(iter_items([make_bill(items=())])) == []
