from skistandings.ranking import assign_ranks, points_for_place


def test_points_for_place_inside_and_outside_field():
    assert points_for_place(1, 30) == 30
    assert points_for_place(30, 30) == 1
    assert points_for_place(31, 30) == 0
    assert points_for_place(0, 30) == 0
    assert points_for_place(-2, 30) == 0
    assert points_for_place(None, 30) == 0


def test_tied_values_share_rank_and_next_rank_skips():
    values = [61000, 61000, 62000, 63000]
    ranked = assign_ranks(values, key=lambda v: v)
    places = [rank for _, rank in ranked]
    assert places == [1, 1, 3, 4]
    assert [points_for_place(p, 4) for p in places] == [4, 4, 2, 1]


def test_rank_after_tie_block_is_sorted_position():
    ranked = assign_ranks([3, 1, 3, 2, 1, 4], key=lambda v: v)
    assert [v for v, _ in ranked] == [1, 1, 2, 3, 3, 4]
    assert [rank for _, rank in ranked] == [1, 1, 3, 4, 4, 6]


def test_none_values_are_not_ranked():
    items = [{"id": "a", "t": None}, {"id": "b", "t": 50}, {"id": "c", "t": 40}]
    ranked = assign_ranks(items, key=lambda i: i["t"])
    assert [(i["id"], rank) for i, rank in ranked] == [("c", 1), ("b", 2)]


def test_ties_keep_input_order():
    items = [("first", 10), ("second", 10), ("third", 5)]
    ranked = assign_ranks(items, key=lambda i: i[1])
    assert [name for (name, _), _ in ranked] == ["third", "first", "second"]
    assert [rank for _, rank in ranked] == [1, 2, 2]


def test_empty_input():
    assert assign_ranks([], key=lambda v: v) == []
