from dataclasses import dataclass

from pdroute.move import Move
from pdroute.tabu_list import TabuList


@dataclass
class Thing:
    id: int


V1, V2, V3 = Thing(10), Thing(20), Thing(30)
O1, O2 = Thing(1), Thing(2)


def test_new_list_is_empty():
    tabu = TabuList(5)
    assert tabu.is_empty()
    assert len(tabu) == 0
    assert list(tabu) == []


def test_add_and_contains():
    tabu = TabuList(5)
    m = Move.for_move(V1, V2, O1, 0.0, 0.0)
    tabu.add(m)
    assert m in tabu
    assert len(tabu) == 1
    assert not tabu.is_empty()


def test_add_duplicate_is_ignored():
    tabu = TabuList(5)
    tabu.add(Move.for_move(V1, V2, O1, 0.0, 0.0))
    tabu.add(Move.for_move(V1, V2, O1, 5.0, 6.0))
    assert len(tabu) == 1


def test_oldest_dropped_at_max_length():
    tabu = TabuList(2)
    moves = [Move.for_move(V1, V2, Thing(i), 0.0, 0.0) for i in range(1, 5)]
    for m in moves:
        tabu.add(m)
    assert list(tabu) == moves[-2:]
    assert len(tabu) == tabu.max_length


def test_clear():
    tabu = TabuList(3)
    tabu.add(Move.for_move(V1, V2, O1, 0.0, 0.0))
    tabu.clear()
    assert tabu.is_empty()


def test_has_move_either_direction():
    tabu = TabuList(3)
    tabu.add(Move.for_move(V1, V2, O1, 0.0, 0.0))
    assert tabu.has_move(V1, V2, O1, 1.0, 1.0)
    assert tabu.has_move(V2, V1, O1, 1.0, 1.0)
    assert not tabu.has_move(V1, V3, O1, 1.0, 1.0)
    assert not tabu.has_move(V1, V2, O2, 1.0, 1.0)


def test_has_swap_all_arrangements():
    tabu = TabuList(3)
    tabu.add(Move.for_swap(V1, V2, O1, O2, 0.0, 0.0))
    assert tabu.has_swap(V1, V2, O1, O2, 0.0, 0.0)
    assert tabu.has_swap(V1, V2, O2, O1, 0.0, 0.0)
    assert tabu.has_swap(V2, V1, O1, O2, 0.0, 0.0)
    assert tabu.has_swap(V2, V1, O2, O1, 0.0, 0.0)
    assert not tabu.has_swap(V1, V3, O1, O2, 0.0, 0.0)


def test_move_is_not_swap():
    tabu = TabuList(3)
    tabu.add(Move.for_move(V1, V2, O1, 0.0, 0.0))
    assert not tabu.has_swap(V1, V2, O1, Thing(0), 0.0, 0.0)


def test_infeasible_set():
    tabu = TabuList(3)
    assert not tabu.has_infeasible("a:1")
    tabu.add_infeasible("a:1")
    assert tabu.has_infeasible("a:1")
    assert not tabu.has_seen("a:1")


def test_seen_set_survives_clear():
    tabu = TabuList(3)
    tabu.add_seen("b:2")
    tabu.clear()
    assert tabu.has_seen("b:2")
    assert not tabu.has_infeasible("b:2")


def test_str_lists_moves():
    tabu = TabuList(3)
    m = Move.for_move(V1, V2, O1, 0.0, 0.0)
    tabu.add(m)
    text = str(tabu)
    assert text.startswith("\nTabuList length: 1")
    assert f" *** tabu list start *** {m}  *** tabu list end ***\n" in text


def test_str_empty():
    assert str(TabuList(3)) == (
        "\nTabuList length: 0\n *><* *** tabu list start ***  *** tabu list end ***\n"
    )