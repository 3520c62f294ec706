from __future__ import annotations

from dataclasses import dataclass

from pdroute.move import Move
from pdroute.neighborhoods import (
    TabuNeighborhoods,
    are_all_served,
    unassigned_orders,
)


@dataclass(frozen=True)
class FakeOrder:
    id: int
    idx: int
    weight: float


class FakeVehicle:
    def __init__(self, vid, factor, capacity, orders=(), feasible=None):
        self.id = vid
        self.factor = factor
        self.capacity = capacity
        self.orders = list(orders)
        self.feasible = set(feasible) if feasible is not None else set()

    def is_phony(self):
        return self.id < 0

    def empty(self):
        return not self.orders

    def orders_in_vehicle(self):
        return {o.idx for o in self.orders}

    def feasible_orders(self):
        return self.feasible

    def has_order(self, order):
        return any(o.idx == order.idx for o in self.orders)

    def hill_climb(self, order):
        if order.idx in self.feasible and len(self.orders) < self.capacity and not self.has_order(order):
            self.orders.append(order)

    def erase(self, order):
        self.orders = [o for o in self.orders if o.idx != order.idx]

    def is_feasible(self):
        return len(self.orders) <= self.capacity

    def total_travel_time(self):
        return self.factor * sum(o.weight for o in self.orders)

    def objective(self):
        return self.total_travel_time()

    def path_str(self):
        return f"{self.id}[{','.join(str(o.id) for o in self.orders)}]"

    def copy(self):
        return FakeVehicle(self.id, self.factor, self.capacity, self.orders, self.feasible)


class FakeSolution:
    def __init__(self, fleet, orders):
        self.fleet = fleet
        self.orders = orders

    def objective(self):
        return sum(v.objective() for v in self.fleet)

    def copy(self):
        return FakeSolution([v.copy() for v in self.fleet], self.orders)


def make_orders(*weights):
    return [FakeOrder(id=100 + i, idx=i, weight=w) for i, w in enumerate(weights)]


def by_id(nb, vid):
    return next(v for v in nb.fleet if v.id == vid)


def test_unassigned_orders_only_from_phony():
    orders = make_orders(1, 2, 3)
    fleet = [
        FakeVehicle(-1, 100, 10, [orders[0], orders[2]]),
        FakeVehicle(1, 1, 10, [orders[1]]),
    ]
    assert unassigned_orders(fleet) == {0, 2}


def test_are_all_served():
    assert are_all_served(set())
    assert not are_all_served({3})


def test_sort_by_size_ascending_and_descending():
    orders = make_orders(1, 1, 1, 1)
    fleet = [
        FakeVehicle(3, 1, 10, orders[0:2]),
        FakeVehicle(1, 1, 10, orders[2:3]),
        FakeVehicle(-1, 100, 10, orders[3:4]),
        FakeVehicle(2, 1, 10, []),
        FakeVehicle(4, 1, 10, []),
    ]
    nb = TabuNeighborhoods(FakeSolution(fleet, orders))
    nb.sort_by_size(True)
    assert [v.id for v in nb.fleet] == [-1, 2, 4, 1, 3]
    nb.sort_by_size(False)
    assert [v.id for v in nb.fleet] == [-1, 3, 1, 4, 2]


def test_delete_empty_truck_keeps_real_vehicles():
    orders = make_orders(1)
    fleet = [
        FakeVehicle(-1, 100, 10, []),
        FakeVehicle(-2, 100, 10, orders),
        FakeVehicle(1, 1, 10, []),
    ]
    nb = TabuNeighborhoods(FakeSolution(fleet, orders))
    nb.delete_empty_truck()
    assert sorted(v.id for v in nb.fleet) == [-2, 1]


def test_construction_copies_solution():
    orders = make_orders(2)
    original = FakeSolution([FakeVehicle(1, 1, 10, orders, {0})], orders)
    nb = TabuNeighborhoods(original)
    nb.fleet[0].erase(orders[0])
    assert original.fleet[0].has_order(orders[0])
    assert nb.best_solution.objective() == original.objective()


def test_move_to_real_assigns_to_cheapest_vehicle():
    orders = make_orders(2, 1)
    fleet = [
        FakeVehicle(-1, 100, 10, [orders[0]], {0, 1}),
        FakeVehicle(1, 3, 10, [orders[1]], {0, 1}),
        FakeVehicle(2, 1, 10, [], {0, 1}),
    ]
    nb = TabuNeighborhoods(FakeSolution(fleet, orders))
    nb.tabu_list.add(Move(vid1=1, vid2=2, oid1=100))
    assert nb.move_to_real() is True
    assert by_id(nb, 2).has_order(orders[0])
    assert not by_id(nb, -1).has_order(orders[0])
    assert not by_id(nb, 1).has_order(orders[0])
    assert are_all_served(nb.unassigned)
    assert nb.tabu_list.is_empty()
    assert nb.best_solution.objective() == nb.objective()


def test_move_to_real_when_all_served():
    orders = make_orders(1)
    fleet = [FakeVehicle(1, 1, 10, orders, {0})]
    nb = TabuNeighborhoods(FakeSolution(fleet, orders))
    assert nb.move_to_real() is False
    assert by_id(nb, 1).has_order(orders[0])


def test_move_to_real_skips_infeasible_vehicles():
    orders = make_orders(1)
    fleet = [
        FakeVehicle(-1, 100, 10, orders, {0}),
        FakeVehicle(1, 1, 10, [], set()),
    ]
    nb = TabuNeighborhoods(FakeSolution(fleet, orders))
    assert nb.move_to_real() is False
    assert nb.unassigned == {0}


def test_single_pair_insertion_moves_to_cheaper_vehicle():
    orders = make_orders(4, 1, 2)
    a = FakeVehicle(1, 5, 3, [orders[0]], {0, 1, 2})
    b = FakeVehicle(2, 1, 3, [orders[1], orders[2]], {0, 1, 2})
    nb = TabuNeighborhoods(FakeSolution([a, b], orders))
    before = nb.objective()
    path_before = by_id(nb, 2).path_str()

    assert nb.single_pair_insertion(False, False) is True
    assert by_id(nb, 1).empty()
    assert by_id(nb, 2).orders_in_vehicle() == {0, 1, 2}
    assert nb.objective() < before
    assert Move(vid1=1, vid2=2, oid1=100) in nb.tabu_list
    assert nb.tabu_list.has_seen(f"{path_before}:0")
    assert nb.best_solution.objective() == nb.objective()


def test_single_pair_insertion_records_infeasible():
    orders = make_orders(1, 1)
    a = FakeVehicle(1, 1, 1, [orders[0]], {0, 1})
    b = FakeVehicle(2, 1, 1, [orders[1]], {0, 1})
    nb = TabuNeighborhoods(FakeSolution([a, b], orders))
    assert nb.single_pair_insertion(False, False) is False
    assert nb.tabu_list.has_infeasible(f"{b.path_str()}:0")
    assert nb.tabu_list.has_infeasible(f"{a.path_str()}:1")
    assert nb.tabu_list.is_empty()


def test_swap_between_routes_exchanges_orders():
    orders = make_orders(10, 1)
    a = FakeVehicle(1, 5, 1, [orders[0]], {0, 1})
    b = FakeVehicle(2, 1, 1, [orders[1]], {0, 1})
    nb = TabuNeighborhoods(FakeSolution([a, b], orders))
    before = nb.objective()

    assert nb.swap_between_routes(False, False) is True
    assert by_id(nb, 1).orders_in_vehicle() == {1}
    assert by_id(nb, 2).orders_in_vehicle() == {0}
    assert nb.objective() < before
    assert Move(vid1=2, vid2=1, oid1=101, oid2=100, is_swap=True) in nb.tabu_list
    assert nb.best_solution.objective() == nb.objective()


def test_swap_between_routes_needs_feasibility():
    orders = make_orders(10, 1)
    a = FakeVehicle(1, 5, 1, [orders[0]], {0})
    b = FakeVehicle(2, 1, 1, [orders[1]], {1})
    nb = TabuNeighborhoods(FakeSolution([a, b], orders))
    assert nb.swap_between_routes(False, False) is False
    assert by_id(nb, 1).orders_in_vehicle() == {0}
    assert by_id(nb, 2).orders_in_vehicle() == {1}


def test_save_if_best_only_keeps_improvements():
    orders = make_orders(3, 2)
    fleet = [FakeVehicle(1, 1, 10, orders, {0, 1})]
    nb = TabuNeighborhoods(FakeSolution(fleet, orders))
    original_best = nb.best_solution.objective()

    nb.fleet[0].erase(orders[0])
    nb.save_if_best()
    assert nb.best_solution.objective() == nb.objective()
    assert nb.best_solution.objective() < original_best

    improved = nb.best_solution.objective()
    nb.fleet[0].hill_climb(orders[0])
    nb.save_if_best()
    assert nb.best_solution.objective() == improved
    assert nb.objective() > improved