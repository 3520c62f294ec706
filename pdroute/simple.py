"""Local search that shrinks the fleet and swaps orders to cut total duration."""

from __future__ import annotations

import enum
import logging
from typing import AbstractSet, MutableSequence, Protocol, Sequence

_log = logging.getLogger(__name__)


class InitialsCode(enum.IntEnum):
    """Kind of initial solution the optimized solution was built with."""

    ONE_TRUCK = 0
    ONE_DEPOT = 1
    FRONT_TRUCK = 2
    BACK_TRUCK = 3
    BEST_INSERT = 4
    BEST_BACK = 5
    BEST_FRONT = 6


class Order(Protocol):
    """What the optimizer needs from an order."""

    id: int
    idx: int


class Vehicle(Protocol):
    """What the optimizer needs from a vehicle.

    ``len(vehicle)`` is the number of stops on its route.
    """

    id: int

    def __len__(self) -> int: ...

    def is_phony(self) -> bool: ...

    def empty(self) -> bool: ...

    def orders_in_vehicle(self) -> AbstractSet[int]: ...

    def has_order(self, order: Order) -> bool: ...

    def hill_climb(self, order: Order) -> None: ...

    def semi_lifo(self, order: Order) -> None: ...

    def erase(self, order: Order) -> None: ...

    def duration(self) -> float: ...

    def copy(self) -> "Vehicle": ...


class Solution(Protocol):
    """What the optimizer needs from a solution."""

    fleet: MutableSequence[Vehicle]
    orders: Sequence[Order]

    def duration(self) -> float: ...

    def copy(self) -> "Solution": ...


class SimpleOptimizer:
    """Optimizes a solution by removing trucks and swapping orders.

    After construction ``solution`` holds the best fleet found, sorted by
    number of orders, and ``best_solution`` the best solution seen.
    """

    def __init__(self, solution: Solution, times: int, kind: InitialsCode) -> None:
        self.solution = solution.copy()
        self.best_solution = solution.copy()
        self.kind = InitialsCode(kind)

        self.inter_swap(times)
        self.fleet[:] = [vehicle.copy() for vehicle in self.best_solution.fleet]
        self._sort_by_size()
        _log.debug("best solution found: duration %s", self.duration())

    @property
    def fleet(self) -> MutableSequence[Vehicle]:
        return self.solution.fleet

    @property
    def orders(self) -> Sequence[Order]:
        return self.solution.orders

    def duration(self) -> float:
        return self.solution.duration()

    def inter_swap(self, times: int) -> None:
        """Decrease the fleet, then run ``times`` swapping cycles rotating the fleet."""
        self._sort_by_size()
        self.decrease_truck()
        self._sort_by_size()

        for cycle in range(1, times + 1):
            _log.debug("cycle %d", cycle)
            self._inter_swap_cycle()
            fleet = self.fleet
            if fleet:
                fleet[:] = list(fleet[1:]) + list(fleet[:1])

    def decrease_truck(self) -> None:
        """Empty later trucks into earlier ones and drop the trucks left empty."""
        while True:
            decreased = False
            for position in range(1, len(self.fleet)):
                decreased = self._decrease_truck_at(position) or decreased
            if not decreased:
                break
            self._delete_empty_truck()
            self._save_if_best()
        self._save_if_best()

    def _decrease_truck_at(self, position: int) -> bool:
        fleet = self.fleet
        for o_id in sorted(fleet[position].orders_in_vehicle()):
            order = self.orders[o_id]
            for earlier in list(fleet[:position]):
                earlier.hill_climb(order)
                if earlier.has_order(order):
                    fleet[position].erase(order)
                    break
        return not fleet[position].orders_in_vehicle()

    def _inter_swap_cycle(self) -> None:
        self._delete_empty_truck()
        for from_idx in range(len(self.fleet)):
            for to_idx in range(from_idx):
                self._swap_worse(to_idx, from_idx)
                self._move_reduce_cost(self.fleet[from_idx], self.fleet[to_idx])
        self._delete_empty_truck()

    def _insert(self, vehicle: Vehicle, order: Order) -> None:
        if self.kind == InitialsCode.ONE_DEPOT:
            vehicle.semi_lifo(order)
        else:
            vehicle.hill_climb(order)

    def _swap_worse(self, to_idx: int, from_idx: int) -> None:
        fleet = self.fleet
        from_truck = fleet[from_idx].copy()
        to_truck = fleet[to_idx].copy()
        to_orders = sorted(to_truck.orders_in_vehicle())

        for from_id in sorted(from_truck.orders_in_vehicle()):
            from_order = self.orders[from_id]

            if self._move_order(from_order, from_truck, to_truck):
                fleet[to_idx] = to_truck.copy()
                fleet[from_idx] = from_truck.copy()
                continue

            curr_from_duration = from_truck.duration()
            for to_id in to_orders:
                to_order = self.orders[to_id]
                if not to_truck.has_order(to_order):
                    continue

                curr_to_duration = to_truck.duration()
                from_truck.erase(from_order)
                to_truck.erase(to_order)
                self._insert(from_truck, to_order)
                self._insert(to_truck, from_order)

                if from_truck.has_order(to_order) and to_truck.has_order(from_order):
                    new_from_duration = from_truck.duration()
                    new_to_duration = to_truck.duration()
                    delta = (new_to_duration + new_from_duration) - (
                        curr_from_duration + curr_to_duration
                    )
                    estimated = self.duration() + delta
                    if (
                        new_from_duration < curr_from_duration
                        or delta < 0
                        or estimated < self.best_solution.duration()
                    ):
                        fleet[to_idx] = to_truck.copy()
                        fleet[from_idx] = from_truck.copy()
                        break

                to_truck = fleet[to_idx].copy()
                from_truck = fleet[from_idx].copy()

    def _move_reduce_cost(self, from_vehicle: Vehicle, to_vehicle: Vehicle) -> bool:
        from_truck = from_vehicle.copy()
        to_truck = to_vehicle.copy()
        if to_truck.empty():
            return False
        if not from_truck.is_phony() and to_truck.is_phony():
            return False

        moved = False
        for o_id in sorted(from_truck.orders_in_vehicle()):
            order = self.orders[o_id]
            curr_duration = from_truck.duration() + to_truck.duration()
            self._insert(to_truck, order)
            if not to_truck.has_order(order):
                continue

            from_truck.erase(order)
            new_duration = from_truck.duration() + to_truck.duration()
            if (
                new_duration < curr_duration
                or from_truck.empty()
                or new_duration < self.best_solution.duration()
            ):
                moved = True
                self._save_if_best()
                continue

            to_truck.erase(order)
            self._insert(from_truck, order)
        return moved

    def _move_order(self, order: Order, from_truck: Vehicle, to_truck: Vehicle) -> bool:
        if to_truck.empty():
            return False
        if not from_truck.is_phony() and to_truck.is_phony():
            return False
        if len(from_truck) > len(to_truck):
            return False

        self._insert(to_truck, order)
        if to_truck.has_order(order):
            from_truck.erase(order)
            return True
        return False

    def _sort_by_size(self) -> None:
        fleet = self.fleet
        by_duration = sorted(fleet, key=lambda v: v.duration(), reverse=True)
        fleet[:] = sorted(by_duration, key=lambda v: len(v.orders_in_vehicle()), reverse=True)

    def _delete_empty_truck(self) -> None:
        self.fleet[:] = [v for v in self.fleet if v.orders_in_vehicle()]
        self._save_if_best()

    def _save_if_best(self) -> None:
        if self.duration() < self.best_solution.duration():
            self.best_solution = self.solution.copy()
            _log.debug("best by duration %s", self.best_solution.duration())
        if len(self.fleet) < len(self.best_solution.fleet):
            self.best_solution = self.solution.copy()
            _log.debug("best by fleet size %d", len(self.best_solution.fleet))