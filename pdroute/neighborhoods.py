"""Neighbourhood moves shared by the tabu search: insertions, swaps and repairs."""

from __future__ import annotations

import logging
from typing import AbstractSet, Iterable, MutableSequence, Protocol, Sequence

from pdroute.move import Move
from pdroute.tabu_list import TabuList

_log = logging.getLogger(__name__)

#: Smallest maximum length of the tabu list.
STANDARD_LIMIT = 30


class Order(Protocol):
    """What the neighbourhoods need from an order."""

    id: int
    idx: int


class Vehicle(Protocol):
    """What the neighbourhoods need from a vehicle.

    A phony vehicle holds the orders that no real vehicle serves yet.
    """

    id: int

    def is_phony(self) -> bool: ...

    def empty(self) -> bool: ...

    def orders_in_vehicle(self) -> AbstractSet[int]: ...

    def feasible_orders(self) -> AbstractSet[int]: ...

    def has_order(self, order: Order) -> bool: ...

    def hill_climb(self, order: Order) -> None: ...

    def erase(self, order: Order) -> None: ...

    def is_feasible(self) -> bool: ...

    def total_travel_time(self) -> float: ...

    def objective(self) -> float: ...

    def path_str(self) -> str: ...

    def copy(self) -> "Vehicle": ...


class Solution(Protocol):
    """What the neighbourhoods need from a solution."""

    fleet: MutableSequence[Vehicle]
    orders: Sequence[Order]

    def objective(self) -> float: ...

    def copy(self) -> "Solution": ...


def unassigned_orders(fleet: Iterable[Vehicle]) -> set[int]:
    """Indexes of the orders held by phony vehicles."""
    unassigned: set[int] = set()
    for vehicle in fleet:
        if vehicle.is_phony():
            unassigned |= set(vehicle.orders_in_vehicle())
    return unassigned


def are_all_served(unassigned: AbstractSet[int]) -> bool:
    """Whether no order is left on a phony vehicle."""
    return not unassigned


class TabuNeighborhoods:
    """Working solution, best solution found so far and the moves between them."""

    def __init__(self, solution: Solution) -> None:
        self.solution = solution.copy()
        self.best_solution = solution.copy()
        self.tabu_list = TabuList(max(len(self.solution.orders), STANDARD_LIMIT))
        self.unassigned = unassigned_orders(self.solution.fleet)

    @property
    def fleet(self) -> MutableSequence[Vehicle]:
        return self.solution.fleet

    @property
    def orders(self) -> Sequence[Order]:
        return self.solution.orders

    def objective(self) -> float:
        return self.solution.objective()

    def sort_by_size(self, ascending: bool) -> None:
        """Sort by number of orders, ties by id, with phony vehicles first."""
        fleet = self.fleet
        fleet[:] = sorted(
            fleet,
            key=lambda v: (len(v.orders_in_vehicle()), v.id),
            reverse=not ascending,
        )
        fleet[:] = [v for v in fleet if v.id < 0] + [v for v in fleet if v.id >= 0]

    def delete_empty_truck(self) -> None:
        """Drop phony vehicles that hold no orders."""
        self.fleet[:] = [
            v for v in self.fleet if not (v.is_phony() and not v.orders_in_vehicle())
        ]

    def move_to_real(self) -> bool:
        """Move orders from phony vehicles to the best real vehicle that takes them."""
        if are_all_served(self.unassigned):
            return False

        moved = False
        for phony in self.fleet:
            if not phony.is_phony() or phony.empty():
                continue
            for o_id in sorted(phony.orders_in_vehicle()):
                order = self.orders[o_id]
                best_score = 0.0
                best_vehicle: Vehicle | None = None

                for real in self.fleet:
                    if real is phony or real.is_phony():
                        continue
                    if o_id not in real.feasible_orders():
                        continue
                    if real.has_order(order):
                        continue

                    trial = real.copy()
                    current = phony.total_travel_time() + trial.total_travel_time()
                    trial.hill_climb(order)
                    if not trial.has_order(order):
                        continue

                    new = phony.total_travel_time() + trial.total_travel_time()
                    estimated = self.objective() + (new - current)
                    if best_score == 0 or estimated < best_score:
                        best_score = estimated
                        best_vehicle = real

                if best_score != 0 and best_vehicle is not None:
                    phony.erase(order)
                    best_vehicle.hill_climb(order)
                    self.unassigned.discard(order.idx)
                    self.best_solution = self.solution.copy()
                    moved = True

        if moved:
            self.tabu_list.clear()
        return moved

    def single_pair_insertion(self, intensify: bool, diversify: bool) -> bool:
        """Move the one order whose relocation best improves the objective."""
        self.sort_by_size(True)
        best_score = self.objective() if intensify else 0.0
        best_to_score = best_from_score = 0.0
        best_to_v: Vehicle | None = None
        best_from_v: Vehicle | None = None
        best_order: Order | None = None
        best_candidate = ""
        moved = False
        has_phony = False

        for from_vehicle in self.fleet:
            if from_vehicle.is_phony() or from_vehicle.empty():
                continue
            for o_id in sorted(from_vehicle.orders_in_vehicle()):
                order = self.orders[o_id]
                for to_v in self.fleet:
                    if to_v is from_vehicle:
                        continue
                    if to_v.is_phony():
                        has_phony = True
                        continue
                    if not has_phony and to_v.empty():
                        continue
                    if o_id not in to_v.feasible_orders():
                        continue

                    candidate = f"{to_v.path_str()}:{o_id}"
                    if self.tabu_list.has_infeasible(candidate):
                        continue
                    if diversify and self.tabu_list.has_seen(candidate):
                        continue

                    to_copy = to_v.copy()
                    from_copy = from_vehicle.copy()
                    current = from_copy.total_travel_time() + to_copy.total_travel_time()

                    to_copy.hill_climb(order)
                    if not to_copy.has_order(order):
                        self.tabu_list.add_infeasible(candidate)
                        continue

                    from_copy.erase(order)
                    if from_copy.has_order(order) or not from_copy.is_feasible():
                        continue

                    new = from_copy.total_travel_time() + to_copy.total_travel_time()
                    estimated = self.objective() + (new - current)

                    if estimated >= best_score and not from_copy.empty() and best_score != 0:
                        continue
                    if (
                        self.tabu_list.has_move(
                            from_copy, to_copy, order,
                            to_copy.objective(), from_copy.objective(),
                        )
                        and estimated >= self.best_solution.objective()
                        and not from_copy.empty()
                    ):
                        continue

                    if estimated < best_score or from_copy.empty() or best_score == 0:
                        moved = True
                        best_score = estimated
                        best_to_score = to_v.objective()
                        best_from_score = from_vehicle.objective()
                        best_to_v = to_v
                        best_from_v = from_vehicle
                        best_order = order
                        best_candidate = candidate

        if moved and best_to_v is not None and best_from_v is not None and best_order is not None:
            self.tabu_list.add(
                Move.for_move(best_from_v, best_to_v, best_order, best_to_score, best_from_score)
            )
            best_to_v.hill_climb(best_order)
            best_from_v.erase(best_order)
            self.tabu_list.add_seen(best_candidate)
            if best_from_v.is_phony():
                self.unassigned.discard(best_order.idx)
            self.save_if_best()
        return moved

    def swap_between_routes(self, intensify: bool, diversify: bool) -> bool:
        """Exchange the pair of orders between two vehicles that best improves the objective."""
        self.sort_by_size(False)
        best_score = self.objective() if intensify else 0.0
        best_to_score = best_from_score = 0.0
        best_to_v: Vehicle | None = None
        best_from_v: Vehicle | None = None
        best_from_order: Order | None = None
        best_to_order: Order | None = None
        best_candidate1 = best_candidate2 = ""
        swapped = False

        fleet = list(self.fleet)
        for i, from_vehicle in enumerate(fleet):
            if from_vehicle.is_phony() or from_vehicle.empty():
                continue
            for o_id1 in sorted(from_vehicle.orders_in_vehicle()):
                order1 = self.orders[o_id1]
                for to_v in fleet[i + 1:]:
                    if to_v is from_vehicle:
                        continue
                    if to_v.is_phony() or to_v.empty():
                        continue
                    if o_id1 not in to_v.feasible_orders():
                        continue

                    for o_id2 in sorted(to_v.orders_in_vehicle()):
                        order2 = self.orders[o_id2]
                        if o_id2 not in from_vehicle.feasible_orders():
                            continue

                        curr_from = from_vehicle.objective()
                        curr_to = to_v.objective()
                        from_copy = from_vehicle.copy()
                        to_copy = to_v.copy()

                        to_copy.erase(order2)
                        if o_id2 in to_copy.orders_in_vehicle() or not to_copy.is_feasible():
                            continue
                        candidate1 = f"{to_copy.path_str()}:{o_id1}"
                        if self.tabu_list.has_infeasible(candidate1):
                            continue

                        from_copy.erase(order1)
                        if o_id1 in from_copy.orders_in_vehicle() or not from_copy.is_feasible():
                            continue
                        candidate2 = f"{from_copy.path_str()}:{o_id2}"

                        if (
                            diversify
                            and self.tabu_list.has_seen(candidate1)
                            and self.tabu_list.has_seen(candidate2)
                        ):
                            continue
                        if self.tabu_list.has_infeasible(candidate2):
                            continue

                        to_copy.hill_climb(order1)
                        if not to_copy.has_order(order1) or not to_copy.is_feasible():
                            self.tabu_list.add_infeasible(candidate1)
                            continue

                        from_copy.hill_climb(order2)
                        if not from_copy.has_order(order2) or not from_copy.is_feasible():
                            self.tabu_list.add_infeasible(candidate2)
                            continue

                        delta = (to_copy.objective() + from_copy.objective()) - (curr_from + curr_to)
                        estimated = self.objective() + delta

                        if estimated >= best_score and best_score != 0:
                            continue
                        if (
                            self.tabu_list.has_swap(
                                from_copy, to_copy, order1, order2,
                                from_copy.objective(), to_copy.objective(),
                            )
                            and estimated >= self.best_solution.objective()
                        ):
                            continue

                        if estimated < best_score or best_score == 0:
                            swapped = True
                            best_from_score = from_vehicle.objective()
                            best_to_score = to_v.objective()
                            best_score = estimated
                            best_to_v = to_v
                            best_from_v = from_vehicle
                            best_from_order = order1
                            best_to_order = order2
                            best_candidate1 = candidate1
                            best_candidate2 = candidate2

        if (
            swapped
            and best_from_v is not None
            and best_to_v is not None
            and best_from_order is not None
            and best_to_order is not None
        ):
            self.tabu_list.add(
                Move.for_swap(
                    best_from_v, best_to_v, best_from_order, best_to_order,
                    best_to_score, best_from_score,
                )
            )
            best_from_v.erase(best_from_order)
            best_to_v.erase(best_to_order)
            best_from_v.hill_climb(best_to_order)
            best_to_v.hill_climb(best_from_order)
            self.tabu_list.add_seen(best_candidate1)
            self.tabu_list.add_seen(best_candidate2)
            if best_from_v.is_phony():
                self.unassigned.discard(best_from_order.idx)
                self.unassigned.add(best_to_order.idx)
            if best_to_v.is_phony():
                self.unassigned.discard(best_to_order.idx)
                self.unassigned.add(best_from_order.idx)
            self.save_if_best()
        return swapped

    def save_if_best(self) -> None:
        """Keep the working solution as best when its objective is smaller."""
        if self.objective() < self.best_solution.objective():
            self.best_solution = self.solution.copy()
            _log.debug("best objective %s", self.best_solution.objective())