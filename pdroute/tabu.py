"""Tabu search over a pickup-and-delivery solution."""

from __future__ import annotations

import logging

from pdroute.neighborhoods import (
    STANDARD_LIMIT,
    Solution,
    TabuNeighborhoods,
    are_all_served,
    unassigned_orders,
)

_log = logging.getLogger(__name__)

_MAX_NO_MOVES = 2
_MAX_NO_SWAPS = 2
_MAX_NO_IMPROVEMENT = 1000
_WANDER_LENGTH = 100
_INTENSIFY_ITERATIONS = 20


class TabuOptimizer(TabuNeighborhoods):
    """Optimizes a solution with a tabu search.

    After construction ``solution`` holds the best fleet found, with empty
    phony vehicles removed, and ``best_solution`` the best solution seen.
    """

    def __init__(
        self,
        solution: Solution,
        max_cycles: int,
        stop_on_all_served: bool,
        optimize: bool,
    ) -> None:
        super().__init__(solution)
        self.max_cycles = max_cycles
        self.stop_on_all_served = stop_on_all_served
        self.optimize = optimize

        self.tabu_search()
        self.delete_empty_truck()
        self.fleet[:] = [vehicle.copy() for vehicle in self.best_solution.fleet]
        _log.debug("best solution found: objective %s", self.objective())

    def _use_best_fleet(self) -> None:
        self.fleet[:] = [vehicle.copy() for vehicle in self.best_solution.fleet]

    def tabu_search(self) -> None:
        """Run the search cycles until a stopping condition is met."""
        self.sort_by_size(True)
        self.unassigned = unassigned_orders(self.fleet)

        self.move_to_real()
        self.delete_empty_truck()

        if not self.optimize:
            return
        if self.stop_on_all_served and are_all_served(self.unassigned):
            return

        self.tabu_list.max_length = max(len(self.orders), STANDARD_LIMIT)

        iteration = 0
        no_moves = 0
        stuck_counter = 0
        diversification = True
        intensification = False

        while iteration < self.max_cycles:
            curr_best = self.best_solution.objective()

            if stuck_counter == _MAX_NO_IMPROVEMENT:
                self.intensify()
                if self.best_solution.objective() == curr_best:
                    break

            use_insertion = no_moves < _MAX_NO_MOVES
            if use_insertion:
                moved = self.single_pair_insertion(False, False)
                self.delete_empty_truck()
            else:
                moved = self.swap_between_routes(False, False)
            if moved and not are_all_served(self.unassigned):
                self.move_to_real()

            if self.stop_on_all_served and are_all_served(self.unassigned):
                break

            if moved:
                no_moves = 0
            else:
                no_moves += 1
                if not use_insertion:
                    self.intensify()

            if no_moves >= _MAX_NO_SWAPS + _MAX_NO_MOVES:
                break

            if curr_best == self.best_solution.objective():
                stuck_counter += 1
                if stuck_counter % _WANDER_LENGTH == 0:
                    intensification = not intensification
                    diversification = not diversification
                    if intensification:
                        self.intensify()
                    if diversification:
                        self.diversify()
            else:
                stuck_counter = 0
            iteration += 1

    def intensify(self) -> None:
        """Return to the best solution and apply only improving moves."""
        self._use_best_fleet()

        do_insertion = True
        do_swap = True

        for _ in range(_INTENSIFY_ITERATIONS):
            if not do_insertion:
                break
            do_insertion = self.single_pair_insertion(True, False)
            if do_insertion and not are_all_served(self.unassigned):
                self.move_to_real()

        for _ in range(_INTENSIFY_ITERATIONS):
            if not do_swap:
                break
            do_swap = self.swap_between_routes(True, False)
            if do_insertion and not are_all_served(self.unassigned):
                self.move_to_real()

    def diversify(self) -> bool:
        """Move into unvisited parts of the search space; true when that succeeded."""
        max_swaps = min(len(self.fleet), len(self.orders) // 10)
        swaps_were_done = True
        done = 0
        while swaps_were_done and done < max_swaps:
            swaps_were_done = self.single_pair_insertion(False, True)
            if not swaps_were_done:
                swaps_were_done = self.swap_between_routes(False, True)
            if not swaps_were_done:
                swaps_were_done = self.swap_between_routes(False, False)
            if swaps_were_done and not are_all_served(self.unassigned):
                self.move_to_real()
            done += 1
        return swaps_were_done