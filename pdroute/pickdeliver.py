"""Pickup-and-delivery problems solved from a cost matrix or from coordinates."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Protocol, Sequence

_log = logging.getLogger(__name__)

#: Initial solution kinds tried when the caller asks for the best of them.
_FIRST_KIND = 1
_LAST_KIND = 6
#: Largest accepted initial solution identifier.
_MAX_INITIAL_ID = 7


class PickDeliverError(Exception):
    """Raised when a pickup-and-delivery problem cannot be solved.

    ``log`` holds whatever explains the failure in more detail.
    """

    def __init__(self, message: str, log: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.log = log


@dataclass(frozen=True)
class SolutionRow:
    """One stop of a solved route.

    ``stop_type`` counts from 0; :func:`numbered_rows` reports it from 1.
    """

    vehicle_seq: int
    vehicle_id: int
    stop_seq: int
    stop_type: int
    stop_id: int
    order_id: int
    cargo: int
    travel_time: int
    arrival_time: int
    wait_duration: int
    service_duration: int
    departure_time: int


class _Comparable(Protocol):
    def __lt__(self, other: Any) -> bool: ...


InitialBuilder = Callable[[int], Any]
"""Builds the initial solution of the given kind."""

ProblemBuilder = Callable[[Sequence[Any], Sequence[Any], set, float], InitialBuilder]
"""Builds a problem from orders, vehicles, node ids and factor; returns its initial builder."""

Optimizer = Callable[[Any, int, int], Iterable[SolutionRow]]
"""Optimizes a solution for a number of cycles and a kind; returns the result rows."""


def validate_parameters(factor: float, max_cycles: int, initial_solution_id: int) -> None:
    """Raise PickDeliverError when a parameter has an illegal value."""
    if initial_solution_id < 0 or initial_solution_id > _MAX_INITIAL_ID:
        raise PickDeliverError(
            "Illegal value in parameter: initial_sol",
            "Expected value: 0 <= initial_sol <= 7",
        )
    if max_cycles < 0:
        raise PickDeliverError(
            "Illegal value in parameter: max_cycles", "Expected value: max_cycles >= 0"
        )
    if factor <= 0:
        raise PickDeliverError(
            "Illegal value in parameter: factor", "Expected value: factor > 0"
        )


def assign_euclidean_nodes(
    orders: Iterable[Any], vehicles: Iterable[Any]
) -> tuple[list[Any], list[Any], dict[tuple[float, float], int]]:
    """Give every distinct coordinate a node id, numbered from 0 in coordinate order.

    Orders and vehicles are dataclass instances; the returned copies carry
    the node ids of their coordinates. The mapping from coordinate to node
    id is returned as well.
    """
    orders = list(orders)
    vehicles = list(vehicles)

    coordinates: set[tuple[float, float]] = set()
    for order in orders:
        coordinates.add((order.pick_x, order.pick_y))
        coordinates.add((order.deliver_x, order.deliver_y))
    for vehicle in vehicles:
        coordinates.add((vehicle.start_x, vehicle.start_y))
        coordinates.add((vehicle.end_x, vehicle.end_y))

    nodes = {point: node_id for node_id, point in enumerate(sorted(coordinates))}

    new_orders = [
        dataclasses.replace(
            order,
            pick_node_id=nodes[(order.pick_x, order.pick_y)],
            deliver_node_id=nodes[(order.deliver_x, order.deliver_y)],
        )
        for order in orders
    ]
    new_vehicles = [
        dataclasses.replace(
            vehicle,
            start_node_id=nodes[(vehicle.start_x, vehicle.start_y)],
            end_node_id=nodes[(vehicle.end_x, vehicle.end_y)],
        )
        for vehicle in vehicles
    ]
    return new_orders, new_vehicles, nodes


def collect_node_ids(orders: Iterable[Any], vehicles: Iterable[Any]) -> set[int]:
    """Node ids used by the orders' pickups and deliveries and the vehicles' ends."""
    node_ids: set[int] = set()
    for order in orders:
        node_ids.update((order.pick_node_id, order.deliver_node_id))
    for vehicle in vehicles:
        node_ids.update((vehicle.start_node_id, vehicle.end_node_id))
    return node_ids


def choose_initial_solution(build: InitialBuilder, initial_solution_id: int) -> Any:
    """Build the initial solution of the given kind.

    Kind 0 builds kinds 1 to 6 and keeps the smallest; on ties the earlier
    kind is kept.
    """
    if initial_solution_id != 0:
        return build(initial_solution_id)

    best: _Comparable = build(_FIRST_KIND)
    for kind in range(_FIRST_KIND + 1, _LAST_KIND + 1):
        candidate = build(kind)
        if candidate < best:
            best = candidate
    return best


def _solve(
    orders: Sequence[Any],
    vehicles: Sequence[Any],
    build: ProblemBuilder,
    optimize: Optimizer,
    node_ids: set[int],
    factor: float,
    max_cycles: int,
    initial_solution_id: int,
) -> list[SolutionRow]:
    initial_builder = build(orders, vehicles, node_ids, factor)
    solution = choose_initial_solution(initial_builder, initial_solution_id)
    rows = list(optimize(solution, max_cycles, initial_solution_id))
    _log.debug("solution size: %d", len(rows))
    return rows


def _read_input(orders: Iterable[Any], vehicles: Iterable[Any]) -> tuple[list[Any], list[Any]] | None:
    orders = list(orders)
    if not orders:
        _log.warning("Insufficient data found on 'orders' inner query")
        return None
    vehicles = list(vehicles)
    if not vehicles:
        _log.warning("Insufficient data found on 'vehicles' inner query")
        return None
    return orders, vehicles


def pick_deliver(
    orders: Iterable[Any],
    vehicles: Iterable[Any],
    build: ProblemBuilder,
    optimize: Optimizer,
    factor: float,
    max_cycles: int,
    initial_solution_id: int,
) -> list[SolutionRow]:
    """Solve a problem whose locations are node ids of a cost matrix.

    ``build`` receives the orders, vehicles, the node ids they use and the
    factor, and returns a builder of initial solutions by kind. Returns no
    rows when there are no orders or no vehicles.
    """
    validate_parameters(factor, max_cycles, initial_solution_id)
    data = _read_input(orders, vehicles)
    if data is None:
        return []
    orders, vehicles = data
    node_ids = collect_node_ids(orders, vehicles)
    return _solve(
        orders, vehicles, build, optimize, node_ids, factor, max_cycles, initial_solution_id
    )


def pick_deliver_euclidean(
    orders: Iterable[Any],
    vehicles: Iterable[Any],
    build: ProblemBuilder,
    optimize: Optimizer,
    factor: float,
    max_cycles: int,
    initial_solution_id: int,
) -> list[SolutionRow]:
    """Solve a problem whose locations are coordinates.

    Node ids are assigned to the coordinates before ``build`` is called.
    Returns no rows when there are no orders or no vehicles.
    """
    validate_parameters(factor, max_cycles, initial_solution_id)
    data = _read_input(orders, vehicles)
    if data is None:
        return []
    orders, vehicles, nodes = assign_euclidean_nodes(*data)
    node_ids = set(nodes.values())
    return _solve(
        orders, vehicles, build, optimize, node_ids, factor, max_cycles, initial_solution_id
    )


def numbered_rows(rows: Iterable[SolutionRow], with_stop_id: bool) -> list[tuple[int, ...]]:
    """Result tuples numbered from 1, with stop types counted from 1.

    The stop id column is present only when ``with_stop_id`` is true.
    """
    result: list[tuple[int, ...]] = []
    for seq, row in enumerate(rows, start=1):
        head = (seq, row.vehicle_seq, row.vehicle_id, row.stop_seq, row.stop_type + 1)
        middle = (row.stop_id,) if with_stop_id else ()
        tail = (
            row.order_id,
            row.cargo,
            row.travel_time,
            row.arrival_time,
            row.wait_duration,
            row.service_duration,
            row.departure_time,
        )
        result.append(head + middle + tail)
    return result