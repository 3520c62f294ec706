"""Re-optimization of vehicles whose stops are already known."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Protocol, Sequence, TextIO

_log = logging.getLogger(__name__)


class OptimizeError(Exception):
    """Raised when the optimization cannot be carried out.

    ``log`` holds whatever explains the failure in more detail.
    """

    def __init__(self, message: str, log: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.log = log


@dataclass(frozen=True)
class OrderData:
    """A pickup-and-delivery order with its time windows."""

    id: int
    pick_node_id: int
    deliver_node_id: int
    pick_open_t: int = 0
    pick_close_t: int = 0
    deliver_open_t: int = 0
    deliver_close_t: int = 0
    demand: int = 0
    pick_service_t: int = 0
    deliver_service_t: int = 0


@dataclass(frozen=True)
class VehicleData:
    """A vehicle, its time windows and the orders on its stops, in visiting order."""

    id: int
    start_node_id: int
    end_node_id: int
    start_open_t: int = 0
    start_close_t: int = 0
    end_open_t: int = 0
    end_close_t: int = 0
    capacity: int = 0
    start_service_t: int = 0
    end_service_t: int = 0
    stops: tuple[int, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ShortVehicle:
    """A vehicle identifier with the order identifiers of its stops."""

    id: int
    stops: tuple[int, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class OptimizeRow:
    """One stop of the optimized result."""

    seq: int
    vehicle_id: int
    order_id: int


class Solver(Protocol):
    """Solves one problem given its orders, vehicles and stops that override theirs."""

    def __call__(
        self,
        orders: Sequence[OrderData],
        vehicles: Sequence[VehicleData],
        stops: Sequence[ShortVehicle],
        *,
        factor: float,
        max_cycles: int,
        execution_date: int,
    ) -> Sequence[ShortVehicle]: ...


StepSolver = Callable[
    [Sequence[OrderData], Sequence[VehicleData], Sequence[ShortVehicle]],
    Sequence[ShortVehicle],
]


def validate_parameters(subdivision_kind: int, max_cycles: int, factor: float) -> bool:
    """Check the parameters.

    Raises OptimizeError for an illegal ``max_cycles`` or ``factor``; returns
    False, after a warning, for an illegal ``subdivision_kind``.
    """
    if subdivision_kind < 0 or subdivision_kind > 2:
        _log.warning(
            "Illegal value in parameter: subdivision_kind "
            "(Expected value: 0 <= subdivision_kind < 2)"
        )
        return False
    if max_cycles < 0:
        raise OptimizeError(
            "Illegal value in parameter: max_cycles", "Expected value: max_cycles >= 0"
        )
    if factor <= 0:
        raise OptimizeError(
            "Illegal value in parameter: factor", "Expected value: factor > 0"
        )
    return True


def processing_times_by_order(orders: Iterable[OrderData]) -> list[int]:
    """Sorted distinct times at which an order window opens or closes."""
    times: set[int] = set()
    for order in orders:
        times.update(
            (order.pick_open_t, order.pick_close_t, order.deliver_open_t, order.deliver_close_t)
        )
    return sorted(times)


def processing_times_by_vehicle(vehicles: Iterable[VehicleData]) -> list[int]:
    """Sorted distinct times at which a vehicle window opens or closes."""
    times: set[int] = set()
    for vehicle in vehicles:
        times.update(
            (vehicle.start_open_t, vehicle.start_close_t, vehicle.end_open_t, vehicle.end_close_t)
        )
    return sorted(times)


def initial_stops(vehicles: Iterable[VehicleData]) -> list[ShortVehicle]:
    """The stops the vehicles start with."""
    return [ShortVehicle(vehicle.id, tuple(vehicle.stops)) for vehicle in vehicles]


def update_stops(
    stops: Sequence[ShortVehicle], new_values: Iterable[ShortVehicle]
) -> list[ShortVehicle]:
    """Return ``stops`` with the stops of the vehicles in ``new_values`` replaced."""
    replacements = {value.id: value.stops for value in new_values}
    known = {vehicle.id for vehicle in stops}
    unknown = set(replacements) - known
    if unknown:
        raise OptimizeError(f"Vehicle not found for update: {sorted(unknown)}")
    return [
        ShortVehicle(vehicle.id, tuple(replacements.get(vehicle.id, vehicle.stops)))
        for vehicle in stops
    ]


def select_vehicles(
    vehicles: Iterable[VehicleData], execution_date: int
) -> list[VehicleData]:
    """Vehicles sorted by id, without duplicates and without those closed before the date."""
    unique: dict[int, VehicleData] = {}
    for vehicle in sorted(vehicles, key=lambda v: v.id):
        unique.setdefault(vehicle.id, vehicle)
    return [v for v in unique.values() if v.end_close_t >= execution_date]


def select_orders(
    orders: Iterable[OrderData], vehicles: Iterable[VehicleData]
) -> list[OrderData]:
    """Orders sorted by id, without duplicates, keeping only those on the vehicles' stops."""
    on_stops = {order_id for vehicle in vehicles for order_id in vehicle.stops}
    unique: dict[int, OrderData] = {}
    for order in sorted(orders, key=lambda o: o.id):
        unique.setdefault(order.id, order)
    return [o for o in unique.values() if o.id in on_stops]


def subdivide_processing(
    orders: Sequence[OrderData],
    vehicles: Sequence[VehicleData],
    solver: StepSolver,
    subdivide_by_vehicle: bool,
    log: TextIO,
) -> list[ShortVehicle]:
    """Optimize incrementally at each time a vehicle (or order) window opens or closes."""
    the_stops = initial_stops(vehicles)
    times = (
        processing_times_by_vehicle(vehicles)
        if subdivide_by_vehicle
        else processing_times_by_order(orders)
    )

    previous: set[int] = set()
    for t in times:
        active_vehicles = [v for v in vehicles if v.start_open_t <= t <= v.end_close_t]
        current = {sv.id: sv.stops for sv in the_stops}
        orders_in_stops = {
            order_id for v in active_vehicles for order_id in current.get(v.id, ())
        }

        if not orders_in_stops or orders_in_stops == previous:
            continue
        log.write(f"\nOptimizing at time: {t}")
        previous = orders_in_stops

        active_orders = [o for o in orders if o.id in orders_in_stops]
        new_stops = solver(active_orders, active_vehicles, the_stops)
        the_stops = update_stops(the_stops, new_stops)

    return the_stops


def optimize(
    orders: Iterable[OrderData],
    vehicles: Iterable[VehicleData],
    solver: Solver,
    factor: float,
    max_cycles: int,
    execution_date: int,
    subdivision_kind: int,
) -> list[OptimizeRow]:
    """Re-optimize the stops of the vehicles.

    ``subdivision_kind`` is 0 for a single optimization, 1 to subdivide by
    vehicle time windows and 2 to subdivide by order time windows.
    """
    if not validate_parameters(subdivision_kind, max_cycles, factor):
        return []

    orders = list(orders)
    if not orders:
        _log.warning("Insufficient data found on 'orders' inner query")
        return []
    vehicles = list(vehicles)
    if not vehicles:
        _log.warning("Insufficient data found on 'vehicles' inner query")
        return []

    vehicles = select_vehicles(vehicles, execution_date)
    order_ids = {order_id for vehicle in vehicles for order_id in vehicle.stops}
    orders = select_orders(orders, vehicles)
    missing = order_ids - {order.id for order in orders}
    if missing:
        raise OptimizeError(
            "Missing orders for processing", f"Shipments missing: {sorted(missing)}"
        )

    def step(
        step_orders: Sequence[OrderData],
        step_vehicles: Sequence[VehicleData],
        stops: Sequence[ShortVehicle],
    ) -> Sequence[ShortVehicle]:
        return solver(
            step_orders,
            step_vehicles,
            stops,
            factor=factor,
            max_cycles=max_cycles,
            execution_date=execution_date,
        )

    if subdivision_kind != 0:
        messages: list[str] = []

        class _Collector:
            def write(self, text: str) -> int:
                messages.append(text)
                return len(text)

        solution = subdivide_processing(
            orders, vehicles, step, subdivision_kind == 1, _Collector()  # type: ignore[arg-type]
        )
        if messages:
            _log.debug("%s", "".join(messages))
    else:
        solution = list(step(orders, vehicles, []))

    rows = (
        (vehicle.id, order_id) for vehicle in solution for order_id in vehicle.stops
    )
    return [
        OptimizeRow(seq, vehicle_id, order_id)
        for seq, (vehicle_id, order_id) in enumerate(rows, start=1)
    ]