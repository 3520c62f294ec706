# pdroute

Local-search optimizers for pickup-and-delivery vehicle routing problems.

In a pickup-and-delivery problem, each order is picked up at one node and
delivered at another, within time windows. A fleet of vehicles serves the
orders. `pdroute` takes a solution, which is a fleet with its stops, and
improves it. It also provides the drivers that check the parameters and
input, pick an initial solution, and turn the result into numbered rows.

## Modules

### `pdroute.move`

`Move` records a move of orders between two vehicles. There are two
kinds:

- `Move.for_move(from_vehicle, to_vehicle, order, to_objective, from_objective)`
  moves one order.
- `Move.for_swap(from_vehicle, to_vehicle, from_order, to_order, to_objective, from_objective)`
  swaps two orders.

Two moves are equal when their order ids, vehicle ids and swap flag match.
The objective values are not compared. `str(move)` gives
`oid1:oid2:vid1:vid2:is_swap`.

### `pdroute.tabu_list`

`TabuList(max_length)` holds the most recent moves, oldest first. When it
is full, the oldest moves are dropped. Adding a move that is already in
the list does nothing.

- `has_move` checks whether a move is in the list, in either direction.
- `has_swap` checks whether a swap is in the list, in any of its four
  arrangements.

The list also keeps two sets of candidate strings:

- infeasible candidates: `add_infeasible` and `has_infeasible`
- candidates already carried out: `add_seen` and `has_seen`

### `pdroute.neighborhoods`

`TabuNeighborhoods(solution)` works on a copy of the solution and keeps a
copy of the best solution found. It provides:

- `single_pair_insertion(intensify, diversify)`
- `swap_between_routes(intensify, diversify)`
- `move_to_real()`, which moves unassigned orders from phony vehicles onto
  real ones
- `sort_by_size(ascending)`
- `delete_empty_truck()`
- `save_if_best()`

Two helper functions are also provided:

- `unassigned_orders(fleet)` returns the indexes of the orders held by
  phony vehicles.
- `are_all_served(unassigned)` is true when that set is empty.

### `pdroute.tabu`

`TabuOptimizer(solution, max_cycles, stop_on_all_served, optimize)` runs
a tabu search that has intensification and diversification phases. After
construction:

- `solution` holds the best fleet found, with empty phony vehicles
  removed.
- `best_solution` holds the best solution seen.

### `pdroute.simple`

`SimpleOptimizer(solution, times, kind)` first empties later trucks into
earlier ones (`decrease_truck`). It then runs `times` cycles of swapping
and moving orders between trucks (`inter_swap`), which reduces total
duration.

`kind` is an `InitialsCode`. With `InitialsCode.ONE_DEPOT`, orders are
inserted with the vehicle's `semi_lifo`. With any other kind they are
inserted with `hill_climb`.

### `pdroute.optimize`

`optimize(orders, vehicles, solver, factor, max_cycles, execution_date, subdivision_kind)`
re-optimizes the existing stops of a fleet. Orders are given as
`OrderData` and vehicles as `VehicleData`.

Before solving, the input is cleaned up:

- Vehicles are de-duplicated by id.
- Vehicles that close before `execution_date` are dropped.
- Only the orders found on the vehicles' stops are kept.

The value of `subdivision_kind` selects how the work is done:

| `subdivision_kind` | Optimization |
| --- | --- |
| 0 | one pass |
| 1 | at each time a vehicle window opens or closes |
| 2 | at each time an order window opens or closes |

The helper functions used for this are also public: `select_vehicles`,
`select_orders`, `processing_times_by_order`, `processing_times_by_vehicle`,
`initial_stops`, `update_stops` and `subdivide_processing`.

The result is a list of `OptimizeRow(seq, vehicle_id, order_id)`.

Errors and warnings:

- An invalid `max_cycles` or `factor` raises `OptimizeError`.
- Stops that name orders which were not given also raise `OptimizeError`.
- An invalid `subdivision_kind`, or empty orders or vehicles, logs a
  warning and returns an empty list.

### `pdroute.pickdeliver`

`pick_deliver(...)` and `pick_deliver_euclidean(...)` solve a problem
from scratch.

`pick_deliver_euclidean` first gives node ids to the coordinates, using
`assign_euclidean_nodes`. Node ids are numbered from 0 in sorted
coordinate order.

Both functions then go through these steps:

1. They call `build(orders, vehicles, node_ids, factor)`. It returns a
   function that builds an initial solution of a given kind.
2. They choose an initial solution with `choose_initial_solution`. Kind 0
   builds kinds 1 to 6 and keeps the smallest.
3. They pass that solution to `optimize(solution, max_cycles, initial_solution_id)`,
   which returns `SolutionRow` values.

An invalid `factor`, `max_cycles` or `initial_solution_id` (allowed range
0 to 7) raises `PickDeliverError`. Empty orders or vehicles log a warning
and return an empty list.

`numbered_rows(rows, with_stop_id)` turns the rows into tuples. The tuples
are numbered from 1 and stop types are counted from 1.

## Usage

```python
from pdroute.tabu import TabuOptimizer

optimized = TabuOptimizer(solution, max_cycles=10,
                          stop_on_all_served=False, optimize=True)
best = optimized.best_solution
```

Solutions, vehicles and orders are duck-typed. The protocols in
`pdroute.neighborhoods` and `pdroute.simple` list what each optimizer
needs.

- A solution has a mutable `fleet`, an `orders` sequence indexed by order
  index, `objective()` or `duration()`, and `copy()`.
- A vehicle provides `hill_climb`, `erase`, `has_order`,
  `orders_in_vehicle`, and the other methods listed in those protocols.

## What the package does not do

`pdroute` contains the optimizers and the drivers only. It has no model
of vehicles, routes or time matrices. It has no builders of initial
solutions. It does not read orders, vehicles or costs from a database or
from files.

The caller supplies all of these:

- solution and vehicle objects
- the `solver` passed to `optimize`
- the `build` and `optimize` callables passed to `pick_deliver`

There is no command-line program.

## Installation

```
pip install .
```

To also install what the tests need:

```
pip install .[test]
```