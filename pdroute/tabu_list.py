"""Bounded list of tabu moves plus the infeasible and seen candidate sets."""

from __future__ import annotations

from collections import deque
from typing import Iterator

from pdroute.move import Move


class TabuList:
    """Moves that are currently forbidden, oldest first.

    When the list reaches ``max_length`` the oldest moves are dropped to
    make room for a new one.
    """

    def __init__(self, max_length: int) -> None:
        self.max_length = max_length
        self._moves: deque[Move] = deque()
        self._infeasible: set[str] = set()
        self._seen: set[str] = set()

    def add(self, move: Move) -> None:
        """Make ``move`` tabu, unless it already is."""
        if move in self._moves:
            return
        while self._moves and len(self._moves) >= self.max_length:
            self._moves.popleft()
        self._moves.append(move)

    def clear(self) -> None:
        """Remove every move from the tabu list."""
        self._moves.clear()

    def has_move(self, from_vehicle, to_vehicle, order, obj1: float, obj2: float) -> bool:
        """Whether moving ``order`` between the vehicles, in either direction, is tabu."""
        return (
            Move.for_move(from_vehicle, to_vehicle, order, obj1, obj2) in self._moves
            or Move.for_move(to_vehicle, from_vehicle, order, obj1, obj2) in self._moves
        )

    def has_swap(
        self, from_vehicle, to_vehicle, from_order, to_order, obj1: float, obj2: float
    ) -> bool:
        """Whether swapping the two orders between the vehicles, in any arrangement, is tabu."""
        candidates = (
            Move.for_swap(from_vehicle, to_vehicle, from_order, to_order, obj1, obj2),
            Move.for_swap(from_vehicle, to_vehicle, to_order, from_order, obj1, obj2),
            Move.for_swap(to_vehicle, from_vehicle, from_order, to_order, obj1, obj2),
            Move.for_swap(to_vehicle, from_vehicle, to_order, from_order, obj1, obj2),
        )
        return any(candidate in self._moves for candidate in candidates)

    def is_empty(self) -> bool:
        """Whether no move is tabu."""
        return not self._moves

    def __len__(self) -> int:
        return len(self._moves)

    def __iter__(self) -> Iterator[Move]:
        return iter(self._moves)

    def __contains__(self, move: object) -> bool:
        return move in self._moves

    def __str__(self) -> str:
        moves = "".join(f"{move} " for move in self._moves)
        return (
            f"\nTabuList length: {len(self)}"
            f"\n *><* *** tabu list start *** {moves} *** tabu list end ***\n"
        )

    def has_infeasible(self, candidate: str) -> bool:
        """Whether ``candidate`` was recorded as infeasible."""
        return candidate in self._infeasible

    def add_infeasible(self, candidate: str) -> None:
        """Record ``candidate`` as infeasible."""
        self._infeasible.add(candidate)

    def has_seen(self, candidate: str) -> bool:
        """Whether ``candidate`` was already carried out."""
        return candidate in self._seen

    def add_seen(self, candidate: str) -> None:
        """Record ``candidate`` as carried out."""
        self._seen.add(candidate)