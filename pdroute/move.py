"""Moves evaluated by the tabu search and recorded as tabu."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


class _Identified(Protocol):
    id: int


@dataclass(frozen=True, eq=False)
class Move:
    """A "move" or "swap" of orders between two vehicles.

    ``vid1`` is the vehicle the order comes from and ``vid2`` the vehicle it
    goes to. ``oid2`` is only meaningful for swap moves and is 0 otherwise.
    The objective values are kept for information and take no part in
    equality.
    """

    vid1: int
    vid2: int
    oid1: int
    oid2: int = 0
    is_swap: bool = False
    to_objective: float = field(default=0.0)
    from_objective: float = field(default=0.0)

    @classmethod
    def for_move(
        cls,
        from_vehicle: _Identified,
        to_vehicle: _Identified,
        order: _Identified,
        to_objective: float,
        from_objective: float,
    ) -> Move:
        """Build a move that takes ``order`` from one vehicle to another."""
        return cls(
            vid1=from_vehicle.id,
            vid2=to_vehicle.id,
            oid1=order.id,
            oid2=0,
            is_swap=False,
            to_objective=to_objective,
            from_objective=from_objective,
        )

    @classmethod
    def for_swap(
        cls,
        from_vehicle: _Identified,
        to_vehicle: _Identified,
        from_order: _Identified,
        to_order: _Identified,
        to_objective: float,
        from_objective: float,
    ) -> Move:
        """Build a move that exchanges two orders between two vehicles."""
        return cls(
            vid1=from_vehicle.id,
            vid2=to_vehicle.id,
            oid1=from_order.id,
            oid2=to_order.id,
            is_swap=True,
            to_objective=to_objective,
            from_objective=from_objective,
        )

    def _key(self) -> tuple[int, int, int, int, bool]:
        return (self.oid1, self.oid2, self.vid1, self.vid2, self.is_swap)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Move):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return f"{self.oid1}:{self.oid2}:{self.vid1}:{self.vid2}:{int(self.is_swap)}"