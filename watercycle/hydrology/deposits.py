"""DepositField — double-buffered per-cell inputs for the next tick.

Runoff and sediment routed downhill, and precipitation dropped by
clouds, are written to the *outgoing* buffer while the current tick
reads the *incoming* buffer.  ``swap`` publishes the outgoing writes at
the end of the tick, so a cell never sees input produced during its
own tick.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

import numpy as np
from numpy.typing import NDArray


class DepositKind(Enum):
    """Distinct input channels, each with its own layer."""

    PRECIPITATION = auto()
    RUNOFF = auto()
    SEDIMENT = auto()


@dataclass(frozen=True)
class Deposit:
    """Inputs waiting for one cell at the start of a tick."""

    precipitation: float = 0.0
    runoff: float = 0.0
    sediment: float = 0.0


def _zeroed_layers(width: int, height: int) -> dict[DepositKind, NDArray[np.float64]]:
    return {
        kind: np.zeros((height, width), dtype=np.float64) for kind in DepositKind
    }


@dataclass
class DepositField:
    """Incoming and outgoing deposit layers for a world.

    Attributes:
        width: Grid columns (must match World).
        height: Grid rows (must match World).
        incoming: Layers read (and cleared) during the current tick.
        outgoing: Layers written during the current tick.
    """

    width: int
    height: int
    incoming: dict[DepositKind, NDArray[np.float64]] = field(init=False, repr=False)
    outgoing: dict[DepositKind, NDArray[np.float64]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Create both buffers, all zeroed."""
        self.incoming = _zeroed_layers(self.width, self.height)
        self.outgoing = _zeroed_layers(self.width, self.height)

    def deposit(self, kind: DepositKind, x: int, y: int, amount: float) -> None:
        """Queue ``amount`` of ``kind`` for cell ``(x, y)`` next tick.

        Args:
            kind: Which channel to write.
            x: Column index.
            y: Row index.
            amount: Quantity to add.
        """
        self.outgoing[kind][y, x] += amount

    def peek(self, x: int, y: int) -> Deposit:
        """Read the incoming deposit for ``(x, y)`` without clearing it."""
        return Deposit(
            precipitation=float(self.incoming[DepositKind.PRECIPITATION][y, x]),
            runoff=float(self.incoming[DepositKind.RUNOFF][y, x]),
            sediment=float(self.incoming[DepositKind.SEDIMENT][y, x]),
        )

    def take(self, x: int, y: int) -> Deposit:
        """Read the incoming deposit for ``(x, y)`` and reset it to zero."""
        deposit = self.peek(x, y)
        for layer in self.incoming.values():
            layer[y, x] = 0.0
        return deposit

    def swap(self) -> None:
        """Publish this tick's writes as the next tick's inputs.

        Anything left unread in the incoming buffer is discarded.
        """
        self.incoming, self.outgoing = self.outgoing, self.incoming
        for layer in self.outgoing.values():
            layer.fill(0.0)
