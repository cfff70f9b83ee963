"""
Seeded RNG - the single source of randomness for a WINGO run.

The generator is a 32-bit counter-plus-mix design (Mulberry32):
every call adds a fixed odd increment to the state and pushes the result
through an xorshift-multiply finalizer. The whole state is one unsigned
32-bit integer, so a run can be saved and replayed by persisting that integer.

Reproducibility contract:
- Same seed => same infinite sequence of next() values
- serialize() / restore() round-trip the state exactly
- int(), pick() and shuffle() consume exactly one next() per draw

Usage:
    rng = SeededRng(99)
    value = rng.next()          # float in [0, 1)
    roll = rng.int(6)           # int in [0, 6)
    deck = rng.shuffle(list(range(1, 76)))
    saved = rng.serialize()
    rng.restore(saved)
"""

from __future__ import annotations

from typing import List, MutableSequence, Sequence, TypeVar

T = TypeVar("T")

MASK32 = 0xFFFFFFFF

# Weyl sequence increment
INCREMENT = 0x6D2B79F5

# 2**32, divisor mapping a 32-bit word into [0, 1)
NORM_32 = 4294967296


def _imul(a: int, b: int) -> int:
    """32-bit multiply keeping the low word (unsigned)."""
    return (a * b) & MASK32


class SeededRng:
    """
    Deterministic generator with a single 32-bit state word.

    All methods are synchronous and mutate only ``self.state``. Two instances
    built from the same seed never diverge for the same call sequence.
    """

    __slots__ = ("state",)

    def __init__(self, seed: int):
        self.state = seed & MASK32

    # ------------------------------------------------------------------
    # Core stream
    # ------------------------------------------------------------------

    def next(self) -> float:
        """Advance the state and return a float in [0, 1)."""
        self.state = (self.state + INCREMENT) & MASK32
        t = self.state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK32
        return ((t ^ (t >> 14)) & MASK32) / NORM_32

    def int(self, max_value: int) -> int:
        """Random int in [0, max_value). Floors next() * max_value."""
        return int(self.next() * max_value)

    def pick(self, seq: Sequence[T]) -> T:
        """Pick one element uniformly. Raises IndexError on an empty sequence."""
        if not seq:
            raise IndexError("cannot pick from an empty sequence")
        return seq[self.int(len(seq))]

    def shuffle(self, seq: MutableSequence[T]) -> MutableSequence[T]:
        """
        Fisher-Yates shuffle in place, last to first.

        Returns the same sequence object for chaining.
        """
        for i in range(len(seq) - 1, 0, -1):
            j = self.int(i + 1)
            seq[i], seq[j] = seq[j], seq[i]
        return seq

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def serialize(self) -> int:
        """Return the full generator state as one unsigned 32-bit integer."""
        return self.state

    def restore(self, value: int) -> None:
        """Restore a state produced by serialize()."""
        self.state = value & MASK32

    @classmethod
    def from_state(cls, value: int) -> "SeededRng":
        """Build a generator positioned exactly at a serialized state."""
        rng = cls(0)
        rng.restore(value)
        return rng

    def copy(self) -> "SeededRng":
        """Independent generator at the same position."""
        return SeededRng.from_state(self.state)

    def take(self, count: int) -> List[float]:
        """Draw ``count`` values. Handy for determinism checks."""
        return [self.next() for _ in range(count)]

    def __repr__(self) -> str:
        return f"SeededRng(state=0x{self.state:08x})"
