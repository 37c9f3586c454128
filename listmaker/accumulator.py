"""Two-argument folding functions for FluentSequence.reduce()."""

from typing import Protocol, TypeVar

A = TypeVar("A")
V = TypeVar("V", contravariant=True)


class Accumulator(Protocol[A, V]):
    """Combines the running accumulator with the next value."""

    def __call__(self, accumulator: A, value: V) -> A:
        ...


def _sum(total: int, value: int) -> int:
    return total + value


SUM: Accumulator[int, int] = _sum
