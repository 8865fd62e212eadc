#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides the seedable random source shared by all mutation operators.

Every random decision taken while mutating statements goes through the module
level ``RNG``.  Seeding it with a fixed value therefore makes a mutation run
reproducible.  This is NOT cryptographically safe and must not be used for
anything related to cryptography.
"""

from __future__ import annotations

import random
import string
import time

from typing import TYPE_CHECKING
from typing import TypeVar

import evocase.configuration as config


if TYPE_CHECKING:
    from collections.abc import Sequence

_T = TypeVar("_T")


class Random(random.Random):  # noqa: S311
    """A random source that remembers the seed it was seeded with."""

    def __init__(self, x=None) -> None:  # noqa: D107
        self._current_seed: int | None = None
        super().__init__(x)

    def seed(self, a=None, version: int = 2) -> None:  # noqa: D102
        if a is None:
            a = time.time_ns()
        self._current_seed = a
        super().seed(a, version)

    def get_seed(self) -> int:
        """Provides the seed the source was last seeded with.

        Returns:
            The used seed
        """
        assert self._current_seed is not None
        return self._current_seed


RNG: Random = Random()


def seed_from_configuration() -> int:
    """Seeds the random source from the configured seed, if any.

    Returns:
        The seed that is in use afterwards
    """
    RNG.seed(config.configuration.seed)
    return RNG.get_seed()


def next_int(lower_bound: int = -100, upper_bound: int = 100) -> int:
    """Provide a random integer from ``[lower_bound, upper_bound)``.

    Args:
        lower_bound: The inclusive lower bound
        upper_bound: The exclusive upper bound

    Returns:
        A random integer from the interval
    """
    return RNG.randrange(lower_bound, upper_bound)


def next_float(lower_bound: float = 0, upper_bound: float = 1) -> float:
    """Provide a float uniformly selected from ``[lower_bound, upper_bound]``.

    Args:
        lower_bound: The lower bound
        upper_bound: The upper bound

    Returns:
        A random float from the interval
    """
    return RNG.uniform(lower_bound, upper_bound)


def next_gaussian() -> float:
    """Provide a normally distributed value with mu 0.0 and sigma 1.0.

    Returns:
        The next random number
    """
    return RNG.gauss(0, 1)


def next_bool() -> bool:  # noqa: D103
    return RNG.random() < 0.5


def next_char() -> str:  # noqa: D103
    return RNG.choice(string.printable)


def next_string(length: int) -> str:
    """Create a string of printable characters.

    Args:
        length: the desired length

    Returns:
        A random string of the given length
    """
    return "".join(next_char() for _ in range(length))


def next_bytes(length: int) -> bytes:
    """Create random bytes.

    Args:
        length: the desired length

    Returns:
        Random bytes of the given length
    """
    return bytes(RNG.getrandbits(8) for _ in range(length))


def choice(sequence: Sequence[_T]) -> _T:
    """Return a random element from a non-empty sequence.

    Args:
        sequence: The non-empty sequence to choose from

    Returns:
        A randomly selected element of the sequence
    """
    return RNG.choice(sequence)


def shuffled(sequence: Sequence[_T]) -> list[_T]:
    """Return a shuffled copy of the given sequence.

    Args:
        sequence: The sequence to shuffle

    Returns:
        A new list holding the elements in random order
    """
    result = list(sequence)
    RNG.shuffle(result)
    return result
