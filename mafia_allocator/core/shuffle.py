"""
Unbiased Fisher-Yates shuffle with an injectable random source.
"""

import random
from typing import Any, Callable, List, Optional, Sequence, TypeVar, Union

from .exceptions import InvalidConfiguration

T = TypeVar('T')

# Either a random.Random-like object or a callable returning floats in [0, 1)
RandomSource = Union[random.Random, Callable[[], float]]


def default_random_source() -> random.Random:
    """Uniform generator seeded from system entropy."""
    return random.SystemRandom()


def draw_index(random_source: Any, upper: int) -> int:
    """
    Draw an integer uniformly from [0, upper] inclusive.

    Args:
        random_source: Object with `randrange` or a zero-argument callable
            producing floats in [0, 1)
        upper: Largest index that may be drawn
    """
    randrange = getattr(random_source, 'randrange', None)
    if randrange is not None:
        return randrange(upper + 1)

    value = random_source()
    if not 0.0 <= value < 1.0:
        raise InvalidConfiguration(f"Random source must produce values in [0, 1), got {value!r}")
    return int(value * (upper + 1))


def fisher_yates_shuffle(items: Sequence[T], random_source: Optional[RandomSource] = None) -> List[T]:
    """
    Return a uniformly random permutation of `items`.

    The caller's sequence is never mutated; a working copy is shuffled
    in place with the backward Fisher-Yates walk.
    """
    if random_source is None:
        random_source = default_random_source()

    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = draw_index(random_source, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled
