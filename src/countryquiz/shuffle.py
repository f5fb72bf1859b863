import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")

_system_random = random.Random()


def shuffle(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Returns a shuffled copy of ``items``; the input is left untouched.

    Pass a seeded ``random.Random`` as ``rng`` to get a reproducible order.
    """
    shuffled = list(items)
    (rng or _system_random).shuffle(shuffled)
    return shuffled
