# mechduel/engine/dice.py
import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


def damage_scale(r: random.Random) -> float:
    return r.random()


def sample(items: Sequence[T], r: random.Random) -> Optional[T]:
    if not items:
        return None
    return r.choice(list(items))
