"""
Per-compilation settings threaded through every primitive: the index origin
(⎕IO), the comparison tolerance (⎕CT) and the random number generator used
by roll and deal (⎕RL).
"""
from dataclasses import dataclass, field
import random
from typing import Optional

from varray.errors import DomainError

CT_DEFAULT = 1e-14

@dataclass(frozen=True)
class Config:
    index_origin: int = 0
    comparison_tolerance: float = CT_DEFAULT
    seed: Optional[int] = None
    rng: random.Random = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.index_origin not in (0, 1):
            raise DomainError(f"DOMAIN ERROR: index origin must be 0 or 1, not {self.index_origin}")
        if self.comparison_tolerance < 0:
            raise DomainError("DOMAIN ERROR: comparison tolerance must be non-negative")

        # A fixed seed gives a repeatable stream; otherwise draw from the OS.
        rng = random.SystemRandom() if self.seed is None else random.Random(self.seed)
        object.__setattr__(self, 'rng', rng)

    @property
    def io(self) -> int:
        return self.index_origin

    @property
    def ct(self) -> float:
        return self.comparison_tolerance

DEFAULT = Config()
