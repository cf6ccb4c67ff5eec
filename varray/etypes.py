"""
Element types. Every virtual array can say what kind of elements it holds
without computing them, so a renderer can pick the most specific
representation: bits, a bounded integer range, floats, complex numbers,
characters, or MIXED, which means boxed storage.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional


class Kind(Enum):
    BIT=0
    INT=1
    FLOAT=2
    COMPLEX=3
    CHAR=4
    MIXED=5

NUMERIC = {Kind.BIT, Kind.INT, Kind.FLOAT, Kind.COMPLEX}

@dataclass(frozen=True)
class EType:
    kind: Kind
    low: Optional[int] = None      # Integer range, for BIT and INT
    high: Optional[int] = None

    def isnumeric(self) -> bool:
        return self.kind in NUMERIC

    def __str__(self) -> str:
        if self.kind == Kind.INT and self.low is not None:
            return f"INT[{self.low}..{self.high}]"
        return self.kind.name

BIT = EType(Kind.BIT, 0, 1)
FLOAT = EType(Kind.FLOAT)
COMPLEX = EType(Kind.COMPLEX)
CHAR = EType(Kind.CHAR)
MIXED = EType(Kind.MIXED)

def integer(low: int, high: int) -> EType:
    """
    The narrowest integer type covering [low, high]. Ranges inside 0..1
    are BIT, but keep their bounds: the element type of 1 5 3 is INT[1..5].
    """
    if 0 <= low and high <= 1:
        return EType(Kind.BIT, low, high)
    return EType(Kind.INT, low, high)

def etype_of_value(value: Any) -> EType:
    if type(value) in (bool, int):
        return integer(int(value), int(value))
    if type(value) == float:
        return FLOAT
    if type(value) == complex:
        return COMPLEX
    if type(value) == str:
        return CHAR
    return MIXED

def join(a: Optional[EType], b: Optional[EType]) -> EType:
    """
    Least type able to hold elements of both a and b.
    """
    if a is None:
        return b if b is not None else BIT
    if b is None:
        return a
    if a.kind == Kind.MIXED or b.kind == Kind.MIXED:
        return MIXED
    if a.kind == Kind.CHAR or b.kind == Kind.CHAR:
        return CHAR if a.kind == b.kind else MIXED
    if Kind.COMPLEX in (a.kind, b.kind):
        return COMPLEX
    if Kind.FLOAT in (a.kind, b.kind):
        return FLOAT

    # Both integral
    lows = [t.low for t in (a, b)]
    highs = [t.high for t in (a, b)]
    if None in lows or None in highs:
        return EType(Kind.INT)
    return integer(min(lows), max(highs))

def etype_of_values(values: Iterable) -> EType:
    acc = None
    for v in values:
        acc = join(acc, etype_of_value(v))
        if acc.kind == Kind.MIXED:
            break
    return acc if acc is not None else BIT
