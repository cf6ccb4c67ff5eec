"""
Searching and set functions: membership, find, index-of, intersection,
union, unique, without, and where with its inverse.

Set functions take vectors (or scalars) only. Elements are compared with
`equal()`: characters by code point, numbers numerically within the
comparison tolerance, arrays structurally.
"""
from functools import cached_property
from typing import Any, Optional, Sequence

from bitarray import bitarray

from varray.arr import Array, V
from varray.config import CT_DEFAULT
from varray.core import Buffered, as_ints, items, lift
from varray import etypes
from varray.errors import DomainError, RankError
from varray.etypes import EType
from varray.shape import coords, strides

def equal(a: Any, b: Any, ct: float = CT_DEFAULT) -> bool:
    """
    Tolerant equality of two items.

    >>> equal(1, 1.0)
    True
    >>> equal(1, 1 + 1e-15)
    True
    >>> equal('1', 1)
    False
    >>> equal(V([1, 2]), V([1, 2.0]))
    True
    """
    if isinstance(a, Array) or isinstance(b, Array):
        if not (isinstance(a, Array) and isinstance(b, Array)):
            return False
        if a.shape != b.shape:
            return False
        return all(equal(x, y, ct) for x, y in zip(a.data, b.data))
    if type(a) == str or type(b) == str:
        return type(a) == type(b) and a == b
    if a == b:
        return True
    if type(a) == int and type(b) == int:
        return False
    return abs(a - b) <= ct * max(abs(a), abs(b))

def vector(x: Any, what: str = "argument") -> list:
    """
    The items of a scalar or vector argument, rendered.
    """
    if lift(x).rank > 1:
        raise RankError(f"RANK ERROR: {what} must be a scalar or a vector")
    return items(x)

def _exact(value: Any) -> bool:
    return type(value) in (int, str)

class Lookup:
    """
    First position of an item in a list of items. Ints and characters go
    through a dict while every item seen is one of those; anything else
    needs tolerance or structure and is searched for linearly.
    """
    def __init__(self, values: Sequence = (), ct: float = CT_DEFAULT) -> None:
        self.values: list = []
        self.ct = ct
        self.first: dict[tuple, int] = {}
        self.inexact = False
        for v in values:
            self.add(v)

    def add(self, value: Any) -> None:
        if _exact(value):
            self.first.setdefault((type(value), value), len(self.values))
        else:
            self.inexact = True
        self.values.append(value)

    def find(self, probe: Any) -> Optional[int]:
        if _exact(probe) and not self.inexact:
            return self.first.get((type(probe), probe))
        for i, v in enumerate(self.values):
            if equal(probe, v, self.ct):
                return i
        return None

    def __contains__(self, probe: Any) -> bool:
        return self.find(probe) is not None

class _Search(Buffered):
    def __init__(self, left: Any, right: Any, ct: float = CT_DEFAULT) -> None:
        super().__init__()
        self.left = lift(left)
        self.right = lift(right)
        self.ct = ct

    @cached_property
    def prototype(self) -> Any:
        return 0

class Membership(_Search):
    """
    Dyadic ∊ -- which items of the left are found in the right?

    APL> 'abc'∊'cxa'
    1 0 1
    """
    @cached_property
    def shape(self) -> tuple[int, ...]:
        if self.left.rank > 1 or self.right.rank > 1:
            raise RankError("RANK ERROR: ∊ takes scalars or vectors")
        return self.left.shape

    @cached_property
    def etype(self) -> EType:
        return etypes.BIT

    def compute(self) -> list:
        found = Lookup(vector(self.right), self.ct)
        return [int(e in found) for e in vector(self.left)]

class Find(_Search):
    """
    Dyadic ⍷ -- mark the start of each occurrence of the left in the right.

    APL> 'ab'⍷'cabab'
    0 1 0 1 0
    """
    @cached_property
    def shape(self) -> tuple[int, ...]:
        if self.left.rank > 1 or self.right.rank > 1:
            raise RankError("RANK ERROR: ⍷ takes scalars or vectors")
        return self.right.shape

    @cached_property
    def etype(self) -> EType:
        return etypes.BIT

    def compute(self) -> list:
        pattern = vector(self.left)
        text = vector(self.right)
        n = len(pattern)
        result = []
        for i in range(len(text)):
            window = text[i:i+n]
            result.append(int(len(window) == n and all(equal(p, t, self.ct) for p, t in zip(pattern, window))))
        return result

class IndexOf(_Search):
    """
    Dyadic ⍳ -- position of the first occurrence of each item of the right
    in the left vector, or one past the end if absent. The result has the
    shape of the right argument.

    APL> 'abcd'⍳'cxa'
    2 4 0
    """
    def __init__(self, left: Any, right: Any, io: int = 0, ct: float = CT_DEFAULT) -> None:
        super().__init__(left, right, ct)
        self.io = io

    @cached_property
    def shape(self) -> tuple[int, ...]:
        if self.left.rank > 1:
            raise RankError("RANK ERROR: left argument of ⍳ must be a vector")
        return self.right.shape

    @cached_property
    def etype(self) -> EType:
        return etypes.integer(self.io, self.io + self.left.size)

    def compute(self) -> list:
        lookup = Lookup(vector(self.left), self.ct)
        missing = len(lookup.values)
        result = []
        for e in items(self.right):
            i = lookup.find(e)
            result.append((missing if i is None else i) + self.io)
        return result

class Intersection(_Search):
    """
    Dyadic ∩ -- items of the left also found in the right, in left order.

    APL> 'abcd'∩'dbx'
    bd
    """
    @cached_property
    def etype(self) -> EType:
        return self.left.etype

    @cached_property
    def prototype(self) -> Any:
        return self.left.prototype

    def compute(self) -> list:
        found = Lookup(vector(self.right), self.ct)
        return [e for e in vector(self.left) if e in found]

class Union(_Search):
    """
    Dyadic ∪ -- the left, followed by items of the right not in the left.

    APL> 1 2 3∪3 4 4
    1 2 3 4 4
    """
    @cached_property
    def etype(self) -> EType:
        return etypes.join(self.left.etype, self.right.etype)

    @cached_property
    def prototype(self) -> Any:
        return self.left.prototype

    def compute(self) -> list:
        left = vector(self.left)
        found = Lookup(left, self.ct)
        return left + [e for e in vector(self.right) if e not in found]

class Without(_Search):
    """
    Dyadic ~ -- items of the left not found in the right.

    APL> 1 2 3 4 5~2 4
    1 3 5
    """
    @cached_property
    def etype(self) -> EType:
        return self.left.etype

    @cached_property
    def prototype(self) -> Any:
        return self.left.prototype

    def compute(self) -> list:
        left = vector(self.left, "left argument of ~")
        found = Lookup(items(self.right), self.ct)
        keep = ~bitarray([e in found for e in left])
        return [e for e, k in zip(left, keep) if k]

class Unique(Buffered):
    """
    Monadic ∪ -- the distinct items, in order of first appearance.

    APL> ∪3 1 3 2 1
    3 1 2
    """
    def __init__(self, base: Any, ct: float = CT_DEFAULT) -> None:
        super().__init__(base)
        self.ct = ct

    def compute(self) -> list:
        seen = Lookup(ct=self.ct)
        for e in vector(self.base):
            if e not in seen:
                seen.add(e)
        return seen.values

class Where(Buffered):
    """
    Monadic ⍸ -- the indices of the 1s of a Boolean array: ints for a
    vector, coordinate vectors otherwise.

    APL> ⍸0 1 1 0 1
    1 2 4
    """
    def __init__(self, base: Any, io: int = 0) -> None:
        super().__init__(base)
        self.io = io

    @cached_property
    def bits(self) -> bitarray:
        try:
            return bitarray(items(self.base))
        except (TypeError, ValueError):
            raise DomainError("DOMAIN ERROR: expected Boolean array")

    @cached_property
    def shape(self) -> tuple[int, ...]:
        return (self.bits.count(),)

    @cached_property
    def etype(self) -> EType:
        if self.base.rank != 1:
            return etypes.MIXED
        return etypes.integer(self.io, self.io + max(self.base.size - 1, 0))

    @cached_property
    def prototype(self) -> Any:
        if self.base.rank == 1:
            return 0
        return Array([self.base.rank], [0]*self.base.rank)

    def compute(self) -> list:
        positions = list(self.bits.search(bitarray([True])))
        if self.base.rank == 1:
            return [p + self.io for p in positions]
        cells = list(coords(self.base.shape, self.io))
        return [Array([self.base.rank], list(cells[p])) for p in positions]

class InverseWhere(Buffered):
    """
    ⍸⍣¯1 -- from a list of indices, the array with a count at each of
    them (a Boolean array, when no index repeats). Vectors of ints give
    a vector; vectors of coordinate vectors give an array of that rank.
    """
    def __init__(self, base: Any, io: int = 0) -> None:
        super().__init__(base)
        self.io = io

    @cached_property
    def positions(self) -> list[tuple[int, ...]]:
        result = []
        for e in vector(self.base):
            cvec = as_ints(e, "index") if isinstance(e, Array) else as_ints(lift(e), "index")
            cvec = [c - self.io for c in cvec]
            if any(c < 0 for c in cvec):
                raise DomainError("DOMAIN ERROR: indices must not be below the index origin")
            result.append(tuple(cvec))
        if len({len(p) for p in result}) > 1:
            raise RankError("RANK ERROR: coordinate vectors of different lengths")
        return result

    @cached_property
    def shape(self) -> tuple[int, ...]:
        if not self.positions:
            return (0,)
        rank = len(self.positions[0])
        return tuple(1 + max(p[axis] for p in self.positions) for axis in range(rank))

    @cached_property
    def etype(self) -> EType:
        if len(set(self.positions)) == len(self.positions):
            return etypes.BIT
        return etypes.integer(0, len(self.positions))

    @cached_property
    def prototype(self) -> Any:
        return 0

    def compute(self) -> list:
        factors = strides(self.shape)
        counts = [0]*self.size
        for p in self.positions:
            counts[sum(c*f for c, f in zip(p, factors))] += 1
        return counts


if __name__ == "__main__":
    import doctest
    doctest.testmod()
