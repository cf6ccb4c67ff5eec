"""
Grade - monadic and dyadic ⍋ ⍒

https://aplwiki.com/wiki/Grade
"""
from functools import cached_property, cmp_to_key
from typing import Any, Optional

from varray.arr import Array
from varray.core import Buffered, items, lift
from varray import etypes
from varray.errors import DomainError, RankError
from varray.etypes import EType
from varray.sets import IndexOf

def _kind(x: Any) -> int:
    """
    Numbers sort before characters, which sort before arrays.
    """
    if isinstance(x, Array):
        return 2
    if type(x) == str:
        return 1
    return 0

def compare(a: Any, b: Any) -> int:
    """
    Total array ordering of two items: -1, 0 or 1.

    >>> compare(1, 2), compare('b', 'a'), compare(3, 'a')
    (-1, 1, -1)
    """
    ka, kb = _kind(a), _kind(b)
    if ka != kb:
        return -1 if ka < kb else 1
    if ka == 2:
        return compare_cells(a.data, b.data) or compare_cells(a.shape, b.shape)
    if type(a) == complex or type(b) == complex:
        a, b = complex(a), complex(b)
        a, b = (a.real, a.imag), (b.real, b.imag)
    return (a > b) - (a < b)

def compare_cells(a: list, b: list) -> int:
    for x, y in zip(a, b):
        c = compare(x, y)
        if c:
            return c
    return (len(a) > len(b)) - (len(a) < len(b))

class Grade(Buffered):
    """
    Grade up (or down, with `inverse`): the permutation that sorts the
    major cells. Equal cells keep their original order, in both directions.

    APL> ⍋3 1 4 1 5
    1 3 0 2 4

    APL> ⍒3 1 4 1 5
    4 2 0 1 3

    With a `key`, a character vector or an array of them, cells are sorted
    by where their characters appear in the key, rather than by code point:

    APL> 'cba'⍋'abcab'
    2 1 4 0 3
    """
    def __init__(self, base: Any, key: Optional[Any] = None, inverse: bool = False, io: int = 0) -> None:
        super().__init__(base)
        self.key = None if key is None else lift(key)
        self.inverse = inverse
        self.io = io

    @cached_property
    def shape(self) -> tuple[int, ...]:
        if self.base.rank == 0:
            raise RankError("RANK ERROR: cannot grade a scalar")
        return self.base.shape[:1]

    @cached_property
    def etype(self) -> EType:
        return etypes.integer(self.io, self.io + max(self.shape[0] - 1, 0))

    @cached_property
    def prototype(self) -> Any:
        return 0

    def cells(self) -> list[list]:
        n = self.shape[0]
        if self.key is None:
            ravel = items(self.base)
        else:
            if self.base.etype.kind != etypes.Kind.CHAR and self.base.size:
                raise DomainError("DOMAIN ERROR: keyed grade takes characters")
            ravel = items(IndexOf(self.key.render().data, self.base))
        step = len(ravel) // n if n else 0
        return [ravel[i*step:(i+1)*step] for i in range(n)]

    def compute(self) -> list:
        if self.inverse:
            order = cmp_to_key(lambda a, b: compare_cells(b[0], a[0]))
        else:
            order = cmp_to_key(lambda a, b: compare_cells(a[0], b[0]))
        perm = sorted([(cell, i) for i, cell in enumerate(self.cells())], key=order)
        return [i + self.io for _, i in perm]


if __name__ == "__main__":
    import doctest
    doctest.testmod()
