"""
Concrete arrays: the result of rendering a virtual array.

An Array has a flat, row-major list of items and an integer-valued shape
vector. Each item is either a simple scalar (int, float, complex or
length-1 string) or another Array, which makes it an enclosed (boxed) item.
"""
import math
from typing import Any, Sequence

from varray.errors import DomainError, RankError

class Array:
    """
    An Array has a sequence of items, and a integer-valued shape vector. Each item
    in the data sequence is either a scalar (int, float, complex, or length-1 string),
    or another Array.

    If the array is empty, its prototype can be given explicitly; otherwise it's
    derived from the first item.
    """
    def __init__(self, shape: Sequence[int], data: list, prototype: Any = None) -> None:
        assert type(data) == list
        self.shape = list(shape)
        self.rank = len(self.shape)
        self.bound = math.prod(self.shape)
        self.nested = False
        self._prototype = prototype

        # Turn strings of len != 1 into character vectors, and check for
        # flat vs nested.
        for i in range(len(data)):
            if type(data[i]) == str and len(data[i]) != 1:
                data[i] = V(data[i])
            if isinstance(data[i], Array):
                if data[i].issimple():
                    data[i] = data[i].data[0]
                else:
                    self.nested = True
        self.data = data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Array):
            return NotImplemented
        return match(self, other)

    def issimple(self) -> bool:
        return self.shape == [] and len(self.data) == 1 and not isinstance(self.data[0], Array)

    def isscalar(self) -> bool:
        return self.shape == []

    def unbox(self) -> Any:
        """
        Simple scalars come out as the bare Python value.
        """
        if self.issimple():
            return self.data[0]
        return self

    def as_list(self) -> list:
        if self.rank > 1:
            raise RankError("RANK ERROR: expected a vector")
        data = []
        for e in self.data:
            if isinstance(e, Array):
                if not e.issimple():
                    raise DomainError("DOMAIN ERROR: expected simple scalars")
                data.append(e.data[0])
            else:
                data.append(e)
        return data

    def prot(self) -> Any:
        """
        Prototypal element: the fill used when the array is padded, or
        reshaped from nothing.
        """
        if not self.data:
            if self._prototype is not None:
                return self._prototype
            return 0
        return typify(self.data[0])

    def depth(self) -> int:
        if self.issimple():
            return 0
        inner = [e.depth() for e in self.data if isinstance(e, Array)]
        return 1 + max(inner, default=0)

    def tolist(self) -> Any:
        """
        Nested Python lists, mainly for tests and for debugging.
        """
        def unravel(data: list, shape: list[int]) -> Any:
            if not shape:
                e = data[0]
                return e.tolist() if isinstance(e, Array) else e
            step = math.prod(shape[1:])
            return [unravel(data[i*step:(i+1)*step] if step else [], shape[1:]) for i in range(shape[0])]

        if self.shape == []:
            e = self.data[0]
            return e.tolist() if isinstance(e, Array) else e
        return unravel(self.data, self.shape)

    def __repr__(self) -> str:
        return str(self)

    def __str__(self) -> str:
        if len(self.shape) == 1:
            return f"V({self.shape}, {self.data})"
        if not self.shape:
            return f"S({self.data})"
        return f"A({self.shape}, {self.data})"

# A few convenience pseudo-constructors
def V(data: list|str) -> Array:
    if type(data) == str:
        return Array([len(data)], list(data), prototype=' ')
    return Array([len(data)], list(data))

def S(item: int|float|complex|Array|str) -> Array:
    return Array([], [item])

def A(shape: list[int], data: list) -> Array:
    return Array(shape, list(data))

def enclose_if_simple(a: Any) -> Array:
    return a if isinstance(a, Array) else S(a)

def typify(value: Any) -> Any:
    """
    The fill of a value: numbers become 0, characters blank, recursively.

    >>> typify(V('ab1')).data
    [' ', ' ', ' ']
    """
    if isinstance(value, Array):
        return Array(value.shape, [typify(e) for e in value.data], prototype=value.prot() if not value.data else None)
    if type(value) == str:
        return ' '
    return 0

def match(a: Any, w: Any) -> bool:
    """
    Structural equality, recursively, including shape.
    """
    a = enclose_if_simple(a)
    w = enclose_if_simple(w)

    if a.shape != w.shape:
        return False

    for i in range(a.bound):
        left = a.data[i]
        right = w.data[i]
        if isinstance(left, Array) or isinstance(right, Array):
            if not (isinstance(left, Array) and isinstance(right, Array)):
                return False
            if not match(left, right):
                return False
        elif type(left) == str or type(right) == str:
            if type(left) != type(right) or left != right:
                return False
        elif left != right:
            return False

    return True


if __name__ == "__main__":
    import doctest
    doctest.testmod()
