"""
Scalar functions and a few generators the compiler needs to feed the
structural primitives: pervasive application, ⍳, ⍴, ≢ and ≡.
"""
from functools import cached_property
from typing import Any, Callable, Optional

from varray.arr import Array, V
from varray.core import VArray, element_at, generator_of, fetch, isarray, lift, render
from varray import etypes
from varray.errors import DomainError, LengthError, RankError
from varray.etypes import EType
from varray.shape import encode

def _singleton(x: VArray) -> bool:
    return x.size == 1

def pervasive_shape(operands: list[VArray]) -> tuple[int, ...]:
    """
    The common shape of the operands of a scalar function. Singletons
    extend to the shape of the others; if all are singletons, the one of
    highest rank wins.

    APL> 1 2 3+1 2
    LENGTH ERROR

    APL> 1 2 3+2 2⍴1
    RANK ERROR
    """
    shapes = [x.shape for x in operands if not _singleton(x)]
    if not shapes:
        return max((x.shape for x in operands), key=len)
    first = shapes[0]
    for s in shapes[1:]:
        if s != first:
            if len(s) == len(first):
                raise LengthError("LENGTH ERROR: Mismatched left and right argument shapes", first, s)
            raise RankError("RANK ERROR: Mismatched left and right argument ranks")
    return first

def _numeric(kinds: set) -> EType:
    if etypes.Kind.COMPLEX in kinds:
        return etypes.COMPLEX
    if etypes.Kind.FLOAT in kinds:
        return etypes.FLOAT
    return etypes.EType(etypes.Kind.INT)

class Operate(VArray):
    """
    Pervade a simple function f into its operands: either arguments of equal
    shapes, or singletons and arguments of any shape. Enclosed items are
    recursed into, giving enclosed results.

    f must have a signature of fn(alpha: int|float, omega: int|float) -> int|float,
    or take a single argument, for monadic application.

    Case 0: 1 + 2           # both scalar
    Case 1: 1 + 1 2 3       # left is scalar
    Case 2: 1 2 3 + 1       # right is scalar
    Case 3: 1 2 3 + 4 5 6   # equal shapes
    Case 4: ....            # length or rank error

    The element type of the result can be given, either as an EType or as a
    function of the operands' ETypes; by default it is numeric.
    """
    def __init__(self, fn: Callable, *operands: Any, etype: Optional[EType|Callable] = None) -> None:
        super().__init__()
        self.fn = fn
        self.operands = [lift(x) for x in operands]
        self._etype = etype

    @cached_property
    def shape(self) -> tuple[int, ...]:
        return pervasive_shape(self.operands)

    @cached_property
    def etype(self) -> EType:
        if isinstance(self._etype, EType):
            return self._etype
        types = [x.etype for x in self.operands]
        if any(t.kind == etypes.Kind.MIXED for t in types):
            return etypes.MIXED
        if callable(self._etype):
            return self._etype(*types)
        if not all(t.isnumeric() for t in types):
            raise DomainError("DOMAIN ERROR: expected numbers")
        return _numeric({t.kind for t in types})

    @cached_property
    def prototype(self) -> Any:
        if self.etype.kind == etypes.Kind.MIXED:
            return super().prototype
        return " " if self.etype.kind == etypes.Kind.CHAR else 0

    def indexer(self) -> Callable|Any:
        self.shape
        gens = [(generator_of(x), _singleton(x)) for x in self.operands]
        fn = self.fn

        def operated(i: int) -> Any:
            args = [fetch(gen, 0 if single else i) for gen, single in gens]
            if any(isarray(a) for a in args):
                return Operate(fn, *args, etype=self._etype)
            return fn(*args)

        return operated

class Iota(VArray):
    """
    Monadic: the APL range function, which can apply to any shape. Note that
    space and time grows very quick with the rank.

    APL> ⍳5
    0 1 2 3 4

    APL> ⍳2 3
    ┌───┬───┬───┬───┬───┬───┐
    │0 0│0 1│0 2│1 0│1 1│1 2│
    └───┴───┴───┴───┴───┴───┘
    """
    def __init__(self, base: Any, io: int = 0) -> None:
        super().__init__(base)
        self.io = io
        if self.base.rank > 1:
            raise RankError("RANK ERROR: ⍳ takes a scalar or a vector")
        dims = []
        for e in [element_at(self.base, i) for i in range(self.base.size)]:
            if type(e) != int or e < 0:
                raise DomainError("DOMAIN ERROR: ⍳ takes non-negative integers")
            dims.append(e)
        self.dims = tuple(dims)

    @cached_property
    def shape(self) -> tuple[int, ...]:
        return self.dims

    @property
    def vectors(self) -> bool:
        return self.base.rank == 1

    @cached_property
    def etype(self) -> EType:
        if self.vectors:
            return etypes.MIXED
        return etypes.integer(self.io, self.io + max(self.dims[0] - 1, 0))

    @cached_property
    def prototype(self) -> Any:
        if self.vectors:
            return Array([len(self.dims)], [0]*len(self.dims))
        return 0

    def indexer(self) -> Callable:
        io = self.io
        if not self.vectors:
            return lambda i: i + io
        shape = self.dims
        return lambda i: V([c + io for c in encode(shape, i)])

class ShapeOf(VArray):
    """
    Monadic ⍴ -- the shape, as a vector
    """
    @cached_property
    def shape(self) -> tuple[int, ...]:
        return (self.base.rank,)

    @cached_property
    def etype(self) -> EType:
        return etypes.integer(0, max(self.base.shape, default=0))

    @cached_property
    def prototype(self) -> Any:
        return 0

    def indexer(self) -> Callable:
        return self.base.shape.__getitem__

class Tally(VArray):
    """
    Monadic ≢ -- the number of major cells; 1 for a scalar
    """
    @cached_property
    def shape(self) -> tuple[int, ...]:
        return ()

    @cached_property
    def etype(self) -> EType:
        return etypes.integer(self.count, self.count)

    @cached_property
    def prototype(self) -> Any:
        return 0

    @cached_property
    def count(self) -> int:
        return self.base.shape[0] if self.base.rank else 1

    def indexer(self) -> Any:
        return self.count

class Depth(VArray):
    """
    Monadic ≡ -- the depth of nesting: 0 for a simple scalar, 1 for a
    simple array, and one more than the deepest item otherwise.

    This has to render its argument.
    """
    @cached_property
    def shape(self) -> tuple[int, ...]:
        return ()

    @cached_property
    def etype(self) -> EType:
        return etypes.EType(etypes.Kind.INT)

    @cached_property
    def prototype(self) -> Any:
        return 0

    def indexer(self) -> Any:
        value = render(self.base)
        return value.depth() if isinstance(value, Array) else 0


if __name__ == "__main__":
    import doctest
    doctest.testmod()
