"""
The virtual array protocol.

A virtual array describes an array transformation without computing its
elements. Every primitive instantiates a subclass of VArray that keeps
references to its operands (virtual or concrete, possibly shared with other
nodes) and answers, lazily and at most once each:

    shape       tuple of axis lengths
    etype       element type, see etypes.py
    prototype   fill value for empty or padded cells
    generator   linear index → element, or the element itself when
                the array holds a single known value

`render()` walks the graph and produces one concrete, nested `arr.Array`.
Elements which are themselves virtual arrays are enclosed values: they are
rendered on their own (subrendering) and stored as a single item.

The module-level functions (`shape_of()`, `render()` etc.) accept virtual
arrays, concrete arrays and bare scalars alike.
"""
from functools import cached_property
import logging
from typing import Any, Callable

from varray.arr import Array, S, V, typify
from varray import etypes
from varray.errors import DomainError, LengthError
from varray.etypes import EType
from varray.shape import size

logger = logging.getLogger(__name__)

class VArray:
    """
    Base class for all virtual arrays. Subclasses override `shape`, `etype`,
    `prototype` as needed, and implement `indexer()`.
    """
    def __init__(self, base: Any = None) -> None:
        self.base = None if base is None else lift(base)

    @cached_property
    def shape(self) -> tuple[int, ...]:
        return shape_of(self.base)

    @property
    def rank(self) -> int:
        return len(self.shape)

    @property
    def size(self) -> int:
        return size(self.shape)

    @cached_property
    def etype(self) -> EType:
        return etype_of(self.base)

    @cached_property
    def prototype(self) -> Any:
        if self.base is not None:
            return prototype_of(self.base)
        if self.size:
            return fill_of(element_at(self, 0))
        return 0

    @cached_property
    def generator(self) -> Callable|Any:
        return self.indexer()

    def indexer(self) -> Callable|Any:
        raise NotImplementedError

    def render(self, subrendering: bool = False) -> Any:
        shape = list(self.shape)
        count = size(shape)
        logger.debug("rendering %s %s", type(self).__name__, shape)

        gen = self.generator
        if callable(gen):
            data = [_settle(gen(i)) for i in range(count)]
        else:
            data = [_settle(gen) for _ in range(count)]

        if self.etype.kind in (etypes.Kind.BIT, etypes.Kind.INT):
            data = [int(e) if type(e) == bool else e for e in data]

        result = Array(shape, data, prototype=None if count else _settle(self.prototype))
        if subrendering:
            return result.unbox()
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

class Literal(VArray):
    """
    A concrete array presented through the virtual array protocol.
    """
    def __init__(self, array: Array) -> None:
        super().__init__()
        self.array = array

    @cached_property
    def shape(self) -> tuple[int, ...]:
        return tuple(self.array.shape)

    @cached_property
    def etype(self) -> EType:
        if self.array.nested:
            return etypes.MIXED
        if not self.array.data and self.array._prototype == ' ':
            return etypes.CHAR
        return etypes.etype_of_values(self.array.data)

    @cached_property
    def prototype(self) -> Any:
        return self.array.prot()

    def indexer(self) -> Callable|Any:
        if not self.array.shape:
            return self.array.data[0]
        return self.array.data.__getitem__

    def render(self, subrendering: bool = False) -> Any:
        if subrendering:
            return self.array.unbox()
        return self.array

    def __repr__(self) -> str:
        return f"Literal({self.array})"

class Buffered(VArray):
    """
    A virtual array whose elements can only be had all at once (sorting,
    searching, random draws). Subclasses implement `compute()`, which is
    run at most once, when the generator is first needed. Vector-valued
    unless `shape` is overridden.
    """
    def compute(self) -> list:
        raise NotImplementedError

    @cached_property
    def content(self) -> list:
        logger.debug("building content of %s", type(self).__name__)
        return self.compute()

    @cached_property
    def shape(self) -> tuple[int, ...]:
        return (len(self.content),)

    def indexer(self) -> Callable|Any:
        return self.content.__getitem__

def _concrete(x: Any) -> Any:
    """
    Python values to array items: lists and tuples become vectors, strings
    character vectors.
    """
    if isinstance(x, (list, tuple)):
        return V([_concrete(e) for e in x])
    if type(x) == bool:
        return int(x)
    return x

def _settle(value: Any) -> Any:
    if isinstance(value, VArray):
        return value.render(subrendering=True)
    return value

def lift(x: Any) -> VArray:
    """
    Wrap anything array-like as a virtual array.
    """
    if isinstance(x, VArray):
        return x
    if isinstance(x, Array):
        return Literal(x)
    x = _concrete(x)
    if isinstance(x, Array):
        return Literal(x)
    if type(x) == str and len(x) != 1:
        return Literal(V(x))
    return Literal(S(x))

def fetch(gen: Callable|Any, index: int) -> Any:
    """
    Apply a generator, which might be a value standing in for itself.
    """
    return gen(index) if callable(gen) else gen

def shape_of(x: Any) -> tuple[int, ...]:
    if isinstance(x, VArray):
        return x.shape
    if isinstance(x, Array):
        return tuple(x.shape)
    return ()

def rank_of(x: Any) -> int:
    return len(shape_of(x))

def size_of(x: Any) -> int:
    return size(shape_of(x))

def etype_of(x: Any) -> EType:
    if isinstance(x, VArray):
        return x.etype
    if isinstance(x, Array):
        return Literal(x).etype
    return etypes.etype_of_value(x)

def prototype_of(x: Any) -> Any:
    if isinstance(x, VArray):
        return x.prototype
    if isinstance(x, Array):
        return x.prot()
    return typify(x)

def generator_of(x: Any) -> Callable|Any:
    if isinstance(x, VArray):
        return x.generator
    if isinstance(x, Array):
        return Literal(x).indexer()
    return x

def element_at(x: Any, index: int) -> Any:
    """
    Row-major item of x, unrendered.
    """
    if isinstance(x, VArray):
        return fetch(x.generator, index)
    if isinstance(x, Array):
        return x.data[index]
    return x

def render(x: Any, subrendering: bool = False) -> Any:
    if isinstance(x, VArray):
        return x.render(subrendering=subrendering)
    if isinstance(x, Array):
        return x.unbox() if subrendering else x
    if subrendering:
        return x
    return S(x)

def fill_of(value: Any) -> Any:
    """
    Prototype for an item: numbers give 0, characters blank, arrays an
    array of the same shape filled likewise.
    """
    return typify(_settle(value))

def isarray(value: Any) -> bool:
    """
    True if the value is an array rather than a simple scalar.
    """
    if isinstance(value, VArray):
        return not (value.shape == () and not isarray(element_at(value, 0)))
    if isinstance(value, Array):
        return not value.issimple()
    return False

def items(x: Any) -> list:
    """
    All items of x in row-major order, rendered.
    """
    if not isinstance(x, (VArray, Array)):
        x = lift(x)
    gen = generator_of(x)
    return [_settle(fetch(gen, i)) for i in range(size_of(x))]

def as_ints(x: Any, what: str = "argument") -> list[int]:
    """
    The ravel of x as Python ints, or raise DOMAIN ERROR.
    """
    result = []
    for e in items(x):
        if isinstance(e, Array):
            raise DomainError(f"DOMAIN ERROR: {what} must be simple")
        if type(e) == float and e.is_integer():
            e = int(e)
        if type(e) != int:
            raise DomainError(f"DOMAIN ERROR: {what} must be integer")
        result.append(e)
    return result

def as_int(x: Any, what: str = "argument") -> int:
    values = as_ints(x, what)
    if len(values) != 1:
        raise LengthError(f"LENGTH ERROR: {what} must be a single integer", shape_of(lift(x)))
    return values[0]
