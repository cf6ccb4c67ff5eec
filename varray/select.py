"""
Selection and assignment: bracket indexing, selective assignment under a
Boolean mask, and reach indexing through nested arrays with pick.

See https://aplwiki.com/wiki/Bracket_indexing
    https://aplwiki.com/wiki/Pick
"""
from functools import cached_property
import logging
from typing import Any, Callable, Optional, Sequence

from bitarray import bitarray

from varray.arr import Array
from varray.core import (VArray, as_ints, element_at, etype_of, fetch, fill_of, generator_of,
                         isarray, items, lift, prototype_of, shape_of)
from varray import etypes
from varray import errors
from varray.errors import DomainError, LengthError, RankError
from varray.etypes import EType
from varray.indexing import Encoding, IndexTransform, Link
from varray.shape import decode, encode, size, strides

logger = logging.getLogger(__name__)

class Select(IndexTransform):
    """
    A[Y1;Y2;...;Yn] -- bracket indexing, and bracket assignment
    A[Y1;...]←V or A[Y1;...]f←V when given `assign` and/or `fn`.

    APL Wiki:

      For higher-rank array X with rank n, the notation X[Y1;Y2;...;Yn] selects the
      indexes of X over each axis. If some Yk is omitted, it implies all indices of
      k-th axis is selected, which is equivalent to specifying ⍳(⍴X)[k]. The resulting
      shape is the concatenation of shapes of Y1, Y2, ..., Yn.

    a←3 3⍴⍳9
    a[;2]
    ┌→────┐
    │2 5 8│
    └~────┘

    Select(a, [None, 2])

    Omitted indices are given as None. Assignment yields the whole amended
    array, and shares the selection logic with indexing.
    """
    def __init__(self, base: Any, indices: Any, assign: Optional[Any] = None,
                 fn: Optional[Callable] = None, io: int = 0) -> None:
        super().__init__(base)
        if not isinstance(indices, (list, tuple)):
            indices = [indices]
        self.indices = [None if y is None else lift(y) for y in indices]
        self.assign = None if assign is None else lift(assign)
        self.fn = fn
        self.io = io
        if len(self.indices) != self.base.rank:
            raise RankError(f"RANK ERROR: {len(self.indices)} indices for an array of rank {self.base.rank}")

    @property
    def foldable(self) -> bool:
        return self.assign is None and self.fn is None

    @cached_property
    def selection_shape(self) -> tuple[int, ...]:
        shape: list[int] = []
        for n, y in zip(self.base.shape, self.indices):
            if y is None:
                shape.append(n)
            else:
                shape.extend(y.shape)
        return tuple(shape)

    @cached_property
    def shape(self) -> tuple[int, ...]:
        if self.foldable:
            return self.selection_shape
        if self.assign is not None:
            _check_fit(self.assign, self.selection_shape)
        return self.base.shape

    @cached_property
    def plan(self) -> list[tuple[int, Callable]]:
        """
        Per axis of the base: how many result axes it takes, and how to
        find the base coordinate from those. Index values are checked here.
        """
        plan: list[tuple[int, Callable]] = []
        for axis, (n, y) in enumerate(zip(self.base.shape, self.indices)):
            if y is None:
                plan.append((1, lambda c: c[0]))
                continue
            values = [v - self.io for v in as_ints(y, "index")]
            for v in values:
                if not 0 <= v < n:
                    raise errors.IndexError(f"INDEX ERROR: {v + self.io} out of range for axis {axis + self.io}")
            if y.rank == 0:
                plan.append((0, lambda c, v=values[0]: v))
            else:
                plan.append((y.rank, lambda c, vs=values, s=y.shape: vs[decode(s, c)]))
        return plan

    def _locate(self, cvec: Sequence[int]) -> tuple:
        pos = 0
        result = []
        for k, lookup in self.plan:
            result.append(lookup(cvec[pos:pos+k]))
            pos += k
        return tuple(result)

    def link(self) -> Link:
        return Link(Encoding.DECODED, self._locate, self.shape, self.base.shape)

    @cached_property
    def targets(self) -> dict[int, int]:
        """
        Base position → position in the selection. Where an index is
        repeated, the last one wins.
        """
        factors = strides(self.base.shape)
        sshape = self.selection_shape
        result = {}
        for j in range(size(sshape)):
            cvec = self._locate(encode(sshape, j))
            result[sum(c*f for c, f in zip(cvec, factors))] = j
        logger.debug("selective assignment to %d cells", len(result))
        return result

    @cached_property
    def etype(self) -> EType:
        if self.foldable:
            return etype_of(self.base)
        if self.fn is not None:
            return etypes.MIXED
        return etypes.join(etype_of(self.base), etype_of(self.assign))

    def indexer(self) -> Callable|Any:
        if self.foldable:
            return super().indexer()

        values = _assignment(self.assign, self.selection_shape)
        return _amended(generator_of(self.base), self.targets, values, self.fn, self.assign is not None)

class MaskAssign(VArray):
    """
    (mask/A)←V -- selective assignment under a Boolean mask of the same
    shape as the array.

    APL> a←10 20 30 40 50 ⋄ ((0 1 0 1 1)/a)←99 98 97 ⋄ a
    10 99 30 98 97
    """
    def __init__(self, base: Any, mask: Any, values: Any, fn: Optional[Callable] = None) -> None:
        super().__init__(base)
        self.mask = lift(mask)
        self.values = lift(values)
        self.fn = fn

    @cached_property
    def shape(self) -> tuple[int, ...]:
        if self.mask.shape != self.base.shape:
            raise LengthError("LENGTH ERROR: mask must have the shape of the array", self.mask.shape, self.base.shape)
        return self.base.shape

    @cached_property
    def slots(self) -> dict[int, int]:
        """
        True position → slot in the compacted value buffer.
        """
        try:
            bits = bitarray(items(self.mask))
        except (TypeError, ValueError):
            raise DomainError("DOMAIN ERROR: expected Boolean mask")
        return {pos: slot for slot, pos in enumerate(bits.search(bitarray([True])))}

    @cached_property
    def etype(self) -> EType:
        if self.fn is not None:
            return etypes.MIXED
        return etypes.join(etype_of(self.base), etype_of(self.values))

    def indexer(self) -> Callable:
        self.shape  # Shape errors first
        slots = self.slots
        values = _assignment(self.values, (len(slots),))
        return _amended(generator_of(self.base), slots, values, self.fn, True)

def _check_fit(values: VArray, shape: tuple[int, ...]) -> None:
    if values.size == 1 and values.rank <= 1:
        return
    if values.shape != shape and not (values.size == size(shape) and values.rank == 1 and len(shape) == 1):
        raise LengthError("LENGTH ERROR: values do not fit the selection", values.shape, shape)

def _assignment(values: Optional[VArray], shape: tuple[int, ...]) -> Optional[Callable]:
    """
    Dense buffer of the values to assign, scalar-extended to shape.
    """
    if values is None:
        return None
    if values.size == 1 and values.rank <= 1:
        only = element_at(values, 0)
        return lambda j: only
    _check_fit(values, shape)
    buffer = [fetch(generator_of(values), j) for j in range(values.size)]
    return buffer.__getitem__

def _amended(gen: Callable|Any, targets: dict[int, int], values: Optional[Callable],
             fn: Optional[Callable], dyadic: bool) -> Callable:
    def amended(i: int) -> Any:
        j = targets.get(i)
        old = fetch(gen, i)
        if j is None:
            return old
        if fn is None:
            return values(j)
        if dyadic:
            return fn(_value(old), _value(values(j)))
        return fn(_value(old))
    return amended

def _value(x: Any) -> Any:
    if isinstance(x, VArray):
        return x.render(subrendering=True)
    return x

def path_steps(path: Any) -> list[list[int]]:
    """
    Split a pick path into its steps, one coordinate vector per level.

    >>> path_steps([1, [0, 2]])
    [[1], [0, 2]]
    """
    if isinstance(path, (list, tuple)):
        steps = path
    else:
        p = lift(path)
        steps = [p] if p.rank == 0 and not isarray(element_at(p, 0)) else items(p)
    result = []
    for step in steps:
        if isinstance(step, (list, tuple)):
            result.append([int(v) for v in step])
        elif isinstance(step, (Array, VArray)):
            result.append(as_ints(step, "pick path"))
        else:
            result.append(as_ints(lift(step), "pick path"))
    return result

class Pick(VArray):
    """
    Dyadic ⊃ -- reach into nested arrays along a path, one coordinate
    vector per level of nesting.

    APL> 1 2⊃'foo' 'bar'
    r

    With `assign` (and/or `fn`), installs a new item at that place instead.
    Only the items on the path from the root to the target are rebuilt;
    every other item is the base's own.
    """
    def __init__(self, base: Any, path: Any, assign: Optional[Any] = None,
                 fn: Optional[Callable] = None, io: int = 0) -> None:
        super().__init__(base)
        self.path = path_steps(path) if not isinstance(path, _Steps) else path.steps
        self.assign = assign
        self.fn = fn
        self.io = io

    @property
    def assigning(self) -> bool:
        return self.assign is not None or self.fn is not None

    def _offset(self, node: Any, step: list[int], depth: int) -> int:
        shape = shape_of(node)
        if not isarray(node):
            raise errors.IndexError(f"INDEX ERROR: pick path goes deeper than the array (step {depth})")
        if len(step) != len(shape):
            raise RankError(f"RANK ERROR: step {depth} of the pick path has {len(step)} coordinates for rank {len(shape)}")
        coords = [c - self.io for c in step]
        for c, n in zip(coords, shape):
            if not 0 <= c < n:
                raise errors.IndexError(f"INDEX ERROR: pick path step {depth} is out of range")
        return decode(shape, coords)

    @cached_property
    def target(self) -> Any:
        node: Any = self.base
        for depth, step in enumerate(self.path):
            node = element_at(node, self._offset(node, step, depth))
        return node

    @cached_property
    def whole(self) -> Any:
        return self._replacement(self.base)

    @cached_property
    def shape(self) -> tuple[int, ...]:
        if self.assigning:
            return self.base.shape if self.path else shape_of(self.whole)
        return shape_of(self.target)

    @cached_property
    def etype(self) -> EType:
        if self.assigning:
            return etypes.MIXED
        return etype_of(self.target)

    @cached_property
    def prototype(self) -> Any:
        if self.assigning:
            return prototype_of(self.base)
        return prototype_of(self.target)

    def indexer(self) -> Callable|Any:
        if not self.assigning:
            return generator_of(self.target)

        if not self.path:
            return generator_of(self.whole)

        self.target  # Whole path must exist

        gen = generator_of(self.base)
        at = self._offset(self.base, self.path[0], 0)
        rest = self.path[1:]

        def picked(i: int) -> Any:
            old = fetch(gen, i)
            if i != at:
                return old
            if not rest:
                return self._replacement(old)
            return Pick(old, _Steps(rest), assign=self.assign, fn=self.fn, io=self.io)

        return picked

    def _replacement(self, old: Any) -> Any:
        if self.fn is None:
            new = self.assign
        elif self.assign is None:
            new = self.fn(_value(old))
        else:
            new = self.fn(_value(old), _value(self.assign))
        if isinstance(new, (Array, VArray, list, tuple)) or (type(new) == str and len(new) != 1):
            return lift(new)
        return new

class _Steps:
    """
    An already split pick path, so that the spine rebuild doesn't parse it again.
    """
    def __init__(self, steps: list[list[int]]) -> None:
        self.steps = steps

class First(VArray):
    """
    Monadic ⊃ -- the first item, disclosed. An empty array gives its prototype.
    """
    @cached_property
    def target(self) -> Any:
        if self.base.size == 0:
            return prototype_of(self.base)
        return element_at(self.base, 0)

    @cached_property
    def shape(self) -> tuple[int, ...]:
        return shape_of(self.target)

    @cached_property
    def etype(self) -> EType:
        return etype_of(self.target)

    @cached_property
    def prototype(self) -> Any:
        return fill_of(self.target)

    def indexer(self) -> Callable|Any:
        return generator_of(self.target)


if __name__ == "__main__":
    import doctest
    doctest.testmod()
