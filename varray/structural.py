"""
Structural primitives: reshape, take/drop, transpose, rotate, catenate,
replicate, and the rank-changing nesting functions mix, split, enclose and
partition.

None of these compute anything. The ones that renumber are IndexTransforms
(see indexing.py) and fold with each other; catenate picks an operand per
cell; the nesting functions hand out SubArray views into their base rather
than copying cells out.
"""
from bisect import bisect_right
from functools import cached_property
import logging
import math
from typing import Any, Callable, Optional, Sequence

from varray.core import (VArray, as_int, as_ints, element_at, etype_of, fill_of, generator_of,
                         isarray, lift, prototype_of, shape_of)
from varray import etypes
from varray.errors import DomainError, LengthError, RankError
from varray.etypes import EType
from varray.indexing import (Encoding, IndexTransform, Link, Span, affine_link, drop_span,
                             identity_link, merge_layouts, section_link, take_span)
from varray.shape import check_axis, decode, encode, strides

logger = logging.getLogger(__name__)

class Reshape(IndexTransform):
    """
    Dyadic ⍴ -- reshape. Will truncate, or cycle the data if the new shape
    implies fewer or more elements than the source.

    APL> 2 5⍴1 2 3
    1 2 3 1 2
    3 1 2 3 1

    An empty source fills the result with its prototype.
    """
    def __init__(self, base: Any, shape: Any) -> None:
        super().__init__(base)
        arg = lift(shape)
        if arg.rank > 1:
            raise RankError("RANK ERROR: shape must be a scalar or a vector")
        dims = as_ints(arg, "shape")
        if any(d < 0 for d in dims):
            raise DomainError("DOMAIN ERROR: shape must be non-negative")
        self._dims = tuple(dims)

    @cached_property
    def shape(self) -> tuple[int, ...]:
        return self._dims

    def link(self) -> Link:
        n = self.source.size
        if n == 0:
            return Link(Encoding.LINEAR, lambda i: None, self.shape, self.source.shape)
        if n >= math.prod(self.shape):
            return identity_link(self.shape)
        return Link(Encoding.LINEAR, lambda i: i % n, self.shape, self.source.shape)

    @cached_property
    def etype(self) -> EType:
        if self.source.size == 0:
            return etypes.etype_of_value(prototype_of(self.source))
        return etype_of(self.source)

class Ravel(Reshape):
    """
    Monadic , -- the elements of the argument as a vector.
    """
    def __init__(self, base: Any) -> None:
        base = lift(base)
        super().__init__(base, [base.size])

class Table(Reshape):
    """
    Monadic ⍪ -- https://aplwiki.com/wiki/Table

    Table is equivalent to reshaping with the shape where all trailing axis lengths have been
    replaced by their product.
    """
    def __init__(self, base: Any) -> None:
        base = lift(base)
        if not base.shape:
            dims = [1, 1]
        else:
            dims = [base.shape[0], math.prod(base.shape[1:])]
        super().__init__(base, dims)

class Section(IndexTransform):
    """
    Dyadic ↑ and ↓ -- take and drop, https://aplwiki.com/wiki/Take

    Each axis of the result is a span of the source's axis, with prototype
    padding before or after when taking more than is there:

    APL> ¯5↑1 2 3
    0 0 1 2 3

    A section of a section is merged into one on construction, so the
    composite needs a single bounds check per axis.
    """
    def __init__(self, base: Any, counts: Any, axis: Optional[Any] = None, drop: bool = False, io: int = 0) -> None:
        super().__init__(base)
        arg = lift(counts)
        if arg.rank > 1:
            raise RankError("RANK ERROR: left argument must be a scalar or a vector")
        self.counts = as_ints(arg, "left argument")
        self.drop = drop

        self.axes: Optional[list[int]] = None
        if axis is not None:
            self.axes = as_ints(axis, "axis")
            if len(self.axes) != len(self.counts):
                raise LengthError("LENGTH ERROR: one count is needed per axis", (len(self.counts),), (len(self.axes),))

        if self.base.rank == 0 and self.axes is None:  # Scalar extension
            self.base = Reshape(self.base, [1]*len(self.counts))

        if self.axes is not None:
            self.axes = [check_axis(a, self.base.rank, io) for a in self.axes]
        elif len(self.counts) > self.base.rank:
            raise RankError("RANK ERROR: more counts than axes")

    @cached_property
    def layout(self) -> list[Span]:
        """
        Per-axis spans against the base.
        """
        shape = self.base.shape
        axes = self.axes if self.axes is not None else range(len(self.counts))
        spans = [Span(0, n) for n in shape]
        cut = drop_span if self.drop else take_span
        for a, count in zip(axes, self.counts):
            spans[a] = cut(count, shape[a])
        return spans

    @cached_property
    def resolved(self) -> tuple[VArray, list[Span]]:
        """
        Source and layout after merging with any section directly below.
        """
        if isinstance(self.base, Section):
            source, inner = self.base.resolved
            return source, merge_layouts(inner, self.layout)
        return self.base, self.layout

    @property
    def source(self) -> VArray:
        return self.resolved[0]

    @cached_property
    def shape(self) -> tuple[int, ...]:
        return tuple(s.extent for s in self.resolved[1])

    def link(self) -> Link:
        return section_link(self.resolved[1], self.source.shape)

    @cached_property
    def etype(self) -> EType:
        spans = self.resolved[1]
        if any(s.before or s.after for s in spans):
            return etypes.join(etype_of(self.source), etypes.etype_of_value(prototype_of(self.source)))
        return etype_of(self.source)

class Take(Section):
    def __init__(self, base: Any, counts: Any, axis: Optional[Any] = None, io: int = 0) -> None:
        super().__init__(base, counts, axis=axis, drop=False, io=io)

class Drop(Section):
    def __init__(self, base: Any, counts: Any, axis: Optional[Any] = None, io: int = 0) -> None:
        super().__init__(base, counts, axis=axis, drop=True, io=io)

class Permute(IndexTransform):
    """
    Monadic and dyadic transpose. Dyadic transpose is a generalisation of
    the monadic case, which reverses the axes. In the dyadic case, axes can
    be in any order.

    APL> ,2 0 1⍉2 3 4⍴⍳×/2 3 4
    0 12 1 13 2 14 3 15 4 16 5 17 6 18 7 19 8 20 9 21 10 22 11 23

    The left argument is NOT the new shape: item i gives the result axis
    that source axis i goes to. Repeated axes select a diagonal:

    APL> 0 0⍉3 3⍴⍳9
    0 4 8
    """
    def __init__(self, base: Any, axes: Optional[Any] = None, io: int = 0) -> None:
        super().__init__(base)
        self.axes: Optional[list[int]] = None
        if axes is not None:
            arg = lift(axes)
            if arg.rank > 1:
                raise RankError("RANK ERROR: left argument must be a vector")
            self.axes = [a - io for a in as_ints(arg, "left argument")]

    @cached_property
    def targets(self) -> list[int]:
        rank = self.base.rank
        if self.axes is None:
            return list(range(rank-1, -1, -1))
        if len(self.axes) != rank:
            raise LengthError("LENGTH ERROR: left argument must have one item per axis", (len(self.axes),), self.base.shape)
        if set(self.axes) != set(range(max(self.axes, default=-1)+1)):
            raise DomainError("DOMAIN ERROR: left argument must cover each result axis")
        return self.axes

    @cached_property
    def shape(self) -> tuple[int, ...]:
        targets = self.targets
        base_shape = self.base.shape
        result = []
        for t in range(len(set(targets))):
            # Repeated axes contract to the shortest
            result.append(min(base_shape[i] for i, a in enumerate(targets) if a == t))
        return tuple(result)

    def link(self) -> Link:
        targets = tuple(self.targets)
        def permuted(cvec: tuple) -> tuple:
            return tuple(cvec[t] for t in targets)
        return Link(Encoding.DECODED, permuted, self.shape, self.base.shape)

class Rotate(IndexTransform):
    """
    ⌽ and ⊖ -- rotate along an axis, or reverse if no amount is given.

    APL> 1⌽3 4⍴⍳12
    1  2  3 0
    5  6  7 4
    9 10 11 8

    The amount is taken modulo the axis length. A vector (or higher rank)
    amount rotates each line along the axis by its own amount. A scalar
    rotation of a scalar rotation on the same axis is folded into one.
    """
    def __init__(self, base: Any, amount: Optional[Any] = None, axis: Optional[int] = None,
                 first: bool = False, io: int = 0) -> None:
        super().__init__(base)
        self.amount = None if amount is None else lift(amount)
        self.axis = axis
        self.first = first
        self.io = io

    @cached_property
    def resolved_axis(self) -> int:
        rank = self.base.rank
        if self.axis is not None:
            return check_axis(self.axis, rank, self.io)
        if rank == 0:
            return 0
        return 0 if self.first else rank - 1

    def _scalar_amount(self) -> Optional[int]:
        if self.amount is None or self.amount.size != 1:
            return None
        return as_int(self.amount, "rotation")

    @cached_property
    def resolved(self) -> tuple[VArray, Optional[int]]:
        """
        Source and scalar amount, after folding with a scalar rotation
        on the same axis directly below.
        """
        amount = self._scalar_amount()
        if amount is not None and isinstance(self.base, Rotate) and self.base.rank:
            inner = self.base._scalar_amount()
            if inner is not None and self.base.resolved_axis == self.resolved_axis:
                source, inner_total = self.base.resolved
                logger.debug("folding rotations %d and %d", inner_total, amount)
                return source, inner_total + amount
        return self.base, amount

    @property
    def source(self) -> VArray:
        return self.resolved[0]

    @cached_property
    def shape(self) -> tuple[int, ...]:
        shape = self.base.shape
        if self.amount is not None and self.amount.size != 1 and shape:
            # One amount per line along the axis
            axis = self.resolved_axis
            others = shape[:axis] + shape[axis+1:]
            if self.amount.shape != others:
                raise LengthError("LENGTH ERROR: rotation amounts must match the other axes", self.amount.shape, others)
        return shape

    def link(self) -> Link:
        shape = self.shape
        if not shape:
            return Link(Encoding.DECODED, lambda c: c, (), ())

        axis = self.resolved_axis
        n = shape[axis]
        amount = self.resolved[1]

        if self.amount is None:
            def reverse(cvec: tuple) -> tuple:
                c = list(cvec)
                c[axis] = n - 1 - c[axis]
                return tuple(c)
            return Link(Encoding.DECODED, reverse, shape, shape)

        if amount is not None:
            def rotate(cvec: tuple) -> tuple:
                c = list(cvec)
                c[axis] = (c[axis] + amount) % n
                return tuple(c)
            return Link(Encoding.DECODED, rotate, shape, shape)

        others = shape[:axis] + shape[axis+1:]
        amounts = as_ints(self.amount, "rotation")
        def rotate_lines(cvec: tuple) -> tuple:
            c = list(cvec)
            k = amounts[decode(others, c[:axis] + c[axis+1:])]
            c[axis] = (c[axis] + k) % n
            return tuple(c)
        return Link(Encoding.DECODED, rotate_lines, shape, shape)

class Catenate(VArray):
    """
    Dyadic , and ⍪ -- join arrays along an existing axis, last by default
    (first for ⍪). A fractional axis laminates: the arrays are stacked
    along a new axis inserted at that position.

    APL> (2 3⍴⍳6),[0]1 3⍴9
    0 1 2
    3 4 5
    9 9 9

    APL> 1 2 3,[¯0.5]4 5 6
    1 2 3
    4 5 6

    Operands may be one rank short, or scalars, both of which are extended.
    """
    def __init__(self, arrays: Sequence[Any], axis: Optional[int|float] = None, first: bool = False, io: int = 0) -> None:
        super().__init__()
        if not arrays:
            raise LengthError("LENGTH ERROR: nothing to catenate")
        self.arrays = [lift(a) for a in arrays]
        self.axis = axis
        self.first = first
        self.io = io

    @property
    def laminating(self) -> bool:
        return self.axis is not None and not float(self.axis).is_integer()

    @cached_property
    def layout(self) -> tuple[int, list[int], tuple[int, ...]]:
        """
        The join axis, the offset of each operand along it, and the result shape.
        """
        shapes = [a.shape for a in self.arrays]
        rank = max(len(s) for s in shapes)

        if self.laminating:
            pos = math.floor(self.axis - self.io) + 1
            if not 0 <= pos <= rank:
                raise RankError(f"RANK ERROR: invalid axis {self.axis}")
            cell = [s for s in shapes if s]
            for s in cell[1:]:
                if s != cell[0]:
                    raise LengthError("LENGTH ERROR: laminated arrays must have the same shape", cell[0], s)
            inner = list(cell[0]) if cell else []
            shape = inner[:pos] + [len(self.arrays)] + inner[pos:]
            return pos, list(range(len(self.arrays))), tuple(shape)

        rank = max(rank, 1)
        if self.axis is None:
            axis = 0 if self.first else rank - 1
        else:
            axis = check_axis(int(self.axis), rank, self.io)

        reference = next((s for s in shapes if len(s) == rank), None)
        if reference is None:  # Everything is one short: a new axis of length one each
            reference = next(s for s in shapes if len(s) == rank - 1)
            reference = reference[:axis] + (1,) + reference[axis:]

        extents = []
        for s in shapes:
            if len(s) == rank:
                full = s
            elif not s:
                full = reference[:axis] + (1,) + reference[axis+1:]
            elif len(s) == rank - 1:
                full = s[:axis] + (1,) + s[axis:]
            else:
                raise RankError("RANK ERROR: catenated arrays differ in rank by more than one")
            if full[:axis] + full[axis+1:] != reference[:axis] + reference[axis+1:]:
                raise LengthError("LENGTH ERROR: catenated arrays must agree off the join axis", *shapes)
            extents.append(full[axis])

        offsets = [0]
        for e in extents:
            offsets.append(offsets[-1] + e)
        shape = list(reference)
        shape[axis] = offsets[-1]
        return axis, offsets[:-1], tuple(shape)

    @cached_property
    def shape(self) -> tuple[int, ...]:
        return self.layout[2]

    @cached_property
    def etype(self) -> EType:
        acc = None
        for a in self.arrays:
            acc = etypes.join(acc, etype_of(a))
        return acc

    @cached_property
    def prototype(self) -> Any:
        return prototype_of(self.arrays[0])

    def indexer(self) -> Callable:
        axis, offsets, shape = self.layout
        gens = [generator_of(a) for a in self.arrays]
        shapes = [a.shape for a in self.arrays]
        factors = [strides(s) for s in shapes]

        def locate(i: int) -> Any:
            cvec = encode(shape, i)
            if self.laminating:
                which = cvec[axis]
                local = cvec[:axis] + cvec[axis+1:]
            else:
                which = bisect_right(offsets, cvec[axis]) - 1
                local = cvec[:]
                local[axis] -= offsets[which]
                if len(shapes[which]) < len(shape):
                    del local[axis]
            gen = gens[which]
            if not callable(gen):
                return gen
            if not shapes[which]:
                return gen(0)
            return gen(sum(c*f for c, f in zip(local, factors[which])))

        return locate

class Compress(IndexTransform):
    """
    Dyadic / and ⌿ -- replicate along the last (first) axis.

    APL> 1 0 2/'abc'
    acc

    Negative counts insert that many prototype cells. If there are fewer
    counts than cells along the axis, the remaining cells are dropped.
    """
    def __init__(self, base: Any, degrees: Any, axis: Optional[int] = None, first: bool = False, io: int = 0) -> None:
        super().__init__(base)
        arg = lift(degrees)
        if arg.rank > 1:
            raise RankError("RANK ERROR: left argument must be a scalar or a vector")
        self.degrees = as_ints(arg, "left argument")
        self.scalar_degree = arg.rank == 0
        if self.base.rank == 0:
            self.base = Reshape(self.base, [len(self.degrees)])
        self.axis = axis
        self.first = first
        self.io = io

    @cached_property
    def resolved_axis(self) -> int:
        if self.axis is not None:
            return check_axis(self.axis, self.base.rank, self.io)
        return 0 if self.first else self.base.rank - 1

    @cached_property
    def positions(self) -> list[Optional[int]]:
        """
        For each cell along the result axis, the source cell, or None for fill.
        Built once.
        """
        n = self.base.shape[self.resolved_axis]
        degrees = self.degrees * n if self.scalar_degree else self.degrees
        if len(degrees) > n:
            raise LengthError("LENGTH ERROR: more counts than cells", (len(degrees),), (n,))

        result: list[Optional[int]] = []
        for i, d in enumerate(degrees):
            result.extend([i]*d if d >= 0 else [None]*-d)
        logger.debug("replicate buffer of %d cells", len(result))
        return result

    @cached_property
    def shape(self) -> tuple[int, ...]:
        shape = list(self.base.shape)
        shape[self.resolved_axis] = len(self.positions)
        return tuple(shape)

    def link(self) -> Link:
        axis = self.resolved_axis
        positions = self.positions
        def replicated(cvec: tuple) -> Optional[tuple]:
            src = positions[cvec[axis]]
            if src is None:
                return None
            c = list(cvec)
            c[axis] = src
            return tuple(c)
        return Link(Encoding.DECODED, replicated, self.shape, self.base.shape)

    @cached_property
    def etype(self) -> EType:
        if None in self.positions:
            return etypes.join(etype_of(self.base), etypes.etype_of_value(prototype_of(self.base)))
        return etype_of(self.base)

class SubArray(IndexTransform):
    """
    A view of evenly spaced cells of its base: a row, a column, a
    partition, a cell selected by split or enclose-with-axis.
    """
    def __init__(self, base: Any, offset: int, dims: Sequence[tuple[int, int]]) -> None:
        super().__init__(base)
        self.offset = offset
        self.dims = list(dims)

    @cached_property
    def shape(self) -> tuple[int, ...]:
        return tuple(e for e, _ in self.dims)

    def link(self) -> Link:
        return affine_link(self.offset, self.dims, self.base.shape)

    @cached_property
    def prototype(self) -> Any:
        if self.size:
            return fill_of(element_at(self, 0))
        return prototype_of(self.base)

class Mix(VArray):
    """
    Monadic ↑ - trade depth for rank

    See https://aplwiki.com/wiki/Mix

    APL> ↑(1 2)(3 4 5)
    1 2 0
    3 4 5

    Items of lower rank get leading axes of length one; every item is
    padded with its own prototype to the largest extent along each axis.
    """
    @cached_property
    def inner(self) -> tuple[list[tuple[int, ...]], tuple[int, ...]]:
        """
        Per-item shapes, extended to the common rank, and the common shape.
        """
        shapes = [shape_of(e) for e in self._items]
        r = max((len(s) for s in shapes), default=0)
        padded = [(1,)*(r-len(s)) + tuple(s) for s in shapes]
        common = tuple(max(v) for v in zip(*padded)) if padded else (0,)*r
        return padded, common

    @cached_property
    def _items(self) -> list:
        gen = generator_of(self.base)
        return [gen(i) if callable(gen) else gen for i in range(self.base.size)]

    @cached_property
    def shape(self) -> tuple[int, ...]:
        return self.base.shape + self.inner[1]

    @cached_property
    def etype(self) -> EType:
        acc = None
        for e in self._items:
            acc = etypes.join(acc, etype_of(e) if isarray(e) else etypes.etype_of_value(e))
        return acc if acc is not None else etype_of(self.base)

    @cached_property
    def prototype(self) -> Any:
        if self._items:
            return prototype_of(self._items[0])
        return prototype_of(self.base)

    def indexer(self) -> Callable:
        padded, common = self.inner
        values = self._items
        outer = self.base.shape
        depth = len(common)
        shape = self.shape

        def mixed(i: int) -> Any:
            cvec = encode(shape, i)
            which = decode(outer, cvec[:len(outer)]) if outer else 0
            local = cvec[len(outer):]
            item = values[which]
            if not depth:
                return element_at(item, 0) if isarray(item) else item
            item_shape = padded[which]
            if any(c >= n for c, n in zip(local, item_shape)):
                return prototype_of(item)
            return element_at(item, decode(item_shape, local))

        return mixed

class Enclose(VArray):
    """
    Monadic ⊂ -- without axes, the whole argument as a scalar. With axes,
    those axes are enclosed and the rest make up the result:

    APL> ⊂[1]2 3⍴⍳6
    ┌─────┬─────┐
    │0 1 2│3 4 5│
    └─────┴─────┘

    Enclosing a simple scalar changes nothing.
    """
    def __init__(self, base: Any, axes: Optional[Any] = None, io: int = 0) -> None:
        super().__init__(base)
        self.axes = None if axes is None else as_ints(axes, "axis")
        self.io = io

    @cached_property
    def inner_axes(self) -> list[int]:
        axes = [check_axis(a, self.base.rank, self.io) for a in self.axes]
        if len(set(axes)) != len(axes):
            raise DomainError("DOMAIN ERROR: repeated axis")
        return axes

    @cached_property
    def outer_axes(self) -> list[int]:
        return [a for a in range(self.base.rank) if a not in self.inner_axes]

    @cached_property
    def shape(self) -> tuple[int, ...]:
        if self.axes is None:
            return ()
        return tuple(self.base.shape[a] for a in self.outer_axes)

    @cached_property
    def etype(self) -> EType:
        if self.axes is None and not isarray(self.base):
            return etype_of(self.base)
        if self.axes is not None and not self.inner_axes:
            return etype_of(self.base)
        return etypes.MIXED

    @cached_property
    def prototype(self) -> Any:
        if self.axes is None:
            return fill_of(self.base)
        dims = [self.base.shape[a] for a in self.inner_axes]
        if not dims:
            return prototype_of(self.base)
        return fill_of(Reshape(Enclose(prototype_of(self.base)), dims))

    def indexer(self) -> Callable|Any:
        if self.axes is None:
            if isarray(self.base):
                return self.base
            return element_at(self.base, 0)

        base = self.base
        factors = strides(base.shape)
        outer = self.outer_axes
        dims = [(base.shape[a], factors[a]) for a in self.inner_axes]
        shape = self.shape

        def enclosed(i: int) -> Any:
            cvec = encode(shape, i)
            offset = sum(c*factors[a] for c, a in zip(cvec, outer))
            if not dims:
                return element_at(base, offset)
            return SubArray(base, offset, dims)

        return enclosed

class Split(Enclose):
    """
    Monadic ↓ -- the vectors along an axis (last by default) of the argument.

    APL> ↓2 3⍴⍳6
    ┌─────┬─────┐
    │0 1 2│3 4 5│
    └─────┴─────┘
    """
    def __init__(self, base: Any, axis: Optional[int] = None, io: int = 0) -> None:
        base = lift(base)
        if axis is None:
            axis = max(base.rank - 1, 0) + io
        super().__init__(base, [axis] if base.rank else None, io=io)

class Partition(VArray):
    """
    Dyadic ⊆ -- partition along the last axis (or the given one).

    Runs of equal non-zero keys form one partition; a new one starts
    wherever a key is greater than its predecessor. Cells with key zero
    are dropped.

    APL> 1 1 2 2 0 3⊆'abcdef'
    ┌──┬──┬─┐
    │ab│cd│f│
    └──┴──┴─┘
    """
    def __init__(self, base: Any, keys: Any, axis: Optional[int] = None, io: int = 0) -> None:
        super().__init__(base)
        self.keys = lift(keys)
        if self.keys.rank > 1:
            raise RankError("RANK ERROR: partition keys must be a vector")
        if self.base.rank == 0:
            raise RankError("RANK ERROR: cannot partition a scalar")
        self.axis = axis
        self.io = io

    @cached_property
    def resolved_axis(self) -> int:
        if self.axis is None:
            return self.base.rank - 1
        return check_axis(self.axis, self.base.rank, self.io)

    @cached_property
    def segments(self) -> list[tuple[int, int]]:
        n = self.base.shape[self.resolved_axis]
        keys = as_ints(self.keys, "partition keys")
        if self.keys.rank == 0:
            keys = keys * n
        if len(keys) != n:
            raise LengthError("LENGTH ERROR: one key is needed per cell", (len(keys),), (n,))
        if any(k < 0 for k in keys):
            raise DomainError("DOMAIN ERROR: partition keys must be non-negative")
        return _runs(keys)

    @cached_property
    def shape(self) -> tuple[int, ...]:
        shape = list(self.base.shape)
        shape[self.resolved_axis] = len(self.segments)
        return tuple(shape)

    @cached_property
    def etype(self) -> EType:
        return etypes.MIXED

    @cached_property
    def prototype(self) -> Any:
        return fill_of(Take(self.base, [0], axis=[self.resolved_axis + self.io], io=self.io))

    def indexer(self) -> Callable:
        return _segment_views(self.base, self.resolved_axis, self.segments, self.shape)

class PartitionedEnclose(Partition):
    """
    Dyadic ⊂ -- partitioned enclose. Item i of the left argument says how
    many partitions begin at cell i; cells before the first are dropped.

    APL> 1 0 1 0 0⊂'abcde'
    ┌──┬───┐
    │ab│cde│
    └──┴───┘
    """
    @cached_property
    def segments(self) -> list[tuple[int, int]]:
        n = self.base.shape[self.resolved_axis]
        counts = as_ints(self.keys, "partition counts")
        if self.keys.rank == 0:
            counts = counts * n
        if len(counts) != n:
            raise LengthError("LENGTH ERROR: one count is needed per cell", (len(counts),), (n,))
        if any(k < 0 for k in counts):
            raise DomainError("DOMAIN ERROR: partition counts must be non-negative")

        starts = [i for i, k in enumerate(counts) if k]
        result = []
        for j, i in enumerate(starts):
            end = starts[j+1] if j+1 < len(starts) else n
            result.extend([(i, i)] * (counts[i] - 1))  # Empty partitions
            result.append((i, end))
        return result

def _runs(keys: Sequence[int]) -> list[tuple[int, int]]:
    """
    >>> _runs([1, 1, 2, 2, 0, 3])
    [(0, 2), (2, 4), (5, 6)]
    >>> _runs([2, 2, 1, 1])
    [(0, 4)]
    """
    segments: list[tuple[int, int]] = []
    start = None
    prev = 0
    for i, k in enumerate(keys):
        if k == 0:
            if start is not None:
                segments.append((start, i))
                start = None
        elif start is None:
            start = i
        elif k > prev:
            segments.append((start, i))
            start = i
        prev = k
    if start is not None:
        segments.append((start, len(keys)))
    return segments

def _segment_views(base: VArray, axis: int, segments: list[tuple[int, int]], shape: tuple[int, ...]) -> Callable:
    factors = strides(base.shape)
    step = factors[axis]

    def segment(i: int) -> SubArray:
        cvec = encode(shape, i)
        start, end = segments[cvec[axis]]
        cvec[axis] = start
        offset = sum(c*f for c, f in zip(cvec, factors))
        return SubArray(base, offset, [(end - start, step)])

    return segment


if __name__ == "__main__":
    import doctest
    doctest.testmod()
