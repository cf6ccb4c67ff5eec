"""
Index composition.

Many primitives only renumber the elements of their argument: take, drop,
transpose, rotate, reshape, bracket indexing, split views. Each of these
describes itself as a Link: a function from an index into its own result to
an index into its source, or None for a cell that has no source and shows
the prototype (the padding of an overtake, say).

When such a node sits directly on top of another one, the two links are
chained and the intermediate array is never built. Links come in two
encodings:

    LINEAR   a single int, the row-major position
    DECODED  a tuple of per-axis coordinates

and an encode/decode adapter is put between neighbouring links only where
their encodings differ:

    APL> 1 0↓2 1⍉3 4⍴⍳12     ⍝ section over a transpose: two DECODED links, no adapter
    APL> 2↑,3 4⍴⍳12          ⍝ section over a reshape: DECODED, then LINEAR

Consecutive take/drop go further still: their spans and paddings are merged
into a single layout when the node is built, see `merge_layouts()`.
"""
from dataclasses import dataclass
from enum import Enum, auto
from functools import cached_property
import logging
from typing import Any, Callable, Optional, Sequence

from varray.core import VArray, generator_of
from varray.shape import encode, strides

logger = logging.getLogger(__name__)

class Encoding(Enum):
    LINEAR = auto()
    DECODED = auto()

@dataclass(frozen=True)
class Link:
    encoding: Encoding           # of the index the link takes
    fn: Callable[[Any], Any]     # result index → source index, or None
    out_shape: tuple[int, ...]
    in_shape: tuple[int, ...]
    yields: Optional[Encoding] = None  # of the index it gives, if different

    @property
    def output(self) -> Encoding:
        return self.encoding if self.yields is None else self.yields

def _adapter(src: Encoding, dst: Encoding, shape: Sequence[int]) -> Callable:
    if src == Encoding.LINEAR and dst == Encoding.DECODED:
        def decoder(idx: int) -> tuple:
            return tuple(encode(shape, idx))
        return decoder

    factors = strides(shape)
    def encoder(cvec: tuple) -> int:
        return sum(c*f for c, f in zip(cvec, factors))
    return encoder

def compose(links: Sequence[Link]) -> Callable[[int], Optional[int]]:
    """
    Fold a chain of links, outermost first, into one function taking a
    linear index into the outermost result to a linear index into the
    innermost source.

    >>> drop_one = Link(Encoding.LINEAR, lambda i: i+1, (3,), (4,))
    >>> rev = Link(Encoding.DECODED, lambda c: (3-c[0],), (4,), (4,))
    >>> f = compose([drop_one, rev])
    >>> [f(i) for i in range(3)]
    [2, 1, 0]
    """
    steps: list[Callable] = []
    current = Encoding.LINEAR
    for link in links:
        if link.encoding != current:
            steps.append(_adapter(current, link.encoding, link.out_shape))
        steps.append(link.fn)
        current = link.output
    if current != Encoding.LINEAR:
        steps.append(_adapter(current, Encoding.LINEAR, links[-1].in_shape))

    if len(steps) == 1:
        return steps[0]

    def composed(idx: int) -> Optional[int]:
        for step in steps:
            idx = step(idx)
            if idx is None:
                return None
        return idx

    return composed

class IndexTransform(VArray):
    """
    A virtual array whose every element is an element of its source, or
    the prototype. Subclasses provide `link()`.
    """
    foldable = True

    @property
    def source(self) -> VArray:
        """
        The array the link indexes into. Normally the base, but nodes that
        merge their parameters with the base's bypass it.
        """
        return self.base

    def link(self) -> Link:
        raise NotImplementedError

    @cached_property
    def chain(self) -> tuple[list[Link], VArray]:
        """
        The links from this node down to the first array that isn't a
        foldable index transform, and that array.
        """
        src = self.source
        if isinstance(src, IndexTransform) and src.foldable:
            links, root = src.chain
            return [self.link()] + links, root
        return [self.link()], src

    def indexer(self) -> Callable|Any:
        links, root = self.chain
        index = compose(links)
        gen = generator_of(root)

        # The prototype is only read for pad cells: a node whose prototype
        # is its own first item must not need it to produce that item.
        if not callable(gen):  # Single-valued root: every real cell is that value
            def single(i: int) -> Any:
                return self.prototype if index(i) is None else gen
            return single

        def indexed(i: int) -> Any:
            j = index(i)
            if j is None:
                return self.prototype
            return gen(j)
        return indexed

# Take and drop layouts

@dataclass(frozen=True)
class Span:
    """
    How one axis of a section is laid out: `before` prototype cells, then
    the source cells [start, end), then `after` prototype cells.
    """
    start: int
    end: int
    before: int = 0
    after: int = 0

    @property
    def extent(self) -> int:
        return self.before + (self.end - self.start) + self.after

    def locate(self, c: int) -> Optional[int]:
        x = c - self.before
        if x < 0 or x >= self.end - self.start:
            return None
        return x + self.start

def take_span(count: int, n: int) -> Span:
    """
    >>> take_span(2, 5)
    Span(start=0, end=2, before=0, after=0)
    >>> take_span(-7, 5)
    Span(start=0, end=5, before=2, after=0)
    """
    if count >= 0:
        return Span(0, min(count, n), 0, max(0, count-n))
    count = -count
    return Span(max(0, n-count), n, max(0, count-n), 0)

def drop_span(count: int, n: int) -> Span:
    """
    >>> drop_span(2, 5)
    Span(start=2, end=5, before=0, after=0)
    >>> drop_span(-9, 5)
    Span(start=0, end=0, before=0, after=0)
    """
    if count >= 0:
        return Span(min(count, n), n)
    return Span(0, max(0, n+count))

def merge_spans(inner: Span, outer: Span) -> Span:
    """
    The single span equivalent to `outer` applied to the result of `inner`.

    >>> merge_spans(drop_span(1, 5), take_span(2, 4))
    Span(start=1, end=3, before=0, after=0)
    >>> merge_spans(take_span(-6, 5), take_span(3, 6))
    Span(start=0, end=2, before=1, after=0)
    """
    length = inner.end - inner.start
    lo = max(outer.start, inner.before)
    hi = min(outer.end, inner.before + length)
    if hi <= lo:
        return Span(inner.start, inner.start, outer.before + (outer.end - outer.start), outer.after)
    return Span(
        lo - inner.before + inner.start,
        hi - inner.before + inner.start,
        outer.before + (lo - outer.start),
        outer.after + (outer.end - hi),
    )

def merge_layouts(inner: Sequence[Span], outer: Sequence[Span]) -> list[Span]:
    logger.debug("merging sections %s and %s", inner, outer)
    return [merge_spans(i, o) for i, o in zip(inner, outer)]

def section_link(layout: Sequence[Span], source_shape: Sequence[int]) -> Link:
    spans = tuple(layout)
    def locate(cvec: tuple) -> Optional[tuple]:
        result = []
        for span, c in zip(spans, cvec):
            x = span.locate(c)
            if x is None:
                return None
            result.append(x)
        return tuple(result)
    return Link(Encoding.DECODED, locate, tuple(s.extent for s in spans), tuple(source_shape))

def affine_link(offset: int, dims: Sequence[tuple[int, int]], source_shape: Sequence[int]) -> Link:
    """
    A view of evenly spaced source cells: the cell at coordinates c of
    the view is `offset + Σ c[i]*stride[i]` in the source, for
    `dims = [(extent, stride), ...]`.
    """
    extents = tuple(e for e, _ in dims)
    steps = [s for _, s in dims]

    if len(dims) == 1:
        step = steps[0]
        def line(i: int) -> int:
            return offset + i*step
        return Link(Encoding.LINEAR, line, extents, tuple(source_shape))

    def cell(cvec: tuple) -> int:
        return offset + sum(c*s for c, s in zip(cvec, steps))
    return Link(Encoding.DECODED, cell, extents, tuple(source_shape), yields=Encoding.LINEAR)

def identity_link(shape: Sequence[int]) -> Link:
    return Link(Encoding.LINEAR, lambda i: i, tuple(shape), tuple(shape))


if __name__ == "__main__":
    import doctest
    doctest.testmod()
