"""
Numeric primitives that see all of their argument at once: encode ⊤,
decode ⊥, matrix inverse and divide ⌹, roll and deal ?.
"""
from functools import cached_property
import logging
import random
from typing import Any, Callable, Optional

import numpy as np

from varray.arr import Array
from varray.config import DEFAULT
from varray.core import Buffered, VArray, as_int, generator_of, fetch, items, lift
from varray import etypes
from varray.errors import DomainError, LengthError, RankError
from varray.etypes import EType
from varray.shape import size

logger = logging.getLogger(__name__)

def _number(x: Any) -> int|float|complex:
    if isinstance(x, Array) or type(x) == str:
        raise DomainError("DOMAIN ERROR: expected simple numbers")
    return x

def _numbers(x: Any) -> list:
    return [_number(e) for e in items(x)]

def place_values(radices: list) -> list:
    """
    The weight of each digit position: the product of all radices to its right.

    >>> place_values([24, 60, 60])
    [3600, 60, 1]
    """
    weights = [1]*len(radices)
    for i in range(len(radices)-2, -1, -1):
        weights[i] = weights[i+1]*radices[i+1]
    return weights

def decode_value(radices: list, digits: list) -> int|float|complex:
    """
    Σ digit[i] × Π radix[j>i]

    >>> decode_value([24, 60, 60], [2, 46, 40])
    10000
    >>> decode_value([2, 2, 2, 2], [1, 1, 0, 1])
    13
    """
    return sum(d*w for d, w in zip(digits, place_values(radices)))

def encode_value(radices: list, value: int|float) -> list:
    """
    The digits of value in the mixed radix, high to low. A zero radix takes
    whatever is left.

    >>> encode_value([24, 60, 60], 10000)
    [2, 46, 40]
    >>> encode_value([0, 10], 1234)
    [123, 4]
    >>> encode_value([2, 2], 7)
    [1, 1]
    """
    digits = [0]*len(radices)
    for i in range(len(radices)-1, -1, -1):
        r = radices[i]
        if r == 0:
            digits[i] = value
            value = 0
            continue
        d = value % r
        digits[i] = d
        value = (value - d) // r if type(value) == int and type(r) == int else (value - d) / r
    return digits

class Decode(VArray):
    """
    Decode - dyadic ⊥

    See https://aplwiki.com/wiki/Decode

    APL> 24 60 60⊥2 46 40
    10000

    This is an inner product: the shape of the result is (¯1↓⍴X),1↓⍴Y. A
    scalar, or an axis of length 1, is extended to conform with the other
    argument.
    """
    def __init__(self, radices: Any, digits: Any) -> None:
        super().__init__()
        self.radices = lift(radices)
        self.digits = lift(digits)

    @cached_property
    def length(self) -> int:
        """
        Length of the axis the product runs along.
        """
        last = self.radices.shape[-1] if self.radices.rank else 1
        first = self.digits.shape[0] if self.digits.rank else 1
        if last == 1 or first == 1:
            return max(last, first) if last and first else 0
        if last != first:
            raise LengthError("LENGTH ERROR: radices and digits do not conform", self.radices.shape, self.digits.shape)
        return last

    @cached_property
    def shape(self) -> tuple[int, ...]:
        self.length
        return self.radices.shape[:-1] + self.digits.shape[1:]

    @cached_property
    def etype(self) -> EType:
        kinds = {self.radices.etype.kind, self.digits.etype.kind}
        if not all(etypes.EType(k).isnumeric() for k in kinds):
            raise DomainError("DOMAIN ERROR: expected numbers")
        if etypes.Kind.COMPLEX in kinds:
            return etypes.COMPLEX
        if etypes.Kind.FLOAT in kinds:
            return etypes.FLOAT
        return etypes.EType(etypes.Kind.INT)

    @cached_property
    def prototype(self) -> Any:
        return 0

    def indexer(self) -> Callable:
        n = self.length
        xgen, ygen = generator_of(self.radices), generator_of(self.digits)
        xlast = self.radices.shape[-1] if self.radices.rank else 1
        yfirst = self.digits.shape[0] if self.digits.rank else 1
        cols = size(self.digits.shape[1:])

        def decoded(i: int) -> Any:
            row, col = divmod(i, cols) if cols else (i, 0)
            radices = [_number(fetch(xgen, row*xlast + (k if xlast > 1 else 0))) for k in range(n)]
            digits = [_number(fetch(ygen, (k if yfirst > 1 else 0)*cols + col)) for k in range(n)]
            return decode_value(radices, digits)

        return decoded

class Encode(Buffered):
    """
    Encode - dyadic ⊤

    See https://aplwiki.com/wiki/Encode

    APL> 24 60 60⊤10000
    2 46 40

    APL> 2 2 2 2⊤5 7 12
    0 0 1
    1 1 1
    0 1 0
    1 1 0

    The shape of the result is (⍴X),⍴Y. Each column of X (each of its
    vectors along the first axis) is a radix.
    """
    def __init__(self, radices: Any, values: Any) -> None:
        super().__init__()
        self.radices = lift(radices)
        self.values = lift(values)

    @cached_property
    def shape(self) -> tuple[int, ...]:
        return self.radices.shape + self.values.shape

    @cached_property
    def etype(self) -> EType:
        if etypes.Kind.FLOAT in (self.radices.etype.kind, self.values.etype.kind):
            return etypes.FLOAT
        return etypes.EType(etypes.Kind.INT)

    @cached_property
    def prototype(self) -> Any:
        return 0

    def compute(self) -> list:
        radices = _numbers(self.radices)
        if any(type(r) == complex or r < 0 for r in radices):
            raise DomainError("DOMAIN ERROR: radices must be non-negative")
        values = _numbers(self.values)

        n = self.radices.shape[0] if self.radices.rank else 1
        columns = size(self.radices.shape[1:])
        result = [0]*self.size
        for c in range(columns):
            digits = [encode_value(radices[c::columns], v) for v in values]
            for k in range(n):
                for j, ds in enumerate(digits):
                    result[(k*columns + c)*len(values) + j] = ds[k]
        return result

def _matrix(x: VArray) -> np.ndarray:
    """
    The argument as a 2-d numpy array; a vector is a one-column matrix.
    """
    rows, cols = x.shape if x.rank == 2 else (x.size, 1)
    data = _numbers(x)
    dtype = complex if any(type(e) == complex for e in data) else float
    return np.array(data, dtype=dtype).reshape(rows, cols)

def _check_full_rank(m: np.ndarray) -> None:
    if np.linalg.matrix_rank(m) < m.shape[1]:
        raise DomainError("DOMAIN ERROR: singular matrix")

def pseudo_inverse(m: np.ndarray) -> np.ndarray:
    """
    The inverse of a square matrix, or the least-squares pseudo-inverse
    of one with more rows than columns. A matrix without full column rank
    is a DOMAIN ERROR.

    >>> pseudo_inverse(np.array([[2.0, 0.0], [0.0, 4.0]])).tolist()
    [[0.5, 0.0], [0.0, 0.25]]
    """
    _check_full_rank(m)
    try:
        if m.shape[0] == m.shape[1]:
            return np.linalg.inv(m)
        return np.linalg.pinv(m)
    except np.linalg.LinAlgError:
        raise DomainError("DOMAIN ERROR: singular matrix")

class MatrixInverse(Buffered):
    """
    Monadic ⌹ -- matrix inverse. Non-square matrices (more rows than columns)
    give the least-squares pseudo-inverse. A vector is a one-column matrix,
    and a scalar its reciprocal.

    APL> ⌹2 2⍴2 0 0 4
    0.5 0
    0   0.25
    """
    @cached_property
    def shape(self) -> tuple[int, ...]:
        if self.base.rank > 2:
            raise RankError("RANK ERROR: ⌹ takes arrays of rank 2 or less")
        if self.base.rank == 2 and self.base.shape[0] < self.base.shape[1]:
            raise LengthError("LENGTH ERROR: more columns than rows", self.base.shape)
        return tuple(reversed(self.base.shape))

    @cached_property
    def etype(self) -> EType:
        if self.base.etype.kind == etypes.Kind.COMPLEX:
            return etypes.COMPLEX
        return etypes.FLOAT

    @cached_property
    def prototype(self) -> Any:
        return 0

    def compute(self) -> list:
        if self.size == 0:
            return []
        if self.base.rank == 0:
            x = _numbers(self.base)[0]
            if x == 0:
                raise DomainError("DOMAIN ERROR: singular matrix")
            return [1/x]
        return pseudo_inverse(_matrix(self.base)).ravel().tolist()

class MatrixDivide(Buffered):
    """
    Dyadic ⌹ -- X⌹Y solves Y+.×R = X for R, in the least-squares sense
    when Y has more rows than columns.

    APL> 1 2⌹2 2⍴2 0 0 4
    0.5 0.5
    """
    def __init__(self, left: Any, right: Any) -> None:
        super().__init__()
        self.left = lift(left)
        self.right = lift(right)

    @cached_property
    def shape(self) -> tuple[int, ...]:
        if self.left.rank > 2 or self.right.rank > 2:
            raise RankError("RANK ERROR: ⌹ takes arrays of rank 2 or less")
        if self.right.rank == 0:
            return self.left.shape
        rows = self.right.shape[0]
        if (self.left.shape[:1] or (1,)) != (rows,):
            raise LengthError("LENGTH ERROR: ⌹ arguments do not conform", self.left.shape, self.right.shape)
        if self.right.rank == 2 and rows < self.right.shape[1]:
            raise LengthError("LENGTH ERROR: more columns than rows", self.right.shape)
        return self.right.shape[1:] + self.left.shape[1:]

    @cached_property
    def etype(self) -> EType:
        if etypes.Kind.COMPLEX in (self.left.etype.kind, self.right.etype.kind):
            return etypes.COMPLEX
        return etypes.FLOAT

    @cached_property
    def prototype(self) -> Any:
        return 0

    def compute(self) -> list:
        self.shape
        if self.right.rank == 0:
            y = _numbers(self.right)[0]
            if y == 0:
                raise DomainError("DOMAIN ERROR: singular matrix")
            return [x/y for x in _numbers(self.left)]
        if self.size == 0:
            return []
        y = _matrix(self.right)
        _check_full_rank(y)
        try:
            result, _, _, _ = np.linalg.lstsq(y, _matrix(self.left), rcond=None)
        except np.linalg.LinAlgError:
            raise DomainError("DOMAIN ERROR: singular matrix")
        return result.ravel().tolist()

class Roll(Buffered):
    """
    Monadic ? -- for each item n, a random integer in [io, io+n), or for 0 a
    random float in (0, 1). A float n gives a float in (0, n).

    The draws are made once: indexing the same roll twice gives the same
    numbers.
    """
    def __init__(self, base: Any, io: int = 0, rng: Optional[random.Random] = None) -> None:
        super().__init__(base)
        self.io = io
        self.rng = rng if rng is not None else DEFAULT.rng

    @cached_property
    def shape(self) -> tuple[int, ...]:
        return self.base.shape

    @cached_property
    def etype(self) -> EType:
        return etypes.etype_of_values(self.content)

    @cached_property
    def prototype(self) -> Any:
        return 0

    def _draw(self, n: Any) -> int|float:
        if type(n) == int and n > 0:
            return self.rng.randrange(n) + self.io
        if n == 0 and type(n) in (int, float):
            return self._open(1.0)
        if type(n) == float and n > 0:
            return self._open(n)
        raise DomainError(f"DOMAIN ERROR: cannot roll {n!r}")

    def _open(self, n: float) -> float:
        x = 0.0
        while x == 0.0:
            x = self.rng.random()
        return x*n

    def compute(self) -> list:
        return [self._draw(n) for n in _numbers(self.base)]

class Deal(Buffered):
    """
    Dyadic ? -- count distinct integers drawn from [io, io+n).

    APL> 5?10
    3 7 0 9 4
    """
    def __init__(self, count: Any, n: Any, io: int = 0, rng: Optional[random.Random] = None) -> None:
        super().__init__()
        self.count = _whole(count, "left argument of ?")
        self.n = _whole(n, "right argument of ?")
        if self.count > self.n:
            raise DomainError(f"DOMAIN ERROR: cannot deal {self.count} from {self.n}")
        self.io = io
        self.rng = rng if rng is not None else DEFAULT.rng

    @cached_property
    def shape(self) -> tuple[int, ...]:
        return (self.count,)

    @cached_property
    def etype(self) -> EType:
        return etypes.integer(self.io, self.io + max(self.n - 1, 0))

    @cached_property
    def prototype(self) -> Any:
        return 0

    def compute(self) -> list:
        # Fisher-Yates, stopping once the first count places are settled
        deck = list(range(self.io, self.io + self.n))
        for i in range(self.count):
            j = self.rng.randrange(i, self.n)
            deck[i], deck[j] = deck[j], deck[i]
        logger.debug("dealt %d of %d", self.count, self.n)
        return deck[:self.count]

def _whole(x: Any, what: str) -> int:
    value = as_int(x, what)
    if value < 0:
        raise DomainError(f"DOMAIN ERROR: {what} must be non-negative")
    return value


if __name__ == "__main__":
    import doctest
    doctest.testmod()
