"""
Shape & stride model: conversions between a row-major linear index and a
per-axis coordinate vector.

This file contains doctests.

To run the doctests, do:

    python shape.py [-v]
"""
import math
from typing import Generator, Sequence

from varray.errors import RankError


def strides(shape: Sequence[int]) -> list[int]:
    """
    Dimensional factors: the distance in the ravel between neighbours
    along each axis.

    >>> strides([2, 3, 4])
    [12, 4, 1]
    """
    r = [0 for _ in range(len(shape))]
    u = 1
    for i in range(len(r)-1, -1, -1):
        r[i] = u
        u *= shape[i]
    return r

def size(shape: Sequence[int]) -> int:
    """
    Number of elements. A scalar has one.

    >>> size([])
    1
    >>> size([3, 0])
    0
    """
    return math.prod(shape)

def encode(shape: Sequence[int], idx: int) -> list[int]:
    """
    Returns the coordinate vector into shape corresponding to the
    linear index idx into its ravel vector

    Inverse of `decode()`

    >>> encode([24, 60, 60], 10_000)
    [2, 46, 40]
    """
    encoded: list[int] = []
    for axis in shape[::-1]:
        idx, loc = divmod(idx, axis) if axis else (idx, 0)
        encoded.append(loc)
    return encoded[::-1]

def decode(shape: Sequence[int], coords: Sequence[int]) -> int:
    """
    Evaluates `coords` in terms of the radix system defined by `shape`.

    Inverse of `encode()`

    >>> decode([24, 60, 60], [2, 46, 40])
    10000
    """
    pos = 0
    rnk = len(shape)
    for axis in range(rnk):
        if axis >= len(coords):
            return pos
        pos += coords[axis]
        if axis != rnk - 1:
            pos *= shape[axis+1]
    return pos

def coords(shape: Sequence[int], io: int = 0) -> Generator:
    """
    Generator. Step through the space defined by the shape, generating
    each coordinate vector in turn.

    >>> list(coords([2, 3]))
    [[0, 0], [0, 1], [0, 2], [1, 0], [1, 1], [1, 2]]
    """
    rnk = len(shape)
    bound = math.prod(shape)
    if not bound:
        return
    coords = [io for _ in range(rnk)]
    yield coords[:]
    for _ in range(1, bound):
        axis = rnk - 1
        coords[axis] += 1
        while axis>0 and coords[axis] == shape[axis] + io:
            coords[axis] = io
            coords[axis-1] += 1
            axis -= 1
        yield coords[:]

def check_axis(axis: int, rank: int, io: int = 0) -> int:
    """
    Convert a user-facing axis into a 0-based one, or raise.
    """
    if type(axis) != int or not io <= axis < rank + io:
        raise RankError(f"RANK ERROR: invalid axis {axis}")
    return axis - io


if __name__ == "__main__":
    import doctest
    doctest.testmod()
