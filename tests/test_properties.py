"""
Laws the primitives obey, checked over small ranges of arguments.
"""
from itertools import permutations
import random

import pytest

import varray.arr as arr
from varray.core import render
from varray.errors import LengthError
from varray.numeric import Deal, Decode, Encode
from varray.order import Grade
from varray.scalar import Iota
from varray.select import MaskAssign, Select
from varray.structural import Catenate, Drop, Permute, Ravel, Reshape, Rotate, Take

def cube():
    return Reshape(Iota(24), [2, 3, 4])

class TestReshape:
    @pytest.mark.parametrize("shape", [[0], [5], [2, 3], [3, 0, 2], [1, 1, 1, 1]])
    def test_shape_is_as_given(self, shape):
        r = render(Reshape([1, 2, 3], shape))
        assert r.shape == shape
        assert len(r.data) == r.bound

class TestSections:
    @pytest.mark.parametrize("n", range(-6, 7))
    def test_take_then_drop_rebuilds(self, n):
        a = [1, 2, 3, 4, 5]
        if n >= 0:
            whole = Catenate([Take(a, min(n, 5)), Drop(a, min(n, 5))])
        else:
            whole = Catenate([Drop(a, max(n, -5)), Take(a, max(n, -5))])
        assert arr.match(render(whole), arr.V(a))

    @pytest.mark.parametrize("inner,outer", [(1, 2), (-2, 3), (2, -1), (7, -9), (-6, 2)])
    def test_merged_take_matches_stepwise(self, inner, outer):
        a = [1, 2, 3, 4]
        merged = Take(Take(a, inner), outer)
        stepwise = Take(render(Take(a, inner)), outer)
        assert arr.match(render(merged), render(stepwise))

    @pytest.mark.parametrize("inner,outer", [(1, 2), (-1, 2), (2, -5)])
    def test_merged_drop_take_matches_stepwise(self, inner, outer):
        a = [1, 2, 3, 4]
        merged = Take(Drop(a, inner), outer)
        stepwise = Take(render(Drop(a, inner)), outer)
        assert arr.match(render(merged), render(stepwise))

class TestPermute:
    @pytest.mark.parametrize("axes", list(permutations(range(3))))
    def test_inverse_permutation_restores(self, axes):
        inverse = [axes.index(i) for i in range(3)]
        back = Permute(Permute(cube(), list(axes)), inverse)
        assert arr.match(render(back), render(cube()))

    def test_monadic_twice(self):
        assert arr.match(render(Permute(Permute(cube()))), render(cube()))

class TestRotate:
    def test_rotate_matrix(self):
        m = Reshape(Iota(12, io=1), [3, 4])
        r = render(Rotate(m, 1))
        assert r.tolist()[0] == [2, 3, 4, 1]

    @pytest.mark.parametrize("k", range(-5, 6))
    def test_rotate_back(self, k):
        a = [1, 2, 3, 4]
        assert arr.match(render(Rotate(Rotate(a, k), -k)), arr.V(a))

class TestCatenate:
    def test_first_axis(self):
        c = Catenate([Reshape(Iota(6), [2, 3]), Reshape(Iota(3), [1, 3])], axis=0)
        assert c.shape == (3, 3)

    def test_wrong_axis(self):
        with pytest.raises(LengthError):
            Catenate([Reshape(Iota(6), [2, 3]), Reshape(Iota(3), [1, 3])], axis=1).shape

class TestGrade:
    @pytest.mark.parametrize("seed", range(5))
    def test_sorts_and_is_stable(self, seed):
        rng = random.Random(seed)
        values = [rng.randrange(4) for _ in range(20)]
        perm = render(Grade(values)).data
        ordered = [values[i] for i in perm]
        assert ordered == sorted(values)
        for a, b in zip(perm, perm[1:]):
            if values[a] == values[b]:
                assert a < b

    def test_grade_selects_sorted(self):
        values = [5, 3, 9, 1]
        s = Select(values, [Grade(values)])
        assert arr.match(render(s), arr.V([1, 3, 5, 9]))

class TestEncodeDecode:
    @pytest.mark.parametrize("value", [0, 1, 59, 3599, 86399])
    def test_decode_of_encode(self, value):
        radices = [24, 60, 60]
        digits = Encode(radices, value)
        assert render(Decode(radices, digits), subrendering=True) == value

class TestDeal:
    def test_seeded_deal(self):
        a = render(Deal(10, 10, io=1, rng=random.Random(3))).data
        b = render(Deal(10, 10, io=1, rng=random.Random(3))).data
        assert a == b
        assert sorted(a) == list(range(1, 11))

class TestMaskAssign:
    def test_compress_assign(self):
        m = MaskAssign([10, 20, 30, 40, 50], [0, 1, 0, 1, 1], [99, 98, 97])
        assert arr.match(render(m), arr.V([10, 99, 30, 98, 97]))

    def test_ravel_unchanged_where_false(self):
        base = Reshape(Iota(6), [2, 3])
        m = MaskAssign(base, Reshape([1, 0], [2, 3]), 0)
        assert render(Ravel(m)).data == [0, 1, 0, 3, 0, 5]
