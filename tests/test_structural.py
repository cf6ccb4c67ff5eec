import pytest

import varray.arr as arr
from varray.core import render
from varray import etypes
from varray.errors import DomainError, LengthError, RankError
from varray.scalar import Iota
from varray.structural import (Catenate, Compress, Drop, Enclose, Mix, Partition, PartitionedEnclose,
                               Permute, Ravel, Reshape, Rotate, Split, SubArray, Table, Take)

def matrix(rows, cols, io=0):
    return Reshape(Iota(rows*cols, io=io), [rows, cols])

class TestReshape:
    def test_cycle(self):
        """
        APL> 2 5⍴1 2 3
        1 2 3 1 2
        3 1 2 3 1
        """
        assert arr.match(render(Reshape([1, 2, 3], [2, 5])), arr.A([2, 5], [1, 2, 3, 1, 2, 3, 1, 2, 3, 1]))

    def test_truncate(self):
        assert arr.match(render(Reshape([1, 2, 3, 4], [3])), arr.V([1, 2, 3]))

    def test_empty_source_fills(self):
        result = render(Reshape(arr.V(''), [3]))
        assert arr.match(result, arr.V('   '))

    def test_scalar_shape(self):
        assert Reshape([1, 2, 3], 2).shape == (2,)

    def test_negative_shape(self):
        with pytest.raises(DomainError):
            Reshape([1], [-1])

    def test_shape_rank(self):
        with pytest.raises(RankError):
            Reshape([1], arr.A([1, 1], [2]))

    def test_laziness(self):
        r = Reshape(Iota(10**9), [2])
        assert r.shape == (2,)
        assert arr.match(render(r), arr.V([0, 1]))

class TestRavelTable:
    def test_ravel(self):
        assert arr.match(render(Ravel(matrix(2, 2))), arr.V([0, 1, 2, 3]))

    def test_ravel_scalar(self):
        assert Ravel(5).shape == (1,)

    def test_table(self):
        t = Table(Reshape(Iota(8), [2, 2, 2]))
        assert t.shape == (2, 4)

    def test_table_scalar(self):
        assert Table(5).shape == (1, 1)

class TestTakeDrop:
    def test_overtake_pads_front(self):
        """
        APL> ¯5↑1 2 3
        0 0 1 2 3
        """
        assert arr.match(render(Take([1, 2, 3], -5)), arr.V([0, 0, 1, 2, 3]))

    def test_overtake_chars(self):
        assert arr.match(render(Take('ab', 4)), arr.V('ab  '))

    def test_take_matrix(self):
        """
        APL> 2 ¯2↑3 4⍴⍳12
        2 3
        6 7
        """
        assert arr.match(render(Take(matrix(3, 4), [2, -2])), arr.A([2, 2], [2, 3, 6, 7]))

    def test_take_with_axis(self):
        assert arr.match(render(Take(matrix(3, 4), 1, axis=1)), arr.A([3, 1], [0, 4, 8]))

    def test_take_with_axis_origin_one(self):
        assert Take(matrix(3, 4), 1, axis=2, io=1).shape == (3, 1)

    def test_take_scalar_extension(self):
        assert arr.match(render(Take(7, [2, 2])), arr.A([2, 2], [7, 0, 0, 0]))

    def test_drop(self):
        assert arr.match(render(Drop([1, 2, 3, 4], -1)), arr.V([1, 2, 3]))

    def test_drop_all(self):
        assert Drop([1, 2], 5).shape == (0,)

    def test_drop_matrix(self):
        assert arr.match(render(Drop(matrix(3, 3), [1, 1])), arr.A([2, 2], [4, 5, 7, 8]))

    def test_too_many_counts(self):
        with pytest.raises(RankError):
            Take([1, 2], [1, 1])

    def test_axis_count_mismatch(self):
        with pytest.raises(LengthError):
            Take(matrix(2, 2), [1, 1], axis=[0])

    def test_padding_etype(self):
        assert Take('ab', 3).etype == etypes.CHAR
        assert Take([5, 6], 3).etype == etypes.EType(etypes.Kind.INT, 0, 6)

class TestPermute:
    def test_monadic(self):
        assert arr.match(render(Permute(matrix(2, 3))), arr.A([3, 2], [0, 3, 1, 4, 2, 5]))

    def test_dyadic(self):
        """
        APL> ,2 0 1⍉2 3 4⍴⍳×/2 3 4
        """
        t = Permute(Reshape(Iota(24), [2, 3, 4]), [2, 0, 1])
        assert t.shape == (3, 4, 2)
        expected = [0, 12, 1, 13, 2, 14, 3, 15, 4, 16, 5, 17, 6, 18, 7, 19, 8, 20, 9, 21, 10, 22, 11, 23]
        assert render(Ravel(t)).data == expected

    def test_diagonal(self):
        """
        APL> 0 0⍉3 3⍴⍳9
        0 4 8
        """
        assert arr.match(render(Permute(matrix(3, 3), [0, 0])), arr.V([0, 4, 8]))

    def test_origin_one(self):
        assert arr.match(render(Permute(matrix(3, 3), [1, 1], io=1)), arr.V([0, 4, 8]))

    def test_wrong_length(self):
        with pytest.raises(LengthError):
            Permute(matrix(2, 2), [0]).shape

    def test_gap_in_axes(self):
        with pytest.raises(DomainError):
            Permute(matrix(2, 2), [0, 2]).shape

    def test_vector_unchanged(self):
        assert arr.match(render(Permute([1, 2, 3])), arr.V([1, 2, 3]))

class TestRotate:
    def test_reverse(self):
        assert arr.match(render(Rotate('abc')), arr.V('cba'))

    def test_reverse_first(self):
        assert arr.match(render(Rotate(matrix(2, 2), first=True)), arr.A([2, 2], [2, 3, 0, 1]))

    def test_rotate_last_axis(self):
        """
        APL> 1⌽3 4⍴⍳12
        """
        expected = arr.A([3, 4], [1, 2, 3, 0, 5, 6, 7, 4, 9, 10, 11, 8])
        assert arr.match(render(Rotate(matrix(3, 4), 1)), expected)

    def test_rotate_negative(self):
        assert arr.match(render(Rotate([1, 2, 3, 4], -1)), arr.V([4, 1, 2, 3]))

    def test_rotate_modulo(self):
        assert arr.match(render(Rotate([1, 2, 3], 7)), arr.V([2, 3, 1]))

    def test_rotate_each_line(self):
        """
        APL> 0 1 2⌽3 3⍴⍳9
        0 1 2
        4 5 3
        8 6 7
        """
        expected = arr.A([3, 3], [0, 1, 2, 4, 5, 3, 8, 6, 7])
        assert arr.match(render(Rotate(matrix(3, 3), [0, 1, 2])), expected)

    def test_rotate_lines_length_error(self):
        with pytest.raises(LengthError):
            Rotate(matrix(3, 4), [1, 2]).shape

    def test_rotate_lines_length_error_first_axis(self):
        with pytest.raises(LengthError):
            Rotate(matrix(3, 4), [1, 2, 3], first=True).shape
        assert Rotate(matrix(3, 4), [1, 2, 3, 0], first=True).shape == (3, 4)

    def test_rotate_axis(self):
        expected = arr.A([2, 2], [2, 3, 0, 1])
        assert arr.match(render(Rotate(matrix(2, 2), 1, axis=0)), expected)

    def test_no_fold_across_axes(self):
        r = Rotate(Rotate(matrix(2, 2), 1, axis=0), 1)
        assert r.source is not r.base.source
        assert arr.match(render(r), arr.A([2, 2], [3, 2, 1, 0]))

    def test_rotate_scalar(self):
        assert render(Rotate(5, 3)).data == [5]

class TestCatenate:
    def test_vectors(self):
        assert arr.match(render(Catenate([[1, 2], [3]])), arr.V([1, 2, 3]))

    def test_scalar_extension(self):
        assert arr.match(render(Catenate([matrix(2, 2), 9])), arr.A([2, 3], [0, 1, 9, 2, 3, 9]))

    def test_first_axis(self):
        """
        APL> (2 3⍴⍳6),[0]1 3⍴9
        """
        c = Catenate([matrix(2, 3), Reshape(9, [1, 3])], axis=0)
        assert arr.match(render(c), arr.A([3, 3], [0, 1, 2, 3, 4, 5, 9, 9, 9]))

    def test_rank_short_operand(self):
        c = Catenate([matrix(2, 3), [7, 8, 9]], first=True)
        assert arr.match(render(c), arr.A([3, 3], [0, 1, 2, 3, 4, 5, 7, 8, 9]))

    def test_length_error(self):
        with pytest.raises(LengthError):
            Catenate([matrix(2, 3), Reshape(9, [1, 3])], axis=1).shape

    def test_laminate(self):
        """
        APL> 1 2 3,[¯0.5]4 5 6
        """
        c = Catenate([[1, 2, 3], [4, 5, 6]], axis=-0.5)
        assert arr.match(render(c), arr.A([2, 3], [1, 2, 3, 4, 5, 6]))

    def test_laminate_after(self):
        c = Catenate([[1, 2, 3], [4, 5, 6]], axis=0.5)
        assert arr.match(render(c), arr.A([3, 2], [1, 4, 2, 5, 3, 6]))

    def test_etype_join(self):
        assert Catenate([[1, 2], [0.5]]).etype == etypes.FLOAT
        assert Catenate(['ab', [1]]).etype == etypes.MIXED

    def test_nothing(self):
        with pytest.raises(LengthError):
            Catenate([])

class TestCompress:
    def test_replicate(self):
        """
        APL> 1 0 2/'abc'
        acc
        """
        assert arr.match(render(Compress('abc', [1, 0, 2])), arr.V('acc'))

    def test_negative_fills(self):
        """
        APL> 1 ¯2 1/1 2 3
        1 0 0 3
        """
        assert arr.match(render(Compress([1, 2, 3], [1, -2, 1])), arr.V([1, 0, 0, 3]))

    def test_scalar_degree(self):
        assert arr.match(render(Compress([1, 2], 2)), arr.V([1, 1, 2, 2]))

    def test_first_axis(self):
        assert arr.match(render(Compress(matrix(3, 2), [0, 1, 1], first=True)), arr.A([2, 2], [2, 3, 4, 5]))

    def test_scalar_base(self):
        assert arr.match(render(Compress(5, [1, 0, 2])), arr.V([5, 5, 5]))

    def test_fewer_degrees_truncate(self):
        assert arr.match(render(Compress([1, 2, 3], [1, 1])), arr.V([1, 2]))

    def test_too_many_degrees(self):
        with pytest.raises(LengthError):
            Compress([1, 2], [1, 1, 1]).shape

class TestMix:
    def test_pads(self):
        """
        APL> ↑(1 2)(3 4 5)
        1 2 0
        3 4 5
        """
        m = Mix(arr.V([arr.V([1, 2]), arr.V([3, 4, 5])]))
        assert arr.match(render(m), arr.A([2, 3], [1, 2, 0, 3, 4, 5]))

    def test_scalars_and_vectors(self):
        m = Mix(arr.V([7, arr.V([1, 2])]))
        assert arr.match(render(m), arr.A([2, 2], [7, 0, 1, 2]))

    def test_simple(self):
        assert arr.match(render(Mix([1, 2])), arr.V([1, 2]))

    def test_char_padding(self):
        m = Mix(arr.V(['ab', 'c']))
        assert arr.match(render(m), arr.A([2, 2], ['a', 'b', 'c', ' ']))

class TestEnclose:
    def test_enclose_simple_scalar(self):
        assert render(Enclose(4)).data == [4]

    def test_enclose_with_axis(self):
        """
        APL> ⊂[1]2 3⍴⍳6
        """
        e = Enclose(matrix(2, 3), [1])
        assert e.shape == (2,)
        assert arr.match(render(e), arr.V([arr.V([0, 1, 2]), arr.V([3, 4, 5])]))

    def test_enclose_first_axis(self):
        e = Enclose(matrix(2, 3), [0])
        assert arr.match(render(e), arr.V([arr.V([0, 3]), arr.V([1, 4]), arr.V([2, 5])]))

    def test_repeated_axis(self):
        with pytest.raises(DomainError):
            Enclose(matrix(2, 2), [0, 0]).shape

    def test_etype(self):
        assert Enclose([1, 2]).etype == etypes.MIXED

class TestSplit:
    def test_split(self):
        """
        APL> ↓2 3⍴⍳6
        """
        s = Split(matrix(2, 3))
        assert arr.match(render(s), arr.V([arr.V([0, 1, 2]), arr.V([3, 4, 5])]))

    def test_split_axis(self):
        s = Split(matrix(2, 3), axis=0)
        assert s.shape == (3,)

    def test_split_vector(self):
        s = Split([1, 2])
        assert s.shape == ()
        assert arr.match(render(s).data[0], arr.V([1, 2]))

    def test_split_then_mix(self):
        m = matrix(3, 2)
        assert arr.match(render(Mix(Split(m))), render(m))

    def test_mix_of_split_first_axis(self):
        m = matrix(2, 3)
        assert arr.match(render(Mix(Split(m, axis=0))), arr.A([3, 2], [0, 3, 1, 4, 2, 5]))

    def test_item_padding(self):
        """
        APL> 4↑1⊃↓2 3⍴⍳6
        3 4 5 0
        """
        row = Split(matrix(2, 3)).generator(1)
        assert arr.match(render(Take(row, 4)), arr.V([3, 4, 5, 0]))

class TestSubArray:
    def test_view(self):
        s = SubArray(matrix(2, 3), 1, [(2, 3)])
        assert arr.match(render(s), arr.V([1, 4]))

    def test_prototype_from_first_item(self):
        s = SubArray(arr.V([arr.V([1, 2]), arr.V([3, 4, 5])]), 1, [(1, 1)])
        assert arr.match(render(s.prototype), arr.V([0, 0, 0]))

    def test_overtake_pads_with_prototype(self):
        s = SubArray('abcdef', 2, [(2, 1)])
        assert arr.match(render(Take(s, 4)), arr.V('cd  '))

class TestPartition:
    def test_partition(self):
        """
        APL> 1 1 2 2 0 3⊆'abcdef'
        """
        p = Partition('abcdef', [1, 1, 2, 2, 0, 3])
        assert arr.match(render(p), arr.V([arr.V('ab'), arr.V('cd'), arr.V('f')]))

    def test_equal_keys_stay_together(self):
        p = Partition([1, 2, 3, 4], [2, 2, 1, 1])
        assert p.shape == (1,)

    def test_matrix_rows(self):
        p = Partition(matrix(2, 4), [1, 1, 0, 1])
        assert p.shape == (2, 2)
        assert arr.match(render(p), arr.A([2, 2], [arr.V([0, 1]), arr.V([3]), arr.V([4, 5]), arr.V([7])]))

    def test_key_length(self):
        with pytest.raises(LengthError):
            Partition([1, 2], [1]).shape

    def test_negative_key(self):
        with pytest.raises(DomainError):
            Partition([1, 2], [1, -1]).shape

    def test_scalar(self):
        with pytest.raises(RankError):
            Partition(5, 1)

class TestPartitionedEnclose:
    def test_partitioned_enclose(self):
        """
        APL> 1 0 1 0 0⊂'abcde'
        """
        p = PartitionedEnclose('abcde', [1, 0, 1, 0, 0])
        assert arr.match(render(p), arr.V([arr.V('ab'), arr.V('cde')]))

    def test_leading_cells_dropped(self):
        p = PartitionedEnclose('abcde', [0, 1, 0, 0, 1])
        assert arr.match(render(p), arr.V([arr.V('bcd'), arr.V('e')]))

    def test_empty_partitions(self):
        p = PartitionedEnclose([1, 2, 3], [2, 0, 1])
        assert p.shape == (3,)
        assert render(p).data[0].shape == [0]
