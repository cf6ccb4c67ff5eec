import pytest

import varray.arr as arr
from varray.errors import RankError

class TestConstruction:
    def test_strings_become_vectors(self):
        a = arr.V(['abc', 'd'])
        assert arr.match(a.data[0], arr.V('abc'))
        assert a.data[1] == 'd'
        assert a.nested

    def test_simple_scalars_unboxed(self):
        a = arr.V([arr.S(1), 2])
        assert a.data == [1, 2]
        assert not a.nested

    def test_unbox(self):
        assert arr.S(5).unbox() == 5
        v = arr.V([1, 2])
        assert v.unbox() is v

    def test_as_list_rank_error(self):
        with pytest.raises(RankError):
            arr.A([2, 2], [1, 2, 3, 4]).as_list()

class TestProtElement:
    def test_prot_element_numeric_scalar(self):
        assert arr.S(5).prot() == 0

    def test_prot_element_char_vector(self):
        assert arr.V('abc').prot() == ' '

    def test_prot_element_empty_char_vector(self):
        assert arr.V('').prot() == ' '

    def test_prot_element_empty(self):
        assert arr.Array([0], []).prot() == 0

    def test_prot_element_nested(self):
        """
        APL> ⊃0⍴⊂(1 'a')(2 3)
        ┌→──────────────┐
        │┌→────┐ ┌→──┐ │
        ││0    │ │0 0│ │
        │└+────┘ └~──┘ │
        └∊──────────────┘
        """
        a = arr.V([arr.V([1, 'a']), arr.V([2, 3])])
        assert arr.match(arr.typify(a), arr.V([arr.V([0, ' ']), arr.V([0, 0])]))

class TestMatch:
    def test_equal(self):
        assert arr.match(arr.A([2, 2], [1, 2, 3, 4]), arr.A([2, 2], [1, 2, 3, 4]))

    def test_shape_differs(self):
        assert not arr.match(arr.V([1, 2, 3, 4]), arr.A([2, 2], [1, 2, 3, 4]))

    def test_char_is_not_number(self):
        assert not arr.match(arr.V(['1']), arr.V([1]))

    def test_nested(self):
        assert arr.match(arr.V([1, arr.V([2, 3])]), arr.V([1, arr.V([2, 3])]))
        assert not arr.match(arr.V([1, arr.V([2, 3])]), arr.V([1, arr.V([2, 4])]))

    def test_scalars(self):
        assert arr.match(3, arr.S(3))

    def test_eq(self):
        assert arr.V([1, 2]) == arr.V([1, 2])

class TestDepth:
    def test_scalar(self):
        assert arr.S(1).depth() == 0

    def test_simple(self):
        assert arr.V([1, 2]).depth() == 1

    def test_nested(self):
        assert arr.V([1, arr.V([2, arr.V([3, 4])])]).depth() == 3

class TestToList:
    def test_matrix(self):
        assert arr.A([2, 3], range(6)).tolist() == [[0, 1, 2], [3, 4, 5]]

    def test_nested(self):
        assert arr.V([1, arr.V('ab')]).tolist() == [1, ['a', 'b']]
