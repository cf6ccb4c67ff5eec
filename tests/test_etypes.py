from varray import etypes
from varray.etypes import EType, Kind

class TestEtypeOfValue:
    def test_values(self):
        assert etypes.etype_of_value(True) == EType(Kind.BIT, 1, 1)
        assert etypes.etype_of_value(0) == EType(Kind.BIT, 0, 0)
        assert etypes.etype_of_value(7) == EType(Kind.INT, 7, 7)
        assert etypes.etype_of_value(0.5) == etypes.FLOAT
        assert etypes.etype_of_value(1j) == etypes.COMPLEX
        assert etypes.etype_of_value('a') == etypes.CHAR

    def test_empty(self):
        assert etypes.etype_of_values([]) == etypes.BIT

    def test_bits(self):
        assert etypes.etype_of_values([1, 0, 1]) == etypes.BIT
        assert etypes.etype_of_values([1, 1]) == EType(Kind.BIT, 1, 1)

    def test_range_above_one(self):
        """
        A run of ones must not drag the lower bound down to zero.
        """
        assert etypes.etype_of_values([1, 5, 3]) == EType(Kind.INT, 1, 5)
        assert etypes.etype_of_values([5, 1]) == EType(Kind.INT, 1, 5)

class TestJoin:
    def test_ranges(self):
        assert etypes.join(EType(Kind.INT, 2, 5), EType(Kind.INT, -1, 3)) == EType(Kind.INT, -1, 5)

    def test_bits(self):
        assert etypes.join(etypes.BIT, etypes.BIT) == etypes.BIT
        assert etypes.join(etypes.BIT, EType(Kind.INT, 4, 4)) == EType(Kind.INT, 0, 4)
        assert etypes.join(etypes.integer(1, 1), EType(Kind.INT, 4, 4)) == EType(Kind.INT, 1, 4)
        assert etypes.join(etypes.integer(0, 0), etypes.integer(1, 1)) == etypes.BIT

    def test_widening(self):
        assert etypes.join(etypes.BIT, etypes.FLOAT) == etypes.FLOAT
        assert etypes.join(etypes.FLOAT, etypes.COMPLEX) == etypes.COMPLEX

    def test_chars(self):
        assert etypes.join(etypes.CHAR, etypes.CHAR) == etypes.CHAR
        assert etypes.join(etypes.CHAR, etypes.BIT) == etypes.MIXED

    def test_unbounded(self):
        assert etypes.join(EType(Kind.INT), etypes.BIT) == EType(Kind.INT)

    def test_str(self):
        assert str(EType(Kind.INT, 0, 9)) == "INT[0..9]"
        assert str(etypes.CHAR) == "CHAR"
        assert str(etypes.integer(1, 1)) == "BIT"
