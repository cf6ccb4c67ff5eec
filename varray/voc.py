"""
The vocabulary: one constructor per primitive function, keyed on its glyph.

    Voc.get_fn('↑', Arity.DYAD)(2, v, axis=None, config=cfg)

builds the virtual array for 2↑v. Every constructor takes its operand(s)
positionally, and the function axis and the Config as keywords. Nothing is
computed until the result is rendered.
"""
from enum import Enum
import math
import operator
from typing import Any, Callable, Optional

from varray.config import DEFAULT, Config
from varray.core import VArray, lift
from varray import etypes
from varray.errors import DomainError, NYIError
from varray.etypes import EType
from varray.numeric import Deal, Decode, Encode, MatrixDivide, MatrixInverse, Roll
from varray.order import Grade
from varray.scalar import Depth, Iota, Operate, ShapeOf, Tally
from varray.select import First, Pick
from varray.sets import (Find, IndexOf, Intersection, Membership, Union, Unique, Where, Without,
                         equal)
from varray.structural import (Catenate, Compress, Drop, Enclose, Mix, Partition, PartitionedEnclose,
                               Permute, Ravel, Reshape, Rotate, Split, Table, Take)

Constructor = Callable[..., VArray]
Signature = tuple[Optional[Constructor], Optional[Constructor]]

class Arity(Enum):
    MONAD=0
    DYAD=1

def monadic(f: Callable[[Any, Any, Config], VArray]) -> Constructor:
    def construct(omega: Any, *, axis: Any = None, config: Config = DEFAULT) -> VArray:
        return f(omega, axis, config)
    return construct

def dyadic(f: Callable[[Any, Any, Any, Config], VArray]) -> Constructor:
    def construct(alpha: Any, omega: Any, *, axis: Any = None, config: Config = DEFAULT) -> VArray:
        return f(alpha, omega, axis, config)
    return construct

def mpervade(f: Callable, etype: Optional[EType|Callable] = None) -> Constructor:
    """
    Pervade a simple function f into omega

    f must have a signature of fn(omega: int|float) -> int|float
    """
    return monadic(lambda o, axis, c: Operate(f, o, etype=etype))

def pervade(f: Callable, etype: Optional[EType|Callable] = None) -> Constructor:
    """
    Pervade a simple function f into either arguments of equal shapes,
    or between a singleton and an argument of any shape.

    f must have a signature of fn(alpha: int|float, omega: int|float) -> int|float
    """
    return dyadic(lambda a, o, axis, c: Operate(f, a, o, etype=etype))

def compare(test: Callable[[Any, Any, float], bool]) -> Constructor:
    """
    A comparison, made with the comparison tolerance of the Config.
    """
    return dyadic(lambda a, o, axis, c: Operate(lambda x, y: int(test(x, y, c.ct)), a, o, etype=etypes.BIT))

def _real(*types: EType) -> EType:
    if any(t.kind == etypes.Kind.COMPLEX for t in types):
        return etypes.COMPLEX
    return etypes.FLOAT

def _integral(*types: EType) -> EType:
    if any(t.kind == etypes.Kind.COMPLEX for t in types):
        return etypes.COMPLEX
    return etypes.EType(etypes.Kind.INT)

def _boolean(x: Any) -> Any:
    if type(x) == str or x not in (0, 1):
        raise DomainError("DOMAIN ERROR: expected Boolean")
    return x

def bool_not(o: Any) -> int:
    return 1 - _boolean(o)

def conj(o: Any) -> Any:
    if type(o) == complex:
        return o.conjugate()
    return o

def direction(o: Any) -> Any:
    if o == 0:
        return 0
    return o/abs(o) if type(o) == complex else (1 if o > 0 else -1)

def recip(o: Any) -> Any:
    if o == 0:
        raise DomainError('DOMAIN ERROR: divide by zero')
    return 1/o

def divide(a: Any, o: Any) -> Any:
    if o == 0:
        if a == 0:
            return 1
        raise DomainError('DOMAIN ERROR: divide by zero')
    return a/o

def residue(a: Any, o: Any) -> Any:
    if a == 0:
        return o
    return o % a

def flr(o: Any) -> Any:
    if type(o) == complex:
        return complex(math.floor(o.real), math.floor(o.imag))
    if isinstance(o, (int, float)):
        return math.floor(o)
    raise DomainError('DOMAIN ERROR')

def ceiling(o: Any) -> Any:
    if type(o) == complex:
        return complex(math.ceil(o.real), math.ceil(o.imag))
    if isinstance(o, (int, float)):
        return math.ceil(o)
    raise DomainError('DOMAIN ERROR')

def or_gcd(a: Any, o: Any) -> Any:
    if type(a) == type(o) == int:
        return math.gcd(a, o)
    raise DomainError('DOMAIN ERROR: expected integers')

def and_lcm(a: Any, o: Any) -> Any:
    if type(a) == type(o) == int:
        return math.lcm(a, o)
    raise DomainError('DOMAIN ERROR: expected integers')

def _less(a: Any, o: Any, ct: float) -> bool:
    if type(a) in (str, complex) or type(o) in (str, complex):
        raise DomainError("DOMAIN ERROR: can only order real numbers")
    return a < o and not equal(a, o, ct)

class Voc:
    """
    Voc is the global vocabulary of built-in functions. This class should not
    be instantiated.
    """
    funs: dict[str, Signature] = {
        #--- Monadic-------------------------------------------------Dyadic--------------------------------------------------------
        '⍴': (monadic(lambda o, x, c: ShapeOf(o)),                 dyadic(lambda a, o, x, c: Reshape(o, a))),
        ',': (monadic(lambda o, x, c: Ravel(o)),                   dyadic(lambda a, o, x, c: Catenate([a, o], axis=x, io=c.io))),
        '⍪': (monadic(lambda o, x, c: Table(o)),                   dyadic(lambda a, o, x, c: Catenate([a, o], axis=x, first=True, io=c.io))),
        '↑': (monadic(lambda o, x, c: Mix(o)),                     dyadic(lambda a, o, x, c: Take(o, a, axis=x, io=c.io))),
        '↓': (monadic(lambda o, x, c: Split(o, axis=x, io=c.io)),  dyadic(lambda a, o, x, c: Drop(o, a, axis=x, io=c.io))),
        '⍉': (monadic(lambda o, x, c: Permute(o)),                 dyadic(lambda a, o, x, c: Permute(o, a, io=c.io))),
        '⌽': (monadic(lambda o, x, c: Rotate(o, axis=x, io=c.io)), dyadic(lambda a, o, x, c: Rotate(o, a, axis=x, io=c.io))),
        '⊖': (monadic(lambda o, x, c: Rotate(o, axis=x, first=True, io=c.io)),
                                                                   dyadic(lambda a, o, x, c: Rotate(o, a, axis=x, first=True, io=c.io))),
        '/': (None,                                                dyadic(lambda a, o, x, c: Compress(o, a, axis=x, io=c.io))),
        '⌿': (None,                                                dyadic(lambda a, o, x, c: Compress(o, a, axis=x, first=True, io=c.io))),
        '⊂': (monadic(lambda o, x, c: Enclose(o, x, io=c.io)),     dyadic(lambda a, o, x, c: PartitionedEnclose(o, a, axis=x, io=c.io))),
        '⊆': (None,                                                dyadic(lambda a, o, x, c: Partition(o, a, axis=x, io=c.io))),
        '⊃': (monadic(lambda o, x, c: First(o)),                   dyadic(lambda a, o, x, c: Pick(o, a, io=c.io))),
        '⍋': (monadic(lambda o, x, c: Grade(o, io=c.io)),          dyadic(lambda a, o, x, c: Grade(o, key=a, io=c.io))),
        '⍒': (monadic(lambda o, x, c: Grade(o, inverse=True, io=c.io)),
                                                                   dyadic(lambda a, o, x, c: Grade(o, key=a, inverse=True, io=c.io))),
        '⊤': (None,                                                dyadic(lambda a, o, x, c: Encode(a, o))),
        '⊥': (None,                                                dyadic(lambda a, o, x, c: Decode(a, o))),
        '⌹': (monadic(lambda o, x, c: MatrixInverse(o)),           dyadic(lambda a, o, x, c: MatrixDivide(a, o))),
        '?': (monadic(lambda o, x, c: Roll(o, io=c.io, rng=c.rng)), dyadic(lambda a, o, x, c: Deal(a, o, io=c.io, rng=c.rng))),
        '⍳': (monadic(lambda o, x, c: Iota(o, io=c.io)),           dyadic(lambda a, o, x, c: IndexOf(a, o, io=c.io, ct=c.ct))),
        '∊': (None,                                                dyadic(lambda a, o, x, c: Membership(a, o, ct=c.ct))),
        '⍷': (None,                                                dyadic(lambda a, o, x, c: Find(a, o, ct=c.ct))),
        '∩': (None,                                                dyadic(lambda a, o, x, c: Intersection(a, o, ct=c.ct))),
        '∪': (monadic(lambda o, x, c: Unique(o, ct=c.ct)),         dyadic(lambda a, o, x, c: Union(a, o, ct=c.ct))),
        '~': (mpervade(bool_not, etypes.BIT),                      dyadic(lambda a, o, x, c: Without(a, o, ct=c.ct))),
        '⍸': (monadic(lambda o, x, c: Where(o, io=c.io)),          None),
        '≢': (monadic(lambda o, x, c: Tally(o)),                   None),
        '≡': (monadic(lambda o, x, c: Depth(o)),                   None),
        '⊣': (monadic(lambda o, x, c: lift(o)),                    dyadic(lambda a, o, x, c: lift(a))),
        '⊢': (monadic(lambda o, x, c: lift(o)),                    dyadic(lambda a, o, x, c: lift(o))),
        '+': (mpervade(conj),                                      pervade(operator.add)),
        '-': (mpervade(operator.neg),                              pervade(operator.sub)),
        '×': (mpervade(direction),                                 pervade(operator.mul)),
        '÷': (mpervade(recip, _real),                              pervade(divide, _real)),
        '⌈': (mpervade(ceiling, _integral),                        pervade(max)),
        '⌊': (mpervade(flr, _integral),                            pervade(min)),
        '|': (mpervade(operator.abs),                              pervade(residue)),       # DYADIC NOTE ARG ORDER
        '*': (mpervade(math.exp, _real),                           pervade(operator.pow)),
        '∨': (None,                                                pervade(or_gcd)),
        '∧': (None,                                                pervade(and_lcm)),
        '=': (None,                                                compare(equal)),
        '≠': (None,                                                compare(lambda a, o, ct: not equal(a, o, ct))),
        '<': (None,                                                compare(_less)),
        '>': (None,                                                compare(lambda a, o, ct: _less(o, a, ct))),
        '≤': (None,                                                compare(lambda a, o, ct: not _less(o, a, ct))),
        '≥': (None,                                                compare(lambda a, o, ct: not _less(a, o, ct))),
    }

    @classmethod
    def has_builtin(cls, f: str) -> bool:
        return f in cls.funs

    @classmethod
    def get_fn(cls, f: str, arity: Arity) -> Constructor:
        """
        Lookup a function from the global symbol table
        """
        try:
            sig = cls.funs[f]
        except KeyError:
            raise NYIError(f"NYI ERROR: no such primitive: '{f}'")
        fn = sig[arity.value]
        if fn is None:
            raise NYIError(f"NYI ERROR: function '{f}' has no {['monadic', 'dyadic'][arity.value]} form")
        return fn
