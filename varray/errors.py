"""
The APL error taxonomy. Every failure raised by the engine is an APLError;
messages lead with the APL name of the error, e.g.

    LENGTH ERROR: Mismatched left and right argument shapes
"""
import builtins


class APLError(Exception):
    pass

class LengthError(APLError):
    """
    Dimension mismatch between operands. The offending shapes travel with
    the exception so the compiler can report them.
    """
    def __init__(self, message: str = "LENGTH ERROR", *shapes) -> None:
        super().__init__(message)
        self.shapes = [tuple(s) for s in shapes]

    def __str__(self) -> str:
        if not self.shapes:
            return self.args[0]
        return f"{self.args[0]} {' vs '.join(map(str, self.shapes))}"

class RankError(APLError):
    pass

class DomainError(APLError):
    pass

class IndexError(APLError, builtins.IndexError):
    pass

class NYIError(APLError):
    pass
