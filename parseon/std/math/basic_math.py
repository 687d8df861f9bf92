import math


class BasicMath:
    """Numeric primitives behind the Parseon math builtins.

    Arguments arrive already checked to be floats. Results that have no
    real value raise ``ValueError`` and results too large for a float raise
    ``OverflowError``; the interpreter turns both into runtime errors at the
    calling line.
    """

    def sqrt(self, x: float) -> float:
        if x < 0:
            raise ValueError('domain error')
        return math.sqrt(x)

    def pow(self, base: float, exponent: float) -> float:
        try:
            return math.pow(base, exponent)
        except ValueError:
            raise ValueError('domain error')
        except OverflowError:
            raise OverflowError('numeric overflow')

    def abs(self, x: float) -> float:
        return math.fabs(x)

    def floor(self, x: float) -> float:
        return float(math.floor(x))
