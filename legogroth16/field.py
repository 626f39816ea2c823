#| # Prime fields
#| Scalars of the pairing groups live in the prime field Z/r, where r is the
#| order of G1 and G2. Each modulus gets its own class, built once by a
#| memoized factory so that elements of the same field always share a type.


# memoize calls to the class constructors for fields
# this helps typechecking by never creating two separate
# instances of a number class.
def memoize(f):
    cache = {}

    def memoizedFunction(*args, **kwargs):
        argTuple = args + tuple(kwargs)
        if argTuple not in cache:
            cache[argTuple] = f(*args, **kwargs)
        return cache[argTuple]

    memoizedFunction.cache = cache
    return memoizedFunction


# type check a binary operation, and silently typecast ints
def typecheck(f):
    def newF(self, other):
        if type(self) is not type(other):
            try:
                other = self.__class__(other)
            except TypeError:
                message = 'Not able to typecast %s of type %s to type %s in function %s'
                raise TypeError(message % (other, type(other).__name__, type(self).__name__, f.__name__))

        return f(self, other)

    newF.__name__ = f.__name__
    return newF


class FieldElement(object):
    # the 'r'-operators are only used when typecasting ints
    def __radd__(self, other): return self + other
    def __rsub__(self, other): return -self + other
    def __rmul__(self, other): return self * other

    def __truediv__(self, other): return self * self.__class__(other).inverse()
    def __rtruediv__(self, other): return self.inverse() * other


@memoize
def IntegersModP(p):
    # assume p is prime

    class IntegerModP(FieldElement):
        def __init__(self, n):
            try:
                self.n = int(n) % IntegerModP.p
            except (TypeError, ValueError):
                raise TypeError(
                    "Can't cast type %s to %s in __init__"
                    % (type(n).__name__, type(self).__name__)
                )

        @classmethod
        def random(cls, rng):
            return cls(rng.randrange(cls.p))

        @classmethod
        def zero(cls):
            return cls(0)

        @classmethod
        def one(cls):
            return cls(1)

        @typecheck
        def __add__(self, other):
            return IntegerModP(self.n + other.n)

        @typecheck
        def __sub__(self, other):
            return IntegerModP(self.n - other.n)

        @typecheck
        def __mul__(self, other):
            return IntegerModP(self.n * other.n)

        def __neg__(self):
            return IntegerModP(-self.n)

        def __pow__(self, e):
            if type(e) is not int:
                raise TypeError
            if e < 0:
                return self.inverse() ** -e
            return IntegerModP(pow(self.n, e, IntegerModP.p))

        def __eq__(self, other):
            if isinstance(other, IntegerModP):
                return self.n == other.n
            if isinstance(other, int):
                return self.n == other % IntegerModP.p
            return NotImplemented

        def __ne__(self, other):
            result = self.__eq__(other)
            if result is NotImplemented:
                return result
            return not result

        def __bool__(self):
            return self.n != 0

        def is_zero(self):
            return self.n == 0

        def inverse(self):
            if self.n == 0:
                raise ZeroDivisionError("zero has no inverse in %s" % IntegerModP.__name__)
            return IntegerModP(pow(self.n, IntegerModP.p - 2, IntegerModP.p))

        def __int__(self):
            return self.n

        def __index__(self):
            return self.n

        def __hash__(self):
            return hash((self.n, IntegerModP.p))

        def __str__(self):
            return str(self.n)

        def __repr__(self):
            h = hex(self.n)
            return h[:15] + "..." if len(h) >= 15 else h

    IntegerModP.p = p
    IntegerModP.__name__ = 'Z/%d' % (p)
    IntegerModP.bit_size = p.bit_length()
    return IntegerModP
