#| # Pairing engines
#| Everything the proof system needs from a pairing-friendly curve is
#| collected on a `PairingEngine`: the scalar field, the two source groups,
#| multi-scalar multiplication and the pairing itself. Curve arithmetic is
#| delegated to `py_ecc`'s optimized (projective coordinate) backends.
#|
#| Points are `py_ecc` projective tuples `(x, y, z)`. Anything stored in a
#| key or a proof goes through `to_affine` first, so that two equal group
#| elements are also equal as Python tuples.
import logging
import os
from math import ceil, log

from py_ecc import optimized_bls12_381, optimized_bn128

from .errors import UnexpectedIdentity
from .field import IntegersModP, memoize
from .polynomial import EvaluationDomain
from .util import parallelize

logger = logging.getLogger(__name__)

DEFAULT_CURVE = os.environ.get("LEGOGROTH16_CURVE", "bls12_381")


def is_identity(pt):
    return pt[2] == type(pt[2]).zero()


def identity_like(pt):
    F = type(pt[0])
    return (F.one(), F.one(), F.zero())


class PairingEngine(object):
    def __init__(self, name, curve, two_adicity, multiplicative_generator):
        self.name = name
        self.curve = curve
        self.Fr = IntegersModP(curve.curve_order)
        self.scalar_bits = curve.curve_order.bit_length()
        self.two_adicity = two_adicity
        self.multiplicative_generator = self.Fr(multiplicative_generator)

        self.G1 = curve.G1
        self.G2 = curve.G2
        self.Z1 = curve.Z1
        self.Z2 = curve.Z2
        self.FQ12 = curve.FQ12

    def __repr__(self):
        return 'PairingEngine(%s)' % self.name

    # Scalar field
    def random_scalar(self, rng):
        return self.Fr.random(rng)

    def domain(self, size):
        return EvaluationDomain(self.Fr, size, self.two_adicity,
                                self.multiplicative_generator)

    # Group arithmetic, shared by G1 and G2
    def is_g2(self, pt):
        return isinstance(pt[0], self.curve.FQ2)

    def add(self, p1, p2):
        return self.curve.add(p1, p2)

    def neg(self, pt):
        return self.curve.neg(pt)

    def sub(self, p1, p2):
        return self.curve.add(p1, self.curve.neg(p2))

    def mul(self, pt, scalar):
        n = int(scalar) % self.curve.curve_order
        if n == 0:
            return identity_like(pt)
        return self.curve.multiply(pt, n)

    def eq(self, p1, p2):
        return self.curve.eq(p1, p2)

    def is_on_curve(self, pt):
        if is_identity(pt):
            return True
        b = self.curve.b2 if self.is_g2(pt) else self.curve.b
        return self.curve.is_on_curve(pt, b)

    def is_in_subgroup(self, pt):
        """On the curve and of order dividing r. Catches the cofactor part that
        BLS12-381 and the G2 of BN254 carry."""
        if is_identity(pt):
            return True
        if not self.is_on_curve(pt):
            return False
        return is_identity(self.curve.multiply(pt, self.curve.curve_order))

    def random_g1(self, rng):
        return self.to_affine(self.mul(self.G1, self.random_scalar(rng)))

    def to_affine(self, pt):
        if is_identity(pt):
            return identity_like(pt)
        x, y, z = pt
        return (x / z, y / z, type(z).one())

    def batch_normalize(self, pts):
        return [self.to_affine(pt) for pt in pts]

    def _msm_chunk(self, zero, bases, scalars):
        acc = zero
        for base, scalar in zip(bases, scalars):
            n = int(scalar) % self.curve.curve_order
            if n == 0:
                continue
            term = base if n == 1 else self.curve.multiply(base, n)
            acc = self.curve.add(acc, term)
        return acc

    def msm(self, bases, scalars, zero=None):
        """Variable-base multi-scalar multiplication: sum_i scalars[i] * bases[i].

        An empty sum is `zero`, which defaults to the identity of the group
        of `bases`, or of G1 when there are none.
        """
        assert len(bases) == len(scalars)
        if zero is None:
            zero = self.Z2 if bases and self.is_g2(bases[0]) else self.Z1
        partial_sums = parallelize(
            lambda start, end: self._msm_chunk(zero, bases[start:end], scalars[start:end]),
            len(bases))
        acc = zero
        for s in partial_sums:
            acc = self.curve.add(acc, s)
        return acc

    # Pairing
    def pairing(self, p, q):
        """e(p, q) for p in G1 and q in G2."""
        return self.curve.pairing(q, p)

    def multi_miller_loop(self, g1_elements, g2_elements):
        assert len(g1_elements) == len(g2_elements)
        f = self.FQ12.one()
        for p, q in zip(g1_elements, g2_elements):
            f = f * self.curve.pairing(q, p, final_exponentiate=False)
        return f

    def final_exponentiation(self, f):
        if f == self.FQ12.zero():
            raise UnexpectedIdentity("Miller loop output is zero")
        return self.curve.final_exponentiate(f)

    def multi_pairing(self, g1_elements, g2_elements):
        return self.final_exponentiation(self.multi_miller_loop(g1_elements, g2_elements))


#| ## Fixed-base exponentiation
#| Setup multiplies the same generator by thousands of scalars. Precomputing
#| the multiples `j * 2^(w*i) * g` for every window `i` turns each scalar
#| multiplication into one addition per window.
def get_mul_window_size(num_scalars):
    if num_scalars < 32:
        return 3
    return int(ceil(log(num_scalars)))


def get_window_table(engine, scalar_size, window, g):
    in_window = 1 << window
    outerc = (scalar_size + window - 1) // window
    last_in_window = 1 << (scalar_size - (outerc - 1) * window)

    table = []
    g_outer = g
    for outer in range(outerc):
        cur_in_window = last_in_window if outer == outerc - 1 else in_window
        row = []
        g_inner = identity_like(g)
        for _ in range(cur_in_window):
            row.append(g_inner)
            g_inner = engine.add(g_inner, g_outer)
        table.append(row)
        for _ in range(window):
            g_outer = engine.curve.double(g_outer)
    return table


def windowed_mul(engine, outerc, window, table, scalar):
    s = int(scalar)
    mask = (1 << window) - 1
    res = table[0][0]
    for outer in range(outerc):
        inner = (s >> (outer * window)) & mask
        if inner:
            res = engine.add(res, table[outer][inner])
    return res


def fixed_base_msm(engine, scalar_size, window, table, scalars):
    """Multiply the table's base point by every scalar in `scalars`."""
    outerc = (scalar_size + window - 1) // window
    assert outerc <= len(table)
    chunks = parallelize(
        lambda start, end: [windowed_mul(engine, outerc, window, table, s)
                            for s in scalars[start:end]],
        len(scalars))
    return [pt for chunk in chunks for pt in chunk]


BN254 = 'bn254'
BLS12_381 = 'bls12_381'

# name -> (py_ecc backend, two-adicity of r - 1, multiplicative generator of Fr)
_CURVES = {
    BN254: (optimized_bn128, 28, 5),
    BLS12_381: (optimized_bls12_381, 32, 7),
}


@memoize
def _build_engine(name):
    curve, two_adicity, generator = _CURVES[name]
    logger.debug("Building pairing engine for %s", name)
    return PairingEngine(name, curve, two_adicity, generator)


def get_engine(name=None):
    name = (name or DEFAULT_CURVE).lower()
    if name not in _CURVES:
        raise ValueError("Unsupported curve type: %s" % name)
    return _build_engine(name)
