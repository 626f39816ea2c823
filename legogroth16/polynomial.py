#| # Evaluation domains and FFT
#| The QAP reduction works with polynomials that are evaluated over the
#| multiplicative subgroup of n-th roots of unity, where n is a power of two.
#| This module provides:
#|  - Choosing a primitive n-th root of unity
#|  - Fast fourier transform for finite fields, plain and over a coset
#|  - Lagrange coefficients and the vanishing polynomial at a point
import random

from .errors import PolynomialDegreeTooLarge
from .field import memoize
from .util import nearestPowerOfTwo


#| ## Choosing roots of unity
def get_omega(field, n, seed=None):
    """
    Given a field, this method returns a primitive n^th root of unity.
    If the seed is not None then this method will return the
    same n'th root of unity for every run with the same seed

    This only makes sense if n is a power of 2.
    """
    rnd = random.Random(seed)
    assert n & n - 1 == 0, "n must be a power of 2"
    assert (field.p - 1) % n == 0, "n must divide p - 1"
    while True:
        x = field(rnd.randint(1, field.p - 1))
        y = x ** ((field.p - 1) // n)
        if n == 1 or y ** (n // 2) != 1:
            break
    assert y ** n == 1, "omega must be n'th root of unity"
    return y


@memoize
def _two_adic_root_of_unity(field, two_adicity):
    return get_omega(field, 2 ** two_adicity, seed=0)


#| ## Fast Fourier Transform on Finite Fields
def fft_helper(a, omega, field):
    """
    Given coefficients A of polynomial this method does FFT and returns
    the evaluation of the polynomial at [omega^0, omega^(n-1)]

    If the polynomial is a0*x^0 + a1*x^1 + ... + an*x^n then the coefficients
    list is of the form [a0, a1, ... , an].
    """
    n = len(a)
    assert not (n & (n - 1)), "n must be a power of 2"

    if n == 1:
        return list(a)

    b, c = a[0::2], a[1::2]
    omega_sq = omega * omega
    b_bar = fft_helper(b, omega_sq, field)
    c_bar = fft_helper(c, omega_sq, field)
    a_bar = [field(0)] * n
    w = field(1)
    half = n // 2
    for j in range(half):
        t = w * c_bar[j]
        a_bar[j] = b_bar[j] + t
        a_bar[j + half] = b_bar[j] - t
        w = w * omega
    return a_bar


class EvaluationDomain(object):
    """
    The radix-2 domain {1, w, ..., w^(n-1)} of size n >= `size`.

    Raises PolynomialDegreeTooLarge when n exceeds the largest power of two
    dividing p - 1.
    """

    def __init__(self, field, size, two_adicity, coset_generator):
        n = nearestPowerOfTwo(size)
        if n.bit_length() - 1 > two_adicity:
            raise PolynomialDegreeTooLarge(
                "domain of size %d exceeds 2^%d" % (n, two_adicity))

        self.field = field
        self.size = n
        self.log_size = n.bit_length() - 1
        omega_base = _two_adic_root_of_unity(field, two_adicity)
        self.group_gen = omega_base ** (2 ** two_adicity // n)
        self.group_gen_inv = self.group_gen.inverse()
        self.size_inv = field(n).inverse()
        self.coset_gen = field(coset_generator)
        self.coset_gen_inv = self.coset_gen.inverse()

    def __repr__(self):
        return 'EvaluationDomain(%d)' % self.size

    def elements(self):
        x = self.field(1)
        for _ in range(self.size):
            yield x
            x = x * self.group_gen

    def _pad(self, values):
        values = list(values)
        assert len(values) <= self.size
        return values + [self.field(0)] * (self.size - len(values))

    def fft(self, coeffs):
        return fft_helper(self._pad(coeffs), self.group_gen, self.field)

    def ifft(self, evals):
        coeffs = fft_helper(self._pad(evals), self.group_gen_inv, self.field)
        return [c * self.size_inv for c in coeffs]

    def _distribute_powers(self, coeffs, g):
        out = []
        acc = self.field(1)
        for c in coeffs:
            out.append(c * acc)
            acc = acc * g
        return out

    def coset_fft(self, coeffs):
        # Evaluate p(X) at g*w^i by evaluating p(gX) at w^i.
        return self.fft(self._distribute_powers(self._pad(coeffs), self.coset_gen))

    def coset_ifft(self, evals):
        return self._distribute_powers(self.ifft(evals), self.coset_gen_inv)

    def evaluate_vanishing_polynomial(self, tau):
        # Z(X) = (X-1)(X-w)...(X-w^(n-1)) = X^n - 1
        return tau ** self.size - self.field(1)

    def evaluate_all_lagrange_coefficients(self, tau):
        """
        Returns [L_0(tau), ..., L_(n-1)(tau)] for the Lagrange basis of the
        domain, using L_i(X) = Z(X) * w^i / (n * (X - w^i)).
        """
        z_tau = self.evaluate_vanishing_polynomial(tau)
        if z_tau == 0:
            # tau is a domain element, so exactly one L_i is one
            return [self.field(1) if x == tau else self.field(0)
                    for x in self.elements()]
        l = z_tau * self.size_inv
        return [l * x / (tau - x) for x in self.elements()]

    def sample_element_outside_domain(self, rng):
        while True:
            t = self.field.random(rng)
            if self.evaluate_vanishing_polynomial(t) != 0:
                return t

    def divide_by_vanishing_poly_on_coset(self, evals):
        # On the coset g*H, Z(g*w^i) = g^n - 1 is the same for every i.
        z_inv = self.evaluate_vanishing_polynomial(self.coset_gen).inverse()
        return [e * z_inv for e in evals]
