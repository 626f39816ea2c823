#| # Subspace SNARK
#| A pairing-based argument that a public vector y of G1 elements equals M*x
#| for a public matrix M and a secret scalar vector x. Key generation hides a
#| random vector k and scalar a:
#|     ek = k^T * M         (one G1 element per column)
#|     vk = (a * k) * g2,  a * g2
#| A proof is pi = <x, ek> = k^T * y, which the verifier checks with
#|     prod_i e(y_i, [a k_i]_2) == e(pi, [a]_2)
from dataclasses import dataclass
from typing import Any, List

from .matrix import inner_product, scalar_vector_mult, sparse_vector_matrix_mult


@dataclass(frozen=True)
class PP:
    l: int  # number of rows
    t: int  # number of columns
    g1: Any
    g2: Any


@dataclass(frozen=True)
class EK:
    p: List[Any]


@dataclass(frozen=True)
class VK:
    c: List[Any]
    a: Any


class SubspaceSnark(object):
    """keygen / prove / verify for the relation y = M * x."""

    def keygen(self, rng, pp, m):
        raise NotImplementedError

    def prove(self, pp, ek, x):
        raise NotImplementedError

    def verify(self, pp, vk, y, pi):
        raise NotImplementedError


def vec_to_g2(engine, pp, v):
    return [engine.to_affine(engine.mul(pp.g2, x)) for x in v]


class PESubspaceSnark(SubspaceSnark):
    def __init__(self, engine):
        self.engine = engine

    def keygen(self, rng, pp, m):
        engine = self.engine
        assert (m.nr, m.nc) == (pp.l, pp.t)
        k = [engine.random_scalar(rng) for _ in range(pp.l)]
        a = engine.random_scalar(rng)

        p = sparse_vector_matrix_mult(engine, k, m)
        c = scalar_vector_mult(a, k)

        ek = EK(p=p)
        vk = VK(c=vec_to_g2(engine, pp, c),
                a=engine.to_affine(engine.mul(pp.g2, a)))
        return ek, vk

    def prove(self, pp, ek, x):
        assert pp.t == len(x)
        return inner_product(self.engine, x, ek.p)

    def verify(self, pp, vk, y, pi):
        assert pp.l == len(y)
        engine = self.engine
        # check that [y]_1^T . [c]_2 = [pi]_1 . [a]_2
        g1_elements = list(y) + [pi]
        g2_elements = list(vk.c) + [engine.neg(vk.a)]
        return engine.multi_pairing(g1_elements, g2_elements) == engine.FQ12.one()
