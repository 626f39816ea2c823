"""Column-major sparse matrices of group elements, and the products over them
that the subspace SNARK needs."""
from collections import namedtuple

# One non-zero entry of a column: the row it sits in and its value.
CoeffPos = namedtuple('CoeffPos', ['val', 'pos'])


class SparseMatrix(object):
    """An nr x nc matrix stored as one list of CoeffPos per column."""

    def __init__(self, nr, nc):
        self.nr = nr
        self.nc = nc
        self.cols = [[] for _ in range(nc)]

    def insert_val(self, r, c, v):
        assert 0 <= r < self.nr and 0 <= c < self.nc
        self.cols[c].append(CoeffPos(val=v, pos=r))

    def insert_row_slice(self, r, c_offset, vs):
        """Insert `vs` into row r, starting at column c_offset."""
        for i, x in enumerate(vs):
            self.insert_val(r, c_offset + i, x)

    def get_col(self, c):
        return self.cols[c]

    def __repr__(self):
        return 'SparseMatrix(%d x %d, %d non-zero)' % (
            self.nr, self.nc, sum(len(col) for col in self.cols))


# this is basically a multi-exp
def sparse_inner_product(engine, v, w):
    res = engine.Z1
    for coeffpos in w:
        res = engine.add(res, engine.mul(coeffpos.val, v[coeffpos.pos]))
    return engine.to_affine(res)


def sparse_vector_matrix_mult(engine, v, m):
    """v^T * m: one group element per column of m."""
    assert len(v) == m.nr
    return [sparse_inner_product(engine, v, m.get_col(c)) for c in range(m.nc)]


def inner_product(engine, v, w):
    assert len(v) == len(w)
    return engine.to_affine(engine.msm(w, v))


def scalar_vector_mult(a, v):
    return [a * x for x in v]
