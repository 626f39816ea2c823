import pytest

from legogroth16.link import (PP, PESubspaceSnark, SparseMatrix, inner_product,
                              scalar_vector_mult, sparse_vector_matrix_mult)


def random_matrix(engine, rng, nr, nc):
    dense = [[engine.random_g1(rng) for _ in range(nc)] for _ in range(nr)]
    m = SparseMatrix(nr, nc)
    for r, row in enumerate(dense):
        m.insert_row_slice(r, 0, row)
    return m, dense


def mat_vec(engine, dense, x):
    return [engine.to_affine(engine.msm(row, x)) for row in dense]


@pytest.fixture
def pp(engine):
    return PP(l=2, t=3, g1=engine.to_affine(engine.G1), g2=engine.to_affine(engine.G2))


def test_sparse_matrix_columns(engine, rng):
    m = SparseMatrix(2, 3)
    g = engine.random_g1(rng)
    m.insert_val(1, 2, g)
    assert m.get_col(0) == []
    assert m.get_col(2)[0].val == g and m.get_col(2)[0].pos == 1
    with pytest.raises(AssertionError):
        m.insert_val(2, 0, g)


def test_vector_matrix_mult(engine, rng):
    Fr = engine.Fr
    m, dense = random_matrix(engine, rng, 2, 3)
    v = [Fr.random(rng) for _ in range(2)]
    expected = [engine.to_affine(engine.msm([dense[0][c], dense[1][c]], v)) for c in range(3)]
    assert sparse_vector_matrix_mult(engine, v, m) == expected

    assert inner_product(engine, v, dense[0][:2]) == \
        engine.to_affine(engine.add(engine.mul(dense[0][0], v[0]), engine.mul(dense[0][1], v[1])))
    assert scalar_vector_mult(Fr(2), v) == [x + x for x in v]


def test_subspace_snark(engine, rng, pp):
    Fr = engine.Fr
    snark = PESubspaceSnark(engine)
    m, dense = random_matrix(engine, rng, 2, 3)
    ek, vk = snark.keygen(rng, pp, m)
    assert len(ek.p) == 3 and len(vk.c) == 2

    x = [Fr.random(rng) for _ in range(3)]
    y = mat_vec(engine, dense, x)
    pi = snark.prove(pp, ek, x)
    assert snark.verify(pp, vk, y, pi)

    # mixes rows of two different openings
    x_bad = [x[0] + 1] + x[1:]
    y_bad = [y[0], mat_vec(engine, dense, x_bad)[1]]
    assert not snark.verify(pp, vk, y_bad, pi)
    assert not snark.verify(pp, vk, y_bad, snark.prove(pp, ek, x_bad))
    assert not snark.verify(pp, vk, y, engine.to_affine(engine.add(pi, engine.G1)))


def test_subspace_snark_checks_lengths(engine, rng, pp):
    snark = PESubspaceSnark(engine)
    m, dense = random_matrix(engine, rng, 2, 3)
    ek, vk = snark.keygen(rng, pp, m)
    with pytest.raises(AssertionError):
        snark.prove(pp, ek, [1, 2])
    with pytest.raises(AssertionError):
        snark.verify(pp, vk, [engine.G1], engine.G1)
