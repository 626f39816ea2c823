import dataclasses
import logging
import random

import pytest

from legogroth16 import (BLS12_381, compute_d, create_d, create_proof, create_random_proof,
                         create_random_proof_with_link, generate_parameters,
                         generate_random_parameters, generate_random_parameters_with_link,
                         get_engine, prepare_inputs, prepare_verifying_key, verify_commitments,
                         verify_link_commitment, verify_link_proof, verify_proof,
                         verify_proof_with_link, verify_proof_with_prepared_inputs,
                         verify_witness_commitment)
from legogroth16.circuits import FULL_ADDER, BooleanCircuit, CubicCircuit, MultiplyCircuit
from legogroth16.errors import AssignmentMissing, MalformedVerifyingKey, UnexpectedIdentity
from legogroth16.r1cs import ONE, ConstraintSynthesizer


class WrongProductCircuit(ConstraintSynthesizer):
    """Claims a * b = c for a c that is off by one."""

    def generate_constraints(self, cs):
        a = cs.new_witness_variable(lambda: 3)
        b = cs.new_witness_variable(lambda: 4)
        c = cs.new_input_variable(lambda: 13)
        cs.enforce_constraint(a, b, c)


class ConstantCircuit(ConstraintSynthesizer):
    """1 * 1 = 1, with no variables besides the constant one."""

    def generate_constraints(self, cs):
        cs.enforce_constraint(ONE, ONE, ONE)


def shifted(engine, pt):
    generator = engine.G2 if engine.is_g2(pt) else engine.G1
    return engine.to_affine(engine.add(pt, generator))


def test_prove_and_verify(engine, params, rng):
    pk, pvk = params
    v = engine.random_scalar(rng)
    proof = create_random_proof(engine, MultiplyCircuit(3, 4), v, pk, rng=rng)
    assert verify_proof(engine, pvk, proof, [12])
    assert not verify_proof(engine, pvk, proof, [13])


def test_proofs_are_randomized(engine, params, rng):
    pk, pvk = params
    p1 = create_random_proof(engine, MultiplyCircuit(3, 4), 7, pk, rng=rng)
    p2 = create_random_proof(engine, MultiplyCircuit(3, 4), 7, pk, rng=rng)
    assert p1.a != p2.a
    # same witnesses and v give the same commitment
    assert p1.d == p2.d
    assert verify_proof(engine, pvk, p2, [12])


def test_other_witness_same_statement(engine, params, rng):
    pk, pvk = params
    proof = create_random_proof(engine, MultiplyCircuit(2, 6), 5, pk, rng=rng)
    assert verify_proof(engine, pvk, proof, [12])


def test_prepared_inputs(engine, params, rng):
    pk, pvk = params
    proof = create_random_proof(engine, MultiplyCircuit(3, 4), 5, pk, rng=rng)
    prepared = prepare_inputs(engine, pvk, [12], proof.d)
    assert verify_proof_with_prepared_inputs(engine, pvk, proof, prepared)


def test_zero_r(engine, params):
    pk, pvk = params
    proof = create_proof(engine, MultiplyCircuit(3, 4), pk, 0, 11, 5)
    assert verify_proof(engine, pvk, proof, [12])


@pytest.mark.parametrize("field", ["a", "b", "c", "d"])
def test_tampered_proof(engine, params, rng, field):
    pk, pvk = params
    proof = create_random_proof(engine, MultiplyCircuit(3, 4), 5, pk, rng=rng)
    bad = dataclasses.replace(proof, **{field: shifted(engine, getattr(proof, field))})
    assert not verify_proof(engine, pvk, bad, [12])


def test_point_off_curve(engine, params, rng):
    pk, pvk = params
    proof = create_random_proof(engine, MultiplyCircuit(3, 4), 5, pk, rng=rng)
    FQ = engine.curve.FQ
    bad = dataclasses.replace(proof, c=(FQ(1), FQ(1), FQ(1)))
    assert not verify_proof(engine, pvk, bad, [12])


def test_wrong_number_of_inputs(engine, params, rng):
    pk, pvk = params
    proof = create_random_proof(engine, MultiplyCircuit(3, 4), 5, pk, rng=rng)
    with pytest.raises(MalformedVerifyingKey):
        verify_proof(engine, pvk, proof, [12, 1])
    with pytest.raises(MalformedVerifyingKey):
        verify_proof(engine, pvk, proof, [])


def test_other_key_rejects(engine, params, rng):
    pk, pvk = params
    other_pk = generate_random_parameters(engine, MultiplyCircuit(), rng=random.Random(99))
    proof = create_random_proof(engine, MultiplyCircuit(3, 4), 5, other_pk, rng=rng)
    assert verify_proof(engine, prepare_verifying_key(engine, other_pk.vk), proof, [12])
    assert not verify_proof(engine, pvk, proof, [12])


def test_unsatisfied_assignment(engine, params, rng, caplog):
    pk, pvk = params
    with caplog.at_level(logging.WARNING, logger="legogroth16.prover"):
        proof = create_random_proof(engine, WrongProductCircuit(), 5, pk, rng=rng)
    assert "does not satisfy" in caplog.text
    assert not verify_proof(engine, pvk, proof, [13])


def test_missing_witness(engine, params, rng):
    pk, _ = params
    with pytest.raises(AssignmentMissing):
        create_random_proof(engine, MultiplyCircuit(3, None), 5, pk, rng=rng)


def test_deferred_commitment(engine, params):
    pk, pvk = params
    full = create_proof(engine, MultiplyCircuit(3, 4), pk, 21, 22, 23)
    partial = create_proof(engine, MultiplyCircuit(3, 4), pk, 21, 22, 23,
                           with_commitment=False)
    assert partial.d is None
    assert (partial.a, partial.b, partial.c) == (full.a, full.b, full.c)
    with pytest.raises(ValueError):
        verify_proof(engine, pvk, partial, [12])

    completed = create_d(engine, [3, 4], [12], pk.vk, 23, partial)
    assert completed == full
    assert completed.d == compute_d(engine, pk.vk, [3, 4], 23)
    assert verify_proof(engine, pvk, completed, [12])

    with pytest.raises(MalformedVerifyingKey):
        create_d(engine, [3], [12], pk.vk, 23, partial)


def test_witness_commitment_self_check(engine, params):
    pk, _ = params
    proof = create_proof(engine, MultiplyCircuit(3, 4), pk, 1, 2, 3)
    assert verify_witness_commitment(engine, pk.vk, proof, 1, [3, 4], 3)
    with pytest.raises(MalformedVerifyingKey):
        verify_witness_commitment(engine, pk.vk, proof, 1, [4, 3], 3)
    with pytest.raises(MalformedVerifyingKey):
        verify_witness_commitment(engine, pk.vk, proof, 1, [3, 4], 4)
    with pytest.raises(MalformedVerifyingKey):
        verify_witness_commitment(engine, pk.vk, proof, 2, [3, 4], 3)


def test_zero_gamma(engine, rng):
    with pytest.raises(UnexpectedIdentity):
        generate_parameters(engine, MultiplyCircuit(), 1, 2, 0, 4, 5, rng)
    with pytest.raises(UnexpectedIdentity):
        generate_parameters(engine, MultiplyCircuit(), 1, 2, 3, 0, 5, rng)


def test_key_shape(engine, params):
    pk, _ = params
    vk, common = pk.vk, pk.common
    assert vk.num_committed_witnesses == 2
    assert vk.num_public_inputs == 1
    assert len(vk.gamma_abc_g1) == 4
    assert len(common.a_query) == 4
    assert len(common.b_g2_query) == 4
    assert len(common.h_query) == 3
    assert common.l_query == []


# With link
def test_prove_and_verify_with_link(engine, link_params, rng):
    pk, pvk = link_params
    v, link_v = engine.random_scalar(rng), engine.random_scalar(rng)
    proof = create_random_proof_with_link(engine, MultiplyCircuit(3, 4), v, link_v, pk, rng=rng)
    assert verify_link_proof(engine, pk.vk, proof)
    assert verify_proof_with_link(engine, pvk, pk.vk, proof, [12])
    assert not verify_proof_with_link(engine, pvk, pk.vk, proof, [13])

    assert verify_commitments(engine, pk.vk, proof, 1, [3, 4], v, link_v)
    with pytest.raises(MalformedVerifyingKey):
        verify_link_commitment(engine, pk.vk, proof, [3, 4], link_v + 1)


@pytest.mark.parametrize("field", ["d", "link_d", "link_pi"])
def test_tampered_link_proof(engine, link_params, rng, field):
    pk, pvk = link_params
    proof = create_random_proof_with_link(engine, MultiplyCircuit(3, 4), 5, 6, pk, rng=rng)
    bad = dataclasses.replace(proof, **{field: shifted(engine, getattr(proof, field))})
    assert not verify_proof_with_link(engine, pvk, pk.vk, bad, [12])


def test_link_to_other_witnesses(engine, link_params, rng):
    """A Pedersen commitment to other values cannot be linked to d."""
    pk, pvk = link_params
    proof = create_random_proof_with_link(engine, MultiplyCircuit(3, 4), 5, 6, pk, rng=rng)
    other = create_random_proof_with_link(engine, MultiplyCircuit(2, 6), 5, 6, pk, rng=rng)
    bad = dataclasses.replace(proof, link_d=other.link_d)
    assert not verify_link_proof(engine, pk.vk, bad)


def test_pedersen_basis_length(engine, rng):
    bases = [engine.random_g1(rng) for _ in range(2)]
    with pytest.raises(ValueError):
        generate_random_parameters_with_link(engine, MultiplyCircuit(), bases, rng=rng)


def test_committed_witness_count(engine, rng):
    with pytest.raises(ValueError):
        generate_random_parameters(engine, MultiplyCircuit(), rng=rng, num_committed_witnesses=3)


def test_commit_to_prefix(engine, rng):
    """Commit to x only; x^2 and x^3 stay in C."""
    bases = [engine.random_g1(rng) for _ in range(2)]
    pk = generate_random_parameters_with_link(engine, CubicCircuit(), bases, rng=rng,
                                              num_committed_witnesses=1)
    vk = pk.vk.groth16_vk
    assert len(vk.gamma_abc_g1) == 3
    assert len(pk.common.l_query) == 2

    pvk = prepare_verifying_key(engine, vk)
    proof = create_random_proof_with_link(engine, CubicCircuit(3), 8, 9, pk, rng=rng)
    assert verify_proof_with_link(engine, pvk, pk.vk, proof, [35])
    assert verify_commitments(engine, pk.vk, proof, 1, [3], 8, 9)
    assert not verify_proof_with_link(engine, pvk, pk.vk, proof, [36])


def test_commit_to_nothing(engine, rng):
    pk = generate_random_parameters(engine, CubicCircuit(), rng=rng, num_committed_witnesses=0)
    pvk = prepare_verifying_key(engine, pk.vk)
    proof = create_random_proof(engine, CubicCircuit(3), 8, pk, rng=rng)
    assert proof.d == engine.to_affine(engine.mul(pk.vk.eta_gamma_inv_g1, 8))
    assert verify_proof(engine, pvk, proof, [35])


def test_public_inputs_move_with_d(engine, rng):
    """Without the link check, shifting d moves a proof to other public inputs."""
    bases = [engine.random_g1(rng)]
    pk = generate_random_parameters_with_link(engine, CubicCircuit(), bases, rng=rng,
                                              num_committed_witnesses=0)
    vk = pk.vk.groth16_vk
    pvk = prepare_verifying_key(engine, vk)
    proof = create_random_proof_with_link(engine, CubicCircuit(3), 8, 9, pk, rng=rng)
    assert verify_proof_with_link(engine, pvk, pk.vk, proof, [35])

    # D = gamma_abc_0 + x gamma_abc_1 + d is unchanged for x + 1 and d - gamma_abc_1
    moved = dataclasses.replace(
        proof, d=engine.to_affine(engine.sub(proof.d, vk.gamma_abc_g1[1])))
    assert verify_proof(engine, pvk, moved, [36])
    assert not verify_link_proof(engine, pk.vk, moved)
    assert not verify_proof_with_link(engine, pvk, pk.vk, moved, [36])


def test_link_check_needs_link_proof(engine, params, link_params, rng):
    pk, _ = params
    link_pk, _ = link_params
    proof = create_random_proof(engine, MultiplyCircuit(3, 4), 5, pk, rng=rng)
    with pytest.raises(ValueError):
        verify_link_proof(engine, link_pk.vk, proof)

    link_proof = create_random_proof_with_link(engine, MultiplyCircuit(3, 4), 5, 6, link_pk,
                                               rng=rng)
    with pytest.raises(ValueError):
        verify_link_proof(engine, link_pk.vk, dataclasses.replace(link_proof, link_pi=None))


def test_constant_circuit(engine, rng):
    pk = generate_random_parameters(engine, ConstantCircuit(), rng=rng)
    assert pk.vk.num_committed_witnesses == 0
    assert len(pk.common.b_g2_query) == 1
    pvk = prepare_verifying_key(engine, pk.vk)
    proof = create_random_proof(engine, ConstantCircuit(), 5, pk, rng=rng)
    assert verify_proof(engine, pvk, proof, [])


def test_boolean_circuit_with_link(engine, rng):
    circuit = BooleanCircuit(text=FULL_ADDER)
    bases = [engine.random_g1(rng) for _ in range(circuit.num_inputs + 1)]
    pk = generate_random_parameters_with_link(engine, circuit, bases, rng=rng,
                                              num_committed_witnesses=circuit.num_inputs)
    pvk = prepare_verifying_key(engine, pk.vk.groth16_vk)

    circuit.evaluate({0: 1, 1: 1, 2: 0})
    proof = create_random_proof_with_link(engine, circuit, 5, 6, pk, rng=rng)
    assert verify_proof_with_link(engine, pvk, pk.vk, proof, [0, 1])
    assert not verify_proof_with_link(engine, pvk, pk.vk, proof, [1, 0])
    assert verify_commitments(engine, pk.vk, proof, 2, [1, 1, 0], 5, 6)


def test_bls12_381(rng):
    engine = get_engine(BLS12_381)
    pk = generate_random_parameters(engine, MultiplyCircuit(), rng=rng)
    pvk = prepare_verifying_key(engine, pk.vk)
    proof = create_random_proof(engine, MultiplyCircuit(3, 4), 5, pk, rng=rng)
    assert verify_proof(engine, pvk, proof, [12])
    assert not verify_proof(engine, pvk, proof, [13])

    # (0, 2) is on the curve but has order 3
    FQ = engine.curve.FQ
    bad = dataclasses.replace(proof, a=(FQ(0), FQ(2), FQ(1)))
    assert engine.is_on_curve(bad.a)
    assert not verify_proof(engine, pvk, bad, [12])
