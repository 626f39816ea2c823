#| # Verifier
#| The verifier accepts (A, B, C, D) for public inputs x iff
#|     e(A, B) = e(alpha, beta) * e(C, delta) * e(x_0 gamma_abc_0 + ... + D, gamma)
#| The three pairings on the right-hand side are moved to the left with
#| negated G2 arguments so that the whole check is one multi-Miller loop
#| and one final exponentiation.
import logging

from .data_structures import PreparedVerifyingKey
from .errors import MalformedVerifyingKey
from .link import PESubspaceSnark

logger = logging.getLogger(__name__)


def prepare_verifying_key(engine, vk):
    return PreparedVerifyingKey(
        vk=vk,
        alpha_g1_beta_g2=engine.pairing(vk.alpha_g1, vk.beta_g2),
        gamma_g2_neg_pc=engine.to_affine(engine.neg(vk.gamma_g2)),
        delta_g2_neg_pc=engine.to_affine(engine.neg(vk.delta_g2)),
    )


def _check_input_length(vk, public_inputs):
    if len(public_inputs) + 1 + vk.num_committed_witnesses != len(vk.gamma_abc_g1):
        raise MalformedVerifyingKey("expected %d public inputs, got %d"
                                    % (vk.num_public_inputs, len(public_inputs)))


def prepare_inputs(engine, pvk, public_inputs, d):
    """gamma_abc_0 + sum_i x_i gamma_abc_{i+1} + d"""
    vk = pvk.vk
    _check_input_length(vk, public_inputs)
    g_ic = engine.msm(vk.gamma_abc_g1[1:1 + len(public_inputs)], public_inputs)
    g_ic = engine.add(g_ic, vk.gamma_abc_g1[0])
    return engine.add(g_ic, d)


def verify_proof_with_prepared_inputs(engine, pvk, proof, prepared_inputs):
    qap = engine.multi_miller_loop(
        [proof.a, proof.c, prepared_inputs],
        [proof.b, pvk.delta_g2_neg_pc, pvk.gamma_g2_neg_pc],
    )
    test = engine.final_exponentiation(qap)
    return test == pvk.alpha_g1_beta_g2


def _points_in_subgroup(engine, points):
    return all(engine.is_in_subgroup(pt) for pt in points)


def _require_d(proof):
    if proof.d is None:
        raise ValueError("proof has no witness commitment; fill it in with create_d")


def _require_link(proof):
    if getattr(proof, "link_d", None) is None or getattr(proof, "link_pi", None) is None:
        raise ValueError("proof carries no link commitment; create it with "
                         "create_proof_with_link")


def verify_proof(engine, pvk, proof, public_inputs):
    """
    Check the pairing equation for `public_inputs`.

    On its own this does not tie `proof.d` to the committed witnesses: d is
    folded into the same sum as the public inputs, so anyone can move a
    valid proof to other inputs x' by adding sum_i (x_i - x'_i) gamma_abc_{i+1}
    to d. Statements whose public inputs matter need the link check too,
    see `verify_proof_with_link`.
    """
    _check_input_length(pvk.vk, public_inputs)
    _require_d(proof)
    if not _points_in_subgroup(engine, (proof.a, proof.b, proof.c, proof.d)):
        logger.info("Rejecting proof with a point outside the prime-order subgroup")
        return False
    prepared_inputs = prepare_inputs(engine, pvk, public_inputs, proof.d)
    return verify_proof_with_prepared_inputs(engine, pvk, proof, prepared_inputs)


def verify_link_proof(engine, vk_link, proof):
    """Check that link_d and d commit to the same witnesses."""
    _require_d(proof)
    _require_link(proof)
    if not _points_in_subgroup(engine, (proof.d, proof.link_d, proof.link_pi)):
        logger.info("Rejecting link proof with a point outside the prime-order subgroup")
        return False
    commitments = [proof.link_d, proof.d]
    return PESubspaceSnark(engine).verify(vk_link.link_pp, vk_link.link_vk,
                                          commitments, proof.link_pi)


def verify_proof_with_link(engine, pvk, vk_link, proof, public_inputs):
    _check_input_length(pvk.vk, public_inputs)
    if not verify_link_proof(engine, vk_link, proof):
        return False
    return verify_proof(engine, pvk, proof, public_inputs)


#| ## Self checks
#| A prover holding the witnesses can recompute its commitments and compare
#| them with what went into the proof. These raise instead of returning
#| False, since a mismatch means the key or the witnesses are not what the
#| caller thinks they are.
def verify_witness_commitment(engine, vk, proof, num_public_inputs, witnesses, v):
    if num_public_inputs + 1 + len(witnesses) != len(vk.gamma_abc_g1):
        raise MalformedVerifyingKey("%d public inputs and %d witnesses do not fit a key "
                                    "with %d input bases"
                                    % (num_public_inputs, len(witnesses), len(vk.gamma_abc_g1)))
    committed = engine.msm(vk.gamma_abc_g1[1 + num_public_inputs:], witnesses)
    expected = engine.add(committed, engine.mul(vk.eta_gamma_inv_g1, v))
    if proof.d is None or not engine.eq(expected, proof.d):
        raise MalformedVerifyingKey("witness commitment d does not open to the given witnesses")
    return True


def verify_link_commitment(engine, vk_link, proof, witnesses, link_v):
    bases = vk_link.link_bases
    if len(witnesses) + 1 != len(bases):
        raise MalformedVerifyingKey("%d witnesses do not fit %d Pedersen bases"
                                    % (len(witnesses), len(bases)))
    scalars = list(witnesses) + [engine.Fr(link_v)]
    if not engine.eq(engine.msm(bases, scalars), proof.link_d):
        raise MalformedVerifyingKey("link commitment does not open to the given witnesses")
    return True


def verify_commitments(engine, vk_link, proof, num_public_inputs, witnesses, v, link_v):
    verify_witness_commitment(engine, vk_link.groth16_vk, proof, num_public_inputs,
                              witnesses, v)
    verify_link_commitment(engine, vk_link, proof, witnesses, link_v)
    return True
