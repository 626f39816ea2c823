#| # Prover
#| A proof is (A, B, C, D):
#|     A = alpha + sum_i z_i A_i(t) + r delta
#|     B = beta  + sum_i z_i B_i(t) + s delta
#|     C = sum_{uncommitted} w_j L_j + H(t) Z(t) / delta + s A + r B - r s delta - v eta / delta
#|     D = sum_{committed} w_j gamma_abc_j + v eta / gamma
#| with everything in the exponent. r and s blind A, B and C; v blinds the
#| witness commitment D. Every one of them must be fresh for each proof.
import logging

from .curves import identity_like
from .data_structures import Proof, ProofWithLink
from .errors import MalformedVerifyingKey
from .link import PESubspaceSnark
from .r1cs import ConstraintSystem, SynthesisMode
from .r1cs_to_qap import domain_size_for, witness_map
from .util import default_rng, timer

logger = logging.getLogger(__name__)


def create_random_proof(engine, circuit, v, pk, rng=None, with_commitment=True):
    """
    Create a proof that is zero-knowledge, sampling the blinding r and s
    from `rng`. `v` blinds the witness commitment.
    """
    rng = rng or default_rng()
    r = engine.random_scalar(rng)
    s = engine.random_scalar(rng)
    return create_proof(engine, circuit, pk, r, s, v, with_commitment=with_commitment)


def create_random_proof_with_link(engine, circuit, v, link_v, pk, rng=None):
    rng = rng or default_rng()
    r = engine.random_scalar(rng)
    s = engine.random_scalar(rng)
    return create_proof_with_link(engine, circuit, pk, r, s, v, link_v)


def create_proof(engine, circuit, pk, r, s, v, with_commitment=True):
    """
    Create a proof using randomness r and s.

    With with_commitment=False the witness commitment is left out (d is None); it
    can be added later with `create_d` from the same v.
    """
    with timer("Groth16::Prover"):
        cs = _synthesize(engine, circuit)
        proof, committed = _prove(engine, cs, pk.vk, pk.common, r, s, v)
        if with_commitment:
            with timer("Compute D"):
                proof = proof.with_d(compute_d(engine, pk.vk, committed, v))
    return proof


def create_proof_with_link(engine, circuit, pk, r, s, v, link_v):
    """
    Create a proof together with the Pedersen commitment `link_d` to the
    committed witnesses and the CP-link proof that it opens to the same
    values as `d`.
    """
    Fr = engine.Fr
    vk = pk.vk.groth16_vk
    with timer("Groth16::Prover with link"):
        cs = _synthesize(engine, circuit)
        proof, committed = _prove(engine, cs, vk, pk.common, r, s, v)
        with timer("Compute D"):
            d = compute_d(engine, vk, committed, v)

        with timer("Compute CP_link"):
            committed_with_link_hider = committed + [Fr(link_v)]
            committed_with_hiders = committed_with_link_hider + [Fr(v)]
            link_pi = PESubspaceSnark(engine).prove(
                pk.vk.link_pp, pk.link_ek, committed_with_hiders)
            link_d = engine.msm(pk.vk.link_bases, committed_with_link_hider)

    return ProofWithLink(a=proof.a, b=proof.b, c=proof.c, d=d,
                         link_d=engine.to_affine(link_d),
                         link_pi=link_pi)


def compute_d(engine, vk, committed_witnesses, v):
    """The witness commitment sum_j w_j gamma_abc_j + v eta / gamma."""
    committed_bases = vk.committed_bases()
    assert len(committed_bases) == len(committed_witnesses)
    g_d = engine.msm(committed_bases, committed_witnesses)
    return engine.to_affine(engine.add(g_d, engine.mul(vk.eta_gamma_inv_g1, v)))


def create_d(engine, committed_witnesses, public_inputs, vk, v, proof):
    """
    Fill in the witness commitment of `proof` after the fact.

    Gives the same d as proving with with_commitment=True and the same v.
    """
    if len(public_inputs) + 1 + len(committed_witnesses) != len(vk.gamma_abc_g1):
        raise MalformedVerifyingKey("%d public inputs and %d committed witnesses do not "
                                    "fit a key with %d input bases"
                                    % (len(public_inputs), len(committed_witnesses),
                                       len(vk.gamma_abc_g1)))
    if len(committed_witnesses) != vk.num_committed_witnesses:
        raise MalformedVerifyingKey("key commits to %d witnesses, got %d"
                                    % (vk.num_committed_witnesses, len(committed_witnesses)))
    return proof.with_d(compute_d(engine, vk, committed_witnesses, v))


def _synthesize(engine, circuit):
    cs = ConstraintSystem(engine.Fr, mode=SynthesisMode.PROVE)
    with timer("Constraint synthesis"):
        circuit.generate_constraints(cs)
    if __debug__:
        unsatisfied = cs.which_is_unsatisfied()
        if unsatisfied is not None:
            logger.warning("Assignment does not satisfy constraint %d; the proof "
                           "will not verify", unsatisfied)
    with timer("Inlining LCs"):
        cs.finalize()
    return cs


def _calculate_coeff(engine, initial, query, vk_param, assignment):
    el = query[0]
    acc = engine.msm(query[1:], assignment, zero=identity_like(initial))
    res = engine.add(initial, el)
    res = engine.add(res, acc)
    return engine.add(res, vk_param)


def _prove(engine, cs, vk, common, r, s, v):
    """Compute A, B, C. Returns the proof without d and the committed witnesses."""
    Fr = engine.Fr
    r, s, v = Fr(r), Fr(s), Fr(v)

    num_committed = vk.num_committed_witnesses
    assert cs.num_instance_variables == vk.num_instance_variables, \
        "circuit does not match the proving key"
    assert len(common.a_query) == cs.num_instance_variables + cs.num_witness_variables
    assert len(common.l_query) == cs.num_witness_variables - num_committed

    with timer("R1CS to QAP witness map"):
        domain = engine.domain(domain_size_for(cs))
        h = witness_map(cs, domain)

    with timer("Compute C"):
        # H has degree at most n - 2, so its top coefficient is zero
        h_acc = engine.msm(common.h_query, h[:len(common.h_query)])

        committed = list(cs.witness_assignment[:num_committed])
        aux_assignment = list(cs.witness_assignment[num_committed:])
        l_aux_acc = engine.msm(common.l_query, aux_assignment)

        r_s_delta_g1 = engine.mul(common.delta_g1, r * s)
        v_eta_delta_inv = engine.mul(common.eta_delta_inv_g1, v)

    input_assignment = cs.instance_assignment[1:]
    assignment = input_assignment + cs.witness_assignment

    with timer("Compute A"):
        r_g1 = engine.mul(common.delta_g1, r)
        g_a = _calculate_coeff(engine, r_g1, common.a_query, vk.alpha_g1, assignment)
        s_g_a = engine.mul(g_a, s)

    # Compute B in G1 if needed
    if not r.is_zero():
        with timer("Compute B in G1"):
            s_g1 = engine.mul(common.delta_g1, s)
            g1_b = _calculate_coeff(engine, s_g1, common.b_g1_query, common.beta_g1, assignment)
    else:
        g1_b = engine.Z1

    with timer("Compute B in G2"):
        s_g2 = engine.mul(vk.delta_g2, s)
        g2_b = _calculate_coeff(engine, s_g2, common.b_g2_query, vk.beta_g2, assignment)
        r_g1_b = engine.mul(g1_b, r)

    with timer("Finish C"):
        g_c = s_g_a
        g_c = engine.add(g_c, r_g1_b)
        g_c = engine.sub(g_c, r_s_delta_g1)
        g_c = engine.add(g_c, l_aux_acc)
        g_c = engine.add(g_c, h_acc)
        g_c = engine.sub(g_c, v_eta_delta_inv)

    proof = Proof(a=engine.to_affine(g_a), b=engine.to_affine(g2_b),
                  c=engine.to_affine(g_c), d=None)
    return proof, committed
