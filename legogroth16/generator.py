#| # Setup
#| Generate the proving and verifying keys for a circuit. The secret
#| exponents (alpha, beta, gamma, delta, eta) are the toxic waste: they only
#| ever live in local variables here, and anyone who learns them can forge
#| proofs for every circuit set up under the resulting keys.
import logging

from .curves import fixed_base_msm, get_mul_window_size, get_window_table
from .data_structures import (ProvingKey, ProvingKeyCommon, ProvingKeyWithLink,
                              VerifyingKey, VerifyingKeyWithLink)
from .errors import UnexpectedIdentity
from .link import PP, PESubspaceSnark, SparseMatrix
from .r1cs import ConstraintSystem, SynthesisMode
from .r1cs_to_qap import domain_size_for, instance_map_with_evaluation
from .util import default_rng, timer

logger = logging.getLogger(__name__)


def generate_randomness(engine, rng):
    alpha = engine.random_scalar(rng)
    beta = engine.random_scalar(rng)
    gamma = engine.random_scalar(rng)
    delta = engine.random_scalar(rng)
    eta = engine.random_scalar(rng)
    return alpha, beta, gamma, delta, eta


def generate_random_parameters(engine, circuit, rng=None, num_committed_witnesses=None):
    """Sample fresh toxic waste and generate a proving key for `circuit`."""
    rng = rng or default_rng()
    alpha, beta, gamma, delta, eta = generate_randomness(engine, rng)
    pk, _ = generate_parameters(engine, circuit, alpha, beta, gamma, delta, eta,
                                rng, num_committed_witnesses)
    return pk


def generate_random_parameters_with_link(engine, circuit, pedersen_bases, rng=None,
                                         num_committed_witnesses=None):
    """
    Like `generate_random_parameters`, and additionally set up the CP-link
    argument between the proof's witness commitment and Pedersen
    commitments under `pedersen_bases`.

    `pedersen_bases` has one base per committed witness, followed by the
    base for the Pedersen blinding scalar.
    """
    rng = rng or default_rng()
    alpha, beta, gamma, delta, eta = generate_randomness(engine, rng)
    groth16_pk, num_instance_variables = generate_parameters(
        engine, circuit, alpha, beta, gamma, delta, eta, rng, num_committed_witnesses)

    vk = groth16_pk.vk
    commit_witness_count = vk.num_committed_witnesses
    if len(pedersen_bases) != commit_witness_count + 1:
        raise ValueError("expected %d Pedersen bases, got %d"
                         % (commit_witness_count + 1, len(pedersen_bases)))

    link_rows = 2  # we're comparing two commitments
    link_cols = len(pedersen_bases) + 1  # the witnesses plus one hiding factor per row
    link_pp = PP(l=link_rows, t=link_cols,
                 g1=engine.to_affine(engine.G1), g2=engine.to_affine(engine.G2))

    # Columns: committed witnesses, then the Pedersen blinding, then v.
    link_m = SparseMatrix(link_rows, link_cols)
    link_m.insert_row_slice(0, 0, pedersen_bases)
    link_m.insert_row_slice(1, 0, vk.gamma_abc_g1[num_instance_variables:])
    link_m.insert_row_slice(1, commit_witness_count + 1, [vk.eta_gamma_inv_g1])

    with timer("CP-link keygen"):
        link_ek, link_vk = PESubspaceSnark(engine).keygen(rng, link_pp, link_m)

    vk_with_link = VerifyingKeyWithLink(
        groth16_vk=vk,
        link_pp=link_pp,
        link_bases=engine.batch_normalize(pedersen_bases),
        link_vk=link_vk,
    )
    return ProvingKeyWithLink(vk=vk_with_link, common=groth16_pk.common, link_ek=link_ek)


def generate_parameters(engine, circuit, alpha, beta, gamma, delta, eta, rng,
                        num_committed_witnesses=None):
    """
    Create parameters for a circuit, given some toxic waste.

    Returns the proving key and the number of instance variables (the
    constant one included). The first `num_committed_witnesses` witness
    variables (all of them by default) are committed to in every proof.
    """
    Fr = engine.Fr
    alpha, beta, gamma, delta, eta = (Fr(x) for x in (alpha, beta, gamma, delta, eta))
    if gamma == 0 or delta == 0:
        raise UnexpectedIdentity("gamma and delta must be invertible")
    gamma_inverse = gamma.inverse()
    delta_inverse = delta.inverse()

    cs = ConstraintSystem(Fr, mode=SynthesisMode.SETUP)
    with timer("Constraint synthesis"):
        circuit.generate_constraints(cs)
    with timer("Inlining LCs"):
        cs.finalize()

    if num_committed_witnesses is None:
        num_committed_witnesses = cs.num_witness_variables
    if not 0 <= num_committed_witnesses <= cs.num_witness_variables:
        raise ValueError("cannot commit to %d of %d witness variables"
                         % (num_committed_witnesses, cs.num_witness_variables))

    with timer("Constructing evaluation domain"):
        domain = engine.domain(domain_size_for(cs))
        t = domain.sample_element_outside_domain(rng)

    num_instance_variables = cs.num_instance_variables
    # the committed witnesses are laid out right after the instance variables
    num_committed_prefix = num_instance_variables + num_committed_witnesses

    with timer("R1CS to QAP instance map with evaluation"):
        a, b, c, zt, qap_num_variables, m_raw = instance_map_with_evaluation(cs, t, domain)
    logger.debug("QAP: %d variables, domain size %d", qap_num_variables, m_raw)

    # Compute query densities
    non_zero_a = sum(1 for x in a if x != 0)
    non_zero_b = sum(1 for x in b if x != 0)

    scalar_bits = engine.scalar_bits

    gamma_abc = [(beta * a_i + alpha * b_i + c_i) * gamma_inverse
                 for a_i, b_i, c_i in zip(a[:num_committed_prefix],
                                          b[:num_committed_prefix],
                                          c[:num_committed_prefix])]
    l = [(beta * a_i + alpha * b_i + c_i) * delta_inverse
         for a_i, b_i, c_i in zip(a, b, c)]
    del c

    g1_generator = engine.G1
    g2_generator = engine.G2

    with timer("Compute G2 table"):
        g2_window = get_mul_window_size(non_zero_b)
        g2_table = get_window_table(engine, scalar_bits, g2_window, g2_generator)

    with timer("Calculate B G2"):
        b_g2_query = fixed_base_msm(engine, scalar_bits, g2_window, g2_table, b)
    del g2_table

    with timer("Compute G1 window table"):
        g1_window = get_mul_window_size(
            non_zero_a + non_zero_b + qap_num_variables + m_raw + 1)
        g1_table = get_window_table(engine, scalar_bits, g1_window, g1_generator)

    alpha_g1 = engine.mul(g1_generator, alpha)
    beta_g1 = engine.mul(g1_generator, beta)
    beta_g2 = engine.mul(g2_generator, beta)
    delta_g1 = engine.mul(g1_generator, delta)
    delta_g2 = engine.mul(g2_generator, delta)

    with timer("Calculate A"):
        a_query = fixed_base_msm(engine, scalar_bits, g1_window, g1_table, a)
    del a

    with timer("Calculate B G1"):
        b_g1_query = fixed_base_msm(engine, scalar_bits, g1_window, g1_table, b)
    del b

    with timer("Calculate H"):
        zt_delta_inverse = zt * delta_inverse
        h_scalars = []
        t_i = Fr(1)
        for _ in range(m_raw - 1):
            h_scalars.append(zt_delta_inverse * t_i)
            t_i = t_i * t
        h_query = fixed_base_msm(engine, scalar_bits, g1_window, g1_table, h_scalars)

    with timer("Calculate L"):
        l_query = fixed_base_msm(engine, scalar_bits, g1_window, g1_table,
                                 l[num_committed_prefix:])
    del l

    with timer("Generate the R1CS verification key"):
        gamma_g2 = engine.mul(g2_generator, gamma)
        gamma_abc_g1 = fixed_base_msm(engine, scalar_bits, g1_window, g1_table, gamma_abc)
    del g1_table

    eta_gamma_inv_g1 = engine.mul(g1_generator, eta * gamma_inverse)
    eta_delta_inv_g1 = engine.mul(g1_generator, eta * delta_inverse)

    vk = VerifyingKey(
        alpha_g1=engine.to_affine(alpha_g1),
        beta_g2=engine.to_affine(beta_g2),
        gamma_g2=engine.to_affine(gamma_g2),
        delta_g2=engine.to_affine(delta_g2),
        gamma_abc_g1=engine.batch_normalize(gamma_abc_g1),
        eta_gamma_inv_g1=engine.to_affine(eta_gamma_inv_g1),
        num_committed_witnesses=num_committed_witnesses,
    )

    with timer("Convert proving key elements to affine"):
        common = ProvingKeyCommon(
            beta_g1=engine.to_affine(beta_g1),
            delta_g1=engine.to_affine(delta_g1),
            eta_delta_inv_g1=engine.to_affine(eta_delta_inv_g1),
            a_query=engine.batch_normalize(a_query),
            b_g1_query=engine.batch_normalize(b_g1_query),
            b_g2_query=engine.batch_normalize(b_g2_query),
            h_query=engine.batch_normalize(h_query),
            l_query=engine.batch_normalize(l_query),
        )

    logger.info("Generated parameters for %r", cs)
    return ProvingKey(vk=vk, common=common), num_instance_variables
