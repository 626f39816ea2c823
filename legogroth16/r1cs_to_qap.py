#| # R1CS to QAP
#| The reduction interpolates every column of A, B, C over an evaluation
#| domain H. Row i of the constraint system becomes the point w^i. After the
#| m constraint rows, one extra row per instance variable enforces
#| x_i * 0 = 0 so that the instance polynomials are linearly independent.
#|
#| The assignment z satisfies the R1CS iff
#|     A(X) * B(X) - C(X) = H(X) * Z(X)
#| for a polynomial H, where A(X) = sum_i z_i A_i(X) and Z vanishes on H.
import logging

from .util import timer

logger = logging.getLogger(__name__)


def domain_size_for(cs):
    return cs.num_constraints + cs.num_instance_variables


def _evaluate_constraint(terms, assignment, zero):
    acc = zero
    for index, coeff in terms:
        acc = acc + coeff * assignment[index]
    return acc


def instance_map_with_evaluation(cs, t, domain):
    """
    Evaluate every QAP polynomial at the point `t`.

    Returns (a, b, c, z_t, qap_num_variables, domain_size), where a, b, c
    hold A_i(t), B_i(t), C_i(t) for each of the qap_num_variables + 1
    variables (the constant one included).
    """
    A, B, C = cs.to_matrices()
    field = cs.field
    zero = field(0)

    z_t = domain.evaluate_vanishing_polynomial(t)
    u = domain.evaluate_all_lagrange_coefficients(t)

    qap_num_variables = (cs.num_instance_variables - 1) + cs.num_witness_variables
    a = [zero] * (qap_num_variables + 1)
    b = [zero] * (qap_num_variables + 1)
    c = [zero] * (qap_num_variables + 1)

    num_constraints = cs.num_constraints
    for i in range(cs.num_instance_variables):
        a[i] = u[num_constraints + i]

    for i in range(num_constraints):
        u_i = u[i]
        for index, coeff in A.row(i):
            a[index] = a[index] + u_i * coeff
        for index, coeff in B.row(i):
            b[index] = b[index] + u_i * coeff
        for index, coeff in C.row(i):
            c[index] = c[index] + u_i * coeff

    return a, b, c, z_t, qap_num_variables, domain.size


def witness_map(cs, domain):
    """
    Compute the coefficients of the quotient H(X) = (A(X)B(X) - C(X)) / Z(X).

    Division by Z happens on a coset of the domain, where Z has no roots.
    """
    A, B, C = cs.to_matrices()
    field = cs.field
    zero = field(0)
    num_inputs = cs.num_instance_variables
    num_constraints = cs.num_constraints
    full_assignment = cs.full_assignment()

    a = [zero] * domain.size
    b = [zero] * domain.size
    c = [zero] * domain.size
    for i in range(num_constraints):
        a[i] = _evaluate_constraint(A.row(i), full_assignment, zero)
        b[i] = _evaluate_constraint(B.row(i), full_assignment, zero)
        c[i] = _evaluate_constraint(C.row(i), full_assignment, zero)
    for i in range(num_inputs):
        a[num_constraints + i] = full_assignment[i]

    logger.debug("Witness map over %r", domain)
    with timer("Coset FFTs"):
        a = domain.coset_fft(domain.ifft(a))
        b = domain.coset_fft(domain.ifft(b))
        c = domain.coset_fft(domain.ifft(c))

    ab = [x * y - z for x, y, z in zip(a, b, c)]
    h = domain.coset_ifft(domain.divide_by_vanishing_poly_on_coset(ab))
    return h
