"""
Keys and proofs.

All group elements are affine-normalised py_ecc points, so dataclass
equality is group equality.
"""
from dataclasses import dataclass, replace
from typing import Any, List, Optional

from .link import EK, PP, VK

G1Point = Any
G2Point = Any


@dataclass(frozen=True)
class Proof:
    a: G1Point
    b: G2Point
    c: G1Point
    # Commitment to the committed witnesses and the blinding v. None until
    # filled in by `create_d` when the commitment is deferred.
    d: Optional[G1Point]

    def with_d(self, d):
        return replace(self, d=d)


@dataclass(frozen=True)
class ProofWithLink(Proof):
    # The committed witnesses under the external Pedersen bases
    link_d: G1Point = None
    # CP-link proof that link_d and d open to the same values
    link_pi: G1Point = None


@dataclass(frozen=True)
class VerifyingKey:
    alpha_g1: G1Point
    beta_g2: G2Point
    gamma_g2: G2Point
    delta_g2: G2Point
    # gamma^-1 * (beta * A_i(t) + alpha * B_i(t) + C_i(t)) * G1, for the
    # constant one, the public inputs and then the committed witnesses.
    gamma_abc_g1: List[G1Point]
    eta_gamma_inv_g1: G1Point
    num_committed_witnesses: int = 0

    @property
    def num_instance_variables(self):
        return len(self.gamma_abc_g1) - self.num_committed_witnesses

    @property
    def num_public_inputs(self):
        return self.num_instance_variables - 1

    def committed_bases(self):
        return self.gamma_abc_g1[self.num_instance_variables:]


@dataclass(frozen=True)
class ProvingKeyCommon:
    beta_g1: G1Point
    delta_g1: G1Point
    eta_delta_inv_g1: G1Point
    # A_i(t) * G1, one per QAP variable
    a_query: List[G1Point]
    b_g1_query: List[G1Point]
    b_g2_query: List[G2Point]
    # Z(t) * t^i / delta * G1
    h_query: List[G1Point]
    # (beta * A_i(t) + alpha * B_i(t) + C_i(t)) / delta * G1 for each
    # uncommitted witness
    l_query: List[G1Point]


@dataclass(frozen=True)
class ProvingKey:
    vk: VerifyingKey
    common: ProvingKeyCommon


@dataclass(frozen=True)
class VerifyingKeyWithLink:
    groth16_vk: VerifyingKey
    link_pp: PP
    link_bases: List[G1Point]
    link_vk: VK


@dataclass(frozen=True)
class ProvingKeyWithLink:
    vk: VerifyingKeyWithLink
    common: ProvingKeyCommon
    link_ek: EK


@dataclass(frozen=True)
class PreparedVerifyingKey:
    vk: VerifyingKey
    # e(alpha_g1, beta_g2)
    alpha_g1_beta_g2: Any
    gamma_g2_neg_pc: G2Point
    delta_g2_neg_pc: G2Point
