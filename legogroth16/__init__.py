from .curves import BLS12_381, BN254, PairingEngine, get_engine
from .data_structures import (PreparedVerifyingKey, Proof, ProofWithLink, ProvingKey,
                              ProvingKeyCommon, ProvingKeyWithLink, VerifyingKey,
                              VerifyingKeyWithLink)
from .errors import (AssignmentMissing, MalformedVerifyingKey, PolynomialDegreeTooLarge,
                     SerializationError, SynthesisError, Unsatisfiable, UnexpectedIdentity)
from .generator import (generate_parameters, generate_random_parameters,
                        generate_random_parameters_with_link, generate_randomness)
from .prover import (compute_d, create_d, create_proof, create_proof_with_link,
                     create_random_proof, create_random_proof_with_link)
from .r1cs import ConstraintSynthesizer, ConstraintSystem, SynthesisMode
from .verifier import (prepare_inputs, prepare_verifying_key, verify_commitments,
                       verify_link_commitment, verify_link_proof, verify_proof,
                       verify_proof_with_link, verify_proof_with_prepared_inputs,
                       verify_witness_commitment)
