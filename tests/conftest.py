import random

import pytest

from legogroth16 import (BN254, generate_random_parameters,
                         generate_random_parameters_with_link, get_engine,
                         prepare_verifying_key)
from legogroth16.circuits import MultiplyCircuit


# BN254 pairings are the cheapest py_ecc offers, so most tests run there.
@pytest.fixture(scope="session")
def engine():
    return get_engine(BN254)


@pytest.fixture
def rng():
    return random.Random(0)


@pytest.fixture(scope="module")
def params(engine):
    """Keys for a * b = c, committing to both a and b."""
    pk = generate_random_parameters(engine, MultiplyCircuit(), rng=random.Random(1))
    return pk, prepare_verifying_key(engine, pk.vk)


@pytest.fixture(scope="module")
def link_params(engine):
    rng = random.Random(2)
    bases = [engine.random_g1(rng) for _ in range(3)]
    pk = generate_random_parameters_with_link(engine, MultiplyCircuit(), bases, rng=rng)
    return pk, prepare_verifying_key(engine, pk.vk.groth16_vk)
