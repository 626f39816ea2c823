#| # Example circuits
#| `MultiplyCircuit` and `CubicCircuit` are the textbook toy statements.
#| `BooleanCircuit` compiles a Boolean circuit in Bristol format
#| (https://homes.esat.kuleuven.be/~nsmart/MPC/) into R1CS, one constraint
#| per gate plus a booleanity constraint per input bit.
#|
#| Run this module for an end-to-end demo:
#|     python -m legogroth16.circuits [<bristol circuit file>]
import logging
import sys
from random import choice

from .r1cs import ONE, ConstraintSynthesizer


class MultiplyCircuit(ConstraintSynthesizer):
    """Knowledge of a, b with a * b = c for public c."""

    def __init__(self, a=None, b=None):
        self.a = a
        self.b = b

    def generate_constraints(self, cs):
        a = cs.new_witness_variable(lambda: self.a)
        b = cs.new_witness_variable(lambda: self.b)
        c = cs.new_input_variable(lambda: None if self.a is None or self.b is None
                                  else self.a * self.b)
        cs.enforce_constraint(a, b, c)


class CubicCircuit(ConstraintSynthesizer):
    """Knowledge of x with x^3 + x + 5 = out for public out."""

    def __init__(self, x=None):
        self.x = x

    def _value(self, f):
        return lambda: None if self.x is None else f(self.x)

    def generate_constraints(self, cs):
        x = cs.new_witness_variable(self._value(lambda x: x))
        x_sq = cs.new_witness_variable(self._value(lambda x: x * x))
        x_cube = cs.new_witness_variable(self._value(lambda x: x * x * x))
        out = cs.new_input_variable(self._value(lambda x: x * x * x + x + 5))

        cs.enforce_constraint(x, x, x_sq)
        cs.enforce_constraint(x_sq, x, x_cube)
        cs.enforce_constraint(x_cube + x + 5 * ONE, ONE, out)


#| ## Boolean circuits
#| Wires carry bits. Gates map to constraints as
#|     AND:  a * b = c
#|     XOR:  2a * b = a + b - c
#|     INV:  (1 - a) * 1 = c
#| and every input wire w gets w * w = w. Output wires become public
#| inputs; all other wires are witnesses, allocated in wire order, so the
#| circuit inputs come first and are the ones committed to when only a
#| prefix of the witnesses is committed.
tables = {
    "XOR": [0, 1, 1, 0],
    "AND": [0, 0, 0, 1],
    "INV": [1, None, 0, None],
}


def get_truth_table(gate, index):
    return tables[gate][index]


class BooleanCircuit(ConstraintSynthesizer):
    # TODO: support the OR and NAND gates of the extended Bristol format
    def __init__(self, file_name=None, text=None):
        self.gates = []
        self.num_wires = None
        self.num_inputs = None
        self.num_outputs = None
        self.input_wires = []
        self.output_wires = []
        self.wire_values = {}

        if file_name is not None:
            with open(file_name, "r") as f:
                text = f.read()
        if text is None:
            raise ValueError("need a circuit file or its text")
        self._parse(text)

    def _parse(self, text):
        lines = [line.split() for line in text.splitlines() if line.strip()]
        if len(lines) < 2:
            raise ValueError("circuit is missing its header")

        # num_gates num_wires
        num_gates, num_wires = (int(x) for x in lines[0][:2])
        self.num_wires = num_wires
        # input bits of the first party, of the second party, output bits
        n1, n2, num_outputs = (int(x) for x in lines[1][:3])
        self.num_inputs = n1 + n2
        self.num_outputs = num_outputs

        # By convention the first wires are inputs and the last are outputs
        self.input_wires = list(range(self.num_inputs))
        self.output_wires = list(range(num_wires - num_outputs, num_wires))

        for nums in lines[2:]:
            # num_inputs num_outputs input_wires output_wires gate_type
            # e.g. "2 1 46 57 512 XOR" is a XOR of wires 46 and 57 into wire 512
            name = nums[-1]
            num_in = int(nums[0])
            wires = [int(x) for x in nums[2:-1]]
            if name in ("XOR", "AND") and num_in == 2:
                gate = {"type": name, "inp": wires[:2], "out": wires[2:3]}
            elif name in ("INV", "NOT") and num_in == 1:
                gate = {"type": "INV", "inp": wires[:1], "out": wires[1:2]}
            else:
                raise ValueError("unsupported gate: %s" % " ".join(nums))
            self.gates.append(gate)

        if len(self.gates) != num_gates:
            raise ValueError("header says %d gates, found %d" % (num_gates, len(self.gates)))

    def get_random_inputs(self):
        """Random bits for every input wire."""
        return dict((i, choice([1, 0])) for i in self.input_wires)

    # Gates are topologically sorted in the Bristol format
    def evaluate(self, inp):
        assert len(inp) == len(self.input_wires)
        wire_values = dict((wid, None) for wid in range(self.num_wires))
        for wid, v in inp.items():
            assert v in (0, 1)
            wire_values[wid] = v

        for gate in self.gates:
            a = wire_values[gate["inp"][0]]
            b = wire_values[gate["inp"][1]] if gate["type"] != "INV" else 0
            wire_values[gate["out"][0]] = get_truth_table(gate["type"], 2 * a + b)

        self.wire_values = wire_values
        return dict((wid, wire_values[wid]) for wid in self.output_wires)

    def outputs(self):
        """Output bits, in the order they are allocated as public inputs."""
        return [self.wire_values[wid] for wid in self.output_wires]

    def generate_constraints(self, cs):
        values = self.wire_values
        outputs = set(self.output_wires)
        var = {}
        for wid in self.output_wires:
            var[wid] = cs.new_input_variable(lambda wid=wid: values.get(wid))
        for wid in range(self.num_wires):
            if wid not in outputs:
                var[wid] = cs.new_witness_variable(lambda wid=wid: values.get(wid))

        for wid in self.input_wires:
            cs.enforce_constraint(var[wid], var[wid], var[wid])

        for gate in self.gates:
            a = var[gate["inp"][0]]
            c = var[gate["out"][0]]
            if gate["type"] == "AND":
                cs.enforce_constraint(a, var[gate["inp"][1]], c)
            elif gate["type"] == "XOR":
                b = var[gate["inp"][1]]
                cs.enforce_constraint(2 * a, b, a + b - c)
            else:
                cs.enforce_constraint(ONE - a, ONE, c)

    def __repr__(self):
        return "BooleanCircuit(%d gates, %d inputs, %d outputs)" % (
            len(self.gates), self.num_inputs, self.num_outputs)


# A one-bit full adder: inputs a, b, carry-in; outputs sum, carry-out
FULL_ADDER = """
5 8
2 1 2

2 1 0 1 3 XOR
2 1 3 2 6 XOR
2 1 0 1 4 AND
2 1 3 2 5 AND
2 1 4 5 7 XOR
"""


if __name__ == "__main__":
    from .curves import get_engine
    from .generator import generate_random_parameters_with_link
    from .prover import create_random_proof_with_link
    from .util import default_rng
    from .verifier import prepare_verifying_key, verify_proof_with_link

    logging.basicConfig(level=logging.DEBUG)
    engine = get_engine()

    if len(sys.argv) == 1:
        print("No circuit file input provided. You can provide a circuit (in bristol format) as follows")
        print("python -m legogroth16.circuits <circuit_file>")
        print("Using a one-bit full adder")
        circuit = BooleanCircuit(text=FULL_ADDER)
    else:
        circuit = BooleanCircuit(file_name=sys.argv[1])
    print(repr(circuit))

    # Commit to the circuit inputs only
    num_committed = circuit.num_inputs
    rng = default_rng()
    bases = [engine.random_g1(rng) for _ in range(num_committed + 1)]

    print("Computing Setup...")
    pk = generate_random_parameters_with_link(engine, circuit, bases,
                                              num_committed_witnesses=num_committed, rng=rng)

    inputs = circuit.get_random_inputs()
    circuit.evaluate(inputs)
    print("inputs:", [inputs[i] for i in circuit.input_wires])
    print("outputs:", circuit.outputs())

    print("Proving...")
    v = engine.random_scalar(rng)
    link_v = engine.random_scalar(rng)
    proof = create_random_proof_with_link(engine, circuit, v, link_v, pk, rng=rng)

    print("Verifying...")
    pvk = prepare_verifying_key(engine, pk.vk.groth16_vk)
    ok = verify_proof_with_link(engine, pvk, pk.vk, proof, circuit.outputs())
    print("Verified:", ok)
    assert ok
