#| # Rank-1 Constraint Systems
#| A circuit is a list of constraints <A_i, z> * <B_i, z> = <C_i, z> over the
#| assignment vector z = (1, x_1, ..., x_l, w_1, ..., w_m), where the x's are
#| public instance values and the w's are private witness values.
#|
#| Circuits describe themselves by implementing `ConstraintSynthesizer`. The
#| same `generate_constraints` code runs twice: once in setup mode, where only
#| the shape of the constraints matters, and once in prove mode, where every
#| variable also gets a value.
import enum
import logging

import numpy as np

from .errors import AssignmentMissing, Unsatisfiable

logger = logging.getLogger(__name__)


class SynthesisMode(enum.Enum):
    SETUP = 'setup'
    PROVE = 'prove'


INSTANCE = 'instance'
WITNESS = 'witness'


class Variable(object):
    __slots__ = ('kind', 'index')

    def __init__(self, kind, index):
        self.kind = kind
        self.index = index

    def __eq__(self, other):
        return (isinstance(other, Variable) and
                self.kind == other.kind and self.index == other.index)

    def __hash__(self):
        return hash((self.kind, self.index))

    def __repr__(self):
        if self == ONE:
            return 'ONE'
        return '%s(%d)' % (self.kind, self.index)

    def __add__(self, other): return LinearCombination.of(self) + other
    def __sub__(self, other): return LinearCombination.of(self) - other
    def __neg__(self): return LinearCombination.of(self) * -1
    def __mul__(self, coeff): return LinearCombination([(coeff, self)])
    def __rmul__(self, coeff): return self * coeff


# The constant-one variable is instance variable 0.
ONE = Variable(INSTANCE, 0)


class LinearCombination(object):
    """A sum of (coefficient, variable) terms. Coefficients may be ints."""

    def __init__(self, terms=()):
        self.terms = list(terms)

    @classmethod
    def of(cls, x):
        if isinstance(x, LinearCombination):
            return x
        if isinstance(x, Variable):
            return cls([(1, x)])
        if isinstance(x, tuple):
            return cls([x])
        # a bare constant
        return cls([(x, ONE)])

    def __add__(self, other):
        return LinearCombination(self.terms + LinearCombination.of(other).terms)

    def __radd__(self, other):
        return LinearCombination.of(other) + self

    def __sub__(self, other):
        return self + LinearCombination.of(other) * -1

    def __mul__(self, coeff):
        return LinearCombination([(c * coeff, v) for c, v in self.terms])

    __rmul__ = __mul__

    def __repr__(self):
        return ' + '.join('%s*%r' % (c, v) for c, v in self.terms) or '0'


def lc(*terms):
    return sum((LinearCombination.of(t) for t in terms), LinearCombination())


#| ## Sparse matrices
#| Constraint matrices have O(m + n) non-zero entries, so each row is a dict
#| from column index to value.
class RowDictSparseMatrix(object):
    def __init__(self, m, n, zero):
        self.shape = (m, n)
        self.zero = zero
        self.rows = [dict() for _ in range(m)]

    def __setitem__(self, key, value):
        i, j = key
        if value == self.zero:
            self.rows[i].pop(j, None)
        else:
            self.rows[i][j] = value

    def __getitem__(self, key):
        i, j = key
        return self.rows[i].get(j, self.zero)

    def row(self, i):
        return list(self.rows[i].items())

    def dot(self, other):
        assert len(other) == self.shape[1]
        return np.array([sum((val * other[j] for j, val in row.items()), self.zero)
                         for row in self.rows], dtype=object)

    def __repr__(self):
        return 'RowDictSparseMatrix%r(%d non-zero)' % (
            self.shape, sum(len(row) for row in self.rows))


class ConstraintSystem(object):
    def __init__(self, field, mode=SynthesisMode.PROVE):
        self.field = field
        self.mode = mode
        self.num_instance_variables = 1
        self.num_witness_variables = 0
        self.instance_assignment = [field(1)] if self.is_in_prove_mode() else []
        self.witness_assignment = []
        self.constraints = []
        self._matrices = None

    def is_in_prove_mode(self):
        return self.mode is SynthesisMode.PROVE

    @property
    def num_constraints(self):
        return len(self.constraints)

    def _value(self, f):
        value = f() if f is not None else None
        if value is None:
            raise AssignmentMissing("no value supplied for variable")
        return self.field(value)

    def new_input_variable(self, f=None):
        """Allocate a public instance variable; `f` computes its value."""
        if self.is_in_prove_mode():
            self.instance_assignment.append(self._value(f))
        var = Variable(INSTANCE, self.num_instance_variables)
        self.num_instance_variables += 1
        return var

    def new_witness_variable(self, f=None):
        """Allocate a private witness variable; `f` computes its value."""
        if self.is_in_prove_mode():
            self.witness_assignment.append(self._value(f))
        var = Variable(WITNESS, self.num_witness_variables)
        self.num_witness_variables += 1
        return var

    def enforce_constraint(self, a, b, c):
        """Add the constraint a * b = c over linear combinations."""
        assert self._matrices is None, "constraint system is already finalized"
        self.constraints.append((LinearCombination.of(a),
                                 LinearCombination.of(b),
                                 LinearCombination.of(c)))

    def _column(self, var):
        if var.kind == INSTANCE:
            assert var.index < self.num_instance_variables
            return var.index
        assert var.index < self.num_witness_variables
        return self.num_instance_variables + var.index

    def _build_matrices(self):
        m = self.num_constraints
        n = self.num_instance_variables + self.num_witness_variables
        zero = self.field(0)
        matrices = []
        for k in range(3):
            M = RowDictSparseMatrix(m, n, zero)
            for i, constraint in enumerate(self.constraints):
                for coeff, var in constraint[k].terms:
                    j = self._column(var)
                    M[i, j] = M[i, j] + self.field(coeff)
            matrices.append(M)
        return tuple(matrices)

    def finalize(self):
        """Inline every linear combination into the sparse matrices A, B, C."""
        if self._matrices is None:
            self._matrices = self._build_matrices()
            logger.debug("Finalized %r", self)

    def to_matrices(self):
        if self._matrices is not None:
            return self._matrices
        return self._build_matrices()

    def full_assignment(self):
        assert self.is_in_prove_mode()
        return np.array(self.instance_assignment + self.witness_assignment, dtype=object)

    def which_is_unsatisfied(self):
        """Index of the first violated constraint, or None."""
        A, B, C = self.to_matrices()
        z = self.full_assignment()
        ok = A.dot(z) * B.dot(z) == C.dot(z)
        for i, satisfied in enumerate(ok):
            if not satisfied:
                return i
        return None

    def is_satisfied(self):
        return self.which_is_unsatisfied() is None

    def check_satisfied(self):
        i = self.which_is_unsatisfied()
        if i is not None:
            raise Unsatisfiable("constraint %d is not satisfied: %r * %r = %r"
                                % ((i,) + self.constraints[i]))

    def __repr__(self):
        return 'ConstraintSystem(%d constraints, %d instance, %d witness)' % (
            self.num_constraints, self.num_instance_variables, self.num_witness_variables)


class ConstraintSynthesizer(object):
    """Interface for circuits."""

    def generate_constraints(self, cs):
        raise NotImplementedError
