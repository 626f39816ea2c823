class SynthesisError(Exception):
    """Base class for errors raised while building or checking a proof."""


class PolynomialDegreeTooLarge(SynthesisError):
    """The circuit needs an evaluation domain larger than the field supports."""


class UnexpectedIdentity(SynthesisError):
    """A value that must be invertible was zero, or a pairing degenerated."""


class AssignmentMissing(SynthesisError):
    """A variable's value was requested during proving but not supplied."""


class MalformedVerifyingKey(SynthesisError):
    """Key dimensions do not match the inputs, or a commitment does not open."""


class Unsatisfiable(SynthesisError):
    """The assignment does not satisfy the constraint system."""


class SerializationError(Exception):
    pass
