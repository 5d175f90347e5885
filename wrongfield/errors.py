"""
Error types for the wrong-field engine.

SoundnessError: a derived bound or witness relation does not hold.  This
is a parameter or implementation bug, never a data error; callers are not
expected to recover from it.

SynthesisError: the constraint layer could not place a row, cell or
lookup.  Propagated unchanged; a partially synthesized table is useless.
"""


class SoundnessError(RuntimeError):
    """Configuration or witness soundness violation (fatal)."""


class SynthesisError(RuntimeError):
    """Constraint table assignment failure."""


def ensure(condition: bool, message: str):
    """Raise SoundnessError with message unless condition holds."""
    if not condition:
        raise SoundnessError(message)
