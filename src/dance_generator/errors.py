"""
Error Taxonomy
==============

Exceptions raised by the generation core.

Hierarchy:
    DanceGeneratorError
        GenerationError          - halts the loop (RUNNING -> FAULTED)
            InvalidDistribution  - malformed mixture parameters
            InvalidSeed          - seed sequence empty or non-rectangular
            InferenceFailure     - collaborator error or malformed response
            SchedulingFault      - internal invariant violation
        GeneratorConfigError     - misconfiguration detected before running

None of these are retried. The GenerationLoop records the error and
surfaces it to the control surface.
"""


class DanceGeneratorError(Exception):
    """Base class for all dance generator errors."""
    pass


class GenerationError(DanceGeneratorError):
    """Error that faults the generation loop."""
    pass


class InvalidDistribution(GenerationError):
    """Raised when mixture parameters cannot be sampled from."""
    pass


class InvalidSeed(GenerationError):
    """Raised when a seed sequence cannot initialize the window."""
    pass


class InferenceFailure(GenerationError):
    """Raised when the inference engine fails or returns garbage."""
    pass


class SchedulingFault(GenerationError):
    """Raised when a loop invariant is violated (e.g. window drift)."""
    pass


class GeneratorConfigError(DanceGeneratorError, ValueError):
    """Raised for invalid configuration (missing seed source, bad temperature)."""
    pass
