# katasim/errors.py
"""Errors raised by the simulator.

Every error is a contract violation detected at the offending call; none of
them is retried.
"""


class SimulatorError(Exception):
    """Base class for all katasim errors."""


class InvalidSize(SimulatorError, ValueError):
    """Register size is not a positive integer."""


class IndexOutOfRange(SimulatorError, IndexError):
    """Qubit index outside [0, n)."""


class OverlappingQubits(SimulatorError, ValueError):
    """Control and target qubits intersect, or a qubit is listed twice."""


class NormalizationViolation(SimulatorError, AssertionError):
    """Amplitude vector lost unit norm: the applied matrix was not unitary."""


class InvalidGate(SimulatorError, ValueError):
    """Gate matrix has the wrong shape or the control pattern is malformed."""


class AncillaNotClean(SimulatorError):
    """An auxiliary qubit was released while not in |0>."""
