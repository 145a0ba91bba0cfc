"""katasim: a small state-vector simulator for state-preparation exercises."""

from .config import settings
from .log import get_logger, set_log_level
from .errors import (
    SimulatorError,
    InvalidSize,
    IndexOutOfRange,
    OverlappingQubits,
    NormalizationViolation,
    InvalidGate,
    AncillaNotClean,
)
from .state import State
from .gates import Gate
from .simulator import (
    Simulator,
    create,
    apply_single_qubit_gate,
    apply_controlled_gate,
    apply_controlled_on_bit_string,
    apply_controlled_on_int,
    measure_probabilities,
    amplitudes_approximately_equal,
    run,
)
from .register import Register
from .circuit import Circuit

set_log_level(settings.log_level)

__version__ = "0.2.0"
