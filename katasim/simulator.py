# katasim/simulator.py
"""State-vector simulator: validated gate application on a ``State``.

``Simulator`` checks qubit indices, control predicates and matrix shapes,
dispatches to the serial or numba kernels, and verifies unit norm after every
operation. The module-level functions use a simulator built from
``katasim.config.settings``.
"""
from typing import Callable, List, Optional, Sequence, Tuple
import numpy as np
from .config import settings
from .diagnostics import amplitudes_approximately_equal
from .errors import NormalizationViolation, OverlappingQubits
from .gates import Gate, Controls, as_matrix, bits_from_int, control_mask, control_pairs
from .log import get_logger
from .state import State

log = get_logger(__name__)


def _load_backend(name: str, num_threads=None):
    if name == "serial":
        from . import apply_serial as kernels
    elif name == "numba":
        try:
            from . import apply_numba as kernels
        except ImportError as e:
            raise RuntimeError("Numba backend not available. Did you `pip install numba`?") from e
        if num_threads is not None:
            kernels.set_threads(int(num_threads))
    else:
        raise NotImplementedError(f"Unknown backend: {name}")
    return kernels


class Simulator:
    def __init__(self, backend: Optional[str] = None, dtype=None, atol: Optional[float] = None,
                 check_norm: Optional[bool] = None, num_threads: Optional[int] = None):
        self.backend = backend or settings.backend
        self.dtype = np.dtype(settings.dtype if dtype is None else dtype)
        self.atol = settings.atol if atol is None else float(atol)
        self.check_norm = settings.check_norm if check_norm is None else bool(check_norm)
        # single precision cannot hold 1e-9 after a handful of gates
        self.norm_tol = max(self.atol, 1e3 * float(np.finfo(self.dtype).eps))
        self._kernels = _load_backend(self.backend, settings.num_threads if num_threads is None else num_threads)
        log.debug("simulator backend=%s dtype=%s atol=%g", self.backend, self.dtype, self.atol)

    def __repr__(self):
        return f"Simulator(backend={self.backend!r}, dtype={self.dtype}, atol={self.atol:g})"

    # ----------------------------- lifecycle -----------------------------

    def create(self, n: int) -> State:
        return State.zero(n, dtype=self.dtype)

    def run(self, n: int, producer: Callable) -> State:
        """Allocate an n-qubit register, let producer(register) act on it, return the state."""
        from .register import Register
        reg = Register.allocate(n, sim=self)
        producer(reg)
        log.debug("%s on %d qubits done", getattr(producer, "__name__", "producer"), n)
        return reg.state

    # ----------------------------- gates -----------------------------

    def _verify(self, state: State, what):
        if not self.check_norm:
            return
        try:
            state.check_normalized(tol=self.norm_tol)
        except NormalizationViolation:
            log.error("%s broke normalization of a %d-qubit register", what, state.n)
            raise

    def _controls(self, state: State, controls: Controls, targets: Sequence[int]) -> Tuple[int, int]:
        for t in targets:
            state.check_qubit(t)
        for q, _ in controls:
            state.check_qubit(q)
        overlap = {q for q, _ in controls} & set(targets)
        if overlap:
            raise OverlappingQubits(f"qubits {sorted(overlap)} are both control and target")
        return control_mask(controls)

    def apply_single_qubit_gate(self, state: State, qubit: int, matrix):
        U = as_matrix(matrix, 2)
        state.check_qubit(qubit)
        self._kernels.apply_single_qubit(state, U, qubit)
        self._verify(state, f"gate on qubit {qubit}")

    def apply_controlled_gate(self, state: State, controls: Sequence[int], values, target: int, matrix):
        self._apply_controlled(state, control_pairs(controls, values), target, matrix)

    def apply_controlled_on_bit_string(self, state: State, bits: Sequence, controls: Sequence[int],
                                       target: int, matrix):
        """bits[i] is the value required of controls[i]."""
        self._apply_controlled(state, control_pairs(controls, bits), target, matrix)

    def apply_controlled_on_int(self, state: State, value: int, controls: Sequence[int],
                                target: int, matrix):
        """Little-endian: the least significant bit of value applies to controls[0]."""
        bits = bits_from_int(value, len(controls))
        self._apply_controlled(state, control_pairs(controls, bits), target, matrix)

    def _apply_controlled(self, state: State, pairs: Controls, target: int, matrix):
        U = as_matrix(matrix, 2)
        cmask, cval = self._controls(state, pairs, (target,))
        self._kernels.apply_controlled(state, U, target, cmask, cval)
        self._verify(state, f"controlled gate on qubit {target}")

    def apply_two_qubit_gate(self, state: State, matrix, k: int, l: int, controls: Controls = ()):
        """4x4 matrix on (k, l) in local order b_k + 2*b_l."""
        U = as_matrix(matrix, 4)
        if k == l:
            raise OverlappingQubits(f"two-qubit gate needs distinct qubits, got {k} twice")
        cmask, cval = self._controls(state, tuple(controls), (k, l))
        self._kernels.apply_two_qubit_4x4(state, U, k, l, cmask, cval)
        self._verify(state, f"two-qubit gate on ({k}, {l})")

    def apply(self, state: State, gate: Gate):
        if len(gate.targets) == 1:
            self._apply_controlled(state, gate.controls, gate.targets[0], gate.matrix)
        else:
            k, l = gate.targets
            self.apply_two_qubit_gate(state, gate.matrix, k, l, gate.controls)

    # ----------------------------- read-out -----------------------------

    @staticmethod
    def measure_probabilities(state: State) -> List[Tuple[int, float]]:
        return state.measure_probabilities()

    def amplitudes_approximately_equal(self, state: State, expected, tolerance: Optional[float] = None) -> bool:
        """Global-phase-insensitive comparison; by default as loose as the norm check."""
        return amplitudes_approximately_equal(state, expected, self.norm_tol if tolerance is None else tolerance)


_default: Optional[Simulator] = None


def default_simulator() -> Simulator:
    global _default
    if _default is None:
        _default = Simulator()
    return _default


def create(n: int) -> State:
    return default_simulator().create(n)

def apply_single_qubit_gate(state: State, qubit: int, matrix):
    default_simulator().apply_single_qubit_gate(state, qubit, matrix)

def apply_controlled_gate(state: State, controls, values, target: int, matrix):
    default_simulator().apply_controlled_gate(state, controls, values, target, matrix)

def apply_controlled_on_bit_string(state: State, bits, controls, target: int, matrix):
    default_simulator().apply_controlled_on_bit_string(state, bits, controls, target, matrix)

def apply_controlled_on_int(state: State, value: int, controls, target: int, matrix):
    default_simulator().apply_controlled_on_int(state, value, controls, target, matrix)

def measure_probabilities(state: State) -> List[Tuple[int, float]]:
    return state.measure_probabilities()

def run(n: int, producer: Callable) -> State:
    return default_simulator().run(n, producer)
