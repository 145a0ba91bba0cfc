# katasim/register.py
"""Index-range views over one shared amplitude vector.

A ``Register`` never owns amplitudes: it maps its local qubit positions onto
global qubit indices of a ``State`` and forwards every gate to a
``Simulator``. Slicing returns another view of the same state, so recursive
preparations can work on ``qs[:k]`` and ``qs[k:]`` without copying data.
A view may also carry extra control pairs; every gate issued through it is
then conditioned on them.
"""
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence, Tuple, Union
import numpy as np
from . import gates as G
from .errors import IndexOutOfRange, InvalidGate
from .gates import Controls, Gate
from .log import get_logger
from .simulator import Simulator, default_simulator
from .state import State

log = get_logger(__name__)

QubitRef = Union[int, "Register"]


class Register:
    def __init__(self, sim: Simulator, state: State, qubits: Sequence[int], controls: Controls = ()):
        self.sim = sim
        self.state = state
        self.qubits: Tuple[int, ...] = tuple(qubits)
        self.controls: Controls = tuple(controls)

    @staticmethod
    def allocate(n: int, sim: Optional[Simulator] = None) -> "Register":
        sim = sim or default_simulator()
        state = sim.create(n)
        return Register(sim, state, range(state.n))

    def __len__(self):
        return len(self.qubits)

    def __iter__(self) -> Iterator["Register"]:
        for i in range(len(self.qubits)):
            yield self[i]

    def __getitem__(self, key) -> "Register":
        if isinstance(key, slice):
            qubits = self.qubits[key]
        elif isinstance(key, (list, tuple)):
            qubits = tuple(self.index(k) for k in key)
        else:
            qubits = (self.index(key),)
        return Register(self.sim, self.state, qubits, self.controls)

    def __repr__(self):
        ctl = f", controls={self.controls}" if self.controls else ""
        return f"Register(qubits={self.qubits}{ctl})"

    def index(self, q: QubitRef) -> int:
        """Global qubit index of a local position or of a one-qubit view."""
        if isinstance(q, Register):
            if q.state is not self.state or len(q) != 1:
                raise InvalidGate("expected a single qubit of the same register")
            return q.qubits[0]
        if not -len(self.qubits) <= q < len(self.qubits):
            raise IndexOutOfRange(f"position {q} out of range for a view of {len(self.qubits)} qubits")
        return self.qubits[q]

    def controlled_on(self, ctrl: "Register", values=None) -> "Register":
        """View whose gates only act where ctrl matches values (an int or a bit sequence).

        Without values every control qubit must be 1. Integers are little-endian
        over ``ctrl``: bit 0 goes to ``ctrl[0]``.
        """
        if ctrl.state is not self.state:
            raise InvalidGate("control qubits must belong to the same register")
        if values is None:
            values = (1,) * len(ctrl)
        elif isinstance(values, (int, np.integer)) and not isinstance(values, bool):
            values = G.bits_from_int(int(values), len(ctrl))
        extra = G.control_pairs(ctrl.qubits, values)
        return Register(self.sim, self.state, self.qubits, self.controls + extra)

    # ----------------------------- gate plumbing -----------------------------

    def apply(self, U, target: QubitRef, name: str = "U"):
        self.sim.apply(self.state, Gate(name, U, (self.index(target),), self.controls))
        return self

    def apply_two(self, U4, k: QubitRef, l: QubitRef, name: str = "U4"):
        self.sim.apply(self.state, Gate(name, U4, (self.index(k), self.index(l)), self.controls))
        return self

    def controlled(self, U, controls: Sequence[QubitRef], values, target: QubitRef, name: str = "CU"):
        """U on target where every controls[i] equals values[i]; values=None means all ones."""
        values = [1] * len(controls) if values is None else values
        pairs = G.control_pairs([self.index(c) for c in controls], values)
        self.sim.apply(self.state, Gate(name, U, (self.index(target),), self.controls + pairs))
        return self

    def controlled_on_bit_string(self, bits, controls: Sequence[QubitRef], target: QubitRef, U):
        return self.controlled(U, controls, bits, target)

    def controlled_on_int(self, value: int, controls: Sequence[QubitRef], target: QubitRef, U):
        return self.controlled(U, controls, G.bits_from_int(value, len(controls)), target)

    # ----------------------------- named gates -----------------------------

    def x(self, k): return self.apply(G.X(), k, "X")
    def y(self, k): return self.apply(G.Y(), k, "Y")
    def z(self, k): return self.apply(G.Z(), k, "Z")
    def h(self, k): return self.apply(G.H(), k, "H")
    def s(self, k): return self.apply(G.S(), k, "S")
    def t(self, k): return self.apply(G.T(), k, "T")
    def rx(self, k, theta: float): return self.apply(G.RX(theta), k, "RX")
    def ry(self, k, theta: float): return self.apply(G.RY(theta), k, "RY")
    def rz(self, k, theta: float): return self.apply(G.RZ(theta), k, "RZ")
    def r1(self, k, theta: float): return self.apply(G.R1(theta), k, "R1")

    def cnot(self, c, t): return self.controlled(G.X(), [c], [1], t, "CNOT")
    def cz(self, c, t): return self.controlled(G.Z(), [c], [1], t, "CZ")
    def ccnot(self, c1, c2, t): return self.controlled(G.X(), [c1, c2], [1, 1], t, "CCNOT")
    def swap(self, a, b): return self.apply_two(G.SWAP(), a, b, "SWAP")

    def cswap(self, c, a, b):
        pairs = G.control_pairs([self.index(c)], [1])
        self.sim.apply(self.state, Gate("CSWAP", G.SWAP(), (self.index(a), self.index(b)), self.controls + pairs))
        return self

    # ----------------------------- auxiliary qubits -----------------------------

    @contextmanager
    def ancilla(self):
        """Borrow a fresh |0> qubit; it must be returned to |0> before the block ends."""
        q = self.state.push_qubit()
        log.debug("allocated auxiliary qubit %d", q)
        try:
            yield Register(self.sim, self.state, (q,), self.controls)
        except BaseException:
            # the block already failed: drop the qubit unchecked, keep the original error
            if self.state.n - 1 == q:
                self.state.pop_qubit(check=False)
            log.debug("discarded auxiliary qubit %d after an error", q)
            raise
        if self.state.n - 1 != q:
            raise InvalidGate(f"auxiliary qubit {q} released out of order")
        self.state.pop_qubit(tol=self.sim.norm_tol)
        log.debug("released auxiliary qubit %d", q)

    # ----------------------------- read-out -----------------------------

    def probabilities(self) -> np.ndarray:
        return self.state.probabilities()

    def measure_probabilities(self):
        return self.state.measure_probabilities()
