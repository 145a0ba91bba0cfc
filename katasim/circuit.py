# katasim/circuit.py
from dataclasses import dataclass
from typing import List, Optional, Sequence
from .state import State
from .errors import InvalidSize
from .gates import Gate
from .simulator import Simulator
from . import gates as G

@dataclass
class Circuit:
    n: int
    ops: List[Gate]

    @staticmethod
    def empty(n:int) -> "Circuit":
        return Circuit(n, [])

    def append(self, gate: Gate) -> "Circuit":
        self.ops.append(gate); return self

    def _one(self, name, U, k, controls=()):
        return self.append(Gate(name, U, (k,), controls))

    def h(self, k:int): return self._one("H", G.H(), k)
    def x(self, k:int): return self._one("X", G.X(), k)
    def y(self, k:int): return self._one("Y", G.Y(), k)
    def z(self, k:int): return self._one("Z", G.Z(), k)
    def s(self, k:int): return self._one("S", G.S(), k)
    def t(self, k:int): return self._one("T", G.T(), k)
    def rx(self, k:int, theta:float): return self._one("RX", G.RX(theta), k)
    def ry(self, k:int, theta:float): return self._one("RY", G.RY(theta), k)
    def rz(self, k:int, theta:float): return self._one("RZ", G.RZ(theta), k)
    def r1(self, k:int, theta:float): return self._one("R1", G.R1(theta), k)
    def cnot(self, c:int, t:int): return self._one("CNOT", G.X(), t, ((c, 1),))
    def cz(self, c:int, t:int): return self._one("CZ", G.Z(), t, ((c, 1),))
    def ccnot(self, c1:int, c2:int, t:int): return self._one("CCNOT", G.X(), t, ((c1, 1), (c2, 1)))
    def swap(self, a:int, b:int): return self.append(Gate("SWAP", G.SWAP(), (a, b)))
    def cswap(self, c:int, a:int, b:int): return self.append(Gate("CSWAP", G.SWAP(), (a, b), ((c, 1),)))

    def controlled(self, U, controls:Sequence[int], values, target:int, name:str="CU"):
        values = [1] * len(controls) if values is None else values
        return self._one(name, U, target, G.control_pairs(controls, values))

    def controlled_on_int(self, value:int, controls:Sequence[int], target:int, U, name:str="CU"):
        return self.controlled(U, controls, G.bits_from_int(value, len(controls)), target, name)

    def controlled_on_bit_string(self, bits, controls:Sequence[int], target:int, U, name:str="CU"):
        return self.controlled(U, controls, bits, target, name)

    def inverse(self) -> "Circuit":
        """Adjoint circuit: reversed order, each gate replaced by its adjoint."""
        return Circuit(self.n, [g.adjoint() for g in reversed(self.ops)])

    def apply_to(self, state: State, sim: Optional[Simulator] = None) -> State:
        if state.n != self.n:
            raise InvalidSize(f"circuit on {self.n} qubits cannot act on a {state.n}-qubit state")
        sim = sim or Simulator()
        for gate in self.ops:
            sim.apply(state, gate)
        return state

    def run(self, backend:Optional[str]=None, dtype=None, check_norm:Optional[bool]=None,
            num_threads:Optional[int]=None, check_norm_tol:Optional[float]=None) -> State:
        sim = Simulator(backend=backend, dtype=dtype, atol=check_norm_tol,
                        check_norm=check_norm, num_threads=num_threads)
        return self.apply_to(sim.create(self.n), sim)
