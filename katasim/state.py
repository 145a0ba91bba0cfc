# katasim/state.py
import numbers
from dataclasses import dataclass
from typing import List, Tuple
import numpy as np
from .errors import InvalidSize, IndexOutOfRange, NormalizationViolation, AncillaNotClean


@dataclass
class State:
    n: int
    psi: np.ndarray  # shape (2**n,), dtype complex128/64; bit k of an index is qubit k

    @staticmethod
    def zero(n: int, dtype=np.complex128) -> "State":
        if isinstance(n, bool) or not isinstance(n, numbers.Integral) or n <= 0:
            raise InvalidSize(f"register size must be a positive integer, got {n!r}")
        N = 1 << n
        psi = np.zeros(N, dtype=dtype)
        psi[0] = 1.0 + 0.0j
        return State(n=int(n), psi=psi)

    @property
    def dtype(self):
        return self.psi.dtype

    def norm2(self) -> float:
        return float(np.vdot(self.psi, self.psi).real)

    def check_normalized(self, tol=1e-9):
        n2 = self.norm2()
        if not (abs(1.0 - n2) <= tol):
            raise NormalizationViolation(f"Normalization failed: ||psi||^2={n2}")

    def check_qubit(self, k: int):
        if isinstance(k, bool) or not isinstance(k, numbers.Integral) or not 0 <= k < self.n:
            raise IndexOutOfRange(f"qubit index {k!r} out of range for {self.n} qubits")

    def probabilities(self) -> np.ndarray:
        return np.abs(self.psi) ** 2

    def measure_probabilities(self) -> List[Tuple[int, float]]:
        """(basis index, probability) for every basis state, in index order."""
        return [(i, float(p)) for i, p in enumerate(self.probabilities())]

    def copy(self) -> "State":
        return State(self.n, self.psi.copy())

    def as_numpy(self) -> np.ndarray:
        return self.psi

    # auxiliary qubits are always the most significant bit, so the indices
    # of the existing qubits stay valid while one is allocated

    def push_qubit(self) -> int:
        """Append a |0> qubit at position n; returns its index."""
        self.psi = np.concatenate([self.psi, np.zeros_like(self.psi)])
        self.n += 1
        return self.n - 1

    def pop_qubit(self, tol=1e-9, check=True):
        """Remove the top qubit, which must be back in |0> unless check is False."""
        if self.n < 2:
            raise InvalidSize("cannot release the last qubit of a register")
        half = 1 << (self.n - 1)
        leaked = float(np.vdot(self.psi[half:], self.psi[half:]).real)
        if check and leaked > tol:
            raise AncillaNotClean(f"qubit {self.n - 1} released with P(|1>)={leaked:.3g}")
        self.psi = self.psi[:half].copy()
        self.n -= 1
