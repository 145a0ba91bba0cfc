# katasim/gates.py
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple
import numpy as np
from .errors import InvalidGate, OverlappingQubits

Controls = Tuple[Tuple[int, int], ...]  # ((qubit, required bit value), ...)


def I(dtype=np.complex128) -> np.ndarray:
    return np.eye(2, dtype=dtype)

def H(dtype=np.complex128) -> np.ndarray:
    s = np.sqrt(0.5)
    return np.array([[s, s],
                     [s, -s]], dtype=dtype)

def X(dtype=np.complex128) -> np.ndarray:
    return np.array([[0, 1],
                     [1, 0]], dtype=dtype)

def Y(dtype=np.complex128) -> np.ndarray:
    return np.array([[0, -1j],
                     [1j, 0]], dtype=dtype)

def Z(dtype=np.complex128) -> np.ndarray:
    return np.array([[1, 0],
                     [0, -1]], dtype=dtype)

def S(dtype=np.complex128) -> np.ndarray:
    return np.array([[1, 0],
                     [0, 1j]], dtype=dtype)

def T(dtype=np.complex128) -> np.ndarray:
    return np.array([[1, 0],
                     [0, np.exp(0.25j*np.pi)]], dtype=dtype)

def RZ(theta: float, dtype=np.complex128) -> np.ndarray:
    return np.array([[np.exp(-0.5j*theta), 0],
                     [0, np.exp(+0.5j*theta)]], dtype=dtype)

def RX(theta: float, dtype=np.complex128) -> np.ndarray:
    c = np.cos(theta/2.0)
    s = -1j*np.sin(theta/2.0)
    return np.array([[c, s],
                     [s, c]], dtype=dtype)

def RY(theta: float, dtype=np.complex128) -> np.ndarray:
    # half-angle convention: RY(2*a)|0> = cos(a)|0> + sin(a)|1>
    c = np.cos(theta/2.0)
    s = np.sin(theta/2.0)
    return np.array([[c, -s],
                     [s, c]], dtype=dtype)

def R1(theta: float, dtype=np.complex128) -> np.ndarray:
    """Relative phase e^{i theta} on |1>."""
    return np.array([[1, 0],
                     [0, np.exp(1j*theta)]], dtype=dtype)

def CNOT(dtype=np.complex128) -> np.ndarray:
    # 4x4 in local order b_k + 2*b_l with k the target, l the control
    mat = np.eye(4, dtype=dtype)
    mat[2,2] = 0; mat[3,3] = 0
    mat[2,3] = 1; mat[3,2] = 1
    return mat

def SWAP(dtype=np.complex128) -> np.ndarray:
    mat = np.eye(4, dtype=dtype)
    mat[1,1] = 0; mat[2,2] = 0
    mat[1,2] = 1; mat[2,1] = 1
    return mat


def adjoint(U: np.ndarray) -> np.ndarray:
    return U.conj().T

def is_unitary(U: np.ndarray, atol=1e-9) -> bool:
    U = np.asarray(U)
    if U.ndim != 2 or U.shape[0] != U.shape[1]:
        return False
    return bool(np.allclose(U.conj().T @ U, np.eye(U.shape[0]), atol=atol, rtol=0))

def as_matrix(U, size: int, dtype=np.complex128) -> np.ndarray:
    """Coerce U to a (size, size) complex array or raise InvalidGate."""
    M = np.asarray(U, dtype=dtype)
    if M.shape != (size, size):
        raise InvalidGate(f"expected a {size}x{size} matrix, got shape {M.shape}")
    return M


# ----------------------------- control predicates -----------------------------

def bits_from_int(value: int, width: int) -> Tuple[int, ...]:
    """Little-endian bits of value: element 0 is the least significant bit."""
    if value < 0 or value >= (1 << width):
        raise InvalidGate(f"value {value} does not fit in {width} control qubits")
    return tuple((value >> i) & 1 for i in range(width))

def control_pairs(controls: Sequence[int], values: Iterable) -> Controls:
    controls = tuple(int(c) for c in controls)
    values = tuple(int(bool(v)) if isinstance(v, (bool, np.bool_)) else int(v) for v in values)
    if len(controls) != len(values):
        raise InvalidGate(f"{len(controls)} control qubits but {len(values)} control values")
    if any(v not in (0, 1) for v in values):
        raise InvalidGate(f"control values must be 0/1, got {values}")
    if len(set(controls)) != len(controls):
        raise OverlappingQubits(f"duplicate control qubits {controls}")
    return tuple(zip(controls, values))

def control_mask(controls: Controls) -> Tuple[int, int]:
    """(mask, value) so that an index i satisfies the predicate iff i & mask == value."""
    mask = 0
    val = 0
    for q, v in controls:
        mask |= 1 << q
        val |= v << q
    return mask, val


@dataclass(frozen=True, eq=False)
class Gate:
    """Immutable gate description.

    ``targets`` holds one qubit for a 2x2 matrix or two (k, l) for a 4x4
    matrix in local order b_k + 2*b_l. ``controls`` is the predicate every
    basis index must satisfy for the matrix to act.
    """
    name: str
    matrix: np.ndarray
    targets: Tuple[int, ...]
    controls: Controls = ()

    def __post_init__(self):
        size = 1 << len(self.targets)
        if len(self.targets) not in (1, 2):
            raise InvalidGate(f"{self.name}: a gate acts on one or two targets, got {self.targets}")
        M = as_matrix(self.matrix, size).copy()
        M.setflags(write=False)
        object.__setattr__(self, "matrix", M)
        object.__setattr__(self, "targets", tuple(int(t) for t in self.targets))
        pairs = tuple(self.controls)
        object.__setattr__(self, "controls", control_pairs([q for q, _ in pairs], [v for _, v in pairs]))

    def adjoint(self) -> "Gate":
        name = self.name[:-1] if self.name.endswith("†") else self.name + "†"
        return Gate(name, adjoint(self.matrix), self.targets, self.controls)

    def qubits(self) -> Tuple[int, ...]:
        return tuple(q for q, _ in self.controls) + self.targets

    def __repr__(self):
        ctl = "".join(f", c{q}={v}" for q, v in self.controls)
        return f"Gate({self.name}, t={self.targets}{ctl})"
