# katasim/apply_serial.py
# Reference kernels in plain Python loops. Arguments are validated by the
# simulator before they get here.
import numpy as np
from .state import State

def apply_single_qubit(state: State, U2: np.ndarray, k: int):
    """Apply 2x2 gate U2 to qubit k (little-endian: bit k)."""
    psi = state.psi
    N = psi.shape[0]
    step = 1 << k
    block = step << 1
    # iterate blocks of size 2^(k+1), update pairs (i0, i1=i0+step)
    for base in range(0, N, block):
        for off in range(step):
            i0 = base + off
            i1 = i0 + step
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0,0]*a0 + U2[0,1]*a1
            psi[i1] = U2[1,0]*a0 + U2[1,1]*a1

def apply_controlled(state: State, U2: np.ndarray, k: int, cmask: int, cval: int):
    """Apply U2 to qubit k on the pairs whose index satisfies i & cmask == cval."""
    if cmask == 0:
        apply_single_qubit(state, U2, k)
        return
    psi = state.psi
    N = psi.shape[0]
    step = 1 << k
    block = step << 1
    for base in range(0, N, block):
        for off in range(step):
            i0 = base + off
            if (i0 & cmask) != cval:
                continue
            i1 = i0 + step
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0,0]*a0 + U2[0,1]*a1
            psi[i1] = U2[1,0]*a0 + U2[1,1]*a1

def apply_two_qubit_4x4(state: State, U4: np.ndarray, k: int, l: int, cmask: int = 0, cval: int = 0):
    """Apply 4x4 gate U4 to qubits (k, l), local order b_k + 2*b_l."""
    psi = state.psi
    N = psi.shape[0]
    mk = 1 << k
    ml = 1 << l
    lo, hi = min(k, l), max(k, l)
    # loop over indices where bits k and l are 0:
    # i00 = base, i01 = base|mk, i10 = base|ml, i11 = base|mk|ml
    for base in range(0, N, 1 << (hi+1)):
        for chunk in range(0, 1 << hi, 1 << (lo+1)):
            for off in range(1 << lo):
                i00 = base + chunk + off
                if (i00 & cmask) != cval:
                    continue
                i01 = i00 | mk
                i10 = i00 | ml
                i11 = i00 | mk | ml
                a00, a01, a10, a11 = psi[i00], psi[i01], psi[i10], psi[i11]
                psi[i00] = U4[0,0]*a00 + U4[0,1]*a01 + U4[0,2]*a10 + U4[0,3]*a11
                psi[i01] = U4[1,0]*a00 + U4[1,1]*a01 + U4[1,2]*a10 + U4[1,3]*a11
                psi[i10] = U4[2,0]*a00 + U4[2,1]*a01 + U4[2,2]*a10 + U4[2,3]*a11
                psi[i11] = U4[3,0]*a00 + U4[3,1]*a01 + U4[3,2]*a10 + U4[3,3]*a11
