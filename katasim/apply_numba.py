# katasim/apply_numba.py
import numpy as np
from numba import config, njit, prange, set_num_threads, get_num_threads
from .state import State

# ---------- low-level kernels (Numba JIT) ----------

@njit(parallel=True, fastmath=True)
def _single_qubit_kernel(psi, U2, k):
    N = psi.shape[0]
    step = 1 << k
    block = step << 1
    nblocks = N // block
    for b in prange(nblocks):
        base = b * block
        for off in range(step):
            i0 = base + off
            i1 = i0 + step
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0,0]*a0 + U2[0,1]*a1
            psi[i1] = U2[1,0]*a0 + U2[1,1]*a1

@njit(parallel=True, fastmath=True)
def _controlled_kernel(psi, U2, k, cmask, cval):
    N = psi.shape[0]
    mk = 1 << k
    # pairs are disjoint: each i0 has bit k clear and owns i0|mk
    for i0 in prange(N):
        if (i0 & mk) == 0 and (i0 & cmask) == cval:
            i1 = i0 | mk
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0,0]*a0 + U2[0,1]*a1
            psi[i1] = U2[1,0]*a0 + U2[1,1]*a1

@njit(parallel=True, fastmath=True)
def _two_qubit_4x4_kernel(psi, U4, k, l, cmask, cval):
    N = psi.shape[0]
    mk = 1 << k
    ml = 1 << l
    # Iterate only bases where bits k and l are 0 → disjoint quads.
    for i00 in prange(N):
        if (i00 & mk) == 0 and (i00 & ml) == 0 and (i00 & cmask) == cval:
            i01 = i00 | mk
            i10 = i00 | ml
            i11 = i00 | mk | ml
            a00 = psi[i00]; a01 = psi[i01]; a10 = psi[i10]; a11 = psi[i11]
            psi[i00] = U4[0,0]*a00 + U4[0,1]*a01 + U4[0,2]*a10 + U4[0,3]*a11
            psi[i01] = U4[1,0]*a00 + U4[1,1]*a01 + U4[1,2]*a10 + U4[1,3]*a11
            psi[i10] = U4[2,0]*a00 + U4[2,1]*a01 + U4[2,2]*a10 + U4[2,3]*a11
            psi[i11] = U4[3,0]*a00 + U4[3,1]*a01 + U4[3,2]*a10 + U4[3,3]*a11

# ---------- user-facing apply helpers ----------

def set_threads(n: int):
    # numba refuses more threads than its pool was started with
    set_num_threads(max(1, min(int(n), config.NUMBA_NUM_THREADS)))

def get_threads() -> int:
    return get_num_threads()

def apply_single_qubit(state: State, U2: np.ndarray, k: int):
    _single_qubit_kernel(state.psi, U2.astype(state.dtype), k)

def apply_controlled(state: State, U2: np.ndarray, k: int, cmask: int, cval: int):
    if cmask == 0:
        _single_qubit_kernel(state.psi, U2.astype(state.dtype), k)
    else:
        _controlled_kernel(state.psi, U2.astype(state.dtype), k, cmask, cval)

def apply_two_qubit_4x4(state: State, U4: np.ndarray, k: int, l: int, cmask: int = 0, cval: int = 0):
    _two_qubit_4x4_kernel(state.psi, U4.astype(state.dtype), k, l, cmask, cval)
