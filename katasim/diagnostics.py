# katasim/diagnostics.py
"""Comparison helpers for state vectors.

Two preparations of the same state routinely differ by a global phase
e^{i phi}, which no measurement can observe. Comparisons here therefore work
on a canonical representative: both vectors are rotated so that the amplitude
at a shared reference index is real and non-negative. The reference index is
the first index where the *expected* vector has magnitude above the
tolerance, so numerical noise in the actual vector cannot move it.
"""

from __future__ import annotations

from typing import Optional, Union

import numpy as np

from .state import State

ArrayLike = Union[State, np.ndarray, list, tuple]


def _vector(x: ArrayLike) -> np.ndarray:
    if isinstance(x, State):
        return x.psi
    return np.asarray(x, dtype=np.complex128).reshape(-1)


def reference_index(psi: ArrayLike, atol: float = 1e-9) -> Optional[int]:
    """First index with |amplitude| > atol, or None for a (numerically) zero vector."""
    nz = np.flatnonzero(np.abs(_vector(psi)) > atol)
    return int(nz[0]) if nz.size else None


def canonical_phase(psi: ArrayLike, ref: Optional[int] = None, atol: float = 1e-9) -> np.ndarray:
    """Return a copy of psi multiplied by the unit phase that makes psi[ref] real, >= 0."""
    v = _vector(psi).astype(np.complex128, copy=True)
    if ref is None:
        ref = reference_index(v, atol)
        if ref is None:
            return v
    a = v[ref]
    if abs(a) > 0:
        v *= abs(a) / a
    return v


def amplitudes_approximately_equal(actual: ArrayLike, expected: ArrayLike, tolerance: float = 1e-9) -> bool:
    """True if actual equals expected up to a global phase, element-wise within tolerance.

    Raises:
        ValueError: if the vectors have different lengths or expected is zero.
    """
    a = _vector(actual)
    e = _vector(expected)
    if a.shape != e.shape:
        raise ValueError(f"cannot compare vectors of length {a.size} and {e.size}")
    ref = reference_index(e, tolerance)
    if ref is None:
        raise ValueError("expected amplitude vector is zero")
    if abs(a[ref]) <= tolerance:
        return False
    diff = canonical_phase(a, ref) - canonical_phase(e, ref)
    return bool(np.max(np.abs(diff)) <= tolerance)


def fidelity(actual: ArrayLike, expected: ArrayLike) -> float:
    """|<expected|actual>|^2 for pure states; 1.0 means equal up to global phase."""
    a = _vector(actual)
    e = _vector(expected)
    if a.shape != e.shape:
        raise ValueError(f"cannot compare vectors of length {a.size} and {e.size}")
    return float(abs(np.vdot(e, a)) ** 2)
