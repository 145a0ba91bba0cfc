# katasim/prep.py
"""Reference state preparations.

Each routine takes a ``Register`` in |0...0> and applies a gate sequence that
prepares the named state on it. Bit strings are given per qubit, so
``bits[i]`` is the value of ``qs[i]``; in basis-index terms qubit i is bit i.
"""
from typing import Sequence
import numpy as np
from . import gates as G
from .errors import InvalidGate, InvalidSize
from .register import Register


def basis_index(bits: Sequence) -> int:
    """Index of the basis state with qs[i] == bits[i]."""
    return sum(int(bool(b)) << i for i, b in enumerate(bits))


def plus_state(qs: Register):
    """(|0> + |1>)/sqrt(2)"""
    qs.h(0)


def minus_state(qs: Register):
    """(|0> - |1>)/sqrt(2)"""
    qs.x(0)
    qs.h(0)


def unequal_superposition(qs: Register, alpha: float):
    """cos(alpha)|0> + sin(alpha)|1>"""
    # RY rotates by half its argument
    qs.ry(0, 2.0 * alpha)


def all_basis_vectors(qs: Register):
    """Equal superposition of all 2^n basis states."""
    for q in range(len(qs)):
        qs.h(q)


def all_basis_vectors_with_phases(qs: Register):
    """Two qubits: (|00> - |01> + i|10> - i|11>)/2, written as |q0 q1>.

    Product state (|0> + i|1>)_q0 (|0> - |1>)_q1 / 2.
    """
    qs.h(0)
    qs.s(0)
    qs.x(1)
    qs.h(1)


def bell_state(qs: Register):
    """(|00> + |11>)/sqrt(2)"""
    qs.h(0)
    qs.cnot(0, 1)


def all_bell_states(qs: Register, index: int):
    """Bell state number index, written as |q0 q1>:

    0: (|00> + |11>)/sqrt(2)    1: (|00> - |11>)/sqrt(2)
    2: (|01> + |10>)/sqrt(2)    3: (|01> - |10>)/sqrt(2)
    """
    if index not in (0, 1, 2, 3):
        raise ValueError(f"Bell state index must be 0..3, got {index}")
    qs.h(0)
    qs.cnot(0, 1)
    if index & 1:
        qs.z(0)
    if index & 2:
        qs.x(1)


def ghz_state(qs: Register):
    """(|0...0> + |1...1>)/sqrt(2)"""
    qs.h(0)
    for q in range(1, len(qs)):
        qs.cnot(0, q)


def zero_and_bitstring_superposition(qs: Register, bits: Sequence[bool]):
    """(|0...0> + |bits>)/sqrt(2)"""
    if len(bits) != len(qs):
        raise InvalidSize(f"{len(bits)} bits for {len(qs)} qubits")
    ones = [i for i, b in enumerate(bits) if b]
    if not ones:
        raise InvalidGate("bit string must contain at least one 1")
    lead = ones[0]
    qs.h(lead)
    for q in ones[1:]:
        qs.cnot(lead, q)


def two_bitstring_superposition(qs: Register, bits1: Sequence[bool], bits2: Sequence[bool]):
    """(|bits1> + |bits2>)/sqrt(2) for two different bit strings."""
    if not len(bits1) == len(bits2) == len(qs):
        raise InvalidSize(f"bit strings of length {len(bits1)}/{len(bits2)} for {len(qs)} qubits")
    diff = [i for i in range(len(qs)) if bool(bits1[i]) != bool(bits2[i])]
    if not diff:
        raise InvalidGate("bit strings must differ")
    lead = diff[0]
    # a is the string with 0 at the lead qubit, b the one with 1
    a, b = (bits1, bits2) if not bits1[lead] else (bits2, bits1)
    qs.h(lead)
    for q in range(len(qs)):
        if q == lead:
            continue
        if bool(a[q]) != bool(b[q]):
            qs.cnot(lead, q)
        if a[q]:
            qs.x(q)


def three_states_two_qubits(qs: Register):
    """(|00> + |01> + |10>)/sqrt(3)"""
    # P(q0 = 1) = sin^2(theta) = 1/3
    theta = np.arcsin(1.0 / np.sqrt(3.0))
    qs.ry(0, 2.0 * theta)
    # remaining 2/3 split evenly by H on q1 while q0 is 0
    qs.controlled_on_int(0, [0], 1, G.H())


def w_state_power_of_two(qs: Register):
    """W state (equal superposition of all weight-1 strings) on 2^k qubits.

    W on the first half, then an auxiliary qubit in |+> moves the excitation
    into the second half on its |1> branch, and is uncomputed by the second
    half's parity.
    """
    n = len(qs)
    if n == 0 or n & (n - 1):
        raise InvalidSize(f"register length must be a power of two, got {n}")
    if n == 1:
        qs.x(0)
        return
    k = n // 2
    w_state_power_of_two(qs[:k])
    with qs.ancilla() as anc:
        anc.h(0)
        moved = qs.controlled_on(anc)
        for i in range(k):
            moved.swap(i, i + k)
        for i in range(k, n):
            anc.controlled_on(qs[i]).x(0)


def w_state_arbitrary(qs: Register):
    """W state on any number of qubits.

    qs[0] takes the excitation with probability 1/n; the rest of the register
    gets a W state of n-1 qubits on the branch where qs[0] is 0.
    """
    n = len(qs)
    if n == 0:
        raise InvalidSize("register must not be empty")
    if n == 1:
        qs.x(0)
        return
    theta = np.arcsin(1.0 / np.sqrt(n))
    qs.ry(0, 2.0 * theta)
    w_state_arbitrary(qs[1:].controlled_on(qs[0], 0))
