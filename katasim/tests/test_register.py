# katasim/tests/test_register.py
import numpy as np
import pytest
from katasim.errors import AncillaNotClean, IndexOutOfRange, InvalidGate
from katasim.register import Register
from katasim.simulator import Simulator

def fresh(n):
    return Register.allocate(n, Simulator())

def test_slices_share_the_amplitude_vector():
    reg = fresh(3)
    tail = reg[1:]
    assert tail.state is reg.state
    assert tail.qubits == (1, 2)
    tail.x(0)
    assert abs(reg.state.psi[0b010]) == pytest.approx(1.0)

def test_nested_slices_map_to_global_indices():
    reg = fresh(5)
    view = reg[1:][1:][::2]
    assert view.qubits == (2, 4)
    view.x(1)
    assert abs(reg.state.psi[1 << 4]) == pytest.approx(1.0)

def test_index_forms():
    reg = fresh(4)
    assert reg[[3, 0]].qubits == (3, 0)
    assert reg[-1].qubits == (3,)
    assert reg.index(reg[2]) == 2
    assert [q.qubits for q in reg[:2]] == [(0,), (1,)]
    assert len(reg[1:3]) == 2

def test_index_out_of_range():
    reg = fresh(2)
    with pytest.raises(IndexOutOfRange):
        reg[1:].x(1)
    with pytest.raises(IndexOutOfRange):
        reg[5]

def test_qubit_of_another_register_rejected():
    a, b = fresh(2), fresh(2)
    with pytest.raises(InvalidGate):
        a.cnot(b[0], 1)
    with pytest.raises(InvalidGate):
        a.controlled_on(b[0])

def test_gates_by_view_qubit():
    reg = fresh(2)
    q0, q1 = reg[0], reg[1]
    reg.h(q0).cnot(q0, q1)
    s = 1/np.sqrt(2)
    assert np.allclose(reg.state.psi, [s, 0, 0, s])

def test_controlled_on_values():
    reg = fresh(3)
    reg.x(1)
    # q0 == 0 and q1 == 1  ->  value 2 over (q0, q1)
    reg[2].controlled_on(reg[:2], 2).x(0)
    assert abs(reg.state.psi[0b110]) == pytest.approx(1.0)
    # bit sequence form, not satisfied
    reg[2].controlled_on(reg[:2], [1, 1]).x(0)
    assert abs(reg.state.psi[0b110]) == pytest.approx(1.0)

def test_controlled_view_default_requires_ones():
    reg = fresh(2)
    reg[1].controlled_on(reg[0]).x(0)
    assert abs(reg.state.psi[0]) == pytest.approx(1.0)
    reg.x(0)
    reg[1].controlled_on(reg[0]).x(0)
    assert abs(reg.state.psi[0b11]) == pytest.approx(1.0)

def test_cswap_and_ccnot():
    reg = fresh(3)
    reg.x(0).x(1)
    reg.ccnot(0, 1, 2)
    assert abs(reg.state.psi[0b111]) == pytest.approx(1.0)
    reg.x(2)
    reg.cswap(0, 1, 2)
    assert abs(reg.state.psi[0b101]) == pytest.approx(1.0)

def test_ancilla_is_released():
    reg = fresh(2)
    with reg.ancilla() as anc:
        assert reg.state.n == 3
        assert anc.qubits == (2,)
        anc.h(0)
        anc.h(0)
    assert reg.state.n == 2
    assert reg.state.psi.shape == (4,)

def test_dirty_ancilla_raises():
    reg = fresh(1)
    with pytest.raises(AncillaNotClean):
        with reg.ancilla() as anc:
            anc.x(0)

def test_ancilla_is_dropped_when_the_block_fails():
    reg = fresh(2).h(0)
    before = reg.state.psi.copy()
    with pytest.raises(IndexOutOfRange):
        with reg.ancilla() as anc:
            anc.x(5)
    assert reg.state.n == 2
    assert reg.state.psi.shape == (4,)
    assert np.allclose(reg.state.psi, before)
    reg.x(1)
    assert abs(reg.state.psi[0b11]) == pytest.approx(2 ** -0.5)

def test_nested_ancillas_unwind_on_error():
    reg = fresh(1)
    with pytest.raises(ValueError):
        with reg.ancilla():
            with reg.ancilla():
                assert reg.state.n == 3
                raise ValueError("boom")
    assert reg.state.n == 1

def test_register_probabilities():
    reg = fresh(1).h(0)
    assert np.allclose(reg.probabilities(), [0.5, 0.5])
    assert reg.measure_probabilities() == reg.state.measure_probabilities()
