# katasim/tests/test_errors.py
import numpy as np
import pytest
from katasim import errors
from katasim.simulator import Simulator
from katasim.state import State
from katasim import gates as G

@pytest.mark.parametrize("n", [0, -1, 2.5, True, "3"])
def test_invalid_size(n):
    with pytest.raises(errors.InvalidSize):
        State.zero(n)

def test_invalid_size_is_value_error():
    with pytest.raises(ValueError):
        Simulator().create(0)

@pytest.mark.parametrize("k", [2, 5, -1])
def test_index_out_of_range(k):
    sim = Simulator()
    st = sim.create(2)
    with pytest.raises(errors.IndexOutOfRange):
        sim.apply_single_qubit_gate(st, k, G.H())

def test_control_index_out_of_range():
    sim = Simulator()
    st = sim.create(2)
    with pytest.raises(IndexError):
        sim.apply_controlled_gate(st, [3], [1], 0, G.X())

def test_overlapping_control_and_target():
    sim = Simulator()
    st = sim.create(2)
    with pytest.raises(errors.OverlappingQubits):
        sim.apply_controlled_gate(st, [0], [1], 0, G.X())

def test_duplicate_controls():
    sim = Simulator()
    st = sim.create(3)
    with pytest.raises(errors.OverlappingQubits):
        sim.apply_controlled_gate(st, [0, 0], [1, 1], 2, G.X())

def test_two_qubit_gate_same_qubit():
    sim = Simulator()
    st = sim.create(2)
    with pytest.raises(errors.OverlappingQubits):
        sim.apply_two_qubit_gate(st, G.SWAP(), 1, 1)

def test_non_unitary_matrix_breaks_norm():
    sim = Simulator()
    st = sim.create(1)
    with pytest.raises(errors.NormalizationViolation):
        sim.apply_single_qubit_gate(st, 0, [[2, 0], [0, 2]])

def test_norm_check_can_be_disabled():
    sim = Simulator(check_norm=False)
    st = sim.create(1)
    sim.apply_single_qubit_gate(st, 0, [[2, 0], [0, 2]])
    assert st.norm2() == pytest.approx(4.0)

def test_wrong_matrix_shape():
    sim = Simulator()
    st = sim.create(2)
    with pytest.raises(errors.InvalidGate):
        sim.apply_single_qubit_gate(st, 0, np.eye(4))
    with pytest.raises(errors.InvalidGate):
        sim.apply_two_qubit_gate(st, G.H(), 0, 1)

def test_control_pattern_length_mismatch():
    sim = Simulator()
    st = sim.create(3)
    with pytest.raises(errors.InvalidGate):
        sim.apply_controlled_on_bit_string(st, [1, 0, 1], [0, 1], 2, G.X())

def test_control_int_too_large():
    sim = Simulator()
    st = sim.create(3)
    with pytest.raises(errors.InvalidGate):
        sim.apply_controlled_on_int(st, 4, [0, 1], 2, G.X())

def test_unknown_backend():
    with pytest.raises(NotImplementedError):
        Simulator(backend="cupy")

def test_errors_share_a_base():
    for cls in (errors.InvalidSize, errors.IndexOutOfRange, errors.OverlappingQubits,
                errors.NormalizationViolation, errors.InvalidGate, errors.AncillaNotClean):
        assert issubclass(cls, errors.SimulatorError)

def test_failed_call_leaves_state_untouched():
    sim = Simulator()
    st = sim.create(2)
    sim.apply_single_qubit_gate(st, 0, G.H())
    before = st.psi.copy()
    with pytest.raises(errors.OverlappingQubits):
        sim.apply_controlled_gate(st, [1], [1], 1, G.X())
    assert np.array_equal(st.psi, before)
