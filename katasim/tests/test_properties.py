# katasim/tests/test_properties.py
import numpy as np
import pytest
import katasim
from katasim import gates as G, prep
from katasim.circuit import Circuit
from katasim.simulator import Simulator

def random_unitary(rng, d=2):
    z = rng.normal(size=(d, d)) + 1j*rng.normal(size=(d, d))
    q, r = np.linalg.qr(z)
    return q * (np.diag(r) / np.abs(np.diag(r)))

def scrambled(sim, n, rng):
    st = sim.create(n)
    for k in range(n):
        sim.apply_single_qubit_gate(st, k, random_unitary(rng))
    for k in range(n - 1):
        sim.apply_controlled_gate(st, [k], [1], k + 1, G.X())
    return st

@pytest.mark.parametrize("backend", ["serial", "numba"])
def test_gate_then_inverse_restores_state(backend):
    rng = np.random.default_rng(7)
    sim = Simulator(backend=backend)
    for k in range(3):
        st = scrambled(sim, 3, rng)
        before = st.psi.copy()
        U = random_unitary(rng)
        sim.apply_single_qubit_gate(st, k, U)
        sim.apply_single_qubit_gate(st, k, G.adjoint(U))
        assert np.allclose(st.psi, before, atol=1e-9, rtol=0)

def test_controlled_gate_then_inverse_restores_state():
    rng = np.random.default_rng(11)
    sim = Simulator()
    st = scrambled(sim, 4, rng)
    before = st.psi.copy()
    U = random_unitary(rng)
    sim.apply_controlled_on_int(st, 1, [0, 3], 2, U)
    sim.apply_controlled_on_int(st, 1, [0, 3], 2, G.adjoint(U))
    assert np.allclose(st.psi, before, atol=1e-9, rtol=0)

def test_circuit_inverse_round_trip():
    rng = np.random.default_rng(3)
    c = Circuit.empty(3).h(0).ry(1, 0.9).cnot(0, 2).t(2).cswap(2, 0, 1).rz(0, -1.3)
    c.controlled(random_unitary(rng), [0, 2], [1, 0], 1)
    sim = Simulator()
    st = c.run()
    c.inverse().apply_to(st, sim)
    assert np.allclose(st.psi, sim.create(3).psi, atol=1e-9, rtol=0)

def test_probabilities_sum_to_one():
    rng = np.random.default_rng(5)
    sim = Simulator()
    for n in (1, 3, 5):
        st = scrambled(sim, n, rng)
        total = sum(p for _, p in sim.measure_probabilities(st))
        assert abs(total - 1.0) <= 1e-9

def test_measuring_is_idempotent():
    st = Simulator().run(3, prep.w_state_arbitrary)
    before = st.psi.copy()
    first = st.measure_probabilities()
    second = st.measure_probabilities()
    assert first == second
    assert np.array_equal(st.psi, before)
    assert [i for i, _ in first] == list(range(8))

def test_module_level_operations():
    st = katasim.create(2)
    katasim.apply_single_qubit_gate(st, 0, G.H())
    katasim.apply_controlled_gate(st, [0], [1], 1, G.X())
    probs = [p for _, p in katasim.measure_probabilities(st)]
    assert np.allclose(probs, [0.5, 0, 0, 0.5])
    s = 1/np.sqrt(2)
    assert katasim.amplitudes_approximately_equal(st, [s, 0, 0, s])

def test_run_harness_interface():
    st = katasim.run(2, prep.bell_state)
    assert st.n == 2
    s = 1/np.sqrt(2)
    assert katasim.amplitudes_approximately_equal(st, [-s, 0, 0, -s])

def test_each_run_gets_a_fresh_register():
    sim = Simulator()
    a = sim.run(1, prep.plus_state)
    b = sim.run(1, prep.plus_state)
    assert a is not b and a.psi is not b.psi
    assert np.allclose(a.psi, b.psi)

def test_circuit_and_register_share_controlled_argument_order():
    U = G.RY(0.8)
    st = Circuit.empty(3).x(2).controlled(U, [2, 0], [1, 0], 1).run()
    reg = katasim.Register.allocate(3, Simulator()).x(2).controlled(U, [2, 0], [1, 0], 1)
    assert np.allclose(st.psi, reg.state.psi, atol=1e-12, rtol=0)
    assert abs(st.psi[0b110]) == pytest.approx(np.sin(0.4))

def test_circuit_rejects_a_state_of_another_size():
    sim = Simulator()
    with pytest.raises(katasim.InvalidSize):
        Circuit.empty(2).h(0).apply_to(sim.create(3), sim)
