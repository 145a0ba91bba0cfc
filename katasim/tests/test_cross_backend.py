# katasim/tests/test_cross_backend.py
import numpy as np
from katasim.circuit import Circuit
from katasim.simulator import Simulator
from katasim import prep, gates as G

def max_abs_diff(a, b):
    return float(np.max(np.abs(a - b)))

def test_serial_vs_numba_small():
    # 3-qubit mixed circuit
    c = Circuit.empty(3).h(0).x(1).cnot(1,2).h(2).cnot(0,1).x(2).ry(1, 0.7).swap(0, 2)
    st_s = c.run(backend="serial")
    st_n = c.run(backend="numba", num_threads=4)
    assert max_abs_diff(st_s.as_numpy(), st_n.as_numpy()) < 1e-12

def random_circuit(n, depth, rng):
    c = Circuit.empty(n)
    for _ in range(depth):
        g = rng.integers(0, 5)  # 0:H,1:X,2:RY,3:CNOT,4:controlled-on-int
        k = int(rng.integers(0, n))
        if g == 0:
            c.h(k)
        elif g == 1:
            c.x(k)
        elif g == 2:
            c.ry(k, float(rng.uniform(0, np.pi)))
        else:
            others = [q for q in range(n) if q != k]
            ctl = [int(q) for q in rng.choice(others, size=2, replace=False)]
            if g == 3:
                c.cnot(ctl[0], k)
            else:
                c.controlled_on_int(int(rng.integers(0, 4)), ctl, k, G.RX(0.4))
    return c

def test_random_circuits_match():
    rng = np.random.default_rng(123)
    n = 4
    for depth in (5, 10, 20):
        c = random_circuit(n, depth, rng)
        s = c.run(backend="serial")
        t = c.run(backend="numba", num_threads=8)
        assert np.allclose(s.as_numpy(), t.as_numpy(), atol=1e-12, rtol=0)

def test_w_states_match():
    serial = Simulator(backend="serial")
    numba = Simulator(backend="numba")
    for fn, n in ((prep.w_state_power_of_two, 4), (prep.w_state_arbitrary, 5)):
        a = serial.run(n, fn)
        b = numba.run(n, fn)
        assert np.allclose(a.psi, b.psi, atol=1e-12, rtol=0)
