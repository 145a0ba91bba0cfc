# katasim/bench.py
import argparse, csv, os, socket, subprocess, time, platform
from datetime import datetime
import numpy as np
from .circuit import Circuit
from .config import settings
from .log import get_logger
from .simulator import Simulator
from . import prep

log = get_logger(__name__)

DATA_DIR = os.path.join(os.getcwd(), "data")

def backend_dir(backend):
    path = os.path.join(DATA_DIR, backend)
    os.makedirs(path, exist_ok=True)
    return path

def warmup(circ, backend, threads=None):
    # one dummy run to JIT-compile & warm caches; no norm check
    _ = circ.run(backend=backend, num_threads=threads, check_norm=False)

# ---------------------------------------------------------------------

def meta_row():
    commit = ""
    try:
        commit = subprocess.check_output(["git", "rev-parse", "--short", "HEAD"],
                                         stderr=subprocess.DEVNULL).decode().strip()
    except (OSError, subprocess.CalledProcessError):
        log.debug("no git commit available for benchmark metadata")
    return {
        "hostname": socket.gethostname(),
        "commit": commit,
        "dtype": np.dtype(settings.dtype).name,
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "python": platform.python_version(),
        "machine": platform.machine(),
    }

HEADER = ["experiment","qubits","depth","backend","threads","gates","wall_ms","hostname","commit","dtype","timestamp"]

def new_csv(path):
    """Create/overwrite CSV with header."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writeheader()

def write_row(path, experiment, n, depth, backend, threads, gates, wall):
    m = meta_row()
    row = {
        "experiment": experiment, "qubits": n, "depth": depth, "backend": backend,
        "threads": threads, "gates": gates, "wall_ms": f"{wall:.3f}",
        "hostname": m["hostname"], "commit": m["commit"], "dtype": m["dtype"], "timestamp": m["timestamp"],
    }
    with open(path, "a", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writerow(row)

# ---------------------------------------------------------------------

def random_circuit(n, depth, seed=0):
    """Alternating layers of single-qubit gates and (controlled) entanglers."""
    rng = np.random.default_rng(seed)
    c = Circuit.empty(n)
    for layer in range(depth):
        if layer % 2 == 0:
            for k in range(n):
                g = rng.integers(0, 3)
                if g == 0:
                    c.h(k)
                elif g == 1:
                    c.x(k)
                else:
                    c.ry(k, float(rng.uniform(0, 2*np.pi)))
        else:
            for k in range(0, n-1, 2):
                if rng.integers(0, 2) == 0:
                    c.cnot(k, k+1)
                else:
                    c.controlled_on_int(0, [k+1], k, np.array([[0, 1], [1, 0]]), name="C0X")
    return c

def time_run(circ, backend, threads=None):
    t0 = time.perf_counter()
    _ = circ.run(backend=backend, num_threads=threads, check_norm=False)
    return (time.perf_counter() - t0) * 1e3  # ms

def numba_max_threads():
    try:
        from numba import config
    except ImportError:
        return os.cpu_count() or 1
    return config.NUMBA_NUM_THREADS

def threads_for(backend):
    return 0 if backend == "serial" else numba_max_threads()

# ---------------------------------------------------------------------
# individual experiments

def bench_qubits(ns, depth, backend, out_path):
    print(f"[run] Qubits scaling → {out_path}")
    new_csv(out_path)
    warmup(random_circuit(min(ns), depth, seed=42), backend=backend)
    for n in ns:
        circ = random_circuit(n, depth, seed=42)
        wall = time_run(circ, backend)
        write_row(out_path, "qubits", n, depth, backend, threads_for(backend), len(circ.ops), wall)
        print(f"  n={n}  wall={wall:.2f} ms")
    print("✓ done.\n")

def bench_threads(n, depth, threads_list, out_path):
    print(f"[run] Thread scaling → {out_path}")
    new_csv(out_path)
    circ = random_circuit(n, depth, seed=123)
    warmup(circ, "numba", threads=1)
    t1 = time_run(circ, "numba", threads=1)
    pool = numba_max_threads()
    print(f"  pool={pool}  T1={t1:.1f} ms")

    for t in threads_list:
        tt = min(int(t), pool)
        if tt != t:
            print(f"  requested t={t} > pool={pool}; using t={tt}")
        wall = time_run(circ, "numba", threads=tt)
        speedup = t1 / wall if wall > 0 else float("nan")
        write_row(out_path, "threads", n, depth, "numba", tt, len(circ.ops), wall)
        print(f"  t={tt}  wall={wall:.2f} ms  speedup={speedup:.2f}×")
    print("✓ done.\n")

def bench_depth(n, depths, backend, out_path):
    print(f"[run] Depth scaling → {out_path}")
    new_csv(out_path)
    warmup(random_circuit(n, min(depths), seed=7), backend=backend)

    for d in depths:
        circ = random_circuit(n, d, seed=7)
        wall = time_run(circ, backend)
        write_row(out_path, "depth", n, d, backend, threads_for(backend), len(circ.ops), wall)
        print(f"  depth={d}  wall={wall:.2f} ms")
    print("✓ done.\n")

def bench_wstate(ns, backend, out_path):
    """Time both recursive W-state preparations; w_pow2 skips sizes that are not powers of two."""
    print(f"[run] W state → {out_path}")
    new_csv(out_path)
    sim = Simulator(backend=backend, check_norm=False)
    sim.run(2, prep.w_state_arbitrary)  # warmup
    for n in ns:
        for name, fn in (("w_pow2", prep.w_state_power_of_two), ("w_arbitrary", prep.w_state_arbitrary)):
            if name == "w_pow2" and n & (n - 1):
                continue
            t0 = time.perf_counter()
            sim.run(n, fn)
            wall = (time.perf_counter() - t0) * 1e3
            write_row(out_path, name, n, 0, backend, threads_for(backend), 0, wall)
            print(f"  {name} n={n}  wall={wall:.2f} ms")
    print("✓ done.\n")

# ---------------------------------------------------------------------
def main(argv=None):
    p = argparse.ArgumentParser(description="katasim benchmarks → data/<backend>/*.csv")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_qubits = sub.add_parser("qubits")
    p_qubits.add_argument("--ns", type=str, required=True)
    p_qubits.add_argument("--depth", type=int, default=100)
    p_qubits.add_argument("--backend", type=str, default="numba", choices=["serial","numba"])

    p_threads = sub.add_parser("threads")
    p_threads.add_argument("--n", type=int, default=16)
    p_threads.add_argument("--depth", type=int, default=200)
    p_threads.add_argument("--threads", type=str, default="1,2,4,8,16")
    # threads always use numba backend
    p_threads.add_argument("--backend", type=str, default="numba", choices=["numba"])

    p_depth = sub.add_parser("depth")
    p_depth.add_argument("--n", type=int, default=12)
    p_depth.add_argument("--depths", type=str, default="10,50,100,300,600")
    p_depth.add_argument("--backend", type=str, default="numba", choices=["serial","numba"])

    p_w = sub.add_parser("wstate")
    p_w.add_argument("--ns", type=str, default="2,4,8,16")
    p_w.add_argument("--backend", type=str, default="numba", choices=["serial","numba"])

    args = p.parse_args(argv)

    base = backend_dir(args.backend)

    if args.cmd == "qubits":
        ns = [int(x) for x in args.ns.split(",")]
        bench_qubits(ns, args.depth, args.backend, os.path.join(base, "qubits.csv"))

    elif args.cmd == "threads":
        ts = [int(x) for x in args.threads.split(",")]
        bench_threads(args.n, args.depth, ts, os.path.join(base, "threads.csv"))

    elif args.cmd == "depth":
        ds = [int(x) for x in args.depths.split(",")]
        bench_depth(args.n, ds, args.backend, os.path.join(base, "depth.csv"))

    elif args.cmd == "wstate":
        ns = [int(x) for x in args.ns.split(",")]
        bench_wstate(ns, args.backend, os.path.join(base, "wstate.csv"))

if __name__ == "__main__":
    main()
