# katasim/plot_results.py
import csv, os
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from collections import defaultdict
from statistics import median
from .bench import DATA_DIR
from .log import get_logger

log = get_logger(__name__)

def load_rows(path):
    rows = []
    with open(path, "r") as f:
        r = csv.DictReader(f)
        for row in r:
            row["qubits"]  = int(row["qubits"])
            row["depth"]   = int(row["depth"])
            row["threads"] = int(row["threads"])
            row["wall_ms"] = float(row["wall_ms"])
            rows.append(row)
    return rows

def median_by_key(rows, key_fields):
    buckets = defaultdict(list)
    for r in rows:
        key = tuple(r[k] for k in key_fields)
        buckets[key].append(r["wall_ms"])
    agg = []
    for key, vals in buckets.items():
        out = dict(zip(key_fields, key))
        out["wall_ms"] = float(median(vals))
        agg.append(out)
    return agg

def _save(out_dir, name):
    path = os.path.join(out_dir, name)
    plt.savefig(path, dpi=200)
    plt.close()
    return path

def plot_runtime_vs_qubits(rows, tag, out_dir):
    by_series = defaultdict(list)
    for r in median_by_key(rows, ["experiment", "qubits"]):
        by_series[r["experiment"]].append((r["qubits"], r["wall_ms"]))
    if not by_series: return None
    plt.figure()
    for name, p in by_series.items():
        xs, ys = zip(*sorted(p))
        plt.plot(xs, ys, marker="o", label=name)
    plt.xlabel("Qubits (n)")
    plt.ylabel("Runtime (ms)")
    plt.yscale("log")
    plt.title(f"Runtime vs Qubits [{tag}]")
    plt.grid(True, which="both", ls="--", lw=0.5)
    plt.legend()
    return _save(out_dir, f"runtime_vs_qubits_{tag}.png")

def plot_speedup_vs_threads(rows, tag, out_dir):
    pts = sorted(median_by_key(rows, ["threads"]), key=lambda r: r["threads"])
    if not pts: return None
    t1 = next((r["wall_ms"] for r in pts if r["threads"] == 1), None)
    if not t1: return None
    xs = [r["threads"] for r in pts]
    ys = [t1 / r["wall_ms"] for r in pts]
    plt.figure()
    plt.plot(xs, ys, marker="o")
    plt.xlabel("Threads")
    plt.ylabel("Speedup (T1/Tt)")
    plt.title(f"Speedup vs Threads [{tag}]")
    plt.grid(True)
    return _save(out_dir, f"speedup_vs_threads_{tag}.png")

def plot_runtime_vs_depth(rows, tag, out_dir):
    pts = sorted(median_by_key(rows, ["depth"]), key=lambda r: r["depth"])
    if not pts: return None
    plt.figure()
    plt.plot([r["depth"] for r in pts], [r["wall_ms"] for r in pts], marker="o")
    plt.xlabel("Depth")
    plt.ylabel("Runtime (ms)")
    plt.title(f"Runtime vs Depth [{tag}]")
    plt.grid(True)
    return _save(out_dir, f"runtime_vs_depth_{tag}.png")

def plot_qubits_compare(data_dir):
    """serial vs numba qubit scaling on one log-scale chart."""
    series = {}
    for be in ("serial", "numba"):
        p = os.path.join(data_dir, be, "qubits.csv")
        if os.path.exists(p):
            pts = median_by_key(load_rows(p), ["qubits"])
            series[be] = sorted((r["qubits"], r["wall_ms"]) for r in pts)
    if not series:
        return None
    plt.figure()
    for be, pts in series.items():
        xs, ys = zip(*pts)
        plt.plot(xs, ys, marker="o", label=be)
    plt.xlabel("Qubits (n)")
    plt.ylabel("Runtime (ms, log scale)")
    plt.title("Runtime vs Qubits (serial vs numba)")
    plt.yscale("log")
    plt.grid(True, which="both", ls="--", lw=0.5)
    plt.legend()
    plt.tight_layout()
    return _save(data_dir, "runtime_vs_qubits_compare.png")

PLOTTERS = {
    "qubits": [plot_runtime_vs_qubits],
    "wstate": [plot_runtime_vs_qubits],
    "threads": [plot_speedup_vs_threads],
    "depth": [plot_runtime_vs_depth],
}

def plot_all(data_dir=DATA_DIR):
    """Plot every data/<backend>/<experiment>.csv next to its CSV; returns the image paths."""
    saved = []
    for root, _, files in os.walk(data_dir):
        for f in sorted(files):
            if not f.endswith(".csv"):
                continue
            path = os.path.join(root, f)
            tag = os.path.splitext(f)[0]
            backend = os.path.basename(root)
            try:
                rows = load_rows(path)
            except (OSError, KeyError, ValueError) as e:
                log.warning("skipping %s: %s", path, e)
                continue
            print(f"Plotting from {backend}/{tag}.csv ({len(rows)} rows)...")
            for fn in PLOTTERS.get(tag, [plot_runtime_vs_qubits]):
                out = fn(rows, f"{tag}_{backend}", root)
                if out:
                    saved.append(out)
    out = plot_qubits_compare(data_dir)
    if out:
        saved.append(out)
    return saved

def main():
    if not os.path.isdir(DATA_DIR):
        print(f"No benchmark data under {DATA_DIR}")
        return
    saved = plot_all(DATA_DIR)
    print(f"\nSaved {len(saved)} plots under {DATA_DIR}/<backend>/*.png")

if __name__ == "__main__":
    main()
