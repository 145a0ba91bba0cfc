# katasim/config.py
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional
import numpy as np

BACKENDS = ("serial", "numba")

_DTYPES = {
    "complex128": np.complex128,
    "complex64": np.complex64,
}

_FALSE = ("0", "false", "no", "off")


@dataclass(frozen=True)
class Settings:
    """Process-wide defaults, fixed once at import.

    Per-call keyword arguments (``Simulator(backend=...)``,
    ``Circuit.run(atol=...)``) override these without mutating them.
    """
    backend: str = "serial"
    dtype: type = np.complex128
    atol: float = 1e-9
    check_norm: bool = True
    num_threads: Optional[int] = None
    log_level: str = "WARNING"

    @staticmethod
    def from_env(env: Mapping[str, str] = None) -> "Settings":
        env = os.environ if env is None else env
        s = Settings()

        backend = env.get("KATASIM_BACKEND", s.backend).strip().lower()
        if backend not in BACKENDS:
            raise ValueError(f"KATASIM_BACKEND must be one of {BACKENDS}, got {backend!r}")

        dtype_name = env.get("KATASIM_DTYPE", "complex128").strip().lower()
        if dtype_name not in _DTYPES:
            raise ValueError(f"KATASIM_DTYPE must be one of {tuple(_DTYPES)}, got {dtype_name!r}")

        atol = float(env.get("KATASIM_ATOL", s.atol))
        if not atol > 0:
            raise ValueError(f"KATASIM_ATOL must be positive, got {atol}")

        threads = env.get("KATASIM_NUM_THREADS")
        return replace(
            s,
            backend=backend,
            dtype=_DTYPES[dtype_name],
            atol=atol,
            check_norm=env.get("KATASIM_CHECK_NORM", "1").strip().lower() not in _FALSE,
            num_threads=int(threads) if threads else None,
            log_level=env.get("KATASIM_LOG_LEVEL", s.log_level).strip().upper(),
        )


settings = Settings.from_env()
