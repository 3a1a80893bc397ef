"""Real-to-complex Fourier transform backends.

The spectrum engine only depends on the :class:`Transform` call signature:
a real sequence of length ``N`` in, ``N // 2 + 1`` complex bins out. The
naive DFT is an O(N^2) reference used to check the fast backends.
"""
from __future__ import annotations

from typing import Callable, Dict, Protocol

import numpy as np
import scipy.fft

from spectrolab.errors import InvalidParameter


class Transform(Protocol):
    def __call__(self, samples: np.ndarray) -> np.ndarray:
        ...


def numpy_rfft(samples: np.ndarray) -> np.ndarray:
    return np.fft.rfft(samples)


def scipy_rfft(samples: np.ndarray) -> np.ndarray:
    return scipy.fft.rfft(samples)


def _dft_matrix(n: int, rows: int, sign: float) -> np.ndarray:
    k = np.arange(rows)[:, np.newaxis]
    m = np.arange(n)[np.newaxis, :]
    return np.exp(sign * 2j * np.pi * k * m / n)


def naive_dft(samples: np.ndarray) -> np.ndarray:
    """One-sided DFT computed straight from its definition."""

    x = np.asarray(samples, dtype=np.float64)
    n = x.shape[0]
    return _dft_matrix(n, n // 2 + 1, -1.0) @ x


def naive_full_dft(samples: np.ndarray) -> np.ndarray:
    x = np.asarray(samples, dtype=np.complex128)
    n = x.shape[0]
    return _dft_matrix(n, n, -1.0) @ x


def naive_inverse_dft(spectrum: np.ndarray) -> np.ndarray:
    """Inverse of :func:`naive_full_dft` (includes the 1/N scaling)."""

    X = np.asarray(spectrum, dtype=np.complex128)
    n = X.shape[0]
    return (_dft_matrix(n, n, 1.0) @ X) / n


TRANSFORM_BACKENDS: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "numpy": numpy_rfft,
    "scipy": scipy_rfft,
    "naive": naive_dft,
}


def get_transform(name: str) -> Transform:
    try:
        return TRANSFORM_BACKENDS[name.lower()]
    except KeyError as exc:
        raise InvalidParameter(
            f"Unsupported transform {name!r}; expected one of {', '.join(TRANSFORM_BACKENDS)}"
        ) from exc
