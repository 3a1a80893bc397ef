"""Window functions built on SciPy.

Windows are symmetric (``fftbins=False``) so that a Hann window of length
``L`` is exactly ``0.5 - 0.5 * cos(2*pi*i / (L - 1))``. Results are cached
and returned read-only because a single array is shared by every frame of
an analysis run.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Dict, Literal

import numpy as np
from scipy.signal import windows as sig_windows

from spectrolab.errors import InvalidParameter

WindowKind = Literal["hann", "hamming", "blackman", "rectangular"]

# our name -> scipy's name
_SCIPY_NAMES: Dict[str, str] = {
    "hann": "hann",
    "hamming": "hamming",
    "blackman": "blackman",
    "rectangular": "boxcar",
}

WINDOW_KINDS = tuple(_SCIPY_NAMES)


@lru_cache(maxsize=64)
def _cached_window(kind: str, length: int) -> np.ndarray:
    coeffs = sig_windows.get_window(_SCIPY_NAMES[kind], length, fftbins=False)
    coeffs = np.asarray(coeffs, dtype=np.float64)
    coeffs.flags.writeable = False
    return coeffs


def generate_window(kind: WindowKind, length: int) -> np.ndarray:
    """Return ``length`` coefficients of the requested window.

    A length of 1 always yields ``[1.0]``.
    """

    if isinstance(length, bool) or not isinstance(length, (int, np.integer)) or length < 1:
        raise InvalidParameter(f"window length must be a positive integer, got {length!r}")
    name = str(kind).lower()
    if name not in _SCIPY_NAMES:
        raise InvalidParameter(f"Unsupported window kind {kind!r}; expected one of {', '.join(WINDOW_KINDS)}")
    if length == 1:
        return _cached_window("rectangular", 1)
    return _cached_window(name, int(length))
