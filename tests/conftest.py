"""Shared pytest fixtures for the SpectroLab test suite."""

import struct
import sys
from pathlib import Path

import numpy as np
import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from spectrolab.dsp_engine.wav import encode_wav  # noqa: E402


def sine(freq_hz: float, sample_rate: int, n_samples: int, amplitude: float = 32767.0) -> np.ndarray:
    t = np.arange(n_samples) / float(sample_rate)
    return np.round(amplitude * np.sin(2.0 * np.pi * freq_hz * t)).astype(np.int16)


def chunk(chunk_id: bytes, body: bytes) -> bytes:
    """A RIFF sub-chunk including the pad byte for odd lengths."""
    pad = b"\x00" if len(body) % 2 else b""
    return chunk_id + struct.pack("<I", len(body)) + body + pad


def fmt_body(
    channels: int = 1,
    sample_rate: int = 8000,
    bits: int = 16,
    format_tag: int = 1,
) -> bytes:
    block_align = channels * bits // 8
    return struct.pack("<HHIIHH", format_tag, channels, sample_rate, sample_rate * block_align, block_align, bits)


def riff(*chunks: bytes) -> bytes:
    body = b"WAVE" + b"".join(chunks)
    return b"RIFF" + struct.pack("<I", len(body)) + body


@pytest.fixture
def sine_1khz() -> np.ndarray:
    """One second of a full-scale 1 kHz sine at 8 kHz."""
    return sine(1000.0, 8000, 8000)


@pytest.fixture
def sine_wav(sine_1khz) -> bytes:
    return encode_wav(sine_1khz, 8000)


@pytest.fixture
def stereo_wav() -> bytes:
    left = np.arange(0, 200, dtype=np.int16)
    right = -np.arange(0, 200, dtype=np.int16) * 3
    return encode_wav(np.stack([left, right], axis=1), 16000)
