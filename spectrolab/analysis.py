"""Decode-and-analyse entry point used by the HTTP surface and scripts."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import numpy as np

from spectrolab.config import AnalysisConfig
from spectrolab.dsp_engine import (
    AudioFormat,
    Spectrogram,
    SpectrogramBuilder,
    decode_wav,
    get_transform,
)
from spectrolab.units import format_unit

logger = logging.getLogger("spectrolab.analysis")


@dataclass(frozen=True)
class AnalysisResult:
    audio_format: AudioFormat
    spectrogram: Spectrogram
    config: AnalysisConfig


def analyze_wav_bytes(data: bytes, config: Optional[AnalysisConfig] = None) -> AnalysisResult:
    """Decode ``data`` and build its spectrogram with ``config``.

    Any :class:`~spectrolab.errors.SpectrogramError` propagates unchanged.
    """

    cfg = (config or AnalysisConfig()).validate()
    audio_format, buffer = decode_wav(data, channel=cfg.channel)
    builder = SpectrogramBuilder(
        window_kind=cfg.window_kind,
        window_length=cfg.window_length,
        hop_size=cfg.hop_size,
        use_db=cfg.use_db,
        transform=get_transform(cfg.transform),
        workers=cfg.workers,
        pad_tail=cfg.pad_tail,
    )
    spectrogram = builder.build(buffer)
    return AnalysisResult(audio_format=audio_format, spectrogram=spectrogram, config=cfg)


def _axis_ticks(scale, n: int) -> list[dict]:
    return [{"value": float(v), "label": format_unit(v, scale.unit)} for v in scale.evenly_spaced_values(n)]


def summarize(result: AnalysisResult, include_matrix: bool = True, n_ticks: int = 5) -> Dict[str, Any]:
    """Return a JSON-serialisable summary of an analysis run."""

    spec = result.spectrogram
    fmt = result.audio_format
    axes = spec.axes

    summary: Dict[str, Any] = {
        "format": {
            "sample_rate": fmt.sample_rate,
            "channels": fmt.channels,
            "bits_per_sample": fmt.bits_per_sample,
            "data_length": fmt.data_length,
            "duration": fmt.duration,
        },
        "config": {**asdict(result.config), "channel": str(result.config.channel)},
        "axes": {
            "seconds_per_time_bin": axes.seconds_per_time_bin,
            "hz_per_frequency_bin": axes.hz_per_frequency_bin,
            "time_bins": spec.time_bins,
            "frequency_bins": spec.frequency_bins,
            "time_ticks": _axis_ticks(spec.time_scale(), n_ticks),
            "frequency_ticks": _axis_ticks(spec.frequency_scale(), n_ticks),
        },
        "peak_frequencies": [float(f) for f in spec.peak_frequencies()],
        "min_value": float(np.min(spec.matrix)),
        "max_value": float(np.max(spec.matrix)),
    }
    if include_matrix:
        summary["matrix"] = spec.matrix.tolist()
    return summary
