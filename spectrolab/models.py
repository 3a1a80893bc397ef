"""Pydantic response models for the HTTP surface."""

from typing import List, Optional

from pydantic import BaseModel


class AudioFormatModel(BaseModel):
    sample_rate: int
    channels: int
    bits_per_sample: int
    data_length: int
    duration: float


class AxisTick(BaseModel):
    value: float
    label: str


class AxesModel(BaseModel):
    seconds_per_time_bin: float
    hz_per_frequency_bin: float
    time_bins: int
    frequency_bins: int
    time_ticks: List[AxisTick]
    frequency_ticks: List[AxisTick]


class AnalysisConfigModel(BaseModel):
    window_kind: str
    window_length: int
    hop_size: int
    use_db: bool
    channel: str
    transform: str
    workers: int
    pad_tail: bool


class SpectrogramResponse(BaseModel):
    format: AudioFormatModel
    config: AnalysisConfigModel
    axes: AxesModel
    peak_frequencies: List[float]
    min_value: float
    max_value: float
    matrix: Optional[List[List[float]]] = None


class CapabilitiesResponse(BaseModel):
    window_kinds: List[str]
    transforms: List[str]
    max_input_bytes: int


class ErrorDetail(BaseModel):
    error: str
    message: str


class ErrorResponse(BaseModel):
    detail: ErrorDetail
