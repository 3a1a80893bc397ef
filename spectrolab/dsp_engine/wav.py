"""Strict 16-bit PCM WAV decoding.

Only the subset of RIFF/WAVE needed for analysis is accepted: a ``fmt ``
chunk describing 16-bit integer PCM followed (not necessarily directly) by
a ``data`` chunk. Every length read from the header is checked against the
bytes that remain before it is used, so corrupt or hostile headers are
rejected instead of read past.
"""
from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np

from spectrolab.errors import (
  InvalidParameter,
  NotRiffWave,
  TooLarge,
  TruncatedData,
  UnsupportedFormat,
)

logger = logging.getLogger("spectrolab.wav")

MAX_INPUT_BYTES = 1024 * 1024
SAMPLE_SCALE = 32768.0

DOWNMIX = "downmix"
ChannelPolicy = Union[int, str]

WAVE_FORMAT_PCM = 0x0001
WAVE_FORMAT_EXTENSIBLE = 0xFFFE

_CODEC_NAMES = {
  0x0002: "Microsoft ADPCM",
  0x0003: "IEEE float",
  0x0006: "A-law",
  0x0007: "mu-law",
  0x0011: "IMA ADPCM",
  0x0055: "MPEG Layer 3",
}

_FMT_STRUCT = struct.Struct("<HHIIHH")
_CHUNK_HEADER = struct.Struct("<4sI")


class ByteCursor:
  """Read position over an immutable buffer that refuses to overrun it."""

  def __init__(self, data: bytes, position: int = 0) -> None:
    self._data = memoryview(data)
    self.position = position

  @property
  def remaining(self) -> int:
    return len(self._data) - self.position

  def require(self, n: int, what: str) -> None:
    if n < 0 or n > self.remaining:
      raise TruncatedData(
        f"{what} needs {n} bytes at offset {self.position}, only {self.remaining} remain"
      )

  def read(self, n: int, what: str = "read") -> bytes:
    self.require(n, what)
    chunk = bytes(self._data[self.position : self.position + n])
    self.position += n
    return chunk

  def unpack(self, fmt: struct.Struct, what: str) -> tuple:
    self.require(fmt.size, what)
    values = fmt.unpack_from(self._data, self.position)
    self.position += fmt.size
    return values

  def skip(self, n: int, what: str = "skip") -> None:
    self.require(n, what)
    self.position += n


@dataclass(frozen=True)
class AudioFormat:
  sample_rate: int
  channels: int
  bits_per_sample: int
  data_length: int
  format_tag: int = WAVE_FORMAT_PCM

  @property
  def block_align(self) -> int:
    return self.channels * (self.bits_per_sample // 8)

  @property
  def frame_count(self) -> int:
    return self.data_length // self.block_align

  @property
  def duration(self) -> float:
    return self.frame_count / float(self.sample_rate)


@dataclass(frozen=True)
class SampleBuffer:
  """Samples of the one channel selected for analysis.

  ``samples`` is a read-only int16 array owned by this buffer.
  """

  samples: np.ndarray
  sample_rate: int

  def __len__(self) -> int:
    return int(self.samples.shape[0])

  @property
  def duration(self) -> float:
    return len(self) / float(self.sample_rate)


def _codec_name(tag: int) -> str:
  return _CODEC_NAMES.get(tag, f"format tag 0x{tag:04X}")


def _parse_fmt(body: bytes) -> Tuple[int, int, int, int]:
  if len(body) < _FMT_STRUCT.size:
    raise UnsupportedFormat(f"fmt chunk is {len(body)} bytes, expected at least {_FMT_STRUCT.size}")

  tag, channels, sample_rate, _byte_rate, _block_align, bits = _FMT_STRUCT.unpack_from(body, 0)

  effective_tag = tag
  if tag == WAVE_FORMAT_EXTENSIBLE:
    # cbSize(2) validBits(2) channelMask(4) then the sub-format GUID, whose
    # first two bytes carry the real format tag
    if len(body) < 40:
      raise UnsupportedFormat("WAVE_FORMAT_EXTENSIBLE fmt chunk is missing its sub-format")
    (effective_tag,) = struct.unpack_from("<H", body, 24)

  if effective_tag != WAVE_FORMAT_PCM:
    raise UnsupportedFormat(f"only 16-bit PCM is supported, found {_codec_name(effective_tag)}")
  if bits != 16:
    raise UnsupportedFormat(f"only 16-bit PCM is supported, found {bits}-bit")
  if channels == 0 or sample_rate == 0:
    raise UnsupportedFormat(
      f"insufficient information in fmt chunk (channels={channels}, sample_rate={sample_rate})"
    )
  return tag, channels, sample_rate, bits


def _select_channel(interleaved: np.ndarray, channels: int, channel: ChannelPolicy) -> np.ndarray:
  frames = interleaved.reshape(-1, channels)
  if isinstance(channel, str):
    if channel != DOWNMIX:
      raise InvalidParameter(f"channel must be an index or '{DOWNMIX}', got {channel!r}")
    mixed = np.round(frames.astype(np.float64).mean(axis=1))
    return mixed.astype(np.int16)
  if isinstance(channel, bool) or not isinstance(channel, (int, np.integer)):
    raise InvalidParameter(f"channel must be an index or '{DOWNMIX}', got {channel!r}")
  if not 0 <= channel < channels:
    raise InvalidParameter(f"channel {channel} out of range for a {channels}-channel file")
  return frames[:, int(channel)].astype(np.int16)


def decode_wav(data: bytes, channel: ChannelPolicy = 0) -> Tuple[AudioFormat, SampleBuffer]:
  """Decode a WAV byte buffer into its format and one channel of samples.

  Args:
    data: the complete file contents, at most ``MAX_INPUT_BYTES``.
    channel: channel index to analyse, or ``"downmix"`` for the rounded
      mean of all channels.

  Raises:
    TooLarge, NotRiffWave, UnsupportedFormat, TruncatedData,
    InvalidParameter
  """

  if len(data) > MAX_INPUT_BYTES:
    raise TooLarge(f"maximum input size is {MAX_INPUT_BYTES} bytes, found {len(data)}")

  if len(data) < 12 or data[0:4] != b"RIFF" or data[8:12] != b"WAVE":
    raise NotRiffWave("input is not a RIFF/WAVE file")

  cursor = ByteCursor(data)
  _riff, riff_size = cursor.unpack(_CHUNK_HEADER, "RIFF header")
  if riff_size + 8 > MAX_INPUT_BYTES:
    raise TooLarge(f"maximum input size is {MAX_INPUT_BYTES} bytes, header declares {riff_size + 8}")
  cursor.skip(4, "WAVE tag")

  fmt = None
  while True:
    if cursor.remaining < _CHUNK_HEADER.size:
      if fmt is None:
        raise UnsupportedFormat("no fmt chunk found")
      raise TruncatedData("no data chunk found")

    chunk_id, size = cursor.unpack(_CHUNK_HEADER, "chunk header")

    if chunk_id == b"fmt ":
      fmt = _parse_fmt(cursor.read(size, "fmt chunk"))
      cursor.skip(min(size & 1, cursor.remaining), "fmt padding")
      continue

    if chunk_id == b"data":
      if fmt is None:
        raise UnsupportedFormat("data chunk appears before any fmt chunk")
      if size > cursor.remaining:
        raise TruncatedData(
          f"data chunk declares {size} bytes but only {cursor.remaining} remain"
        )
      break

    logger.debug("[WAV] skipping %r chunk (%d bytes)", chunk_id, size)
    # odd-sized chunks carry one pad byte, which may be absent at end of file
    cursor.skip(size, f"{chunk_id!r} chunk")
    cursor.skip(min(size & 1, cursor.remaining), "chunk padding")

  tag, channels, sample_rate, bits = fmt
  audio_format = AudioFormat(
    sample_rate=sample_rate,
    channels=channels,
    bits_per_sample=bits,
    data_length=size,
    format_tag=tag,
  )

  if size == 0:
    raise TruncatedData("data chunk holds no samples")
  if size % audio_format.block_align:
    raise TruncatedData(
      f"data chunk length {size} is not a multiple of the {audio_format.block_align}-byte sample frame"
    )

  raw = np.frombuffer(cursor.read(size, "data chunk"), dtype="<i2")
  samples = _select_channel(raw, channels, channel)
  samples.flags.writeable = False

  logger.info(
    "[WAV] decoded %d Hz, %d channel(s), %d samples per channel (%.3f s), channel=%s",
    sample_rate,
    channels,
    samples.shape[0],
    audio_format.duration,
    channel,
  )
  return audio_format, SampleBuffer(samples=samples, sample_rate=sample_rate)


def encode_wav(samples: np.ndarray, sample_rate: int) -> bytes:
  """Write int16 samples as a canonical 44-byte-header PCM WAV.

  ``samples`` is mono ``[n]`` or interleaved ``[n, channels]``.
  """

  x = np.asarray(samples)
  if x.ndim == 1:
    x = x[:, np.newaxis]
  if x.ndim != 2 or x.shape[1] == 0:
    raise InvalidParameter("Expected mono [N] or multichannel [N, channels] samples")
  if sample_rate <= 0:
    raise InvalidParameter(f"sample_rate must be positive, got {sample_rate}")

  channels = int(x.shape[1])
  payload = x.astype("<i2").tobytes()
  block_align = channels * 2
  header = b"".join(
    [
      _CHUNK_HEADER.pack(b"RIFF", 36 + len(payload)),
      b"WAVE",
      _CHUNK_HEADER.pack(b"fmt ", _FMT_STRUCT.size),
      _FMT_STRUCT.pack(WAVE_FORMAT_PCM, channels, sample_rate, sample_rate * block_align, block_align, 16),
      _CHUNK_HEADER.pack(b"data", len(payload)),
    ]
  )
  return header + payload
