"""Error taxonomy for the spectrogram pipeline.

Every failure raised by the decoder or the builder is a ``SpectrogramError``
subclass with a stable ``kind`` string, so front-ends can report the kind
and a readable message instead of a blank spectrogram.
"""

from __future__ import annotations


class SpectrogramError(ValueError):
    kind = "SPECTROGRAM_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class TooLarge(SpectrogramError):
    kind = "TOO_LARGE"


class NotRiffWave(SpectrogramError):
    kind = "NOT_RIFF_WAVE"


class UnsupportedFormat(SpectrogramError):
    kind = "UNSUPPORTED_FORMAT"


class TruncatedData(SpectrogramError):
    kind = "TRUNCATED_DATA"


class InvalidParameter(SpectrogramError):
    kind = "INVALID_PARAMETER"


class LengthMismatch(SpectrogramError):
    """Frame and window lengths disagree; the builder never produces this."""

    kind = "LENGTH_MISMATCH"


class InsufficientSamples(SpectrogramError):
    kind = "INSUFFICIENT_SAMPLES"


class TransformFailure(SpectrogramError):
    kind = "TRANSFORM_FAILURE"
