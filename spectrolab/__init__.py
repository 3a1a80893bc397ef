"""SpectroLab: inspect the time/frequency resolution trade-off of a WAV file."""

__version__ = "0.1.0"
