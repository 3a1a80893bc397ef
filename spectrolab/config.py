"""Analysis configuration.

Defaults can be overridden per process through ``SPECTRO_*`` environment
variables and per request through :meth:`AnalysisConfig.with_overrides`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Optional

from spectrolab.dsp_engine.transforms import TRANSFORM_BACKENDS
from spectrolab.dsp_engine.wav import DOWNMIX, ChannelPolicy
from spectrolab.dsp_engine.windows import WINDOW_KINDS
from spectrolab.errors import InvalidParameter

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidParameter(f"{name} must be a boolean, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidParameter(f"{name} must be an integer, got {raw!r}") from exc


def parse_channel(raw: Optional[str | int]) -> ChannelPolicy:
    """Turn ``"downmix"`` or an index (as text or int) into a channel policy."""

    if raw is None:
        return 0
    if isinstance(raw, int):
        return raw
    value = raw.strip().lower()
    if value in {DOWNMIX, "mix", "mean"}:
        return DOWNMIX
    try:
        return int(value)
    except ValueError as exc:
        raise InvalidParameter(f"channel must be an index or 'downmix', got {raw!r}") from exc


@dataclass(frozen=True)
class AnalysisConfig:
    window_kind: str = "hann"
    window_length: int = 1024
    hop_size: int = 512
    use_db: bool = True
    channel: ChannelPolicy = 0
    transform: str = "numpy"
    workers: int = 1
    pad_tail: bool = False

    @classmethod
    def from_env(cls) -> "AnalysisConfig":
        defaults = cls()
        config = cls(
            window_kind=(os.getenv("SPECTRO_WINDOW_KIND") or defaults.window_kind).strip().lower(),
            window_length=_env_int("SPECTRO_WINDOW_LENGTH", defaults.window_length),
            hop_size=_env_int("SPECTRO_HOP_SIZE", defaults.hop_size),
            use_db=_env_bool("SPECTRO_USE_DB", defaults.use_db),
            channel=parse_channel(os.getenv("SPECTRO_CHANNEL") or None),
            transform=(os.getenv("SPECTRO_TRANSFORM") or defaults.transform).strip().lower(),
            workers=_env_int("SPECTRO_WORKERS", defaults.workers),
            pad_tail=_env_bool("SPECTRO_PAD_TAIL", defaults.pad_tail),
        )
        return config.validate()

    def with_overrides(self, **overrides: Any) -> "AnalysisConfig":
        """Return a copy with every non-``None`` override applied."""

        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise InvalidParameter(f"Unknown configuration option(s): {', '.join(sorted(unknown))}")
        updates = {k: v for k, v in overrides.items() if v is not None}
        if "channel" in updates:
            updates["channel"] = parse_channel(updates["channel"])
        for name in ("window_kind", "transform"):
            if isinstance(updates.get(name), str):
                updates[name] = updates[name].strip().lower()
        return replace(self, **updates).validate()

    def validate(self) -> "AnalysisConfig":
        if self.window_kind not in WINDOW_KINDS:
            raise InvalidParameter(
                f"Unsupported window kind {self.window_kind!r}; expected one of {', '.join(WINDOW_KINDS)}"
            )
        if self.window_length < 1:
            raise InvalidParameter(f"window_length must be >= 1, got {self.window_length}")
        if self.hop_size < 1:
            raise InvalidParameter(f"hop_size must be >= 1, got {self.hop_size}")
        if self.transform not in TRANSFORM_BACKENDS:
            raise InvalidParameter(
                f"Unsupported transform {self.transform!r}; expected one of {', '.join(TRANSFORM_BACKENDS)}"
            )
        if self.workers < 1:
            raise InvalidParameter(f"workers must be >= 1, got {self.workers}")
        if isinstance(self.channel, str) and self.channel != DOWNMIX:
            raise InvalidParameter(f"channel must be an index or 'downmix', got {self.channel!r}")
        if isinstance(self.channel, int) and self.channel < 0:
            raise InvalidParameter(f"channel index must be >= 0, got {self.channel}")
        return self
