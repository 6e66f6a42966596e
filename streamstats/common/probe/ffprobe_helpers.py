# streamstats/common/probe/ffprobe_helpers.py
from __future__ import annotations

import math
from typing import Any, Iterable, List, Optional


def build_ffprobe_cmd(
    endpoint: str,
    *,
    ffprobe_bin: str = "ffprobe",
    log_level: str = "error",
    extra_args: Iterable[str] | None = None,
) -> List[str]:
    """
    Build an ffprobe command that emits JSON we can parse consistently.
    Works for local files as well as network inputs (rtmp://, http://).
    """
    base = [
        ffprobe_bin,
        "-v", log_level,
        "-print_format", "json",
        "-show_format",
        "-show_streams",
    ]
    if extra_args:
        base.extend(extra_args)
    # Stop option parsing in case of weird stream keys
    base.extend(["--", endpoint])
    return base


def ingest_endpoint(origin: str, identity: str) -> str:
    """RTMP address a streamer publishes to: <origin>/<identity>."""
    return f"{origin.rstrip('/')}/{identity}"


# ---- tiny coercion helpers ----------------------------------------------------
def to_number(x: Any) -> float:
    """ffprobe reports bitrates as strings; anything unparsable becomes NaN."""
    if x is None or isinstance(x, bool):
        return math.nan
    try:
        return float(x)
    except (TypeError, ValueError):
        return math.nan


def maybe_int(x: Any) -> Optional[int]:
    if x is None or isinstance(x, bool):
        return None
    try:
        return int(float(x))
    except (TypeError, ValueError, OverflowError):
        return None


def maybe_str(x: Any) -> Optional[str]:
    if x is None:
        return None
    s = str(x)
    return s or None
