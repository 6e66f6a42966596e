# streamstats/services/probe/ffprobe_adapter.py
from __future__ import annotations

import json
import shlex
import shutil
import subprocess
from typing import Any, Mapping, Optional

from streamstats.common.settings import get_settings
from streamstats.common.logging import get_logger
from streamstats.common.probe.ffprobe_helpers import build_ffprobe_cmd
from streamstats.domain.entities.probe import ProbeResult, ProbeStream
from streamstats.domain.enums.track_type import TrackType
from streamstats.domain.errors import ProbeError, ProbeMalformed, ProbeUnavailable
from streamstats.domain.ports.probe import ProbeOutcome, StreamProbePort

logger = get_logger()


class FFprobeAdapter(StreamProbePort):
    """
    Infrastructure adapter implementing StreamProbePort using `ffprobe`.
    Safe for use from ThreadManager (I/O-bound). Stateless apart from config,
    so one instance can serve every concurrent probe.
    """

    def __init__(
        self,
        ffprobe_bin: Optional[str] = None,
        timeout_sec: Optional[int] = None,
        log_level: Optional[str] = None,
    ):
        cfg = get_settings()
        self.ffprobe_bin = ffprobe_bin or cfg.ffprobe.bin
        self.timeout_sec = int(timeout_sec or cfg.ffprobe.timeout_sec or 30)
        self.log_level = log_level or cfg.ffprobe.log_level

    # ---- Port API -------------------------------------------------------------
    def probe(self, endpoint: str) -> ProbeOutcome:
        try:
            data = self._run(endpoint)
            return self._parse_ffprobe_json(data, endpoint=endpoint)
        except ProbeError as e:
            logger.debug("ffprobe failed for %s: %s", endpoint, e)
            return e

    # ---- Execution ------------------------------------------------------------
    def _resolve_bin(self) -> str:
        # absolute paths are used as-is, bare names must be on PATH
        resolved = shutil.which(self.ffprobe_bin)
        if not resolved:
            raise ProbeUnavailable(f"ffprobe not found: {self.ffprobe_bin!r}; set FFPROBE__BIN or install ffmpeg.")
        return resolved

    def _run(self, endpoint: str) -> Any:
        if not endpoint:
            raise ProbeUnavailable("No endpoint provided to probe().")

        cmd = build_ffprobe_cmd(endpoint, ffprobe_bin=self._resolve_bin(), log_level=self.log_level)
        logger.debug("ffprobe cmd: %s", " ".join(shlex.quote(p) for p in cmd))

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_sec,
                check=False,  # we handle rc manually to attach stderr
            )
        except subprocess.TimeoutExpired as e:
            raise ProbeUnavailable(
                f"ffprobe timed out after {self.timeout_sec}s", endpoint=endpoint, stderr=str(e)
            ) from e
        except OSError as e:
            raise ProbeUnavailable("Failed to execute ffprobe (OS error).", endpoint=endpoint, stderr=str(e)) from e

        if proc.returncode != 0:
            # RTMP: non-zero exit means nothing is being published right now
            raise ProbeUnavailable(
                "ffprobe returned non-zero exit code",
                endpoint=endpoint,
                stderr=(proc.stderr or "").strip() or None,
                rc=proc.returncode,
            )

        try:
            return json.loads(proc.stdout or "{}")
        except json.JSONDecodeError as e:
            raise ProbeMalformed("ffprobe produced invalid JSON", endpoint=endpoint, stderr=proc.stdout) from e

    # ---- Parsing helpers ------------------------------------------------------
    @staticmethod
    def _parse_ffprobe_json(data: Any, *, endpoint: Optional[str] = None) -> ProbeResult:
        if not isinstance(data, Mapping):
            raise ProbeMalformed(f"expected a JSON object, got {type(data).__name__}", endpoint=endpoint)

        raw_streams = data.get("streams") or []
        if not isinstance(raw_streams, list):
            raise ProbeMalformed("'streams' is not a list", endpoint=endpoint)

        fmt = data.get("format")
        if fmt is not None and not isinstance(fmt, Mapping):
            raise ProbeMalformed("'format' is not an object", endpoint=endpoint)

        streams = []
        for s in raw_streams:
            if not isinstance(s, Mapping):
                raise ProbeMalformed("stream record is not an object", endpoint=endpoint)
            streams.append(ProbeStream(track_type=TrackType.from_codec_type(s.get("codec_type")), raw=s))

        if not streams and not fmt:
            raise ProbeUnavailable("ffprobe reported no streams; endpoint has no live input", endpoint=endpoint)

        return ProbeResult(streams=tuple(streams), format=dict(fmt) if fmt else None)
