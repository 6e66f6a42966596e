# tests/conftest.py
from __future__ import annotations

import threading
import time
from typing import Any, Dict, List, Optional, Tuple

import pytest

from streamstats.common.concurrency.thread_manager import ThreadManager
from streamstats.common.settings import get_settings
from streamstats.domain.entities.probe import ProbeResult
from streamstats.domain.errors import ProbeUnavailable
from streamstats.services.probe.ffprobe_adapter import FFprobeAdapter
from streamstats.services.registry.streamer_registry import StreamerRegistry

TEST_ORIGIN = "rtmp://test-origin/live"


def ffprobe_result(streams: List[Dict[str, Any]], fmt: Optional[Dict[str, Any]] = None) -> ProbeResult:
    """Build a ProbeResult the same way the adapter does from ffprobe JSON."""
    data: Dict[str, Any] = {"streams": streams}
    if fmt is not None:
        data["format"] = fmt
    return FFprobeAdapter._parse_ffprobe_json(data)


def video_stream(codec="h264", width=1920, height=1080, bit_rate="2500000", **extra) -> Dict[str, Any]:
    s = {
        "codec_type": "video",
        "codec_name": codec,
        "width": width,
        "height": height,
        "bit_rate": bit_rate,
        "avg_frame_rate": "30/1",
        "has_b_frames": 0,
        "start_time": "0.000000",
    }
    s.update(extra)
    return s


def audio_stream(codec="aac", bit_rate="128000", sample_rate="44100", channels=2, **extra) -> Dict[str, Any]:
    s = {
        "codec_type": "audio",
        "codec_name": codec,
        "bit_rate": bit_rate,
        "sample_rate": sample_rate,
        "channels": channels,
    }
    s.update(extra)
    return s


class FakeProbe:
    """
    Scriptable StreamProbePort. Outcomes are queued per identity (the last
    path segment of the endpoint) and consumed in call order. An optional
    threading.Event gate holds the probe "in flight" until the test sets it.
    Callables are invoked, so a test can make the port raise.
    """

    def __init__(self) -> None:
        self.calls: List[str] = []
        self.default = ProbeUnavailable("no live input")
        self._scripts: Dict[str, List[Tuple[Any, Optional[threading.Event]]]] = {}
        self._lock = threading.Lock()

    def script(self, identity: str, outcome: Any, gate: Optional[threading.Event] = None) -> None:
        with self._lock:
            self._scripts.setdefault(identity, []).append((outcome, gate))

    def probe(self, endpoint: str):
        identity = endpoint.rsplit("/", 1)[-1]
        with self._lock:
            self.calls.append(endpoint)
            queue = self._scripts.get(identity) or []
            outcome, gate = queue.pop(0) if queue else (self.default, None)
        if gate is not None:
            assert gate.wait(5), "test gate was never released"
        if callable(outcome):
            return outcome()
        return outcome

    def wait_for_calls(self, n: int, timeout: float = 5.0) -> None:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            with self._lock:
                if len(self.calls) >= n:
                    return
            time.sleep(0.005)
        raise AssertionError(f"expected {n} probe calls, saw {len(self.calls)}")


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def fake_probe() -> FakeProbe:
    return FakeProbe()


@pytest.fixture()
def registry(fake_probe):
    runner = ThreadManager(name="test-probe", max_workers=4)
    reg = StreamerRegistry(prober=fake_probe, rtmp_origin=TEST_ORIGIN, runner=runner)
    try:
        yield reg
    finally:
        reg.shutdown(wait=True)


@pytest.fixture()
def make_result():
    return ffprobe_result


@pytest.fixture()
def video():
    return video_stream


@pytest.fixture()
def audio():
    return audio_stream
