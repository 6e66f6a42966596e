# streamstats/services/registry/streamer_registry.py
from __future__ import annotations

import itertools
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from streamstats.common.concurrency.thread_manager import ThreadManager
from streamstats.common.logging import get_logger
from streamstats.common.probe.ffprobe_helpers import ingest_endpoint
from streamstats.common.settings import get_settings
from streamstats.domain.dataclasses.reports import RefreshStats
from streamstats.domain.entities.streamer import StreamerState
from streamstats.domain.errors import ProbeError, ProbeUnavailable
from streamstats.domain.ports.probe import ProbeOutcome, StreamProbePort
from streamstats.services.mappers.tracks import partition_tracks, to_container_format

logger = get_logger()


class StreamerRegistry:
    """
    In-memory registry of live streamers and their last known stream stats.

    Concurrency model
    -----------------
    - One lock guards the entry map, the epoch map and the refresh stats.
      Every critical section is a plain dict operation; nothing slow ever
      runs under the lock.
    - Each registration gets a fresh epoch from a process-wide counter.
      A probe captures the epoch of the entry it was scheduled for and its
      outcome is applied only if that epoch is still current. Removal drops
      the epoch, re-adding issues a new one, so late results for a removed
      (or removed and re-added) streamer are discarded.
    - Probes run on a ThreadManager pool. add_streamer() and request_refresh()
      return as soon as the probe is scheduled.
    - Snapshots are frozen StreamerState objects; merges replace them, never
      mutate them.
    """

    def __init__(
        self,
        prober: Optional[StreamProbePort] = None,
        *,
        rtmp_origin: Optional[str] = None,
        runner: Optional[ThreadManager] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        cfg = get_settings()
        if prober is None:
            from streamstats.services.probe.ffprobe_adapter import FFprobeAdapter  # default adapter
            prober = FFprobeAdapter()
        self._prober = prober
        self._origin = rtmp_origin or cfg.rtmp_origin
        self._runner = runner or ThreadManager(
            name="probe",
            max_workers=cfg.concurrency.probe_workers,
            thread_name_prefix="streamstats-probe",
        )
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self._lock = threading.Lock()
        self._streamers: Dict[str, StreamerState] = {}
        self._epochs: Dict[str, int] = {}
        self._epoch_seq = itertools.count(1)
        self._stats = RefreshStats()

    # -------------------------
    # Mutations
    # -------------------------
    def add_streamer(self, identity: str) -> None:
        """Track `identity` (resetting any existing entry) and schedule a probe."""
        if not identity:
            raise ValueError("identity must be a non-empty string")
        state = StreamerState(identity=identity, last_updated=self._clock())
        with self._lock:
            epoch = next(self._epoch_seq)
            reset = identity in self._streamers
            self._streamers[identity] = state
            self._epochs[identity] = epoch
            self._stats.forget(identity)
        logger.info("streamer %s %s (epoch %d)", identity, "reset" if reset else "added", epoch)
        self._schedule_probe(identity, epoch)

    def remove_streamer(self, identity: str) -> None:
        """Stop tracking `identity`. In-flight probes for it will be discarded."""
        with self._lock:
            removed = self._streamers.pop(identity, None) is not None
            self._epochs.pop(identity, None)
            self._stats.forget(identity)
        if removed:
            logger.info("streamer %s removed", identity)

    def request_refresh(self, query: str) -> bool:
        """Schedule a new probe for the streamer matching `query`; False if unknown."""
        with self._lock:
            identity = self._resolve_locked(query)
            epoch = self._epochs.get(identity) if identity is not None else None
        if identity is None or epoch is None:
            return False
        self._schedule_probe(identity, epoch)
        return True

    # -------------------------
    # Reads
    # -------------------------
    def get_streamer_list(self) -> List[str]:
        with self._lock:
            return list(self._streamers)

    def resolve_identity(self, query: str) -> Optional[str]:
        """Case-insensitive lookup of the canonical identity, or None."""
        with self._lock:
            return self._resolve_locked(query)

    def get_streamer_data(self, query: str) -> Optional[StreamerState]:
        with self._lock:
            identity = self._resolve_locked(query)
            if identity is None:
                return None
            # StreamerState is frozen; handing out the object itself is a snapshot
            return self._streamers[identity]

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._streamers

    def __len__(self) -> int:
        with self._lock:
            return len(self._streamers)

    def stats(self) -> RefreshStats:
        with self._lock:
            return self._stats.snapshot()

    # -------------------------
    # Lifecycle
    # -------------------------
    def join(self, timeout: Optional[float] = None) -> bool:
        """Block until every probe scheduled so far has been merged or discarded."""
        return self._runner.join(timeout)

    def shutdown(self, wait: bool = True) -> None:
        self._runner.shutdown(wait=wait, cancel_futures=not wait)

    # -------------------------
    # Internals
    # -------------------------
    def _resolve_locked(self, query: str) -> Optional[str]:
        if not query:
            return None
        # exact match first, then first-registered case-insensitive match
        if query in self._streamers:
            return query
        wanted = query.lower()
        return next((name for name in self._streamers if name.lower() == wanted), None)

    def _schedule_probe(self, identity: str, epoch: int) -> None:
        endpoint = ingest_endpoint(self._origin, identity)
        with self._lock:
            self._stats.scheduled += 1
        try:
            self._runner.submit(self._probe_and_merge, identity, epoch, endpoint)
        except RuntimeError:
            # runner already shut down; treat as a failed probe so counters add up
            self._merge_probe_result(
                identity, epoch, ProbeUnavailable("probe runner is shut down", endpoint=endpoint)
            )

    def _probe_and_merge(self, identity: str, epoch: int, endpoint: str) -> None:
        try:
            outcome = self._prober.probe(endpoint)
        except Exception as ex:
            logger.exception("probe port raised for %s", endpoint)
            outcome = ProbeUnavailable(f"probe raised {type(ex).__name__}: {ex}", endpoint=endpoint)
        self._merge_probe_result(identity, epoch, outcome)

    def _merge_probe_result(self, identity: str, epoch: int, outcome: ProbeOutcome) -> None:
        # normalise outside the lock; it's pure
        if isinstance(outcome, ProbeError):
            update = None
        else:
            video, audio = partition_tracks(outcome)
            update = (video, audio, to_container_format(outcome.format))

        with self._lock:
            if self._epochs.get(identity) != epoch:
                self._stats.discarded += 1
                logger.debug("discarding probe result for %s (epoch %d no longer current)", identity, epoch)
                return

            if update is None:
                self._stats.record_failure(identity, str(outcome), at=self._clock())
                logger.warning("probe failed for %s: %s", identity, outcome)
                return

            video, audio, fmt = update
            self._streamers[identity] = self._streamers[identity].with_probe(
                video_tracks=video,
                audio_tracks=audio,
                container_format=fmt,
                at=self._clock(),
            )
            self._stats.record_success(identity)

        logger.info("streamer %s updated: %d video, %d audio track(s)", identity, len(video), len(audio))
