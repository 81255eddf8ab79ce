"""Frame channel and counting session.

A frame source running on its own thread offers frames to a
:class:`FrameChannel`; a :class:`CounterSession` drains the channel on a single
worker thread and feeds each frame to the counter in arrival order. When the
consumer falls behind, the channel drops the oldest queued frame so the counter
always works on fresh input.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from pushcount.config import CounterConfig
from pushcount.counter import Phase, RepCounterState, advance
from pushcount.landmarks import LandmarkFrame

logger = logging.getLogger(__name__)

_CLOSED = object()


class ChannelClosed(RuntimeError):
    """Raised when offering a frame to a closed channel."""


class FrameChannel:
    """Bounded single-consumer queue of landmark frames with keep-latest drops."""

    def __init__(self, maxsize: int = 4) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=maxsize + 1)
        self._maxsize = maxsize
        self._lock = threading.Lock()
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def offer(self, frame: LandmarkFrame) -> bool:
        """Queue ``frame``; return False if a stale frame had to be dropped."""
        with self._lock:
            if self._closed:
                raise ChannelClosed("cannot offer frames to a closed channel")
            dropped = False
            while self._queue.qsize() >= self._maxsize:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    break
                self.dropped += 1
                dropped = True
            self._queue.put_nowait(frame)
        if dropped:
            logger.debug("dropped stale frame (total %d)", self.dropped)
        return not dropped

    def close(self) -> None:
        """Stop the stream; frames already queued are still delivered."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            # One slot is reserved for the sentinel.
            self._queue.put_nowait(_CLOSED)

    def get(self, timeout: Optional[float] = None) -> Optional[LandmarkFrame]:
        """Return the next frame, or None once the channel is closed and drained."""
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            # Leave the sentinel for any other waiter.
            self._queue.put_nowait(_CLOSED)
            return None
        return item  # type: ignore[return-value]

    def __iter__(self) -> Iterator[LandmarkFrame]:
        while True:
            frame = self.get()
            if frame is None:
                return
            yield frame


@dataclass(frozen=True)
class SessionSnapshot:
    """What a UI layer needs after each frame."""

    rep_count: int
    instruction: str
    phase: Phase
    image_size: Tuple[int, int]
    frames_processed: int


class CounterSession:
    """Owns the counter state for one exercise session.

    ``process`` is the synchronous entry point; ``start`` spawns a worker that
    drains a channel and calls it for every frame. Either way only one thread
    may advance the state at a time.
    """

    def __init__(
        self,
        config: Optional[CounterConfig] = None,
        *,
        on_update: Optional[Callable[[SessionSnapshot], None]] = None,
    ) -> None:
        self.config = config or CounterConfig()
        self.state = RepCounterState()
        self.on_update = on_update
        self.frames_processed = 0
        self.image_size: Tuple[int, int] = (0, 0)
        self._worker: Optional[threading.Thread] = None

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            rep_count=self.state.rep_count,
            instruction=self.state.last_instruction.value,
            phase=self.state.phase,
            image_size=self.image_size,
            frames_processed=self.frames_processed,
        )

    def process(self, frame: LandmarkFrame) -> SessionSnapshot:
        self.state = advance(self.state, frame, self.config)
        self.frames_processed += 1
        if frame.image_width and frame.image_height:
            self.image_size = frame.image_size
        snap = self.snapshot()
        if self.on_update is not None:
            self.on_update(snap)
        return snap

    def run(self, channel: FrameChannel) -> SessionSnapshot:
        """Consume ``channel`` until it is closed; return the final snapshot."""
        for frame in channel:
            self.process(frame)
        return self.snapshot()

    def start(self, channel: FrameChannel) -> threading.Thread:
        if self._worker is not None and self._worker.is_alive():
            raise RuntimeError("session worker already running")

        def _target() -> None:
            logger.info("counter session started")
            try:
                final = self.run(channel)
            except Exception:
                logger.exception("counter session failed after %d frames", self.frames_processed)
                channel.close()
                return
            logger.info("counter session stopped after %d frames, %d reps",
                        final.frames_processed, final.rep_count)

        self._worker = threading.Thread(target=_target, name="pushcount-session", daemon=True)
        self._worker.start()
        return self._worker

    def join(self, timeout: Optional[float] = None) -> None:
        if self._worker is not None:
            self._worker.join(timeout)


def replay(
    frames: Iterable[LandmarkFrame],
    config: Optional[CounterConfig] = None,
    initial: Optional[RepCounterState] = None,
) -> List[RepCounterState]:
    """Fold ``frames`` through the counter and return the state after each one."""
    config = config or CounterConfig()
    state = initial or RepCounterState()
    states: List[RepCounterState] = []
    for frame in frames:
        state = advance(state, frame, config)
        states.append(state)
    return states
