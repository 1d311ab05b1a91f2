import asyncio
import logging
from typing import Callable, Iterable, List, Optional
from .clients.player import MediaPlayer, PlayerNotAttachedError
from .config import settings
from .models import ActiveSyncPause, PauseEvent
from .session import PlaybackSession

logger = logging.getLogger(__name__)

def effective_duration(duration: float, demo_mode: bool = False) -> float:
    floor = settings.SYNC_DEMO_MIN_PAUSE_SECONDS if demo_mode else settings.SYNC_MIN_PAUSE_SECONDS
    return max(duration, floor)

class SyncPlayer:
    """
    Replays a pause map against live playback.

    Each progress notification is checked against the map; when media time lands
    just past an unprocessed pause point the player is paused and resumed again
    after the (floored) recorded duration. A single deadline drives the resume,
    the countdown only reads it.
    """

    def __init__(
        self,
        session: PlaybackSession,
        player: Optional[MediaPlayer] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        on_countdown: Optional[Callable[[Optional[float]], None]] = None,
    ):
        self.session = session
        self.player = player
        self.on_countdown = on_countdown
        self.events: List[PauseEvent] = []
        self.active: Optional[ActiveSyncPause] = None
        self.closed = False
        self._guard = session.claim_guard()
        self._loop = loop
        self._last_check: Optional[float] = None
        self._tick_handle: Optional[asyncio.TimerHandle] = None
        self._resume_handle: Optional[asyncio.TimerHandle] = None

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def remaining(self) -> Optional[float]:
        return self.active.remaining if self.active else None

    def _require_player(self) -> MediaPlayer:
        if self.player is None:
            raise PlayerNotAttachedError("Sync player has no media player attached")
        return self.player

    def load(self, events: Iterable[PauseEvent]):
        self.events = list(events)

    def start(self, events: Optional[Iterable[PauseEvent]] = None):
        """Begin (or re-begin) a sync run from the top of the media."""
        if events is not None:
            self.load(events)
        player = self._require_player()
        self._clear_pause()
        self.session.processed_keys.clear()
        self._last_check = None
        logger.info(f"Sync run started with {len(self.events)} pause points")
        player.seek(0)
        player.play()

    def stop(self):
        if self.active is not None:
            logger.info(f"Sync pause at {self.active.event.timestamp:.2f}s cancelled")
        self._clear_pause()

    def reset(self):
        """Forget the current run, e.g. when the media source changes."""
        self._clear_pause()
        self.session.processed_keys.clear()
        self._last_check = None

    def close(self):
        self._clear_pause()
        self.closed = True

    def handle_progress(self, played_seconds: float):
        s = self.session
        if self.closed or not s.syncing or s.recording or not self.events:
            return

        now = self.loop.time()
        if self._last_check is not None and (now - self._last_check) * 1000 < settings.SYNC_DEBOUNCE_MS:
            return
        self._last_check = now

        if s.sync_pausing:
            return

        event = self._take_due_event(played_seconds)
        if event is not None:
            self._begin_pause(event, now)

    def handle_seek(self, position: Optional[float] = None):
        if self.closed:
            return
        if position is None:
            position = self._require_player().get_current_time()
        self.session.rearm_near(position)

    def _take_due_event(self, t: float) -> Optional[PauseEvent]:
        window = settings.SYNC_ARRIVAL_WINDOW_SECONDS
        for event in self.events:
            if t >= event.timestamp and t - event.timestamp < window and not self.session.is_processed(event.timestamp):
                self.session.mark_processed(event.timestamp)
                return event
        return None

    def _begin_pause(self, event: PauseEvent, now: float):
        player = self._require_player()
        effective = effective_duration(event.duration, self.session.demo_mode)

        self._guard.engage()
        self.active = ActiveSyncPause(
            event=event,
            effective_duration=effective,
            deadline=now + effective,
            remaining=effective,
        )
        logger.info(f"Sync pause at {event.timestamp:.2f}s for {effective:.2f}s")
        player.pause()

        self._emit_countdown(effective)
        self._tick_handle = self.loop.call_later(settings.SYNC_COUNTDOWN_TICK_SECONDS, self._tick)
        self._resume_handle = self.loop.call_later(effective, self._resume)

    def _tick(self):
        self._tick_handle = None
        if self.active is None:
            return
        remaining = max(0.0, round(self.active.deadline - self.loop.time(), 1))
        self.active.remaining = remaining
        self._emit_countdown(remaining)
        if remaining > 0:
            self._tick_handle = self.loop.call_later(settings.SYNC_COUNTDOWN_TICK_SECONDS, self._tick)

    def _resume(self):
        self._resume_handle = None
        if self.closed or self.active is None:
            return
        self._clear_pause()
        self._require_player().play()

    def _clear_pause(self):
        for handle in (self._tick_handle, self._resume_handle):
            if handle is not None:
                handle.cancel()
        self._tick_handle = None
        self._resume_handle = None
        if self.active is not None:
            self.active = None
            self._emit_countdown(None)
        self._guard.release()

    def _emit_countdown(self, remaining: Optional[float]):
        if self.on_countdown:
            self.on_countdown(remaining)
