import asyncio
import logging
import time
from typing import Any, Iterable, Optional, Union
from .clients.player import MediaPlayer, PlayerListener
from .engine import SyncPlayer
from .models import PauseEvent, ServiceStatus
from .recorder import EventRecorder
from .session import PlaybackSession
from .state import PauseEventStore

logger = logging.getLogger(__name__)

NO_SOURCE_ERROR = "Please load a video before enabling sync mode"
NO_EVENTS_ERROR = "No pause events to sync. Please record or upload pause events first."
INVALID_EVENT_ERROR = "Invalid pause event detected. Please try again."
INVALID_MAP_ERROR = "Invalid pause map. Please check your input."

def format_time(seconds: float) -> str:
    minutes, secs = divmod(int(max(0.0, seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"

class PauseSyncService(PlayerListener):
    """
    Hosts one player with its recorder and sync player.

    Owns the pause map and the mode flags, keeps recording and sync mutually
    exclusive and reports refused operations through `error`.
    """

    def __init__(
        self,
        store: PauseEventStore,
        player: MediaPlayer,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.store = store
        self.player = player
        self.session = PlaybackSession()
        self.source: Optional[str] = None
        self.error: Optional[str] = None
        self.played = 0.0
        self.duration = 0.0

        clock = loop.time if loop is not None else time.monotonic
        self.recorder = EventRecorder(self.session, self.handle_pause_event, player=player, clock=clock)
        self.sync_player = SyncPlayer(self.session, player=player, loop=loop)
        player.add_listener(self)

    # Player notifications

    def on_play(self):
        self.recorder.handle_play()

    def on_pause(self):
        self.recorder.handle_pause()

    def on_progress(self, played_seconds: float):
        self.played = played_seconds
        self.sync_player.handle_progress(played_seconds)

    def on_seek(self, position: float):
        self.sync_player.handle_seek(position)

    def on_duration(self, duration: float):
        self.duration = duration

    # Source and modes

    def load_source(self, source: str):
        if self.session.recording or self.session.syncing:
            self.session.recording = False
            self.session.syncing = False
        self.recorder.reset()
        self.sync_player.reset()
        self.played = 0.0
        self.source = source
        self.error = None
        self.player.load(source)

    def set_recording(self, enabled: bool, clear_existing: bool = False) -> bool:
        if enabled and self.session.syncing:
            self._stop_sync()
        if enabled and clear_existing and len(self.store):
            logger.info(f"Clearing {len(self.store)} pause events for a new recording")
            self.store.clear()
            self.store.save()
        if not enabled:
            self.recorder.reset()
        self.session.recording = enabled
        logger.info(f"Recording {'enabled' if enabled else 'disabled'}")
        self.error = None
        return True

    def set_sync(self, enabled: bool) -> bool:
        if not enabled:
            self._stop_sync()
            self.error = None
            return True

        if not self.source:
            return self._refuse(NO_SOURCE_ERROR)
        if not len(self.store):
            return self._refuse(NO_EVENTS_ERROR)

        if self.session.recording:
            self.session.recording = False
        self.recorder.reset()
        self.session.syncing = True
        self.sync_player.start(self.store.events)
        self.error = None
        return True

    def _stop_sync(self):
        if self.session.syncing:
            logger.info("Sync mode disabled")
        self.session.syncing = False
        self.sync_player.stop()

    def set_demo_mode(self, enabled: bool):
        self.session.demo_mode = enabled
        logger.info(f"Demo mode {'enabled' if enabled else 'disabled'}")

    def restart(self):
        """Back to the top; in sync mode every pause point fires again."""
        if self.session.syncing:
            self.sync_player.start()
        else:
            self.session.processed_keys.clear()
            self.player.seek(0)
            self.player.play()

    # Pause map

    def handle_pause_event(self, event: Union[PauseEvent, dict]) -> Optional[PauseEvent]:
        added = self.store.add(event)
        if added is None:
            self.error = INVALID_EVENT_ERROR
            return None
        self.store.save()
        self.error = None
        return added

    def replace_pause_map(self, events: Iterable[Any]) -> bool:
        if not self.store.replace(events):
            return self._refuse(INVALID_MAP_ERROR)
        return self._pause_map_changed()

    def import_pause_map(self, payload: Union[str, bytes]) -> bool:
        if not self.store.import_json(payload):
            return self._refuse(INVALID_MAP_ERROR)
        return self._pause_map_changed()

    def _pause_map_changed(self) -> bool:
        self.store.save()
        self.error = None
        if self.session.syncing:
            self.sync_player.start(self.store.events)
        return True

    def clear_pause_map(self):
        self.store.clear()
        self.store.save()
        if self.session.syncing:
            self._stop_sync()
        self.error = None

    def reset_all(self):
        self.session.recording = False
        self._stop_sync()
        self.recorder.reset()
        self.clear_pause_map()

    def close(self):
        self.recorder.reset()
        self.sync_player.close()

    def _refuse(self, message: str) -> bool:
        logger.warning(message)
        self.error = message
        return False

    def status(self) -> ServiceStatus:
        remaining = self.sync_player.remaining
        return ServiceStatus(
            source=self.source,
            recording=self.session.recording,
            syncing=self.session.syncing,
            demo_mode=self.session.demo_mode,
            events=len(self.store),
            played_seconds=self.played,
            duration_seconds=self.duration,
            time_display=f"{format_time(self.played)} / {format_time(self.duration)}",
            sync_pause_remaining=remaining,
            countdown=f"Resuming in {remaining:.1f}s" if remaining is not None and remaining > 0 else None,
            error=self.error,
        )
