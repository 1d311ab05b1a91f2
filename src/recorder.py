import logging
import time
from typing import Callable, Optional
from pydantic import ValidationError
from .clients.player import MediaPlayer, PlayerNotAttachedError
from .models import PauseEvent, PendingPause
from .session import PlaybackSession

logger = logging.getLogger(__name__)

class EventRecorder:
    """
    Turns user pause/resume cycles into pause events while recording.

    Playing -> pause notification -> Paused(timestamp, clock) -> play notification
    -> emit event -> Playing. A reset in between drops the open pause.
    """

    def __init__(
        self,
        session: PlaybackSession,
        on_pause_event: Callable[[PauseEvent], None],
        player: Optional[MediaPlayer] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session = session
        self.on_pause_event = on_pause_event
        self.player = player
        self.clock = clock
        self.pending: Optional[PendingPause] = None

    def _active(self) -> bool:
        s = self.session
        return s.recording and not s.syncing and not s.sync_pausing

    def handle_pause(self, media_time: Optional[float] = None):
        if not self._active():
            return
        if media_time is None:
            if self.player is None:
                raise PlayerNotAttachedError("Recorder has no player to read the pause position from")
            media_time = self.player.get_current_time()

        self.pending = PendingPause(timestamp=media_time, started_at=self.clock())
        logger.debug(f"Pause opened at {media_time:.2f}s")

    def handle_play(self):
        pending = self.pending
        if pending is None:
            return
        self.pending = None
        if not self._active():
            return

        duration = self.clock() - pending.started_at
        try:
            event = PauseEvent(timestamp=pending.timestamp, duration=duration)
        except ValidationError:
            logger.warning(f"Dropped malformed pause at {pending.timestamp:.2f}s lasting {duration:.3f}s")
            return

        logger.info(f"Recorded pause at {event.timestamp:.2f}s for {event.duration:.2f}s")
        self.on_pause_event(event)

    def reset(self):
        if self.pending is not None:
            logger.info(f"Discarded open pause at {self.pending.timestamp:.2f}s")
        self.pending = None
