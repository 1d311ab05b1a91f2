import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional
from ..config import settings

logger = logging.getLogger(__name__)

class PlayerNotAttachedError(RuntimeError):
    pass

class PlayerListener:
    """Receiver for player notifications. Override what you need."""

    def on_play(self):
        pass

    def on_pause(self):
        pass

    def on_progress(self, played_seconds: float):
        pass

    def on_seek(self, position: float):
        pass

    def on_duration(self, duration: float):
        pass

class MediaPlayer(ABC):
    def __init__(self):
        self._listeners: List[PlayerListener] = []

    def add_listener(self, listener: PlayerListener):
        self._listeners.append(listener)

    def _notify(self, name: str, *args):
        for listener in list(self._listeners):
            getattr(listener, name)(*args)

    @abstractmethod
    def load(self, source: str): ...

    @abstractmethod
    def play(self): ...

    @abstractmethod
    def pause(self): ...

    @abstractmethod
    def seek(self, seconds: float): ...

    @abstractmethod
    def get_current_time(self) -> float: ...

class SimulatedPlayer(MediaPlayer):
    """
    Media clock without any media: position advances in real time while playing,
    and `run()` emits progress notifications at the configured cadence.
    """

    def __init__(self, duration: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        super().__init__()
        self.clock = clock
        self.source: Optional[str] = None
        self.duration = duration if duration is not None else settings.MEDIA_DURATION_SECONDS
        self.playing = False
        self.running = True
        self._position = 0.0
        self._anchor = 0.0  # clock reading when playback last started

    def _require_source(self):
        if self.source is None:
            raise PlayerNotAttachedError("No media loaded")

    def load(self, source: str):
        self.source = source
        self.playing = False
        self._position = 0.0
        logger.info(f"Loaded {source} ({self.duration:.1f}s)")
        self._notify("on_duration", self.duration)

    def get_current_time(self) -> float:
        self._require_source()
        if not self.playing:
            return self._position
        return min(self.duration, self._position + self.clock() - self._anchor)

    def play(self):
        self._require_source()
        if self.playing:
            return
        self._anchor = self.clock()
        self.playing = True
        self._notify("on_play")

    def pause(self):
        self._require_source()
        if not self.playing:
            return
        self._position = self.get_current_time()
        self.playing = False
        self._notify("on_pause")

    def seek(self, seconds: float):
        self._require_source()
        self._position = max(0.0, min(self.duration, seconds))
        self._anchor = self.clock()
        self._notify("on_seek", self._position)

    async def run(self):
        interval = settings.PLAYER_PROGRESS_INTERVAL_MS / 1000.0
        logger.info(f"Player loop started ({settings.PLAYER_PROGRESS_INTERVAL_MS}ms progress)")
        while self.running:
            await asyncio.sleep(interval)
            if not self.playing:
                continue
            try:
                played = self.get_current_time()
                self._notify("on_progress", played)
                if played >= self.duration:
                    self.pause()
            except Exception as e:
                logger.error(f"Error in player loop: {e}", exc_info=True)

    def close(self):
        self.running = False
        self.playing = False
