import logging
import math
from typing import Set
from .config import settings

logger = logging.getLogger(__name__)

def timestamp_key(timestamp: float) -> int:
    """Quantize a media timestamp to the processed-key grid (half rounds up)."""
    return math.floor(timestamp * settings.TIMESTAMP_KEY_SCALE + 0.5)

def key_timestamp(key: int) -> float:
    return key / settings.TIMESTAMP_KEY_SCALE

class SyncGuard:
    """Write handle for the session's sync-pause flag. Only one exists per session."""

    def __init__(self, session: "PlaybackSession"):
        self._session = session

    def engage(self):
        self._session._sync_pausing = True

    def release(self):
        self._session._sync_pausing = False

class PlaybackSession:
    """
    State shared by the recorder and the sync player for one hosted player.

    Mode flags are written by the hosting service. The sync-pause flag is
    written only through the guard handed to the sync player; everybody else
    reads `sync_pausing`.
    """

    def __init__(self):
        self.recording = False
        self.syncing = False
        self.demo_mode = settings.DEMO_MODE
        self.processed_keys: Set[int] = set()
        self._sync_pausing = False
        self._guard_claimed = False

    @property
    def sync_pausing(self) -> bool:
        return self._sync_pausing

    def claim_guard(self) -> SyncGuard:
        if self._guard_claimed:
            raise RuntimeError("sync guard already claimed for this session")
        self._guard_claimed = True
        return SyncGuard(self)

    def is_processed(self, timestamp: float) -> bool:
        return timestamp_key(timestamp) in self.processed_keys

    def mark_processed(self, timestamp: float):
        self.processed_keys.add(timestamp_key(timestamp))

    def rearm_near(self, position: float) -> int:
        """
        Forget processed keys within the re-arm window of `position`.
        Applies to both directions, so a point just passed by a forward seek fires again.
        """
        window = settings.SEEK_REARM_WINDOW_SECONDS
        kept = {k for k in self.processed_keys if abs(key_timestamp(k) - position) > window}
        rearmed = len(self.processed_keys) - len(kept)
        self.processed_keys = kept
        if rearmed:
            logger.debug(f"Re-armed {rearmed} pause points around {position:.1f}s")
        return rearmed
