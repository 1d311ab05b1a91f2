import json
import logging
import os
import fcntl
from operator import attrgetter
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union
from pydantic import ValidationError
from .models import PauseEvent, PauseMap
from .config import settings

logger = logging.getLogger(__name__)

class PauseEventStore:
    """
    Ordered collection of pause events.

    The list is sorted by timestamp after every change and only ever holds
    validated events. Callers get copies, never the backing list.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else None
        self._events: List[PauseEvent] = []
        self.read_only = False
        if self.path:
            self._load()

    def __len__(self) -> int:
        return len(self._events)

    @property
    def events(self) -> List[PauseEvent]:
        return list(self._events)

    def _load(self):
        if not self.path.exists():
            logger.info(f"No pause map found at {self.path}, starting empty.")
            return

        try:
            with open(self.path, 'rb') as f:
                self._events = _sorted(PauseMap.validate_json(f.read()))
            logger.info(f"Loaded {len(self._events)} pause events from {self.path}")
        except Exception as e:
            logger.error(f"Failed to load pause map: {e}. Starting empty.", exc_info=True)

    def save(self):
        if not self.path or not settings.PERSIST_ENABLED or self.read_only:
            return

        tmp_path = self.path.with_suffix('.tmp')
        try:
            with open(tmp_path, 'w') as f:
                try:
                    fcntl.flock(f, fcntl.LOCK_EX | fcntl.LOCK_NB)
                except BlockingIOError:
                    logger.warning("Could not acquire lock for pause map save. Skipping save.")
                    return

                try:
                    f.write(self.export_json())
                    f.flush()
                    os.fsync(f.fileno())
                finally:
                    fcntl.flock(f, fcntl.LOCK_UN)

            os.rename(tmp_path, self.path)

        except OSError as e:
            logger.error(f"Failed to save pause map to {self.path}: {e}")
            self.read_only = True

    def add(self, event: Union[PauseEvent, dict]) -> Optional[PauseEvent]:
        """Validate and insert one event. Returns None if it was rejected."""
        try:
            event = PauseEvent.model_validate(event)
        except ValidationError as e:
            logger.warning(f"Rejected pause event {event!r}: {e.error_count()} validation error(s)")
            return None

        self._events = _sorted(self._events + [event])
        return event

    def replace(self, events: Iterable[Any]) -> bool:
        """
        Swap the whole list for `events`.
        All-or-nothing: one malformed entry rejects the lot and the store is left as it was.
        """
        try:
            validated = PauseMap.validate_python(list(events))
        except (ValidationError, TypeError) as e:
            logger.warning(f"Rejected pause map replacement: {e}")
            return False

        self._events = _sorted(validated)
        logger.info(f"Pause map replaced with {len(self._events)} events")
        return True

    def import_json(self, payload: Union[str, bytes]) -> bool:
        try:
            validated = PauseMap.validate_json(payload)
        except ValidationError as e:
            logger.warning(f"Rejected pause map import: {e.error_count()} validation error(s)")
            return False

        self._events = _sorted(validated)
        logger.info(f"Imported {len(self._events)} pause events")
        return True

    def export_json(self) -> str:
        return json.dumps([e.model_dump() for e in self._events], indent=2)

    def clear(self):
        self._events = []

def _sorted(events: Iterable[PauseEvent]) -> List[PauseEvent]:
    # stable, so equal timestamps keep insertion order
    return sorted(events, key=attrgetter("timestamp"))
