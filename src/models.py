from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from typing import List, Optional

class PauseEvent(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False, revalidate_instances="always")

    timestamp: float = Field(ge=0, strict=True)  # media seconds where playback stopped
    duration: float = Field(gt=0, strict=True)   # real seconds playback stayed stopped

PauseMap = TypeAdapter(List[PauseEvent])

class PendingPause(BaseModel):
    timestamp: float
    started_at: float  # recorder clock reading at the pause

class ActiveSyncPause(BaseModel):
    event: PauseEvent
    effective_duration: float
    deadline: float  # loop time at which playback resumes
    remaining: float

# HTTP request bodies
class SourceRequest(BaseModel):
    source: str = Field(min_length=1)

class RecordingRequest(BaseModel):
    enabled: bool
    clear_existing: bool = False

class ToggleRequest(BaseModel):
    enabled: bool

class ServiceStatus(BaseModel):
    source: Optional[str] = None
    recording: bool = False
    syncing: bool = False
    demo_mode: bool = False
    events: int = 0
    played_seconds: float = 0.0
    duration_seconds: float = 0.0
    time_display: str = "00:00 / 00:00"
    sync_pause_remaining: Optional[float] = None
    countdown: Optional[str] = None
    error: Optional[str] = None
