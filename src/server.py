from fastapi import FastAPI, Depends, HTTPException, Header, Request
from typing import List, Optional
from .service import PauseSyncService
from .models import PauseEvent, RecordingRequest, ServiceStatus, SourceRequest, ToggleRequest
from .config import settings

app = FastAPI(title="Pause Sync")
service: Optional[PauseSyncService] = None

def get_token(x_token: Optional[str] = Header(None, alias="X-Token")):
    if settings.HTTP_SERVER_TOKEN and x_token != settings.HTTP_SERVER_TOKEN:
        raise HTTPException(status_code=401, detail="Invalid token")

def get_service() -> PauseSyncService:
    if not service:
        raise HTTPException(status_code=503, detail="Service not ready")
    return service

@app.get("/healthz")
def healthz():
    if not service:
        return {"status": "starting"}
    return {"status": "ok"}

@app.get("/status", response_model=ServiceStatus, dependencies=[Depends(get_token)])
async def status(svc: PauseSyncService = Depends(get_service)):
    return svc.status()

@app.get("/pause-map", response_model=List[PauseEvent], dependencies=[Depends(get_token)])
async def get_pause_map(svc: PauseSyncService = Depends(get_service)):
    return svc.store.events

@app.put("/pause-map", response_model=List[PauseEvent], dependencies=[Depends(get_token)])
async def put_pause_map(request: Request, svc: PauseSyncService = Depends(get_service)):
    # Raw body so unparsable JSON is refused by the store, not by FastAPI
    if not svc.import_pause_map(await request.body()):
        raise HTTPException(status_code=400, detail=svc.error)
    return svc.store.events

@app.delete("/pause-map", dependencies=[Depends(get_token)])
async def delete_pause_map(svc: PauseSyncService = Depends(get_service)):
    svc.clear_pause_map()
    return {"events": 0}

@app.post("/source", response_model=ServiceStatus, dependencies=[Depends(get_token)])
async def load_source(body: SourceRequest, svc: PauseSyncService = Depends(get_service)):
    svc.load_source(body.source)
    return svc.status()

@app.post("/recording", response_model=ServiceStatus, dependencies=[Depends(get_token)])
async def set_recording(body: RecordingRequest, svc: PauseSyncService = Depends(get_service)):
    svc.set_recording(body.enabled, clear_existing=body.clear_existing)
    return svc.status()

@app.post("/sync", response_model=ServiceStatus, dependencies=[Depends(get_token)])
async def set_sync(body: ToggleRequest, svc: PauseSyncService = Depends(get_service)):
    if not svc.set_sync(body.enabled):
        raise HTTPException(status_code=409, detail=svc.error)
    return svc.status()

@app.post("/demo", response_model=ServiceStatus, dependencies=[Depends(get_token)])
async def set_demo(body: ToggleRequest, svc: PauseSyncService = Depends(get_service)):
    svc.set_demo_mode(body.enabled)
    return svc.status()

@app.post("/restart", response_model=ServiceStatus, dependencies=[Depends(get_token)])
async def restart(svc: PauseSyncService = Depends(get_service)):
    if not svc.source:
        raise HTTPException(status_code=409, detail="No video loaded")
    svc.restart()
    return svc.status()

@app.post("/reset", response_model=ServiceStatus, dependencies=[Depends(get_token)])
async def reset(svc: PauseSyncService = Depends(get_service)):
    svc.reset_all()
    return svc.status()
