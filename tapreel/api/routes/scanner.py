"""Reader status, start/stop, and simulated taps."""
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from tapreel.api.state import AppState, get_state

router = APIRouter()


class SimulateBody(BaseModel):
    tag_id: str


@router.get("/status")
def get_status(state: AppState = Depends(get_state)):
    """Connection state, backend and backend details."""
    service = state.rfid_service
    status = asdict(service.scanner_status())
    status["state"] = status["state"].value
    status["enabled"] = service.is_enabled()
    status["loop"] = service.loop_state().value
    return status


@router.post("/start")
def start_scanning(state: AppState = Depends(get_state)):
    """Start the scan loop if the reader is connected."""
    service = state.rfid_service
    if not service.is_enabled():
        raise HTTPException(status_code=409, detail="RFID reader not connected")
    started = service.start_scanning()
    return {"ok": True, "started": started, "scanning": service.is_scanning()}


@router.post("/stop")
def stop_scanning(state: AppState = Depends(get_state)):
    """Ask the scan loop to stop; returns before the loop has exited."""
    state.rfid_service.stop_scanning()
    return {"ok": True}


@router.post("/simulate")
def simulate_tag(body: SimulateBody, state: AppState = Depends(get_state)):
    """For development: deliver a tag to subscribers as if it had been read."""
    if not state.rfid_service.simulate_tag(body.tag_id):
        raise HTTPException(status_code=400, detail="Tag id cannot be empty")
    tag_id = body.tag_id.strip()
    return {"ok": True, "tag_id": tag_id, "target": state.rfid_service.resolve(tag_id)}
