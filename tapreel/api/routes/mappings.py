"""Tag mappings CRUD: tag id to video path (stored in JSON)."""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from tapreel.api.state import AppState, get_state
from tapreel.core.errors import ValidationError

router = APIRouter()


class MappingBody(BaseModel):
    target: str


def _mapping_to_dict(tag_id: str, target: str) -> dict:
    return {"tag_id": tag_id, "target": target}


@router.get("/")
def list_mappings(state: AppState = Depends(get_state)):
    """List all tag mappings."""
    service = state.rfid_service
    return {
        "count": service.mapping_count(),
        "mappings": [_mapping_to_dict(k, v) for k, v in service.list_mappings()],
    }


@router.get("/{tag_id}")
def resolve_mapping(tag_id: str, state: AppState = Depends(get_state)):
    """Return the target mapped to tag_id."""
    target = state.rfid_service.resolve(tag_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Tag not mapped")
    return _mapping_to_dict(tag_id.strip(), target)


@router.put("/{tag_id}")
def put_mapping(
    tag_id: str,
    body: MappingBody,
    state: AppState = Depends(get_state),
):
    """Create or overwrite the mapping for tag_id."""
    try:
        state.rfid_service.add_mapping(tag_id, body.target)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail={"error": e.kind, "message": str(e)})
    key = tag_id.strip()
    return _mapping_to_dict(key, state.rfid_service.resolve(key))


@router.delete("/{tag_id}", status_code=204)
def delete_mapping(tag_id: str, state: AppState = Depends(get_state)):
    """Delete the mapping for tag_id."""
    if not state.rfid_service.remove_mapping(tag_id):
        raise HTTPException(status_code=404, detail="Tag not mapped")
