"""Event Log API Router"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from botpanel.api.dependencies import get_storage
from botpanel.api.errors import internal_errors, parse_limit, read_json_body, validate_payload
from botpanel.models import Log, LogCreate
from botpanel.storage import MemStorage

router = APIRouter(prefix="/api/logs", tags=["logs"])

INVALID_DATA = "Invalid log data"


@router.get("", response_model=List[Log])
async def list_logs(
    limit: Optional[str] = Query(default=None, description="Maximum number of entries, newest first"),
    storage: MemStorage = Depends(get_storage),
):
    """List log entries newest first; a malformed limit is ignored"""
    with internal_errors("Failed to get logs"):
        return storage.list_logs(parse_limit(limit))


@router.post("", response_model=Log, status_code=201)
async def create_log(request: Request, storage: MemStorage = Depends(get_storage)):
    with internal_errors("Failed to create log"):
        payload = await read_json_body(request, INVALID_DATA)
        data = validate_payload(LogCreate, payload, INVALID_DATA)
        return storage.create_log(data)
