"""Server-Sent Events endpoint for admin dashboards."""

from __future__ import annotations

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from admitflow.api.dependencies import EventManagerDep

router = APIRouter(prefix="/events", tags=["events"])

_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # nginx
}


@router.get("/stream")
async def event_stream(
    event_manager: EventManagerDep,
    class_id: str | None = Query(default=None, description="Only events for this class"),
) -> StreamingResponse:
    """Stream registration events as SSE.

    With class_id, events for other classes are skipped; events that carry no
    class are always delivered.
    """
    subscriber = event_manager.subscribe(class_id)
    return StreamingResponse(
        event_manager.stream(subscriber),
        media_type="text/event-stream",
        headers=_SSE_HEADERS,
    )
