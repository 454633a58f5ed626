"""Server-Sent Events endpoints."""
from fastapi import APIRouter, Request, HTTPException, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.api.deps import CurrentUser, get_db, require_roster_viewer
from app.core.broadcast import hub
from app.services.event import event_exists

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable buffering in nginx
}


@router.get("/{event_id}/attendance-stream")
async def attendance_stream(
    request: Request,
    event_id: int,
    user: CurrentUser = Depends(require_roster_viewer),
    db: Session = Depends(get_db)
):
    """
    SSE stream of check-ins for one event (faculty/organizer/admin).

    Messages are JSON objects ``{type, data?, message?, timestamp}``:
        - ``connected``: sent once when the stream opens
        - ``new_attendance``: ``data`` holds ``attendance`` and ``user``

    A ``: heartbeat`` comment is sent every SSE_HEARTBEAT_INTERVAL seconds.
    There is no replay; the client should reconnect automatically and reload
    the roster if disconnected.

    Browsers' EventSource cannot set headers, so the access token may be
    passed as ``?token=``.
    """
    if not event_exists(db, event_id):
        raise HTTPException(status_code=404, detail="Event not found")

    subscriber = hub.subscribe(event_id)

    return StreamingResponse(
        hub.stream(request, subscriber),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
