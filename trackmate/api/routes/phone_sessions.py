"""Session ingest endpoint used by the Timing app"""

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool

from ...phone_sessions import parse_payload

router = APIRouter(prefix="/api", tags=["phone-sessions"])


@router.post("/phone-sessions")
async def ingest_phone_session(request: Request):
    """
    Store a batch of phone-recorded laps

    Auth is checked before the body is read, so a bad token is always a 401
    regardless of the payload.
    """
    state = request.app.state
    user_id = await run_in_threadpool(state.verifier.authenticate, request.headers.get('authorization'))

    payload = parse_payload(await request.body())
    result = await run_in_threadpool(state.ingestor.ingest, user_id, payload)
    return result.to_response()
