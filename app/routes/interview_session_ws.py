"""
WebSocket route for live interview sessions

Description:
This module defines a FastAPI route for running a voice interview session over
a WebSocket. It accepts the connection and hands it to the interview session
handler, which drives the session state machine until the client disconnects.

Arguments:
- websocket: WebSocket connection object
- interview_id: The scheduled interview being taken

Returns:
- None, but streams session state, notifications, voice commands and the final
  report through the WebSocket connection.

Dependencies:
- fastapi: For creating the FastAPI application and handling WebSocket connections.
- app.services.interview_session.websocket_session_handler: For the session logic.
- loguru: For logging information about the WebSocket connection and any exceptions that occur.
"""
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from loguru import logger
from app.core.dependencies import get_record_store, get_report_generator, get_service_config, get_usage_tracker
from app.core.service_config import ServiceConfig
from app.services.concurrency import SessionUsageTracker
from app.services.interview_session.websocket_session_handler import handle_interview_session
from app.services.record_store import RecordStore
from app.services.report_generation import ReportGenerator

router = APIRouter(
    prefix="/api",
    tags=["interview-session"],
    responses={404: {"description": "Not found"}}
)

@router.websocket("/interview-session/{interview_id}")
async def interview_session_endpoint(
    websocket: WebSocket,
    interview_id: str,
    config: ServiceConfig = Depends(get_service_config),
    store: RecordStore = Depends(get_record_store),
    report_generator: ReportGenerator = Depends(get_report_generator),
    usage_tracker: SessionUsageTracker = Depends(get_usage_tracker),
):
    await websocket.accept()
    try:
        await handle_interview_session(websocket, interview_id, config, store, report_generator, usage_tracker)
    except WebSocketDisconnect:
        logger.info("WebSocket connection closed")
    except Exception as e:
        logger.exception("Unhandled exception in interview session websocket")
        #1011 = internal error
        await websocket.close(code=1011, reason=str(e)[:123])
