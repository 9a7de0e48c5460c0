"""
Interview Session WebSocket Handler Module

This module runs one live interview over a WebSocket. The browser hosts the
voice provider's SDK; this handler owns the session state machine, relays
voice commands to the browser, and feeds the browser's reports (microphone
permission, conversation started, transcript updates, provider errors) into
the InterviewSessionController.

When the interview ends the interview is marked completed and a report is
generated from the captured transcript and sent back on the socket. A client
that disconnects mid-interview abandons it: the session is stopped but no
report is produced.

Client → server messages: start, pause, resume, stop, transcript,
voice_started, voice_start_failed, voice_error.
Server → client messages: state, notification, voice_command, report, error.

Dependencies:
- starlette.websockets: For WebSocket connection handling.
- pydantic: For validating client messages.
- loguru: For logging operations.
- app.services.interview_session: For the controller and voice relay.
- app.services.report_generation: For report generation at session end.
- app.services.concurrency: For reporting concurrent voice sessions.
"""

import asyncio
import time
from typing import Any, Dict, List, Optional
from loguru import logger
from pydantic import ValidationError
from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState
from app.core.service_config import ServiceConfig
from app.errors.exceptions import InvalidSessionTransition, SessionError
from app.schemas.interview_session.session_state import (
    EndReason,
    InterviewSessionState,
    Notification,
    SessionStatus,
    TranscriptEvent,
)
from app.schemas.report.interview_report import ExchangeTurn
from app.schemas.websocket.websocket_message import SessionClientMessage, SessionServerMessage
from app.services.concurrency import SessionUsageTracker
from app.services.interview_session.session_controller import InterviewSessionController
from app.services.interview_session.websocket_voice_conversation import WebSocketVoiceConversation
from app.services.interviews import interview_repository
from app.services.record_store import RecordStore
from app.services.report_generation import ReportGenerator


class SessionSender:
    """Serialises outgoing messages; sends after the socket closed are dropped."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self._lock = asyncio.Lock()

    async def send(self, message_type: str, content: Dict[str, Any]) -> None:
        if self.websocket.client_state != WebSocketState.CONNECTED:
            logger.debug(f"Dropping {message_type} message: socket closed")
            return
        message = SessionServerMessage(
            type=message_type,
            content=content,
            timestamp=str(int(time.time() * 1000)),
        )
        async with self._lock:
            try:
                await self.websocket.send_json(message.model_dump(mode="json"))
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.debug(f"Could not send {message_type} message: {e}")


async def handle_interview_session(
    websocket: WebSocket,
    interview_id: str,
    config: ServiceConfig,
    store: RecordStore,
    report_generator: ReportGenerator,
    usage_tracker: SessionUsageTracker,
):
    """
    Run one interview session on an accepted WebSocket until the client disconnects.
    """
    sender = SessionSender(websocket)

    interview = await interview_repository.get_interview(store, interview_id)
    if interview is None:
        await sender.send("error", {"message": f"Interview '{interview_id}' not found."})
        await websocket.close(code=1008, reason="Interview not found")
        return

    voice = WebSocketVoiceConversation(lambda payload: sender.send("voice_command", payload))
    microphone = {"granted": False}
    usage = {"counted": False}
    controller: Optional[InterviewSessionController] = None

    async def request_microphone() -> bool:
        return microphone["granted"]

    async def notify(notification: Notification) -> None:
        await sender.send("notification", notification.model_dump())

    async def on_state_change(state: InterviewSessionState) -> None:
        if state.status == SessionStatus.RECORDING and not usage["counted"]:
            usage["counted"] = True
            usage_tracker.session_started()
        elif state.status == SessionStatus.ENDED and usage["counted"]:
            usage["counted"] = False
            usage_tracker.session_ended()
        await sender.send("state", state.model_dump(mode="json"))

    async def finish_session(state: InterviewSessionState, turns: List[ExchangeTurn]) -> None:
        if controller.end_reason == EndReason.DISCONNECTED:
            logger.info(f"Interview {interview_id} abandoned after {state.elapsed_seconds}s")
            return
        await interview_repository.mark_interview_completed(store, interview_id, voice.conversation_id)
        report = await report_generator.generate_from_turns(interview_id, turns)
        await sender.send("report", report.model_dump())

    controller = InterviewSessionController(
        voice_client=voice,
        request_microphone=request_microphone,
        notify=notify,
        assistant_id=config.vapi_assistant_id,
        on_session_ended=finish_session,
        on_state_change=on_state_change,
        max_duration_seconds=config.interview_max_duration_seconds,
        warning_threshold_seconds=config.interview_warning_threshold_seconds,
        warning_auto_dismiss_seconds=config.warning_auto_dismiss_seconds,
        transcript_mode=config.transcript_mode,
    )

    async def run_start(metadata: Dict[str, Any]) -> None:
        try:
            await controller.start(metadata)
        except InvalidSessionTransition as e:
            await sender.send("error", {"message": str(e)})
        except SessionError as e:
            # Already surfaced to the candidate as a notification
            logger.info(f"Interview {interview_id} did not start: {e}")

    start_task: Optional[asyncio.Task] = None
    await on_state_change(controller.state.model_copy())

    try:
        while True:
            raw_message = await websocket.receive_json()
            try:
                message = SessionClientMessage(**raw_message)
            except (ValidationError, TypeError) as e:
                logger.warning(f"Invalid session message: {e}")
                await sender.send("error", {"message": "Invalid message format"})
                continue

            if message.type == "start":
                if start_task is not None and not start_task.done():
                    await sender.send("error", {"message": "Interview is already starting"})
                    continue
                microphone["granted"] = bool(message.microphone_granted)
                metadata = {
                    "resume_id": message.resume_id or interview.resume_id,
                    "job_title": message.job_title or interview.job_title or interview.title,
                    "interview_id": interview_id,
                }
                # Runs in the background: the start only completes once the browser reports back.
                start_task = asyncio.create_task(run_start(metadata))
            elif message.type in ("pause", "resume"):
                try:
                    await (controller.pause() if message.type == "pause" else controller.resume())
                except InvalidSessionTransition as e:
                    await sender.send("error", {"message": str(e)})
            elif message.type == "stop":
                starting = start_task is not None and not start_task.done()
                if starting:
                    # Let a just-scheduled start reach the controller so the stop applies to it.
                    await asyncio.sleep(0)
                await controller.stop(reason=EndReason.USER_REQUEST)
                if starting:
                    await voice.abandon_start("Interview cancelled")
                    await asyncio.gather(start_task, return_exceptions=True)
            elif message.type == "transcript":
                if message.text:
                    await voice.deliver_transcript(TranscriptEvent(role=message.role, text=message.text))
            elif message.type == "voice_started":
                voice.confirm_started(message.conversation_id)
            elif message.type == "voice_start_failed":
                voice.fail_start(message.message or "Voice conversation failed to start")
            elif message.type == "voice_error":
                await voice.deliver_error(message.message or "Unknown error")

    except WebSocketDisconnect:
        logger.info(f"Interview session socket for {interview_id} closed by client")
    finally:
        await controller.stop(reason=EndReason.DISCONNECTED)
        if start_task is not None and not start_task.done():
            voice.fail_start("Client disconnected")
            await asyncio.gather(start_task, return_exceptions=True)
