"""
Interview Session Controller Module

This module implements the state machine behind one voice interview attempt.
It owns the session state, the visible timer and the transcript, and drives
the voice conversation provider through the VoiceConversationClient contract.

States:
    idle → connecting → recording ⇄ paused
                 ↓           ↓         ↓
               idle        ended ←─────┘

- Start asks for microphone permission and starts the voice conversation.
  Permission or start failures return the session to idle so the candidate
  can retry.
- While recording, the elapsed counter advances once per second. It is frozen
  while paused.
- When the remaining time first reaches the warning threshold a single,
  auto-dismissing warning is emitted.
- Reaching the maximum duration, an explicit stop, or a provider error while
  recording ends the session. Ending is idempotent: the timer and the voice
  conversation are stopped and the end handler (report generation) runs once.
- Once ended, transcript events and timer ticks no longer change the state.

Dependencies:
- loguru: For logging state transitions and collaborator failures.
- app.services.interview_session.voice_conversation: For the provider contract.
- app.services.interview_session.session_timer: For the one-second ticker.
- app.schemas.interview_session.session_state: For the state schemas.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional
from loguru import logger
from app.core.service_config import TranscriptMode
from app.errors.exceptions import (
    CollaboratorInitFailure,
    CollaboratorRuntimeError,
    InvalidSessionTransition,
    PermissionDenied,
)
from app.schemas.interview_session.session_state import (
    EndReason,
    InterviewSessionState,
    Notification,
    SessionStatus,
    TranscriptEvent,
)
from app.schemas.report.interview_report import ExchangeTurn
from app.services.interview_session.session_timer import SessionTimer
from app.services.interview_session.voice_conversation import VoiceConversationClient, VoiceSessionConfig

MicrophoneRequest = Callable[[], Awaitable[bool]]
NotificationHandler = Callable[[Notification], Awaitable[None]]
StateChangeHandler = Callable[[InterviewSessionState], Awaitable[None]]
SessionEndedHandler = Callable[[InterviewSessionState, List[ExchangeTurn]], Awaitable[None]]
TimerFactory = Callable[[Callable[[], Awaitable[None]]], SessionTimer]


def _describe_duration(seconds: int) -> str:
    """Human-readable duration: whole minutes when possible, seconds otherwise."""
    if seconds >= 60 and seconds % 60 == 0:
        minutes = seconds // 60
        return f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"
    return f"{seconds} second" if seconds == 1 else f"{seconds} seconds"


class InterviewSessionController:
    """
    Drives one interview attempt from start to end.

    Args:
        voice_client: Voice conversation provider for this attempt.
        request_microphone: Async callable returning whether microphone access was granted.
        notify: Receives user-visible notifications.
        assistant_id: Voice assistant started for the interview.
        on_session_ended: Called once with the final state and captured turns when the session ends.
        on_state_change: Called after every state change and timer tick.
        max_duration_seconds: Recording time after which the session ends automatically.
        warning_threshold_seconds: Remaining time at which the one-time warning fires.
        warning_auto_dismiss_seconds: How long the warning stays visible.
        transcript_mode: Whether transcript events replace or extend the current text.
        timer_factory: Builds the ticker; receives the tick handler.
    """

    VALID_TRANSITIONS: Dict[SessionStatus, List[SessionStatus]] = {
        SessionStatus.IDLE: [SessionStatus.CONNECTING],
        SessionStatus.CONNECTING: [SessionStatus.RECORDING, SessionStatus.IDLE],
        SessionStatus.RECORDING: [SessionStatus.PAUSED, SessionStatus.ENDED],
        SessionStatus.PAUSED: [SessionStatus.RECORDING, SessionStatus.ENDED],
        SessionStatus.ENDED: [],  # Terminal state
    }

    def __init__(
        self,
        voice_client: VoiceConversationClient,
        request_microphone: MicrophoneRequest,
        notify: NotificationHandler,
        assistant_id: str,
        on_session_ended: Optional[SessionEndedHandler] = None,
        on_state_change: Optional[StateChangeHandler] = None,
        max_duration_seconds: int = 900,
        warning_threshold_seconds: int = 120,
        warning_auto_dismiss_seconds: int = 5,
        transcript_mode: TranscriptMode = TranscriptMode.REPLACE,
        timer_factory: Optional[TimerFactory] = None,
    ):
        self.voice_client = voice_client
        self.request_microphone = request_microphone
        self.notify = notify
        self.assistant_id = assistant_id
        self.on_session_ended = on_session_ended
        self.on_state_change = on_state_change
        self.max_duration_seconds = max_duration_seconds
        self.warning_threshold_seconds = warning_threshold_seconds
        self.warning_auto_dismiss_seconds = warning_auto_dismiss_seconds
        self.transcript_mode = transcript_mode
        self.timer = (timer_factory or SessionTimer)(self.tick)

        self.state = InterviewSessionState(remaining_seconds=max_duration_seconds)
        self.turns: List[ExchangeTurn] = []
        self.end_reason: Optional[EndReason] = None

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    async def _publish(self) -> None:
        if self.on_state_change is None:
            return
        try:
            await self.on_state_change(self.state.model_copy())
        except Exception as e:
            logger.warning(f"State change handler failed: {e}")

    async def _notify(self, level: str, message: str, auto_dismiss_seconds: Optional[int] = None) -> None:
        try:
            await self.notify(Notification(level=level, message=message, auto_dismiss_seconds=auto_dismiss_seconds))
        except Exception as e:
            logger.warning(f"Notification delivery failed: {e}")

    async def _transition(self, new_status: SessionStatus) -> None:
        old_status = self.state.status
        if new_status not in self.VALID_TRANSITIONS[old_status]:
            raise InvalidSessionTransition(f"Invalid transition from {old_status.value} to {new_status.value}")
        # Set before any await so concurrent callbacks observe the new status.
        self.state.status = new_status
        logger.info(f"Interview session: {old_status.value} → {new_status.value}")
        await self._publish()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self, metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Start the interview: request the microphone and connect the voice conversation.

        Args:
            metadata: Session metadata passed to the voice provider (resume reference, job title).

        Raises:
            InvalidSessionTransition: If the session is not idle.
            PermissionDenied: If microphone access was refused. The session is idle again.
            CollaboratorInitFailure: If the voice conversation failed to start. The session is idle again.
        """
        await self._transition(SessionStatus.CONNECTING)

        try:
            granted = await self.request_microphone()
        except Exception as e:
            logger.error(f"Microphone permission request failed: {e}")
            granted = False
        if self.status != SessionStatus.CONNECTING:
            return
        if not granted:
            await self._transition(SessionStatus.IDLE)
            await self._notify("error", PermissionDenied.message)
            raise PermissionDenied()

        config = VoiceSessionConfig(
            assistant_id=self.assistant_id,
            metadata={k: v for k, v in (metadata or {}).items() if v is not None},
            on_transcript=self.handle_transcript,
            on_error=self.handle_error,
        )
        try:
            await self.voice_client.start(config)
        except Exception as e:
            if self.status != SessionStatus.CONNECTING:
                # Stopped while connecting; the pending start was abandoned.
                logger.info(f"Voice conversation start abandoned: {e}")
                return
            logger.error(f"Voice conversation failed to start: {e}")
            await self._transition(SessionStatus.IDLE)
            await self._notify("error", f"Audio connection failed: {str(e) or 'Unknown error'}. Please try again.")
            raise CollaboratorInitFailure(str(e)) from e

        if self.status != SessionStatus.CONNECTING:
            # Stopped while connecting; do not leave the conversation running.
            logger.info("Interview session stopped while connecting - closing voice conversation")
            await self._stop_voice()
            return

        self.state.elapsed_seconds = 0
        self.state.remaining_seconds = self.max_duration_seconds
        self.state.transcript_text = ""
        self.state.connected = True
        self.state.mic_enabled = True
        self.turns = []
        await self._transition(SessionStatus.RECORDING)
        self.timer.start()
        await self._notify("success", "Audio connected successfully")

    async def pause(self) -> None:
        """Pause recording: mute the microphone and freeze the timer."""
        await self._transition(SessionStatus.PAUSED)
        self.timer.pause()
        self.state.mic_enabled = False
        try:
            await self.voice_client.set_muted(True)
        except Exception as e:
            logger.error(f"Error disabling microphone: {e}")
        await self._publish()

    async def resume(self) -> None:
        """Resume recording: unmute the microphone and restart the timer."""
        await self._transition(SessionStatus.RECORDING)
        self.timer.resume()
        try:
            await self.voice_client.set_muted(False)
            self.state.mic_enabled = True
        except Exception as e:
            logger.error(f"Error enabling microphone: {e}")
            await self._notify("error", "Failed to enable microphone")
        await self._publish()

    async def _stop_voice(self) -> None:
        try:
            await self.voice_client.stop()
        except Exception as e:
            logger.error(f"Error stopping voice conversation: {e}")

    async def stop(self, reason: EndReason = EndReason.USER_REQUEST) -> None:
        """
        End the interview. Safe to call any number of times.

        From recording or paused the session ends: the timer and the voice
        conversation are stopped and the end handler runs exactly once. While
        connecting the attempt is abandoned and the session returns to idle.
        From idle or ended this does nothing.
        """
        if self.status == SessionStatus.CONNECTING:
            await self._transition(SessionStatus.IDLE)
            return
        if self.status not in (SessionStatus.RECORDING, SessionStatus.PAUSED):
            logger.debug(f"Stop ignored in {self.status.value} state")
            return

        self.end_reason = reason
        await self._transition(SessionStatus.ENDED)
        self.timer.cancel()
        await self._stop_voice()
        self.state.connected = False
        self.state.mic_enabled = False
        await self._publish()

        if reason == EndReason.TIME_LIMIT:
            if self.max_duration_seconds % 60 == 0:
                limit = f"{self.max_duration_seconds // 60} minute"
            else:
                limit = f"{self.max_duration_seconds} second"
            await self._notify("info", f"Interview ended: {limit} time limit reached")
        if reason != EndReason.DISCONNECTED:
            await self._notify("success", "Interview completed! Results will be sent to your email shortly.")

        if self.on_session_ended is not None:
            try:
                await self.on_session_ended(self.state.model_copy(), list(self.turns))
            except Exception as e:
                logger.error(f"Error finishing interview session: {e}")
                await self._notify("error", "Failed to generate your interview report.")

    # =========================================================================
    # EVENTS
    # =========================================================================

    async def tick(self) -> None:
        """Advance the timer by one second. Ignored unless recording."""
        if self.status != SessionStatus.RECORDING:
            return

        self.state.elapsed_seconds += 1
        remaining = max(0, self.max_duration_seconds - self.state.elapsed_seconds)
        self.state.remaining_seconds = remaining
        await self._publish()

        if remaining <= 0:
            await self.stop(reason=EndReason.TIME_LIMIT)
            return

        if not self.state.warning_shown and remaining <= self.warning_threshold_seconds:
            self.state.warning_shown = True
            await self._notify(
                "warning",
                f"Only {_describe_duration(self.warning_threshold_seconds)} remaining in your interview!",
                auto_dismiss_seconds=self.warning_auto_dismiss_seconds,
            )

    async def handle_transcript(self, event: TranscriptEvent) -> None:
        """Apply a transcript update from the voice provider."""
        if self.status not in (SessionStatus.RECORDING, SessionStatus.PAUSED):
            return

        last_turn = self.turns[-1] if self.turns else None
        if self.transcript_mode == TranscriptMode.REPLACE:
            self.state.transcript_text = event.text
            if last_turn is not None and last_turn.role == event.role:
                last_turn.content = event.text
            else:
                self.turns.append(ExchangeTurn(role=event.role, content=event.text))
        else:
            self.state.transcript_text = " ".join(part for part in (self.state.transcript_text, event.text) if part)
            if last_turn is not None and last_turn.role == event.role:
                last_turn.content = " ".join(part for part in (last_turn.content, event.text) if part)
            else:
                self.turns.append(ExchangeTurn(role=event.role, content=event.text))
        logger.debug(f"Transcript update ({event.role}): {len(self.state.transcript_text)} chars")
        await self._publish()

    async def handle_error(self, error: Exception) -> None:
        """Report a provider error. Errors after recording began end the session."""
        logger.error(f"Voice conversation error: {error}")
        if self.status == SessionStatus.ENDED:
            return
        await self._notify("error", f"{CollaboratorRuntimeError.message}: {str(error) or 'Unknown error'}")
        if self.status in (SessionStatus.RECORDING, SessionStatus.PAUSED):
            await self.stop(reason=EndReason.VOICE_ERROR)
        elif self.status == SessionStatus.CONNECTING:
            await self._transition(SessionStatus.IDLE)
