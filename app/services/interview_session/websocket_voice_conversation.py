"""
WebSocket Voice Conversation Module

The voice provider's SDK runs in the candidate's browser. This client
implements the VoiceConversationClient contract by sending start, stop and
mute commands to the browser over the interview session WebSocket, and by
receiving the browser's reports (conversation started, start failed,
transcript updates, runtime errors) from the route that owns the socket.

Dependencies:
- asyncio: For awaiting the browser's start confirmation.
- loguru: For logging operations.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional
from loguru import logger
from app.errors.exceptions import CollaboratorInitFailure, CollaboratorRuntimeError
from app.schemas.interview_session.session_state import TranscriptEvent
from app.services.interview_session.voice_conversation import VoiceConversationClient, VoiceSessionConfig

SendJson = Callable[[Dict[str, Any]], Awaitable[None]]


class WebSocketVoiceConversation(VoiceConversationClient):
    """
    Relays voice conversation commands to the browser.

    Args:
        send_json: Sends one voice command payload to the browser.
        start_timeout: Seconds to wait for the browser to confirm the start.
    """

    def __init__(self, send_json: SendJson, start_timeout: float = 30.0):
        self.send_json = send_json
        self.start_timeout = start_timeout
        self._config: Optional[VoiceSessionConfig] = None
        self._started: Optional[asyncio.Future] = None
        self._conversation_id: Optional[str] = None
        self._active = False

    @property
    def conversation_id(self) -> Optional[str]:
        return self._conversation_id

    async def _send_command(self, command: str, **fields: Any) -> None:
        await self.send_json({"command": command, **fields})

    async def start(self, config: VoiceSessionConfig) -> None:
        self._config = config
        self._started = asyncio.get_running_loop().create_future()
        await self._send_command(
            "start",
            assistant_id=config.assistant_id,
            metadata=config.metadata,
            first_message=config.first_message,
        )
        try:
            self._conversation_id = await asyncio.wait_for(self._started, timeout=self.start_timeout)
        except asyncio.TimeoutError as e:
            raise CollaboratorInitFailure("Timed out waiting for the voice conversation to start") from e
        finally:
            self._started = None
        self._active = True
        logger.info(f"Voice conversation started (conversation: {self._conversation_id or 'unknown'})")

    async def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        self._config = None
        await self._send_command("stop")

    async def set_muted(self, muted: bool) -> None:
        if not self._active:
            raise CollaboratorRuntimeError("Voice conversation is not active")
        await self._send_command("set_muted", muted=muted)

    # Reports from the browser

    def confirm_started(self, conversation_id: Optional[str] = None) -> None:
        if self._started is not None and not self._started.done():
            self._started.set_result(conversation_id)

    def fail_start(self, message: str) -> None:
        if self._started is not None and not self._started.done():
            self._started.set_exception(CollaboratorInitFailure(message))

    async def abandon_start(self, reason: str) -> None:
        """Fail a pending start and tell the browser to drop the conversation it is opening."""
        if self._started is None or self._started.done():
            return
        self.fail_start(reason)
        await self._send_command("stop")

    async def deliver_transcript(self, event: TranscriptEvent) -> None:
        if self._active and self._config is not None:
            await self._config.on_transcript(event)

    async def deliver_error(self, message: str) -> None:
        if self._started is not None and not self._started.done():
            self.fail_start(message)
            return
        if self._config is not None:
            await self._config.on_error(CollaboratorRuntimeError(message))
