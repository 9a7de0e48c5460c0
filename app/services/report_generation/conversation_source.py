"""
Conversation Source Module

Description:
Fetches the finished conversation of a voice interview so a report can be
generated from it. The Vapi implementation reads the call record from the
Vapi REST API and turns its message log into ordered exchange turns.

Dependencies:
- httpx: For async HTTP calls to the voice provider.
- loguru: For logging operations.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List
import httpx
from loguru import logger
from app.errors.exceptions import InterviewNotFound, InternalServerError
from app.schemas.report.interview_report import ExchangeTurn

# Roles kept from the provider's message log; system prompts and tool calls are dropped.
_CONVERSATION_ROLES = {"assistant": "assistant", "bot": "assistant", "user": "user"}


class ConversationSource(ABC):
    """Source of the role-tagged turns of a finished conversation."""

    @abstractmethod
    async def fetch_turns(self, conversation_id: str) -> List[ExchangeTurn]:
        """Return the conversation's turns in order."""


def parse_call_messages(call: Dict[str, Any]) -> List[ExchangeTurn]:
    """Extract ordered exchange turns from a Vapi call payload.

    Messages are read from ``messages`` or, on newer payloads, from
    ``artifact.messages``. Each message carries its text under ``message``
    (call logs) or ``content`` (OpenAI-style messages).
    """
    messages = call.get("messages") or (call.get("artifact") or {}).get("messages") or []
    turns = []
    for message in messages:
        role = _CONVERSATION_ROLES.get(message.get("role", ""))
        if role is None:
            continue
        content = message.get("message") or message.get("content") or ""
        if not isinstance(content, str) or not content.strip():
            continue
        turns.append(ExchangeTurn(role=role, content=content))
    return turns


class VapiConversationSource(ConversationSource):
    """
    Reads call transcripts from the Vapi REST API.

    Args:
        client: Shared httpx.AsyncClient, owned by the application lifespan.
        base_url: Vapi API base URL.
        api_key: Vapi private API key.
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str, api_key: str):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

    async def fetch_turns(self, conversation_id: str) -> List[ExchangeTurn]:
        if not self.api_key:
            raise InternalServerError("Voice provider API key is not configured.")
        url = f"{self.base_url}/call/{conversation_id}"
        try:
            response = await self.client.get(url, headers={"Authorization": f"Bearer {self.api_key}"})
        except httpx.HTTPError as e:
            logger.error(f"Error fetching conversation {conversation_id}: {e}")
            raise InternalServerError("Failed to fetch interview conversation.") from e

        if response.status_code == 404:
            raise InterviewNotFound(f"conversation {conversation_id}")
        if response.status_code >= 400:
            logger.error(f"Voice provider returned {response.status_code} for conversation {conversation_id}")
            raise InternalServerError("Failed to fetch interview conversation.")

        turns = parse_call_messages(response.json())
        logger.debug(f"Fetched {len(turns)} turns for conversation {conversation_id}")
        return turns
