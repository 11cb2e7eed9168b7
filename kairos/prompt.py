from __future__ import annotations

from typing import Dict, List

from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate


SYSTEM_PROMPT = (
    "You are Kairos, a calm and clear-thinking productivity and learning assistant. "
    "Explain clearly and briefly."
)

EMPTY_QUESTION_MESSAGE = "Please enter a question."
FALLBACK_ANSWER = "No response from Kairos."
SUPABASE_CONFIG_ERROR = "Configuration Error: Supabase keys are missing."
OPENAI_CONFIG_ERROR = "Configuration Error: OpenAI API key not found."
API_ERROR_TEMPLATE = "Error from Kairos AI: {message}"
UNKNOWN_API_ERROR = "Unknown error"
UNREACHABLE_MESSAGE = "Error: Unable to contact Kairos AI right now."

_ROLE_BY_TYPE = {
    "system": "system",
    "human": "user",
    "ai": "assistant",
}

_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", SYSTEM_PROMPT),
        ("human", "{question}"),
    ]
)


def to_openai_messages(messages: List[BaseMessage]) -> List[Dict[str, str]]:
    converted: List[Dict[str, str]] = []
    for message in messages:
        # Unknown message types go out as user turns
        role = _ROLE_BY_TYPE.get(message.type, "user")
        converted.append({"role": role, "content": str(message.content)})
    return converted


def build_messages(question: str) -> List[Dict[str, str]]:
    """Return the system prompt and ``question`` as chat-completion messages."""
    return to_openai_messages(_PROMPT.format_messages(question=question))
