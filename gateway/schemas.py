"""Request models for the chat-completions endpoint."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: Literal["system", "user", "assistant", "tool"]
    # Flattened by the normalizer; odd shapes are stringified there, not rejected.
    content: Any = None


class ChatCompletionRequest(BaseModel):
    """Subset of the OpenAI chat-completions request the proxy understands.

    Unknown fields (temperature, max_tokens, ...) are accepted and ignored.
    """

    model_config = ConfigDict(extra="allow")

    messages: List[ChatMessage]
    model: Optional[str] = None
    stream: Optional[bool] = False
    tools: Optional[List[Any]] = None
    tool_choice: Any = None

    def message_dicts(self) -> List[Dict[str, Any]]:
        return [m.model_dump() for m in self.messages]
