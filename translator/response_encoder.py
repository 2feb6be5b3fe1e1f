"""
Serialize a parsed agent reply as an OpenAI chat completion.

Two shapes are produced:

- ``encode_completion`` -- a single ``chat.completion`` object.
- ``iter_sse_events`` -- ``data: <chunk>\\n\\n`` lines for a streaming
  response, ending with ``data: [DONE]``.

All chunks of one response share the same id and ``created`` timestamp.
The agent does not stream, so the whole reply goes out as one content
delta rather than token by token.
"""

import json
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

from proxy_constants import SSE_DONE
from translator.ids import new_completion_id
from translator.models import ParsedReply


def estimate_tokens(text: str) -> int:
    """Rough token estimate (~4 characters per token)."""
    return math.ceil(len(text or "") / 4)


def usage_for(prompt_text: str, completion_text: str) -> Dict[str, int]:
    prompt_tokens = estimate_tokens(prompt_text)
    completion_tokens = estimate_tokens(completion_text)
    return {
        "prompt_tokens": prompt_tokens,
        "completion_tokens": completion_tokens,
        "total_tokens": prompt_tokens + completion_tokens,
    }


def finish_reason_for(reply: ParsedReply) -> str:
    return "tool_calls" if reply.tool_calls else "stop"


@dataclass
class ResponseEncoder:
    """Encodes one response; holds the id and timestamp its chunks share."""

    model: str
    response_id: str = field(default_factory=new_completion_id)
    created: int = field(default_factory=lambda: int(time.time()))

    def _envelope(self, obj_type: str, choice: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": self.response_id,
            "object": obj_type,
            "created": self.created,
            "model": self.model,
            "choices": [choice],
        }

    def encode_completion(self, reply: ParsedReply, prompt_text: str = "") -> Dict[str, Any]:
        message: Dict[str, Any] = {"role": "assistant"}
        if reply.tool_calls:
            message["content"] = reply.content or None
            message["tool_calls"] = [call.to_openai() for call in reply.tool_calls]
        else:
            message["content"] = reply.content

        completion_text = reply.content + "".join(c.arguments for c in reply.tool_calls)
        result = self._envelope(
            "chat.completion",
            {"index": 0, "message": message, "finish_reason": finish_reason_for(reply)},
        )
        result["usage"] = usage_for(prompt_text, completion_text)
        return result

    def _chunk(self, delta: Dict[str, Any], finish_reason: Optional[str] = None) -> Dict[str, Any]:
        return self._envelope(
            "chat.completion.chunk",
            {"index": 0, "delta": delta, "finish_reason": finish_reason},
        )

    def iter_chunks(self, reply: ParsedReply) -> Iterator[Dict[str, Any]]:
        """Chunk objects for a streaming response, without the [DONE] sentinel."""
        if not reply.tool_calls:
            yield self._chunk({"role": "assistant", "content": reply.content})
            yield self._chunk({}, "stop")
            return

        role_sent = False
        if reply.content:
            yield self._chunk({"role": "assistant", "content": reply.content})
            role_sent = True

        for index, call in enumerate(reply.tool_calls):
            delta: Dict[str, Any] = {}
            if not role_sent:
                delta["role"] = "assistant"
                role_sent = True
            delta["tool_calls"] = [dict(call.to_openai(), index=index)]
            yield self._chunk(delta)

        yield self._chunk({}, "tool_calls")

    def iter_sse_events(self, reply: ParsedReply) -> Iterator[str]:
        for chunk in self.iter_chunks(reply):
            yield f"data: {json.dumps(chunk, ensure_ascii=False)}\n\n"
        yield SSE_DONE
