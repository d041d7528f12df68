"""Chat-completion and embedding clients backed by OpenAI."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence, runtime_checkable

import openai
import structlog

from .errors import UpstreamError

DEFAULT_CHAT_MODEL = "gpt-4o"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(slots=True)
class ToolCallRequest:
    """A tool invocation proposed by the model."""

    id: str
    name: str
    arguments: str | None
    type: str = "function"

    def to_message(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "function": {"name": self.name, "arguments": self.arguments or ""},
        }


@dataclass(slots=True)
class ChatReply:
    """Assistant turn returned by a :class:`ChatModel`."""

    content: str | None = None
    tool_calls: list[ToolCallRequest] = field(default_factory=list)

    @property
    def function_calls(self) -> list[ToolCallRequest]:
        return [call for call in self.tool_calls if call.type == "function"]

    def to_message(self) -> dict[str, Any]:
        """Assistant message for the transcript.

        Only function calls are echoed back; each of them gets a tool reply.
        """
        message: dict[str, Any] = {"role": "assistant", "content": self.content}
        calls = self.function_calls
        if calls:
            message["tool_calls"] = [call.to_message() for call in calls]
        return message


@runtime_checkable
class ChatModel(Protocol):
    """Language model able to propose tool calls."""

    def complete(
        self,
        messages: Sequence[dict[str, Any]],
        *,
        tools: Sequence[dict[str, Any]] | None = None,
        temperature: float = 0.2,
        max_tokens: int = 1500,
    ) -> ChatReply:
        """Return the next assistant turn for ``messages``."""


class OpenAIChatModel:
    """Chat completions client requesting JSON-object responses."""

    def __init__(
        self,
        client: openai.OpenAI | None = None,
        *,
        model: str = DEFAULT_CHAT_MODEL,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._client = client or openai.OpenAI(api_key=api_key, timeout=timeout)
        self._model = model
        self._logger = structlog.get_logger(__name__)

    def complete(
        self,
        messages: Sequence[dict[str, Any]],
        *,
        tools: Sequence[dict[str, Any]] | None = None,
        temperature: float = 0.2,
        max_tokens: int = 1500,
    ) -> ChatReply:
        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": list(messages),
            "response_format": {"type": "json_object"},
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if tools:
            kwargs["tools"] = list(tools)
            kwargs["tool_choice"] = "auto"

        try:
            completion = self._client.chat.completions.create(**kwargs)
        except openai.OpenAIError as exc:
            self._logger.warning("llm.request_failed", model=self._model, error=str(exc))
            raise UpstreamError(f"Chat completion failed: {exc}", cause=exc) from exc

        message = completion.choices[0].message
        calls: list[ToolCallRequest] = []
        for tool_call in message.tool_calls or []:
            function = getattr(tool_call, "function", None)
            calls.append(
                ToolCallRequest(
                    id=tool_call.id,
                    name=getattr(function, "name", ""),
                    arguments=getattr(function, "arguments", None),
                    type=tool_call.type,
                )
            )
        return ChatReply(content=message.content, tool_calls=calls)


class OpenAIEmbeddingProvider:
    """Embedding provider returning 1536-dimensional float vectors."""

    def __init__(
        self,
        client: openai.OpenAI | None = None,
        *,
        model: str = DEFAULT_EMBEDDING_MODEL,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._client = client or openai.OpenAI(api_key=api_key, timeout=timeout)
        self._model = model

    def embed(self, text: str) -> list[float]:
        response = self._client.embeddings.create(
            model=self._model,
            input=text,
            encoding_format="float",
        )
        return list(response.data[0].embedding)


__all__ = [
    "ChatModel",
    "ChatReply",
    "OpenAIChatModel",
    "OpenAIEmbeddingProvider",
    "ToolCallRequest",
]
