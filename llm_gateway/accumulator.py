"""
Accumulation of streamed provider events into a complete reply.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from .providers.anthropic import types as anthropic
from .providers.google import types as google
from .providers.openai import types as openai


@dataclass
class AccumulatedToolCall:
    """Tool call reassembled from streamed fragments."""
    id: str = ""
    name: str = ""
    arguments: str = ""


@dataclass
class AccumulatorState:
    """Mutable state for event accumulation."""
    text: str = ""
    tool_calls: dict[int, AccumulatedToolCall] = field(default_factory=dict)
    finish_reason: str | None = None
    input_tokens: int = 0
    output_tokens: int = 0
    event_count: int = 0


class MessageAccumulator:
    """
    Builds the final reply from the events of any of the three providers.

    Events are fed one at a time with `add`; StreamError items must be
    handled by the caller before they get here.
    """

    def __init__(self) -> None:
        self.state = AccumulatorState()

    @property
    def text(self) -> str:
        return self.state.text

    @property
    def tool_calls(self) -> list[AccumulatedToolCall]:
        return [self.state.tool_calls[i] for i in sorted(self.state.tool_calls)]

    def add(self, event: Any) -> str | None:
        """
        Fold one event into the state.

        Returns:
            The text fragment carried by the event, if any.
        """
        self.state.event_count += 1
        if isinstance(event, openai.ChatCompletionChunk):
            return self._add_openai(event)
        if isinstance(event, google.GenerateContentResponse):
            return self._add_google(event)
        return self._add_anthropic(event)

    def _tool_call(self, index: int) -> AccumulatedToolCall:
        return self.state.tool_calls.setdefault(index, AccumulatedToolCall())

    def _add_openai(self, chunk: openai.ChatCompletionChunk) -> str | None:
        if chunk.usage is not None:
            self.state.input_tokens = chunk.usage.prompt_tokens
            self.state.output_tokens = chunk.usage.completion_tokens

        fragment = None
        for choice in chunk.choices:
            delta = choice.delta
            if delta.content:
                self.state.text += delta.content
                fragment = (fragment or "") + delta.content
            for call_delta in delta.tool_calls or []:
                call = self._tool_call(call_delta.index)
                if call_delta.id:
                    call.id += call_delta.id
                if call_delta.function is not None:
                    call.name += call_delta.function.name or ""
                    call.arguments += call_delta.function.arguments or ""
            if choice.finish_reason:
                self.state.finish_reason = choice.finish_reason
        return fragment

    def _add_anthropic(self, event: anthropic.StreamEvent) -> str | None:
        match event:
            case anthropic.MessageStart(message=message):
                self.state.input_tokens = message.usage.input_tokens
                self.state.output_tokens = message.usage.output_tokens
            case anthropic.ContentBlockStart(
                index=index, content_block=anthropic.ToolUseBlock() as block
            ):
                call = self._tool_call(index)
                call.id = block.id
                call.name = block.name
            case anthropic.ContentBlockStart(
                content_block=anthropic.TextBlock(text=text)
            ) if text:
                self.state.text += text
                return text
            case anthropic.ContentBlockDelta(
                delta=anthropic.TextDelta(text=text)
            ):
                self.state.text += text
                return text
            case anthropic.ContentBlockDelta(
                index=index, delta=anthropic.InputJsonDelta(partial_json=partial)
            ):
                self._tool_call(index).arguments += partial
            case anthropic.MessageDelta(delta=delta, usage=usage):
                if delta.stop_reason:
                    self.state.finish_reason = delta.stop_reason
                self.state.output_tokens = usage.output_tokens
        return None

    def _add_google(self, response: google.GenerateContentResponse) -> str | None:
        if response.usage_metadata is not None:
            self.state.input_tokens = response.usage_metadata.prompt_token_count
            self.state.output_tokens = response.usage_metadata.candidates_token_count

        for candidate in response.candidates[:1]:
            if candidate.finish_reason:
                self.state.finish_reason = candidate.finish_reason
            if candidate.content is None:
                continue
            for part in candidate.content.parts:
                if part.function_call is not None:
                    call = self._tool_call(len(self.state.tool_calls))
                    call.name = part.function_call.name
                    call.arguments = json.dumps(part.function_call.args)

        text = response.text
        if text:
            self.state.text += text
            return text
        return None

    def reset(self) -> None:
        """Reset accumulator state for a new stream."""
        self.state = AccumulatorState()
