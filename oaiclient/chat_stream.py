"""Chunks of a streamed chat completion."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from .chat import (
    ContentFilterResults,
    FunctionCall,
    PromptAnnotation,
    PromptFilterResult,
    ToolCall,
    _float,
    _int,
    _list,
    _mapping,
    _str,
)
from .client import APIError
from .common import Usage


def _int_list(data: Any, key: str) -> Optional[list[int]]:
    values = _list(data, key)
    if values is None:
        return None
    return [int(value) for value in values]


@dataclass
class ChatCompletionStreamChoiceDelta:
    """The part of a message carried by one chunk."""

    content: str = ""
    role: str = ""
    function_call: Optional[FunctionCall] = None
    tool_calls: Optional[list[ToolCall]] = None
    refusal: str = ""
    reasoning_content: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ChatCompletionStreamChoiceDelta":
        data = _mapping(data, "delta")
        function_call = data.get("function_call")
        tool_calls = _list(data, "tool_calls")
        return cls(
            content=_str(data, "content"),
            role=_str(data, "role"),
            function_call=FunctionCall.from_dict(function_call) if function_call is not None else None,
            tool_calls=[ToolCall.from_dict(call) for call in tool_calls] if tool_calls is not None else None,
            refusal=_str(data, "refusal"),
            reasoning_content=_str(data, "reasoning_content"),
        )


@dataclass
class ChatCompletionTokenLogprobTopLogprob:
    token: str = ""
    bytes: Optional[list[int]] = None
    logprob: float = 0.0

    @classmethod
    def from_dict(cls, data: Any) -> "ChatCompletionTokenLogprobTopLogprob":
        data = _mapping(data, "top logprob")
        return cls(
            token=_str(data, "token"),
            bytes=_int_list(data, "bytes"),
            logprob=_float(data, "logprob"),
        )


@dataclass
class ChatCompletionTokenLogprob:
    """Log probability of one streamed token."""

    token: str = ""
    bytes: Optional[list[int]] = None
    logprob: float = 0.0
    top_logprobs: Optional[list[ChatCompletionTokenLogprobTopLogprob]] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ChatCompletionTokenLogprob":
        data = _mapping(data, "token logprob")
        top = _list(data, "top_logprobs")
        return cls(
            token=_str(data, "token"),
            bytes=_int_list(data, "bytes"),
            logprob=_float(data, "logprob"),
            top_logprobs=(
                [ChatCompletionTokenLogprobTopLogprob.from_dict(item) for item in top]
                if top is not None
                else None
            ),
        )


@dataclass
class ChatCompletionStreamChoiceLogprobs:
    content: Optional[list[ChatCompletionTokenLogprob]] = None
    refusal: Optional[list[ChatCompletionTokenLogprob]] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ChatCompletionStreamChoiceLogprobs":
        data = _mapping(data, "logprobs")
        content = _list(data, "content")
        refusal = _list(data, "refusal")
        return cls(
            content=(
                [ChatCompletionTokenLogprob.from_dict(item) for item in content]
                if content is not None
                else None
            ),
            refusal=(
                [ChatCompletionTokenLogprob.from_dict(item) for item in refusal]
                if refusal is not None
                else None
            ),
        )


@dataclass
class ChatCompletionStreamChoice:
    index: int = 0
    delta: ChatCompletionStreamChoiceDelta = field(default_factory=ChatCompletionStreamChoiceDelta)
    logprobs: Optional[ChatCompletionStreamChoiceLogprobs] = None
    finish_reason: str = ""
    content_filter_results: ContentFilterResults = field(default_factory=ContentFilterResults)

    @classmethod
    def from_dict(cls, data: Any) -> "ChatCompletionStreamChoice":
        data = _mapping(data, "choice")
        logprobs = data.get("logprobs")
        return cls(
            index=_int(data, "index"),
            delta=ChatCompletionStreamChoiceDelta.from_dict(data.get("delta")),
            logprobs=(
                ChatCompletionStreamChoiceLogprobs.from_dict(logprobs) if logprobs is not None else None
            ),
            finish_reason=_str(data, "finish_reason"),
            content_filter_results=ContentFilterResults.from_dict(data.get("content_filter_results")),
        )


@dataclass
class ChatCompletionStreamResponse:
    """One chunk of a streamed chat completion; usage is only set on the final one."""

    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[ChatCompletionStreamChoice] = field(default_factory=list)
    system_fingerprint: str = ""
    prompt_annotations: Optional[list[PromptAnnotation]] = None
    prompt_filter_results: Optional[list[PromptFilterResult]] = None
    usage: Optional[Usage] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ChatCompletionStreamResponse":
        if not isinstance(data, dict):
            raise ValueError("stream chunk must be a JSON object")
        choices = _list(data, "choices") or []
        annotations = _list(data, "prompt_annotations")
        filters = _list(data, "prompt_filter_results")
        usage = data.get("usage")
        return cls(
            id=_str(data, "id"),
            object=_str(data, "object"),
            created=_int(data, "created"),
            model=_str(data, "model"),
            choices=[ChatCompletionStreamChoice.from_dict(choice) for choice in choices],
            system_fingerprint=_str(data, "system_fingerprint"),
            prompt_annotations=(
                [PromptAnnotation.from_dict(item) for item in annotations] if annotations is not None else None
            ),
            prompt_filter_results=(
                [PromptFilterResult.from_dict(item) for item in filters] if filters is not None else None
            ),
            usage=Usage.from_dict(usage) if usage is not None else None,
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> "ChatCompletionStreamResponse":
        """Parse one chunk; a chunk holding an error object raises APIError."""
        data = json.loads(text)
        if isinstance(data, dict) and data.get("error") is not None:
            raise APIError.from_dict(data["error"])
        return cls.from_dict(data)