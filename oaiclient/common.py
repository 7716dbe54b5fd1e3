"""Token usage records shared by the API responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


def _int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    return int(value) if value is not None else 0


@dataclass
class CompletionTokensDetails:
    """Breakdown of tokens used in a completion."""

    audio_tokens: int = 0
    reasoning_tokens: int = 0
    accepted_prediction_tokens: int = 0
    rejected_prediction_tokens: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "CompletionTokensDetails":
        data = data or {}
        return cls(
            audio_tokens=_int(data, "audio_tokens"),
            reasoning_tokens=_int(data, "reasoning_tokens"),
            accepted_prediction_tokens=_int(data, "accepted_prediction_tokens"),
            rejected_prediction_tokens=_int(data, "rejected_prediction_tokens"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "audio_tokens": self.audio_tokens,
            "reasoning_tokens": self.reasoning_tokens,
            "accepted_prediction_tokens": self.accepted_prediction_tokens,
            "rejected_prediction_tokens": self.rejected_prediction_tokens,
        }


@dataclass
class PromptTokensDetails:
    """Breakdown of tokens used in the prompt."""

    audio_tokens: int = 0
    cached_tokens: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "PromptTokensDetails":
        data = data or {}
        return cls(
            audio_tokens=_int(data, "audio_tokens"),
            cached_tokens=_int(data, "cached_tokens"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"audio_tokens": self.audio_tokens, "cached_tokens": self.cached_tokens}


@dataclass
class Usage:
    """Total token usage of one request."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    prompt_tokens_details: Optional[PromptTokensDetails] = None
    completion_tokens_details: Optional[CompletionTokensDetails] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Usage":
        data = data or {}
        prompt_details = data.get("prompt_tokens_details")
        completion_details = data.get("completion_tokens_details")
        return cls(
            prompt_tokens=_int(data, "prompt_tokens"),
            completion_tokens=_int(data, "completion_tokens"),
            total_tokens=_int(data, "total_tokens"),
            prompt_tokens_details=(
                PromptTokensDetails.from_dict(prompt_details) if prompt_details is not None else None
            ),
            completion_tokens_details=(
                CompletionTokensDetails.from_dict(completion_details)
                if completion_details is not None
                else None
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
            "prompt_tokens_details": (
                self.prompt_tokens_details.to_dict() if self.prompt_tokens_details else None
            ),
            "completion_tokens_details": (
                self.completion_tokens_details.to_dict() if self.completion_tokens_details else None
            ),
        }