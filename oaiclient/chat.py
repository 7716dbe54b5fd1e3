"""Chat completion requests, responses and the call that creates them."""

from __future__ import annotations

import base64
import enum
import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .client import Client, ClientError
from .common import Usage

CHAT_MESSAGE_ROLE_SYSTEM = "system"
CHAT_MESSAGE_ROLE_USER = "user"
CHAT_MESSAGE_ROLE_ASSISTANT = "assistant"
CHAT_MESSAGE_ROLE_FUNCTION = "function"
CHAT_MESSAGE_ROLE_TOOL = "tool"
CHAT_MESSAGE_ROLE_DEVELOPER = "developer"

CHAT_COMPLETIONS_SUFFIX = "/chat/completions"


class ChatCompletionError(ClientError):
    """Base class for errors detected before a chat request is sent."""


class InvalidModelError(ChatCompletionError):
    """The model cannot be used with the chat completion endpoint."""

    def __init__(self) -> None:
        super().__init__(
            "this model is not supported with this method, please use create_completion instead"
        )


class StreamNotSupportedError(ChatCompletionError):
    """A streaming request was given to the non-streaming call."""

    def __init__(self) -> None:
        super().__init__(
            "streaming is not supported with this method, please use create_chat_completion_stream"
        )


class ContentFieldsMisusedError(ChatCompletionError, ValueError):
    """A message sets both content and multi_content."""

    def __init__(self) -> None:
        super().__init__("can't use both Content and MultiContent properties simultaneously")


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object")
    return data


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _bool(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean")
    return value


def _int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} must be a number")
    return int(value)


def _float(data: Mapping[str, Any], key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} must be a number")
    return float(value)


def _list(data: Mapping[str, Any], key: str) -> Optional[list]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be an array")
    return value


def _num(value: float) -> Any:
    """Render whole floats as integers, as the wire format does."""
    return int(value) if float(value).is_integer() else value


def _encode(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (bytes, bytearray)):
        return json.loads(bytes(value))
    if isinstance(value, list):
        return [_encode(item) for item in value]
    return value


def _decode_bytes(value: Any) -> bytes:
    if value is None:
        return b""
    if isinstance(value, str):
        return base64.b64decode(value)
    if isinstance(value, list):
        return bytes(value)
    raise ValueError("bytes must be a base64 string or a list of integers")


@dataclass
class _SeverityResult:
    filtered: bool = False
    severity: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "_SeverityResult":
        data = _mapping(data, "filter result")
        return cls(filtered=_bool(data, "filtered"), severity=_str(data, "severity"))

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"filtered": self.filtered}
        if self.severity:
            out["severity"] = self.severity
        return out


@dataclass
class _DetectionResult:
    filtered: bool = False
    detected: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "_DetectionResult":
        data = _mapping(data, "filter result")
        return cls(filtered=_bool(data, "filtered"), detected=_bool(data, "detected"))

    def to_dict(self) -> dict[str, Any]:
        return {"filtered": self.filtered, "detected": self.detected}


@dataclass
class ContentFilterResults:
    """Outcome of the content filters for one prompt or choice."""

    hate: _SeverityResult = field(default_factory=_SeverityResult)
    self_harm: _SeverityResult = field(default_factory=_SeverityResult)
    sexual: _SeverityResult = field(default_factory=_SeverityResult)
    violence: _SeverityResult = field(default_factory=_SeverityResult)
    jailbreak: _DetectionResult = field(default_factory=_DetectionResult)
    profanity: _DetectionResult = field(default_factory=_DetectionResult)

    @classmethod
    def from_dict(cls, data: Any) -> "ContentFilterResults":
        data = _mapping(data, "content filter results")
        return cls(
            hate=_SeverityResult.from_dict(data.get("hate")),
            self_harm=_SeverityResult.from_dict(data.get("self_harm")),
            sexual=_SeverityResult.from_dict(data.get("sexual")),
            violence=_SeverityResult.from_dict(data.get("violence")),
            jailbreak=_DetectionResult.from_dict(data.get("jailbreak")),
            profanity=_DetectionResult.from_dict(data.get("profanity")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "hate": self.hate.to_dict(),
            "self_harm": self.self_harm.to_dict(),
            "sexual": self.sexual.to_dict(),
            "violence": self.violence.to_dict(),
            "jailbreak": self.jailbreak.to_dict(),
            "profanity": self.profanity.to_dict(),
        }


@dataclass
class PromptAnnotation:
    prompt_index: int = 0
    content_filter_results: ContentFilterResults = field(default_factory=ContentFilterResults)

    @classmethod
    def from_dict(cls, data: Any) -> "PromptAnnotation":
        data = _mapping(data, "prompt annotation")
        return cls(
            prompt_index=_int(data, "prompt_index"),
            content_filter_results=ContentFilterResults.from_dict(data.get("content_filter_results")),
        )


@dataclass
class PromptFilterResult:
    index: int = 0
    content_filter_results: ContentFilterResults = field(default_factory=ContentFilterResults)

    @classmethod
    def from_dict(cls, data: Any) -> "PromptFilterResult":
        data = _mapping(data, "prompt filter result")
        return cls(
            index=_int(data, "index"),
            content_filter_results=ContentFilterResults.from_dict(data.get("content_filter_results")),
        )


class ImageURLDetail(str, enum.Enum):
    HIGH = "high"
    LOW = "low"
    AUTO = "auto"


@dataclass
class ChatMessageImageURL:
    url: str = ""
    detail: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ChatMessageImageURL":
        data = _mapping(data, "image_url")
        return cls(url=_str(data, "url"), detail=_str(data, "detail"))

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.url:
            out["url"] = self.url
        if self.detail:
            out["detail"] = str(getattr(self.detail, "value", self.detail))
        return out


@dataclass
class ChatMessageFile:
    file_id: str = ""
    file_name: str = ""
    file_data: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ChatMessageFile":
        data = _mapping(data, "file")
        return cls(
            file_id=_str(data, "file_id"),
            file_name=_str(data, "file_name"),
            file_data=_str(data, "file_data"),
        )

    def to_dict(self) -> dict[str, Any]:
        pairs = (("file_id", self.file_id), ("file_name", self.file_name), ("file_data", self.file_data))
        return {key: value for key, value in pairs if value}


class ChatMessagePartType(str, enum.Enum):
    TEXT = "text"
    IMAGE_URL = "image_url"
    FILE = "file"


@dataclass
class ChatMessagePart:
    """One piece of a multi-part message."""

    type: str = ""
    text: str = ""
    image_url: Optional[ChatMessageImageURL] = None
    file: Optional[ChatMessageFile] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.type:
            out["type"] = str(getattr(self.type, "value", self.type))
        if self.text:
            out["text"] = self.text
        if self.image_url is not None:
            out["image_url"] = self.image_url.to_dict()
        if self.file is not None:
            out["file"] = self.file.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "ChatMessagePart":
        data = _mapping(data, "message part")
        image_url = data.get("image_url")
        file = data.get("file")
        return cls(
            type=_str(data, "type"),
            text=_str(data, "text"),
            image_url=ChatMessageImageURL.from_dict(image_url) if image_url is not None else None,
            file=ChatMessageFile.from_dict(file) if file is not None else None,
        )


@dataclass
class FunctionCall:
    name: str = ""
    arguments: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.name:
            out["name"] = self.name
        if self.arguments:
            out["arguments"] = self.arguments
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "FunctionCall":
        data = _mapping(data, "function call")
        return cls(name=_str(data, "name"), arguments=_str(data, "arguments"))


class ToolType(str, enum.Enum):
    FUNCTION = "function"


@dataclass
class ToolCall:
    """A tool call; index is only set in streamed chunks."""

    index: Optional[int] = None
    id: str = ""
    type: str = ""
    function: FunctionCall = field(default_factory=FunctionCall)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.index is not None:
            out["index"] = self.index
        if self.id:
            out["id"] = self.id
        out["type"] = str(getattr(self.type, "value", self.type))
        out["function"] = self.function.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "ToolCall":
        data = _mapping(data, "tool call")
        index = data.get("index")
        return cls(
            index=_int(data, "index") if index is not None else None,
            id=_str(data, "id"),
            type=_str(data, "type"),
            function=FunctionCall.from_dict(data.get("function")),
        )


@dataclass
class ChatCompletionMessage:
    """A chat message with either plain content or multi-part content."""

    role: str = ""
    content: str = ""
    refusal: str = ""
    multi_content: Optional[list[ChatMessagePart]] = None
    name: str = ""
    reasoning_content: str = ""
    function_call: Optional[FunctionCall] = None
    tool_calls: Optional[list[ToolCall]] = None
    tool_call_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        if self.content and self.multi_content is not None:
            raise ContentFieldsMisusedError()
        out: dict[str, Any] = {"role": self.role}
        if self.multi_content:
            if self.refusal:
                out["refusal"] = self.refusal
            out["content"] = [part.to_dict() for part in self.multi_content]
        else:
            if self.content:
                out["content"] = self.content
            if self.refusal:
                out["refusal"] = self.refusal
        if self.name:
            out["name"] = self.name
        if self.reasoning_content:
            out["reasoning_content"] = self.reasoning_content
        if self.function_call is not None:
            out["function_call"] = self.function_call.to_dict()
        if self.tool_calls:
            out["tool_calls"] = [call.to_dict() for call in self.tool_calls]
        if self.tool_call_id:
            out["tool_call_id"] = self.tool_call_id
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "ChatCompletionMessage":
        if not isinstance(data, Mapping):
            raise ValueError("chat message must be a JSON object")
        raw_content = data.get("content")
        content = ""
        multi_content: Optional[list[ChatMessagePart]] = None
        if isinstance(raw_content, list):
            multi_content = [ChatMessagePart.from_dict(part) for part in raw_content]
        elif raw_content is not None:
            content = _str(data, "content")
        function_call = data.get("function_call")
        tool_calls = _list(data, "tool_calls")
        return cls(
            role=_str(data, "role"),
            content=content,
            refusal=_str(data, "refusal"),
            multi_content=multi_content,
            name=_str(data, "name"),
            reasoning_content=_str(data, "reasoning_content"),
            function_call=FunctionCall.from_dict(function_call) if function_call is not None else None,
            tool_calls=[ToolCall.from_dict(call) for call in tool_calls] if tool_calls is not None else None,
            tool_call_id=_str(data, "tool_call_id"),
        )


class ChatCompletionResponseFormatType(str, enum.Enum):
    JSON_OBJECT = "json_object"
    JSON_SCHEMA = "json_schema"
    TEXT = "text"


@dataclass
class ChatCompletionResponseFormatJSONSchema:
    """A named JSON schema the response must follow."""

    name: str = ""
    description: str = ""
    schema: Any = None
    strict: bool = False

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.description:
            out["description"] = self.description
        out["schema"] = _encode(self.schema)
        out["strict"] = self.strict
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "ChatCompletionResponseFormatJSONSchema":
        if not isinstance(data, Mapping):
            raise ValueError("json_schema must be a JSON object")
        schema = data.get("schema")
        if schema is not None and not isinstance(schema, Mapping):
            raise ValueError("schema must be a JSON object")
        return cls(
            name=_str(data, "name"),
            description=_str(data, "description"),
            schema=dict(schema) if schema is not None else None,
            strict=_bool(data, "strict"),
        )


@dataclass
class ChatCompletionResponseFormat:
    type: str = ""
    json_schema: Optional[ChatCompletionResponseFormatJSONSchema] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.type:
            out["type"] = str(getattr(self.type, "value", self.type))
        if self.json_schema is not None:
            out["json_schema"] = self.json_schema.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "ChatCompletionResponseFormat":
        data = _mapping(data, "response_format")
        schema = data.get("json_schema")
        return cls(
            type=_str(data, "type"),
            json_schema=(
                ChatCompletionResponseFormatJSONSchema.from_dict(schema) if schema is not None else None
            ),
        )


@dataclass
class StreamOptions:
    include_usage: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"include_usage": True} if self.include_usage else {}

    @classmethod
    def from_dict(cls, data: Any) -> "StreamOptions":
        return cls(include_usage=_bool(_mapping(data, "stream_options"), "include_usage"))


@dataclass
class FunctionDefinition:
    """A function the model may call; parameters describe it as a JSON schema."""

    name: str = ""
    description: str = ""
    strict: bool = False
    parameters: Any = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.description:
            out["description"] = self.description
        if self.strict:
            out["strict"] = True
        out["parameters"] = _encode(self.parameters)
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "FunctionDefinition":
        data = _mapping(data, "function definition")
        return cls(
            name=_str(data, "name"),
            description=_str(data, "description"),
            strict=_bool(data, "strict"),
            parameters=data.get("parameters"),
        )


@dataclass
class Tool:
    type: str = ToolType.FUNCTION.value
    function: Optional[FunctionDefinition] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": str(getattr(self.type, "value", self.type))}
        if self.function is not None:
            out["function"] = self.function.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "Tool":
        data = _mapping(data, "tool")
        function = data.get("function")
        return cls(
            type=_str(data, "type"),
            function=FunctionDefinition.from_dict(function) if function is not None else None,
        )


@dataclass
class ToolFunction:
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name}


@dataclass
class ToolChoice:
    type: str = ToolType.FUNCTION.value
    function: ToolFunction = field(default_factory=ToolFunction)

    def to_dict(self) -> dict[str, Any]:
        return {"type": str(getattr(self.type, "value", self.type)), "function": self.function.to_dict()}


@dataclass
class TopLogProbs:
    token: str = ""
    logprob: float = 0.0
    bytes: Optional[bytes] = None

    @classmethod
    def from_dict(cls, data: Any) -> "TopLogProbs":
        data = _mapping(data, "top logprob")
        raw = data.get("bytes")
        return cls(
            token=_str(data, "token"),
            logprob=_float(data, "logprob"),
            bytes=_decode_bytes(raw) if raw is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"token": self.token, "logprob": self.logprob}
        if self.bytes:
            out["bytes"] = base64.b64encode(self.bytes).decode("ascii")
        return out


@dataclass
class LogProb:
    """Probability information for one token."""

    token: str = ""
    logprob: float = 0.0
    bytes: Optional[bytes] = None
    top_logprobs: Optional[list[TopLogProbs]] = None

    @classmethod
    def from_dict(cls, data: Any) -> "LogProb":
        data = _mapping(data, "logprob")
        raw = data.get("bytes")
        top = _list(data, "top_logprobs")
        return cls(
            token=_str(data, "token"),
            logprob=_float(data, "logprob"),
            bytes=_decode_bytes(raw) if raw is not None else None,
            top_logprobs=[TopLogProbs.from_dict(item) for item in top] if top is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"token": self.token, "logprob": self.logprob}
        if self.bytes:
            out["bytes"] = base64.b64encode(self.bytes).decode("ascii")
        out["top_logprobs"] = (
            [item.to_dict() for item in self.top_logprobs] if self.top_logprobs is not None else None
        )
        return out


@dataclass
class LogProbs:
    content: Optional[list[LogProb]] = None

    @classmethod
    def from_dict(cls, data: Any) -> "LogProbs":
        content = _list(_mapping(data, "logprobs"), "content")
        return cls(content=[LogProb.from_dict(item) for item in content] if content is not None else None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": [item.to_dict() for item in self.content] if self.content is not None else None
        }


@dataclass
class Prediction:
    content: str = ""
    type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"content": self.content, "type": self.type}

    @classmethod
    def from_dict(cls, data: Any) -> "Prediction":
        data = _mapping(data, "prediction")
        return cls(content=_str(data, "content"), type=_str(data, "type"))


class FinishReason(str, enum.Enum):
    STOP = "stop"
    LENGTH = "length"
    FUNCTION_CALL = "function_call"
    TOOL_CALLS = "tool_calls"
    CONTENT_FILTER = "content_filter"
    NULL = "null"


class ServiceTier(str, enum.Enum):
    AUTO = "auto"
    DEFAULT = "default"
    FLEX = "flex"
    PRIORITY = "priority"


def _finish_reason_out(reason: Any) -> Optional[str]:
    text = str(getattr(reason, "value", reason) or "")
    if text in ("", FinishReason.NULL.value):
        return None
    return text


def _enum_text(value: Any) -> str:
    return str(getattr(value, "value", value))


@dataclass
class ChatCompletionRequest:
    """Parameters of a chat completion call."""

    model: str = ""
    messages: Optional[list[ChatCompletionMessage]] = None
    max_tokens: int = 0
    max_completion_tokens: int = 0
    temperature: float = 0.0
    top_p: float = 0.0
    n: int = 0
    stream: bool = False
    stop: Optional[list[str]] = None
    presence_penalty: float = 0.0
    response_format: Optional[ChatCompletionResponseFormat] = None
    seed: Optional[int] = None
    frequency_penalty: float = 0.0
    logit_bias: Optional[dict[str, int]] = None
    logprobs: bool = False
    top_logprobs: int = 0
    user: str = ""
    functions: Optional[list[FunctionDefinition]] = None
    function_call: Any = None
    tools: Optional[list[Tool]] = None
    tool_choice: Any = None
    stream_options: Optional[StreamOptions] = None
    parallel_tool_calls: Any = None
    store: bool = False
    reasoning_effort: str = ""
    metadata: Optional[dict[str, str]] = None
    prediction: Optional[Prediction] = None
    chat_template_kwargs: Optional[dict[str, Any]] = None
    service_tier: str = ""
    guided_choice: Optional[list[str]] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_dict() for m in self.messages] if self.messages is not None else None,
        }
        optional: list[tuple[str, Any]] = [
            ("max_tokens", self.max_tokens),
            ("max_completion_tokens", self.max_completion_tokens),
            ("temperature", _num(self.temperature) if self.temperature else 0),
            ("top_p", _num(self.top_p) if self.top_p else 0),
            ("n", self.n),
            ("stream", self.stream),
            ("stop", list(self.stop) if self.stop else None),
            ("presence_penalty", _num(self.presence_penalty) if self.presence_penalty else 0),
            ("response_format", self.response_format.to_dict() if self.response_format else None),
            ("seed", self.seed),
            ("frequency_penalty", _num(self.frequency_penalty) if self.frequency_penalty else 0),
            ("logit_bias", dict(self.logit_bias) if self.logit_bias else None),
            ("logprobs", self.logprobs),
            ("top_logprobs", self.top_logprobs),
            ("user", self.user),
            ("functions", [f.to_dict() for f in self.functions] if self.functions else None),
            ("function_call", _encode(self.function_call) if self.function_call is not None else None),
            ("tools", [t.to_dict() for t in self.tools] if self.tools else None),
            ("tool_choice", _encode(self.tool_choice) if self.tool_choice is not None else None),
            ("stream_options", self.stream_options.to_dict() if self.stream_options else None),
            ("parallel_tool_calls", self.parallel_tool_calls),
            ("store", self.store),
            ("reasoning_effort", self.reasoning_effort),
            ("metadata", dict(self.metadata) if self.metadata else None),
            ("prediction", self.prediction.to_dict() if self.prediction else None),
            ("chat_template_kwargs", dict(self.chat_template_kwargs) if self.chat_template_kwargs else None),
            ("service_tier", _enum_text(self.service_tier) if self.service_tier else ""),
            ("guided_choice", list(self.guided_choice) if self.guided_choice else None),
        ]
        for key, value in optional:
            if key in ("seed", "parallel_tool_calls"):
                if value is not None:
                    out[key] = value
            elif value:
                out[key] = value
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "ChatCompletionRequest":
        if not isinstance(data, Mapping):
            raise ValueError("chat completion request must be a JSON object")
        messages = _list(data, "messages")
        functions = _list(data, "functions")
        tools = _list(data, "tools")
        response_format = data.get("response_format")
        stream_options = data.get("stream_options")
        prediction = data.get("prediction")
        seed = data.get("seed")
        return cls(
            model=_str(data, "model"),
            messages=[ChatCompletionMessage.from_dict(m) for m in messages] if messages is not None else None,
            max_tokens=_int(data, "max_tokens"),
            max_completion_tokens=_int(data, "max_completion_tokens"),
            temperature=_float(data, "temperature"),
            top_p=_float(data, "top_p"),
            n=_int(data, "n"),
            stream=_bool(data, "stream"),
            stop=_list(data, "stop"),
            presence_penalty=_float(data, "presence_penalty"),
            response_format=(
                ChatCompletionResponseFormat.from_dict(response_format)
                if response_format is not None
                else None
            ),
            seed=_int(data, "seed") if seed is not None else None,
            frequency_penalty=_float(data, "frequency_penalty"),
            logit_bias=dict(data["logit_bias"]) if data.get("logit_bias") is not None else None,
            logprobs=_bool(data, "logprobs"),
            top_logprobs=_int(data, "top_logprobs"),
            user=_str(data, "user"),
            functions=[FunctionDefinition.from_dict(f) for f in functions] if functions is not None else None,
            function_call=data.get("function_call"),
            tools=[Tool.from_dict(t) for t in tools] if tools is not None else None,
            tool_choice=data.get("tool_choice"),
            stream_options=StreamOptions.from_dict(stream_options) if stream_options is not None else None,
            parallel_tool_calls=data.get("parallel_tool_calls"),
            store=_bool(data, "store"),
            reasoning_effort=_str(data, "reasoning_effort"),
            metadata=dict(data["metadata"]) if data.get("metadata") is not None else None,
            prediction=Prediction.from_dict(prediction) if prediction is not None else None,
            chat_template_kwargs=(
                dict(data["chat_template_kwargs"]) if data.get("chat_template_kwargs") is not None else None
            ),
            service_tier=_str(data, "service_tier"),
            guided_choice=_list(data, "guided_choice"),
        )


@dataclass
class ChatCompletionChoice:
    index: int = 0
    message: ChatCompletionMessage = field(default_factory=ChatCompletionMessage)
    finish_reason: str = ""
    logprobs: Optional[LogProbs] = None
    content_filter_results: ContentFilterResults = field(default_factory=ContentFilterResults)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "index": self.index,
            "message": self.message.to_dict(),
            "finish_reason": _finish_reason_out(self.finish_reason),
        }
        if self.logprobs is not None:
            out["logprobs"] = self.logprobs.to_dict()
        out["content_filter_results"] = self.content_filter_results.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "ChatCompletionChoice":
        data = _mapping(data, "choice")
        logprobs = data.get("logprobs")
        return cls(
            index=_int(data, "index"),
            message=ChatCompletionMessage.from_dict(data.get("message") or {}),
            finish_reason=_str(data, "finish_reason"),
            logprobs=LogProbs.from_dict(logprobs) if logprobs is not None else None,
            content_filter_results=ContentFilterResults.from_dict(data.get("content_filter_results")),
        )


@dataclass
class ChatCompletionResponse:
    """The result of a chat completion call, with the response headers."""

    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[ChatCompletionChoice] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    system_fingerprint: str = ""
    prompt_filter_results: Optional[list[PromptFilterResult]] = None
    service_tier: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, headers: Optional[Mapping[str, str]] = None) -> "ChatCompletionResponse":
        if not isinstance(data, Mapping):
            raise ValueError("chat completion response must be a JSON object")
        choices = _list(data, "choices") or []
        filters = _list(data, "prompt_filter_results")
        return cls(
            id=_str(data, "id"),
            object=_str(data, "object"),
            created=_int(data, "created"),
            model=_str(data, "model"),
            choices=[ChatCompletionChoice.from_dict(choice) for choice in choices],
            usage=Usage.from_dict(data.get("usage")),
            system_fingerprint=_str(data, "system_fingerprint"),
            prompt_filter_results=(
                [PromptFilterResult.from_dict(item) for item in filters] if filters is not None else None
            ),
            service_tier=_str(data, "service_tier"),
            headers=headers if headers is not None else {},
        )


def create_chat_completion(client: Client, request: ChatCompletionRequest) -> ChatCompletionResponse:
    """Create a completion for a chat conversation."""
    if request.stream:
        raise StreamNotSupportedError()
    url = client.full_url(CHAT_COMPLETIONS_SUFFIX, model=request.model)
    http_request = client.new_request("POST", url, body=request.to_dict())
    data, headers = client.send_request(http_request)
    return ChatCompletionResponse.from_dict(data, headers)