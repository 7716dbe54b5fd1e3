"""Assistants: their data and the calls that manage them."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

from .chat import FunctionDefinition, _bool, _float, _int, _list, _mapping, _str
from .client import Client

ASSISTANTS_SUFFIX = "/assistants"
ASSISTANTS_FILES_SUFFIX = "/files"


def _opt_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    return _str(data, key) if data.get(key) is not None else None


def _opt_float(data: Mapping[str, Any], key: str) -> Optional[float]:
    return _float(data, key) if data.get(key) is not None else None


def _enum_text(value: Any) -> str:
    return str(getattr(value, "value", value))


class AssistantToolType(str, enum.Enum):
    CODE_INTERPRETER = "code_interpreter"
    RETRIEVAL = "retrieval"
    FUNCTION = "function"
    FILE_SEARCH = "file_search"


@dataclass
class AssistantTool:
    type: str = ""
    function: Optional[FunctionDefinition] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": _enum_text(self.type)}
        if self.function is not None:
            out["function"] = self.function.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "AssistantTool":
        data = _mapping(data, "assistant tool")
        function = data.get("function")
        return cls(
            type=_str(data, "type"),
            function=FunctionDefinition.from_dict(function) if function is not None else None,
        )


@dataclass
class AssistantToolFileSearch:
    vector_store_ids: Optional[list[str]] = None


@dataclass
class AssistantToolCodeInterpreter:
    file_ids: Optional[list[str]] = None


@dataclass
class AssistantToolResource:
    file_search: Optional[AssistantToolFileSearch] = None
    code_interpreter: Optional[AssistantToolCodeInterpreter] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.file_search is not None:
            out["file_search"] = {"vector_store_ids": self.file_search.vector_store_ids}
        if self.code_interpreter is not None:
            out["code_interpreter"] = {"file_ids": self.code_interpreter.file_ids}
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "AssistantToolResource":
        data = _mapping(data, "tool resources")
        file_search = data.get("file_search")
        code_interpreter = data.get("code_interpreter")
        return cls(
            file_search=(
                AssistantToolFileSearch(_list(_mapping(file_search, "file_search"), "vector_store_ids"))
                if file_search is not None
                else None
            ),
            code_interpreter=(
                AssistantToolCodeInterpreter(_list(_mapping(code_interpreter, "code_interpreter"), "file_ids"))
                if code_interpreter is not None
                else None
            ),
        )


def _tools(data: Mapping[str, Any]) -> Optional[list[AssistantTool]]:
    tools = _list(data, "tools")
    return [AssistantTool.from_dict(tool) for tool in tools] if tools is not None else None


@dataclass
class Assistant:
    """An assistant as returned by the API."""

    id: str = ""
    object: str = ""
    created_at: int = 0
    name: Optional[str] = None
    description: Optional[str] = None
    model: str = ""
    instructions: Optional[str] = None
    tools: Optional[list[AssistantTool]] = None
    tool_resources: Optional[AssistantToolResource] = None
    file_ids: Optional[list[str]] = None
    metadata: Optional[dict[str, Any]] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    response_format: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, headers: Optional[Mapping[str, str]] = None) -> "Assistant":
        if not isinstance(data, Mapping):
            raise ValueError("assistant must be a JSON object")
        resources = data.get("tool_resources")
        metadata = data.get("metadata")
        return cls(
            id=_str(data, "id"),
            object=_str(data, "object"),
            created_at=_int(data, "created_at"),
            name=_opt_str(data, "name"),
            description=_opt_str(data, "description"),
            model=_str(data, "model"),
            instructions=_opt_str(data, "instructions"),
            tools=_tools(data),
            tool_resources=AssistantToolResource.from_dict(resources) if resources is not None else None,
            file_ids=_list(data, "file_ids"),
            metadata=dict(metadata) if metadata is not None else None,
            temperature=_opt_float(data, "temperature"),
            top_p=_opt_float(data, "top_p"),
            response_format=data.get("response_format"),
            headers=headers if headers is not None else {},
        )


@dataclass
class AssistantRequest:
    """Parameters to create or modify an assistant.

    tools=None leaves the assistant's tools unchanged, an empty list removes
    them all, and a populated list replaces them.
    """

    model: str = ""
    name: Optional[str] = None
    description: Optional[str] = None
    instructions: Optional[str] = None
    tools: Optional[list[AssistantTool]] = None
    file_ids: Optional[list[str]] = None
    metadata: Optional[dict[str, Any]] = None
    tool_resources: Optional[AssistantToolResource] = None
    response_format: Any = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.tools is not None:
            out["tools"] = [tool.to_dict() for tool in self.tools]
        out["model"] = self.model
        for key in ("name", "description", "instructions"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        if self.file_ids:
            out["file_ids"] = list(self.file_ids)
        if self.metadata:
            out["metadata"] = dict(self.metadata)
        if self.tool_resources is not None:
            out["tool_resources"] = self.tool_resources.to_dict()
        if self.response_format is not None:
            fmt = self.response_format
            out["response_format"] = fmt.to_dict() if hasattr(fmt, "to_dict") else fmt
        if self.temperature is not None:
            out["temperature"] = self.temperature
        if self.top_p is not None:
            out["top_p"] = self.top_p
        return out


@dataclass
class AssistantsList:
    assistants: list[Assistant] = field(default_factory=list)
    last_id: Optional[str] = None
    first_id: Optional[str] = None
    has_more: bool = False
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, headers: Optional[Mapping[str, str]] = None) -> "AssistantsList":
        data = _mapping(data, "assistants list")
        return cls(
            assistants=[Assistant.from_dict(item) for item in _list(data, "data") or []],
            last_id=_opt_str(data, "last_id"),
            first_id=_opt_str(data, "first_id"),
            has_more=_bool(data, "has_more"),
            headers=headers if headers is not None else {},
        )


@dataclass
class AssistantDeleteResponse:
    id: str = ""
    object: str = ""
    deleted: bool = False
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, headers: Optional[Mapping[str, str]] = None) -> "AssistantDeleteResponse":
        data = _mapping(data, "delete response")
        return cls(
            id=_str(data, "id"),
            object=_str(data, "object"),
            deleted=_bool(data, "deleted"),
            headers=headers if headers is not None else {},
        )


@dataclass
class AssistantFile:
    id: str = ""
    object: str = ""
    created_at: int = 0
    assistant_id: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, headers: Optional[Mapping[str, str]] = None) -> "AssistantFile":
        data = _mapping(data, "assistant file")
        return cls(
            id=_str(data, "id"),
            object=_str(data, "object"),
            created_at=_int(data, "created_at"),
            assistant_id=_str(data, "assistant_id"),
            headers=headers if headers is not None else {},
        )


@dataclass
class AssistantFileRequest:
    file_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"file_id": self.file_id}


@dataclass
class AssistantFilesList:
    assistant_files: list[AssistantFile] = field(default_factory=list)
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, headers: Optional[Mapping[str, str]] = None) -> "AssistantFilesList":
        data = _mapping(data, "assistant files list")
        return cls(
            assistant_files=[AssistantFile.from_dict(item) for item in _list(data, "data") or []],
            headers=headers if headers is not None else {},
        )


def _list_query(
    limit: Optional[int], order: Optional[str], after: Optional[str], before: Optional[str]
) -> str:
    pairs = [
        (key, str(value))
        for key, value in (("limit", limit), ("order", order), ("after", after), ("before", before))
        if value is not None
    ]
    if not pairs:
        return ""
    pairs.sort(key=lambda pair: pair[0])
    return "?" + urlencode(pairs)


def _send(
    client: Client, method: str, suffix: str, body: Any = None, as_text: bool = False
) -> tuple[Any, Any]:
    headers = {"OpenAI-Beta": f"assistants={client.config.assistant_version}"}
    request = client.new_request(method, client.full_url(suffix), body=body, headers=headers)
    return client.send_request(request, as_text)


def create_assistant(client: Client, request: AssistantRequest) -> Assistant:
    """Create a new assistant."""
    data, headers = _send(client, "POST", ASSISTANTS_SUFFIX, request.to_dict())
    return Assistant.from_dict(data, headers)


def retrieve_assistant(client: Client, assistant_id: str) -> Assistant:
    """Retrieve an assistant."""
    data, headers = _send(client, "GET", f"{ASSISTANTS_SUFFIX}/{assistant_id}")
    return Assistant.from_dict(data, headers)


def modify_assistant(client: Client, assistant_id: str, request: AssistantRequest) -> Assistant:
    """Modify an assistant."""
    data, headers = _send(client, "POST", f"{ASSISTANTS_SUFFIX}/{assistant_id}", request.to_dict())
    return Assistant.from_dict(data, headers)


def delete_assistant(client: Client, assistant_id: str) -> AssistantDeleteResponse:
    """Delete an assistant."""
    data, headers = _send(client, "DELETE", f"{ASSISTANTS_SUFFIX}/{assistant_id}")
    return AssistantDeleteResponse.from_dict(data, headers)


def list_assistants(
    client: Client,
    limit: Optional[int] = None,
    order: Optional[str] = None,
    after: Optional[str] = None,
    before: Optional[str] = None,
) -> AssistantsList:
    """List the available assistants."""
    suffix = ASSISTANTS_SUFFIX + _list_query(limit, order, after, before)
    data, headers = _send(client, "GET", suffix)
    return AssistantsList.from_dict(data, headers)


def create_assistant_file(
    client: Client, assistant_id: str, request: AssistantFileRequest
) -> AssistantFile:
    """Attach a file to an assistant."""
    suffix = f"{ASSISTANTS_SUFFIX}/{assistant_id}{ASSISTANTS_FILES_SUFFIX}"
    data, headers = _send(client, "POST", suffix, request.to_dict())
    return AssistantFile.from_dict(data, headers)


def retrieve_assistant_file(client: Client, assistant_id: str, file_id: str) -> AssistantFile:
    """Retrieve a file attached to an assistant."""
    suffix = f"{ASSISTANTS_SUFFIX}/{assistant_id}{ASSISTANTS_FILES_SUFFIX}/{file_id}"
    data, headers = _send(client, "GET", suffix)
    return AssistantFile.from_dict(data, headers)


def delete_assistant_file(client: Client, assistant_id: str, file_id: str) -> None:
    """Remove a file from an assistant; the response body is ignored."""
    suffix = f"{ASSISTANTS_SUFFIX}/{assistant_id}{ASSISTANTS_FILES_SUFFIX}/{file_id}"
    _send(client, "DELETE", suffix, as_text=True)


def list_assistant_files(
    client: Client,
    assistant_id: str,
    limit: Optional[int] = None,
    order: Optional[str] = None,
    after: Optional[str] = None,
    before: Optional[str] = None,
) -> AssistantFilesList:
    """List the files attached to an assistant."""
    suffix = (
        f"{ASSISTANTS_SUFFIX}/{assistant_id}{ASSISTANTS_FILES_SUFFIX}"
        + _list_query(limit, order, after, before)
    )
    data, headers = _send(client, "GET", suffix)
    return AssistantFilesList.from_dict(data, headers)