"""Batch jobs: line items, batch records and the calls that manage them."""

from __future__ import annotations

import dataclasses
import enum
import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

from .chat import _bool, _int, _list, _mapping, _str
from .client import Client

BATCHES_SUFFIX = "/batches"


class BatchEndpoint(str, enum.Enum):
    CHAT_COMPLETIONS = "/v1/chat/completions"
    COMPLETIONS = "/v1/completions"
    EMBEDDINGS = "/v1/embeddings"


def _enum_text(value: Any) -> str:
    return str(getattr(value, "value", value))


_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


def _compact_json(value: Any) -> bytes:
    text = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    for char, escape in _ESCAPES:
        text = text.replace(char, escape)
    return text.encode("utf-8")


def _body_dict(body: Any) -> dict[str, Any]:
    if body is None:
        return {}
    if hasattr(body, "to_dict"):
        return body.to_dict()
    if isinstance(body, Mapping):
        return dict(body)
    raise TypeError("batch line body must be a mapping or have to_dict()")


@dataclass
class BatchLineItem:
    """One request line of a batch input file."""

    custom_id: str = ""
    body: Any = None
    method: str = "POST"
    url: str = ""

    def marshal_batch_line_item(self) -> bytes:
        return _compact_json(
            {
                "custom_id": self.custom_id,
                "body": _body_dict(self.body),
                "method": self.method,
                "url": _enum_text(self.url),
            }
        )


@dataclass
class BatchChatCompletionRequest(BatchLineItem):
    url: str = BatchEndpoint.CHAT_COMPLETIONS.value


@dataclass
class BatchCompletionRequest(BatchLineItem):
    url: str = BatchEndpoint.COMPLETIONS.value


@dataclass
class BatchEmbeddingRequest(BatchLineItem):
    url: str = BatchEndpoint.EMBEDDINGS.value


def _opt_int(data: Mapping[str, Any], key: str) -> Optional[int]:
    return _int(data, key) if data.get(key) is not None else None


def _opt_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    return _str(data, key) if data.get(key) is not None else None


@dataclass
class BatchRequestCounts:
    total: int = 0
    completed: int = 0
    failed: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "BatchRequestCounts":
        data = _mapping(data, "request_counts")
        return cls(
            total=_int(data, "total"),
            completed=_int(data, "completed"),
            failed=_int(data, "failed"),
        )


@dataclass
class BatchError:
    """One error reported for a batch."""

    code: str = ""
    message: str = ""
    param: Optional[str] = None
    line: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Any) -> "BatchError":
        data = _mapping(data, "batch error")
        return cls(
            code=_str(data, "code"),
            message=_str(data, "message"),
            param=_opt_str(data, "param"),
            line=_opt_int(data, "line"),
        )


@dataclass
class Batch:
    """A batch job as returned by the API."""

    id: str = ""
    object: str = ""
    endpoint: str = ""
    errors: Optional[list[BatchError]] = None
    input_file_id: str = ""
    completion_window: str = ""
    status: str = ""
    output_file_id: Optional[str] = None
    error_file_id: Optional[str] = None
    created_at: int = 0
    in_progress_at: Optional[int] = None
    expires_at: Optional[int] = None
    finalizing_at: Optional[int] = None
    completed_at: Optional[int] = None
    failed_at: Optional[int] = None
    expired_at: Optional[int] = None
    cancelling_at: Optional[int] = None
    cancelled_at: Optional[int] = None
    request_counts: BatchRequestCounts = field(default_factory=BatchRequestCounts)
    metadata: Optional[dict[str, Any]] = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, headers: Optional[Mapping[str, str]] = None) -> "Batch":
        data = _mapping(data, "batch")
        raw_errors = data.get("errors")
        errors = None
        if raw_errors is not None:
            items = _list(_mapping(raw_errors, "errors"), "data") or []
            errors = [BatchError.from_dict(item) for item in items]
        metadata = data.get("metadata")
        return cls(
            id=_str(data, "id"),
            object=_str(data, "object"),
            endpoint=_str(data, "endpoint"),
            errors=errors,
            input_file_id=_str(data, "input_file_id"),
            completion_window=_str(data, "completion_window"),
            status=_str(data, "status"),
            output_file_id=_opt_str(data, "output_file_id"),
            error_file_id=_opt_str(data, "error_file_id"),
            created_at=_int(data, "created_at"),
            in_progress_at=_opt_int(data, "in_progress_at"),
            expires_at=_opt_int(data, "expires_at"),
            finalizing_at=_opt_int(data, "finalizing_at"),
            completed_at=_opt_int(data, "completed_at"),
            failed_at=_opt_int(data, "failed_at"),
            expired_at=_opt_int(data, "expired_at"),
            cancelling_at=_opt_int(data, "cancelling_at"),
            cancelled_at=_opt_int(data, "cancelled_at"),
            request_counts=BatchRequestCounts.from_dict(data.get("request_counts")),
            metadata=dict(metadata) if metadata is not None else None,
            headers=headers if headers is not None else {},
        )


@dataclass
class CreateBatchRequest:
    input_file_id: str = ""
    endpoint: str = ""
    completion_window: str = ""
    metadata: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "input_file_id": self.input_file_id,
            "endpoint": _enum_text(self.endpoint),
            "completion_window": self.completion_window,
            "metadata": dict(self.metadata) if self.metadata is not None else None,
        }


@dataclass
class UploadBatchFileRequest:
    """The lines of a batch input file and the name to upload it under."""

    file_name: str = ""
    lines: list[BatchLineItem] = field(default_factory=list)

    def marshal_jsonl(self) -> bytes:
        return b"\n".join(line.marshal_batch_line_item() for line in self.lines)

    def add_chat_completion(self, custom_id: str, body: Any) -> None:
        self.lines.append(BatchChatCompletionRequest(custom_id=custom_id, body=body))

    def add_completion(self, custom_id: str, body: Any) -> None:
        self.lines.append(BatchCompletionRequest(custom_id=custom_id, body=body))

    def add_embedding(self, custom_id: str, body: Any) -> None:
        self.lines.append(BatchEmbeddingRequest(custom_id=custom_id, body=body))


@dataclass
class CreateBatchWithUploadFileRequest(UploadBatchFileRequest):
    endpoint: str = ""
    completion_window: str = ""
    metadata: Optional[dict[str, Any]] = None


@dataclass
class ListBatchResponse:
    object: str = ""
    data: list[Batch] = field(default_factory=list)
    first_id: str = ""
    last_id: str = ""
    has_more: bool = False
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, headers: Optional[Mapping[str, str]] = None) -> "ListBatchResponse":
        data = _mapping(data, "batch list")
        return cls(
            object=_str(data, "object"),
            data=[Batch.from_dict(item) for item in _list(data, "data") or []],
            first_id=_str(data, "first_id"),
            last_id=_str(data, "last_id"),
            has_more=_bool(data, "has_more"),
            headers=headers if headers is not None else {},
        )


def _send(client: Client, method: str, suffix: str, body: Any = None) -> Batch:
    request = client.new_request(method, client.full_url(suffix), body=body)
    data, headers = client.send_request(request)
    return Batch.from_dict(data, headers)


def create_batch(client: Client, request: CreateBatchRequest) -> Batch:
    """Create a batch; the completion window defaults to 24h."""
    if not request.completion_window:
        request = dataclasses.replace(request, completion_window="24h")
    return _send(client, "POST", BATCHES_SUFFIX, request.to_dict())


def retrieve_batch(client: Client, batch_id: str) -> Batch:
    """Retrieve a batch."""
    return _send(client, "GET", f"{BATCHES_SUFFIX}/{batch_id}")


def cancel_batch(client: Client, batch_id: str) -> Batch:
    """Cancel a batch in progress."""
    return _send(client, "POST", f"{BATCHES_SUFFIX}/{batch_id}/cancel")


def list_batch(
    client: Client, after: Optional[str] = None, limit: Optional[int] = None
) -> ListBatchResponse:
    """List batches, optionally after a given batch id."""
    pairs = sorted(
        (key, str(value)) for key, value in (("limit", limit), ("after", after)) if value is not None
    )
    suffix = BATCHES_SUFFIX + ("?" + urlencode(pairs) if pairs else "")
    request = client.new_request("GET", client.full_url(suffix))
    data, headers = client.send_request(request)
    return ListBatchResponse.from_dict(data, headers)