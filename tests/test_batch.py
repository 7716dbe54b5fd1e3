import json

import httpx
import pytest

from oaiclient.batch import (
    Batch,
    BatchChatCompletionRequest,
    BatchEndpoint,
    CreateBatchRequest,
    CreateBatchWithUploadFileRequest,
    ListBatchResponse,
    UploadBatchFileRequest,
    cancel_batch,
    create_batch,
    list_batch,
    retrieve_batch,
)
from oaiclient.chat import ChatCompletionMessage, ChatCompletionRequest
from oaiclient.client import Client, default_config

BATCH = {
    "id": "batch_abc123",
    "object": "batch",
    "endpoint": "/v1/completions",
    "errors": None,
    "input_file_id": "file-abc123",
    "completion_window": "24h",
    "status": "completed",
    "output_file_id": "file-cvaTdG",
    "error_file_id": "file-HOWS94",
    "created_at": 1711471533,
    "in_progress_at": 1711471538,
    "expires_at": 1711557933,
    "finalizing_at": 1711493133,
    "completed_at": 1711493163,
    "failed_at": None,
    "expired_at": None,
    "cancelling_at": None,
    "cancelled_at": None,
    "request_counts": {"total": 100, "completed": 95, "failed": 5},
    "metadata": {"customer_id": "user_123456789", "batch_description": "Nightly eval job"},
}

CANCELLING = dict(
    BATCH,
    endpoint="/v1/chat/completions",
    status="cancelling",
    output_file_id=None,
    error_file_id=None,
    finalizing_at=None,
    completed_at=None,
    cancelling_at=1711475133,
    request_counts={"total": 100, "completed": 23, "failed": 1},
)

LIST = {
    "object": "list",
    "data": [dict(BATCH, endpoint="/v1/chat/completions")],
    "first_id": "batch_abc123",
    "last_id": "batch_abc456",
    "has_more": True,
}


def _client(handler):
    transport = httpx.MockTransport(handler)
    return Client(default_config("token"), http_client=httpx.Client(transport=transport))


def _chat_body():
    return ChatCompletionRequest(
        max_tokens=5,
        model="gpt-3.5-turbo",
        messages=[ChatCompletionMessage(role="user", content="Hello!")],
    )


def test_add_chat_completion_jsonl():
    request = UploadBatchFileRequest()
    request.add_chat_completion("req-1", _chat_body())
    request.add_chat_completion("req-2", _chat_body())
    assert request.marshal_jsonl() == (
        b'{"custom_id":"req-1","body":{"model":"gpt-3.5-turbo","messages":[{"role":"user","content":"Hello!"}],'
        b'"max_tokens":5},"method":"POST","url":"/v1/chat/completions"}\n'
        b'{"custom_id":"req-2","body":{"model":"gpt-3.5-turbo","messages":[{"role":"user","content":"Hello!"}],'
        b'"max_tokens":5},"method":"POST","url":"/v1/chat/completions"}'
    )


def test_add_completion_jsonl():
    request = UploadBatchFileRequest()
    request.add_completion("req-1", {"model": "gpt-3.5-turbo", "user": "Hello"})
    request.add_completion("req-2", {"model": "gpt-3.5-turbo", "user": "Hello"})
    assert request.marshal_jsonl() == (
        b'{"custom_id":"req-1","body":{"model":"gpt-3.5-turbo","user":"Hello"},"method":"POST",'
        b'"url":"/v1/completions"}\n'
        b'{"custom_id":"req-2","body":{"model":"gpt-3.5-turbo","user":"Hello"},"method":"POST",'
        b'"url":"/v1/completions"}'
    )


def test_add_embedding_jsonl():
    request = UploadBatchFileRequest()
    request.add_embedding("req-1", {"input": ["Hello", "World"], "model": "gpt-3.5-turbo"})
    request.add_embedding("req-2", {"input": ["Hello", "World"], "model": "text-embedding-ada-002"})
    assert request.marshal_jsonl() == (
        b'{"custom_id":"req-1","body":{"input":["Hello","World"],"model":"gpt-3.5-turbo"},"method":"POST",'
        b'"url":"/v1/embeddings"}\n'
        b'{"custom_id":"req-2","body":{"input":["Hello","World"],"model":"text-embedding-ada-002"},'
        b'"method":"POST","url":"/v1/embeddings"}'
    )


def test_empty_jsonl():
    assert UploadBatchFileRequest().marshal_jsonl() == b""


def test_line_item_escapes_html_characters():
    item = BatchChatCompletionRequest(custom_id="a<b>&c", body={})
    assert item.marshal_batch_line_item() == (
        b'{"custom_id":"a\\u003cb\\u003e\\u0026c","body":{},"method":"POST","url":"/v1/chat/completions"}'
    )


def test_create_with_upload_request_collects_lines():
    request = CreateBatchWithUploadFileRequest(endpoint=BatchEndpoint.CHAT_COMPLETIONS)
    request.add_chat_completion("req-1", _chat_body())
    assert len(request.lines) == 1
    assert json.loads(request.marshal_jsonl())["custom_id"] == "req-1"


def test_create_batch_request_to_dict():
    request = CreateBatchRequest(input_file_id="file-abc", endpoint=BatchEndpoint.EMBEDDINGS)
    assert request.to_dict() == {
        "input_file_id": "file-abc",
        "endpoint": "/v1/embeddings",
        "completion_window": "",
        "metadata": None,
    }


def test_create_batch_defaults_window():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=BATCH)

    request = CreateBatchRequest(input_file_id="file-abc", endpoint=BatchEndpoint.CHAT_COMPLETIONS)
    batch = create_batch(_client(handler), request)
    assert seen["method"] == "POST"
    assert seen["path"].endswith("/batches")
    assert seen["body"]["completion_window"] == "24h"
    assert seen["body"]["endpoint"] == "/v1/chat/completions"
    assert request.completion_window == ""
    assert batch.id == "batch_abc123"
    assert batch.request_counts.failed == 5
    assert batch.metadata["batch_description"] == "Nightly eval job"


def test_retrieve_batch():
    def handler(request):
        assert request.method == "GET"
        assert request.url.path.endswith("/batches/file-id-1")
        return httpx.Response(200, json=BATCH)

    batch = retrieve_batch(_client(handler), "file-id-1")
    assert batch.status == "completed"
    assert batch.failed_at is None
    assert batch.completed_at == 1711493163


def test_cancel_batch():
    def handler(request):
        assert request.method == "POST"
        assert request.url.path.endswith("/batches/file-id-1/cancel")
        return httpx.Response(200, json=CANCELLING)

    batch = cancel_batch(_client(handler), "file-id-1")
    assert batch.status == "cancelling"
    assert batch.output_file_id is None
    assert batch.cancelling_at == 1711475133
    assert batch.request_counts.completed == 23


def test_list_batch():
    seen = {}

    def handler(request):
        seen["query"] = request.url.query
        return httpx.Response(200, json=LIST)

    response = list_batch(_client(handler), "batch_abc123", 10)
    assert seen["query"] == b"after=batch_abc123&limit=10"
    assert isinstance(response, ListBatchResponse)
    assert response.has_more is True
    assert response.last_id == "batch_abc456"
    assert response.data[0].endpoint == "/v1/chat/completions"


def test_list_batch_without_params():
    seen = {}

    def handler(request):
        seen["query"] = request.url.query
        return httpx.Response(200, json=LIST)

    response = list_batch(_client(handler))
    assert seen["query"] == b""
    assert response.first_id == "batch_abc123"
    assert len(response.data) == 1
    assert response.data[0].id == "batch_abc123"


def test_batch_from_dict_with_errors():
    data = dict(
        BATCH,
        errors={
            "object": "list",
            "data": [{"code": "invalid", "message": "bad line", "param": "body", "line": 3}],
        },
    )
    batch = Batch.from_dict(data)
    assert batch.errors[0].code == "invalid"
    assert batch.errors[0].line == 3
    assert batch.errors[0].param == "body"


def test_batch_from_dict_rejects_non_object():
    with pytest.raises(ValueError):
        Batch.from_dict([1, 2])