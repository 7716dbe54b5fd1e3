import io
import json

import httpx
import pytest

from oaiclient.client import (
    ANTHROPIC_API_VERSION,
    APIError,
    APIType,
    Client,
    ClientConfig,
    ClientError,
    RequestError,
    decode_response,
    default_anthropic_config,
    default_config,
    new_client,
    new_org_client,
)


class _FailingReader:
    def read(self):
        raise OSError("dummy")


class _FailingStream(httpx.SyncByteStream):
    def __iter__(self):
        raise OSError("errorReader")


def _mock_client(config, handler):
    return Client(config, http_client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_client_holds_token_and_org():
    client = new_client("token")
    assert client.config.auth_token == "token"

    client = new_org_client("token", "mock org")
    assert client.config.auth_token == "token"
    assert client.config.org_id == "mock org"


def test_set_common_headers_anthropic():
    client = Client(default_anthropic_config("token", ""))
    request = client.new_request("GET", "http://example.com")
    assert request.headers["anthropic-version"] == ANTHROPIC_API_VERSION
    assert "Authorization" not in request.headers


def test_bearer_and_org_headers():
    config = default_config("token")
    config.org_id = "org-1"
    request = Client(config).new_request("GET", "http://example.com")
    assert request.headers["Authorization"] == "Bearer token"
    assert request.headers["OpenAI-Organization"] == "org-1"


def test_azure_uses_api_key_header():
    config = ClientConfig(auth_token="token", api_type=APIType.AZURE)
    request = Client(config).new_request("GET", "http://example.com")
    assert request.headers["api-key"] == "token"
    assert "Authorization" not in request.headers


def test_decode_response_empty_gives_none():
    assert decode_response(b"", False) is None


def test_decode_response_text():
    assert decode_response(io.BytesIO(b"test"), True) == "test"


def test_decode_response_map():
    assert decode_response(io.BytesIO(b'{"test": "test"}'), False) == {"test": "test"}


def test_decode_response_reader_error():
    with pytest.raises(OSError, match="dummy"):
        decode_response(_FailingReader(), True)


@pytest.mark.parametrize(
    ("code", "body", "message"),
    [
        (
            401,
            b"""{
                "error":{
                    "message":"You didn't provide an API key. ....",
                    "type":"invalid_request_error",
                    "param":null,
                    "code":null
                }
            }""",
            "You didn't provide an API key. ....",
        ),
        (
            401,
            b"""{
                "error":{
                    "code":"AccessDenied",
                    "message":"Access denied due to Virtual Network/Firewall rules."
                }
            }""",
            "Access denied due to Virtual Network/Firewall rules.",
        ),
        (
            503,
            b"""
            {
                "error":{
                    "message":"That model...",
                    "type":"server_error",
                    "param":null,
                    "code":null
                }
            }""",
            "That model...",
        ),
    ],
)
def test_handle_error_response_api_errors(code, body, message):
    response = httpx.Response(code, content=body, headers={"Content-Type": "application/json"})
    err = new_client("token").handle_error_response(response)
    assert isinstance(err, APIError)
    status = f"{code} {response.reason_phrase}"
    assert str(err) == f"error, status code: {code}, status: {status}, message: {message}"
    assert err.http_status_code == code


def test_handle_error_response_unknown_error_object():
    body = b"""
            {
                "error":{}
            }"""
    response = httpx.Response(503, content=body)
    err = new_client("token").handle_error_response(response)
    assert isinstance(err, RequestError)
    assert str(err) == (
        "error, status code: 503, status: 503 Service Unavailable, message: , body: "
        + body.decode()
    )


def test_handle_error_response_html_body():
    body = b"""
    <html>
    <head><title>413 Request Entity Too Large</title></head>
    <body>
    <center><h1>413 Request Entity Too Large</h1></center>
    <hr><center>nginx</center>
    </body>
    </html>"""
    response = httpx.Response(413, content=body, headers={"Content-Type": "text/html"})
    err = new_client("token").handle_error_response(response)
    assert isinstance(err, RequestError)
    assert isinstance(err.err, ValueError)
    assert err.body == body
    assert str(err).startswith(
        f"error, status code: 413, status: 413 {response.reason_phrase}, message: "
    )
    assert str(err).endswith(", body: " + body.decode())


def test_handle_error_response_read_failure():
    response = httpx.Response(413, stream=_FailingStream())
    err = new_client("token").handle_error_response(response)
    assert isinstance(err, ClientError)
    assert str(err) == "error, reading response body: errorReader"


@pytest.mark.parametrize(
    ("suffix", "expected"),
    [
        ("/assistants", "/assistants?api-version=2023-05"),
        ("/assistants?limit=5", "/assistants?api-version=2023-05&limit=5"),
    ],
)
def test_full_url_adds_api_version(suffix, expected):
    client = Client(ClientConfig(base_url="", api_version="2023-05"))
    assert client.full_url(suffix) == expected


def test_full_url_bad_suffix_raises():
    client = Client(ClientConfig(base_url="", api_version="2023-05"))
    with pytest.raises(ValueError, match="failed to parse url suffix"):
        client.full_url("123:assistants?limit=5")


@pytest.mark.parametrize(
    ("suffix", "model", "expected"),
    [
        ("/assistants", "gpt-4o-mini", "https://test.openai.azure.com/openai/assistants"),
        (
            "/chat/completions",
            "gpt-4o-mini",
            "https://test.openai.azure.com/openai/deployments/gpt-4o-mini/chat/completions",
        ),
        (
            "/chat/completions",
            "",
            "https://test.openai.azure.com/openai/deployments/UNKNOWN/chat/completions",
        ),
    ],
)
def test_full_url_azure_deployment(suffix, model, expected):
    config = ClientConfig(base_url="https://test.openai.azure.com/", api_type=APIType.AZURE)
    assert Client(config).full_url(suffix, model) == expected


def test_azure_deployment_strips_dots():
    assert ClientConfig().azure_deployment_for("gpt-3.5-turbo") == "gpt-35-turbo"
    config = ClientConfig(azure_model_mapper=lambda model: "custom")
    assert config.azure_deployment_for("gpt-3.5-turbo") == "custom"


def test_new_request_compact_json_body():
    request = new_client("token").new_request("POST", "http://example.com", body={"model": "gpt-4"})
    assert request.content == b'{"model":"gpt-4"}'


def test_send_request_success():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"id": "x"}, headers={"X-CUSTOM-HEADER": "test"})

    client = _mock_client(default_config("token"), handler)
    request = client.new_request("GET", client.full_url("/models"))
    data, headers = client.send_request(request)
    assert data == {"id": "x"}
    assert headers["X-CUSTOM-HEADER"] == "test"
    assert seen[0].headers["Accept"] == "application/json"
    assert seen[0].headers["Content-Type"] == "application/json"
    assert str(seen[0].url) == "https://api.openai.com/v1/models"


def test_send_request_keeps_content_type():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, text="hello")

    client = _mock_client(default_config("token"), handler)
    request = client.new_request(
        "POST", "http://example.com", body=b"raw", headers={"Content-Type": "multipart/form-data"}
    )
    data, _ = client.send_request(request, as_text=True)
    assert data == "hello"
    assert seen[0].headers["Content-Type"] == "multipart/form-data"


def test_send_request_raises_api_error():
    want_message = "Please retry after 20 seconds."

    def handler(request):
        body = json.dumps({"error": {"code": "429", "message": want_message}})
        return httpx.Response(429, content=body.encode())

    client = _mock_client(default_config("token"), handler)
    request = client.new_request("POST", "http://example.com", body={})
    with pytest.raises(APIError) as info:
        client.send_request(request)
    assert info.value.http_status_code == 429
    assert info.value.code == "429"
    assert info.value.message == want_message


def test_api_error_message_list_joined():
    err = APIError.from_dict({"message": ["a", "b"], "type": "t", "param": "p"})
    assert err.message == "a, b"
    assert err.param == "p"
    assert str(err) == "a, b"


def test_api_error_without_message_rejected():
    with pytest.raises(ValueError):
        APIError.from_dict({"code": 1})