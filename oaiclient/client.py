"""Client core: configuration, request building, sending and error decoding."""

from __future__ import annotations

import enum
import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional
from urllib.parse import parse_qsl, urlencode

import httpx

OPENAI_API_URL_V1 = "https://api.openai.com/v1"
ANTHROPIC_API_URL_V1 = "https://api.anthropic.com/v1"
ANTHROPIC_API_VERSION = "2023-06-01"
AZURE_API_VERSION = "2023-05-15"
AZURE_AUTH_HEADER = "api-key"
DEFAULT_ASSISTANT_VERSION = "v2"
DEFAULT_EMPTY_MESSAGES_LIMIT = 300

_AZURE_API_PREFIX = "openai"
_AZURE_DEPLOYMENTS_PREFIX = "deployments"
_AZURE_DEPLOYMENT_ENDPOINTS = (
    "/completions",
    "/embeddings",
    "/chat/completions",
    "/audio/transcriptions",
    "/audio/translations",
    "/audio/speech",
    "/images/generations",
)
_DEPLOYMENT_STRIP = re.compile(r"[.:]")


class APIType(str, enum.Enum):
    """Flavour of API the client talks to."""

    OPENAI = "OPEN_AI"
    AZURE = "AZURE"
    AZURE_AD = "AZURE_AD"
    CLOUDFLARE_AZURE = "CLOUDFLARE_AZURE"
    ANTHROPIC = "ANTHROPIC"


@dataclass
class ClientConfig:
    """Settings for a Client."""

    auth_token: str = field(default_factory=str, repr=False)
    base_url: str = OPENAI_API_URL_V1
    org_id: str = ""
    api_type: APIType = APIType.OPENAI
    api_version: str = ""
    assistant_version: str = DEFAULT_ASSISTANT_VERSION
    azure_model_mapper: Optional[Callable[[str], str]] = None
    http_client: Optional[httpx.Client] = None
    empty_messages_limit: int = DEFAULT_EMPTY_MESSAGES_LIMIT

    def azure_deployment_for(self, model: str) -> str:
        """Return the Azure deployment name for a model."""
        if self.azure_model_mapper is not None:
            return self.azure_model_mapper(model)
        return _DEPLOYMENT_STRIP.sub("", model)


def default_config(auth_token: str) -> ClientConfig:
    return ClientConfig(auth_token=auth_token)


def default_azure_config(api_key: str, base_url: str) -> ClientConfig:
    return ClientConfig(
        auth_token=api_key,
        base_url=base_url,
        api_type=APIType.AZURE,
        api_version=AZURE_API_VERSION,
    )


def default_anthropic_config(api_key: str, base_url: str) -> ClientConfig:
    return ClientConfig(
        auth_token=api_key,
        base_url=base_url or ANTHROPIC_API_URL_V1,
        api_type=APIType.ANTHROPIC,
        api_version=ANTHROPIC_API_VERSION,
    )


class ClientError(Exception):
    """Base class for errors raised by the client."""


class APIError(ClientError):
    """An error object returned by the API."""

    def __init__(
        self,
        message: str = "",
        *,
        code: Any = None,
        param: Optional[str] = None,
        type: str = "",
        http_status: str = "",
        http_status_code: int = 0,
        inner_error: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.param = param
        self.type = type
        self.http_status = http_status
        self.http_status_code = http_status_code
        self.inner_error = inner_error

    @classmethod
    def from_dict(cls, data: Any) -> "APIError":
        if not isinstance(data, Mapping):
            raise ValueError("error object is not a JSON object")
        message = data.get("message")
        if isinstance(message, list):
            message = ", ".join(str(part) for part in message)
        elif not isinstance(message, str):
            raise ValueError("error message is missing or not a string")
        param = data.get("param")
        error_type = data.get("type")
        return cls(
            message,
            code=data.get("code"),
            param=param if isinstance(param, str) else None,
            type=error_type if isinstance(error_type, str) else "",
            inner_error=data.get("innererror"),
        )

    def __str__(self) -> str:
        if self.http_status_code > 0:
            return (
                f"error, status code: {self.http_status_code}, "
                f"status: {self.http_status}, message: {self.message}"
            )
        return self.message


class RequestError(ClientError):
    """A failed request whose body carried no usable API error."""

    def __init__(
        self, http_status: str, http_status_code: int, err: Optional[BaseException], body: bytes
    ) -> None:
        super().__init__(http_status, http_status_code)
        self.http_status = http_status
        self.http_status_code = http_status_code
        self.err = err
        self.body = body

    def __str__(self) -> str:
        message = "" if self.err is None else str(self.err)
        body = self.body.decode("utf-8", errors="replace")
        return (
            f"error, status code: {self.http_status_code}, status: {self.http_status}, "
            f"message: {message}, body: {body}"
        )


def decode_response(body: Any, as_text: bool = False) -> Any:
    """Decode a response body as text or JSON; an empty JSON body gives None."""
    if hasattr(body, "read"):
        body = body.read()
    if isinstance(body, (bytes, bytearray)):
        text = bytes(body).decode("utf-8")
    else:
        text = str(body)
    if as_text:
        return text
    if not text.strip():
        return None
    return json.loads(text)


def _is_failure(status_code: int) -> bool:
    return status_code < 200 or status_code >= 400


def _status_text(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".strip()


class Client:
    """Client for the completion API family."""

    def __init__(self, config: ClientConfig, http_client: Optional[httpx.Client] = None) -> None:
        self.config = config
        supplied = http_client or config.http_client
        self._owns_http = supplied is None
        self._http = supplied if supplied is not None else httpx.Client()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client if this client created it."""
        if self._owns_http:
            self._http.close()

    def full_url(self, suffix: str, model: str = "") -> str:
        """Build the full request URL for an endpoint suffix."""
        base_url = self.config.base_url.rstrip("/")
        if self.config.api_type in (APIType.AZURE, APIType.AZURE_AD):
            base_url = self._azure_base_url(base_url, suffix, model)
        if self.config.api_version:
            suffix = self._suffix_with_api_version(suffix)
        return f"{base_url}{suffix}"

    def _suffix_with_api_version(self, suffix: str) -> str:
        path, _, query = suffix.partition("?")
        first_segment = path.split("/", 1)[0]
        if ":" in first_segment:
            raise ValueError("failed to parse url suffix")
        pairs = parse_qsl(query, keep_blank_values=True)
        pairs.append(("api-version", self.config.api_version))
        pairs.sort(key=lambda pair: pair[0])
        return f"{path}?{urlencode(pairs)}"

    def _azure_base_url(self, base_url: str, suffix: str, model: str) -> str:
        base_url = f"{base_url.rstrip('/')}/{_AZURE_API_PREFIX}"
        if any(endpoint in suffix for endpoint in _AZURE_DEPLOYMENT_ENDPOINTS):
            deployment = self.config.azure_deployment_for(model) or "UNKNOWN"
            base_url = f"{base_url}/{_AZURE_DEPLOYMENTS_PREFIX}/{deployment}"
        return base_url

    def new_request(
        self,
        method: str,
        url: str,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Request:
        """Build a request; bodies that are not bytes or readers are sent as JSON."""
        content: Optional[bytes] = None
        if body is None:
            content = None
        elif isinstance(body, (bytes, bytearray)):
            content = bytes(body)
        elif hasattr(body, "read"):
            content = body.read()
        else:
            if hasattr(body, "to_dict"):
                body = body.to_dict()
            content = json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        request = httpx.Request(method, url, content=content, headers=dict(headers or {}))
        self._set_common_headers(request)
        return request

    def _set_common_headers(self, request: httpx.Request) -> None:
        api_type = self.config.api_type
        if api_type in (APIType.AZURE, APIType.CLOUDFLARE_AZURE):
            request.headers[AZURE_AUTH_HEADER] = self.config.auth_token
        elif api_type is APIType.ANTHROPIC:
            request.headers["anthropic-version"] = self.config.api_version
        elif self.config.auth_token:
            request.headers["Authorization"] = f"Bearer {self.config.auth_token}"
        if self.config.org_id:
            request.headers["OpenAI-Organization"] = self.config.org_id

    def send_request(self, request: httpx.Request, as_text: bool = False) -> tuple[Any, httpx.Headers]:
        """Send a request and return its decoded body with the response headers."""
        request.headers["Accept"] = "application/json"
        if not request.headers.get("Content-Type"):
            request.headers["Content-Type"] = "application/json"
        response = self._http.send(request)
        try:
            if _is_failure(response.status_code):
                raise self.handle_error_response(response)
            return decode_response(response.read(), as_text), response.headers
        finally:
            response.close()

    def handle_error_response(self, response: httpx.Response) -> ClientError:
        """Turn a failed response into the exception that describes it."""
        try:
            body = response.read()
        except (OSError, httpx.HTTPError) as exc:
            return ClientError(f"error, reading response body: {exc}")
        status = _status_text(response)
        code = response.status_code
        try:
            payload = json.loads(body)
        except ValueError as exc:
            return RequestError(status, code, exc, body)
        raw_error = payload.get("error") if isinstance(payload, dict) else None
        if raw_error is None:
            return RequestError(status, code, None, body)
        try:
            api_error = APIError.from_dict(raw_error)
        except ValueError:
            return RequestError(status, code, APIError(), body)
        api_error.http_status = status
        api_error.http_status_code = code
        return api_error


def new_client(auth_token: str) -> Client:
    return Client(default_config(auth_token))


def new_org_client(auth_token: str, org: str) -> Client:
    config = default_config(auth_token)
    config.org_id = org
    return Client(config)