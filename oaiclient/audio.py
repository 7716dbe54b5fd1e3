"""Audio transcription and translation requests."""

from __future__ import annotations

import enum
import io
import os
import secrets
from dataclasses import dataclass, field
from typing import IO, Any, Mapping, Optional, Protocol

from .chat import _bool, _float, _int, _list, _mapping, _str
from .client import Client

WHISPER_1 = "whisper-1"


class AudioResponseFormat(str, enum.Enum):
    JSON = "json"
    TEXT = "text"
    SRT = "srt"
    VERBOSE_JSON = "verbose_json"
    VTT = "vtt"


class TranscriptionTimestampGranularity(str, enum.Enum):
    WORD = "word"
    SEGMENT = "segment"


def _enum_text(value: Any) -> str:
    return str(getattr(value, "value", value))


@dataclass
class AudioRequest:
    """Parameters of an audio call.

    file_path names a file on disk, or, when reader is given, only the
    file name reported for the reader's contents.
    """

    model: str = ""
    file_path: str = ""
    reader: Optional[IO[Any]] = None
    prompt: str = ""
    temperature: float = 0.0
    language: str = ""
    format: str = ""
    timestamp_granularities: list[str] = field(default_factory=list)

    def has_json_response(self) -> bool:
        """True when the response comes back as JSON rather than plain text."""
        return _enum_text(self.format) in (
            "",
            AudioResponseFormat.JSON.value,
            AudioResponseFormat.VERBOSE_JSON.value,
        )


@dataclass
class AudioSegment:
    id: int = 0
    seek: int = 0
    start: float = 0.0
    end: float = 0.0
    text: str = ""
    tokens: list[int] = field(default_factory=list)
    temperature: float = 0.0
    avg_logprob: float = 0.0
    compression_ratio: float = 0.0
    no_speech_prob: float = 0.0
    transient: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "AudioSegment":
        data = _mapping(data, "segment")
        return cls(
            id=_int(data, "id"),
            seek=_int(data, "seek"),
            start=_float(data, "start"),
            end=_float(data, "end"),
            text=_str(data, "text"),
            tokens=[int(token) for token in _list(data, "tokens") or []],
            temperature=_float(data, "temperature"),
            avg_logprob=_float(data, "avg_logprob"),
            compression_ratio=_float(data, "compression_ratio"),
            no_speech_prob=_float(data, "no_speech_prob"),
            transient=_bool(data, "transient"),
        )


@dataclass
class AudioWord:
    word: str = ""
    start: float = 0.0
    end: float = 0.0

    @classmethod
    def from_dict(cls, data: Any) -> "AudioWord":
        data = _mapping(data, "word")
        return cls(word=_str(data, "word"), start=_float(data, "start"), end=_float(data, "end"))


@dataclass
class AudioResponse:
    """The result of an audio call, with the response headers."""

    task: str = ""
    language: str = ""
    duration: float = 0.0
    segments: list[AudioSegment] = field(default_factory=list)
    words: list[AudioWord] = field(default_factory=list)
    text: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, headers: Optional[Mapping[str, str]] = None) -> "AudioResponse":
        data = _mapping(data, "audio response")
        return cls(
            task=_str(data, "task"),
            language=_str(data, "language"),
            duration=_float(data, "duration"),
            segments=[AudioSegment.from_dict(item) for item in _list(data, "segments") or []],
            words=[AudioWord.from_dict(item) for item in _list(data, "words") or []],
            text=_str(data, "text"),
            headers=headers if headers is not None else {},
        )


class FormBuilder(Protocol):
    def create_form_file(self, fieldname: str, file: IO[Any]) -> None: ...

    def create_form_file_reader(self, fieldname: str, reader: IO[Any], filename: str) -> None: ...

    def write_field(self, fieldname: str, value: str) -> None: ...

    def close(self) -> None: ...

    def form_data_content_type(self) -> str: ...

    def getvalue(self) -> bytes: ...


def _quote(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


class MultipartFormBuilder:
    """Builds a multipart/form-data body in memory."""

    def __init__(self, boundary: Optional[str] = None) -> None:
        self._boundary = boundary or secrets.token_hex(16)
        self._buffer = io.BytesIO()
        self._has_parts = False
        self._closed = False

    def _start_part(self, headers: list[str]) -> None:
        if self._closed:
            raise ValueError("the form is already closed")
        if self._has_parts:
            self._buffer.write(b"\r\n")
        lines = [f"--{self._boundary}", *headers, "", ""]
        self._buffer.write("\r\n".join(lines).encode("utf-8"))
        self._has_parts = True

    def _write_file(self, fieldname: str, reader: IO[Any], filename: str) -> None:
        base = os.path.basename(str(filename))
        if not base:
            raise ValueError("filename cannot be empty")
        data = reader.read()
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._start_part(
            [
                f'Content-Disposition: form-data; name="{_quote(fieldname)}"; '
                f'filename="{_quote(base)}"',
                "Content-Type: application/octet-stream",
            ]
        )
        self._buffer.write(bytes(data))

    def create_form_file(self, fieldname: str, file: IO[Any]) -> None:
        """Add an open file as a file part, named after the file."""
        self._write_file(fieldname, file, getattr(file, "name", ""))

    def create_form_file_reader(self, fieldname: str, reader: IO[Any], filename: str) -> None:
        """Add the contents of a reader as a file part called filename."""
        self._write_file(fieldname, reader, filename)

    def write_field(self, fieldname: str, value: str) -> None:
        self._start_part([f'Content-Disposition: form-data; name="{_quote(fieldname)}"'])
        self._buffer.write(value.encode("utf-8"))

    def close(self) -> None:
        """Write the closing boundary; further parts are refused."""
        if self._closed:
            return
        prefix = b"\r\n" if self._has_parts else b""
        self._buffer.write(prefix + f"--{self._boundary}--\r\n".encode("ascii"))
        self._closed = True

    def form_data_content_type(self) -> str:
        return f"multipart/form-data; boundary={self._boundary}"

    def getvalue(self) -> bytes:
        return self._buffer.getvalue()


def create_file_field(request: AudioRequest, builder: FormBuilder) -> None:
    """Add the "file" part from the request's reader or from the file on disk."""
    if request.reader is not None:
        builder.create_form_file_reader("file", request.reader, request.file_path)
        return
    with open(request.file_path, "rb") as audio_file:
        builder.create_form_file("file", audio_file)


def audio_multipart_form(request: AudioRequest, builder: FormBuilder) -> None:
    """Fill the builder with the audio file and the request's parameters."""
    create_file_field(request, builder)
    builder.write_field("model", request.model)
    if request.prompt:
        builder.write_field("prompt", request.prompt)
    if request.format:
        builder.write_field("response_format", _enum_text(request.format))
    if request.temperature != 0:
        builder.write_field("temperature", f"{request.temperature:.2f}")
    if request.language:
        builder.write_field("language", request.language)
    for granularity in request.timestamp_granularities:
        builder.write_field("timestamp_granularities[]", _enum_text(granularity))
    builder.close()


def call_audio_api(
    client: Client,
    request: AudioRequest,
    endpoint_suffix: str,
    builder: Optional[FormBuilder] = None,
) -> AudioResponse:
    """Send the request to /audio/<endpoint_suffix>."""
    form = builder if builder is not None else MultipartFormBuilder()
    audio_multipart_form(request, form)
    url = client.full_url(f"/audio/{endpoint_suffix}", model=request.model)
    http_request = client.new_request(
        "POST",
        url,
        body=form.getvalue(),
        headers={"Content-Type": form.form_data_content_type()},
    )
    if request.has_json_response():
        data, headers = client.send_request(http_request)
        return AudioResponse.from_dict(data, headers)
    text, headers = client.send_request(http_request, True)
    return AudioResponse(text=text, headers=headers)


def create_transcription(client: Client, request: AudioRequest) -> AudioResponse:
    """Transcribe audio into text."""
    return call_audio_api(client, request, "transcriptions")


def create_translation(client: Client, request: AudioRequest) -> AudioResponse:
    """Translate audio into English text."""
    return call_audio_api(client, request, "translations")