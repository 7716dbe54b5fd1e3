# oaiclient

A small, synchronous client for OpenAI-compatible HTTP APIs, built on `httpx`.
It covers chat completions, assistants, audio transcription and translation,
and batch jobs. It can talk to the standard OpenAI endpoint, to Azure OpenAI
deployments and to Anthropic-compatible endpoints.

## Installation

```
pip install oaiclient
```

## Creating a client

```python
from oaiclient.client import Client, default_azure_config, new_client

client = new_client("token")

# Azure: the deployment name comes from the model of each request
azure = Client(default_azure_config("placeholder", "https://example.com/"))
```

`ClientConfig` holds the token, base URL, API type (`APIType`), API version,
organisation ID, assistants version and an optional `azure_model_mapper`. When
there is no mapper, `ClientConfig.azure_deployment_for` removes `.` and `:`
from the model name. `new_org_client(token, org)` also sets the organisation
ID, which is then sent as the `OpenAI-Organization` header.

`Client.full_url(suffix, model)` builds the request URL. For Azure it inserts
`/openai` and, on deployment endpoints, `/deployments/<name>`. The name is
`UNKNOWN` when no deployment is found for the model. When an API version is
set, it adds an `api-version` query parameter.

A `Client` can be given its own `httpx.Client`. It can also be used as a
context manager. `close()` only closes an HTTP client that the `Client`
created itself.

## Chat completions

```python
from oaiclient.chat import (
    ChatCompletionMessage,
    ChatCompletionRequest,
    create_chat_completion,
)

request = ChatCompletionRequest(
    model="gpt-3.5-turbo",
    messages=[ChatCompletionMessage(role="user", content="Hello!")],
    max_tokens=5,
)
response = create_chat_completion(client, request)
print(response.choices[0].message.content)
print(response.headers.get("x-ratelimit-remaining-requests"))
```

A message carries either a plain `content` string or a `multi_content` list of
`ChatMessagePart` values (text, image URL or file). It cannot carry both:
`to_dict()` raises `ContentFieldsMisusedError` if both are set. When a message
is read back, a list in `content` becomes `multi_content`.
`create_chat_completion` raises `StreamNotSupportedError` if `request.stream`
is true.

`FinishReason.NULL` and an empty finish reason are written as JSON `null`.

`ChatCompletionStreamResponse.from_json` in `oaiclient.chat_stream` parses a
single streamed chunk. It raises `APIError` if the chunk holds an error
object.

## Assistants

```python
from oaiclient.assistant import AssistantRequest, create_assistant, list_assistants

assistant = create_assistant(client, AssistantRequest(model="gpt-4-turbo-preview", name="Ambrogio"))
page = list_assistants(client, limit=20, order="desc")
```

The `tools` field of `AssistantRequest` works in three ways:

- `None` leaves `tools` out of the request, so the assistant's tools stay as they are.
- An empty list removes all of the assistant's tools.
- A list with items replaces the existing tools.

The module also has functions to retrieve, modify and delete assistants, and
to create, retrieve, list and delete assistant files. Each assistants request
sends the `OpenAI-Beta: assistants=<version>` header.

## Audio

```python
from oaiclient.audio import AudioRequest, AudioResponseFormat, create_transcription

result = create_transcription(
    client,
    AudioRequest(model="whisper-1", file_path="speech.mp3", format=AudioResponseFormat.TEXT),
)
print(result.text)
```

Pass `reader` to send data from an open stream. `file_path` is then used only
as the reported file name. The form is built by `MultipartFormBuilder`. You
can supply another builder with the same methods to `call_audio_api`.

When the format is empty, JSON or verbose JSON, the response is decoded into
an `AudioResponse`. For any other format, the raw response text is returned
in `text`. `create_translation` works the same way against the translations
endpoint.

## Batches

```python
from oaiclient.batch import BatchEndpoint, CreateBatchRequest, UploadBatchFileRequest, create_batch

lines = UploadBatchFileRequest()
lines.add_chat_completion("req-1", request)
jsonl = lines.marshal_jsonl()  # one compact JSON object per line

batch = create_batch(
    client,
    CreateBatchRequest(input_file_id="file-abc", endpoint=BatchEndpoint.CHAT_COMPLETIONS),
)
```

If no completion window is given, it defaults to `"24h"`. Other batch
operations are `retrieve_batch`, `cancel_batch` and `list_batch`.

## Errors

All errors derive from `oaiclient.client.ClientError`. A failed HTTP call
raises one of these:

- `APIError`, when the body holds a usable `error` object. It carries the message, code, type and HTTP status.
- `RequestError`, when it does not. It carries the raw body.

## What this package does not do

- **No streamed requests.** There is no function that opens a streamed chat completion and iterates over it. Only single chunks can be parsed.
- **No file uploads.** There is no file upload. `marshal_jsonl` produces the batch input, but uploading it is up to you. `CreateBatchWithUploadFileRequest` is only a data holder.
- **No model checks.** Models are not checked against the endpoint, so `InvalidModelError` is defined but never raised. Reasoning-model restrictions are not validated either.
- **No other endpoints.** There is no support for plain completions, embeddings, files, images or models.
- **No command-line tool.**