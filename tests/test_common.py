import json

from oaiclient.common import CompletionTokensDetails, PromptTokensDetails, Usage


def test_usage_from_dict_basic():
    usage = Usage.from_dict({"prompt_tokens": 1, "completion_tokens": 1, "total_tokens": 2})
    assert usage.prompt_tokens == 1
    assert usage.completion_tokens == 1
    assert usage.total_tokens == 2
    assert usage.prompt_tokens_details is None
    assert usage.completion_tokens_details is None


def test_usage_wire_form_keeps_null_details():
    usage = Usage(prompt_tokens=1, completion_tokens=1, total_tokens=2)
    assert json.dumps(usage.to_dict(), separators=(",", ":")) == (
        '{"prompt_tokens":1,"completion_tokens":1,"total_tokens":2,'
        '"prompt_tokens_details":null,"completion_tokens_details":null}'
    )


def test_usage_round_trip_with_details():
    usage = Usage(
        prompt_tokens=10,
        completion_tokens=20,
        total_tokens=30,
        prompt_tokens_details=PromptTokensDetails(audio_tokens=3, cached_tokens=4),
        completion_tokens_details=CompletionTokensDetails(
            audio_tokens=1,
            reasoning_tokens=5,
            accepted_prediction_tokens=6,
            rejected_prediction_tokens=7,
        ),
    )
    assert Usage.from_dict(usage.to_dict()) == usage


def test_usage_missing_fields_default_to_zero():
    assert Usage.from_dict({}) == Usage()
    assert Usage.from_dict(None) == Usage()


def test_details_from_dict_round_trip():
    prompt = PromptTokensDetails.from_dict({"audio_tokens": 2, "cached_tokens": 8})
    assert prompt == PromptTokensDetails(audio_tokens=2, cached_tokens=8)
    assert PromptTokensDetails.from_dict(prompt.to_dict()) == prompt

    completion = CompletionTokensDetails.from_dict({"reasoning_tokens": 9})
    assert completion.reasoning_tokens == 9
    assert completion.audio_tokens == 0
    assert CompletionTokensDetails.from_dict(completion.to_dict()) == completion


def test_details_keys_match_wire_names():
    assert set(PromptTokensDetails().to_dict()) == {"audio_tokens", "cached_tokens"}
    assert set(CompletionTokensDetails().to_dict()) == {
        "audio_tokens",
        "reasoning_tokens",
        "accepted_prediction_tokens",
        "rejected_prediction_tokens",
    }