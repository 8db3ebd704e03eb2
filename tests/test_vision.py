import asyncio
import json

import httpx
import pytest

from progress_companion.core.errors import MalformedUpstreamResponse
from progress_companion.services.vision import HttpVisionProvider, message_text
from progress_companion.services.vision_parsing import parse_model_json

PAYLOAD = '{"bodyFatMin": 18, "bodyFatMax": 21, "confidence": 80}'


def provider_replying(body):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=body)

    provider = HttpVisionProvider(
        base_url="https://vision.example/v1/",
        api_key="secret",
        model="vision-test",
        transport=httpx.MockTransport(handler),
    )
    return provider, seen


def test_analyze_posts_prompt_and_images():
    provider, seen = provider_replying({"choices": [{"message": {"content": PAYLOAD}}]})
    text = asyncio.run(provider.analyze("Estimate body fat", ["https://img.example/front.jpg"]))
    assert text == PAYLOAD
    request = seen[0]
    assert str(request.url) == "https://vision.example/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer secret"
    sent = json.loads(request.content)
    assert sent["model"] == "vision-test"
    parts = sent["messages"][0]["content"]
    assert parts[0] == {"type": "text", "text": "Estimate body fat"}
    assert parts[1]["image_url"]["url"] == "https://img.example/front.jpg"


def test_analyze_joins_content_parts():
    reply = {
        "choices": [
            {
                "message": {
                    "content": [
                        {"type": "text", "text": '{"bodyFatMin": 18, '},
                        {"type": "image_url", "image_url": {"url": "ignored"}},
                        {"type": "text", "text": '"bodyFatMax": 21, "confidence": 80}'},
                    ]
                }
            }
        ]
    }
    provider, _ = provider_replying(reply)
    text = asyncio.run(provider.analyze("p", []))
    assert isinstance(text, str)
    assert parse_model_json(text) == {"bodyFatMin": 18, "bodyFatMax": 21, "confidence": 80}


@pytest.mark.parametrize(
    "reply",
    [
        {"choices": [{"message": None}]},
        {"choices": [{"message": {"content": None}}]},
        {"choices": [{"message": {"content": 42}}]},
        {"choices": []},
        {},
        [],
    ],
)
def test_analyze_without_usable_text_is_malformed(reply):
    provider, _ = provider_replying(reply)
    text = asyncio.run(provider.analyze("p", []))
    assert text == ""
    with pytest.raises(MalformedUpstreamResponse):
        parse_model_json(text)


def test_analyze_propagates_http_errors():
    provider = HttpVisionProvider(
        base_url="https://vision.example/v1",
        api_key="",
        model="vision-test",
        transport=httpx.MockTransport(lambda request: httpx.Response(503, json={"error": "busy"})),
    )
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(provider.analyze("p", []))


def test_message_text_skips_non_text_parts():
    data = {"choices": [{"message": {"content": [{"type": "text", "text": "a"}, {"type": "text"}, "b"]}}]}
    assert message_text(data) == "a"
