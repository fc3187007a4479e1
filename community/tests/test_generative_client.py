import json
from unittest import mock

import pytest
import requests

from community.core.ai.generative_client import GeminiClient, GenerativeServiceError
from community.domains.posts.composer import ASSIST_SCHEMA

pytestmark = pytest.mark.unit


def _response(payload):
    resp = mock.Mock()
    resp.raise_for_status.return_value = None
    resp.json.return_value = payload
    return resp


def _candidate(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture()
def gemini(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    return GeminiClient(model="gemini-test", api_base="https://ai.example.com/v1beta/", timeout=2.5)


def test_missing_key_fails_without_a_request(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    with mock.patch("community.core.ai.generative_client.requests.post") as mock_post:
        with pytest.raises(GenerativeServiceError) as exc:
            GeminiClient().generate_json("prompt", ASSIST_SCHEMA)
    assert exc.value.code == "missing_api_key"
    mock_post.assert_not_called()


def test_api_key_alias_is_accepted(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", "alias-key")
    with mock.patch("community.core.ai.generative_client.requests.post") as mock_post:
        mock_post.return_value = _response(_candidate('{"title": "T", "content": "C"}'))
        GeminiClient().generate_json("prompt", ASSIST_SCHEMA)
    assert mock_post.call_args.kwargs["headers"] == {"x-goog-api-key": "alias-key"}


def test_request_carries_schema_and_timeout(gemini):
    payload = {"title": "Morning light", "content": "<p>Open the window.</p>"}
    with mock.patch("community.core.ai.generative_client.requests.post") as mock_post:
        mock_post.return_value = _response(_candidate(json.dumps(payload)))
        result = gemini.generate_json("Write something kind", ASSIST_SCHEMA)

    assert result == payload
    args, kwargs = mock_post.call_args
    assert args[0] == "https://ai.example.com/v1beta/models/gemini-test:generateContent"
    assert kwargs["timeout"] == 2.5
    body = kwargs["json"]
    assert body["contents"][0]["parts"][0]["text"] == "Write something kind"
    assert body["generationConfig"]["responseMimeType"] == "application/json"
    assert body["generationConfig"]["responseSchema"] == ASSIST_SCHEMA


def test_transport_errors_become_request_failed(gemini):
    with mock.patch("community.core.ai.generative_client.requests.post") as mock_post:
        mock_post.side_effect = requests.ConnectionError("service down")
        with pytest.raises(GenerativeServiceError) as exc:
            gemini.generate_json("prompt", ASSIST_SCHEMA)
    assert exc.value.code == "request_failed"


def test_http_errors_become_request_failed(gemini):
    resp = _response({})
    resp.raise_for_status.side_effect = requests.HTTPError("429 Too Many Requests")
    with mock.patch("community.core.ai.generative_client.requests.post", return_value=resp):
        with pytest.raises(GenerativeServiceError) as exc:
            gemini.generate_json("prompt", ASSIST_SCHEMA)
    assert exc.value.code == "request_failed"


def test_non_json_body_is_malformed(gemini):
    resp = _response(None)
    resp.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)
    with mock.patch("community.core.ai.generative_client.requests.post", return_value=resp):
        with pytest.raises(GenerativeServiceError) as exc:
            gemini.generate_json("prompt", ASSIST_SCHEMA)
    assert exc.value.code == "malformed_response"


@pytest.mark.parametrize(
    "payload",
    [
        {"candidates": []},
        _candidate(""),
        _candidate("not json"),
        _candidate('["a", "list"]'),
    ],
)
def test_unusable_output_is_malformed(gemini, payload):
    with mock.patch("community.core.ai.generative_client.requests.post") as mock_post:
        mock_post.return_value = _response(payload)
        with pytest.raises(GenerativeServiceError) as exc:
            gemini.generate_json("prompt", ASSIST_SCHEMA)
    assert exc.value.code == "malformed_response"
