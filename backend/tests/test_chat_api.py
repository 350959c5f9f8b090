"""
Chat endpoints over HTTP: streaming, persistence and configuration errors.
"""

import json

import pytest

from codesensei.constants import PRESET_PERSONAS_BY_ID


def events_of(text):
    """Split an SSE body into its ``data:`` payloads."""
    return [block[len("data: "):] for block in text.split("\n\n") if block.startswith("data: ")]


@pytest.fixture
async def session_id(client, headers):
    response = await client.post("/api/sessions", json={"title": "Closures", "persona_id": "mentor"}, headers=headers)
    assert response.status_code == 201
    return response.json()["session"]["id"]


async def test_stream_persists_both_turns(client, headers, session_id):
    response = await client.post("/api/chat/stream", headers=headers, json={
        "sessionId": session_id,
        "messages": [{"role": "user", "content": "Hi"}],
        "apiKey": "sk-test",
    })

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["x-session-id"] == str(session_id)
    assert events_of(response.text) == ['{"content": "Hel"}', '{"content": "lo!"}', "[DONE]"]

    detail = await client.get(f"/api/sessions/{session_id}", headers=headers)
    messages = detail.json()["session"]["messages"]
    assert [(m["role"], m["content"]) for m in messages] == [("user", "Hi"), ("model", "Hello!")]


async def test_stream_without_api_key_is_rejected_before_anything_happens(client, headers, fake_adapter):
    response = await client.post("/api/chat/stream", headers=headers, json={
        "personaId": "mentor",
        "messages": [{"role": "user", "content": "Hi"}],
    })

    assert response.status_code == 400
    assert "deepseek" in response.json()["error"]
    assert fake_adapter.requests == []

    sessions = await client.get("/api/sessions", headers=headers)
    assert sessions.json()["sessions"] == []


async def test_stream_error_mid_way_keeps_partial_reply(client, headers, session_id, fake_adapter):
    from codesensei.errors import UpstreamError

    fake_adapter.fragments = ["par", "tial"]
    fake_adapter.error = UpstreamError("deepseek stream request failed: connection reset")

    response = await client.post("/api/chat/stream", headers=headers, json={
        "sessionId": session_id,
        "messages": [{"role": "user", "content": "Hi"}],
        "apiKey": "sk-test",
    })

    payloads = events_of(response.text)
    assert payloads[:2] == ['{"content": "par"}', '{"content": "tial"}']
    assert json.loads(payloads[2]) == {"error": "deepseek stream request failed: connection reset"}
    assert "[DONE]" not in payloads

    detail = await client.get(f"/api/sessions/{session_id}", headers=headers)
    assert [m["content"] for m in detail.json()["session"]["messages"]] == ["Hi", "partial"]


async def test_persona_id_starts_a_new_session(client, headers, fake_adapter):
    response = await client.post("/api/chat/stream", headers=headers, json={
        "personaId": "mentor",
        "messages": [{"role": "user", "content": "How do closures work in JavaScript"}],
        "apiKey": "sk-test",
    })

    assert response.status_code == 200
    new_id = int(response.headers["x-session-id"])

    sessions = (await client.get("/api/sessions", headers=headers)).json()["sessions"]
    assert [s["id"] for s in sessions] == [new_id]
    assert sessions[0]["title"] == "How do closures work in..."
    assert sessions[0]["persona_id"] == "mentor"
    assert fake_adapter.requests[0].system_prompt == PRESET_PERSONAS_BY_ID["mentor"]["system_prompt"]


async def test_non_streaming_chat_returns_completion(client, headers, session_id):
    response = await client.post("/api/chat", headers=headers, json={
        "sessionId": session_id,
        "messages": [{"role": "user", "content": "Hi"}],
        "apiKey": "sk-test",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["content"] == "Hello!"
    assert body["sessionId"] == session_id
    assert body["usage"]["totalTokens"] == 5

    detail = await client.get(f"/api/sessions/{session_id}", headers=headers)
    assert [m["role"] for m in detail.json()["session"]["messages"]] == ["user", "model"]


async def test_session_model_params_fill_request_gaps(client, headers, fake_adapter):
    created = await client.post("/api/sessions", headers=headers, json={
        "title": "Tuned",
        "persona_id": "mentor",
        "system_prompt_override": "Answer in one line",
        "model_params": {"temperature": 0.2, "maxOutputTokens": 256, "topK": 5},
    })
    session_id = created.json()["session"]["id"]

    await client.post("/api/chat/stream", headers=headers, json={
        "sessionId": session_id,
        "messages": [{"role": "user", "content": "Hi"}],
        "apiKey": "sk-test",
        "topK": 9,
    })

    request = fake_adapter.requests[0]
    assert request.system_prompt == "Answer in one line"
    assert request.temperature == 0.2
    assert request.max_tokens == 256
    assert request.top_k == 9


async def test_chat_requires_sign_in(client):
    response = await client.post("/api/chat/stream", json={"messages": [{"role": "user", "content": "Hi"}]})

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized, please sign in"}


async def test_chat_in_someone_elses_session_is_forbidden(client, session_id, other_headers):
    payload = {"sessionId": session_id, "messages": [{"role": "user", "content": "Hi"}], "apiKey": "sk-test"}

    response = await client.post("/api/chat/stream", headers=other_headers, json=payload)
    assert response.status_code == 403

    payload["sessionId"] = session_id + 1000
    response = await client.post("/api/chat/stream", headers=other_headers, json=payload)
    assert response.status_code == 404
    assert response.json() == {"error": "Session not found"}


async def test_stored_provider_settings_are_used(client, headers, fake_factory):
    await client.put("/api/settings", headers=headers, json={
        "api_provider": "qwen",
        "provider_settings": {"qwen": {"apiKey": "sk-stored", "selectedModel": "qwen-plus"}},
    })

    response = await client.post("/api/chat/stream", headers=headers, json={
        "messages": [{"role": "user", "content": "Hi"}],
    })

    assert response.status_code == 200
    config = fake_factory.configs[-1]
    assert config.provider.value == "qwen"
    assert config.api_key == "sk-stored"
    assert config.model == "qwen-plus"


async def test_empty_messages_are_rejected(client, headers, session_id):
    response = await client.post("/api/chat/stream", headers=headers, json={
        "sessionId": session_id,
        "messages": [],
        "apiKey": "sk-test",
    })

    assert response.status_code == 400
    assert response.json() == {"error": "messages must not be empty"}


async def test_list_models(client, headers, monkeypatch):
    response = await client.get("/api/chat/models", headers=headers, params={"provider": "deepseek"})
    assert response.status_code == 400

    monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-env")
    response = await client.get("/api/chat/models", headers=headers, params={"provider": "deepseek"})

    assert response.status_code == 200
    assert response.json() == {
        "provider": "deepseek",
        "models": [{"id": "fake-model", "owned_by": "test", "created": None}],
    }
