"""
Settings endpoints and encryption of provider secrets at rest.
"""

from sqlalchemy import select

from codesensei.models.user import UserSettings


async def test_get_returns_defaults(client, headers):
    first = await client.get("/api/settings", headers=headers)
    second = await client.get("/api/settings", headers=headers)

    assert first.status_code == 200
    settings = first.json()["settings"]
    assert settings["theme"] == "light"
    assert settings["api_provider"] == "deepseek"
    assert settings["provider_settings"] == {}
    assert second.json()["settings"]["id"] == settings["id"]


async def test_provider_keys_are_encrypted_at_rest(client, headers, session_factory, user):
    response = await client.put("/api/settings", headers=headers, json={
        "theme": "matrix",
        "provider_settings": {
            "deepseek": {"apiKey": "sk-secret", "baseUrl": "https://api.deepseek.com/v1", "selectedModel": "deepseek-chat"},
        },
    })

    assert response.status_code == 200
    returned = response.json()["settings"]
    assert returned["theme"] == "matrix"
    assert returned["provider_settings"]["deepseek"]["apiKey"] == "sk-secret"

    async with session_factory() as session:
        stored = (await session.execute(select(UserSettings).filter(UserSettings.user_id == user.id))).scalar_one()

    stored_key = stored.provider_settings["deepseek"]["apiKey"]
    assert stored_key != "sk-secret"
    assert stored_key.count(":") == 2
    assert stored.provider_settings["deepseek"]["baseUrl"] == "https://api.deepseek.com/v1"

    again = (await client.get("/api/settings", headers=headers)).json()["settings"]
    assert again["provider_settings"]["deepseek"]["apiKey"] == "sk-secret"


async def test_omitted_fields_keep_their_value(client, headers):
    await client.put("/api/settings", headers=headers, json={"theme": "dark"})
    response = await client.put("/api/settings", headers=headers, json={"api_provider": "qwen"})

    settings = response.json()["settings"]
    assert settings["theme"] == "dark"
    assert settings["api_provider"] == "qwen"


async def test_invalid_values_are_rejected(client, headers):
    response = await client.put("/api/settings", headers=headers, json={"theme": "neon"})
    assert response.status_code == 400
    assert "error" in response.json()

    response = await client.put("/api/settings", headers=headers, json={"api_provider": "acme"})
    assert response.status_code == 400


async def test_settings_require_sign_in(client):
    assert (await client.get("/api/settings")).status_code == 401
