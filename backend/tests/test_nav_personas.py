"""
Navigation bookmarks and personas.
"""

from codesensei.constants import PRESET_PERSONAS


async def create_item(client, headers, title="MDN", url="https://developer.mozilla.org", category="Docs"):
    response = await client.post("/api/nav", headers=headers, json={"title": title, "url": url, "category": category})
    assert response.status_code == 200
    return response.json()["navItem"]


async def test_nav_items_and_categories(client, headers):
    await create_item(client, headers)
    await create_item(client, headers, "LeetCode", "https://leetcode.com", "Practice")
    await create_item(client, headers, "Python docs", "https://docs.python.org", "Docs")

    docs = (await client.get("/api/nav", headers=headers, params={"category": "Docs"})).json()["navItems"]
    assert sorted(item["title"] for item in docs) == ["MDN", "Python docs"]

    categories = (await client.get("/api/nav/categories", headers=headers)).json()
    assert categories == {"categories": ["Docs", "Practice"]}


async def test_nav_item_requires_title_url_and_category(client, headers):
    response = await client.post("/api/nav", headers=headers, json={"title": "No url", "category": "Docs"})

    assert response.status_code == 400
    assert response.json() == {"error": "Title, url and category are required"}


async def test_update_and_delete_nav_item(client, headers, other_headers):
    item = await create_item(client, headers)

    response = await client.patch(f"/api/nav/{item['id']}", headers=headers, json={"description": "Reference"})
    assert response.json()["navItem"]["description"] == "Reference"
    assert response.json()["navItem"]["url"] == item["url"]

    assert (await client.patch(f"/api/nav/{item['id']}", headers=headers, json={"url": None})).status_code == 400
    assert (await client.delete(f"/api/nav/{item['id']}", headers=other_headers)).status_code == 403
    assert (await client.delete(f"/api/nav/{item['id']}", headers=headers)).json() == {"success": True}
    assert (await client.delete(f"/api/nav/{item['id']}", headers=headers)).status_code == 404


async def test_presets_need_no_sign_in(client):
    response = await client.get("/api/personas/presets")

    assert response.status_code == 200
    personas = response.json()["personas"]
    assert [p["id"] for p in personas] == [p["id"] for p in PRESET_PERSONAS]
    assert all(p["system_prompt"] for p in personas)


async def test_custom_persona_lifecycle(client, headers, other_headers):
    response = await client.post("/api/personas", headers=headers, json={
        "name": "Rubber duck", "system_prompt": "Ask me why, five times.",
    })
    assert response.status_code == 201
    persona = response.json()["persona"]
    assert persona["role"] == "Custom"

    listed = (await client.get("/api/personas", headers=headers)).json()["personas"]
    assert [p["id"] for p in listed] == [persona["id"]]
    assert (await client.get("/api/personas", headers=other_headers)).json()["personas"] == []

    response = await client.patch(f"/api/personas/{persona['id']}", headers=headers, json={"greeting": "Quack."})
    assert response.json()["persona"]["greeting"] == "Quack."

    assert (await client.patch(f"/api/personas/{persona['id']}", headers=headers, json={"name": " "})).status_code == 400
    assert (await client.delete(f"/api/personas/{persona['id']}", headers=other_headers)).status_code == 403
    assert (await client.delete(f"/api/personas/{persona['id']}", headers=headers)).json() == {"success": True}


async def test_persona_requires_name_and_prompt(client, headers):
    response = await client.post("/api/personas", headers=headers, json={"name": "Empty"})

    assert response.status_code == 400
    assert response.json() == {"error": "Name and system_prompt are required"}


async def test_custom_persona_prompt_is_used_in_chat(client, headers, fake_adapter):
    persona = (await client.post("/api/personas", headers=headers, json={
        "name": "Strict reviewer", "system_prompt": "Point out every bug.",
    })).json()["persona"]

    response = await client.post("/api/chat/stream", headers=headers, json={
        "personaId": str(persona["id"]),
        "messages": [{"role": "user", "content": "Review this"}],
        "apiKey": "sk-test",
    })

    assert response.status_code == 200
    assert fake_adapter.requests[0].system_prompt == "Point out every bug."
