"""
Interview questions, the mistake log and AI analysis of mistakes.
"""

import pytest


async def create_question(client, headers, title="What is a closure?", category="JavaScript", difficulty="Medium"):
    response = await client.post("/api/questions", headers=headers, json={
        "title": title, "category": category, "difficulty": difficulty,
    })
    assert response.status_code == 201
    return response.json()["question"]


@pytest.fixture
async def question(client, headers):
    return await create_question(client, headers)


async def test_list_and_filter_questions(client, headers, question):
    await create_question(client, headers, "Explain the GIL", "Python", "Hard")

    python = (await client.get("/api/questions", headers=headers, params={"category": "Python"})).json()["questions"]
    assert [q["title"] for q in python] == ["Explain the GIL"]

    medium = (await client.get("/api/questions", headers=headers, params={"difficulty": "Medium"})).json()["questions"]
    assert [q["id"] for q in medium] == [question["id"]]


async def test_invalid_difficulty_is_rejected(client, headers):
    response = await client.post("/api/questions", headers=headers, json={
        "title": "?", "category": "Misc", "difficulty": "Impossible",
    })
    assert response.status_code == 400


async def test_update_question(client, headers, question):
    response = await client.patch(f"/api/questions/{question['id']}", headers=headers, json={"difficulty": "Easy"})

    assert response.json()["question"]["difficulty"] == "Easy"
    assert response.json()["question"]["title"] == question["title"]

    response = await client.patch(f"/api/questions/{question['id']}", headers=headers, json={"title": None})
    assert response.status_code == 400


async def test_mistake_log(client, headers, question):
    first = await client.post(f"/api/questions/{question['id']}/mistake", headers=headers)
    second = await client.post(f"/api/questions/{question['id']}/mistake", headers=headers)

    record = first.json()["mistake"]
    assert record["question"]["title"] == question["title"]
    assert record["review_count"] == 0
    assert second.json()["mistake"]["id"] == record["id"]

    reviewed = await client.post(f"/api/questions/mistakes/{record['id']}/review", headers=headers)
    assert reviewed.json()["mistake"]["review_count"] == 1

    mistakes = (await client.get("/api/questions/mistakes", headers=headers)).json()["mistakes"]
    assert [m["id"] for m in mistakes] == [record["id"]]

    assert (await client.delete(f"/api/questions/mistakes/{record['id']}", headers=headers)).json() == {"success": True}
    assert (await client.get("/api/questions/mistakes", headers=headers)).json()["mistakes"] == []


async def test_deleting_a_question_removes_its_mistake(client, headers, question):
    await client.post(f"/api/questions/{question['id']}/mistake", headers=headers)

    assert (await client.delete(f"/api/questions/{question['id']}", headers=headers)).status_code == 200
    assert (await client.get("/api/questions/mistakes", headers=headers)).json()["mistakes"] == []


async def test_questions_of_other_users(client, headers, other_headers, question):
    assert (await client.post(f"/api/questions/{question['id']}/mistake", headers=other_headers)).status_code == 403
    assert (await client.delete(f"/api/questions/{question['id']}", headers=other_headers)).status_code == 403
    assert (await client.patch("/api/questions/999", headers=headers, json={"title": "x"})).status_code == 404


async def test_analysis_of_a_logged_mistake_is_saved(client, headers, question, fake_adapter):
    await client.post(f"/api/questions/{question['id']}/mistake", headers=headers)
    fake_adapter.content = "## Key points\nClosures capture scope."

    response = await client.post("/api/analysis", headers=headers, json={
        "questionId": question["id"], "apiKey": "sk-test",
    })

    assert response.status_code == 200
    assert response.json() == {"analysis": "## Key points\nClosures capture scope."}
    assert question["title"] in fake_adapter.requests[0].messages[0].content

    mistakes = (await client.get("/api/questions/mistakes", headers=headers)).json()["mistakes"]
    assert mistakes[0]["ai_analysis"] == "## Key points\nClosures capture scope."


async def test_analysis_by_title_only(client, headers, fake_adapter):
    response = await client.post("/api/analysis", headers=headers, json={
        "questionTitle": "Event loop phases", "apiKey": "sk-test",
    })

    assert response.status_code == 200
    assert "Event loop phases" in fake_adapter.requests[0].messages[0].content


async def test_analysis_input_checks(client, headers, question, fake_adapter):
    response = await client.post("/api/analysis", headers=headers, json={"apiKey": "sk-test"})
    assert response.status_code == 400
    assert response.json() == {"error": "questionTitle is required"}

    response = await client.post("/api/analysis", headers=headers, json={"questionId": question["id"], "apiKey": "sk-test"})
    assert response.status_code == 400
    assert response.json() == {"error": "Question is not in the mistake log"}

    assert fake_adapter.requests == []
