"""
Learning plans: generation from model output and soft-deleting CRUD.
"""

import json
from datetime import date, timedelta

from codesensei.services.plan_service import build_learning_plans, extract_plan_items


STAGES = [
    {"title": "Syntax basics", "description": "Variables and types", "duration_days": 3, "category": "frontend"},
    {"title": "Async", "description": "Promises", "duration_days": 5, "category": "backend"},
    {"title": "Wrap up", "duration_days": 0, "category": "cooking"},
]


def test_extract_plan_items():
    assert extract_plan_items("Sure!\n" + json.dumps(STAGES) + "\nGood luck.") == STAGES
    assert extract_plan_items("no plan here") == []
    assert extract_plan_items("[not json]") is None


def test_build_learning_plans_chains_dates():
    plans = build_learning_plans(7, STAGES + ["ignored"], date(2026, 1, 1))

    assert [p.title for p in plans] == ["Syntax basics", "Async", "Wrap up"]
    assert [(p.start_date, p.end_date) for p in plans] == [
        (date(2026, 1, 1), date(2026, 1, 4)),
        (date(2026, 1, 4), date(2026, 1, 9)),
        (date(2026, 1, 9), date(2026, 1, 16)),
    ]
    assert plans[2].category == "frontend"
    assert {p.status for p in plans} == {"pending"}
    assert {p.user_id for p in plans} == {7}


async def test_generate_saves_one_plan_per_stage(client, headers, fake_adapter):
    fake_adapter.content = "Here is your plan:\n```json\n" + json.dumps(STAGES[:2]) + "\n```"

    response = await client.post("/api/plan/generate", headers=headers, json={
        "topic": "TypeScript", "level": "beginner", "apiKey": "sk-test",
    })

    assert response.status_code == 200
    plans = response.json()["plans"]
    assert [p["title"] for p in plans] == ["Syntax basics", "Async"]
    assert plans[0]["end_date"] == plans[1]["start_date"]
    assert "TypeScript" in fake_adapter.requests[0].messages[0].content

    listed = (await client.get("/api/plans", headers=headers)).json()["plans"]
    assert len(listed) == 2


async def test_generate_with_unparseable_reply_saves_nothing(client, headers, fake_adapter):
    fake_adapter.content = "[oops, not json"

    response = await client.post("/api/plan/generate", headers=headers, json={
        "topic": "Rust", "level": "expert", "apiKey": "sk-test",
    })

    assert response.json() == {"plans": []}
    assert (await client.get("/api/plans", headers=headers)).json()["plans"] == []


async def test_generate_without_api_key(client, headers):
    response = await client.post("/api/plan/generate", headers=headers, json={"topic": "Go", "level": "beginner"})

    assert response.status_code == 400
    assert "deepseek" in response.json()["error"]


async def create_plan(client, headers, **overrides):
    body = {
        "title": "Learn SQL",
        "category": "backend",
        "start_date": "2026-03-01",
        "end_date": "2026-03-08",
        **overrides,
    }
    response = await client.post("/api/plans", headers=headers, json=body)
    assert response.status_code == 201
    return response.json()["plan"]


async def test_crud_and_filters(client, headers):
    plan = await create_plan(client, headers)
    await create_plan(client, headers, title="Flexbox", category="frontend")

    response = await client.patch(f"/api/plans/{plan['id']}", headers=headers, json={"status": "in-progress", "progress": 40})
    assert response.json()["plan"]["progress"] == 40

    in_progress = (await client.get("/api/plans", headers=headers, params={"status": "in-progress"})).json()["plans"]
    assert [p["title"] for p in in_progress] == ["Learn SQL"]

    frontend = (await client.get("/api/plans", headers=headers, params={"category": "frontend"})).json()["plans"]
    assert [p["title"] for p in frontend] == ["Flexbox"]


async def test_invalid_plans_are_rejected(client, headers):
    response = await client.post("/api/plans", headers=headers, json={
        "title": "Backwards", "category": "backend", "start_date": "2026-03-08", "end_date": "2026-03-01",
    })
    assert response.status_code == 400

    plan = await create_plan(client, headers)
    response = await client.patch(f"/api/plans/{plan['id']}", headers=headers, json={"progress": 101})
    assert response.status_code == 400


async def test_soft_delete_and_restore(client, headers):
    plan = await create_plan(client, headers)

    assert (await client.delete(f"/api/plans/{plan['id']}", headers=headers)).json() == {"success": True}
    assert (await client.get("/api/plans", headers=headers)).json()["plans"] == []
    assert (await client.patch(f"/api/plans/{plan['id']}", headers=headers, json={"progress": 10})).status_code == 404

    restored = await client.post(f"/api/plans/{plan['id']}/restore", headers=headers)
    assert restored.json()["plan"]["deleted_at"] is None
    assert len((await client.get("/api/plans", headers=headers)).json()["plans"]) == 1


async def test_plans_of_other_users(client, headers, other_headers):
    plan = await create_plan(client, headers)

    assert (await client.patch(f"/api/plans/{plan['id']}", headers=other_headers, json={"progress": 1})).status_code == 403
    assert (await client.delete(f"/api/plans/{plan['id']}", headers=other_headers)).status_code == 403
    assert (await client.delete("/api/plans/999", headers=headers)).status_code == 404
    assert (await client.get("/api/plans", headers=other_headers)).json()["plans"] == []


def test_out_of_range_durations_are_bounded():
    stages = [
        {"title": "Huge", "duration_days": 1e12},
        {"title": "Huger", "duration_days": 10 ** 40},
        {"title": "Infinite", "duration_days": float("inf")},
        {"title": "Not a number", "duration_days": float("nan")},
        {"title": "Fraction", "duration_days": 0.5},
    ]

    plans = build_learning_plans(1, stages, date(2026, 1, 1))

    assert [(p.end_date - p.start_date).days for p in plans] == [365, 365, 7, 7, 7]


async def test_generate_with_huge_duration_is_clamped(client, headers, fake_adapter):
    fake_adapter.content = '[{"title": "Forever", "category": "backend", "duration_days": 1e12}]'

    response = await client.post("/api/plan/generate", headers=headers, json={
        "topic": "Haskell", "level": "beginner", "apiKey": "sk-test",
    })

    assert response.status_code == 200
    plan = response.json()["plans"][0]
    assert date.fromisoformat(plan["end_date"]) - date.fromisoformat(plan["start_date"]) == timedelta(days=365)
