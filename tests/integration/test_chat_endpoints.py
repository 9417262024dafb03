"""
Интеграционные тесты эндпоинтов /api/chat/*.

Покрываемые сценарии:
- POST /chat/message: ответ AI и сохранение обеих реплик
- сбой AI (в том числе неожиданное исключение): 502, общий текст ошибки, история не меняется
- GET/DELETE /chat/history
- POST /chat/workout-plan, POST /chat/exercises
"""

import pytest

from fittrack.core.errors import DependencyError

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_send_message_returns_reply_and_persists_exchange(user_client, fake_ai):
    response = await user_client.post("/api/chat/message", json={"message": "Hi"})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Let's get moving! 💪"
    assert "timestamp" in data

    history = (await user_client.get("/api/chat/history")).json()
    assert history["count"] == 2
    assert [(m["role"], m["content"]) for m in history["history"]] == [
        ("user", "Hi"),
        ("assistant", "Let's get moving! 💪"),
    ]


@pytest.mark.asyncio
async def test_empty_message_returns_400(user_client, fake_ai):
    response = await user_client.post("/api/chat/message", json={"message": "   "})

    assert response.status_code == 400
    assert response.json()["message"] == "Message cannot be empty"
    fake_ai.chat.assert_not_awaited()


@pytest.mark.asyncio
async def test_ai_failure_returns_502_and_keeps_history(user_client, fake_ai):
    fake_ai.chat.side_effect = DependencyError(detail="Gemini API error: 429 - quota")

    response = await user_client.post("/api/chat/message", json={"message": "Hi"})

    assert response.status_code == 502
    assert response.json() == {"success": False, "message": "Error communicating with AI"}
    history = (await user_client.get("/api/chat/history")).json()
    assert history["count"] == 0


@pytest.mark.asyncio
async def test_unexpected_ai_error_returns_structured_502(user_client, fake_ai):
    fake_ai.chat.side_effect = RuntimeError("boom")

    response = await user_client.post("/api/chat/message", json={"message": "Hi"})

    assert response.status_code == 502
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"success": False, "message": "Error communicating with AI"}
    history = (await user_client.get("/api/chat/history")).json()
    assert history["count"] == 0


@pytest.mark.asyncio
async def test_clear_history(user_client, clock):
    await user_client.post("/api/chat/message", json={"message": "Hi"})
    clock.set(2024, 1, 1, 9, 5)
    await user_client.post("/api/chat/message", json={"message": "Plan?"})

    response = await user_client.delete("/api/chat/history")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Chat history cleared", "deletedCount": 4}
    assert (await user_client.get("/api/chat/history")).json()["count"] == 0


@pytest.mark.asyncio
async def test_history_limit(user_client, clock):
    for minute, text in enumerate(("one", "two", "three")):
        clock.set(2024, 1, 1, 9, minute)
        await user_client.post("/api/chat/message", json={"message": text})

    history = (await user_client.get("/api/chat/history", params={"limit": 3})).json()

    assert history["count"] == 3
    assert [m["content"] for m in history["history"]][1:] == ["three", "Let's get moving! 💪"]


@pytest.mark.asyncio
async def test_workout_plan(user_client, fake_ai):
    response = await user_client.post("/api/chat/workout-plan")

    assert response.status_code == 200
    data = response.json()
    assert data["workoutPlan"] == "Day 1: Push\nDay 2: Pull"
    assert data["userProfile"]["fitnessLevel"] == "beginner"
    assert data["userProfile"]["fitnessGoal"] == "muscle-gain"
    assert data["userProfile"]["equipment"] == ["dumbbells", "resistance-bands"]
    assert data["userProfile"]["weeklyWorkouts"] == 4


@pytest.mark.asyncio
async def test_exercise_recommendations_defaults(user_client, fake_ai):
    response = await user_client.post("/api/chat/exercises", json={"muscleGroup": "chest"})

    assert response.status_code == 200
    data = response.json()
    assert data["exercises"] == "1. Push-ups\n2. Dips"
    assert data["filters"] == {"muscleGroup": "chest", "equipment": "bodyweight", "difficulty": "intermediate"}
    fake_ai.recommend_exercises.assert_awaited_once_with("chest", "bodyweight", "intermediate")


@pytest.mark.asyncio
async def test_exercise_recommendations_require_muscle_group(user_client, fake_ai):
    response = await user_client.post("/api/chat/exercises", json={})

    assert response.status_code == 400
    assert response.json()["message"] == "Please specify a muscle group"
