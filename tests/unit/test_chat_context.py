"""
Модульные тесты сборки контекста для AI-тренера.

Покрываемые сценарии:
- пустая история: 2 синтетические реплики + новое сообщение
- история приходит от новых к старым и разворачивается в хронологию
- окно ограничено 20 сообщениями
- блок профиля всегда содержит все поля (с фолбэками)
"""

import pytest
from datetime import datetime, timedelta, timezone

from fittrack.models.chat_message import ChatMessage, ChatRoleEnum
from fittrack.services.chat_context import (
    CHAT_CONTEXT_LIMIT,
    FITNESS_TRAINER_CONTEXT,
    TRAINER_GREETING,
    ProfileSnapshot,
    build_context,
    format_profile_block,
)

pytestmark = pytest.mark.unit

BASE = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_history(count: int) -> list:
    """count сообщений m0..m{count-1}, отсортированных от новых к старым."""
    messages = [
        ChatMessage(
            user_id=1,
            role=ChatRoleEnum.user if i % 2 == 0 else ChatRoleEnum.assistant,
            content=f"m{i}",
            created_at=BASE + timedelta(minutes=i),
        )
        for i in range(count)
    ]
    return sorted(messages, key=lambda m: m.created_at, reverse=True)


# ---------------------------------------------------------------------------
# build_context
# ---------------------------------------------------------------------------

def test_empty_history_bootstraps_persona_and_greeting():
    turns = build_context([], "Hi")

    assert len(turns) == 3
    assert turns[0].role == ChatRoleEnum.user
    assert turns[0].content == FITNESS_TRAINER_CONTEXT
    assert turns[1].role == ChatRoleEnum.assistant
    assert turns[1].content == TRAINER_GREETING
    assert turns[2].role == ChatRoleEnum.user
    assert turns[2].content == "Hi"


def test_history_is_reversed_into_chronological_order():
    history = make_history(4)
    assert [m.content for m in history] == ["m3", "m2", "m1", "m0"]

    turns = build_context(history, "next")

    assert [t.content for t in turns] == ["m0", "m1", "m2", "m3", "next"]
    assert [t.role for t in turns[:4]] == [
        ChatRoleEnum.user, ChatRoleEnum.assistant, ChatRoleEnum.user, ChatRoleEnum.assistant,
    ]


def test_non_empty_history_has_no_synthetic_turns():
    turns = build_context(make_history(1), "again")
    assert FITNESS_TRAINER_CONTEXT not in [t.content for t in turns]
    assert len(turns) == 2


def test_only_most_recent_twenty_messages_are_used():
    history = make_history(CHAT_CONTEXT_LIMIT + 7)

    turns = build_context(history, "latest")

    assert len(turns) == CHAT_CONTEXT_LIMIT + 1
    assert turns[0].content == "m7"
    assert turns[CHAT_CONTEXT_LIMIT - 1].content == "m26"
    assert turns[-1].content == "latest"


def test_profile_block_is_prepended_to_new_message():
    profile = ProfileSnapshot(fitness_level="advanced", fitness_goal="endurance")

    turns = build_context([], "Plan my week", profile)

    outgoing = turns[-1].content
    assert outgoing.startswith("User Profile Context:")
    assert "- Fitness Level: advanced" in outgoing
    assert outgoing.endswith("\n\nPlan my week")


# ---------------------------------------------------------------------------
# format_profile_block
# ---------------------------------------------------------------------------

def test_profile_block_uses_fallbacks_for_every_missing_field():
    block = format_profile_block(ProfileSnapshot())

    assert "- Fitness Level: Not specified" in block
    assert "- Goals: Not specified" in block
    assert "- Equipment Available: Not specified" in block
    assert "- Workout Duration Preference: Not specified" in block
    assert "- Injuries/Limitations: None mentioned" in block


def test_profile_block_with_full_profile():
    profile = ProfileSnapshot(
        fitness_level="beginner",
        fitness_goal="weight-loss",
        equipment=["dumbbells", "barbell"],
        workout_duration=40,
        injuries=["knee"],
    )

    block = format_profile_block(profile)

    assert "- Equipment Available: dumbbells, barbell" in block
    assert "- Workout Duration Preference: 40 minutes" in block
    assert "- Injuries/Limitations: knee" in block
