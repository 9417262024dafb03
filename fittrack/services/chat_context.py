"""
Сборка контекста диалога для AI-тренера.

История из БД приходит от новых к старым (так дешевле выбрать последние N),
здесь она обрезается до CHAT_CONTEXT_LIMIT и разворачивается в
хронологический порядок.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from fittrack.models.chat_message import ChatMessage, ChatRoleEnum
from fittrack.models.user import User

CHAT_CONTEXT_LIMIT = 20

FITNESS_TRAINER_CONTEXT = """You are an expert AI Fitness Trainer and Health Coach with certifications in:
- Personal Training (CPT)
- Nutrition Science
- Exercise Physiology
- Sports Medicine

Your personality:
- Encouraging and motivating
- Professional yet friendly
- Evidence-based and scientifically accurate
- Adaptive to user's fitness level

Your capabilities:
1. Create personalized workout plans
2. Provide exercise form corrections and tips
3. Suggest nutrition and meal plans
4. Track progress and adjust recommendations
5. Answer fitness and health questions
6. Provide motivation and support
7. Suggest exercises based on available equipment
8. Help with injury prevention and recovery

Guidelines:
- Always prioritize user safety
- Ask for medical clearance if user mentions injuries or health conditions
- Be specific with exercise instructions (sets, reps, rest time)
- Encourage proper form over heavy weights
- Recommend gradual progression
- Stay within fitness and nutrition domain
- Use emojis occasionally to be engaging 💪🏋️‍♂️🔥

When asked about workouts, provide structured responses with:
- Exercise name
- Muscle group targeted
- Sets and reps
- Rest time
- Form tips
- Alternatives if needed
"""

TRAINER_GREETING = (
    "Hello! I'm your AI Fitness Trainer. I'm here to help you with personalized "
    "workout plans, exercise guidance, nutrition advice, and achieve your fitness "
    "goals. How can I assist you today? 💪"
)

NOT_SPECIFIED = "Not specified"
NONE_MENTIONED = "None mentioned"


@dataclass(frozen=True)
class ChatTurn:
    role: ChatRoleEnum
    content: str


@dataclass(frozen=True)
class ProfileSnapshot:
    fitness_level: Optional[str] = None
    fitness_goal: Optional[str] = None
    equipment: List[str] = field(default_factory=list)
    workout_duration: Optional[int] = None
    injuries: List[str] = field(default_factory=list)
    weekly_workouts: Optional[int] = None

    @classmethod
    def from_user(cls, user: User) -> "ProfileSnapshot":
        def _value(enum_or_str):
            return getattr(enum_or_str, "value", enum_or_str)

        return cls(
            fitness_level=_value(user.fitness_level),
            fitness_goal=_value(user.fitness_goal),
            equipment=list(user.equipment or []),
            workout_duration=user.workout_duration,
            injuries=list(user.injuries or []),
            weekly_workouts=user.weekly_workouts,
        )


def format_profile_block(profile: ProfileSnapshot) -> str:
    """Блок профиля фиксированной формы: каждое поле присутствует всегда."""
    duration = (
        f"{profile.workout_duration} minutes" if profile.workout_duration else NOT_SPECIFIED
    )
    return (
        "User Profile Context:\n"
        f"- Fitness Level: {profile.fitness_level or NOT_SPECIFIED}\n"
        f"- Goals: {profile.fitness_goal or NOT_SPECIFIED}\n"
        f"- Equipment Available: {', '.join(profile.equipment) or NOT_SPECIFIED}\n"
        f"- Workout Duration Preference: {duration}\n"
        f"- Injuries/Limitations: {', '.join(profile.injuries) or NONE_MENTIONED}\n"
    )


def bootstrap_turns() -> List[ChatTurn]:
    # Первая реплика не может принадлежать ассистенту, поэтому персона идет от user
    return [
        ChatTurn(role=ChatRoleEnum.user, content=FITNESS_TRAINER_CONTEXT),
        ChatTurn(role=ChatRoleEnum.assistant, content=TRAINER_GREETING),
    ]


def build_context(
    history_newest_first: Sequence[ChatMessage],
    new_message: str,
    profile: Optional[ProfileSnapshot] = None,
) -> List[ChatTurn]:
    """Упорядоченный список реплик для AI: история (старые -> новые), затем новое сообщение."""
    window = list(history_newest_first[:CHAT_CONTEXT_LIMIT])
    window.reverse()

    turns = [ChatTurn(role=ChatRoleEnum(msg.role), content=msg.content) for msg in window]
    if not turns:
        turns = bootstrap_turns()

    outgoing = new_message
    if profile is not None:
        outgoing = f"{format_profile_block(profile)}\n\n{new_message}"

    turns.append(ChatTurn(role=ChatRoleEnum.user, content=outgoing))
    return turns
