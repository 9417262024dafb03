from fittrack.models.user import User
from fittrack.models.workout_log import WorkoutLog, WorkoutLogExercise
from fittrack.models.chat_message import ChatMessage

__all__ = [
    "User",
    "WorkoutLog", "WorkoutLogExercise",
    "ChatMessage",
]
