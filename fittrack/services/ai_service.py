import logging
from typing import Any, Dict, List, Optional

import httpx

from fittrack.core.config import settings
from fittrack.core.errors import DependencyError
from fittrack.models.chat_message import ChatRoleEnum
from fittrack.services.chat_context import ChatTurn, ProfileSnapshot

logger = logging.getLogger(__name__)


class AIService:
    """Клиент Gemini generateContent. Любой сбой превращается в DependencyError."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.base_url = (base_url or settings.GEMINI_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.AI_TIMEOUT_SECONDS
        self.transport = transport

        logger.info("Gemini AI Service initialized. API Key: %s", "PRESENT" if self.api_key else "NOT FOUND")

    @staticmethod
    def _to_contents(turns: List[ChatTurn]) -> List[Dict[str, Any]]:
        return [
            {
                "role": "user" if turn.role == ChatRoleEnum.user else "model",
                "parts": [{"text": turn.content}],
            }
            for turn in turns
        ]

    @staticmethod
    def _extract_text(payload: Dict[str, Any]) -> str:
        try:
            parts = payload["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError, AttributeError):
            raise DependencyError(detail="Unexpected response format from Gemini API")

        if not text.strip():
            raise DependencyError(detail="Empty response from Gemini API")
        return text

    async def _generate(self, contents: List[Dict[str, Any]]) -> str:
        if not self.api_key:
            raise DependencyError(detail="AI service is not configured: set GEMINI_API_KEY")

        url = f"{self.base_url}/models/{self.model}:generateContent"
        body = {
            "contents": contents,
            "generationConfig": {
                "temperature": settings.AI_TEMPERATURE,
                "maxOutputTokens": settings.AI_MAX_OUTPUT_TOKENS,
            },
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    url,
                    headers={
                        "Content-Type": "application/json",
                        "x-goog-api-key": self.api_key,
                    },
                    json=body,
                )
        except httpx.TimeoutException as e:
            logger.error("Gemini API timeout after %ss: %s", self.timeout, e)
            raise DependencyError(detail="Timed out waiting for Gemini API")
        except httpx.HTTPError as e:
            logger.error("Gemini API connection error: %s", e)
            raise DependencyError(detail=f"Connection error: {e}")

        if response.status_code != 200:
            error_msg = f"Gemini API error: {response.status_code}"
            try:
                error_data = response.json()
                error_msg += f" - {error_data['error']['message']}"
            except (ValueError, KeyError, TypeError):
                error_msg += f" - {response.text}"
            logger.error(error_msg)
            raise DependencyError(detail=error_msg)

        try:
            payload = response.json()
        except ValueError:
            raise DependencyError(detail="Gemini API returned invalid JSON")
        return self._extract_text(payload)

    async def chat(self, turns: List[ChatTurn]) -> str:
        """Ответ тренера на последнюю реплику в turns."""
        logger.info("Sending %d turns to Gemini", len(turns))
        return await self._generate(self._to_contents(turns))

    async def generate_workout_plan(self, profile: ProfileSnapshot) -> str:
        prompt = f"""Create a personalized weekly workout plan based on this profile:

Fitness Level: {profile.fitness_level or 'beginner'}
Goal: {profile.fitness_goal or 'general fitness'}
Equipment: {', '.join(profile.equipment) or 'bodyweight'}
Workouts per week: {profile.weekly_workouts or 3}
Duration per session: {profile.workout_duration or 30} minutes
Injuries/Limitations: {', '.join(profile.injuries) or 'None'}

Please provide:
1. Weekly structure (which days, what focus)
2. For each workout day:
   - Workout focus/type
   - 5-7 specific exercises
   - Sets, reps, and rest times
   - Total estimated duration
3. Recovery/rest day recommendations
4. Progressive overload suggestions

Format the response in a clear, structured way."""

        return await self._generate([{"role": "user", "parts": [{"text": prompt}]}])

    async def recommend_exercises(self, muscle_group: str, equipment: str, difficulty: str) -> str:
        prompt = f"""Suggest 5 effective exercises for:
Muscle Group: {muscle_group}
Equipment: {equipment}
Difficulty: {difficulty}

For each exercise provide:
1. Exercise name
2. How to perform (brief instructions)
3. Sets and reps recommendation
4. Key form tips
5. Common mistakes to avoid

Be specific and practical."""

        return await self._generate([{"role": "user", "parts": [{"text": prompt}]}])


# Создаем экземпляр сервиса для импорта
ai_service = AIService()
