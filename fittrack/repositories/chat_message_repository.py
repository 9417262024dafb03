from datetime import datetime, timedelta
from typing import List

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.models.chat_message import ChatMessage, ChatRoleEnum


class ChatMessageRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def recent(self, user_id: int, limit: int) -> List[ChatMessage]:
        """Последние limit сообщений, от новых к старым."""
        result = await self.db.execute(
            select(ChatMessage)
            .where(ChatMessage.user_id == user_id)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def add_exchange(
        self,
        user_id: int,
        user_text: str,
        assistant_text: str,
        sent_at: datetime,
    ) -> List[ChatMessage]:
        """Сохранить реплику пользователя и ответ ассистента одним коммитом."""
        messages = [
            ChatMessage(user_id=user_id, role=ChatRoleEnum.user, content=user_text, created_at=sent_at),
            # Ответ строго позже вопроса, даже при одинаковом now
            ChatMessage(
                user_id=user_id,
                role=ChatRoleEnum.assistant,
                content=assistant_text,
                created_at=sent_at + timedelta(microseconds=1),
            ),
        ]
        self.db.add_all(messages)
        await self.db.commit()
        return messages

    async def clear(self, user_id: int) -> int:
        result = await self.db.execute(
            delete(ChatMessage).where(ChatMessage.user_id == user_id)
        )
        await self.db.commit()
        return result.rowcount or 0
