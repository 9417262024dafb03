import enum
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from fittrack.core.base import Base
from fittrack.models.user import utcnow


class ChatRoleEnum(str, enum.Enum):
    user = "user"
    assistant = "assistant"


class ChatMessage(Base):
    __tablename__ = "chat_messages"
    __table_args__ = (
        Index("ix_chat_messages_user_created", "user_id", "created_at"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(Enum(ChatRoleEnum), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="chat_messages")
