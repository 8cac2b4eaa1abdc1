"""Chat domain models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional


class Role(Enum):
    """Author of a chat message."""
    USER = "user"
    MODEL = "model"


@dataclass(frozen=True)
class ChatMessage:
    """Chat message."""
    role: Role
    text: str
    quote: Optional[str] = None


@dataclass
class ConversationHistory:
    """Append-only conversation history."""
    _messages: list[ChatMessage] = field(default_factory=list)

    def add(self, message: ChatMessage) -> None:
        """Append message to history."""
        self._messages.append(message)

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(self.messages)
